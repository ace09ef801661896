"""
Contact Centre Cost Calculator - Flask API Server
One calculator state per app. Every mutation goes through the state
container; a subscriber reruns the engine so /api/results is always current.
"""
import io
import os
import logging
import tempfile
import traceback
from flask import (Blueprint, Flask, Response, current_app, jsonify, render_template,
                   request, send_file)
from engines.calculator import format_currency, format_number, run_calculator
from engines.i18n import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES, Translator
from engines.state import CalculatorState
from engines.storage import ScenarioStore
from engines.workbook import export_workbook, load_workbook_scenario

DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data')
SCENARIO_DIR = os.environ.get('SCENARIO_DIR', os.path.join(DATA_DIR, 'scenarios'))
LANGUAGE = os.environ.get('CALC_LANG', DEFAULT_LANGUAGE)

api = Blueprint('calculator', __name__)


class Calculator:
    """Per-app bundle: state container, scenario store, translator, results."""

    def __init__(self, scenario_dir, language):
        self.state = CalculatorState()
        self.store = ScenarioStore(scenario_dir)
        self.translator = Translator(language)
        self.results = {}
        self.state.subscribe(self.recalculate)
        self.recalculate(self.state.get_state())

    def recalculate(self, snapshot):
        self.results = run_calculator(snapshot, month_label=self.translator.t('chart.month'))

    def payload(self, **extra):
        out = {'status': 'ok', 'state': self.state.get_state(), 'results': self.results}
        out.update(extra)
        return out


def _calc():
    return current_app.extensions['calculator']


def _body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def create_app(config=None):
    app = Flask(__name__)
    app.config.from_mapping(SCENARIO_DIR=SCENARIO_DIR, LANGUAGE=LANGUAGE)
    if config:
        app.config.update(config)
    # rates / channelDeflections are keyed by int channel ids
    app.json.sort_keys = False

    app.extensions['calculator'] = Calculator(app.config['SCENARIO_DIR'], app.config['LANGUAGE'])
    app.jinja_env.filters['currency'] = format_currency
    app.jinja_env.filters['number'] = format_number
    app.register_blueprint(api)
    logging.info(f"Calculator ready (scenarios: {app.config['SCENARIO_DIR']})")
    return app


# ══════════════════════════════════════════════════════════════
#  PAGE
# ══════════════════════════════════════════════════════════════

@api.route('/')
def index():
    calc = _calc()
    server_data = {'state': calc.state.get_state(), 'results': calc.results}
    return render_template('index.html', t=calc.translator.t, lang=calc.translator.language,
                           languages=SUPPORTED_LANGUAGES, state=server_data['state'],
                           results=calc.results, scenarios=calc.store.list_scenarios(),
                           server_data=server_data)


# ══════════════════════════════════════════════════════════════
#  STATE
# ══════════════════════════════════════════════════════════════

@api.route('/api/state', methods=['GET'])
def api_get_state():
    return jsonify(_calc().state.get_state())


@api.route('/api/state', methods=['POST'])
def api_set_state():
    calc = _calc()
    updates = _body()
    known = calc.state.get_default_state()
    unknown = [k for k in updates if k not in known]
    if unknown:
        return jsonify({'error': f"Unknown fields: {', '.join(sorted(unknown))}"}), 400
    try:
        calc.state.set_state(updates)
        return jsonify(calc.payload())
    except Exception as e:
        traceback.print_exc()
        return jsonify({'error': str(e)}), 500


@api.route('/api/reset', methods=['POST'])
def api_reset():
    calc = _calc()
    calc.state.reset_state()
    return jsonify(calc.payload())


@api.route('/api/results')
def api_results():
    return jsonify(_calc().results)


# ══════════════════════════════════════════════════════════════
#  CHANNELS, RATES, DEFLECTIONS
# ══════════════════════════════════════════════════════════════

@api.route('/api/channels', methods=['POST'])
def api_add_channel():
    calc = _calc()
    cid = calc.state.add_channel()
    return jsonify(calc.payload(channelId=cid)), 201


@api.route('/api/channels/<int:channel_id>', methods=['PATCH'])
def api_update_channel(channel_id):
    calc = _calc()
    try:
        channel = calc.state.update_channel(channel_id, _body())
    except KeyError:
        return jsonify({'error': f'Channel {channel_id} not found'}), 404
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify(calc.payload(channel=channel))


@api.route('/api/channels/<int:channel_id>', methods=['DELETE'])
def api_remove_channel(channel_id):
    calc = _calc()
    try:
        calc.state.remove_channel(channel_id)
    except KeyError:
        return jsonify({'error': f'Channel {channel_id} not found'}), 404
    return jsonify(calc.payload())


@api.route('/api/rates/<int:channel_id>', methods=['PUT'])
def api_update_rate(channel_id):
    calc = _calc()
    body = _body()
    fields = {k: v for k, v in body.items() if k in ('client', 'aiBot', 'aiAgent')}
    if not fields:
        return jsonify({'error': 'Expected one of client, aiBot, aiAgent'}), 400
    try:
        for field, value in fields.items():
            calc.state.update_rate(channel_id, field, value)
    except KeyError:
        return jsonify({'error': f'Channel {channel_id} not found'}), 404
    return jsonify(calc.payload())


@api.route('/api/deflections/<int:channel_id>', methods=['PUT'])
def api_update_deflection(channel_id):
    calc = _calc()
    body = _body()
    if 'deflection' not in body:
        return jsonify({'error': 'deflection required'}), 400
    try:
        calc.state.update_deflection(channel_id, body['deflection'])
    except KeyError:
        return jsonify({'error': f'Channel {channel_id} not found'}), 404
    return jsonify(calc.payload())


# ══════════════════════════════════════════════════════════════
#  COST ITEMS
# ══════════════════════════════════════════════════════════════

@api.route('/api/items/<side>', methods=['POST'])
def api_add_item(side):
    calc = _calc()
    try:
        item = calc.state.add_item(side)
        if _body():
            item = calc.state.update_item(side, item['id'], _body())
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify(calc.payload(item=item)), 201


@api.route('/api/items/<side>/<item_id>', methods=['PATCH'])
def api_update_item(side, item_id):
    calc = _calc()
    try:
        item = calc.state.update_item(side, item_id, _body())
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except KeyError:
        return jsonify({'error': f'Cost item {item_id} not found'}), 404
    return jsonify(calc.payload(item=item))


@api.route('/api/items/<side>/<item_id>', methods=['DELETE'])
def api_remove_item(side, item_id):
    calc = _calc()
    try:
        calc.state.remove_item(side, item_id)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except KeyError:
        return jsonify({'error': f'Cost item {item_id} not found'}), 404
    return jsonify(calc.payload())


# ══════════════════════════════════════════════════════════════
#  SCENARIOS
# ══════════════════════════════════════════════════════════════

@api.route('/api/scenarios', methods=['GET'])
def api_list_scenarios():
    return jsonify({'scenarios': _calc().store.list_scenarios()})


@api.route('/api/scenarios', methods=['POST'])
def api_save_scenario():
    calc = _calc()
    tr = calc.translator
    name = str(_body().get('name') or '').strip()
    if not name:
        return jsonify({'error': tr.t('toast.enterName')}), 400
    if not calc.store.save_scenario(name, calc.state.get_state()):
        return jsonify({'error': tr.t('toast.saveFailed')}), 500
    return jsonify({'status': 'ok', 'message': tr.t('toast.scenarioSaved', name=name),
                    'scenarios': calc.store.list_scenarios()}), 201


@api.route('/api/scenarios/<path:name>/load', methods=['POST'])
def api_load_scenario(name):
    calc = _calc()
    tr = calc.translator
    scenario = calc.store.load_scenario(name)
    if scenario is None:
        return jsonify({'error': tr.t('toast.loadFailed')}), 404
    calc.state.load_scenario(scenario)
    return jsonify(calc.payload(message=tr.t('toast.scenarioLoaded', name=name.strip())))


@api.route('/api/scenarios/<path:name>/export')
def api_export_scenario(name):
    text = _calc().store.export_json(name)
    if text is None:
        return jsonify({'error': f'Scenario {name} not found'}), 404
    filename = f"{name.strip() or 'scenario'}.json"
    return Response(text, mimetype='application/json',
                    headers={'Content-Disposition': f'attachment; filename="{filename}"'})


@api.route('/api/scenarios/<path:name>', methods=['DELETE'])
def api_delete_scenario(name):
    calc = _calc()
    tr = calc.translator
    if not any(s.get('name') == name.strip() for s in calc.store.list_scenarios()):
        return jsonify({'error': tr.t('toast.deleteFailed')}), 404
    if not calc.store.delete_scenario(name):
        return jsonify({'error': tr.t('toast.deleteFailed')}), 500
    return jsonify({'status': 'ok', 'message': tr.t('toast.scenarioDeleted', name=name.strip()),
                    'scenarios': calc.store.list_scenarios()})


# ══════════════════════════════════════════════════════════════
#  LANGUAGE
# ══════════════════════════════════════════════════════════════

@api.route('/api/language', methods=['GET'])
def api_get_language():
    return jsonify({'language': _calc().translator.language, 'supported': list(SUPPORTED_LANGUAGES)})


@api.route('/api/language', methods=['POST'])
def api_set_language():
    calc = _calc()
    lang = str(_body().get('language') or '')
    if not calc.translator.set_language(lang):
        return jsonify({'error': f'Unsupported language: {lang}'}), 400
    calc.recalculate(calc.state.get_state())
    return jsonify({'status': 'ok', 'language': lang, 'results': calc.results})


@api.route('/api/translations')
def api_translations():
    tr = _calc().translator
    return jsonify({'language': tr.language, 'translations': tr.table()})


# ══════════════════════════════════════════════════════════════
#  EXCEL EXPORT / IMPORT
# ══════════════════════════════════════════════════════════════

@api.route('/api/export')
def api_export():
    """Export inputs and results to Excel."""
    calc = _calc()
    try:
        buf = io.BytesIO()
        export_workbook(calc.state.get_state(), calc.results, buf, calc.translator)
        buf.seek(0)
        return send_file(buf, as_attachment=True, download_name='Cost_Calculator_Export.xlsx',
                         mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet')
    except Exception as e:
        traceback.print_exc()
        return jsonify({'error': str(e)}), 500


@api.route('/api/import', methods=['POST'])
def api_import():
    """Load a workbook produced by /api/export into the calculator."""
    calc = _calc()
    upload = request.files.get('file')
    if upload is None or not upload.filename:
        return jsonify({'error': 'No file uploaded'}), 400
    if not upload.filename.lower().endswith('.xlsx'):
        return jsonify({'error': 'Expected an .xlsx workbook'}), 400
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(suffix='.xlsx', delete=False) as tmp:
            upload.save(tmp)
            tmp_path = tmp.name
        scenario = load_workbook_scenario(tmp_path)
        calc.state.load_scenario(scenario)
        return jsonify(calc.payload())
    except Exception as e:
        traceback.print_exc()
        return jsonify({'error': str(e)}), 500
    finally:
        if tmp_path and os.path.exists(tmp_path):
            os.remove(tmp_path)


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    app = create_app()
    print(f"[OK] Cost calculator on port {os.environ.get('PORT', 5000)}")
    app.run(debug=False, host='0.0.0.0', port=int(os.environ.get('PORT', 5000)))
