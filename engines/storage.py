"""
Contact Centre Cost Calculator - Scenario Storage
Named scenarios persisted as JSON files, one per scenario, plus an index of
{name, timestamp}. Failures are logged and reported through the return value
(False / None), never raised to the caller.

Stored data is upgraded once on read (upgrade_scenario): two-field rates
{client, ai} become {client, aiBot, aiAgent}, and a flat deflectionRate is
spread over the voice/chat channels as channelDeflections.
"""
import os, re, json, hashlib, logging
from datetime import datetime, timezone

from engines.calculator import DEFLECTABLE_TYPES

SCENARIO_PREFIX = 'scenario_'
INDEX_FILE = 'scenarios.json'
SCHEMA_VERSION = 2


def migrate_rates(rates):
    """{client, ai} -> {client, aiBot: ai, aiAgent: ai}. Current shapes pass through."""
    migrated = {}
    for cid, rate in (rates or {}).items():
        if isinstance(rate, dict) and 'ai' in rate and 'aiBot' not in rate:
            ai = rate.get('ai') or 0
            rate = {'client': rate.get('client') or 0, 'aiBot': ai, 'aiAgent': ai}
        migrated[cid] = rate
    return migrated


def upgrade_scenario(raw):
    scenario = dict(raw or {})
    if isinstance(scenario.get('rates'), dict):
        scenario['rates'] = migrate_rates(scenario['rates'])
    if scenario.get('channelDeflections') is None and scenario.get('deflectionRate') is not None:
        flat = scenario['deflectionRate']
        scenario['channelDeflections'] = {
            ch.get('id'): flat for ch in scenario.get('channels') or []
            if isinstance(ch, dict) and str(ch.get('type') or '').lower() in DEFLECTABLE_TYPES
        }
    scenario['schemaVersion'] = SCHEMA_VERSION
    return scenario


def _clean_name(name):
    if not isinstance(name, str):
        return ''
    return name.strip()


def scenario_filename(name):
    """Filesystem-safe file name; the hash keeps distinct names distinct."""
    slug = re.sub(r'[^A-Za-z0-9_-]+', '_', name).strip('_')[:40]
    digest = hashlib.sha1(name.encode('utf-8')).hexdigest()[:10]
    return f"{SCENARIO_PREFIX}{slug}_{digest}.json" if slug else f"{SCENARIO_PREFIX}{digest}.json"


class ScenarioStore:
    def __init__(self, directory):
        self.directory = directory

    def _path(self, name):
        return os.path.join(self.directory, scenario_filename(name))

    def _index_path(self):
        return os.path.join(self.directory, INDEX_FILE)

    def _write_json(self, path, payload):
        os.makedirs(self.directory, exist_ok=True)
        tmp = path + '.tmp'
        with open(tmp, 'w', encoding='utf-8') as f:
            json.dump(payload, f, ensure_ascii=False)
        os.replace(tmp, path)

    def _read_index(self):
        path = self._index_path()
        if not os.path.exists(path):
            return []
        with open(path, encoding='utf-8') as f:
            index = json.load(f)
        if not isinstance(index, list):
            return []
        return [e for e in index if isinstance(e, dict)]

    def save_scenario(self, name, data):
        name = _clean_name(name)
        if not name:
            return False
        try:
            timestamp = datetime.now(timezone.utc).isoformat()
            scenario = dict(data or {})
            scenario.update({'name': name, 'timestamp': timestamp,
                             'schemaVersion': SCHEMA_VERSION})
            self._write_json(self._path(name), scenario)

            index = self._read_index()
            for entry in index:
                if entry.get('name') == name:
                    entry['timestamp'] = timestamp
                    break
            else:
                index.append({'name': name, 'timestamp': timestamp})
            self._write_json(self._index_path(), index)
            logging.info(f"Scenario saved: {name}")
            return True
        except (OSError, TypeError, ValueError) as e:
            logging.error(f"Failed to save scenario {name!r}: {e}")
            return False

    def load_scenario(self, name):
        name = _clean_name(name)
        if not name:
            return None
        path = self._path(name)
        if not os.path.exists(path):
            return None
        try:
            with open(path, encoding='utf-8') as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            logging.error(f"Failed to load scenario {name!r}: {e}")
            return None
        if not isinstance(raw, dict):
            logging.warning(f"Scenario {name!r} is not an object, ignoring")
            return None
        return upgrade_scenario(raw)

    def list_scenarios(self):
        try:
            return self._read_index()
        except (OSError, ValueError) as e:
            logging.error(f"Failed to list scenarios: {e}")
            return []

    def delete_scenario(self, name):
        name = _clean_name(name)
        if not name:
            return False
        try:
            path = self._path(name)
            if os.path.exists(path):
                os.remove(path)
            index = [s for s in self._read_index() if s.get('name') != name]
            self._write_json(self._index_path(), index)
            logging.info(f"Scenario deleted: {name}")
            return True
        except (OSError, ValueError) as e:
            logging.error(f"Failed to delete scenario {name!r}: {e}")
            return False

    def export_json(self, name):
        scenario = self.load_scenario(name)
        if scenario is None:
            return None
        return json.dumps(scenario, indent=2, ensure_ascii=False)

    def clear_all(self):
        try:
            for entry in self.list_scenarios():
                path = self._path(str(entry.get('name', '')))
                if os.path.exists(path):
                    os.remove(path)
            if os.path.exists(self._index_path()):
                os.remove(self._index_path())
            return True
        except OSError as e:
            logging.error(f"Failed to clear scenarios: {e}")
            return False
