"""
Contact Centre Cost Calculator - Workbook Export / Import
Writes the current inputs and results to an .xlsx workbook, and rebuilds a
scenario from a workbook previously exported here (Inputs, Channels and
Cost Items sheets). Sheet and column names are fixed English identifiers so
an export can always be read back; Summary labels follow the UI language.
"""
import os
import openpyxl
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

from engines.calculator import format_currency, lookup_by_id, to_number
from engines.i18n import Translator

HEADER_FONT = Font(bold=True, color='FFFFFF', size=11)
HEADER_FILL = PatternFill(start_color='2E2E38', end_color='2E2E38', fill_type='solid')
THIN_BORDER = Border(left=Side(style='thin'), right=Side(style='thin'),
                     top=Side(style='thin'), bottom=Side(style='thin'))

INPUT_PARAMS = {
    'Total Agents': 'totalAgents',
    'Monthly Salary': 'monthlySalary',
    'AI Handle Time': 'aiHandleTime',
    'Admin Hours': 'adminHours',
    'Deflection Rate': 'deflectionRate',
}
CHANNEL_HEADERS = ['ID', 'Type', 'Name', 'Volume', 'Handle Time', 'Client Rate',
                   'AI Bot Rate', 'AI Agent Rate', 'Deflection', 'Client Cost', 'AI Cost']
ITEM_HEADERS = ['Side', 'Name', 'Amount', 'Frequency']


def ws_write(ws, headers, rows):
    for c, h in enumerate(headers, 1):
        cell = ws.cell(row=1, column=c, value=h)
        cell.font = HEADER_FONT
        cell.fill = HEADER_FILL
        cell.alignment = Alignment(horizontal='center')
        cell.border = THIN_BORDER
    for r, row in enumerate(rows, 2):
        for c, val in enumerate(row, 1):
            ws.cell(row=r, column=c, value=val).border = THIN_BORDER
    for col in ws.columns:
        ml = max(len(str(cell.value or '')) for cell in col)
        ws.column_dimensions[col[0].column_letter].width = min(ml + 2, 40)


def _summary_rows(results, tr):
    dash = results.get('dashboard', {})
    costs = results.get('costs', {})
    eff = results.get('efficiency', {})
    break_even = dash.get('breakEvenMonth')
    roi = dash.get('roi')
    return [
        [tr.t('metric.currentMonthly'), format_currency(dash.get('clientMonthly'))],
        [tr.t('metric.aiMonthly'), format_currency(dash.get('aiMonthly'))],
        [tr.t('metric.monthlySavings'), format_currency(dash.get('monthlySavings'))],
        [tr.t('metric.costReduction'), f"{dash.get('costReduction', 0)}%"],
        [tr.t('metric.initialInvestment'), format_currency(dash.get('initialInvestment'))],
        [tr.t('metric.breakEven'), tr.t('chart.month', n=break_even) if break_even else tr.t('misc.na')],
        [tr.t('metric.year1Savings'), format_currency(dash.get('year1NetSavings'))],
        [tr.t('metric.roi'), f"{roi}%" if roi is not None else tr.t('misc.na')],
        [tr.t('derived.agentsReplaced'), costs.get('agentsReplaced', 0)],
        [tr.t('derived.trafficToAI'), f"{eff.get('automatedPct', 0)}%"],
        [tr.t('derived.payrollSaved'), format_currency(results.get('payrollSaved'))],
        [tr.t('derived.adminValue'), format_currency(costs.get('adminValue'))],
        [tr.t('derived.extraCapacity'), eff.get('extraCapacity', 0)],
        [tr.t('derived.agentEquivalent'), eff.get('agentEquivalent', 0)],
    ]


def _channel_rows(state, results):
    costs = {str(b.get('id')): b for b in results.get('costs', {}).get('channels', [])}
    rows = []
    for ch in state.get('channels') or []:
        rate = lookup_by_id(state.get('rates'), ch.get('id')) or {}
        cost = costs.get(str(ch.get('id')), {})
        rows.append([
            ch.get('id'), ch.get('type'), ch.get('name') or '', ch.get('volume'),
            ch.get('humanHandleTime'), rate.get('client', 0), rate.get('aiBot', 0),
            rate.get('aiAgent', 0), lookup_by_id(state.get('channelDeflections'), ch.get('id'), 0),
            cost.get('clientCost', 0), cost.get('aiCost', 0),
        ])
    return rows


def export_workbook(state, results, target, translator=None):
    """Save inputs + results to target (a path or a binary file object)."""
    tr = translator or Translator()
    wb = openpyxl.Workbook()

    ws = wb.active
    ws.title = 'Summary'
    ws_write(ws, ['Metric', 'Value'], _summary_rows(results, tr))

    ws_write(wb.create_sheet('Inputs'), ['Parameter', 'Value'],
             [[label, state.get(key)] for label, key in INPUT_PARAMS.items()])

    ws_write(wb.create_sheet('Channels'), CHANNEL_HEADERS, _channel_rows(state, results))

    ws_write(wb.create_sheet('Cost Items'), ITEM_HEADERS, [
        [side, item.get('name', ''), item.get('amount', 0), item.get('frequency', 'monthly')]
        for side, key in (('client', 'clientItems'), ('ai', 'aiItems'))
        for item in state.get(key) or []
    ])

    timeline = results.get('timeline', {})
    ws_write(wb.create_sheet('Timeline'),
             ['Month', tr.t('chart.currentSystem'), tr.t('chart.aiSolution')],
             [list(row) for row in zip(timeline.get('labels', []),
                                       timeline.get('clientData', []),
                                       timeline.get('aiData', []))])

    if isinstance(target, str):
        os.makedirs(os.path.dirname(os.path.abspath(target)), exist_ok=True)
    wb.save(target)
    return target


def read_xlsx_sheet(filepath, sheet_name=None):
    wb = openpyxl.load_workbook(filepath, read_only=True, data_only=True)
    if sheet_name and sheet_name not in wb.sheetnames:
        wb.close()
        return []
    ws = wb[sheet_name] if sheet_name else wb.active
    rows = list(ws.iter_rows(values_only=True))
    wb.close()
    if len(rows) < 2:
        return []
    headers = [str(h).strip() if h else f'col_{i}' for i, h in enumerate(rows[0])]
    return [dict(zip(headers, row)) for row in rows[1:]
            if any(v not in (None, '') for v in row)]


def load_workbook_scenario(filepath):
    """Scenario dict from an exported workbook. Missing sheets leave the
    matching fields out so the state container applies its defaults."""
    if not os.path.exists(filepath):
        raise FileNotFoundError(filepath)
    scenario = {}

    for row in read_xlsx_sheet(filepath, 'Inputs'):
        key = INPUT_PARAMS.get(str(row.get('Parameter') or '').strip())
        if key and row.get('Value') is not None:
            scenario[key] = to_number(row['Value'])

    channel_rows = read_xlsx_sheet(filepath, 'Channels')
    if channel_rows:
        channels, rates, deflections = [], {}, {}
        for n, row in enumerate(channel_rows, 1):
            cid = int(to_number(row.get('ID'))) or n
            ctype = str(row.get('Type') or 'voice').strip().lower()
            ch = {'id': cid, 'type': ctype, 'name': str(row.get('Name') or ''),
                  'volume': to_number(row.get('Volume'))}
            if row.get('Handle Time') is not None:
                ch['humanHandleTime'] = to_number(row.get('Handle Time'))
            channels.append(ch)
            rates[cid] = {'client': to_number(row.get('Client Rate')),
                          'aiBot': to_number(row.get('AI Bot Rate')),
                          'aiAgent': to_number(row.get('AI Agent Rate'))}
            deflections[cid] = to_number(row.get('Deflection'))
        scenario.update({'channels': channels, 'rates': rates, 'channelDeflections': deflections})

    item_rows = read_xlsx_sheet(filepath, 'Cost Items')
    if item_rows:
        scenario['clientItems'] = []
        scenario['aiItems'] = []
        for row in item_rows:
            side = 'aiItems' if str(row.get('Side') or '').strip().lower() == 'ai' else 'clientItems'
            scenario[side].append({'name': str(row.get('Name') or ''),
                                   'amount': to_number(row.get('Amount')),
                                   'frequency': str(row.get('Frequency') or 'monthly')})
    return scenario
