"""
Contact Centre Cost Calculator - Calculation Engine
Compares the client's current monthly operating cost against the AI solution
across voice, chat, SMS and IVR channels, plus ledger items and agent payroll.

All inputs are coerced through to_number(): missing or malformed values count
as zero and nothing here raises. Degenerate results are 0 or None
(breakEvenMonth, roi). Functions never mutate their arguments.
"""
import math

HOURS_PER_MONTH = 160
TIMELINE_MONTHS = 24
CURRENCY_SYMBOL = '฿'

CHANNEL_TYPES = ('voice', 'chat', 'sms', 'ivr')
DEFLECTABLE_TYPES = ('voice', 'chat')

FREQUENCY_ALIASES = {
    'one-time': 'one-time', 'one time': 'one-time',
    'monthly': 'monthly',
    'yearly': 'yearly',
    'per agent': 'per agent', 'per-agent': 'per agent',
}


def to_number(value):
    """Numeric value or 0. Negative numbers pass through (credits)."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        n = value
    else:
        try:
            n = float(str(value).strip().replace(',', ''))
        except ValueError:
            return 0
    if isinstance(n, float) and (math.isnan(n) or math.isinf(n)):
        return 0
    return n


def clamp(v, lo, hi):
    return max(lo, min(hi, v))


def round_half_up(value, digits=0):
    """Round .5 towards +infinity (18.5 -> 19, -2.5 -> -2)."""
    if digits:
        factor = 10 ** digits
        return math.floor(value * factor + 0.5) / factor
    return int(math.floor(value + 0.5))


def normalize_frequency(raw):
    key = str(raw or '').strip().lower().replace('_', ' ')
    return FREQUENCY_ALIASES.get(key, 'monthly')


def lookup_by_id(mapping, channel_id, default=None):
    """Keyed-map lookup tolerant of int vs. str ids (JSON turns 1 into "1")."""
    if not isinstance(mapping, dict):
        return default
    if channel_id in mapping:
        return mapping[channel_id]
    if str(channel_id) in mapping:
        return mapping[str(channel_id)]
    try:
        return mapping.get(int(channel_id), default)
    except (TypeError, ValueError):
        return default


def _iter_channels(channels):
    for ch in channels or []:
        if isinstance(ch, dict):
            yield ch


def _channel_type(ch):
    return str(ch.get('type') or '').strip().lower()


def _rate_for(rates, channel_id):
    rate = lookup_by_id(rates, channel_id)
    if not isinstance(rate, dict):
        rate = {}
    return (to_number(rate.get('client')), to_number(rate.get('aiBot')),
            to_number(rate.get('aiAgent')))


# ── Agents & admin ──

def compute_retained_agents(total_agents, deflection_rate):
    """Agents kept after deflection: ceil(total * (1 - rate)), within [0, total]."""
    total = to_number(total_agents)
    rate = to_number(deflection_rate)
    retained = math.ceil(total * (1 - rate))
    return int(clamp(retained, 0, max(math.ceil(total), 0)))


def compute_admin_value(hours_per_month, hourly_rate):
    return to_number(hours_per_month) * to_number(hourly_rate)


# ── Deflection ──

def resolve_channel_deflections(channels, params):
    """Per-channel deflection map. Falls back to the legacy flat deflectionRate
    applied to every voice/chat channel when no map is present."""
    params = params or {}
    deflections = params.get('channelDeflections')
    if deflections is not None:
        return deflections
    flat = params.get('deflectionRate')
    if flat is None:
        return {}
    return {ch.get('id'): flat for ch in _iter_channels(channels)
            if _channel_type(ch) in DEFLECTABLE_TYPES}


def compute_effective_deflection(channels, channel_deflections):
    """Volume x handle-time weighted deflection over voice and chat channels.
    Chat defaults its handle time to 1 so it still carries weight."""
    total_weight = 0
    weighted = 0
    for ch in _iter_channels(channels):
        ctype = _channel_type(ch)
        if ctype not in DEFLECTABLE_TYPES:
            continue
        handle = to_number(ch.get('humanHandleTime'))
        if ctype == 'chat':
            handle = handle or 1
        weight = to_number(ch.get('volume')) * handle
        total_weight += weight
        weighted += weight * to_number(lookup_by_id(channel_deflections, ch.get('id')))
    if total_weight <= 0:
        return 0
    return clamp(weighted / total_weight, 0, 1)


# ── Channel costs ──

def _voice_costs(volume, handle, rates, deflection, ai_handle_time):
    client_rate, bot_rate, agent_rate = rates
    client = client_rate * volume * handle
    ai = (bot_rate * (volume * deflection) * ai_handle_time
          + agent_rate * (volume * (1 - deflection)) * handle)
    return client, ai


def _chat_costs(volume, handle, rates, deflection, ai_handle_time):
    client_rate, bot_rate, agent_rate = rates
    client = client_rate * volume
    ai = bot_rate * (volume * deflection) + agent_rate * (volume * (1 - deflection))
    return client, ai


def _sms_costs(volume, handle, rates, deflection, ai_handle_time):
    # per message; deflection does not apply
    client_rate, bot_rate, agent_rate = rates
    return client_rate * volume, (bot_rate + agent_rate) * volume


def _ivr_costs(volume, handle, rates, deflection, ai_handle_time):
    # per minute; no bot leg and deflection does not apply
    client_rate, _bot_rate, agent_rate = rates
    return client_rate * volume * handle, agent_rate * volume * handle


COST_MODELS = {
    'voice': _voice_costs,
    'chat': _chat_costs,
    'sms': _sms_costs,
    'ivr': _ivr_costs,
}


def compute_channel_costs(channels, rates, ai_handle_time, channel_deflections):
    """Monthly per-channel cost under the client's current setup and the AI
    solution. Returns {clientTotal, aiTotal, breakdown[]}."""
    ai_time = to_number(ai_handle_time)
    client_total = 0
    ai_total = 0
    breakdown = []
    for ch in _iter_channels(channels):
        ctype = _channel_type(ch)
        cid = ch.get('id')
        volume = to_number(ch.get('volume'))
        handle = to_number(ch.get('humanHandleTime'))
        deflection = 0
        if ctype in DEFLECTABLE_TYPES:
            deflection = to_number(lookup_by_id(channel_deflections, cid))
        model = COST_MODELS.get(ctype)
        client, ai = (0, 0)
        if model:
            client, ai = model(volume, handle, _rate_for(rates, cid), deflection, ai_time)
        client_total += client
        ai_total += ai
        breakdown.append({
            'id': cid, 'type': ctype, 'name': ch.get('name') or '',
            'volume': volume, 'deflection': deflection,
            'botVolume': volume * deflection, 'agentVolume': volume * (1 - deflection),
            'clientCost': client, 'aiCost': ai,
        })
    return {'clientTotal': client_total, 'aiTotal': ai_total, 'breakdown': breakdown}


# ── Ledger ──

def compute_ledger_totals(items, params=None):
    """Split ledger items into capex (one-time) and monthly opex.
    Yearly items count 1/12 per month; per-agent items scale with the agents
    retained after deflection."""
    params = params or {}
    deflection = params.get('effectiveDeflection')
    if deflection is None:
        deflection = params.get('deflectionRate')
    retained = compute_retained_agents(params.get('totalAgents'), deflection)

    capex = 0
    monthly = 0
    for item in items or []:
        if not isinstance(item, dict):
            continue
        amount = to_number(item.get('amount'))
        freq = normalize_frequency(item.get('frequency'))
        if freq == 'one-time':
            capex += amount
        elif freq == 'yearly':
            monthly += amount / 12
        elif freq == 'per agent':
            monthly += amount * retained
        else:
            monthly += amount
    return {'capex': capex, 'monthlyOpex': monthly}


# ── Monthly totals ──

def compute_monthly_costs(channels, rates, ai_handle_time, client_items, ai_items, params):
    """Full monthly comparison: channel costs + ledger opex + agent payroll."""
    params = params or {}
    deflections = resolve_channel_deflections(channels, params)
    effective = compute_effective_deflection(channels, deflections)
    channel = compute_channel_costs(channels, rates, ai_handle_time, deflections)

    total_agents = to_number(params.get('totalAgents'))
    salary = to_number(params.get('monthlySalary'))
    ledger_params = {'totalAgents': total_agents, 'effectiveDeflection': effective}
    client_ledger = compute_ledger_totals(client_items, ledger_params)
    ai_ledger = compute_ledger_totals(ai_items, ledger_params)

    retained = compute_retained_agents(total_agents, effective)
    client_payroll = total_agents * salary
    ai_payroll = retained * salary

    return {
        'clientMonthly': channel['clientTotal'] + client_ledger['monthlyOpex'] + client_payroll,
        'aiMonthly': channel['aiTotal'] + ai_ledger['monthlyOpex'] + ai_payroll,
        'clientCapex': client_ledger['capex'],
        'aiCapex': ai_ledger['capex'],
        'agentsReplaced': total_agents - retained,
        'retainedAgents': retained,
        'adminValue': compute_admin_value(params.get('adminHours'), salary / HOURS_PER_MONTH),
        'effectiveDeflection': effective,
        'clientChannelCost': channel['clientTotal'],
        'aiChannelCost': channel['aiTotal'],
        'clientLedgerOpex': client_ledger['monthlyOpex'],
        'aiLedgerOpex': ai_ledger['monthlyOpex'],
        'clientPayroll': client_payroll,
        'aiPayroll': ai_payroll,
        'channels': channel['breakdown'],
    }


def compute_payroll_saved(agents_replaced, monthly_salary, legacy_license_cost=0):
    replaced = to_number(agents_replaced)
    salary = to_number(monthly_salary)
    license_cost = to_number(legacy_license_cost)
    return replaced * (salary + license_cost)


# ── Timeline & dashboard ──

def _cumulative(capex, monthly, month):
    return capex + monthly * month


def build_roi_timeline(client_monthly, ai_monthly, client_capex, ai_capex,
                       month_label='Month {n}'):
    cm, am = to_number(client_monthly), to_number(ai_monthly)
    cc, ac = to_number(client_capex), to_number(ai_capex)
    # month 0 is the capex-only starting point
    months = range(0, TIMELINE_MONTHS + 1)
    return {
        'labels': [month_label.format(n=m) for m in months],
        'clientData': [_cumulative(cc, cm, m) for m in months],
        'aiData': [_cumulative(ac, am, m) for m in months],
    }


def find_break_even_month(client_monthly, ai_monthly, client_capex, ai_capex):
    """First month (1-24) where AI cumulative cost is strictly below the client's."""
    cm, am = to_number(client_monthly), to_number(ai_monthly)
    cc, ac = to_number(client_capex), to_number(ai_capex)
    for month in range(1, TIMELINE_MONTHS + 1):
        if _cumulative(ac, am, month) < _cumulative(cc, cm, month):
            return month
    return None


def compute_dashboard_metrics(client_monthly, ai_monthly, client_capex, ai_capex):
    cm, am = to_number(client_monthly), to_number(ai_monthly)
    cc, ac = to_number(client_capex), to_number(ai_capex)
    monthly_savings = cm - am
    year1 = _cumulative(cc, cm, 12) - _cumulative(ac, am, 12)
    return {
        'clientMonthly': cm,
        'aiMonthly': am,
        'initialInvestment': ac,
        'monthlySavings': monthly_savings,
        'year1NetSavings': year1,
        'breakEvenMonth': find_break_even_month(cm, am, cc, ac),
        'costReduction': round_half_up(monthly_savings / cm * 100) if cm > 0 else 0,
        'roi': round_half_up(year1 / ac * 100) if ac > 0 else None,
    }


# ── Efficiency ──

def compute_blended_handle_time(channels):
    """Volume-weighted human handle time (minutes) over voice and chat.
    Channels without volume or handle time are left out entirely."""
    total_volume = 0
    weighted = 0
    for ch in _iter_channels(channels):
        if _channel_type(ch) not in DEFLECTABLE_TYPES:
            continue
        volume = to_number(ch.get('volume'))
        handle = to_number(ch.get('humanHandleTime'))
        if volume <= 0 or handle <= 0:
            continue
        total_volume += volume
        weighted += volume * handle
    if total_volume <= 0:
        return 0
    return weighted / total_volume


def compute_efficiency_gains(params):
    params = params or {}
    channels = params.get('channels')
    total_agents = to_number(params.get('totalAgents'))
    salary = to_number(params.get('monthlySalary'))
    admin_hours = to_number(params.get('adminHours'))

    effective = compute_effective_deflection(
        channels, resolve_channel_deflections(channels, params))
    retained = compute_retained_agents(total_agents, effective)
    hourly_rate = salary / HOURS_PER_MONTH
    capacity_hours = retained * HOURS_PER_MONTH
    blended = compute_blended_handle_time(channels)

    return {
        'totalAgents': total_agents,
        'retainedAgents': retained,
        'aiCapacity': total_agents - retained,
        'effectiveDeflection': effective,
        'automatedPct': round_half_up(effective * 100),
        'hoursReclaimed': admin_hours,
        'hourlyRate': hourly_rate,
        'estimatedValue': compute_admin_value(admin_hours, hourly_rate),
        'capacityIncrease': round_half_up(admin_hours / capacity_hours * 100) if capacity_hours > 0 else 0,
        'blendedHandleTime': blended,
        'extraCapacity': round_half_up(admin_hours * 60 / blended) if blended > 0 else 0,
        'agentEquivalent': round_half_up(admin_hours / HOURS_PER_MONTH, 1),
    }


def compute_per_interaction_cost(client_monthly, ai_monthly, channels):
    """Monthly total divided by total interactions across all channels."""
    total_volume = sum(to_number(ch.get('volume')) for ch in _iter_channels(channels))
    if total_volume <= 0:
        return {'client': 0, 'ai': 0}
    return {'client': to_number(client_monthly) / total_volume,
            'ai': to_number(ai_monthly) / total_volume}


# ── Display formatting ──

def format_number(value):
    n = to_number(value)
    rounded = round_half_up(abs(n))
    sign = '-' if n < 0 and rounded else ''
    return f"{sign}{rounded:,}"


def format_currency(value, symbol=CURRENCY_SYMBOL):
    n = to_number(value)
    rounded = round_half_up(abs(n))
    sign = '-' if n < 0 and rounded else ''
    return f"{sign}{symbol}{rounded:,}"


# ── Pipeline ──

def run_calculator(state, month_label='Month {n}'):
    """Recalculate every derived figure from one state snapshot."""
    state = state or {}
    channels = state.get('channels') or []
    params = {
        'totalAgents': state.get('totalAgents'),
        'monthlySalary': state.get('monthlySalary'),
        'adminHours': state.get('adminHours'),
        'channelDeflections': state.get('channelDeflections'),
        'deflectionRate': state.get('deflectionRate'),
    }
    costs = compute_monthly_costs(channels, state.get('rates'), state.get('aiHandleTime'),
                                  state.get('clientItems'), state.get('aiItems'), params)
    dashboard = compute_dashboard_metrics(costs['clientMonthly'], costs['aiMonthly'],
                                          costs['clientCapex'], costs['aiCapex'])
    efficiency = compute_efficiency_gains(dict(params, channels=channels))
    return {
        'costs': costs,
        'dashboard': dashboard,
        'perInteraction': compute_per_interaction_cost(costs['clientMonthly'],
                                                       costs['aiMonthly'], channels),
        'efficiency': efficiency,
        'timeline': build_roi_timeline(costs['clientMonthly'], costs['aiMonthly'],
                                       costs['clientCapex'], costs['aiCapex'], month_label),
        'payrollSaved': compute_payroll_saved(costs['agentsReplaced'], params['monthlySalary']),
    }
