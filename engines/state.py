"""
Contact Centre Cost Calculator - State Container
Holds the calculator inputs as one snapshot. Readers always get a deep copy,
every update notifies subscribers once. Structural edits (channels, rates,
cost items) live here so the HTTP layer only forwards requests.
"""
import copy
import uuid

from engines.calculator import CHANNEL_TYPES, clamp, to_number

DEFAULT_STATE = {
    'totalAgents': 100,
    'monthlySalary': 25000,
    'channels': [
        {'id': 1, 'type': 'voice', 'name': '', 'volume': 5000, 'humanHandleTime': 6},
    ],
    'rates': {1: {'client': 2, 'aiBot': 2, 'aiAgent': 4}},
    'channelDeflections': {1: 0.20},
    'aiHandleTime': 3.5,
    'clientItems': [],
    'aiItems': [],
    'deflectionRate': 0.20,
    'adminHours': 160,
}

ITEM_SIDES = {'client': 'clientItems', 'ai': 'aiItems'}
RATE_FIELDS = ('client', 'aiBot', 'aiAgent')
CHANNEL_FIELDS = ('name', 'volume', 'humanHandleTime', 'type')

# handle time given to a channel when it switches to a per-minute or chat type;
# sms is billed per message and carries none
DEFAULT_HANDLE_TIMES = {'voice': 6, 'chat': 5, 'ivr': 6}


def _empty_rate():
    return {'client': 0, 'aiBot': 0, 'aiAgent': 0}


def _new_item_id():
    return uuid.uuid4().hex[:12]


def normalize_keys(mapping):
    """Digit-string keys back to ints ("1" -> 1) after a JSON round trip."""
    if not isinstance(mapping, dict):
        return {}
    out = {}
    for k, v in mapping.items():
        if isinstance(k, str) and k.strip().lstrip('-').isdigit():
            k = int(k)
        out[k] = v
    return out


def _next_channel_id(channels):
    ids = [c.get('id') for c in channels or [] if isinstance(c, dict)]
    ids = [i for i in ids if isinstance(i, int) and not isinstance(i, bool)]
    return max(ids, default=0) + 1


def _value_or(scenario, key, default):
    value = scenario.get(key)
    return copy.deepcopy(default) if value is None else value


def state_from_scenario(scenario):
    """Map a stored scenario onto a full snapshot, defaulting missing fields.
    Zero and empty values in the scenario are kept, only absent ones default."""
    scenario = scenario or {}
    state = {key: _value_or(scenario, key, default) for key, default in DEFAULT_STATE.items()}
    state['rates'] = normalize_keys(state['rates'])
    state['channelDeflections'] = normalize_keys(state['channelDeflections'])
    for side in ITEM_SIDES.values():
        state[side] = [dict(item, id=item.get('id') or _new_item_id())
                       for item in state[side] if isinstance(item, dict)]
    return copy.deepcopy(state)


class CalculatorState:
    """Single-snapshot store with subscriber notification."""

    def __init__(self, defaults=None):
        self._defaults = copy.deepcopy(defaults or DEFAULT_STATE)
        self._state = copy.deepcopy(self._defaults)
        self._listeners = []
        self._next_id = _next_channel_id(self._state['channels'])

    # ── Snapshot access ──

    def get_state(self):
        return copy.deepcopy(self._state)

    def get_default_state(self):
        return copy.deepcopy(self._defaults)

    def set_state(self, partial):
        updates = dict(partial or {})
        for key in ('rates', 'channelDeflections'):
            if key in updates:
                updates[key] = normalize_keys(updates[key])
        self._state.update(copy.deepcopy(updates))
        if 'channels' in updates:
            self._next_id = max(self._next_id, _next_channel_id(self._state['channels']))
        self._notify()

    def subscribe(self, listener):
        """Register listener(snapshot); returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def reset_state(self):
        self._state = copy.deepcopy(self._defaults)
        self._next_id = _next_channel_id(self._state['channels'])
        self._notify()

    def load_scenario(self, scenario):
        self._state = state_from_scenario(scenario)
        self._next_id = _next_channel_id(self._state['channels'])
        self._notify()

    def generate_channel_id(self):
        cid = self._next_id
        self._next_id += 1
        return cid

    def _notify(self):
        for listener in list(self._listeners):
            listener(copy.deepcopy(self._state))

    # ── Channels ──

    def _find_channel(self, channels, channel_id):
        for ch in channels:
            if str(ch.get('id')) == str(channel_id):
                return ch
        raise KeyError(f"Unknown channel: {channel_id}")

    def add_channel(self):
        cid = self.generate_channel_id()
        channels = self.get_state()['channels']
        channels.append({'id': cid, 'type': 'voice', 'name': '', 'volume': 0, 'humanHandleTime': 6})
        rates = self.get_state()['rates']
        rates[cid] = _empty_rate()
        self.set_state({'channels': channels, 'rates': rates})
        return cid

    def remove_channel(self, channel_id):
        state = self.get_state()
        channel = self._find_channel(state['channels'], channel_id)
        cid = channel['id']
        self.set_state({
            'channels': [c for c in state['channels'] if c is not channel],
            'rates': {k: v for k, v in state['rates'].items() if str(k) != str(cid)},
            'channelDeflections': {k: v for k, v in state['channelDeflections'].items()
                                   if str(k) != str(cid)},
        })

    def update_channel(self, channel_id, fields):
        state = self.get_state()
        channel = self._find_channel(state['channels'], channel_id)
        fields = fields or {}
        for key in CHANNEL_FIELDS:
            if key not in fields:
                continue
            if key == 'name':
                channel['name'] = str(fields['name'] or '')
            elif key == 'type':
                ctype = str(fields['type'] or '').strip().lower()
                if ctype not in CHANNEL_TYPES:
                    raise ValueError(f"Unknown channel type: {fields['type']}")
                channel['type'] = ctype
            else:
                channel[key] = to_number(fields[key])

        if 'type' in fields:
            default_handle = DEFAULT_HANDLE_TIMES.get(channel['type'])
            if default_handle is None:
                channel.pop('humanHandleTime', None)
            elif not channel.get('humanHandleTime'):
                channel['humanHandleTime'] = default_handle
            state['rates'].setdefault(channel['id'], _empty_rate())

        self.set_state({'channels': state['channels'], 'rates': state['rates']})
        return copy.deepcopy(channel)

    def update_rate(self, channel_id, field, value):
        if field not in RATE_FIELDS:
            raise ValueError(f"Unknown rate field: {field}")
        state = self.get_state()
        cid = self._find_channel(state['channels'], channel_id)['id']
        rate = state['rates'].setdefault(cid, _empty_rate())
        rate[field] = to_number(value)
        self.set_state({'rates': state['rates']})
        return rate

    def update_deflection(self, channel_id, value):
        state = self.get_state()
        cid = self._find_channel(state['channels'], channel_id)['id']
        state['channelDeflections'][cid] = clamp(to_number(value), 0, 1)
        self.set_state({'channelDeflections': state['channelDeflections']})
        return state['channelDeflections'][cid]

    # ── Cost items ──

    def _side_key(self, side):
        if side not in ITEM_SIDES:
            raise ValueError(f"Unknown cost item side: {side}")
        return ITEM_SIDES[side]

    def add_item(self, side):
        key = self._side_key(side)
        items = self.get_state()[key]
        item = {'id': _new_item_id(), 'name': '', 'amount': 0, 'frequency': 'monthly'}
        items.append(item)
        self.set_state({key: items})
        return item

    def remove_item(self, side, item_id):
        key = self._side_key(side)
        items = self.get_state()[key]
        kept = [i for i in items if str(i.get('id')) != str(item_id)]
        if len(kept) == len(items):
            raise KeyError(f"Unknown cost item: {item_id}")
        self.set_state({key: kept})

    def update_item(self, side, item_id, fields):
        key = self._side_key(side)
        items = self.get_state()[key]
        for item in items:
            if str(item.get('id')) == str(item_id):
                break
        else:
            raise KeyError(f"Unknown cost item: {item_id}")
        fields = fields or {}
        if 'name' in fields:
            item['name'] = str(fields['name'] or '')
        if 'amount' in fields:
            item['amount'] = to_number(fields['amount'])
        if 'frequency' in fields:
            item['frequency'] = str(fields['frequency'] or 'monthly')
        self.set_state({key: items})
        return item
