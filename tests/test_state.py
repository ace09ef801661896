"""Tests for the calculator state container.

Covers:
- Snapshot isolation (deep copies in and out)
- Partial updates, subscriber notification and unsubscribe
- Channel id generation and reset
- Channel add/remove/type change, rate and deflection edits
- Cost item add/update/remove on both sides
- Loading stored scenarios with defaults for missing fields
"""

from __future__ import annotations

import pytest

from engines.state import DEFAULT_STATE, CalculatorState, normalize_keys, state_from_scenario


@pytest.fixture
def store() -> CalculatorState:
    return CalculatorState()


class TestSnapshots:
    def test_defaults(self, store: CalculatorState) -> None:
        state = store.get_state()
        assert state["totalAgents"] == 100
        assert state["monthlySalary"] == 25000
        assert state["channels"][0]["type"] == "voice"
        assert state["rates"][1] == {"client": 2, "aiBot": 2, "aiAgent": 4}
        assert state["channelDeflections"] == {1: 0.2}

    def test_get_state_returns_copy(self, store: CalculatorState) -> None:
        """Mutating a snapshot never leaks into the store."""
        state = store.get_state()
        state["channels"][0]["volume"] = 1
        state["rates"][1]["client"] = 99
        assert store.get_state()["channels"][0]["volume"] == 5000
        assert store.get_state()["rates"][1]["client"] == 2

    def test_default_state_untouched(self, store: CalculatorState) -> None:
        store.set_state({"totalAgents": 5})
        assert DEFAULT_STATE["totalAgents"] == 100
        assert store.get_default_state()["totalAgents"] == 100

    def test_set_state_merges(self, store: CalculatorState) -> None:
        store.set_state({"totalAgents": 50})
        state = store.get_state()
        assert state["totalAgents"] == 50
        assert state["monthlySalary"] == 25000

    def test_string_keys_normalized(self, store: CalculatorState) -> None:
        store.set_state({"rates": {"1": {"client": 3, "aiBot": 1, "aiAgent": 2}}})
        assert 1 in store.get_state()["rates"]
        assert normalize_keys({"2": "a", "x": "b"}) == {2: "a", "x": "b"}


class TestSubscribers:
    def test_notified_once_per_update(self, store: CalculatorState) -> None:
        seen = []
        store.subscribe(seen.append)
        store.set_state({"totalAgents": 10})
        assert len(seen) == 1
        assert seen[0]["totalAgents"] == 10

    def test_listener_gets_copy(self, store: CalculatorState) -> None:
        seen = []
        store.subscribe(seen.append)
        store.set_state({"totalAgents": 10})
        seen[0]["totalAgents"] = 999
        assert store.get_state()["totalAgents"] == 10

    def test_unsubscribe(self, store: CalculatorState) -> None:
        seen = []
        unsubscribe = store.subscribe(seen.append)
        unsubscribe()
        store.set_state({"totalAgents": 10})
        assert seen == []

    def test_structural_edit_notifies_once(self, store: CalculatorState) -> None:
        seen = []
        store.subscribe(seen.append)
        store.add_channel()
        assert len(seen) == 1


class TestChannelIds:
    def test_sequence_starts_after_defaults(self, store: CalculatorState) -> None:
        assert store.generate_channel_id() == 2
        assert store.generate_channel_id() == 3

    def test_reset_restarts_sequence(self, store: CalculatorState) -> None:
        store.generate_channel_id()
        store.generate_channel_id()
        store.set_state({"totalAgents": 1})
        store.reset_state()
        assert store.generate_channel_id() == 2
        assert store.get_state()["totalAgents"] == 100


class TestChannels:
    def test_add_channel(self, store: CalculatorState) -> None:
        cid = store.add_channel()
        state = store.get_state()
        assert cid == 2
        assert state["channels"][-1] == {"id": 2, "type": "voice", "name": "",
                                         "volume": 0, "humanHandleTime": 6}
        assert state["rates"][2] == {"client": 0, "aiBot": 0, "aiAgent": 0}

    def test_remove_channel_drops_rate_and_deflection(self, store: CalculatorState) -> None:
        store.remove_channel(1)
        state = store.get_state()
        assert state["channels"] == []
        assert 1 not in state["rates"]
        assert 1 not in state["channelDeflections"]

    def test_remove_unknown_channel(self, store: CalculatorState) -> None:
        with pytest.raises(KeyError):
            store.remove_channel(42)

    def test_change_to_chat_sets_handle_time_when_missing(self, store: CalculatorState) -> None:
        cid = store.add_channel()
        store.update_channel(cid, {"type": "sms"})
        assert "humanHandleTime" not in store.get_state()["channels"][-1]
        channel = store.update_channel(cid, {"type": "chat"})
        assert channel["humanHandleTime"] == 5

    def test_change_type_keeps_existing_handle_time(self, store: CalculatorState) -> None:
        channel = store.update_channel(1, {"type": "chat"})
        assert channel["humanHandleTime"] == 6

    def test_change_to_voice_defaults_six(self, store: CalculatorState) -> None:
        store.update_channel(1, {"type": "sms"})
        assert store.update_channel(1, {"type": "voice"})["humanHandleTime"] == 6

    def test_type_change_creates_missing_rate(self, store: CalculatorState) -> None:
        store.set_state({"rates": {}})
        store.update_channel(1, {"type": "ivr"})
        assert store.get_state()["rates"][1] == {"client": 0, "aiBot": 0, "aiAgent": 0}

    def test_unknown_type_rejected(self, store: CalculatorState) -> None:
        with pytest.raises(ValueError):
            store.update_channel(1, {"type": "fax"})

    def test_numeric_fields_coerced(self, store: CalculatorState) -> None:
        channel = store.update_channel(1, {"volume": "1200", "name": "Inbound"})
        assert channel["volume"] == 1200
        assert channel["name"] == "Inbound"

    def test_update_rate(self, store: CalculatorState) -> None:
        store.update_rate(1, "aiBot", "3.5")
        assert store.get_state()["rates"][1]["aiBot"] == 3.5
        with pytest.raises(ValueError):
            store.update_rate(1, "ai", 1)

    def test_update_deflection_clamped(self, store: CalculatorState) -> None:
        assert store.update_deflection(1, 1.7) == 1
        assert store.update_deflection(1, 0.35) == 0.35
        assert store.get_state()["channelDeflections"][1] == 0.35


class TestCostItems:
    def test_add_item(self, store: CalculatorState) -> None:
        item = store.add_item("client")
        items = store.get_state()["clientItems"]
        assert items == [item]
        assert item["amount"] == 0
        assert item["frequency"] == "monthly"
        assert item["id"]

    def test_ids_unique(self, store: CalculatorState) -> None:
        ids = {store.add_item("ai")["id"] for _ in range(20)}
        assert len(ids) == 20

    def test_update_and_remove(self, store: CalculatorState) -> None:
        item = store.add_item("ai")
        updated = store.update_item("ai", item["id"], {"name": "Setup", "amount": "50000",
                                                        "frequency": "one-time"})
        assert updated == {"id": item["id"], "name": "Setup", "amount": 50000, "frequency": "one-time"}
        store.remove_item("ai", item["id"])
        assert store.get_state()["aiItems"] == []

    def test_unknown_side(self, store: CalculatorState) -> None:
        with pytest.raises(ValueError):
            store.add_item("vendor")

    def test_unknown_item(self, store: CalculatorState) -> None:
        with pytest.raises(KeyError):
            store.remove_item("client", "missing")


class TestScenarioLoading:
    def test_missing_fields_default(self) -> None:
        state = state_from_scenario({"totalAgents": 40})
        assert state["totalAgents"] == 40
        assert state["monthlySalary"] == 25000
        assert state["aiHandleTime"] == 3.5

    def test_zero_values_kept(self) -> None:
        """An explicit 0 is a value, not a missing field."""
        state = state_from_scenario({"totalAgents": 0, "aiHandleTime": 0})
        assert state["totalAgents"] == 0
        assert state["aiHandleTime"] == 0

    def test_items_get_ids(self) -> None:
        state = state_from_scenario({"clientItems": [{"name": "Rent", "amount": 1, "frequency": "monthly"}]})
        assert state["clientItems"][0]["id"]

    def test_load_moves_channel_counter(self, store: CalculatorState) -> None:
        store.load_scenario({"channels": [{"id": 7, "type": "chat", "volume": 10}],
                             "rates": {"7": {"client": 1, "aiBot": 1, "aiAgent": 1}}})
        assert store.get_state()["rates"][7]["client"] == 1
        assert store.add_channel() == 8
