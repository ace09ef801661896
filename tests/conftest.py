"""Shared fixtures: sample calculator inputs and a Flask app bound to a temp scenario dir."""

from __future__ import annotations

import pytest

from app import create_app


@pytest.fixture
def e2e_state() -> dict:
    """Voice + chat scenario with ledger items on both sides."""
    return {
        "totalAgents": 100,
        "monthlySalary": 25000,
        "adminHours": 160,
        "aiHandleTime": 3.5,
        "channels": [
            {"id": 1, "type": "voice", "name": "", "volume": 5000, "humanHandleTime": 6},
            {"id": 2, "type": "chat", "name": "", "volume": 2000},
        ],
        "rates": {
            1: {"client": 2, "aiBot": 1, "aiAgent": 5},
            2: {"client": 50, "aiBot": 15, "aiAgent": 30},
        },
        "channelDeflections": {1: 0.2, 2: 0.2},
        "deflectionRate": 0.2,
        "clientItems": [
            {"id": "c1", "name": "Seat licence", "amount": 2000, "frequency": "per agent"},
            {"id": "c2", "name": "Support contract", "amount": 120000, "frequency": "yearly"},
        ],
        "aiItems": [
            {"id": "a1", "name": "Setup", "amount": 50000, "frequency": "one-time"},
            {"id": "a2", "name": "Platform", "amount": 30000, "frequency": "monthly"},
            {"id": "a3", "name": "Agent seat", "amount": 1500, "frequency": "per agent"},
        ],
    }


@pytest.fixture
def app(tmp_path):
    """App with scenarios stored under pytest's tmp_path."""
    app = create_app({"TESTING": True, "SCENARIO_DIR": str(tmp_path / "scenarios"), "LANGUAGE": "en"})
    yield app


@pytest.fixture
def client(app):
    return app.test_client()
