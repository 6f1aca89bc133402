import importlib
from unittest.mock import MagicMock

import pytest
import types

import agents.dispatcher as dispatcher
from agents.auction_interface import AuctionInterface
from agents.dispatcher import AgentConfig

class DummyAgent(AuctionInterface):
    def __init__(self, server_url, name, polling_rate, foo=None):
        self.server_url = server_url
        self.name = name
        self.polling_rate = polling_rate
        self.foo = foo

def dummy_factory_pos(*args):
    # only positional
    name, server_url, polling_rate = args
    return DummyAgent(server_url=server_url, name=name, polling_rate=polling_rate, foo="pos")

def _fake_module(monkeypatch, **attrs):
    seen = []
    mod = types.SimpleNamespace(**attrs)
    def import_module(path):
        seen.append(path)
        return mod
    monkeypatch.setattr(importlib, "import_module", import_module)
    return seen

def test_make_agent_class(monkeypatch):
    seen = _fake_module(monkeypatch, DummyAgent=DummyAgent)
    inst = dispatcher.make_agent(AgentConfig("dummy_module", "DummyAgent", 0.1, {"foo": 42}),
                                 "X", "http://u")
    assert seen == ["agents.bidders.dummy_module"]
    assert isinstance(inst, DummyAgent)
    assert inst.foo == 42
    assert inst.polling_rate == 0.1

def test_make_agent_factory_pos_fallback(monkeypatch):
    _fake_module(monkeypatch, pos_factory=dummy_factory_pos)
    # factory(**kwargs) raises TypeError, so the positional call is used
    inst = dispatcher.make_agent(AgentConfig("dummy_module", "pos_factory", 0.3), "Z", "http://u")
    assert isinstance(inst, DummyAgent)
    assert inst.foo == "pos"

def test_make_agent_invalid(monkeypatch):
    _fake_module(monkeypatch, not_callable=123)
    with pytest.raises(ValueError):
        dispatcher.make_agent(AgentConfig("dummy_module", "not_callable"), "Bad", "http://u")

def _status(monkeypatch, payload):
    resp = MagicMock()
    resp.raise_for_status.return_value = None
    resp.json.return_value = payload
    monkeypatch.setattr(dispatcher.requests, "get", MagicMock(return_value=resp))

def test_preflight_ok(monkeypatch):
    _status(monkeypatch, {"state": "Lobby", "open_seats": 3, "capacity": 3})
    assert dispatcher.preflight_check("http://u", 3)["capacity"] == 3

def test_preflight_busy(monkeypatch):
    _status(monkeypatch, {"state": "PrimaryBidding", "open_seats": 0})
    with pytest.raises(RuntimeError, match="busy"):
        dispatcher.preflight_check("http://u", 3)

def test_preflight_not_enough_seats(monkeypatch):
    _status(monkeypatch, {"state": "Lobby", "open_seats": 1})
    with pytest.raises(RuntimeError, match="Not enough seats"):
        dispatcher.preflight_check("http://u", 3)

def test_preflight_unreachable(monkeypatch):
    monkeypatch.setattr(dispatcher.requests, "get", MagicMock(side_effect=OSError("down")))
    with pytest.raises(RuntimeError, match="Failed to fetch"):
        dispatcher.preflight_check("http://u", 3)

def test_run_game_readies_and_stops_agents(monkeypatch):
    _status(monkeypatch, {"state": "Lobby", "open_seats": 2, "capacity": 2})
    clients = []
    def fake_make_agent(agent_config, name, server_url):
        client = MagicMock(player_id=name, polling_rate=agent_config.polling_rate, finished_rounds=1)
        client.view.players = [{"nickname": name, "points": 900,
                                "roster": [{"name": "A", "position": "mid", "price": 100}]}]
        clients.append(client)
        return client
    monkeypatch.setattr(dispatcher, "make_agent", fake_make_agent)
    monkeypatch.setattr(dispatcher.time, "sleep", lambda s: None)
    log_agent = MagicMock()
    monkeypatch.setattr(dispatcher.db, "log_agent", log_agent)

    dispatcher.run_game([AgentConfig("m", "A"), AgentConfig("m", "B")], "http://u", log_agents=True)

    assert [c.player_id for c in clients] == ["A0", "B1"]
    for c in clients:
        c.ready.assert_called_once_with()
        c.stop.assert_called_once_with()
    assert log_agent.call_count == 2

def test_run_game_requires_full_table(monkeypatch):
    _status(monkeypatch, {"state": "Lobby", "open_seats": 3, "capacity": 3})
    with pytest.raises(RuntimeError, match="Table seats 3"):
        dispatcher.run_game([AgentConfig("m", "A")], "http://u")
