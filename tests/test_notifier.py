from auction_server.notifier import Notifier

def test_broadcast_reaches_every_mailbox():
    n = Notifier()
    n.register("a")
    n.register("b")
    n.broadcast("update_timer", {"time": 3})
    for pid in ("a", "b"):
        msgs = n.drain(pid)
        assert [(m["event"], m["data"]) for m in msgs] == [("update_timer", {"time": 3})]

def test_send_is_unicast_and_ordered():
    n = Notifier()
    n.register("a")
    n.register("b")
    n.send("a", "bid_rejected", {"reason": "no"})
    n.broadcast("update_bid", {"price": 10})
    msgs = n.drain("a")
    assert [m["event"] for m in msgs] == ["bid_rejected", "update_bid"]
    assert msgs[0]["seq"] < msgs[1]["seq"]
    assert [m["event"] for m in n.drain("b")] == ["update_bid"]

def test_drain_empties_mailbox():
    n = Notifier()
    n.register("a")
    n.broadcast("reset")
    assert len(n.drain("a")) == 1
    assert n.drain("a") == []

def test_unknown_and_unregistered_participants():
    n = Notifier()
    n.send("ghost", "player_info", {})
    assert n.drain("ghost") == []
    n.register("a")
    n.unregister("a")
    n.broadcast("reset")
    assert n.drain("a") == []

def test_backlog_drops_oldest():
    n = Notifier(max_backlog=3)
    n.register("a")
    for i in range(5):
        n.broadcast("update_timer", {"time": i})
    assert [m["data"]["time"] for m in n.drain("a")] == [2, 3, 4]
