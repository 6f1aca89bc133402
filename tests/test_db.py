import json
from unittest.mock import MagicMock, patch

import pytest

import auction_server.db as db
from auction_server.models import Lot
from support import make_engine, make_lots, start

@pytest.fixture
def conn():
    fake = MagicMock()
    with patch("auction_server.db.psycopg.connect", return_value=fake) as connect:
        db._conn = None
        yield fake
        db._conn = None
    connect.assert_called_once()

def _statements(conn):
    cursor = conn.cursor.return_value
    return [c.args for c in cursor.execute.call_args_list]

def test_connection_is_shared(conn):
    assert db.get_connection() is conn
    assert db.get_connection() is conn

def test_init_db_creates_tables(conn):
    db.init_db()
    sql = " ".join(args[0] for args in _statements(conn))
    for table in ("participants", "rounds", "bids", "lot_results", "standings", "agents"):
        assert f"CREATE TABLE IF NOT EXISTS {table}" in sql
    conn.commit.assert_called_once()

def test_log_bid(conn):
    db.log_bid("r1", "lot1", "p1", 40, "PrimaryBidding", 2)
    (sql, params), = _statements(conn)
    assert "INSERT INTO bids" in sql
    assert params[:6] == ("r1", "lot1", "p1", 40, "PrimaryBidding", 2)

def test_log_lot_result(conn):
    lot = Lot("lot1", "A", "mid", 0, status="ACQUIRED", final_price=0, winner_id="p3")
    db.log_lot_result("r1", lot, "auto", "FailedBidding")
    (sql, params), = _statements(conn)
    assert "INSERT INTO lot_results" in sql
    assert params[:7] == ("r1", "lot1", "mid", "auto", "p3", 0, "FailedBidding")

def test_log_round_start_and_end(conn):
    engine = make_engine(make_lots([("A", "mid")]))
    start(engine)
    players = list(engine.roster)
    players[0].acquire(engine.lots[0], 30)
    db.log_round_start("r1", 3, ["A"])
    db.log_round_end("r1", players)
    statements = _statements(conn)
    assert "INSERT INTO rounds" in statements[0][0]
    assert json.loads(statements[0][1][3]) == ["A"]
    assert "UPDATE rounds" in statements[1][0]
    standings = [params for sql, params in statements[2:]]
    assert len(standings) == 3
    assert json.loads(standings[0][4]) == [{"name": "A", "price": 30, "category": "mid"}]

def test_engine_writes_audit_trail():
    audit = MagicMock()
    engine = make_engine(make_lots([("A", "mid"), ("B", "top")]), audit=audit)
    p1, p2, p3 = start(engine)
    assert audit.log_participant.call_count == 3
    audit.log_round_start.assert_called_once_with(engine.round_id, 3, ["A", "B"])

    engine.place_bid(p2, 10)
    audit.log_bid.assert_called_once_with(engine.round_id, "A", p2, 10, "PrimaryBidding", 15)

    engine.ticker.tick(15)
    engine.ticker.tick(15)
    outcomes = [c.args[2] for c in audit.log_lot_result.call_args_list]
    assert outcomes == ["won", "failed"]

    round_id = engine.round_id
    engine.ticker.tick(30)
    audit.log_round_end.assert_called_once()
    assert audit.log_round_end.call_args.args[0] == round_id
