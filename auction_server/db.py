import os
import threading
import json
from datetime import datetime, timezone
import psycopg

# Ensure thread-safe DB access
_db_lock = threading.Lock()

# Singleton connection
_conn = None

def get_connection():
    global _conn
    if _conn is None:
        _conn = psycopg.connect(
            host=os.getenv("DB_HOST", "localhost"),
            port=int(os.getenv("DB_PORT", "5432")),
            dbname=os.getenv("DB_NAME", "auction"),
            user=os.getenv("DB_USER", "auction"),
            password=os.getenv("DB_PASSWORD", "secret_password"),
        )
    return _conn

def init_db():
    conn = get_connection()
    with _db_lock:
        cursor = conn.cursor()
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS participants(
                participant_id TEXT PRIMARY KEY,
                name TEXT,
                joined_at TIMESTAMP WITH TIME ZONE
            );
        ''')
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS rounds(
                round_id TEXT PRIMARY KEY,
                num_participants INTEGER,
                num_lots INTEGER,
                lot_order JSONB,
                start_time TIMESTAMP WITH TIME ZONE,
                end_time TIMESTAMP WITH TIME ZONE
            );
        ''')
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS bids(
                bid_id SERIAL PRIMARY KEY,
                round_id TEXT,
                lot_id TEXT,
                participant_id TEXT,
                amount INTEGER,
                phase TEXT,
                time_remaining INTEGER,
                timestamp TIMESTAMP WITH TIME ZONE
            );
        ''')
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS lot_results(
                result_id SERIAL PRIMARY KEY,
                round_id TEXT,
                lot_id TEXT,
                category TEXT,
                outcome TEXT,
                winner_id TEXT,
                price INTEGER,
                phase TEXT,
                timestamp TIMESTAMP WITH TIME ZONE
            );
        ''')
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS standings(
                round_id        TEXT    NOT NULL,
                participant_id  TEXT    NOT NULL,
                starting_points INTEGER NOT NULL,
                final_balance   INTEGER NOT NULL,
                acquired        JSONB   NOT NULL,
                PRIMARY KEY (round_id, participant_id)
            );
        ''')
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS agents(
                id SERIAL PRIMARY KEY,
                participant_id TEXT UNIQUE,
                module_name TEXT,
                attr_name TEXT,
                extra_kwargs JSONB,
                polling_rate REAL,
                created_at TIMESTAMP WITH TIME ZONE
            );
        ''')
        conn.commit()

def log_participant(participant_id: str, name: str):
    conn = get_connection()
    with _db_lock:
        cursor = conn.cursor()
        cursor.execute('''
            INSERT INTO participants(participant_id, name, joined_at)
            VALUES (%s, %s, %s)
            ON CONFLICT (participant_id) DO UPDATE SET name = EXCLUDED.name''',
            (participant_id, name, datetime.now(timezone.utc))
        )
        conn.commit()

def log_round_start(round_id: str, num_participants: int, lot_ids: list):
    conn = get_connection()
    with _db_lock:
        cursor = conn.cursor()
        cursor.execute('''
            INSERT INTO rounds
            (round_id, num_participants, num_lots, lot_order, start_time)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT (round_id)
            DO UPDATE
                SET start_time = EXCLUDED.start_time,
                    num_participants = EXCLUDED.num_participants,
                    num_lots = EXCLUDED.num_lots,
                    lot_order = EXCLUDED.lot_order
            ''',
            (round_id, num_participants, len(lot_ids), json.dumps(lot_ids), datetime.now(timezone.utc))
        )
        conn.commit()

def log_bid(round_id: str, lot_id: str, participant_id: str, amount: int, phase: str, time_remaining: int):
    conn = get_connection()
    with _db_lock:
        cursor = conn.cursor()
        cursor.execute('''
            INSERT INTO bids
            (round_id, lot_id, participant_id, amount, phase, time_remaining, timestamp)
            VALUES (%s, %s, %s, %s, %s, %s, %s)''',
            (round_id, lot_id, participant_id, amount, phase, time_remaining, datetime.now(timezone.utc))
        )
        conn.commit()

def log_lot_result(round_id: str, lot, outcome: str, phase: str):
    conn = get_connection()
    with _db_lock:
        cursor = conn.cursor()
        cursor.execute('''
            INSERT INTO lot_results
            (round_id, lot_id, category, outcome, winner_id, price, phase, timestamp)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s)''',
            (round_id, lot.lot_id, lot.category, outcome, lot.winner_id,
             lot.final_price, phase, datetime.now(timezone.utc))
        )
        conn.commit()

def log_round_end(round_id: str, participants: list):
    conn = get_connection()
    with _db_lock:
        cursor = conn.cursor()
        cursor.execute('''
            UPDATE rounds SET end_time = %s WHERE round_id = %s''',
            (datetime.now(timezone.utc), round_id)
        )
        for p in participants:
            acquired = [{"name": a.lot_name, "price": a.price, "category": a.category} for a in p.acquired]
            cursor.execute('''
                INSERT INTO standings
                (round_id, participant_id, starting_points, final_balance, acquired)
                VALUES (%s, %s, %s, %s, %s)
                ON CONFLICT (round_id, participant_id) DO UPDATE SET
                    starting_points = EXCLUDED.starting_points,
                    final_balance   = EXCLUDED.final_balance,
                    acquired        = EXCLUDED.acquired
                ''',
                (round_id, p.participant_id, p.starting_points, p.point_balance, json.dumps(acquired))
            )
        conn.commit()

def log_agent(participant_id: str, module_name: str, attr_name: str, extra_kwargs: dict, polling_rate: float):
    conn = get_connection()
    with _db_lock:
        cursor = conn.cursor()
        cursor.execute('''
            INSERT INTO agents (participant_id, module_name, attr_name, extra_kwargs, polling_rate, created_at)
            VALUES (%s, %s, %s, %s, %s, %s)
            ON CONFLICT (participant_id) DO NOTHING
        ''',
        (participant_id, module_name, attr_name, json.dumps(extra_kwargs), polling_rate, datetime.now(timezone.utc))
        )
        conn.commit()
