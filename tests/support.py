"""
Helpers shared by the test modules: a hand-driven clock and table builders.
"""
import random
from typing import Iterable, List, Tuple

from auction_server.catalog import Catalog
from auction_server.config import AuctionConfig
from auction_server.engine import AuctionEngine
from auction_server.models import Lot

TEST_CONFIG = dict(
    roster_capacity=3,
    category_cap=1,
    starting_points=1000,
    bid_increment=10,
    min_opening_bid=10,
    opening_seconds=15,
    reoffer_seconds=30,
    anti_snipe_window=3,
    anti_snipe_reset=7,
    anti_snipe_always=False,
    transition_seconds=0,
    reset_seconds=5,
    failed_pass_mode="single",
)

class FakeTicker:
    """Stands in for Ticker; tests advance the clock with tick()."""

    def __init__(self):
        self.callback = None
        self.arms = 0
        self.disarms = 0

    @property
    def armed(self):
        return self.callback is not None

    def arm(self, callback):
        self.disarm()
        self.arms += 1
        self.callback = callback
        return self.arms

    def disarm(self):
        if self.callback is not None:
            self.disarms += 1
        self.callback = None

    def tick(self, n=1):
        for _ in range(n):
            if self.callback is None:
                return
            self.callback()

def make_lots(entries: Iterable[Tuple[str, str]], starting_price: int = 0) -> List[Lot]:
    return [Lot(lot_id=name, name=name, category=category, starting_price=starting_price)
            for name, category in entries]

def make_config(**overrides) -> AuctionConfig:
    return AuctionConfig(**{**TEST_CONFIG, **overrides})

def make_engine(lots, ticker=None, audit=None, shuffle=False, **overrides) -> AuctionEngine:
    catalog = Catalog(lots, rng=random.Random(7), shuffle=shuffle)
    return AuctionEngine(catalog, config=make_config(**overrides),
                         ticker=ticker or FakeTicker(), audit=audit)

def seat(engine: AuctionEngine, n: int = None) -> List[str]:
    n = engine.roster.capacity if n is None else n
    return [engine.join(f"P{i + 1}").participant_id for i in range(n)]

def start(engine: AuctionEngine) -> List[str]:
    pids = seat(engine)
    for pid in pids:
        engine.ready(pid)
    return pids

def events(engine: AuctionEngine, pid: str, kind: str = None) -> List[dict]:
    msgs = engine.notifier.drain(pid)
    if kind is None:
        return msgs
    return [m for m in msgs if m["event"] == kind]
