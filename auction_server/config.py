import os
from dataclasses import dataclass

ROSTER_CAPACITY = int(os.getenv("ROSTER_CAPACITY", "3"))
if ROSTER_CAPACITY < 2:
    raise RuntimeError("ROSTER_CAPACITY must be at least 2")
CATEGORY_CAP = int(os.getenv("CATEGORY_CAP", "1"))
if CATEGORY_CAP < 1:
    raise RuntimeError("CATEGORY_CAP must be at least 1")

STARTING_POINTS = int(os.getenv("STARTING_POINTS", "1000"))
BID_INCREMENT = int(os.getenv("BID_INCREMENT", "10"))
if BID_INCREMENT <= 0:
    raise RuntimeError("BID_INCREMENT must be a positive integer")
MIN_OPENING_BID = int(os.getenv("MIN_OPENING_BID", "50"))

# seconds
OPENING_SECONDS = int(os.getenv("OPENING_SECONDS", "15"))
REOFFER_SECONDS = int(os.getenv("REOFFER_SECONDS", "30"))
ANTI_SNIPE_WINDOW = int(os.getenv("ANTI_SNIPE_WINDOW", "3"))
ANTI_SNIPE_RESET = int(os.getenv("ANTI_SNIPE_RESET", "8"))
ANTI_SNIPE_ALWAYS = os.getenv("ANTI_SNIPE_ALWAYS", "0") == "1"
TRANSITION_SECONDS = int(os.getenv("TRANSITION_SECONDS", "5"))
RESET_SECONDS = int(os.getenv("RESET_SECONDS", "60"))

FAILED_PASS_MODE = os.getenv("FAILED_PASS_MODE", "single")
if FAILED_PASS_MODE not in ("single", "repeat"):
    raise RuntimeError("FAILED_PASS_MODE must be 'single' or 'repeat'")

CATALOG_PATH = os.getenv(
    "CATALOG_PATH",
    os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data", "items.csv"),
)
DB_LOGGING = os.getenv("DB_LOGGING", "0") == "1"


@dataclass(frozen=True)
class AuctionConfig:
    """
    Tunables for one auction table. Defaults come from the environment so the
    server picks them up at boot; tests build variants directly.
    """
    roster_capacity: int = ROSTER_CAPACITY
    category_cap: int = CATEGORY_CAP
    starting_points: int = STARTING_POINTS
    bid_increment: int = BID_INCREMENT
    min_opening_bid: int = MIN_OPENING_BID
    opening_seconds: int = OPENING_SECONDS
    reoffer_seconds: int = REOFFER_SECONDS
    anti_snipe_window: int = ANTI_SNIPE_WINDOW
    anti_snipe_reset: int = ANTI_SNIPE_RESET
    anti_snipe_always: bool = ANTI_SNIPE_ALWAYS
    transition_seconds: int = TRANSITION_SECONDS
    reset_seconds: int = RESET_SECONDS
    failed_pass_mode: str = FAILED_PASS_MODE
