"""
Selection of the next lot to offer. Each pass walks a list that is fixed for
the duration of the pass (the shuffled primary order, or the snapshot of
failed lots) with a cursor; whether a lot is skipped depends only on the
list, the cursor and the lot statuses.
"""
from typing import List, NamedTuple, Optional

from auction_server.models import ACQUIRED, FAILED, Lot

OPEN = "open"
SKIP = "skip"
EXHAUSTED = "exhausted"

class Step(NamedTuple):
    action: str
    index: int
    lot: Optional[Lot] = None

def next_step(lots: List[Lot], cursor: int) -> Step:
    if cursor >= len(lots):
        return Step(EXHAUSTED, cursor)
    lot = lots[cursor]
    if lot.status == ACQUIRED:
        return Step(SKIP, cursor, lot)
    return Step(OPEN, cursor, lot)

def first_open(lots: List[Lot], cursor: int) -> Optional[Step]:
    """
    Fold skips starting at cursor. Returns the OPEN step for the next lot to
    offer, or None when the pass is exhausted.
    """
    # bounded by len(lots): every iteration moves the cursor forward
    while True:
        step = next_step(lots, cursor)
        if step.action == OPEN:
            return step
        if step.action == EXHAUSTED:
            return None
        cursor += 1

def failed_lots(lots: List[Lot]) -> List[Lot]:
    return [lot for lot in lots if lot.status == FAILED]
