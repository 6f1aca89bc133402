import logging
from typing import Dict, List, Optional, Tuple

from auction_server.models import ACQUIRED, Lot, Participant
from auction_server.roster import Roster

logger = logging.getLogger(__name__)

def resolve_scarcity(category: str, lots: List[Lot], roster: Roster,
                     win_count: Dict[str, int]) -> Optional[Tuple[Lot, Participant]]:
    """
    Once every seat but one has a lot of this category, hand the last
    unresolved lot of the category to the one participant still without
    one, for free. Returns the (lot, participant) pair when an assignment
    was made.

    Only participants who readied up for the running round are considered;
    someone seated mid-round never receives a lot. With a category cap above
    one, several participants may still hold none at the threshold; the lot
    then goes to the earliest of them in join order.
    """
    if win_count.get(category, 0) != roster.capacity - 1:
        return None

    lot = next((l for l in lots if l.category == category and l.status != ACQUIRED), None)
    holders = [p for p in roster.without(category) if p.ready]
    if lot is None or not holders:
        logger.warning(f"Scarcity threshold reached for {category} but no "
                       f"{'lot' if lot is None else 'participant'} is left to assign")
        return None

    winner = holders[0]
    lot.status = ACQUIRED
    lot.final_price = 0
    lot.winner_id = winner.participant_id
    winner.acquire(lot, 0)
    win_count[category] = win_count.get(category, 0) + 1
    logger.info(f"Auto-assigned {lot.name} ({category}) to {winner.display_name} at 0")
    return lot, winner
