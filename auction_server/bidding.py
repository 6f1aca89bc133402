from typing import Optional

from auction_server.config import AuctionConfig
from auction_server.models import BIDDING_PHASES, Lot, Participant

NOT_OPEN = "Bidding is not open"
CATEGORY_FULL = "You already hold the maximum number of {category} lots"
REPEAT_BIDDER = "You already hold the top bid; wait for another bidder"
BAD_INCREMENT = "Bids must be in steps of {increment} points"
TOO_LOW = "The minimum bid is {required} points"
OVER_BALANCE = "You cannot bid {amount} with a balance of {balance} points"

def required_price(lot: Lot, top_bid: int, config: AuctionConfig) -> int:
    if top_bid == 0:
        return max(config.min_opening_bid, lot.starting_price)
    return top_bid + config.bid_increment

def validate_bid(amount: int, bidder: Participant, phase: str, lot: Optional[Lot],
                 top_bid: int, top_bidder_id: Optional[str],
                 config: AuctionConfig) -> Optional[str]:
    """
    Decide whether a bid is legal. Returns None when it is, otherwise the
    reason for the first rule it breaks. Never mutates anything.
    """
    if phase not in BIDDING_PHASES or lot is None:
        return NOT_OPEN
    if bidder.held(lot.category) >= config.category_cap:
        return CATEGORY_FULL.format(category=lot.category)
    if bidder.participant_id == top_bidder_id:
        return REPEAT_BIDDER
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0 \
            or amount % config.bid_increment != 0:
        return BAD_INCREMENT.format(increment=config.bid_increment)
    required = required_price(lot, top_bid, config)
    if amount < required:
        return TOO_LOW.format(required=required)
    if amount > bidder.point_balance:
        return OVER_BALANCE.format(amount=amount, balance=bidder.point_balance)
    return None

def can_bid(bidder: Participant, lot: Optional[Lot], top_bidder_id: Optional[str],
            config: AuctionConfig) -> bool:
    """Eligibility shown to clients: the category cap and no repeat bids."""
    if lot is None:
        return False
    return bidder.held(lot.category) < config.category_cap and bidder.participant_id != top_bidder_id

def apply_anti_snipe(remaining: int, config: AuctionConfig) -> int:
    """
    Return the clock after an accepted bid. A bid inside the snipe window
    (or any bid when anti_snipe_always is set) pushes the clock back up to
    anti_snipe_reset; the clock is never shortened.
    """
    if config.anti_snipe_always or remaining <= config.anti_snipe_window:
        return max(remaining, config.anti_snipe_reset)
    return remaining
