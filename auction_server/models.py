from dataclasses import dataclass, field
from typing import Dict, List, Optional

# phases
LOBBY = "Lobby"
PRIMARY_BIDDING = "PrimaryBidding"
TRANSITION = "Transition"
FAILED_BIDDING = "FailedBidding"
FINISHED = "Finished"
BIDDING_PHASES = (PRIMARY_BIDDING, FAILED_BIDDING)

# lot statuses
UNSOLD = "UNSOLD"
FAILED = "FAILED"
ACQUIRED = "ACQUIRED"

@dataclass
class Lot:
    lot_id: str
    name: str
    category: str
    starting_price: int
    status: str = UNSOLD      # UNSOLD, FAILED or ACQUIRED
    final_price: int = 0      # 0 for auto-assigned lots
    winner_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.lot_id,
            "name": self.name,
            "category": self.category,
            "starting_price": self.starting_price,
            "status": self.status,
            "final_price": self.final_price,
            "winner_id": self.winner_id,
        }

@dataclass
class Acquisition:
    lot_name: str
    price: int
    category: str

@dataclass
class Participant:
    participant_id: str
    display_name: str
    starting_points: int
    point_balance: int = 0
    ready: bool = False
    # category -> number of lots held this round
    holdings: Dict[str, int] = field(default_factory=dict)
    acquired: List[Acquisition] = field(default_factory=list)

    def held(self, category: str) -> int:
        return self.holdings.get(category, 0)

    def acquire(self, lot: Lot, price: int) -> None:
        self.holdings[lot.category] = self.held(lot.category) + 1
        self.acquired.append(Acquisition(lot_name=lot.name, price=price, category=lot.category))
