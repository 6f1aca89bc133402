import csv
import copy
import random
import logging
from typing import Iterable, List, Optional, Tuple

from auction_server.models import Lot

logger = logging.getLogger(__name__)

class Catalog:
    """
    Holds the lots in the order they were loaded. That order is never mutated;
    every round gets a fresh shuffled deep copy of it.
    """

    def __init__(self, lots: Iterable[Lot], rng: Optional[random.Random] = None,
                 shuffle: bool = True) -> None:
        self.original: Tuple[Lot, ...] = tuple(lots)
        self.rng = rng or random.Random()
        self.shuffle = shuffle

    def __len__(self) -> int:
        return len(self.original)

    @property
    def categories(self) -> List[str]:
        seen: List[str] = []
        for lot in self.original:
            if lot.category not in seen:
                seen.append(lot.category)
        return seen

    def working_copy(self) -> List[Lot]:
        lots = [copy.deepcopy(lot) for lot in self.original]
        if self.shuffle:
            self.rng.shuffle(lots)
        return lots

def load_catalog(path: str, rng: Optional[random.Random] = None) -> Catalog:
    """
    Read lots from a CSV file with the columns id, name, position, start_price.
    """
    lots: List[Lot] = []
    with open(path, newline="", encoding="utf-8") as fh:
        for row in csv.DictReader(fh):
            lots.append(Lot(
                lot_id=row["id"].strip(),
                name=row["name"].strip(),
                category=row["position"].strip(),
                starting_price=int(row.get("start_price") or 0),
            ))
    logger.info(f"Loaded {len(lots)} lots from {path}")
    return Catalog(lots, rng=rng)
