import logging
from typing import Dict, Optional

import requests

from agents.auction_interface import AuctionInterface, LotView

class ValueBidder(AuctionInterface):
    """
    Spreads its points over the categories it still needs and keeps bidding
    the minimum on a lot while the price stays under its budget for that
    category. Waits until the clock is low so it does not drive prices up
    early.
    """
    def __init__(
        self,
        server_url: str,
        name: str,
        polling_rate: float = 0.5,
        categories: Optional[Dict[str, float]] = None,
        bid_below: int = 5,
        max_per_category: int = 1
    ) -> None:
        """
        Args:
            categories: relative weight per category; unknown categories weigh 1.
            bid_below: only bid once the clock is at or below this many seconds.
        """
        super().__init__(server_url, name, polling_rate)
        self.weights = categories or {}
        self.bid_below = bid_below
        self.max_per_category = max_per_category
        self._seen_categories: Dict[str, bool] = {}
        self.on_lot(self._on_lot)
        self.on_tick(self._on_tick)
        self.on_bid(self._on_bid)

    def _on_lot(self, lot: LotView, phase: str, time_left: int) -> None:
        self._seen_categories[lot.category] = True

    def budget(self, category: str) -> int:
        """Points this bidder is willing to pay for one more lot of the category."""
        points = self.view.points or 0
        needed = [c for c in self._seen_categories
                  if self.view.holdings.get(c, 0) < self.max_per_category]
        if category not in needed:
            return 0
        total = sum(self.weights.get(c, 1.0) for c in needed)
        return int(points * self.weights.get(category, 1.0) / total) if total else points

    def _maybe_bid(self) -> None:
        view = self.view
        if view.lot is None or view.min_bid is None or view.top_bidder_id == self.player_id:
            return
        if view.min_bid > self.budget(view.lot.category):
            return
        try:
            self.bid_minimum()
        except requests.HTTPError as e:
            logging.info(f"[{self.name}] bid refused: {e.response.status_code} {e.response.text}")

    def _on_tick(self, time_left: int) -> None:
        if time_left <= self.bid_below:
            self._maybe_bid()

    def _on_bid(self, bidder: str, price: int) -> None:
        if self.view.time_left is not None and self.view.time_left <= self.bid_below:
            self._maybe_bid()
