import random
import logging

import requests

from agents.auction_interface import AuctionInterface

class RandomBidder(AuctionInterface):
    """
    Bids the minimum on a coin flip each tick, as long as it can afford it.
    Mostly useful for exercising a server.
    """
    def __init__(
        self,
        server_url: str,
        name: str,
        polling_rate: float = 0.5,
        aggression: float = 0.3,
        max_per_category: int = 1
    ) -> None:
        super().__init__(server_url, name, polling_rate)
        self.aggression = aggression
        self.max_per_category = max_per_category
        self.on_start(self._on_start)
        self.on_tick(self._on_tick)

    def _on_start(self) -> None:
        logging.info(f"[{self.name}] round started")

    def _wants(self) -> bool:
        view = self.view
        if view.lot is None or view.min_bid is None:
            return False
        if view.top_bidder_id == self.player_id:
            return False
        if view.holdings.get(view.lot.category, 0) >= self.max_per_category:
            return False
        return view.points is None or view.min_bid <= view.points

    def _on_tick(self, time_left: int) -> None:
        if not self._wants() or random.random() >= self.aggression:
            return
        try:
            self.bid_minimum()
        except requests.HTTPError as e:
            logging.info(f"[{self.name}] bid refused: {e.response.status_code} {e.response.text}")
