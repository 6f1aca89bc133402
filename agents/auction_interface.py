import time
import threading
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import requests

# ---- Data models ----
@dataclass
class LotView:
    """
    A lot as announced by the auction server.
    """
    lot_id: str
    name: str
    category: str
    starting_price: int
    status: str

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "LotView":
        return cls(
            lot_id=raw.get("id"),
            name=raw.get("name"),
            category=raw.get("category"),
            starting_price=int(raw.get("starting_price") or 0),
            status=raw.get("status"),
        )

@dataclass
class AuctionView:
    """
    What this client currently knows about the table, rebuilt from events.
    """
    phase: Optional[str] = None
    lot: Optional[LotView] = None
    top_bid: int = 0
    top_bidder_id: Optional[str] = None
    min_bid: Optional[int] = None
    time_left: Optional[int] = None
    points: Optional[int] = None
    holdings: Dict[str, int] = field(default_factory=dict)
    players: List[Dict[str, Any]] = field(default_factory=list)

# Type aliases for event handlers
HandlerStart = Callable[[], None]
HandlerLot = Callable[[LotView, str, int], None]
HandlerTick = Callable[[int], None]
HandlerBid = Callable[[str, int], None]
HandlerResult = Callable[[str, LotView, Optional[str]], None]
HandlerRoundEnd = Callable[[List[Dict[str, Any]]], None]

class AuctionInterface:
    def __init__(
        self,
        server_url: str,
        name: str,
        polling_rate: float = 0.5,
        jitter_factor: float = 0.1
    ) -> None:
        """
        Initialize the auction client interface.
        Args:
            server_url: Base URL of the auction Flask app.
            name: Display name requested on join.
            polling_rate: Seconds between polling cycles.
        """
        self.server_url: str = server_url.rstrip("/")
        self.name: str = name
        self.polling_rate: float = polling_rate
        self.jitter_factor: float = jitter_factor
        self.player_id: Optional[str] = None

        # Event handlers
        self._handlers: Dict[str, List[Callable[..., None]]] = {
            "start": [],      # HandlerStart
            "lot": [],        # HandlerLot
            "tick": [],       # HandlerTick
            "bid": [],        # HandlerBid
            "result": [],     # HandlerResult
            "round_end": [],  # HandlerRoundEnd
        }

        # Internal state
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.view = AuctionView()
        self.finished_rounds: int = 0

        # Join the table and start polling
        self._join()
        self._start_polling()

    def _join(self) -> None:
        """
        Register this client with the server to obtain a player ID.
        """
        try:
            response = requests.post(
                f"{self.server_url}/join",
                json={"name": self.name}
            )
            response.raise_for_status()
            data = response.json()
            self.player_id = data.get("player_id")
        except Exception:
            logging.exception("Error joining auction server")
            self.player_id = None

    def _start_polling(self) -> None:
        """Start the background polling thread."""
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True
        )
        self._thread.start()

    def _poll_loop(self) -> None:
        """Continuously drain the server mailbox and dispatch events."""
        while not self._stop_event.is_set():
            try:
                self._process_events(self._get_events())
            except Exception:
                logging.exception("Error polling auction events")
            # apply uniform jitter around polling_rate
            jitter = random.uniform(-self.jitter_factor, self.jitter_factor) * self.polling_rate
            time.sleep(max(self.polling_rate + jitter, 0.0))

    def _get_events(self) -> List[Dict[str, Any]]:
        """Fetch every event queued for this participant since the last poll."""
        response = requests.get(
            f"{self.server_url}/events",
            params={"player_id": self.player_id}
        )
        response.raise_for_status()
        return response.json().get("events", []) or []

    def _fire(self, kind: str, *args: Any) -> None:
        for fn in list(self._handlers[kind]):
            try:
                fn(*args)
            except Exception:
                logging.exception(f"on_{kind} error")

    def _process_events(self, events: List[Dict[str, Any]]) -> None:
        """
        Fold server events into self.view and fire the matching handlers.
        """
        for msg in events:
            kind = msg.get("event")
            data = msg.get("data") or {}
            if kind == "game_start":
                self._fire("start")
            elif kind == "auction_start":
                lot = LotView.from_dict(data.get("item", {}))
                self.view.phase = data.get("phase")
                self.view.lot = lot
                self.view.top_bid = 0
                self.view.top_bidder_id = None
                self.view.min_bid = data.get("minBid")
                self.view.time_left = data.get("time")
                self._fire("lot", lot, self.view.phase, self.view.time_left)
            elif kind == "update_timer":
                self.view.time_left = data.get("time")
                self._fire("tick", self.view.time_left)
            elif kind == "update_bid":
                self.view.top_bid = int(data.get("price") or 0)
                self.view.top_bidder_id = data.get("bidderId")
                self.view.min_bid = data.get("minBid")
                if self.view.top_bidder_id not in (None, self.player_id):
                    self._fire("bid", data.get("bidder"), self.view.top_bid)
            elif kind in ("auction_result", "auto_acquisition"):
                status = data.get("status", "AUTO") if kind == "auction_result" else "AUTO"
                self._fire("result", status, LotView.from_dict(data.get("item", {})), data.get("winner"))
            elif kind == "player_status_update":
                self.view.players = data or []
                me = next((p for p in self.view.players if p.get("id") == self.player_id), None)
                if me:
                    self.view.points = me.get("points")
                    self.view.holdings = me.get("holdings", {}) or {}
            elif kind == "round_end":
                self.view.phase = "Finished"
                self.view.lot = None
                self.finished_rounds += 1
                self._fire("round_end", data.get("results", []))
            elif kind == "bid_rejected":
                logging.info(f"[{self.name}] bid rejected: {data.get('reason')}")

    def _post(self, path: str, **payload: Any) -> Any:
        response = requests.post(
            f"{self.server_url}{path}",
            json={"player_id": self.player_id, **payload}
        )
        response.raise_for_status()
        try:
            return response.json()
        except ValueError:
            # Handle cases where no JSON is returned
            logging.error(f"Server returned non-JSON response for {path}.")
            return {}

    def ready(self) -> Any:
        return self._post("/ready")

    def configure(self, name: Optional[str] = None, starting_points: Optional[int] = None) -> Any:
        payload: Dict[str, Any] = {}
        if name is not None:
            payload["name"] = name
        if starting_points is not None:
            payload["starting_points"] = starting_points
        return self._post("/configure", **payload)

    def bid(self, amount: int) -> Any:
        """Bid on the lot that is currently open."""
        return self._post("/bid", amount=amount)

    def bid_minimum(self) -> Any:
        """Bid the smallest amount the server will accept right now."""
        if self.view.min_bid is None:
            raise RuntimeError("No lot is open")
        return self.bid(int(self.view.min_bid))

    def leave(self) -> Any:
        return self._post("/leave")

    def get_state(self) -> Dict[str, Any]:
        response = requests.get(
            f"{self.server_url}/state",
            params={"player_id": self.player_id}
        )
        response.raise_for_status()
        return response.json()

    # Event registration methods
    def on_start(self, fn: HandlerStart) -> HandlerStart:
        self._handlers["start"].append(fn)
        return fn

    def on_lot(self, fn: HandlerLot) -> HandlerLot:
        self._handlers["lot"].append(fn)
        return fn

    def on_tick(self, fn: HandlerTick) -> HandlerTick:
        self._handlers["tick"].append(fn)
        return fn

    def on_bid(self, fn: HandlerBid) -> HandlerBid:
        self._handlers["bid"].append(fn)
        return fn

    def on_result(self, fn: HandlerResult) -> HandlerResult:
        self._handlers["result"].append(fn)
        return fn

    def on_round_end(self, fn: HandlerRoundEnd) -> HandlerRoundEnd:
        self._handlers["round_end"].append(fn)
        return fn

    def stop(self) -> None:
        """Stop the polling thread and clean up."""
        self._stop_event.set()
        if self._thread and self._thread.is_alive():
            self._thread.join()
