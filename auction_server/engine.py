import uuid
import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

from auction_server import bidding
from auction_server.catalog import Catalog
from auction_server.config import AuctionConfig
from auction_server.models import (
    ACQUIRED, BIDDING_PHASES, FAILED, FAILED_BIDDING, FINISHED, LOBBY,
    PRIMARY_BIDDING, TRANSITION, Lot, Participant,
)
from auction_server.notifier import Notifier
from auction_server.roster import Roster
from auction_server.scarcity import resolve_scarcity
from auction_server.sequencer import failed_lots, first_open
from auction_server.timer import Ticker

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s %(name)s %(message)s'
)
logger = logging.getLogger(__name__)

NOT_IN_LOBBY = "Only possible in the lobby"

class AuctionEngine:
    """
    Owns the roster, the round's working catalog and the auction state, and
    drives the phase machine:

        Lobby -> PrimaryBidding <-> Transition -> FailedBidding <-> Transition
              -> Finished -> Lobby

    Every public method and every clock tick runs under ``self.lock``.
    Participant-facing operations return ``(result, error)`` pairs; an error
    means nothing was changed.
    """

    def __init__(self, catalog: Catalog, config: Optional[AuctionConfig] = None,
                 notifier: Optional[Notifier] = None, ticker=None, audit=None) -> None:
        self.config = config or AuctionConfig()
        self.catalog = catalog
        self.notifier = notifier or Notifier()
        self.lock = threading.RLock()
        self.ticker = ticker or Ticker(self.lock)
        # optional write-only audit log (the db module)
        self.audit = audit
        self.roster = Roster(self.config.roster_capacity, self.config.starting_points)
        self._enter_lobby()
        logger.info("Initialized new AuctionEngine instance.")

    # ---- read-only views of the state ----

    @property
    def phase(self) -> str:
        return self._phase

    @property
    def pass_phase(self) -> Optional[str]:
        """The pass in progress (PrimaryBidding or FailedBidding), also during a Transition."""
        return self._pass_phase

    @property
    def current_lot(self) -> Optional[Lot]:
        return self._current_lot

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def top_bid(self) -> int:
        return self._top_bid

    @property
    def top_bidder_id(self) -> Optional[str]:
        return self._top_bidder_id

    @property
    def remaining_seconds(self) -> int:
        return self._remaining

    @property
    def category_win_count(self) -> Dict[str, int]:
        return dict(self._win_count)

    @property
    def lots(self) -> List[Lot]:
        return list(self._lots)

    def is_seated(self, pid: Optional[str]) -> bool:
        return pid in self.roster

    # ---- session operations ----

    def join(self, name: Optional[str] = None) -> Participant:
        """Seat a new participant. Raises RosterFullError when every seat is taken."""
        with self.lock:
            p = self.roster.join(name)
            self.notifier.register(p.participant_id)
            if self.audit:
                self.audit.log_participant(p.participant_id, p.display_name)
            self.notifier.send(p.participant_id, "player_info",
                               {"id": p.participant_id, "nickname": p.display_name})
            self._broadcast_lobby()
            self._broadcast_player_status()
            self._broadcast_auction_status()
            return p

    def leave(self, pid: str) -> None:
        with self.lock:
            p = self.roster.leave(pid)
            self.notifier.unregister(pid)
            if pid == self._top_bidder_id and self._phase in BIDDING_PHASES:
                # the departed bidder can no longer pay, so the bid is withdrawn
                logger.info(f"Withdrawing top bid of {p.display_name} on {self._current_lot.name}")
                self._top_bid = 0
                self._top_bidder_id = None
                self.notifier.broadcast("update_bid", {
                    "itemId": self._current_lot.lot_id, "price": 0, "bidder": None,
                    "bidderId": None,
                    "minBid": bidding.required_price(self._current_lot, 0, self.config),
                })
            self._broadcast_lobby()
            self._broadcast_player_status()

    def configure(self, pid: str, display_name: Optional[str] = None,
                  starting_points: Optional[int] = None) -> Tuple[Optional[dict], Optional[str]]:
        with self.lock:
            self.roster.get(pid)
            if self._phase != LOBBY:
                return None, NOT_IN_LOBBY
            err = self.roster.configure(pid, display_name, starting_points)
            if err:
                self.notifier.send(pid, "config_rejected", {"reason": err})
                return None, err
            p = self.roster.get(pid)
            if self.audit and display_name is not None:
                self.audit.log_participant(pid, p.display_name)
            self._broadcast_lobby()
            self._broadcast_player_status()
            return {"nickname": p.display_name, "starting_points": p.starting_points}, None

    def ready(self, pid: str) -> Tuple[Optional[dict], Optional[str]]:
        with self.lock:
            self.roster.get(pid)
            if self._phase != LOBBY:
                return None, NOT_IN_LOBBY
            if not self.roster.mark_ready(pid):
                return {"ready": True, "started": False}, None
            self._broadcast_lobby()
            started = self.roster.all_ready()
            if started:
                self._start_round()
            return {"ready": True, "started": started}, None

    def place_bid(self, pid: str, amount: Any) -> Tuple[Optional[dict], Optional[str]]:
        with self.lock:
            bidder = self.roster.get(pid)
            if self._phase not in BIDDING_PHASES:
                logger.debug(f"Ignoring bid from {bidder.display_name} during {self._phase}")
                return None, bidding.NOT_OPEN
            if not bidder.ready:
                # seated after the round started; waits for the next lobby
                logger.debug(f"Ignoring bid from {bidder.display_name}, not in this round")
                return None, bidding.NOT_OPEN
            err = bidding.validate_bid(amount, bidder, self._phase, self._current_lot,
                                       self._top_bid, self._top_bidder_id, self.config)
            if err:
                self.notifier.send(pid, "bid_rejected", {"reason": err})
                return None, err

            lot = self._current_lot
            self._top_bid = amount
            self._top_bidder_id = pid
            before = self._remaining
            self._remaining = bidding.apply_anti_snipe(before, self.config)
            logger.info(f"Bid {amount} on {lot.name} by {bidder.display_name} ({self._remaining}s left)")
            if self.audit:
                self.audit.log_bid(self.round_id, lot.lot_id, pid, amount, self._phase, before)

            self.notifier.broadcast("update_bid", {
                "itemId": lot.lot_id, "price": amount, "bidder": bidder.display_name,
                "bidderId": pid, "minBid": bidding.required_price(lot, amount, self.config),
            })
            if self._remaining != before:
                logger.info(f"Anti-snipe: clock reset to {self._remaining}s")
                self._broadcast_timer()
            self._broadcast_player_status()
            return {"accepted": True, "amount": amount, "time_left": self._remaining}, None

    def shutdown(self) -> None:
        with self.lock:
            self.ticker.disarm()

    # ---- round lifecycle ----

    def _enter_lobby(self) -> None:
        self.ticker.disarm()
        self.round_id = uuid.uuid4().hex
        self._phase = LOBBY
        self._pass_phase: Optional[str] = None
        self._lots: List[Lot] = self.catalog.working_copy()
        self._sequence: List[Lot] = self._lots
        self._index = 0
        self._current_lot: Optional[Lot] = None
        self._top_bid = 0
        self._top_bidder_id: Optional[str] = None
        self._remaining = 0
        self._win_count: Dict[str, int] = {c: 0 for c in self.catalog.categories}
        self._resolved_in_sweep = 0
        self.roster.reset()
        logger.info("Auction state has been reset.")

    def _start_round(self) -> None:
        logger.info(f"Starting round {self.round_id}.")
        self._phase = PRIMARY_BIDDING
        self._pass_phase = PRIMARY_BIDDING
        self._sequence = self._lots
        self._index = 0
        if self.audit:
            self.audit.log_round_start(self.round_id, len(self.roster), [l.lot_id for l in self._lots])
        self.notifier.broadcast("game_start", {
            "message": "Everyone is ready. The auction begins!",
            "round_id": self.round_id,
        })
        self._advance(pause=False)

    def _advance(self, pause: bool = True) -> None:
        """Offer the next unresolved lot of the current pass, or end the pass."""
        step = first_open(self._sequence, self._index)
        if step is None:
            self._end_pass()
            return
        self._index = step.index
        if pause and self.config.transition_seconds > 0:
            self._begin_transition(step.lot)
        else:
            self._open_lot(step.lot)

    def _end_pass(self) -> None:
        repeat = self.config.failed_pass_mode == "repeat" and self._resolved_in_sweep > 0
        if self._pass_phase == PRIMARY_BIDDING or repeat:
            failed = failed_lots(self._lots)
            if failed:
                logger.info(f"Pass over; re-offering {len(failed)} failed lots.")
                self._phase = FAILED_BIDDING
                self._pass_phase = FAILED_BIDDING
                self._sequence = failed
                self._index = 0
                self._resolved_in_sweep = 0
                self.notifier.broadcast("game_update", {
                    "message": f"{len(failed)} lots went unsold. Re-offering them now.",
                })
                self._advance()
                return
        self._finish()

    def _begin_transition(self, lot: Lot) -> None:
        self._phase = TRANSITION
        self._current_lot = lot
        self._top_bid = 0
        self._top_bidder_id = None
        self._remaining = self.config.transition_seconds
        self.ticker.arm(self._on_tick)
        self.notifier.broadcast("transition", {
            "next": lot.to_dict(), "time": self._remaining, "phase": self._pass_phase,
        })

    def _open_lot(self, lot: Lot) -> None:
        self._phase = self._pass_phase
        self._current_lot = lot
        self._top_bid = 0
        self._top_bidder_id = None
        if self._pass_phase == FAILED_BIDDING:
            self._remaining = self.config.reoffer_seconds
        else:
            self._remaining = self.config.opening_seconds
        self.ticker.arm(self._on_tick)
        logger.info(f"Opening {lot.name} ({lot.category}) in {self._phase} for {self._remaining}s")
        self.notifier.broadcast("auction_start", {
            "item": lot.to_dict(), "phase": self._phase, "time": self._remaining,
            "minBid": bidding.required_price(lot, 0, self.config),
        })
        self._broadcast_auction_status()
        self._broadcast_player_status()

    def _on_tick(self) -> None:
        self._remaining -= 1
        if self._phase in BIDDING_PHASES:
            self._broadcast_timer()
            if self._remaining <= 0:
                self._close_lot()
        elif self._phase == TRANSITION:
            self.notifier.broadcast("transition", {
                "next": self._current_lot.to_dict(), "time": self._remaining,
                "phase": self._pass_phase,
            })
            if self._remaining <= 0:
                self._open_lot(self._current_lot)
        elif self._phase == FINISHED:
            self.notifier.broadcast("reset_countdown", {"time": self._remaining})
            if self._remaining <= 0:
                self._reset()
        else:
            logger.warning(f"Discarding tick during {self._phase}")
            self.ticker.disarm()

    def _close_lot(self) -> None:
        self.ticker.disarm()
        lot = self._current_lot
        if self._top_bid > 0:
            winner = self.roster.get(self._top_bidder_id)
            lot.status = ACQUIRED
            lot.final_price = self._top_bid
            lot.winner_id = winner.participant_id
            winner.point_balance -= lot.final_price
            winner.acquire(lot, lot.final_price)
            self._win_count[lot.category] = self._win_count.get(lot.category, 0) + 1
            self._resolved_in_sweep += 1
            logger.info(f"{lot.name} sold to {winner.display_name} for {lot.final_price}")
            if self.audit:
                self.audit.log_lot_result(self.round_id, lot, "won", self._phase)
            self.notifier.broadcast("auction_result", {
                "status": ACQUIRED, "item": lot.to_dict(), "winner": winner.display_name,
            })
            assigned = resolve_scarcity(lot.category, self._lots, self.roster, self._win_count)
            if assigned:
                auto_lot, auto_winner = assigned
                self._resolved_in_sweep += 1
                if self.audit:
                    self.audit.log_lot_result(self.round_id, auto_lot, "auto", self._phase)
                self.notifier.broadcast("auto_acquisition", {
                    "item": auto_lot.to_dict(), "winner": auto_winner.display_name,
                })
        else:
            lot.status = FAILED
            logger.info(f"{lot.name} went unsold.")
            if self.audit:
                self.audit.log_lot_result(self.round_id, lot, "failed", self._phase)
            self.notifier.broadcast("auction_result", {"status": FAILED, "item": lot.to_dict()})
        self._broadcast_player_status()
        self._broadcast_auction_status()
        self._index += 1
        self._advance()

    def _finish(self) -> None:
        self.ticker.disarm()
        self._phase = FINISHED
        self._current_lot = None
        self._top_bid = 0
        self._top_bidder_id = None
        self._remaining = self.config.reset_seconds
        logger.info(f"Round {self.round_id} finished.")
        if self.audit:
            self.audit.log_round_end(self.round_id, list(self.roster))
        self.notifier.broadcast("round_end", {
            "message": "The auction is over.",
            "results": self._player_statuses(),
            "items": self._auction_status(),
        })
        if self._remaining > 0:
            self.ticker.arm(self._on_tick)
        else:
            self._reset()

    def _reset(self) -> None:
        self._enter_lobby()
        self.notifier.broadcast("reset", {"message": "A new round can begin."})
        self._broadcast_lobby()
        self._broadcast_player_status()
        self._broadcast_auction_status()

    # ---- snapshots ----

    def _player_statuses(self) -> List[dict]:
        lot = self._current_lot if self._phase in BIDDING_PHASES else None
        return [{
            "id": p.participant_id,
            "nickname": p.display_name,
            "points": p.point_balance,
            "roster": [{"name": a.lot_name, "price": a.price, "position": a.category}
                       for a in p.acquired],
            "holdings": dict(p.holdings),
            "isTopBidder": p.participant_id == self._top_bidder_id,
            "canBid": p.ready and bidding.can_bid(p, lot, self._top_bidder_id, self.config),
        } for p in self.roster]

    def _auction_status(self) -> List[dict]:
        return [{"id": l.lot_id, "name": l.name, "position": l.category, "status": l.status}
                for l in self._lots]

    def _broadcast_lobby(self) -> None:
        self.notifier.broadcast("lobby_update", {"players": self.roster.lobby_view()})

    def _broadcast_player_status(self) -> None:
        self.notifier.broadcast("player_status_update", self._player_statuses())

    def _broadcast_auction_status(self) -> None:
        self.notifier.broadcast("auction_status_update", self._auction_status())

    def _broadcast_timer(self) -> None:
        self.notifier.broadcast("update_timer", {"itemId": self._current_lot.lot_id,
                                                 "time": self._remaining})

    def get_state(self, req_pid: str) -> dict:
        with self.lock:
            self.roster.get(req_pid)
            lot = self._current_lot
            return {
                "state": self._phase,
                "pass": self._pass_phase,
                "round_id": self.round_id,
                "current_lot": lot.to_dict() if lot else None,
                "top_bid": self._top_bid,
                "top_bidder_id": self._top_bidder_id,
                "time_left": self._remaining if self._phase != LOBBY else None,
                "required_bid": (bidding.required_price(lot, self._top_bid, self.config)
                                 if lot and self._phase in BIDDING_PHASES else None),
                "category_wins": dict(self._win_count),
                "players": self._player_statuses(),
                "items": self._auction_status(),
            }

    def get_status(self) -> dict:
        with self.lock:
            return {
                "state": self._phase,
                "current_players": len(self.roster),
                "capacity": self.roster.capacity,
                "open_seats": self.roster.capacity - len(self.roster),
                "ready": sum(1 for p in self.roster if p.ready),
            }
