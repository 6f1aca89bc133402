import uuid
import logging
from typing import Dict, Iterator, List, Optional

from auction_server.errors import RosterFullError, UnknownParticipantError
from auction_server.models import Participant

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 20

class Roster:
    def __init__(self, capacity: int, starting_points: int) -> None:
        self.capacity = capacity
        self.default_points = starting_points
        self.participants: Dict[str, Participant] = {}     # pid -> Participant, join order

    def __len__(self) -> int:
        return len(self.participants)

    def __iter__(self) -> Iterator[Participant]:
        return iter(list(self.participants.values()))

    def __contains__(self, pid: object) -> bool:
        return pid in self.participants

    @property
    def is_full(self) -> bool:
        return len(self.participants) >= self.capacity

    def get(self, pid: str) -> Participant:
        try:
            return self.participants[pid]
        except KeyError:
            raise UnknownParticipantError(pid) from None

    def _default_name(self) -> str:
        taken = {p.display_name for p in self.participants.values()}
        n = 1
        while f"P{n}" in taken:
            n += 1
        return f"P{n}"

    def join(self, name: Optional[str] = None) -> Participant:
        if self.is_full:
            raise RosterFullError(f"All {self.capacity} seats are taken")
        pid = uuid.uuid4().hex
        p = Participant(
            participant_id=pid,
            display_name=(name or "").strip()[:MAX_NAME_LENGTH] or self._default_name(),
            starting_points=self.default_points,
            point_balance=self.default_points,
        )
        self.participants[pid] = p
        logger.info(f"Participant joined: {p.display_name} (ID: {pid})")
        return p

    def leave(self, pid: str) -> Participant:
        p = self.get(pid)
        del self.participants[pid]
        logger.info(f"Participant left: {p.display_name} (ID: {pid})")
        return p

    def configure(self, pid: str, display_name: Optional[str] = None,
                  starting_points: Optional[int] = None) -> Optional[str]:
        """
        Apply a participant's lobby configuration. Returns an error message
        when the submission is invalid, in which case nothing is changed.
        """
        p = self.get(pid)
        if p.ready:
            return "Configuration is locked once you are ready"
        name = None
        if display_name is not None:
            name = str(display_name).strip()
            if not name:
                return "Name must not be empty"
            if len(name) > MAX_NAME_LENGTH:
                return f"Name must be at most {MAX_NAME_LENGTH} characters"
            if any(o.display_name == name for o in self.participants.values() if o is not p):
                return "Name is already taken"
        if starting_points is not None:
            if isinstance(starting_points, bool) or not isinstance(starting_points, int) or starting_points <= 0:
                return "Starting points must be a positive integer"
        if name is not None:
            p.display_name = name
        if starting_points is not None:
            p.starting_points = starting_points
            p.point_balance = starting_points
        return None

    def mark_ready(self, pid: str) -> bool:
        p = self.get(pid)
        if p.ready:
            return False
        p.ready = True
        return True

    def all_ready(self) -> bool:
        return self.is_full and all(p.ready for p in self.participants.values())

    def without(self, category: str) -> List[Participant]:
        """Participants holding no lot of the category, in join order."""
        return [p for p in self.participants.values() if p.held(category) == 0]

    def reset(self, clear_ready: bool = True) -> None:
        for p in self.participants.values():
            p.point_balance = p.starting_points
            p.holdings = {}
            p.acquired = []
            if clear_ready:
                p.ready = False
        logger.info("Roster has been reset.")

    def lobby_view(self) -> List[dict]:
        return [{"id": p.participant_id, "nickname": p.display_name, "ready": p.ready}
                for p in self.participants.values()]
