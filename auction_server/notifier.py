import threading
import logging
from collections import deque
from typing import Any, Deque, Dict, List

logger = logging.getLogger(__name__)

MAX_BACKLOG = 500

class Notifier:
    """
    Outbound channel to participants. Each seated participant has a mailbox
    that the transport drains; broadcast() writes to every mailbox, send()
    to one. Delivery is fire-and-forget: a mailbox that overflows drops its
    oldest messages.
    """

    def __init__(self, max_backlog: int = MAX_BACKLOG) -> None:
        self._lock = threading.Lock()
        self._max_backlog = max_backlog
        self._mailboxes: Dict[str, Deque[dict]] = {}
        self._seq = 0

    def register(self, pid: str) -> None:
        with self._lock:
            self._mailboxes.setdefault(pid, deque(maxlen=self._max_backlog))

    def unregister(self, pid: str) -> None:
        with self._lock:
            self._mailboxes.pop(pid, None)

    def _message(self, event: str, data: Any) -> dict:
        self._seq += 1
        return {"seq": self._seq, "event": event, "data": data}

    def broadcast(self, event: str, data: Any = None) -> None:
        with self._lock:
            msg = self._message(event, data)
            for box in self._mailboxes.values():
                box.append(msg)

    def send(self, pid: str, event: str, data: Any = None) -> None:
        with self._lock:
            box = self._mailboxes.get(pid)
            if box is None:
                logger.debug(f"Dropping {event} for unknown participant {pid}")
                return
            box.append(self._message(event, data))

    def drain(self, pid: str) -> List[dict]:
        with self._lock:
            box = self._mailboxes.get(pid)
            if not box:
                return []
            messages = list(box)
            box.clear()
            return messages
