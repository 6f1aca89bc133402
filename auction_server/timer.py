import threading
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

class Ticker:
    """
    The engine's single countdown clock. At most one timer is ever armed:
    arm() cancels whatever was running before scheduling a new one-second
    cadence. Every tick runs under the engine's lock, so ticks and
    participant commands never interleave, and a tick that fires after the
    clock was re-armed or disarmed is discarded by its generation number.
    """

    def __init__(self, lock: threading.RLock, interval: float = 1.0,
                 timer_factory: Callable[..., threading.Timer] = threading.Timer) -> None:
        self._lock = lock
        self.interval = interval
        self._timer_factory = timer_factory
        self._timer: Optional[threading.Timer] = None
        self._callback: Optional[Callable[[], None]] = None
        self.generation = 0

    @property
    def armed(self) -> bool:
        return self._callback is not None

    def arm(self, callback: Callable[[], None]) -> int:
        with self._lock:
            self.disarm()
            self.generation += 1
            self._callback = callback
            self._schedule(self.generation)
            return self.generation

    def disarm(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._callback = None

    def _schedule(self, generation: int) -> None:
        timer = self._timer_factory(self.interval, self._fire, args=(generation,))
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self.generation or self._callback is None:
                logger.debug(f"Discarding stale tick (generation {generation})")
                return
            self._callback()
            # the callback may have re-armed or disarmed the clock
            if generation == self.generation and self._callback is not None:
                self._schedule(generation)
