"""
Advisory throttle between consecutive lap records from this client.

Lives in the presentation layer only: it never touches lap numbering or
statistics and the ledger accepts every lap the gateway accepts.
"""

import math
import threading
import time
from typing import Callable, Dict

from stairup.exceptions import CooldownActiveError


class LapCooldown:

    def __init__(self, seconds: int, clock: Callable[[], float] = time.monotonic):
        self.seconds = seconds
        self._clock = clock
        self._last_lap: Dict[str, float] = {}
        self._lock = threading.Lock()

    def remaining(self, session_id: str) -> int:
        """Whole seconds until the next lap may be recorded, 0 when allowed."""
        if self.seconds <= 0:
            return 0
        with self._lock:
            last = self._last_lap.get(session_id)
        if last is None:
            return 0
        left = self.seconds - (self._clock() - last)
        return max(0, math.ceil(left))

    def check(self, session_id: str) -> None:
        left = self.remaining(session_id)
        if left > 0:
            raise CooldownActiveError(
                f"Please wait {left} seconds before recording the next lap",
                retry_after=left
            )

    def mark(self, session_id: str) -> None:
        with self._lock:
            self._last_lap[session_id] = self._clock()

    def forget(self, session_id: str) -> None:
        with self._lock:
            self._last_lap.pop(session_id, None)
