from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable


log = logging.getLogger(__name__)


def mask_secret(value: str | None) -> str:
    s = (value or "").strip()
    if not s:
        return "****"
    return "****" + s[-4:]


@dataclass
class _Window:
    count: int
    expires_at: float


class AttemptLimiter:
    """
    Keyed attempt counters with a fixed decay window per key.

    The window opens on the first hit and lapses `decay_s` seconds later; the
    counter resets when it lapses. `clock` defaults to monotonic time and can be
    replaced in tests.
    """

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        self._clock = clock or time.monotonic
        self._windows: dict[str, _Window] = {}

    def _live(self, key: str) -> _Window | None:
        w = self._windows.get(key)
        if w is None:
            return None
        if self._clock() >= w.expires_at:
            del self._windows[key]
            return None
        return w

    def attempts(self, key: str) -> int:
        w = self._live(key)
        return w.count if w is not None else 0

    def hit(self, key: str, decay_s: float) -> int:
        w = self._live(key)
        if w is None:
            w = _Window(count=0, expires_at=self._clock() + float(decay_s))
            self._windows[key] = w
        w.count += 1
        return w.count

    def too_many_attempts(self, key: str, max_attempts: int) -> bool:
        return self.attempts(key) >= int(max_attempts)

    def available_in(self, key: str) -> int:
        """Seconds until the key's window lapses (0 when there is no live window)."""
        w = self._live(key)
        if w is None:
            return 0
        return max(0, int(math.ceil(w.expires_at - self._clock())))

    def clear(self, key: str) -> None:
        if self._windows.pop(key, None) is not None:
            log.debug("Cleared attempt counter for %s", key)
