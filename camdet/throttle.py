from __future__ import annotations

import time
from typing import Optional


class FrameThrottle:
    """
    Drop frames that arrive faster than `min_interval_s`.

    The default of 0.1 s gives roughly 10 detections per second. A frame is
    accepted when at least `min_interval_s` has passed since the last accepted
    one; everything in between should be discarded by the caller, not queued.
    """

    def __init__(self, min_interval_s: float = 0.1):
        if min_interval_s < 0:
            raise ValueError("min_interval_s must be >= 0")
        self.min_interval_s = float(min_interval_s)
        self._last: Optional[float] = None
        self.accepted = 0
        self.dropped = 0

    def should_process(self, now: Optional[float] = None) -> bool:
        t = time.monotonic() if now is None else float(now)
        if self._last is not None and (t - self._last) < self.min_interval_s:
            self.dropped += 1
            return False
        self._last = t
        self.accepted += 1
        return True

    def reset(self) -> None:
        self._last = None
        self.accepted = 0
        self.dropped = 0
