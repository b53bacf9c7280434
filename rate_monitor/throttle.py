"""
Input rate limiter for capture loops.

Cameras deliver frames faster or more irregularly than the estimator's
nominal sampling rate.  The capture side runs every frame through
:meth:`SampleThrottle.accept` and only forwards a measurement when it
returns *True*, so the window holds roughly ``sampling_rate_hz`` samples
per second.
"""

from __future__ import annotations

import time
from typing import Callable, Optional


class SampleThrottle:
    """
    Drops samples that arrive sooner than ``1 / rate_hz`` after the last
    accepted one.

    Parameters
    ----------
    rate_hz:
        Maximum accepted sample rate.
    clock:
        Monotonic time source in seconds (default :func:`time.monotonic`).
    """

    def __init__(self, rate_hz: float, clock: Callable[[], float] = time.monotonic) -> None:
        if not rate_hz > 0:
            raise ValueError(f"rate_hz must be positive, got {rate_hz!r}")
        self.rate_hz = rate_hz
        self.min_interval = 1.0 / rate_hz
        self._clock = clock
        self._last: Optional[float] = None

    def accept(self, now: float | None = None) -> bool:
        """Return *True* if a sample taken at *now* should be forwarded."""
        if now is None:
            now = self._clock()
        if self._last is not None and now - self._last < self.min_interval:
            return False
        self._last = now
        return True

    def reset(self) -> None:
        self._last = None
