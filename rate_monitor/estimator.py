"""
Streaming periodic-rate estimator.

Algorithm
---------
1. Accept one scalar measurement per call (mean red intensity of a
   fingertip-covered camera frame, or the vertical position of the torso).
2. Keep a sliding window of the last ``window_seconds`` samples.
3. Once the window is full, on every new sample:
   detrend → moving-average bandpass → adaptive peak detection.
4. Convert the mean peak spacing to a rate per minute, reject values
   outside the physiological range, and score the confidence.
5. Publish an immutable :class:`RateResult` that any thread can read.

Degenerate windows (flat signal, too few peaks, implausible rate) publish
``RateResult(rate=0.0, confidence=0.0)`` rather than raising.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar

import numpy as np

from rate_monitor.bandpass import BandpassFilter
from rate_monitor.confidence import ConfidenceScorer
from rate_monitor.config import EstimatorConfig
from rate_monitor.detrend import Detrender
from rate_monitor.peaks import PeakDetector
from rate_monitor.window import SlidingWindow

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Published values
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RateResult:
    rate: float           # per minute; 0.0 = no reliable periodicity
    confidence: float     # 0 – 1
    timestamp: float      # seconds since the epoch

    @property
    def is_valid(self) -> bool:
        return self.rate > 0.0

    @property
    def quality(self) -> str:
        """Coarse label for display: ``"high"``, ``"medium"`` or ``"low"``."""
        if self.confidence >= 0.7:
            return "high"
        if self.confidence >= 0.5:
            return "medium"
        return "low"


class EstimatorState(Enum):
    COLLECTING = "collecting"   # window not yet full
    READY      = "ready"        # recomputing on every sample


class LatestValue(Generic[T]):
    """
    Thread-safe holder for the most recently published value.

    Writers replace the reference, readers get whatever was last stored.
    The internal lock only guards the swap, so a reader never waits on the
    producer's processing.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: Optional[T] = None

    def get(self) -> Optional[T]:
        with self._lock:
            return self._value

    def set(self, value: Optional[T]) -> None:
        with self._lock:
            self._value = value

    def clear(self) -> None:
        self.set(None)


# ---------------------------------------------------------------------------
# Estimator
# ---------------------------------------------------------------------------

class RateEstimator:
    """
    Windowed pulse / breathing rate estimator.

    Parameters
    ----------
    config:
        Validated :class:`~rate_monitor.config.EstimatorConfig`; see
        :func:`~rate_monitor.config.heart_rate_config` and
        :func:`~rate_monitor.config.respiration_config`.
    clock:
        Callable returning the current time in seconds, used to stamp
        results.  Defaults to :func:`time.time`.
    """

    def __init__(
        self,
        config: EstimatorConfig,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not isinstance(config, EstimatorConfig):
            raise TypeError(f"config must be an EstimatorConfig, got {type(config).__name__}")
        self.config = config
        self._clock = clock

        capacity = config.capacity
        self._window = SlidingWindow(capacity)
        self._detrender = Detrender(config.detrend_mode)
        self._filter = BandpassFilter(
            config.sampling_rate_hz, config.low_cutoff_hz, config.high_cutoff_hz
        )
        self._detector = PeakDetector(
            config.peak_threshold_multiplier, config.min_peak_distance_samples
        )
        self._scorer = ConfidenceScorer(config.minimum_peak_count, config.snr_cap)

        # Per-sample work buffers, reused for the lifetime of the estimator
        self._snapshot = np.empty(capacity, dtype=np.float64)
        self._detrended = np.empty(capacity, dtype=np.float64)
        self._filtered = np.empty(capacity, dtype=np.float64)

        self._lock = threading.Lock()
        self._latest: LatestValue[RateResult] = LatestValue()

        logger.debug(
            "RateEstimator ready – capacity=%d fs=%.1f Hz band=%.2f–%.2f Hz range=%s",
            capacity, config.sampling_rate_hz, config.low_cutoff_hz,
            config.high_cutoff_hz, config.valid_rate_range,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def add_measurement(self, value: float) -> None:
        """
        Append one measurement and, once the window is full, republish the
        rate estimate.

        Non-finite values are dropped.
        """
        value = float(value)
        if not math.isfinite(value):
            logger.warning("Dropping non-finite measurement: %r", value)
            return

        with self._lock:
            self._window.push(value)
            if not self._window.is_full:
                return
            result = self._compute()
            self._latest.set(result)

        logger.debug("Published rate=%.1f confidence=%.2f", result.rate, result.confidence)

    @property
    def latest_result(self) -> Optional[RateResult]:
        """Last published result, or *None* before the first full window / after reset."""
        return self._latest.get()

    @property
    def progress(self) -> float:
        """Fraction of the window filled (0 – 1)."""
        return self._window.progress

    @property
    def state(self) -> EstimatorState:
        return EstimatorState.READY if self._window.is_full else EstimatorState.COLLECTING

    @property
    def measurement_count(self) -> int:
        return len(self._window)

    def reset(self) -> None:
        """Clear the window and the published result."""
        with self._lock:
            self._window.clear()
            self._latest.clear()
        logger.info("Rate estimator reset.")

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _compute(self) -> RateResult:
        signal = self._window.snapshot(out=self._snapshot)
        if np.ptp(signal) == 0.0:
            logger.debug("Flat window – no periodicity")
            return self._empty_result()

        try:
            detrended = self._detrender.apply(signal, out=self._detrended)
            filtered = self._filter.apply(detrended, out=self._filtered)
            peaks = self._detector.detect(filtered)

            if peaks.shape[0] < self.config.minimum_peak_count:
                logger.debug("Only %d peaks found", peaks.shape[0])
                return self._empty_result()

            avg_interval = float(np.diff(peaks).mean())
            if avg_interval <= 0:
                return self._empty_result()
            rate = 60.0 * self.config.sampling_rate_hz / avg_interval

            if not (self.config.min_rate <= rate <= self.config.max_rate):
                logger.debug(
                    "Rejecting rate %.1f outside %.0f–%.0f",
                    rate, self.config.min_rate, self.config.max_rate,
                )
                return self._empty_result()

            confidence = self._scorer.score(filtered, peaks)
        except (ValueError, FloatingPointError) as e:
            logger.warning("Rate computation failed: %s", e)
            return self._empty_result()

        return RateResult(rate=rate, confidence=confidence, timestamp=self._clock())

    def _empty_result(self) -> RateResult:
        return RateResult(rate=0.0, confidence=0.0, timestamp=self._clock())
