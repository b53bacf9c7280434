"""
Estimator configuration.

A single :class:`EstimatorConfig` drives the whole pipeline; pulse and
breathing analysis only differ in the numbers passed in.  Two presets are
provided:

* :func:`heart_rate_config` – fingertip PPG from the red channel of a camera
  at ~30 FPS (40 – 200 BPM).
* :func:`respiration_config` – vertical torso displacement from pose
  landmarks at ~10 Hz (6 – 48 breaths/min).
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple


class DetrendMode(str, Enum):
    MEAN   = "mean"     # remove constant offset
    LINEAR = "linear"   # remove least-squares line (slow exposure drift)


@dataclass(frozen=True)
class EstimatorConfig:
    """
    Immutable parameter set for :class:`~rate_monitor.estimator.RateEstimator`.

    Parameters
    ----------
    window_seconds:
        Length of the analysis window in seconds.
    sampling_rate_hz:
        Nominal rate at which measurements arrive.  Callers must rate-limit
        their input to this value (see :class:`~rate_monitor.throttle.SampleThrottle`).
    low_cutoff_hz, high_cutoff_hz:
        Passband edges of the moving-average bandpass filter.
    valid_rate_range:
        ``(min_rate, max_rate)`` per minute.  Detections outside are dropped.
    peak_threshold_multiplier:
        ``k`` in the adaptive peak threshold ``mean + k * std``.
    min_peak_distance_seconds:
        Minimum spacing between two accepted peaks.
    minimum_peak_count:
        Fewer detected peaks than this yields a zero-rate result.
    detrend_mode:
        :class:`DetrendMode` (plain strings are accepted).
    snr_cap:
        Peak-amplitude / noise ratio at which the signal-quality part of the
        confidence score saturates.

    Raises
    ------
    ValueError
        If any value is out of range.
    """

    window_seconds: float
    sampling_rate_hz: float
    low_cutoff_hz: float
    high_cutoff_hz: float
    valid_rate_range: Tuple[float, float]
    peak_threshold_multiplier: float = 0.4
    min_peak_distance_seconds: float = 0.3
    minimum_peak_count: int = 3
    detrend_mode: DetrendMode = DetrendMode.MEAN
    snr_cap: float = 5.0

    def __post_init__(self) -> None:
        for name in ("window_seconds", "sampling_rate_hz", "low_cutoff_hz",
                     "high_cutoff_hz", "min_peak_distance_seconds", "snr_cap"):
            _require_positive(name, getattr(self, name))

        if self.low_cutoff_hz >= self.high_cutoff_hz:
            raise ValueError(
                f"low_cutoff_hz ({self.low_cutoff_hz}) must be below "
                f"high_cutoff_hz ({self.high_cutoff_hz})"
            )

        try:
            min_rate, max_rate = (float(v) for v in self.valid_rate_range)
        except (TypeError, ValueError):
            raise ValueError(
                f"valid_rate_range must be a (min, max) pair, got {self.valid_rate_range!r}"
            ) from None
        _require_positive("valid_rate_range[0]", min_rate)
        _require_positive("valid_rate_range[1]", max_rate)
        if min_rate >= max_rate:
            raise ValueError(
                f"valid_rate_range minimum ({min_rate}) must be below maximum ({max_rate})"
            )
        object.__setattr__(self, "valid_rate_range", (min_rate, max_rate))

        if not math.isfinite(self.peak_threshold_multiplier):
            raise ValueError("peak_threshold_multiplier must be finite")

        if int(self.minimum_peak_count) != self.minimum_peak_count or self.minimum_peak_count < 2:
            raise ValueError(
                f"minimum_peak_count must be an integer >= 2, got {self.minimum_peak_count!r}"
            )
        object.__setattr__(self, "minimum_peak_count", int(self.minimum_peak_count))

        try:
            mode = DetrendMode(self.detrend_mode)
        except ValueError:
            raise ValueError(f"unknown detrend_mode {self.detrend_mode!r}") from None
        object.__setattr__(self, "detrend_mode", mode)

        if self.capacity < 3:
            raise ValueError(
                f"window of {self.window_seconds} s at {self.sampling_rate_hz} Hz "
                f"holds only {self.capacity} samples (need at least 3)"
            )

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def capacity(self) -> int:
        """Number of samples held by a full window."""
        return int(round(self.window_seconds * self.sampling_rate_hz))

    @property
    def min_peak_distance_samples(self) -> int:
        return max(1, int(round(self.min_peak_distance_seconds * self.sampling_rate_hz)))

    @property
    def min_rate(self) -> float:
        return self.valid_rate_range[0]

    @property
    def max_rate(self) -> float:
        return self.valid_rate_range[1]


def _require_positive(name: str, value: float) -> None:
    if not (isinstance(value, numbers.Real) and math.isfinite(value) and value > 0):
        raise ValueError(f"{name} must be a positive number, got {value!r}")


# ---------------------------------------------------------------------------
# Presets
# ---------------------------------------------------------------------------

_HEART_RATE = EstimatorConfig(
    window_seconds=15.0,
    sampling_rate_hz=30.0,
    low_cutoff_hz=0.5,          # 30 BPM
    high_cutoff_hz=3.0,         # 180 BPM
    valid_rate_range=(40.0, 200.0),
    peak_threshold_multiplier=0.4,
    min_peak_distance_seconds=0.3,   # 200 BPM
    minimum_peak_count=3,
    detrend_mode=DetrendMode.MEAN,
)

_RESPIRATION = EstimatorConfig(
    window_seconds=45.0,
    sampling_rate_hz=10.0,
    low_cutoff_hz=0.1,          # 6 breaths/min
    high_cutoff_hz=0.8,         # 48 breaths/min
    valid_rate_range=(6.0, 48.0),
    peak_threshold_multiplier=0.3,
    min_peak_distance_seconds=0.5,
    minimum_peak_count=2,
    detrend_mode=DetrendMode.LINEAR,
)


def heart_rate_config(**overrides) -> EstimatorConfig:
    """Fingertip PPG preset.  Keyword arguments replace individual fields."""
    return replace(_HEART_RATE, **overrides)


def respiration_config(**overrides) -> EstimatorConfig:
    """Torso-displacement breathing preset.  Keyword arguments replace individual fields."""
    return replace(_RESPIRATION, **overrides)
