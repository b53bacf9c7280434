"""
Adaptive-threshold peak detector.

A sample is a peak when it is a local maximum, rises above
``mean + k * std`` of the window, and lies at least ``min_distance``
samples after the previously accepted peak.  The distance rule caps the
highest rate the detector can report and stops noise ripples on a single
pulse from being counted twice.
"""

from __future__ import annotations

import logging

import numpy as np
from scipy.signal import find_peaks

logger = logging.getLogger(__name__)

# Below this the window is treated as flat; peaks would only be rounding noise.
_MIN_STD = 1e-9


class PeakDetector:
    """
    Parameters
    ----------
    threshold_multiplier:
        ``k`` in the adaptive height threshold ``mean + k * std``.
    min_distance:
        Minimum spacing in samples between two accepted peaks.
    """

    def __init__(self, threshold_multiplier: float = 0.4, min_distance: int = 1) -> None:
        self.threshold_multiplier = threshold_multiplier
        self.min_distance = max(1, int(min_distance))

    def detect(self, signal: np.ndarray) -> np.ndarray:
        """
        Return the ordered indices of accepted peaks in *signal*.

        First and last samples are never peaks, and neither is a flat top:
        a peak must be strictly above both neighbours.  Returns an empty
        array for signals shorter than three samples or without usable
        variance.
        """
        signal = np.asarray(signal, dtype=np.float64)
        if signal.shape[0] < 3:
            return np.empty(0, dtype=np.intp)

        mean = float(signal.mean())
        std = float(signal.std())
        if not np.isfinite(std) or std < _MIN_STD:
            logger.debug("Flat signal (std=%.3g) – no peaks", std)
            return np.empty(0, dtype=np.intp)

        threshold = mean + self.threshold_multiplier * std
        candidates, _ = find_peaks(signal, plateau_size=(1, 1))
        candidates = candidates[signal[candidates] > threshold]

        accepted: list[int] = []
        for idx in candidates:
            if not accepted or idx - accepted[-1] >= self.min_distance:
                accepted.append(int(idx))
        return np.asarray(accepted, dtype=np.intp)
