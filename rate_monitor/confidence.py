"""
Heuristic confidence score for a rate estimate.

The score is a weighted blend of two cues:

* regularity (60 %) – how evenly the detected peaks are spaced;
* signal quality (40 %) – mean peak height relative to the overall spread
  of the filtered signal, saturating at ``snr_cap``.

It is a coarse 0 – 1 indicator for the UI, not a probability.
"""

from __future__ import annotations

import numpy as np

REGULARITY_WEIGHT = 0.6
QUALITY_WEIGHT = 0.4


class ConfidenceScorer:
    """
    Parameters
    ----------
    minimum_peak_count:
        Below this many peaks the score is 0.
    snr_cap:
        Peak-to-noise ratio mapped to a full signal-quality score.
    """

    def __init__(self, minimum_peak_count: int = 3, snr_cap: float = 5.0) -> None:
        self.minimum_peak_count = max(2, int(minimum_peak_count))
        self.snr_cap = snr_cap

    def score(self, signal: np.ndarray, peaks: np.ndarray) -> float:
        """Return the confidence in ``[0, 1]`` for *peaks* found in *signal*."""
        peaks = np.asarray(peaks, dtype=np.intp)
        if peaks.shape[0] < self.minimum_peak_count:
            return 0.0

        intervals = np.diff(peaks).astype(np.float64)
        interval_mean = float(intervals.mean())
        if interval_mean <= 0:
            return 0.0
        variation = float(intervals.std()) / interval_mean
        regularity = 1.0 - float(np.clip(variation, 0.0, 1.0))

        signal = np.asarray(signal, dtype=np.float64)
        signal_std = float(signal.std())
        if signal_std > 0:
            ratio = float(signal[peaks].mean()) / signal_std
            quality = float(np.clip(ratio, 0.0, self.snr_cap)) / self.snr_cap
        else:
            quality = 0.0

        confidence = REGULARITY_WEIGHT * regularity + QUALITY_WEIGHT * quality
        return float(np.clip(confidence, 0.0, 1.0))
