"""
Moving-average bandpass filter.

Algorithm
---------
1. High-pass: a centered moving average about one period of
   ``low_cutoff_hz`` wide follows everything slower than the passband
   (breathing drift under a pulse, posture shifts under breathing).  It is
   subtracted from the signal.
2. Low-pass: the result is smoothed with a centered moving average about
   one period of ``high_cutoff_hz`` wide, which averages out content faster
   than the passband (sensor noise, frame jitter).

Both averages are truncated at the window edges: the first and last
samples are averaged over the in-bounds part of their neighbourhood only,
never over zero padding.  Output length equals input length.

No IIR/FFT stage is involved, so the filter has no start-up transient and
no phase shift at the centre of the window.
"""

from __future__ import annotations

import logging

import numpy as np
from scipy.ndimage import uniform_filter1d

logger = logging.getLogger(__name__)


def _centered_width(width: int) -> int:
    """Odd span ``2 * (width // 2) + 1`` so the window sits on the sample."""
    return 2 * (width // 2) + 1


class BandpassFilter:
    """
    Two cascaded moving averages approximating a bandpass.

    Parameters
    ----------
    sampling_rate_hz:
        Sampling rate of the signal.
    low_cutoff_hz:
        Lower passband edge.  Sets the width of the baseline average.
    high_cutoff_hz:
        Upper passband edge.  Sets the width of the smoothing average.
    """

    def __init__(
        self,
        sampling_rate_hz: float,
        low_cutoff_hz: float,
        high_cutoff_hz: float,
    ) -> None:
        self.sampling_rate_hz = sampling_rate_hz
        self.low_cutoff_hz = low_cutoff_hz
        self.high_cutoff_hz = high_cutoff_hz

        self.baseline_window = _centered_width(
            max(3, int(round(sampling_rate_hz / low_cutoff_hz)))
        )
        self.smoothing_window = _centered_width(
            max(3, int(round(sampling_rate_hz / high_cutoff_hz)))
        )

        # Work buffers, sized on first use and reused while the length is stable
        self._length = -1
        self._baseline: np.ndarray = np.empty(0)
        self._highpassed: np.ndarray = np.empty(0)
        self._baseline_norm: np.ndarray = np.empty(0)
        self._smoothing_norm: np.ndarray = np.empty(0)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def apply(self, signal: np.ndarray, out: np.ndarray | None = None) -> np.ndarray:
        """
        Filter *signal* and return the band-limited result.

        Parameters
        ----------
        signal:
            1-D float array, normally already detrended.
        out:
            Optional output array of the same length.  Must not be *signal*.
        """
        signal = np.asarray(signal, dtype=np.float64)
        n = signal.shape[0]
        if out is None:
            out = np.empty(n, dtype=np.float64)
        if n == 0:
            return out

        self._prepare(n)

        # High-pass: remove the slow baseline
        self._moving_average(signal, self.baseline_window, self._baseline_norm, self._baseline)
        np.subtract(signal, self._baseline, out=self._highpassed)

        # Low-pass: smooth away fast noise
        self._moving_average(self._highpassed, self.smoothing_window, self._smoothing_norm, out)
        return out

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _prepare(self, n: int) -> None:
        if n == self._length:
            return
        logger.debug(
            "Sizing bandpass buffers for %d samples (baseline=%d, smoothing=%d)",
            n, self.baseline_window, self.smoothing_window,
        )
        self._length = n
        self._baseline = np.empty(n, dtype=np.float64)
        self._highpassed = np.empty(n, dtype=np.float64)
        self._baseline_norm = self._in_bounds_fraction(n, self.baseline_window)
        self._smoothing_norm = self._in_bounds_fraction(n, self.smoothing_window)

    @staticmethod
    def _in_bounds_fraction(n: int, width: int) -> np.ndarray:
        """Fraction of each centered window that lies inside ``[0, n)``."""
        return uniform_filter1d(np.ones(n), size=width, mode="constant", cval=0.0)

    @staticmethod
    def _moving_average(
        signal: np.ndarray, width: int, norm: np.ndarray, out: np.ndarray
    ) -> None:
        # Zero-padded mean rescaled by the in-bounds fraction = truncated mean
        uniform_filter1d(signal, size=width, mode="constant", cval=0.0, output=out)
        out /= norm
