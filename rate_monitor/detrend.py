"""
Baseline removal ahead of the bandpass filter.

Two modes are supported:

* ``mean``   – subtract the window mean (constant DC offset).
* ``linear`` – subtract the ordinary least-squares line fitted over the
  sample indices, for drift that grows steadily across the window
  (camera auto-exposure, a subject slowly leaning back).
"""

from __future__ import annotations

import numpy as np
from scipy.signal import detrend

from rate_monitor.config import DetrendMode


class Detrender:
    """
    Zero-centre a signal window.

    Parameters
    ----------
    mode:
        :class:`~rate_monitor.config.DetrendMode` or its string value.
    """

    def __init__(self, mode: DetrendMode | str = DetrendMode.MEAN) -> None:
        self.mode = DetrendMode(mode)

    def apply(self, signal: np.ndarray, out: np.ndarray | None = None) -> np.ndarray:
        """
        Return *signal* with its baseline removed.

        Windows shorter than two samples have no trend and are returned
        unchanged (copied into *out* when given).
        """
        signal = np.asarray(signal, dtype=np.float64)
        if out is None:
            out = np.empty_like(signal)
        if out is not signal:
            np.copyto(out, signal)

        if out.shape[0] < 2:
            return out

        if self.mode is DetrendMode.MEAN:
            out -= out.mean()
        else:
            out[:] = detrend(out, type="linear", overwrite_data=True)
        return out
