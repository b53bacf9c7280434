"""
Fixed-capacity FIFO of recent measurements.

Backed by a pre-allocated numpy ring so that pushing a sample never
allocates; :meth:`SlidingWindow.snapshot` linearises the ring in arrival
order for the processing pipeline.
"""

from __future__ import annotations

import numpy as np


class SlidingWindow:
    """
    Rolling buffer holding the last ``capacity`` measurements.

    Parameters
    ----------
    capacity:
        Maximum number of samples kept.  When a push exceeds it the oldest
        sample is evicted.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = int(capacity)
        self._ring = np.zeros(self.capacity, dtype=np.float64)
        self._head = 0      # index of the oldest sample once full
        self._size = 0
        self._full = False

    def __len__(self) -> int:
        return self._size

    def push(self, value: float) -> None:
        """Append *value* to the tail, evicting the head if at capacity."""
        if self._size < self.capacity:
            self._ring[self._size] = value
            self._size += 1
            if self._size == self.capacity:
                self._full = True
        else:
            self._ring[self._head] = value
            self._head = (self._head + 1) % self.capacity

    @property
    def is_full(self) -> bool:
        return self._full

    @property
    def progress(self) -> float:
        """How full the window is (0 – 1)."""
        return min(1.0, self._size / self.capacity)

    def snapshot(self, out: np.ndarray | None = None) -> np.ndarray:
        """
        Return the contents, oldest first.

        Parameters
        ----------
        out:
            Optional float64 array of at least ``len(self)`` elements.  When
            given, the samples are written into its leading part and that
            view is returned; otherwise a new array is allocated.  The
            result never shares memory with the ring.
        """
        n = self._size
        if out is None:
            out = np.empty(n, dtype=np.float64)
        elif out.shape[0] < n:
            raise ValueError(f"output buffer holds {out.shape[0]} samples, need {n}")
        out = out[:n]

        tail = n - self._head
        out[:tail] = self._ring[self._head:n]
        out[tail:] = self._ring[:self._head]
        return out

    def clear(self) -> None:
        self._ring.fill(0.0)
        self._head = 0
        self._size = 0
        self._full = False
