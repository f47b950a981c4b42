"""Bounded, thread-safe ring buffer of motion samples."""

import threading
from collections import deque
from typing import Deque, List
from .models import MotionSample

DEFAULT_CAPACITY = 50

class SampleBuffer:
    """
    FIFO buffer holding the most recent motion samples of one sensor kind.

    Sensor callbacks push from their own thread while the tick task reads a
    window; the lock only guards the deque operations themselves.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity <= 0:
            raise ValueError("Buffer capacity must be positive")
        self._capacity = capacity
        self._samples: Deque[MotionSample] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def push(self, sample: MotionSample) -> None:
        """Append a sample, evicting the oldest one when full."""
        with self._lock:
            self._samples.append(sample)

    def last_n(self, n: int) -> List[MotionSample]:
        """
        Return the ``n`` most recent samples, oldest first.

        Fewer are returned if fewer have accumulated.
        """
        if n <= 0:
            return []
        with self._lock:
            samples = list(self._samples)
        return samples[-n:]

    def snapshot(self) -> List[MotionSample]:
        with self._lock:
            return list(self._samples)

    def clear(self) -> None:
        with self._lock:
            self._samples.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)
