"""Fixed-capacity rolling history of temperature samples."""

from __future__ import annotations

from collections import deque

from fanpanel.domain.telemetry import Sample


class RingBuffer:
    """FIFO history holding at most *capacity* samples, oldest first.

    Owned by a single Poller; nothing else mutates it, so it carries no lock.
    """

    def __init__(self, capacity: int = 20) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._samples: deque[Sample] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._samples)

    @property
    def capacity(self) -> int:
        return self._samples.maxlen or 0

    @property
    def latest(self) -> Sample | None:
        return self._samples[-1] if self._samples else None

    def push(self, sample: Sample) -> None:
        """Append *sample*, evicting the oldest entry when full."""
        self._samples.append(sample)

    def snapshot(self) -> list[Sample]:
        """Current contents in arrival order (returns a copy)."""
        return list(self._samples)

    def reset(self) -> None:
        """Drop all history."""
        self._samples.clear()
