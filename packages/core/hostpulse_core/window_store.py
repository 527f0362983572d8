"""Fixed-capacity sliding windows, one per metric stream."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass

WINDOW_CAPACITY = 20
DEFAULT_COLOR = "#A9B5D1"


@dataclass(frozen=True)
class StreamMeta:
    label: str
    color: str = DEFAULT_COLOR
    chart: str = "utilization"
    hidden: bool = False


class MetricStream:
    """Ordered samples for one key; the oldest sample is evicted first."""

    def __init__(self, key: str, meta: StreamMeta, capacity: int) -> None:
        self.key = key
        self.meta = meta
        self._samples: deque[float] = deque(maxlen=capacity)

    @property
    def samples(self) -> tuple[float, ...]:
        return tuple(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def push(self, value: float) -> None:
        self._samples.append(float(value))


class WindowStore:
    """Owns every ``MetricStream``.

    A single writer (the sampling loop) mutates the store; readers get
    immutable copies from :meth:`snapshot_all`. Streams shorter than the
    capacity are returned as-is, padding is left to chart consumers.
    """

    def __init__(self, capacity: int = WINDOW_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"window capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._streams: dict[str, MetricStream] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._streams

    def __len__(self) -> int:
        return len(self._streams)

    def keys(self) -> list[str]:
        return list(self._streams)

    def append(self, key: str, value: float, meta: StreamMeta | None = None, backfill: int = 0) -> MetricStream:
        """Push ``value`` onto ``key``, creating the stream on first use.

        ``backfill`` zeros are inserted ahead of the value only when the
        stream is created, so a late stream can line up with older ones.
        """
        stream = self._streams.get(key)
        if stream is None:
            stream = MetricStream(key, meta or StreamMeta(label=key), self.capacity)
            for _ in range(max(0, backfill)):
                stream.push(0.0)
            self._streams[key] = stream
        stream.push(value)
        return stream

    def remove_stream(self, key: str) -> bool:
        return self._streams.pop(key, None) is not None

    def samples(self, key: str) -> tuple[float, ...]:
        stream = self._streams.get(key)
        return stream.samples if stream is not None else ()

    def meta(self, key: str) -> StreamMeta | None:
        stream = self._streams.get(key)
        return stream.meta if stream is not None else None

    def meta_all(self) -> dict[str, StreamMeta]:
        return {key: stream.meta for key, stream in self._streams.items()}

    def snapshot_all(self) -> dict[str, tuple[float, ...]]:
        return {key: stream.samples for key, stream in self._streams.items()}
