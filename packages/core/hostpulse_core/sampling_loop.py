"""Sampling loop: acquire, normalize, append to windows, publish."""

from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Callable, Mapping

from hostpulse_telemetry import AcquisitionTimeout, SnapshotUnavailable, SystemSnapshot, acquire_snapshot
from hostpulse_telemetry.models import RawProviderSnapshot

from .config import AppConfig
from .logging_setup import get_logger
from .window_store import StreamMeta, WindowStore

DEFAULT_INTERVAL_MS = 1000

PROCESSOR_USAGE = "processor.usage"
MEMORY_USAGE = "memory.usage"
STORAGE_USAGE = "storage.usage"
PROCESSOR_TEMPERATURE = "processor.temperature"
GPU_USAGE = "gpu.usage"
GPU_TEMPERATURE = "gpu.temperature"

STREAMS: dict[str, StreamMeta] = {
    PROCESSOR_USAGE: StreamMeta("Processor", "#3B82F6"),
    MEMORY_USAGE: StreamMeta("Memory", "#EF4444"),
    STORAGE_USAGE: StreamMeta("Storage", "#10B981", hidden=True),
    PROCESSOR_TEMPERATURE: StreamMeta("Processor Temperature", "#3B82F6", chart="temperature"),
    GPU_USAGE: StreamMeta("GPU", "#8B5CF6"),
    GPU_TEMPERATURE: StreamMeta("GPU Temperature", "#8B5CF6", chart="temperature"),
}

AcquireRaw = Callable[[], RawProviderSnapshot]
UpdateHandler = Callable[[SystemSnapshot, Mapping[str, tuple[float, ...]]], None]
ErrorHandler = Callable[[str], None]


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class PublishedState:
    snapshot: SystemSnapshot
    windows: Mapping[str, tuple[float, ...]]
    streams: Mapping[str, StreamMeta]
    tick: int
    published_utc: str


@dataclass
class LoopStatus:
    running: bool = False
    interval_ms: int = DEFAULT_INTERVAL_MS
    ticks_ok: int = 0
    ticks_failed: int = 0
    ticks_skipped: int = 0
    last_error: str | None = None
    last_success_utc: str | None = None


@dataclass
class _Consumer:
    on_update: UpdateHandler
    on_error: ErrorHandler | None = None


class SamplingLoop:
    """Drives periodic sampling into a :class:`WindowStore`.

    One worker thread runs a single logical timer. A cycle that overruns the
    interval defers the following tick to the next free slot, so at most one
    acquisition is ever in flight. Failed ticks append nothing and are
    reported through ``on_error``; the timer keeps running.

    With ``acquire_timeout_ms`` set, the provider call runs on a single
    worker and a tick fails with :class:`AcquisitionTimeout` when it does not
    answer in time. While that call is still stuck, later ticks fail fast
    instead of stacking a second acquisition behind it.
    """

    def __init__(
        self,
        store: WindowStore | None = None,
        acquire_timeout_ms: int | None = None,
        drop_absent_gpu: bool = False,
    ) -> None:
        self.store = store if store is not None else WindowStore()
        self.acquire_timeout_ms = acquire_timeout_ms or None
        self.drop_absent_gpu = drop_absent_gpu

        self._logger = get_logger()
        self._lock = threading.RLock()
        self._cycle_lock = threading.Lock()
        self._consumers: list[_Consumer] = []
        self._status = LoopStatus()
        self._latest: PublishedState | None = None
        self._events: list[dict[str, Any]] = []

        self._acquire_raw: AcquireRaw | None = None
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._generation = 0
        self._executor: ThreadPoolExecutor | None = None
        self._pending: Future | None = None

    @classmethod
    def from_config(cls, cfg: AppConfig) -> SamplingLoop:
        return cls(
            store=WindowStore(cfg.sampling.window_capacity),
            acquire_timeout_ms=cfg.acquire_timeout,
            drop_absent_gpu=cfg.sampling.drop_absent_gpu,
        )

    @property
    def status(self) -> LoopStatus:
        with self._lock:
            return replace(self._status)

    @property
    def latest(self) -> PublishedState | None:
        return self._latest

    @property
    def running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def recent_events(self, limit: int = 200) -> list[dict[str, Any]]:
        with self._lock:
            return self._events[-limit:]

    def _log_event(self, event: str, **fields: Any) -> None:
        row = {"ts_utc": _utc_now(), "event": event}
        row.update(fields)
        with self._lock:
            self._events.append(row)
            if len(self._events) > 1000:
                self._events = self._events[-1000:]

    def add_consumer(self, on_update: UpdateHandler, on_error: ErrorHandler | None = None) -> None:
        with self._lock:
            self._consumers.append(_Consumer(on_update, on_error))

    def remove_consumer(self, on_update: UpdateHandler) -> bool:
        with self._lock:
            before = len(self._consumers)
            self._consumers = [c for c in self._consumers if c.on_update is not on_update]
            return len(self._consumers) != before

    def start(self, interval_ms: int, acquire_raw: AcquireRaw) -> None:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        with self._lock:
            if self.running:
                raise RuntimeError("sampling loop already running")
            self._acquire_raw = acquire_raw
            self._stop_event = threading.Event()
            self._status.running = True
            self._status.interval_ms = interval_ms
            self._thread = threading.Thread(
                target=self._run,
                args=(interval_ms / 1000.0, acquire_raw, self._generation, self._stop_event),
                name="hostpulse-sampler",
                daemon=True,
            )
            self._thread.start()
        self._logger.info("sampling loop started", extra={"event": "loop_started"})
        self._log_event("loop_started", interval_ms=interval_ms)

    def stop(self, join_timeout: float | None = 5.0) -> None:
        """Cancel the timer; an in-flight cycle finishes but is discarded."""
        with self._lock:
            thread = self._thread
            self._thread = None
            self._generation += 1
            self._stop_event.set()
            self._status.running = False
            executor = self._executor
            self._executor = None
            self._pending = None

        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)
        if thread is not None and thread is not threading.current_thread():
            thread.join(join_timeout)
        self._logger.info("sampling loop stopped", extra={"event": "loop_stopped"})
        self._log_event("loop_stopped")

    def tick(self, acquire_raw: AcquireRaw | None = None) -> bool:
        """Run one full cycle synchronously; ``True`` when it published."""
        acquire = acquire_raw or self._acquire_raw
        if acquire is None:
            raise RuntimeError("no acquisition callable given to tick() or start()")
        with self._lock:
            generation = self._generation
        return self._cycle(acquire, generation)

    def _run(self, interval_s: float, acquire: AcquireRaw, generation: int, stop_event: threading.Event) -> None:
        next_due = time.monotonic()
        while not stop_event.is_set():
            self._cycle(acquire, generation)
            next_due += interval_s
            now = time.monotonic()
            if now > next_due:
                missed = int((now - next_due) // interval_s) + 1
                next_due += missed * interval_s
                with self._lock:
                    self._status.ticks_skipped += missed
                self._log_event("ticks_skipped", count=missed)
            stop_event.wait(next_due - now)

    def _cycle(self, acquire: AcquireRaw, generation: int) -> bool:
        with self._cycle_lock:
            try:
                snapshot = self._acquire(acquire)
            except SnapshotUnavailable as exc:
                return self._fail(str(exc), generation)
            except Exception as exc:
                self._logger.exception("acquisition raised unexpectedly", extra={"event": "tick_crashed"})
                return self._fail(f"unexpected {type(exc).__name__}: {exc}", generation)
            return self._commit(snapshot, generation)

    def _acquire(self, acquire: AcquireRaw) -> SystemSnapshot:
        if self.acquire_timeout_ms is None:
            return acquire_snapshot(acquire)

        with self._lock:
            if self._pending is not None and not self._pending.done():
                raise AcquisitionTimeout("previous acquisition is still pending")
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="hostpulse-acquire")
            pending = self._executor.submit(acquire_snapshot, acquire)
            self._pending = pending

        try:
            return pending.result(timeout=self.acquire_timeout_ms / 1000.0)
        except FutureTimeout as exc:
            raise AcquisitionTimeout(f"acquisition exceeded {self.acquire_timeout_ms} ms") from exc

    def _append(self, snapshot: SystemSnapshot) -> None:
        store = self.store
        first_disk = snapshot.storage[0].usage_percent if snapshot.storage else 0
        store.append(PROCESSOR_USAGE, snapshot.processor.usage_percent, STREAMS[PROCESSOR_USAGE])
        store.append(MEMORY_USAGE, snapshot.memory.usage_percent, STREAMS[MEMORY_USAGE])
        store.append(STORAGE_USAGE, first_disk, STREAMS[STORAGE_USAGE])
        store.append(PROCESSOR_TEMPERATURE, snapshot.processor.temperature_c, STREAMS[PROCESSOR_TEMPERATURE])

        gpu = snapshot.gpu
        if gpu is not None:
            # Zero history for the ticks before the GPU stream existed.
            backfill = len(store.samples(PROCESSOR_USAGE)) - 1
            for key, value in ((GPU_USAGE, gpu.usage_percent), (GPU_TEMPERATURE, gpu.temperature_c)):
                if key not in store:
                    self._logger.info(f"stream added: {key}", extra={"event": "stream_added", "key": key})
                    self._log_event("stream_added", key=key, backfill=backfill)
                store.append(key, value, STREAMS[key], backfill=backfill)
        elif self.drop_absent_gpu:
            for key in (GPU_USAGE, GPU_TEMPERATURE):
                if store.remove_stream(key):
                    self._logger.info(f"stream removed: {key}", extra={"event": "stream_removed", "key": key})
                    self._log_event("stream_removed", key=key)
        else:
            for key in (GPU_USAGE, GPU_TEMPERATURE):
                if key in store:
                    store.append(key, 0.0)

    def _commit(self, snapshot: SystemSnapshot, generation: int) -> bool:
        with self._lock:
            if generation != self._generation:
                self._log_event("tick_discarded")
                return False
            self._append(snapshot)
            now = _utc_now()
            self._status.ticks_ok += 1
            self._status.last_error = None
            self._status.last_success_utc = now
            state = PublishedState(
                snapshot=snapshot,
                windows=MappingProxyType(self.store.snapshot_all()),
                streams=MappingProxyType(self.store.meta_all()),
                tick=self._status.ticks_ok,
                published_utc=now,
            )
            self._latest = state
            consumers = list(self._consumers)

        for consumer in consumers:
            try:
                consumer.on_update(state.snapshot, state.windows)
            except Exception:
                self._logger.exception("consumer update failed", extra={"event": "consumer_error"})
        return True

    def _fail(self, reason: str, generation: int) -> bool:
        with self._lock:
            if generation != self._generation:
                self._log_event("tick_discarded", error=reason)
                return False
            self._status.ticks_failed += 1
            self._status.last_error = reason
            consumers = list(self._consumers)

        self._logger.warning(f"tick failed: {reason}", extra={"event": "tick_failed"})
        self._log_event("tick_failed", error=reason)
        for consumer in consumers:
            if consumer.on_error is None:
                continue
            try:
                consumer.on_error(reason)
            except Exception:
                self._logger.exception("consumer error handler failed", extra={"event": "consumer_error"})
        return False
