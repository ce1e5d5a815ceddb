"""Single-flight sampling loop with overrun tracking and adaptive interval hints."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from hostmon_telemetry import MetricsSampler, MetricsSnapshot, ProcSourceReader, build_gpu_source

from .config import SamplerConfig
from .logging_setup import get_logger
from .performance import PerformanceController


@dataclass
class LoopStatus:
    running: bool = False
    samples: int = 0
    skipped: int = 0
    overruns: int = 0
    interval_ms: int = 1000
    last_duration_s: float = 0.0
    last_snapshot: MetricsSnapshot | None = None


def build_sampler(cfg: SamplerConfig) -> MetricsSampler:
    gpu = build_gpu_source(
        backend=cfg.gpu_backend,
        command=cfg.gpu_command,
        index=cfg.gpu_index,
        timeout_s=cfg.gpu_timeout_s,
    )
    return MetricsSampler(
        reader=ProcSourceReader(cfg.proc_root),
        gpu_source=gpu,
        mount_path=cfg.mount_path,
        gpu_enabled=gpu is not None,
    )


class SamplingLoop:
    """Calls ``sampler.sample()`` once per interval from a single control loop.

    ``tick`` never runs concurrently with itself: a tick that arrives while
    another is in flight is counted as skipped. The sleep after each pass is
    ``interval - elapsed``, so a pass slower than the interval starts the next
    one immediately and is counted as an overrun.
    """

    def __init__(
        self,
        sampler: MetricsSampler,
        interval_ms: int = 1000,
        on_snapshot: Callable[[MetricsSnapshot], None] | None = None,
        performance: PerformanceController | None = None,
        adaptive: bool = False,
    ) -> None:
        self.sampler = sampler
        self.base_interval_ms = interval_ms
        self.on_snapshot = on_snapshot
        self.performance = performance
        self.adaptive = adaptive

        self._status = LoopStatus(interval_ms=interval_ms)
        self._flight = threading.Lock()
        self._stop = threading.Event()
        self._events: list[dict[str, Any]] = []
        self._logger = get_logger()

    @property
    def status(self) -> LoopStatus:
        return self._status

    @property
    def interval_ms(self) -> int:
        return self._status.interval_ms

    def recent_events(self, limit: int = 200) -> list[dict[str, Any]]:
        return self._events[-limit:]

    def _log_event(self, event: str, **fields: Any) -> None:
        row = {"ts_utc": datetime.now(timezone.utc).isoformat(), "event": event}
        row.update(fields)
        self._events.append(row)
        if len(self._events) > 1000:
            self._events = self._events[-1000:]

    def tick(self) -> MetricsSnapshot | None:
        if not self._flight.acquire(blocking=False):
            self._status.skipped += 1
            self._log_event("tick_skipped")
            self._logger.debug("sampling pass still in flight, tick skipped", extra={"event": "tick_skipped"})
            return None

        try:
            start = time.perf_counter()
            snap = self.sampler.sample()
            duration = time.perf_counter() - start

            self._status.samples += 1
            self._status.last_duration_s = duration
            self._status.last_snapshot = snap
            if duration * 1000.0 > self._status.interval_ms:
                self._status.overruns += 1
                self._log_event("overrun", duration_s=duration, interval_ms=self._status.interval_ms)
                self._logger.warning(
                    "sampling pass took %.3fs, longer than the %dms interval",
                    duration,
                    self._status.interval_ms,
                    extra={"event": "sampling_overrun", "duration_s": duration},
                )

            if self.adaptive and self.performance is not None:
                self._apply_budget(duration)

            if self.on_snapshot is not None:
                self.on_snapshot(snap)
            return snap
        finally:
            self._flight.release()

    def _apply_budget(self, duration: float) -> None:
        budget = self.performance.sample(duration, self._status.interval_ms, self.base_interval_ms)
        if budget.recommended_interval_ms != self._status.interval_ms:
            self._log_event(
                "interval_change",
                old_ms=self._status.interval_ms,
                new_ms=budget.recommended_interval_ms,
                warning=budget.warning,
            )
            self._logger.info(
                "sampling interval %dms -> %dms (%s)",
                self._status.interval_ms,
                budget.recommended_interval_ms,
                budget.warning or "within budget",
                extra={"event": "interval_change"},
            )
            self._status.interval_ms = budget.recommended_interval_ms

    def run(self, count: int | None = None) -> int:
        """Sample until ``stop()`` is called or ``count`` passes have run."""
        self._stop.clear()
        self._status.running = True
        self._log_event("loop_start", interval_ms=self._status.interval_ms)
        done = 0
        try:
            while not self._stop.is_set():
                started = time.monotonic()
                if self.tick() is not None:
                    done += 1
                if count is not None and done >= count:
                    break
                elapsed = time.monotonic() - started
                if self._stop.wait(max(self._status.interval_ms / 1000.0 - elapsed, 0.0)):
                    break
        finally:
            self._status.running = False
            self._log_event("loop_stop", samples=done)
        return done

    def stop(self) -> None:
        self._stop.set()
