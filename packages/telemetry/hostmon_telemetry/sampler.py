"""Single-pass metrics sampler with per-metric failure isolation."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from .errors import RatePending, TelemetryError
from .gpu import GpuSource, NvidiaSmiGpuSource
from .models import (
    CpuMetrics,
    DiskMetrics,
    GpuMetrics,
    MemoryMetrics,
    MetricsSnapshot,
    MetricStatus,
)
from .parsers import (
    compute_disk_reading,
    disk_usage_percent,
    memory_usage_percent,
    parse_cpu_ticks,
    parse_meminfo,
)
from .rate import RateState
from .sources import ProcSourceReader

_log = logging.getLogger("hostmon.telemetry")


class MetricsSampler:
    """Produces one ``MetricsSnapshot`` per ``sample()`` call.

    Each metric is read, parsed and derived independently; a failure in one
    only marks that slot unavailable. CPU usage is a rate between consecutive
    calls on the same instance, so the first call reports it as pending.
    Instances are not thread-safe.

    Without an explicit ``gpu_source`` the ``nvidia-smi`` query command is
    used; ``gpu_enabled=False`` turns GPU sampling off.
    """

    def __init__(
        self,
        reader: ProcSourceReader | None = None,
        gpu_source: GpuSource | None = None,
        mount_path: str = "/",
        gpu_enabled: bool = True,
    ) -> None:
        self.reader = reader or ProcSourceReader()
        if gpu_source is None and gpu_enabled:
            gpu_source = NvidiaSmiGpuSource()
        self.gpu_source = gpu_source
        self.mount_path = mount_path
        self.rate = RateState()
        self._sequence = 0
        self._degraded: set[str] = set()

    def sample(self) -> MetricsSnapshot:
        self._sequence += 1
        return MetricsSnapshot(
            sequence=self._sequence,
            timestamp=datetime.now(timezone.utc),
            cpu=self._sample_cpu(),
            memory=self._sample_memory(),
            disk=self._sample_disk(),
            gpu=self._sample_gpu(),
        )

    def close(self) -> None:
        """Release the GPU source (NVML holds a library handle)."""
        close = getattr(self.gpu_source, "close", None)
        if close is not None:
            close()

    def _sample_cpu(self) -> CpuMetrics:
        try:
            ticks = parse_cpu_ticks(self.reader.read_cpu_stat_line())
            percent = self.rate.advance(ticks)
        except RatePending:
            return CpuMetrics(status=MetricStatus.PENDING)
        except TelemetryError as exc:
            self._degrade("cpu", exc)
            return CpuMetrics(status=MetricStatus.UNAVAILABLE, error=str(exc))
        self._recover("cpu")
        return CpuMetrics(status=MetricStatus.OK, percent=percent)

    def _sample_memory(self) -> MemoryMetrics:
        reading = None
        try:
            reading = parse_meminfo(self.reader.read_meminfo())
            percent = memory_usage_percent(reading)
        except TelemetryError as exc:
            self._degrade("memory", exc)
            return MemoryMetrics(status=MetricStatus.UNAVAILABLE, reading=reading, error=str(exc))
        self._recover("memory")
        return MemoryMetrics(status=MetricStatus.OK, reading=reading, percent=percent)

    def _sample_disk(self) -> DiskMetrics:
        reading = None
        try:
            st = self.reader.read_filesystem_stats(self.mount_path)
            reading = compute_disk_reading(st.blocks, st.fragment_size, st.available_blocks)
            percent = disk_usage_percent(reading)
        except TelemetryError as exc:
            self._degrade("disk", exc)
            return DiskMetrics(
                status=MetricStatus.UNAVAILABLE,
                mount_path=self.mount_path,
                reading=reading,
                error=str(exc),
            )
        self._recover("disk")
        return DiskMetrics(status=MetricStatus.OK, mount_path=self.mount_path, reading=reading, percent=percent)

    def _sample_gpu(self) -> GpuMetrics:
        source = self.gpu_source
        if source is None:
            return GpuMetrics(status=MetricStatus.UNAVAILABLE, error="gpu sampling disabled")
        try:
            reading = source.query()
        except TelemetryError as exc:
            self._degrade("gpu", exc)
            return GpuMetrics(status=MetricStatus.UNAVAILABLE, source=source.name, error=str(exc))
        self._recover("gpu")
        return GpuMetrics(status=MetricStatus.OK, reading=reading, source=source.name)

    def _degrade(self, metric: str, exc: TelemetryError) -> None:
        if metric in self._degraded:
            _log.debug("%s still unavailable: %s", metric, exc)
            return
        self._degraded.add(metric)
        _log.warning(
            "%s unavailable: %s",
            metric,
            exc,
            extra={"event": "metric_unavailable", "metric": metric, "error_type": type(exc).__name__},
        )

    def _recover(self, metric: str) -> None:
        if metric in self._degraded:
            self._degraded.discard(metric)
            _log.info("%s recovered", metric, extra={"event": "metric_recovered", "metric": metric})

