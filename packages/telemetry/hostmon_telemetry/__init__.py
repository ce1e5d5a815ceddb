"""Host metrics sampling for hostmon."""

from .errors import ArithmeticDegenerate, ParseError, RatePending, SourceUnavailable, TelemetryError
from .gpu import GpuSource, NvidiaSmiGpuSource, NvmlGpuSource, build_gpu_source
from .models import (
    CpuMetrics,
    CpuTicks,
    DiskMetrics,
    DiskReading,
    FilesystemStats,
    GpuMetrics,
    GpuReading,
    MemoryMetrics,
    MemoryReading,
    MetricsSnapshot,
    MetricStatus,
)
from .parsers import (
    compute_disk_reading,
    disk_usage_percent,
    memory_usage_percent,
    parse_cpu_ticks,
    parse_gpu_csv,
    parse_meminfo,
)
from .rate import RateState, cpu_usage_percent
from .sampler import MetricsSampler
from .sources import ProcSourceReader

__all__ = [
    "ArithmeticDegenerate",
    "CpuMetrics",
    "CpuTicks",
    "DiskMetrics",
    "DiskReading",
    "FilesystemStats",
    "GpuMetrics",
    "GpuReading",
    "GpuSource",
    "MemoryMetrics",
    "MemoryReading",
    "MetricStatus",
    "MetricsSampler",
    "MetricsSnapshot",
    "NvidiaSmiGpuSource",
    "NvmlGpuSource",
    "ParseError",
    "ProcSourceReader",
    "RatePending",
    "RateState",
    "SourceUnavailable",
    "TelemetryError",
    "build_gpu_source",
    "compute_disk_reading",
    "cpu_usage_percent",
    "disk_usage_percent",
    "memory_usage_percent",
    "parse_cpu_ticks",
    "parse_gpu_csv",
    "parse_meminfo",
]
