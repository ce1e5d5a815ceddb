"""Typed telemetry models."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class MetricStatus(str, Enum):
    OK = "ok"
    UNAVAILABLE = "unavailable"
    PENDING = "pending"


@dataclass(frozen=True)
class CpuTicks:
    user: int
    nice: int
    system: int
    idle: int
    iowait: int
    irq: int
    softirq: int

    @property
    def total(self) -> int:
        return self.user + self.nice + self.system + self.idle + self.iowait + self.irq + self.softirq

    @property
    def idle_total(self) -> int:
        return self.idle + self.iowait


@dataclass(frozen=True)
class MemoryReading:
    total_kb: int = 0
    free_kb: int = 0
    available_kb: int = 0

    @property
    def used_kb(self) -> int:
        return self.total_kb - self.available_kb


@dataclass(frozen=True)
class FilesystemStats:
    blocks: int
    fragment_size: int
    available_blocks: int


@dataclass(frozen=True)
class DiskReading:
    total_bytes: int
    free_bytes: int

    @property
    def used_bytes(self) -> int:
        return self.total_bytes - self.free_bytes


@dataclass(frozen=True)
class GpuReading:
    utilization_percent: float
    temperature_c: float


@dataclass(frozen=True)
class CpuMetrics:
    status: MetricStatus
    percent: float | None = None
    error: str | None = None


@dataclass(frozen=True)
class MemoryMetrics:
    status: MetricStatus
    reading: MemoryReading | None = None
    percent: float | None = None
    error: str | None = None


@dataclass(frozen=True)
class DiskMetrics:
    status: MetricStatus
    mount_path: str = "/"
    reading: DiskReading | None = None
    percent: float | None = None
    error: str | None = None


@dataclass(frozen=True)
class GpuMetrics:
    status: MetricStatus
    reading: GpuReading | None = None
    source: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class MetricsSnapshot:
    sequence: int
    timestamp: datetime
    cpu: CpuMetrics
    memory: MemoryMetrics
    disk: DiskMetrics
    gpu: GpuMetrics

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        for key in ("cpu", "memory", "disk", "gpu"):
            data[key]["status"] = getattr(self, key).status.value
        return data
