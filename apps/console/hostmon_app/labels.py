"""Text labels for a metrics snapshot."""

from __future__ import annotations

from hostmon_telemetry import MetricsSnapshot, MetricStatus

PENDING_TEXT = "Calculating..."
UNAVAILABLE_TEXT = "N/A"

_GIB = 1024.0 * 1024 * 1024


def _placeholder(status: MetricStatus) -> str:
    return PENDING_TEXT if status == MetricStatus.PENDING else UNAVAILABLE_TEXT


def cpu_label(snap: MetricsSnapshot) -> str:
    cpu = snap.cpu
    if cpu.status != MetricStatus.OK:
        return f"CPU Usage: {_placeholder(cpu.status)}"
    return f"CPU Usage: {cpu.percent:.2f}%"


def memory_label(snap: MetricsSnapshot) -> str:
    mem = snap.memory
    if mem.status != MetricStatus.OK:
        return f"Memory Usage: {_placeholder(mem.status)}"
    r = mem.reading
    return f"Memory Usage: {mem.percent:.2f}% ({r.used_kb / 1024.0:.2f} MB / {r.total_kb / 1024.0:.2f} MB)"


def disk_label(snap: MetricsSnapshot) -> str:
    disk = snap.disk
    if disk.status != MetricStatus.OK:
        return f"Disk Usage: {_placeholder(disk.status)}"
    r = disk.reading
    return f"Disk Usage: {disk.percent:.2f}% ({r.used_bytes / _GIB:.2f} GB / {r.total_bytes / _GIB:.2f} GB)"


def gpu_labels(snap: MetricsSnapshot) -> tuple[str, str]:
    gpu = snap.gpu
    if gpu.status != MetricStatus.OK:
        text = _placeholder(gpu.status)
        return f"GPU Usage: {text}", f"GPU Temperature: {text}"
    r = gpu.reading
    return f"GPU Usage: {r.utilization_percent:g}%", f"GPU Temperature: {r.temperature_c:g}°C"


def format_lines(snap: MetricsSnapshot) -> list[str]:
    return [cpu_label(snap), memory_label(snap), disk_label(snap), *gpu_labels(snap)]
