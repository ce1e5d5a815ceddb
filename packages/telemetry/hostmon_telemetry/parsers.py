"""Parsers that turn raw kernel text and tool output into typed readings."""

from __future__ import annotations

import math

from .errors import ArithmeticDegenerate, ParseError
from .models import CpuTicks, DiskReading, GpuReading, MemoryReading

CPU_TICK_FIELDS = ("user", "nice", "system", "idle", "iowait", "irq", "softirq")

_MEMINFO_KEYS = {
    "MemTotal": "total_kb",
    "MemFree": "free_kb",
    "MemAvailable": "available_kb",
}


def _parse_counter(token: str, field: str) -> int:
    # int() alone also takes "+5", "1_000" and non-ASCII digits.
    if not (token.isascii() and token.isdigit()):
        raise ParseError(f"non-numeric {field} field: {token!r}")
    return int(token)


def parse_cpu_ticks(line: str) -> CpuTicks:
    """Parse the aggregate ``cpu`` line of ``/proc/stat``.

    The leading label is skipped and the first seven counters are used; any
    trailing counters (steal, guest, ...) are ignored.
    """
    tokens = line.split()
    fields = tokens[1:]
    if len(fields) < len(CPU_TICK_FIELDS):
        raise ParseError(f"expected {len(CPU_TICK_FIELDS)} cpu fields, got {len(fields)}")

    values = {name: _parse_counter(tok, name) for name, tok in zip(CPU_TICK_FIELDS, fields)}
    return CpuTicks(**values)


def parse_meminfo(text: str) -> MemoryReading:
    """Parse ``/proc/meminfo``.

    Missing keys stay at zero. A kernel without ``MemAvailable`` therefore
    reports every kilobyte as used.
    """
    values: dict[str, int] = {}
    for line in text.splitlines():
        parts = line.split()
        if len(parts) < 2 or not parts[0].endswith(":"):
            continue
        attr = _MEMINFO_KEYS.get(parts[0][:-1])
        if attr is None:
            continue
        values[attr] = _parse_counter(parts[1], parts[0][:-1])
    return MemoryReading(**values)


def compute_disk_reading(blocks: int, fragment_size: int, available_blocks: int) -> DiskReading:
    return DiskReading(
        total_bytes=blocks * fragment_size,
        free_bytes=available_blocks * fragment_size,
    )


def parse_gpu_csv(text: str) -> GpuReading:
    """Parse ``nvidia-smi --format=csv`` output for utilization and temperature.

    Expected shape::

        utilization.gpu [%], temperature.gpu
        45 %, 62
    """
    lines = text.splitlines()
    if len(lines) < 2:
        raise ParseError("gpu query output has no data line")

    fields = lines[1].split(",")
    if len(fields) != 2:
        raise ParseError(f"expected 2 gpu fields, got {len(fields)}")

    util_raw, temp_raw = ("".join(f.split()) for f in fields)
    if util_raw.endswith("%"):
        util_raw = util_raw[:-1]
    try:
        util, temp = float(util_raw), float(temp_raw)
    except ValueError:
        raise ParseError(f"non-numeric gpu data line: {lines[1]!r}") from None
    if not (math.isfinite(util) and math.isfinite(temp)):
        raise ParseError(f"non-finite gpu data line: {lines[1]!r}")
    return GpuReading(utilization_percent=util, temperature_c=temp)


def memory_usage_percent(reading: MemoryReading) -> float:
    if reading.total_kb == 0:
        raise ArithmeticDegenerate("MemTotal is zero")
    return 100.0 * reading.used_kb / reading.total_kb


def disk_usage_percent(reading: DiskReading) -> float:
    if reading.total_bytes == 0:
        raise ArithmeticDegenerate("filesystem reports zero size")
    return 100.0 * reading.used_bytes / reading.total_bytes
