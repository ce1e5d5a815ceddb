"""Retained CPU counters and pairwise rate computation."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ArithmeticDegenerate, RatePending
from .models import CpuTicks


def cpu_usage_percent(prev_idle: int, prev_total: int, ticks: CpuTicks) -> float:
    total_diff = ticks.total - prev_total
    idle_diff = ticks.idle_total - prev_idle
    if total_diff == 0:
        raise ArithmeticDegenerate("no cpu ticks elapsed between samples")
    return 100.0 * (total_diff - idle_diff) / total_diff


@dataclass
class RateState:
    """Previous-sample CPU counters owned by one sampler.

    Not thread-safe: concurrent ``advance`` calls must be serialized by the
    caller. Counter wraparound is not detected; a wrapped counter yields an
    out-of-range percentage for one pass.
    """

    prev_idle: int = 0
    prev_total: int = 0

    @property
    def primed(self) -> bool:
        return self.prev_total != 0

    def advance(self, ticks: CpuTicks) -> float:
        try:
            if not self.primed:
                raise RatePending("cpu usage needs a second sample")
            return cpu_usage_percent(self.prev_idle, self.prev_total, ticks)
        finally:
            self.prev_idle = ticks.idle_total
            self.prev_total = ticks.total
