"""Self-monitoring budget and interval tuning hints."""

from __future__ import annotations

from dataclasses import dataclass

import psutil


MIN_INTERVAL_MS = 100
MAX_INTERVAL_MS = 60000


@dataclass(frozen=True)
class PerformanceTargets:
    cpu_percent_max: float = 5.0
    rss_mb_max: float = 100.0
    duty_cycle_max: float = 0.5


@dataclass(frozen=True)
class BudgetStatus:
    cpu_percent: float
    rss_mb: float
    duty_cycle: float
    overloaded: bool
    warning: str | None
    recommended_interval_ms: int


class PerformanceController:
    """Watches the monitor's own footprint.

    ``duty_cycle`` is the share of the interval spent inside ``sample()``. A
    slow GPU query tool is the usual reason it climbs.
    """

    def __init__(self, targets: PerformanceTargets | None = None, process: psutil.Process | None = None) -> None:
        self.targets = targets or PerformanceTargets()
        self._process = process or psutil.Process()
        # Prime non-blocking CPU measurement.
        self._process.cpu_percent(interval=None)

    def sample(self, duration_s: float, interval_ms: int, base_interval_ms: int | None = None) -> BudgetStatus:
        cpu = float(self._process.cpu_percent(interval=None))
        rss_mb = float(self._process.memory_info().rss) / (1024 * 1024)
        duty = max(duration_s, 0.0) * 1000.0 / max(interval_ms, 1)

        warning = None
        rec = interval_ms
        floor = base_interval_ms or MIN_INTERVAL_MS

        if duty > self.targets.duty_cycle_max:
            warning = "sampling_overrun"
            needed = int(duration_s * 1000.0 / self.targets.duty_cycle_max) + 1
            rec = max(needed, int(interval_ms * 1.25))
        elif cpu > self.targets.cpu_percent_max or rss_mb > self.targets.rss_mb_max:
            warning = "resource_overload"
            rec = int(interval_ms * 1.25) + 25
        elif interval_ms > floor and duty < self.targets.duty_cycle_max / 4:
            rec = max(floor, interval_ms - 100)

        return BudgetStatus(
            cpu_percent=cpu,
            rss_mb=rss_mb,
            duty_cycle=duty,
            overloaded=warning is not None,
            warning=warning,
            recommended_interval_ms=max(MIN_INTERVAL_MS, min(MAX_INTERVAL_MS, rec)),
        )
