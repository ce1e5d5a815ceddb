"""Core app services for settings, logging, the sampling loop, and diagnostics."""

from .config import AppConfig, load_config, save_config
from .diagnostics import build_doctor_payload
from .performance import BudgetStatus, PerformanceController, PerformanceTargets
from .scheduler import LoopStatus, SamplingLoop, build_sampler

__all__ = [
    "AppConfig",
    "BudgetStatus",
    "LoopStatus",
    "PerformanceController",
    "PerformanceTargets",
    "SamplingLoop",
    "build_doctor_payload",
    "build_sampler",
    "load_config",
    "save_config",
]
