"""Persistent settings schema and load/save helpers."""

from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any


CONFIG_VERSION = 1
GPU_BACKENDS = ("nvidia-smi", "nvml", "none")


@dataclass
class SamplerConfig:
    mount_path: str = "/"
    proc_root: str = "/proc"
    gpu_backend: str = "nvidia-smi"
    gpu_command: str = "nvidia-smi"
    gpu_index: int = 0
    gpu_timeout_s: float | None = None


@dataclass
class PollConfig:
    interval_ms: int = 1000
    adaptive: bool = False


@dataclass
class DiagnosticsConfig:
    keep_log_files: int = 7


@dataclass
class PerformanceConfig:
    cpu_percent_max: float = 5.0
    rss_mb_max: float = 100.0
    duty_cycle_max: float = 0.5


@dataclass
class AppConfig:
    config_version: int = CONFIG_VERSION
    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    poll: PollConfig = field(default_factory=PollConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)
    performance: PerformanceConfig = field(default_factory=PerformanceConfig)


def config_root() -> Path:
    system = platform.system()
    if system == "Windows":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / "hostmon"
    if system == "Darwin":
        return Path.home() / "Library" / "Application Support" / "hostmon"
    base = os.environ.get("XDG_CONFIG_HOME")
    return (Path(base) if base else Path.home() / ".config") / "hostmon"


def config_path() -> Path:
    return Path(os.environ["HOSTMON_CONFIG"]) if os.environ.get("HOSTMON_CONFIG") else config_root() / "config.json"


def _merge(dataclass_type, raw: dict[str, Any]):
    defaults = dataclass_type()  # type: ignore[misc]
    if not isinstance(raw, dict):
        return defaults
    for k, v in raw.items():
        if hasattr(defaults, k):
            setattr(defaults, k, v)
    return defaults


def _normalize_sampler(cfg: AppConfig) -> None:
    s = cfg.sampler
    if s.gpu_backend not in GPU_BACKENDS:
        s.gpu_backend = "nvidia-smi"
    s.gpu_index = max(0, int(s.gpu_index))
    if s.gpu_timeout_s is not None:
        s.gpu_timeout_s = float(s.gpu_timeout_s) if float(s.gpu_timeout_s) > 0 else None
    s.mount_path = str(s.mount_path or "/")
    s.proc_root = str(s.proc_root or "/proc")


def _normalize_poll(cfg: AppConfig) -> None:
    cfg.poll.interval_ms = max(100, min(60000, int(cfg.poll.interval_ms)))
    cfg.poll.adaptive = bool(cfg.poll.adaptive)


def _normalize_performance(cfg: AppConfig) -> None:
    cfg.performance.cpu_percent_max = float(max(0.5, cfg.performance.cpu_percent_max))
    cfg.performance.rss_mb_max = float(max(16.0, cfg.performance.rss_mb_max))
    cfg.performance.duty_cycle_max = float(min(1.0, max(0.05, cfg.performance.duty_cycle_max)))


def normalize(cfg: AppConfig) -> AppConfig:
    _normalize_sampler(cfg)
    _normalize_poll(cfg)
    _normalize_performance(cfg)
    cfg.diagnostics.keep_log_files = max(2, int(cfg.diagnostics.keep_log_files))
    return cfg


def load_config(path: Path | None = None) -> AppConfig:
    path = path or config_path()
    if not path.exists():
        return AppConfig()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return AppConfig()
    if not isinstance(data, dict):
        return AppConfig()

    try:
        cfg = AppConfig(
            config_version=int(data.get("config_version", CONFIG_VERSION)),
            sampler=_merge(SamplerConfig, data.get("sampler", {})),
            poll=_merge(PollConfig, data.get("poll", {})),
            diagnostics=_merge(DiagnosticsConfig, data.get("diagnostics", {})),
            performance=_merge(PerformanceConfig, data.get("performance", {})),
        )
        return normalize(cfg)
    except (TypeError, ValueError):
        return AppConfig()


def save_config(cfg: AppConfig, path: Path | None = None) -> Path:
    cfg.config_version = CONFIG_VERSION
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(asdict(cfg), indent=2, sort_keys=True), encoding="utf-8")
    return path
