"""Doctor payload describing which metric sources this host provides."""

from __future__ import annotations

import os
import platform
import shutil
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from hostmon_telemetry import NvmlGpuSource, SourceUnavailable

from .config import AppConfig, config_path
from .logging_setup import log_dir


def _probe_file(path: Path) -> dict[str, Any]:
    return {"path": str(path), "readable": os.access(path, os.R_OK)}


def _probe_nvml(index: int) -> dict[str, Any]:
    try:
        source = NvmlGpuSource(index=index)
    except SourceUnavailable as exc:
        return {"available": False, "error": str(exc)}
    try:
        source.query()
        return {"available": True, "error": None}
    except SourceUnavailable as exc:
        return {"available": False, "error": str(exc)}
    finally:
        source.close()


def build_doctor_payload(cfg: AppConfig) -> dict[str, Any]:
    proc_root = Path(cfg.sampler.proc_root)
    return {
        "ts_utc": datetime.now(timezone.utc).isoformat(),
        "platform": platform.platform(),
        "python": platform.python_version(),
        "config_path": str(config_path()),
        "log_dir": str(log_dir()),
        "config": asdict(cfg),
        "sources": {
            "cpu": _probe_file(proc_root / "stat"),
            "memory": _probe_file(proc_root / "meminfo"),
            "disk": {
                "path": cfg.sampler.mount_path,
                "exists": os.path.exists(cfg.sampler.mount_path),
                "statvfs": hasattr(os, "statvfs"),
            },
            "gpu": {
                "backend": cfg.sampler.gpu_backend,
                "command": shutil.which(cfg.sampler.gpu_command),
                "nvml": _probe_nvml(cfg.sampler.gpu_index),
            },
        },
    }
