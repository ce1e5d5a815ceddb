"""GPU data sources: the nvidia-smi query command and NVML."""

from __future__ import annotations

import logging
import subprocess
from typing import Callable, Protocol

from .errors import ParseError, SourceUnavailable
from .models import GpuReading
from .parsers import parse_gpu_csv

GPU_QUERY_FIELDS = ("utilization.gpu", "temperature.gpu")

_log = logging.getLogger("hostmon.telemetry")


class GpuSource(Protocol):
    name: str

    def query(self) -> GpuReading:
        ...


class NvidiaSmiGpuSource:
    """Runs ``nvidia-smi`` once per query and parses its CSV output.

    The call blocks until the tool exits. ``timeout_s`` is None by default, so
    a hung tool stalls the caller; set it to bound the wait.
    """

    name = "nvidia-smi"

    def __init__(
        self,
        command: str = "nvidia-smi",
        index: int = 0,
        timeout_s: float | None = None,
        runner: Callable[..., subprocess.CompletedProcess] = subprocess.run,
    ) -> None:
        self.command = command
        self.index = index
        self.timeout_s = timeout_s
        self._run = runner

    def argv(self) -> list[str]:
        return [
            self.command,
            f"--query-gpu={','.join(GPU_QUERY_FIELDS)}",
            "--format=csv",
            "-i",
            str(self.index),
        ]

    def read_query_output(self) -> str:
        try:
            proc = self._run(
                self.argv(),
                check=False,
                capture_output=True,
                encoding="utf-8",
                timeout=self.timeout_s,
            )
        except FileNotFoundError as exc:
            raise SourceUnavailable(f"{self.command} not found") from exc
        except subprocess.TimeoutExpired as exc:
            raise SourceUnavailable(f"{self.command} timed out after {self.timeout_s}s") from exc
        except OSError as exc:
            raise SourceUnavailable(f"{self.command} failed to start: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise ParseError(f"{self.command} output is not valid UTF-8: {exc.reason}") from exc

        if proc.returncode != 0:
            msg = f"{self.command} exited with {proc.returncode}"
            stderr = (proc.stderr or "").strip()
            raise SourceUnavailable(f"{msg}: {stderr}" if stderr else msg)
        return proc.stdout

    def query(self) -> GpuReading:
        return parse_gpu_csv(self.read_query_output())


class NvmlGpuSource:
    name = "nvml"

    def __init__(self, index: int = 0) -> None:
        try:
            import pynvml  # type: ignore
        except ImportError as exc:
            raise SourceUnavailable("pynvml is not installed") from exc

        self._nvml = pynvml
        self.index = index
        try:
            pynvml.nvmlInit()
        except pynvml.NVMLError as exc:
            raise SourceUnavailable(f"NVML init failed: {exc}") from exc

    def query(self) -> GpuReading:
        nvml = self._nvml
        try:
            h = nvml.nvmlDeviceGetHandleByIndex(self.index)
            util = nvml.nvmlDeviceGetUtilizationRates(h)
            temp = nvml.nvmlDeviceGetTemperature(h, nvml.NVML_TEMPERATURE_GPU)
        except nvml.NVMLError as exc:
            raise SourceUnavailable(f"NVML query failed: {exc}") from exc
        return GpuReading(utilization_percent=float(util.gpu), temperature_c=float(temp))

    def close(self) -> None:
        try:
            self._nvml.nvmlShutdown()
        except self._nvml.NVMLError:
            _log.debug("nvml shutdown failed", exc_info=True)


def build_gpu_source(
    backend: str = "nvidia-smi",
    command: str = "nvidia-smi",
    index: int = 0,
    timeout_s: float | None = None,
) -> GpuSource | None:
    """Return a GPU source for ``backend`` or None when GPU sampling is off.

    ``nvml`` falls back to the query command when NVML cannot initialize.
    """
    if backend == "none":
        return None
    if backend == "nvml":
        try:
            return NvmlGpuSource(index=index)
        except SourceUnavailable as exc:
            _log.info("nvml unavailable, using %s: %s", command, exc, extra={"event": "gpu_backend_fallback"})
    return NvidiaSmiGpuSource(command=command, index=index, timeout_s=timeout_s)
