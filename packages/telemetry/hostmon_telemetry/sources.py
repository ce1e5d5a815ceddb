"""Raw readers for kernel counters and filesystem statistics."""

from __future__ import annotations

import os
from pathlib import Path

from .errors import ParseError, SourceUnavailable
from .models import FilesystemStats


class ProcSourceReader:
    """Reads ``/proc`` files and ``statvfs`` results without interpreting them."""

    def __init__(self, proc_root: str | Path = "/proc") -> None:
        self.proc_root = Path(proc_root)

    def _read_text(self, name: str) -> str:
        path = self.proc_root / name
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SourceUnavailable(f"cannot read {path}: {exc.strerror or exc}") from exc
        except UnicodeDecodeError as exc:
            raise ParseError(f"{path} is not valid UTF-8: {exc.reason}") from exc

    def read_cpu_stat_line(self) -> str:
        path = self.proc_root / "stat"
        try:
            with path.open("r", encoding="utf-8") as f:
                line = f.readline()
        except OSError as exc:
            raise SourceUnavailable(f"cannot read {path}: {exc.strerror or exc}") from exc
        except UnicodeDecodeError as exc:
            raise ParseError(f"{path} is not valid UTF-8: {exc.reason}") from exc
        if not line:
            raise SourceUnavailable(f"{path} is empty")
        return line

    def read_meminfo(self) -> str:
        return self._read_text("meminfo")

    def read_filesystem_stats(self, path: str | Path = "/") -> FilesystemStats:
        try:
            st = os.statvfs(path)
        except (OSError, AttributeError) as exc:
            # AttributeError: os.statvfs does not exist on Windows.
            raise SourceUnavailable(f"statvfs({path}) failed: {exc}") from exc
        return FilesystemStats(
            blocks=st.f_blocks,
            fragment_size=st.f_frsize,
            available_blocks=st.f_bavail,
        )
