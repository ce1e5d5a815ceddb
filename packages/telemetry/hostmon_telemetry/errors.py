"""Error taxonomy for metric sources, parsers, and rate computation."""

from __future__ import annotations


class TelemetryError(Exception):
    """Base class for failures confined to a single metric."""


class SourceUnavailable(TelemetryError):
    """A raw source could not be read (missing file, syscall failure, tool absent)."""


class ParseError(TelemetryError, ValueError):
    """Raw source content did not have the expected shape."""


class ArithmeticDegenerate(TelemetryError, ZeroDivisionError):
    """A derived value would divide by zero (same-tick CPU samples, zero-size filesystem)."""


class RatePending(TelemetryError):
    """A rate metric has no baseline yet."""
