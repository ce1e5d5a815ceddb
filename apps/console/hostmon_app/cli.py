"""CLI entrypoints for the hostmon console monitor and diagnostics."""

from __future__ import annotations

import argparse
import json
import time
from dataclasses import asdict

from hostmon_core import (
    PerformanceController,
    PerformanceTargets,
    SamplingLoop,
    build_doctor_payload,
    build_sampler,
    load_config,
)
from hostmon_core.config import GPU_BACKENDS, AppConfig, config_path, normalize
from hostmon_core.logging_setup import configure_logging, get_logger, install_crash_hooks
from hostmon_telemetry import MetricsSnapshot

from .labels import format_lines


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _print_panel(snap: MetricsSnapshot) -> None:
    print("\n".join(format_lines(snap)), flush=True)
    print(flush=True)


def _effective_config(args: argparse.Namespace) -> AppConfig:
    cfg = load_config()
    if getattr(args, "interval_ms", None) is not None:
        cfg.poll.interval_ms = args.interval_ms
    if getattr(args, "mount", None):
        cfg.sampler.mount_path = args.mount
    if getattr(args, "gpu_backend", None):
        cfg.sampler.gpu_backend = args.gpu_backend
    if getattr(args, "gpu_timeout", None) is not None:
        cfg.sampler.gpu_timeout_s = args.gpu_timeout
    if getattr(args, "adaptive", False):
        cfg.poll.adaptive = True
    return normalize(cfg)


def cmd_watch(args: argparse.Namespace) -> int:
    install_crash_hooks()
    cfg = _effective_config(args)
    perf = None
    if cfg.poll.adaptive:
        perf = PerformanceController(
            PerformanceTargets(
                cpu_percent_max=cfg.performance.cpu_percent_max,
                rss_mb_max=cfg.performance.rss_mb_max,
                duty_cycle_max=cfg.performance.duty_cycle_max,
            )
        )
    sampler = build_sampler(cfg.sampler)
    loop = SamplingLoop(
        sampler,
        interval_ms=cfg.poll.interval_ms,
        on_snapshot=_print_panel,
        performance=perf,
        adaptive=cfg.poll.adaptive,
    )
    try:
        loop.run(count=args.count)
    except KeyboardInterrupt:
        loop.stop()
    finally:
        sampler.close()
    status = loop.status
    get_logger().info(
        "watch finished samples=%d skipped=%d overruns=%d",
        status.samples,
        status.skipped,
        status.overruns,
        extra={"event": "watch_finished"},
    )
    if args.summary:
        _print_json(
            {
                "samples": status.samples,
                "skipped": status.skipped,
                "overruns": status.overruns,
                "interval_ms": status.interval_ms,
                "last_duration_s": status.last_duration_s,
                "events": loop.recent_events(limit=50),
            }
        )
    return 0


def cmd_snapshot(args: argparse.Namespace) -> int:
    cfg = _effective_config(args)
    sampler = build_sampler(cfg.sampler)
    try:
        # CPU usage is a rate; the first pass only establishes the baseline.
        sampler.sample()
        time.sleep(cfg.poll.interval_ms / 1000.0)
        snap = sampler.sample()
    finally:
        sampler.close()

    if args.json:
        _print_json(snap.to_dict())
    else:
        print("\n".join(format_lines(snap)))
    return 0


def cmd_doctor(_args: argparse.Namespace) -> int:
    _print_json(build_doctor_payload(load_config()))
    return 0


def cmd_config_show(_args: argparse.Namespace) -> int:
    payload = asdict(load_config())
    payload["path"] = str(config_path())
    _print_json(payload)
    return 0


def _add_sampling_args(cmd: argparse.ArgumentParser) -> None:
    cmd.add_argument("--interval-ms", type=int, default=None, help="Sampling interval in milliseconds")
    cmd.add_argument("--mount", default=None, help="Filesystem path for disk usage")
    cmd.add_argument("--gpu-backend", choices=list(GPU_BACKENDS), default=None)
    cmd.add_argument("--gpu-timeout", type=float, default=None, help="Seconds to wait for the GPU query tool")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hostmon", description="Host CPU, memory, disk, and GPU monitor")
    sub = parser.add_subparsers(dest="command", required=True)

    watch_cmd = sub.add_parser("watch", help="Print metrics every interval")
    _add_sampling_args(watch_cmd)
    watch_cmd.add_argument("--count", type=int, default=None, help="Stop after this many samples")
    watch_cmd.add_argument("--adaptive", action="store_true", help="Back off the interval when sampling is slow")
    watch_cmd.add_argument("--summary", action="store_true", help="Print loop counters and recent events on exit")
    watch_cmd.set_defaults(func=cmd_watch)

    snap_cmd = sub.add_parser("snapshot", help="Print one computed snapshot")
    _add_sampling_args(snap_cmd)
    snap_cmd.add_argument("--json", action="store_true", help="Print the snapshot as JSON")
    snap_cmd.set_defaults(func=cmd_snapshot)

    doctor_cmd = sub.add_parser("doctor", help="Print platform and metric source availability")
    doctor_cmd.set_defaults(func=cmd_doctor)

    config_cmd = sub.add_parser("config", help="Settings")
    config_sub = config_cmd.add_subparsers(dest="config_cmd", required=True)
    show_cmd = config_sub.add_parser("show", help="Print effective settings")
    show_cmd.set_defaults(func=cmd_config_show)

    return parser


def main(argv: list[str] | None = None) -> int:
    cfg = load_config()
    configure_logging(keep_files=cfg.diagnostics.keep_log_files, console=False)
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
