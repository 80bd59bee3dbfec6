"""hostmon command line entry point."""

import argparse
import logging
import sys

import uvicorn

from hostmon.api import create_app
from hostmon.app import HostmonApp
from hostmon.config import Settings, get_settings
from hostmon.exceptions import ConfigError
from hostmon.logs import setup_logging
from hostmon.monitor import SystemMonitor
from hostmon.store import SnapshotStore

log = logging.getLogger("hostmon")

# The dashboard owns the terminal, so its log output goes here unless
# HOSTMON_LOG_FILE names another file.
DEFAULT_TOP_LOG_FILE = "logs/hostmon.log"


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="hostmon")
    p.add_argument("--log-level", type=str, default=None, help="Override HOSTMON_LOG_LEVEL")
    p.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between samples (overrides HOSTMON_POLL_INTERVAL)",
    )
    sub = p.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Serve the latest snapshot over HTTP")
    serve.add_argument("--host", type=str, default=None)
    serve.add_argument("--port", type=int, default=None)

    sub.add_parser("top", help="Show the latest snapshot in a terminal dashboard")
    return p.parse_args(argv)


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    overrides = {
        "log_level": args.log_level,
        "poll_interval": args.interval,
        "host": getattr(args, "host", None),
        "port": getattr(args, "port", None),
    }
    merged = {**settings.model_dump(), **{k: v for k, v in overrides.items() if v is not None}}
    try:
        return Settings.model_validate(merged)
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc


def build_monitor(settings: Settings) -> SystemMonitor:
    return SystemMonitor(
        settings.build_sampler(),
        SnapshotStore(),
        poll_rate=settings.poll_interval,
    )


def serve(settings: Settings) -> None:
    monitor = build_monitor(settings)
    monitor.start()
    try:
        log.info("Starting server on http://%s:%d", settings.host, settings.port)
        uvicorn.run(
            create_app(monitor.store),
            host=settings.host,
            port=settings.port,
            log_config=None,
        )
    finally:
        monitor.stop()


def top(settings: Settings) -> None:
    HostmonApp(build_monitor(settings)).run()


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    try:
        settings = _apply_overrides(get_settings(), args)
    except ConfigError as exc:
        print(f"hostmon: invalid configuration: {exc}", file=sys.stderr)
        return 2

    log_file = settings.log_file
    if args.command == "top" and not log_file:
        log_file = DEFAULT_TOP_LOG_FILE
    setup_logging(
        settings.log_level,
        log_file=log_file,
        console=args.command != "top",
    )

    if args.command == "serve":
        serve(settings)
    else:
        top(settings)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
