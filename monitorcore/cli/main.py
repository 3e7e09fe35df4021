# monitorcore/cli/main.py
import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from monitorcore.api import build_monitor
from monitorcore.config import MonitorConfig, load_config, log_level, validate_config
from monitorcore.core.channel import ChannelCall
from monitorcore.core.errors import FatalSessionError, MonitorError

logger = logging.getLogger("monitorcore.cli")


def _load(args) -> MonitorConfig:
    """Load config file, then apply command-line overrides"""
    config = load_config(Path(args.config) if args.config else None)

    monitor = config.monitor
    if getattr(args, "steps", None):
        monitor = replace(monitor, steps=tuple(args.steps))

    runner = config.runner
    if getattr(args, "timeout", None) is not None:
        runner = replace(runner, step_timeout_s=args.timeout)

    channel = config.channel
    if getattr(args, "channel", None):
        channel = replace(channel, factory=args.channel)
    if getattr(args, "script", None):
        channel = replace(channel, script=tuple(args.script))

    logging_section = config.logging
    if getattr(args, "log_level", None):
        logging_section = replace(logging_section, level=args.log_level)

    return config.with_overrides(monitor=monitor, runner=runner, channel=channel, logging=logging_section)


def _setup_logging(config: MonitorConfig) -> None:
    # stderr only: stdout may belong to the wire transport
    logging.basicConfig(level=log_level(config), format=config.logging.format, stream=sys.stderr)


def _echo(call: ChannelCall) -> None:
    if call.kind == "get_step":
        line = f"<- step {call.payload}" if call.payload is not None else "<- exit"
    elif call.payload is None:
        line = f"-> {call.kind}"
    else:
        line = f"-> {call.kind} {call.payload}"
    print(line, flush=True)


def _check(config: MonitorConfig) -> bool:
    issues = validate_config(config)
    for issue in issues:
        if issue.level == "error":
            logger.error("%s", issue)
        else:
            logger.warning("%s", issue)
    return not any(i.level == "error" for i in issues)


def run_monitor(args) -> int:
    try:
        config = _load(args)
    except MonitorError as e:
        logging.basicConfig(stream=sys.stderr)
        logger.error("%s", e)
        return 1

    _setup_logging(config)
    if not _check(config):
        return 1

    try:
        echo = _echo if not config.channel.factory else None
        monitor = build_monitor(config, echo=echo)
        summary = asyncio.run(monitor.run())
    except FatalSessionError as e:
        logger.error("Session aborted: %s", e)
        return 1
    except MonitorError as e:
        logger.error("%s", e)
        return 1

    return summary.exit_code


def list_steps(args) -> int:
    try:
        config = _load(args)
        monitor = build_monitor(config)
    except MonitorError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    registry = monitor.registry
    if not len(registry):
        print("No steps registered")
        return 0

    width = max(len(n) for n in registry.list())
    for name in registry.list():
        doc = registry.describe(name).get("doc", "")
        print(f"{name:<{width}}  {doc}".rstrip())
    return 0


def show_config(args) -> int:
    try:
        config = _load(args)
    except MonitorError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(config.to_dict(), indent=2))
    issues = validate_config(config)
    for issue in issues:
        print(str(issue), file=sys.stderr)
    return 1 if any(i.level == "error" for i in issues) else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="monitorcore",
        description="Run monitor steps on behalf of an orchestrator",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_common(p):
        p.add_argument("--config", help="YAML config file (default: ~/.monitorcore/config.yml if present)")
        p.add_argument("--steps", nargs="+", metavar="PATH", help="Step provider import paths (module:attr)")

    # run
    run_p = subparsers.add_parser("run", help="Run one monitor session")
    add_common(run_p)
    run_p.add_argument("--channel", metavar="PATH", help="Channel factory import path (module:attr)")
    run_p.add_argument("--script", nargs="+", metavar="STEP", help="Steps for the scripted channel (dry run)")
    run_p.add_argument("--timeout", type=float, help="Per-step watchdog timeout in seconds")
    run_p.add_argument("--log-level", help="Log level (DEBUG, INFO, ...)")
    run_p.set_defaults(func=run_monitor)

    # list
    list_p = subparsers.add_parser("list", help="List registered steps")
    add_common(list_p)
    list_p.set_defaults(func=list_steps)

    # config
    config_p = subparsers.add_parser("config", help="Show effective configuration")
    add_common(config_p)
    config_p.set_defaults(func=show_config)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
