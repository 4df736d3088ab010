"""Command-line interface for the link checker."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from typing import Callable, List, Optional

from . import check_site_async
from .cli_config import load_config
from .cli_parsers import parse_check_args
from .config import CheckConfig, ConfigError, build_config
from .report import (
    EXIT_CANCELLED,
    EXIT_ERROR,
    exit_code,
    write_json_report,
    write_report,
)


def _setup_logging(verbose: bool) -> None:
    # Without --verbose only fatal problems reach stderr
    level = logging.DEBUG if verbose else logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(max(level, logging.WARNING))


def _install_interrupt_handler(
    loop: asyncio.AbstractEventLoop, stop_event: asyncio.Event
) -> Callable[[], None]:
    """Route SIGINT to *stop_event*; returns a callable that undoes it."""
    try:
        loop.add_signal_handler(signal.SIGINT, stop_event.set)
    except NotImplementedError:
        # Event loops without add_signal_handler (Windows)
        previous = signal.signal(
            signal.SIGINT,
            lambda signum, frame: loop.call_soon_threadsafe(stop_event.set),
        )
        return lambda: signal.signal(signal.SIGINT, previous)
    return lambda: loop.remove_signal_handler(signal.SIGINT)


def _config_from_args(args: argparse.Namespace) -> CheckConfig:
    return build_config(
        args.url,
        crawlers=args.crawlers,
        exclude=args.exclude,
        timeout=args.timeout,
        user_agent=args.user_agent,
        verbose=args.verbose,
        json_output=args.json_output,
    )


async def _run_check_async(config: CheckConfig) -> int:
    """Main async entry point for a check run."""
    stop_event = asyncio.Event()
    restore = _install_interrupt_handler(asyncio.get_running_loop(), stop_event)
    try:
        logging.info("Checking %s with %d crawlers", config.root, config.crawlers)
        result = await check_site_async(
            config.root,
            crawlers=config.crawlers,
            excludes=config.excludes,
            timeout=config.timeout,
            user_agent=config.user_agent,
            stop_event=stop_event,
        )
    finally:
        restore()

    if result.cancelled:
        logging.warning("Interrupted; reporting partial results")

    if config.json_output:
        write_json_report(result, sys.stdout)
    else:
        write_report(result.defects, sys.stdout)
    sys.stdout.flush()

    return exit_code(result.defects, result.cancelled)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point for the linkcheck command."""
    load_config()
    args = parse_check_args(argv)
    _setup_logging(args.verbose)

    try:
        config = _config_from_args(args)
    except ConfigError as exc:
        logging.error("Configuration error: %s", exc)
        return EXIT_ERROR

    try:
        return asyncio.run(_run_check_async(config))
    except KeyboardInterrupt:
        logging.info("Interrupted")
        return EXIT_CANCELLED
    except Exception as exc:
        logging.error("Error: %s", exc)
        if args.verbose:
            logging.exception("Full traceback:")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
