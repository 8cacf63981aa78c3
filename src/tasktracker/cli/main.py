# src/tasktracker/cli/main.py

"""
CLI entrypoint.

Loads settings (fatal on missing required fields), initializes logging, builds AppState, then starts:
- background services (reminder scheduler + Matrix connector) in a daemon thread,
- console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import sys
import threading

from ..cli.bootstrap import create_initial_state
from ..cli.runner import ServiceRunner, start_services_in_background
from ..config import ConfigError, get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    try:
        settings = get_settings()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    level_name = str(settings.log_level).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.log_dir, console_level=console_level)

    logging.getLogger("nio").setLevel(max(console_level, logging.INFO))
    logging.getLogger("aiohttp").setLevel(logging.WARNING)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)

    runner: ServiceRunner | None = start_services_in_background(state)
    if runner is None:
        state.close()
        sys.exit(1)

    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            # The REPL relies on KeyboardInterrupt, so handlers are only installed without it.
            try:
                signal.signal(signal.SIGINT, _handle_signal)
                signal.signal(signal.SIGTERM, _handle_signal)
            except (ValueError, OSError):
                pass
            logger.info("Console disabled. Running background services only. Press Ctrl+C to stop.")
            stop_main.wait()

    finally:
        runner.stop()
        runner.join(timeout=10.0)
        state.close()
        logger.info("Bye.")


if __name__ == "__main__":
    main()
