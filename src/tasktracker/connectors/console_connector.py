# src/tasktracker/connectors/console_connector.py

from __future__ import annotations

import logging
import sys
import threading
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState

logger = logging.getLogger(__name__)

CONSOLE_OWNER = "console"


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _rewrite_prev_line(line: str) -> None:
    """
    Replace the last terminal line with `line`.
    Best-effort: if not a TTY, just print a new line.
    """
    try:
        if sys.stdout.isatty():
            sys.stdout.write("\033[1A\033[2K\r")
            sys.stdout.write(line + "\n")
            sys.stdout.flush()
        else:
            print(line)
    except OSError:
        print(line)


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleNotifier:
    """Delivers reminders owned by the local console user by printing them."""

    def __init__(self, owner: str = CONSOLE_OWNER) -> None:
        self.owner = owner
        self._print_lock = threading.Lock()

    def handles(self, owner: str) -> bool:
        return owner == self.owner

    async def notify(self, owner: str, text: str) -> bool:
        if not self.handles(owner):
            return False
        # Called from the service thread while the REPL may be waiting on input().
        with self._print_lock:
            print()
            _print_ts(text)
        return True


def run_console_loop(state: AppState, owner: str = CONSOLE_OWNER) -> None:
    logger.info("Console connector started (owner=%s).", owner)
    _print_ts("[CONSOLE] Type /help for commands. Use /exit to quit.\n")

    while True:
        try:
            user_input = input(">>> You: ").strip()
            _rewrite_prev_line(f"[{_ts_local()}] >>> You: {user_input}")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            resp = command_registry.handle(state, user_input, owner=owner)
        except Exception:
            logger.exception("Command handler crashed.")
            resp = "Internal error while handling a command."

        if resp is None:
            resp = "Commands start with '/'. Use /help to list available commands."

        _print_ts(resp)

    logger.info("Console connector finished.")
