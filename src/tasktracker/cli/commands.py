# src/tasktracker/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from ..core.state import AppState
from ..tasks.task_api import ReminderFormatError, add_reminder, delete_reminder, list_reminders

CommandHandler = Callable[[AppState, list[str], str], str]

logger = logging.getLogger(__name__)

ADD_USAGE = "Invalid format. Use: /add HH:mm Text"


class CommandRegistry:
    """Simple slash-command registry used by connectors (/add, /list, /delete, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._maxsplit: dict[str, int] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        maxsplit: int = -1,
    ) -> None:
        """
        maxsplit limits how many leading arguments are split off; the remainder is
        passed as the last argument with its inner whitespace intact.
        """
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        self._maxsplit[key] = maxsplit
        for alias in aliases:
            self._handlers[alias.lower()] = handler
            self._maxsplit[alias.lower()] = maxsplit

    def handle(self, state: AppState, line: str, owner: str) -> str | None:
        """
        Handle a string like "/command args" on behalf of owner.
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split(None, 1)
        if not parts:
            return "Empty command. Use /help to list available commands."

        # Telegram-style "/cmd@botname" is accepted too.
        name = parts[0].split("@", 1)[0].lower()

        handler = self._handlers.get(name)
        if not handler:
            return f"❌ Unknown command: /{name}. Use /help to list available commands."

        rest = parts[1].strip() if len(parts) > 1 else ""
        args = rest.split(None, self._maxsplit.get(name, -1)) if rest else []

        return handler(state, args, owner)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _format_when(when: datetime, now: datetime) -> str:
    if when.date() == now.date():
        return f"{when:%H:%M}"
    if when.date() == now.date() + timedelta(days=1):
        return f"{when:%H:%M} (tomorrow)"
    return f"{when:%Y-%m-%d %H:%M}"


def cmd_start(state: AppState, args: list[str], owner: str) -> str:
    return (
        "👋 Welcome to the reminder bot!\n\n"
        "Available commands:\n"
        "/add HH:mm Text - add a reminder\n"
        "/list - show all reminders\n"
        "/delete Number - delete a reminder\n"
        "/help - show help"
    )


def cmd_help(state: AppState, args: list[str], owner: str) -> str:
    return (
        registry.build_help()
        + "\n\nExamples:\n"
        "  /add 14:30 Call mom\n"
        "  /delete 3"
    )


def cmd_add(state: AppState, args: list[str], owner: str) -> str:
    """
    /add HH:mm Text -> schedule a reminder today (or tomorrow if the time has passed)

    Registered with maxsplit=1, so args is [time, body] and the body keeps its spacing.
    """
    if len(args) < 2:
        return ADD_USAGE

    try:
        task = add_reminder(state, owner, args[0], args[1])
    except ReminderFormatError as e:
        logger.debug("Rejected /add from %s: %s", owner, e)
        return ADD_USAGE

    return f"✅ Reminder #{task.id} added for {_format_when(task.remind_at, datetime.now())}."


def cmd_list(state: AppState, args: list[str], owner: str) -> str:
    tasks = list_reminders(state, owner)
    if not tasks:
        return "📭 No active reminders."

    now = datetime.now()
    lines = ["📋 Your reminders:"]
    for t in tasks:
        lines.append(f"🕒 {_format_when(t.remind_at, now)}")
        lines.append(f"🔹 #{t.id}: {t.text}")
    return "\n".join(lines)


def cmd_delete(state: AppState, args: list[str], owner: str) -> str:
    """
    /delete N -> delete your reminder #N
    """
    if not args:
        return "Usage: /delete Number"

    try:
        task_id = int(args[0].lstrip("#"))
    except ValueError:
        return "❌ Reminder not found."

    if delete_reminder(state, owner, task_id):
        return f"✅ Reminder #{task_id} deleted."
    return "❌ Reminder not found."


registry.register("start", cmd_start, help_text="Show the welcome message.")
registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Add a reminder: /add HH:mm Text.", maxsplit=1)
registry.register("list", cmd_list, help_text="Show your active reminders.")
registry.register(
    "delete", cmd_delete, help_text="Delete a reminder by number: /delete N.", aliases=["del", "remove"]
)
