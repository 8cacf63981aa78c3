# src/tasktracker/cli/runner.py

"""
Background services: the reminder scheduler and (optionally) the Matrix connector.

Both run as asyncio tasks on one event loop owned by a daemon thread, so the
blocking console REPL can keep the main thread.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass

from ..connectors.console_connector import ConsoleNotifier
from ..core.notify import NotifierRouter
from ..core.state import AppState
from ..tasks.task_scheduler import ReminderScheduler

logger = logging.getLogger(__name__)


def build_scheduler(state: AppState, notifier: NotifierRouter) -> ReminderScheduler:
    settings = state.settings
    return ReminderScheduler(
        state.task_store,
        notifier,
        persist=state.save,
        interval_seconds=getattr(settings, "scheduler_interval_seconds", 60.0),
        max_attempts=getattr(settings, "notify_max_attempts", 5),
    )


async def run_services(state: AppState, stop_event: asyncio.Event) -> None:
    """
    init -> scheduler -> Matrix sync loop (or idle) until stop_event.
    """
    settings = state.settings
    router = NotifierRouter()

    if getattr(settings, "console_enabled", False):
        router.add(ConsoleNotifier())

    client = None
    if getattr(settings, "matrix_enabled", False):
        from ..connectors.matrix_client import create_matrix_client
        from ..connectors.matrix_connector import MatrixNotifier

        client = await create_matrix_client(settings)
        if client is None:
            logger.error("Matrix client creation failed; Matrix reminders will not be delivered.")
        else:
            router.add(MatrixNotifier(client))

    scheduler = build_scheduler(state, router)
    scheduler_task = asyncio.create_task(scheduler.run())

    try:
        if client is not None:
            from ..connectors.matrix_connector import run_matrix_connector

            await run_matrix_connector(state, client, stop_event)
        await stop_event.wait()
    finally:
        scheduler_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await scheduler_task
        if client is not None:
            with contextlib.suppress(Exception):
                await client.close()
        logger.info("Background services stopped.")


@dataclass
class ServiceRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except RuntimeError:
            logger.debug("Service loop already closed.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_services_in_background(state: AppState) -> ServiceRunner | None:
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(run_services(state, stop_event))
        except Exception:
            logger.exception("Background services crashed.")
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="tasktracker-services", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Service thread did not initialize properly.")
        return None

    logger.info("Background services started.")
    return ServiceRunner(thread=t, loop=loop, stop_event=stop_event)
