# src/tasktracker/core/notify.py

from __future__ import annotations

import logging
from collections.abc import Iterable

from .ports import RoutedNotifier

logger = logging.getLogger(__name__)


class NotifierRouter:
    """
    Fan-in notifier for the scheduler.

    Each reminder goes to the first registered notifier that handles its owner id
    (Matrix room ids, the console owner, ...). Unroutable owners count as a failed delivery.
    """

    def __init__(self, notifiers: Iterable[RoutedNotifier] = ()) -> None:
        self._notifiers: list[RoutedNotifier] = list(notifiers)

    def add(self, notifier: RoutedNotifier) -> None:
        self._notifiers.append(notifier)

    def handles(self, owner: str) -> bool:
        return any(n.handles(owner) for n in self._notifiers)

    async def notify(self, owner: str, text: str) -> bool:
        for n in self._notifiers:
            if n.handles(owner):
                return await n.notify(owner, text)
        logger.warning("No notifier handles owner=%s", owner)
        return False
