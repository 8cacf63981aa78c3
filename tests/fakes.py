# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class SentMessage:
    owner: str
    text: str


@dataclass(slots=True)
class FakeNotifier:
    """
    Fake Notifier used by scheduler tests.

    - owners in `failing` get False back (delivery failed)
    - owners in `raising` make notify() raise
    - everything else is recorded in `sent`
    """

    sent: list[SentMessage] = field(default_factory=list)
    failing: set[str] = field(default_factory=set)
    raising: set[str] = field(default_factory=set)
    prefix: str = ""

    def handles(self, owner: str) -> bool:
        return owner.startswith(self.prefix)

    async def notify(self, owner: str, text: str) -> bool:
        if owner in self.raising:
            raise ConnectionError(f"transport down for {owner}")
        if owner in self.failing:
            return False
        self.sent.append(SentMessage(owner=owner, text=text))
        return True
