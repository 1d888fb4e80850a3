import asyncio
from collections.abc import Callable, Sequence

import pytest

from plivetv.models import Character, ChatMessage, Episode, Series, Trigger


class FakeTimer:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeTimers:
    """Manual clock standing in for loop.call_later."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[FakeTimer] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds: float) -> None:
        self.now += seconds
        for timer in list(self.timers):
            if not timer.cancelled and timer.due <= self.now:
                self.timers.remove(timer)
                timer.callback()


class StubCompletion:
    """Completion backend returning canned replies and recording every call.

    A reply that is an Exception instance is raised instead of returned.
    Set ``gate`` to an asyncio.Event to hold calls until it is set.
    """

    def __init__(self, *replies: str | Exception) -> None:
        self.replies = list(replies)
        self.calls: list[tuple[list[ChatMessage], str, str]] = []
        self.gate: asyncio.Event | None = None

    async def __call__(
        self, history: Sequence[ChatMessage], message: str, system_context: str
    ) -> str:
        self.calls.append((list(history), message, system_context))
        if self.gate is not None:
            await self.gate.wait()
        reply = self.replies.pop(0) if self.replies else "ok"
        if isinstance(reply, Exception):
            raise reply
        return reply


PRIYANK = Character(id="priyank", name="Priyank", persona="Charming, witty, caught in a dilemma.")
ARZOO = Character(id="arzoo", name="Arzoo", persona="Observant, mysterious, slightly guarded.")


@pytest.fixture
def series() -> Series:
    """Three-episode series with two characters."""
    episodes = tuple(
        Episode(
            id=n,
            label=f"Episode 0{n}",
            url=f"https://cdn.example/ep{n}.mp4",
            triggers=(
                Trigger(character="priyank", label=f"Back Priyank up {n}", hook=f"Priyank hook {n}"),
                Trigger(character="arzoo", label=f"Ask Arzoo {n}", hook=f"Arzoo hook {n}"),
            ),
        )
        for n in (1, 2, 3)
    )
    return Series(
        id="heart-beats",
        title="Heart Beats",
        characters=(PRIYANK, ARZOO),
        episodes=episodes,
    )


@pytest.fixture
def timers() -> FakeTimers:
    return FakeTimers()


@pytest.fixture
def stub_completion() -> StubCompletion:
    return StubCompletion()
