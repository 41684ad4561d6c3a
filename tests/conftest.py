import asyncio
import random

import pytest

from guessword.config import RoundSettings
from guessword.game import GameSession


@pytest.fixture
def anyio_backend():
    return "asyncio"


class FakeChannel:
    """Stands in for a WebSocket: records what the server sends."""

    def __init__(self, fail: bool = False):
        self.sent: list[dict] = []
        self.fail = fail
        self.closed: int | None = None
        # hold delivery of one event type until the gate is opened
        self.gate: asyncio.Event | None = None
        self.gate_type: str | None = None

    async def send_json(self, data: dict) -> None:
        if self.fail:
            raise RuntimeError("socket is closed")
        if self.gate is not None and data["type"] == self.gate_type:
            await self.gate.wait()
        self.sent.append(data)

    async def close(self, code: int = 1000) -> None:
        self.closed = code

    def types(self) -> list[str]:
        return [message["type"] for message in self.sent]

    def of_type(self, msg_type: str) -> list[dict]:
        return [message for message in self.sent if message["type"] == msg_type]

    def last(self, msg_type: str) -> dict:
        return self.of_type(msg_type)[-1]


class FakeWordSource:
    def __init__(self, words=None, error: Exception | None = None, gate: asyncio.Event | None = None):
        self.words = list(words or ["house"])
        self.error = error
        self.gate = gate
        self.calls = 0

    async def fetch_random_word(self) -> str:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        word = self.words[(self.calls - 1) % len(self.words)]
        return word


class FakeScoreStore:
    def __init__(self, best=None, fail: bool = False):
        self.best: dict[str, int] = dict(best or {})
        self.saved: list[tuple[str, int]] = []
        self.fail = fail

    async def get_best_score(self, username: str) -> int:
        if self.fail:
            raise ConnectionError("score backend unreachable")
        return self.best.get(username, 0)

    async def save_score(self, username: str, score: int) -> None:
        self.saved.append((username, score))
        self.best[username] = score

    async def top_scores(self, limit: int = 10) -> list[dict]:
        ranked = sorted(self.best.items(), key=lambda item: item[1], reverse=True)
        return [{"username": name, "score": score} for name, score in ranked[:limit]]


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


async def wait_for_type(channel: FakeChannel, msg_type: str, count: int = 1, timeout: float = 2.0) -> dict:
    """Poll until the channel has received ``count`` events of ``msg_type``."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while len(channel.of_type(msg_type)) < count:
        if loop.time() > deadline:
            raise AssertionError(f"no {msg_type} event received, got {channel.types()}")
        await asyncio.sleep(0.005)
    return channel.of_type(msg_type)[count - 1]


@pytest.fixture
def settings():
    # ticks and the next round are driven by hand unless a test overrides this
    return RoundSettings(
        round_duration=60,
        tick_interval=3600,
        reveal_delay=0.01,
        next_round_delay=3600,
        send_timeout=1.0,
        collaborator_timeout=0.2,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def word_source():
    return FakeWordSource(["house"])


@pytest.fixture
def score_store():
    return FakeScoreStore()


@pytest.fixture
async def session(settings, word_source, score_store, clock):
    game = GameSession(
        word_source=word_source,
        score_store=score_store,
        settings=settings,
        clock=clock,
        rng=random.Random(7),
    )
    yield game
    await game.shutdown()
