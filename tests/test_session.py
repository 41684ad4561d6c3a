import asyncio

import pytest

from conftest import FakeChannel
from guessword.game import DuplicateName, EngineState, LobbyFull
from guessword.models import GuessMessage, Ping, PlayerJoin, StateRequest, UnknownMessage

pytestmark = pytest.mark.anyio


async def test_first_join_welcomes_and_starts_a_round(session):
    alice = FakeChannel()
    await session.join("alice", alice)

    assert alice.types() == ["welcome", "userJoined", "playerList", "gameState", "newRound"]
    assert alice.last("welcome")["username"] == "alice"
    assert alice.last("userJoined")["username"] == "alice"
    assert all("timestamp" in message for message in alice.sent)
    assert session.engine.state is EngineState.ACTIVE


async def test_later_joins_broadcast_membership_without_a_new_round(session):
    alice, bob = FakeChannel(), FakeChannel()
    await session.join("alice", alice)
    await session.join("bob", bob)

    assert bob.types() == ["welcome", "userJoined", "playerList", "gameState"]
    assert alice.last("userJoined")["username"] == "bob"
    assert [p["name"] for p in alice.last("playerList")["players"]] == ["alice", "bob"]
    assert alice.last("gameState")["maxGuesses"] == 3
    assert bob.last("gameState")["currentWord"] == "HOUSE"
    assert session.engine.round_number == 1


async def test_admission_errors_reach_the_caller(session):
    await session.join("alice", FakeChannel())
    with pytest.raises(DuplicateName):
        await session.join("alice", FakeChannel())

    for i in range(5):
        await session.join(f"p{i}", FakeChannel())
    with pytest.raises(LobbyFull):
        await session.join("late", FakeChannel())
    assert session.registry.count() == 6


async def test_ping_is_answered_even_before_joining(session):
    channel = FakeChannel()
    await session.handle(channel, None, Ping(type="ping"))
    assert channel.types() == ["pong"]


async def test_unknown_types_get_an_error(session):
    channel = FakeChannel()
    await session.handle(channel, None, UnknownMessage(type="dance"))
    assert channel.last("error")["message"] == "Unknown event type: dance"


async def test_second_join_on_one_connection_is_refused(session):
    channel = FakeChannel()
    await session.join("alice", channel)
    await session.handle(channel, "alice", PlayerJoin(user="bob"))

    assert channel.last("error")["message"] == "Already joined as alice"
    assert "bob" not in session.registry


async def test_guesses_from_strangers_or_blank_are_ignored(session):
    channel = FakeChannel()
    await session.join("alice", channel)
    sent = len(channel.sent)

    await session.handle(channel, None, GuessMessage(guess="house"))
    await session.handle(channel, "alice", GuessMessage(guess="   "))
    await session.handle(channel, "alice", GuessMessage())

    assert len(channel.sent) == sent
    assert session.engine.current_round.total_guesses == 0


async def test_guess_message_is_forwarded_to_the_engine(session):
    channel = FakeChannel()
    await session.join("alice", channel)
    await session.handle(channel, "alice", GuessMessage(guess="mouse"))

    assert channel.last("guess")["guess"] == "MOUSE"
    assert session.engine.current_round.total_guesses == 1


async def test_state_request_replies_to_sender_only(session):
    alice, bob = FakeChannel(), FakeChannel()
    await session.join("alice", alice)
    await session.join("bob", bob)
    before = len(alice.sent)

    await session.handle(bob, "bob", StateRequest(type="requestGameState"))
    assert bob.last("gameState")["playerGuessCount"] == 0
    assert len(alice.sent) == before

    await session.handle(FakeChannel(), None, StateRequest(type="requestGameState"))


async def test_disconnect_rebroadcasts_membership(session):
    alice, bob = FakeChannel(), FakeChannel()
    await session.join("alice", alice)
    await session.join("bob", bob)

    assert await session.disconnect("bob") is True
    assert [p["name"] for p in alice.last("playerList")["players"]] == ["alice"]
    assert alice.last("gameState")["maxGuesses"] == 6
    assert await session.disconnect("bob") is False


async def test_stale_connection_does_not_evict_a_newer_one(session):
    old, new = FakeChannel(), FakeChannel()
    await session.join("alice", old)
    await session.disconnect("alice", old)
    await session.join("alice", new)

    assert await session.disconnect("alice", old) is False
    assert "alice" in session.registry


async def test_failed_reply_counts_as_disconnect(session):
    alice, bob = FakeChannel(), FakeChannel()
    await session.join("alice", alice)
    await session.join("bob", bob)

    bob.fail = True
    await session.handle(bob, "bob", Ping(type="ping"))
    assert "bob" not in session.registry


async def test_shutdown_closes_every_connection(session):
    alice, bob = FakeChannel(), FakeChannel()
    await session.join("alice", alice)
    await session.join("bob", bob)

    await session.shutdown()

    assert alice.closed == 1001
    assert bob.closed == 1001
    assert session.registry.count() == 0
    assert session.engine.current_round is None
    assert session.engine.state is EngineState.IDLE
    assert not session.engine.scheduler.pending("timer")


async def test_status_summary(session):
    assert session.status() == {
        "players": 0, "roundNumber": 0, "state": "idle", "gameActive": False, "timeRemaining": 0,
    }
    await session.join("alice", FakeChannel())
    assert session.status() == {
        "players": 1, "roundNumber": 1, "state": "active", "gameActive": True, "timeRemaining": 60,
    }


async def wait_until(predicate, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.005)


def names_in_last_player_list(channel: FakeChannel) -> list[str]:
    return [player["name"] for player in channel.last("playerList")["players"]]


async def test_dropped_player_is_announced_even_if_the_tick_is_cancelled(session):
    alice, bob, carol = FakeChannel(), FakeChannel(), FakeChannel()
    for name, channel in (("alice", alice), ("bob", bob), ("carol", carol)):
        await session.join(name, channel)

    bob.fail = True
    carol.gate = asyncio.Event()
    carol.gate_type = "playerList"

    # the tick finds bob's socket dead and is cancelled mid-broadcast,
    # as happens when a correct guess stops the countdown
    tick = asyncio.create_task(session.engine.tick())
    await wait_until(lambda: names_in_last_player_list(alice) == ["alice", "carol"])
    tick.cancel()
    with pytest.raises(asyncio.CancelledError):
        await tick

    carol.gate.set()
    await wait_until(lambda: names_in_last_player_list(carol) == ["alice", "carol"])
    assert "bob" not in session.registry
