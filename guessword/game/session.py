import logging
import random
import time
from typing import Any

from ..config import RoundSettings
from ..models import (
    ErrorEvent,
    GuessMessage,
    InboundMessage,
    OutboundEvent,
    Ping,
    Player,
    PlayerJoin,
    PongEvent,
    StateRequest,
    UserJoinedEvent,
    WelcomeEvent,
)
from ..services import ScoreStore, WordSource
from .broadcaster import Broadcaster
from .engine import RoundEngine
from .registry import PlayerRegistry

log = logging.getLogger(__name__)


class GameSession:
    """The single shared game: players, their channels and the round engine.

    Transport code talks to the session only. A channel is anything with
    ``send_json`` and ``close`` coroutines (a Starlette ``WebSocket`` in
    production).
    """

    def __init__(
        self,
        word_source: WordSource | None = None,
        score_store: ScoreStore | None = None,
        settings: RoundSettings | None = None,
        clock=time.monotonic,
        rng: random.Random | None = None,
    ):
        self.settings = settings or RoundSettings()
        self.score_store = score_store
        self.registry = PlayerRegistry(capacity=self.settings.max_players)
        self.broadcaster = Broadcaster(self.registry, send_timeout=self.settings.send_timeout)
        self.engine = RoundEngine(
            self.registry,
            self.broadcaster,
            word_source=word_source,
            score_store=score_store,
            settings=self.settings,
            on_disconnect=self.disconnect,
            clock=clock,
            rng=rng,
        )

    async def join(self, name: str, channel: Any) -> Player:
        """Admit a player. ``AdmissionError`` propagates to the transport."""
        player = self.registry.join(name, channel)

        await self.engine.notify(name, WelcomeEvent(username=name))
        await self.engine.emit(UserJoinedEvent(username=name))
        await self.broadcast_membership()

        if self.engine.is_idle and self.registry.count() > 0:
            await self.engine.start_round()
        return player

    async def disconnect(self, name: str, channel: Any = None) -> bool:
        # a stale socket must not evict a newer connection under the same name
        if channel is not None and self.registry.channel(name) is not channel:
            return False
        if not self.registry.leave(name):
            return False

        await self.broadcast_membership()
        return True

    async def handle(self, channel: Any, name: str | None, message: InboundMessage) -> None:
        if isinstance(message, GuessMessage):
            if name is None or not message.guess or not message.guess.strip():
                return
            await self.engine.add_guess(name, message.guess)

        elif isinstance(message, StateRequest):
            if name is not None:
                await self.send_state(name)

        elif isinstance(message, Ping):
            await self.reply(channel, name, PongEvent())

        elif isinstance(message, PlayerJoin):
            await self.reply(channel, name, ErrorEvent(message=f"Already joined as {name}"))

        else:
            await self.reply(channel, name, ErrorEvent(message=f"Unknown event type: {message.type}"))

    async def reply(self, channel: Any, name: str | None, event: OutboundEvent) -> None:
        delivered = await self.broadcaster.deliver(channel, event, name or "?")
        if not delivered and name is not None:
            await self.disconnect(name, channel)

    async def send_state(self, name: str) -> None:
        event = self.engine.snapshot(name)
        if event is not None:
            await self.engine.notify(name, event)

    async def broadcast_membership(self) -> None:
        await self.engine.emit(self.engine.player_list())
        for name, _ in self.registry.channels():
            await self.send_state(name)

    def status(self) -> dict:
        round_ = self.engine.current_round
        return {
            "players": self.registry.count(),
            "roundNumber": self.engine.round_number,
            "state": self.engine.state.value,
            "gameActive": round_ is not None,
            "timeRemaining": round_.remaining if round_ else 0,
        }

    async def shutdown(self) -> None:
        log.info("Shutting down game session...")
        await self.engine.shutdown()
        for name, channel in self.registry.channels():
            try:
                await channel.close(code=1001)
            except Exception as e:
                log.warning(f"Error closing connection of {name}: {e!r}")
        self.registry.clear()
