import logging
from typing import Any

from ..models import Player, PlayerSummary
from .errors import DuplicateName, LobbyFull

log = logging.getLogger(__name__)


class PlayerRegistry:
    """Connected players keyed by name, together with their outbound channels."""

    def __init__(self, capacity: int = 6):
        self.capacity = capacity
        self._players: dict[str, Player] = {}
        self._channels: dict[str, Any] = {}

    def __len__(self) -> int:
        return len(self._players)

    def __contains__(self, name: str) -> bool:
        return name in self._players

    @property
    def is_full(self) -> bool:
        return len(self._players) >= self.capacity

    def join(self, name: str, channel: Any) -> Player:
        if self.is_full:
            raise LobbyFull(self.capacity)
        if name in self._players:
            raise DuplicateName(name)

        player = Player(name=name)
        self._players[name] = player
        self._channels[name] = channel
        log.info(f"Player {name} joined. Players: {len(self._players)}")
        return player

    def leave(self, name: str) -> bool:
        if name not in self._players:
            return False

        del self._players[name]
        self._channels.pop(name, None)
        log.info(f"Player {name} left. Players: {len(self._players)}")
        return True

    def get(self, name: str) -> Player | None:
        return self._players.get(name)

    def count(self) -> int:
        return len(self._players)

    def players(self) -> list[Player]:
        return list(self._players.values())

    def channel(self, name: str) -> Any | None:
        return self._channels.get(name)

    def channels(self) -> list[tuple[str, Any]]:
        return list(self._channels.items())

    def reset_round_counters(self) -> None:
        for player in self._players.values():
            player.reset_round()

    def summary(self, max_guesses: int) -> list[PlayerSummary]:
        return [
            PlayerSummary(
                name=player.name,
                guess_count=player.guess_count,
                max_guesses=max_guesses,
                round_score=player.round_score,
                total_score=player.total_score,
                join_time=player.joined_at,
            )
            for player in self._players.values()
        ]

    def clear(self) -> None:
        self._players.clear()
        self._channels.clear()
