from .player import Player, now_ms
from .round import Round, GuessRecord
from .highscore import Highscore
from .events import (
    InboundMessage,
    PlayerJoin,
    GuessMessage,
    StateRequest,
    Ping,
    UnknownMessage,
    parse_inbound,
    OutboundEvent,
    PlayerSummary,
    PlayerScore,
    WelcomeEvent,
    UserJoinedEvent,
    PlayerListEvent,
    GameStateEvent,
    NewRoundEvent,
    TimerEvent,
    GuessEvent,
    CorrectGuessEvent,
    RoundEndedEvent,
    PongEvent,
    ErrorEvent,
)

__all__ = [
    "Player", "now_ms", "Round", "GuessRecord", "Highscore",
    "InboundMessage", "PlayerJoin", "GuessMessage", "StateRequest", "Ping",
    "UnknownMessage", "parse_inbound",
    "OutboundEvent", "PlayerSummary", "PlayerScore", "WelcomeEvent",
    "UserJoinedEvent", "PlayerListEvent", "GameStateEvent", "NewRoundEvent",
    "TimerEvent", "GuessEvent", "CorrectGuessEvent", "RoundEndedEvent",
    "PongEvent", "ErrorEvent",
]
