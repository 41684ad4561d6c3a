"""Wire messages exchanged with clients.

Inbound messages form a closed set of models keyed by their ``type`` field;
anything unrecognised becomes an ``UnknownMessage``. Outbound events are
serialised with camelCase keys and always carry a millisecond timestamp.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .player import now_ms
from .round import GuessRecord


# Client -> Server


class InboundMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str


class PlayerJoin(InboundMessage):
    type: Literal["playerJoin"] = "playerJoin"
    user: str | None = None


class GuessMessage(InboundMessage):
    type: Literal["guess"] = "guess"
    guess: str | None = None


class StateRequest(InboundMessage):
    type: Literal["requestGameState"] = "requestGameState"


class Ping(InboundMessage):
    type: Literal["ping"] = "ping"


class UnknownMessage(InboundMessage):
    type: str


INBOUND_TYPES: dict[str, type[InboundMessage]] = {
    "playerJoin": PlayerJoin,
    "guess": GuessMessage,
    "requestGameState": StateRequest,
    "ping": Ping,
}


def parse_inbound(data) -> InboundMessage:
    """Map a decoded JSON payload onto its message model.

    Raises ``ValueError`` (pydantic's ``ValidationError`` included) when the
    payload is not an object or a known message has fields of the wrong type.
    """
    if not isinstance(data, dict):
        raise ValueError("message must be a JSON object")

    msg_type = data.get("type")
    model = INBOUND_TYPES.get(msg_type) if isinstance(msg_type, str) else None
    if model is None:
        return UnknownMessage(type=str(msg_type))
    return model.model_validate(data)


# Server -> Client


class OutboundEvent(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: str
    timestamp: int = Field(default_factory=now_ms)

    def to_message(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class PlayerSummary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    guess_count: int
    max_guesses: int
    round_score: int
    total_score: int
    join_time: int


class PlayerScore(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    round_score: int
    total_score: int
    guess_count: int


class WelcomeEvent(OutboundEvent):
    type: Literal["welcome"] = "welcome"
    username: str
    message: str = "Successfully connected"


class UserJoinedEvent(OutboundEvent):
    type: Literal["userJoined"] = "userJoined"
    username: str


class PlayerListEvent(OutboundEvent):
    type: Literal["playerList"] = "playerList"
    players: list[PlayerSummary]


class GameStateEvent(OutboundEvent):
    type: Literal["gameState"] = "gameState"
    current_word: str | None
    word_length: int | None
    time_remaining: int
    round_number: int
    last_word: str | None
    players: list[PlayerSummary]
    guesses: list[GuessRecord]
    player_guess_count: int
    max_guesses: int
    game_active: bool


class NewRoundEvent(OutboundEvent):
    type: Literal["newRound"] = "newRound"
    word: str
    round_number: int
    duration: int
    last_word: str | None
    max_guesses: int


class TimerEvent(OutboundEvent):
    type: Literal["timer"] = "timer"
    seconds_left: int


class GuessEvent(OutboundEvent):
    type: Literal["guess"] = "guess"
    user: str
    guess: str
    guess_number: int
    total_guess_number: int
    correct: bool
    score: int
    time_used: int

    @classmethod
    def from_record(cls, record: GuessRecord) -> "GuessEvent":
        return cls(**record.model_dump())


class CorrectGuessEvent(OutboundEvent):
    type: Literal["correctGuess"] = "correctGuess"
    user: str
    word: str
    score: int


class RoundEndedEvent(OutboundEvent):
    type: Literal["roundEnded"] = "roundEnded"
    solution: str
    round_number: int
    reason: Literal["timeout", "solved", "max_guesses"]
    guesses: list[GuessRecord]
    duration: int
    player_scores: dict[str, PlayerScore]


class PongEvent(OutboundEvent):
    type: Literal["pong"] = "pong"


class ErrorEvent(OutboundEvent):
    type: Literal["error"] = "error"
    message: str
