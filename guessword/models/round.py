from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .player import now_ms


class GuessRecord(BaseModel):
    """One scored guess. Never changed once appended to a round."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    user: str
    guess: str
    timestamp: int = Field(default_factory=now_ms)
    guess_number: int
    total_guess_number: int
    correct: bool
    score: int
    time_used: int


class Round(BaseModel):
    word: str
    number: int
    started_at: float
    started_at_ms: int = Field(default_factory=now_ms)
    remaining: int
    guesses: list[GuessRecord] = Field(default_factory=list)
    total_guesses: int = 0
    active: bool = True
    # word revealed or guess cap hit, end of round is pending
    resolved: bool = False

    @property
    def accepts_guesses(self) -> bool:
        return self.active and not self.resolved
