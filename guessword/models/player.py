import time

from pydantic import BaseModel, Field


def now_ms() -> int:
    return int(time.time() * 1000)


class Player(BaseModel):
    name: str
    joined_at: int = Field(default_factory=now_ms)
    guess_count: int = 0
    round_score: int = 0
    total_score: int = 0

    def reset_round(self):
        self.guess_count = 0
        self.round_score = 0
