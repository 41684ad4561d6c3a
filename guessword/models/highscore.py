from datetime import datetime, timezone
from sqlmodel import Field, SQLModel


class Highscore(SQLModel, table=True):
    username: str = Field(primary_key=True)
    score: int = Field(default=0)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
