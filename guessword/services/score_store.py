import logging
from datetime import datetime, timezone
from typing import Protocol

from anyio import to_thread
import httpx
from sqlmodel import Session, select

from ..models import Highscore

log = logging.getLogger(__name__)


class ScoreStore(Protocol):
    async def get_best_score(self, username: str) -> int: ...

    async def save_score(self, username: str, score: int) -> None: ...

    async def top_scores(self, limit: int = 10) -> list[dict]: ...


class HttpScoreStore:
    """Highscores kept by the backend service."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def _all(self) -> list[dict]:
        resp = await self.client.get("/highscores")
        resp.raise_for_status()
        return resp.json()

    async def get_best_score(self, username: str) -> int:
        for entry in await self._all():
            if entry.get("username") == username:
                return int(entry.get("score") or 0)
        return 0

    async def save_score(self, username: str, score: int) -> None:
        resp = await self.client.post(
            "/highscores/save", json={"username": username, "score": score}
        )
        resp.raise_for_status()

    async def top_scores(self, limit: int = 10) -> list[dict]:
        entries = await self._all()
        entries.sort(key=lambda entry: entry.get("score") or 0, reverse=True)
        return [
            {"username": entry.get("username"), "score": entry.get("score") or 0}
            for entry in entries[:limit]
        ]


class SqlScoreStore:
    """Highscores in the local database, one row per player."""

    def __init__(self, engine):
        self.engine = engine

    def _get(self, username: str) -> int:
        with Session(self.engine) as session:
            row = session.get(Highscore, username)
            return row.score if row else 0

    def _save(self, username: str, score: int) -> None:
        with Session(self.engine) as session:
            row = session.get(Highscore, username)
            if row is None:
                row = Highscore(username=username, score=score)
            else:
                row.score = score
                row.updated_at = datetime.now(timezone.utc)
            session.add(row)
            session.commit()

    def _top(self, limit: int) -> list[dict]:
        with Session(self.engine) as session:
            rows = session.exec(
                select(Highscore).order_by(Highscore.score.desc()).limit(limit)
            ).all()
            return [{"username": row.username, "score": row.score} for row in rows]

    async def get_best_score(self, username: str) -> int:
        return await to_thread.run_sync(self._get, username)

    async def save_score(self, username: str, score: int) -> None:
        await to_thread.run_sync(self._save, username, score)

    async def top_scores(self, limit: int = 10) -> list[dict]:
        return await to_thread.run_sync(self._top, limit)
