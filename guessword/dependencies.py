from typing import Annotated
from fastapi import Depends
from .game import GameSession

# singleton pattern
_session_instance: GameSession | None = None


def init_game_session(session: GameSession | None) -> None:
    global _session_instance
    _session_instance = session


def get_game_session() -> GameSession:
    """Get the process-wide GameSession instance."""
    if _session_instance is None:
        raise RuntimeError("Game session not initialized")
    return _session_instance


# convenience type alias for dependency injection
GameSessionDep = Annotated[GameSession, Depends(get_game_session)]
