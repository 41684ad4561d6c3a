from .errors import AdmissionError, LobbyFull, DuplicateName, BudgetExceeded
from .registry import PlayerRegistry
from .broadcaster import Broadcaster
from .scheduler import Scheduler
from .scoring import calculate_score, max_guesses_per_player
from .engine import RoundEngine, EngineState, FALLBACK_WORDS
from .session import GameSession

__all__ = [
    "AdmissionError", "LobbyFull", "DuplicateName", "BudgetExceeded",
    "PlayerRegistry", "Broadcaster", "Scheduler",
    "calculate_score", "max_guesses_per_player",
    "RoundEngine", "EngineState", "FALLBACK_WORDS", "GameSession",
]
