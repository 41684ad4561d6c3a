from dotenv import load_dotenv
from pydantic import BaseModel

import os

load_dotenv()

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# comma separated, "*" allows any origin
CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

# word and highscore backend
BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:8080")
BACKEND_USER = os.getenv("BACKEND_USER", "user")
BACKEND_PASSWORD = os.getenv("BACKEND_PASSWORD", "passwordtest")
BACKEND_TIMEOUT = float(os.getenv("BACKEND_TIMEOUT", "3.0"))

# "http" keeps highscores on the backend, "sql" in the local database
SCORE_STORE = os.getenv("SCORE_STORE", "http").lower()

DEV = os.environ.get("DEV", "true").lower() == "true"
SQLITE_URL = os.environ.get("SQLITE_URL", "sqlite:///./guessword.db")
POSTGRES_URL = os.environ.get("POSTGRES_URL")

MAX_PLAYERS = int(os.getenv("MAX_PLAYERS", "6"))
MAX_TOTAL_GUESSES = int(os.getenv("MAX_TOTAL_GUESSES", "6"))

ROUND_DURATION = int(os.getenv("ROUND_DURATION", "60"))
TICK_INTERVAL = float(os.getenv("TICK_INTERVAL", "1"))
REVEAL_DELAY = float(os.getenv("REVEAL_DELAY", "2"))
NEXT_ROUND_DELAY = float(os.getenv("NEXT_ROUND_DELAY", "5"))
SEND_TIMEOUT = float(os.getenv("SEND_TIMEOUT", "5"))
COLLABORATOR_TIMEOUT = float(os.getenv("COLLABORATOR_TIMEOUT", "5"))


class RoundSettings(BaseModel):
    """Timing and capacity knobs handed to the session and engine."""

    round_duration: int = ROUND_DURATION
    tick_interval: float = TICK_INTERVAL
    reveal_delay: float = REVEAL_DELAY
    next_round_delay: float = NEXT_ROUND_DELAY
    max_players: int = MAX_PLAYERS
    max_total_guesses: int = MAX_TOTAL_GUESSES
    send_timeout: float = SEND_TIMEOUT
    collaborator_timeout: float = COLLABORATOR_TIMEOUT
