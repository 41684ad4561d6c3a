from .word_source import WordSource, HttpWordSource
from .score_store import ScoreStore, HttpScoreStore, SqlScoreStore

__all__ = ["WordSource", "HttpWordSource", "ScoreStore", "HttpScoreStore", "SqlScoreStore"]
