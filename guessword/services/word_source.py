import logging
from typing import Protocol

import httpx

log = logging.getLogger(__name__)


class WordSource(Protocol):
    async def fetch_random_word(self) -> str: ...


class HttpWordSource:
    """Random words from the word backend (``GET /words/randomWord``)."""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def fetch_random_word(self) -> str:
        log.info("Fetching random word from backend...")
        resp = await self.client.get("/words/randomWord")
        resp.raise_for_status()

        if "application/json" in resp.headers.get("content-type", ""):
            data = resp.json()
            word = data if isinstance(data, str) else data.get("word", "")
        else:
            word = resp.text

        word = str(word).strip().strip('"').upper()
        if not word:
            raise ValueError("backend returned an empty word")
        log.info(f"Word received from backend: {word}")
        return word

    async def check_connection(self) -> bool:
        try:
            resp = await self.client.get("/words")
            resp.raise_for_status()
            words = resp.json()
        except Exception as e:
            log.error(f"Backend connection failed: {e!r}")
            return False

        log.info(f"Backend connection successful! {len(words)} words in the database.")
        return True
