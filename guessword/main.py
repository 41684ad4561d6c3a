import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI

from . import config
from .database import build_engine, create_db_and_tables
from .dependencies import init_game_session
from .game import GameSession
from .middleware import add_cors_middleware, add_logging_middleware
from .routers import status_router, websocket_router
from .services import HttpScoreStore, HttpWordSource, SqlScoreStore

log = logging.getLogger(__name__)


def backend_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=config.BACKEND_URL,
        auth=httpx.BasicAuth(config.BACKEND_USER, config.BACKEND_PASSWORD),
        timeout=config.BACKEND_TIMEOUT,
    )


def build_score_store(client: httpx.AsyncClient):
    if config.SCORE_STORE == "sql":
        engine = build_engine()
        create_db_and_tables(engine)
        return SqlScoreStore(engine)
    if config.SCORE_STORE != "http":
        log.warning(f"Unknown SCORE_STORE {config.SCORE_STORE!r}, using the backend")
    return HttpScoreStore(client)


def create_app(game_session: GameSession | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = None
        session = game_session
        if session is None:
            client = backend_client()
            word_source = HttpWordSource(client)
            session = GameSession(
                word_source=word_source,
                score_store=build_score_store(client),
                settings=config.RoundSettings(),
            )
            log.info("Testing backend connection...")
            if await word_source.check_connection():
                log.info("Backend is online, database words will be used.")
            else:
                log.warning("Backend is offline, fallback words will be used.")

        init_game_session(session)
        log.info(f"WebSocket game server running on port {config.PORT}")
        try:
            yield
        finally:
            await session.shutdown()
            init_game_session(None)
            if client is not None:
                await client.aclose()
            log.info("shutting down")

    app = FastAPI(lifespan=lifespan)
    app.add_middleware(add_cors_middleware, allow_origins=config.CORS_ORIGINS)
    app.add_middleware(add_logging_middleware)

    app.include_router(status_router)
    app.include_router(websocket_router)
    return app


app = create_app()


def run() -> None:
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
