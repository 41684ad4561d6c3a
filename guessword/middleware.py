import logging
from starlette.middleware.cors import CORSMiddleware

log = logging.getLogger(__name__)


def add_cors_middleware(app, allow_origins=("*",)):
    # only the read-only status routes are plain HTTP
    return CORSMiddleware(
        app=app,
        allow_origins=list(allow_origins),
        allow_methods=["GET"],
        allow_headers=["*"],
    )


def add_logging_middleware(app):
    async def middleware(scope, receive, send):
        if scope["type"] in ("http", "websocket"):
            log.debug(f"{scope['type']} request: {scope['path']}")
        await app(scope, receive, send)

    return middleware
