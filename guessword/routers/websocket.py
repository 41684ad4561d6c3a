import json
import logging

from fastapi import APIRouter, WebSocket, status

from ..dependencies import GameSessionDep
from ..game import AdmissionError
from ..models import ErrorEvent, PlayerJoin, parse_inbound

log = logging.getLogger(__name__)
router = APIRouter()


async def register_player(
        websocket: WebSocket, message: PlayerJoin, session: GameSessionDep
) -> str | None:
    """Admit the sender of a playerJoin. Returns the name, or None when refused."""
    if not message.user or not message.user.strip():
        await websocket.send_json(ErrorEvent(message="Username is required").to_message())
        return None

    try:
        await session.join(message.user, websocket)
    except AdmissionError as e:
        log.info(f"Rejected player {message.user}: {e}")
        await websocket.send_json(ErrorEvent(message=str(e)).to_message())
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        raise
    return message.user


async def handle_messages(websocket: WebSocket, session: GameSessionDep) -> None:
    """Main message loop for one client connection"""
    username: str | None = None

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                break

            try:
                raw = frame.get("text")
                if raw is None:
                    raw = (frame.get("bytes") or b"").decode("utf-8")
                message = parse_inbound(json.loads(raw))
            except (json.JSONDecodeError, ValueError) as e:
                log.error(f"Error processing message from {username or 'anonymous'}: {e}")
                await session.reply(
                    websocket, username, ErrorEvent(message="Invalid message format")
                )
                continue

            if isinstance(message, PlayerJoin) and username is None:
                try:
                    username = await register_player(websocket, message, session)
                except AdmissionError:
                    return
                continue

            await session.handle(websocket, username, message)

    finally:
        if username is not None:
            log.info(f"Connection of {username} closed")
            await session.disconnect(username, websocket)


@router.websocket("/")
@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket, session: GameSessionDep) -> None:
    """WebSocket endpoint shared by all players of the session"""
    await websocket.accept()
    log.info("New WebSocket connection")
    await handle_messages(websocket, session)
