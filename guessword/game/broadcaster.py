import asyncio
import logging
from typing import Any

from ..models import OutboundEvent
from .registry import PlayerRegistry

log = logging.getLogger(__name__)


class Broadcaster:
    """Best-effort delivery of events to player channels.

    Delivery never raises. Failures are reported back as a status so the
    caller can decide to drop the player.
    """

    def __init__(self, registry: PlayerRegistry, send_timeout: float = 5.0):
        self.registry = registry
        self.send_timeout = send_timeout

    async def deliver(self, channel: Any, event: OutboundEvent, name: str = "?") -> bool:
        try:
            await asyncio.wait_for(channel.send_json(event.to_message()), self.send_timeout)
        except Exception as e:
            log.error(f"Error sending {event.type} to {name}: {e!r}")
            return False
        return True

    async def send_one(self, name: str, event: OutboundEvent) -> bool:
        channel = self.registry.channel(name)
        if channel is None:
            return False
        return await self.deliver(channel, event, name)

    async def broadcast_all(self, event: OutboundEvent) -> list[str]:
        failed = []
        for name, channel in self.registry.channels():
            if not await self.deliver(channel, event, name):
                failed.append(name)
        return failed
