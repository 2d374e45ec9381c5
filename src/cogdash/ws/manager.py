"""Play arena: live game views keyed by container id.

Each play view registers the socket driving its game canvas under the
container id it renders into. At most one instance lives per container:
registering an occupied container closes the previous instance. A view's
instance is unregistered when its socket disconnects (the view unmounted).
The arena belongs to one application instance (``app.state.play_arena``).
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

import structlog
from fastapi import WebSocket

from cogdash.games.events import RoundListener

logger = structlog.get_logger()

REPLACED_CLOSE_CODE = 4000


@dataclass
class PlayInstance:
    """One running game view."""

    container_id: str
    websocket: WebSocket
    listener: RoundListener
    registered_at: float = field(default_factory=time.time)

    @property
    def user_id(self) -> str:
        return self.listener.user_id


class PlayArena:
    """Registry of running game views.

    Safe for asyncio via the single-threaded event loop.
    """

    def __init__(self) -> None:
        self._instances: dict[str, PlayInstance] = {}

    @property
    def instance_count(self) -> int:
        return len(self._instances)

    async def register(
        self,
        container_id: str,
        websocket: WebSocket,
        listener: RoundListener,
    ) -> PlayInstance:
        """Accept a view's socket and register it, replacing any previous instance."""
        await websocket.accept()
        previous = self._instances.get(container_id)
        instance = PlayInstance(container_id=container_id, websocket=websocket, listener=listener)
        self._instances[container_id] = instance

        if previous is not None:
            logger.warning(
                "play_instance_replaced",
                container_id=container_id,
                user_id=previous.user_id,
            )
            await self._close(previous, REPLACED_CLOSE_CODE, "Replaced by a newer instance")

        logger.info(
            "play_instance_registered",
            container_id=container_id,
            user_id=listener.user_id,
            game_type=listener.game_type,
        )
        return instance

    async def unregister(self, container_id: str, websocket: WebSocket | None = None) -> bool:
        """Remove a container's instance.

        When ``websocket`` is given, only that socket's registration is removed,
        so a replaced instance disconnecting late cannot evict its successor.
        """
        instance = self._instances.get(container_id)
        if instance is None:
            return False
        if websocket is not None and instance.websocket is not websocket:
            return False

        del self._instances[container_id]
        logger.info(
            "play_instance_unregistered",
            container_id=container_id,
            user_id=instance.user_id,
            rounds_saved=instance.listener.rounds_saved,
        )
        return True

    def has_instance(self, container_id: str) -> bool:
        return container_id in self._instances

    def get(self, container_id: str) -> PlayInstance | None:
        return self._instances.get(container_id)

    async def close_all(self) -> None:
        """Tear down every instance (application shutdown)."""
        for instance in list(self._instances.values()):
            await self._close(instance, 1001, "Server shutting down")
        self._instances.clear()

    async def _close(self, instance: PlayInstance, code: int, reason: str) -> None:
        try:
            await instance.websocket.close(code=code, reason=reason)
        except RuntimeError:
            # Already closed by the client
            pass

    def get_stats(self) -> dict:
        """Get instance statistics."""
        users = {instance.user_id for instance in self._instances.values()}
        return {
            "total_instances": len(self._instances),
            "unique_users": len(users),
        }
