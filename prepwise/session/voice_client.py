"""
Voice call client contract and the WebSocket relay implementation.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Union
from fastapi import WebSocket

logger = logging.getLogger(__name__)


class VoiceCallClient(ABC):
    """
    Controls one real-time voice call.

    Lifecycle events (call start/end, transcripts, speech, errors) are not
    returned from these methods; they arrive separately and are fed to the
    session's event queue.
    """

    @abstractmethod
    async def start(self, target: Union[str, dict], variables: dict[str, Any]) -> None:
        """
        Start a call.

        Args:
            target: Workflow id or inline assistant definition
            variables: Template variables substituted into the assistant prompts
        """
        pass

    @abstractmethod
    async def stop(self) -> None:
        """Terminate the call immediately."""
        pass


class WebSocketVoiceClient(VoiceCallClient):
    """Relays start/stop commands to the browser that owns the vendor SDK."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    async def start(self, target: Union[str, dict], variables: dict[str, Any]) -> None:
        logger.debug("Relaying call start to browser")
        await self.websocket.send_json({
            "command": "start",
            "target": target,
            "variables": variables,
        })

    async def stop(self) -> None:
        logger.debug("Relaying call stop to browser")
        await self.websocket.send_json({"command": "stop"})
