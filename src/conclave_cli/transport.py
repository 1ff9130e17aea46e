"""
WebSocket Transport

Non-blocking message transport shared by the identity and coordination
sessions. It wraps the synchronous websockets client so that both sessions
can be advanced from the single-threaded tick loop.

Architecture:
    - Uses websockets.sync.client for the connection
    - Supports dependency injection for the network layer (for testability)
    - Inbound frames are drained with a zero timeout and never block
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional

from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.sync.client import connect as websocket_connect

from .errors import TransportError
from .schemas import BaseRequest

logger = logging.getLogger(__name__)

# Upper bound for the blocking part of a connection attempt
DEFAULT_OPEN_TIMEOUT = 2.0


def _default_factory(url: str):
    return websocket_connect(url, open_timeout=DEFAULT_OPEN_TIMEOUT)


class WebSocketTransport:
    """
    JSON message transport over a single websocket connection.

    Attributes:
        url: WebSocket URL of the service (e.g., ws://127.0.0.1:27003)
        websocket: Active connection (None if not connected)
    """

    def __init__(
        self,
        url: str,
        websocket_factory: Optional[Callable[[str], Any]] = None,
    ):
        """
        Initialize the transport.

        Args:
            url: WebSocket URL of the service
            websocket_factory: Optional factory for creating WebSocket
                             connections (for dependency injection/testing)
        """
        self.url = url
        self.websocket = None
        self._websocket_factory = websocket_factory or _default_factory

    @property
    def is_connected(self) -> bool:
        """Check if a connection is currently open."""
        return self.websocket is not None

    def connect(self) -> None:
        """
        Open the websocket connection.

        Raises:
            TransportError: If the connection cannot be established
        """
        logger.info(f"Connecting to {self.url}...")
        try:
            self.websocket = self._websocket_factory(self.url)
        except (OSError, TimeoutError, WebSocketException) as e:
            self.websocket = None
            raise TransportError(f"Could not connect to {self.url}: {e}")
        logger.info("Connected to %s", self.url)

    def send(self, request: BaseRequest) -> None:
        """
        Send one request.

        Raises:
            TransportError: If not connected or the connection was closed
        """
        if self.websocket is None:
            raise TransportError(f"Not connected to {self.url}")
        logger.debug("Sending %s to %s", request.to_dict()["type"], self.url)
        try:
            self.websocket.send(request.to_json())
        except ConnectionClosed as e:
            self._drop()
            raise TransportError(f"Connection to {self.url} closed: {e}")

    def receive_pending(self) -> List[Dict[str, Any]]:
        """
        Drain every message that has already arrived.

        Returns:
            Decoded messages in arrival order, empty if none are waiting

        Raises:
            TransportError: If not connected or the connection was closed
        """
        if self.websocket is None:
            raise TransportError(f"Not connected to {self.url}")

        messages = []
        while True:
            try:
                raw = self.websocket.recv(timeout=0)
            except TimeoutError:
                break
            except ConnectionClosed as e:
                self._drop()
                raise TransportError(f"Connection to {self.url} closed: {e}")

            try:
                message = json.loads(raw)
            except json.JSONDecodeError as e:
                logger.error("Failed to parse message JSON: %s", e)
                continue
            if not isinstance(message, dict):
                logger.warning("Ignoring non-object message: %r", message)
                continue
            messages.append(message)
        return messages

    def close(self) -> None:
        """Close the connection if it is open."""
        if self.websocket is not None:
            try:
                self.websocket.close()
            finally:
                self.websocket = None
            logger.info("Disconnected from %s", self.url)

    def _drop(self) -> None:
        logger.warning("Connection to %s closed by server", self.url)
        self.websocket = None
