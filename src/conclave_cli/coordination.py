"""
Coordination Session

Client for the conclave room service. Requests are fire-and-forget; every
response replaces the payload of an ObservedResponse and bumps its version
counter, which the session orchestrator polls to detect changes.

Architecture:
    - Advanced once per tick with the current monotonic time
    - Requests issued before the session is established are queued
    - Reconnection after a dropped connection is handled here, not by
      the caller
"""

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Deque, Dict, Generic, Optional, TypeVar

from .config import DEFAULT_RECONNECT_INTERVAL_MS
from .errors import (
    ERR_PROTOCOL,
    ERR_SESSION_REJECTED,
    CoordinationError,
    TransportError,
)
from .schemas import (
    BaseRequest,
    CreateRoomRequest,
    ErrorResponse,
    JoinRoomRequest,
    ListRoomsRequest,
    PingRequest,
    PingResponse,
    RoomConnectionResponse,
    RoomsListResponse,
    SessionAcceptedResponse,
    SessionHelloRequest,
)
from .transport import WebSocketTransport

logger = logging.getLogger(__name__)

T = TypeVar("T")

VERSION_MASK = 0xFFFFFFFF


@dataclass
class ObservedResponse(Generic[T]):
    """
    Latest response of one kind together with its version counter.

    The version changes every time the payload is replaced. Observers
    compare it for inequality with their last-seen copy.
    """

    version: int = 0
    payload: Optional[T] = None

    def update(self, payload: T) -> None:
        self.payload = payload
        self.version = (self.version + 1) & VERSION_MASK


class ResponseKind(Enum):
    """Kinds of asynchronous responses exposed by the session."""

    ROOM_INFO = "room_info"
    ROOM_CONNECTION = "room_connection"
    ROOM_LIST = "room_list"


class CoordinationState(Enum):
    """Connection state of the room service session."""

    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass
class CreateRoomOptions:
    """Parameters for a room creation request."""

    application_id: int
    maximum_number_of_players: int
    name: str
    flags: int = 0


@dataclass
class ListRoomsOptions:
    """Parameters for a room listing request."""

    application_id: int
    maximum_count: int


class CoordinationSession:
    """
    Room service session bound to one guise login.

    Attributes:
        state: Current CoordinationState
        target_state: State the session is working towards
        participant_id: Id assigned by the room service once connected
        room_id: Room the client is connected to (None before create/join)
    """

    def __init__(
        self,
        transport: WebSocketTransport,
        user_session_id: int,
        reconnect_interval_ms: int = DEFAULT_RECONNECT_INTERVAL_MS,
    ):
        """
        Initialize the session.

        Args:
            transport: Transport connected to the room service
            user_session_id: Credential issued by the identity session
            reconnect_interval_ms: Delay between connection attempts
        """
        self.transport = transport
        self.user_session_id = user_session_id
        self.reconnect_interval_ms = reconnect_interval_ms
        self.state = CoordinationState.IDLE
        self.target_state = CoordinationState.CONNECTED
        self.participant_id: Optional[int] = None
        self.room_id: Optional[int] = None
        self._outbox: Deque[BaseRequest] = deque()
        self._next_attempt_ms: Optional[int] = None
        self._observed: Dict[ResponseKind, ObservedResponse] = {
            kind: ObservedResponse() for kind in ResponseKind
        }

        logger.info(
            "CoordinationSession initialized for %s (user session %s)",
            transport.url,
            user_session_id,
        )

    def observed(self, kind: ResponseKind) -> ObservedResponse:
        """Return the observed response for a kind (read-only for callers)."""
        return self._observed[kind]

    def advance(self, now_ms: int) -> None:
        """
        Move the session forward and process inbound responses.

        Args:
            now_ms: Current monotonic time in milliseconds

        Raises:
            CoordinationError: If the service rejects the session or sends
                a response that cannot be understood
        """
        if self.state == CoordinationState.IDLE:
            self._try_connect(now_ms)
            return

        try:
            messages = self.transport.receive_pending()
        except TransportError as e:
            logger.warning("Lost conclave connection: %s", e)
            self._schedule_reconnect(now_ms)
            return

        for message in messages:
            self._handle_message(message)

        if self.state == CoordinationState.CONNECTED:
            self._flush_outbox(now_ms)

    def create_room(self, options: CreateRoomOptions) -> None:
        """Request a new room. The result arrives as ROOM_CONNECTION."""
        self._enqueue(
            CreateRoomRequest(
                application_id=options.application_id,
                maximum_number_of_players=options.maximum_number_of_players,
                flags=options.flags,
                name=options.name,
            )
        )

    def join_room(self, room_id: int) -> None:
        """Request to join a room. The result arrives as ROOM_CONNECTION."""
        self._enqueue(JoinRoomRequest(room_id=room_id))

    def list_rooms(self, options: ListRoomsOptions) -> None:
        """Request a room listing. The result arrives as ROOM_LIST."""
        self._enqueue(
            ListRoomsRequest(
                application_id=options.application_id,
                maximum_count=options.maximum_count,
            )
        )

    def ping(self, knowledge: int) -> None:
        """Ping the service. The answer arrives as ROOM_INFO."""
        self._enqueue(PingRequest(knowledge=knowledge))

    def close(self) -> None:
        self._outbox.clear()
        self.transport.close()
        self.state = CoordinationState.IDLE

    def _enqueue(self, request: BaseRequest) -> None:
        logger.info("Queued %s request", request.to_dict()["type"])
        self._outbox.append(request)

    def _flush_outbox(self, now_ms: int) -> None:
        while self._outbox:
            request = self._outbox[0]
            try:
                self.transport.send(request)
            except TransportError as e:
                logger.warning("Send failed, will retry after reconnect: %s", e)
                self._schedule_reconnect(now_ms)
                return
            self._outbox.popleft()

    def _try_connect(self, now_ms: int) -> None:
        if self._next_attempt_ms is not None and now_ms < self._next_attempt_ms:
            return
        try:
            self.transport.connect()
            self.transport.send(
                SessionHelloRequest(user_session_id=self.user_session_id)
            )
        except TransportError as e:
            logger.warning("Conclave connection attempt failed: %s", e)
            self._schedule_reconnect(now_ms)
            return
        self.state = CoordinationState.CONNECTING

    def _schedule_reconnect(self, now_ms: int) -> None:
        self.transport.close()
        self.state = CoordinationState.IDLE
        self._next_attempt_ms = now_ms + self.reconnect_interval_ms

    def _handle_message(self, message: Dict[str, Any]) -> None:
        message_type = message.get("type")
        try:
            if message_type == "session_accepted":
                accepted = SessionAcceptedResponse.from_dict(message)
                self.participant_id = accepted.participant_id
                self.state = CoordinationState.CONNECTED
                logger.info(
                    "Conclave session established, participant %s",
                    self.participant_id,
                )
            elif message_type == "session_rejected":
                error = ErrorResponse.from_dict(message)
                raise CoordinationError(
                    ERR_SESSION_REJECTED, f"session rejected: {error.error}"
                )
            elif message_type in ("room_created", "room_joined"):
                response = RoomConnectionResponse.from_dict(message)
                response.created = message_type == "room_created"
                self.room_id = response.room_id
                self._observed[ResponseKind.ROOM_CONNECTION].update(response)
            elif message_type == "rooms_list":
                self._observed[ResponseKind.ROOM_LIST].update(
                    RoomsListResponse.from_dict(message)
                )
            elif message_type == "ping_response":
                self._observed[ResponseKind.ROOM_INFO].update(
                    PingResponse.from_dict(message)
                )
            elif message_type == "error":
                error = ErrorResponse.from_dict(message)
                logger.error("Conclave request failed: %s", error.error)
            else:
                raise CoordinationError(
                    ERR_PROTOCOL, f"unexpected message type {message_type!r}"
                )
        except (KeyError, TypeError, ValueError) as e:
            raise CoordinationError(
                ERR_PROTOCOL, f"malformed {message_type} message: {e}"
            )
