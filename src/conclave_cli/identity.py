"""
Identity Session

Logs the user in to the guise service and exposes the resulting session
credential. The session is advanced once per tick and never blocks for
longer than a connection attempt.
"""

import logging
from enum import Enum
from typing import Optional

from .config import DEFAULT_RECONNECT_INTERVAL_MS, GuiseSecret
from .errors import TransportError
from .schemas import ErrorResponse, LoginRequest, LoginSuccessResponse
from .transport import WebSocketTransport

logger = logging.getLogger(__name__)


class IdentityState(Enum):
    """Coarse login state."""

    IDLE = "idle"
    LOGGING_IN = "logging_in"
    LOGGED_IN = "logged_in"


class IdentitySession:
    """
    Login state machine for the guise service.

    Attributes:
        state: Current IdentityState
        user_session_id: Credential issued on login (None until logged in)
    """

    def __init__(
        self,
        transport: WebSocketTransport,
        secret: GuiseSecret,
        reconnect_interval_ms: int = DEFAULT_RECONNECT_INTERVAL_MS,
    ):
        self.transport = transport
        self.secret = secret
        self.reconnect_interval_ms = reconnect_interval_ms
        self.state = IdentityState.IDLE
        self.user_session_id: Optional[int] = None
        self._next_attempt_ms: Optional[int] = None

    @property
    def is_logged_in(self) -> bool:
        return self.state == IdentityState.LOGGED_IN

    def advance(self, now_ms: int) -> None:
        """
        Move the login forward.

        Connects when idle (retrying after the reconnect interval), sends
        the login request and consumes the answer.

        Args:
            now_ms: Current monotonic time in milliseconds
        """
        if self.state == IdentityState.IDLE:
            self._try_login(now_ms)
            return
        if not self.transport.is_connected:
            # Login already issued; the credential stays valid
            return

        try:
            messages = self.transport.receive_pending()
        except TransportError as e:
            logger.warning("Lost guise connection: %s", e)
            if self.state != IdentityState.LOGGED_IN:
                self._schedule_retry(now_ms)
            return

        for message in messages:
            self._handle_message(message, now_ms)

    def close(self) -> None:
        self.transport.close()

    def _try_login(self, now_ms: int) -> None:
        if self._next_attempt_ms is not None and now_ms < self._next_attempt_ms:
            return
        try:
            self.transport.connect()
            self.transport.send(
                LoginRequest(
                    user_id=self.secret.user_id, password=self.secret.password
                )
            )
        except TransportError as e:
            logger.warning("Login attempt failed: %s", e)
            self._schedule_retry(now_ms)
            return
        logger.info("Login sent for user %s", self.secret.user_id)
        self.state = IdentityState.LOGGING_IN

    def _schedule_retry(self, now_ms: int) -> None:
        self.transport.close()
        self.state = IdentityState.IDLE
        self._next_attempt_ms = now_ms + self.reconnect_interval_ms

    def _handle_message(self, message: dict, now_ms: int) -> None:
        message_type = message.get("type")

        if message_type == "login_success":
            try:
                response = LoginSuccessResponse.from_dict(message)
            except (KeyError, TypeError, ValueError) as e:
                logger.error("Malformed login_success: %s", e)
                self._schedule_retry(now_ms)
                return
            self.user_session_id = response.user_session_id
            self.state = IdentityState.LOGGED_IN
            logger.info(
                "Logged in, user session %s", self.user_session_id
            )
        elif message_type == "login_error":
            try:
                reason = ErrorResponse.from_dict(message).error
            except TypeError as e:
                reason = f"malformed login_error ({e})"
            logger.error("Login rejected: %s", reason)
            self._schedule_retry(now_ms)
        else:
            logger.debug("Unhandled guise message type: %s", message_type)
