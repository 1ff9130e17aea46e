"""
Session Schema Definitions

Messages that establish the room service session from a guise login.
"""

from dataclasses import dataclass

from .base import BaseRequest, BaseResponse


@dataclass
class SessionHelloRequest(BaseRequest):
    """First message on a room service connection."""

    user_session_id: int

    @property
    def _message_type(self) -> str:
        return "hello"


@dataclass
class SessionAcceptedResponse(BaseResponse):
    """
    The room service accepted the session.

    Attributes:
        participant_id: Id assigned to this client by the room service
    """

    participant_id: int = 0
