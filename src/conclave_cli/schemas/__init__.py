"""
Schemas Package

Message schemas for the guise (login) and conclave (room) services,
organized by category: identity, session and room operations.
"""

from .base import BaseRequest, BaseResponse, ErrorResponse
from .identity import LoginRequest, LoginSuccessResponse
from .session import SessionHelloRequest, SessionAcceptedResponse
from .room import (
    CreateRoomRequest,
    JoinRoomRequest,
    ListRoomsRequest,
    PingRequest,
    RoomConnectionResponse,
    RoomInfo,
    RoomsListResponse,
    RoomMembers,
    PingResponse,
)

__all__ = [
    # Base classes
    "BaseRequest",
    "BaseResponse",
    "ErrorResponse",
    # Identity schemas
    "LoginRequest",
    "LoginSuccessResponse",
    # Session schemas
    "SessionHelloRequest",
    "SessionAcceptedResponse",
    # Room schemas
    "CreateRoomRequest",
    "JoinRoomRequest",
    "ListRoomsRequest",
    "PingRequest",
    "RoomConnectionResponse",
    "RoomInfo",
    "RoomsListResponse",
    "RoomMembers",
    "PingResponse",
]
