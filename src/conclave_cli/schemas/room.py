"""
Room Schema Definitions

This module defines the message structures for room-related operations
including room creation, joining, listing and ping.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .base import BaseRequest, BaseResponse, require_object


@dataclass
class CreateRoomRequest(BaseRequest):
    """
    Request to create a new room.

    Attributes:
        application_id: Application the room belongs to
        maximum_number_of_players: Room capacity
        flags: Room flags, 0 for none
        name: Display name of the room
    """

    application_id: int
    maximum_number_of_players: int
    flags: int
    name: str

    @property
    def _message_type(self) -> str:
        return "create_room"


@dataclass
class JoinRoomRequest(BaseRequest):
    """Request to join an existing room by id."""

    room_id: int

    @property
    def _message_type(self) -> str:
        return "join_room"


@dataclass
class ListRoomsRequest(BaseRequest):
    """
    Request to list rooms of an application.

    Attributes:
        application_id: Application to list rooms for
        maximum_count: Upper bound on the number of rooms returned
    """

    application_id: int
    maximum_count: int

    @property
    def _message_type(self) -> str:
        return "list_rooms"


@dataclass
class PingRequest(BaseRequest):
    """
    Ping the room service.

    Attributes:
        knowledge: Simulation tick id the client has reached
    """

    knowledge: int

    @property
    def _message_type(self) -> str:
        return "ping"


@dataclass
class RoomConnectionResponse(BaseResponse):
    """
    Result of a room create or join.

    Attributes:
        room_id: Id of the room the client is now connected to
        connection_index: Index of this client's connection in the room
        created: True when the room was created by this request
    """

    room_id: int
    connection_index: int
    created: bool = True


@dataclass
class RoomInfo:
    """
    Summary of one room as returned by a room listing.

    Note: This is a data transfer object used within RoomsListResponse.
    """

    room_id: int
    name: str
    member_count: int
    maximum_number_of_players: int


@dataclass
class RoomsListResponse(BaseResponse):
    """Response containing a list of rooms."""

    rooms: List[RoomInfo] = field(default_factory=list)

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "RoomsListResponse":
        rooms = []
        for entry in data.get("rooms", []):
            room_dict = require_object(entry, "room")
            rooms.append(
                RoomInfo(
                    room_id=room_dict["room_id"],
                    name=room_dict.get("name", ""),
                    member_count=room_dict.get("member_count", 0),
                    maximum_number_of_players=room_dict.get(
                        "maximum_number_of_players", 0
                    ),
                )
            )
        return cls(rooms=rooms)


@dataclass
class RoomMembers:
    """
    Members of the room the client is connected to.

    Attributes:
        members: User ids of the members, in connection order
        index_of_owner: Position of the room owner in `members`
    """

    members: List[int] = field(default_factory=list)
    index_of_owner: int = 0


@dataclass
class PingResponse(BaseResponse):
    """Ping answer carrying the current room membership."""

    room_info: RoomMembers = field(default_factory=RoomMembers)

    @classmethod
    def _from_data(cls, data: Dict[str, Any]) -> "PingResponse":
        info = require_object(data.get("room_info", {}), "room_info")
        return cls(
            room_info=RoomMembers(
                members=[int(member) for member in info.get("members", [])],
                index_of_owner=int(info.get("index_of_owner", 0)),
            )
        )
