"""
Notification Rendering

Formats responses that arrive asynchronously from the coordination
session. Each renderer writes one complete block to an OutputSink.
"""

from typing import Callable, Dict

from .coordination import ResponseKind
from .output import OutputSink
from .schemas import PingResponse, RoomConnectionResponse, RoomsListResponse

CROWN = "\U0001F451"
BUST = "\U0001F464"
HOUSE = "\U0001F3E0"


def render_room_info(response: PingResponse, sink: OutputSink) -> None:
    """Member list of the current room, the owner marked with a crown."""
    info = response.room_info
    sink.write("--- room info updated ---\n", style="bold")
    for index, member in enumerate(info.members):
        sink.write(CROWN if index == info.index_of_owner else " ")
        sink.write(f"{BUST} userID: {member:X}\n")


def render_room_connection(
    response: RoomConnectionResponse, sink: OutputSink
) -> None:
    if response.created:
        sink.write("--- Room Create Done ---\n", style="bold")
    else:
        sink.write("--- Room Join Done ---\n", style="bold")
    sink.write(
        f"{HOUSE} roomID: {response.room_id}, "
        f"connectionToRoom: {response.connection_index}\n"
    )


def render_room_list(response: RoomsListResponse, sink: OutputSink) -> None:
    sink.write("--- Room List ---\n", style="bold")
    if not response.rooms:
        sink.write("no rooms\n", style="dim")
        return
    for room in response.rooms:
        sink.write(f"{HOUSE} roomID: {room.room_id} ")
        sink.write(f"'{room.name}'", style="magenta")
        sink.write(
            f" members: {room.member_count}/{room.maximum_number_of_players}\n"
        )


RENDERERS: Dict[ResponseKind, Callable[..., None]] = {
    ResponseKind.ROOM_INFO: render_room_info,
    ResponseKind.ROOM_CONNECTION: render_room_connection,
    ResponseKind.ROOM_LIST: render_room_list,
}
