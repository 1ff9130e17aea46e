"""
Tests for notification rendering.
"""

from conclave_cli.output import OutputSink
from conclave_cli.render import (
    render_room_connection,
    render_room_info,
    render_room_list,
)
from conclave_cli.schemas import (
    PingResponse,
    RoomConnectionResponse,
    RoomInfo,
    RoomMembers,
    RoomsListResponse,
)


def test_room_info_marks_owner():
    """Test that the room owner gets the crown marker."""
    sink = OutputSink()
    render_room_info(
        PingResponse(room_info=RoomMembers(members=[255, 16], index_of_owner=0)),
        sink,
    )

    assert sink.plain == (
        "--- room info updated ---\n"
        "\U0001F451\U0001F464 userID: FF\n"
        " \U0001F464 userID: 10\n"
    )


def test_room_join_heading():
    """Test the heading of a join result."""
    sink = OutputSink()
    render_room_connection(
        RoomConnectionResponse(room_id=5, connection_index=2, created=False),
        sink,
    )

    assert sink.plain.startswith("--- Room Join Done ---\n")
    assert "roomID: 5, connectionToRoom: 2" in sink.plain


def test_room_list_entries():
    """Test one line per listed room."""
    sink = OutputSink()
    render_room_list(
        RoomsListResponse(
            rooms=[RoomInfo(1, "lobby", 2, 8), RoomInfo(2, "arena", 0, 4)]
        ),
        sink,
    )

    lines = sink.plain.splitlines()
    assert lines[0] == "--- Room List ---"
    assert lines[1] == "\U0001F3E0 roomID: 1 'lobby' members: 2/8"
    assert lines[2] == "\U0001F3E0 roomID: 2 'arena' members: 0/4"


def test_room_list_empty():
    """Test the listing of no rooms."""
    sink = OutputSink()
    render_room_list(RoomsListResponse(rooms=[]), sink)

    assert sink.plain == "--- Room List ---\nno rooms\n"
