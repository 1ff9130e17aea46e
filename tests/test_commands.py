"""
Tests for the prompt command handlers.
"""

import pytest

from conclave_cli.commands import (
    NOT_STARTED_NOTICE,
    PingOptions,
    RoomCreateOptions,
    RoomJoinOptions,
    RoomListOptions,
    build_registry,
    on_ping,
    on_room_create,
    on_room_join,
    on_room_list,
    on_state,
)
from conclave_cli.coordination import CreateRoomOptions, ListRoomsOptions
from conclave_cli.output import OutputSink


@pytest.fixture
def sink():
    return OutputSink()


class TestNotStarted:
    @pytest.mark.parametrize(
        "handler, options",
        [
            (on_room_create, RoomCreateOptions()),
            (on_room_join, RoomJoinOptions(id=1)),
            (on_room_list, RoomListOptions()),
            (on_ping, PingOptions()),
        ],
    )
    def test_notice_and_no_request(self, context, sink, handler, options):
        """Test that commands print the not-started notice and send nothing."""
        handler(context, options, sink)

        assert sink.plain == NOT_STARTED_NOTICE
        assert context.coordination is None

    def test_state_shows_identity_only(self, context, sink):
        """Test that state before startup reports only the identity state."""
        on_state(context, None, sink)

        assert sink.plain == "identity state: idle\n" + NOT_STARTED_NOTICE


class TestStarted:
    def test_room_create_sends_one_request(self, started_context, sink):
        """Test that room create sends exactly one create request."""
        on_room_create(started_context, RoomCreateOptions(name="Foo"), sink)

        assert started_context.coordination.requests == [
            (
                "create_room",
                CreateRoomOptions(
                    application_id=7, maximum_number_of_players=4, name="Foo"
                ),
            )
        ]
        assert sink.plain == "room create: 'Foo'\n"

    def test_room_create_verbose(self, started_context, sink):
        """Test that verbose room create echoes application and player limit."""
        on_room_create(
            started_context, RoomCreateOptions(name="Foo", verbose=True), sink
        )

        assert "application: 7 max players: 4" in sink.plain

    def test_room_join(self, started_context, sink):
        """Test that room join sends one join request for the given id."""
        on_room_join(started_context, RoomJoinOptions(id=33), sink)

        assert started_context.coordination.requests == [("join_room", 33)]
        assert "room join: 33" in sink.plain

    def test_room_list_uses_configured_application(self, started_context, sink):
        """Test that application id 0 falls back to the configured one."""
        on_room_list(started_context, RoomListOptions(maximum_count=5), sink)

        assert started_context.coordination.requests == [
            ("list_rooms", ListRoomsOptions(application_id=7, maximum_count=5))
        ]

    def test_room_list_explicit_application(self, started_context, sink):
        """Test that an explicit application id is sent unchanged."""
        on_room_list(started_context, RoomListOptions(application_id=2), sink)

        _, options = started_context.coordination.requests[0]
        assert options.application_id == 2
        assert options.maximum_count == 8

    def test_ping(self, started_context, sink):
        """Test that ping sends the knowledge value."""
        on_ping(started_context, PingOptions(knowledge=12), sink)

        assert started_context.coordination.requests == [("ping", 12)]
        assert sink.plain == ""

    def test_state_shows_coordination(self, started_context, sink):
        """Test that state reports coordination state, target and room."""
        started_context.coordination.room_id = 9
        on_state(started_context, None, sink)

        assert sink.plain == (
            "identity state: logged_in\n"
            "coordination state: connected target: connected\n"
            "room: 9\n"
        )
        assert started_context.coordination.requests == []


def test_dispatch_through_registry(started_context, sink):
    """Test that a command line reaches its handler through the registry."""
    build_registry().dispatch(
        "room create --name Foo", started_context, sink
    )

    request, options = started_context.coordination.requests[0]
    assert request == "create_room"
    assert options.name == "Foo"
