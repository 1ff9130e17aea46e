"""
Prompt Commands

Command table of the interactive prompt and its handlers. Handlers issue
one request to the coordination session and return immediately; the
response is shown later when its version counter changes.
"""

import logging
from dataclasses import dataclass

from .coordination import CreateRoomOptions, ListRoomsOptions
from .output import OutputSink
from .registry import CommandRegistry, option

logger = logging.getLogger(__name__)

NOT_STARTED_NOTICE = "conclave not started yet\n"


@dataclass
class RoomCreateOptions:
    name: str = option(
        "secret room", short="n", help="name of the room to create"
    )
    verbose: bool = option(False, short="v", help="enable detailed output")


@dataclass
class RoomJoinOptions:
    id: int = option(short="i", help="id of the room to join")
    verbose: bool = option(False, short="v", help="enable detailed output")


@dataclass
class RoomListOptions:
    application_id: int = option(
        0,
        name="applicationId",
        short="a",
        help="application to list rooms for, 0 for the configured one",
    )
    maximum_count: int = option(
        8, name="maximumCount", short="m", help="maximum number of rooms"
    )


@dataclass
class PingOptions:
    knowledge: int = option(
        0,
        short="k",
        help="how much knowledge (simulation tick ID) that the client has",
    )
    verbose: bool = option(False, short="v", help="enable detailed output")


def _started_session(context, sink: OutputSink):
    """Return the coordination session, or write a notice if not started."""
    if not context.state.coordination_initialized:
        sink.write(NOT_STARTED_NOTICE, style="yellow")
        return None
    return context.coordination


def on_room_create(context, options: RoomCreateOptions, sink: OutputSink):
    session = _started_session(context, sink)
    if session is None:
        return

    config = context.config
    sink.write("room create: '", style="yellow")
    sink.write(options.name, style="red")
    sink.write("'\n", style="yellow")
    if options.verbose:
        sink.write(
            f"  application: {config.application_id} "
            f"max players: {config.max_players}\n",
            style="dim",
        )

    session.create_room(
        CreateRoomOptions(
            application_id=config.application_id,
            maximum_number_of_players=config.max_players,
            name=options.name,
        )
    )


def on_room_join(context, options: RoomJoinOptions, sink: OutputSink):
    session = _started_session(context, sink)
    if session is None:
        return

    sink.write(f"room join: {options.id}\n", style="yellow")
    if options.verbose and session.room_id is not None:
        sink.write(f"  leaving room {session.room_id}\n", style="dim")
    session.join_room(options.id)


def on_room_list(context, options: RoomListOptions, sink: OutputSink):
    session = _started_session(context, sink)
    if session is None:
        return

    application_id = options.application_id or context.config.application_id
    sink.write(
        f"room list: application {application_id} "
        f"(max {options.maximum_count})\n",
        style="yellow",
    )
    session.list_rooms(
        ListRoomsOptions(
            application_id=application_id,
            maximum_count=options.maximum_count,
        )
    )


def on_state(context, options, sink: OutputSink):
    """Show identity and coordination state."""
    sink.write(f"identity state: {context.identity.state.value}\n")
    session = _started_session(context, sink)
    if session is None:
        return
    sink.write(
        f"coordination state: {session.state.value} "
        f"target: {session.target_state.value}\n"
    )
    if session.room_id is not None:
        sink.write(f"room: {session.room_id}\n")


def on_ping(context, options: PingOptions, sink: OutputSink):
    session = _started_session(context, sink)
    if session is None:
        return

    if options.verbose:
        sink.write(f"ping: knowledge {options.knowledge}\n", style="dim")
    session.ping(options.knowledge)


def build_registry() -> CommandRegistry:
    """Create the command table of the prompt."""
    registry = CommandRegistry()
    registry.register("room", "room commands")
    registry.register(
        "room create", "Create a room", on_room_create, RoomCreateOptions
    )
    registry.register(
        "room join", "Join a room", on_room_join, RoomJoinOptions
    )
    registry.register(
        "room list", "List rooms", on_room_list, RoomListOptions
    )
    registry.register("state", "show state on conclave client", on_state)
    registry.register("ping", "ping the conclave server", on_ping, PingOptions)
    return registry
