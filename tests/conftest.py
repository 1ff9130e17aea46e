"""
Shared test doubles for the console client tests.

The fakes stand in for the network and the terminal so the tick loop can
be driven deterministically.
"""

import io
import json

import pytest
from websockets.exceptions import ConnectionClosedError

from conclave_cli.config import ClientConfig
from conclave_cli.console import LineConsole
from conclave_cli.coordination import (
    CoordinationState,
    ObservedResponse,
    ResponseKind,
)
from conclave_cli.identity import IdentityState
from conclave_cli.orchestrator import AppContext


class MockWebSocket:
    """Synchronous websocket double with scripted inbound frames."""

    def __init__(self):
        self.sent_messages = []
        self.inbox = []
        self.closed = False
        self.drop_on_recv = False

    def push(self, message_type, data=None):
        message = {"type": message_type}
        if data is not None:
            message["data"] = data
        self.inbox.append(json.dumps(message))

    def sent_types(self):
        return [json.loads(m)["type"] for m in self.sent_messages]

    def send(self, message):
        self.sent_messages.append(message)

    def recv(self, timeout=None):
        if self.drop_on_recv:
            raise ConnectionClosedError(None, None)
        if not self.inbox:
            raise TimeoutError()
        return self.inbox.pop(0)

    def close(self):
        self.closed = True


class FakeReader:
    """Keystroke source for LineConsole."""

    def __init__(self):
        self.keys = []
        self.closed = False
        self.at_eof = False

    def type(self, text):
        self.keys.append(text)

    def end(self):
        self.at_eof = True

    def read_available(self):
        keys, self.keys = "".join(self.keys), []
        return keys

    def close(self):
        self.closed = True


class FakeIdentity:
    """Identity session whose login state is set by the test."""

    def __init__(self):
        self.state = IdentityState.IDLE
        self.user_session_id = None
        self.advance_calls = []

    @property
    def is_logged_in(self):
        return self.state == IdentityState.LOGGED_IN

    def log_in(self, user_session_id=0xCAFE):
        self.state = IdentityState.LOGGED_IN
        self.user_session_id = user_session_id

    def advance(self, now_ms):
        self.advance_calls.append(now_ms)

    def close(self):
        pass


class FakeCoordination:
    """Coordination session recording requests instead of sending them."""

    def __init__(self, user_session_id=0):
        self.user_session_id = user_session_id
        self.state = CoordinationState.CONNECTED
        self.target_state = CoordinationState.CONNECTED
        self.room_id = None
        self.requests = []
        self.advance_calls = []
        self.advance_error = None
        self._observed = {kind: ObservedResponse() for kind in ResponseKind}

    def observed(self, kind):
        return self._observed[kind]

    def advance(self, now_ms):
        self.advance_calls.append(now_ms)
        if self.advance_error is not None:
            raise self.advance_error

    def create_room(self, options):
        self.requests.append(("create_room", options))

    def join_room(self, room_id):
        self.requests.append(("join_room", room_id))

    def list_rooms(self, options):
        self.requests.append(("list_rooms", options))

    def ping(self, knowledge):
        self.requests.append(("ping", knowledge))

    def close(self):
        pass


@pytest.fixture
def mock_websocket():
    return MockWebSocket()


@pytest.fixture
def reader():
    return FakeReader()


@pytest.fixture
def terminal():
    return io.StringIO()


@pytest.fixture
def console(reader, terminal):
    return LineConsole(reader=reader, output=terminal)


@pytest.fixture
def identity():
    return FakeIdentity()


@pytest.fixture
def config():
    return ClientConfig(application_id=7, max_players=4)


@pytest.fixture
def context(config, identity):
    return AppContext(config=config, identity=identity)


@pytest.fixture
def started_context(context):
    """Context with identity logged in and a coordination session."""
    context.identity.log_in()
    context.coordination = FakeCoordination(context.identity.user_session_id)
    context.state.identity_ready = True
    context.state.coordination_initialized = True
    return context
