"""
Tests for the non-blocking websocket transport.
"""

import pytest

from conclave_cli.errors import TransportError
from conclave_cli.schemas import PingRequest
from conclave_cli.transport import WebSocketTransport


@pytest.fixture
def transport(mock_websocket):
    return WebSocketTransport(
        "ws://conclave:27003", websocket_factory=lambda url: mock_websocket
    )


def test_not_connected_initially(transport):
    """Test that send and receive fail before connect."""
    assert not transport.is_connected

    with pytest.raises(TransportError):
        transport.send(PingRequest(knowledge=0))
    with pytest.raises(TransportError):
        transport.receive_pending()


def test_send_and_receive(transport, mock_websocket):
    """Test sending a request and draining pending messages."""
    transport.connect()
    transport.send(PingRequest(knowledge=4))
    mock_websocket.push("ping_response", {"room_info": {}})
    mock_websocket.push("rooms_list", {"rooms": []})

    messages = transport.receive_pending()

    assert mock_websocket.sent_types() == ["ping"]
    assert [m["type"] for m in messages] == ["ping_response", "rooms_list"]
    assert transport.receive_pending() == []


def test_invalid_frames_are_skipped(transport, mock_websocket):
    """Test that undecodable frames are skipped."""
    transport.connect()
    mock_websocket.inbox.extend(["{not json", "[1, 2]"])
    mock_websocket.push("rooms_list", {"rooms": []})

    messages = transport.receive_pending()

    assert [m["type"] for m in messages] == ["rooms_list"]


def test_closed_connection(transport, mock_websocket):
    """Test that a closed connection raises TransportError."""
    transport.connect()
    mock_websocket.drop_on_recv = True

    with pytest.raises(TransportError):
        transport.receive_pending()
    assert not transport.is_connected


def test_connect_failure():
    """Test that a refused connect raises TransportError."""
    def refuse(url):
        raise OSError("connection refused")

    transport = WebSocketTransport("ws://conclave:1", websocket_factory=refuse)

    with pytest.raises(TransportError) as excinfo:
        transport.connect()
    assert "ws://conclave:1" in str(excinfo.value)
    assert not transport.is_connected


def test_close(transport, mock_websocket):
    """Test that close closes the websocket."""
    transport.connect()
    transport.close()

    assert mock_websocket.closed is True
    assert not transport.is_connected
