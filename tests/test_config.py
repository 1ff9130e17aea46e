"""
Tests for configuration loading and the login secret file.
"""

import json

import pytest

from conclave_cli.config import ClientConfig, GuiseSecret, read_secret
from conclave_cli.errors import ConfigError


def test_defaults():
    """Test the configuration defaults with an empty environment."""
    config = ClientConfig.from_env({})

    assert config.guise_url == "ws://127.0.0.1:27004"
    assert config.conclave_url == "ws://127.0.0.1:27003"
    assert config.tick_interval_ms == 16
    assert config.application_id == 1
    assert config.max_players == 8
    assert config.log_level == "INFO"


def test_environment_overrides():
    """Test that environment variables override every default."""
    config = ClientConfig.from_env(
        {
            "GUISE_HOST": "guise.local",
            "GUISE_PORT": "9000",
            "CONCLAVE_HOST": "conclave.local",
            "CONCLAVE_PORT": "9001",
            "CONCLAVE_TICK_MS": "33",
            "CONCLAVE_LOG_LEVEL": "debug",
        }
    )

    assert config.guise_url == "ws://guise.local:9000"
    assert config.conclave_url == "ws://conclave.local:9001"
    assert config.tick_interval_ms == 33
    assert config.log_level == "DEBUG"


def test_invalid_integer():
    """Test that a non-numeric port raises ConfigError."""
    with pytest.raises(ConfigError) as excinfo:
        ClientConfig.from_env({"CONCLAVE_PORT": "lots"})
    assert "CONCLAVE_PORT" in str(excinfo.value)


def test_tick_interval_must_be_positive():
    """Test that a zero tick interval raises ConfigError."""
    with pytest.raises(ConfigError):
        ClientConfig.from_env({"CONCLAVE_TICK_MS": "0"})


def test_read_secret(tmp_path):
    """Test that the secret file is read into a GuiseSecret."""
    path = tmp_path / "secret.json"
    path.write_text(json.dumps({"user_id": "42", "password": "pw"}))

    assert read_secret(str(path)) == GuiseSecret(user_id=42, password="pw")


def test_read_secret_missing_file(tmp_path):
    """Test that a missing secret file raises ConfigError."""
    with pytest.raises(ConfigError) as excinfo:
        read_secret(str(tmp_path / "nope.json"))
    assert "not found" in str(excinfo.value)


@pytest.mark.parametrize(
    "content", ['{"user_id": 1}', "not json", '{"user_id": "x", "password": ""}']
)
def test_read_secret_invalid(tmp_path, content):
    """Test that an unreadable secret file raises ConfigError."""
    path = tmp_path / "secret.json"
    path.write_text(content)

    with pytest.raises(ConfigError):
        read_secret(str(path))
