"""
Client Configuration

Settings are read from environment variables with defaults suitable for a
local guise (login) and conclave (room) server pair.

Environment:
    GUISE_HOST, GUISE_PORT: Address of the login service
    CONCLAVE_HOST, CONCLAVE_PORT: Address of the room service
    GUISE_SECRET_FILE: JSON file holding the user id and password
    CONCLAVE_APPLICATION_ID: Application id used for room requests
    CONCLAVE_MAX_PLAYERS: Maximum number of players for created rooms
    CONCLAVE_TICK_MS: Tick interval of the polling loop
    CONCLAVE_RECONNECT_MS: Delay between connection attempts
    CONCLAVE_LOG_FILE, CONCLAVE_LOG_LEVEL: Logging destination and level
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL_MS = 16
DEFAULT_RECONNECT_INTERVAL_MS = 1000


def _int_from_env(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got '{raw}'")


@dataclass
class ClientConfig:
    """
    Runtime configuration for the console client.

    Attributes:
        guise_host: Host of the login service
        guise_port: Port of the login service
        conclave_host: Host of the room service
        conclave_port: Port of the room service
        secret_file: Path to the JSON login secret
        application_id: Application id sent with room requests
        max_players: Room capacity used by "room create"
        tick_interval_ms: Target duration of one loop iteration
        reconnect_interval_ms: Delay between failed connection attempts
        log_file: File that receives log output
        log_level: Name of the logging level
    """

    guise_host: str = "127.0.0.1"
    guise_port: int = 27004
    conclave_host: str = "127.0.0.1"
    conclave_port: int = 27003
    secret_file: str = "guise_secret.json"
    application_id: int = 1
    max_players: int = 8
    tick_interval_ms: int = DEFAULT_TICK_INTERVAL_MS
    reconnect_interval_ms: int = DEFAULT_RECONNECT_INTERVAL_MS
    log_file: str = "conclave_cli.log"
    log_level: str = "INFO"

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "ClientConfig":
        """
        Build a configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            ClientConfig with defaults for every unset variable

        Raises:
            ConfigError: If a numeric variable is not an integer
        """
        if environ is None:
            environ = os.environ
        defaults = cls()

        config = cls(
            guise_host=environ.get("GUISE_HOST", defaults.guise_host),
            guise_port=_int_from_env(
                environ, "GUISE_PORT", defaults.guise_port
            ),
            conclave_host=environ.get("CONCLAVE_HOST", defaults.conclave_host),
            conclave_port=_int_from_env(
                environ, "CONCLAVE_PORT", defaults.conclave_port
            ),
            secret_file=environ.get("GUISE_SECRET_FILE", defaults.secret_file),
            application_id=_int_from_env(
                environ, "CONCLAVE_APPLICATION_ID", defaults.application_id
            ),
            max_players=_int_from_env(
                environ, "CONCLAVE_MAX_PLAYERS", defaults.max_players
            ),
            tick_interval_ms=_int_from_env(
                environ, "CONCLAVE_TICK_MS", defaults.tick_interval_ms
            ),
            reconnect_interval_ms=_int_from_env(
                environ, "CONCLAVE_RECONNECT_MS", defaults.reconnect_interval_ms
            ),
            log_file=environ.get("CONCLAVE_LOG_FILE", defaults.log_file),
            log_level=environ.get(
                "CONCLAVE_LOG_LEVEL", defaults.log_level
            ).upper(),
        )

        if config.tick_interval_ms <= 0:
            raise ConfigError("CONCLAVE_TICK_MS must be positive")

        return config

    @property
    def guise_url(self) -> str:
        """WebSocket URL of the login service."""
        return f"ws://{self.guise_host}:{self.guise_port}"

    @property
    def conclave_url(self) -> str:
        """WebSocket URL of the room service."""
        return f"ws://{self.conclave_host}:{self.conclave_port}"


@dataclass
class GuiseSecret:
    """Credentials used to log in to the guise service."""

    user_id: int
    password: str


def read_secret(path: str) -> GuiseSecret:
    """
    Read the login secret from a JSON file.

    The file must contain an object with "user_id" and "password" keys.

    Args:
        path: Path to the secret file

    Returns:
        GuiseSecret with the stored credentials

    Raises:
        ConfigError: If the file is missing, unreadable or incomplete
    """
    try:
        with open(os.path.expanduser(path), "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigError(f"secret file not found: {path}")
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"could not read secret file {path}: {e}")

    try:
        secret = GuiseSecret(
            user_id=int(data["user_id"]), password=str(data["password"])
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"secret file {path} is incomplete: {e}")

    logger.info("Loaded secret for user %s", secret.user_id)
    return secret
