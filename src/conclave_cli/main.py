#!/usr/bin/env python3
"""
Conclave Console Client

Logs in to the guise service, starts a conclave room session and runs the
interactive prompt. Configuration is read from the environment, see
conclave_cli.config.
"""

import logging
import sys

from .config import ClientConfig, read_secret
from .console import LineConsole
from .coordination import CoordinationSession
from .errors import ConfigError
from .identity import IdentitySession
from .orchestrator import AppContext, SessionOrchestrator
from .transport import WebSocketTransport

logger = logging.getLogger(__name__)


def configure_logging(config: ClientConfig) -> None:
    """Send log output to a file so it does not interfere with the prompt."""
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.FileHandler(config.log_file, mode="a")],
    )


def main():
    """Main entry point for the console client."""
    try:
        config = ClientConfig.from_env()
        secret = read_secret(config.secret_file)
    except ConfigError as e:
        print(f"Error: {e}")
        sys.exit(1)

    configure_logging(config)
    logger.info("Starting conclave client...")

    identity = IdentitySession(
        WebSocketTransport(config.guise_url),
        secret,
        reconnect_interval_ms=config.reconnect_interval_ms,
    )

    def create_coordination(user_session_id: int) -> CoordinationSession:
        return CoordinationSession(
            WebSocketTransport(config.conclave_url),
            user_session_id,
            reconnect_interval_ms=config.reconnect_interval_ms,
        )

    context = AppContext(config=config, identity=identity)
    orchestrator = SessionOrchestrator(
        context, LineConsole(), create_coordination
    )

    try:
        exit_code = orchestrator.run()
    finally:
        if context.coordination is not None:
            context.coordination.close()
        identity.close()

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
