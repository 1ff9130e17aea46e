"""
Conclave Console Client

Interactive console client that logs in to the guise service, starts a
conclave room session and offers a prompt for creating, joining and listing
rooms.

Modules:
    - orchestrator: the polling loop and notification rendering
    - registry, commands: prompt commands and option parsing
    - console, output: line editing and styled output
    - identity, coordination, transport: service sessions
"""

from .config import ClientConfig, GuiseSecret, read_secret
from .console import LineConsole, LineStatus
from .coordination import (
    CoordinationSession,
    CoordinationState,
    ObservedResponse,
    ResponseKind,
)
from .identity import IdentitySession, IdentityState
from .orchestrator import AppContext, SessionOrchestrator, SessionState
from .registry import CommandDescriptor, CommandRegistry
from .commands import build_registry

__all__ = [
    # Configuration
    "ClientConfig",
    "GuiseSecret",
    "read_secret",
    # Console
    "LineConsole",
    "LineStatus",
    # Sessions
    "CoordinationSession",
    "CoordinationState",
    "ObservedResponse",
    "ResponseKind",
    "IdentitySession",
    "IdentityState",
    # Orchestration
    "AppContext",
    "SessionOrchestrator",
    "SessionState",
    # Commands
    "CommandDescriptor",
    "CommandRegistry",
    "build_registry",
]
