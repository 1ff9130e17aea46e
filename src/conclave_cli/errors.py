"""
Error Types

Exception hierarchy shared by the console client. Errors that end the
process carry a negative result code which becomes the exit status.
"""

# Coordination advance failures (fatal)
ERR_SESSION_REJECTED = -2
ERR_PROTOCOL = -3

# Command dispatch failures (recovered at the prompt)
ERR_COMMAND_NOT_FOUND = -1
ERR_INCOMPLETE_COMMAND = -2
ERR_INVALID_OPTIONS = -3
ERR_SYNTAX = -4


class ConclaveCliError(Exception):
    """Base class for all client errors."""


class ConfigError(ConclaveCliError):
    """Raised when configuration or the login secret cannot be loaded."""


class TransportError(ConclaveCliError):
    """Raised when a websocket connection fails or is closed."""


class CoordinationError(ConclaveCliError):
    """
    Fatal failure reported by the coordination session.

    Attributes:
        code: Negative result code, propagated as the process exit code
    """

    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code


class CommandError(ConclaveCliError):
    """
    A typed line could not be resolved or its options could not be parsed.

    Attributes:
        code: Negative dispatch result code
    """

    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code
