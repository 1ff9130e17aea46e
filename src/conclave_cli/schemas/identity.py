"""
Identity Schema Definitions

Messages for logging in to the guise service.
"""

from dataclasses import dataclass

from .base import BaseRequest, BaseResponse


@dataclass
class LoginRequest(BaseRequest):
    """
    Request to log in with the stored secret.

    Attributes:
        user_id: Numeric user id
        password: Password from the secret file
    """

    user_id: int
    password: str

    @property
    def _message_type(self) -> str:
        return "login"


@dataclass
class LoginSuccessResponse(BaseResponse):
    """
    Login accepted.

    Attributes:
        user_session_id: Session credential used to open the room session
    """

    user_session_id: int
