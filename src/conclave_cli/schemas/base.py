"""
Base Schema Classes

Base classes for the request and response messages exchanged with the
guise and conclave services. Every message is a JSON object of the form
{"type": "...", "data": {...}}.
"""

import json
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Type, TypeVar

T = TypeVar("T", bound="BaseResponse")


def require_object(value: Any, what: str) -> Dict[str, Any]:
    """Return value if it is a JSON object, else raise TypeError."""
    if not isinstance(value, dict):
        raise TypeError(f"{what} must be an object, got {type(value).__name__}")
    return value


class BaseRequest:
    """
    Base class for outbound messages.

    Subclasses are dataclasses that define the `_message_type` property.
    """

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary for JSON serialization.

        Returns:
            Dictionary with 'type' key and, if the request has fields,
            a 'data' key.
        """
        if hasattr(self, "__dataclass_fields__") and fields(self):
            return {"type": self._message_type, "data": asdict(self)}
        return {"type": self._message_type}

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict())

    @property
    def _message_type(self) -> str:
        raise NotImplementedError("Subclasses must define _message_type")


class BaseResponse:
    """
    Base class for inbound messages.

    Provides construction from the decoded message dictionary. Payload
    fields are read from the 'data' key when present.
    """

    @classmethod
    def from_dict(cls: Type[T], data: Dict[str, Any]) -> T:
        """
        Create instance from a decoded message.

        Args:
            data: Message dictionary, with or without the 'data' envelope

        Returns:
            Instance of the response class.

        Raises:
            KeyError, TypeError, ValueError: If required fields are missing
                or have the wrong shape
        """
        return cls._from_data(require_object(data.get("data", data), "payload"))

    @classmethod
    def from_json(cls: Type[T], json_str: str) -> T:
        """Create instance from JSON string."""
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def _from_data(cls: Type[T], data: Dict[str, Any]) -> T:
        """
        Create instance from the payload dictionary.

        Unknown keys are ignored so servers may add fields freely.
        """
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})


@dataclass
class ErrorResponse(BaseResponse):
    """
    Error reported by either service.

    Attributes:
        error: Human-readable error message
    """

    error: str = "Unknown error"
