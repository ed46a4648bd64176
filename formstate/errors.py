"""Structured validation error types for formstate.

The binding layer itself defines no error kinds: exceptions raised while
validating propagate to the host unmodified. This module holds the structured
per-field error produced by the validation engine. FieldState.errors keeps
only the messages; the full FieldError is available through
ValidationEngine.validate_value for callers that need codes and context.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from formstate.types import FieldErrorCode


@dataclass(frozen=True)
class FieldError:
    """Per-field validation error details.

    Attributes:
        path: Field name, extended with a dot-notation path for nested values
        code: Specific validation error code
        message: Human-readable error description
        expected: Optional - what was expected (type, format, enum values, etc.)
        received: Optional - what was actually received

    Examples:
        >>> err = FieldError(
        ...     path="email",
        ...     code=FieldErrorCode.INVALID_FORMAT,
        ...     message="Invalid email format",
        ...     expected="email",
        ...     received="not-an-email"
        ... )
        >>> err.to_dict()["code"]
        'invalid_format'
    """
    path: str
    code: FieldErrorCode
    message: str
    expected: Optional[Any] = None
    received: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "path": self.path,
            "code": self.code.value if isinstance(self.code, FieldErrorCode) else self.code,
            "message": self.message,
        }
        if self.expected is not None:
            result["expected"] = self.expected
        if self.received is not None:
            result["received"] = self.received
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldError":
        """Create FieldError from dict."""
        code = data["code"]
        if isinstance(code, str):
            code = FieldErrorCode(code)
        return cls(
            path=data["path"],
            code=code,
            message=data["message"],
            expected=data.get("expected"),
            received=data.get("received"),
        )


__all__ = [
    "FieldError",
]
