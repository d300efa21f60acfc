"""
Typed application errors carried by failed Results.

The taxonomy is closed: every expected failure of a service belongs to
one ErrorType. The type is transport-agnostic; the HTTP and WebSocket
mappings live in ``app.shared.errors.projection``.
No framework imports allowed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable


class ErrorType(Enum):
    """Closed set of expected failure categories."""

    NOT_FOUND = "not_found"
    VALIDATION = "validation"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    BUSINESS_RULE = "business_rule"
    INTERNAL = "internal"


@dataclass(frozen=True)
class AppError:
    """An expected failure with a human-readable message.

    Attributes:
        type: Failure category.
        message: Human-readable description, safe to show to clients.
        validation_errors: Ordered field-level messages (validation only).
    """

    type: ErrorType
    message: str
    validation_errors: tuple[str, ...] = ()

    @classmethod
    def not_found(cls, message: str) -> "AppError":
        return cls(ErrorType.NOT_FOUND, message)

    @classmethod
    def validation(
        cls, message: str, errors: Iterable[str] | None = None
    ) -> "AppError":
        return cls(ErrorType.VALIDATION, message, tuple(errors or ()))

    @classmethod
    def conflict(cls, message: str) -> "AppError":
        return cls(ErrorType.CONFLICT, message)

    @classmethod
    def unauthorized(cls, message: str) -> "AppError":
        return cls(ErrorType.UNAUTHORIZED, message)

    @classmethod
    def forbidden(cls, message: str) -> "AppError":
        return cls(ErrorType.FORBIDDEN, message)

    @classmethod
    def business_rule(cls, message: str) -> "AppError":
        return cls(ErrorType.BUSINESS_RULE, message)

    @classmethod
    def internal(cls, message: str) -> "AppError":
        return cls(ErrorType.INTERNAL, message)

    def __str__(self) -> str:
        return f"{self.type.value}: {self.message}"
