"""
Base error types for value-bridge tools.

Provides:
- SetValueError: Structured errors for AI agents
- ValidationError: Input rejected before any call is dispatched
- TransportError: The extension round-trip itself failed
- ApplicationError: The extension ran the call but reported failure
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class SetValueError(Exception):
    """Structured error with context for AI agents."""

    reason: str
    code: str = "SET_VALUE_ERROR"
    suggestion: str = ""
    details: dict[str, Any] = field(default_factory=dict)

    kind = "error"

    def __str__(self) -> str:
        text = f"[set_value] {self.kind} failed: {self.reason} ({self.code})"
        if self.suggestion:
            text += f". Suggestion: {self.suggestion}"
        return text

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": True,
            "kind": self.kind,
            "code": self.code,
            "reason": self.reason,
            "suggestion": self.suggestion,
            "details": self.details,
        }


@dataclass
class ValidationError(SetValueError):
    """Malformed target/value/timeout/options. Raised before dispatch."""

    code: str = "INVALID_ARGUMENT"

    kind = "validation"


@dataclass
class TransportError(SetValueError):
    """Connection or protocol failure, or an error object returned by the peer."""

    code: str = "TRANSPORT_ERROR"

    kind = "transport"


@dataclass
class ApplicationError(SetValueError):
    """The peer executed the call but reported success=false."""

    code: str = "SET_VALUE_FAILED"

    kind = "application"


__all__ = ["ApplicationError", "SetValueError", "TransportError", "ValidationError"]
