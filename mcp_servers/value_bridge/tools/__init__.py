"""
Value-bridge tools.

Each tool validates its inputs locally and performs exactly one round-trip to
the browser extension. Errors are structured (see base.py) so the MCP layer can
tell bad input, transport failures and in-page failures apart.
"""

from __future__ import annotations

from .base import ApplicationError, SetValueError, TransportError, ValidationError
from .set_value import SetValueInvoker, SetValueOutcome

__all__ = [
    "ApplicationError",
    "SetValueError",
    "SetValueInvoker",
    "SetValueOutcome",
    "TransportError",
    "ValidationError",
]
