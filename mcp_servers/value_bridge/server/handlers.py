"""Tool handlers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..tools.set_value import SetValueInvoker, parse_arguments
from .types import ToolResult

if TYPE_CHECKING:
    from ..config import BridgeConfig
    from ..transport import RpcTransport


def validate_set_value(args: dict[str, Any]) -> None:
    """Reject malformed set_value arguments before any extension work."""
    parse_arguments(args)


def handle_set_value(config: BridgeConfig, transport: RpcTransport, args: dict[str, Any]) -> ToolResult:
    """Set a value on a page element. SetValueError subclasses propagate to the server."""
    invoker = SetValueInvoker(transport, logger=logging.getLogger("mcp.value_bridge.set_value"))
    outcome = invoker.invoke(args)
    return ToolResult.text(outcome.to_text(), data=outcome.to_dict())


__all__ = ["handle_set_value", "validate_set_value"]
