"""
Tool registry with dispatch table for MCP server.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol

from .handlers import handle_set_value, validate_set_value
from .types import HandlerFunc, ToolResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from ..config import BridgeConfig
    from ..transport import RpcTransport

logger = logging.getLogger("mcp.value_bridge.registry")


class GatewayStatus(Protocol):
    def is_connected(self) -> bool: ...

    def wait_for_connection(self, *, timeout: float = 5.0) -> bool: ...

    def status(self) -> dict[str, Any]: ...


class ToolRegistry:
    """Registry for tool handlers with extension readiness checks."""

    def __init__(self, gateway: GatewayStatus | None = None) -> None:
        # name -> (handler, requires_extension, validate)
        self._handlers: dict[str, tuple[HandlerFunc, bool, Callable[[dict[str, Any]], None] | None]] = {}
        self._gateway = gateway

    def register(
        self,
        name: str,
        handler: HandlerFunc,
        requires_extension: bool = True,
        validate: Callable[[dict[str, Any]], None] | None = None,
    ) -> None:
        """Register a tool handler.

        `validate` runs before the extension readiness check so malformed
        arguments fail fast, even while the extension is away.
        """
        self._handlers[name] = (handler, requires_extension, validate)

    def has(self, name: str) -> bool:
        """Check if handler exists."""
        return name in self._handlers

    def dispatch(
        self,
        name: str,
        config: BridgeConfig,
        transport: RpcTransport,
        arguments: dict[str, Any],
    ) -> ToolResult:
        """
        Dispatch tool call to appropriate handler.

        Raises:
            KeyError: If tool not found
            ValidationError: If the registered validator rejects the arguments
        """
        handler_info = self._handlers.get(name)
        if handler_info is None:
            raise KeyError(f"Unknown tool: {name}")

        handler, requires_extension, validate = handler_info
        if validate is not None:
            validate(arguments)

        gw = self._gateway
        if requires_extension and gw is not None and not gw.is_connected():
            if config.connect_timeout > 0:
                gw.wait_for_connection(timeout=config.connect_timeout)
            if not gw.is_connected():
                logger.info("extension_not_connected tool=%s", name)
                return ToolResult.error(
                    "Extension is not connected",
                    tool=name,
                    code="EXTENSION_NOT_CONNECTED",
                    suggestion="Ensure the browser extension is installed/enabled and can reach the gateway, then retry",
                    details={"kind": "transport", "gateway": gw.status()},
                )

        return handler(config, transport, arguments)

    @property
    def tool_names(self) -> list[str]:
        """Get list of registered tool names."""
        return list(self._handlers.keys())

    def __len__(self) -> int:
        return len(self._handlers)


def create_default_registry(gateway: GatewayStatus | None = None) -> ToolRegistry:
    registry = ToolRegistry(gateway)
    registry.register("set_value", handle_set_value, validate=validate_set_value)
    return registry


__all__ = ["GatewayStatus", "ToolRegistry", "create_default_registry", "logger"]
