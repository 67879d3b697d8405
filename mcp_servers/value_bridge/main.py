"""
MCP server exposing the set_value bridge to the browser extension.

This module provides the main entry point and protocol handling.
Tool dispatch is handled via registry pattern in server/registry.py.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any

from .config import BridgeConfig
from .server.contract import initialize_result, select_protocol, tools_list
from .server.redaction import redact_tool_arguments
from .server.registry import create_default_registry
from .server.types import ToolResult
from .tools.base import SetValueError
from .transport import GatewayTransport, RpcTransport

logger = logging.getLogger("mcp.value_bridge")


def _write_message(payload: dict[str, Any]) -> None:
    """Write JSON-RPC message to stdout."""
    line = (json.dumps(payload, ensure_ascii=False) + "\n").encode()
    sys.stdout.buffer.write(line)
    sys.stdout.buffer.flush()


def _read_line() -> bytes | None:
    """Read one raw JSON-RPC line from stdin (None on EOF)."""
    line = sys.stdin.buffer.readline()
    if not line:
        return None
    return line.strip()


class McpServer:
    """MCP Server with registry-based tool dispatch."""

    def __init__(
        self,
        config: BridgeConfig | None = None,
        *,
        gateway: Any | None = None,
        transport: RpcTransport | None = None,
    ) -> None:
        self.config = config or BridgeConfig.from_env()
        self.extension_gateway = gateway
        self.extension_gateway_error: str | None = None

        if transport is None and gateway is None:
            from .extension_gateway import ExtensionGateway

            gateway = ExtensionGateway(
                host=self.config.extension_host,
                port=self.config.extension_port,
                expected_extension_id=self.config.extension_id,
            )
            try:
                gateway.start(wait_timeout=2.0)
            except RuntimeError as exc:
                # Fail-soft: do not crash the MCP handshake; tool calls report the gateway status.
                self.extension_gateway_error = str(exc)
                logger.error("extension_gateway_start_failed: %s", exc)
            self.extension_gateway = gateway

        self.transport: RpcTransport = transport or GatewayTransport(self.extension_gateway)
        self.registry = create_default_registry(self.extension_gateway)

    def handle_initialize(self, request_id: Any, params: dict[str, Any] | None = None) -> None:
        """Handle initialize request."""
        requested = (params or {}).get("protocolVersion") if isinstance(params, dict) else None
        _write_message({"jsonrpc": "2.0", "id": request_id, "result": initialize_result(select_protocol(requested))})

    def handle_list_tools(self, request_id: Any) -> None:
        """Handle tools/list request."""
        _write_message({"jsonrpc": "2.0", "id": request_id, "result": {"tools": tools_list()}})

    def handle_call_tool(self, request_id: Any, name: str, arguments: dict[str, Any]) -> None:
        """Handle tool call via registry dispatch."""
        logger.info("tool=%s args=%s", name, redact_tool_arguments(name, arguments))
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("tool=%s args_debug=%s", name, redact_tool_arguments(name, arguments, reveal_values=True))

        try:
            if not name:
                result = ToolResult.error("Missing tool name")
            elif not self.registry.has(name):
                result = ToolResult.error(f"Unknown tool: {name}", tool=name)
            elif not isinstance(arguments, dict):
                result = ToolResult.error("Tool arguments must be an object", tool=name)
            else:
                result = self.registry.dispatch(name, self.config, self.transport, arguments)
        except SetValueError as e:
            logger.info("tool_error tool=%s kind=%s code=%s reason=%s", name, e.kind, e.code, e.reason)
            result = ToolResult.error(
                e.reason,
                tool=name,
                code=e.code,
                suggestion=e.suggestion or None,
                details={"kind": e.kind, **e.details},
            )
        except Exception as exc:
            logger.exception("tool_call_failed")
            result = ToolResult.error(str(exc), tool=name)

        _write_message(
            {
                "jsonrpc": "2.0",
                "id": request_id,
                "result": {"content": result.to_content_list(), "isError": result.is_error},
            }
        )

    def dispatch(self, message: dict[str, Any]) -> None:
        """Dispatch incoming JSON-RPC message to appropriate handler."""
        if not message:
            return

        method = message.get("method")
        request_id = message.get("id")
        params = message.get("params")
        if not isinstance(params, dict):
            params = {}

        if method == "initialize":
            self.handle_initialize(request_id, params)
        elif method == "notifications/initialized":
            return
        elif method in ("tools/list", "list_tools"):
            self.handle_list_tools(request_id)
        elif method in ("tools/call", "call_tool"):
            name = params.get("name")
            arguments = params.get("arguments")
            self.handle_call_tool(request_id, name or "", arguments if arguments is not None else {})
        elif method == "ping":
            _write_message({"jsonrpc": "2.0", "id": request_id, "result": {}})
        else:
            _write_message(
                {
                    "jsonrpc": "2.0",
                    "id": request_id,
                    "error": {"code": -32601, "message": f"Method {method} not found"},
                }
            )

    def close(self) -> None:
        gw = self.extension_gateway
        if gw is not None and hasattr(gw, "stop"):
            gw.stop()


def main() -> None:
    """Main entry point for MCP server."""
    config = BridgeConfig.from_env()
    # stdout carries JSON-RPC frames; logs go to stderr.
    logging.basicConfig(
        level=config.logging_level,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )
    server = McpServer(config)
    try:
        while True:
            line = _read_line()
            if line is None:
                break
            if not line:
                continue
            try:
                message = json.loads(line.decode())
            except ValueError as exc:
                logger.warning("invalid_jsonrpc_frame error=%s", exc)
                _write_message({"jsonrpc": "2.0", "id": None, "error": {"code": -32700, "message": "Parse error"}})
                continue
            if not isinstance(message, dict):
                _write_message(
                    {"jsonrpc": "2.0", "id": None, "error": {"code": -32600, "message": "Invalid Request"}}
                )
                continue
            server.dispatch(message)
    finally:
        server.close()


if __name__ == "__main__":
    main()
