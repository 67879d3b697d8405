"""Server package for the value-bridge MCP server."""

from __future__ import annotations

from .registry import ToolRegistry, create_default_registry
from .types import ToolResult

__all__ = ["ToolRegistry", "ToolResult", "create_default_registry"]
