"""
Type definitions for MCP server responses and handlers.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from ..config import BridgeConfig
    from ..transport import RpcTransport


@dataclass(slots=True)
class ToolContent:
    """Single content item in tool response."""

    type: str
    text: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP content format."""
        return {"type": self.type, "text": self.text}


@dataclass(slots=True)
class ToolResult:
    """Result of a tool execution."""

    content: list[ToolContent] = field(default_factory=list)
    is_error: bool = False
    # Structured payload for in-process callers; not part of the MCP wire format.
    data: Any | None = None

    @classmethod
    def text(cls, text: str, *, data: Any | None = None) -> ToolResult:
        """Create result with single text content."""
        return cls(content=[ToolContent(type="text", text=text or "")], data=data)

    @classmethod
    def error(
        cls,
        message: str,
        *,
        tool: str | None = None,
        code: str | None = None,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> ToolResult:
        """Create error result (human-readable text, structured copy in `data`)."""
        payload: dict[str, Any] = {"ok": False, "error": message}
        lines = [f"Error: {message}" + (f" ({code})" if code else "")]
        if tool:
            payload["tool"] = tool
            lines.append(f"- Tool: {tool}")
        if code:
            payload["code"] = code
        if suggestion:
            payload["suggestion"] = suggestion
            lines.append(f"- Suggestion: {suggestion}")
        if details:
            payload["details"] = details
        return cls(content=[ToolContent(type="text", text="\n".join(lines))], is_error=True, data=payload)

    def to_content_list(self) -> list[dict[str, Any]]:
        """Convert to MCP content list format."""
        return [c.to_dict() for c in self.content]


class ToolHandler(Protocol):
    """Protocol for tool handler functions."""

    def __call__(
        self,
        config: BridgeConfig,
        transport: RpcTransport,
        arguments: dict[str, Any],
    ) -> ToolResult: ...


HandlerFunc = Callable[["BridgeConfig", "RpcTransport", dict[str, Any]], ToolResult]
