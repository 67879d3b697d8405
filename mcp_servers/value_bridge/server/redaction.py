"""Redaction utilities for logging.

Prefers safety over fidelity: at INFO a set_value `value` is only ever
described by its type and length. The DEBUG rendering may show it truncated,
unless the target looks like a secret field.
"""

from __future__ import annotations

import os
from typing import Any

from ..sensitivity import is_sensitive_target


def _log_max_chars() -> int:
    try:
        return max(16, int(os.environ.get("MCP_LOG_VALUE_MAX_CHARS") or 200))
    except ValueError:
        return 200


def _redacted_summary(value: Any) -> str:
    if value is None:
        return "<redacted>"
    if isinstance(value, str):
        return f"<redacted str len={len(value)}>"
    if isinstance(value, (list, tuple)):
        return f"<redacted list len={len(value)}>"
    return f"<redacted {type(value).__name__}>"


def _truncate(value: Any, max_chars: int) -> Any:
    if isinstance(value, str) and len(value) > max_chars:
        return value[:max_chars] + f"… <truncated len={len(value)}>"
    return value


def redact_tool_arguments(tool: str, args: dict[str, Any], *, reveal_values: bool = False) -> dict[str, Any]:
    """Redact tool arguments for safe logging.

    `reveal_values` is meant for DEBUG output only: values for non-sensitive
    targets are kept (truncated to MCP_LOG_VALUE_MAX_CHARS).
    """
    if not isinstance(args, dict):
        return args
    out = dict(args)
    if tool == "set_value" and "value" in out:
        if reveal_values and not is_sensitive_target(out.get("target")):
            out["value"] = _truncate(out["value"], _log_max_chars())
        else:
            out["value"] = _redacted_summary(out["value"])
    return out


__all__ = ["redact_tool_arguments"]
