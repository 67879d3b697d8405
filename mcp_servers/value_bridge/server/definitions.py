"""set_value tool schema definition."""

from __future__ import annotations

from typing import Any

SET_VALUE_TOOL: dict[str, Any] = {
    "name": "set_value",
    "description": """Set values on interactive elements (text inputs, selects, checkboxes, etc.) using flexible targeting.
USAGE:
- By index: set_value(target=3, value="hello")
- By label: set_value(target="Email address", value="me@example.com")
- Checkbox: set_value(target="Remember me", value=true)
- Multi-select: set_value(target="Tags", value=["red", "blue"])
- Long text: set_value(target=5, value="...", timeout="auto")
- Submit after: set_value(target="Search", value="query", options={"submit": true})

TIMEOUT:
- "auto" (default) scales with the value length (long text is typed progressively)
- or milliseconds as a string between "5000" and "600000"

RESPONSE EXAMPLE:
Set Value Result:
- Status: Success
- Message: Successfully set value
- Target: 3
- Value Set: hello
- Element Type: text-input
- Input Method: type
- Execution Time: 0.42 seconds""",
    "inputSchema": {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "type": "object",
        "properties": {
            "target": {
                "oneOf": [
                    {"type": "number", "description": "Element index from DOM state", "minimum": 0},
                    {"type": "string", "description": "Element description, label text, or identifier", "minLength": 1},
                ],
                "description": "Target element (index or text description)",
            },
            "value": {
                "description": "Value to set (string, number, boolean, or array for multi-select)",
            },
            "timeout": {
                "type": "string",
                "description": "Set value timeout: 'auto' for intelligent detection based on input length, "
                "or timeout in milliseconds (e.g. '10000')",
                "default": "auto",
            },
            "options": {
                "type": "object",
                "properties": {
                    "clear_first": {
                        "type": "boolean",
                        "description": "Whether to clear existing content first",
                        "default": True,
                    },
                    "submit": {
                        "type": "boolean",
                        "description": "Whether to submit form after setting value",
                        "default": False,
                    },
                    "wait_after": {
                        "type": "number",
                        "description": "Time to wait after setting value (seconds)",
                        "minimum": 0,
                        "maximum": 30,
                        "default": 1,
                    },
                },
                "additionalProperties": False,
            },
        },
        "required": ["target", "value"],
        "additionalProperties": False,
    },
}

TOOL_DEFINITIONS: list[dict[str, Any]] = [SET_VALUE_TOOL]

__all__ = ["SET_VALUE_TOOL", "TOOL_DEFINITIONS"]
