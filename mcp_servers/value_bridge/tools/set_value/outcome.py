"""Result interpretation for the set_value RPC."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..base import ApplicationError

DEFAULT_FAILURE_CODE = "SET_VALUE_FAILED"


@dataclass(frozen=True, slots=True)
class ElementInfo:
    tag_name: str | None = None
    text: str | None = None
    placeholder: str | None = None

    @classmethod
    def from_result(cls, raw: Mapping[str, Any]) -> ElementInfo:
        def _opt(key: str) -> str | None:
            value = raw.get(key)
            return None if value is None else str(value)

        return cls(tag_name=_opt("tag_name"), text=_opt("text"), placeholder=_opt("placeholder"))


@dataclass(slots=True)
class SetValueOutcome:
    """Successful set_value result. Lives for one call only."""

    success: bool
    message: str
    target: Any
    value: Any
    element_type: str | None = None
    input_method: str | None = None
    actual_value: Any | None = None
    element_index: Any | None = None
    element_info: ElementInfo | None = None
    options_used: dict[str, Any] | None = None
    execution_time: float = 0.0
    timeout_ms: int = 0
    buffer_ms: int = 0

    def to_text(self) -> str:
        lines = [
            "Set Value Result:",
            "- Status: Success",
            f"- Message: {self.message}",
            f"- Target: {self.target}",
        ]
        if self.actual_value is not None:
            lines.append(f"- Value Set: {self.actual_value}")
        if self.element_type:
            lines.append(f"- Element Type: {self.element_type}")
        if self.input_method:
            lines.append(f"- Input Method: {self.input_method}")
        lines.append(f"- Execution Time: {self.execution_time:.2f} seconds")
        if self.element_index is not None:
            lines.append(f"- Element Index: {self.element_index}")
        info = self.element_info
        if info is not None:
            if info.text:
                lines.append(f"- Element Text: {info.text}")
            if info.tag_name is not None:
                lines.append(f"- Element Tag: {info.tag_name}")
            if info.placeholder:
                lines.append(f"- Placeholder: {info.placeholder}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "success": self.success,
            "message": self.message,
            "target": self.target,
            "value": self.value,
            "execution_time": round(self.execution_time, 3),
            "timeout_ms": self.timeout_ms,
            "buffer_ms": self.buffer_ms,
        }
        for key in ("element_type", "input_method", "actual_value", "element_index", "options_used"):
            value = getattr(self, key)
            if value is not None:
                out[key] = value
        if self.element_info is not None:
            out["element_info"] = {
                k: v
                for k, v in (
                    ("tag_name", self.element_info.tag_name),
                    ("text", self.element_info.text),
                    ("placeholder", self.element_info.placeholder),
                )
                if v is not None
            }
        return out


def _opt_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    return value if isinstance(value, str) else None


def interpret_result(result: Any, *, target: Any, value: Any) -> SetValueOutcome:
    """Map a structured peer result into an outcome, or raise ApplicationError.

    `success` is the sole discriminator; anything but a literal True fails closed.
    """
    data: Mapping[str, Any] = result if isinstance(result, Mapping) else {}

    if data.get("success") is not True:
        raise ApplicationError(
            _opt_str(data, "message") or f"Failed to set value on target: {target}",
            code=_opt_str(data, "error_code") or DEFAULT_FAILURE_CODE,
            suggestion="Inspect the page elements and retry with a different target or value",
            details={"target": target},
        )

    info_raw = data.get("element_info")
    options_raw = data.get("options_used")
    return SetValueOutcome(
        success=True,
        message=_opt_str(data, "message") or f"Successfully set value on target: {target}",
        target=target,
        value=value,
        element_type=_opt_str(data, "element_type"),
        input_method=_opt_str(data, "input_method"),
        actual_value=data.get("actual_value"),
        element_index=data.get("element_index"),
        element_info=ElementInfo.from_result(info_raw) if isinstance(info_raw, Mapping) else None,
        options_used=dict(options_raw) if isinstance(options_raw, Mapping) else None,
    )


__all__ = ["DEFAULT_FAILURE_CODE", "ElementInfo", "SetValueOutcome", "interpret_result"]
