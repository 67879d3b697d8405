"""Target and value variants for set_value.

The caller boundary delivers JSON-decoded data, so both the target and the
value arrive as loosely typed Python objects. They are folded into closed
variants here once, and every later stage works with the variants only.

Canonical value serialization (drives timeout estimation):
- text     -> the string itself
- boolean  -> "true" / "false"
- integer  -> decimal digits; integral floats render like integers (42.0 -> "42")
- float    -> repr()
- sequence -> "[" + items joined by a single space + "]"

The payload length is the UTF-8 byte length of that string.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Union

from ..base import ValidationError

Primitive = Union[str, int, float, bool]


@dataclass(frozen=True, slots=True)
class IndexTarget:
    """Element selected by position in a previously materialized element list."""

    index: int

    target_type = "index"

    @property
    def raw(self) -> int:
        return self.index


@dataclass(frozen=True, slots=True)
class DescriptionTarget:
    """Element selected by label text, description or identifier."""

    description: str

    target_type = "description"

    @property
    def raw(self) -> str:
        return self.description


Target = Union[IndexTarget, DescriptionTarget]


def parse_target(raw: Any) -> Target:
    # bool is an int subclass; a JSON true/false is never an index.
    if isinstance(raw, bool):
        raise ValidationError(
            "target must be a number (index) or string (description)",
            suggestion="Pass an element index from the DOM state or a label/description string",
        )
    if isinstance(raw, int):
        if raw < 0:
            raise ValidationError("target index must be non-negative", details={"target": raw})
        return IndexTarget(raw)
    if isinstance(raw, float):
        if not math.isfinite(raw):
            raise ValidationError("target index must be a finite number", details={"target": repr(raw)})
        if raw < 0:
            raise ValidationError("target index must be non-negative", details={"target": raw})
        if not raw.is_integer():
            raise ValidationError("target index must be a whole number", details={"target": raw})
        return IndexTarget(int(raw))
    if isinstance(raw, str):
        if len(raw) == 0:
            raise ValidationError("target description cannot be empty")
        return DescriptionTarget(raw)
    raise ValidationError(
        "target must be a number (index) or string (description)",
        details={"targetType": type(raw).__name__},
    )


def _is_primitive(value: Any) -> bool:
    return isinstance(value, (str, bool, int, float))


def _serialize_primitive(value: Primitive) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    return value


@dataclass(frozen=True, slots=True)
class ValuePayload:
    """Closed variant over text, number, boolean and multi-select sequences."""

    kind: str  # "text" | "number" | "boolean" | "sequence"
    value: Any

    def serialize(self) -> str:
        if self.kind == "sequence":
            return "[" + " ".join(_serialize_primitive(item) for item in self.value) + "]"
        return _serialize_primitive(self.value)

    @property
    def length(self) -> int:
        return len(self.serialize().encode("utf-8"))

    def to_wire(self) -> Any:
        if self.kind == "sequence":
            return list(self.value)
        return self.value


def parse_value(raw: Any) -> ValuePayload:
    if raw is None:
        raise ValidationError("value is required", suggestion="Pass a string, number, boolean, or list of options")
    if isinstance(raw, bool):
        return ValuePayload("boolean", raw)
    if isinstance(raw, (int, float)):
        if isinstance(raw, float) and not math.isfinite(raw):
            raise ValidationError("value must be a finite number", details={"value": repr(raw)})
        return ValuePayload("number", raw)
    if isinstance(raw, str):
        return ValuePayload("text", raw)
    if isinstance(raw, (list, tuple)):
        for pos, item in enumerate(raw):
            if not _is_primitive(item):
                raise ValidationError(
                    "multi-select value items must be strings, numbers, or booleans",
                    details={"position": pos, "itemType": type(item).__name__},
                )
        return ValuePayload("sequence", tuple(raw))
    raise ValidationError(
        "value must be a string, number, boolean, or list",
        details={"valueType": type(raw).__name__},
    )


__all__ = [
    "DescriptionTarget",
    "IndexTarget",
    "Target",
    "ValuePayload",
    "parse_target",
    "parse_value",
]
