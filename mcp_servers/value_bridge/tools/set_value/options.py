from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from ..base import ValidationError


@dataclass(frozen=True, slots=True)
class OptionField:
    name: str
    default: Any
    # Returns the normalized value or raises ValidationError.
    validate: Callable[[str, Any], Any]


def _bool_field(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"options.{name} must be a boolean", details={"option": name})
    return value


def _seconds_field(lo: float, hi: float) -> Callable[[str, Any], float]:
    def _validate(name: str, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError(f"options.{name} must be a number", details={"option": name})
        if not (lo <= value <= hi):
            raise ValidationError(
                f"options.{name} must be between {lo:g} and {hi:g} seconds",
                details={"option": name, "value": value},
            )
        return float(value)

    return _validate


OPTION_FIELDS: tuple[OptionField, ...] = (
    OptionField("clear_first", True, _bool_field),
    OptionField("submit", False, _bool_field),
    OptionField("wait_after", 1.0, _seconds_field(0.0, 30.0)),
)

_FIELDS_BY_NAME = {f.name: f for f in OPTION_FIELDS}


def default_options() -> dict[str, Any]:
    return {f.name: f.default for f in OPTION_FIELDS}


def normalize_options(raw: Any) -> dict[str, Any]:
    """Merge caller options over defaults. Any unknown key rejects the whole object."""
    options = default_options()
    if raw is None:
        return options
    if not isinstance(raw, Mapping):
        raise ValidationError("options must be an object", details={"optionsType": type(raw).__name__})

    unknown = [str(k) for k in raw if k not in _FIELDS_BY_NAME]
    if unknown:
        raise ValidationError(
            f"unknown option: {unknown[0]}",
            suggestion=f"Supported options: {', '.join(_FIELDS_BY_NAME)}",
            details={"unknown": unknown},
        )

    for key, value in raw.items():
        spec = _FIELDS_BY_NAME[key]
        options[key] = spec.validate(key, value)
    return options


__all__ = ["OPTION_FIELDS", "OptionField", "default_options", "normalize_options"]
