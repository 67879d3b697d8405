"""set_value: adaptive invocation of the extension's value-setting RPC."""

from __future__ import annotations

from .invoker import SET_VALUE_METHOD, RequestEnvelope, SetValueInvoker, build_envelope, parse_arguments
from .options import OPTION_FIELDS, default_options, normalize_options
from .outcome import ElementInfo, SetValueOutcome, interpret_result
from .payload import DescriptionTarget, IndexTarget, ValuePayload, parse_target, parse_value
from .timeouts import TimeoutBudget, estimate_timeout, protocol_buffer, resolve_timeout

__all__ = [
    "OPTION_FIELDS",
    "SET_VALUE_METHOD",
    "DescriptionTarget",
    "ElementInfo",
    "IndexTarget",
    "RequestEnvelope",
    "SetValueInvoker",
    "SetValueOutcome",
    "TimeoutBudget",
    "ValuePayload",
    "build_envelope",
    "default_options",
    "estimate_timeout",
    "interpret_result",
    "normalize_options",
    "parse_arguments",
    "parse_target",
    "parse_value",
    "protocol_buffer",
    "resolve_timeout",
]
