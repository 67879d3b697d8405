"""
Value-set invoker: normalize -> estimate -> dispatch -> interpret.

One call, one transport invocation. Nothing is retried and no state is kept
between calls, so a single invoker can serve concurrent callers.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from ...transport import RpcResponse, RpcTransport
from ..base import ApplicationError, TransportError, ValidationError
from .options import normalize_options
from .outcome import SetValueOutcome, interpret_result
from .payload import Target, ValuePayload, parse_target, parse_value
from .timeouts import TimeoutBudget, resolve_timeout

SET_VALUE_METHOD = "set_value"

_ARGUMENT_KEYS = frozenset({"target", "value", "timeout", "options"})


@dataclass(frozen=True, slots=True)
class RequestEnvelope:
    target: Target
    value: ValuePayload
    options: dict[str, Any]
    budget: TimeoutBudget

    @property
    def target_type(self) -> str:
        return self.target.target_type

    @property
    def combined_timeout(self) -> int:
        return self.budget.combined_ms

    def to_params(self) -> dict[str, Any]:
        return {
            "target": self.target.raw,
            "value": self.value.to_wire(),
            "options": dict(self.options),
            "target_type": self.target_type,
        }


def build_envelope(
    target: Any,
    value: Any,
    *,
    timeout: Any = None,
    options: Any = None,
) -> RequestEnvelope:
    """Validate raw inputs into a RequestEnvelope. Raises ValidationError on the first violation."""
    parsed_target = parse_target(target)
    payload = parse_value(value)
    normalized = normalize_options(options)
    budget = resolve_timeout(timeout, payload.length)
    return RequestEnvelope(target=parsed_target, value=payload, options=normalized, budget=budget)


def parse_arguments(arguments: Any) -> RequestEnvelope:
    """Validate tool-call style arguments (`target`, `value`, `timeout`, `options`)."""
    _check_argument_keys(arguments)
    return build_envelope(
        arguments["target"],
        arguments["value"],
        timeout=arguments.get("timeout"),
        options=arguments.get("options"),
    )


def _check_argument_keys(arguments: Any) -> None:
    if not isinstance(arguments, Mapping):
        raise ValidationError("arguments must be an object")
    unknown = sorted(str(k) for k in arguments if k not in _ARGUMENT_KEYS)
    if unknown:
        raise ValidationError(f"unknown argument: {unknown[0]}", details={"unknown": unknown})
    if "target" not in arguments:
        raise ValidationError("target is required")
    if "value" not in arguments:
        raise ValidationError("value is required")


def _transport_error_from_rpc(error: Any) -> TransportError:
    message = getattr(error, "message", None) or "Extension RPC failed"
    details: dict[str, Any] = {}
    code = "RPC_ERROR"
    rpc_code = getattr(error, "code", None)
    if rpc_code is not None:
        details["rpcCode"] = rpc_code
    data = getattr(error, "data", None)
    if isinstance(data, Mapping):
        details["data"] = dict(data)
        if isinstance(data.get("error_code"), str):
            code = data["error_code"]
    return TransportError(f"RPC error: {message}", code=code, details=details)


class SetValueInvoker:
    """Set a value on an interactive element through the extension transport."""

    def __init__(self, transport: RpcTransport, *, logger: logging.Logger | None = None) -> None:
        self._transport = transport
        self._logger = logger or logging.getLogger("mcp.value_bridge.set_value")

    def invoke(self, arguments: Mapping[str, Any]) -> SetValueOutcome:
        """Run one set_value call from tool-call style arguments."""
        try:
            _check_argument_keys(arguments)
        except ValidationError as exc:
            self._logger.info("set_value_invalid reason=%s", exc.reason)
            raise
        return self.set_value(
            arguments["target"],
            arguments["value"],
            timeout=arguments.get("timeout"),
            options=arguments.get("options"),
        )

    def set_value(
        self,
        target: Any,
        value: Any,
        *,
        timeout: Any = None,
        options: Any = None,
    ) -> SetValueOutcome:
        started = time.monotonic()
        try:
            envelope = build_envelope(target, value, timeout=timeout, options=options)
        except ValidationError as exc:
            self._logger.info("set_value_invalid reason=%s", exc.reason)
            raise

        budget = envelope.budget
        self._logger.info(
            "set_value_dispatch target_type=%s value_bytes=%d timeout_ms=%d buffer_ms=%d auto=%s",
            envelope.target_type,
            envelope.value.length,
            budget.timeout_ms,
            budget.buffer_ms,
            budget.auto,
        )
        self._logger.debug("set_value_options %s", envelope.options)

        response = self._dispatch(envelope, started)
        elapsed = time.monotonic() - started

        try:
            outcome = interpret_result(response.result, target=envelope.target.raw, value=envelope.value.to_wire())
        except ApplicationError as exc:
            self._logger.warning(
                "set_value_failed code=%s reason=%s execution_time=%.3f", exc.code, exc.reason, elapsed
            )
            raise
        outcome.execution_time = elapsed
        outcome.timeout_ms = budget.timeout_ms
        outcome.buffer_ms = budget.buffer_ms
        self._logger.info(
            "set_value_ok element_type=%s input_method=%s element_index=%s execution_time=%.3f",
            outcome.element_type,
            outcome.input_method,
            outcome.element_index,
            elapsed,
        )
        return outcome

    def _dispatch(self, envelope: RequestEnvelope, started: float) -> RpcResponse:
        rpc_started = time.monotonic()
        try:
            response = self._transport.invoke(SET_VALUE_METHOD, envelope.to_params(), envelope.combined_timeout)
        except Exception as exc:  # noqa: BLE001
            reason = str(exc) or type(exc).__name__
            self._logger.warning(
                "set_value_transport_failed error=%s execution_time=%.3f", reason, time.monotonic() - started
            )
            raise TransportError(
                f"set_value RPC failed: {reason}",
                suggestion="Ensure the browser extension is connected, then retry",
                details={"timeoutMs": envelope.combined_timeout, "errorType": type(exc).__name__},
            ) from exc
        self._logger.info("set_value_rpc_done rpc_duration=%.3f", time.monotonic() - rpc_started)

        if response.error is not None:
            err = _transport_error_from_rpc(response.error)
            self._logger.warning("set_value_rpc_error code=%s reason=%s", err.code, err.reason)
            raise err
        return response


__all__ = ["SET_VALUE_METHOD", "RequestEnvelope", "SetValueInvoker", "build_envelope", "parse_arguments"]
