"""Request/response channel to the browser-side executor.

The set_value core only sees `RpcTransport.invoke(method, params, timeout_ms)`.
`GatewayTransport` adapts the extension gateway (seconds-based, raising) to it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


class ExtensionRpcError(Exception):
    """Extension round-trip failed (not connected, send failure, timeout, peer error)."""

    def __init__(
        self,
        message: str,
        *,
        code: Any = None,
        data: dict[str, Any] | None = None,
        remote: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.data = data
        # True when the extension answered with an explicit error object.
        self.remote = remote

    @property
    def error_code(self) -> str | None:
        """Machine-readable failure code the extension put in `data.error_code`."""
        code = (self.data or {}).get("error_code")
        return code if isinstance(code, str) and code else None


@dataclass(frozen=True, slots=True)
class RpcError:
    message: str
    code: Any = None
    data: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class RpcResponse:
    result: Any = None
    error: RpcError | None = None


class RpcTransport(Protocol):
    def invoke(self, method: str, params: dict[str, Any], timeout_ms: int) -> RpcResponse: ...


class RpcCaller(Protocol):
    def rpc_call(self, method: str, params: dict[str, Any] | None = None, *, timeout: float = 10.0) -> Any: ...


class GatewayTransport:
    """Expose an extension gateway as an RpcTransport.

    Peer-reported errors become `RpcResponse.error`; connection-level failures
    keep propagating as ExtensionRpcError.
    """

    def __init__(self, gateway: RpcCaller) -> None:
        self._gateway = gateway

    def invoke(self, method: str, params: dict[str, Any], timeout_ms: int) -> RpcResponse:
        try:
            result = self._gateway.rpc_call(method, params, timeout=timeout_ms / 1000.0)
        except ExtensionRpcError as exc:
            if not exc.remote:
                raise
            return RpcResponse(error=RpcError(message=exc.message, code=exc.code, data=exc.data))
        return RpcResponse(result=result)


__all__ = ["ExtensionRpcError", "GatewayTransport", "RpcCaller", "RpcError", "RpcResponse", "RpcTransport"]
