"""Local WebSocket endpoint the browser extension dials into.

The MCP server thread calls `rpc_call` synchronously; frames are exchanged on an
asyncio loop owned by a daemon thread.

Frames (JSON text):
  extension -> gateway: hello, rpcResult, ping
  gateway -> extension: helloAck, rpc, pong
"""

from __future__ import annotations

import asyncio
import contextlib
import errno
import json
import logging
import os
import re
import threading
import time
from concurrent.futures import Future, InvalidStateError
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Any

from .transport import ExtensionRpcError

EXTENSION_BRIDGE_PROTOCOL_VERSION = "2026-01-11"

HELLO_TIMEOUT_S = 2.5
MAX_FRAME_BYTES = 8_000_000

# Some Chrome contexts omit Origin on localhost connects.
_ALLOWED_ORIGINS = [None, re.compile(r"^null$"), re.compile(r"^chrome-extension://[a-p]{32}/?$")]

logger = logging.getLogger("mcp.value_bridge.gateway")


def _now_ms() -> int:
    return int(time.time() * 1000)


def _remaining(deadline: float) -> float:
    return max(0.0, deadline - time.monotonic())


def _import_websockets():
    try:
        import websockets  # type: ignore[import-not-found]

        return websockets
    except Exception as exc:  # noqa: BLE001
        raise RuntimeError(
            "The extension gateway requires the 'websockets' Python package. Install it (pip install websockets)."
        ) from exc


@dataclass(frozen=True)
class ExtensionClientInfo:
    extension_id: str
    extension_version: str | None = None
    user_agent: str | None = None
    capabilities: dict[str, Any] | None = None

    @classmethod
    def from_hello(cls, hello: dict[str, Any]) -> ExtensionClientInfo:
        caps = hello.get("capabilities")
        return cls(
            extension_id=str(hello.get("extensionId") or "").strip(),
            extension_version=str(hello.get("extensionVersion") or "") or None,
            user_agent=str(hello.get("userAgent") or "") or None,
            capabilities=caps if isinstance(caps, dict) else None,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"extensionId": self.extension_id}
        if self.extension_version:
            out["extensionVersion"] = self.extension_version
        if self.user_agent:
            out["userAgent"] = self.user_agent
        if self.capabilities:
            out["capabilities"] = self.capabilities
        return out


@dataclass
class _PendingCall:
    method: str
    future: Future = field(default_factory=Future)
    sent_at_ms: int = field(default_factory=_now_ms)


def hello_rejection(hello: Any, expected_extension_id: str | None) -> tuple[int, str] | None:
    """Return (close code, reason) when a hello frame must be refused."""
    if not isinstance(hello, dict) or hello.get("type") != "hello":
        return 1002, "expected hello"
    ext_id = str(hello.get("extensionId") or "").strip()
    if not ext_id:
        return 1002, "missing extensionId"
    if expected_extension_id is not None and ext_id != expected_extension_id:
        return 1008, "unexpected extensionId"
    return None


def rpc_failure(frame: dict[str, Any]) -> ExtensionRpcError:
    """Build the exception for an `rpcResult` frame with ok=false.

    The extension reports set_value failures as
    `{"code": -32000, "message": "...", "data": {"error_code": "ELEMENT_NOT_FOUND"}}`;
    older builds send the message as a bare string.
    """
    err = frame.get("error")
    if isinstance(err, str):
        err = {"message": err}
    elif not isinstance(err, dict):
        err = {}
    message = err.get("message")
    if not isinstance(message, str) or not message:
        message = "Extension RPC failed"
    data = err.get("data") if isinstance(err.get("data"), dict) else None
    return ExtensionRpcError(message, code=err.get("code"), data=data, remote=True)


class ExtensionGateway:
    """Accepts one extension connection at a time and relays RPCs to it.

    Calls are refused while no extension is connected. A reconnecting
    extension replaces the previous connection.
    """

    def __init__(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        expected_extension_id: str | None = None,
        port_span: int = 10,
    ) -> None:
        self.host = (host or "127.0.0.1").strip() or "127.0.0.1"
        self.port = int(port or 8765)
        self._configured_port = self.port
        self._port_span = max(0, min(int(port_span), 250))
        self.expected_extension_id = (expected_extension_id or "").strip() or None
        self._started_at_ms = _now_ms()

        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._ready = threading.Event()
        self._stop: asyncio.Event | None = None

        self._server: Any | None = None
        self._bind_error: str | None = None

        self._ws: Any | None = None
        self._client: ExtensionClientInfo | None = None
        self._session_id: str | None = None
        self._last_seen_ms = 0
        self._connected = threading.Event()

        self._next_id = 1
        self._pending: dict[int, _PendingCall] = {}

    def start(self, *, wait_timeout: float = 5.0) -> None:
        """Start listening; raises RuntimeError when no candidate port can be bound."""
        if self._thread is not None and self._thread.is_alive():
            return

        self._ready.clear()
        with self._lock:
            self._bind_error = None
        self._thread = threading.Thread(
            target=lambda: asyncio.run(self._serve()), name="mcp-value-bridge-gateway", daemon=True
        )
        self._thread.start()

        self._ready.wait(timeout=max(0.05, float(wait_timeout)))
        with self._lock:
            if self._server is not None:
                return
            bind_error = self._bind_error
        raise RuntimeError(
            f"Extension gateway failed to start on {self.host}:{self.port}" + (f": {bind_error}" if bind_error else "")
        )

    def stop(self, *, timeout: float = 2.0) -> None:
        loop, stop = self._loop, self._stop
        if loop is not None and stop is not None:
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(stop.set)
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def status(self) -> dict[str, Any]:
        with self._lock:
            out: dict[str, Any] = {
                "listening": self._server is not None,
                "host": self.host,
                "port": self.port,
                "configuredPort": self._configured_port,
                "connected": self._ws is not None,
                "sessionId": self._session_id,
                "pendingCalls": sorted(call.method for call in self._pending.values()),
                "client": None,
            }
            if self._bind_error:
                out["bindError"] = self._bind_error
            if self._client is not None:
                out["client"] = {**self._client.to_dict(), "lastSeenMs": self._last_seen_ms}
            return out

    def is_connected(self) -> bool:
        with self._lock:
            return self._ws is not None

    def wait_for_connection(self, *, timeout: float = 5.0) -> bool:
        """Block until an extension has completed the handshake, or until timeout."""
        return self._connected.wait(timeout=max(0.0, float(timeout)))

    def rpc_call(self, method: str, params: dict[str, Any] | None = None, *, timeout: float = 10.0) -> Any:
        """Send one RPC and wait for its result.

        `timeout` bounds the whole call (send included). Raises ExtensionRpcError;
        `remote=True` marks failures reported by the extension itself.
        """
        if not isinstance(method, str) or not method.strip():
            raise ExtensionRpcError("Extension RPC method is required")
        deadline = time.monotonic() + max(0.1, float(timeout))

        with self._lock:
            ws, loop = self._ws, self._loop
            if ws is None or loop is None:
                raise ExtensionRpcError(
                    "Extension is not connected. Install/enable the extension and ensure it can connect to the gateway."
                )
            req_id = self._next_id
            self._next_id += 1
            call = _PendingCall(method=method)
            self._pending[req_id] = call

        frame: dict[str, Any] = {"type": "rpc", "id": req_id, "method": method}
        if isinstance(params, dict) and params:
            frame["params"] = params

        try:
            sending = asyncio.run_coroutine_threadsafe(self._send(ws, frame), loop)
            try:
                sending.result(timeout=_remaining(deadline))
            except FutureTimeoutError as exc:
                sending.cancel()
                raise ExtensionRpcError(f"Extension RPC send timed out: method={method}") from exc
            except Exception as exc:  # noqa: BLE001
                raise ExtensionRpcError(f"Extension RPC send failed: {exc}") from exc

            try:
                return call.future.result(timeout=_remaining(deadline))
            except FutureTimeoutError as exc:
                logger.warning("rpc_timeout id=%s method=%s timeout=%.1fs", req_id, method, timeout)
                raise ExtensionRpcError(f"Extension RPC timed out: method={method} timeout={timeout:.1f}s") from exc
        finally:
            with self._lock:
                self._pending.pop(req_id, None)

    def _port_candidates(self) -> list[int]:
        base = self._configured_port
        return [p for p in range(base, base + self._port_span + 1) if 1 <= p <= 65535]

    async def _serve(self) -> None:
        websockets = _import_websockets()
        self._loop = asyncio.get_running_loop()
        self._stop = asyncio.Event()

        server = None
        bind_error: str | None = None
        for port in self._port_candidates():
            try:
                server = await websockets.serve(
                    self._handle_connection,
                    self.host,
                    port,
                    origins=_ALLOWED_ORIGINS,
                    max_size=MAX_FRAME_BYTES,
                    ping_interval=None,
                )
            except OSError as exc:
                bind_error = str(exc)
                if getattr(exc, "errno", None) in {errno.EADDRINUSE, errno.EACCES}:
                    continue
                break
            self.port = port
            break

        with self._lock:
            self._server = server
            self._bind_error = None if server is not None else (bind_error or "unknown bind error")
        if server is None:
            logger.error("gateway_bind_failed host=%s port=%s error=%s", self.host, self.port, self._bind_error)
        else:
            logger.info("gateway_listening host=%s port=%s", self.host, self.port)
        self._ready.set()
        if server is None:
            return

        try:
            await self._stop.wait()
        finally:
            await self._shutdown()

    async def _handle_connection(self, ws) -> None:  # type: ignore[no-untyped-def]
        client = await self._accept_hello(ws)
        if client is None:
            return

        session_id = f"ext-{_now_ms()}-{os.getpid()}"
        with self._lock:
            replaced = self._ws is not None
            self._ws = ws
            self._client = client
            self._session_id = session_id
            self._last_seen_ms = _now_ms()
            self._connected.clear()

        ack = {
            "type": "helloAck",
            "protocolVersion": EXTENSION_BRIDGE_PROTOCOL_VERSION,
            "sessionId": session_id,
            "serverStartedAtMs": self._started_at_ms,
            "gatewayPort": self.port,
        }
        try:
            await self._send(ws, ack)
        except Exception:  # noqa: BLE001
            self._disconnect(ws)
            return
        self._connected.set()
        logger.info(
            "extension_connected extension_id=%s version=%s session=%s replaced=%s",
            client.extension_id,
            client.extension_version,
            session_id,
            replaced,
        )

        try:
            async for raw in ws:
                with self._lock:
                    self._last_seen_ms = _now_ms()
                try:
                    frame = json.loads(raw)
                except ValueError:
                    continue
                await self._on_frame(ws, frame)
        except Exception as exc:  # noqa: BLE001
            logger.debug("extension_connection_closed error=%s", exc)
        finally:
            self._disconnect(ws)

    async def _accept_hello(self, ws) -> ExtensionClientInfo | None:  # type: ignore[no-untyped-def]
        try:
            raw = await asyncio.wait_for(ws.recv(), timeout=HELLO_TIMEOUT_S)
        except Exception as exc:  # noqa: BLE001
            logger.warning("extension_hello_missing error=%s", str(exc) or type(exc).__name__)
            return None
        try:
            hello = json.loads(raw)
        except ValueError:
            hello = None

        rejection = hello_rejection(hello, self.expected_extension_id)
        if rejection is not None:
            code, reason = rejection
            logger.warning("extension_rejected reason=%s", reason)
            with contextlib.suppress(Exception):
                await ws.close(code=code, reason=reason)
            return None
        return ExtensionClientInfo.from_hello(hello)

    async def _on_frame(self, ws, frame: Any) -> None:  # type: ignore[no-untyped-def]
        if not isinstance(frame, dict):
            return
        kind = frame.get("type")
        if kind == "rpcResult":
            self._settle(frame)
        elif kind == "ping":
            with contextlib.suppress(Exception):
                await self._send(ws, {"type": "pong", "ts": _now_ms()})

    def _settle(self, frame: dict[str, Any]) -> None:
        try:
            req_id = int(frame.get("id"))
        except (TypeError, ValueError):
            return
        with self._lock:
            call = self._pending.get(req_id)
        if call is None or call.future.done():
            logger.debug("rpc_result_unmatched id=%s", req_id)
            return

        took_ms = _now_ms() - call.sent_at_ms
        if bool(frame.get("ok")):
            logger.debug("rpc_ok id=%s method=%s took_ms=%d", req_id, call.method, took_ms)
            with contextlib.suppress(InvalidStateError):
                call.future.set_result(frame.get("result"))
            return

        exc = rpc_failure(frame)
        logger.info(
            "rpc_failed id=%s method=%s error_code=%s took_ms=%d", req_id, call.method, exc.error_code, took_ms
        )
        with contextlib.suppress(InvalidStateError):
            call.future.set_exception(exc)

    async def _shutdown(self) -> None:
        with self._lock:
            srv, self._server = self._server, None
            ws = self._ws
        if srv is not None:
            with contextlib.suppress(Exception):
                srv.close()
                await srv.wait_closed()
        if ws is not None:
            with contextlib.suppress(Exception):
                await ws.close()
        self._disconnect(ws)
        logger.info("gateway_stopped host=%s port=%s", self.host, self.port)

    def _disconnect(self, ws: Any) -> None:
        with self._lock:
            # A newer connection may already have replaced this one.
            if ws is not None and self._ws is not ws:
                return
            was_connected = self._ws is not None
            self._ws = None
            self._client = None
            self._session_id = None
            self._last_seen_ms = 0
            self._connected.clear()
            pending = list(self._pending.values())
            self._pending.clear()

        if was_connected:
            logger.info("extension_disconnected failed_calls=%d", len(pending))
        for call in pending:
            with contextlib.suppress(InvalidStateError):
                call.future.set_exception(ExtensionRpcError("Extension disconnected"))

    async def _send(self, ws, payload: dict[str, Any]) -> None:  # type: ignore[no-untyped-def]
        await ws.send(json.dumps(payload, ensure_ascii=False))


__all__ = [
    "EXTENSION_BRIDGE_PROTOCOL_VERSION",
    "ExtensionClientInfo",
    "ExtensionGateway",
    "hello_rejection",
    "rpc_failure",
]
