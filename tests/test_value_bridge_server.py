from __future__ import annotations

import logging
from typing import Any

import pytest

import mcp_servers.value_bridge.main as mcp_server
from mcp_servers.value_bridge.config import BridgeConfig
from mcp_servers.value_bridge.server.contract import DEFAULT_PROTOCOL_VERSION
from mcp_servers.value_bridge.server.registry import create_default_registry
from mcp_servers.value_bridge.tools.base import ValidationError
from mcp_servers.value_bridge.transport import ExtensionRpcError, RpcResponse


class DummyTransport:
    def __init__(self, result: Any = None, exc: Exception | None = None) -> None:
        self.result = result if result is not None else {"success": True, "message": "ok"}
        self.exc = exc
        self.calls: list[tuple[str, dict[str, Any], int]] = []

    def invoke(self, method: str, params: dict[str, Any], timeout_ms: int) -> RpcResponse:
        self.calls.append((method, params, timeout_ms))
        if self.exc is not None:
            raise self.exc
        return RpcResponse(result=self.result)


class DummyGateway:
    def __init__(self, connected: bool) -> None:
        self.connected = connected
        self.waited: list[float] = []

    def is_connected(self) -> bool:
        return self.connected

    def wait_for_connection(self, *, timeout: float = 5.0) -> bool:
        self.waited.append(timeout)
        return self.connected

    def status(self) -> dict[str, Any]:
        return {"listening": True, "connected": self.connected}


def _server(transport: DummyTransport, monkeypatch: pytest.MonkeyPatch) -> tuple[mcp_server.McpServer, list]:
    sent: list[dict[str, Any]] = []
    monkeypatch.setattr(mcp_server, "_write_message", lambda payload: sent.append(payload))
    return mcp_server.McpServer(BridgeConfig(connect_timeout=0.0), transport=transport), sent


def _call(server: mcp_server.McpServer, arguments: dict[str, Any]) -> None:
    server.dispatch(
        {"jsonrpc": "2.0", "id": 7, "method": "tools/call", "params": {"name": "set_value", "arguments": arguments}}
    )


def test_initialize_and_tools_list(monkeypatch: pytest.MonkeyPatch) -> None:
    server, sent = _server(DummyTransport(), monkeypatch)
    server.dispatch({"jsonrpc": "2.0", "id": 1, "method": "initialize", "params": {"protocolVersion": "bogus"}})
    server.dispatch({"jsonrpc": "2.0", "id": 2, "method": "tools/list"})

    assert sent[0]["result"]["protocolVersion"] == DEFAULT_PROTOCOL_VERSION
    tools = sent[1]["result"]["tools"]
    assert [t["name"] for t in tools] == ["set_value"]
    schema = tools[0]["inputSchema"]
    assert schema["required"] == ["target", "value"]
    assert schema["properties"]["options"]["additionalProperties"] is False
    assert schema["properties"]["timeout"]["default"] == "auto"


def test_tools_call_success(monkeypatch: pytest.MonkeyPatch) -> None:
    transport = DummyTransport({"success": True, "message": "ok", "element_type": "checkbox"})
    server, sent = _server(transport, monkeypatch)
    _call(server, {"target": "Remember me", "value": True})

    result = sent[0]["result"]
    assert result["isError"] is False
    text = result["content"][0]["text"]
    assert "- Status: Success" in text
    assert "- Element Type: checkbox" in text
    assert transport.calls[0][1]["target_type"] == "description"


def test_tools_call_validation_error_is_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    transport = DummyTransport()
    server, sent = _server(transport, monkeypatch)
    _call(server, {"target": 0, "value": "x", "timeout": "10"})

    result = sent[0]["result"]
    assert result["isError"] is True
    assert "between 5000 and 600000" in result["content"][0]["text"]
    assert "INVALID_ARGUMENT" in result["content"][0]["text"]
    assert transport.calls == []


def test_tools_call_error_kinds_are_distinguishable(monkeypatch: pytest.MonkeyPatch) -> None:
    server, sent = _server(DummyTransport({"success": False, "error_code": "X", "message": "Y"}), monkeypatch)
    _call(server, {"target": 0, "value": "x"})
    assert "Error: Y (X)" in sent[-1]["result"]["content"][0]["text"]

    server, sent = _server(DummyTransport(exc=ExtensionRpcError("Extension disconnected")), monkeypatch)
    _call(server, {"target": 0, "value": "x"})
    text = sent[-1]["result"]["content"][0]["text"]
    assert sent[-1]["result"]["isError"] is True
    assert "TRANSPORT_ERROR" in text
    assert "Extension disconnected" in text


def test_unknown_method_and_tool(monkeypatch: pytest.MonkeyPatch) -> None:
    server, sent = _server(DummyTransport(), monkeypatch)
    server.dispatch({"jsonrpc": "2.0", "id": 3, "method": "resources/list"})
    server.dispatch({"jsonrpc": "2.0", "id": 4, "method": "tools/call", "params": {"name": "click", "arguments": {}}})

    assert sent[0]["error"]["code"] == -32601
    assert sent[1]["result"]["isError"] is True
    assert "Unknown tool: click" in sent[1]["result"]["content"][0]["text"]


def test_registry_refuses_when_extension_not_connected() -> None:
    gw = DummyGateway(connected=False)
    transport = DummyTransport()
    registry = create_default_registry(gw)

    result = registry.dispatch("set_value", BridgeConfig(connect_timeout=1.5), transport, {"target": 1, "value": "x"})

    assert result.is_error is True
    assert result.data["code"] == "EXTENSION_NOT_CONNECTED"
    assert result.data["details"]["kind"] == "transport"
    assert gw.waited == [1.5]
    assert transport.calls == []


def test_registry_dispatches_when_connected() -> None:
    registry = create_default_registry(DummyGateway(connected=True))
    transport = DummyTransport()
    result = registry.dispatch("set_value", BridgeConfig(), transport, {"target": 1, "value": "x"})
    assert result.is_error is False
    assert result.data["success"] is True
    assert len(transport.calls) == 1


@pytest.mark.parametrize(
    "arguments",
    [
        {"target": -1, "value": "x"},
        {"target": 0, "value": "x", "timeout": "1"},
        {"target": 0, "value": "x", "options": {"typo": True}},
        {"value": "x"},
    ],
)
def test_registry_validates_before_waiting_for_extension(arguments: dict[str, Any]) -> None:
    gw = DummyGateway(connected=False)
    transport = DummyTransport()
    registry = create_default_registry(gw)

    with pytest.raises(ValidationError):
        registry.dispatch("set_value", BridgeConfig(connect_timeout=3.0), transport, arguments)

    assert gw.waited == []
    assert transport.calls == []


def test_invalid_call_reports_validation_while_extension_is_away(monkeypatch: pytest.MonkeyPatch) -> None:
    sent: list[dict[str, Any]] = []
    monkeypatch.setattr(mcp_server, "_write_message", lambda payload: sent.append(payload))
    gw = DummyGateway(connected=False)
    server = mcp_server.McpServer(BridgeConfig(connect_timeout=3.0), gateway=gw, transport=DummyTransport())

    _call(server, {"target": -1, "value": "x", "timeout": "1"})

    result = sent[0]["result"]
    assert result["isError"] is True
    assert "INVALID_ARGUMENT" in result["content"][0]["text"]
    assert "EXTENSION_NOT_CONNECTED" not in result["content"][0]["text"]
    assert gw.waited == []


def test_tool_call_log_never_shows_raw_value(monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="mcp.value_bridge")
    server, _ = _server(DummyTransport(), monkeypatch)

    _call(server, {"target": 5, "value": "hunter2"})

    assert "tool=set_value" in caplog.text
    assert "<redacted str len=7>" in caplog.text
    assert "hunter2" not in caplog.text
