from __future__ import annotations

import logging

import pytest

from mcp_servers.value_bridge.config import BridgeConfig
from mcp_servers.value_bridge.sensitivity import is_sensitive_key, is_sensitive_target
from mcp_servers.value_bridge.server.redaction import redact_tool_arguments


def test_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "MCP_EXTENSION_HOST",
        "MCP_EXTENSION_PORT",
        "MCP_EXTENSION_ID",
        "MCP_EXTENSION_CONNECT_TIMEOUT",
        "MCP_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)

    cfg = BridgeConfig.from_env()
    assert cfg.extension_host == "127.0.0.1"
    assert cfg.extension_port == 8765
    assert cfg.extension_id is None
    assert cfg.connect_timeout == 4.0
    assert cfg.logging_level == logging.INFO


def test_config_from_env_is_lenient(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MCP_EXTENSION_HOST", "localhost")
    monkeypatch.setenv("MCP_EXTENSION_PORT", "not-a-port")
    monkeypatch.setenv("MCP_EXTENSION_ID", "  bbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb ")
    monkeypatch.setenv("MCP_EXTENSION_CONNECT_TIMEOUT", "99")
    monkeypatch.setenv("MCP_LOG_LEVEL", "warn")

    cfg = BridgeConfig.from_env()
    assert cfg.extension_host == "localhost"
    assert cfg.extension_port == 8765
    assert cfg.extension_id == "b" * 32
    assert cfg.connect_timeout == 15.0
    assert cfg.log_level == "WARNING"


def test_sensitive_targets() -> None:
    assert is_sensitive_key("Password") is True
    assert is_sensitive_key("auth") is True
    assert is_sensitive_key("Author") is False
    assert is_sensitive_target("Confirm password") is True
    assert is_sensitive_target("Search") is False
    assert is_sensitive_target(3) is False


def test_redact_set_value_arguments() -> None:
    args = {"target": "Password", "value": "hunter2"}
    safe = redact_tool_arguments("set_value", args)
    assert safe["value"] == "<redacted str len=7>"
    assert args["value"] == "hunter2"


@pytest.mark.parametrize("target", [5, "Field 3", "Search"])
def test_values_are_summarized_for_every_target(target: object) -> None:
    safe = redact_tool_arguments("set_value", {"target": target, "value": "hunter2"})
    assert safe["value"] == "<redacted str len=7>"
    assert safe["target"] == target

    multi = redact_tool_arguments("set_value", {"target": target, "value": ["a", "b"]})
    assert multi["value"] == "<redacted list len=2>"
    assert redact_tool_arguments("set_value", {"target": target, "value": 42})["value"] == "<redacted int>"


def test_debug_rendering_reveals_only_non_sensitive_values() -> None:
    plain = redact_tool_arguments("set_value", {"target": 2, "value": "hello"}, reveal_values=True)
    assert plain["value"] == "hello"

    secret = redact_tool_arguments("set_value", {"target": "API token", "value": "abc"}, reveal_values=True)
    assert secret["value"] == "<redacted str len=3>"


def test_debug_rendering_truncates_long_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MCP_LOG_VALUE_MAX_CHARS", "20")
    safe = redact_tool_arguments("set_value", {"target": 0, "value": "x" * 100}, reveal_values=True)
    assert safe["value"].startswith("x" * 20)
    assert "truncated len=100" in safe["value"]
