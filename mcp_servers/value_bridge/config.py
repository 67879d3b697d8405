from __future__ import annotations

import logging
import os
from dataclasses import dataclass

DEFAULT_EXTENSION_HOST = "127.0.0.1"
DEFAULT_EXTENSION_PORT = 8765
MAX_CONNECT_TIMEOUT_S = 15.0


def _env_float(raw: str | None, fallback: float) -> float:
    if raw is None or not raw.strip():
        return fallback
    try:
        return float(raw)
    except ValueError:
        return fallback


def _env_int(raw: str | None, fallback: int) -> int:
    if raw is None or not raw.strip():
        return fallback
    try:
        return int(raw)
    except ValueError:
        return fallback


@dataclass
class BridgeConfig:
    extension_host: str = DEFAULT_EXTENSION_HOST
    extension_port: int = DEFAULT_EXTENSION_PORT
    extension_id: str | None = None
    connect_timeout: float = 4.0
    log_level: str = "INFO"

    @staticmethod
    def normalize_log_level(raw: str | None) -> str:
        level = (raw or "").strip().upper()
        if level == "WARN":
            return "WARNING"
        if level in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            return level
        return "INFO"

    @classmethod
    def from_env(cls) -> BridgeConfig:
        host = (os.environ.get("MCP_EXTENSION_HOST") or "").strip() or DEFAULT_EXTENSION_HOST
        port = _env_int(os.environ.get("MCP_EXTENSION_PORT"), DEFAULT_EXTENSION_PORT)
        if port < 1 or port > 65535:
            port = DEFAULT_EXTENSION_PORT
        ext_id = (os.environ.get("MCP_EXTENSION_ID") or "").strip() or None
        connect_timeout = _env_float(os.environ.get("MCP_EXTENSION_CONNECT_TIMEOUT"), 4.0)
        connect_timeout = max(0.0, min(connect_timeout, MAX_CONNECT_TIMEOUT_S))
        return cls(
            extension_host=host,
            extension_port=port,
            extension_id=ext_id,
            connect_timeout=connect_timeout,
            log_level=cls.normalize_log_level(os.environ.get("MCP_LOG_LEVEL")),
        )

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level, logging.INFO)
