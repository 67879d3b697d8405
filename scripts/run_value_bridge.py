#!/usr/bin/env python3
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

print(
    f"[mcp] gateway={os.environ.get('MCP_EXTENSION_HOST', '127.0.0.1')}:"
    f"{os.environ.get('MCP_EXTENSION_PORT', '8765')} | "
    f"extension_id={os.environ.get('MCP_EXTENSION_ID', 'any')} | "
    f"log_level={os.environ.get('MCP_LOG_LEVEL', 'INFO')}",
    file=sys.stderr,
)

from mcp_servers.value_bridge.main import main  # noqa: E402

if __name__ == "__main__":
    main()
