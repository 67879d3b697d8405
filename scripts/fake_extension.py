#!/usr/bin/env python3
"""Stand-in for the browser extension, for exercising the server without Chrome.

Connects to the local gateway, completes the hello handshake and answers
`set_value` RPCs with a canned result.
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Any

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from mcp_servers.value_bridge.extension_gateway import EXTENSION_BRIDGE_PROTOCOL_VERSION  # noqa: E402

FAKE_EXTENSION_ID = "a" * 32


def _answer(params: dict[str, Any], *, mode: str, delay_s: float) -> dict[str, Any]:
    if delay_s > 0:
        time.sleep(delay_s)
    if mode == "fail":
        return {"success": False, "error_code": "ELEMENT_NOT_FOUND", "message": "No element matches the target"}
    if mode == "rpc-error":
        return {"error": {"code": -32000, "message": "Failed to locate target element", "data": {"error_code": "ELEMENT_NOT_FOUND"}}}
    target = params.get("target")
    return {
        "success": True,
        "message": "Successfully set value",
        "element_index": target if params.get("target_type") == "index" else 0,
        "element_type": "text-input",
        "input_method": "type",
        "actual_value": params.get("value"),
        "element_info": {"tag_name": "input", "text": "", "placeholder": "Enter text here"},
        "options_used": params.get("options"),
    }


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--url", default="ws://127.0.0.1:8765")
    parser.add_argument("--mode", choices=["ok", "fail", "rpc-error"], default="ok")
    parser.add_argument("--delay", type=float, default=0.0, help="seconds to wait before answering")
    args = parser.parse_args()

    import websocket

    ws = websocket.create_connection(args.url, origin=f"chrome-extension://{FAKE_EXTENSION_ID}", timeout=10)
    ws.send(
        json.dumps(
            {
                "type": "hello",
                "protocolVersion": EXTENSION_BRIDGE_PROTOCOL_VERSION,
                "extensionId": FAKE_EXTENSION_ID,
                "extensionVersion": "0.0.0-fake",
                "userAgent": "fake_extension.py",
                "capabilities": {"setValue": True},
            }
        )
    )
    ack = json.loads(ws.recv())
    if ack.get("type") != "helloAck":
        print(f"unexpected handshake reply: {ack}", file=sys.stderr)
        return 1
    print(f"connected session={ack.get('sessionId')}", file=sys.stderr)

    ws.settimeout(None)
    try:
        while True:
            msg = json.loads(ws.recv())
            if msg.get("type") != "rpc":
                continue
            req_id = msg.get("id")
            if msg.get("method") != "set_value":
                reply = {"type": "rpcResult", "id": req_id, "ok": False, "error": {"code": -32601, "message": "unknown method"}}
            else:
                answer = _answer(msg.get("params") or {}, mode=args.mode, delay_s=args.delay)
                if "error" in answer:
                    reply = {"type": "rpcResult", "id": req_id, "ok": False, "error": answer["error"]}
                else:
                    reply = {"type": "rpcResult", "id": req_id, "ok": True, "result": answer}
            print(f"rpc id={req_id} method={msg.get('method')}", file=sys.stderr)
            ws.send(json.dumps(reply))
    except (KeyboardInterrupt, websocket.WebSocketConnectionClosedException):
        return 0
    finally:
        ws.close()


if __name__ == "__main__":
    raise SystemExit(main())
