#!/usr/bin/env python3
"""Local control client for the catpoint panel.

The panel daemon owns the engine and its state store; catpointctl talks to it
over a local UNIX socket.

Commands:
  status | disarm | arm-home | arm-away
  add-sensor NAME TYPE | remove-sensor NAME TYPE
  activate NAME TYPE | deactivate NAME TYPE | recheck NAME TYPE
  scan PATH [THRESHOLD] | test-notify

Socket path:
  - default: /run/catpoint/catpoint.sock
  - override: --socket PATH or CATPOINT_SOCKET env var
"""

from __future__ import annotations

import argparse
import json
import os
import shlex
import socket
import sys

from catpoint.config import get_notifier_config
from catpoint.constants import CONTROL_COMMANDS, DEFAULT_SOCKET
from catpoint.notify import Notifier


def _send(sock_path: str, cmd: str) -> dict:
    s = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        s.connect(sock_path)
        s.sendall((cmd.strip() + "\n").encode("utf-8"))
        data = b""
        while b"\n" not in data and len(data) < 65536:
            chunk = s.recv(4096)
            if not chunk:
                break
            data += chunk
        line = data.decode("utf-8", errors="replace").strip()
        if not line:
            return {"ok": False, "error": "empty response"}
        try:
            return json.loads(line)
        except ValueError:
            return {"ok": False, "error": "non-json response", "raw": line}
    finally:
        s.close()


def format_status(resp: dict) -> str:
    state = resp.get("state", {})
    lines = [
        f"ok  version={resp.get('version', '')} arming={state.get('arming_status')} "
        f"alarm={state.get('alarm_status')} cat={state.get('cat_detected')}",
    ]
    for s in state.get("sensors", []):
        lines.append(f"  {s.get('name')} ({s.get('type')}): {'Active' if s.get('active') else 'Inactive'}")
    return "\n".join(lines)


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Control the catpoint panel via its local UNIX socket")
    ap.add_argument("command", choices=list(CONTROL_COMMANDS) + ["test-notify"],
                    help="Command to send to the daemon")
    ap.add_argument("args", nargs="*", help="Command arguments (sensor NAME TYPE, or image PATH [THRESHOLD])")
    ap.add_argument("--socket", default=os.environ.get("CATPOINT_SOCKET", DEFAULT_SOCKET),
                    help=f"Control socket path (default: {DEFAULT_SOCKET})")
    ap.add_argument("--json", action="store_true", help="Print raw JSON response")
    args = ap.parse_args(argv)

    if args.command == "test-notify":
        notifier = Notifier(**get_notifier_config())
        if not notifier.enabled:
            print("error: CATPOINT_NOTIFY=1, PUSHOVER_TOKEN and PUSHOVER_USER must be set", file=sys.stderr)
            return 2
        if notifier._send_sync("Catpoint", "Test notification from catpointctl", 0):
            print("ok")
            return 0
        print("error: notification failed", file=sys.stderr)
        return 2

    cmd = " ".join([args.command] + [shlex.quote(a) for a in args.args])
    try:
        resp = _send(args.socket, cmd)
    except OSError as e:
        print(f"error: cannot reach {args.socket}: {e}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(resp, indent=2, sort_keys=True))
        return 0 if resp.get("ok") else 2

    if not resp.get("ok"):
        print(f"error: {resp.get('error', 'unknown error')}", file=sys.stderr)
        raw = resp.get("raw")
        if raw:
            print(raw, file=sys.stderr)
        return 2

    if args.command == "status":
        print(format_status(resp))
    elif "alarm_status" in resp:
        print(f"ok  alarm={resp['alarm_status']}")
    else:
        print("ok")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
