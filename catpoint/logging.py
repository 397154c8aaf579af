from __future__ import annotations

import json
import sys
import time


class JsonLogger:
    """Minimal structured logger.

    Emits single-line events for panel transitions (arming, alarm, sensors, cat
    verdicts) so logs are easy to grep and machine-parse."""
    def __init__(self, enable_json: bool, stream=None):
        """Create an event logger.

        Args:
            enable_json: Emit JSON lines instead of human-readable lines.
            stream: A file-like object used for event output (defaults to stdout).
        """
        self.enable_json = enable_json
        self.stream = stream

    def emit(self, event: str, **fields):
        """Emit an event with a name and optional key/value fields."""
        t = time.time()
        ms = int((t - int(t)) * 1000)
        stamp = time.strftime('%Y-%m-%d %H:%M:%S', time.localtime(t)) + f'.{ms:03d}'
        out = self.stream if self.stream is not None else sys.stdout
        if self.enable_json:
            payload = {"ts": t, "ts_iso": stamp, "event": event, **fields}
            out.write(json.dumps(payload, sort_keys=True, default=str) + "\n")
        else:
            msg = f"[{stamp}] {event}"
            if fields:
                msg += " " + " ".join(f"{k}={v}" for k, v in fields.items())
            out.write(msg + "\n")
        out.flush()
