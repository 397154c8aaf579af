from __future__ import annotations
import threading
from typing import Optional
import requests

from .state import AlarmStatus

PUSHOVER_URL = "https://api.pushover.net/1/messages.json"


class Notifier:
    """Pushover client. Sends happen on a daemon thread and never raise."""
    def __init__(self, enabled: bool, pushover_token: Optional[str], pushover_user: Optional[str], timeout_s: float = 5.0):
        self.enabled = enabled and bool(pushover_token and pushover_user)
        self._token = pushover_token
        self._user = pushover_user
        self._timeout = timeout_s

    def send(self, title: str, message: str, priority: int = 0):
        if not self.enabled:
            return
        threading.Thread(target=self._send_sync, args=(title, message, priority), daemon=True).start()

    def _send_sync(self, title: str, message: str, priority: int) -> bool:
        try:
            resp = requests.post(
                PUSHOVER_URL,
                data={
                    "token": self._token,
                    "user": self._user,
                    "title": title,
                    "message": message,
                    "priority": priority,
                },
                timeout=self._timeout,
            )
            return resp.ok
        except Exception:
            return False


class AlarmNotifier:
    """Alarm-status listener that pushes ALARM and PENDING_ALARM to the phone.

    Only rising severity is pushed: NO_ALARM, repeats and de-escalation
    (ALARM -> PENDING_ALARM) are skipped."""
    PRIORITY = {
        AlarmStatus.PENDING_ALARM: 0,
        AlarmStatus.ALARM: 1,
    }

    def __init__(self, notifier: Notifier, title: str = "Catpoint"):
        self.notifier = notifier
        self.title = title
        self._last: Optional[AlarmStatus] = None

    def __call__(self, status: AlarmStatus):
        previous, self._last = self._last, status
        if previous is not None and status <= previous:
            return
        priority = self.PRIORITY.get(status)
        if priority is None:
            return
        self.notifier.send(self.title, f"{status.name}: {status.description}", priority=priority)
