from __future__ import annotations

from typing import Any, Callable, List, Optional

Listener = Callable[[Any], None]


class ListenerRegistry:
    """Ordered set of callbacks for one notification channel.

    Callbacks run synchronously in registration order. Adding a callback that
    is already registered and removing one that is not are both no-ops. A
    callback that raises is reported through the logger and does not stop the
    remaining callbacks."""
    def __init__(self, channel: str, logger=None):
        self.channel = channel
        self.logger = logger
        self._listeners: List[Listener] = []

    def add(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def __contains__(self, listener) -> bool:
        return listener in self._listeners

    def __len__(self) -> int:
        return len(self._listeners)

    def fire(self, value: Optional[Any]) -> None:
        # Snapshot so a callback may unregister itself mid-dispatch.
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception as e:
                if self.logger is None:
                    raise
                self.logger.emit(
                    "listener_error",
                    channel=self.channel,
                    listener=getattr(listener, "__name__", repr(listener)),
                    error=str(e),
                )
