"""
Settings change events

Explicit observer lists used for change notification. Handlers are called
synchronously on the emitting thread, in subscription order. The handler
list is snapshotted before dispatch, so handlers may subscribe or
unsubscribe (themselves or others) while an emit is in progress.
"""
from typing import Any, Callable, List
from threading import Lock

from savesettings.utils.message import Log


SettingsHandler = Callable[[Any], None]


class SettingsEvent:
    """
    A named event with an ordered list of handlers.

    Usage:
        changed = SettingsEvent("settings_changed")
        changed.subscribe(on_changed)
        changed.emit(sender)
        changed.unsubscribe(on_changed)

    Handlers receive the sender. A handler that raises is logged and the
    remaining handlers still run.
    """

    def __init__(self, name: str):
        self.name = name
        self._handlers: List[SettingsHandler] = []
        self._lock = Lock()

    def subscribe(self, handler: SettingsHandler) -> None:
        """Add a handler. Subscribing the same handler twice has no effect."""
        with self._lock:
            if handler not in self._handlers:
                self._handlers.append(handler)

    def unsubscribe(self, handler: SettingsHandler) -> None:
        """Remove a handler. Unknown handlers are ignored."""
        with self._lock:
            if handler in self._handlers:
                self._handlers.remove(handler)

    def emit(self, sender: Any) -> None:
        with self._lock:
            handlers = self._handlers.copy()

        for handler in handlers:
            try:
                handler(sender)
            except Exception as e:
                Log.error(f"SettingsEvent: Error in handler for '{self.name}': {e}", exc_info=True)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._handlers)

    def clear(self) -> None:
        with self._lock:
            self._handlers.clear()

    def __repr__(self) -> str:
        return f"SettingsEvent({self.name!r}, subscribers={self.subscriber_count})"
