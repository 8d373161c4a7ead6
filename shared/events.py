from __future__ import annotations

from typing import Any, Callable, List

Listener = Callable[[Any], None]


# ─────────────────────────────────────────────────────────────────────────────
# Change notification
# ─────────────────────────────────────────────────────────────────────────────
class ChangeNotifier:
    """
    Per-entity list of "changed" listeners.

    Listeners are called synchronously, in registration order, with the
    changed subject as the only argument; they re-read whatever they need.
    Exceptions raised by a listener propagate to whoever triggered the change.
    """

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Listener:
        if listener not in self._listeners:
            self._listeners.append(listener)
        return listener

    def unsubscribe(self, listener: Listener) -> bool:
        """Remove a listener. Returns False if it was not registered."""
        try:
            self._listeners.remove(listener)
        except ValueError:
            return False
        return True

    def notify(self, subject: Any) -> None:
        # snapshot: a listener may unsubscribe itself while being notified
        for listener in tuple(self._listeners):
            listener(subject)

    def __len__(self) -> int:
        return len(self._listeners)

    def __contains__(self, listener: object) -> bool:
        return listener in self._listeners
