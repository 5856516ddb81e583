"""Event dispatch for the headless document model.

Dispatch follows the platform's three phases: capture listeners run from
the window down to the target's parent, then every listener on the target,
then (for bubbling events) non-capture listeners back up to the window.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

__all__ = [
    "Event",
    "EventTarget",
    "listen",
]


class Event:
    """A dispatched event.

    Attributes
    ----------
    type : str
        Event name, e.g. ``"input"`` or ``"scroll"``.
    bubbles : bool
        Whether non-capture ancestors see the event after the target.
    target : EventTarget | None
        Node the event was dispatched on (set by ``dispatch_event``).
    current_target : EventTarget | None
        Node whose listeners are currently running.
    data : str | None
        Inserted text for ``input`` events produced by editing commands.
    """

    __slots__ = ("bubbles", "current_target", "data", "target", "type", "_stopped")

    def __init__(self, type: str, *, bubbles: bool = False, data: str | None = None) -> None:
        self.type = type
        self.bubbles = bubbles
        self.data = data
        self.target: EventTarget | None = None
        self.current_target: EventTarget | None = None
        self._stopped = False

    @property
    def propagation_stopped(self) -> bool:
        return self._stopped

    def stop_propagation(self) -> None:
        """Prevent the event from reaching further targets."""
        self._stopped = True

    def __repr__(self) -> str:
        return f"<Event type={self.type!r} bubbles={self.bubbles}>"


class EventTarget:
    """Base class for anything listeners can be attached to."""

    def __init__(self) -> None:
        self._listeners: dict[tuple[str, bool], list[Callable[[Event], None]]] = {}

    def add_event_listener(
        self,
        type: str,
        listener: Callable[[Event], None],
        *,
        capture: bool = False,
    ) -> None:
        """Register *listener*; re-adding the same (type, listener, capture) is a no-op."""
        bucket = self._listeners.setdefault((type, capture), [])
        if listener not in bucket:
            bucket.append(listener)

    def remove_event_listener(
        self,
        type: str,
        listener: Callable[[Event], None],
        *,
        capture: bool = False,
    ) -> None:
        bucket = self._listeners.get((type, capture))
        if bucket and listener in bucket:
            bucket.remove(listener)
            if not bucket:
                del self._listeners[(type, capture)]

    def listener_count(self, type: str | None = None) -> int:
        """Number of registered listeners, optionally for one event type."""
        return sum(
            len(bucket)
            for (event_type, _), bucket in self._listeners.items()
            if type is None or event_type == type
        )

    def dispatch_event(self, event: Event) -> None:
        """Dispatch *event* with this object as its target."""
        event.target = self
        ancestors = list(self._ancestor_targets())

        for target in reversed(ancestors):
            target._invoke(event, capture=True)
            if event.propagation_stopped:
                return

        self._invoke(event, capture=True)
        if not event.propagation_stopped:
            self._invoke(event, capture=False)

        if event.bubbles:
            for target in ancestors:
                if event.propagation_stopped:
                    return
                target._invoke(event, capture=False)

    def _parent_target(self) -> EventTarget | None:
        return None

    def _ancestor_targets(self):
        target = self._parent_target()
        while target is not None:
            yield target
            target = target._parent_target()

    def _invoke(self, event: Event, *, capture: bool) -> None:
        bucket = self._listeners.get((event.type, capture))
        if not bucket:
            return
        event.current_target = self
        for listener in list(bucket):
            # Listeners removed by an earlier listener in this phase are skipped
            if listener in bucket:
                listener(event)


def listen(
    target: EventTarget,
    type: str,
    listener: Callable[[Event], None],
    *,
    capture: bool = False,
) -> Callable[[], None]:
    """Add *listener* and return a disposer that removes it (idempotent)."""
    target.add_event_listener(type, listener, capture=capture)

    def dispose() -> None:
        target.remove_event_listener(type, listener, capture=capture)

    return dispose
