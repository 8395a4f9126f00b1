"""Synchronous event bus used as the notification sink for bookmark changes."""

import logging
import weakref

log = logging.getLogger("linemarks.events")


class EventBus:
    """Publish/subscribe event bus.

    Callbacks run synchronously on the emitting thread, in subscription
    order. A failing subscriber is logged and skipped; the emitter never
    sees the exception.

    Usage::

        bus = EventBus()
        bus.subscribe("bookmark:added", on_added)
        bus.emit("bookmark:added", bookmark=entry, line=5, preview="x = 1")

    Bound methods can be held weakly so a decoration or status widget does
    not outlive its owner::

        bus.subscribe("bookmarks:cleared_all", panel.refresh, weak=True)
    """

    def __init__(self):
        self._subscribers = {}  # event -> [(callback or WeakMethod, is_weak)]

    def subscribe(self, event, callback, weak=False):
        """Register *callback* for *event*.

        Args:
            event:    Event name (e.g. "bookmark:removed").
            callback: Callable invoked with the emitted keyword arguments.
            weak:     Hold a WeakMethod to a bound method; the subscription
                      drops itself once the owner is collected. Plain
                      functions are always held strongly.
        """
        subs = self._subscribers.setdefault(event, [])
        if weak and hasattr(callback, "__self__"):
            ref = weakref.WeakMethod(callback, lambda r: self._cleanup(event, r))
            subs.append((ref, True))
        else:
            subs.append((callback, False))

    def unsubscribe(self, event, callback):
        """Remove *callback* from *event*. Unknown pairs are ignored."""
        subs = self._subscribers.get(event)
        if not subs:
            return
        self._subscribers[event] = [
            (cb, is_weak)
            for cb, is_weak in subs
            if self._resolve(cb, is_weak) != callback
        ]

    def has_subscribers(self, event):
        return bool(self._subscribers.get(event))

    def emit(self, event, **data):
        """Call every live subscriber of *event* with ``**data``."""
        subs = self._subscribers.get(event)
        if not subs:
            return

        # Iterate a copy: a handler may unsubscribe itself.
        dead = []
        for entry in list(subs):
            cb, is_weak = entry
            resolved = self._resolve(cb, is_weak)
            if resolved is None:
                dead.append(entry)
                continue
            try:
                resolved(**data)
            except Exception:
                log.exception("Error in event handler for %s", event)

        if dead:
            self._subscribers[event] = [
                e for e in self._subscribers.get(event, []) if e not in dead
            ]

    def _resolve(self, cb, is_weak):
        if is_weak:
            return cb()
        return cb

    def _cleanup(self, event, ref):
        """WeakMethod callback: drop the subscription of a collected owner."""
        subs = self._subscribers.get(event)
        if subs:
            self._subscribers[event] = [
                (cb, w) for cb, w in subs if cb is not ref
            ]
