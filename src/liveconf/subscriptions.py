"""Listener registry and change fan-out.

Two independent listener lists are kept: per-key value listeners, called
with ``(key, value)`` for every changed key, and refresh listeners, called
once without arguments after a document pass that changed something.
"""

from __future__ import annotations

import logging
import threading
import weakref
from collections.abc import Callable
from enum import StrEnum

from liveconf.models.values import TypedValue

_logger = logging.getLogger(__name__)

ValueListener = Callable[[str, TypedValue], None]
RefreshListener = Callable[[], None]


class ListenerKind(StrEnum):
    VALUE = "value"
    REFRESH = "refresh"


class Subscription:
    """Token for one registered listener.

    Holds only a weak reference to its manager, so keeping a token around
    does not keep the manager alive. Discarding the token stops delivery
    unless the listener was registered with ``keep=True``.
    """

    __slots__ = ("__weakref__", "_manager", "kind")

    def __init__(self, manager: SubscriptionManager, kind: ListenerKind) -> None:
        self._manager: weakref.ref[SubscriptionManager] = weakref.ref(manager)
        self.kind = kind

    @property
    def active(self) -> bool:
        manager = self._manager()
        return manager is not None and manager.is_registered(self)

    def unsubscribe(self) -> None:
        """Stop receiving events. Safe to call more than once."""
        manager = self._manager()
        if manager is not None:
            manager.remove_listener(self)

    def __repr__(self) -> str:
        return f"<Subscription kind={self.kind} active={self.active}>"


class SubscriptionManager:
    """Ordered registry of change and refresh listeners.

    Listeners are keyed by their :class:`Subscription` token, held weakly:
    dropping the last reference to a token unregisters its listener. Pass
    ``keep=True`` to register a listener that stays until it is removed
    explicitly.

    Notifications run synchronously on the caller's thread, in registration
    order. A listener that raises is logged and skipped; the remaining
    listeners are still called. Listeners present at the start of a pass
    are attempted unless they are removed before their turn.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: weakref.WeakKeyDictionary[Subscription, ValueListener] = weakref.WeakKeyDictionary()
        self._refresh_listeners: weakref.WeakKeyDictionary[Subscription, RefreshListener] = (
            weakref.WeakKeyDictionary()
        )
        self._kept: set[Subscription] = set()

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    @property
    def refresh_listener_count(self) -> int:
        return len(self._refresh_listeners)

    def add_listener(self, callback: ValueListener, *, keep: bool = False) -> Subscription:
        """Register *callback* for ``(key, value)`` change events."""
        subscription = Subscription(self, ListenerKind.VALUE)
        with self._lock:
            self._listeners[subscription] = callback
            if keep:
                self._kept.add(subscription)
        return subscription

    def add_refresh_listener(self, callback: RefreshListener, *, keep: bool = False) -> Subscription:
        """Register *callback* for "a pass changed something" events."""
        subscription = Subscription(self, ListenerKind.REFRESH)
        with self._lock:
            self._refresh_listeners[subscription] = callback
            if keep:
                self._kept.add(subscription)
        return subscription

    def remove_listener(self, subscription: Subscription) -> None:
        """Unregister *subscription*. Unknown tokens are ignored."""
        with self._lock:
            self._listeners.pop(subscription, None)
            self._refresh_listeners.pop(subscription, None)
            self._kept.discard(subscription)

    def is_registered(self, subscription: Subscription) -> bool:
        return subscription in self._listeners or subscription in self._refresh_listeners

    def clear(self) -> None:
        with self._lock:
            self._listeners.clear()
            self._refresh_listeners.clear()
            self._kept.clear()

    def notify(self, key: str, value: TypedValue) -> None:
        """Call every value listener with ``(key, value)``."""
        with self._lock:
            entries = list(self._listeners.items())
        for subscription, callback in entries:
            if subscription not in self._listeners:
                continue
            try:
                callback(key, value)
            except Exception:
                _logger.warning("Value listener failed for %s", key, exc_info=True)

    def notify_refresh(self) -> None:
        """Call every refresh listener."""
        with self._lock:
            entries = list(self._refresh_listeners.items())
        for subscription, callback in entries:
            if subscription not in self._refresh_listeners:
                continue
            try:
                callback()
            except Exception:
                _logger.warning("Refresh listener failed", exc_info=True)
