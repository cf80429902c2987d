"""Typed configuration store with change detection.

This is the only component allowed to mutate configuration values. Each
:meth:`ConfigStore.load` merges one JSON document, works out which keys
changed, and hands the changes to the :class:`SubscriptionManager`.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from liveconf.exceptions import ConfigParseError, KeyTypeMismatchError
from liveconf.models.values import ConfigKey, TypedValue, ValueType, typed_value
from liveconf.subscriptions import SubscriptionManager

_logger = logging.getLogger(__name__)


@dataclass
class LoadReport:
    """Outcome of merging one document into the store."""

    changed: list[str] = field(default_factory=list)
    added: list[str] = field(default_factory=list)
    rejected: dict[str, KeyTypeMismatchError] = field(default_factory=dict)
    untyped: list[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.changed)


def decode_document(data: bytes | str) -> dict[str, Any]:
    """Parse *data* as a JSON object.

    Raises
    ------
    ConfigParseError
        If *data* is not JSON or the top-level value is not an object.
    """
    try:
        document = json.loads(data)
    except (ValueError, UnicodeDecodeError) as exc:
        raise ConfigParseError(f"Configuration document is not valid JSON: {exc}") from exc
    except RecursionError as exc:
        raise ConfigParseError("Configuration document is nested too deeply") from exc
    if not isinstance(document, dict):
        raise ConfigParseError(f"Configuration document is not a JSON object (got {type(document).__name__})")
    return document


class ConfigStore:
    """In-memory mapping of configuration key to :data:`TypedValue`.

    Keys seen for the first time are stored silently; only keys whose value
    differs from the stored one are reported. Keys with an unrecognized
    type tag are kept up to date in a separate raw mapping but never
    reported as changes.

    Writes happen on the polling context only. All read accessors take the
    store lock and return copies, so they are safe from other threads.
    """

    def __init__(
        self,
        subscriptions: SubscriptionManager | None = None,
        *,
        notify_new_keys: bool = False,
    ) -> None:
        self._subscriptions = subscriptions if subscriptions is not None else SubscriptionManager()
        self._notify_new_keys = notify_new_keys
        self._lock = threading.RLock()
        self._values: dict[str, TypedValue] = {}
        self._untyped: dict[str, Any] = {}
        self._load_count = 0

    @property
    def subscriptions(self) -> SubscriptionManager:
        return self._subscriptions

    @property
    def loaded(self) -> bool:
        """Whether at least one document has been merged."""
        return self._load_count > 0

    def load(self, data: bytes | str) -> LoadReport:
        """Merge a JSON document and notify listeners about changed keys.

        Per-key notifications are sent in document order, followed by a
        single refresh notification when anything changed. Listeners run
        after the store lock is released.

        Raises
        ------
        ConfigParseError
            If *data* is malformed; stored values are left untouched.
        """
        document = decode_document(data)
        report = LoadReport()
        pending: list[tuple[str, TypedValue]] = []

        # Convert every key before touching stored state, so a bad value
        # can only fail its own key.
        typed: list[tuple[str, TypedValue]] = []
        untyped: list[tuple[str, Any]] = []
        for key, raw in document.items():
            parsed = ConfigKey.parse(key)
            if parsed.value_type is None:
                untyped.append((key, copy.deepcopy(raw)))
                continue
            try:
                typed.append((key, typed_value(parsed.value_type, raw, key=key)))
            except KeyTypeMismatchError as exc:
                _logger.warning("Skipping update of %s: %s", key, exc)
                report.rejected[key] = exc

        with self._lock:
            first_load = self._load_count == 0
            for key, raw in untyped:
                # Kept current, never reported.
                self._untyped[key] = raw
                report.untyped.append(key)

            for key, value in typed:
                previous = self._values.get(key)
                self._values[key] = value
                if previous is None:
                    report.added.append(key)
                    if not self._notify_new_keys or first_load:
                        continue
                elif previous == value:
                    continue
                report.changed.append(key)
                pending.append((key, value))
            self._load_count += 1

        for key, value in pending:
            _logger.info("%s: %r", key, value.value)
            self._subscriptions.notify(key, value)
        if pending:
            self._subscriptions.notify_refresh()
        return report

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def typed(self, key: str) -> TypedValue | None:
        with self._lock:
            return self._values.get(key)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the plain Python value stored for *key*.

        Falls back to values stored under unrecognized tags, then to
        *default*.
        """
        with self._lock:
            value = self._values.get(key)
            if value is not None:
                return value.value
            if key in self._untyped:
                return copy.deepcopy(self._untyped[key])
        return default

    def get_int(self, name: str, default: int | None = None) -> int | None:
        return self.get(ConfigKey.build(ValueType.INT, name), default)

    def get_double(self, name: str, default: float | None = None) -> float | None:
        return self.get(ConfigKey.build(ValueType.DOUBLE, name), default)

    def get_bool(self, name: str, default: bool | None = None) -> bool | None:
        return self.get(ConfigKey.build(ValueType.BOOL, name), default)

    def get_string(self, name: str, default: str | None = None) -> str | None:
        return self.get(ConfigKey.build(ValueType.STRING, name), default)

    def get_double_array(
        self,
        name: str,
        default: tuple[float, ...] | None = None,
    ) -> tuple[float, ...] | None:
        return self.get(ConfigKey.build(ValueType.DOUBLE_ARRAY, name), default)

    def snapshot(self) -> dict[str, TypedValue]:
        """Copy of all typed values. The values themselves are immutable."""
        with self._lock:
            return dict(self._values)

    def raw_snapshot(self) -> dict[str, Any]:
        """Copy of values stored under unrecognized type tags."""
        with self._lock:
            return copy.deepcopy(self._untyped)

    def as_dict(self) -> dict[str, Any]:
        """Plain ``key -> value`` view of everything stored."""
        with self._lock:
            merged: dict[str, Any] = copy.deepcopy(self._untyped)
            merged.update({key: value.value for key, value in self._values.items()})
            return merged

    def keys(self) -> list[str]:
        with self._lock:
            return [*self._values, *self._untyped]

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._values or key in self._untyped

    def __len__(self) -> int:
        with self._lock:
            return len(self._values) + len(self._untyped)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())
