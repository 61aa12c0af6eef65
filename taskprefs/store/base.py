"""
Preference Store — Asynchronous key-value persistence contract

A store holds a flat set of typed entries (bool, str, ...) and offers:
- data(): push-based stream of snapshots, one per change
- read_once(): single snapshot
- edit(transform): atomic read-modify-write transaction

Design:
- Snapshots are immutable; edits work on a mutable copy
- One asyncio.Lock per store serializes transactions (no lost updates)
- Subscribers wait on an asyncio.Condition keyed by a version counter
- Read failures surface per emission; a stream survives them
"""

import asyncio
import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Iterator, Optional, Union


class StoreIOError(OSError):
    """Transient failure reading or writing the backing storage."""


class StoreCorruptionError(StoreIOError):
    """Persisted data exists but cannot be decoded."""


@dataclass(frozen=True)
class PreferenceKey:
    """Typed name of a single preference entry."""
    name: str
    type: type

    def check(self, value: Any) -> None:
        """Raise TypeError unless value matches this key's type."""
        # bool is an int subclass; keep the two apart
        if self.type is not bool and isinstance(value, bool):
            raise TypeError(f"Preference '{self.name}' expects {self.type.__name__}, got bool")
        if not isinstance(value, self.type):
            raise TypeError(
                f"Preference '{self.name}' expects {self.type.__name__}, "
                f"got {type(value).__name__}"
            )


def bool_key(name: str) -> PreferenceKey:
    return PreferenceKey(name, bool)


def str_key(name: str) -> PreferenceKey:
    return PreferenceKey(name, str)


class Preferences:
    """
    Immutable snapshot of every entry in a store.

    Values are looked up by PreferenceKey; missing entries return the
    supplied default.
    """

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = dict(values or {})

    @classmethod
    def empty(cls) -> 'Preferences':
        return cls()

    def get(self, key: PreferenceKey, default: Any = None) -> Any:
        """
        Get the value stored under key.

        Args:
            key: Typed preference key
            default: Returned when the entry is absent

        Returns:
            Stored value or default

        Raises:
            TypeError: Stored value does not match key.type
        """
        if key.name not in self._values:
            return default
        value = self._values[key.name]
        key.check(value)
        return value

    def __contains__(self, key: PreferenceKey) -> bool:
        return key.name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Preferences):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._values!r})"

    def as_dict(self) -> Dict[str, Any]:
        """Copy of all entries keyed by name."""
        return dict(self._values)

    def to_mutable(self) -> 'MutablePreferences':
        return MutablePreferences(self._values)


class MutablePreferences(Preferences):
    """Working copy handed to edit() transforms."""

    def __setitem__(self, key: PreferenceKey, value: Any) -> None:
        key.check(value)
        self._values[key.name] = value

    def remove(self, key: PreferenceKey) -> None:
        self._values.pop(key.name, None)

    def clear(self) -> None:
        self._values.clear()

    def freeze(self) -> Preferences:
        return Preferences(self._values)


Transform = Callable[[MutablePreferences], Union[None, Awaitable[None]]]


class SnapshotStream:
    """
    One subscriber's view of a store.

    The first step yields the current snapshot; each later step waits for
    the store version to move, then reads again. Intermediate versions are
    conflated and a snapshot equal to the previous one is never repeated.

    A failed read raises out of that step only: the stream stays usable
    and the next step waits for the next change. The first snapshot read
    after a failure is emitted even if it equals the one before it.
    """

    def __init__(self, store: 'PreferenceStore'):
        self._store = store
        self._seen: Optional[int] = None
        self._last: Optional[Preferences] = None

    def __aiter__(self) -> 'SnapshotStream':
        return self

    async def __anext__(self) -> Preferences:
        while True:
            if self._seen is not None:
                await self._store._wait_for_change(self._seen)
            self._seen = self._store.version
            try:
                snapshot = await self._store._read()
            except Exception:
                # Next successful read is always emitted
                self._last = None
                raise
            if snapshot != self._last:
                self._last = snapshot
                return snapshot


class PreferenceStore(ABC):
    """
    Base class for asynchronous preference stores.

    Subclasses provide _read() and _write(); transactions, versioning and
    change notification live here.
    """

    def __init__(self):
        self._lock = asyncio.Lock()
        self._changed = asyncio.Condition()
        self._version = 0

    @property
    def version(self) -> int:
        """Number of committed changes since the store was opened."""
        return self._version

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def data(self) -> SnapshotStream:
        """Start a new subscription to store snapshots."""
        return SnapshotStream(self)

    async def read_once(self) -> Preferences:
        """Read the current snapshot without subscribing."""
        return await self._read()

    async def edit(self, transform: Transform) -> Preferences:
        """
        Atomically read, transform and write the store contents.

        Args:
            transform: Called with a mutable copy of the current snapshot;
                may be a plain function or a coroutine function

        Returns:
            The snapshot after the transaction

        Raises:
            Whatever transform, _read() or _write() raise; nothing is
            written in that case
        """
        async with self._lock:
            current = await self._read()
            working = current.to_mutable()
            result = transform(working)
            if inspect.isawaitable(result):
                await result
            updated = working.freeze()
            if updated != current:
                await self._write(updated)
                await self._notify()
            return updated

    # -------------------------------------------------------------------------
    # Change notification
    # -------------------------------------------------------------------------

    async def _notify(self) -> None:
        async with self._changed:
            self._version += 1
            self._changed.notify_all()

    async def _wait_for_change(self, seen: int) -> None:
        async with self._changed:
            await self._changed.wait_for(lambda: self._version != seen)

    # -------------------------------------------------------------------------
    # Storage hooks
    # -------------------------------------------------------------------------

    @abstractmethod
    async def _read(self) -> Preferences:
        """Load the current snapshot from backing storage."""
        pass

    @abstractmethod
    async def _write(self, prefs: Preferences) -> None:
        """Persist prefs as the new current snapshot."""
        pass
