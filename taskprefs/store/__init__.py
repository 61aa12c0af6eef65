"""
Store — Asynchronous key-value persistence for preferences

Contains:
- PreferenceStore: transactional store contract with snapshot streams
- InMemoryPreferenceStore: process-local store
- FilePreferenceStore: durable JSON file store
- create_store: build a store from StoreConfig
"""

import threading
import weakref

from ..config import StoreConfig
from .base import (
    PreferenceKey, Preferences, MutablePreferences, PreferenceStore,
    SnapshotStream, StoreIOError, StoreCorruptionError, bool_key, str_key,
)
from .memory import InMemoryPreferenceStore
from .file import FilePreferenceStore


# One live FilePreferenceStore per resolved path, so every repository on a
# file shares its lock and change notifications
_file_stores = weakref.WeakValueDictionary()  # resolved Path -> FilePreferenceStore
_file_stores_lock = threading.Lock()


def create_store(config: StoreConfig) -> PreferenceStore:
    """
    Build the store described by config.

    File stores are shared: asking twice for the same path returns the
    instance that is still alive.

    Args:
        config: Store section of the loaded configuration

    Returns:
        A FilePreferenceStore or InMemoryPreferenceStore

    Raises:
        ValueError: Config does not validate
    """
    error = config.validate()
    if error:
        raise ValueError(error)

    if config.backend == "memory":
        return InMemoryPreferenceStore()

    path = config.effective_path
    key = path.resolve()
    with _file_stores_lock:
        store = _file_stores.get(key)
        if store is None:
            store = FilePreferenceStore(path)
            _file_stores[key] = store
    return store


__all__ = [
    # Contract
    "PreferenceKey", "Preferences", "MutablePreferences", "PreferenceStore",
    "SnapshotStream", "StoreIOError", "StoreCorruptionError", "bool_key", "str_key",
    # Implementations
    "InMemoryPreferenceStore", "FilePreferenceStore",
    # Factory
    "create_store",
]
