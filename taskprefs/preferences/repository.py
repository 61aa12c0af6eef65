"""
UserPreferencesRepository — Saving and retrieving task-list preferences

Sits between UI/business logic and a PreferenceStore:
- observe(): stream of UserPreferences, one per store change
- fetch_initial(): one-shot read
- update_show_completed / set_sort_by_deadline / set_sort_by_priority:
  transactional writes

The repository keeps no state of its own; every call goes to the store.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import AsyncIterator, Optional

from ..config import ConfigManager
from ..store import PreferenceStore, Preferences, MutablePreferences, bool_key, str_key, create_store
from .models import SortFlags, UserPreferences, decode_sort_order

logger = logging.getLogger(__name__)

# Persisted key names; stable across releases
SHOW_COMPLETED_KEY = "show_completed"
SORT_ORDER_KEY = "sort_order"

SHOW_COMPLETED = bool_key(SHOW_COMPLETED_KEY)
SORT_ORDER = str_key(SORT_ORDER_KEY)


class UserPreferencesRepository:
    """
    Typed access to user preferences held in a PreferenceStore.

    All operations are coroutines and may run concurrently; the store's
    transactions keep the sort-order read-modify-write free of lost updates.
    """

    def __init__(self, store: PreferenceStore):
        self._store = store

    @property
    def store(self) -> PreferenceStore:
        return self._store

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def observe(self) -> AsyncIterator[UserPreferences]:
        """
        Stream preferences, one snapshot per change in the store.

        Each call opens its own subscription. A transient I/O failure on
        one emission yields default preferences in its place and the stream
        carries on; any other error ends the stream.

        Yields:
            UserPreferences decoded from the latest store snapshot
        """
        stream = self._store.data()
        while True:
            try:
                prefs = await stream.__anext__()
            except StopAsyncIteration:
                return
            except OSError as e:
                logger.warning("Reading preferences failed, emitting defaults: %s", e)
                prefs = Preferences.empty()
            yield self._map_user_preferences(prefs)

    async def fetch_initial(self) -> UserPreferences:
        """Read the current preferences once, without subscribing."""
        return self._map_user_preferences(await self._store.read_once())

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def update_show_completed(self, show_completed: bool) -> None:
        def transform(prefs: MutablePreferences) -> None:
            prefs[SHOW_COMPLETED] = show_completed

        await self._store.edit(transform)
        logger.debug("show_completed set to %s", show_completed)

    async def set_sort_by_deadline(self, enable: bool) -> None:
        """Turn deadline sorting on or off, keeping the priority criterion."""
        await self._update_sort_flags(by_deadline=enable)

    async def set_sort_by_priority(self, enable: bool) -> None:
        """Turn priority sorting on or off, keeping the deadline criterion."""
        await self._update_sort_flags(by_priority=enable)

    async def _update_sort_flags(self, **changes: bool) -> None:
        def transform(prefs: MutablePreferences) -> None:
            current = decode_sort_order(prefs.get(SORT_ORDER))
            flags = replace(SortFlags.from_sort_order(current), **changes)
            prefs[SORT_ORDER] = flags.to_sort_order().name

        updated = await self._store.edit(transform)
        logger.debug("sort_order set to %s", updated.get(SORT_ORDER))

    # -------------------------------------------------------------------------
    # Decoding
    # -------------------------------------------------------------------------

    def _map_user_preferences(self, prefs: Preferences) -> UserPreferences:
        return UserPreferences(
            show_completed=prefs.get(SHOW_COMPLETED, False),
            sort_order=decode_sort_order(prefs.get(SORT_ORDER)),
        )


def open_repository(project_dir: Optional[Path] = None) -> UserPreferencesRepository:
    """
    Build a repository from the layered configuration.

    Args:
        project_dir: Directory holding .taskprefs/config.yaml (default: cwd)

    Returns:
        UserPreferencesRepository over the configured store
    """
    config = ConfigManager(project_dir).load()
    return UserPreferencesRepository(create_store(config.store))
