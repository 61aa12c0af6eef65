"""
taskprefs — Persisted preferences for a task list

Two user preferences, kept in an asynchronous key-value store:
- show_completed: whether finished tasks stay visible
- sort_order: sort by deadline, priority, both, or neither

Usage:
    repo = open_repository()
    async for prefs in repo.observe():
        render(prefs)

    await repo.set_sort_by_deadline(True)
"""

__version__ = "0.1.0"

# Config
from .config import Config, ConfigManager, StoreConfig, get_config

# Store layer
from .store import (
    PreferenceStore, Preferences, MutablePreferences, PreferenceKey,
    InMemoryPreferenceStore, FilePreferenceStore,
    StoreIOError, StoreCorruptionError, create_store,
)

# Preferences layer
from .preferences import (
    SortOrder, SortFlags, UserPreferences, InvalidPreferenceStateError,
    UserPreferencesRepository, open_repository,
)

__all__ = [
    # Config
    'Config', 'ConfigManager', 'StoreConfig', 'get_config',
    # Store
    'PreferenceStore', 'Preferences', 'MutablePreferences', 'PreferenceKey',
    'InMemoryPreferenceStore', 'FilePreferenceStore',
    'StoreIOError', 'StoreCorruptionError', 'create_store',
    # Preferences
    'SortOrder', 'SortFlags', 'UserPreferences', 'InvalidPreferenceStateError',
    'UserPreferencesRepository', 'open_repository',
]
