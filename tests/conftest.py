"""
Shared pytest fixtures for the taskprefs test suite.

Every test runs with an isolated user config directory and without
TASKPREFS_* environment overrides, so the developer's real
~/.taskprefs is never read or written.

Usage in tests:
    async def test_something(repository):
        await repository.set_sort_by_deadline(True)
        prefs = await repository.fetch_initial()

    async def test_on_disk(file_store):
        repo = UserPreferencesRepository(file_store)
"""

import pytest

from taskprefs.config import ConfigManager
from taskprefs.preferences import UserPreferencesRepository
from taskprefs.store import FilePreferenceStore, InMemoryPreferenceStore
from tests.factories import FlakyPreferenceStore


@pytest.fixture(autouse=True)
def isolated_user_config(tmp_path, monkeypatch):
    """Point the user config at a temp home and clear env overrides."""
    user_dir = tmp_path / "home" / ".taskprefs"
    monkeypatch.setattr(ConfigManager, "USER_CONFIG_DIR", user_dir)
    monkeypatch.setattr(ConfigManager, "USER_CONFIG_FILE", user_dir / "config.yaml")
    monkeypatch.delenv("TASKPREFS_STORE_BACKEND", raising=False)
    monkeypatch.delenv("TASKPREFS_STORE_PATH", raising=False)
    return user_dir


@pytest.fixture
def memory_store():
    """Empty in-memory store."""
    return InMemoryPreferenceStore()


@pytest.fixture
def file_store(tmp_path):
    """File store writing to a temp directory."""
    return FilePreferenceStore(tmp_path / "prefs" / "user_preferences.json")


@pytest.fixture
def flaky_store():
    """In-memory store with injectable read failures."""
    return FlakyPreferenceStore()


@pytest.fixture
def repository(memory_store):
    """Repository over an empty in-memory store."""
    return UserPreferencesRepository(memory_store)
