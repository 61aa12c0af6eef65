"""
InMemoryPreferenceStore — Process-local preference store

Holds the current snapshot in memory. Useful for tests and for hosts
that do not need preferences to survive a restart.
"""

from typing import Any, Dict, Optional

from .base import PreferenceStore, Preferences


class InMemoryPreferenceStore(PreferenceStore):
    """Preference store backed by a single in-memory snapshot."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        super().__init__()
        self._current = Preferences(initial)

    async def _read(self) -> Preferences:
        return self._current

    async def _write(self, prefs: Preferences) -> None:
        self._current = prefs
