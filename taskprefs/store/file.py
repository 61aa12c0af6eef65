"""
FilePreferenceStore — Durable JSON preference store

Storage: one flat JSON object per store, e.g.
    {"show_completed": true, "sort_order": "BY_DEADLINE"}

Design:
- orjson for (de)serialization, sorted keys for stable diffs
- Writes land in a sibling temp file, then os.replace() swaps it in,
  so a reader sees either the old or the new document
- Blocking file I/O runs in worker threads (asyncio.to_thread)
- Change notification covers writers in this process only
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Dict, Union

import orjson

from .base import PreferenceStore, Preferences, StoreCorruptionError

logger = logging.getLogger(__name__)

# JSON scalars a preference entry may hold
_SCALAR_TYPES = (bool, str, int, float)


class FilePreferenceStore(PreferenceStore):
    """Preference store persisted as a JSON document on disk."""

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path).expanduser()
        self._tmp_path = self.path.with_name(self.path.name + ".tmp")

    async def _read(self) -> Preferences:
        return await asyncio.to_thread(self._read_sync)

    async def _write(self, prefs: Preferences) -> None:
        await asyncio.to_thread(self._write_sync, prefs.as_dict())
        logger.debug("Wrote %d preference(s) to %s", len(prefs), self.path)

    def _read_sync(self) -> Preferences:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return Preferences.empty()

        if not raw.strip():
            return Preferences.empty()

        try:
            data = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise StoreCorruptionError(f"Unreadable preferences file {self.path}: {e}") from e

        return Preferences(self._validate(data))

    def _validate(self, data: Any) -> Dict[str, Any]:
        if not isinstance(data, dict):
            raise StoreCorruptionError(
                f"Preferences file {self.path} must hold a JSON object, got {type(data).__name__}"
            )
        for name, value in data.items():
            if not isinstance(value, _SCALAR_TYPES):
                raise StoreCorruptionError(
                    f"Preference '{name}' in {self.path} has unsupported type {type(value).__name__}"
                )
        return data

    def _write_sync(self, values: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = orjson.dumps(values, option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS)
        try:
            with open(self._tmp_path, 'wb') as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(self._tmp_path, self.path)
        except OSError:
            self._tmp_path.unlink(missing_ok=True)
            raise
