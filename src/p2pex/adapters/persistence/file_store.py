# src/p2pex/adapters/persistence/file_store.py
"""
File Store - Preference Persistence

This module persists operator preferences (active pair, calculation mode,
pro mode, spreads, configured currencies, last committed rates) as a single
JSON object of key -> text, written atomically on every change.

Files that USE this module:
- p2pex.app (creates the FileConfigStore for the engine)
- p2pex.application.state_manager (through the ConfigStore interface)
- tests.test_file_store (unit tests)

Files that this module USES:
- p2pex.adapters.persistence.base (ConfigStore interface)
- p2pex.config (settings.state_file default path)
- p2pex.domain.errors (StoreError)
"""
from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Optional, Union

from p2pex.adapters.persistence.base import ConfigStore
from p2pex.domain.errors import StoreError

log = logging.getLogger(__name__)


class MemoryConfigStore(ConfigStore):
    """In-process store; nothing survives a restart."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def as_dict(self) -> Dict[str, str]:
        return dict(self._data)


class FileConfigStore(ConfigStore):
    """
    JSON-file backed store.

    The whole key/value map is loaded once at construction and rewritten
    on each set() using a temporary file plus atomic rename.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        """
        Initialize the store and load existing preferences.

        Args:
            path: JSON file location (defaults to settings.state_file)
        """
        if path is None:
            from p2pex.config import settings
            path = settings.state_file
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._data: Dict[str, str] = self._load()

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        """
        Store a value and write the file.

        Raises:
            StoreError: If the file cannot be written (in-memory value is still updated)
        """
        if self._data.get(key) == value:
            return
        self._data[key] = value
        self._write()

    def _write(self) -> None:
        """Write the map using a temp file + atomic rename so readers never see a torn file."""
        temp_fd, temp_path = tempfile.mkstemp(
            suffix=".json.tmp",
            dir=str(self.path.parent),
            text=True,
        )
        try:
            with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f, ensure_ascii=False, indent=2, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, str(self.path))
        except Exception as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise StoreError(f"Failed to save state file: {e}") from e

    def _load(self) -> Dict[str, str]:
        """
        Load the key/value map from disk.

        A file that is not valid JSON is backed up to *.json.corrupt and the
        store starts empty. Non-text values are converted to text.

        Returns:
            Key/value map (empty if the file is missing or unreadable)
        """
        if not self.path.exists():
            log.info("No state file at %s, starting with defaults", self.path)
            return {}

        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            backup_path = self.path.with_suffix(".json.corrupt")
            try:
                shutil.copy2(self.path, backup_path)
                self.path.unlink()
                log.warning("State file corrupted, backed up to %s: %s", backup_path, e)
            except OSError as backup_error:
                log.error("Failed to backup corrupt state file: %s", backup_error)
            return {}
        except OSError as e:
            log.error("Unexpected error loading state file: %s", e, exc_info=True)
            return {}

        if not isinstance(data, dict):
            log.warning("State file %s does not hold a JSON object, ignoring it", self.path)
            return {}

        loaded = {}
        for key, value in data.items():
            if value is None:
                continue
            loaded[str(key)] = value if isinstance(value, str) else json.dumps(value)
        log.info("Loaded %d preference(s) from %s", len(loaded), self.path)
        return loaded
