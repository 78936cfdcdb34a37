# src/p2pex/adapters/persistence/base.py
"""
Config Store Interface - Key/Value Preference Storage

This module defines the contract for the store that keeps operator
preferences between runs. Keys and values are plain text; structured values
(spread map, configured currencies) are JSON-encoded by the caller.

Files that USE this module:
- p2pex.adapters.persistence.file_store (FileConfigStore, MemoryConfigStore implement ConfigStore)
- p2pex.application.state_manager (reads and writes through ConfigStore)

Files that this module USES:
- None (pure interface definition)
"""
from abc import ABC, abstractmethod
from typing import Optional


class ConfigStore(ABC):
    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored text for ``key``, or None if absent."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        raise NotImplementedError
