# src/p2pex/adapters/persistence/__init__.py
"""
Persistence Adapters - Data Storage

This package contains the key/value config stores the operator's
preferences live in:
- File-based storage (JSON)
- In-memory storage (tests, dry runs)
"""

from p2pex.adapters.persistence.base import ConfigStore
from p2pex.adapters.persistence.file_store import FileConfigStore, MemoryConfigStore

__all__ = [
    "ConfigStore",
    "FileConfigStore",
    "MemoryConfigStore",
]
