# src/p2pex/adapters/__init__.py
"""
Adapters Layer - External Interfaces

This package contains all adapters for external systems:
- Providers (reference-rate feed)
- Telegram (operator chat interface)
- Persistence (config store)
- Formatting (output)
"""

__all__ = []
