# src/p2pex/adapters/providers/__init__.py
"""
Provider Adapters - External API Clients

This package contains adapters for reference-rate feeds.
All providers implement the ReferenceRateProvider interface.
"""

from p2pex.adapters.providers.base import ReferenceRateProvider
from p2pex.adapters.providers.open_er_api import OpenErApiProvider

__all__ = [
    "ReferenceRateProvider",
    "OpenErApiProvider",
]
