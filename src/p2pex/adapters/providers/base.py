# src/p2pex/adapters/providers/base.py
"""
Base Provider Interface for Reference-Rate Feeds

This module defines the abstract base class for reference-rate providers.
A provider returns a table of currency code to rate per 1 USD.

Files that USE this module:
- p2pex.adapters.providers.open_er_api (OpenErApiProvider implements ReferenceRateProvider)
- p2pex.application.rates_service (fetches through ReferenceRateProvider)
- tests.test_providers (unit tests)

Files that this module USES:
- None (pure interface definition)
"""
from abc import ABC, abstractmethod
from typing import Dict


class ReferenceRateProvider(ABC):
    @abstractmethod
    def latest_rates(self) -> Dict[str, float]:
        """Return currency code -> units per 1 USD. Raises FeedUnavailableError."""
        raise NotImplementedError
