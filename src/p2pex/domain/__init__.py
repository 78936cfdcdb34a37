# src/p2pex/domain/__init__.py
"""
Domain Layer - Pure Business Objects

This package contains domain models and business rules.
No dependencies on infrastructure or external systems.
"""

from p2pex.domain.models import (
    AmountTriple,
    CalcMode,
    EngineSnapshot,
    PairSelection,
    QuotedRates,
    RateInfo,
    RiskState,
    Side,
    SpreadEntry,
    WarningStage,
)
from p2pex.domain.errors import (
    DomainError,
    FeedUnavailableError,
    StoreError,
)
from p2pex.domain.spread import rate_from_spread, rate_info, spread_pct

__all__ = [
    "AmountTriple",
    "CalcMode",
    "EngineSnapshot",
    "PairSelection",
    "QuotedRates",
    "RateInfo",
    "RiskState",
    "Side",
    "SpreadEntry",
    "WarningStage",
    "DomainError",
    "FeedUnavailableError",
    "StoreError",
    "rate_from_spread",
    "rate_info",
    "spread_pct",
]
