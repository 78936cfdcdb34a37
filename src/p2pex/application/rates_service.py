# src/p2pex/application/rates_service.py
"""
Rates Service - Reference Table Loading

Fetches the reference-rate table through a provider and sanitizes it for the
engine: only three-letter uppercase codes with a positive finite rate are
kept. A feed failure is not fatal; the engine simply keeps working without
references (explicit rates stay editable, derived rates wait).

Files that USE this module:
- p2pex.adapters.telegram.jobs (startup feed job)
- tests.test_rates_service (unit tests)

Files that this module USES:
- p2pex.adapters.providers.base (ReferenceRateProvider interface)
- p2pex.domain.errors (FeedUnavailableError)
- p2pex.domain.models (ReferenceRateTable)
- p2pex.shared.validators (validate_currency_code)
"""
from __future__ import annotations  # Enable postponed evaluation of annotations

import logging
import math
from typing import Any, Dict, Mapping, Optional

from p2pex.adapters.providers.base import ReferenceRateProvider
from p2pex.domain.errors import FeedUnavailableError
from p2pex.domain.models import ReferenceRateTable, freeze_reference_table
from p2pex.shared.validators import validate_currency_code

log = logging.getLogger(__name__)


def sanitize_table(raw: Mapping[str, Any]) -> Dict[str, float]:
    """
    Drop entries the engine cannot use.

    Args:
        raw: Feed payload rates, e.g. {"RUB": 95.5, "THB": "35.2", "XXXX": 1}

    Returns:
        Code -> positive float rate
    """
    table: Dict[str, float] = {}
    for code, value in raw.items():
        if not validate_currency_code(code):
            continue
        try:
            rate = float(value)
        except (TypeError, ValueError):
            continue
        if math.isfinite(rate) and rate > 0:
            table[code] = rate
    dropped = len(raw) - len(table)
    if dropped:
        log.debug("Dropped %d unusable reference entries", dropped)
    return table


class RatesService:
    """Loads reference tables from a provider."""

    def __init__(self, provider: ReferenceRateProvider):
        """
        Args:
            provider: Feed client (typically OpenErApiProvider)
        """
        self.provider = provider
        self.last_error: Optional[str] = None

    def reference_table(self) -> ReferenceRateTable:
        """
        Fetch and sanitize the reference table.

        Returns:
            Read-only table; empty when the feed is unavailable
        """
        try:
            raw = self.provider.latest_rates()
        except FeedUnavailableError as e:
            self.last_error = str(e)
            log.warning("Reference feed unavailable, continuing without references: %s", e)
            return freeze_reference_table({})
        self.last_error = None
        table = sanitize_table(raw)
        log.info("Loaded %d reference rates", len(table))
        return freeze_reference_table(table)
