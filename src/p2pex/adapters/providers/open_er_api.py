# src/p2pex/adapters/providers/open_er_api.py
"""
open.er-api.com Provider for USD-based Reference Rates

This module implements the client for the public open.er-api.com feed
(``/v6/latest/USD``), which returns every currency's rate per 1 USD. USD is
used as the reference for USDT. A short TTL cache avoids refetching when the
bot restarts the feed job.

Files that USE this module:
- p2pex.app (composition root creates the provider)
- tests.test_providers (unit tests)

Files that this module USES:
- p2pex.adapters.providers.base (ReferenceRateProvider interface)
- p2pex.config (feed URL and HTTP timeout)
- p2pex.domain.errors (FeedUnavailableError)
"""
import logging
import requests
from typing import Dict, Optional
from datetime import datetime, timedelta, timezone

from p2pex.adapters.providers.base import ReferenceRateProvider
from p2pex.config import settings
from p2pex.domain.errors import FeedUnavailableError

log = logging.getLogger(__name__)

CACHE_MINUTES = 10


class OpenErApiProvider(ReferenceRateProvider):
    # Class-level cache shared across instances
    _cache_rates: Optional[Dict[str, float]] = None
    _cache_ts: Optional[datetime] = None

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None):
        """
        Initialize the open.er-api.com provider.

        Args:
            base_url: Optional custom feed URL (defaults to settings.reference_feed_url)
            timeout: Optional HTTP timeout in seconds (defaults to settings.http_timeout_seconds)
        """
        self.url = base_url or settings.reference_feed_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.ttl = timedelta(minutes=CACHE_MINUTES)

    def _cache_valid(self) -> bool:
        if self._cache_rates is None or self._cache_ts is None:
            return False
        return datetime.now(timezone.utc) - self._cache_ts < self.ttl

    @classmethod
    def clear_cache(cls) -> None:
        cls._cache_rates = None
        cls._cache_ts = None

    def latest_rates(self) -> Dict[str, float]:
        """
        Fetch the reference-rate table.

        Expected payload: {"result": "success", "base_code": "USD", "rates": {"RUB": 95.5, ...}}

        Returns:
            Mapping of currency code to rate per 1 USD (unfiltered)

        Raises:
            FeedUnavailableError: On timeout, network or HTTP error, invalid JSON,
                or a payload without a "rates" object
        """
        if self._cache_valid():
            log.debug("Using cached reference rates (%d currencies)", len(self._cache_rates))
            return dict(self._cache_rates)  # type: ignore[arg-type]

        try:
            log.info("Fetching reference rates from %s", self.url)
            resp = requests.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.exceptions.Timeout as e:
            log.warning("Reference feed timeout after %d seconds", self.timeout)
            raise FeedUnavailableError(f"Reference feed timeout after {self.timeout}s") from e
        except requests.exceptions.HTTPError as e:
            log.error("Reference feed HTTP error: %s", e)
            raise FeedUnavailableError(f"Reference feed HTTP error: {e}") from e
        except requests.exceptions.RequestException as e:
            log.warning("Reference feed request failed: %s", e)
            raise FeedUnavailableError(f"Reference feed request failed: {e}") from e
        except ValueError as e:
            log.error("Reference feed returned invalid JSON: %s", e)
            raise FeedUnavailableError(f"Reference feed returned invalid JSON: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("rates"), dict):
            log.error("Reference feed unexpected response structure: %s", data)
            raise FeedUnavailableError("Reference feed response missing 'rates' object")

        if data.get("result") not in (None, "success"):
            log.error("Reference feed reported failure: %s", data.get("error-type", data.get("result")))
            raise FeedUnavailableError(f"Reference feed result: {data.get('result')}")

        rates = dict(data["rates"])
        OpenErApiProvider._cache_rates = rates
        OpenErApiProvider._cache_ts = datetime.now(timezone.utc)

        log.info("Reference rates updated: %d currencies (ttl=%sm)", len(rates), CACHE_MINUTES)
        return dict(rates)
