# tests/test_rates_service.py
"""
Rates Service Tests - Unit Tests for Reference Table Loading

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- p2pex.application.rates_service (RatesService, sanitize_table)
- unittest.mock (Mock for provider mocking)
"""
import math
from unittest.mock import Mock  # Mock objects for provider testing

import pytest  # Testing framework for writing and running tests

from p2pex.application.rates_service import RatesService, sanitize_table
from p2pex.domain.errors import FeedUnavailableError


class TestSanitizeTable:
    def test_keeps_positive_three_letter_codes(self):
        raw = {
            "RUB": 95.5,
            "THB": "35.2",
            "usd": 1,
            "XAUX": 2.0,
            "BAD": "n/a",
            "ZER": 0,
            "NEG": -1,
            "NAN": math.nan,
            "NUL": None,
        }
        assert sanitize_table(raw) == {"RUB": 95.5, "THB": 35.2}


class TestRatesService:
    def test_reference_table_success(self):
        provider = Mock()
        provider.latest_rates.return_value = {"RUB": 95.5, "THB": 35.2}
        svc = RatesService(provider)
        table = svc.reference_table()
        assert dict(table) == {"RUB": 95.5, "THB": 35.2}
        assert svc.last_error is None

    def test_table_is_read_only(self):
        provider = Mock()
        provider.latest_rates.return_value = {"RUB": 95.5}
        table = RatesService(provider).reference_table()
        with pytest.raises(TypeError):
            table["RUB"] = 1.0

    def test_feed_failure_gives_empty_table(self, caplog):
        provider = Mock()
        provider.latest_rates.side_effect = FeedUnavailableError("timeout")
        svc = RatesService(provider)
        assert dict(svc.reference_table()) == {}
        assert svc.last_error == "timeout"
        assert "Reference feed unavailable" in caplog.text

    def test_recovery_clears_last_error(self):
        provider = Mock()
        provider.latest_rates.side_effect = [FeedUnavailableError("timeout"), {"EUR": 0.92}]
        svc = RatesService(provider)
        svc.reference_table()
        assert dict(svc.reference_table()) == {"EUR": 0.92}
        assert svc.last_error is None
