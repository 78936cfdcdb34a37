# tests/test_formatter.py
"""
Formatter Tests - Unit Tests for Message Formatting Functions

Covers the calculator card, the spread warning text and the currency list
in both chat languages.

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- p2pex.adapters.formatting.formatter (all formatter functions for testing)
- p2pex.domain.models (EngineSnapshot and friends for test data)
- p2pex.shared.language (set_language)
- pytest (testing framework)
"""
import pytest  # Testing framework for writing and running tests

from p2pex.adapters.formatting.formatter import (
    format_card,
    format_checkbox,
    format_currency_list,
    format_info_line,
    format_warning,
)
from p2pex.domain.models import (
    AmountTriple,
    CalcMode,
    EngineSnapshot,
    PairSelection,
    QuotedRates,
    RateInfo,
    RiskState,
)
from p2pex.shared.language import LANG_ENGLISH, LANG_RUSSIAN, set_language


def _snapshot(**overrides):
    values = dict(
        pair=PairSelection("RUB", "THB"),
        mode=CalcMode.DERIVED,
        advanced=False,
        rates=QuotedRates(95.5, 35.2),
        amounts=AmountTriple(10000.0, 3685.86, 104.71),
        risk=RiskState(),
        buy_rate_text="95.50",
        sell_rate_text="35.20",
        give_text="10 000",
        receive_text="3 685.86",
        settlement_text="104.71",
        rates_editable=True,
    )
    values.update(overrides)
    return EngineSnapshot(**values)


@pytest.fixture(autouse=True)
def english():
    set_language(LANG_ENGLISH)
    yield
    set_language(LANG_ENGLISH)


class TestFormatCard:
    def test_basic_card(self):
        expected_lines = [
            "P2P Exchanger",
            "🇷🇺 RUB ⇄ 🇹🇭 THB",
            "Mode: Approximate",
            "",
            "Buy USDT: 95.50",
            "Sell USDT: 35.20",
            "",
            "Give: 10 000 RUB",
            "Equivalent: 104.71 USDT",
            "Receive: 3 685.86 THB",
        ]
        assert format_card(_snapshot()) == "\n".join(expected_lines)

    def test_auto_badge_when_read_only(self):
        card = format_card(_snapshot(rates_editable=False, advanced=True))
        assert "Buy USDT: 95.50 Auto" in card
        assert "Mode: Approximate · Pro" in card

    def test_empty_values_use_placeholder(self):
        card = format_card(_snapshot(buy_rate_text="", receive_text=""))
        assert "Buy USDT: —" in card
        assert "Receive: — THB" in card

    def test_info_lines_only_in_pro(self):
        info = RateInfo(reference_rate="95.50", quoted_rate="96.50", spread_text="+1.05%", spread=1.047)
        assert "CB Rate" not in format_card(_snapshot(buy_info=info))
        card = format_card(_snapshot(advanced=True, buy_info=info))
        assert "   CB Rate: 95.50 · Spread: +1.05%" in card

    def test_russian_card(self):
        set_language(LANG_RUSSIAN)
        card = format_card(_snapshot(mode=CalcMode.EXPLICIT))
        assert "Режим: Точно" in card
        assert "Отдаю: 10 000 RUB" in card


class TestSmallPieces:
    def test_extreme_info_marked(self):
        info = RateInfo("95.50", "101.23", "+6.00%", 6.0, extreme=True)
        assert format_info_line(info).endswith("⚠️")
        assert format_info_line(None) is None

    def test_warning_text(self):
        assert format_warning(5.0) == "⚠️ Spread above 5%, check the selected currency"
        set_language(LANG_RUSSIAN)
        assert format_warning(7.5) == "⚠️ Spread больше 7.5% проверьте выбранную валюту"

    def test_checkbox(self):
        assert format_checkbox("confirm_currency", True) == "✅ Currency is correct"
        assert format_checkbox("confirm_remember", False) == "⬜ Remember spread"

    def test_currency_list_marks_configured(self):
        text = format_currency_list(["USD", "ZAR", "XYZ"], configured=["USD"])
        assert text == "Currencies:\n🇺🇸 USD ✓\n🏳️ ZAR\n🏳️ XYZ"
