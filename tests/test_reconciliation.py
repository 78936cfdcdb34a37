# tests/test_reconciliation.py
"""
Reconciliation Tests - Unit Tests for the Amount Triangle

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- p2pex.application.reconciliation (from_give, from_receive, from_settlement, reanchor)
- pytest (testing framework)
"""
import pytest  # Testing framework for writing and running tests

from p2pex.application import reconciliation
from p2pex.domain.models import AmountTriple, QuotedRates

RATES = QuotedRates(buy_rate=95.5, sell_rate=35.2)


def _consistent(triple, rates):
    assert triple.give / rates.buy_rate == pytest.approx(triple.settlement, abs=1e-6)
    assert triple.receive / rates.sell_rate == pytest.approx(triple.settlement, abs=1e-6)


class TestTriangle:
    def test_from_give(self):
        triple = reconciliation.from_give(AmountTriple(), 10000.0, RATES)
        assert triple.settlement == pytest.approx(104.712041, abs=1e-6)
        assert triple.receive == pytest.approx(3685.863874, abs=1e-6)
        _consistent(triple, RATES)

    def test_from_receive(self):
        triple = reconciliation.from_receive(AmountTriple(), 3520.0, RATES)
        assert triple.settlement == pytest.approx(100.0)
        assert triple.give == pytest.approx(9550.0)
        _consistent(triple, RATES)

    def test_from_settlement(self):
        triple = reconciliation.from_settlement(AmountTriple(), 10.0, RATES)
        assert triple.give == pytest.approx(955.0)
        assert triple.receive == pytest.approx(352.0)

    def test_unusable_rates_keep_dependents(self):
        current = AmountTriple(give=1.0, receive=2.0, settlement=3.0)
        rates = QuotedRates(buy_rate=0.0, sell_rate=35.2)
        assert reconciliation.from_give(current, 500.0, rates) == AmountTriple(500.0, 2.0, 3.0)
        assert reconciliation.from_receive(current, 500.0, rates) == AmountTriple(1.0, 500.0, 3.0)
        assert reconciliation.from_settlement(current, 500.0, rates) == AmountTriple(1.0, 2.0, 500.0)


class TestReanchor:
    def test_give_is_sticky(self):
        current = reconciliation.from_give(AmountTriple(), 10000.0, RATES)
        moved = reconciliation.reanchor(current, QuotedRates(buy_rate=100.0, sell_rate=40.0))
        assert moved.give == 10000.0
        assert moved.settlement == pytest.approx(100.0)
        assert moved.receive == pytest.approx(4000.0)

    def test_zero_give_is_left_alone(self):
        current = AmountTriple(give=0.0, receive=50.0, settlement=1.0)
        assert reconciliation.reanchor(current, RATES) is current


class TestRoundTrip:
    @pytest.mark.parametrize("give", [1e-9, 0.01, 1.0, 1e4, 1e12])
    @pytest.mark.parametrize(
        "rates",
        [
            QuotedRates(buy_rate=95.5, sell_rate=35.2),
            QuotedRates(buy_rate=0.92, sell_rate=16250.0),
            QuotedRates(buy_rate=1.0, sell_rate=1.0),
            QuotedRates(buy_rate=450.123456, sell_rate=0.0031),
        ],
    )
    def test_give_survives_settlement_round_trip(self, give, rates):
        via_give = reconciliation.from_give(AmountTriple(), give, rates)
        back = reconciliation.from_settlement(via_give, via_give.settlement, rates)
        assert back.give == pytest.approx(give, rel=1e-6)
        assert back.receive == pytest.approx(via_give.receive, rel=1e-6)
