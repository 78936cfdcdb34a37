# tests/test_risk_gate.py
"""
Risk Gate Tests - Unit Tests for the Spread Warning Gate

Covers the debounce timer, the warning lifecycle and the persistence
decision returned by evaluate().

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- p2pex.application.risk_gate (SpreadRiskGate)
- tests.conftest (FakeScheduler fixture)
- unittest.mock (Mock for the on_show callback)
"""
from unittest.mock import Mock  # Mock objects for callbacks

from p2pex.application.risk_gate import SpreadRiskGate
from p2pex.domain.models import QuotedRates, WarningStage

REF_BUY = 95.5
REF_SELL = 35.2
NORMAL = QuotedRates(buy_rate=96.5, sell_rate=35.2)
EXTREME = QuotedRates(buy_rate=101.23, sell_rate=35.2)


def _gate(scheduler, on_show=None):
    return SpreadRiskGate(scheduler, threshold_pct=5.0, delay_seconds=3.0, on_show=on_show)


class TestIsExtreme:
    def test_only_in_pro_mode(self, scheduler):
        gate = _gate(scheduler)
        assert gate.is_extreme(EXTREME, REF_BUY, REF_SELL, advanced=True)
        assert not gate.is_extreme(EXTREME, REF_BUY, REF_SELL, advanced=False)

    def test_needs_both_references_and_rates(self, scheduler):
        gate = _gate(scheduler)
        assert not gate.is_extreme(EXTREME, None, REF_SELL, advanced=True)
        assert not gate.is_extreme(QuotedRates(101.23, 0.0), REF_BUY, REF_SELL, advanced=True)

    def test_either_side_flags(self, scheduler):
        gate = _gate(scheduler)
        assert gate.is_extreme(QuotedRates(95.5, 30.0), REF_BUY, REF_SELL, advanced=True)
        assert not gate.is_extreme(NORMAL, REF_BUY, REF_SELL, advanced=True)


class TestDebounce:
    def test_normal_rates_persist(self, scheduler):
        gate = _gate(scheduler)
        assert gate.evaluate(NORMAL, REF_BUY, REF_SELL, True) is True
        assert scheduler.live == []
        assert gate.state.stage is WarningStage.NORMAL

    def test_extreme_starts_timer_and_blocks_persistence(self, scheduler):
        gate = _gate(scheduler)
        assert gate.evaluate(EXTREME, REF_BUY, REF_SELL, True) is False
        assert len(scheduler.live) == 1
        assert scheduler.live[0].delay == 3.0
        assert gate.state.stage is WarningStage.PENDING

    def test_each_change_restarts_single_timer(self, scheduler):
        gate = _gate(scheduler)
        gate.evaluate(EXTREME, REF_BUY, REF_SELL, True)
        gate.evaluate(QuotedRates(102.0, 35.2), REF_BUY, REF_SELL, True)
        assert len(scheduler.timers) == 2
        assert scheduler.timers[0].cancelled
        assert len(scheduler.live) == 1

    def test_fire_shows_warning(self, scheduler):
        on_show = Mock()
        gate = _gate(scheduler, on_show)
        gate.evaluate(EXTREME, REF_BUY, REF_SELL, True)
        scheduler.fire()
        on_show.assert_called_once_with()
        assert gate.state.stage is WarningStage.SHOWN

    def test_return_to_range_cancels_warning(self, scheduler):
        on_show = Mock()
        gate = _gate(scheduler, on_show)
        gate.evaluate(EXTREME, REF_BUY, REF_SELL, True)
        assert gate.evaluate(NORMAL, REF_BUY, REF_SELL, True) is True
        assert scheduler.live == []
        scheduler.fire()
        on_show.assert_not_called()

    def test_no_new_timer_while_shown(self, scheduler):
        gate = _gate(scheduler)
        gate.evaluate(EXTREME, REF_BUY, REF_SELL, True)
        scheduler.fire()
        gate.evaluate(QuotedRates(103.0, 35.2), REF_BUY, REF_SELL, True)
        assert scheduler.live == []

    def test_unusable_rates_block_persistence(self, scheduler):
        gate = _gate(scheduler)
        assert gate.evaluate(QuotedRates(0.0, 35.2), REF_BUY, REF_SELL, True) is False
        assert not gate.flagged

    def test_unusable_rates_keep_acknowledgment(self, scheduler):
        gate = _gate(scheduler)
        gate.evaluate(EXTREME, REF_BUY, REF_SELL, True)
        scheduler.fire()
        gate.acknowledge(currency_confirmed=True)

        assert gate.evaluate(QuotedRates(0.0, 35.2), REF_BUY, REF_SELL, True) is False
        assert gate.flagged
        assert gate.state.stage is WarningStage.ACKNOWLEDGED

        assert gate.evaluate(EXTREME, REF_BUY, REF_SELL, True) is True
        assert scheduler.live == []

    def test_unusable_rates_keep_shown_warning(self, scheduler):
        on_show = Mock()
        gate = _gate(scheduler, on_show)
        gate.evaluate(EXTREME, REF_BUY, REF_SELL, True)
        scheduler.fire()

        gate.evaluate(QuotedRates(101.23, 0.0), REF_BUY, REF_SELL, True)
        assert gate.flagged and gate.shown
        gate.evaluate(EXTREME, REF_BUY, REF_SELL, True)
        assert scheduler.live == []
        on_show.assert_called_once_with()


class TestAcknowledge:
    def test_requires_currency_confirmation(self, scheduler):
        gate = _gate(scheduler)
        gate.evaluate(EXTREME, REF_BUY, REF_SELL, True)
        scheduler.fire()
        assert gate.acknowledge(remember_spread=True, currency_confirmed=False) is False
        assert gate.state.stage is WarningStage.SHOWN

    def test_checkbox_state_is_used(self, scheduler):
        gate = _gate(scheduler)
        gate.evaluate(EXTREME, REF_BUY, REF_SELL, True)
        gate.set_confirmations(currency_confirmed=True)
        assert gate.acknowledge() is True
        assert gate.remember_confirmed is False

    def test_nothing_to_acknowledge(self, scheduler):
        gate = _gate(scheduler)
        gate.evaluate(NORMAL, REF_BUY, REF_SELL, True)
        assert gate.acknowledge(currency_confirmed=True) is False

    def test_acknowledged_rates_persist(self, scheduler):
        gate = _gate(scheduler)
        gate.evaluate(EXTREME, REF_BUY, REF_SELL, True)
        gate.acknowledge(currency_confirmed=True)
        assert gate.state.stage is WarningStage.ACKNOWLEDGED
        assert gate.evaluate(QuotedRates(102.0, 35.2), REF_BUY, REF_SELL, True) is True
        assert scheduler.live == []

    def test_new_violation_needs_fresh_acknowledgment(self, scheduler):
        gate = _gate(scheduler)
        gate.evaluate(EXTREME, REF_BUY, REF_SELL, True)
        gate.acknowledge(remember_spread=True, currency_confirmed=True)
        gate.evaluate(NORMAL, REF_BUY, REF_SELL, True)
        assert gate.currency_confirmed is False
        assert gate.remember_confirmed is False
        assert gate.evaluate(EXTREME, REF_BUY, REF_SELL, True) is False
        assert gate.state.stage is WarningStage.PENDING

    def test_cancel_drops_timer(self, scheduler):
        gate = _gate(scheduler)
        gate.evaluate(EXTREME, REF_BUY, REF_SELL, True)
        gate.cancel()
        assert scheduler.live == []
