# src/p2pex/application/engine.py
"""
Exchange Engine - Rate and Amount Reconciliation

The engine owns the calculator state (pair, modes, spreads, reference rates,
quote rates, the three amounts and their field texts) and exposes one method
per operator or feed event. Every event recomputes what depends on it
synchronously and returns an EngineSnapshot for the presentation layer.

Event handling order for anything that can move the rates:
1. apply the change (pair, mode, reference table, typed rate)
2. re-derive the quote rates when required, re-anchoring amounts on give
3. evaluate the spread risk gate; persist the rate pair only if it allows

Amount edits never touch the rates and never re-run the gate.

Files that USE this module:
- p2pex.app (composition root creates the engine)
- p2pex.adapters.telegram.handlers (routes operator commands to engine events)
- tests.test_engine (scenario tests)

Files that this module USES:
- p2pex.application.rate_derivation (derivation rules)
- p2pex.application.reconciliation (amount triangle)
- p2pex.application.risk_gate (SpreadRiskGate)
- p2pex.application.state_manager (StateManager preferences)
- p2pex.application.timers (Scheduler)
- p2pex.domain.models, p2pex.domain.spread
- p2pex.shared.numbers (parse_amount, format_for_edit, format_for_display)
- p2pex.shared.validators (normalize_currency_code)
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Mapping, Optional, Union

from p2pex.application import rate_derivation, reconciliation
from p2pex.application.risk_gate import DEFAULT_DELAY_SECONDS, DEFAULT_THRESHOLD_PCT, SpreadRiskGate
from p2pex.application.state_manager import StateManager
from p2pex.application.timers import Scheduler
from p2pex.domain.models import (
    PRIORITY_CURRENCIES,
    AmountTriple,
    CalcMode,
    CurrencyCode,
    EngineSnapshot,
    PairSelection,
    QuotedRates,
    RateInfo,
    ReferenceRateTable,
    Side,
    SpreadEntry,
    empty_reference_table,
    freeze_reference_table,
)
from p2pex.domain.spread import rate_info
from p2pex.shared.numbers import format_for_display, format_for_edit, parse_amount
from p2pex.shared.validators import normalize_currency_code

logger = logging.getLogger(__name__)

FIELD_GIVE = "give"
FIELD_RECEIVE = "receive"
FIELD_SETTLEMENT = "settlement"


class ExchangeEngine:
    """Event-driven calculator state for one operator."""

    def __init__(
        self,
        state_manager: StateManager,
        scheduler: Scheduler,
        threshold_pct: float = DEFAULT_THRESHOLD_PCT,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        initial_give: str = "10 000",
        on_warning: Optional[Callable[[EngineSnapshot], None]] = None,
    ):
        """
        Initialize the engine from persisted preferences.

        The reference table starts empty; the last committed rates (if any)
        seed the rate fields so explicit-mode work can go on without a feed.

        Args:
            state_manager: Preference access (pair, modes, spreads, last rates)
            scheduler: Timer source for the spread warning debounce
            threshold_pct: Spread warning threshold in percent
            delay_seconds: Spread warning debounce interval
            initial_give: Initial text of the give field
            on_warning: Called with a snapshot when the spread warning is shown
        """
        self.prefs = state_manager
        self.threshold_pct = threshold_pct
        self.on_warning = on_warning

        self._pair: PairSelection = state_manager.load_pair()
        self._mode: CalcMode = state_manager.load_mode()
        self._advanced: bool = state_manager.load_advanced()
        self._spreads: Dict[CurrencyCode, SpreadEntry] = state_manager.load_spreads()
        self._configured: List[CurrencyCode] = state_manager.load_configured()
        self._table: ReferenceRateTable = empty_reference_table()
        self._pair_changed = False

        last_buy, last_sell = state_manager.load_last_rates()
        self._rates = QuotedRates(buy_rate=parse_amount(last_buy), sell_rate=parse_amount(last_sell))
        self._rate_texts: Dict[Side, str] = {
            Side.BUY: format_for_edit(last_buy),
            Side.SELL: format_for_edit(last_sell),
        }

        give_text = format_for_edit(initial_give)
        self._amounts = reconciliation.from_give(AmountTriple(), parse_amount(give_text), self._rates)
        self._amount_texts: Dict[str, str] = {FIELD_GIVE: give_text}
        self._refresh_amount_texts(edited=FIELD_GIVE)

        self.gate = SpreadRiskGate(
            scheduler,
            threshold_pct=threshold_pct,
            delay_seconds=delay_seconds,
            on_show=self._on_warning_shown,
        )
        logger.info(
            "Engine ready: pair=%s/%s mode=%s pro=%s spreads=%d",
            self._pair.source, self._pair.target, self._mode.value, self._advanced, len(self._spreads),
        )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def pair(self) -> PairSelection:
        return self._pair

    @property
    def mode(self) -> CalcMode:
        return self._mode

    @property
    def advanced(self) -> bool:
        return self._advanced

    @property
    def rates(self) -> QuotedRates:
        return self._rates

    @property
    def amounts(self) -> AmountTriple:
        return self._amounts

    @property
    def reference_table(self) -> ReferenceRateTable:
        return self._table

    @property
    def spreads(self) -> Dict[CurrencyCode, SpreadEntry]:
        return dict(self._spreads)

    @property
    def configured(self) -> List[CurrencyCode]:
        return list(self._configured)

    @property
    def rates_editable(self) -> bool:
        return rate_derivation.rates_editable(self._mode, self._advanced, self._table, self._pair)

    def reference_for(self, side: Side) -> Optional[float]:
        return rate_derivation.reference_for(self._table, self._pair.currency_for(side))

    def rate_info(self, side: Side) -> Optional[RateInfo]:
        """Reference-vs-quote comparison for one rate field (None if either is missing)."""
        return rate_info(self._rates.for_side(side), self.reference_for(side), self.threshold_pct)

    def currency_choices(self) -> List[CurrencyCode]:
        """Priority currencies first, then every other feed currency alphabetically."""
        priority = [code for code, _ in PRIORITY_CURRENCIES]
        others = sorted(code for code in self._table if code not in priority)
        return priority + others

    def snapshot(self) -> EngineSnapshot:
        return EngineSnapshot(
            pair=self._pair,
            mode=self._mode,
            advanced=self._advanced,
            rates=self._rates,
            amounts=self._amounts,
            risk=self.gate.state,
            buy_rate_text=self._rate_texts[Side.BUY],
            sell_rate_text=self._rate_texts[Side.SELL],
            give_text=self._amount_texts[FIELD_GIVE],
            receive_text=self._amount_texts[FIELD_RECEIVE],
            settlement_text=self._amount_texts[FIELD_SETTLEMENT],
            rates_editable=self.rates_editable,
            configured=frozenset(self._configured),
            buy_info=self.rate_info(Side.BUY),
            sell_info=self.rate_info(Side.SELL),
        )

    # ------------------------------------------------------------------
    # Amount events
    # ------------------------------------------------------------------

    def edit_give(self, text: str) -> EngineSnapshot:
        formatted = format_for_edit(text)
        self._amounts = reconciliation.from_give(self._amounts, parse_amount(formatted), self._rates)
        self._amount_texts[FIELD_GIVE] = formatted
        self._refresh_amount_texts(edited=FIELD_GIVE)
        return self.snapshot()

    def edit_receive(self, text: str) -> EngineSnapshot:
        formatted = format_for_edit(text)
        self._amounts = reconciliation.from_receive(self._amounts, parse_amount(formatted), self._rates)
        self._amount_texts[FIELD_RECEIVE] = formatted
        self._refresh_amount_texts(edited=FIELD_RECEIVE)
        return self.snapshot()

    def edit_settlement(self, text: str) -> EngineSnapshot:
        formatted = format_for_edit(text)
        self._amounts = reconciliation.from_settlement(self._amounts, parse_amount(formatted), self._rates)
        self._amount_texts[FIELD_SETTLEMENT] = formatted
        self._refresh_amount_texts(edited=FIELD_SETTLEMENT)
        return self.snapshot()

    # ------------------------------------------------------------------
    # Rate, pair and mode events
    # ------------------------------------------------------------------

    def edit_rate(self, side: Side, text: str) -> EngineSnapshot:
        """
        Operator typed a quote rate.

        Ignored while rates are automatic. Otherwise the typed text becomes the
        rate, both pair currencies are marked configured, and the spread the
        rate implies is stored for the currency when its reference is loaded.
        """
        if not self.rates_editable:
            logger.info("Ignoring %s rate edit: rates are automatic", side.value)
            return self.snapshot()

        self._mark_configured(self._pair.source)
        self._mark_configured(self._pair.target)

        formatted = format_for_edit(text)
        rate = parse_amount(formatted)
        self._rates = self._rates.with_side(side, rate)
        self._rate_texts[side] = formatted

        code = self._pair.currency_for(side)
        updated = rate_derivation.back_compute_spread(
            rate_derivation.spread_for(self._spreads, code),
            side,
            rate,
            rate_derivation.reference_for(self._table, code),
        )
        if updated is not None:
            self._spreads[code] = updated
            self.prefs.save_spreads(self._spreads)
            logger.info("Spread for %s %s set to %.6f%%", code, side.value, updated.for_side(side))

        self._reanchor_amounts()
        self._recalculate()
        self._evaluate_gate()
        return self.snapshot()

    def swap_pair(self) -> EngineSnapshot:
        return self._change_pair(self._pair.swapped())

    def select_currency(self, side: Side, code: str) -> EngineSnapshot:
        """
        Choose the source (BUY) or target (SELL) currency.

        A malformed code is logged and ignored.
        """
        normalized = normalize_currency_code(code)
        if normalized is None:
            logger.warning("Ignoring invalid currency code %r", code)
            return self.snapshot()
        if side is Side.BUY:
            pair = PairSelection(source=normalized, target=self._pair.target)
        else:
            pair = PairSelection(source=self._pair.source, target=normalized)
        return self._change_pair(pair)

    def set_mode(self, mode: Union[CalcMode, str]) -> EngineSnapshot:
        mode = CalcMode(mode)
        if mode is not self._mode:
            self._mode = mode
            self.prefs.save_mode(mode)
            logger.info("Calculation mode set to %s", mode.value)
        self._recalculate()
        self._evaluate_gate()
        return self.snapshot()

    def set_advanced(self, advanced: bool) -> EngineSnapshot:
        advanced = bool(advanced)
        if advanced != self._advanced:
            self._advanced = advanced
            self.prefs.save_advanced(advanced)
            logger.info("Pro mode %s", "enabled" if advanced else "disabled")
        self._recalculate()
        self._evaluate_gate()
        return self.snapshot()

    # ------------------------------------------------------------------
    # Feed and warning events
    # ------------------------------------------------------------------

    def apply_reference_rates(self, rates: Mapping[CurrencyCode, float]) -> EngineSnapshot:
        """Replace the reference table wholesale and re-derive what depends on it."""
        self._table = freeze_reference_table(rates)
        logger.info("Reference table replaced: %d currencies", len(self._table))
        self._recalculate()
        self._evaluate_gate()
        return self.snapshot()

    def set_warning_confirmations(
        self,
        currency_confirmed: Optional[bool] = None,
        remember_spread: Optional[bool] = None,
    ) -> EngineSnapshot:
        self.gate.set_confirmations(currency_confirmed, remember_spread)
        return self.snapshot()

    def acknowledge_warning(self, remember_spread: bool, currency_confirmed: bool = True) -> bool:
        """
        Dismiss the spread warning.

        With remember_spread, the pair's currencies are marked configured and
        the spreads of the current rates are stored. The current rate pair is
        persisted once the gate accepts.

        Returns:
            True if the warning was dismissed
        """
        if not self.gate.acknowledge(remember_spread=remember_spread, currency_confirmed=currency_confirmed):
            return False
        if self.gate.remember_confirmed:
            self._remember_current_spreads()
        self._save_last_rates()
        return True

    def close(self) -> None:
        self.gate.cancel()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _change_pair(self, pair: PairSelection) -> EngineSnapshot:
        if pair != self._pair:
            self._pair = pair
            self._pair_changed = True
            self.prefs.save_pair(pair)
            logger.info("Pair set to %s/%s", pair.source, pair.target)
        self._recalculate()
        self._evaluate_gate()
        return self.snapshot()

    def _recalculate(self) -> None:
        """
        Re-derive quote rates when the rules call for it.

        Without both references nothing changes, and a pending pair change is
        kept so the derivation still happens once the feed loads.
        """
        if not rate_derivation.references_available(self._table, self._pair):
            return
        if rate_derivation.should_derive(self._mode, self._advanced, self._pair_changed, self._rates):
            derived = rate_derivation.derive_quoted_rates(self._table, self._pair, self._spreads)
            self._set_rates(derived)
            self._reanchor_amounts()
        self._pair_changed = False

    def _set_rates(self, rates: QuotedRates) -> None:
        self._rates = rates
        self._rate_texts[Side.BUY] = format_for_display(rates.buy_rate)
        self._rate_texts[Side.SELL] = format_for_display(rates.sell_rate)

    def _reanchor_amounts(self) -> None:
        anchored = reconciliation.reanchor(self._amounts, self._rates)
        if anchored is not self._amounts:
            self._amounts = anchored
            self._refresh_amount_texts(edited=FIELD_GIVE)

    def _refresh_amount_texts(self, edited: str) -> None:
        """Render every amount field except the one the operator is typing in."""
        values = {
            FIELD_GIVE: self._amounts.give,
            FIELD_RECEIVE: self._amounts.receive,
            FIELD_SETTLEMENT: self._amounts.settlement,
        }
        for name, value in values.items():
            if name != edited:
                self._amount_texts[name] = format_for_display(value)

    def _evaluate_gate(self) -> None:
        allowed = self.gate.evaluate(
            self._rates,
            self.reference_for(Side.BUY),
            self.reference_for(Side.SELL),
            self._advanced,
        )
        if allowed:
            self._save_last_rates()

    def _save_last_rates(self) -> None:
        self.prefs.save_last_rates(self._rate_texts[Side.BUY], self._rate_texts[Side.SELL])

    def _mark_configured(self, code: CurrencyCode) -> None:
        if code not in self._configured:
            self._configured.append(code)
            self.prefs.save_configured(self._configured)

    def _remember_current_spreads(self) -> None:
        self._mark_configured(self._pair.source)
        self._mark_configured(self._pair.target)
        changed = False
        for side in (Side.BUY, Side.SELL):
            code = self._pair.currency_for(side)
            updated = rate_derivation.back_compute_spread(
                rate_derivation.spread_for(self._spreads, code),
                side,
                self._rates.for_side(side),
                rate_derivation.reference_for(self._table, code),
            )
            if updated is not None:
                self._spreads[code] = updated
                changed = True
        if changed:
            self.prefs.save_spreads(self._spreads)

    def _on_warning_shown(self) -> None:
        if self.on_warning is not None:
            self.on_warning(self.snapshot())
