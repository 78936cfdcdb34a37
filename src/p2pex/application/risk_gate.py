# src/p2pex/application/risk_gate.py
"""
Spread Risk Gate - Holding Back Fat-fingered Rates

In pro mode, a quote rate more than the threshold (5% by default) away from
its reference rate is flagged. The warning is debounced: a timer starts when
the rates are flagged and is restarted by every further change, and the
warning is shown only if the rates are still flagged and unacknowledged when
it fires. If the rates come back in range first, the timer is cancelled and
nothing is shown.

While flagged and unacknowledged the gate tells the engine not to persist the
rate pair. The operator dismisses the warning after confirming the currency
is correct, optionally asking to remember the spread; from then on the rates
persist normally until the rates return to range, which clears the
acknowledgment so a later violation needs a fresh one.

    NORMAL -> PENDING -> SHOWN -> ACKNOWLEDGED -> NORMAL

Files that USE this module:
- p2pex.application.engine (ExchangeEngine evaluates the gate after rate changes)
- tests.test_risk_gate (unit tests)

Files that this module USES:
- p2pex.application.timers (Scheduler, TimerHandle)
- p2pex.domain.models (QuotedRates, RiskState)
- p2pex.domain.spread (spread_pct)
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from p2pex.application.timers import Scheduler, TimerHandle
from p2pex.domain.models import QuotedRates, RiskState
from p2pex.domain.spread import spread_pct

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_PCT = 5.0
DEFAULT_DELAY_SECONDS = 3.0


class SpreadRiskGate:
    """Debounced warning and persistence gate for extreme spreads."""

    def __init__(
        self,
        scheduler: Scheduler,
        threshold_pct: float = DEFAULT_THRESHOLD_PCT,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        on_show: Optional[Callable[[], None]] = None,
    ):
        """
        Args:
            scheduler: Creates the debounce timer
            threshold_pct: Spread magnitude (percent) above which rates are flagged
            delay_seconds: Debounce interval before the warning is shown
            on_show: Called when the warning becomes visible
        """
        self.scheduler = scheduler
        self.threshold_pct = threshold_pct
        self.delay_seconds = delay_seconds
        self.on_show = on_show

        self.flagged = False
        self.acknowledged = False
        self.shown = False
        self.currency_confirmed = False
        self.remember_confirmed = False
        self._timer: Optional[TimerHandle] = None

    @property
    def state(self) -> RiskState:
        return RiskState(
            flagged=self.flagged,
            acknowledged=self.acknowledged,
            pending_warning=self._timer is not None,
            shown=self.shown,
        )

    def is_extreme(
        self,
        rates: QuotedRates,
        ref_buy: Optional[float],
        ref_sell: Optional[float],
        advanced: bool,
    ) -> bool:
        """
        Whether the quote rates are out of range.

        Only checked in pro mode, and only when both reference rates and both
        quote rates are non-zero.
        """
        if not advanced or not ref_buy or not ref_sell or not rates.usable:
            return False
        buy_spread = abs(spread_pct(rates.buy_rate, ref_buy))
        sell_spread = abs(spread_pct(rates.sell_rate, ref_sell))
        return buy_spread > self.threshold_pct or sell_spread > self.threshold_pct

    def evaluate(
        self,
        rates: QuotedRates,
        ref_buy: Optional[float],
        ref_sell: Optional[float],
        advanced: bool,
    ) -> bool:
        """
        Re-check the gate after the rates, pair, references or pro mode changed.

        Args:
            rates: Current quote rates
            ref_buy: Reference rate of the source currency (None if missing)
            ref_sell: Reference rate of the target currency (None if missing)
            advanced: Pro mode flag

        Returns:
            True when the current rate pair may be persisted
        """
        self._cancel_timer()

        if not rates.usable:
            # Nothing to judge yet; the warning state carries over
            return False

        if self.is_extreme(rates, ref_buy, ref_sell, advanced):
            if not self.flagged:
                # A new violation always needs a fresh acknowledgment
                self.acknowledged = False
                logger.info(
                    "Spread above %.2f%% (buy=%s sell=%s), warning in %.1fs",
                    self.threshold_pct, rates.buy_rate, rates.sell_rate, self.delay_seconds,
                )
            self.flagged = True
            if self.acknowledged:
                return True
            if not self.shown:
                self._timer = self.scheduler.call_later(self.delay_seconds, self._fire)
            return False

        if self.flagged or self.acknowledged or self.shown:
            logger.info("Spread back within %.2f%%, warning cleared", self.threshold_pct)
        self._reset()
        return True

    def set_confirmations(
        self,
        currency_confirmed: Optional[bool] = None,
        remember_spread: Optional[bool] = None,
    ) -> None:
        """Update the warning's checkboxes; None leaves a box as it is."""
        if currency_confirmed is not None:
            self.currency_confirmed = currency_confirmed
        if remember_spread is not None:
            self.remember_confirmed = remember_spread

    def acknowledge(
        self,
        remember_spread: Optional[bool] = None,
        currency_confirmed: Optional[bool] = None,
    ) -> bool:
        """
        Dismiss the warning.

        Args:
            remember_spread: "Remember spread" confirmation (None keeps the checkbox state)
            currency_confirmed: "Currency is correct" confirmation (None keeps the checkbox state)

        Returns:
            True if the gate accepted the dismissal; False when nothing is
            flagged or the currency was not confirmed
        """
        self.set_confirmations(currency_confirmed, remember_spread)
        if not self.flagged:
            return False
        if not self.currency_confirmed:
            logger.info("Warning dismissal refused: currency not confirmed")
            return False
        self._cancel_timer()
        self.acknowledged = True
        self.shown = False
        logger.info("Spread warning acknowledged (remember=%s)", self.remember_confirmed)
        return True

    def cancel(self) -> None:
        """Drop any pending timer (engine shutdown)."""
        self._cancel_timer()

    def _fire(self) -> None:
        self._timer = None
        if not self.flagged or self.acknowledged:
            return
        self.shown = True
        logger.info("Showing spread warning")
        if self.on_show is not None:
            self.on_show()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _reset(self) -> None:
        self.flagged = False
        self.acknowledged = False
        self.shown = False
        self.currency_confirmed = False
        self.remember_confirmed = False
