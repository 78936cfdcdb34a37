# src/p2pex/application/rate_derivation.py
"""
Rate Derivation - Quote Rates from Spreads, Spreads from Quote Rates

Two directions:
- derived: buy = reference[source] * (1 + spread[source].buy / 100), and
  sell = reference[target] * (1 + spread[target].sell / 100)
- explicit: an operator-typed rate is kept as is and the spread it implies
  against the current reference is written back to the currency's entry

Derivation is active when pro mode is on and the calculation mode is
"approx". Outside it the rates are operator-editable, but a pair change or a
zero rate still re-derives so the fields never sit empty while references
are available.

Files that USE this module:
- p2pex.application.engine (ExchangeEngine recalculation and rate edits)
- tests.test_rate_derivation (unit tests)

Files that this module USES:
- p2pex.domain.models (QuotedRates, SpreadEntry, PairSelection, CalcMode, Side)
- p2pex.domain.spread (rate_from_spread, spread_pct)
"""
from __future__ import annotations

from typing import Mapping, Optional

from p2pex.domain.models import (
    ZERO_SPREAD,
    CalcMode,
    CurrencyCode,
    PairSelection,
    QuotedRates,
    ReferenceRateTable,
    Side,
    SpreadEntry,
)
from p2pex.domain.spread import rate_from_spread, spread_pct


def reference_for(table: ReferenceRateTable, code: CurrencyCode) -> Optional[float]:
    """Positive reference rate for ``code``, or None when the feed has no usable entry."""
    rate = table.get(code)
    if rate is None or not rate > 0:
        return None
    return rate


def spread_for(spreads: Mapping[CurrencyCode, SpreadEntry], code: CurrencyCode) -> SpreadEntry:
    """Stored spread for a currency; zero spread when none was ever committed."""
    return spreads.get(code, ZERO_SPREAD)


def derivation_active(mode: CalcMode, advanced: bool) -> bool:
    """True when rates are recomputed from spreads on every change."""
    return advanced and mode is CalcMode.DERIVED


def references_available(table: ReferenceRateTable, pair: PairSelection) -> bool:
    return reference_for(table, pair.source) is not None and reference_for(table, pair.target) is not None


def rates_editable(mode: CalcMode, advanced: bool, table: ReferenceRateTable, pair: PairSelection) -> bool:
    """
    Whether the operator may type rates.

    Read-only ("Auto") only while derivation is active and both references
    are loaded; a missing reference leaves the fields editable.
    """
    return not (derivation_active(mode, advanced) and references_available(table, pair))


def derive_quoted_rates(
    table: ReferenceRateTable,
    pair: PairSelection,
    spreads: Mapping[CurrencyCode, SpreadEntry],
) -> Optional[QuotedRates]:
    """
    Compute quote rates from reference rates and stored spreads.

    Args:
        table: Reference rates snapshot
        pair: Active pair
        spreads: Per-currency spread entries

    Returns:
        QuotedRates, or None when either reference rate is missing
        (callers keep their last valid rates)
    """
    ref_buy = reference_for(table, pair.source)
    ref_sell = reference_for(table, pair.target)
    if ref_buy is None or ref_sell is None:
        return None
    return QuotedRates(
        buy_rate=rate_from_spread(ref_buy, spread_for(spreads, pair.source).buy_pct),
        sell_rate=rate_from_spread(ref_sell, spread_for(spreads, pair.target).sell_pct),
    )


def should_derive(
    mode: CalcMode,
    advanced: bool,
    pair_changed: bool,
    rates: QuotedRates,
) -> bool:
    """
    Decide whether a recalculation pass re-derives the quote rates.

    Yes when derivation is active, when the pair changed since the last
    derivation, or when either rate is still zero.
    """
    return derivation_active(mode, advanced) or pair_changed or not rates.usable


def back_compute_spread(
    entry: SpreadEntry,
    side: Side,
    rate: float,
    reference: Optional[float],
) -> Optional[SpreadEntry]:
    """
    Spread entry implied by an operator-typed rate.

    Args:
        entry: Current entry for the currency (zero spread if none)
        side: Which field was typed
        rate: Typed rate
        reference: Current reference rate for the currency

    Returns:
        Updated entry, or None when the reference is unavailable or the rate
        is not positive (the typed rate is kept without writing a spread)
    """
    if reference is None or not reference > 0 or not rate > 0:
        return None
    return entry.with_side(side, spread_pct(rate, reference))
