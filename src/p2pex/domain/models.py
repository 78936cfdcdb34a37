# src/p2pex/domain/models.py
"""
Domain Models - Pure Business Objects

This module contains domain models representing core exchanger concepts:
- Currency codes and the priority currency list
- Quote rates and the per-currency spread entries they derive from
- The three linked amounts (give / receive / settlement)
- Spread risk state

Files that USE this module:
- p2pex.domain.spread (RateInfo)
- p2pex.application.* (all services use domain models)
- p2pex.adapters.* (formatter, telegram handlers)
- tests.* (tests use domain models for test data)

Files that this module USES:
- None (pure domain layer, no external dependencies)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

from dataclasses import dataclass, field  # Decorators for creating data classes
from enum import Enum  # Enumerations for modes and sides
from types import MappingProxyType  # Read-only view over the reference table
from typing import Dict, FrozenSet, Mapping, Optional, Tuple  # Type hints

# Currency codes are plain uppercase strings ("RUB", "THB"); they carry no state.
CurrencyCode = str

# Rate per unit of the settlement asset, keyed by currency code.
ReferenceRateTable = Mapping[CurrencyCode, float]

SETTLEMENT_ASSET = "USDT"

PRIORITY_CURRENCIES: Tuple[Tuple[CurrencyCode, str], ...] = (
    ("USD", "🇺🇸"),
    ("EUR", "🇪🇺"),
    ("RUB", "🇷🇺"),
    ("IDR", "🇮🇩"),
    ("CNY", "🇨🇳"),
    ("THB", "🇹🇭"),
    ("KZT", "🇰🇿"),
    ("BYN", "🇧🇾"),
)

CURRENCY_FLAGS: Dict[CurrencyCode, str] = {
    "USD": "🇺🇸", "EUR": "🇪🇺", "RUB": "🇷🇺", "IDR": "🇮🇩", "CNY": "🇨🇳", "THB": "🇹🇭",
    "KZT": "🇰🇿", "BYN": "🇧🇾", "UAH": "🇺🇦", "TRY": "🇹🇷", "UZS": "🇺🇿", "GEL": "🇬🇪",
    "GBP": "🇬🇧", "JPY": "🇯🇵", "AUD": "🇦🇺", "CAD": "🇨🇦", "CHF": "🇨🇭", "KRW": "🇰🇷",
    "BRL": "🇧🇷", "INR": "🇮🇳", "SGD": "🇸🇬", "PLN": "🇵🇱", "ILS": "🇮🇱", "AED": "🇦🇪",
}

UNKNOWN_FLAG = "🏳️"

DEFAULT_SOURCE = "RUB"
DEFAULT_TARGET = "THB"
DEFAULT_CONFIGURED: Tuple[CurrencyCode, ...] = ("RUB", "THB", "USD", "EUR")


def empty_reference_table() -> ReferenceRateTable:
    """Return the empty, read-only table used before the feed loads."""
    return MappingProxyType({})


def freeze_reference_table(rates: Mapping[CurrencyCode, float]) -> ReferenceRateTable:
    """
    Copy a rate mapping into an immutable snapshot.

    Args:
        rates: Mapping of currency code to rate

    Returns:
        Read-only mapping that later changes to ``rates`` cannot affect
    """
    return MappingProxyType(dict(rates))


def currency_flag(code: CurrencyCode) -> str:
    """Emoji flag for a currency code (white flag when unknown)."""
    for priority_code, flag in PRIORITY_CURRENCIES:
        if priority_code == code:
            return flag
    return CURRENCY_FLAGS.get(code, UNKNOWN_FLAG)


class CalcMode(str, Enum):
    """
    How quote rates are produced.

    DERIVED recomputes the rate from the stored spread and the live reference
    rate; EXPLICIT takes the operator-typed rate and back-computes the spread.
    Values are the strings kept in the config store.
    """
    DERIVED = "approx"
    EXPLICIT = "exact"


class Side(str, Enum):
    """Which quote rate: BUY (source currency) or SELL (target currency)."""
    BUY = "buy"
    SELL = "sell"


class WarningStage(str, Enum):
    """Lifecycle of the spread warning."""
    NORMAL = "normal"
    PENDING = "pending"  # flagged, debounce timer running
    SHOWN = "shown"  # flagged, warning presented to the operator
    ACKNOWLEDGED = "acknowledged"


@dataclass(frozen=True)
class SpreadEntry:
    """
    Signed spread percentages stored for one currency.

    Attributes:
        buy_pct: Spread applied when the currency is the source (buy side)
        sell_pct: Spread applied when the currency is the target (sell side)
    """
    buy_pct: float = 0.0
    sell_pct: float = 0.0

    def for_side(self, side: Side) -> float:
        return self.buy_pct if side is Side.BUY else self.sell_pct

    def with_side(self, side: Side, pct: float) -> SpreadEntry:
        if side is Side.BUY:
            return SpreadEntry(buy_pct=pct, sell_pct=self.sell_pct)
        return SpreadEntry(buy_pct=self.buy_pct, sell_pct=pct)


ZERO_SPREAD = SpreadEntry()


@dataclass(frozen=True)
class PairSelection:
    """Active currency pair: operator buys USDT with source, sells USDT for target."""
    source: CurrencyCode = DEFAULT_SOURCE
    target: CurrencyCode = DEFAULT_TARGET

    def swapped(self) -> PairSelection:
        return PairSelection(source=self.target, target=self.source)

    def currency_for(self, side: Side) -> CurrencyCode:
        return self.source if side is Side.BUY else self.target


@dataclass(frozen=True)
class QuotedRates:
    """Rates actually used for conversion, currency per unit of settlement asset."""
    buy_rate: float = 0.0
    sell_rate: float = 0.0

    def for_side(self, side: Side) -> float:
        return self.buy_rate if side is Side.BUY else self.sell_rate

    def with_side(self, side: Side, rate: float) -> QuotedRates:
        if side is Side.BUY:
            return QuotedRates(buy_rate=rate, sell_rate=self.sell_rate)
        return QuotedRates(buy_rate=self.buy_rate, sell_rate=rate)

    @property
    def usable(self) -> bool:
        """True when both rates are positive and conversion can proceed."""
        return self.buy_rate > 0 and self.sell_rate > 0


@dataclass(frozen=True)
class AmountTriple:
    """
    The three linked amounts.

    Attributes:
        give: Amount in the source currency
        receive: Amount in the target currency
        settlement: Amount in the settlement asset (USDT)
    """
    give: float = 0.0
    receive: float = 0.0
    settlement: float = 0.0


@dataclass(frozen=True)
class RiskState:
    """
    Spread risk flags.

    Attributes:
        flagged: Current rates exceed the spread threshold
        acknowledged: Operator dismissed the warning for this violation
        pending_warning: Debounce timer is in flight
        shown: Warning is being presented to the operator
    """
    flagged: bool = False
    acknowledged: bool = False
    pending_warning: bool = False
    shown: bool = False

    @property
    def stage(self) -> WarningStage:
        if self.acknowledged:
            return WarningStage.ACKNOWLEDGED
        if self.shown:
            return WarningStage.SHOWN
        if self.pending_warning:
            return WarningStage.PENDING
        return WarningStage.NORMAL


@dataclass(frozen=True)
class RateInfo:
    """
    Reference-vs-quote comparison for one side.

    Attributes:
        reference_rate: Reference rate formatted at the reference's own precision
        quoted_rate: Quote rate formatted at the same precision
        spread_text: Signed spread, e.g. "+1.05%" or "-0.30%"
        spread: Raw signed spread percentage
        extreme: Spread magnitude is above the warning threshold
    """
    reference_rate: str
    quoted_rate: str
    spread_text: str
    spread: float
    extreme: bool = False


@dataclass(frozen=True)
class EngineSnapshot:
    """Everything the presentation layer needs after an event."""
    pair: PairSelection
    mode: CalcMode
    advanced: bool
    rates: QuotedRates
    amounts: AmountTriple
    risk: RiskState
    buy_rate_text: str = ""
    sell_rate_text: str = ""
    give_text: str = ""
    receive_text: str = ""
    settlement_text: str = ""
    rates_editable: bool = True
    configured: FrozenSet[CurrencyCode] = field(default_factory=frozenset)
    buy_info: Optional[RateInfo] = None
    sell_info: Optional[RateInfo] = None
