# src/p2pex/application/reconciliation.py
"""
Amount Reconciliation - The Give / Receive / Settlement Triangle

Three amounts linked by the two quote rates:

    settlement = give / buy_rate = receive / sell_rate

Editing any one recomputes the other two with the current rates. When either
rate is zero the dependent amounts are left as they were and only the edited
value changes. After a rate change the give amount is the anchor.

Files that USE this module:
- p2pex.application.engine (amount edits and rate-change re-anchoring)
- tests.test_reconciliation (unit tests)

Files that this module USES:
- p2pex.domain.models (AmountTriple, QuotedRates)
"""
from __future__ import annotations

from p2pex.domain.models import AmountTriple, QuotedRates


def from_give(current: AmountTriple, give: float, rates: QuotedRates) -> AmountTriple:
    """Operator edited the give amount."""
    if not rates.usable:
        return AmountTriple(give=give, receive=current.receive, settlement=current.settlement)
    settlement = give / rates.buy_rate
    return AmountTriple(give=give, receive=settlement * rates.sell_rate, settlement=settlement)


def from_receive(current: AmountTriple, receive: float, rates: QuotedRates) -> AmountTriple:
    """Operator edited the receive amount."""
    if not rates.usable:
        return AmountTriple(give=current.give, receive=receive, settlement=current.settlement)
    settlement = receive / rates.sell_rate
    return AmountTriple(give=settlement * rates.buy_rate, receive=receive, settlement=settlement)


def from_settlement(current: AmountTriple, settlement: float, rates: QuotedRates) -> AmountTriple:
    """Operator edited the settlement (USDT) amount."""
    if not rates.usable:
        return AmountTriple(give=current.give, receive=current.receive, settlement=settlement)
    return AmountTriple(
        give=settlement * rates.buy_rate,
        receive=settlement * rates.sell_rate,
        settlement=settlement,
    )


def reanchor(current: AmountTriple, rates: QuotedRates) -> AmountTriple:
    """
    Recompute after the quote rates changed.

    The requested give amount is sticky: settlement and receive follow it.
    Nothing changes when give is zero or the rates are unusable.
    """
    if not current.give or not rates.usable:
        return current
    return from_give(current, current.give, rates)
