# src/p2pex/domain/spread.py
"""
Spread Calculator - Quote Rate vs Reference Rate

Pure functions relating a quote rate to its reference ("central bank") rate:
the signed percentage spread between them, the quote implied by a stored
spread, and the comparison tuple shown next to each rate field.

Files that USE this module:
- p2pex.application.rate_derivation (derives rates and back-computes spreads)
- p2pex.application.risk_gate (measures spread magnitude)
- p2pex.application.engine (comparison tuples)
- tests.test_spread (unit tests)

Files that this module USES:
- p2pex.domain.models (RateInfo)
"""
from __future__ import annotations

import math
from typing import Optional

from p2pex.domain.models import RateInfo

# Differences below this are floating-point noise from earlier round-trips.
SPREAD_EPSILON = 1e-8

MIN_INFO_PRECISION = 2
MAX_INFO_PRECISION = 6


def _missing(value: Optional[float]) -> bool:
    return value is None or not value or math.isnan(value)


def spread_pct(quoted: Optional[float], reference: Optional[float]) -> float:
    """
    Signed percentage deviation of a quote rate from its reference rate.

    Formula: (quoted - reference) / reference * 100
    - Positive = quote is above reference
    - 0 when either side is missing/zero, or the two differ by less than 1e-8

    Args:
        quoted: Quote rate
        reference: Reference rate

    Returns:
        Spread in percent
    """
    if _missing(quoted) or _missing(reference):
        return 0.0
    if abs(quoted - reference) < SPREAD_EPSILON:
        return 0.0
    return (quoted - reference) / reference * 100.0


def rate_from_spread(reference: float, pct: float) -> float:
    """Quote rate implied by applying ``pct`` percent to ``reference``."""
    return reference * (1.0 + pct / 100.0)


def reference_precision(reference: float) -> int:
    """
    Number of decimals to show for a reference rate.

    Uses the rate's natural decimal count, clamped to [2, 6], so 95.5 shows
    as 95.50 and 0.0105263157 as 0.010526.
    """
    text = repr(float(reference))
    dot = text.find(".")
    if dot == -1:
        return MIN_INFO_PRECISION
    return min(max(len(text) - dot - 1, MIN_INFO_PRECISION), MAX_INFO_PRECISION)


def rate_info(
    quoted: Optional[float],
    reference: Optional[float],
    threshold_pct: float = 5.0,
) -> Optional[RateInfo]:
    """
    Build the reference-vs-quote comparison for one rate field.

    Args:
        quoted: Quote rate (None/0 when the field is empty)
        reference: Reference rate (None when the feed has no entry)
        threshold_pct: Spread magnitude above which the comparison is marked extreme

    Returns:
        RateInfo, or None when either rate is missing
    """
    if _missing(quoted) or _missing(reference):
        return None

    diff = spread_pct(quoted, reference)
    precision = reference_precision(reference)

    magnitude = abs(diff)
    zero_threshold = 1 / 10 ** (precision + 1)
    if magnitude < zero_threshold:
        spread_text = "0." + "0" * precision + "%"
    else:
        sign = "+" if diff > 0 else "-"
        spread_text = f"{sign}{magnitude:.{precision}f}%"

    return RateInfo(
        reference_rate=f"{reference:.{precision}f}",
        quoted_rate=f"{quoted:.{precision}f}",
        spread_text=spread_text,
        spread=diff,
        extreme=magnitude > threshold_pct,
    )
