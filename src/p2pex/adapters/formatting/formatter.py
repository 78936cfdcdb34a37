# src/p2pex/adapters/formatting/formatter.py
"""
Message Formatter - Calculator Card and Warning Text

This module renders engine snapshots as Telegram messages: the calculator
card (pair, mode, the two quote rates with their reference comparison in pro
mode, and the three amounts), the spread warning, and the currency list.

Files that USE this module:
- p2pex.adapters.telegram.handlers (card after every command, warning message)
- tests.test_formatter (unit tests)

Files that this module USES:
- p2pex.domain.models (EngineSnapshot, RateInfo, currency flags)
- p2pex.shared.language (translate for multi-language support)
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from p2pex.domain.models import (
    SETTLEMENT_ASSET,
    CalcMode,
    CurrencyCode,
    EngineSnapshot,
    RateInfo,
    currency_flag,
)
from p2pex.shared.language import translate


def _value(text: str) -> str:
    return text if text else translate("empty_value")


def format_pair(snap: EngineSnapshot) -> str:
    return translate(
        "pair_line",
        source=snap.pair.source,
        source_flag=currency_flag(snap.pair.source),
        target=snap.pair.target,
        target_flag=currency_flag(snap.pair.target),
    )


def format_mode(snap: EngineSnapshot) -> str:
    mode = translate("mode_approx" if snap.mode is CalcMode.DERIVED else "mode_exact")
    line = translate("mode_line", mode=mode)
    if snap.advanced:
        line = f"{line} · {translate('pro_badge')}"
    return line


def format_info_line(info: Optional[RateInfo]) -> Optional[str]:
    """
    Reference comparison under a rate, e.g. "CB Rate: 95.5 · Spread: +1.05%".

    Returns None when the reference or the quote is missing.
    """
    if info is None:
        return None
    line = translate("info_line", reference=info.reference_rate, spread=info.spread_text)
    if info.extreme:
        line = f"{line} ⚠️"
    return line


def format_card(snap: EngineSnapshot) -> str:
    """
    Format the full calculator card.

    Args:
        snap: Engine snapshot after the last event

    Returns:
        Multi-line plain text message
    """
    badge = "" if snap.rates_editable else translate("auto_badge")
    lines: List[str] = [
        translate("title"),
        format_pair(snap),
        format_mode(snap),
        "",
        translate("buy_line", asset=SETTLEMENT_ASSET, rate=_value(snap.buy_rate_text), badge=badge).rstrip(),
    ]
    if snap.advanced:
        info = format_info_line(snap.buy_info)
        if info:
            lines.append(info)
    lines.append(translate("sell_line", asset=SETTLEMENT_ASSET, rate=_value(snap.sell_rate_text), badge=badge).rstrip())
    if snap.advanced:
        info = format_info_line(snap.sell_info)
        if info:
            lines.append(info)
    lines += [
        "",
        translate("give_line", amount=_value(snap.give_text), currency=snap.pair.source),
        translate("settlement_line", asset=SETTLEMENT_ASSET, amount=_value(snap.settlement_text)),
        translate("receive_line", amount=_value(snap.receive_text), currency=snap.pair.target),
    ]
    return "\n".join(lines)


def format_warning(threshold_pct: float) -> str:
    threshold = f"{threshold_pct:g}"
    return f"⚠️ {translate('spread_warning', threshold=threshold)}"


def format_checkbox(label_key: str, checked: bool) -> str:
    """Inline button label with a check mark state."""
    return f"{'✅' if checked else '⬜'} {translate(label_key)}"


def format_currency_list(codes: Iterable[CurrencyCode], configured: Iterable[CurrencyCode] = ()) -> str:
    """
    Format the selectable currencies, configured ones marked with a check.

    Args:
        codes: Currency codes in display order
        configured: Codes whose spreads were set by the operator

    Returns:
        One currency per line ("🇷🇺 RUB ✓")
    """
    done = set(configured)
    entries = []
    for code in codes:
        mark = " ✓" if code in done else ""
        entries.append(f"{currency_flag(code)} {code}{mark}")
    return translate("currencies", codes="\n".join(entries))
