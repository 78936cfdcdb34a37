# src/p2pex/shared/numbers.py
"""
Number Parsing and Formatting - Operator Input Handling

Converts between the text an operator types into an amount or rate field and
numeric values. Input is locale-flexible: spaces group thousands, and either a
comma or a dot marks the decimals ("10 000,5" == "10000.5"). Rendering always
re-inserts space grouping on the integer part.

parse_amount(format_for_edit(s)) == parse_amount(s) for every s: both go
through the same cleanup, and grouping only adds spaces that parsing strips.

Files that USE this module:
- p2pex.application.engine (parses operator edits, renders computed fields)
- p2pex.application.state_manager (reads persisted spreads and rates)
- p2pex.adapters.formatting.formatter (renders amounts)
- tests.test_numbers (unit tests)

Files that this module USES:
- None (pure utility functions)
"""
import math
import re
from typing import Optional, Union

_NOT_NUMERIC = re.compile(r"[^0-9.\-]")
_THOUSANDS = re.compile(r"\B(?=(\d{3})+(?!\d))", re.ASCII)


def _clean_numeric(text: str) -> str:
    """
    Reduce free-form text to digits, at most one dot, and an optional leading minus.

    Commas become dots, every other character is dropped, only the first dot
    survives, and a minus is kept only in front.
    """
    cleaned = _NOT_NUMERIC.sub("", str(text).replace(",", "."))
    negative = cleaned.startswith("-")
    cleaned = cleaned.replace("-", "")
    head, dot, tail = cleaned.partition(".")
    if dot:
        cleaned = head + "." + tail.replace(".", "")
    return ("-" if negative else "") + cleaned


def _group_thousands(integer_part: str) -> str:
    return _THOUSANDS.sub(" ", integer_part)


def parse_amount(text: Optional[str]) -> float:
    """
    Parse operator-entered text as a number.

    Args:
        text: Raw field text, e.g. '10 000', '95,5', '1 234.56'

    Returns:
        Parsed value; 0.0 for empty or unparsable input (never raises)
    """
    if not text:
        return 0.0
    try:
        return float(_clean_numeric(text))
    except ValueError:
        return 0.0


def format_for_edit(text: str) -> str:
    """
    Sanitize keystrokes into an editable, grouped numeric string.

    Keeps an in-progress trailing dot or partial fraction so the operator can
    keep typing: '1234,' -> '1 234.', '1234567.8' -> '1 234 567.8'.

    Args:
        text: Raw field text

    Returns:
        Cleaned text with thousands grouping on the integer part
    """
    cleaned = _clean_numeric(text)
    head, dot, tail = cleaned.partition(".")
    if dot:
        return _group_thousands(head) + "." + tail
    return _group_thousands(cleaned)


def format_for_display(value: Optional[Union[int, float]], decimals: int = 2) -> str:
    """
    Render a computed value for a field.

    Whole numbers show no decimals, fractional values show exactly ``decimals``
    places, and 0 / NaN / missing values render as an empty string so a
    cleared field stays blank instead of showing '0.00'.

    Args:
        value: Number to render
        decimals: Decimal places for fractional values (default: 2)

    Returns:
        Grouped string such as '3 685.86' or '10 000'
    """
    if value is None:
        return ""
    number = float(value)
    if not number or not math.isfinite(number):
        return ""
    if number.is_integer():
        text = str(int(number))
    else:
        text = f"{number:.{decimals}f}"
    return format_for_edit(text)
