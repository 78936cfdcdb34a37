# src/p2pex/adapters/formatting/__init__.py
"""
Formatting Adapters - Message Formatting

This package contains message formatting adapters for Telegram output.
"""

from p2pex.adapters.formatting.formatter import (
    format_card,
    format_currency_list,
    format_warning,
)

__all__ = [
    "format_card",
    "format_currency_list",
    "format_warning",
]
