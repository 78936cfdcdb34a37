# src/p2pex/shared/__init__.py
"""
Shared Utilities - Cross-cutting Concerns

This package contains shared utilities used across all layers:
- Number parsing and formatting
- Validation
- Language management (import p2pex.shared.language directly; it reads settings)
- Logging configuration
"""

from p2pex.shared.numbers import format_for_display, format_for_edit, parse_amount
from p2pex.shared.validators import (
    normalize_currency_code,
    validate_bot_token,
    validate_currency_code,
    validate_username,
)

__all__ = [
    "parse_amount",
    "format_for_edit",
    "format_for_display",
    "normalize_currency_code",
    "validate_bot_token",
    "validate_currency_code",
    "validate_username",
]
