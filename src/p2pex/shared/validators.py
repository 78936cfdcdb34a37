# src/p2pex/shared/validators.py
"""
Input Validation Utilities - Configuration and Operator Input

This module checks currency codes coming from the operator or the reference
feed, and the bot token and operator username read from configuration.

Files that USE this module:
- p2pex.config.settings (Settings field validators)
- p2pex.application.engine (currency selection)
- p2pex.application.rates_service (filters feed entries)
- p2pex.application.state_manager (filters persisted codes)

Files that this module USES:
- None (pure utility functions)
"""
import re
from typing import Optional

_CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")
# 123456789:AAHx... (numeric bot id, colon, 35-char secret)
_BOT_TOKEN = re.compile(r"^\d{8,10}:[A-Za-z0-9_-]{35}$")
_USERNAME = re.compile(r"^[A-Za-z0-9_]{5,32}$")


def validate_currency_code(code: str) -> bool:
    """
    Validate a three-letter uppercase currency code.

    Args:
        code: Code to validate, e.g. 'RUB'

    Returns:
        True if valid, False otherwise
    """
    return isinstance(code, str) and _CURRENCY_CODE.match(code) is not None


def normalize_currency_code(code: Optional[str]) -> Optional[str]:
    """
    Normalize operator-typed currency input ('  thb ' -> 'THB').

    Returns:
        The uppercase code, or None if it is not a valid code after cleanup
    """
    if not code:
        return None
    candidate = str(code).strip().upper()
    return candidate if validate_currency_code(candidate) else None


def validate_bot_token(token: str) -> bool:
    """True if the token looks like a Telegram bot token."""
    return bool(token) and _BOT_TOKEN.match(token) is not None


def validate_username(username: str) -> bool:
    """True for a Telegram username, with or without the leading '@'."""
    if not username:
        return False
    return _USERNAME.match(username.lstrip("@")) is not None
