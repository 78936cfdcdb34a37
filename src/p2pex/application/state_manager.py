# src/p2pex/application/state_manager.py
"""
State Manager - Persisted Operator Preferences

This module gives the engine typed access to everything that survives a
restart: the active pair, calculation mode, pro mode flag, per-currency
spreads, the configured-currency set and the last committed rates. Values
live in an injected ConfigStore as text/JSON under fixed keys; a missing or
unreadable key falls back to its default.

Writes are fire-and-forget: a failing store is logged and the in-memory
engine state carries on.

Files that USE this module:
- p2pex.application.engine (ExchangeEngine loads and saves preferences)
- tests.test_state_manager (unit tests)

Files that this module USES:
- p2pex.adapters.persistence.base (ConfigStore interface)
- p2pex.domain.models (PairSelection, CalcMode, SpreadEntry, defaults)
- p2pex.domain.errors (StoreError)
- p2pex.shared.numbers (parse_amount for persisted decimals)
- p2pex.shared.validators (validate_currency_code)
"""
from __future__ import annotations

import json
import logging
from typing import Dict, List, Mapping, Optional, Tuple

from p2pex.adapters.persistence.base import ConfigStore
from p2pex.domain.errors import StoreError
from p2pex.domain.models import (
    DEFAULT_CONFIGURED,
    DEFAULT_SOURCE,
    DEFAULT_TARGET,
    CalcMode,
    CurrencyCode,
    PairSelection,
    SpreadEntry,
)
from p2pex.shared.numbers import parse_amount
from p2pex.shared.validators import validate_currency_code

logger = logging.getLogger(__name__)

KEY_SOURCE = "p2p_source_curr"
KEY_TARGET = "p2p_target_curr"
KEY_CALC_MODE = "p2p_calc_mode"
KEY_PRO_MODE = "p2p_pro_mode"
KEY_SPREADS = "p2p_spreads"
KEY_CONFIGURED = "p2p_configured_currencies"
KEY_LAST_BUY_RATE = "p2p_last_buy_rate"
KEY_LAST_SELL_RATE = "p2p_last_sell_rate"

SPREAD_DECIMALS = 6


def format_spread(pct: float) -> str:
    """Persisted form of a spread percentage: 1.0471204 -> '1.047120'."""
    return f"{pct:.{SPREAD_DECIMALS}f}"


class StateManager:
    """Typed preference access over a ConfigStore."""

    def __init__(self, store: ConfigStore):
        """
        Args:
            store: Key/value store the preferences are read from and written to
        """
        self.store = store

    # --- low-level helpers ---

    def _get(self, key: str) -> Optional[str]:
        try:
            return self.store.get(key)
        except Exception as e:
            logger.error("Failed to read %s from config store: %s", key, e)
            return None

    def _set(self, key: str, value: str) -> None:
        try:
            self.store.set(key, value)
        except StoreError as e:
            logger.error("Failed to persist %s: %s", key, e)

    def _get_json(self, key: str):
        raw = self._get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning("Ignoring unreadable %s value: %s", key, e)
            return None

    # --- pair ---

    def load_pair(self) -> PairSelection:
        source = self._get(KEY_SOURCE)
        target = self._get(KEY_TARGET)
        return PairSelection(
            source=source if validate_currency_code(source) else DEFAULT_SOURCE,
            target=target if validate_currency_code(target) else DEFAULT_TARGET,
        )

    def save_pair(self, pair: PairSelection) -> None:
        self._set(KEY_SOURCE, pair.source)
        self._set(KEY_TARGET, pair.target)

    # --- modes ---

    def load_mode(self) -> CalcMode:
        raw = self._get(KEY_CALC_MODE)
        try:
            return CalcMode(raw)
        except ValueError:
            return CalcMode.DERIVED

    def save_mode(self, mode: CalcMode) -> None:
        self._set(KEY_CALC_MODE, mode.value)

    def load_advanced(self) -> bool:
        return self._get(KEY_PRO_MODE) == "true"

    def save_advanced(self, advanced: bool) -> None:
        self._set(KEY_PRO_MODE, "true" if advanced else "false")

    # --- spreads ---

    def load_spreads(self) -> Dict[CurrencyCode, SpreadEntry]:
        """
        Load per-currency spreads.

        Stored as {"RUB": {"buy": "1.047120", "sell": "0.000000"}, ...};
        entries with a malformed code or shape are skipped.
        """
        data = self._get_json(KEY_SPREADS)
        if not isinstance(data, dict):
            return {}
        spreads: Dict[CurrencyCode, SpreadEntry] = {}
        for code, entry in data.items():
            if not validate_currency_code(code) or not isinstance(entry, dict):
                continue
            spreads[code] = SpreadEntry(
                buy_pct=parse_amount(str(entry.get("buy", "0"))),
                sell_pct=parse_amount(str(entry.get("sell", "0"))),
            )
        return spreads

    def save_spreads(self, spreads: Mapping[CurrencyCode, SpreadEntry]) -> None:
        payload = {
            code: {"buy": format_spread(entry.buy_pct), "sell": format_spread(entry.sell_pct)}
            for code, entry in spreads.items()
        }
        self._set(KEY_SPREADS, json.dumps(payload, sort_keys=True))

    # --- configured currencies ---

    def load_configured(self) -> List[CurrencyCode]:
        data = self._get_json(KEY_CONFIGURED)
        if not isinstance(data, list):
            return list(DEFAULT_CONFIGURED)
        return [code for code in data if validate_currency_code(code)]

    def save_configured(self, codes: List[CurrencyCode]) -> None:
        self._set(KEY_CONFIGURED, json.dumps(list(codes)))

    # --- last committed rates ---

    def load_last_rates(self) -> Tuple[str, str]:
        return self._get(KEY_LAST_BUY_RATE) or "", self._get(KEY_LAST_SELL_RATE) or ""

    def save_last_rates(self, buy_text: str, sell_text: str) -> None:
        self._set(KEY_LAST_BUY_RATE, buy_text)
        self._set(KEY_LAST_SELL_RATE, sell_text)
        logger.debug("Last-good rates saved: buy=%s sell=%s", buy_text, sell_text)
