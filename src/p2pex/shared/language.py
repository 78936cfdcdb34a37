# src/p2pex/shared/language.py
"""
Language Management - Multi-language Support

This module provides the message catalog for the operator chat in English and
Russian, the current-language preference, and the translate() helper.

Files that USE this module:
- p2pex.adapters.telegram.handlers (uses translate, set_language)
- p2pex.adapters.formatting.formatter (uses translate for message formatting)

Files that this module USES:
- p2pex.config (settings.default_language for the initial language)
"""
import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)

# Language constants
LANG_ENGLISH = "en"
LANG_RUSSIAN = "ru"

SUPPORTED_LANGUAGES = (LANG_ENGLISH, LANG_RUSSIAN)

# Translation dictionaries
TRANSLATIONS: Dict[str, Dict[str, str]] = {
    LANG_ENGLISH: {
        "title": "P2P Exchanger",
        "pair_line": "{source_flag} {source} ⇄ {target_flag} {target}",
        "mode_approx": "Approximate",
        "mode_exact": "Exact",
        "mode_line": "Mode: {mode}",
        "auto_badge": "Auto",
        "pro_badge": "Pro",
        "buy_line": "Buy {asset}: {rate} {badge}",
        "sell_line": "Sell {asset}: {rate} {badge}",
        "info_line": "   CB Rate: {reference} · Spread: {spread}",
        "give_line": "Give: {amount} {currency}",
        "receive_line": "Receive: {amount} {currency}",
        "settlement_line": "Equivalent: {amount} {asset}",
        "empty_value": "—",
        "spread_warning": "Spread above {threshold}%, check the selected currency",
        "confirm_currency": "Currency is correct",
        "confirm_remember": "Remember spread",
        "confirm_ok": "OK",
        "confirm_required": "Confirm the currency first",
        "warning_dismissed": "Warning dismissed",
        "rate_read_only": "Rates are automatic in Approximate mode. Switch to /mode exact to type a rate.",
        "unknown_currency": "Unknown currency code: {code}",
        "usage_amount": "Usage: /{command} <amount>",
        "usage_rate": "Usage: /{command} <rate>",
        "usage_currency": "Usage: /{command} <CODE>",
        "usage_mode": "Usage: /mode approx|exact",
        "usage_pro": "Usage: /pro on|off",
        "usage_lang": "Usage: /lang en|ru",
        "language_set": "Language: English",
        "pro_on": "Pro mode enabled",
        "pro_off": "Pro mode disabled",
        "operator_only": "⚠️ This bot is available to the operator only.",
        "currencies": "Currencies:\n{codes}",
        "help": (
            "/give, /receive, /usdt <amount> — edit an amount\n"
            "/buy, /sell <rate> — type a rate\n"
            "/from, /to <CODE> — choose currencies, /swap — swap them\n"
            "/mode approx|exact, /pro on|off, /currencies, /lang en|ru"
        ),
    },
    LANG_RUSSIAN: {
        "title": "P2P Exchanger",
        "pair_line": "{source_flag} {source} ⇄ {target_flag} {target}",
        "mode_approx": "Приблизительно",
        "mode_exact": "Точно",
        "mode_line": "Режим: {mode}",
        "auto_badge": "Авто",
        "pro_badge": "Pro",
        "buy_line": "Покупка {asset}: {rate} {badge}",
        "sell_line": "Продажа {asset}: {rate} {badge}",
        "info_line": "   Курс ЦБ: {reference} · Спред: {spread}",
        "give_line": "Отдаю: {amount} {currency}",
        "receive_line": "Получаю: {amount} {currency}",
        "settlement_line": "Эквивалент: {amount} {asset}",
        "empty_value": "—",
        "spread_warning": "Spread больше {threshold}% проверьте выбранную валюту",
        "confirm_currency": "Валюта верная",
        "confirm_remember": "Запомнить Spread",
        "confirm_ok": "OK",
        "confirm_required": "Сначала подтвердите валюту",
        "warning_dismissed": "Предупреждение закрыто",
        "rate_read_only": "В приблизительном режиме курсы считаются автоматически. Переключитесь: /mode exact",
        "unknown_currency": "Неизвестный код валюты: {code}",
        "usage_amount": "Использование: /{command} <сумма>",
        "usage_rate": "Использование: /{command} <курс>",
        "usage_currency": "Использование: /{command} <КОД>",
        "usage_mode": "Использование: /mode approx|exact",
        "usage_pro": "Использование: /pro on|off",
        "usage_lang": "Использование: /lang en|ru",
        "language_set": "Язык: русский",
        "pro_on": "Pro режим включён",
        "pro_off": "Pro режим выключен",
        "operator_only": "⚠️ Бот доступен только оператору.",
        "currencies": "Валюты:\n{codes}",
        "help": (
            "/give, /receive, /usdt <сумма> — изменить сумму\n"
            "/buy, /sell <курс> — ввести курс\n"
            "/from, /to <КОД> — выбрать валюты, /swap — поменять местами\n"
            "/mode approx|exact, /pro on|off, /currencies, /lang en|ru"
        ),
    },
}


class LanguageManager:
    """Holds the current chat language."""

    def __init__(self, default_language: str = LANG_ENGLISH):
        """
        Initialize language manager.

        Args:
            default_language: Language code to start with ('en' or 'ru')
        """
        if default_language not in SUPPORTED_LANGUAGES:
            logger.warning("Invalid default language %s, using English", default_language)
            default_language = LANG_ENGLISH
        self._current_language: str = default_language

    def get_language(self) -> str:
        """
        Get current language.

        Returns:
            Current language code ('en' or 'ru')
        """
        return self._current_language

    def set_language(self, lang: str) -> bool:
        """
        Set language preference.

        Args:
            lang: Language code ('en' or 'ru')

        Returns:
            True if language was set successfully, False if invalid
        """
        if lang not in SUPPORTED_LANGUAGES:
            logger.warning("Invalid language code: %s", lang)
            return False

        old_lang = self._current_language
        self._current_language = lang
        logger.info("Language changed from %s to %s", old_lang, lang)
        return True

    def translate(self, key: str, **kwargs: Any) -> str:
        """
        Translate a message key with optional parameters.

        Args:
            key: Translation key
            **kwargs: Parameters to format into translation

        Returns:
            Translated and formatted string, or key if translation not found
        """
        lang_dict = TRANSLATIONS.get(self._current_language, TRANSLATIONS[LANG_ENGLISH])
        template = lang_dict.get(key, key)
        try:
            return template.format(**kwargs)
        except KeyError as e:
            logger.warning("Missing parameter in translation '%s': %s", key, e)
            return template


def _default_language() -> str:
    from p2pex.config import settings
    return settings.default_language


# Global language manager instance
language_manager = LanguageManager(_default_language())


def get_language() -> str:
    """Get current language."""
    return language_manager.get_language()


def set_language(lang: str) -> bool:
    """Set language."""
    return language_manager.set_language(lang)


def translate(key: str, **kwargs: Any) -> str:
    """Translate a message key."""
    return language_manager.translate(key, **kwargs)
