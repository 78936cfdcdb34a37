# tests/test_handlers.py
"""
Handler Tests - Unit Tests for Operator Commands and Warning Buttons

Handlers run against a real ExchangeEngine (in-memory store, fake
scheduler) with Telegram updates mocked out.

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- p2pex.adapters.telegram.handlers (command and callback handlers)
- p2pex.application.engine (ExchangeEngine)
- unittest.mock (Mock, AsyncMock, patch for Telegram objects)
"""
import asyncio
from unittest.mock import AsyncMock, Mock, patch  # Mocks for Telegram updates

import pytest  # Testing framework for writing and running tests

from p2pex.adapters.persistence.file_store import MemoryConfigStore
from p2pex.adapters.telegram import handlers
from p2pex.adapters.telegram.jobs import ENGINE_KEY
from p2pex.application.engine import ExchangeEngine
from p2pex.application.state_manager import KEY_PRO_MODE, KEY_SPREADS, StateManager
from p2pex.domain.models import CalcMode, PairSelection
from p2pex.shared.language import LANG_ENGLISH, set_language

REFERENCES = {"RUB": 95.5, "THB": 35.2, "USD": 1.0}


@pytest.fixture(autouse=True)
def english():
    set_language(LANG_ENGLISH)


def _engine(scheduler, initial=None):
    engine = ExchangeEngine(StateManager(MemoryConfigStore(initial)), scheduler)
    engine.apply_reference_rates(REFERENCES)
    return engine


def _update(username="operator", text=None, chat_id=42):
    update = Mock()
    update.effective_user.username = username
    update.effective_chat.id = chat_id
    update.message.text = text
    update.message.reply_text = AsyncMock()
    return update


def _context(engine, args=None):
    context = Mock()
    context.args = args or []
    context.bot_data = {ENGINE_KEY: engine}
    return context


def _replies(update):
    return [c.args[0] for c in update.message.reply_text.call_args_list]


class TestOperatorGuard:
    def test_other_users_rejected(self, scheduler):
        engine = _engine(scheduler)
        update = _update(username="stranger")
        with patch.object(handlers.settings, "operator_username", "operator"):
            asyncio.run(handlers.give(update, _context(engine, ["500"])))
        assert _replies(update) == ["⚠️ This bot is available to the operator only."]
        assert engine.amounts.give == 10000.0

    def test_operator_chat_remembered(self, scheduler):
        engine = _engine(scheduler)
        context = _context(engine)
        with patch.object(handlers.settings, "operator_username", "Operator"):
            asyncio.run(handlers.start(_update(username="@operator"), context))
        assert context.bot_data[handlers.CHAT_ID_KEY] == 42


class TestCommands:
    def test_give_updates_card(self, scheduler):
        engine = _engine(scheduler)
        update = _update()
        asyncio.run(handlers.give(update, _context(engine, ["5", "000"])))
        assert engine.amounts.give == 5000.0
        assert "Give: 5 000 RUB" in _replies(update)[0]

    def test_plain_text_is_give(self, scheduler):
        engine = _engine(scheduler)
        asyncio.run(handlers.any_message(_update(text="955"), _context(engine)))
        assert engine.amounts.settlement == pytest.approx(10.0)

    def test_usage_without_argument(self, scheduler):
        update = _update()
        asyncio.run(handlers.usdt(update, _context(_engine(scheduler))))
        assert _replies(update) == ["Usage: /usdt <amount>"]

    def test_rate_read_only_in_auto_mode(self, scheduler):
        engine = _engine(scheduler, {KEY_PRO_MODE: "true"})
        update = _update()
        asyncio.run(handlers.buy(update, _context(engine, ["120"])))
        assert "Rates are automatic" in _replies(update)[0]
        assert engine.rates.buy_rate == 95.5

    def test_mode_and_rate(self, scheduler):
        engine = _engine(scheduler)
        asyncio.run(handlers.mode(_update(), _context(engine, ["exact"])))
        assert engine.mode is CalcMode.EXPLICIT
        asyncio.run(handlers.sell(_update(), _context(engine, ["35,9"])))
        assert engine.rates.sell_rate == 35.9

    def test_bad_mode_argument(self, scheduler):
        update = _update()
        asyncio.run(handlers.mode(update, _context(_engine(scheduler), ["fast"])))
        assert _replies(update) == ["Usage: /mode approx|exact"]

    def test_currency_selection(self, scheduler):
        engine = _engine(scheduler)
        asyncio.run(handlers.to_currency(_update(), _context(engine, ["usd"])))
        assert engine.pair == PairSelection("RUB", "USD")
        update = _update()
        asyncio.run(handlers.from_currency(update, _context(engine, ["roubles"])))
        assert _replies(update) == ["Unknown currency code: roubles"]

    def test_swap(self, scheduler):
        engine = _engine(scheduler)
        asyncio.run(handlers.swap(_update(), _context(engine)))
        assert engine.pair == PairSelection("THB", "RUB")

    def test_pro_switch(self, scheduler):
        engine = _engine(scheduler)
        update = _update()
        asyncio.run(handlers.pro(update, _context(engine, ["on"])))
        assert engine.advanced is True
        assert _replies(update)[0] == "Pro mode enabled"

    def test_currencies_list(self, scheduler):
        update = _update()
        asyncio.run(handlers.currencies(update, _context(_engine(scheduler))))
        assert _replies(update)[0].startswith("Currencies:\n🇺🇸 USD ✓")


class TestWarningButtons:
    def _flagged(self, scheduler):
        engine = _engine(scheduler, {
            KEY_PRO_MODE: "true",
            KEY_SPREADS: '{"RUB": {"buy": "6", "sell": "0"}}',
        })
        engine.apply_reference_rates(REFERENCES)
        scheduler.fire()
        return engine

    def _query_update(self, data):
        update = _update()
        update.callback_query.data = data
        update.callback_query.answer = AsyncMock()
        update.callback_query.edit_message_reply_markup = AsyncMock()
        update.callback_query.edit_message_text = AsyncMock()
        update.callback_query.message.reply_text = AsyncMock()
        return update

    def test_ok_needs_currency_confirmation(self, scheduler):
        engine = self._flagged(scheduler)
        update = self._query_update(handlers.CB_OK)
        asyncio.run(handlers.warning_callback(update, _context(engine)))
        update.callback_query.answer.assert_called_once_with("Confirm the currency first", show_alert=True)
        assert engine.gate.acknowledged is False

    def test_confirm_then_ok(self, scheduler):
        engine = self._flagged(scheduler)
        context = _context(engine)
        asyncio.run(handlers.warning_callback(self._query_update(handlers.CB_CURRENCY), context))
        assert engine.gate.currency_confirmed is True

        update = self._query_update(handlers.CB_OK)
        asyncio.run(handlers.warning_callback(update, context))
        assert engine.gate.acknowledged is True
        update.callback_query.edit_message_text.assert_called_once_with("Warning dismissed")

    def test_notifier_schedules_send(self, scheduler):
        engine = self._flagged(scheduler)
        application = Mock()
        application.bot_data = {ENGINE_KEY: engine, handlers.CHAT_ID_KEY: 42}
        application.create_task = Mock(side_effect=lambda coro: coro.close())
        handlers.make_warning_notifier(application)(engine.snapshot())
        application.create_task.assert_called_once()

    def test_notifier_without_chat(self, scheduler):
        engine = self._flagged(scheduler)
        application = Mock()
        application.bot_data = {ENGINE_KEY: engine}
        handlers.make_warning_notifier(application)(engine.snapshot())
        application.create_task.assert_not_called()

    def test_send_warning_message(self, scheduler):
        engine = self._flagged(scheduler)
        application = Mock()
        application.bot_data = {ENGINE_KEY: engine}
        application.bot.send_message = AsyncMock()
        asyncio.run(handlers.send_warning(application, 42, 5.0))
        kwargs = application.bot.send_message.call_args.kwargs
        assert kwargs["chat_id"] == 42
        assert kwargs["text"] == "⚠️ Spread above 5%, check the selected currency"
