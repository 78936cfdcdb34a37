# src/p2pex/adapters/telegram/handlers.py
"""
Telegram Handlers - Operator Commands and Warning Buttons

This module maps the operator's chat commands onto ExchangeEngine events and
replies with the recalculated calculator card. The spread warning is sent as
a separate message with inline buttons for the two confirmations and OK.

    /give, /receive, /usdt <amount>   edit an amount (plain text = give)
    /buy, /sell <rate>                type a quote rate
    /from, /to <CODE>, /swap          choose or swap the pair
    /mode approx|exact, /pro on|off   calculation and pro modes
    /currencies, /lang, /start

Only the configured operator may use the bot.

Files that USE this module:
- p2pex.app (build_handlers, make_warning_notifier)
- tests.test_handlers (unit tests)

Files that this module USES:
- p2pex.adapters.formatting.formatter (card, warning and currency list text)
- p2pex.adapters.telegram.jobs (ENGINE_KEY)
- p2pex.application.engine (ExchangeEngine)
- p2pex.domain.models (CalcMode, Side, EngineSnapshot)
- p2pex.shared.language (translate, set_language)
- p2pex.shared.validators (normalize_currency_code)
- p2pex.config (settings for operator username and warning threshold)
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.error import TelegramError
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from p2pex.adapters.formatting.formatter import (
    format_card,
    format_checkbox,
    format_currency_list,
    format_warning,
)
from p2pex.adapters.telegram.jobs import ENGINE_KEY
from p2pex.application.engine import ExchangeEngine
from p2pex.domain.models import CalcMode, EngineSnapshot, Side
from p2pex.shared.language import LANG_ENGLISH, LANG_RUSSIAN, set_language, translate
from p2pex.shared.validators import normalize_currency_code

from p2pex.config import settings

logger = logging.getLogger(__name__)

CHAT_ID_KEY = "operator_chat_id"  # bot_data key: where warnings are sent

CB_CURRENCY = "warn_currency"
CB_REMEMBER = "warn_remember"
CB_OK = "warn_ok"

MODE_ARGS = {"approx": CalcMode.DERIVED, "exact": CalcMode.EXPLICIT}
SWITCH_ARGS = {"on": True, "off": False}


def _engine(context: ContextTypes.DEFAULT_TYPE) -> ExchangeEngine:
    return context.bot_data[ENGINE_KEY]


def _is_operator(update: Update) -> bool:
    """
    Check if the user sending the update is the operator.

    Returns:
        True if OPERATOR_USERNAME is unset or matches the sender's username
    """
    operator = settings.operator_username
    if not operator:
        return True
    user = update.effective_user
    uname = (user.username or "").lstrip("@") if user else ""
    return uname.lower() == operator.lstrip("@").lower()


async def _guard(update: Update, context: ContextTypes.DEFAULT_TYPE) -> bool:
    """Reject non-operators and remember the operator's chat for warnings."""
    if not _is_operator(update):
        if update.message:
            await update.message.reply_text(translate("operator_only"))
        return False
    if update.effective_chat:
        context.bot_data[CHAT_ID_KEY] = update.effective_chat.id
    return True


async def _reply_card(update: Update, snap: EngineSnapshot) -> None:
    await update.message.reply_text(format_card(snap))


def _arg_text(context: ContextTypes.DEFAULT_TYPE) -> str:
    return " ".join(context.args or []).strip()


def warning_keyboard(engine: ExchangeEngine) -> InlineKeyboardMarkup:
    """Inline keyboard for the spread warning, reflecting the checkbox state."""
    return InlineKeyboardMarkup([
        [InlineKeyboardButton(format_checkbox("confirm_currency", engine.gate.currency_confirmed), callback_data=CB_CURRENCY)],
        [InlineKeyboardButton(format_checkbox("confirm_remember", engine.gate.remember_confirmed), callback_data=CB_REMEMBER)],
        [InlineKeyboardButton(translate("confirm_ok"), callback_data=CB_OK)],
    ])


# --- /start: card and help ---
async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _guard(update, context):
        return
    await update.message.reply_text(f"{format_card(_engine(context).snapshot())}\n\n{translate('help')}")


# --- amounts ---
async def _amount_command(update: Update, context: ContextTypes.DEFAULT_TYPE, command: str) -> None:
    if not await _guard(update, context):
        return
    text = _arg_text(context)
    if not text:
        await update.message.reply_text(translate("usage_amount", command=command))
        return
    engine = _engine(context)
    edits = {
        "give": engine.edit_give,
        "receive": engine.edit_receive,
        "usdt": engine.edit_settlement,
    }
    await _reply_card(update, edits[command](text))


async def give(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _amount_command(update, context, "give")


async def receive(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _amount_command(update, context, "receive")


async def usdt(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _amount_command(update, context, "usdt")


async def any_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Plain text is taken as a new give amount."""
    if not await _guard(update, context):
        return
    text = (update.message.text or "").strip()
    if not text:
        return
    await _reply_card(update, _engine(context).edit_give(text))


# --- rates ---
async def _rate_command(update: Update, context: ContextTypes.DEFAULT_TYPE, side: Side) -> None:
    if not await _guard(update, context):
        return
    command = side.value
    text = _arg_text(context)
    if not text:
        await update.message.reply_text(translate("usage_rate", command=command))
        return
    engine = _engine(context)
    if not engine.rates_editable:
        await update.message.reply_text(translate("rate_read_only"))
        return
    await _reply_card(update, engine.edit_rate(side, text))


async def buy(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _rate_command(update, context, Side.BUY)


async def sell(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _rate_command(update, context, Side.SELL)


# --- pair ---
async def swap(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _guard(update, context):
        return
    await _reply_card(update, _engine(context).swap_pair())


async def _currency_command(update: Update, context: ContextTypes.DEFAULT_TYPE, side: Side, command: str) -> None:
    if not await _guard(update, context):
        return
    text = _arg_text(context)
    if not text:
        await update.message.reply_text(translate("usage_currency", command=command))
        return
    code = normalize_currency_code(text)
    if code is None:
        await update.message.reply_text(translate("unknown_currency", code=text))
        return
    await _reply_card(update, _engine(context).select_currency(side, code))


async def from_currency(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _currency_command(update, context, Side.BUY, "from")


async def to_currency(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await _currency_command(update, context, Side.SELL, "to")


async def currencies(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _guard(update, context):
        return
    engine = _engine(context)
    await update.message.reply_text(format_currency_list(engine.currency_choices(), engine.configured))


# --- modes ---
async def mode(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _guard(update, context):
        return
    selected = MODE_ARGS.get(_arg_text(context).lower())
    if selected is None:
        await update.message.reply_text(translate("usage_mode"))
        return
    await _reply_card(update, _engine(context).set_mode(selected))


async def pro(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _guard(update, context):
        return
    flag = SWITCH_ARGS.get(_arg_text(context).lower())
    if flag is None:
        await update.message.reply_text(translate("usage_pro"))
        return
    snap = _engine(context).set_advanced(flag)
    await update.message.reply_text(translate("pro_on" if flag else "pro_off"))
    await _reply_card(update, snap)


# --- /lang: language selection ---
async def language_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    if not await _guard(update, context):
        return
    keyboard = [[
        InlineKeyboardButton("English", callback_data="lang_en"),
        InlineKeyboardButton("Русский", callback_data="lang_ru"),
    ]]
    await update.message.reply_text(translate("usage_lang"), reply_markup=InlineKeyboardMarkup(keyboard))


async def language_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    query = update.callback_query
    await query.answer()
    if not _is_operator(update):
        await query.edit_message_text(translate("operator_only"))
        return
    lang = LANG_RUSSIAN if query.data == "lang_ru" else LANG_ENGLISH
    if set_language(lang):
        await query.edit_message_text(f"✅ {translate('language_set')}")


# --- spread warning ---
async def warning_callback(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle the spread warning buttons.

    The two checkboxes toggle in place; OK dismisses the warning only once the
    currency has been confirmed.
    """
    query = update.callback_query
    if not _is_operator(update):
        await query.answer(translate("operator_only"), show_alert=True)
        return
    engine = _engine(context)

    if query.data == CB_CURRENCY:
        engine.set_warning_confirmations(currency_confirmed=not engine.gate.currency_confirmed)
        await query.answer()
        await query.edit_message_reply_markup(reply_markup=warning_keyboard(engine))
        return
    if query.data == CB_REMEMBER:
        engine.set_warning_confirmations(remember_spread=not engine.gate.remember_confirmed)
        await query.answer()
        await query.edit_message_reply_markup(reply_markup=warning_keyboard(engine))
        return

    if not engine.gate.flagged:
        # Rates returned to range before OK was pressed
        await query.answer()
        await query.edit_message_text(translate("warning_dismissed"))
        return
    if not engine.acknowledge_warning(
        remember_spread=engine.gate.remember_confirmed,
        currency_confirmed=engine.gate.currency_confirmed,
    ):
        await query.answer(translate("confirm_required"), show_alert=True)
        return
    await query.answer()
    await query.edit_message_text(translate("warning_dismissed"))
    await query.message.reply_text(format_card(engine.snapshot()))


async def send_warning(application: Application, chat_id: int, threshold_pct: float) -> None:
    """Send the spread warning with its confirmation buttons."""
    engine: ExchangeEngine = application.bot_data[ENGINE_KEY]
    try:
        await application.bot.send_message(
            chat_id=chat_id,
            text=format_warning(threshold_pct),
            reply_markup=warning_keyboard(engine),
        )
    except TelegramError as e:
        logger.error("Failed to send spread warning: %s", e)


def make_warning_notifier(application: Application) -> Callable[[EngineSnapshot], None]:
    """
    Build the engine's on_warning callback.

    The engine calls it synchronously from the debounce job; sending is
    scheduled as a task on the application's loop.
    """
    def notify(snap: EngineSnapshot) -> None:
        chat_id: Optional[int] = application.bot_data.get(CHAT_ID_KEY)
        if chat_id is None:
            logger.warning("Spread warning raised but no operator chat is known yet")
            return
        logger.info("Sending spread warning for %s/%s", snap.pair.source, snap.pair.target)
        application.create_task(send_warning(application, chat_id, settings.spread_warning_pct))
    return notify


def build_handlers():
    """
    Build and return list of Telegram bot handlers.

    Returns:
        List of handler instances for registration with bot
    """
    return [
        CommandHandler("start", start),
        CommandHandler("give", give),
        CommandHandler("receive", receive),
        CommandHandler("usdt", usdt),
        CommandHandler("buy", buy),
        CommandHandler("sell", sell),
        CommandHandler("swap", swap),
        CommandHandler("from", from_currency),
        CommandHandler("to", to_currency),
        CommandHandler("currencies", currencies),
        CommandHandler("mode", mode),
        CommandHandler("pro", pro),
        CommandHandler("lang", language_cmd),
        CallbackQueryHandler(language_callback, pattern="^lang_"),
        CallbackQueryHandler(warning_callback, pattern="^warn_"),
        MessageHandler(filters.TEXT & ~filters.COMMAND, any_message),
    ]
