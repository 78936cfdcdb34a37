# src/p2pex/adapters/telegram/bot.py
"""
Telegram Bot - Application Builder

This module builds the python-telegram-bot Application and registers the
operator handlers.

Files that USE this module:
- p2pex.app (composition root)

Files that this module USES:
- p2pex.adapters.telegram.handlers (build_handlers)
"""

from __future__ import annotations

from telegram.ext import Application

from p2pex.adapters.telegram.handlers import build_handlers


def build_application(bot_token: str) -> Application:
    """
    Build Telegram bot application with the operator handlers registered.

    Args:
        bot_token: Telegram bot token

    Returns:
        Configured Application instance (job queue enabled)
    """
    app = Application.builder().token(bot_token).build()
    for h in build_handlers():
        app.add_handler(h)
    return app
