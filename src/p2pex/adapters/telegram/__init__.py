# src/p2pex/adapters/telegram/__init__.py
"""
Telegram Adapters - Bot Interface

This package contains Telegram bot adapters:
- Bot application builder
- Command handlers
- Scheduled jobs
"""

from p2pex.adapters.telegram.bot import build_application
from p2pex.adapters.telegram.handlers import build_handlers, make_warning_notifier
from p2pex.adapters.telegram.jobs import JobQueueScheduler, load_reference_rates_job

__all__ = [
    "build_application",
    "build_handlers",
    "make_warning_notifier",
    "JobQueueScheduler",
    "load_reference_rates_job",
]
