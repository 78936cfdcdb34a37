# src/p2pex/app.py
"""
Application Entry Point - Bot Initialization and Startup

This module serves as the composition root for the p2pex Telegram bot.
It wires the config store, preferences, engine, feed provider and bot
application together and starts polling.

Files that USE this module:
- p2pex console script / python -m p2pex

Files that this module USES:
- p2pex.shared.logging_conf (setup_logging for logging configuration)
- p2pex.config (settings for configuration management)
- p2pex.adapters.persistence.file_store (FileConfigStore)
- p2pex.adapters.providers.open_er_api (OpenErApiProvider)
- p2pex.adapters.telegram (application, scheduler, handlers, feed job)
- p2pex.application (ExchangeEngine, StateManager, RatesService)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations for forward references

import atexit  # Register cleanup functions to run when program exits
import logging  # Standard library for logging messages and errors
import os  # Operating system interface for environment variables and process management
import sys  # System-specific parameters and functions for exit codes
from functools import partial  # Create partial functions with preset arguments
from pathlib import Path  # Object-oriented filesystem paths

from telegram.error import Conflict, NetworkError, TimedOut  # Telegram API error exceptions

from p2pex.shared.logging_conf import setup_logging  # Configure logging with file rotation
from p2pex.adapters.persistence.file_store import FileConfigStore  # JSON preference store
from p2pex.adapters.providers.open_er_api import OpenErApiProvider  # Reference-rate feed client
from p2pex.adapters.telegram.bot import build_application  # Telegram application factory
from p2pex.adapters.telegram.handlers import make_warning_notifier  # Spread warning sender
from p2pex.adapters.telegram.jobs import (
    ENGINE_KEY,  # bot_data key for the engine
    FEED_JOB_NAME,  # Name of the start-up feed job
    JobQueueScheduler,  # Debounce timers on the job queue
    load_reference_rates_job,  # Start-up reference feed load
)
from p2pex.application.engine import ExchangeEngine  # Rate and amount reconciliation
from p2pex.application.rates_service import RatesService  # Reference table loading
from p2pex.application.state_manager import StateManager  # Persisted preferences


def _get_pid_file() -> Path:
    """Get PID file path from P2PEX_PID_FILE or next to the state file."""
    pid_file = os.environ.get("P2PEX_PID_FILE")
    if pid_file:
        return Path(pid_file)
    from p2pex.config import settings
    return Path(settings.state_file).parent / "bot.pid"


def _check_existing_instance() -> None:
    """
    Check if another bot instance is already running.

    Raises RuntimeError if PID file exists and process is still running.
    """
    pid_file = _get_pid_file()
    if not pid_file.exists():
        return
    try:
        old_pid = int(pid_file.read_text().strip())
    except (ValueError, OSError):
        pid_file.unlink(missing_ok=True)
        return
    try:
        os.kill(old_pid, 0)  # Signal 0 doesn't kill, just checks if process exists
    except ProcessLookupError:
        pid_file.unlink(missing_ok=True)
        return
    raise RuntimeError(
        f"Another bot instance is already running (PID: {old_pid}).\n"
        f"Please stop it first with: kill {old_pid}"
    )


def _create_pid_file() -> None:
    pid_file = _get_pid_file()
    pid_file.parent.mkdir(parents=True, exist_ok=True)
    pid_file.write_text(str(os.getpid()))


def _remove_pid_file() -> None:
    pid_file = _get_pid_file()
    try:
        pid_file.unlink(missing_ok=True)
    except OSError as e:
        logging.getLogger(__name__).warning("Could not remove PID file %s: %s", pid_file, e)


def main() -> None:
    """
    Initialize and start the Telegram bot application.

    This function:
    1. Sets up logging and validates configuration
    2. Loads preferences and creates the exchange engine
    3. Creates the Telegram application and registers handlers
    4. Schedules the one-shot reference feed load
    5. Starts the bot polling loop
    """
    from p2pex.config import settings

    setup_logging(
        level=logging.INFO,
        log_file=settings.log_file,
        log_dir=settings.log_dir,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
        log_stdout=settings.log_stdout,
    )
    logger = logging.getLogger(__name__)
    logger.info("Working directory: %s", os.getcwd())

    if not settings.bot_token:
        raise RuntimeError("BOT_TOKEN missing")
    if not settings.operator_username:
        logger.warning("OPERATOR_USERNAME not set: any Telegram user can operate the bot")

    try:
        _check_existing_instance()
        _create_pid_file()
        atexit.register(_remove_pid_file)
        logger.info("Bot instance lock acquired (PID: %d)", os.getpid())
    except RuntimeError as e:
        logger.error(str(e))
        sys.exit(1)

    app = build_application(settings.bot_token)

    prefs = StateManager(FileConfigStore(settings.state_file))
    engine = ExchangeEngine(
        prefs,
        JobQueueScheduler(app.job_queue),
        threshold_pct=settings.spread_warning_pct,
        delay_seconds=settings.spread_warning_delay_seconds,
        initial_give=settings.default_give_amount,
        on_warning=make_warning_notifier(app),
    )
    app.bot_data[ENGINE_KEY] = engine

    svc = RatesService(OpenErApiProvider())
    app.job_queue.run_once(
        callback=partial(load_reference_rates_job, svc=svc),
        when=0,  # as soon as the loop starts
        name=FEED_JOB_NAME,
    )

    logger.info(
        "Starting bot polling… feed=%s warning=%.2f%% after %.1fs",
        settings.reference_feed_url,
        settings.spread_warning_pct,
        settings.spread_warning_delay_seconds,
    )

    try:
        app.run_polling(allowed_updates=None, drop_pending_updates=False)
    except Conflict as e:
        logger.error("Telegram Conflict error: %s. Another instance is polling with this token.", e)
        raise
    except (TimedOut, NetworkError) as e:
        logger.error(
            "Network error during bot operation: %s (type: %s)", e, type(e).__name__, exc_info=True,
        )
        raise
    except KeyboardInterrupt:
        logger.info("Bot stopped by user (KeyboardInterrupt)")
        raise
    finally:
        engine.close()
        _remove_pid_file()


if __name__ == "__main__":
    main()
