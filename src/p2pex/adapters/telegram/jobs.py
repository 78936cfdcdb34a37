# src/p2pex/adapters/telegram/jobs.py
"""
Telegram Jobs - Scheduled Tasks on the Bot's JobQueue

Two kinds of jobs run on the python-telegram-bot JobQueue, which shares the
event loop with the command handlers so engine events never interleave:
- the spread warning debounce timer (JobQueueScheduler implements the
  engine's Scheduler interface with one-shot jobs)
- the start-up reference feed load (a single run_once job)

Files that USE this module:
- p2pex.app (creates the scheduler, registers the feed job)
- tests.test_telegram_jobs (unit tests)

Files that this module USES:
- p2pex.application.rates_service (RatesService for the reference table)
- p2pex.application.timers (TimerHandle interface)
"""
from __future__ import annotations  # Enable postponed evaluation of annotations

import logging  # Standard library for logging messages
from typing import Callable  # Type hints for callbacks

from telegram.ext import ContextTypes, Job, JobQueue  # Telegram job queue types

from p2pex.application.rates_service import RatesService  # Reference table loading
from p2pex.application.timers import TimerHandle  # Cancellable timer interface

logger = logging.getLogger(__name__)

ENGINE_KEY = "engine"  # bot_data key holding the ExchangeEngine
WARNING_JOB_NAME = "spread_warning"
FEED_JOB_NAME = "reference_feed"


class JobHandle:
    """TimerHandle over a scheduled Job."""

    def __init__(self, job: Job):
        self.job = job

    def cancel(self) -> None:
        self.job.schedule_removal()


async def _run_timer_callback(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Job callback: run the engine callback stored in the job's data."""
    callback = context.job.data
    callback()


class JobQueueScheduler:
    """
    Scheduler backed by the bot's JobQueue.

    The debounce callback is synchronous; it runs inside a one-shot job so it
    executes on the bot's event loop between updates.
    """

    def __init__(self, job_queue: JobQueue):
        """
        Args:
            job_queue: Application job queue (requires python-telegram-bot[job-queue])
        """
        self.job_queue = job_queue

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
        job = self.job_queue.run_once(
            callback=_run_timer_callback,
            when=delay_seconds,
            data=callback,
            name=WARNING_JOB_NAME,
        )
        logger.debug("Spread warning job scheduled in %.2fs", delay_seconds)
        return JobHandle(job)


async def load_reference_rates_job(context: ContextTypes.DEFAULT_TYPE, svc: RatesService) -> None:
    """
    One-shot start-up job: fetch the reference table and hand it to the engine.

    A failed fetch yields an empty table; it is logged and the operator is not
    notified. Derived rates wait for the next successful load.

    Args:
        context: Telegram job context (engine lives in bot_data)
        svc: RatesService wrapping the feed provider
    """
    engine = context.bot_data.get(ENGINE_KEY)
    if engine is None:
        logger.error("Reference feed job ran before the engine was registered")
        return

    table = svc.reference_table()
    if not table:
        logger.warning("No reference rates loaded; rates stay as they are")
        return

    snap = engine.apply_reference_rates(table)
    logger.info(
        "Reference rates applied: %s/%s buy=%s sell=%s",
        snap.pair.source, snap.pair.target, snap.buy_rate_text, snap.sell_rate_text,
    )
