"""
Upstream Scheduler - Runs the sentinel on a cron cadence plus once at startup.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger

from core.registry import DEFAULT_CRON
from core.sentinel import UpstreamSentinel

DEFAULT_INITIAL_DELAY = 30  # Seconds, lets the store populate before the first check

RECURRING_JOB_ID = 'upstream-check'
INITIAL_JOB_ID = 'upstream-initial-check'


class UpstreamScheduler:
    """Owns when upstream check cycles run."""

    def __init__(
        self,
        sentinel: UpstreamSentinel,
        cron: str = DEFAULT_CRON,
        initial_delay: float = DEFAULT_INITIAL_DELAY,
        scheduler: Optional[BaseScheduler] = None
    ):
        """
        Args:
            sentinel: Sentinel whose run_cycle() is triggered
            cron: Crontab expression for the recurring check
            initial_delay: Seconds before the one-off startup check
            scheduler: APScheduler instance, a BackgroundScheduler when None
        """
        self.sentinel = sentinel
        self.cron = cron or DEFAULT_CRON
        self.initial_delay = initial_delay
        self.scheduler = scheduler if scheduler is not None else BackgroundScheduler()
        self.logger = logging.getLogger('UpstreamScheduler')
        self._scheduled = False

    @property
    def scheduled(self) -> bool:
        return self._scheduled

    def start(self) -> None:
        """
        Register the recurring and the startup job, then start the scheduler.

        Raises:
            RuntimeError: if already started
            ValueError: if the cron expression is invalid
        """
        if self._scheduled:
            raise RuntimeError("Upstream scheduler already started")

        trigger = CronTrigger.from_crontab(self.cron)

        handler = self.sentinel.handler
        if handler.authenticated:
            self.logger.info("GitHub token configured (authenticated mode, 5000 req/h)")
        else:
            self.logger.info(
                "No GitHub token configured (anonymous mode, 60 req/h). "
                "Set UPSTREAM_TOKEN for higher limits."
            )

        self.logger.info(f"Scheduling upstream checks with cron: {self.cron}")
        self.scheduler.add_job(
            self._run_cycle,
            trigger,
            id=RECURRING_JOB_ID,
            name='Upstream check',
            replace_existing=True,
            coalesce=True,
            max_instances=1
        )

        self.scheduler.add_job(
            self._run_initial_cycle,
            DateTrigger(run_date=datetime.now() + timedelta(seconds=self.initial_delay)),
            id=INITIAL_JOB_ID,
            name='Initial upstream check',
            replace_existing=True
        )

        self._scheduled = True
        self.scheduler.start()

    def _run_initial_cycle(self) -> None:
        self.logger.info("Running initial upstream check")
        self._run_cycle()

    def _run_cycle(self) -> None:
        # Last resort: run_cycle isolates per-entity failures itself
        try:
            self.sentinel.run_cycle()
        except Exception as e:
            self.logger.error(f"Upstream check failed: {e}")
            self.logger.debug("Upstream check traceback", exc_info=True)
