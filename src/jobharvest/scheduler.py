# src/jobharvest/scheduler.py
"""Recurring runs: every hour at a fixed minute, forever."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from jobharvest.clients.browser import SessionError

logger = logging.getLogger(__name__)


def guarded(run: Callable[[], object]) -> Callable[[], None]:
    """
    Wrap a run so a failure only ends that run. The next trigger retries;
    there is no other retry.
    """

    def job() -> None:
        try:
            run()
        except SessionError as e:
            logger.error("run aborted, browser unavailable: %s", e)
        except Exception:
            logger.exception("run failed")

    return job


def build_scheduler(run: Callable[[], object], minute: int = 0, timezone: Optional[str] = None) -> BlockingScheduler:
    """
    A blocking scheduler firing `run` hourly at `minute`.
    At most one instance runs at a time; missed fires collapse into one.
    """
    sched = BlockingScheduler(timezone=timezone) if timezone else BlockingScheduler()
    sched.add_job(
        guarded(run),
        CronTrigger(minute=minute),
        id="jobharvest-run",
        max_instances=1,
        coalesce=True,
        misfire_grace_time=300,
    )
    return sched


def serve(run: Callable[[], object], minute: int = 0, run_now: bool = True) -> None:
    """Optionally run immediately, then block on the hourly schedule until interrupted."""
    if run_now:
        guarded(run)()
    sched = build_scheduler(run, minute=minute)
    logger.info('scheduling cron "%d * * * *" (every hour at minute %d)', minute, minute)
    try:
        sched.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("scheduler stopped")
