from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.date import DateTrigger

from policy_monitor.config import settings

logger = logging.getLogger(__name__)

STARTUP_ANALYSIS_DELAY_SECONDS = 5

# Module-level reference for access from API routes
_scheduler_manager: SchedulerManager | None = None


def get_scheduler_manager() -> SchedulerManager | None:
    return _scheduler_manager


async def run_scheduled_policy_check() -> None:
    from policy_monitor.scheduler.pipeline import execute_policy_check

    logger.info("Scheduled daily policy check starting...")
    await execute_policy_check(force=False)


async def run_scheduled_analysis() -> None:
    from policy_monitor.scheduler.pipeline import analyze_pending_policies

    logger.info("Scheduled analysis check starting...")
    try:
        result = await analyze_pending_policies()
    except Exception:
        logger.exception("Scheduled analysis failed")
        return
    logger.info("Scheduled analysis complete: %s", result)


class SchedulerManager:
    def __init__(self) -> None:
        self.scheduler = AsyncIOScheduler(
            timezone=settings.TIMEZONE,
            job_defaults={"coalesce": True, "max_instances": 1},
        )

    async def start(self) -> None:
        global _scheduler_manager
        _scheduler_manager = self

        self.scheduler.add_job(
            run_scheduled_policy_check,
            trigger=CronTrigger(hour=settings.POLICY_CHECK_CRON_HOUR, minute=0,
                                timezone=settings.TIMEZONE),
            id="daily_policy_check",
            replace_existing=True,
            misfire_grace_time=3600,
        )
        self.scheduler.add_job(
            run_scheduled_analysis,
            trigger=CronTrigger(hour=f"*/{settings.ANALYSIS_INTERVAL_HOURS}", minute=0,
                                timezone=settings.TIMEZONE),
            id="periodic_analysis",
            replace_existing=True,
        )
        if settings.STARTUP_ANALYSIS_ENABLED:
            self.scheduler.add_job(
                run_scheduled_analysis,
                trigger=DateTrigger(
                    run_date=datetime.now(timezone.utc) + timedelta(seconds=STARTUP_ANALYSIS_DELAY_SECONDS),
                ),
                id="startup_analysis",
                replace_existing=True,
            )

        self.scheduler.start()
        logger.info(
            "Scheduler started: policy check daily %02d:00 %s, analysis every %dh",
            settings.POLICY_CHECK_CRON_HOUR,
            settings.TIMEZONE,
            settings.ANALYSIS_INTERVAL_HOURS,
        )

    async def stop(self) -> None:
        global _scheduler_manager
        self.scheduler.shutdown(wait=False)
        _scheduler_manager = None
        logger.info("Scheduler stopped")

    def job_summary(self) -> list[dict[str, str | None]]:
        return [
            {
                "id": job.id,
                "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
            }
            for job in self.scheduler.get_jobs()
        ]
