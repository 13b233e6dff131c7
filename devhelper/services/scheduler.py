# services/scheduler.py

import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from devhelper.core.progression import ProgressionTracker, ProgressionUpdate

logger = logging.getLogger(__name__)

RECHECK_JOB_ID = "achievement_recheck"


class AchievementRecheckScheduler:
    """Periodic achievement re-check on the running event loop"""

    def __init__(self, tracker: ProgressionTracker, interval_minutes: int = 5,
                 scheduler: Optional[AsyncIOScheduler] = None):
        self.tracker = tracker
        self.interval_minutes = interval_minutes
        self.scheduler = scheduler or AsyncIOScheduler()

    @property
    def running(self) -> bool:
        return self.scheduler.running

    async def run_once(self) -> Optional[ProgressionUpdate]:
        try:
            update = await self.tracker.check_achievements()
        except Exception as e:
            logger.error(f"Achievement re-check failed: {e}")
            return None

        if update.unlocked:
            logger.info(f"🏆 Re-check unlocked: {', '.join(update.unlocked_ids)}")
        return update

    def start(self) -> None:
        """Must be called with a running event loop"""
        self.scheduler.add_job(
            self.run_once,
            IntervalTrigger(minutes=self.interval_minutes),
            id=RECHECK_JOB_ID,
            replace_existing=True
        )
        if not self.scheduler.running:
            self.scheduler.start()
        logger.info(f"Achievement re-check scheduled every {self.interval_minutes} min")

    def shutdown(self) -> None:
        if self.scheduler.get_job(RECHECK_JOB_ID):
            self.scheduler.remove_job(RECHECK_JOB_ID)
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        logger.info("Achievement re-check stopped")
