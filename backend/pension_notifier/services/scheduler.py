"""Scheduler service - daily check for pensions about to expire.

Each run is an independent batch pass:

- select users active in the last 48 hours
- for each user: evaluate their notification policy, look up their device,
  find active pensions expiring exactly ``days_before`` days from today and
  send one push per pension

Users are processed sequentially unless MAX_CONCURRENT_USERS is raised. One
user's failure never stops the others. Nothing records which pensions were
already notified, so triggering the job twice on the same day notifies twice.
"""
import asyncio
import logging
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional, Callable, List
from zoneinfo import ZoneInfo

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..database import async_session
from ..models.activity import UserActivity
from ..models.policy import DEFAULT_DAYS_BEFORE
from ..repos.device import DeviceRepository
from ..repos.policy import PolicyRepository
from .dispatcher import dispatcher_service, DispatcherService
from .eligibility import select_active_users
from .expiry_matcher import find_expiring
from .policy_evaluator import evaluate, decide

logger = logging.getLogger(__name__)

JOB_ID = "check_expiring_pensions"


@dataclass
class RunSummary:
    """Counters for one scheduler run."""
    started_at: datetime
    finished_at: Optional[datetime] = None
    aborted: bool = False
    active_users: int = 0
    skipped_by_policy: int = 0
    skipped_no_tokens: int = 0
    skipped_no_matches: int = 0
    users_notified: int = 0
    messages_sent: int = 0
    messages_failed: int = 0
    user_errors: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


class SchedulerService:
    """Runs the expiring pension check once a day."""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] = async_session,
        dispatcher: Optional[DispatcherService] = None,
    ):
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._running = False
        self._session_factory = session_factory
        self.dispatcher = dispatcher or dispatcher_service

    def start(self):
        """Start the scheduler."""
        if self._running:
            return

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self._run_job,
            trigger=CronTrigger(
                hour=settings.schedule_hour,
                minute=settings.schedule_minute,
                timezone=settings.schedule_timezone,
            ),
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            misfire_grace_time=3600,
        )

        self.scheduler.start()
        self._running = True
        logger.info(
            f"Scheduler started (daily at {settings.schedule_hour:02d}:{settings.schedule_minute:02d} "
            f"{settings.schedule_timezone})"
        )

    def stop(self):
        """Stop the scheduler."""
        if self.scheduler and self._running:
            self.scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Scheduler stopped")

    def _now(self) -> datetime:
        return datetime.now(ZoneInfo(settings.schedule_timezone))

    async def _run_job(self):
        await self.run_once()

    async def run_once(self, now: Optional[datetime] = None) -> RunSummary:
        """Run one full pass. Never raises."""
        now = now or self._now()
        summary = RunSummary(started_at=now)
        logger.info("Starting expiring pension check")

        try:
            async with self._session_factory() as session:
                active_users = await select_active_users(
                    session, now, settings.activity_window_hours
                )
        except Exception as e:
            logger.error(f"Error selecting active users, run aborted: {e}")
            summary.aborted = True
            summary.finished_at = datetime.now(now.tzinfo)
            return summary

        summary.active_users = len(active_users)
        if not active_users:
            logger.info(f"No active users in the last {settings.activity_window_hours} hours")
            summary.finished_at = datetime.now(now.tzinfo)
            return summary

        logger.info(f"Active users: {len(active_users)}")
        await self._process_users(active_users, now, summary)

        summary.finished_at = datetime.now(now.tzinfo)
        logger.info(
            f"Expiring pension check complete: {summary.messages_sent} sent, "
            f"{summary.messages_failed} failed, {summary.user_errors} user errors"
        )
        return summary

    async def _process_users(self, users: List[UserActivity], now: datetime, summary: RunSummary):
        max_concurrent = max(1, settings.max_concurrent_users)
        if max_concurrent == 1:
            for user in users:
                await self._process_user(user, now, summary)
            return

        semaphore = asyncio.Semaphore(max_concurrent)

        async def process_with_limit(user: UserActivity):
            async with semaphore:
                await self._process_user(user, now, summary)

        await asyncio.gather(*[process_with_limit(user) for user in users])

    async def _process_user(self, user: UserActivity, now: datetime, summary: RunSummary):
        """Evaluate, match and dispatch for a single user in its own session."""
        label = user.email or user.user_id
        try:
            async with self._session_factory() as session:
                policy = await PolicyRepository(session).resolve(user.user_id)
                result = evaluate(policy, now, honor_user_timezone=settings.honor_user_timezone)
                if not decide(result):
                    logger.info(f"Skipping {label}: {result.reason}")
                    summary.skipped_by_policy += 1
                    return

                tokens = await DeviceRepository(session).get_tokens(user.user_id)
                if not tokens:
                    logger.info(f"No device tokens for {label}")
                    summary.skipped_no_tokens += 1
                    return

                days_before = policy.days_before or DEFAULT_DAYS_BEFORE
                pensions = await find_expiring(session, now.date(), days_before)
                if not pensions:
                    logger.info(f"No pensions expiring in {days_before} days for {label}")
                    summary.skipped_no_matches += 1
                    return

                result = await self.dispatcher.dispatch(session, user, tokens, pensions, days_before)
                summary.users_notified += 1
                summary.messages_sent += result.messages_sent
                summary.messages_failed += result.messages_failed
        except Exception as e:
            logger.error(f"Error processing notifications for {label}: {e}")
            summary.user_errors += 1


# Global instance
scheduler_service = SchedulerService()
