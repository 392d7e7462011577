"""Policy evaluator - decides whether a user may be notified right now.

Checks run in order and stop at the first one that blocks:

1. the user has a policy at all
2. the policy is enabled
3. the current time of day is inside the active-hours window (both ends inclusive)
4. it is not a weekend day, unless the policy allows weekends

A check that cannot be evaluated (for example an active-hours value that is not
"HH:MM") produces an EvaluationError instead of a decision. ``decide`` is the
only place that turns such an error into a decision, and it always resolves to
FAIL_OPEN: a broken configuration must never silently suppress an expiry alert.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..repos.policy import Policy
from ..utils.time_utils import parse_hhmm

logger = logging.getLogger(__name__)

# Evaluation errors allow the notification
FAIL_OPEN = True

SATURDAY = 5
SUNDAY = 6


@dataclass(frozen=True)
class EvaluationError:
    """A check that could not be evaluated."""
    check: str
    detail: str


@dataclass(frozen=True)
class Result:
    """Outcome of one check or of a full evaluation."""
    proceed: Optional[bool] = None
    reason: str = ""
    error: Optional[EvaluationError] = None

    @classmethod
    def allow(cls, reason: str = "") -> "Result":
        return cls(proceed=True, reason=reason)

    @classmethod
    def block(cls, reason: str) -> "Result":
        return cls(proceed=False, reason=reason)

    @classmethod
    def failed(cls, check: str, detail: str) -> "Result":
        return cls(error=EvaluationError(check=check, detail=detail), reason=f"{check} error: {detail}")

    @property
    def is_error(self) -> bool:
        return self.error is not None


def decide(result: Result) -> bool:
    """Map a Result to a proceed decision."""
    if result.error is not None:
        logger.warning(
            f"Policy check '{result.error.check}' failed ({result.error.detail}), allowing notification"
        )
        return FAIL_OPEN
    return bool(result.proceed)


def check_enabled(policy: Optional[Policy]) -> Result:
    if policy is None:
        return Result.block("no notification settings")
    if not policy.enabled:
        return Result.block("notifications disabled")
    return Result.allow()


def check_active_hours(policy: Policy, now: datetime) -> Result:
    try:
        start = parse_hhmm(policy.active_hours_start)
        end = parse_hhmm(policy.active_hours_end)
    except (AttributeError, TypeError, ValueError) as e:
        return Result.failed("active_hours", str(e))

    current = now.hour * 60 + now.minute
    if start <= current <= end:
        return Result.allow()
    return Result.block(
        f"outside active hours ({policy.active_hours_start}-{policy.active_hours_end})"
    )


def check_weekend(policy: Policy, now: datetime) -> Result:
    if not policy.allow_weekends and now.weekday() in (SATURDAY, SUNDAY):
        return Result.block("weekend notifications disabled")
    return Result.allow()


def local_time(policy: Policy, now: datetime) -> datetime:
    """Express ``now`` in the policy's timezone. Naive values are taken as UTC."""
    try:
        zone = ZoneInfo(policy.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {policy.timezone!r} for user {policy.user_id}, using server time")
        return now
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(zone)


def evaluate(policy: Optional[Policy], now: datetime, honor_user_timezone: bool = False) -> Result:
    """Run every check against ``now`` and return the first blocking Result."""
    try:
        outcome = check_enabled(policy)
        if not decide(outcome):
            return outcome

        if honor_user_timezone:
            now = local_time(policy, now)

        outcome = check_active_hours(policy, now)
        if not decide(outcome):
            return outcome

        outcome = check_weekend(policy, now)
        if not decide(outcome):
            return outcome

        return Result.allow()
    except Exception as e:
        return Result.failed("evaluation", str(e))


def should_proceed(policy: Optional[Policy], now: datetime, honor_user_timezone: bool = False) -> bool:
    """True if the user may be notified at ``now``."""
    return decide(evaluate(policy, now, honor_user_timezone))
