"""Dispatcher - sends pension expiry notifications and logs each delivery."""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..models.activity import UserActivity
from ..models.pension import Pension
from ..repos.notification_log import NotificationLogRepository
from ..utils.db_utils import retry_on_lock
from .push_sender import push_sender_service, PushSenderService

logger = logging.getLogger(__name__)

NOTIFICATION_TITLE = "⚠️ Pensión próxima a vencer"
LOG_MESSAGE = "Pensión próxima a vencer"
NOTIFICATION_TYPE = "pension_expiry"
CLICK_ACTION = "FLUTTER_NOTIFICATION_CLICK"


@dataclass
class DispatchSummary:
    """Outcome of dispatching one user's matched pensions."""
    messages_sent: int = 0
    messages_failed: int = 0
    success_count: int = 0
    failure_count: int = 0


@dataclass(frozen=True)
class ExpiryMessage:
    """Everything needed to send and log one pension's notification."""
    pension_id: int
    pension_name: str
    expiration_date: date
    body: str
    data: dict


def build_body(pension: Pension, days_before: int) -> str:
    unit = "día" if days_before == 1 else "días"
    return f"{pension.person_name} - {pension.company_name} vence en {days_before} {unit}"


def build_payload(pension: Pension, days_before: int) -> dict:
    """Data payload read by the client; every value is a string."""
    return {
        "type": NOTIFICATION_TYPE,
        "pensionId": str(pension.id),
        "personName": pension.person_name,
        "companyName": pension.company_name,
        "expirationDate": pension.expiration_date.isoformat(),
        "daysBefore": str(days_before),
        "click_action": CLICK_ACTION,
    }


def build_message(pension: Pension, days_before: int) -> ExpiryMessage:
    return ExpiryMessage(
        pension_id=pension.id,
        pension_name=pension.display_name,
        expiration_date=pension.expiration_date,
        body=build_body(pension, days_before),
        data=build_payload(pension, days_before),
    )


class DispatcherService:
    """Builds one message per matched pension and sends it to all user devices."""

    def __init__(self, sender: Optional[PushSenderService] = None):
        self.sender = sender or push_sender_service

    async def dispatch(
        self,
        session: AsyncSession,
        user: UserActivity,
        tokens: List[str],
        pensions: List[Pension],
        days_before: int,
    ) -> DispatchSummary:
        """Send one multicast per pension, then log it.

        A send failure is logged and the remaining pensions are still sent.
        """
        summary = DispatchSummary()
        label = user.email or user.user_id

        if not tokens:
            logger.info(f"No device tokens for {label}, skipping dispatch")
            return summary

        # Built up front: a failed log write rolls back and expires the ORM rows
        messages = [build_message(pension, days_before) for pension in pensions]

        for message in messages:
            try:
                success, failure = await self.sender.send_multicast(
                    tokens=tokens,
                    title=NOTIFICATION_TITLE,
                    body=message.body,
                    data=message.data,
                )
            except Exception as e:
                logger.error(
                    f"Error sending notification to {label} for pension {message.pension_id}: {e}"
                )
                summary.messages_failed += 1
                continue

            summary.messages_sent += 1
            summary.success_count += success
            summary.failure_count += failure
            logger.info(
                f"Notification sent to {label}: {message.pension_name} "
                f"({success} success, {failure} failed)"
            )

            await self._log_delivery(session, user, message, success, failure)

        return summary

    async def _log_delivery(
        self,
        session: AsyncSession,
        user: UserActivity,
        message: ExpiryMessage,
        success: int,
        failure: int,
    ):
        """Append a log entry. Failures here never affect delivery."""
        try:
            await NotificationLogRepository(session).append(
                user_id=user.user_id,
                user_email=user.email,
                pension_id=message.pension_id,
                pension_name=message.pension_name,
                expiration_date=message.expiration_date,
                sent_at=datetime.utcnow(),
                success_count=success,
                failure_count=failure,
                message=LOG_MESSAGE,
            )
            await retry_on_lock(session.commit)
        except Exception as e:
            logger.error(f"Error logging notification for pension {message.pension_id}: {e}")
            await session.rollback()


# Global instance
dispatcher_service = DispatcherService()
