"""Integration tests for the daily expiring pension run."""
from datetime import date, datetime, timedelta
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select

from pension_notifier.config import settings
from pension_notifier.models import NotificationLog
from pension_notifier.services import scheduler as scheduler_module
from pension_notifier.services.dispatcher import DispatcherService
from pension_notifier.services.scheduler import SchedulerService

# Monday, 09:00 server time
NOW = datetime(2024, 6, 3, 9, 0)
TODAY = NOW.date()
RECENT = NOW - timedelta(hours=2)


@pytest.fixture
def sender() -> AsyncMock:
    sender = AsyncMock()
    sender.send_multicast.return_value = (1, 0)
    return sender


@pytest.fixture
def service(session_factory, sender) -> SchedulerService:
    return SchedulerService(session_factory=session_factory, dispatcher=DispatcherService(sender=sender))


async def _logs(session_factory) -> list[NotificationLog]:
    async with session_factory() as session:
        result = await session.execute(select(NotificationLog).order_by(NotificationLog.id))
        return list(result.scalars().all())


class TestRun:
    async def test_notifies_matching_pension(self, service, sender, seed, session_factory) -> None:
        await seed.user("ana", RECENT, policy={"enabled": True, "days_before": 3})
        pension = await seed.pension(TODAY + timedelta(days=3), person_name="Luis", company_name="Acme")

        summary = await service.run_once(NOW)

        assert summary.messages_sent == 1
        assert summary.users_notified == 1
        sender.send_multicast.assert_awaited_once()
        kwargs = sender.send_multicast.await_args.kwargs
        assert kwargs["tokens"] == ["token-ana"]
        assert kwargs["body"] == "Luis - Acme vence en 3 días"
        assert kwargs["data"]["pensionId"] == str(pension.id)
        assert kwargs["data"]["expirationDate"] == "2024-06-06"

        logs = await _logs(session_factory)
        assert len(logs) == 1
        assert logs[0].user_id == "ana"
        assert logs[0].user_email == "ana@example.com"
        assert logs[0].pension_name == "Luis - Acme"
        assert logs[0].expiration_date == date(2024, 6, 6)
        assert (logs[0].success_count, logs[0].failure_count) == (1, 0)
        assert logs[0].message == "Pensión próxima a vencer"

    async def test_one_message_per_pension(self, service, sender, seed, session_factory) -> None:
        await seed.user("ana", RECENT, policy={"enabled": True, "days_before": 1})
        await seed.pension(TODAY + timedelta(days=1), person_name="Uno")
        await seed.pension(TODAY + timedelta(days=1), person_name="Dos")

        summary = await service.run_once(NOW)

        assert summary.messages_sent == 2
        bodies = [call.kwargs["body"] for call in sender.send_multicast.await_args_list]
        assert bodies == ["Uno - Acme vence en 1 día", "Dos - Acme vence en 1 día"]
        assert len(await _logs(session_factory)) == 2

    async def test_default_lead_time(self, service, sender, seed) -> None:
        await seed.user("ana", RECENT, policy={"enabled": True, "days_before": None})
        await seed.pension(TODAY + timedelta(days=3))

        summary = await service.run_once(NOW)
        assert summary.messages_sent == 1

    async def test_stale_user_excluded(self, service, sender, seed) -> None:
        await seed.user("old", NOW - timedelta(hours=49), policy={"enabled": True})
        await seed.pension(TODAY + timedelta(days=3))

        summary = await service.run_once(NOW)

        assert summary.active_users == 0
        sender.send_multicast.assert_not_awaited()

    async def test_no_active_users_is_noop(self, service, sender) -> None:
        summary = await service.run_once(NOW)
        assert summary.active_users == 0
        assert summary.aborted is False
        sender.send_multicast.assert_not_awaited()

    async def test_missing_or_disabled_policy_skipped(self, service, sender, seed) -> None:
        await seed.user("no-policy", RECENT)
        await seed.user("disabled", RECENT, policy={"enabled": False})
        await seed.pension(TODAY + timedelta(days=3))

        summary = await service.run_once(NOW)

        assert summary.skipped_by_policy == 2
        sender.send_multicast.assert_not_awaited()

    async def test_outside_active_hours_skipped(self, service, sender, seed) -> None:
        await seed.user("ana", RECENT, policy={"enabled": True, "active_hours_start": "10:00"})
        await seed.pension(TODAY + timedelta(days=3))

        summary = await service.run_once(NOW)

        assert summary.skipped_by_policy == 1
        sender.send_multicast.assert_not_awaited()

    async def test_no_tokens_means_no_dispatch_and_no_log(self, service, sender, seed, session_factory) -> None:
        await seed.user("ana", RECENT, token=None, policy={"enabled": True})
        await seed.pension(TODAY + timedelta(days=3))

        summary = await service.run_once(NOW)

        assert summary.skipped_no_tokens == 1
        sender.send_multicast.assert_not_awaited()
        assert await _logs(session_factory) == []

    async def test_no_matches(self, service, sender, seed) -> None:
        await seed.user("ana", RECENT, policy={"enabled": True})
        await seed.pension(TODAY + timedelta(days=4))
        await seed.pension(TODAY + timedelta(days=3), status="inactive")

        summary = await service.run_once(NOW)

        assert summary.skipped_no_matches == 1
        sender.send_multicast.assert_not_awaited()

    async def test_each_user_uses_own_lead_time(self, service, sender, seed) -> None:
        await seed.user("ana", RECENT, policy={"enabled": True, "days_before": 1})
        await seed.user("ben", RECENT, policy={"enabled": True, "days_before": 7})
        await seed.pension(TODAY + timedelta(days=1), person_name="Mañana")
        await seed.pension(TODAY + timedelta(days=7), person_name="Semana")

        await service.run_once(NOW)

        sent = {
            call.kwargs["tokens"][0]: call.kwargs["data"]["personName"]
            for call in sender.send_multicast.await_args_list
        }
        assert sent == {"token-ana": "Mañana", "token-ben": "Semana"}


class TestFailureIsolation:
    async def test_dispatch_failure_does_not_block_other_users(
        self, service, sender, seed, session_factory
    ) -> None:
        await seed.user("ana", RECENT, policy={"enabled": True, "days_before": 1})
        await seed.user("ben", RECENT, policy={"enabled": True, "days_before": 2})
        await seed.pension(TODAY + timedelta(days=1), person_name="Para Ana")
        await seed.pension(TODAY + timedelta(days=2), person_name="Para Ben")

        async def send(tokens, title, body, data=None):
            if tokens == ["token-ana"]:
                raise RuntimeError("FCM unavailable")
            return (1, 0)

        sender.send_multicast.side_effect = send

        summary = await service.run_once(NOW)

        assert summary.messages_failed == 1
        assert summary.messages_sent == 1
        assert summary.user_errors == 0
        logs = await _logs(session_factory)
        assert [log.user_id for log in logs] == ["ben"]

    async def test_failure_for_one_pension_keeps_sending_the_rest(self, service, sender, seed) -> None:
        await seed.user("ana", RECENT, policy={"enabled": True})
        await seed.pension(TODAY + timedelta(days=3), person_name="Falla")
        await seed.pension(TODAY + timedelta(days=3), person_name="Sale")

        sender.send_multicast.side_effect = [RuntimeError("boom"), (1, 0)]

        summary = await service.run_once(NOW)

        assert sender.send_multicast.await_count == 2
        assert (summary.messages_failed, summary.messages_sent) == (1, 1)

    async def test_partial_delivery_recorded_in_log(self, service, sender, seed, session_factory) -> None:
        await seed.user("ana", RECENT, policy={"enabled": True})
        await seed.pension(TODAY + timedelta(days=3))
        sender.send_multicast.return_value = (0, 1)

        summary = await service.run_once(NOW)

        assert summary.messages_sent == 1
        logs = await _logs(session_factory)
        assert (logs[0].success_count, logs[0].failure_count) == (0, 1)

    async def test_user_error_is_contained(self, service, sender, seed, monkeypatch) -> None:
        await seed.user("ana", RECENT, policy={"enabled": True})
        await seed.user("ben", RECENT, policy={"enabled": True})
        await seed.pension(TODAY + timedelta(days=3))

        original = scheduler_module.DeviceRepository.get_tokens

        async def flaky(self, user_id):
            if user_id == "ana":
                raise RuntimeError("registry down")
            return await original(self, user_id)

        monkeypatch.setattr(scheduler_module.DeviceRepository, "get_tokens", flaky)

        summary = await service.run_once(NOW)

        assert summary.user_errors == 1
        assert summary.messages_sent == 1
        assert sender.send_multicast.await_args.kwargs["tokens"] == ["token-ben"]

    async def test_eligibility_failure_aborts_run(self, service, sender, seed, monkeypatch) -> None:
        await seed.user("ana", RECENT, policy={"enabled": True})
        monkeypatch.setattr(
            scheduler_module, "select_active_users", AsyncMock(side_effect=RuntimeError("store down"))
        )

        summary = await service.run_once(NOW)

        assert summary.aborted is True
        sender.send_multicast.assert_not_awaited()


async def test_running_twice_sends_twice(service, sender, seed, session_factory) -> None:
    """No dedup state exists: a second run the same day notifies again."""
    await seed.user("ana", RECENT, policy={"enabled": True})
    await seed.pension(TODAY + timedelta(days=3))

    first = await service.run_once(NOW)
    second = await service.run_once(NOW + timedelta(minutes=1))

    assert first.messages_sent == second.messages_sent == 1
    assert sender.send_multicast.await_count == 2
    assert len(await _logs(session_factory)) == 2


async def test_concurrent_users(service, sender, seed, monkeypatch) -> None:
    monkeypatch.setattr(settings, "max_concurrent_users", 4)
    for i in range(6):
        await seed.user(f"user-{i}", RECENT, policy={"enabled": True})
    await seed.pension(TODAY + timedelta(days=3))

    summary = await service.run_once(NOW)

    assert summary.users_notified == 6
    assert sender.send_multicast.await_count == 6
