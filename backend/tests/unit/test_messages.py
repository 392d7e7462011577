"""Unit tests for the expiry notification content."""
from datetime import date

import pytest

from pension_notifier.models import Pension
from pension_notifier.services.dispatcher import NOTIFICATION_TITLE, build_body, build_payload
from pension_notifier.services.expiry_matcher import target_date


def _pension() -> Pension:
    return Pension(
        id=42,
        person_name="María López",
        company_name="Transportes del Norte",
        status="active",
        expiration_date=date(2024, 6, 4),
    )


class TestBody:
    def test_singular_day(self) -> None:
        assert build_body(_pension(), 1) == "María López - Transportes del Norte vence en 1 día"

    def test_plural_days(self) -> None:
        assert build_body(_pension(), 3) == "María López - Transportes del Norte vence en 3 días"

    def test_zero_days_is_plural(self) -> None:
        assert build_body(_pension(), 0).endswith("vence en 0 días")

    def test_title(self) -> None:
        assert NOTIFICATION_TITLE == "⚠️ Pensión próxima a vencer"


class TestPayload:
    def test_client_contract(self) -> None:
        assert build_payload(_pension(), 3) == {
            "type": "pension_expiry",
            "pensionId": "42",
            "personName": "María López",
            "companyName": "Transportes del Norte",
            "expirationDate": "2024-06-04",
            "daysBefore": "3",
            "click_action": "FLUTTER_NOTIFICATION_CLICK",
        }

    def test_all_values_are_strings(self) -> None:
        assert all(isinstance(v, str) for v in build_payload(_pension(), 7).values())


@pytest.mark.parametrize(
    "today,days_before,expected",
    [
        (date(2024, 6, 1), 3, date(2024, 6, 4)),
        (date(2024, 6, 1), 0, date(2024, 6, 1)),
        (date(2024, 12, 30), 3, date(2025, 1, 2)),
        (date(2024, 2, 27), 2, date(2024, 2, 29)),
    ],
)
def test_target_date(today: date, days_before: int, expected: date) -> None:
    assert target_date(today, days_before) == expected
