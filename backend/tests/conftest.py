from datetime import date, datetime
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pension_notifier import models  # noqa: F401
from pension_notifier.database import Base, build_engine
from pension_notifier.models import DeviceToken, NotificationPolicy, Pension, UserActivity


@pytest_asyncio.fixture
async def engine(tmp_path):
    """A fresh SQLite database file per test."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


class Seeder:
    """Inserts rows for a test and commits each batch."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def user(
        self,
        user_id: str,
        last_active_at: datetime,
        token: Optional[str] = "token",
        policy: Optional[dict] = None,
        email: Optional[str] = None,
    ):
        email = email or f"{user_id}@example.com"
        self.session.add(UserActivity(user_id=user_id, email=email, last_active_at=last_active_at))
        if token:
            self.session.add(DeviceToken(user_id=user_id, token=f"{token}-{user_id}", email=email))
        if policy is not None:
            self.session.add(NotificationPolicy(user_id=user_id, **policy))
        await self.session.commit()

    async def pension(
        self,
        expiration_date: date,
        person_name: str = "Juan Pérez",
        company_name: str = "Acme",
        status: str = "active",
        **fields,
    ) -> Pension:
        pension = Pension(
            person_name=person_name,
            company_name=company_name,
            status=status,
            expiration_date=expiration_date,
            **fields,
        )
        self.session.add(pension)
        await self.session.commit()
        return pension


@pytest.fixture
def seed(db_session) -> Seeder:
    return Seeder(db_session)
