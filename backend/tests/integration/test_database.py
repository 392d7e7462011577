"""Integration tests for engine setup."""
from sqlalchemy import text


async def test_sqlite_engine_uses_wal(engine) -> None:
    async with engine.connect() as conn:
        journal_mode = (await conn.execute(text("PRAGMA journal_mode"))).scalar()
        busy_timeout = (await conn.execute(text("PRAGMA busy_timeout"))).scalar()

    assert journal_mode.lower() == "wal"
    assert busy_timeout == 30000
