"""
Integration fixtures: a throwaway SQLite database per test

The guarded UPDATE ... RETURNING statements run unchanged on SQLite (3.35+),
so the repositories are exercised against real SQL without a Postgres server.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import AsyncGenerator

import pytest

from src.platform.database.orm_db_setting import AsyncEngineManager, Base, Database
from src.service.purchase.driven_adapter.model import CouponModel, EventModel, UserModel


@pytest.fixture
async def database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    database_url = f'sqlite+aiosqlite:///{tmp_path}/purchase.db'
    database = Database(engine_manager=AsyncEngineManager(database_url=database_url))
    async with database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with database.session() as session:
        starts_at = datetime.now(timezone.utc) + timedelta(days=7)
        session.add_all(
            [
                UserModel(id=1, email='buyer@example.com', name='Budi', points=20_000),
                UserModel(id=2, email='organizer@example.com', name='Sinta', role='ORGANIZER'),
                EventModel(
                    id=10,
                    title='Jazz Night',
                    organizer_id=2,
                    quantity=1,
                    price_idr=100_000,
                    starts_at=starts_at,
                    ends_at=starts_at + timedelta(hours=3),
                ),
            ]
        )
        await session.commit()
        session.add_all(
            [
                CouponModel(
                    id=100,
                    code='JAZZ20',
                    type='ORGANIZER',
                    discount_idr=20_000,
                    organizer_id=2,
                    quantity=2,
                    used=0,
                ),
                CouponModel(id=200, code='REF-BUDI', type='REFERRAL', discount_idr=10_000, user_id=1),
            ]
        )
        await session.commit()

    yield database

    await database.dispose()
