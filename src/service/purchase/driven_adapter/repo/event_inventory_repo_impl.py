from typing import AsyncContextManager, Callable, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.purchase.app.interface.i_event_inventory_repo import IEventInventoryRepo
from src.service.purchase.domain.entity.event_entity import EventSnapshot
from src.service.purchase.driven_adapter.model.event_model import EventModel


class EventInventoryRepoImpl(IEventInventoryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def get_by_id(self, *, event_id: int) -> Optional[EventSnapshot]:
        async with self.session_factory() as session:
            result = await session.execute(select(EventModel).where(EventModel.id == event_id))
            event_model = result.scalar_one_or_none()

            if not event_model:
                return None

            return self._to_entity(event_model)

    @Logger.io
    async def reserve_seat(self, *, event_id: int) -> Optional[EventSnapshot]:
        stmt = (
            update(EventModel)
            .where(EventModel.id == event_id)
            .where(EventModel.quantity > 0)
            .values(quantity=EventModel.quantity - 1)
            .returning(EventModel)
            .execution_options(synchronize_session=False)
        )
        return await self._execute_guarded(stmt)

    @Logger.io
    async def release_seat(self, *, event_id: int) -> Optional[EventSnapshot]:
        stmt = (
            update(EventModel)
            .where(EventModel.id == event_id)
            .values(quantity=EventModel.quantity + 1)
            .returning(EventModel)
            .execution_options(synchronize_session=False)
        )
        return await self._execute_guarded(stmt)

    async def _execute_guarded(self, stmt) -> Optional[EventSnapshot]:
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            event_model = result.scalar_one_or_none()
            await session.commit()

            if not event_model:
                return None

            return self._to_entity(event_model)

    @staticmethod
    def _to_entity(event_model: EventModel) -> EventSnapshot:
        return EventSnapshot(
            id=event_model.id,
            title=event_model.title,
            organizer_id=event_model.organizer_id,
            quantity=event_model.quantity,
            price_idr=event_model.price_idr,
            is_free=event_model.is_free,
            starts_at=event_model.starts_at,
            ends_at=event_model.ends_at,
            category=event_model.category,
            location=event_model.location,
        )
