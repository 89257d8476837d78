from typing import AsyncContextManager, Callable, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.purchase.app.interface.i_user_points_repo import IUserPointsRepo
from src.service.purchase.domain.entity.user_entity import UserEntity, UserRole
from src.service.purchase.driven_adapter.model.user_model import UserModel


class UserPointsRepoImpl(IUserPointsRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]) -> None:
        self.session_factory = session_factory

    @Logger.io
    async def get_by_id(self, *, user_id: int) -> Optional[UserEntity]:
        async with self.session_factory() as session:
            result = await session.execute(select(UserModel).where(UserModel.id == user_id))
            user_model = result.scalar_one_or_none()

            if not user_model:
                return None

            return self._model_to_entity(user_model)

    @Logger.io
    async def deduct_points(self, *, user_id: int, points: int) -> Optional[UserEntity]:
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id)
            .where(UserModel.points >= points)
            .values(points=UserModel.points - points)
            .returning(UserModel)
            .execution_options(synchronize_session=False)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            user_model = result.scalar_one_or_none()
            await session.commit()

            return self._model_to_entity(user_model) if user_model else None

    @Logger.io
    async def refund_points(self, *, user_id: int, points: int) -> Optional[UserEntity]:
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id)
            .values(points=UserModel.points + points)
            .returning(UserModel)
            .execution_options(synchronize_session=False)
        )
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            user_model = result.scalar_one_or_none()
            await session.commit()

            return self._model_to_entity(user_model) if user_model else None

    @staticmethod
    def _model_to_entity(user_model: UserModel) -> UserEntity:
        return UserEntity(
            id=user_model.id,
            email=user_model.email,
            name=user_model.name,
            role=UserRole(user_model.role),
            points=user_model.points,
            is_active=user_model.is_active,
            created_at=user_model.created_at,
        )
