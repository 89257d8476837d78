from abc import ABC, abstractmethod
from typing import Optional

from src.service.purchase.domain.entity.user_entity import UserEntity


class IUserPointsRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, user_id: int) -> Optional[UserEntity]:
        pass

    @abstractmethod
    async def deduct_points(self, *, user_id: int, points: int) -> Optional[UserEntity]:
        """Debit points only if the balance covers them; None otherwise"""
        pass

    @abstractmethod
    async def refund_points(self, *, user_id: int, points: int) -> Optional[UserEntity]:
        pass
