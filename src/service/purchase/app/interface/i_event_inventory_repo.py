from abc import ABC, abstractmethod
from typing import Optional

from src.service.purchase.domain.entity.event_entity import EventSnapshot


class IEventInventoryRepo(ABC):
    """
    Seat inventory of events owned by the event module.

    reserve_seat/release_seat are single conditional statements: a lost race
    is reported as None, never as a negative quantity.
    """

    @abstractmethod
    async def get_by_id(self, *, event_id: int) -> Optional[EventSnapshot]:
        pass

    @abstractmethod
    async def reserve_seat(self, *, event_id: int) -> Optional[EventSnapshot]:
        """Take one seat; None when the event is missing or sold out"""
        pass

    @abstractmethod
    async def release_seat(self, *, event_id: int) -> Optional[EventSnapshot]:
        """Give one seat back; None when the event is missing"""
        pass
