"""Transaction joined with the buyer and event summaries, as returned to clients."""

from datetime import datetime
from typing import Optional

import attrs

from src.service.purchase.domain.entity.event_entity import EventSnapshot
from src.service.purchase.domain.entity.transaction_entity import Transaction
from src.service.purchase.domain.entity.user_entity import UserEntity


@attrs.define(frozen=True)
class UserSummary:
    id: int
    name: str
    email: str
    points: int = 0

    @classmethod
    def from_user(cls, user: UserEntity) -> 'UserSummary':
        return cls(
            id=user.id,  # type: ignore[arg-type]
            name=user.name,
            email=user.email,
            points=user.points,
        )


@attrs.define(frozen=True)
class EventSummary:
    id: int
    title: str
    organizer_id: int
    price_idr: int
    starts_at: datetime
    category: Optional[str] = None
    location: Optional[str] = None

    @classmethod
    def from_event(cls, event: EventSnapshot) -> 'EventSummary':
        return cls(
            id=event.id,
            title=event.title,
            organizer_id=event.organizer_id,
            price_idr=event.price_idr,
            starts_at=event.starts_at,
            category=event.category,
            location=event.location,
        )


@attrs.define(frozen=True)
class TransactionDetail:
    transaction: Transaction
    user: Optional[UserSummary] = None
    event: Optional[EventSummary] = None
