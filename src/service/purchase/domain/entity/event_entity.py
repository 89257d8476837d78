from datetime import datetime, timezone
from typing import Optional

import attrs

from src.platform.exception.exceptions import EventStartedError, SoldOutError


@attrs.define
class EventSnapshot:
    """Read model of an event as the purchase core sees it (the event module owns the record)"""

    id: int
    title: str
    organizer_id: int
    quantity: int
    price_idr: int
    is_free: bool
    starts_at: datetime
    ends_at: datetime
    category: Optional[str] = None
    location: Optional[str] = None

    def validate_purchasable(self, *, now: Optional[datetime] = None) -> None:
        """
        Raises:
            SoldOutError: When no seat is left
            EventStartedError: When the event has already started or ended
        """
        now = now or datetime.now(timezone.utc)
        if self.quantity <= 0:
            raise SoldOutError('Event is sold out')
        if now >= self.starts_at:
            raise EventStartedError('Event has already started or ended')
