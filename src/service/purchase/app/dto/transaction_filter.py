from datetime import datetime
from typing import Optional

import attrs

from src.service.purchase.domain.enum.transaction_status import TransactionStatus


@attrs.define(frozen=True)
class TransactionFilter:
    """Filters for listing transactions, all optional and combined with AND"""

    user_id: Optional[int] = None
    event_id: Optional[int] = None
    organizer_id: Optional[int] = None
    status: Optional[TransactionStatus] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
    min_amount: Optional[int] = None
    max_amount: Optional[int] = None
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit
