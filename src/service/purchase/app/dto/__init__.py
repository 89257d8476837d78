"""Purchase application DTOs"""

from src.service.purchase.app.dto.page import Page
from src.service.purchase.app.dto.transaction_detail import (
    EventSummary,
    TransactionDetail,
    UserSummary,
)
from src.service.purchase.app.dto.transaction_filter import TransactionFilter
from src.service.purchase.app.dto.transaction_stats import TransactionStats

__all__ = [
    'EventSummary',
    'Page',
    'TransactionDetail',
    'TransactionFilter',
    'TransactionStats',
    'UserSummary',
]
