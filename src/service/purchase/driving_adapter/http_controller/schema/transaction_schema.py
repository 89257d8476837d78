from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from src.service.purchase.app.dto.page import Page
from src.service.purchase.app.dto.transaction_detail import TransactionDetail
from src.service.purchase.app.dto.transaction_stats import TransactionStats
from src.service.purchase.domain.entity.transaction_entity import Transaction
from src.service.purchase.domain.enum.transaction_status import TransactionStatus


class TransactionCreateRequest(BaseModel):
    event_id: int
    coupon_id: Optional[int] = None
    points_used: int = Field(default=0, ge=0)

    model_config = {
        'json_schema_extra': {'example': {'event_id': 1, 'coupon_id': 3, 'points_used': 10000}}
    }


class TransactionStatusUpdateRequest(BaseModel):
    status: TransactionStatus
    admin_notes: Optional[str] = None

    model_config = {
        'json_schema_extra': {
            'example': {'status': 'REJECTED', 'admin_notes': 'Payment proof is unreadable'}
        }
    }


class UserSummaryResponse(BaseModel):
    id: int
    name: str
    email: str
    points: int


class EventSummaryResponse(BaseModel):
    id: int
    title: str
    organizer_id: int
    price_idr: int
    starts_at: datetime
    category: Optional[str] = None
    location: Optional[str] = None


class TransactionResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'id': 12,
                'user_id': 2,
                'event_id': 1,
                'coupon_id': None,
                'status': 'WAITING_FOR_PAYMENT',
                'total_idr': 150000,
                'points_used': 0,
                'admin_notes': None,
                'created_at': '2025-01-10T10:30:00Z',
                'updated_at': '2025-01-10T10:30:00Z',
            }
        },
    }

    id: int
    user_id: int
    event_id: int
    coupon_id: Optional[int] = None
    status: TransactionStatus
    total_idr: int
    points_used: int
    admin_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, transaction: Transaction) -> 'TransactionResponse':
        return cls(
            id=transaction.id or 0,
            user_id=transaction.user_id,
            event_id=transaction.event_id,
            coupon_id=transaction.coupon_id,
            status=transaction.status,
            total_idr=transaction.total_idr,
            points_used=transaction.points_used,
            admin_notes=transaction.admin_notes,
            created_at=transaction.created_at,
            updated_at=transaction.updated_at,
        )


class TransactionDetailResponse(TransactionResponse):
    user: Optional[UserSummaryResponse] = None
    event: Optional[EventSummaryResponse] = None

    @classmethod
    def from_detail(cls, detail: TransactionDetail) -> 'TransactionDetailResponse':
        base = TransactionResponse.from_entity(detail.transaction)
        return cls(
            **base.model_dump(),
            user=UserSummaryResponse(
                id=detail.user.id,
                name=detail.user.name,
                email=detail.user.email,
                points=detail.user.points,
            )
            if detail.user
            else None,
            event=EventSummaryResponse(
                id=detail.event.id,
                title=detail.event.title,
                organizer_id=detail.event.organizer_id,
                price_idr=detail.event.price_idr,
                starts_at=detail.event.starts_at,
                category=detail.event.category,
                location=detail.event.location,
            )
            if detail.event
            else None,
        )


class TransactionPageResponse(BaseModel):
    items: List[TransactionDetailResponse]
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def from_page(cls, page: Page[TransactionDetail]) -> 'TransactionPageResponse':
        return cls(
            items=[TransactionDetailResponse.from_detail(detail) for detail in page.items],
            page=page.page,
            limit=page.limit,
            total=page.total,
            total_pages=page.total_pages,
            has_next=page.has_next,
            has_prev=page.has_prev,
        )


class TransactionStatsResponse(BaseModel):
    total: int
    revenue_idr: int
    pending: int
    completed: int
    rejected: int
    canceled: int
    expired: int

    @classmethod
    def from_stats(cls, stats: TransactionStats) -> 'TransactionStatsResponse':
        return cls(
            total=stats.total,
            revenue_idr=stats.revenue_idr,
            pending=stats.pending,
            completed=stats.completed,
            rejected=stats.rejected,
            canceled=stats.canceled,
            expired=stats.expired,
        )
