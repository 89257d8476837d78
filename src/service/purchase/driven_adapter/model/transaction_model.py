from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.platform.database.orm_db_setting import Base

if TYPE_CHECKING:
    from src.service.purchase.driven_adapter.model.event_model import EventModel
    from src.service.purchase.driven_adapter.model.user_model import UserModel


class TransactionModel(Base):
    __tablename__ = 'ticket_transaction'
    __table_args__ = (
        CheckConstraint('total_idr >= 0', name='ck_transaction_total_non_negative'),
        CheckConstraint('points_used >= 0', name='ck_transaction_points_non_negative'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('user.id'), nullable=False, index=True
    )
    event_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('event.id'), nullable=False, index=True
    )
    coupon_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey('coupon.id'), nullable=True, index=True
    )
    status: Mapped[str] = mapped_column(
        String(40), default='WAITING_FOR_PAYMENT', nullable=False, index=True
    )
    total_idr: Mapped[int] = mapped_column(Integer, nullable=False)
    points_used: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # Relationships
    user: Mapped['UserModel'] = relationship('UserModel', foreign_keys=[user_id])
    event: Mapped['EventModel'] = relationship('EventModel', foreign_keys=[event_id])
