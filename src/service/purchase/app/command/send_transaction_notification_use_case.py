"""Notification use case for transaction domain events."""

from src.platform.logging.loguru_io import Logger
from src.service.purchase.app.interface.i_notification_sender import INotificationSender
from src.service.purchase.domain.domain_event.transaction_domain_event import (
    TransactionConfirmedEvent,
    TransactionDomainEvent,
    TransactionRejectedEvent,
)


TRANSACTION_ACCEPTED_TEMPLATE = 'transaction-accepted'
TRANSACTION_ACCEPTED_SUBJECT = 'Congratulations! Your ticket purchase is confirmed!'
TRANSACTION_REJECTED_TEMPLATE = 'transaction-rejected'
TRANSACTION_REJECTED_SUBJECT = 'Transaction Rejected'


class SendTransactionNotificationUseCase:
    def __init__(
        self,
        *,
        notification_sender: INotificationSender,
        dashboard_url: str,
        checkout_url: str,
    ) -> None:
        self.notification_sender = notification_sender
        self.dashboard_url = dashboard_url
        self.checkout_url = checkout_url

    @Logger.io
    async def handle_transaction_confirmed(self, event: TransactionConfirmedEvent) -> None:
        await self.notification_sender.notify(
            to_email=event.user_email,
            subject=TRANSACTION_ACCEPTED_SUBJECT,
            template_name=TRANSACTION_ACCEPTED_TEMPLATE,
            context={
                'user_name': event.user_name,
                'event_title': event.event_title,
                'total_idr': event.total_idr,
                'transaction_id': event.transaction_id,
                'transaction_date': event.transaction_date.strftime('%Y-%m-%d %H:%M'),
                'dashboard_link': self.dashboard_url,
            },
        )

    @Logger.io
    async def handle_transaction_rejected(self, event: TransactionRejectedEvent) -> None:
        await self.notification_sender.notify(
            to_email=event.user_email,
            subject=TRANSACTION_REJECTED_SUBJECT,
            template_name=TRANSACTION_REJECTED_TEMPLATE,
            context={
                'user_name': event.user_name,
                'event_title': event.event_title,
                'total_idr': event.total_idr,
                'transaction_id': event.transaction_id,
                'transaction_date': event.transaction_date.strftime('%Y-%m-%d %H:%M'),
                'reason': event.reason,
                'dashboard_link': self.dashboard_url,
                'retry_link': self.checkout_url,
            },
        )

    @Logger.io
    async def handle_notification(self, event: TransactionDomainEvent) -> None:
        if isinstance(event, TransactionConfirmedEvent):
            await self.handle_transaction_confirmed(event)
        elif isinstance(event, TransactionRejectedEvent):
            await self.handle_transaction_rejected(event)
        else:
            Logger.base.warning(f'📭 [NOTIFY] No notification for {type(event).__name__}')
