from src.platform.logging.loguru_io import Logger
from src.platform.metrics.purchase_metrics import metrics
from src.service.purchase.app.command.send_transaction_notification_use_case import (
    SendTransactionNotificationUseCase,
)
from src.service.purchase.app.interface.i_transaction_event_publisher import (
    ITransactionEventPublisher,
)
from src.service.purchase.domain.domain_event.transaction_domain_event import (
    TransactionDomainEvent,
)


class InProcessTransactionEventPublisher(ITransactionEventPublisher):
    """
    Dispatches transaction events to the notification use case in the same process.

    The status change is already committed when this runs; a failing subscriber
    is logged and counted, never propagated.
    """

    def __init__(self, *, notification_use_case: SendTransactionNotificationUseCase) -> None:
        self.notification_use_case = notification_use_case

    async def publish(self, *, event: TransactionDomainEvent) -> None:
        event_type = type(event).__name__
        try:
            await self.notification_use_case.handle_notification(event)
            Logger.base.info(
                f'📤 [PUBLISH] {event_type} delivered for transaction {event.transaction_id}'
            )
        except Exception as e:
            metrics.record_notification_failure(event_type=event_type)
            Logger.base.error(
                f'📭 [PUBLISH] {event_type} for transaction {event.transaction_id} failed: {e}'
            )
