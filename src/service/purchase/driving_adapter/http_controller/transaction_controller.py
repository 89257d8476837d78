from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from opentelemetry import trace

from src.platform.exception.exceptions import ForbiddenError
from src.platform.logging.loguru_io import Logger
from src.service.purchase.app.command.cancel_transaction_use_case import CancelTransactionUseCase
from src.service.purchase.app.command.create_transaction_use_case import CreateTransactionUseCase
from src.service.purchase.app.command.update_transaction_status_use_case import (
    UpdateTransactionStatusUseCase,
)
from src.service.purchase.app.dto.transaction_filter import TransactionFilter
from src.service.purchase.app.query.get_transaction_stats_use_case import (
    GetTransactionStatsUseCase,
)
from src.service.purchase.app.query.get_transaction_use_case import GetTransactionUseCase
from src.service.purchase.app.query.list_expiring_transactions_use_case import (
    ListExpiringTransactionsUseCase,
)
from src.service.purchase.app.query.list_transactions_use_case import ListTransactionsUseCase
from src.service.purchase.domain.entity.user_entity import UserEntity
from src.service.purchase.domain.enum.transaction_status import TransactionStatus
from src.service.purchase.driving_adapter.http_controller.auth.role_auth import (
    RoleAuthStrategy,
    get_current_user,
    require_admin,
    require_organizer,
)
from src.service.purchase.driving_adapter.http_controller.schema.transaction_schema import (
    TransactionCreateRequest,
    TransactionDetailResponse,
    TransactionPageResponse,
    TransactionResponse,
    TransactionStatsResponse,
    TransactionStatusUpdateRequest,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_transaction(
    request: TransactionCreateRequest,
    current_user: UserEntity = Depends(get_current_user),
    use_case: CreateTransactionUseCase = Depends(CreateTransactionUseCase.depends),
) -> TransactionDetailResponse:
    with tracer.start_as_current_span('controller.create_transaction') as span:
        span.set_attribute('event_id', request.event_id)
        span.set_attribute('user_id', current_user.id or 0)

        detail = await use_case.execute(
            user_id=current_user.id or 0,
            event_id=request.event_id,
            coupon_id=request.coupon_id,
            points_used=request.points_used,
        )
        return TransactionDetailResponse.from_detail(detail)


@router.patch('/{transaction_id}/status')
@Logger.io
async def update_transaction_status(
    transaction_id: int,
    request: TransactionStatusUpdateRequest,
    current_user: UserEntity = Depends(require_admin),
    use_case: UpdateTransactionStatusUseCase = Depends(UpdateTransactionStatusUseCase.depends),
) -> TransactionResponse:
    transaction = await use_case.execute(
        transaction_id=transaction_id,
        status=request.status,
        admin_notes=request.admin_notes,
    )
    return TransactionResponse.from_entity(transaction)


@router.delete('/{transaction_id}')
@Logger.io
async def cancel_transaction(
    transaction_id: int,
    current_user: UserEntity = Depends(get_current_user),
    use_case: CancelTransactionUseCase = Depends(CancelTransactionUseCase.depends),
) -> TransactionResponse:
    transaction = await use_case.execute(
        transaction_id=transaction_id, user_id=current_user.id or 0
    )
    return TransactionResponse.from_entity(transaction)


@router.get('')
@Logger.io
async def list_transactions(
    user_id: Optional[int] = None,
    event_id: Optional[int] = None,
    transaction_status: Optional[TransactionStatus] = Query(default=None, alias='status'),
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    min_amount: Optional[int] = None,
    max_amount: Optional[int] = None,
    page: int = 1,
    limit: int = 10,
    current_user: UserEntity = Depends(require_admin),
    use_case: ListTransactionsUseCase = Depends(ListTransactionsUseCase.depends),
) -> TransactionPageResponse:
    result = await use_case.execute(
        filters=TransactionFilter(
            user_id=user_id,
            event_id=event_id,
            status=transaction_status,
            date_from=date_from,
            date_to=date_to,
            min_amount=min_amount,
            max_amount=max_amount,
            page=page,
            limit=limit,
        )
    )
    return TransactionPageResponse.from_page(result)


@router.get('/me')
@Logger.io
async def list_my_transactions(
    page: int = 1,
    limit: int = 10,
    current_user: UserEntity = Depends(get_current_user),
    use_case: ListTransactionsUseCase = Depends(ListTransactionsUseCase.depends),
) -> TransactionPageResponse:
    result = await use_case.list_by_user(user_id=current_user.id or 0, page=page, limit=limit)
    return TransactionPageResponse.from_page(result)


@router.get('/organizer/me')
@Logger.io
async def list_organizer_transactions(
    page: int = 1,
    limit: int = 10,
    current_user: UserEntity = Depends(require_organizer),
    use_case: ListTransactionsUseCase = Depends(ListTransactionsUseCase.depends),
) -> TransactionPageResponse:
    result = await use_case.list_by_organizer(
        organizer_id=current_user.id or 0, page=page, limit=limit
    )
    return TransactionPageResponse.from_page(result)


@router.get('/user/{user_id}')
@Logger.io
async def list_user_transactions(
    user_id: int,
    page: int = 1,
    limit: int = 10,
    current_user: UserEntity = Depends(get_current_user),
    use_case: ListTransactionsUseCase = Depends(ListTransactionsUseCase.depends),
) -> TransactionPageResponse:
    if not RoleAuthStrategy.can_view_user(current_user, user_id):
        raise ForbiddenError('You can only view your own transactions')
    result = await use_case.list_by_user(user_id=user_id, page=page, limit=limit)
    return TransactionPageResponse.from_page(result)


@router.get('/stats')
@Logger.io
async def get_transaction_stats(
    user_id: Optional[int] = None,
    event_id: Optional[int] = None,
    current_user: UserEntity = Depends(require_admin),
    use_case: GetTransactionStatsUseCase = Depends(GetTransactionStatsUseCase.depends),
) -> TransactionStatsResponse:
    stats = await use_case.execute(user_id=user_id, event_id=event_id)
    return TransactionStatsResponse.from_stats(stats)


@router.get('/expiring')
@Logger.io
async def list_expiring_transactions(
    limit: int = Query(default=10, ge=1, le=100),
    current_user: UserEntity = Depends(require_admin),
    use_case: ListExpiringTransactionsUseCase = Depends(ListExpiringTransactionsUseCase.depends),
) -> List[TransactionDetailResponse]:
    details = await use_case.execute(limit=limit)
    return [TransactionDetailResponse.from_detail(detail) for detail in details]


@router.get('/{transaction_id}')
@Logger.io
async def get_transaction(
    transaction_id: int,
    current_user: UserEntity = Depends(get_current_user),
    use_case: GetTransactionUseCase = Depends(GetTransactionUseCase.depends),
) -> TransactionDetailResponse:
    detail = await use_case.execute(transaction_id=transaction_id)
    if not RoleAuthStrategy.can_view_user(current_user, detail.transaction.user_id):
        raise ForbiddenError('You can only view your own transactions')
    return TransactionDetailResponse.from_detail(detail)
