from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Request
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import ForbiddenError
from src.service.purchase.domain.entity.user_entity import UserEntity, UserRole
from src.service.purchase.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class RoleAuthStrategy:
    @staticmethod
    def is_admin(user: UserEntity) -> bool:
        return user.role == UserRole.ADMIN

    @staticmethod
    def is_organizer(user: UserEntity) -> bool:
        return user.role == UserRole.ORGANIZER

    @staticmethod
    def is_customer(user: UserEntity) -> bool:
        return user.role == UserRole.CUSTOMER

    @staticmethod
    def can_view_user(current_user: UserEntity, user_id: int) -> bool:
        return current_user.id == user_id or RoleAuthStrategy.is_admin(current_user)


def _extract_token(request: Request) -> Optional[str]:
    """Cookie first, then `Authorization: Bearer <token>`"""
    if token := request.cookies.get(settings.AUTH_COOKIE_NAME):
        return token
    authorization = request.headers.get('Authorization', '')
    scheme, _, credentials = authorization.partition(' ')
    if scheme.lower() == 'bearer' and credentials:
        return credentials.strip()
    return None


@inject
async def get_current_user(
    request: Request,
    jwt_auth: JwtAuth = Depends(Provide[Container.jwt_auth]),
) -> UserEntity:
    return jwt_auth.get_current_user_info_from_jwt(_extract_token(request))


async def require_admin(current_user: UserEntity = Depends(get_current_user)) -> UserEntity:
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span(
        'auth.require_admin',
        attributes={'user.id': current_user.id or 0, 'user.role': current_user.role.value},
    ):
        if not RoleAuthStrategy.is_admin(current_user):
            raise ForbiddenError('Only admins can perform this action')
        return current_user


async def require_organizer(current_user: UserEntity = Depends(get_current_user)) -> UserEntity:
    if not RoleAuthStrategy.is_organizer(current_user):
        raise ForbiddenError('Only organizers can perform this action')
    return current_user


async def require_customer(current_user: UserEntity = Depends(get_current_user)) -> UserEntity:
    if not RoleAuthStrategy.is_customer(current_user):
        raise ForbiddenError('Only customers can perform this action')
    return current_user
