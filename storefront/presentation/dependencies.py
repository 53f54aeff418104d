import logging
from typing import Optional
from fastapi import Depends, Header, Request

from storefront.domain.models import Caller, Role
from storefront.domain.exceptions import AuthenticationError
from storefront.infrastructure.unit_of_work import UnitOfWork


logger = logging.getLogger(__name__)


def get_unit_of_work(request: Request) -> UnitOfWork:
    return UnitOfWork(request.app.state.session_factory)


def get_caller(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None)
) -> Caller:
    """Пользователь уже аутентифицирован шлюзом и передан в заголовках"""
    if not x_user_id:
        logger.warning("Запрос без X-User-Id")
        raise AuthenticationError("User not authenticated")
    role = Role.ADMIN if x_user_role == Role.ADMIN.value else Role.USER
    return Caller(user_id=x_user_id, role=role)


def require_admin(caller: Caller = Depends(get_caller)) -> Caller:
    if not caller.is_admin:
        logger.warning(f"Доступ запрещен: требуется роль admin ({caller.user_id})")
        raise AuthenticationError("Access denied: Admin role required")
    logger.info(f"Доступ администратора: {caller.user_id}")
    return caller
