import logging
import math
from typing import Optional

from storefront.config import settings
from storefront.domain.exceptions import ValidationError, BadRequestError
from storefront.application.views import OrderPage, build_views


logger = logging.getLogger(__name__)


def resolve_page(page: Optional[int], limit: Optional[int], default_limit: int) -> tuple[int, int]:
    page = 1 if page is None else page
    limit = default_limit if limit is None else limit
    if page < 1 or limit < 1:
        logger.warning(f"Неверные параметры пагинации: page={page}, limit={limit}")
        raise ValidationError("Page and limit must be positive numbers")
    return page, limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit)


class GetUserOrdersUseCase:
    def __init__(self, unit_of_work, default_limit: int = settings.DEFAULT_PAGE_SIZE):
        self._uow = unit_of_work
        self._default_limit = default_limit

    async def __call__(self, user_id: str, page: Optional[int] = None, limit: Optional[int] = None) -> OrderPage:
        logger.info(f"Получение заказов пользователя {user_id}")
        async with self._uow() as uow:
            if not await uow.users.exists(user_id):
                logger.warning(f"Пользователь {user_id} не найден")
                raise BadRequestError("User not found")

            page, limit = resolve_page(page, limit, self._default_limit)
            offset = (page - 1) * limit
            orders = await uow.orders.list_by_user(user_id, offset=offset, limit=limit)
            total = await uow.orders.count_by_user(user_id)
            logger.info(f"Найдено {len(orders)} из {total} заказов пользователя {user_id}")

            return OrderPage(
                items=await build_views(uow, orders),
                total=total,
                page=page,
                limit=limit,
                total_pages=total_pages(total, limit)
            )


class GetAllOrdersUseCase:
    def __init__(self, unit_of_work, default_limit: int = settings.DEFAULT_PAGE_SIZE):
        self._uow = unit_of_work
        self._default_limit = default_limit

    async def __call__(self, page: Optional[int] = None, limit: Optional[int] = None) -> OrderPage:
        page, limit = resolve_page(page, limit, self._default_limit)
        offset = (page - 1) * limit
        async with self._uow() as uow:
            orders = await uow.orders.list_all(offset=offset, limit=limit)
            total = await uow.orders.count_all()
            logger.info(f"Администратор получил {len(orders)} из {total} заказов")

            return OrderPage(
                items=await build_views(uow, orders),
                total=total,
                page=page,
                limit=limit,
                total_pages=total_pages(total, limit)
            )
