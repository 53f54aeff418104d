import logging

from storefront.domain.models import Caller, Order, is_valid_id
from storefront.domain.exceptions import BadRequestError, OrderNotFoundError, AuthenticationError
from storefront.application.views import OrderView, build_view


logger = logging.getLogger(__name__)


def ensure_order_id(order_id: str) -> None:
    if not is_valid_id(order_id):
        logger.warning(f"Неверный id заказа: {order_id}")
        raise BadRequestError("Invalid order ID")


async def load_order(uow, order_id: str) -> Order:
    ensure_order_id(order_id)
    order = await uow.orders.get_by_id(order_id)
    if not order:
        logger.warning(f"Заказ {order_id} не найден")
        raise OrderNotFoundError()
    return order


class GetOrderUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_id: str, caller: Caller) -> OrderView:
        logger.info(f"Получение заказа {order_id} пользователем {caller.user_id}")
        async with self._uow() as uow:
            order = await load_order(uow, order_id)
            if not caller.is_admin and not order.is_owned_by(caller.user_id):
                logger.warning(f"Нет доступа к заказу {order_id} для {caller.user_id}")
                raise AuthenticationError("Unauthorized to view this order")
            return await build_view(uow, order)
