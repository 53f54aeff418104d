import logging

from storefront.domain.models import Caller, OrderStatus
from storefront.domain.exceptions import AuthenticationError, BadRequestError
from storefront.application.get_order import load_order
from storefront.application.stock import release_stock
from storefront.application.views import OrderView, build_view


logger = logging.getLogger(__name__)


class CancelOrderUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_id: str, caller: Caller) -> OrderView:
        logger.info(f"Отмена заказа {order_id} пользователем {caller.user_id}")

        async with self._uow() as uow:
            order = await load_order(uow, order_id)

            if not caller.is_admin and not order.is_owned_by(caller.user_id):
                logger.warning(f"Попытка отмены чужого заказа {order_id} пользователем {caller.user_id}")
                raise AuthenticationError("Unauthorized to cancel this order")

            if not order.can_be_cancelled():
                logger.warning(f"Заказ {order_id} не может быть отменен (status: {order.status.value})")
                raise BadRequestError(f"Order cannot be cancelled. Status: {order.status.value}")

            # Статус меняется условно, остатки возвращает только тот, кто его сменил
            current_status = order.status
            order.status = OrderStatus.CANCELLED
            if not await uow.orders.save(order, expected_status=current_status):
                status = (await load_order(uow, order_id)).status
                logger.warning(f"Заказ {order_id} изменен параллельно (status: {status.value})")
                raise BadRequestError(f"Order cannot be cancelled. Status: {status.value}")

            await release_stock(uow.products, order.items)
            await uow.commit()
            logger.info(f"Заказ {order_id} отмечен CANCELLED, остатки возвращены")

            return await build_view(uow, await load_order(uow, order_id))
