import logging

from storefront.domain.models import OrderStatus
from storefront.domain.exceptions import BadRequestError, OrderNotFoundError
from storefront.application.get_order import load_order, ensure_order_id
from storefront.application.views import OrderView, build_view


logger = logging.getLogger(__name__)


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise BadRequestError(f'Invalid status: "{value}" is not a valid option.')


class UpdateOrderStatusUseCase:
    """Смена статуса администратором.

    Без force разрешены только переходы из ADMIN_TRANSITIONS. С force статус
    перезаписывается любым значением из OrderStatus, остатки не меняются.
    """

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_id: str, status: str, force: bool = False) -> OrderView:
        new_status = parse_status(status)
        ensure_order_id(order_id)
        logger.info(f"Смена статуса заказа {order_id} на {new_status.value} (force={force})")

        async with self._uow() as uow:
            if force:
                order = await uow.orders.update_status(order_id, new_status)
                if not order:
                    logger.warning(f"Заказ {order_id} не найден")
                    raise OrderNotFoundError("Order not found.")
            else:
                order = await load_order(uow, order_id)
                if not order.can_transition_to(new_status):
                    logger.warning(
                        f"Недопустимый переход заказа {order_id}: {order.status.value} -> {new_status.value}"
                    )
                    raise BadRequestError(
                        f"Cannot change order status from {order.status.value} to {new_status.value}"
                    )
                order = await uow.orders.update_status(order_id, new_status, expected_status=order.status)
                if not order:
                    current = await load_order(uow, order_id)
                    logger.warning(f"Заказ {order_id} изменен параллельно (status: {current.status.value})")
                    raise BadRequestError(
                        f"Cannot change order status from {current.status.value} to {new_status.value}"
                    )

            await uow.commit()
            logger.info(f"Заказ {order_id} отмечен {new_status.value}")
            return await build_view(uow, order)
