import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from storefront.config import settings
from storefront.domain.models import OrderStatus, RETURN_REASON_MAX_LENGTH
from storefront.domain.exceptions import ValidationError, AuthenticationError, BadRequestError
from storefront.application.get_order import load_order
from storefront.application.views import OrderView, build_view


logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_reason(reason: Optional[str]) -> str:
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("Return reason is required")
    if len(reason) > RETURN_REASON_MAX_LENGTH:
        raise ValidationError(f"Return reason must not exceed {RETURN_REASON_MAX_LENGTH} characters")
    return reason


class RequestReturnUseCase:
    def __init__(
        self,
        unit_of_work,
        return_window_days: int = settings.RETURN_WINDOW_DAYS,
        clock: Callable[[], datetime] = utcnow
    ):
        self._uow = unit_of_work
        self._return_window_days = return_window_days
        self._clock = clock

    async def __call__(self, order_id: str, user_id: str, reason: Optional[str]) -> OrderView:
        logger.info(f"Запрос возврата заказа {order_id} пользователем {user_id}")
        reason = normalize_reason(reason)

        async with self._uow() as uow:
            order = await load_order(uow, order_id)

            # Возврат запрашивает только владелец, администратор не может
            if not order.is_owned_by(user_id):
                logger.warning(f"Попытка возврата чужого заказа {order_id} пользователем {user_id}")
                raise AuthenticationError("Unauthorized to request a return for this order")

            if not order.can_request_return():
                logger.warning(f"Возврат невозможен для заказа {order_id} (status: {order.status.value})")
                raise BadRequestError(
                    f"A return can only be requested for a delivered order. Current status: {order.status.value}"
                )

            days = order.days_since_update(self._clock())
            if days > self._return_window_days:
                logger.warning(f"Срок возврата истек для заказа {order_id}: {days} дн.")
                raise BadRequestError(
                    f"The {self._return_window_days}-day return window for this order has expired."
                )

            order.status = OrderStatus.RETURN_REQUESTED
            order.return_reason = reason
            if not await uow.orders.save(order, expected_status=OrderStatus.DELIVERED):
                status = (await load_order(uow, order_id)).status
                logger.warning(f"Заказ {order_id} изменен параллельно (status: {status.value})")
                raise BadRequestError(
                    f"A return can only be requested for a delivered order. Current status: {status.value}"
                )
            await uow.commit()
            logger.info(f"Возврат запрошен для заказа {order_id}")

            return await build_view(uow, await load_order(uow, order_id))
