import logging
from pydantic import BaseModel
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, List

from storefront.domain.models import (
    CENT, Order, OrderItem, OrderStatus, ShippingAddress, SHIPPING_ADDRESS_LIMITS, calculate_total, new_id
)
from storefront.domain.exceptions import ValidationError, BadRequestError, InsufficientStockError
from storefront.application.stock import reserve_stock
from storefront.application.views import OrderView, build_view


logger = logging.getLogger(__name__)


class CreateOrderItemDTO(BaseModel):
    product_id: str
    quantity: int
    price: Decimal


class CreateOrderDTO(BaseModel):
    user_id: Optional[str] = None
    items: List[CreateOrderItemDTO] = []
    shipping_address: Optional[ShippingAddress] = None
    payment_id: Optional[str] = None


def normalize_shipping_address(address: Optional[ShippingAddress]) -> Optional[ShippingAddress]:
    """Обрезает пробелы и проверяет длину полей адреса"""
    if address is None:
        return None

    values = {}
    for field, (label, max_length) in SHIPPING_ADDRESS_LIMITS.items():
        value = getattr(address, field)
        if value is not None:
            value = value.strip()
            if len(value) > max_length:
                raise ValidationError(f"{label} must not exceed {max_length} characters")
        values[field] = value
    return ShippingAddress(**values)


class CreateOrderUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, order_data: CreateOrderDTO) -> OrderView:
        # 1. Проверка входных данных
        if not order_data.user_id:
            logger.warning("Не указан пользователь")
            raise ValidationError("User is required")
        if not order_data.items:
            logger.warning("Заказ без позиций")
            raise ValidationError("At least one item is required")

        logger.info(f"Создание заказа для пользователя {order_data.user_id}")

        async with self._uow() as uow:
            # 2. Проверка пользователя
            if not await uow.users.exists(order_data.user_id):
                logger.warning(f"Пользователь {order_data.user_id} не найден")
                raise BadRequestError("User not found")

            # 3. Проверка каталога
            product_ids = list(dict.fromkeys(item.product_id for item in order_data.items))
            products = await uow.products.get_by_ids(product_ids, active_only=True)
            if len(products) < len(product_ids):
                logger.warning(f"Не найдены или неактивны товары из {product_ids}")
                raise BadRequestError("One or more products not found or inactive")
            catalog = {product.id: product for product in products}

            for item in order_data.items:
                if item.quantity < 1:
                    logger.warning(f"Неверное количество для товара {item.product_id}")
                    raise ValidationError("Quantity must be at least 1")
                if item.price < 0:
                    logger.warning(f"Отрицательная цена для товара {item.product_id}")
                    raise ValidationError("Price cannot be negative")
                if item.price != item.price.quantize(CENT):
                    logger.warning(f"Цена товара {item.product_id} точнее копейки: {item.price}")
                    raise ValidationError("Price must have at most 2 decimal places")
                product = catalog[item.product_id]
                if product.stock < item.quantity:
                    logger.warning(
                        f"Недостаточно товара {item.product_id}: доступно {product.stock}, "
                        f"требуется {item.quantity}"
                    )
                    raise InsufficientStockError(product.name, product.stock, item.quantity)

            shipping_address = normalize_shipping_address(order_data.shipping_address)

            # 4. Расчет суммы
            items = [
                OrderItem(product_id=item.product_id, quantity=item.quantity, price=item.price)
                for item in order_data.items
            ]
            total_amount = calculate_total(items)

            # 5. Создание заказа и списание остатков в одной транзакции
            now = datetime.now(timezone.utc)
            order = Order(
                id=new_id(),
                user_id=order_data.user_id,
                items=items,
                total_amount=total_amount,
                status=OrderStatus.PENDING,
                shipping_address=shipping_address,
                payment_id=order_data.payment_id,
                created_at=now,
                updated_at=now
            )
            await uow.orders.create(order)
            await reserve_stock(uow.products, items, catalog)
            await uow.commit()
            logger.info(f"Заказ создан: {order.id}, сумма {total_amount}")

            return await build_view(uow, order)
