import logging
from typing import List

from storefront.domain.models import OrderItem, Product
from storefront.domain.exceptions import InsufficientStockError
from storefront.application.interfaces import ProductRepository


logger = logging.getLogger(__name__)


async def reserve_stock(products: ProductRepository, items: List[OrderItem], catalog: dict[str, Product]) -> None:
    """Списывает остатки по позициям заказа.

    Каждое списание выполняется отдельным условным UPDATE. Если списать не удалось,
    уже списанные позиции возвращаются и выбрасывается InsufficientStockError.
    """
    reserved: List[OrderItem] = []
    for item in items:
        if await products.decrement_stock(item.product_id, item.quantity):
            reserved.append(item)
            continue

        logger.warning(f"Не удалось списать {item.quantity} шт. товара {item.product_id}")
        await release_stock(products, reserved)
        product = catalog[item.product_id]
        current = await products.get_by_id(item.product_id)
        available = current.stock if current else 0
        raise InsufficientStockError(product.name, available, item.quantity)


async def release_stock(products: ProductRepository, items: List[OrderItem]) -> None:
    """Возвращает остатки по позициям заказа"""
    for item in items:
        restored = await products.increment_stock(item.product_id, item.quantity)
        if not restored:
            logger.warning(f"Товар {item.product_id} не найден при возврате остатка")
