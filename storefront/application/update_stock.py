import logging

from storefront.domain.models import Product
from storefront.domain.exceptions import ValidationError, NotFoundError


logger = logging.getLogger(__name__)


class UpdateProductStockUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, product_id: str, stock: int) -> Product:
        if stock < 0:
            logger.warning(f"Отрицательный остаток для товара {product_id}: {stock}")
            raise ValidationError("Stock cannot be negative")

        async with self._uow() as uow:
            product = await uow.products.set_stock(product_id, stock)
            if not product:
                logger.warning(f"Товар {product_id} не найден")
                raise NotFoundError("Product not found")
            await uow.commit()
            logger.info(f"Остаток товара {product_id} установлен: {stock}")
            return product
