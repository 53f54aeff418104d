from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel

from storefront.domain.models import Order, OrderStatus, ShippingAddress


class UserSummary(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class ProductSummary(BaseModel):
    id: str
    name: Optional[str] = None
    price: Optional[Decimal] = None


class OrderItemView(BaseModel):
    product: ProductSummary
    quantity: int
    price: Decimal


class OrderView(BaseModel):
    """Заказ с подставленными данными пользователя и товаров"""
    id: str
    user: UserSummary
    items: List[OrderItemView]
    total_amount: Decimal
    status: OrderStatus
    shipping_address: Optional[ShippingAddress] = None
    payment_id: Optional[str] = None
    return_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class OrderPage(BaseModel):
    items: List[OrderView]
    total: int
    page: int
    limit: int
    total_pages: int


async def build_views(uow, orders: List[Order]) -> List[OrderView]:
    """Подставляет пользователей и товары одним запросом на каждую таблицу"""
    if not orders:
        return []

    user_ids = list({order.user_id for order in orders})
    product_ids = list({item.product_id for order in orders for item in order.items})
    users = {user.id: user for user in await uow.users.get_by_ids(user_ids)}
    products = {
        product.id: product
        for product in await uow.products.get_by_ids(product_ids, active_only=False)
    }

    views = []
    for order in orders:
        user = users.get(order.user_id)
        items = []
        for item in order.items:
            product = products.get(item.product_id)
            items.append(OrderItemView(
                product=ProductSummary(
                    id=item.product_id,
                    name=product.name if product else None,
                    price=product.price if product else None
                ),
                quantity=item.quantity,
                price=item.price
            ))
        views.append(OrderView(
            id=order.id,
            user=UserSummary(
                id=order.user_id,
                name=user.name if user else None,
                email=user.email if user else None
            ),
            items=items,
            total_amount=order.total_amount,
            status=order.status,
            shipping_address=order.shipping_address,
            payment_id=order.payment_id,
            return_reason=order.return_reason,
            created_at=order.created_at,
            updated_at=order.updated_at
        ))
    return views


async def build_view(uow, order: Order) -> OrderView:
    views = await build_views(uow, [order])
    return views[0]
