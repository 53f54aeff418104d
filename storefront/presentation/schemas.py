from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from storefront.domain.models import OrderStatus, Product
from storefront.application.views import OrderView, OrderPage


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderItemRequest(CamelModel):
    product: str
    quantity: int
    price: Decimal


class ShippingAddressSchema(CamelModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None


class CreateOrderRequest(CamelModel):
    user: Optional[str] = None
    items: List[OrderItemRequest] = []
    shipping_address: Optional[ShippingAddressSchema] = None
    payment: Optional[str] = None


class ReturnRequest(CamelModel):
    reason: Optional[str] = None


class UpdateStatusRequest(CamelModel):
    status: str
    force: bool = False


class UpdateStockRequest(CamelModel):
    stock: int


class UserSummaryResponse(CamelModel):
    id: str = Field(alias="_id")
    name: Optional[str] = None
    email: Optional[str] = None


class ProductSummaryResponse(CamelModel):
    id: str = Field(alias="_id")
    name: Optional[str] = None
    price: Optional[Decimal] = None


class OrderItemResponse(CamelModel):
    product: ProductSummaryResponse
    quantity: int
    price: Decimal


class OrderResponse(CamelModel):
    id: str = Field(alias="_id")
    user: UserSummaryResponse
    items: List[OrderItemResponse]
    total_amount: Decimal
    status: OrderStatus
    shipping_address: Optional[ShippingAddressSchema] = None
    payment: Optional[str] = None
    return_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_view(cls, view: OrderView):
        address = view.shipping_address
        return cls(
            id=view.id,
            user=UserSummaryResponse(id=view.user.id, name=view.user.name, email=view.user.email),
            items=[
                OrderItemResponse(
                    product=ProductSummaryResponse(
                        id=item.product.id,
                        name=item.product.name,
                        price=item.product.price
                    ),
                    quantity=item.quantity,
                    price=item.price
                )
                for item in view.items
            ],
            total_amount=view.total_amount,
            status=view.status,
            shipping_address=ShippingAddressSchema(**address.model_dump()) if address else None,
            payment=view.payment_id,
            return_reason=view.return_reason,
            created_at=view.created_at,
            updated_at=view.updated_at
        )


class PageMeta(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int


class OrderEnvelope(CamelModel):
    data: OrderResponse


class MessageOrderEnvelope(CamelModel):
    message: str
    data: OrderResponse


class OrderListEnvelope(CamelModel):
    data: List[OrderResponse]
    meta: PageMeta

    @classmethod
    def from_page(cls, page: OrderPage, **extra):
        return cls(
            data=[OrderResponse.from_view(view) for view in page.items],
            meta=PageMeta(
                total=page.total,
                page=page.page,
                limit=page.limit,
                total_pages=page.total_pages
            ),
            **extra
        )


class AdminOrderListEnvelope(OrderListEnvelope):
    message: str


class ProductStockResponse(CamelModel):
    id: str = Field(alias="_id")
    name: str
    price: Decimal
    stock: int
    is_active: bool

    @classmethod
    def from_domain(cls, product: Product):
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            stock=product.stock,
            is_active=product.is_active
        )


class ProductEnvelope(CamelModel):
    message: str
    data: ProductStockResponse


class ErrorBody(BaseModel):
    message: str
    type: str
    errors: Optional[List[str]] = None


class ErrorResponse(BaseModel):
    error: ErrorBody
