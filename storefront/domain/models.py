import math
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import BaseModel


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURN_REQUESTED = "return requested"
    RETURN_APPROVED = "return approved"
    RETURN_REJECTED = "return rejected"
    RETURNED = "returned"


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


# Переходы, доступные администратору без force. Отмену делает только
# cancel_order, он возвращает остаток на склад.
ADMIN_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.RETURN_REQUESTED: frozenset({OrderStatus.RETURN_APPROVED, OrderStatus.RETURN_REJECTED}),
    OrderStatus.RETURN_APPROVED: frozenset({OrderStatus.RETURNED}),
    OrderStatus.RETURN_REJECTED: frozenset(),
    OrderStatus.RETURNED: frozenset(),
}

CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.PROCESSING})

# поле -> (название, максимальная длина)
SHIPPING_ADDRESS_LIMITS = {
    "street": ("Street", 100),
    "city": ("City", 50),
    "state": ("State", 50),
    "country": ("Country", 50),
    "postal_code": ("Postal code", 20),
}

RETURN_REASON_MAX_LENGTH = 500

CENT = Decimal("0.01")


class Caller(BaseModel):
    """Аутентифицированный вызывающий: id пользователя и роль"""
    user_id: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class ShippingAddress(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None


class OrderItem(BaseModel):
    """Value Object: позиция заказа"""
    product_id: str
    quantity: int
    price: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


class Order(BaseModel):
    """Domain Entity: заказ"""
    id: str
    user_id: str
    items: list[OrderItem]
    total_amount: Decimal
    status: OrderStatus
    shipping_address: Optional[ShippingAddress] = None
    payment_id: Optional[str] = None
    return_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    def is_owned_by(self, user_id: str) -> bool:
        return self.user_id == user_id

    def can_be_cancelled(self) -> bool:
        """Бизнес-правило: отменить можно только pending или processing"""
        return self.status in CANCELLABLE_STATUSES

    def can_request_return(self) -> bool:
        """Бизнес-правило: возврат только для delivered заказа"""
        return self.status == OrderStatus.DELIVERED

    def can_transition_to(self, status: OrderStatus) -> bool:
        return status in ADMIN_TRANSITIONS[self.status]

    def days_since_update(self, now: datetime) -> int:
        # updated_at используется как дата доставки, неполный день считается целым
        seconds = abs((now - self.updated_at).total_seconds())
        return math.ceil(seconds / 86400)


class Product(BaseModel):
    """Value Object: товар из каталога"""
    id: str
    name: str
    price: Decimal
    stock: int
    is_active: bool = True


class User(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    role: Role = Role.USER


def calculate_total(items: list[OrderItem]) -> Decimal:
    total = sum((item.subtotal for item in items), Decimal("0"))
    return total.quantize(CENT)


def new_id() -> str:
    return str(uuid.uuid4())


def is_valid_id(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True
