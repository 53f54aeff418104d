from sqlalchemy import (
    Table, Column, String, Integer, Boolean, Numeric, Enum, DateTime, ForeignKey, CheckConstraint, MetaData
)
from sqlalchemy.sql import func

from storefront.domain.models import OrderStatus, Role

metadata = MetaData()


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


users_tbl = Table(
    "users",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String(100), nullable=False),
    Column("email", String(255), unique=True, nullable=True),
    Column("role", Enum(Role, native_enum=False, values_callable=_enum_values), default=Role.USER),
    Column("created_at", DateTime(timezone=True), server_default=func.now())
)


products_tbl = Table(
    "products",
    metadata,
    Column("id", String, primary_key=True),
    Column("name", String(100), nullable=False),
    Column("price", Numeric(12, 2), nullable=False),
    Column("stock", Integer, nullable=False, default=0),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now()),
    CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
    CheckConstraint("price >= 0", name="ck_products_price_non_negative")
)


orders_tbl = Table(
    "orders",
    metadata,
    Column("id", String, primary_key=True),
    Column("user_id", String, ForeignKey("users.id"), nullable=False, index=True),
    Column("total_amount", Numeric(12, 2), nullable=False),
    Column(
        "status",
        Enum(OrderStatus, native_enum=False, length=32, values_callable=_enum_values),
        default=OrderStatus.PENDING
    ),
    Column("street", String(100), nullable=True),
    Column("city", String(50), nullable=True),
    Column("state", String(50), nullable=True),
    Column("country", String(50), nullable=True),
    Column("postal_code", String(20), nullable=True),
    Column("payment_id", String, nullable=True),
    Column("return_reason", String(500), nullable=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), index=True),
    Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now()),
    CheckConstraint("total_amount >= 0", name="ck_orders_total_non_negative")
)


order_items_tbl = Table(
    "order_items",
    metadata,
    Column("order_id", String, ForeignKey("orders.id", ondelete="CASCADE"), primary_key=True),
    Column("position", Integer, primary_key=True),
    Column("product_id", String, ForeignKey("products.id"), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("price", Numeric(12, 2), nullable=False),
    CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),
    CheckConstraint("price >= 0", name="ck_order_items_price_non_negative")
)
