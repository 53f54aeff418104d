from typing import Optional, List
from datetime import datetime, timezone
from sqlalchemy import select, insert, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.domain.models import Order, OrderItem, OrderStatus, Product, Role, ShippingAddress, User
from storefront.infrastructure.db_schema import orders_tbl, order_items_tbl, products_tbl, users_tbl
from storefront.application.interfaces import OrderRepository, ProductRepository, UserRepository

ADDRESS_COLUMNS = ("street", "city", "state", "country", "postal_code")


def _aware(value: datetime) -> datetime:
    # SQLite отдает naive datetime
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SQLAlchemyOrderRepository(OrderRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        result = await self._session.execute(
            select(orders_tbl).where(orders_tbl.c.id == order_id)
        )
        row = result.fetchone()
        if not row:
            return None
        items = await self._load_items([row.id])
        return self._to_domain(row, items.get(row.id, []))

    async def create(self, order: Order) -> None:
        address = order.shipping_address.model_dump() if order.shipping_address else {}
        stmt = insert(orders_tbl).values(
            id=order.id,
            user_id=order.user_id,
            total_amount=order.total_amount,
            status=order.status,
            payment_id=order.payment_id,
            return_reason=order.return_reason,
            created_at=order.created_at,
            updated_at=order.updated_at,
            **{column: address.get(column) for column in ADDRESS_COLUMNS}
        )
        await self._session.execute(stmt)
        await self._session.execute(
            insert(order_items_tbl),
            [
                {
                    "order_id": order.id,
                    "position": position,
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "price": item.price
                }
                for position, item in enumerate(order.items)
            ]
        )

    async def list_by_user(self, user_id: str, offset: int, limit: int) -> List[Order]:
        return await self._list(
            select(orders_tbl)
            .where(orders_tbl.c.user_id == user_id)
            .order_by(orders_tbl.c.created_at.asc(), orders_tbl.c.id.asc())
            .offset(offset)
            .limit(limit)
        )

    async def count_by_user(self, user_id: str) -> int:
        result = await self._session.execute(
            select(func.count()).select_from(orders_tbl).where(orders_tbl.c.user_id == user_id)
        )
        return result.scalar_one()

    async def list_all(self, offset: int, limit: int) -> List[Order]:
        return await self._list(
            select(orders_tbl)
            .order_by(orders_tbl.c.created_at.desc(), orders_tbl.c.id.desc())
            .offset(offset)
            .limit(limit)
        )

    async def count_all(self) -> int:
        result = await self._session.execute(select(func.count()).select_from(orders_tbl))
        return result.scalar_one()

    async def update_status(
        self, order_id: str, status: OrderStatus, expected_status: Optional[OrderStatus] = None
    ) -> Optional[Order]:
        stmt = update(orders_tbl).where(orders_tbl.c.id == order_id)
        if expected_status is not None:
            stmt = stmt.where(orders_tbl.c.status == expected_status)
        stmt = stmt.values(
            status=status,
            updated_at=datetime.now(timezone.utc)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get_by_id(order_id)

    async def save(self, order: Order, expected_status: OrderStatus) -> bool:
        stmt = (
            update(orders_tbl)
            .where(
                orders_tbl.c.id == order.id,
                orders_tbl.c.status == expected_status
            )
            .values(
                status=order.status,
                return_reason=order.return_reason,
                updated_at=datetime.now(timezone.utc)
            )
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def _list(self, stmt) -> List[Order]:
        result = await self._session.execute(stmt)
        rows = result.fetchall()
        items = await self._load_items([row.id for row in rows])
        return [self._to_domain(row, items.get(row.id, [])) for row in rows]

    async def _load_items(self, order_ids: List[str]) -> dict[str, List[OrderItem]]:
        if not order_ids:
            return {}
        result = await self._session.execute(
            select(order_items_tbl)
            .where(order_items_tbl.c.order_id.in_(order_ids))
            .order_by(order_items_tbl.c.order_id, order_items_tbl.c.position)
        )
        items: dict[str, List[OrderItem]] = {}
        for row in result.fetchall():
            items.setdefault(row.order_id, []).append(
                OrderItem(product_id=row.product_id, quantity=row.quantity, price=row.price)
            )
        return items

    def _to_domain(self, row, items: List[OrderItem]) -> Order:
        """Трансформация DB → Domain"""
        address = {column: getattr(row, column) for column in ADDRESS_COLUMNS}
        has_address = any(value is not None for value in address.values())
        return Order(
            id=row.id,
            user_id=row.user_id,
            items=items,
            total_amount=row.total_amount,
            status=OrderStatus(row.status),
            shipping_address=ShippingAddress(**address) if has_address else None,
            payment_id=row.payment_id,
            return_reason=row.return_reason,
            created_at=_aware(row.created_at),
            updated_at=_aware(row.updated_at)
        )


class SQLAlchemyProductRepository(ProductRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        result = await self._session.execute(
            select(products_tbl).where(products_tbl.c.id == product_id)
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def get_active(self, product_id: str) -> Optional[Product]:
        result = await self._session.execute(
            select(products_tbl).where(
                products_tbl.c.id == product_id,
                products_tbl.c.is_active.is_(True)
            )
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def get_by_ids(self, product_ids: List[str], active_only: bool = True) -> List[Product]:
        if not product_ids:
            return []
        stmt = select(products_tbl).where(products_tbl.c.id.in_(product_ids))
        if active_only:
            stmt = stmt.where(products_tbl.c.is_active.is_(True))
        result = await self._session.execute(stmt)
        return [self._to_domain(row) for row in result.fetchall()]

    async def exists(self, product_id: str) -> bool:
        result = await self._session.execute(
            select(products_tbl.c.id).where(products_tbl.c.id == product_id)
        )
        return result.fetchone() is not None

    async def decrement_stock(self, product_id: str, quantity: int) -> bool:
        stmt = (
            update(products_tbl)
            .where(
                products_tbl.c.id == product_id,
                products_tbl.c.is_active.is_(True),
                products_tbl.c.stock >= quantity
            )
            .values(
                stock=products_tbl.c.stock - quantity,
                updated_at=datetime.now(timezone.utc)
            )
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def increment_stock(self, product_id: str, quantity: int) -> bool:
        stmt = (
            update(products_tbl)
            .where(products_tbl.c.id == product_id)
            .values(
                stock=products_tbl.c.stock + quantity,
                updated_at=datetime.now(timezone.utc)
            )
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def set_stock(self, product_id: str, stock: int) -> Optional[Product]:
        stmt = (
            update(products_tbl)
            .where(products_tbl.c.id == product_id)
            .values(
                stock=stock,
                updated_at=datetime.now(timezone.utc)
            )
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get_by_id(product_id)

    def _to_domain(self, row) -> Product:
        return Product(
            id=row.id,
            name=row.name,
            price=row.price,
            stock=row.stock,
            is_active=row.is_active
        )


class SQLAlchemyUserRepository(UserRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_id(self, user_id: str) -> Optional[User]:
        result = await self._session.execute(
            select(users_tbl).where(users_tbl.c.id == user_id)
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def get_by_ids(self, user_ids: List[str]) -> List[User]:
        if not user_ids:
            return []
        result = await self._session.execute(
            select(users_tbl).where(users_tbl.c.id.in_(user_ids))
        )
        return [self._to_domain(row) for row in result.fetchall()]

    async def exists(self, user_id: str) -> bool:
        result = await self._session.execute(
            select(users_tbl.c.id).where(users_tbl.c.id == user_id)
        )
        return result.fetchone() is not None

    def _to_domain(self, row) -> User:
        return User(
            id=row.id,
            name=row.name,
            email=row.email,
            role=Role(row.role)
        )
