import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("CREATE_TABLES", "false")

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import httpx
import pytest
import pytest_asyncio
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from storefront.database import create_tables
from storefront.domain.models import (
    Order, OrderItem, OrderStatus, Product, Role, User, calculate_total, new_id
)
from storefront.infrastructure.db_schema import users_tbl, products_tbl
from storefront.infrastructure.unit_of_work import UnitOfWork
from storefront.main import create_app

from fakes import FakeStore, FakeUnitOfWork


OWNER_ID = "11111111-1111-4111-8111-111111111111"
OTHER_ID = "22222222-2222-4222-8222-222222222222"
ADMIN_ID = "33333333-3333-4333-8333-333333333333"


def make_order(
    user_id: str,
    items: list[OrderItem],
    status: OrderStatus = OrderStatus.PENDING,
    created_at: datetime | None = None,
    updated_at: datetime | None = None
) -> Order:
    now = datetime.now(timezone.utc)
    return Order(
        id=new_id(),
        user_id=user_id,
        items=items,
        total_amount=calculate_total(items),
        status=status,
        created_at=created_at or now,
        updated_at=updated_at or created_at or now
    )


# --- in-memory store ---

@pytest.fixture
def store():
    store = FakeStore()
    for user_id, name, role in (
        (OWNER_ID, "Alice", Role.USER),
        (OTHER_ID, "Bob", Role.USER),
        (ADMIN_ID, "Root", Role.ADMIN),
    ):
        store.users[user_id] = User(id=user_id, name=name, email=f"{name.lower()}@example.com", role=role)
    store.products["p1"] = Product(id="p1", name="Keyboard", price=Decimal("10.00"), stock=5)
    store.products["p2"] = Product(id="p2", name="Mouse", price=Decimal("4.50"), stock=10)
    store.products["p3"] = Product(id="p3", name="Retired cable", price=Decimal("1.00"), stock=100, is_active=False)
    return store


@pytest.fixture
def uow(store):
    return FakeUnitOfWork(store)


# --- SQLite database ---

@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    await create_tables(engine)
    async with engine.begin() as conn:
        await conn.execute(insert(users_tbl), [
            {"id": OWNER_ID, "name": "Alice", "email": "alice@example.com", "role": Role.USER},
            {"id": OTHER_ID, "name": "Bob", "email": "bob@example.com", "role": Role.USER},
            {"id": ADMIN_ID, "name": "Root", "email": "root@example.com", "role": Role.ADMIN},
        ])
        await conn.execute(insert(products_tbl), [
            {"id": "p1", "name": "Keyboard", "price": Decimal("10.00"), "stock": 5, "is_active": True},
            {"id": "p2", "name": "Mouse", "price": Decimal("4.50"), "stock": 10, "is_active": True},
            {"id": "p3", "name": "Retired cable", "price": Decimal("1.00"), "stock": 100, "is_active": False},
        ])
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def sql_uow(session_factory):
    return UnitOfWork(session_factory)


@pytest_asyncio.fixture
async def client(engine):
    app = create_app(engine, create_schema=False)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def as_user(user_id: str = OWNER_ID) -> dict:
    return {"X-User-Id": user_id, "X-User-Role": "user"}


def as_admin() -> dict:
    return {"X-User-Id": ADMIN_ID, "X-User-Role": "admin"}


def days_ago(days: float) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)
