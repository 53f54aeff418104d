from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from storefront.application.list_orders import GetAllOrdersUseCase, GetUserOrdersUseCase
from storefront.domain.exceptions import BadRequestError, ValidationError
from storefront.domain.models import OrderItem

from conftest import OTHER_ID, OWNER_ID, make_order

START = datetime(2026, 3, 1, tzinfo=timezone.utc)


@pytest.fixture
def orders(store):
    created = []
    for index in range(12):
        user_id = OWNER_ID if index % 4 else OTHER_ID
        order = make_order(
            user_id,
            [OrderItem(product_id="p2", quantity=index + 1, price=Decimal("4.50"))],
            created_at=START + timedelta(hours=index)
        )
        store.orders[order.id] = order
        created.append(order)
    return created


class TestGetUserOrders:
    async def test_defaults_and_creation_order(self, uow, orders):
        page = await GetUserOrdersUseCase(uow)(OWNER_ID)

        owned = [o for o in orders if o.user_id == OWNER_ID]
        assert page.page == 1
        assert page.limit == 10
        assert page.total == len(owned) == 9
        assert page.total_pages == 1
        assert [view.id for view in page.items] == [o.id for o in owned]

    async def test_second_page(self, uow, orders):
        page = await GetUserOrdersUseCase(uow)(OWNER_ID, page=2, limit=4)

        owned = [o for o in orders if o.user_id == OWNER_ID]
        assert [view.id for view in page.items] == [o.id for o in owned[4:8]]
        assert page.total_pages == 3

    async def test_page_past_the_end_is_empty(self, uow, orders):
        page = await GetUserOrdersUseCase(uow)(OWNER_ID, page=5, limit=4)

        assert page.items == []
        assert page.total == 9

    async def test_unknown_user(self, uow):
        with pytest.raises(BadRequestError, match="User not found"):
            await GetUserOrdersUseCase(uow)("ghost")

    @pytest.mark.parametrize("page, limit", [(0, 10), (1, 0), (-1, 5)])
    async def test_pagination_must_be_positive(self, uow, page, limit):
        with pytest.raises(ValidationError, match="Page and limit must be positive numbers"):
            await GetUserOrdersUseCase(uow)(OWNER_ID, page=page, limit=limit)

    async def test_user_without_orders(self, uow):
        page = await GetUserOrdersUseCase(uow)(OWNER_ID)

        assert page.items == []
        assert page.total == 0
        assert page.total_pages == 0


class TestGetAllOrders:
    async def test_newest_first_across_users(self, uow, orders):
        page = await GetAllOrdersUseCase(uow)(limit=5)

        newest = sorted(orders, key=lambda o: o.created_at, reverse=True)
        assert [view.id for view in page.items] == [o.id for o in newest[:5]]
        assert page.total == 12
        assert page.total_pages == 3
        assert {view.user.id for view in page.items} == {OWNER_ID, OTHER_ID}

    async def test_pagination_must_be_positive(self, uow):
        with pytest.raises(ValidationError):
            await GetAllOrdersUseCase(uow)(page=0)
