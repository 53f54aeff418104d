from decimal import Decimal

import pytest

from storefront.application.create_order import CreateOrderDTO, CreateOrderItemDTO, CreateOrderUseCase
from storefront.domain.exceptions import BadRequestError, InsufficientStockError, ValidationError
from storefront.domain.models import OrderStatus, ShippingAddress

from conftest import OWNER_ID


def order_dto(*items, user_id=OWNER_ID, **kwargs) -> CreateOrderDTO:
    return CreateOrderDTO(
        user_id=user_id,
        items=[
            CreateOrderItemDTO(product_id=product_id, quantity=quantity, price=Decimal(price))
            for product_id, quantity, price in items
        ],
        **kwargs
    )


class TestCreateOrder:
    async def test_creates_pending_order_and_decrements_stock(self, uow, store):
        view = await CreateOrderUseCase(uow)(order_dto(("p1", 2, "10.00")))

        assert view.status == OrderStatus.PENDING
        assert view.total_amount == Decimal("20.00")
        assert store.products["p1"].stock == 3
        assert view.id in store.orders
        assert uow.commits == 1

    async def test_total_is_sum_of_quantity_times_price(self, uow):
        view = await CreateOrderUseCase(uow)(order_dto(("p1", 3, "10.10"), ("p2", 2, "4.55")))

        assert view.total_amount == Decimal("39.40")

    async def test_view_is_populated_with_user_and_products(self, uow):
        view = await CreateOrderUseCase(uow)(order_dto(("p1", 1, "10.00"), ("p2", 1, "4.50")))

        assert view.user.id == OWNER_ID
        assert view.user.name == "Alice"
        assert [item.product.name for item in view.items] == ["Keyboard", "Mouse"]
        assert view.items[1].product.price == Decimal("4.50")

    async def test_user_is_required(self, uow):
        with pytest.raises(ValidationError, match="User is required"):
            await CreateOrderUseCase(uow)(order_dto(("p1", 1, "10.00"), user_id=None))

    async def test_items_are_required(self, uow):
        with pytest.raises(ValidationError, match="At least one item is required"):
            await CreateOrderUseCase(uow)(order_dto())

    async def test_unknown_user(self, uow):
        with pytest.raises(BadRequestError, match="User not found"):
            await CreateOrderUseCase(uow)(order_dto(("p1", 1, "10.00"), user_id="nobody"))

    @pytest.mark.parametrize("product_id", ["missing", "p3"])
    async def test_missing_or_inactive_product(self, uow, store, product_id):
        with pytest.raises(BadRequestError, match="One or more products not found or inactive"):
            await CreateOrderUseCase(uow)(order_dto(("p1", 1, "10.00"), (product_id, 1, "1.00")))

        assert store.products["p1"].stock == 5
        assert store.orders == {}

    async def test_quantity_must_be_positive(self, uow):
        with pytest.raises(ValidationError, match="Quantity must be at least 1"):
            await CreateOrderUseCase(uow)(order_dto(("p1", 0, "10.00")))

    async def test_price_cannot_be_negative(self, uow):
        with pytest.raises(ValidationError, match="Price cannot be negative"):
            await CreateOrderUseCase(uow)(order_dto(("p1", 1, "-1")))

    @pytest.mark.parametrize("price", ["10.001", "0.335"])
    async def test_price_finer_than_cents_is_rejected(self, uow, store, price):
        with pytest.raises(ValidationError, match="Price must have at most 2 decimal places"):
            await CreateOrderUseCase(uow)(order_dto(("p1", 3, price)))

        assert store.products["p1"].stock == 5
        assert store.orders == {}

    async def test_trailing_zeros_in_price_are_accepted(self, uow):
        view = await CreateOrderUseCase(uow)(order_dto(("p1", 2, "10.000")))

        assert view.total_amount == Decimal("20.00")

    async def test_insufficient_stock_changes_nothing(self, uow, store):
        with pytest.raises(InsufficientStockError, match="Insufficient stock for product: Keyboard") as exc_info:
            await CreateOrderUseCase(uow)(order_dto(("p2", 1, "4.50"), ("p1", 6, "10.00")))

        assert exc_info.value.available == 5
        assert exc_info.value.required == 6
        assert store.products["p1"].stock == 5
        assert store.products["p2"].stock == 10
        assert store.orders == {}
        assert uow.products.decrements == []

    async def test_failed_decrement_releases_earlier_items(self, uow, store):
        # each line passes the stock check on its own, together they overdraw p1
        with pytest.raises(InsufficientStockError):
            await CreateOrderUseCase(uow)(order_dto(("p2", 2, "4.50"), ("p1", 3, "10.00"), ("p1", 3, "10.00")))

        assert uow.products.decrements == [("p2", 2), ("p1", 3)]
        assert uow.products.increments == [("p2", 2), ("p1", 3)]
        assert store.products["p1"].stock == 5
        assert store.products["p2"].stock == 10
        assert store.orders == {}

    async def test_shipping_address_is_trimmed_and_stored(self, uow, store):
        address = ShippingAddress(street="  1 Main St ", city="Springfield", postal_code="12345")
        view = await CreateOrderUseCase(uow)(order_dto(("p1", 1, "10.00"), shipping_address=address))

        assert view.shipping_address.street == "1 Main St"
        assert store.orders[view.id].shipping_address.city == "Springfield"

    @pytest.mark.parametrize("field, length, message", [
        ("street", 101, "Street must not exceed 100 characters"),
        ("city", 51, "City must not exceed 50 characters"),
        ("state", 51, "State must not exceed 50 characters"),
        ("country", 51, "Country must not exceed 50 characters"),
        ("postal_code", 21, "Postal code must not exceed 20 characters"),
    ])
    async def test_shipping_address_limits(self, uow, store, field, length, message):
        address = ShippingAddress(**{field: "x" * length})
        with pytest.raises(ValidationError, match=message):
            await CreateOrderUseCase(uow)(order_dto(("p1", 1, "10.00"), shipping_address=address))

        assert store.products["p1"].stock == 5

    async def test_payment_reference_is_kept(self, uow):
        view = await CreateOrderUseCase(uow)(order_dto(("p1", 1, "10.00"), payment_id="pay-42"))

        assert view.payment_id == "pay-42"
