import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from storefront.domain.models import Caller, ShippingAddress
from storefront.presentation.schemas import (
    CreateOrderRequest, ReturnRequest, UpdateStatusRequest, UpdateStockRequest,
    OrderEnvelope, MessageOrderEnvelope, OrderListEnvelope, AdminOrderListEnvelope,
    OrderResponse, ProductEnvelope, ProductStockResponse, ErrorResponse
)
from storefront.presentation.dependencies import get_caller, get_unit_of_work, require_admin
from storefront.application.create_order import CreateOrderUseCase, CreateOrderDTO, CreateOrderItemDTO
from storefront.application.get_order import GetOrderUseCase
from storefront.application.list_orders import GetUserOrdersUseCase, GetAllOrdersUseCase
from storefront.application.cancel_order import CancelOrderUseCase
from storefront.application.request_return import RequestReturnUseCase
from storefront.application.update_status import UpdateOrderStatusUseCase
from storefront.application.update_stock import UpdateProductStockUseCase
from storefront.infrastructure.unit_of_work import UnitOfWork

router = APIRouter()
logger = logging.getLogger(__name__)

ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


# Фабрики для создания use cases
def get_create_order_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return CreateOrderUseCase(uow)


def get_get_order_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return GetOrderUseCase(uow)


def get_user_orders_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return GetUserOrdersUseCase(uow)


def get_all_orders_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return GetAllOrdersUseCase(uow)


def get_cancel_order_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return CancelOrderUseCase(uow)


def get_request_return_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return RequestReturnUseCase(uow)


def get_update_status_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return UpdateOrderStatusUseCase(uow)


def get_update_stock_use_case(uow: UnitOfWork = Depends(get_unit_of_work)):
    return UpdateProductStockUseCase(uow)


@router.post(
    "/orders",
    response_model=OrderEnvelope,
    responses=ERRORS,
    status_code=status.HTTP_201_CREATED
)
async def create_order(
    request: CreateOrderRequest,
    caller: Caller = Depends(get_caller),
    use_case: CreateOrderUseCase = Depends(get_create_order_use_case)
):
    """Создать новый заказ"""
    if request.user != caller.user_id:
        logger.warning(f"Заказ для пользователя {request.user} создает {caller.user_id} (role: {caller.role.value})")
    address = request.shipping_address
    dto = CreateOrderDTO(
        user_id=request.user,
        items=[
            CreateOrderItemDTO(product_id=item.product, quantity=item.quantity, price=item.price)
            for item in request.items
        ],
        shipping_address=ShippingAddress(**address.model_dump()) if address else None,
        payment_id=request.payment
    )
    view = await use_case(dto)
    return OrderEnvelope(data=OrderResponse.from_view(view))


@router.get("/orders", response_model=OrderListEnvelope, responses=ERRORS)
async def get_user_orders(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    caller: Caller = Depends(get_caller),
    use_case: GetUserOrdersUseCase = Depends(get_user_orders_use_case)
):
    """Заказы текущего пользователя"""
    result = await use_case(caller.user_id, page=page, limit=limit)
    return OrderListEnvelope.from_page(result)


@router.get("/orders/admin/all", response_model=AdminOrderListEnvelope, responses=ERRORS)
async def get_all_orders(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    caller: Caller = Depends(require_admin),
    use_case: GetAllOrdersUseCase = Depends(get_all_orders_use_case)
):
    """Все заказы (только admin)"""
    result = await use_case(page=page, limit=limit)
    return AdminOrderListEnvelope.from_page(result, message="All orders retrieved successfully.")


@router.get("/orders/{order_id}", response_model=OrderEnvelope, responses=ERRORS)
async def get_order(
    order_id: str,
    caller: Caller = Depends(get_caller),
    use_case: GetOrderUseCase = Depends(get_get_order_use_case)
):
    """Получить заказ по ID"""
    view = await use_case(order_id, caller)
    return OrderEnvelope(data=OrderResponse.from_view(view))


@router.patch("/orders/{order_id}/cancel", response_model=MessageOrderEnvelope, responses=ERRORS)
async def cancel_order(
    order_id: str,
    caller: Caller = Depends(get_caller),
    use_case: CancelOrderUseCase = Depends(get_cancel_order_use_case)
):
    """Отменить заказ и вернуть остатки"""
    view = await use_case(order_id, caller)
    return MessageOrderEnvelope(
        message="Order has been cancelled successfully.",
        data=OrderResponse.from_view(view)
    )


@router.patch("/orders/{order_id}/return", response_model=MessageOrderEnvelope, responses=ERRORS)
async def request_return(
    order_id: str,
    request: ReturnRequest,
    caller: Caller = Depends(get_caller),
    use_case: RequestReturnUseCase = Depends(get_request_return_use_case)
):
    """Запросить возврат доставленного заказа"""
    view = await use_case(order_id, caller.user_id, request.reason)
    return MessageOrderEnvelope(
        message="Return has been requested successfully. You will be notified once it is reviewed.",
        data=OrderResponse.from_view(view)
    )


@router.put("/orders/{order_id}/status", response_model=MessageOrderEnvelope, responses=ERRORS)
async def update_order_status(
    order_id: str,
    request: UpdateStatusRequest,
    caller: Caller = Depends(require_admin),
    use_case: UpdateOrderStatusUseCase = Depends(get_update_status_use_case)
):
    """Сменить статус заказа (только admin)"""
    view = await use_case(order_id, request.status, force=request.force)
    return MessageOrderEnvelope(
        message="Order status updated successfully.",
        data=OrderResponse.from_view(view)
    )


@router.patch("/products/{product_id}/stock", response_model=ProductEnvelope, responses=ERRORS)
async def update_product_stock(
    product_id: str,
    request: UpdateStockRequest,
    caller: Caller = Depends(require_admin),
    use_case: UpdateProductStockUseCase = Depends(get_update_stock_use_case)
):
    """Установить остаток товара (только admin)"""
    product = await use_case(product_id, request.stock)
    return ProductEnvelope(
        message="Product stock updated successfully.",
        data=ProductStockResponse.from_domain(product)
    )
