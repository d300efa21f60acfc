"""
FastAPI router for orders.

Every route needs a signed-in user. Listing all orders and changing
an order's status are reserved for admins.
"""

from fastapi import APIRouter, Depends, Request
from starlette.responses import Response

from app.application.shop.dtos import CreateOrderCommand, OrderLineCommand
from app.application.shop.order_service import OrderService
from app.domain.shop.entities import Principal
from app.interfaces.shop.dependencies import (
    get_admin_principal,
    get_current_principal,
    get_order_service,
)
from app.interfaces.shop.schemas import (
    CreateOrderRequest,
    ErrorResponse,
    OrderResponse,
    OrderStatusRequest,
)
from app.shared.errors.app_error import AppError, ErrorType
from app.shared.errors.projection import created, ok, project
from app.shared.result import Result

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post(
    "",
    status_code=201,
    response_model=OrderResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Place an order",
)
async def create_order(
    body: CreateOrderRequest,
    request: Request,
    principal: Result[Principal, AppError] = Depends(get_current_principal),
    service: OrderService = Depends(get_order_service),
) -> Response:
    """Place an order for the signed-in user.

    Validation and stock problems are both 400; the body message tells
    them apart.
    """
    command = CreateOrderCommand(
        lines=[
            OrderLineCommand(product_id=line.product_id, quantity=line.quantity)
            for line in body.lines
        ]
    )
    result = await principal.bind_async(lambda p: service.create(p.user_id, command))
    return project(
        result,
        lambda dto: created(dto, str(request.url_for("get_order", order_id=dto.id))),
        handled=(
            ErrorType.UNAUTHORIZED,
            ErrorType.VALIDATION,
            ErrorType.NOT_FOUND,
            ErrorType.BUSINESS_RULE,
        ),
    )


@router.get(
    "/me",
    response_model=list[OrderResponse],
    responses={401: {"model": ErrorResponse}},
    summary="List my orders",
)
async def list_my_orders(
    principal: Result[Principal, AppError] = Depends(get_current_principal),
    service: OrderService = Depends(get_order_service),
) -> Response:
    result = await principal.bind_async(lambda p: service.find_by_user_id(p.user_id))
    return project(result, ok, handled=(ErrorType.UNAUTHORIZED,))


@router.get(
    "",
    response_model=list[OrderResponse],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
    summary="List all orders",
)
async def list_orders(
    principal: Result[Principal, AppError] = Depends(get_admin_principal),
    service: OrderService = Depends(get_order_service),
) -> Response:
    result = await principal.bind_async(lambda _: service.find_all())
    return project(result, ok, handled=(ErrorType.UNAUTHORIZED, ErrorType.FORBIDDEN))


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Get an order",
)
async def get_order(
    order_id: int,
    principal: Result[Principal, AppError] = Depends(get_current_principal),
    service: OrderService = Depends(get_order_service),
) -> Response:
    """Owners read their own orders; admins read any order."""
    result = await principal.bind_async(
        lambda p: service.find_for_principal(order_id, p)
    )
    return project(
        result,
        ok,
        handled=(ErrorType.UNAUTHORIZED, ErrorType.FORBIDDEN, ErrorType.NOT_FOUND),
    )


@router.put(
    "/{order_id}/status",
    response_model=OrderResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Change an order's status",
)
async def update_order_status(
    order_id: int,
    body: OrderStatusRequest,
    principal: Result[Principal, AppError] = Depends(get_admin_principal),
    service: OrderService = Depends(get_order_service),
) -> Response:
    result = await principal.bind_async(
        lambda _: service.update_status(order_id, body.status)
    )
    return project(
        result,
        ok,
        handled=(
            ErrorType.UNAUTHORIZED,
            ErrorType.FORBIDDEN,
            ErrorType.VALIDATION,
            ErrorType.NOT_FOUND,
            ErrorType.BUSINESS_RULE,
        ),
    )
