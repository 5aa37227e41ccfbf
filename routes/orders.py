"""
Order API routes.

Orders are addressed by (user_id, order_id). Status changes go through the
transition table; anything else about an order is read-only here.
"""

from fastapi import APIRouter, Query
import structlog

from models.order import (
    OrderStatus,
    OrderResponse,
    OrderActions,
    OrderListResponse,
    OrderWithActionsResponse,
    OrderStatusUpdate,
    OrderStatusChange,
)
from services.order_service import get_order_service
from routes.errors import handle_error

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.get("/transitions", response_model=list[OrderActions])
async def list_status_transitions():
    """
    The full order status lifecycle.

    One entry per status with the statuses it may move to.
    """
    try:
        service = get_order_service()
        return [service.get_actions(status) for status in OrderStatus]

    except Exception as e:
        return handle_error(e)


@router.get("/status/{status}", response_model=OrderListResponse)
async def list_orders_by_status(
    status: str,
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page")
):
    """
    List orders in one status (case-insensitive), newest first.

    Raises:
        422: Unknown status
    """
    try:
        service = get_order_service()
        orders, total = service.list_by_status(status, page=page, page_size=page_size)

        total_pages = (total + page_size - 1) // page_size

        return OrderListResponse(
            data=orders,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages
        )

    except Exception as e:
        return handle_error(e)


@router.get("/users/{user_id}", response_model=list[OrderResponse])
async def list_user_orders(user_id: str):
    """List all orders placed by a user."""
    try:
        service = get_order_service()
        return service.list_for_user(user_id)

    except Exception as e:
        return handle_error(e)


@router.get("/users/{user_id}/{order_id}", response_model=OrderWithActionsResponse)
async def get_order(user_id: str, order_id: str):
    """
    Get one order with the status changes it allows.

    Raises:
        404: Order not found
    """
    try:
        service = get_order_service()
        return service.get_order(user_id, order_id)

    except Exception as e:
        return handle_error(e)


@router.patch("/users/{user_id}/{order_id}/status", response_model=OrderStatusChange)
async def update_order_status(user_id: str, order_id: str, data: OrderStatusUpdate):
    """
    Move an order to a new status.

    Valid status transitions:
    - Pending -> Processing, Cancelled
    - Processing -> Shipped, Refunded, Cancelled
    - Shipped -> Delivered, Cancelled
    - Delivered, Cancelled, Refunded are terminal

    Raises:
        404: Order not found
        409: Status changed since current_status was read
        422: Transition not allowed
    """
    try:
        service = get_order_service()
        return service.transition(
            user_id,
            order_id,
            current_status=data.current_status,
            requested_status=data.status
        )

    except Exception as e:
        return handle_error(e)
