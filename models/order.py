"""
Customer order schemas and the order status lifecycle.

Status values are parsed into OrderStatus as soon as they are read from the
store, so every comparison downstream works on the closed enum.
"""

from pydantic import Field, field_validator
from typing import Any, Optional, Union
from enum import Enum
from datetime import datetime

from models.base import BaseSchema, DocumentSchema
from exceptions import UnknownOrderStatusError


class OrderStatus(str, Enum):
    """Order status values."""
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    REFUNDED = "Refunded"

    @classmethod
    def parse(cls, value: Union[str, "OrderStatus"]) -> "OrderStatus":
        """
        Parse a stored or requested status.

        Older orders were written as "pending" etc., so the value is
        capitalized before lookup.

        Raises:
            UnknownOrderStatusError: If the value is not a known status
        """
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().capitalize()
        try:
            return cls(normalized)
        except ValueError:
            raise UnknownOrderStatusError(value, [s.value for s in cls])


# Allowed next statuses for each status
STATUS_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.REFUNDED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

TERMINAL_STATUSES: frozenset[OrderStatus] = frozenset(
    status for status, allowed in STATUS_TRANSITIONS.items() if not allowed
)

# Status assigned by checkout to every new order
INITIAL_STATUS = OrderStatus.PENDING


def allowed_next_statuses(current: OrderStatus) -> frozenset[OrderStatus]:
    """Statuses reachable in one step from current (empty when terminal)."""
    return STATUS_TRANSITIONS[current]


def is_valid_status_transition(current: OrderStatus, new: OrderStatus) -> bool:
    """
    Check if status transition is valid.

    Rules:
    - Only edges of STATUS_TRANSITIONS are allowed (no skipping ahead)
    - Delivered, Cancelled and Refunded are terminal
    - Staying on the same status is not a transition
    """
    return new in STATUS_TRANSITIONS[current]


def sorted_statuses(statuses) -> list[OrderStatus]:
    """Order statuses by lifecycle position (declaration order)."""
    order = list(OrderStatus)
    return sorted(statuses, key=order.index)


# ===================
# ORDER SCHEMAS
# ===================

class CustomerInfo(DocumentSchema):
    """Customer contact details captured at checkout."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class OrderResponse(DocumentSchema):
    """Order as read from the order store."""

    id: str = Field(..., description="Order id")
    user_id: str = Field(..., description="Owning user id")
    status: OrderStatus = Field(..., description="Current status")
    amount: float = Field(default=0.0, description="Order total")
    items: list[dict[str, Any]] = Field(default_factory=list, description="Line items")
    customer_info: CustomerInfo = Field(default_factory=CustomerInfo)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v: Any) -> OrderStatus:
        """Reject unknown stored statuses, tolerate lowercase ones."""
        return OrderStatus.parse(v)

    @field_validator("amount", mode="before")
    @classmethod
    def default_amount(cls, v: Any) -> Any:
        """Missing amount reads as 0."""
        return 0.0 if v is None else v

    @field_validator("items", mode="before")
    @classmethod
    def default_items(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("customer_info", mode="before")
    @classmethod
    def default_customer_info(cls, v: Any) -> Any:
        return {} if v is None else v


class OrderActions(DocumentSchema):
    """Which status changes to offer for an order."""

    status: OrderStatus
    allowed_next: list[OrderStatus] = Field(default_factory=list)
    is_terminal: bool

    @classmethod
    def for_status(cls, status: OrderStatus) -> "OrderActions":
        allowed = allowed_next_statuses(status)
        return cls(
            status=status,
            allowed_next=sorted_statuses(allowed),
            is_terminal=not allowed,
        )


class OrderWithActionsResponse(OrderResponse):
    """Order detail including the status changes it allows."""

    actions: OrderActions


class OrderListResponse(BaseSchema):
    """List of orders with pagination."""

    data: list[OrderResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class OrderStatusUpdate(DocumentSchema):
    """
    Request a status change.

    current_status is the status the caller last read; it is checked
    against the store before writing.
    """

    current_status: str = Field(..., min_length=1, description="Status as last read")
    status: str = Field(..., min_length=1, description="Requested status")


class OrderStatusChange(DocumentSchema):
    """Result of a successful status change."""

    user_id: str
    order_id: str
    previous_status: OrderStatus
    status: OrderStatus
    updated_at: datetime
