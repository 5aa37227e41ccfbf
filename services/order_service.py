"""
Order service: order lookups and status transitions.

Orders belong to a user (rows carry userId). This service never creates or
deletes orders; cancelling is a status change.
"""

from datetime import datetime, timezone
from typing import Optional, Union
import structlog

from config import get_supabase_client, settings
from models.order import (
    OrderStatus,
    OrderResponse,
    OrderActions,
    OrderWithActionsResponse,
    OrderStatusChange,
    allowed_next_statuses,
    sorted_statuses,
)
from exceptions import (
    OrderNotFoundError,
    UnknownOrderStatusError,
    InvalidStatusTransitionError,
    ConflictingTransitionError,
    DatabaseError,
)

logger = structlog.get_logger(__name__)


class OrderService:
    """
    Order business logic.

    Handles order reads for the dashboard tables and validated status
    changes.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = settings.orders_table

    # ===================
    # READ OPERATIONS
    # ===================

    def get_order(self, user_id: str, order_id: str) -> OrderWithActionsResponse:
        """
        Get a single order with the status changes it allows.

        Args:
            user_id: Owning user id
            order_id: Order id

        Returns:
            OrderWithActionsResponse

        Raises:
            OrderNotFoundError: If the user has no such order
            UnknownOrderStatusError: If the stored status is not recognized
        """
        logger.debug("getting_order", user_id=user_id, order_id=order_id)

        row = self._fetch(user_id, order_id)
        if row is None:
            raise OrderNotFoundError(user_id, order_id)

        order = self._to_response(row)
        return OrderWithActionsResponse(
            **order.model_dump(),
            actions=OrderActions.for_status(order.status),
        )

    def list_by_status(
        self,
        status: Union[OrderStatus, str],
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[OrderResponse], int]:
        """
        Get orders in one status, newest first.

        Matches both the canonical and the lower-case stored spelling.

        Args:
            status: Status to filter by
            page: Page number (1-indexed)
            page_size: Items per page

        Returns:
            Tuple of (orders list, total count)
        """
        status = OrderStatus.parse(status)
        logger.info("getting_orders_by_status", status=status.value, page=page, page_size=page_size)

        try:
            offset = (page - 1) * page_size
            result = (
                self.db.table(self.table)
                .select("*", count="exact")
                .in_("status", [status.value, status.value.lower()])
                .order("createdAt", desc=True)
                .range(offset, offset + page_size - 1)
                .execute()
            )
        except Exception as e:
            logger.error("get_orders_by_status_failed", status=status.value, error=str(e))
            raise DatabaseError("select", str(e))

        orders = [self._to_response(row) for row in result.data or []]
        total = result.count or 0

        logger.info("orders_retrieved", status=status.value, count=len(orders), total=total)

        return orders, total

    def list_for_user(self, user_id: str) -> list[OrderResponse]:
        """
        Get all orders placed by one user, newest first.

        Args:
            user_id: Owning user id

        Returns:
            List of orders (empty if none)
        """
        logger.debug("getting_user_orders", user_id=user_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("userId", user_id)
                .order("createdAt", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error("get_user_orders_failed", user_id=user_id, error=str(e))
            raise DatabaseError("select", str(e))

        return [self._to_response(row) for row in result.data or []]

    def get_actions(self, status: Union[OrderStatus, str]) -> OrderActions:
        """Status changes to offer for an order currently in status."""
        return OrderActions.for_status(OrderStatus.parse(status))

    # ===================
    # WRITE OPERATIONS
    # ===================

    def transition(
        self,
        user_id: str,
        order_id: str,
        current_status: Union[OrderStatus, str],
        requested_status: Union[OrderStatus, str],
    ) -> OrderStatusChange:
        """
        Move one order to a new status.

        Writes status and updatedAt on the single order, nothing else. When
        settings.strict_status_transitions is on, the write only applies if
        the stored status still equals current_status (as the caller read
        it); otherwise the last write wins.

        Args:
            user_id: Owning user id
            order_id: Order id
            current_status: Status the caller last read (any capitalization)
            requested_status: Status to move to

        Returns:
            OrderStatusChange with the new status and timestamp

        Raises:
            UnknownOrderStatusError: If current_status is not a known status
            InvalidStatusTransitionError: If requested_status is not allowed
                from current_status (always the case from a terminal status)
            ConflictingTransitionError: If the stored status moved (strict mode)
            OrderNotFoundError: If the order does not exist
        """
        current = OrderStatus.parse(current_status)
        allowed = allowed_next_statuses(current)
        allowed_values = [s.value for s in sorted_statuses(allowed)]

        try:
            requested = OrderStatus.parse(requested_status)
        except UnknownOrderStatusError:
            requested = None

        if requested is None or requested not in allowed:
            logger.warning(
                "order_status_transition_rejected",
                user_id=user_id,
                order_id=order_id,
                from_status=current.value,
                to_status=getattr(requested_status, "value", requested_status),
            )
            raise InvalidStatusTransitionError(
                current_status=current.value,
                new_status=requested.value if requested else str(requested_status),
                allowed=allowed_values,
                order_id=order_id
            )

        logger.info(
            "updating_order_status",
            user_id=user_id,
            order_id=order_id,
            from_status=current.value,
            to_status=requested.value
        )

        updated_at = datetime.now(timezone.utc)
        expected = current_status.value if isinstance(current_status, OrderStatus) else current_status

        try:
            query = (
                self.db.table(self.table)
                .update({
                    "status": requested.value,
                    "updatedAt": updated_at.isoformat(),
                })
                .eq("userId", user_id)
                .eq("id", order_id)
            )
            if settings.strict_status_transitions:
                # Any spelling of the status the caller read
                query = query.in_("status", sorted({expected, current.value, current.value.lower()}))
            result = query.execute()

        except Exception as e:
            logger.error(
                "update_order_status_failed",
                user_id=user_id,
                order_id=order_id,
                error=str(e)
            )
            raise DatabaseError("update", str(e), details={"order_id": order_id})

        if not result.data:
            self._raise_missing_update(user_id, order_id, expected)

        logger.info(
            "order_status_updated",
            user_id=user_id,
            order_id=order_id,
            from_status=current.value,
            to_status=requested.value
        )

        return OrderStatusChange(
            user_id=user_id,
            order_id=order_id,
            previous_status=current,
            status=requested,
            updated_at=updated_at,
        )

    def _raise_missing_update(self, user_id: str, order_id: str, expected: str) -> None:
        """Explain an update that matched no row."""
        row = self._fetch(user_id, order_id)
        if row is None:
            raise OrderNotFoundError(user_id, order_id)

        logger.warning(
            "order_status_conflict",
            user_id=user_id,
            order_id=order_id,
            expected_status=expected,
            stored_status=row.get("status")
        )
        raise ConflictingTransitionError(order_id, expected, row.get("status"))

    # ===================
    # HELPERS
    # ===================

    def _fetch(self, user_id: str, order_id: str) -> Optional[dict]:
        """Raw order row, or None when missing."""
        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("userId", user_id)
                .eq("id", order_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_order_failed", user_id=user_id, order_id=order_id, error=str(e))
            raise DatabaseError("select", str(e), details={"order_id": order_id})

        return result.data[0] if result.data else None

    def _to_response(self, row: dict) -> OrderResponse:
        """Parse a stored row; unknown statuses are rejected here."""
        return OrderResponse(
            **{
                **row,
                "id": str(row["id"]),
                "userId": str(row.get("userId") or ""),
            }
        )


# Singleton instance
_order_service: Optional[OrderService] = None


def get_order_service() -> OrderService:
    """Get or create OrderService instance."""
    global _order_service
    if _order_service is None:
        _order_service = OrderService()
    return _order_service
