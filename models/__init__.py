"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    DocumentSchema,
)
from models.product import (
    ProductStatus,
    ImageStatus,
    CategoryRef,
    PendingImages,
    VariantDraft,
    ProductDraft,
    ProductRecord,
)
from models.ingest import (
    DuplicateSkuPolicy,
    SkuConflict,
    GroupingResult,
    StagedUpload,
    CommitRequest,
    CommitResult,
)
from models.order import (
    OrderStatus,
    STATUS_TRANSITIONS,
    TERMINAL_STATUSES,
    INITIAL_STATUS,
    allowed_next_statuses,
    is_valid_status_transition,
    CustomerInfo,
    OrderResponse,
    OrderActions,
    OrderWithActionsResponse,
    OrderListResponse,
    OrderStatusUpdate,
    OrderStatusChange,
)

__all__ = [
    # Base
    "BaseSchema",
    "DocumentSchema",

    # Product
    "ProductStatus",
    "ImageStatus",
    "CategoryRef",
    "PendingImages",
    "VariantDraft",
    "ProductDraft",
    "ProductRecord",

    # Ingest
    "DuplicateSkuPolicy",
    "SkuConflict",
    "GroupingResult",
    "StagedUpload",
    "CommitRequest",
    "CommitResult",

    # Order
    "OrderStatus",
    "STATUS_TRANSITIONS",
    "TERMINAL_STATUSES",
    "INITIAL_STATUS",
    "allowed_next_statuses",
    "is_valid_status_transition",
    "CustomerInfo",
    "OrderResponse",
    "OrderActions",
    "OrderWithActionsResponse",
    "OrderListResponse",
    "OrderStatusUpdate",
    "OrderStatusChange",
]
