"""
Business logic services.

Each service handles one domain area.
"""

from services.product_draft_service import (
    group_rows,
    build_search_keywords,
    build_variant,
)
from services.bulk_upload_service import BulkUploadService, get_bulk_upload_service
from services.order_service import OrderService, get_order_service

__all__ = [
    "group_rows",
    "build_search_keywords",
    "build_variant",
    "BulkUploadService",
    "get_bulk_upload_service",
    "OrderService",
    "get_order_service",
]
