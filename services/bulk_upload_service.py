"""
Bulk product upload service.

Two phases:
    ingest  - parse the spreadsheet and build drafts (no writes)
    commit  - write reviewed drafts to the product store, in order

Commit is not atomic across drafts. It stops at the first failed write and
reports how many drafts were already stored; those are not rolled back.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional
import structlog

from config import get_supabase_client, settings
from models.product import ProductDraft, ProductRecord
from models.ingest import CommitResult, StagedUpload
from parsers.product_sheet_parser import FileInput, parse_product_sheet, validate_file_format
from services.product_draft_service import group_rows
from exceptions import (
    AppError,
    DatabaseError,
    FileTooLargeError,
    PersistenceError,
)

logger = structlog.get_logger(__name__)

# Called after each committed draft with (committed, total, percent)
ProgressCallback = Callable[[int, int, float], None]


class BulkUploadService:
    """
    Bulk product upload business logic.

    Handles staging spreadsheets into drafts and committing drafts.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = settings.products_table
        self.categories_table = settings.categories_table
        self.subcategories_table = settings.subcategories_table

    # ===================
    # STAGE
    # ===================

    def ingest(self, file: FileInput, filename: Optional[str] = None) -> StagedUpload:
        """
        Stage a spreadsheet: parse and group rows into drafts.

        Nothing is written. The returned drafts are meant to be reviewed and
        passed to commit().

        Args:
            file: File path, file-like object or raw bytes
            filename: Original file name (needed unless file is a path)

        Returns:
            StagedUpload with drafts and any SKU conflicts

        Raises:
            InvalidFileFormatError: If the extension is not supported
            FileTooLargeError: If raw bytes exceed the upload limit
            SpreadsheetParseError: If the file cannot be read
            SkuConflictError: If the duplicate SKU policy is "reject"
        """
        if filename is None and isinstance(file, (str, Path)):
            filename = str(file)

        validate_file_format(filename)

        if isinstance(file, bytes) and len(file) > settings.ingest_max_file_bytes:
            raise FileTooLargeError(len(file), settings.ingest_max_file_bytes)

        logger.info("bulk_upload_staging", filename=filename)

        rows = parse_product_sheet(file, filename)

        category_names, subcategory_names = None, None
        if settings.resolve_category_names and rows:
            category_names = self._load_reference_names(self.categories_table)
            subcategory_names = self._load_reference_names(self.subcategories_table)

        grouped = group_rows(
            rows,
            policy=settings.ingest_duplicate_sku_policy,
            category_names=category_names,
            subcategory_names=subcategory_names,
            field_prefix_length=settings.search_field_prefix_length,
            keyword_limit=settings.search_keyword_limit,
        )

        staged = StagedUpload(
            filename=filename,
            row_count=len(rows),
            product_count=len(grouped.drafts),
            variant_count=grouped.variant_count,
            drafts=grouped.drafts,
            conflicts=grouped.conflicts,
        )

        logger.info(
            "bulk_upload_staged",
            filename=filename,
            row_count=staged.row_count,
            product_count=staged.product_count,
            variant_count=staged.variant_count,
            conflict_count=len(staged.conflicts)
        )

        return staged

    def _load_reference_names(self, table: str) -> dict[str, str]:
        """
        Load id -> name for a category reference table.

        Raises:
            DatabaseError: If the table cannot be read
        """
        try:
            result = self.db.table(table).select("id, name").execute()
        except Exception as e:
            logger.error("load_reference_names_failed", table=table, error=str(e))
            raise DatabaseError("select", str(e), details={"table": table})

        return {
            str(row["id"]): row["name"]
            for row in result.data or []
            if row.get("id") is not None and row.get("name")
        }

    # ===================
    # COMMIT
    # ===================

    def commit(
        self,
        drafts: list[ProductDraft],
        on_progress: Optional[ProgressCallback] = None,
    ) -> CommitResult:
        """
        Write drafts to the product store, one at a time, in list order.

        Each stored record is flagged imageStatus="pending" with the draft's
        pending images copied to sourceImages for the image worker.

        Args:
            drafts: Drafts from ingest(), possibly edited by the caller
            on_progress: Called after each stored draft

        Returns:
            CommitResult. On failure, success is False, committed counts the
            drafts stored before the failure and error holds the
            PersistenceError body.
        """
        total = len(drafts)
        committed = 0
        product_ids: list[str] = []

        logger.info("bulk_upload_commit_started", total=total)

        for index, draft in enumerate(drafts):
            try:
                record = ProductRecord.from_draft(draft, datetime.now(timezone.utc))
                result = self.db.table(self.table).insert(record.to_document()).execute()
            except Exception as e:
                message = e.message if isinstance(e, AppError) else str(e)
                error = PersistenceError(
                    index=index,
                    sku=draft.sku,
                    committed=committed,
                    message=message
                )
                logger.error(
                    "bulk_upload_commit_failed",
                    index=index,
                    sku=draft.sku,
                    committed=committed,
                    total=total,
                    error=message,
                    error_type=type(e).__name__
                )
                return CommitResult(
                    success=False,
                    total=total,
                    committed=committed,
                    progress=_percent(committed, total),
                    product_ids=product_ids,
                    failed_index=index,
                    failed_sku=draft.sku,
                    error=error.to_dict()["error"],
                )

            committed += 1
            if result.data:
                product_ids.append(str(result.data[0].get("id")))

            progress = _percent(committed, total)
            logger.info(
                "bulk_upload_progress",
                sku=draft.sku,
                committed=committed,
                total=total,
                progress=progress
            )
            if on_progress:
                on_progress(committed, total, progress)

        logger.info("bulk_upload_commit_complete", committed=committed, total=total)

        return CommitResult(
            success=True,
            total=total,
            committed=committed,
            progress=_percent(committed, total),
            product_ids=product_ids,
        )


def _percent(done: int, total: int) -> float:
    """Percent complete, 100 for an empty batch."""
    if total == 0:
        return 100.0
    return round(done / total * 100, 2)


# Singleton instance
_bulk_upload_service: Optional[BulkUploadService] = None


def get_bulk_upload_service() -> BulkUploadService:
    """Get or create BulkUploadService instance."""
    global _bulk_upload_service
    if _bulk_upload_service is None:
        _bulk_upload_service = BulkUploadService()
    return _bulk_upload_service
