"""
Bulk product upload API routes.

Stage returns drafts for review; commit writes them. The two calls are
separate so the operator can inspect (and edit) drafts in between.
"""

from fastapi import APIRouter, UploadFile, File
from fastapi.responses import JSONResponse, Response
import structlog

from config import settings
from models.ingest import CommitRequest, CommitResult, StagedUpload
from parsers.product_sheet_parser import build_product_template, validate_file_format
from services.bulk_upload_service import get_bulk_upload_service
from exceptions import FileTooLargeError
from routes.errors import handle_error

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/products/bulk-upload", tags=["Bulk Upload"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.post("/stage", response_model=StagedUpload)
async def stage_bulk_upload(file: UploadFile = File(...)):
    """
    Parse a product spreadsheet into drafts without saving anything.

    Accepts .xlsx or .xls (first sheet) or .csv. Rows sharing a SKU become one
    product with one variant per row.

    Raises:
        413: File too large
        422: Unsupported format or unreadable file
        409: Conflicting rows for a SKU (when the policy is "reject")
    """
    try:
        validate_file_format(file.filename)

        content = await file.read()
        if len(content) > settings.ingest_max_file_bytes:
            raise FileTooLargeError(len(content), settings.ingest_max_file_bytes)

        service = get_bulk_upload_service()
        return service.ingest(content, file.filename)

    except Exception as e:
        return handle_error(e)


@router.post("/commit", response_model=CommitResult)
async def commit_bulk_upload(data: CommitRequest):
    """
    Save reviewed drafts, in order, stopping at the first failure.

    Drafts stored before a failure stay stored. A failed commit returns
    the CommitResult with the HTTP status of the failure.
    """
    try:
        service = get_bulk_upload_service()
        result = service.commit(data.drafts)

        if not result.success:
            return JSONResponse(
                status_code=500,
                content=result.model_dump(mode="json")
            )

        return result

    except Exception as e:
        return handle_error(e)


@router.get("/template")
async def download_template():
    """Download the spreadsheet template for bulk uploads."""
    try:
        content = build_product_template()
        return Response(
            content=content,
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": 'attachment; filename="product_upload_template.xlsx"'}
        )

    except Exception as e:
        return handle_error(e)
