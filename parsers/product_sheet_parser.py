"""
Spreadsheet parser for bulk product uploads.

Reads the first sheet of an Excel workbook (or a CSV file) into row dicts
keyed by the template column names. Values are kept as raw text; typing and
defaulting happen in the draft builder.
"""

from io import BytesIO
from pathlib import Path
from typing import Optional, Union
import structlog

import pandas as pd

from exceptions import InvalidFileFormatError, SpreadsheetParseError

logger = structlog.get_logger(__name__)


SUPPORTED_EXTENSIONS = [".xlsx", ".xls", ".csv"]

# pandas engine per Excel extension: xlrd only reads legacy .xls
EXCEL_ENGINES = {
    ".xlsx": "openpyxl",
    ".xls": "xlrd",
}

# Only empty cells are blank; "NA", "NULL" or "None" are real values (a SKU can be "NA")
READ_OPTIONS = {
    "dtype": str,
    "keep_default_na": False,
    "na_values": [""],
}

# Template columns, in template order
PRODUCT_COLUMNS = [
    "SKU",
    "Name",
    "Description",
    "Brand",
    "HSNCode",
    "SellerId",
    "ProductTag",
    "CategoryID",
    "CategoryName",
    "SubCategoryID",
    "SubCategoryName",
    "MainImageURL",
    "GalleryImages",
    "Variant_Color",
    "Variant_Size",
    "Variant_Price",
    "Variant_OfferPrice",
    "Variant_Stock",
]

SpreadsheetRow = dict[str, Optional[str]]
FileInput = Union[str, Path, BytesIO, bytes]


def validate_file_format(filename: Optional[str]) -> str:
    """
    Check the file extension is a supported spreadsheet format.

    Args:
        filename: Uploaded file name or path

    Returns:
        Lower-case extension (e.g. ".xlsx")

    Raises:
        InvalidFileFormatError: If the extension is missing or unsupported
    """
    extension = Path(filename).suffix.lower() if filename else ""
    if extension not in SUPPORTED_EXTENSIONS:
        logger.warning("unsupported_file_format", filename=filename, extension=extension)
        raise InvalidFileFormatError(filename, SUPPORTED_EXTENSIONS)
    return extension


def parse_product_sheet(
    file: FileInput,
    filename: Optional[str] = None,
) -> list[SpreadsheetRow]:
    """
    Parse a product upload file into rows.

    Args:
        file: File path (str/Path), file-like object (BytesIO) or raw bytes
        filename: Original file name; required when file is not a path

    Returns:
        One dict per non-empty row, keyed by template column name.
        Blank cells are None.

    Raises:
        InvalidFileFormatError: If the extension is not supported
        SpreadsheetParseError: If the file cannot be read
    """
    if filename is None and isinstance(file, (str, Path)):
        filename = str(file)

    extension = validate_file_format(filename)

    if isinstance(file, bytes):
        file = BytesIO(file)

    logger.info("parsing_product_sheet", filename=filename, file_type=type(file).__name__)

    try:
        if extension == ".csv":
            df = pd.read_csv(file, **READ_OPTIONS)
        else:
            # First sheet only
            df = pd.read_excel(file, sheet_name=0, engine=EXCEL_ENGINES[extension], **READ_OPTIONS)
    except Exception as e:
        logger.error("product_sheet_read_failed", filename=filename, error=str(e))
        raise SpreadsheetParseError(
            message="Failed to read spreadsheet",
            details={"filename": filename, "original_error": str(e)}
        )

    df.columns = [_normalize_column(col) for col in df.columns]

    duplicates = sorted({col for col in df.columns if list(df.columns).count(col) > 1})
    if duplicates:
        logger.warning("product_sheet_duplicate_columns", filename=filename, columns=duplicates)
        raise SpreadsheetParseError(
            message=f"Columns appear more than once: {', '.join(duplicates)}",
            details={"filename": filename, "duplicate_columns": duplicates}
        )

    missing = [col for col in PRODUCT_COLUMNS if col not in df.columns]
    if missing:
        logger.debug("product_sheet_columns_missing", columns=missing)

    # Skip fully blank rows, then turn NaN into None
    df = df.dropna(how="all")
    df = df.astype(object).where(pd.notna(df), None)

    rows = df.to_dict(orient="records")

    logger.info(
        "product_sheet_parsed",
        filename=filename,
        row_count=len(rows),
        column_count=len(df.columns)
    )

    return rows


def build_product_template() -> bytes:
    """
    Build an empty upload template workbook.

    Returns:
        .xlsx file content with the header row and one example row
    """
    example = {
        "SKU": "TSHIRT-001",
        "Name": "Cotton T Shirt",
        "Description": "Plain cotton t shirt",
        "Brand": "Acme",
        "HSNCode": "6109",
        "SellerId": "",
        "ProductTag": "New Arrival",
        "CategoryID": "",
        "CategoryName": "",
        "SubCategoryID": "",
        "SubCategoryName": "",
        "MainImageURL": "https://example.com/tshirt.jpg",
        "GalleryImages": "https://example.com/tshirt-1.jpg | https://example.com/tshirt-2.jpg",
        "Variant_Color": "Red",
        "Variant_Size": "M",
        "Variant_Price": "499",
        "Variant_OfferPrice": "449",
        "Variant_Stock": "20",
    }

    output = BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        pd.DataFrame([example], columns=PRODUCT_COLUMNS).to_excel(
            writer, sheet_name="Products", index=False
        )

    return output.getvalue()


# ===================
# HELPER FUNCTIONS
# ===================

def _column_key(col: str) -> str:
    """
    Loose key for header matching.

    "Variant Price" -> "variantprice"
    "variant_price" -> "variantprice"
    """
    return str(col).lower().replace("_", "").replace(" ", "").strip()


_CANONICAL_COLUMNS = {_column_key(col): col for col in PRODUCT_COLUMNS}


def _normalize_column(col: str) -> str:
    """Map a header to its template column name; unknown headers are only stripped."""
    return _CANONICAL_COLUMNS.get(_column_key(col), str(col).strip())
