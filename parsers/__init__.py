"""
Spreadsheet parsers module.
"""

from parsers.product_sheet_parser import (
    SUPPORTED_EXTENSIONS,
    PRODUCT_COLUMNS,
    SpreadsheetRow,
    validate_file_format,
    parse_product_sheet,
    build_product_template,
)

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "PRODUCT_COLUMNS",
    "SpreadsheetRow",
    "validate_file_format",
    "parse_product_sheet",
    "build_product_template",
]
