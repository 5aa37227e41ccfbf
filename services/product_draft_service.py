"""
Draft building for bulk product uploads.

Turns flat spreadsheet rows into product drafts: rows sharing a SKU become
one product with one variant per row. Every value is typed and defaulted
here, once, so drafts carry no raw cells.
"""

import math
import time
from typing import Iterable, Optional, Union
import structlog

from models.product import (
    CategoryRef,
    PendingImages,
    ProductDraft,
    ProductStatus,
    VariantDraft,
)
from models.ingest import DuplicateSkuPolicy, GroupingResult, SkuConflict
from exceptions import SkuConflictError
from utils.text_utils import MAX_KEYWORD_LENGTH, clean_cell, index_keywords

logger = structlog.get_logger(__name__)


DEFAULT_FIELD_PREFIX_LENGTH = 5
DEFAULT_KEYWORD_LIMIT = 200
UNKNOWN_CATEGORY_NAME = "Unknown"

# Text base info: draft attribute -> sheet column
BASE_TEXT_COLUMNS = {
    "name": "Name",
    "description": "Description",
    "brand": "Brand",
    "hsn_code": "HSNCode",
    "seller_id": "SellerId",
    "product_tag": "ProductTag",
}

# Reference base info: draft attribute -> (id column, name column)
BASE_REFERENCE_COLUMNS = {
    "category": ("CategoryID", "CategoryName"),
    "sub_category": ("SubCategoryID", "SubCategoryName"),
}


# ===================
# KEYWORDS
# ===================

def build_search_keywords(
    name: Optional[str],
    sku: Optional[str],
    brand: Optional[str],
    hsn_code: Optional[str],
    field_prefix_length: int = DEFAULT_FIELD_PREFIX_LENGTH,
    limit: int = DEFAULT_KEYWORD_LIMIT,
) -> list[str]:
    """
    Search keywords for one product.

    Name words are indexed on every prefix. SKU, brand and HSN code are
    stored whole plus their short prefixes, enough for typeahead on codes.

    Args:
        name: Product name
        sku: Stock keeping unit
        brand: Brand
        hsn_code: HSN tax code
        field_prefix_length: Longest prefix stored for the code fields
        limit: Maximum keywords kept (shortest kept first)

    Returns:
        Sorted, deduplicated keywords
    """
    keywords = set(index_keywords([name]))

    for value in (sku, brand, hsn_code):
        value = clean_cell(value).lower()
        if not value:
            continue
        if len(value) <= MAX_KEYWORD_LENGTH:
            keywords.add(value)
        keywords.update(index_keywords([value], max_prefix_length=field_prefix_length))

    if len(keywords) > limit:
        keywords = set(sorted(keywords, key=lambda k: (len(k), k))[:limit])

    return sorted(keywords)


# ===================
# CELL PARSING
# ===================

def _to_number(raw: object) -> Optional[float]:
    """Parse a numeric cell; None when blank or unparsable."""
    text = clean_cell(raw).replace(",", "")
    if not text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def parse_price(raw: object) -> float:
    """Variant price; blank, unparsable or negative reads as 0."""
    value = _to_number(raw)
    return value if value is not None and value >= 0 else 0.0


def parse_offer_price(raw: object) -> Optional[float]:
    """Offer price; None (no offer) when blank, unparsable or negative."""
    value = _to_number(raw)
    return value if value is not None and value >= 0 else None


def parse_stock(raw: object) -> int:
    """Variant stock; blank, unparsable or negative reads as 0."""
    value = _to_number(raw)
    if value is None or value < 0:
        return 0
    return int(value)


def parse_gallery(raw: object) -> list[str]:
    """Split a pipe-delimited gallery cell, dropping blank entries."""
    return [url.strip() for url in clean_cell(raw).split("|") if url.strip()]


# ===================
# ROW -> DRAFT PIECES
# ===================

def _category_ref(
    row: dict,
    id_column: str,
    name_column: str,
    names: Optional[dict[str, str]],
) -> Optional[CategoryRef]:
    """Reference pair for a category column; None when the row has no id."""
    category_id = clean_cell(row.get(id_column))
    if not category_id:
        return None
    name = (
        clean_cell(row.get(name_column))
        or (names or {}).get(category_id)
        or UNKNOWN_CATEGORY_NAME
    )
    return CategoryRef(id=category_id, name=name)


def _pending_images(row: dict) -> PendingImages:
    return PendingImages(
        main=clean_cell(row.get("MainImageURL")) or None,
        gallery=parse_gallery(row.get("GalleryImages")),
    )


def build_variant(row: dict, run_stamp: int, index: int) -> VariantDraft:
    """
    Build the variant contributed by one row.

    Never raises on bad numbers; see parse_price / parse_offer_price /
    parse_stock for the defaults.
    """
    return VariantDraft(
        variant_id=f"VAR-{run_stamp}-{index}",
        color=clean_cell(row.get("Variant_Color")),
        size=clean_cell(row.get("Variant_Size")),
        price=parse_price(row.get("Variant_Price")),
        offer_price=parse_offer_price(row.get("Variant_OfferPrice")),
        stock=parse_stock(row.get("Variant_Stock")),
    )


class _DraftBuilder:
    """Shared lookups and keyword policy for one grouping run."""

    def __init__(
        self,
        category_names: Optional[dict[str, str]],
        subcategory_names: Optional[dict[str, str]],
        field_prefix_length: int,
        keyword_limit: int,
    ):
        self.reference_names = {
            "category": category_names,
            "sub_category": subcategory_names,
        }
        self.field_prefix_length = field_prefix_length
        self.keyword_limit = keyword_limit

    def reference(self, row: dict, attribute: str) -> Optional[CategoryRef]:
        id_column, name_column = BASE_REFERENCE_COLUMNS[attribute]
        return _category_ref(row, id_column, name_column, self.reference_names[attribute])

    def keywords(self, draft: ProductDraft) -> list[str]:
        return build_search_keywords(
            draft.name,
            draft.sku,
            draft.brand,
            draft.hsn_code,
            field_prefix_length=self.field_prefix_length,
            limit=self.keyword_limit,
        )

    def new_draft(self, sku: str, row: dict) -> ProductDraft:
        draft = ProductDraft(
            sku=sku,
            status=ProductStatus.ACTIVE,
            pending_images=_pending_images(row),
            **{attr: clean_cell(row.get(col)) for attr, col in BASE_TEXT_COLUMNS.items()},
            **{attr: self.reference(row, attr) for attr in BASE_REFERENCE_COLUMNS},
        )
        draft.search_keywords = self.keywords(draft)
        return draft

    def mismatches(self, draft: ProductDraft, row: dict) -> list[tuple[str, str, str]]:
        """
        Base info cells in row that disagree with the draft.

        Blank cells are continuation rows, not disagreements.

        Returns:
            (column, kept value, row value) per mismatching column
        """
        found = []
        for attr, column in BASE_TEXT_COLUMNS.items():
            value = clean_cell(row.get(column))
            if value and value != getattr(draft, attr):
                found.append((column, getattr(draft, attr), value))
        for attr, (id_column, _) in BASE_REFERENCE_COLUMNS.items():
            value = clean_cell(row.get(id_column))
            current = getattr(draft, attr)
            current_id = current.id if current else ""
            if value and value != current_id:
                found.append((id_column, current_id, value))
        return found

    def overwrite(self, draft: ProductDraft, row: dict) -> None:
        """Apply a later row's non-empty base info to the draft."""
        for attr, column in BASE_TEXT_COLUMNS.items():
            value = clean_cell(row.get(column))
            if value:
                setattr(draft, attr, value)
        for attr in BASE_REFERENCE_COLUMNS:
            ref = self.reference(row, attr)
            if ref is not None:
                setattr(draft, attr, ref)
        images = _pending_images(row)
        if images.main or images.gallery:
            draft.pending_images = images
        draft.search_keywords = self.keywords(draft)


# ===================
# GROUPING
# ===================

def group_rows(
    rows: Iterable[dict],
    policy: Union[DuplicateSkuPolicy, str] = DuplicateSkuPolicy.FIRST_WINS,
    run_stamp: Optional[int] = None,
    category_names: Optional[dict[str, str]] = None,
    subcategory_names: Optional[dict[str, str]] = None,
    field_prefix_length: int = DEFAULT_FIELD_PREFIX_LENGTH,
    keyword_limit: int = DEFAULT_KEYWORD_LIMIT,
) -> GroupingResult:
    """
    Group spreadsheet rows into product drafts by SKU.

    Rows with a blank SKU get their own draft under a generated SKU, so two
    blank rows never merge. Every row adds exactly one variant.

    Args:
        rows: Parsed spreadsheet rows, in sheet order
        policy: What later rows do to an existing SKU's base info
        run_stamp: Millisecond timestamp for generated ids (defaults to now)
        category_names: Category id -> name, used when the row has no name
        subcategory_names: Sub-category id -> name, same
        field_prefix_length: Prefix cap for code-field keywords
        keyword_limit: Maximum keywords per product

    Returns:
        GroupingResult with drafts in first-seen SKU order

    Raises:
        SkuConflictError: With policy REJECT, on the first mismatching row
    """
    policy = DuplicateSkuPolicy(policy)
    if run_stamp is None:
        run_stamp = int(time.time() * 1000)

    builder = _DraftBuilder(category_names, subcategory_names, field_prefix_length, keyword_limit)
    drafts: dict[str, ProductDraft] = {}
    conflicts: list[SkuConflict] = []
    row_count = 0

    for index, row in enumerate(rows):
        row_count += 1
        sku = clean_cell(row.get("SKU")) or f"SKU-{run_stamp}-{index}"

        draft = drafts.get(sku)
        if draft is None:
            draft = builder.new_draft(sku, row)
            drafts[sku] = draft
        elif policy == DuplicateSkuPolicy.LAST_WINS:
            builder.overwrite(draft, row)
        elif policy != DuplicateSkuPolicy.FIRST_WINS:
            mismatches = builder.mismatches(draft, row)
            if mismatches and policy == DuplicateSkuPolicy.REJECT:
                raise SkuConflictError(sku, index, [column for column, _, _ in mismatches])
            for column, kept, ignored in mismatches:
                logger.warning(
                    "sku_base_info_mismatch",
                    sku=sku,
                    row=index,
                    field=column,
                    kept=kept,
                    ignored=ignored
                )
                conflicts.append(SkuConflict(
                    sku=sku,
                    row=index,
                    field=column,
                    kept=kept,
                    ignored=ignored,
                ))

        draft.variants.append(build_variant(row, run_stamp, index))

    result = GroupingResult(drafts=list(drafts.values()), conflicts=conflicts)

    logger.info(
        "rows_grouped",
        row_count=row_count,
        product_count=len(result.drafts),
        variant_count=result.variant_count,
        conflict_count=len(conflicts),
        policy=policy.value
    )

    return result
