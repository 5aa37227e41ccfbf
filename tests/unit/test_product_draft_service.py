"""
Unit tests for product draft building (row grouping, variants, keywords).

Run: pytest tests/unit/test_product_draft_service.py -v
"""

import pytest
from pydantic import ValidationError

from services.product_draft_service import (
    build_search_keywords,
    build_variant,
    group_rows,
    parse_gallery,
    parse_offer_price,
    parse_price,
    parse_stock,
)
from models.ingest import DuplicateSkuPolicy
from models.product import ProductStatus
from exceptions import SkuConflictError
from tests.factories import SpreadsheetRowFactory


RUN_STAMP = 1700000000000


# ===================
# KEYWORDS
# ===================

class TestBuildSearchKeywords:
    """Tests for build_search_keywords."""

    def test_name_words_and_sku(self):
        result = build_search_keywords("Red Shoe", "A", None, None)

        assert result == ["a", "r", "re", "red", "s", "sh", "sho", "shoe"]

    def test_code_fields_capped_at_prefix_length_plus_whole_value(self):
        result = build_search_keywords(None, "ABCDEFGHIJ", None, None)

        assert result == ["a", "ab", "abc", "abcd", "abcde", "abcdefghij"]

    def test_name_words_not_capped(self):
        result = build_search_keywords("Sneakers", None, None, None)

        assert "sneakers" in result

    def test_brand_and_hsn_indexed(self):
        result = build_search_keywords(None, None, "Acme", "6109")

        assert {"acme", "ac", "6109", "61"} <= set(result)

    def test_blank_fields_skipped(self):
        assert build_search_keywords("", "", None, "  ") == []

    def test_limit_keeps_shortest(self):
        result = build_search_keywords("abcdefgh", "zz", None, None, limit=5)

        assert result == ["a", "ab", "abc", "z", "zz"]

    def test_idempotent(self):
        args = ("Cotton Shirt", "TS-1", "Acme", "6109")
        assert build_search_keywords(*args) == build_search_keywords(*args)


# ===================
# CELL PARSING
# ===================

class TestCellParsing:
    """Tests for numeric and gallery cell parsing."""

    @pytest.mark.parametrize("raw,expected", [
        ("499", 499.0),
        ("1,299.50", 1299.5),
        (None, 0.0),
        ("", 0.0),
        ("abc", 0.0),
        ("-5", 0.0),
    ])
    def test_parse_price(self, raw, expected):
        assert parse_price(raw) == expected

    @pytest.mark.parametrize("raw,expected", [
        ("449", 449.0),
        ("0", 0.0),
        (None, None),
        ("", None),
        ("abc", None),
        ("-1", None),
    ])
    def test_parse_offer_price(self, raw, expected):
        assert parse_offer_price(raw) == expected

    def test_zero_offer_is_not_no_offer(self):
        assert parse_offer_price("0") == 0
        assert parse_offer_price("0") is not None

    @pytest.mark.parametrize("raw,expected", [
        ("20", 20),
        ("7.0", 7),
        ("abc", 0),
        (None, 0),
        ("-3", 0),
    ])
    def test_parse_stock(self, raw, expected):
        assert parse_stock(raw) == expected

    def test_parse_gallery(self):
        assert parse_gallery(" https://a.jpg | |https://b.jpg|") == ["https://a.jpg", "https://b.jpg"]

    def test_parse_gallery_blank(self):
        assert parse_gallery(None) == []


class TestBuildVariant:
    """Tests for build_variant."""

    def test_builds_from_variant_columns(self):
        row = SpreadsheetRowFactory.create(
            Variant_Color="Blue",
            Variant_Size="L",
            Variant_Price="120",
            Variant_OfferPrice="99",
            Variant_Stock="4",
        )

        variant = build_variant(row, RUN_STAMP, 3)

        assert variant.variant_id == f"VAR-{RUN_STAMP}-3"
        assert variant.color == "Blue"
        assert variant.size == "L"
        assert variant.price == 120.0
        assert variant.offer_price == 99.0
        assert variant.stock == 4

    def test_unparsable_numbers_do_not_raise(self):
        row = SpreadsheetRowFactory.create(
            Variant_Price="abc",
            Variant_Stock="lots",
            Variant_OfferPrice="n/a",
        )

        variant = build_variant(row, RUN_STAMP, 0)

        assert variant.price == 0
        assert variant.stock == 0
        assert variant.offer_price is None

    def test_variant_is_immutable(self):
        variant = build_variant(SpreadsheetRowFactory.create(), RUN_STAMP, 0)

        with pytest.raises(ValidationError):
            variant.price = 1


# ===================
# GROUPING
# ===================

class TestGroupRows:
    """Tests for group_rows."""

    def test_rows_sharing_sku_merge(self, sample_rows):
        result = group_rows(sample_rows, run_stamp=RUN_STAMP)

        assert [d.sku for d in result.drafts] == ["A", "B"]
        draft_a, draft_b = result.drafts
        assert [v.color for v in draft_a.variants] == ["Red", "Blue"]
        assert [v.price for v in draft_a.variants] == [100.0, 120.0]
        assert len(draft_b.variants) == 1
        assert result.variant_count == 3

    def test_minimal_rows(self):
        rows = [
            {"SKU": "A", "Variant_Color": "Red", "Variant_Price": "100"},
            {"SKU": "A", "Variant_Color": "Blue", "Variant_Price": "120"},
            {"SKU": "B", "Name": "Shoe"},
        ]

        result = group_rows(rows, run_stamp=RUN_STAMP)

        assert len(result.drafts) == 2
        draft_a, draft_b = result.drafts
        assert [(v.color, v.price) for v in draft_a.variants] == [("Red", 100.0), ("Blue", 120.0)]
        assert len(draft_b.variants) == 1
        assert draft_b.variants[0].price == 0

    def test_first_row_wins_base_info(self, sample_rows):
        result = group_rows(sample_rows, run_stamp=RUN_STAMP)

        draft_a = result.drafts[0]
        assert draft_a.name == "Cotton Shirt"
        assert draft_a.brand == "Acme"
        assert draft_a.status == ProductStatus.ACTIVE

    def test_variant_ids_unique_per_row(self, sample_rows):
        result = group_rows(sample_rows, run_stamp=RUN_STAMP)

        ids = [v.variant_id for d in result.drafts for v in d.variants]
        assert ids == [f"VAR-{RUN_STAMP}-0", f"VAR-{RUN_STAMP}-1", f"VAR-{RUN_STAMP}-2"]

    def test_blank_skus_never_merge(self):
        rows = [
            SpreadsheetRowFactory.create(SKU=None, Name="One"),
            SpreadsheetRowFactory.create(SKU="  ", Name="Two"),
        ]

        result = group_rows(rows, run_stamp=RUN_STAMP)

        assert [d.sku for d in result.drafts] == [f"SKU-{RUN_STAMP}-0", f"SKU-{RUN_STAMP}-1"]
        assert [d.name for d in result.drafts] == ["One", "Two"]

    def test_first_seen_order(self):
        rows = [
            SpreadsheetRowFactory.create(SKU="Z"),
            SpreadsheetRowFactory.create(SKU="M"),
            SpreadsheetRowFactory.create(SKU="Z"),
            SpreadsheetRowFactory.create(SKU="A"),
        ]

        result = group_rows(rows, run_stamp=RUN_STAMP)

        assert [d.sku for d in result.drafts] == ["Z", "M", "A"]

    def test_empty_input(self):
        result = group_rows([], run_stamp=RUN_STAMP)

        assert result.drafts == []
        assert result.variant_count == 0

    def test_missing_text_fields_default_to_empty(self):
        result = group_rows([{"SKU": "X"}], run_stamp=RUN_STAMP)

        draft = result.drafts[0]
        assert draft.name == ""
        assert draft.description == ""
        assert draft.hsn_code == ""
        assert draft.category is None
        assert draft.sub_category is None
        assert draft.pending_images.main is None
        assert draft.pending_images.gallery == []
        assert draft.variants[0].price == 0
        assert draft.variants[0].stock == 0

    def test_search_keywords_cover_name_sku_brand(self, sample_rows):
        result = group_rows(sample_rows, run_stamp=RUN_STAMP)

        keywords = set(result.drafts[0].search_keywords)
        assert {"cot", "cotton", "shi", "shirt", "a", "acme"} <= keywords

    def test_pending_images(self):
        row = SpreadsheetRowFactory.create(
            MainImageURL="https://x/main.jpg",
            GalleryImages="https://x/1.jpg|https://x/2.jpg",
        )

        draft = group_rows([row], run_stamp=RUN_STAMP).drafts[0]

        assert draft.pending_images.main == "https://x/main.jpg"
        assert draft.pending_images.gallery == ["https://x/1.jpg", "https://x/2.jpg"]

    def test_default_run_stamp_generated(self):
        result = group_rows([SpreadsheetRowFactory.create()])

        assert result.drafts[0].variants[0].variant_id.startswith("VAR-")


class TestCategoryReferences:
    """Tests for category / sub-category reference pairs."""

    def test_name_from_sheet(self):
        row = SpreadsheetRowFactory.create(CategoryID="c1", CategoryName="Shirts")

        draft = group_rows([row], run_stamp=RUN_STAMP).drafts[0]

        assert draft.category.id == "c1"
        assert draft.category.name == "Shirts"

    def test_name_from_lookup(self):
        row = SpreadsheetRowFactory.create(CategoryID="c1", SubCategoryID="s9")

        draft = group_rows(
            [row],
            run_stamp=RUN_STAMP,
            category_names={"c1": "Shirts"},
            subcategory_names={"s9": "Polo"},
        ).drafts[0]

        assert draft.category.name == "Shirts"
        assert draft.sub_category.id == "s9"
        assert draft.sub_category.name == "Polo"

    def test_unknown_name(self):
        row = SpreadsheetRowFactory.create(CategoryID="c404")

        draft = group_rows([row], run_stamp=RUN_STAMP, category_names={}).drafts[0]

        assert draft.category.name == "Unknown"

    def test_no_id_means_no_reference(self):
        row = SpreadsheetRowFactory.create(CategoryID=None, CategoryName="Shirts")

        draft = group_rows([row], run_stamp=RUN_STAMP).drafts[0]

        assert draft.category is None


# ===================
# DUPLICATE SKU POLICY
# ===================

@pytest.fixture
def conflicting_rows():
    """Two rows for SKU A with different names."""
    return [
        SpreadsheetRowFactory.create(SKU="A", Name="Shirt", Variant_Color="Red"),
        SpreadsheetRowFactory.create(SKU="A", Name="Tee", Variant_Color="Blue"),
    ]


class TestDuplicateSkuPolicy:
    """Tests for how later rows treat existing base info."""

    def test_first_wins_is_default(self, conflicting_rows):
        result = group_rows(conflicting_rows, run_stamp=RUN_STAMP)

        assert result.drafts[0].name == "Shirt"
        assert result.conflicts == []
        assert len(result.drafts[0].variants) == 2

    def test_warn_reports_conflicts(self, conflicting_rows):
        result = group_rows(conflicting_rows, policy=DuplicateSkuPolicy.WARN, run_stamp=RUN_STAMP)

        assert result.drafts[0].name == "Shirt"
        assert len(result.conflicts) == 1
        conflict = result.conflicts[0]
        assert conflict.sku == "A"
        assert conflict.row == 1
        assert conflict.field == "Name"
        assert conflict.kept == "Shirt"
        assert conflict.ignored == "Tee"

    def test_policy_accepts_string(self, conflicting_rows):
        result = group_rows(conflicting_rows, policy="warn", run_stamp=RUN_STAMP)

        assert len(result.conflicts) == 1

    def test_last_wins_overwrites(self, conflicting_rows):
        result = group_rows(conflicting_rows, policy=DuplicateSkuPolicy.LAST_WINS, run_stamp=RUN_STAMP)

        draft = result.drafts[0]
        assert draft.name == "Tee"
        assert "tee" in draft.search_keywords
        assert len(draft.variants) == 2

    def test_last_wins_keeps_values_for_blank_cells(self):
        rows = [
            SpreadsheetRowFactory.create(SKU="A", Name="Shirt", Brand="Acme"),
            {"SKU": "A", "Name": "Tee", "Variant_Color": "Blue"},
        ]

        draft = group_rows(rows, policy="last_wins", run_stamp=RUN_STAMP).drafts[0]

        assert draft.name == "Tee"
        assert draft.brand == "Acme"

    def test_reject_raises(self, conflicting_rows):
        with pytest.raises(SkuConflictError) as exc_info:
            group_rows(conflicting_rows, policy=DuplicateSkuPolicy.REJECT, run_stamp=RUN_STAMP)

        assert exc_info.value.status_code == 409
        assert exc_info.value.details["sku"] == "A"
        assert exc_info.value.details["row"] == 1
        assert exc_info.value.details["fields"] == ["Name"]

    def test_reject_allows_continuation_rows(self, sample_rows):
        result = group_rows(sample_rows, policy=DuplicateSkuPolicy.REJECT, run_stamp=RUN_STAMP)

        assert len(result.drafts) == 2

    def test_invalid_policy(self, conflicting_rows):
        with pytest.raises(ValueError):
            group_rows(conflicting_rows, policy="newest", run_stamp=RUN_STAMP)
