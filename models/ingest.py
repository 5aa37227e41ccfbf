"""
Bulk product upload models.

Staging parses a spreadsheet into drafts for review; committing writes the
reviewed drafts to the product store one at a time.
"""

from typing import Any, Optional
from enum import Enum
from pydantic import BaseModel, Field

from models.product import ProductDraft


class DuplicateSkuPolicy(str, Enum):
    """
    What a later row with an already-seen SKU does to the product's base info.

    Its variant columns are always appended as a new variant.
    """
    FIRST_WINS = "first_wins"  # Later base info ignored
    WARN = "warn"              # Ignored, but mismatches are reported
    LAST_WINS = "last_wins"    # Non-empty later values overwrite
    REJECT = "reject"          # First mismatch aborts staging


class SkuConflict(BaseModel):
    """A later row disagreeing with base info already taken for its SKU."""

    sku: str
    row: int = Field(description="0-based row index in the sheet")
    field: str
    kept: str
    ignored: str


class GroupingResult(BaseModel):
    """Drafts built from a batch of rows, in first-seen SKU order."""

    drafts: list[ProductDraft] = Field(default_factory=list)
    conflicts: list[SkuConflict] = Field(default_factory=list)

    @property
    def variant_count(self) -> int:
        """Total variants across all drafts."""
        return sum(len(d.variants) for d in self.drafts)


class StagedUpload(BaseModel):
    """Result of staging a spreadsheet (nothing persisted yet)."""

    filename: Optional[str] = None
    row_count: int = Field(ge=0)
    product_count: int = Field(ge=0)
    variant_count: int = Field(ge=0)
    drafts: list[ProductDraft] = Field(default_factory=list)
    conflicts: list[SkuConflict] = Field(default_factory=list)


class CommitRequest(BaseModel):
    """Reviewed drafts to persist."""

    drafts: list[ProductDraft] = Field(default_factory=list)


class CommitResult(BaseModel):
    """
    Outcome of a commit.

    On failure, drafts before failed_index are already stored; nothing is
    rolled back and nothing after failed_index was attempted.
    """

    success: bool
    total: int = Field(ge=0)
    committed: int = Field(ge=0)
    progress: float = Field(ge=0, le=100, description="Percent of drafts committed")
    product_ids: list[str] = Field(default_factory=list)
    failed_index: Optional[int] = None
    failed_sku: Optional[str] = None
    error: Optional[dict[str, Any]] = None
