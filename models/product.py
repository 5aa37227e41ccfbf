"""
Product catalog schemas for bulk ingestion.

Drafts are the in-memory result of staging a spreadsheet; a ProductRecord
is the document actually written to the product store.
"""

from pydantic import ConfigDict, Field
from typing import Optional
from enum import Enum
from datetime import datetime

from models.base import DocumentSchema


class ProductStatus(str, Enum):
    """Product visibility status."""
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class ImageStatus(str, Enum):
    """Progress of the background image-processing step."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class CategoryRef(DocumentSchema):
    """Category reference; the name is duplicated for display."""

    id: str = Field(..., min_length=1, description="Category id")
    name: str = Field(default="Unknown", description="Category display name")


class PendingImages(DocumentSchema):
    """Source image URLs waiting to be fetched and re-hosted."""

    main: Optional[str] = Field(None, description="Main image URL")
    gallery: list[str] = Field(default_factory=list, description="Gallery image URLs, in sheet order")


class VariantDraft(DocumentSchema):
    """
    One purchasable configuration of a product.

    Immutable once built from its row.
    """
    model_config = ConfigDict(frozen=True)

    variant_id: str = Field(..., description="Unique within one ingestion run")
    color: str = Field(default="", description="Variant color")
    size: str = Field(default="", description="Variant size")
    price: float = Field(default=0.0, ge=0, description="Price")
    offer_price: Optional[float] = Field(None, ge=0, description="Special offer price; None means no offer")
    stock: int = Field(default=0, ge=0, description="Units in stock")


class ProductBase(DocumentSchema):
    """Base info shared by drafts and stored records."""

    sku: str = Field(..., min_length=1, description="Stock keeping unit")
    name: str = Field(default="", description="Product name")
    description: str = Field(default="", description="Product description")
    brand: str = Field(default="", description="Brand")
    hsn_code: str = Field(default="", description="HSN tax code")
    seller_id: str = Field(default="", description="Owning seller id")
    status: ProductStatus = Field(default=ProductStatus.ACTIVE, description="Product status")
    product_tag: str = Field(default="", description="Merchandising tag")
    category: Optional[CategoryRef] = Field(None, description="Category reference")
    sub_category: Optional[CategoryRef] = Field(None, description="Sub-category reference")
    search_keywords: list[str] = Field(default_factory=list, description="Lowercase search prefixes")
    variants: list[VariantDraft] = Field(default_factory=list, description="Variants in row order")


class ProductDraft(ProductBase):
    """
    Product staged from a spreadsheet, not yet persisted.

    Returned to the caller for review between stage and commit.
    """

    pending_images: PendingImages = Field(
        default_factory=PendingImages,
        description="Images the image worker should fetch after commit"
    )


class ProductRecord(ProductBase):
    """
    Product document as written to the product store.

    imageStatus "pending" tells the image worker to pick the record up,
    fetch sourceImages and fill mainImageUrl / imageUrls.
    """

    source_images: PendingImages = Field(default_factory=PendingImages)
    main_image_url: Optional[str] = None
    image_urls: list[str] = Field(default_factory=list)
    image_status: ImageStatus = ImageStatus.PENDING
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_draft(cls, draft: ProductDraft, timestamp: datetime) -> "ProductRecord":
        """Build the stored record for a staged draft."""
        base = draft.model_dump(exclude={"pending_images"})
        return cls(
            **base,
            source_images=draft.pending_images.model_copy(deep=True),
            main_image_url=None,
            image_urls=[],
            image_status=ImageStatus.PENDING,
            created_at=timestamp,
            updated_at=timestamp,
        )
