"""
Base schemas for all models.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow ORM objects (from_attributes)
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True
    )


class DocumentSchema(BaseSchema):
    """
    Base for models stored in, or read from, the shared document store.

    The storefront app reads documents in camelCase, so these models
    serialize with camelCase aliases and accept either spelling on input.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True
    )

    def to_document(self) -> dict:
        """Serialize to the stored (camelCase, JSON-safe) shape."""
        return self.model_dump(by_alias=True, mode="json")
