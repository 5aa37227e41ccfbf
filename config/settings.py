"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )
    supabase_service_key: Optional[str] = Field(
        None,
        description="Service role key; used instead of supabase_key when set"
    )

    # ===================
    # STORE LAYOUT
    # ===================
    products_table: str = Field(
        default="products",
        description="Product catalog table"
    )
    orders_table: str = Field(
        default="orders",
        description="Customer orders table (rows carry userId)"
    )
    categories_table: str = Field(
        default="categories",
        description="Category reference table (id, name)"
    )
    subcategories_table: str = Field(
        default="subcategories",
        description="Sub-category reference table (id, name)"
    )

    # ===================
    # BULK UPLOAD
    # ===================
    ingest_max_file_mb: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum accepted spreadsheet size in MB"
    )
    ingest_duplicate_sku_policy: str = Field(
        default="first_wins",
        pattern="^(first_wins|last_wins|warn|reject)$",
        description="How later rows with an existing SKU treat product base info"
    )
    resolve_category_names: bool = Field(
        default=True,
        description="Look up category names when the sheet only carries ids"
    )

    # ===================
    # SEARCH KEYWORDS
    # ===================
    search_field_prefix_length: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Prefix cap for SKU, brand and HSN code keywords"
    )
    search_keyword_limit: int = Field(
        default=200,
        ge=1,
        le=1000,
        description="Maximum keywords stored per product"
    )

    # ===================
    # ORDERS
    # ===================
    strict_status_transitions: bool = Field(
        default=True,
        description="Reject a status change if the stored status moved since it was read"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Dashboard origins allowed to call the API (JSON list in env)"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def ingest_max_file_bytes(self) -> int:
        """Upload size limit in bytes."""
        return self.ingest_max_file_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
