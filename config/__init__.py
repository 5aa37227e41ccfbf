"""
Configuration module.

Exports:
    settings: Application settings instance
    get_supabase_client: Shared Supabase client
    check_connection: Health check function
"""

from config.settings import settings, get_settings, Settings
from config.database import (
    get_supabase_client,
    check_connection,
    StoreConnectionError,
)

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "get_supabase_client",
    "check_connection",
    "StoreConnectionError",
]
