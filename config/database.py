"""
Supabase client for the product and order stores.

One client per process. The dashboard writes products and other users'
orders, so the service role key is preferred when it is configured.
"""

from supabase import create_client, Client
from functools import lru_cache
import structlog

from config.settings import settings

logger = structlog.get_logger(__name__)


class StoreConnectionError(Exception):
    """The Supabase client could not be created."""
    pass


@lru_cache()
def get_supabase_client() -> Client:
    """
    Get the shared Supabase client.

    Call get_supabase_client.cache_clear() to reconnect.

    Raises:
        StoreConnectionError: If the client cannot be created
    """
    key = settings.supabase_service_key or settings.supabase_key

    try:
        logger.info(
            "connecting_to_supabase",
            url=settings.supabase_url[:30] + "...",  # Log partial URL only
            service_role=bool(settings.supabase_service_key)
        )
        client = create_client(settings.supabase_url, key)

    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise StoreConnectionError(f"Failed to connect to Supabase: {e}") from e

    logger.info("supabase_client_created")
    return client


def check_connection() -> dict:
    """
    Check the store is reachable.

    Never raises; failures come back as status "unhealthy".

    Returns:
        dict: status plus product and order counts
    """
    try:
        client = get_supabase_client()

        counts = {}
        for name, table in (("products", settings.products_table), ("orders", settings.orders_table)):
            result = client.table(table).select("id", count="exact").limit(1).execute()
            counts[f"{name}_count"] = result.count

        return {"status": "healthy", **counts}

    except Exception as e:
        logger.warning("database_health_check_failed", error=str(e))
        return {
            "status": "unhealthy",
            "error": str(e)
        }
