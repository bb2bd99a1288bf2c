from supabase import Client, create_client

from config.config import settings
from common.logging import get_logger

logger = get_logger("supabase_client")


def create_supabase_client() -> Client:
    """Create a Supabase client from configured URL and key."""
    logger.info("Creating Supabase client", extra={"supabase_url": settings.supabase_url})
    return create_client(settings.supabase_url, settings.supabase_key)
