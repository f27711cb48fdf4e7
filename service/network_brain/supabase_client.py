from supabase import create_client, Client

from network_brain.config import Settings
from network_brain.errors import ConfigurationError


def create_supabase_admin(settings: Settings) -> Client:
    """Service role client. Bypasses RLS; server-side use only."""
    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise ConfigurationError("Supabase URL or service role key is not configured")
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key
    )
