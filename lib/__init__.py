# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# - supabase_client.py: Typed Supabase wrapper for auth, rows and storage
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError

__all__ = [
    "SupabaseClient",
    "SupabaseClientError",
]
