# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - r2_client.py: boto3 wrapper for the R2 (S3-compatible) image bucket
# - utils.py: Shared utilities (errors, UUIDs, slugs, keys, image URLs)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.r2_client import R2Client, StorageClientError
from lib.utils import ApplicationError, normalize_uuid

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # R2
    "R2Client",
    "StorageClientError",
    # Utils
    "ApplicationError",
    "normalize_uuid",
]
