# =============================================================================
# core/services/profile_service.py - Company Profile Logic
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("company_name", "contact_person", "email", "logo_url")


class ProfileService:
    """Service for the one-per-user company profile."""

    @staticmethod
    def get_profile(user_id: UUID | str) -> dict[str, Any] | None:
        """Get the user's company profile, or None if never saved."""
        return SupabaseClient.fetch_one("company_profiles", {"user_id": user_id})

    @staticmethod
    def save_profile(user_id: UUID | str, updates: dict[str, Any]) -> dict[str, Any]:
        """
        Create or update the user's company profile.

        Fields left as None keep their stored value.
        """
        existing = ProfileService.get_profile(user_id) or {}

        data = {"user_id": normalize_uuid(user_id)}
        for field in PROFILE_FIELDS:
            value = updates.get(field)
            data[field] = value if value is not None else existing.get(field)

        client = SupabaseClient.get_client()
        response = (
            client.table("company_profiles")
            .upsert(data, on_conflict="user_id")
            .execute()
        )

        logger.info(f"Saved company profile for user: {user_id}")
        return response.data[0] if response.data else data
