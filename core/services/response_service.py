# =============================================================================
# core/services/response_service.py - Customer Feedback Logic
# =============================================================================
# Viewers of a public catalog submit their name and the products they
# liked. Submissions are appended; repeat submissions are kept.
# =============================================================================

import logging
from collections import Counter
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid
from core.services.catalog_service import CatalogService
from app.exceptions import CatalogNotFoundError

logger = logging.getLogger(__name__)

TABLE = "customer_responses"


class ResponseService:
    """Service for public catalog feedback."""

    @staticmethod
    def submit_response(shareable_link: str, fields: dict[str, Any]) -> dict[str, Any]:
        """
        Record feedback on a public catalog.

        Liked products outside the catalog's visible products are dropped.

        Raises:
            CatalogNotFoundError: If the link doesn't resolve or is archived
        """
        catalog = CatalogService.get_public_catalog(shareable_link)
        visible = {p["id"] for p in catalog["products"]}

        liked = [normalize_uuid(pid) for pid in fields.get("liked_products") or []]
        liked = [pid for pid in dict.fromkeys(liked) if pid in visible]

        email = (fields.get("customer_email") or "").strip() or None
        data = {
            "catalog_id": catalog["id"],
            "customer_name": fields["customer_name"].strip(),
            "customer_email": email,
            "liked_products": liked,
            "response_data": fields.get("response_data") or {},
        }

        client = SupabaseClient.get_client()
        response = client.table(TABLE).insert(data).execute()
        if not response.data:
            raise Exception("Insert returned no data")

        row = response.data[0]
        logger.info(f"Recorded response {row['id']} on catalog {catalog['id']} ({len(liked)} likes)")
        return row

    @staticmethod
    def list_catalog_responses(catalog_id: UUID | str, user_id: UUID | str) -> list[dict[str, Any]]:
        """
        List responses on one of the user's catalogs, newest first.

        Raises:
            CatalogNotFoundError: If missing or owned by someone else
        """
        catalog = SupabaseClient.fetch_one("catalogs", {"id": catalog_id, "user_id": user_id})
        if not catalog:
            raise CatalogNotFoundError(str(catalog_id))

        client = SupabaseClient.get_client()
        rows = (
            client.table(TABLE)
            .select("*")
            .eq("catalog_id", normalize_uuid(catalog_id))
            .order("created_at", desc=True)
            .execute()
        ).data or []
        return [{**row, "catalog_name": catalog["name"]} for row in rows]

    @staticmethod
    def list_responses(user_id: UUID | str) -> list[dict[str, Any]]:
        """List responses across all of the user's catalogs, newest first."""
        client = SupabaseClient.get_client()

        catalogs = (
            client.table("catalogs")
            .select("id, name")
            .eq("user_id", normalize_uuid(user_id))
            .execute()
        ).data or []
        if not catalogs:
            return []

        names = {c["id"]: c["name"] for c in catalogs}
        rows = (
            client.table(TABLE)
            .select("*")
            .in_("catalog_id", list(names))
            .order("created_at", desc=True)
            .execute()
        ).data or []
        return [{**row, "catalog_name": names.get(row["catalog_id"])} for row in rows]

    @staticmethod
    def summarize(catalog_id: UUID | str, user_id: UUID | str) -> dict[str, Any]:
        """
        Count likes per product on a catalog.

        Returns:
            {"catalog_id", "total_responses", "likes": [{"product_id", "name", "likes"}]}
            with likes sorted most-liked first
        """
        catalog = CatalogService.get_catalog(catalog_id, user_id)
        responses = ResponseService.list_catalog_responses(catalog_id, user_id)

        counts = Counter(pid for r in responses for pid in r.get("liked_products") or [])
        names = {p["id"]: p["name"] for p in catalog["products"]}

        likes = [
            {"product_id": pid, "name": names.get(pid), "likes": counts.get(pid, 0)}
            for pid in names
        ]
        likes.sort(key=lambda item: item["likes"], reverse=True)

        return {
            "catalog_id": catalog["id"],
            "total_responses": len(responses),
            "likes": likes,
        }
