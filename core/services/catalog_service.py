# =============================================================================
# core/services/catalog_service.py - Catalog Business Logic
# =============================================================================
# Handles catalog CRUD, the catalog_products join table, share links and
# the public (unauthenticated) catalog view.
# =============================================================================

import logging
from typing import Any
from urllib.parse import quote
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import generate_shareable_link, normalize_uuid
from core.services.product_service import with_image_variants
from core.services.subscription_service import SubscriptionService
from app.config import settings
from app.exceptions import CatalogNotFoundError, InvalidCatalogProductsError

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Service for catalog management operations.

    Catalog products are read with separate queries rather than nested
    selects so each step can be filtered (ownership, archival, isactive).
    """

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _product_ids_by_catalog(catalog_ids: list[str]) -> dict[str, list[str]]:
        """Map catalog id -> product ids from the join table."""
        if not catalog_ids:
            return {}

        client = SupabaseClient.get_client()
        links = (
            client.table("catalog_products")
            .select("catalog_id, product_id")
            .in_("catalog_id", catalog_ids)
            .execute()
        ).data or []

        result: dict[str, list[str]] = {cid: [] for cid in catalog_ids}
        for link in links:
            result.setdefault(link["catalog_id"], []).append(link["product_id"])
        return result

    @staticmethod
    def _fetch_products(
        product_ids: list[str],
        public_only: bool = False,
    ) -> list[dict[str, Any]]:
        """
        Fetch products by id, oldest first.

        Args:
            product_ids: Product IDs
            public_only: Only active, non-archived products
        """
        if not product_ids:
            return []

        client = SupabaseClient.get_client()
        query = client.table("products").select("*").in_("id", sorted(set(product_ids)))
        if public_only:
            query = query.eq("isactive", True).is_("archived_at", "null")

        rows = query.order("created_at").execute().data or []
        return [with_image_variants(p) for p in rows]

    @staticmethod
    def _attach_products(
        catalogs: list[dict[str, Any]],
        public_only: bool = False,
    ) -> list[dict[str, Any]]:
        ids_by_catalog = CatalogService._product_ids_by_catalog([c["id"] for c in catalogs])
        all_ids = [pid for ids in ids_by_catalog.values() for pid in ids]
        products = {p["id"]: p for p in CatalogService._fetch_products(all_ids, public_only)}

        result = []
        for catalog in catalogs:
            ids = ids_by_catalog.get(catalog["id"], [])
            result.append({
                **catalog,
                "products": [products[pid] for pid in ids if pid in products],
            })
        return result

    @staticmethod
    def validate_product_ids(user_id: UUID | str, product_ids: list[UUID | str]) -> list[str]:
        """
        Check every product id is one of the user's live products.

        Returns:
            The ids as strings, duplicates removed, order kept

        Raises:
            InvalidCatalogProductsError: If any id isn't usable
        """
        ids = list(dict.fromkeys(normalize_uuid(pid) for pid in product_ids))
        if not ids:
            return []

        client = SupabaseClient.get_client()
        rows = (
            client.table("products")
            .select("id")
            .eq("user_id", normalize_uuid(user_id))
            .is_("archived_at", "null")
            .in_("id", ids)
            .execute()
        ).data or []

        found = {row["id"] for row in rows}
        invalid = [pid for pid in ids if pid not in found]
        if invalid:
            raise InvalidCatalogProductsError(invalid)
        return ids

    @staticmethod
    def _insert_links(catalog_id: str, product_ids: list[str]) -> None:
        if not product_ids:
            return
        client = SupabaseClient.get_client()
        client.table("catalog_products").insert(
            [{"catalog_id": catalog_id, "product_id": pid} for pid in product_ids]
        ).execute()

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    @staticmethod
    def list_catalogs(user_id: UUID | str, include_archived: bool = False) -> list[dict[str, Any]]:
        """List the user's catalogs with their products, newest first."""
        client = SupabaseClient.get_client()

        query = (
            client.table("catalogs")
            .select("*")
            .eq("user_id", normalize_uuid(user_id))
        )
        if not include_archived:
            query = query.is_("archived_at", "null")

        catalogs = query.order("created_at", desc=True).execute().data or []
        return CatalogService._attach_products(catalogs)

    @staticmethod
    def get_catalog(catalog_id: UUID | str, user_id: UUID | str) -> dict[str, Any]:
        """
        Get a catalog the user owns, with its products.

        Raises:
            CatalogNotFoundError: If missing or owned by someone else
        """
        catalog = SupabaseClient.fetch_one("catalogs", {"id": catalog_id, "user_id": user_id})
        if not catalog:
            raise CatalogNotFoundError(str(catalog_id))
        return CatalogService._attach_products([catalog])[0]

    @staticmethod
    def create_catalog(user_id: UUID | str, fields: dict[str, Any]) -> dict[str, Any]:
        """
        Create a catalog with a fresh shareable link.

        The catalog row is removed again if its products can't be linked.

        Raises:
            PlanLimitExceededError: If the catalog limit is reached
            InvalidCatalogProductsError: If a product id isn't usable
        """
        SubscriptionService.ensure_can_create_catalog(user_id)
        product_ids = CatalogService.validate_product_ids(user_id, fields.get("product_ids") or [])

        client = SupabaseClient.get_client()
        data = {
            "user_id": normalize_uuid(user_id),
            "name": fields["name"],
            "brand_name": fields["brand_name"],
            "logo_url": fields.get("logo_url"),
            "shareable_link": generate_shareable_link(),
        }

        response = client.table("catalogs").insert(data).execute()
        if not response.data:
            raise Exception("Insert returned no data")
        catalog = response.data[0]

        try:
            CatalogService._insert_links(catalog["id"], product_ids)
        except Exception as e:
            logger.error(f"Failed to link products to catalog {catalog['id']}, rolling back: {e}")
            client.table("catalogs").delete().eq("id", catalog["id"]).execute()
            raise

        logger.info(f"Created catalog: {catalog['id']} with {len(product_ids)} products for user: {user_id}")
        return CatalogService.get_catalog(catalog["id"], user_id)

    @staticmethod
    def update_catalog(
        catalog_id: UUID | str,
        user_id: UUID | str,
        updates: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Update catalog fields; product_ids replaces the product list.

        Raises:
            CatalogNotFoundError: If missing or owned by someone else
            InvalidCatalogProductsError: If a product id isn't usable
        """
        CatalogService.get_catalog(catalog_id, user_id)
        catalog_id_str = normalize_uuid(catalog_id)
        client = SupabaseClient.get_client()

        product_ids = updates.get("product_ids")
        if product_ids is not None:
            product_ids = CatalogService.validate_product_ids(user_id, product_ids)

        update_data = {
            k: v for k, v in updates.items()
            if k in ("name", "brand_name", "logo_url") and v is not None
        }
        if update_data:
            (
                client.table("catalogs")
                .update(update_data)
                .eq("id", catalog_id_str)
                .eq("user_id", normalize_uuid(user_id))
                .execute()
            )

        if product_ids is not None:
            client.table("catalog_products").delete().eq("catalog_id", catalog_id_str).execute()
            CatalogService._insert_links(catalog_id_str, product_ids)

        logger.info(f"Updated catalog: {catalog_id_str}")
        return CatalogService.get_catalog(catalog_id_str, user_id)

    @staticmethod
    def delete_catalog(catalog_id: UUID | str, user_id: UUID | str) -> None:
        """
        Delete a catalog with its product links and customer responses.

        Raises:
            CatalogNotFoundError: If missing or owned by someone else
        """
        CatalogService.get_catalog(catalog_id, user_id)
        catalog_id_str = normalize_uuid(catalog_id)
        client = SupabaseClient.get_client()

        client.table("catalog_products").delete().eq("catalog_id", catalog_id_str).execute()
        client.table("customer_responses").delete().eq("catalog_id", catalog_id_str).execute()
        (
            client.table("catalogs")
            .delete()
            .eq("id", catalog_id_str)
            .eq("user_id", normalize_uuid(user_id))
            .execute()
        )
        logger.info(f"Deleted catalog: {catalog_id_str}")

    # -------------------------------------------------------------------------
    # Sharing
    # -------------------------------------------------------------------------

    @staticmethod
    def public_url(shareable_link: str) -> str:
        return f"{settings.APP_BASE_URL.rstrip('/')}/catalog/{shareable_link}"

    @staticmethod
    def get_share_links(catalog_id: UUID | str, user_id: UUID | str) -> dict[str, str]:
        """
        Build the public URL and ready-made email/WhatsApp/SMS share links.

        Raises:
            CatalogNotFoundError: If missing or owned by someone else
        """
        catalog = CatalogService.get_catalog(catalog_id, user_id)
        url = CatalogService.public_url(catalog["shareable_link"])
        name = catalog["name"]

        subject = f"Check out this catalog: {name}"
        body = f"Hi! I wanted to share this product catalog with you: {url}"
        text = f"Check out this product catalog: {name} - {url}"

        return {
            "url": url,
            "shareable_link": catalog["shareable_link"],
            "email": f"mailto:?subject={quote(subject)}&body={quote(body)}",
            "whatsapp": f"https://wa.me/?text={quote(text)}",
            "sms": f"sms:?body={quote(text)}",
        }

    @staticmethod
    def get_public_catalog(shareable_link: str) -> dict[str, Any]:
        """
        Resolve a shareable link for the public catalog page.

        Archived catalogs are hidden, and only active, non-archived
        products are shown. Owner ids are not exposed.

        Raises:
            CatalogNotFoundError: If the link doesn't resolve
        """
        catalog = SupabaseClient.fetch_one("catalogs", {"shareable_link": shareable_link})
        if not catalog or catalog.get("archived_at"):
            raise CatalogNotFoundError(shareable_link)

        catalog = CatalogService._attach_products([catalog], public_only=True)[0]
        return {
            "id": catalog["id"],
            "name": catalog["name"],
            "brand_name": catalog["brand_name"],
            "logo_url": catalog.get("logo_url"),
            "shareable_link": catalog["shareable_link"],
            "created_at": catalog.get("created_at"),
            "products": [
                {
                    key: product.get(key)
                    for key in (
                        "id", "name", "code", "category", "supplier", "image_url",
                        "thumbnail_url", "medium_url", "large_url",
                    )
                }
                for product in catalog["products"]
            ],
        }
