# =============================================================================
# core/services/product_service.py - Product Business Logic
# =============================================================================
# Handles product CRUD and the checks around it:
# - Image limit enforced on create
# - Deleting a product that catalogs use needs an explicit detach
# =============================================================================

import logging
import re
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import get_image_variants, normalize_uuid
from core.services.subscription_service import SubscriptionService
from core.services.storage_service import StorageService
from app.exceptions import ProductInUseError, ProductNotFoundError

logger = logging.getLogger(__name__)

# Characters with meaning in a PostgREST or=() filter
_FILTER_SPECIALS = re.compile(r"[,()*%\\]")


def with_image_variants(product: dict[str, Any]) -> dict[str, Any]:
    """Add thumbnail/medium/large URLs to a product row."""
    variants = get_image_variants(product.get("image_url"))
    return {
        **product,
        "thumbnail_url": variants["thumbnail"],
        "medium_url": variants["medium"],
        "large_url": variants["large"],
    }


class ProductService:
    """
    Service for product management operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def list_products(
        user_id: UUID | str,
        search: str | None = None,
        category: str | None = None,
        supplier: str | None = None,
        active: bool | None = None,
        include_archived: bool = False,
    ) -> list[dict[str, Any]]:
        """
        List the user's products, newest first.

        Args:
            user_id: Owner
            search: Case-insensitive match on name or code
            category: Exact category filter
            supplier: Exact supplier filter
            active: Filter on isactive
            include_archived: Include plan-downgrade archived products

        Returns:
            List of product dicts with image variant URLs
        """
        client = SupabaseClient.get_client()

        query = (
            client.table("products")
            .select("*")
            .eq("user_id", normalize_uuid(user_id))
        )
        if not include_archived:
            query = query.is_("archived_at", "null")
        if category:
            query = query.eq("category", category)
        if supplier:
            query = query.eq("supplier", supplier)
        if active is not None:
            query = query.eq("isactive", active)
        if search and search.strip():
            term = _FILTER_SPECIALS.sub(" ", search.strip())
            query = query.or_(f"name.ilike.%{term}%,code.ilike.%{term}%")

        response = query.order("created_at", desc=True).execute()
        return [with_image_variants(p) for p in response.data or []]

    @staticmethod
    def get_product(product_id: UUID | str, user_id: UUID | str) -> dict[str, Any]:
        """
        Get a product the user owns.

        Raises:
            ProductNotFoundError: If it doesn't exist or belongs to someone else
        """
        product = SupabaseClient.fetch_one(
            "products",
            {"id": product_id, "user_id": user_id},
        )
        if not product:
            raise ProductNotFoundError(str(product_id))
        return with_image_variants(product)

    @staticmethod
    def insert_product(user_id: UUID | str, fields: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a product row without checking plan limits.

        Callers must have run SubscriptionService.ensure_can_add_products.
        """
        client = SupabaseClient.get_client()

        data = {
            "user_id": normalize_uuid(user_id),
            "name": fields["name"],
            "code": fields["code"],
            "category": fields["category"],
            "supplier": fields["supplier"],
            "image_url": fields["image_url"],
            "original_image_url": fields.get("original_image_url") or fields["image_url"],
            "isactive": fields.get("isactive", True),
        }

        try:
            response = client.table("products").insert(data).execute()
            if response.data:
                product = response.data[0]
                logger.info(f"Created product: {product['id']} for user: {user_id}")
                return with_image_variants(product)

            raise Exception("Insert returned no data")

        except Exception as e:
            logger.error(f"Failed to create product: {e}")
            raise

    @staticmethod
    def create_product(user_id: UUID | str, fields: dict[str, Any]) -> dict[str, Any]:
        """
        Create a product.

        Raises:
            InvalidStorageKeyError: If an image URL points into another user's folder
            PlanLimitExceededError: If the user's image limit is reached
        """
        StorageService.ensure_owned_url(user_id, fields.get("image_url"))
        StorageService.ensure_owned_url(user_id, fields.get("original_image_url"))
        SubscriptionService.ensure_can_add_products(user_id)
        return ProductService.insert_product(user_id, fields)

    @staticmethod
    def update_product(
        product_id: UUID | str,
        user_id: UUID | str,
        updates: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Update product fields. None values are ignored.

        Raises:
            ProductNotFoundError: If it doesn't exist or belongs to someone else
        """
        product = ProductService.get_product(product_id, user_id)

        update_data = {k: v for k, v in updates.items() if v is not None}
        StorageService.ensure_owned_url(user_id, update_data.get("image_url"))
        if not update_data:
            return product

        client = SupabaseClient.get_client()
        response = (
            client.table("products")
            .update(update_data)
            .eq("id", normalize_uuid(product_id))
            .eq("user_id", normalize_uuid(user_id))
            .execute()
        )

        logger.info(f"Updated product: {product_id} ({', '.join(update_data)})")
        if response.data:
            return with_image_variants(response.data[0])
        return {**product, **update_data}

    @staticmethod
    def set_status(product_id: UUID | str, user_id: UUID | str, isactive: bool) -> dict[str, Any]:
        """Activate or deactivate a product."""
        return ProductService.update_product(product_id, user_id, {"isactive": isactive})

    @staticmethod
    def get_product_catalogs(product_id: UUID | str, user_id: UUID | str) -> list[dict[str, Any]]:
        """
        List the catalogs that include a product.

        Raises:
            ProductNotFoundError: If it doesn't exist or belongs to someone else
        """
        ProductService.get_product(product_id, user_id)
        client = SupabaseClient.get_client()

        links = (
            client.table("catalog_products")
            .select("catalog_id")
            .eq("product_id", normalize_uuid(product_id))
            .execute()
        ).data or []

        catalog_ids = sorted({link["catalog_id"] for link in links})
        if not catalog_ids:
            return []

        catalogs = (
            client.table("catalogs")
            .select("id, name, shareable_link")
            .in_("id", catalog_ids)
            .execute()
        ).data or []
        return catalogs

    @staticmethod
    def delete_product(
        product_id: UUID | str,
        user_id: UUID | str,
        detach: bool = False,
    ) -> dict[str, Any]:
        """
        Delete a product.

        A product still used by catalogs is only deleted when detach=True,
        in which case it is removed from those catalogs first. The stored
        image is removed afterwards, best-effort.

        Returns:
            Dict with the deleted product_id and the catalogs it was detached from

        Raises:
            ProductNotFoundError: If it doesn't exist or belongs to someone else
            ProductInUseError: If catalogs use it and detach is False
        """
        product = ProductService.get_product(product_id, user_id)
        catalogs = ProductService.get_product_catalogs(product_id, user_id)
        product_id_str = normalize_uuid(product_id)

        if catalogs and not detach:
            raise ProductInUseError(product_id_str, catalogs)

        client = SupabaseClient.get_client()
        if catalogs:
            client.table("catalog_products").delete().eq("product_id", product_id_str).execute()
            logger.info(f"Detached product {product_id_str} from {len(catalogs)} catalog(s)")

        (
            client.table("products")
            .delete()
            .eq("id", product_id_str)
            .eq("user_id", normalize_uuid(user_id))
            .execute()
        )
        logger.info(f"Deleted product: {product_id_str}")

        StorageService.delete_image_url(user_id, product.get("image_url"))
        if product.get("original_image_url") and product["original_image_url"] != product.get("image_url"):
            StorageService.delete_image_url(user_id, product["original_image_url"])

        return {
            "product_id": product_id_str,
            "detached_from": [c["id"] for c in catalogs],
        }
