# =============================================================================
# core/services/unprocessed_service.py - Unprocessed Product Logic
# =============================================================================
# Uploaded images wait here until their metadata is complete. Processing
# turns one into a product, which is when it starts counting against the
# plan's image limit.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid
from core.models.unprocessed import REQUIRED_PRODUCT_FIELDS
from core.services.product_service import ProductService
from core.services.storage_service import StorageService
from core.services.subscription_service import SubscriptionService
from app.exceptions import (
    CatalogAppException,
    IncompleteProductError,
    UnprocessedProductNotFoundError,
)

logger = logging.getLogger(__name__)

TABLE = "unprocessed_products"


class UnprocessedProductService:
    """Service for uploads awaiting metadata."""

    @staticmethod
    def list_unprocessed(user_id: UUID | str) -> list[dict[str, Any]]:
        """List the user's unprocessed products, newest first."""
        client = SupabaseClient.get_client()
        response = (
            client.table(TABLE)
            .select("*")
            .eq("user_id", normalize_uuid(user_id))
            .order("created_at", desc=True)
            .execute()
        )
        return response.data or []

    @staticmethod
    def get_unprocessed(unprocessed_id: UUID | str, user_id: UUID | str) -> dict[str, Any]:
        """
        Get an unprocessed product the user owns.

        Raises:
            UnprocessedProductNotFoundError: If missing or owned by someone else
        """
        row = SupabaseClient.fetch_one(TABLE, {"id": unprocessed_id, "user_id": user_id})
        if not row:
            raise UnprocessedProductNotFoundError(str(unprocessed_id))
        return row

    @staticmethod
    def create_unprocessed(user_id: UUID | str, fields: dict[str, Any]) -> dict[str, Any]:
        """
        Register an uploaded image. Doesn't count against plan limits.

        Raises:
            InvalidStorageKeyError: If an image URL points into another user's folder
        """
        StorageService.ensure_owned_url(user_id, fields["image_url"])
        StorageService.ensure_owned_url(user_id, fields.get("original_image_url"))

        client = SupabaseClient.get_client()

        data = {
            "user_id": normalize_uuid(user_id),
            "image_url": fields["image_url"],
            "original_image_url": fields.get("original_image_url") or fields["image_url"],
        }
        for field in REQUIRED_PRODUCT_FIELDS:
            if fields.get(field) is not None:
                data[field] = fields[field]

        response = client.table(TABLE).insert(data).execute()
        if not response.data:
            raise Exception("Insert returned no data")

        row = response.data[0]
        logger.info(f"Created unprocessed product: {row['id']} for user: {user_id}")
        return row

    @staticmethod
    def update_unprocessed(
        unprocessed_id: UUID | str,
        user_id: UUID | str,
        updates: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Fill in metadata. None values are ignored.

        Raises:
            UnprocessedProductNotFoundError: If missing or owned by someone else
        """
        row = UnprocessedProductService.get_unprocessed(unprocessed_id, user_id)

        update_data = {k: v for k, v in updates.items() if v is not None}
        if not update_data:
            return row

        client = SupabaseClient.get_client()
        response = (
            client.table(TABLE)
            .update(update_data)
            .eq("id", normalize_uuid(unprocessed_id))
            .eq("user_id", normalize_uuid(user_id))
            .execute()
        )
        return response.data[0] if response.data else {**row, **update_data}

    @staticmethod
    def delete_unprocessed(unprocessed_id: UUID | str, user_id: UUID | str) -> None:
        """
        Delete an unprocessed product and, best-effort, its image.

        Raises:
            UnprocessedProductNotFoundError: If missing or owned by someone else
        """
        row = UnprocessedProductService.get_unprocessed(unprocessed_id, user_id)

        client = SupabaseClient.get_client()
        (
            client.table(TABLE)
            .delete()
            .eq("id", normalize_uuid(unprocessed_id))
            .eq("user_id", normalize_uuid(user_id))
            .execute()
        )
        logger.info(f"Deleted unprocessed product: {unprocessed_id}")
        StorageService.delete_image_url(user_id, row.get("image_url"))

    # -------------------------------------------------------------------------
    # Processing
    # -------------------------------------------------------------------------

    @staticmethod
    def _repoint_image(client: Any, row: dict[str, Any], image_url: str, original_image_url: str) -> None:
        """Point an unprocessed row at its already-moved image so it can be retried."""
        try:
            (
                client.table(TABLE)
                .update({"image_url": image_url, "original_image_url": original_image_url})
                .eq("id", row["id"])
                .execute()
            )
            logger.warning(f"Product insert failed; unprocessed product {row['id']} now points at {image_url}")
        except Exception as e:
            logger.error(f"Could not repoint unprocessed product {row['id']} to {image_url}: {e}")

    @staticmethod
    def process(
        unprocessed_id: UUID | str,
        user_id: UUID | str,
        overrides: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Turn an unprocessed upload into a product.

        Steps:
        1. Merge overrides onto the stored metadata
        2. Require name, code, category and supplier
        3. Enforce the plan's image limit
        4. Move the image from "unprocessed/" to "products/"
        5. Insert the product and delete the unprocessed row

        If the insert fails after the move, the unprocessed row is pointed
        at the moved image so processing can be retried.

        Returns:
            The created product

        Raises:
            UnprocessedProductNotFoundError: If missing or owned by someone else
            IncompleteProductError: If a required field is blank
            PlanLimitExceededError: If the image limit is reached
        """
        row = UnprocessedProductService.get_unprocessed(unprocessed_id, user_id)

        merged = {**row}
        for key, value in (overrides or {}).items():
            if value is not None:
                merged[key] = value

        missing = [f for f in REQUIRED_PRODUCT_FIELDS if not str(merged.get(f) or "").strip()]
        if missing:
            raise IncompleteProductError(str(unprocessed_id), missing)

        SubscriptionService.ensure_can_add_products(user_id)

        image_url = StorageService.promote_unprocessed_image(user_id, row["image_url"])
        original_image_url = row.get("original_image_url")
        if not original_image_url or original_image_url == row["image_url"]:
            original_image_url = image_url

        client = SupabaseClient.get_client()
        try:
            product = ProductService.insert_product(
                user_id,
                {
                    "name": merged["name"].strip(),
                    "code": merged["code"].strip(),
                    "category": merged["category"].strip(),
                    "supplier": merged["supplier"].strip(),
                    "image_url": image_url,
                    "original_image_url": original_image_url,
                },
            )
        except Exception:
            if image_url != row["image_url"]:
                UnprocessedProductService._repoint_image(client, row, image_url, original_image_url)
            raise

        (
            client.table(TABLE)
            .delete()
            .eq("id", normalize_uuid(unprocessed_id))
            .eq("user_id", normalize_uuid(user_id))
            .execute()
        )
        logger.info(f"Processed unprocessed product {unprocessed_id} into product {product['id']}")
        return product

    @staticmethod
    def process_many(user_id: UUID | str, unprocessed_ids: list[UUID | str]) -> dict[str, Any]:
        """
        Process several uploads in order.

        Each item succeeds or fails on its own. Once the plan limit is hit
        the remaining items are reported as skipped.

        Returns:
            {"processed": [...products], "failed": [{"id", "code", "error"}]}
        """
        processed: list[dict[str, Any]] = []
        failed: list[dict[str, Any]] = []
        limit_reached = False

        for unprocessed_id in unprocessed_ids:
            item_id = normalize_uuid(unprocessed_id)
            if limit_reached:
                failed.append({"id": item_id, "code": "SKIPPED", "error": "Plan limit reached"})
                continue

            try:
                processed.append(UnprocessedProductService.process(item_id, user_id))
            except CatalogAppException as e:
                failed.append({"id": item_id, "code": e.code, "error": e.message})
                if e.code == "PLAN_LIMIT_EXCEEDED":
                    limit_reached = True

        logger.info(f"Bulk processed {len(processed)}/{len(unprocessed_ids)} items for user {user_id}")
        return {"processed": processed, "failed": failed}
