# =============================================================================
# tests/test_unprocessed_service.py - Unprocessed Product Tests
# =============================================================================
# Covers metadata completion, single and bulk processing, and the image
# move from the unprocessed folder to the products folder.
#
# Run with: pytest tests/test_unprocessed_service.py -v
# =============================================================================

import pytest

from app.exceptions import (
    IncompleteProductError,
    InvalidStorageKeyError,
    PlanLimitExceededError,
    UnprocessedProductNotFoundError,
)
from core.services.unprocessed_service import UnprocessedProductService

BASE = "https://images.example.com"


@pytest.fixture
def make_unprocessed(fake_db, user_id):
    def _make(owner: str | None = None, **fields) -> dict:
        owner = owner or user_id
        image = f"{BASE}/{owner}/unprocessed/upload_1.png"
        defaults = {"user_id": owner, "image_url": image, "original_image_url": image}
        return fake_db.seed("unprocessed_products", **{**defaults, **fields})

    return _make


@pytest.fixture
def stored_image(r2):
    """Make every R2 server-side copy succeed."""
    r2.copy_object.return_value = {"CopyObjectResult": {"ETag": "\"abc\""}}
    return r2


COMPLETE = {"name": "Wool Hat", "code": "WH-1", "category": "Hats", "supplier": "Acme"}


class TestUnprocessedCrud:
    """Tests for create/update/delete."""

    def test_create_copies_original_url(self, fake_db, user_id):
        row = UnprocessedProductService.create_unprocessed(
            user_id, {"image_url": f"{BASE}/{user_id}/unprocessed/x.png", "name": "Draft", "code": None}
        )

        assert row["original_image_url"] == f"{BASE}/{user_id}/unprocessed/x.png"
        assert row["name"] == "Draft"
        assert "code" not in row

    def test_create_does_not_count_against_limit(self, fake_db, user_id, make_product):
        for _ in range(4):
            make_product()

        UnprocessedProductService.create_unprocessed(user_id, {"image_url": f"{BASE}/{user_id}/unprocessed/x.png"})

        assert len(fake_db.rows("unprocessed_products")) == 1

    def test_create_rejects_image_in_other_users_folder(self, fake_db, user_id, other_user_id):
        with pytest.raises(InvalidStorageKeyError):
            UnprocessedProductService.create_unprocessed(
                user_id, {"image_url": f"{BASE}/{other_user_id}/unprocessed/upload_1.png"}
            )

        assert fake_db.rows("unprocessed_products") == []

    def test_update_ignores_none(self, fake_db, user_id, make_unprocessed):
        row = make_unprocessed(name="Old")

        updated = UnprocessedProductService.update_unprocessed(
            row["id"], user_id, {"name": None, "code": "C-1"}
        )

        assert updated["name"] == "Old"
        assert updated["code"] == "C-1"

    def test_delete_removes_image(self, fake_db, r2, user_id, make_unprocessed):
        row = make_unprocessed()

        UnprocessedProductService.delete_unprocessed(row["id"], user_id)

        assert fake_db.rows("unprocessed_products") == []
        r2.delete_object.assert_called_once_with(
            Bucket="catalog-images", Key=f"{user_id}/unprocessed/upload_1.png"
        )

    def test_delete_leaves_other_users_image_alone(self, fake_db, r2, user_id, other_user_id, make_unprocessed):
        row = make_unprocessed(image_url=f"{BASE}/{other_user_id}/unprocessed/upload_1.png")

        UnprocessedProductService.delete_unprocessed(row["id"], user_id)

        assert fake_db.rows("unprocessed_products") == []
        r2.delete_object.assert_not_called()

    def test_other_users_row_is_not_found(self, fake_db, user_id, other_user_id, make_unprocessed):
        theirs = make_unprocessed(owner=other_user_id)

        with pytest.raises(UnprocessedProductNotFoundError):
            UnprocessedProductService.get_unprocessed(theirs["id"], user_id)


class TestProcess:
    """Tests for turning an upload into a product."""

    def test_process_with_overrides(self, fake_db, stored_image, user_id, make_unprocessed):
        row = make_unprocessed(name="Stored name")

        product = UnprocessedProductService.process(row["id"], user_id, {**COMPLETE, "name": "  Wool Hat  "})

        assert product["name"] == "Wool Hat"
        assert product["image_url"] == f"{BASE}/{user_id}/products/upload_1.png"
        assert product["original_image_url"] == product["image_url"]
        assert fake_db.rows("unprocessed_products") == []
        assert len(fake_db.rows("products")) == 1
        stored_image.copy_object.assert_called_once_with(
            Bucket="catalog-images",
            Key=f"{user_id}/products/upload_1.png",
            CopySource={"Bucket": "catalog-images", "Key": f"{user_id}/unprocessed/upload_1.png"},
        )
        stored_image.delete_object.assert_called_once_with(
            Bucket="catalog-images", Key=f"{user_id}/unprocessed/upload_1.png"
        )

    def test_incomplete_metadata(self, fake_db, stored_image, user_id, make_unprocessed):
        row = make_unprocessed(name="Hat", code=" ")

        with pytest.raises(IncompleteProductError) as exc_info:
            UnprocessedProductService.process(row["id"], user_id)

        assert exc_info.value.details["missing_fields"] == ["code", "category", "supplier"]
        assert fake_db.rows("products") == []
        assert len(fake_db.rows("unprocessed_products")) == 1

    def test_limit_enforced_on_process(self, fake_db, stored_image, user_id, make_product, make_unprocessed):
        for _ in range(4):
            make_product()
        row = make_unprocessed(**COMPLETE)

        with pytest.raises(PlanLimitExceededError):
            UnprocessedProductService.process(row["id"], user_id)

        assert len(fake_db.rows("unprocessed_products")) == 1
        stored_image.copy_object.assert_not_called()

    def test_external_image_is_not_moved(self, fake_db, r2, user_id, make_unprocessed):
        row = make_unprocessed(image_url="https://elsewhere.example.org/a.png", **COMPLETE)

        product = UnprocessedProductService.process(row["id"], user_id)

        assert product["image_url"] == "https://elsewhere.example.org/a.png"
        r2.copy_object.assert_not_called()

    def test_failed_insert_keeps_row_pointing_at_moved_image(self, fake_db, stored_image, user_id, make_unprocessed):
        row = make_unprocessed(**COMPLETE)
        fake_db.fail_tables["products"] = "insert"

        with pytest.raises(RuntimeError):
            UnprocessedProductService.process(row["id"], user_id)

        moved = f"{BASE}/{user_id}/products/upload_1.png"
        [remaining] = fake_db.rows("unprocessed_products")
        assert remaining["image_url"] == moved
        assert remaining["original_image_url"] == moved
        assert fake_db.rows("products") == []

    def test_retry_after_failed_insert(self, fake_db, stored_image, user_id, make_unprocessed):
        row = make_unprocessed(**COMPLETE)
        fake_db.fail_tables["products"] = "insert"
        with pytest.raises(RuntimeError):
            UnprocessedProductService.process(row["id"], user_id)
        del fake_db.fail_tables["products"]

        product = UnprocessedProductService.process(row["id"], user_id)

        # Already in products/, so no second copy
        assert product["image_url"] == f"{BASE}/{user_id}/products/upload_1.png"
        stored_image.copy_object.assert_called_once()
        assert fake_db.rows("unprocessed_products") == []


class TestProcessMany:
    """Tests for bulk processing."""

    def test_mixed_results_and_skip_after_limit(self, fake_db, stored_image, user_id, make_product, make_unprocessed):
        for _ in range(2):
            make_product()
        ok_1 = make_unprocessed(**COMPLETE)
        incomplete = make_unprocessed(name="Only name")
        ok_2 = make_unprocessed(**COMPLETE)
        over_limit = make_unprocessed(**COMPLETE)
        skipped = make_unprocessed(**COMPLETE)

        result = UnprocessedProductService.process_many(
            user_id, [ok_1["id"], incomplete["id"], ok_2["id"], over_limit["id"], skipped["id"]]
        )

        assert len(result["processed"]) == 2
        assert [(f["id"], f["code"]) for f in result["failed"]] == [
            (incomplete["id"], "INCOMPLETE_PRODUCT"),
            (over_limit["id"], "PLAN_LIMIT_EXCEEDED"),
            (skipped["id"], "SKIPPED"),
        ]
        assert len(fake_db.rows("products")) == 4
