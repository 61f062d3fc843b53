# =============================================================================
# tests/test_product_service.py - Product and Usage-Limit Tests
# =============================================================================
# Runs ProductService and SubscriptionService against the in-memory
# Supabase fixture.
#
# Run with: pytest tests/test_product_service.py -v
# =============================================================================

import pytest

from app.exceptions import (
    InvalidStorageKeyError,
    PlanLimitExceededError,
    ProductInUseError,
    ProductNotFoundError,
)
from core.services.product_service import ProductService
from core.services.subscription_service import SubscriptionService


USER_ID = "550e8400-e29b-41d4-a716-446655440000"
BASE = "https://images.example.com"


def _fields(**overrides):
    data = {
        "name": "Linen Shirt",
        "code": "LS-01",
        "category": "Shirts",
        "supplier": "Acme",
        "image_url": f"{BASE}/{USER_ID}/products/shirt.png",
    }
    data.update(overrides)
    return data


# =============================================================================
# Usage Limits
# =============================================================================

class TestUsage:
    """Tests for live usage counting."""

    def test_free_user_usage(self, fake_db, user_id, make_product, make_catalog):
        make_product()
        make_product(archived_at="2025-01-02T00:00:00+00:00")
        make_catalog()
        fake_db.seed("unprocessed_products", user_id=user_id, image_url="x")

        usage = SubscriptionService.get_usage(user_id)

        # Archived products and unprocessed uploads don't count
        assert usage["plan_id"] == "free"
        assert usage["image_count"] == 1
        assert usage["catalog_count"] == 1
        assert usage["unprocessed_count"] == 1
        assert usage["max_images"] == 4

    def test_summary_gates_and_percentages(self, fake_db, user_id, starter_plan, make_product):
        for _ in range(3):
            make_product()

        summary = SubscriptionService.get_summary(user_id)

        assert summary["current_plan"]["id"] == "starter"
        assert summary["subscription"]["stripe_subscription_id"] == "sub_123"
        assert summary["can_upload_image"] is True
        assert summary["can_create_catalog"] is True
        assert summary["usage_percentage"]["images"] == 50.0

    def test_summary_without_subscription(self, fake_db, user_id):
        summary = SubscriptionService.get_summary(user_id)

        assert summary["subscription"] is None
        assert summary["current_plan"]["id"] == "free"

    def test_canceled_subscription_uses_free_limits(self, fake_db, user_id):
        fake_db.seed("user_plans", user_id=user_id, plan_id="starter", status="canceled")

        assert SubscriptionService.get_effective_plan(user_id)["id"] == "free"

    def test_ensure_can_add_products_counts_batch(self, fake_db, user_id, make_product):
        for _ in range(3):
            make_product()

        SubscriptionService.ensure_can_add_products(user_id, count=1)
        with pytest.raises(PlanLimitExceededError) as exc_info:
            SubscriptionService.ensure_can_add_products(user_id, count=2)

        assert exc_info.value.status_code == 403
        assert exc_info.value.details["limit"] == 4

    def test_list_plans_cheapest_first(self):
        assert [p["id"] for p in SubscriptionService.list_plans()] == ["free", "starter"]


# =============================================================================
# Product CRUD
# =============================================================================

class TestCreateProduct:
    """Tests for ProductService.create_product."""

    def test_create_sets_defaults(self, fake_db, user_id):
        product = ProductService.create_product(user_id, _fields())

        assert product["user_id"] == user_id
        assert product["isactive"] is True
        assert product["original_image_url"] == product["image_url"]
        assert "/cdn-cgi/image/width=400,height=400" in product["thumbnail_url"]
        assert len(fake_db.rows("products")) == 1

    def test_create_refused_at_limit(self, fake_db, user_id, make_product):
        for _ in range(4):
            make_product()

        with pytest.raises(PlanLimitExceededError):
            ProductService.create_product(user_id, _fields())

        assert len(fake_db.rows("products")) == 4

    def test_starter_plan_allows_more(self, fake_db, user_id, starter_plan, make_product):
        for _ in range(4):
            make_product()

        ProductService.create_product(user_id, _fields(code="LS-05"))

        assert len(fake_db.rows("products")) == 5

    def test_create_rejects_image_in_other_users_folder(self, fake_db, user_id, other_user_id):
        with pytest.raises(InvalidStorageKeyError):
            ProductService.create_product(
                user_id, _fields(image_url=f"{BASE}/{other_user_id}/products/their-shirt.png")
            )

        assert fake_db.rows("products") == []

    def test_create_accepts_external_image(self, fake_db, user_id):
        product = ProductService.create_product(user_id, _fields(image_url="https://cdn.example.org/shirt.png"))

        assert product["image_url"] == "https://cdn.example.org/shirt.png"


class TestListProducts:
    """Tests for listing and filtering."""

    def test_newest_first_and_own_only(self, fake_db, user_id, other_user_id, make_product):
        first = make_product(name="First")
        second = make_product(name="Second")
        make_product(owner=other_user_id, name="Theirs")

        products = ProductService.list_products(user_id)

        assert [p["id"] for p in products] == [second["id"], first["id"]]

    def test_search_matches_name_or_code(self, fake_db, user_id, make_product):
        make_product(name="Blue Jacket", code="BJ-1")
        make_product(name="Red Scarf", code="JKT-9")
        make_product(name="Hat", code="H-1")

        names = {p["name"] for p in ProductService.list_products(user_id, search="j")}

        assert names == {"Blue Jacket", "Red Scarf"}

    def test_filters(self, fake_db, user_id, make_product):
        make_product(category="Shirts", isactive=True)
        make_product(category="Shirts", isactive=False)
        make_product(category="Hats", isactive=True)

        assert len(ProductService.list_products(user_id, category="Shirts")) == 2
        assert len(ProductService.list_products(user_id, category="Shirts", active=True)) == 1

    def test_archived_hidden_by_default(self, fake_db, user_id, make_product):
        make_product()
        make_product(archived_at="2025-01-02T00:00:00+00:00")

        assert len(ProductService.list_products(user_id)) == 1
        assert len(ProductService.list_products(user_id, include_archived=True)) == 2


class TestUpdateProduct:
    """Tests for updates and status toggles."""

    def test_update_fields(self, fake_db, user_id, make_product):
        product = make_product()

        updated = ProductService.update_product(product["id"], user_id, {"name": "New", "code": None})

        assert updated["name"] == "New"
        assert updated["code"] == "LS-01"

    def test_update_rejects_image_in_other_users_folder(self, fake_db, user_id, other_user_id, make_product):
        product = make_product()

        with pytest.raises(InvalidStorageKeyError):
            ProductService.update_product(
                product["id"], user_id, {"image_url": f"{BASE}/{other_user_id}/products/x.png"}
            )

        assert fake_db.rows("products")[0]["image_url"] == product["image_url"]

    def test_set_status(self, fake_db, user_id, make_product):
        product = make_product()

        updated = ProductService.set_status(product["id"], user_id, False)

        assert updated["isactive"] is False

    def test_cannot_touch_other_users_product(self, fake_db, user_id, other_user_id, make_product):
        theirs = make_product(owner=other_user_id)

        with pytest.raises(ProductNotFoundError):
            ProductService.update_product(theirs["id"], user_id, {"name": "Mine now"})


class TestDeleteProduct:
    """Tests for delete with catalog references."""

    def test_delete_unused_product(self, fake_db, r2, user_id, make_product):
        product = make_product()

        result = ProductService.delete_product(product["id"], user_id)

        assert result["product_id"] == product["id"]
        assert fake_db.rows("products") == []
        r2.delete_object.assert_called_once_with(
            Bucket="catalog-images", Key=f"{user_id}/products/shirt.png"
        )

    def test_delete_refused_when_in_catalog(self, fake_db, r2, user_id, make_product, make_catalog):
        product = make_product()
        catalog = make_catalog([product["id"]], name="Summer")

        with pytest.raises(ProductInUseError) as exc_info:
            ProductService.delete_product(product["id"], user_id)

        assert exc_info.value.status_code == 409
        assert exc_info.value.details["catalogs"][0]["id"] == catalog["id"]
        assert len(fake_db.rows("products")) == 1
        r2.delete_object.assert_not_called()

    def test_detach_then_delete(self, fake_db, r2, user_id, make_product, make_catalog):
        product = make_product()
        keep = make_product(name="Keep")
        make_catalog([product["id"], keep["id"]])

        result = ProductService.delete_product(product["id"], user_id, detach=True)

        assert len(result["detached_from"]) == 1
        assert [row["product_id"] for row in fake_db.rows("catalog_products")] == [keep["id"]]

    def test_delete_leaves_other_users_image_alone(self, fake_db, r2, user_id, other_user_id, make_product):
        theirs = f"{BASE}/{other_user_id}/products/their-shirt.png"
        # Seeded directly: rows like this predate the create-time check
        product = make_product(image_url=theirs, original_image_url=theirs)

        ProductService.delete_product(product["id"], user_id)

        assert fake_db.rows("products") == []
        r2.delete_object.assert_not_called()

    def test_storage_failure_does_not_block_delete(self, fake_db, r2, user_id, make_product):
        from botocore.exceptions import ClientError

        r2.delete_object.side_effect = ClientError(
            {"Error": {"Code": "InternalError", "Message": "boom"}}, "DeleteObject"
        )
        product = make_product()

        ProductService.delete_product(product["id"], user_id)

        assert fake_db.rows("products") == []

    def test_product_catalogs(self, fake_db, user_id, make_product, make_catalog):
        product = make_product()
        make_catalog([product["id"]], name="A")
        make_catalog([product["id"]], name="B")

        catalogs = ProductService.get_product_catalogs(product["id"], user_id)

        assert sorted(c["name"] for c in catalogs) == ["A", "B"]
