# =============================================================================
# tests/test_catalog_service.py - Catalog, Share Link and Response Tests
# =============================================================================
# Run with: pytest tests/test_catalog_service.py -v
# =============================================================================

import uuid

import pytest

from app.exceptions import (
    CatalogNotFoundError,
    InvalidCatalogProductsError,
    PlanLimitExceededError,
)
from core.services.catalog_service import CatalogService
from core.services.response_service import ResponseService


def _catalog_fields(product_ids=(), **overrides):
    data = {"name": "Summer", "brand_name": "Acme", "logo_url": None, "product_ids": list(product_ids)}
    data.update(overrides)
    return data


# =============================================================================
# Catalog CRUD
# =============================================================================

class TestCreateCatalog:
    """Tests for CatalogService.create_catalog."""

    def test_create_links_products(self, fake_db, user_id, make_product):
        a = make_product(name="A")
        b = make_product(name="B")

        catalog = CatalogService.create_catalog(user_id, _catalog_fields([a["id"], b["id"], a["id"]]))

        assert catalog["shareable_link"].startswith("catalog-")
        assert [p["name"] for p in catalog["products"]] == ["A", "B"]
        assert len(fake_db.rows("catalog_products")) == 2

    def test_catalog_limit(self, fake_db, user_id, make_catalog):
        make_catalog()
        make_catalog()

        with pytest.raises(PlanLimitExceededError) as exc_info:
            CatalogService.create_catalog(user_id, _catalog_fields())

        assert exc_info.value.details["resource"] == "catalogs"
        assert len(fake_db.rows("catalogs")) == 2

    def test_archived_catalogs_do_not_count(self, fake_db, user_id, make_catalog):
        make_catalog()
        make_catalog(archived_at="2025-01-02T00:00:00+00:00")

        CatalogService.create_catalog(user_id, _catalog_fields())

        assert len(fake_db.rows("catalogs")) == 3

    def test_rejects_foreign_and_archived_products(self, fake_db, user_id, other_user_id, make_product):
        theirs = make_product(owner=other_user_id)
        archived = make_product(archived_at="2025-01-02T00:00:00+00:00")
        missing = str(uuid.uuid4())

        with pytest.raises(InvalidCatalogProductsError) as exc_info:
            CatalogService.create_catalog(
                user_id, _catalog_fields([theirs["id"], archived["id"], missing])
            )

        assert exc_info.value.details["product_ids"] == [theirs["id"], archived["id"], missing]
        assert fake_db.rows("catalogs") == []

    def test_rolls_back_when_links_fail(self, fake_db, user_id, make_product):
        product = make_product()
        fake_db.fail_tables["catalog_products"] = "insert"

        with pytest.raises(RuntimeError):
            CatalogService.create_catalog(user_id, _catalog_fields([product["id"]]))

        assert fake_db.rows("catalogs") == []


class TestReadUpdateDelete:
    """Tests for the other catalog operations."""

    def test_list_newest_first(self, fake_db, user_id, other_user_id, make_catalog):
        old = make_catalog(name="Old")
        new = make_catalog(name="New")
        make_catalog(owner=other_user_id)

        catalogs = CatalogService.list_catalogs(user_id)

        assert [c["id"] for c in catalogs] == [new["id"], old["id"]]

    def test_get_other_users_catalog(self, fake_db, user_id, other_user_id, make_catalog):
        theirs = make_catalog(owner=other_user_id)

        with pytest.raises(CatalogNotFoundError):
            CatalogService.get_catalog(theirs["id"], user_id)

    def test_update_replaces_products(self, fake_db, user_id, make_product, make_catalog):
        a = make_product(name="A")
        b = make_product(name="B")
        catalog = make_catalog([a["id"]])

        updated = CatalogService.update_catalog(
            catalog["id"], user_id, {"name": "Winter", "product_ids": [b["id"]]}
        )

        assert updated["name"] == "Winter"
        assert [p["id"] for p in updated["products"]] == [b["id"]]

    def test_update_without_product_ids_keeps_links(self, fake_db, user_id, make_product, make_catalog):
        a = make_product()
        catalog = make_catalog([a["id"]])

        updated = CatalogService.update_catalog(catalog["id"], user_id, {"brand_name": "New Brand"})

        assert updated["brand_name"] == "New Brand"
        assert len(updated["products"]) == 1

    def test_delete_cascades(self, fake_db, user_id, make_product, make_catalog):
        product = make_product()
        catalog = make_catalog([product["id"]])
        fake_db.seed("customer_responses", catalog_id=catalog["id"], customer_name="Jo", liked_products=[])

        CatalogService.delete_catalog(catalog["id"], user_id)

        assert fake_db.rows("catalogs") == []
        assert fake_db.rows("catalog_products") == []
        assert fake_db.rows("customer_responses") == []
        assert len(fake_db.rows("products")) == 1


# =============================================================================
# Sharing and Public View
# =============================================================================

class TestSharing:
    """Tests for share links and the public catalog."""

    def test_share_links(self, fake_db, user_id, make_catalog):
        catalog = make_catalog(name="Summer Line", shareable_link="catalog-1-abc")

        links = CatalogService.get_share_links(catalog["id"], user_id)

        assert links["url"] == "https://app.example.com/catalog/catalog-1-abc"
        assert links["whatsapp"].startswith("https://wa.me/?text=Check%20out")
        assert links["email"].startswith("mailto:?subject=")
        assert "catalog-1-abc" in links["sms"]

    def test_public_catalog_hides_inactive_and_archived(self, fake_db, make_product, make_catalog):
        visible = make_product(name="Visible")
        inactive = make_product(name="Inactive", isactive=False)
        archived = make_product(name="Archived", archived_at="2025-01-02T00:00:00+00:00")
        make_catalog([visible["id"], inactive["id"], archived["id"]], shareable_link="catalog-9-xyz")

        public = CatalogService.get_public_catalog("catalog-9-xyz")

        assert [p["name"] for p in public["products"]] == ["Visible"]
        assert "user_id" not in public
        assert "user_id" not in public["products"][0]

    def test_archived_catalog_is_not_public(self, fake_db, make_catalog):
        make_catalog(shareable_link="catalog-2-old", archived_at="2025-01-02T00:00:00+00:00")

        with pytest.raises(CatalogNotFoundError):
            CatalogService.get_public_catalog("catalog-2-old")

    def test_unknown_link(self, fake_db):
        with pytest.raises(CatalogNotFoundError):
            CatalogService.get_public_catalog("catalog-0-none")


# =============================================================================
# Customer Responses
# =============================================================================

class TestResponses:
    """Tests for ResponseService."""

    def test_submit_keeps_only_visible_likes(self, fake_db, make_product, make_catalog):
        shown = make_product()
        hidden = make_product(isactive=False)
        make_catalog([shown["id"], hidden["id"]], shareable_link="catalog-3-abc")

        row = ResponseService.submit_response(
            "catalog-3-abc",
            {
                "customer_name": "  Jo  ",
                "customer_email": "",
                "liked_products": [uuid.UUID(shown["id"]), uuid.UUID(hidden["id"]), uuid.UUID(shown["id"])],
            },
        )

        assert row["customer_name"] == "Jo"
        assert row["customer_email"] is None
        assert row["liked_products"] == [shown["id"]]

    def test_submissions_are_appended(self, fake_db, make_catalog):
        make_catalog(shareable_link="catalog-4-abc")

        ResponseService.submit_response("catalog-4-abc", {"customer_name": "Jo"})
        ResponseService.submit_response("catalog-4-abc", {"customer_name": "Jo"})

        assert len(fake_db.rows("customer_responses")) == 2

    def test_summary_counts_likes(self, fake_db, user_id, make_product, make_catalog):
        a = make_product(name="A")
        b = make_product(name="B")
        catalog = make_catalog([a["id"], b["id"]])
        fake_db.seed("customer_responses", catalog_id=catalog["id"], customer_name="1", liked_products=[b["id"]])
        fake_db.seed("customer_responses", catalog_id=catalog["id"], customer_name="2", liked_products=[a["id"], b["id"]])

        summary = ResponseService.summarize(catalog["id"], user_id)

        assert summary["total_responses"] == 2
        assert summary["likes"] == [
            {"product_id": b["id"], "name": "B", "likes": 2},
            {"product_id": a["id"], "name": "A", "likes": 1},
        ]

    def test_list_responses_across_catalogs(self, fake_db, user_id, other_user_id, make_catalog):
        mine = make_catalog(name="Mine")
        theirs = make_catalog(owner=other_user_id)
        fake_db.seed("customer_responses", catalog_id=mine["id"], customer_name="A", liked_products=[])
        fake_db.seed("customer_responses", catalog_id=theirs["id"], customer_name="B", liked_products=[])

        responses = ResponseService.list_responses(user_id)

        assert [r["customer_name"] for r in responses] == ["A"]
        assert responses[0]["catalog_name"] == "Mine"
