"""Integration tests for catalog browsing and admin product management."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from storefront.adapters.store.base import ProductRecord
from storefront.adapters.store.in_memory import InMemoryProductStore

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _seed(products: InMemoryProductStore, count: int, **overrides) -> list[ProductRecord]:
    records = []
    for i in range(count):
        record = ProductRecord(
            name=overrides.get("name", f"Product {i:02d}"),
            price=10.0 + i,
            stock=5,
            is_featured=overrides.get("is_featured", False),
            created_at=BASE_TIME + timedelta(minutes=i),
        )
        products.save(record)
        records.append(record)
    return records


class TestBrowsing:
    def test_empty_catalog(self, client: TestClient):
        resp = client.get("/api/products")

        assert resp.status_code == 200
        assert resp.json() == {"products": [], "page": 1, "pages": 0}

    def test_paginates_ten_per_page(self, client: TestClient, products):
        _seed(products, 23)

        first = client.get("/api/products").json()
        third = client.get("/api/products", params={"page_number": 3}).json()

        assert len(first["products"]) == 10
        assert first["pages"] == 3
        assert len(third["products"]) == 3
        assert third["page"] == 3

    def test_keyword_is_case_insensitive(self, client: TestClient, products):
        _seed(products, 2)
        products.save(ProductRecord(name="Wireless Mouse", price=25.0))

        body = client.get("/api/products", params={"keyword": "mouse"}).json()

        assert [p["name"] for p in body["products"]] == ["Wireless Mouse"]
        assert body["pages"] == 1

    def test_featured_returns_newest_eight(self, client: TestClient, products):
        featured = _seed(products, 10, is_featured=True)
        _seed(products, 3)

        body = client.get("/api/products/featured").json()

        assert len(body) == 8
        assert body[0]["id"] == featured[-1].id
        assert all(p["is_featured"] for p in body)

    def test_get_product_exposes_count_in_stock(self, client: TestClient, products):
        (record,) = _seed(products, 1)

        body = client.get(f"/api/products/{record.id}").json()

        assert body["name"] == record.name
        assert body["count_in_stock"] == 5

    def test_unknown_product_is_404(self, client: TestClient):
        resp = client.get("/api/products/does-not-exist")

        assert resp.status_code == 404
        assert resp.json()["error"]["message"] == "Product not found"

    def test_catalog_is_not_rate_limited(self, client: TestClient, app):
        app.state.rate_limiter.limit = 1

        for _ in range(3):
            assert client.get("/api/products").status_code == 200


class TestAdminManagement:
    @pytest.fixture
    def admin_headers(self, admin_token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {admin_token}"}

    def test_create_requires_admin(self, client: TestClient, user_token: str):
        resp = client.post(
            "/api/products",
            headers={"Authorization": f"Bearer {user_token}"},
            json={"name": "Lamp", "price": 20},
        )

        assert resp.status_code == 403

    def test_create_requires_token(self, client: TestClient):
        resp = client.post("/api/products", json={"name": "Lamp", "price": 20})

        assert resp.status_code == 401

    def test_create_update_delete(self, client: TestClient, admin_headers):
        created = client.post(
            "/api/products",
            headers=admin_headers,
            json={"name": "Lamp", "price": 20, "stock": 3},
        )
        assert created.status_code == 201
        product_id = created.json()["id"]

        updated = client.put(
            f"/api/products/{product_id}",
            headers=admin_headers,
            json={"price": 25.5},
        )
        assert updated.status_code == 200
        assert updated.json()["price"] == 25.5
        assert updated.json()["name"] == "Lamp"

        deleted = client.delete(f"/api/products/{product_id}", headers=admin_headers)
        assert deleted.status_code == 200
        assert deleted.json() == {"message": "Product removed"}
        assert client.get(f"/api/products/{product_id}").status_code == 404

    def test_delete_unknown_is_404(self, client: TestClient, admin_headers):
        resp = client.delete("/api/products/missing", headers=admin_headers)

        assert resp.status_code == 404

    def test_negative_price_is_rejected(self, client: TestClient, admin_headers):
        resp = client.post(
            "/api/products",
            headers=admin_headers,
            json={"name": "Lamp", "price": -1},
        )

        assert resp.status_code == 422
