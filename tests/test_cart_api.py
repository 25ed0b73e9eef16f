"""
Tests for the /api/cart and /api/products HTTP endpoints.
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from storefront.services.session_service import issue_session_token
from storefront.utils.settings import SESSION_COOKIE_NAME


class TestAuth:

    @pytest.mark.parametrize(
        "method, kwargs",
        [
            ("GET", {}),
            ("POST", {"json": {"product_id": "tee", "quantity": 1}}),
            ("PATCH", {"json": {"product_id": "tee", "quantity": 1}}),
            ("DELETE", {}),
        ],
    )
    def test_requires_session(self, client, method, kwargs):
        response = client.request(method, "/api/cart", **kwargs)

        assert response.status_code == 401

    def test_invalid_token(self, client):
        response = client.get("/api/cart", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token"

    def test_session_cookie(self, client, users, product):
        client.cookies.set(SESSION_COOKIE_NAME, issue_session_token("user-a"))

        response = client.get("/api/cart")

        assert response.status_code == 200
        assert response.json()["user_id"] == "user-a"


class TestReserveEndpoint:

    def test_reserve(self, client, users, product, auth_headers):
        response = client.post(
            "/api/cart",
            json={"product_id": "tee", "quantity": 3, "sizes": "M"},
            headers=auth_headers(),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["product_id"] == "tee"
        assert data["sizes"] == "M"
        assert data["quantity"] == 3
        assert data["user_id"] == "user-a"

    def test_insufficient_stock(self, client, users, product, auth_headers, add_line):
        add_line("user-b", "tee", 8, "L")

        response = client.post(
            "/api/cart",
            json={"product_id": "tee", "quantity": 3, "sizes": "M"},
            headers=auth_headers(),
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Only 2 items available in stock"

    def test_unknown_product(self, client, users, auth_headers):
        response = client.post(
            "/api/cart",
            json={"product_id": "nope", "quantity": 1},
            headers=auth_headers(),
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Product not found"

    @pytest.mark.parametrize(
        "body",
        [
            {"product_id": "tee", "quantity": 0},
            {"product_id": "tee"},
            {"quantity": 1},
            {"product_id": "", "quantity": 1},
        ],
    )
    def test_bad_input(self, client, users, product, auth_headers, body):
        response = client.post("/api/cart", json=body, headers=auth_headers())

        assert response.status_code == 400

    def test_lock_contention_is_conflict(self, client, users, product, auth_headers, lock_service):
        lock_service.held.add("tee")

        response = client.post(
            "/api/cart",
            json={"product_id": "tee", "quantity": 1},
            headers=auth_headers(),
        )

        assert response.status_code == 409


class TestListEndpoints:

    def test_list_cart(self, client, users, product, auth_headers, add_line):
        add_line("user-a", "tee", 2, "M")
        add_line("user-b", "tee", 1, "S")

        response = client.get("/api/cart", headers=auth_headers())

        assert response.status_code == 200
        data = response.json()
        assert len(data["items"]) == 1
        item = data["items"][0]
        assert item["sizes"] == "M"
        assert item["product"]["name"] == "Classic Tee"
        assert item["product"]["image_urls"] == ["/img/tee.jpg"]
        assert Decimal(data["total"]) == Decimal("200.00")
        assert data["count"] == 2

    def test_list_cart_hides_stale(self, client, users, product, auth_headers, add_line):
        add_line("user-a", "tee", 2, "M", age=timedelta(hours=3))

        response = client.get("/api/cart", headers=auth_headers())

        assert response.json()["items"] == []

    def test_summary(self, client, users, product, auth_headers, add_line):
        add_line("user-a", "tee", 2, "M")
        add_line("user-a", "tee", 1, "L")

        response = client.get("/api/cart/summary", headers=auth_headers())

        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["total"]) == Decimal("300.00")
        assert data["count"] == 3


class TestSetQuantityEndpoint:

    def test_update(self, client, users, product, auth_headers, add_line, lines_of):
        add_line("user-a", "tee", 2, "M")

        response = client.patch(
            "/api/cart",
            json={"product_id": "tee", "quantity": 4, "sizes": "L"},
            headers=auth_headers(),
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert [(l.size_variant, l.quantity) for l in lines_of("user-a")] == [("L", 4)]

    def test_not_in_cart(self, client, users, product, auth_headers):
        response = client.patch(
            "/api/cart",
            json={"product_id": "tee", "quantity": 1, "sizes": "M"},
            headers=auth_headers(),
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Item not found in cart"

    def test_above_stock(self, client, users, product, auth_headers, add_line):
        add_line("user-a", "tee", 2, "M")

        response = client.patch(
            "/api/cart",
            json={"product_id": "tee", "quantity": 11, "sizes": "M"},
            headers=auth_headers(),
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Only 10 items available in stock"

    def test_negative_quantity(self, client, users, product, auth_headers, add_line):
        add_line("user-a", "tee", 2, "M")

        response = client.patch(
            "/api/cart",
            json={"product_id": "tee", "quantity": -1},
            headers=auth_headers(),
        )

        assert response.status_code == 400

    def test_null_sizes_moves_line_to_default_variant(self, client, users, product, auth_headers, add_line, lines_of):
        add_line("user-a", "tee", 2, "M")

        response = client.patch(
            "/api/cart",
            json={"product_id": "tee", "quantity": 3, "sizes": None},
            headers=auth_headers(),
        )

        assert response.status_code == 200
        assert [(l.size_variant, l.quantity) for l in lines_of("user-a")] == [("", 3)]

    def test_missing_sizes_keeps_variant(self, client, users, product, auth_headers, add_line, lines_of):
        add_line("user-a", "tee", 2, "M")

        response = client.patch(
            "/api/cart",
            json={"product_id": "tee", "quantity": 3},
            headers=auth_headers(),
        )

        assert response.status_code == 200
        assert [(l.size_variant, l.quantity) for l in lines_of("user-a")] == [("M", 3)]


class TestDeleteEndpoint:

    def test_remove_variant(self, client, users, product, auth_headers, add_line, lines_of):
        add_line("user-a", "tee", 1, "S")
        add_line("user-a", "tee", 1, "M")

        response = client.request(
            "DELETE", "/api/cart", json={"product_id": "tee", "sizes": "S"}, headers=auth_headers()
        )

        assert response.status_code == 200
        assert [l.size_variant for l in lines_of("user-a")] == ["M"]

    def test_remove_all_variants(self, client, users, product, auth_headers, add_line, lines_of):
        add_line("user-a", "tee", 1, "S")
        add_line("user-a", "tee", 1, "M")

        response = client.request(
            "DELETE", "/api/cart", json={"product_id": "tee"}, headers=auth_headers()
        )

        assert response.status_code == 200
        assert lines_of("user-a") == []

    def test_remove_missing_variant(self, client, users, product, auth_headers, add_line):
        add_line("user-a", "tee", 1, "S")

        response = client.request(
            "DELETE", "/api/cart", json={"product_id": "tee", "sizes": "XL"}, headers=auth_headers()
        )

        assert response.status_code == 404

    def test_clear_without_body(self, client, users, product, auth_headers, add_line, lines_of):
        add_line("user-a", "tee", 1, "S")
        add_line("user-b", "tee", 1, "S")

        first = client.delete("/api/cart", headers=auth_headers())
        second = client.delete("/api/cart", headers=auth_headers())

        assert first.status_code == 200
        assert second.status_code == 200
        assert lines_of("user-a") == []
        assert len(lines_of("user-b")) == 1


class TestMaintenanceEndpoints:

    def test_cleanup(self, client, users, product, add_line):
        add_line("user-a", "tee", 1, "S", age=timedelta(hours=5))
        add_line("user-b", "tee", 1, "S")

        response = client.post("/api/cart/cleanup")

        assert response.status_code == 200
        assert response.json() == {"message": "Cart cleanup completed", "deleted_items": 1}

    def test_product_stock(self, client, users, product, add_line):
        add_line("user-a", "tee", 3, "S")

        response = client.get("/api/products/stock/tee")

        assert response.status_code == 200
        assert response.json() == {
            "product_id": "tee",
            "product_name": "Classic Tee",
            "total_stock": 10,
            "reserved_stock": 3,
            "available_stock": 7,
        }

    def test_product_stock_unknown(self, client):
        response = client.get("/api/products/stock/nope")

        assert response.status_code == 404

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "database": "up"}
