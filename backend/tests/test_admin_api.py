"""
Admin session cookie, order listing and discount code management.
"""
import pytest
from decimal import Decimal

from conftest import ADMIN_EMAIL, ADMIN_PASSWORD


class TestAdminAuth:

    async def test_login_sets_http_only_cookie(self, client, admin_user):
        response = await client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})

        assert response.status_code == 200
        assert response.json()["user"]["email"] == ADMIN_EMAIL
        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith("admin-token=")
        assert "HttpOnly" in set_cookie

    async def test_wrong_password(self, client, admin_user):
        response = await client.post("/auth/login", json={"email": ADMIN_EMAIL, "password": "nope"})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid email or password"

    async def test_unknown_email_fails_the_same_way(self, client):
        response = await client.post("/auth/login", json={"email": "who@kindkandles.com", "password": "nope"})

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid email or password"

    async def test_me(self, admin_client):
        response = await admin_client.get("/auth/me")

        assert response.status_code == 200
        assert response.json()["user"]["role"] == "admin"

    async def test_bearer_header_is_accepted(self, client, admin_user, session_factory):
        from services.auth import AuthService

        async with session_factory() as session:
            token = AuthService(session).create_session_token(admin_user)

        response = await client.get("/admin/orders", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200

    async def test_logout_clears_cookie(self, admin_client):
        response = await admin_client.post("/auth/logout")

        assert response.status_code == 200
        assert (await admin_client.get("/admin/orders")).status_code == 401

    async def test_admin_routes_need_a_session(self, client):
        assert (await client.get("/admin/orders")).status_code == 401
        assert (await client.get("/admin/discounts")).status_code == 401
        assert (await client.post("/admin/discounts", json={"code": "X", "value": 5})).status_code == 401

    async def test_garbage_token(self, client):
        response = await client.get("/admin/orders", headers={"Authorization": "Bearer not.a.jwt"})
        assert response.status_code == 401


class TestAdminOrders:

    async def test_lists_with_status_filter_and_paging(self, admin_client, make_order):
        await make_order(payment_intent_id="pi_1")
        await make_order(payment_intent_id="pi_2", status="processing", payment_status="paid")
        await make_order(payment_intent_id="pi_3", status="cancelled", payment_status="failed")

        everything = (await admin_client.get("/admin/orders")).json()
        filtered = (await admin_client.get("/admin/orders", params={"status": "processing,cancelled"})).json()
        paged = (await admin_client.get("/admin/orders", params={"limit": 1, "offset": 1})).json()

        assert everything["total"] == 3
        assert filtered["total"] == 2
        assert {o["status"] for o in filtered["orders"]} == {"processing", "cancelled"}
        assert paged["total"] == 3
        assert len(paged["orders"]) == 1
        assert (paged["limit"], paged["offset"]) == (1, 1)

    async def test_limit_is_bounded(self, admin_client):
        response = await admin_client.get("/admin/orders", params={"limit": 1000})
        assert response.status_code == 400


class TestAdminDiscounts:

    async def test_create_uppercases_code(self, admin_client):
        response = await admin_client.post("/admin/discounts", json={"code": " spring15 ", "type": "percentage", "value": 15})

        assert response.status_code == 201
        discount = response.json()["discount"]
        assert discount["code"] == "SPRING15"
        assert discount["uses"] == 0

        check = await admin_client.post("/checkout/validate-discount", json={"code": "spring15", "subtotal": 100})
        assert check.json()["discountValue"] == 15.0

    async def test_duplicate_code(self, admin_client, make_discount):
        await make_discount(code="SAVE10")

        response = await admin_client.post("/admin/discounts", json={"code": "save10", "value": 10})

        assert response.status_code == 400
        assert response.json()["error"] == "Discount code already exists"

    async def test_percentage_over_100_rejected(self, admin_client):
        response = await admin_client.post("/admin/discounts", json={"code": "TOOMUCH", "type": "percentage", "value": 150})
        assert response.status_code == 400

    async def test_update_and_fetch(self, admin_client, make_discount):
        discount = await make_discount(code="FLAT5", type="fixed", value="5")

        updated = await admin_client.put(f"/admin/discounts/{discount.id}", json={"value": 7.5, "max_uses": 20})
        fetched = await admin_client.get(f"/admin/discounts/{discount.id}")

        assert updated.status_code == 200
        assert fetched.json()["discount"]["value"] == 7.5
        assert fetched.json()["discount"]["max_uses"] == 20

    async def test_update_to_percentage_checks_stored_value(self, admin_client, make_discount):
        discount = await make_discount(code="BIGFLAT", type="fixed", value="150")

        response = await admin_client.put(f"/admin/discounts/{discount.id}", json={"type": "percentage"})

        assert response.status_code == 400

    @pytest.mark.parametrize("field", ["code", "type", "value", "active"])
    async def test_update_rejects_null_for_required_fields(self, admin_client, make_discount, fetch_discount, field):
        discount = await make_discount(code="KEEPME", type="percentage", value="10")

        response = await admin_client.put(f"/admin/discounts/{discount.id}", json={field: None})

        assert response.status_code == 400
        assert field in response.json()["errors"]
        stored = await fetch_discount(discount.id)
        assert stored.code == "KEEPME"
        assert stored.type == "percentage"
        assert stored.value == 10
        assert stored.active is True

    async def test_update_clears_optional_limits(self, admin_client, make_discount, fetch_discount):
        discount = await make_discount(code="CAPPED", max_uses=5, min_purchase=Decimal("20"))

        response = await admin_client.put(f"/admin/discounts/{discount.id}", json={"max_uses": None, "min_purchase": None})

        assert response.status_code == 200
        stored = await fetch_discount(discount.id)
        assert stored.max_uses is None
        assert stored.min_purchase is None

    async def test_list_and_delete(self, admin_client, make_discount):
        discount = await make_discount(code="GONE")

        listed = await admin_client.get("/admin/discounts")
        deleted = await admin_client.delete(f"/admin/discounts/{discount.id}")
        missing = await admin_client.get(f"/admin/discounts/{discount.id}")

        assert [d["code"] for d in listed.json()["discounts"]] == ["GONE"]
        assert deleted.status_code == 200
        assert missing.status_code == 404


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
