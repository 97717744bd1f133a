from conftest import ADMIN_EMAIL
from devgad.models.order import Order
from devgad.services.cart_service import cart_registry


def checkout_form(**overrides):
    data = {"name": "Asha Patil", "phone": "9876543210", "address": "12 Hill Road", "pincode": "400001"}
    data.update(overrides)
    return data


def test_catalog_endpoints(client):
    products = client.get("/api/products/").json()
    assert len(products) == 5
    assert client.get("/api/products/family-pack").json()["price"] == 1200
    assert client.get("/api/products/langda").status_code == 404


def test_cart_is_scoped_by_cookie(client):
    added = client.post("/api/cart/items", json={"product_id": "royal-hapus"})
    assert added.status_code == 200
    cart_id = added.headers["X-Cart-Id"]

    client.post("/api/cart/items", json={"product_id": "royal-hapus"})
    body = client.put("/api/cart/items/royal-hapus", json={"quantity": 5}).json()
    assert body["total_items"] == 5
    assert body["total_price"] == 5 * 1800
    assert client.get("/api/cart/", headers={"X-Cart-Id": cart_id}).json()["total_items"] == 5

    assert client.put("/api/cart/items/royal-hapus", json={"quantity": 0}).json()["items"] == []
    assert client.delete("/api/cart/items/royal-hapus").json()["total_items"] == 0
    assert client.post("/api/cart/items", json={"product_id": "langda"}).status_code == 404


def test_checkout_requires_sign_in(client):
    client.post("/api/cart/items", json={"product_id": "classic-hapus"})
    response = client.post("/api/orders/checkout", json=checkout_form())
    assert response.status_code == 401
    assert response.json()["detail"] == {
        "message": "Please log in to continue",
        "redirect_to": "/auth",
        "from": "/api/orders/checkout",
    }


def test_checkout_requires_verified_email(client, make_user):
    _, headers = make_user("asha@devgadhapus.in", verified=False)
    response = client.get("/api/orders/mine", headers=headers)
    assert response.status_code == 403
    assert response.json()["detail"]["redirect_to"] == "/verify-email"


def test_checkout_rejects_non_local_pincode(client, make_user, db):
    _, headers = make_user("asha@devgadhapus.in")
    client.post("/api/cart/items", json={"product_id": "classic-hapus"})
    response = client.post("/api/orders/checkout", json=checkout_form(pincode="110001"), headers=headers)
    assert response.status_code == 400
    assert response.json()["field"] == "pincode"
    assert db.query(Order).count() == 0
    assert client.get("/api/cart/").json()["total_items"] == 1


def test_checkout_with_empty_cart(client, make_user):
    _, headers = make_user("asha@devgadhapus.in")
    response = client.post("/api/orders/checkout", json=checkout_form(), headers=headers)
    assert response.status_code == 400
    assert response.json()["field"] == "cart"


def test_users_only_see_their_own_orders(client, make_user):
    _, asha = make_user("asha@devgadhapus.in")
    _, ravi = make_user("ravi@devgadhapus.in")

    client.post("/api/cart/items", json={"product_id": "premium-box"})
    placed = client.post("/api/orders/checkout", json=checkout_form(), headers=asha).json()

    assert [o["id"] for o in client.get("/api/orders/mine", headers=asha).json()] == [placed["order_id"]]
    assert client.get("/api/orders/mine", headers=ravi).json() == []


def test_suspended_user_is_sent_home(client, make_user, admin_user):
    uid, headers = make_user("asha@devgadhapus.in")
    _, admin_headers = admin_user
    assert client.post(f"/api/admin/users/{uid}/suspend", headers=admin_headers).status_code == 200

    response = client.get("/api/orders/mine", headers=headers)
    assert response.status_code == 403
    assert response.json()["detail"] == {
        "message": "Your account has been suspended. Contact support.",
        "redirect_to": "/",
        "from": None,
    }


def test_admin_routes_reject_regular_users(client, make_user):
    _, headers = make_user("asha@devgadhapus.in")
    response = client.get("/api/admin/orders", headers=headers)
    assert response.status_code == 403
    assert response.json()["detail"]["message"] == "Admin access only"


def test_allowlisted_admin_has_access_without_promotion(client, admin_user):
    _, headers = admin_user
    assert client.get("/api/auth/me", headers=headers).json()["is_admin"] is True
    assert client.get("/api/admin/orders", headers=headers).json() == {
        "pending": [], "confirmed": [], "rejected": [],
    }
    users = client.get("/api/admin/users", headers=headers).json()
    assert [(u["email"], u["admin"]) for u in users] == [(ADMIN_EMAIL, True)]


def test_anonymous_reads_do_not_register_carts(client):
    for _ in range(25):
        client.cookies.clear()
        response = client.get("/api/cart/")
        assert response.json() == {"items": [], "total_items": 0, "total_price": 0}
        assert "X-Cart-Id" not in response.headers
    client.delete("/api/cart/")
    client.put("/api/cart/items/royal-hapus", json={"quantity": 3})
    assert len(cart_registry) == 0

    client.post("/api/cart/items", json={"product_id": "royal-hapus"})
    assert len(cart_registry) == 1
