"""HTTP surface of the cart, anonymous and signed in."""

from decimal import Decimal

from storefront.utils.settings import CART_SESSION_COOKIE


def _subtotal(response):
    return Decimal(response.json()["totals"]["subtotal"])


class TestAnonymousCart:

    def test_empty_cart_issues_session_cookie(self, client):
        r = client.get("/cart")
        assert r.status_code == 200
        assert r.json()["items"] == []
        assert CART_SESSION_COOKIE in r.cookies

    def test_add_and_read(self, client, make_product):
        product = make_product(name="Tea", price="2.50", stock=10)

        r = client.post("/cart/add", json={"product_id": product.id, "quantity": 2})
        assert r.status_code == 200
        assert r.json()["message"] == "Tea added to cart"
        assert _subtotal(r) == Decimal("5.00")

        body = client.get("/cart").json()
        assert [(i["product_id"], i["quantity"]) for i in body["items"]] == [(product.id, 2)]
        assert body["totals"]["total_items"] == 2

    def test_add_beyond_stock_is_clamped(self, client, make_product):
        product = make_product(stock=5)
        client.post("/cart/add", json={"product_id": product.id, "quantity": 3})
        r = client.post("/cart/add", json={"product_id": product.id, "quantity": 3})

        assert r.status_code == 200
        assert r.json()["totals"]["total_items"] == 5

    def test_out_of_stock_add_returns_message(self, client, make_product):
        product = make_product(name="Kale", stock=0)
        r = client.post("/cart/add", json={"product_id": product.id})

        assert r.status_code == 400
        assert r.json()["message"] == "Kale is out of stock"

    def test_unknown_product_is_a_rejected_add(self, client):
        r = client.post("/cart/add", json={"product_id": 999})
        assert r.status_code == 400
        assert r.json()["message"] == "Product 999 does not exist"
        assert client.get("/cart").json()["items"] == []

    def test_set_quantity_of_missing_line_is_rejected(self, client, make_product):
        product = make_product()
        r = client.patch(f"/cart/{product.id}", json={"quantity": 2})
        assert r.status_code == 400
        assert r.json()["message"] == f"Product {product.id} is not in the cart"
        assert client.get("/cart").json()["items"] == []

    def test_invalid_quantity_is_rejected(self, client, make_product):
        product = make_product()
        r = client.post("/cart/add", json={"product_id": product.id, "quantity": 0})
        assert r.status_code == 422

    def test_set_quantity_over_stock(self, client, make_product):
        product = make_product(stock=5)
        client.post("/cart/add", json={"product_id": product.id, "quantity": 3})

        r = client.patch(f"/cart/{product.id}", json={"quantity": 6})
        assert r.status_code == 400

        items = client.get("/cart").json()["items"]
        assert items[0]["quantity"] == 3

    def test_set_quantity_zero_removes(self, client, make_product):
        product = make_product()
        client.post("/cart/add", json={"product_id": product.id, "quantity": 3})

        r = client.patch(f"/cart/{product.id}", json={"quantity": 0})
        assert r.status_code == 200
        assert r.json()["totals"]["distinct_items"] == 0

    def test_delete_line_is_idempotent(self, client, make_product):
        product = make_product()
        client.post("/cart/add", json={"product_id": product.id})

        assert client.delete(f"/cart/{product.id}").status_code == 200
        r = client.delete(f"/cart/{product.id}")
        assert r.status_code == 200
        assert _subtotal(r) == Decimal("0.00")

    def test_clear(self, client, make_product):
        first = make_product(name="A")
        second = make_product(name="B")
        client.post("/cart/add", json={"product_id": first.id})
        client.post("/cart/add", json={"product_id": second.id})

        r = client.delete("/cart")
        assert r.status_code == 200
        assert client.get("/cart").json()["items"] == []


class TestSignedInCart:

    def test_user_cart_is_separate_from_session_cart(self, client, make_user, make_product):
        make_user(1)
        product = make_product()
        client.post("/cart/add", json={"product_id": product.id, "quantity": 2})

        assert client.get("/cart", params={"user_id": 1}).json()["items"] == []

    def test_login_moves_session_cart(self, client, make_product):
        product = make_product(stock=5)
        client.post("/users/", json={"id": 3, "name": "Carol"})
        client.post("/cart/add", params={"user_id": 3}, json={"product_id": product.id, "quantity": 3})
        client.post("/cart/add", json={"product_id": product.id, "quantity": 4})

        r = client.post("/auth/login", json={"user_id": 3})
        assert r.status_code == 200
        assert r.json()["cart_migrated"] is True
        assert r.json()["migrated_lines"] == 1

        user_cart = client.get("/cart", params={"user_id": 3}).json()
        assert [(i["product_id"], i["quantity"]) for i in user_cart["items"]] == [(product.id, 5)]
        assert client.get("/cart").json()["items"] == []

    def test_login_with_broken_session_store_still_succeeds(self, client, session_store, make_user, make_product):
        make_user(4)
        product = make_product()
        client.post("/cart/add", json={"product_id": product.id})
        session_store.fail_on.add("load")

        r = client.post("/auth/login", json={"user_id": 4})
        assert r.status_code == 200
        assert r.json()["cart_migrated"] is False

    def test_login_unknown_user(self, client):
        r = client.post("/auth/login", json={"user_id": 77})
        assert r.status_code == 404
