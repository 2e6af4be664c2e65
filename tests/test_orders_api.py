from bson.objectid import ObjectId


def _signup(client, email="member@example.com"):
    response = client.post(
        "/auth/signup",
        json={"name": "Meera", "email": email, "password": "secret123", "phone": "+91 90000 00000"},
    )
    return response.json()


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


class TestGuestOrder:
    def test_totals_are_computed_server_side(self, guest_order):
        assert guest_order["total_amount"] == 25.5
        assert guest_order["shipping_amount"] == 5.0
        assert guest_order["final_amount"] == 30.5

    def test_client_totals_are_ignored(self, client, products):
        response = client.post(
            "/orders",
            json={
                "customer": {"name": "Asha", "email": "asha@example.com"},
                "items": [{"product": products["A"], "quantity": 1}],
                "finalAmount": 0.01,
                "totalAmount": 0.01,
            },
        )
        assert response.status_code == 201
        assert response.json()["order"]["final_amount"] == 15.0

    def test_created_order_shape(self, guest_order, products):
        assert guest_order["status"] == "pending"
        assert guest_order["payment"] == {"status": "pending", "method": "card", "transaction_id": None}
        assert guest_order["customer"]["email"] == "asha@example.com"
        assert guest_order["customer"]["user_id"] is None
        assert guest_order["shipping_address"]["city"] == "Pune"
        assert [i["product"] for i in guest_order["items"]] == [products["A"], products["B"]]
        assert guest_order["items"][0] == {
            "product": products["A"],
            "name": "Linen Shirt",
            "price": 10.0,
            "quantity": 2,
            "image": "https://cdn.example.com/linen.png",
        }
        assert ObjectId.is_valid(guest_order["id"])

    def test_cash_on_delivery(self, client, products):
        response = client.post(
            "/orders",
            json={
                "customer": {"name": "Asha", "email": "asha@example.com"},
                "items": [{"product": products["B"], "quantity": 1}],
                "paymentMethod": "cod",
            },
        )
        assert response.json()["order"]["payment"]["method"] == "cod"

    def test_unknown_product_persists_nothing(self, client, db, products):
        missing = str(ObjectId())
        response = client.post(
            "/orders",
            json={
                "customer": {"name": "Asha", "email": "asha@example.com"},
                "items": [{"product": products["A"], "quantity": 1}, {"product": missing, "quantity": 1}],
            },
        )
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": f"Product not found: {missing}"}
        assert db["order"].count_documents({}) == 0

    def test_malformed_product_id(self, client, db, products):
        response = client.post(
            "/orders",
            json={"customer": {"name": "Asha", "email": "asha@example.com"}, "items": [{"product": "xyz", "quantity": 1}]},
        )
        assert response.status_code == 400
        assert "xyz" in response.json()["error"]
        assert db["order"].count_documents({}) == 0

    def test_field_level_validation(self, client, products):
        response = client.post(
            "/orders",
            json={
                "customer": {"name": "", "email": "not-an-email"},
                "items": [{"product": products["A"], "quantity": 0}],
            },
        )
        assert response.status_code == 400
        fields = {e["field"] for e in response.json()["errors"]}
        assert {"customer.name", "customer.email", "items.0.quantity"} <= fields

    def test_items_required(self, client):
        response = client.post("/orders", json={"customer": {"name": "Asha", "email": "asha@example.com"}, "items": []})
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "items"


class TestUserOrder:
    def test_requires_token(self, client, products):
        response = client.post("/orders/user", json={"items": [{"product": products["A"], "quantity": 1}]})
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_rejects_unknown_token(self, client, products):
        response = client.post(
            "/orders/user", json={"items": [{"product": products["A"], "quantity": 1}]}, headers=_auth("nope")
        )
        assert response.status_code == 401

    def test_customer_comes_from_account(self, client, products):
        account = _signup(client)
        response = client.post(
            "/orders/user",
            json={"items": [{"product": products["A"], "quantity": 1}]},
            headers=_auth(account["token"]),
        )
        assert response.status_code == 201
        customer = response.json()["order"]["customer"]
        assert customer == {
            "name": "Meera",
            "email": "member@example.com",
            "phone": "+91 90000 00000",
            "user_id": account["user_id"],
        }

    def test_my_orders_newest_first(self, client, products):
        account = _signup(client)
        ids = []
        for product in (products["A"], products["B"]):
            response = client.post(
                "/orders/user",
                json={"items": [{"product": product, "quantity": 1}]},
                headers=_auth(account["token"]),
            )
            ids.append(response.json()["order"]["id"])
        other = _signup(client, email="other@example.com")
        client.post(
            "/orders/user",
            json={"items": [{"product": products["A"], "quantity": 1}]},
            headers=_auth(other["token"]),
        )

        response = client.get("/orders/user/my-orders", headers=_auth(account["token"]))
        assert response.status_code == 200
        assert [o["id"] for o in response.json()["orders"]] == list(reversed(ids))


class TestLookups:
    def test_track_case_insensitive(self, client, guest_order):
        response = client.get(f"/orders/track/{guest_order['order_id'].lower()}")
        assert response.status_code == 200
        assert response.json()["order"]["id"] == guest_order["id"]

    def test_track_unknown(self, client):
        response = client.get("/orders/track/NJ00000000")
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Order not found. Please check your order ID."}

    def test_by_customer_email(self, client, guest_order, products):
        second = client.post(
            "/orders",
            json={
                "customer": {"name": "Asha", "email": "ASHA@example.com"},
                "items": [{"product": products["B"], "quantity": 3}],
            },
        ).json()["order"]
        response = client.get("/orders/customer/Asha@Example.com")
        assert [o["id"] for o in response.json()["orders"]] == [second["id"], guest_order["id"]]

    def test_by_customer_email_none(self, client):
        assert client.get("/orders/customer/nobody@example.com").json() == {"success": True, "orders": []}
