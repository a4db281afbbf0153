"""
HTTP tests for the floor API.
"""

from shared.config.constants import OrderStatus
from shared.infrastructure.events import ORDER_CREATED, TABLE_CLOSED


def _create_order(client, table_id, quantity=2, menu_id=5):
    return client.post(
        "/api/orders",
        json={"table_id": table_id, "items": [{"menu_id": menu_id, "quantity": quantity}]},
    )


class TestHealth:

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_detailed_health(self, client):
        response = client.get("/api/health/detailed")

        assert response.status_code == 200
        assert response.json()["dependencies"]["database"]["status"] == "healthy"

    def test_hardening_headers(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Cache-Control"] == "no-store"
        assert "server" not in response.headers

    def test_request_id_is_echoed(self, client):
        response = client.get("/api/health", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"

    def test_oversized_request_id_is_replaced(self, client):
        response = client.get("/api/health", headers={"X-Request-ID": "x" * 200})

        assert len(response.headers["X-Request-ID"]) == 36

    def test_cors_preflight_from_dev_server(self, client):
        response = client.options(
            "/api/orders",
            headers={
                "Origin": "http://localhost:5174",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:5174"

    def test_cors_origins_from_settings(self):
        from rest_api.core.cors import DEV_ORIGINS, cors_origins
        from shared.config.settings import Settings

        assert cors_origins(Settings(allowed_origins="")) == DEV_ORIGINS
        assert cors_origins(Settings(allowed_origins="https://a.example, https://b.example")) == [
            "https://a.example",
            "https://b.example",
        ]


class TestOrdersApi:

    def test_create_order(self, client, notifier, seed_table, seed_menu_item):
        response = _create_order(client, seed_table.id)

        assert response.status_code == 201
        data = response.json()
        assert data["total_cents"] == 10000
        assert data["status"] == OrderStatus.PENDING
        assert data["table_id"] == seed_table.id
        assert data["items"][0]["unit_price_cents"] == 5000
        assert ORDER_CREATED in notifier.types

    def test_empty_items_is_400(self, client, seed_table):
        response = client.post("/api/orders", json={"table_id": seed_table.id, "items": []})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_quantity_above_99_is_accepted(self, client, seed_table, seed_menu_item):
        response = _create_order(client, seed_table.id, quantity=150)

        assert response.status_code == 201
        assert response.json()["total_cents"] == 150 * 5000

    def test_zero_quantity_is_400(self, client, seed_table, seed_menu_item):
        response = _create_order(client, seed_table.id, quantity=0)

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_unknown_table_is_404(self, client, seed_menu_item):
        response = _create_order(client, 999)

        assert response.status_code == 404
        assert response.json() == {"detail": "Table with ID 999 not found", "code": "NOT_FOUND"}

    def test_unknown_menu_item_is_404(self, client, seed_table):
        response = _create_order(client, seed_table.id, menu_id=404)

        assert response.status_code == 404
        assert "404" in response.json()["detail"]

    def test_unavailable_table_is_400(self, client, seed_table, seed_menu_item):
        client.patch(f"/api/tables/{seed_table.id}/availability", json={"is_available": False})

        response = _create_order(client, seed_table.id)

        assert response.status_code == 400
        assert response.json()["detail"] == "Table not available"

    def test_item_status_flow(self, client, seed_table, seed_menu_item):
        order = _create_order(client, seed_table.id).json()
        item_id = order["items"][0]["id"]

        response = client.patch(f"/api/orders/items/{item_id}/status", json={"status": "COOKING"})

        assert response.status_code == 200
        assert response.json()["status"] == "COOKING"

    def test_invalid_item_transition_is_409(self, client, seed_table, seed_menu_item):
        order = _create_order(client, seed_table.id).json()
        item_id = order["items"][0]["id"]

        response = client.patch(f"/api/orders/items/{item_id}/status", json={"status": "SERVED"})

        assert response.status_code == 409
        assert response.json()["code"] == "CONFLICT"

    def test_unknown_status_value_is_400(self, client, seed_table, seed_menu_item):
        order = _create_order(client, seed_table.id).json()

        response = client.patch(f"/api/orders/{order['id']}/status", json={"status": "EATEN"})

        assert response.status_code == 400

    def test_order_status_cascade(self, client, seed_table, seed_menu_item):
        order = _create_order(client, seed_table.id).json()

        response = client.patch(f"/api/orders/{order['id']}/status", json={"status": "CANCELLED"})

        assert response.status_code == 200
        assert [item["status"] for item in response.json()["items"]] == ["CANCELLED"]
        bill = client.get(f"/api/bills/table/{seed_table.id}").json()
        assert bill["total_cents"] == 0

    def test_active_orders_filter(self, client, seed_table, seed_menu_item):
        pending = _create_order(client, seed_table.id).json()
        cooking = _create_order(client, seed_table.id).json()
        client.patch(f"/api/orders/{cooking['id']}/status", json={"status": "COOKING"})

        everything = client.get("/api/orders/active").json()
        only_cooking = client.get("/api/orders/active", params={"statuses": "COOKING"}).json()
        both = client.get("/api/orders/active?statuses=pending&statuses=COOKING").json()

        assert [o["id"] for o in everything] == [pending["id"], cooking["id"]]
        assert [o["id"] for o in only_cooking] == [cooking["id"]]
        assert len(both) == 2

    def test_active_orders_unknown_status_is_400(self, client):
        response = client.get("/api/orders/active", params={"statuses": "BOILING"})

        assert response.status_code == 400

    def test_table_orders(self, client, seed_table, seed_menu_item):
        order = _create_order(client, seed_table.id).json()

        response = client.get(f"/api/orders/table/{seed_table.id}")

        assert [o["id"] for o in response.json()] == [order["id"]]


class TestTablesApi:

    def test_table_crud(self, client, notifier):
        created = client.post("/api/tables", json={"name": "Terrace"})
        assert created.status_code == 201
        table_id = created.json()["id"]

        renamed = client.patch(f"/api/tables/{table_id}", json={"name": "Terrace 2"})
        assert renamed.json()["name"] == "Terrace 2"

        duplicate = client.post("/api/tables", json={"name": "Terrace 2"})
        assert duplicate.status_code == 409

        deleted = client.delete(f"/api/tables/{table_id}")
        assert deleted.status_code == 204
        assert client.get(f"/api/tables/{table_id}").status_code == 404

    def test_status_overview(self, client, seed_table, seed_menu_item):
        _create_order(client, seed_table.id)

        rows = client.get("/api/tables/status").json()

        assert rows == [
            {
                "id": seed_table.id,
                "name": "T1",
                "is_available": True,
                "is_occupied": True,
                "is_calling_staff": False,
                "active_orders": 1,
                "ready_items": 0,
                "total_cents": 10000,
            }
        ]

    def test_call_staff(self, client, seed_table):
        response = client.patch(
            f"/api/tables/{seed_table.id}/call-staff", json={"is_calling_staff": True}
        )

        assert response.json()["is_calling_staff"] is True

    def test_close_with_unserved_items_is_409(self, client, seed_table, seed_menu_item):
        _create_order(client, seed_table.id)

        response = client.post(f"/api/tables/{seed_table.id}/close")

        assert response.status_code == 409
        assert response.json() == {"detail": "Table has unserved items", "code": "CONFLICT"}

    def test_close_table(self, client, notifier, seed_table, seed_menu_item):
        order = _create_order(client, seed_table.id).json()
        for status in ("COOKING", "READY", "SERVED"):
            client.patch(f"/api/orders/{order['id']}/status", json={"status": status})

        response = client.post(
            f"/api/tables/{seed_table.id}/close", json={"payment_method": "CARD"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["bill"]["status"] == "PAID"
        assert data["bill"]["total_cents"] == 10000
        assert data["bill"]["payment_method"] == "CARD"
        assert data["table"] == {
            "id": seed_table.id,
            "name": "T1",
            "is_available": False,
            "is_occupied": False,
            "is_calling_staff": False,
        }
        assert notifier.types[-1] == TABLE_CLOSED
        assert client.get(f"/api/bills/table/{seed_table.id}").status_code == 404

    def test_invalid_payment_method_is_400(self, client, seed_table):
        response = client.post(
            f"/api/tables/{seed_table.id}/close", json={"payment_method": "BARTER"}
        )

        assert response.status_code == 400


class TestBillsApi:

    def test_open_bill_with_items(self, client, seed_table, seed_menu_item):
        order = _create_order(client, seed_table.id).json()

        response = client.get(f"/api/bills/table/{seed_table.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == order["bill_id"]
        assert data["status"] == "OPEN"
        assert [item["id"] for item in data["items"]] == [order["items"][0]["id"]]

    def test_no_open_bill_is_empty(self, client, seed_table):
        response = client.get(f"/api/bills/table/{seed_table.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] is None
        assert data["total_cents"] == 0
        assert data["items"] == []

    def test_bill_of_unknown_table_is_404(self, client):
        response = client.get("/api/bills/table/999")

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"
