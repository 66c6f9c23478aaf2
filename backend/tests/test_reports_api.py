"""Tests for report, supplier and expense endpoints."""

import pytest
from starlette.requests import Request

from restops.core.rate_limit import get_terminal_or_ip
from restops.models.inventory import Ingredient

API = "/api/v1"


@pytest.fixture
def trading_day(client, kitchen):
    """Two checkouts, one expense and one waste entry on top of the kitchen."""
    client.post(API + "/pos/checkout", json={
        "items": [{"menu_item_id": kitchen["burger"].id, "quantity": 2}],
    })
    client.post(API + "/pos/checkout", json={
        "items": [{"menu_item_id": kitchen["salad"].id, "quantity": 1}],
    })
    client.post(API + "/expenses/", json={"title": "Rent", "amount": 100000, "category": "rent"})
    client.post(API + "/inventory/waste", json={"item_id": kitchen["bun"].id, "amount": 1})
    return kitchen


class TestReportsAPI:

    def test_pnl(self, client, trading_day):
        pnl = client.get(API + "/reports/pnl").json()
        assert pnl["revenue"] == 450000
        assert pnl["cogs"] == 210000
        assert pnl["waste_loss"] == 10000
        assert pnl["operating_expenses"] == 100000
        assert pnl["net_profit"] == 130000
        assert pnl["margin_percent"] == 28.9

    def test_menu_engineering(self, client, trading_day):
        rows = {r["name"]: r for r in client.get(API + "/reports/menu-engineering").json()}
        # burger: 2 sold at 79000 profit, salad: 1 sold at 82000 profit
        assert rows["Burger"]["category"] == "plowhorse"
        assert rows["Salad"]["category"] == "puzzle"

    def test_menu_margins(self, client, kitchen):
        rows = {r["name"]: r for r in client.get(API + "/reports/menu-margins").json()}
        assert rows["Salad"]["cost"] == pytest.approx(8000)
        assert rows["Salad"]["has_recipe"] is True

    def test_low_stock(self, client, kitchen):
        db = kitchen["db"]
        kitchen["tomato"].current_stock = 1
        db.commit()
        names = [r["name"] for r in client.get(API + "/reports/low-stock").json()]
        assert names == ["Tomato"]

    def test_order_list(self, client, kitchen):
        db = kitchen["db"]
        kitchen["beef"].current_stock = 1
        kitchen["bun"].current_stock = 4
        db.commit()
        body = client.get(API + "/reports/order-list").json()

        supplier_order, = body["orders"]
        assert supplier_order["supplier_name"] == "Fresh Farms"
        assert supplier_order["items"] == [{
            "item_id": kitchen["beef"].id,
            "item_name": "Beef",
            "quantity_to_order": 3,
            "current_stock": 1,
            "unit": "kg",
        }]
        assert [i["item_name"] for i in body["no_supplier_items"]] == ["Bun"]
        assert body["no_supplier_items"][0]["quantity_to_order"] == 16

    def test_prep_board(self, client, kitchen):
        board = client.get(API + "/reports/prep-board").json()
        assert board["completion_rate"] == 0
        assert board["tasks"][0]["needed"] == 2

    def test_dashboard(self, client, trading_day):
        body = client.get(API + "/reports/dashboard").json()
        assert body["profit_and_loss"]["revenue"] == 450000
        assert body["top_items"][0]["name"] == "Burger"
        assert body["top_items"][0]["units_sold"] == 2
        assert body["items_without_recipe"] == 0
        assert body["inventory_value"] > 0

    def test_audit_log(self, client, trading_day):
        body = client.get(API + "/reports/audit-log").json()
        actions = {e["action"] for e in body["items"]}
        assert {"SALE", "CREATE", "WASTE"} <= actions


class TestSuppliersAPI:

    def test_crud(self, client):
        created = client.post(API + "/suppliers/", json={"name": "Dairy Co", "category": "dairy"})
        assert created.status_code == 201
        supplier_id = created.json()["id"]

        response = client.put(f"{API}/suppliers/{supplier_id}", json={"phone_number": "021-555"})
        assert response.json()["phone_number"] == "021-555"
        assert len(client.get(API + "/suppliers/").json()) == 1

        assert client.delete(f"{API}/suppliers/{supplier_id}").status_code == 204
        assert client.get(f"{API}/suppliers/{supplier_id}").status_code == 404

    def test_update_cannot_clear_name(self, client, test_supplier):
        response = client.put(f"{API}/suppliers/{test_supplier.id}", json={"name": None})
        assert response.status_code == 422

        response = client.put(f"{API}/suppliers/{test_supplier.id}", json={"category": None})
        assert response.status_code == 200
        assert response.json()["name"] == "Fresh Farms"
        assert response.json()["category"] is None

    def test_delete_unlinks_ingredients(self, client, kitchen, test_supplier):
        supplier_id = test_supplier.id
        beef_id = kitchen["beef"].id
        assert client.delete(f"{API}/suppliers/{supplier_id}").status_code == 204
        db = kitchen["db"]
        db.expire_all()
        assert db.get(Ingredient, beef_id).supplier_id is None


class TestExpensesAPI:

    def test_create_list_delete(self, client):
        created = client.post(API + "/expenses/", json={
            "title": "Electricity", "amount": 45000, "category": "utilities", "date": "2024-02-01",
        })
        assert created.status_code == 201
        assert created.json()["date"] == "2024-02-01"
        client.post(API + "/expenses/", json={"title": "Flyers", "amount": 5000, "category": "marketing"})

        rows = client.get(API + "/expenses/", params={"category": "utilities"}).json()
        assert [r["title"] for r in rows] == ["Electricity"]

        assert client.delete(f"{API}/expenses/{created.json()['id']}").status_code == 204
        assert len(client.get(API + "/expenses/").json()) == 1

    def test_unknown_category_rejected(self, client):
        response = client.post(API + "/expenses/", json={"title": "X", "amount": 1, "category": "fun"})
        assert response.status_code == 422


class TestRateLimitKey:

    def test_terminal_header_preferred(self):
        scope = {
            "type": "http",
            "headers": [(b"x-terminal-id", b"till-2")],
            "client": ("10.0.0.5", 1234),
        }
        assert get_terminal_or_ip(Request(scope)) == "terminal:till-2"
        assert get_terminal_or_ip(Request({"type": "http", "headers": [], "client": ("10.0.0.5", 1234)})) == "10.0.0.5"
