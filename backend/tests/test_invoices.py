"""Tests for purchase invoices and extracted-invoice matching."""

from datetime import date
from types import SimpleNamespace

import pytest

from restops.models.inventory import Ingredient
from restops.models.invoice import PurchaseInvoice
from restops.schemas.ai import ExtractedInvoiceItem
from restops.services.invoice_service import (
    match_extracted_items,
    match_ingredient,
    parse_invoice_date,
)

API = "/api/v1/invoices"


class TestMatching:

    @pytest.fixture
    def inventory(self):
        return [
            SimpleNamespace(id="1", name="Tomato"),
            SimpleNamespace(id="2", name="Olive Oil"),
        ]

    @pytest.mark.parametrize("name,expected", [
        ("tomato", "1"),
        ("  TOMATO  ", "1"),
        ("Cherry Tomato 1kg", "1"),
        ("oil", "2"),
        ("Basil", None),
        ("", None),
    ])
    def test_match_ingredient(self, inventory, name, expected):
        hit = match_ingredient(name, inventory)
        assert (hit.id if hit else None) == expected

    def test_match_extracted_items(self, inventory):
        items = [
            ExtractedInvoiceItem(name="Tomatoes", quantity=5, unit="kg", cost_per_unit=45000),
            ExtractedInvoiceItem(name="Basil", quantity=1, unit="kg", cost_per_unit=90000),
        ]
        matched = match_extracted_items(items, inventory)
        assert matched[0].matched_id == "1"
        assert not matched[0].is_new
        assert matched[1].is_new
        assert matched[1].matched_id is None

    def test_parse_invoice_date(self):
        assert parse_invoice_date("2024-03-05") == date(2024, 3, 5)
        assert parse_invoice_date("2024-03-05T10:00:00") == date(2024, 3, 5)
        assert isinstance(parse_invoice_date("yesterday"), date)
        assert isinstance(parse_invoice_date(None), date)


class TestInvoiceAPI:

    def test_manual_invoice_restocks_and_creates(self, client, kitchen, test_supplier):
        response = client.post(API + "/", json={
            "supplier_id": test_supplier.id,
            "invoice_number": "INV-001",
            "invoice_date": "2024-05-01",
            "lines": [
                {"name": "Tomato", "quantity": 8, "unit": "kg", "cost_per_unit": 60000,
                 "ingredient_id": kitchen["tomato"].id},
                {"name": "Basil", "quantity": 2, "unit": "kg", "cost_per_unit": 90000},
            ],
        })
        assert response.status_code == 201
        body = response.json()
        assert body["total_amount"] == 8 * 60000 + 2 * 90000
        assert body["status"] == "unpaid"
        assert len(body["lines"]) == 2

        db = kitchen["db"]
        db.refresh(kitchen["tomato"])
        assert kitchen["tomato"].current_stock == 16
        assert kitchen["tomato"].cost_per_unit == 50000
        basil = db.query(Ingredient).filter(Ingredient.name == "Basil").one()
        assert basil.current_stock == 2
        assert basil.cost_per_unit == 90000
        assert basil.supplier_id == test_supplier.id
        assert basil.purchase_history[0].date.date() == date(2024, 5, 1)

    def test_unknown_ingredient_rolls_back(self, client, kitchen):
        response = client.post(API + "/", json={
            "lines": [
                {"name": "Basil", "quantity": 2, "unit": "kg", "cost_per_unit": 90000},
                {"name": "Ghost", "quantity": 1, "unit": "kg", "cost_per_unit": 1, "ingredient_id": "nope"},
            ],
        })
        assert response.status_code == 404
        db = kitchen["db"]
        assert db.query(PurchaseInvoice).count() == 0
        assert db.query(Ingredient).filter(Ingredient.name == "Basil").count() == 0

    def test_confirm_extracted(self, client, kitchen):
        response = client.post(API + "/confirm-extracted", json={
            "invoice_date": "2024-06-10",
            "items": [
                {"name": "Beef", "quantity": 10, "unit": "kg", "cost_per_unit": 700000,
                 "is_new": False, "matched_id": kitchen["beef"].id},
                {"name": "Parsley", "quantity": 1, "unit": "kg", "cost_per_unit": 30000, "is_new": True},
            ],
        })
        assert response.status_code == 201
        assert response.json()["invoice_date"] == "2024-06-10"
        kitchen["db"].refresh(kitchen["beef"])
        assert kitchen["beef"].cost_per_unit == 650000

    def test_mark_paid_and_filter(self, client, kitchen):
        invoice = client.post(API + "/", json={
            "lines": [{"name": "Bun", "quantity": 10, "unit": "number", "cost_per_unit": 10000,
                       "ingredient_id": kitchen["bun"].id}],
        }).json()
        assert client.post(f"{API}/{invoice['id']}/pay").json()["status"] == "paid"
        assert len(client.get(API + "/", params={"status_filter": "paid"}).json()) == 1
        assert client.get(API + "/", params={"status_filter": "unpaid"}).json() == []

    def test_empty_invoice_rejected(self, client):
        assert client.post(API + "/", json={"lines": []}).status_code == 422
