"""Tests for management report calculations."""

from types import SimpleNamespace

import pytest

from restops.costing import reports
from restops.costing.recipe import RecipeLine


def sale(total, cost, method="cash", shift_id=None, items=()):
    return SimpleNamespace(
        total_amount=total, total_cost=cost, payment_method=method,
        shift_id=shift_id, items=list(items),
    )


def line(menu_item_id, quantity):
    return SimpleNamespace(menu_item_id=menu_item_id, quantity=quantity)


class TestProfitAndLoss:

    def test_net_profit(self):
        pnl = reports.profit_and_loss(
            [sale(100000, 40000), sale(50000, 20000)],
            [SimpleNamespace(amount=30000)],
            [SimpleNamespace(cost_loss=5000)],
        )
        assert pnl.revenue == 150000
        assert pnl.cogs == 60000
        assert pnl.gross_profit == 90000
        assert pnl.net_profit == 55000
        assert pnl.margin_percent == 36.7

    def test_voided_shift_sale_has_no_revenue(self):
        pnl = reports.profit_and_loss([sale(100000, 30000, method="void", shift_id="s1")], [], [])
        assert pnl.revenue == 0
        assert pnl.cogs == 30000
        assert pnl.margin_percent == 0.0


class TestMenuEngineering:

    @pytest.fixture
    def menu(self):
        inventory = {"x": SimpleNamespace(unit="kg", cost_per_unit=10000)}
        items = [
            SimpleNamespace(id="a", name="A", category="main", price=50000,
                            recipe=[RecipeLine(item_id="x", amount=1, unit="kg")]),
            SimpleNamespace(id="b", name="B", category="main", price=30000,
                            recipe=[RecipeLine(item_id="x", amount=1, unit="kg")]),
            SimpleNamespace(id="c", name="C", category="main", price=80000,
                            recipe=[RecipeLine(item_id="x", amount=1, unit="kg")]),
            SimpleNamespace(id="d", name="D", category="drink", price=15000,
                            recipe=[RecipeLine(item_id="x", amount=1, unit="kg")]),
            SimpleNamespace(id="e", name="E", category="drink", price=20000, recipe=[]),
        ]
        return reports.menu_margins(items, inventory)

    def test_margins(self, menu):
        a = menu[0]
        assert a.cost == 10000
        assert a.margin == 40000
        assert a.margin_percent == 80.0
        assert a.has_recipe
        assert not menu[4].has_recipe

    def test_quadrants(self, menu):
        sales = [
            sale(0, 0, items=[line("a", 10), line("b", 10), line("c", 2), line("d", 2)]),
        ]
        popularity = reports.item_popularity(sales)
        result = {r.menu_item_id: r.category for r in reports.classify_menu(menu, popularity)}
        # averages over sold items: 6 units, 33750 profit
        assert result == {
            "a": reports.CATEGORY_STAR,
            "b": reports.CATEGORY_PLOWHORSE,
            "c": reports.CATEGORY_PUZZLE,
            "d": reports.CATEGORY_DOG,
            "e": reports.CATEGORY_OTHER,
        }

    def test_top_items(self):
        sales = [
            sale(0, 0, items=[line("a", 1), line("b", 5)]),
            sale(0, 0, items=[line("a", 3), line("c", 1)]),
        ]
        assert reports.top_items(sales, limit=2) == [("b", 5), ("a", 4)]


class TestStockAndPrep:

    def test_low_stock_includes_threshold(self):
        rows = [
            SimpleNamespace(name="a", current_stock=5, min_threshold=5),
            SimpleNamespace(name="b", current_stock=6, min_threshold=5),
        ]
        assert [r.name for r in reports.low_stock(rows)] == ["a"]

    def test_prep_shortfall_and_completion(self):
        tasks = [
            SimpleNamespace(id="1", item="Dough", par_level=10, on_hand=4),
            SimpleNamespace(id="2", item="Sauce", par_level=2, on_hand=3),
            SimpleNamespace(id="3", item="Salsa", par_level=5, on_hand=5),
        ]
        rows = reports.prep_shortfall(tasks)
        assert rows[0].needed == 6
        assert rows[0].progress_percent == 40
        assert rows[1].needed == 0
        assert rows[1].progress_percent == 100
        assert reports.completion_rate(tasks) == 67

    def test_empty_board_is_complete(self):
        assert reports.completion_rate([]) == 100

    def test_inventory_value(self):
        rows = [
            SimpleNamespace(current_stock=2, cost_per_unit=1000),
            SimpleNamespace(current_stock=0.5, cost_per_unit=300),
        ]
        assert reports.inventory_value(rows) == 2150


class TestOrderList:

    def ingredient(self, id, name, stock, threshold, supplier_id=None):
        return SimpleNamespace(
            id=id, name=name, current_stock=stock, min_threshold=threshold,
            unit="kg", supplier_id=supplier_id,
        )

    def test_groups_low_items_by_supplier(self):
        suppliers = [SimpleNamespace(id="s2", name="Zagros Meat"), SimpleNamespace(id="s1", name="Alborz Farms")]
        inventory = [
            self.ingredient("1", "Beef", 1, 2, "s2"),
            self.ingredient("2", "Tomato", 0.5, 3, "s1"),
            self.ingredient("3", "Onion", 10, 3, "s1"),
            self.ingredient("4", "Salt", 0, 1),
            self.ingredient("5", "Basil", 0, 1, "gone"),
        ]
        result = reports.order_list(inventory, suppliers)

        assert [o.supplier_name for o in result.orders] == ["Alborz Farms", "Zagros Meat"]
        tomato, = result.orders[0].items
        assert tomato.item_name == "Tomato"
        assert tomato.quantity_to_order == pytest.approx(5.5)
        assert result.orders[1].items[0].quantity_to_order == 3
        assert [i.item_name for i in result.no_supplier_items] == ["Salt", "Basil"]

    def test_nothing_low(self):
        result = reports.order_list([self.ingredient("1", "Beef", 9, 2, "s1")], [])
        assert result.orders == []
        assert result.no_supplier_items == []
