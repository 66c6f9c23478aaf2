"""Tests for the recipe cost calculator."""

import pytest

from restops.costing.recipe import RecipeLine, line_cost, recipe_breakdown, recipe_cost


class Entry:
    def __init__(self, name, unit, cost_per_unit):
        self.name = name
        self.unit = unit
        self.cost_per_unit = cost_per_unit


@pytest.fixture
def inventory():
    return {
        "flour": Entry("Flour", "kg", 40000),
        "milk": Entry("Milk", "liter", 30000),
        "egg": Entry("Egg", "number", 5000),
    }


@pytest.fixture
def prep_catalog():
    return {"sauce": Entry("Tomato Sauce", "gram", 50)}


class TestRecipeCost:

    def test_converts_to_catalog_unit(self, inventory):
        # 250 g of flour at 40000 per kg
        line = RecipeLine(item_id="flour", amount=250, unit="gram")
        assert line_cost(line, inventory, {}) == pytest.approx(10000)

    def test_sums_lines(self, inventory):
        lines = [
            RecipeLine(item_id="flour", amount=0.5, unit="kg"),
            RecipeLine(item_id="milk", amount=200, unit="ml"),
            RecipeLine(item_id="egg", amount=2, unit="number"),
        ]
        assert recipe_cost(lines, inventory) == pytest.approx(20000 + 6000 + 10000)

    def test_prep_line_uses_prep_catalog(self, inventory, prep_catalog):
        lines = [RecipeLine(item_id="sauce", amount=100, unit="gram", source="prep")]
        assert recipe_cost(lines, inventory, prep_catalog) == pytest.approx(5000)

    def test_prep_line_without_cost_is_free(self, inventory):
        catalog = {"sauce": Entry("Tomato Sauce", "gram", 0)}
        lines = [RecipeLine(item_id="sauce", amount=100, unit="gram", source="prep")]
        assert recipe_cost(lines, inventory, catalog) == 0

    def test_no_rounding_inside(self, inventory):
        lines = [RecipeLine(item_id="egg", amount=0.3, unit="number")]
        assert recipe_cost(lines, inventory) == pytest.approx(1500)
        lines = [RecipeLine(item_id="flour", amount=1, unit="gram")]
        assert recipe_cost(lines, inventory) == pytest.approx(40)

    def test_doubling_amounts_doubles_cost(self, inventory, prep_catalog):
        lines = [
            RecipeLine(item_id="flour", amount=0.25, unit="kg"),
            RecipeLine(item_id="milk", amount=150, unit="ml"),
            RecipeLine(item_id="sauce", amount=30, unit="gram", source="prep"),
        ]
        doubled = [
            RecipeLine(item_id=l.item_id, amount=l.amount * 2, unit=l.unit, source=l.source)
            for l in lines
        ]
        single = recipe_cost(lines, inventory, prep_catalog)
        assert recipe_cost(doubled, inventory, prep_catalog) == pytest.approx(single * 2)

    def test_dangling_reference_costs_nothing(self, inventory):
        lines = [
            RecipeLine(item_id="gone", amount=5, unit="kg"),
            RecipeLine(item_id="egg", amount=1, unit="number"),
        ]
        assert recipe_cost(lines, inventory) == pytest.approx(5000)

    def test_repeated_calls_are_identical(self, inventory, prep_catalog):
        lines = [
            RecipeLine(item_id="flour", amount=0.25, unit="kg"),
            RecipeLine(item_id="sauce", amount=30, unit="gram", source="prep"),
        ]
        first = recipe_cost(lines, inventory, prep_catalog)
        second = recipe_cost(lines, inventory, prep_catalog)
        assert first == second
        assert inventory["flour"].cost_per_unit == 40000
        assert lines[0].amount == 0.25


class TestBreakdown:

    def test_breakdown_rows(self, inventory):
        lines = [
            RecipeLine(item_id="flour", amount=250, unit="gram"),
            RecipeLine(item_id="gone", amount=1, unit="kg"),
        ]
        rows = recipe_breakdown(lines, inventory)
        assert rows[0].name == "Flour"
        assert rows[0].converted_amount == pytest.approx(0.25)
        assert rows[0].catalog_unit == "kg"
        assert rows[0].cost == pytest.approx(10000)
        assert not rows[0].missing
        assert rows[1].missing
        assert rows[1].cost == 0
