"""Tests for the Gemini client and the AI advisor routes."""

import json

import httpx
import pytest

from restops.main import app
from restops.services.ai.gemini_client import (
    AIResponseError,
    AIServiceError,
    GeminiClient,
    decode_json,
    get_gemini_client,
    strip_fences,
)
from restops.schemas.ai import ExtractedInvoice

API = "/api/v1/ai"


def _reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _client(handler) -> GeminiClient:
    return GeminiClient(
        api_key="test-key",
        model="test-model",
        base_url="https://ai.test/v1beta",
        transport=httpx.MockTransport(handler),
    )


class TestDecoding:

    def test_strip_fences(self):
        assert strip_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_decode_camel_case(self):
        invoice = decode_json(
            '```json {"invoiceDate": "2024-01-02", "items": '
            '[{"name": "Rice", "quantity": 5, "unit": "kg", "costPerUnit": 55000}]} ```',
            ExtractedInvoice,
        )
        assert invoice.invoice_date == "2024-01-02"
        assert invoice.items[0].cost_per_unit == 55000

    def test_decode_rejects_bad_json(self):
        with pytest.raises(AIResponseError):
            decode_json("not json", ExtractedInvoice)

    def test_decode_rejects_wrong_shape(self):
        with pytest.raises(AIResponseError):
            decode_json('{"items": [{"name": "Rice"}]}', ExtractedInvoice)


class TestGeminiClient:

    @pytest.mark.asyncio
    async def test_ask_sends_key_and_context(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["key"] = request.headers["x-goog-api-key"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_reply("  Order more beef.  "))

        answer = await _client(handler).ask("What to buy?", {"lowStock": ["Beef"]})
        assert answer == "Order more beef."
        assert seen["url"] == "https://ai.test/v1beta/models/test-model:generateContent"
        assert seen["key"] == "test-key"
        assert "Beef" in seen["body"]["contents"][0]["parts"][0]["text"]

    @pytest.mark.asyncio
    async def test_structured_call_requests_json(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_reply(json.dumps({
                "name": "Beef Stew", "suggestedPrice": 250000,
                "ingredients": [{"name": "Beef", "amount": 0.2, "unit": "kg"}],
            })))

        recipe = await _client(handler).suggest_recipe([{"name": "Beef", "stock": 10}])
        assert recipe.name == "Beef Stew"
        assert recipe.suggested_price == 250000
        assert seen["body"]["generationConfig"]["responseMimeType"] == "application/json"

    @pytest.mark.asyncio
    async def test_forecast_procurement(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_reply(json.dumps({
                "orders": [{
                    "supplierId": "s1", "supplierName": "Fresh Farms",
                    "items": [{"itemId": "b", "itemName": "Beef", "quantityToOrder": 8,
                               "currentStock": 2, "unit": "kg"}],
                }],
                "noSupplierItems": [{"itemId": "s", "itemName": "Salt", "quantityToOrder": 1,
                                     "currentStock": 0, "unit": "kg"}],
            })))

        forecast = await _client(handler).forecast_procurement(
            [{"timestamp": "2024-07-01T12:00:00", "items": 3}],
            [{"id": "b", "name": "Beef", "stock": 2, "supplierId": "s1"}],
            [{"id": "s1", "name": "Fresh Farms"}],
        )
        assert forecast.orders[0].supplier_name == "Fresh Farms"
        assert forecast.orders[0].items[0].quantity_to_order == 8
        assert forecast.no_supplier_items[0].item_name == "Salt"
        assert seen["body"]["generationConfig"]["temperature"] == 0.2
        assert "noSupplierItems" in seen["body"]["systemInstruction"]["parts"][0]["text"]

    @pytest.mark.asyncio
    async def test_forecast_prep(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert "parLevel" in json.loads(request.content)["contents"][0]["parts"][0]["text"]
            return httpx.Response(200, json=_reply(json.dumps({
                "summary": "Busy Friday",
                "tasks": [{"prepTaskId": "t1", "prepTaskName": "Tomato Sauce",
                           "quantityToPrep": 2, "priority": "high", "reasoning": "below par"}],
            })))

        forecast = await _client(handler).forecast_prep(
            [], [{"id": "t1", "name": "Tomato Sauce", "onHand": 3, "parLevel": 5}]
        )
        assert forecast.summary == "Busy Friday"
        assert forecast.tasks[0].priority == "high"
        assert forecast.tasks[0].quantity_to_prep == 2

    @pytest.mark.asyncio
    async def test_forecast_prep_rejects_unknown_priority(self):
        client = _client(lambda request: httpx.Response(200, json=_reply(json.dumps({
            "tasks": [{"prepTaskId": "t1", "prepTaskName": "Sauce", "quantityToPrep": 1,
                       "priority": "urgent"}],
        }))))
        with pytest.raises(AIResponseError):
            await client.forecast_prep([], [])

    @pytest.mark.asyncio
    async def test_analyze_recipe(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=_reply("- Use less beef\n"))

        advice = await _client(handler).analyze_recipe(
            {"name": "Burger", "price": 180000, "recipe": [{"name": "Beef"}]}, []
        )
        assert advice == "- Use less beef"
        assert "Burger" in seen["body"]["contents"][0]["parts"][0]["text"]
        assert "responseMimeType" not in seen["body"]["generationConfig"]

    @pytest.mark.asyncio
    async def test_http_error(self):
        client = _client(lambda request: httpx.Response(403, json={"error": "denied"}))
        with pytest.raises(AIServiceError):
            await client.ask("hi", {})

    @pytest.mark.asyncio
    async def test_no_candidates(self):
        client = _client(lambda request: httpx.Response(200, json={"candidates": []}))
        with pytest.raises(AIResponseError):
            await client.ask("hi", {})

    @pytest.mark.asyncio
    async def test_not_configured(self):
        client = GeminiClient(api_key="")
        assert not client.is_configured
        with pytest.raises(AIServiceError):
            await client.ask("hi", {})


class FakeAdvisor:
    """Stands in for GeminiClient in route tests."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    async def ask(self, question, context):
        if self.fail:
            raise AIServiceError("AI service is unreachable")
        self.calls.append(("ask", question, context))
        return "Raise the salad price."

    async def suggest_recipe(self, inventory):
        self.calls.append(("suggest_recipe", inventory))
        return {"name": "Tomato Soup", "suggestedPrice": 70000, "ingredients": []}

    async def extract_invoice(self, image, mime_type, inventory_names):
        self.calls.append(("extract_invoice", mime_type, inventory_names))
        return ExtractedInvoice.model_validate({
            "invoiceDate": "2024-07-01",
            "items": [
                {"name": "Tomatoes", "quantity": 5, "unit": "kg", "costPerUnit": 45000},
                {"name": "Basil", "quantity": 1, "unit": "kg", "costPerUnit": 90000},
            ],
        })

    async def process_sales_sheet(self, csv_text, menu):
        self.calls.append(("process_sales_sheet", csv_text, menu))
        return {
            "processedSales": [{"itemName": "Salad", "quantity": 2, "pricePerItem": 90000}],
            "newItemsFound": [],
        }

    async def analyze_recipe(self, item, inventory):
        self.calls.append(("analyze_recipe", item, inventory))
        return "Swap the bun for flatbread."

    async def forecast_procurement(self, recent_sales, inventory, suppliers):
        self.calls.append(("forecast_procurement", recent_sales, inventory, suppliers))
        return {"orders": [], "noSupplierItems": []}

    async def forecast_prep(self, recent_sales, prep_tasks):
        self.calls.append(("forecast_prep", recent_sales, prep_tasks))
        return {
            "summary": "Steady day",
            "tasks": [{"prepTaskId": prep_tasks[0]["id"], "prepTaskName": prep_tasks[0]["name"],
                       "quantityToPrep": 2, "priority": "medium"}],
        }


@pytest.fixture
def advisor(client):
    fake = FakeAdvisor()
    app.dependency_overrides[get_gemini_client] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_gemini_client, None)


class TestAIRoutes:

    def test_ask_builds_context(self, client, kitchen, advisor):
        response = client.post(API + "/ask", json={"question": "How is the salad doing?"})
        assert response.status_code == 200
        assert response.json() == {"answer": "Raise the salad price."}
        _, question, context = advisor.calls[0]
        assert question == "How is the salad doing?"
        assert {m["name"] for m in context["menu"]} == {"Burger", "Salad"}
        assert context["salesCount"] == 0

    def test_ask_failure_is_502(self, client, kitchen):
        app.dependency_overrides[get_gemini_client] = lambda: FakeAdvisor(fail=True)
        try:
            response = client.post(API + "/ask", json={"question": "Anything?"})
        finally:
            app.dependency_overrides.pop(get_gemini_client, None)
        assert response.status_code == 502

    def test_recipe_suggestion(self, client, kitchen, advisor):
        response = client.post(API + "/recipe-suggestion")
        assert response.status_code == 200
        assert response.json()["name"] == "Tomato Soup"
        inventory = advisor.calls[0][1]
        assert inventory[0]["name"] == "Bun"

    def test_recipe_suggestion_needs_stock(self, client, advisor):
        assert client.post(API + "/recipe-suggestion").status_code == 400

    def test_invoice_extract_matches_inventory(self, client, kitchen, advisor):
        response = client.post(
            API + "/invoice-extract",
            files={"file": ("invoice.jpg", b"\xff\xd8\xff fake jpeg", "image/jpeg")},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["invoice_date"] == "2024-07-01"
        tomatoes, basil = body["items"]
        assert tomatoes["matched_id"] == kitchen["tomato"].id
        assert tomatoes["is_new"] is False
        assert basil["is_new"] is True

    def test_invoice_extract_rejects_non_image(self, client, advisor):
        response = client.post(
            API + "/invoice-extract",
            files={"file": ("invoice.txt", b"hello", "text/plain")},
        )
        assert response.status_code == 400
        assert advisor.calls == []

    def test_sales_sheet(self, client, kitchen, advisor):
        response = client.post(
            API + "/sales-sheet",
            files={"file": ("sales.csv", b"Item,Qty\nSalad,2\n", "text/csv")},
        )
        assert response.status_code == 200
        assert response.json()["processedSales"][0]["itemName"] == "Salad"
        _, csv_text, menu = advisor.calls[0]
        assert csv_text == "Item,Qty\nSalad,2\n"
        assert {"name": "Salad", "price": 90000} in menu

        imported = client.post("/api/v1/pos/import", json=response.json())
        assert imported.status_code == 201
        assert imported.json()["rows_imported"] == 1

    def test_sales_sheet_unsupported_file(self, client, advisor):
        response = client.post(
            API + "/sales-sheet",
            files={"file": ("sales.pdf", b"%PDF-1.4", "application/pdf")},
        )
        assert response.status_code == 400

    def test_recipe_analysis(self, client, kitchen, advisor):
        burger_id = kitchen["burger"].id
        response = client.post(f"{API}/menu/{burger_id}/analysis")
        assert response.status_code == 200
        assert response.json() == {"menu_item_id": burger_id, "analysis": "Swap the bun for flatbread."}
        _, item, inventory = advisor.calls[0]
        assert item["cost"] == pytest.approx(101000)
        assert [r["name"] for r in item["recipe"]] == ["Beef", "Bun", "Tomato Sauce"]
        assert {i["name"] for i in inventory} == {"Beef", "Bun", "Tomato"}

    def test_recipe_analysis_unknown_item(self, client, advisor):
        assert client.post(f"{API}/menu/missing/analysis").status_code == 404
        assert advisor.calls == []

    def test_procurement_forecast_sends_recent_sales(self, client, kitchen, advisor):
        client.post("/api/v1/pos/checkout", json={
            "items": [{"menu_item_id": kitchen["burger"].id, "quantity": 2}],
        })
        response = client.post(API + "/procurement-forecast")
        assert response.status_code == 200
        assert response.json() == {"orders": [], "noSupplierItems": []}
        _, sales, inventory, suppliers = advisor.calls[0]
        assert [s["items"] for s in sales] == [2]
        beef = next(i for i in inventory if i["name"] == "Beef")
        assert beef["supplierId"] == kitchen["beef"].supplier_id
        assert suppliers[0]["name"] == "Fresh Farms"

    def test_procurement_forecast_needs_inventory(self, client, advisor):
        assert client.post(API + "/procurement-forecast").status_code == 400

    def test_prep_forecast(self, client, kitchen, advisor):
        response = client.post(API + "/prep-forecast")
        assert response.status_code == 200
        body = response.json()
        assert body["summary"] == "Steady day"
        assert body["tasks"][0]["prepTaskName"] == "Tomato Sauce"
        assert body["tasks"][0]["priority"] == "medium"
        _, _, tasks = advisor.calls[0]
        assert tasks[0]["onHand"] == 3
        assert tasks[0]["parLevel"] == 5

    def test_prep_forecast_needs_tasks(self, client, advisor):
        assert client.post(API + "/prep-forecast").status_code == 400
