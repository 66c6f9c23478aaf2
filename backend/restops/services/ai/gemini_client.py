"""Gemini generateContent REST client.

Every advisor call goes through :meth:`GeminiClient._generate`. Structured
calls ask for JSON and validate the reply against a pydantic model; nothing
here writes to the database.
"""

import base64
import json
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from restops.core.config import settings
from restops.schemas.ai import (
    ExtractedInvoice,
    GeneratedRecipe,
    PrepForecast,
    ProcessedSalesData,
    ProcurementForecast,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


class AIServiceError(Exception):
    """The AI backend could not be reached, rejected the key or is not configured."""


class AIResponseError(AIServiceError):
    """The AI backend answered with something that is not the expected JSON."""


def strip_fences(text: str) -> str:
    """Remove markdown code fences the model sometimes wraps JSON in."""
    return _FENCE_RE.sub("", text).strip()


def decode_json(text: str, model: Type[T]) -> T:
    cleaned = strip_fences(text)
    try:
        return model.model_validate(json.loads(cleaned))
    except (json.JSONDecodeError, PydanticValidationError) as exc:
        logger.warning("Invalid %s from AI: %s", model.__name__, exc)
        raise AIResponseError(f"AI returned an invalid {model.__name__}") from exc


class GeminiClient:
    """Thin async wrapper over ``models/{model}:generateContent``."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key if api_key is not None else (settings.gemini_api_key or "")
        self._model = model or settings.gemini_model
        self._base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self._timeout = timeout or settings.ai_timeout_seconds
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def _generate(
        self,
        parts: List[Dict[str, Any]],
        system_instruction: Optional[str] = None,
        json_output: bool = False,
        temperature: float = 0.4,
    ) -> str:
        if not self.is_configured:
            raise AIServiceError("Gemini API key is not configured")

        body: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {"temperature": temperature},
        }
        if system_instruction:
            body["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if json_output:
            body["generationConfig"]["responseMimeType"] = "application/json"

        url = f"{self._base_url}/models/{self._model}:generateContent"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(url, headers={"x-goog-api-key": self._api_key}, json=body)
                resp.raise_for_status()
                payload = resp.json()
        except httpx.HTTPStatusError as exc:
            logger.error("Gemini returned HTTP %s", exc.response.status_code)
            raise AIServiceError(f"AI request failed with status {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error("Gemini request failed: %s", exc)
            raise AIServiceError("AI service is unreachable") from exc
        except ValueError as exc:
            raise AIResponseError("AI returned a non-JSON envelope") from exc

        try:
            candidate_parts = payload["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as exc:
            raise AIResponseError("AI returned no candidates") from exc
        text = "".join(p.get("text", "") for p in candidate_parts if isinstance(p, dict))
        if not text.strip():
            raise AIResponseError("AI returned an empty answer")
        return text

    # ===== CALL SHAPES =====

    async def ask(self, question: str, context: Dict[str, Any]) -> str:
        """Free-text advice grounded in a snapshot of restaurant data."""
        prompt = (
            "Restaurant data (JSON):\n"
            f"{json.dumps(context, ensure_ascii=False, default=str)}\n\n"
            f"Question: {question}"
        )
        text = await self._generate(
            [{"text": prompt}],
            system_instruction=(
                "You are a restaurant operations consultant. Answer concisely "
                "using only the data provided."
            ),
            temperature=0.7,
        )
        return text.strip()

    async def suggest_recipe(self, inventory: Sequence[Dict[str, Any]]) -> GeneratedRecipe:
        """Daily special that uses the ingredients with the most stock."""
        prompt = (
            "Current inventory (JSON):\n"
            f"{json.dumps(list(inventory), ensure_ascii=False, default=str)}\n\n"
            "Create a daily special that uses high-stock ingredients. Reply with JSON: "
            '{"name", "description", "category", "suggestedPrice", '
            '"ingredients": [{"name", "amount", "unit"}], "reasoning"}'
        )
        text = await self._generate([{"text": prompt}], json_output=True, temperature=0.8)
        return decode_json(text, GeneratedRecipe)

    async def extract_invoice(
        self, image: bytes, mime_type: str, inventory_names: Sequence[str]
    ) -> ExtractedInvoice:
        """Line items and date read from a photographed purchase invoice."""
        parts = [
            {"inlineData": {"mimeType": mime_type, "data": base64.b64encode(image).decode("ascii")}},
            {"text": (
                "Existing inventory names for reference:\n"
                f"{json.dumps(list(inventory_names), ensure_ascii=False)}\n\n"
                "Extract every line item. Reply with JSON: "
                '{"invoiceDate": "YYYY-MM-DD" or null, '
                '"items": [{"name", "quantity", "unit", "costPerUnit"}]}. '
                "costPerUnit is the price of one unit, not the line total."
            )},
        ]
        text = await self._generate(parts, json_output=True, temperature=0.1)
        return decode_json(text, ExtractedInvoice)

    async def process_sales_sheet(self, csv_text: str, menu: Sequence[Dict[str, Any]]) -> ProcessedSalesData:
        """Sales rows read from a spreadsheet export, split into known and new items."""
        prompt = (
            "Current menu (JSON):\n"
            f"{json.dumps(list(menu), ensure_ascii=False)}\n\n"
            "Sales sheet (CSV):\n"
            f"{csv_text}\n\n"
            "Reply with JSON: "
            '{"processedSales": [{"itemName", "quantity", "pricePerItem"}], '
            '"newItemsFound": [{"name", "price", "category"}]}. '
            "List items missing from the menu under newItemsFound. Skip malformed rows."
        )
        text = await self._generate([{"text": prompt}], json_output=True, temperature=0.1)
        return decode_json(text, ProcessedSalesData)

    async def analyze_recipe(self, item: Dict[str, Any], inventory: Sequence[Dict[str, Any]]) -> str:
        """Cost, stock usage and flavour advice for one costed menu item."""
        prompt = (
            "Menu item with its costed recipe (JSON):\n"
            f"{json.dumps(item, ensure_ascii=False, default=str)}\n\n"
            "Current inventory (JSON):\n"
            f"{json.dumps(list(inventory), ensure_ascii=False, default=str)}\n\n"
            "Suggest cheaper substitutes from stock, ways to use high-stock ingredients, "
            "flavour improvements, and comment briefly on profitability. "
            "Answer as short markdown bullet points."
        )
        text = await self._generate(
            [{"text": prompt}],
            system_instruction="You are a restaurant chef and food-cost consultant.",
            temperature=0.8,
        )
        return text.strip()

    async def forecast_procurement(
        self,
        recent_sales: Sequence[Dict[str, Any]],
        inventory: Sequence[Dict[str, Any]],
        suppliers: Sequence[Dict[str, Any]],
    ) -> ProcurementForecast:
        """Shopping list for the next seven days, grouped by supplier."""
        today = datetime.now(timezone.utc).strftime("%A")
        prompt = (
            f"Recent sales (JSON):\n{json.dumps(list(recent_sales), ensure_ascii=False, default=str)}\n\n"
            f"Current inventory (JSON):\n{json.dumps(list(inventory), ensure_ascii=False, default=str)}\n\n"
            f"Suppliers (JSON):\n{json.dumps(list(suppliers), ensure_ascii=False, default=str)}\n\n"
            f"Today is {today}. Reply with JSON: "
            '{"orders": [{"supplierId", "supplierName", "items": '
            '[{"itemId", "itemName", "quantityToOrder", "currentStock", "unit"}]}], '
            '"noSupplierItems": [{"itemId", "itemName", "quantityToOrder", "currentStock", "unit"}]}'
        )
        text = await self._generate(
            [{"text": prompt}],
            system_instruction=(
                "You are a restaurant procurement planner. Forecast ingredient needs for the "
                "next 7 days from the sales pattern, allowing for busier weekends. Order only "
                "items that will run low, enough for 7 to 10 days. Group items by supplier; "
                "items without a supplier go under noSupplierItems."
            ),
            json_output=True,
            temperature=0.2,
        )
        return decode_json(text, ProcurementForecast)

    async def forecast_prep(
        self, recent_sales: Sequence[Dict[str, Any]], prep_tasks: Sequence[Dict[str, Any]]
    ) -> PrepForecast:
        """Prioritised mise en place list for tomorrow's service."""
        tomorrow = (datetime.now(timezone.utc) + timedelta(days=1)).strftime("%A")
        prompt = (
            f"Recent sales (JSON):\n{json.dumps(list(recent_sales), ensure_ascii=False, default=str)}\n\n"
            f"Prep tasks (JSON):\n{json.dumps(list(prep_tasks), ensure_ascii=False, default=str)}\n\n"
            f"Tomorrow is {tomorrow}. Reply with JSON: "
            '{"summary", "tasks": [{"prepTaskId", "prepTaskName", "quantityToPrep", '
            '"priority": "high" | "medium" | "low", "reasoning"}]}'
        )
        text = await self._generate(
            [{"text": prompt}],
            system_instruction=(
                "You are a sous-chef planning tomorrow's prep. Forecast demand from the sales "
                "pattern and prioritise tasks by demand and how far on-hand is below par."
            ),
            json_output=True,
            temperature=0.4,
        )
        return decode_json(text, PrepForecast)


def get_gemini_client() -> GeminiClient:
    """FastAPI dependency; overridden in tests."""
    return GeminiClient()
