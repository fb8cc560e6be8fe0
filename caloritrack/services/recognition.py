"""Client for the external food-recognition service."""

import json
import re
from datetime import date
from typing import Any, Dict, Optional, Union

import httpx
from loguru import logger

from caloritrack.config import get_settings
from caloritrack.models.food import UNRECOGNIZED_FOOD_NAME, FoodAnalysis
from caloritrack.models.tracking import MacroGrams, MealLogCreate

DEFAULT_PROMPT = "Analyze this meal and estimate its nutrition values"
DEFAULT_CONFIDENCE = 0.5

_BASE64_RE = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")
_FENCE_RE = re.compile(r"```(?:json)?\n?|\n?```")


class ImageFormatError(ValueError):
    """The image payload is not valid base64."""


def prepare_image(image_base64: str) -> str:
    """Strip a data-URL prefix and whitespace, then check the base64 alphabet."""
    data = image_base64
    if "," in data:
        data = data.split(",", 1)[1]
    data = re.sub(r"\s+", "", data)
    if not data or not _BASE64_RE.match(data):
        raise ImageFormatError("Invalid image format")
    return data


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return max(0, value)


def _strings(value: Any) -> list:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def placeholder_analysis(raw_text: str) -> FoodAnalysis:
    """Zero-value result that keeps the unparsed text for inspection."""
    return FoodAnalysis(food_name=UNRECOGNIZED_FOOD_NAME, confidence_score=0, raw_response=raw_text)


def parse_analysis(payload: Union[str, Dict[str, Any]]) -> FoodAnalysis:
    """
    Normalize a recognition payload into a ``FoodAnalysis``.

    Accepts a decoded dict or raw text (optionally wrapped in a ```json
    fence). Numbers are clamped at zero, missing ones default to zero, and
    confidence is clamped into [0, 1]. Anything unparseable degrades to a
    placeholder instead of raising.
    """
    raw_text = payload if isinstance(payload, str) else json.dumps(payload, default=str)

    data = payload
    if isinstance(payload, str):
        try:
            data = json.loads(_FENCE_RE.sub("", payload).strip())
        except ValueError:
            logger.warning(f"Recognition response is not JSON ({len(raw_text)} chars)")
            return placeholder_analysis(raw_text)

    valid = (
        isinstance(data, dict)
        and isinstance(data.get("food_name"), str)
        and isinstance(data.get("calories"), (int, float))
    )
    if not valid:
        logger.warning(f"Recognition response has an invalid format ({len(raw_text)} chars)")
        return placeholder_analysis(raw_text)

    # The service already degraded this one
    if isinstance(data.get("raw_response"), str):
        return placeholder_analysis(data["raw_response"])

    confidence = data.get("confidence_score")
    if not isinstance(confidence, (int, float)) or isinstance(confidence, bool) or not confidence:
        confidence = DEFAULT_CONFIDENCE

    return FoodAnalysis(
        food_name=data["food_name"] or UNRECOGNIZED_FOOD_NAME,
        calories=_number(data.get("calories")),
        protein=_number(data.get("protein")),
        carbs=_number(data.get("carbs")),
        fat=_number(data.get("fat")),
        fiber=_number(data.get("fiber")),
        ingredients=_strings(data.get("ingredients")),
        health_tips=_strings(data.get("health_tips")),
        confidence_score=min(1, max(0, confidence)),
    )


def meal_from_analysis(
    analysis: FoodAnalysis,
    meal_type: str = "snack",
    meal_date: Optional[date] = None,
    time: Optional[str] = None,
    photo: Optional[str] = None,
) -> MealLogCreate:
    """Meal entry for a recognized photo."""
    return MealLogCreate(
        name=analysis.food_name,
        type=meal_type,
        date=meal_date,
        time=time,
        calories=analysis.calories,
        nutrition=MacroGrams(protein=analysis.protein, carbs=analysis.carbs, fats=analysis.fat),
        photo=photo,
        confidence=analysis.confidence_score,
        method="camera",
        raw_response=analysis.raw_response,
    )


class FoodRecognitionClient:
    """Sends meal photos to the recognition service over HTTP."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.recognition_url).rstrip("/")
        self.timeout = timeout or settings.recognition_timeout
        self.transport = transport

    async def _query(self, image_base64: str, prompt: str, auth_token: Optional[str]) -> httpx.Response:
        headers = {"Content-Type": "application/json"}
        if auth_token:
            headers["Authorization"] = f"Bearer {auth_token}"

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            response = await client.post(
                f"{self.base_url}/analyzeFood",
                headers=headers,
                json={"imageBase64": image_base64, "userPrompt": prompt},
            )
            response.raise_for_status()
            return response

    async def analyze(
        self,
        image_base64: str,
        prompt: Optional[str] = None,
        auth_token: Optional[str] = None,
    ) -> FoodAnalysis:
        """
        Recognize the food in a photo.

        Raises ``ImageFormatError`` for an invalid image. Service failures and
        malformed responses come back as a zero-confidence placeholder.
        """
        image = prepare_image(image_base64)

        try:
            response = await self._query(image, prompt or DEFAULT_PROMPT, auth_token)
        except httpx.HTTPError as e:
            logger.error(f"Food recognition request failed: {e}")
            return placeholder_analysis(str(e))

        try:
            body = response.json()
        except ValueError:
            return parse_analysis(response.text)

        # Service wraps results as {"success": ..., "data": {...}}
        if isinstance(body, dict) and isinstance(body.get("data"), (dict, str)):
            return parse_analysis(body["data"])
        return parse_analysis(response.text)
