# File: helpers/estimation_client.py
"""Estimation service client for Bloom (Google Gemini REST API).

Three calls, all of which degrade instead of raising:
    estimate_metric(description, unit) -> int or None
    analyze_image(image_bytes) -> FoodEstimate or None
    get_motivational_message(plant, habits, user_name, today) -> str

Requests go through Home Assistant's shared aiohttp session. Without an API key
no request is made at all.
"""

from __future__ import annotations

import asyncio
import base64
import json
import re
from typing import TYPE_CHECKING, Any

import aiohttp

from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from .. import const
from ..engines.habit_engine import HabitEngine

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from ..type_defs import FoodEstimate, HabitData, PlantData

_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)
_NON_DIGIT_RE = re.compile(r"[^0-9]")

METRIC_PROMPT = """
You are a nutrition and unit conversion assistant.
User input: "{description}"
Target Unit: "{unit}"

Task: Estimate the numeric value for the user's input in the requested unit.
For example, if input is "2 eggs" and unit is "kcal", return approx calories (e.g. 140).
If input is "10 mins running" and unit is "kcal", return approx calories burned.

Return ONLY the number (integer). Do not add text. If impossible to estimate, return 0.
"""

IMAGE_PROMPT = """
Analyze this image of food.
Identify the main dish or items.
Estimate the total calories for the portion shown.

Return the response in this specific JSON format:
{
  "name": "Short description of food",
  "calories": 000
}
Only return JSON.
"""

MOTIVATION_PROMPT = """
You are a magical, friendly digital plant named "Bloom".
The user's name is {user_name}.

Current Status:
- Stage: {stage}
- Health: {health}
- Habits Completed Today: {completed}/{total}

Task: Write a very short, cute, and encouraging message (max 20 words) from the plant's perspective to the user.

If health is WITHERED or DEAD, sound sad but hopeful for water (habits).
If health is WILTING, sound thirsty.
If health is THRIVING, sound happy and energetic.
If they completed all habits, celebrate!
"""


# ==============================================================================
# Response Parsing (pure)
# ==============================================================================


def parse_metric(text: str | None) -> int | None:
    """Strip everything but digits and parse the remainder as an integer.

    "about 140 kcal" -> 140, "none" -> None. A reply of "0" is a valid 0.
    """
    if not text:
        return None
    digits = _NON_DIGIT_RE.sub("", text)
    if not digits:
        return None
    return int(digits)


def parse_food_estimate(text: str | None) -> FoodEstimate | None:
    """Extract the first {...} JSON object from a reply.

    Returns None when no object is present, it does not decode, or it lacks a
    usable name/calories pair.
    """
    if not text:
        return None
    match = _JSON_OBJECT_RE.search(text)
    if match is None:
        return None
    try:
        payload = json.loads(match.group(0))
        name = str(payload["name"]).strip()
        calories = int(round(float(payload["calories"])))
    except (ValueError, KeyError, TypeError) as err:
        const.LOGGER.debug("DEBUG: Unusable food estimate %r: %s", text, err)
        return None
    if not name or calories < 0:
        return None
    return {"name": name, "calories": calories}


def build_motivation_prompt(
    plant: PlantData, habits: list[HabitData], user_name: str, today: str
) -> str:
    """Render the motivation prompt for the plant's current status."""
    completed = sum(1 for h in habits if HabitEngine.is_completed_on(h, today))
    return MOTIVATION_PROMPT.format(
        user_name=user_name or "Friend",
        stage=str(plant.get(const.DATA_PLANT_STAGE, "")).upper(),
        health=str(plant.get(const.DATA_PLANT_HEALTH, "")).upper(),
        completed=completed,
        total=len(habits),
    )


def _extract_text(payload: dict[str, Any]) -> str:
    """Join the text parts of the first candidate of a generateContent reply."""
    parts = payload["candidates"][0]["content"]["parts"]
    return "".join(part.get("text", "") for part in parts).strip()


# ==============================================================================
# Client
# ==============================================================================


class GeminiEstimationClient:
    """Thin async wrapper around the Gemini generateContent endpoint."""

    def __init__(
        self,
        hass: HomeAssistant,
        api_key: str | None,
        model: str = const.GEMINI_MODEL,
        timeout: float = const.ESTIMATION_REQUEST_TIMEOUT,
    ) -> None:
        self.hass = hass
        self._api_key = (api_key or "").strip()
        self._model = model
        self._timeout = timeout

    @property
    def is_configured(self) -> bool:
        """Return True when an API key is available."""
        return bool(self._api_key)

    async def _async_generate(self, parts: list[dict[str, Any]]) -> str:
        """POST one generateContent request and return the reply text.

        Raises:
            HomeAssistantError: Non-200 status, non-JSON body or malformed reply.
            TimeoutError: Request exceeded the timeout.
            aiohttp.ClientError: Transport failure.
        """
        session = async_get_clientsession(self.hass)
        url = const.GEMINI_API_URL.format(model=self._model)
        body = {"contents": [{"parts": parts}]}
        async with asyncio.timeout(self._timeout):
            async with session.post(
                url, json=body, headers={"x-goog-api-key": self._api_key}
            ) as response:
                if response.status != 200:
                    raise HomeAssistantError(
                        f"HTTP {response.status} from estimation service"
                    )
                try:
                    payload = await response.json(content_type=None)
                except ValueError as err:
                    raise HomeAssistantError(
                        f"Unreadable estimation service reply: {err}"
                    ) from err
        try:
            return _extract_text(payload)
        except (KeyError, IndexError, TypeError) as err:
            raise HomeAssistantError(
                f"Malformed estimation service reply: {err}"
            ) from err

    async def estimate_metric(self, description: str, unit: str) -> int | None:
        """Estimate a numeric value for free text in the given unit."""
        if not self.is_configured:
            return None
        prompt = METRIC_PROMPT.format(description=description, unit=unit)
        try:
            text = await self._async_generate([{"text": prompt}])
        except (TimeoutError, aiohttp.ClientError, HomeAssistantError) as err:
            const.LOGGER.warning("WARNING: Metric estimation failed: %s", err)
            return None
        return parse_metric(text)

    async def analyze_image(self, image_bytes: bytes) -> FoodEstimate | None:
        """Estimate the food name and calories shown in a JPEG photo."""
        if not self.is_configured:
            return None
        parts = [
            {
                "inline_data": {
                    "mime_type": "image/jpeg",
                    "data": base64.b64encode(image_bytes).decode("ascii"),
                }
            },
            {"text": IMAGE_PROMPT},
        ]
        try:
            text = await self._async_generate(parts)
        except (TimeoutError, aiohttp.ClientError, HomeAssistantError) as err:
            const.LOGGER.warning("WARNING: Food image analysis failed: %s", err)
            return None
        return parse_food_estimate(text)

    async def get_motivational_message(
        self,
        plant: PlantData,
        habits: list[HabitData],
        user_name: str,
        today: str,
    ) -> str:
        """Return a short message from the plant, or a fixed fallback."""
        if not self.is_configured:
            return const.MOTIVATION_FALLBACK_NO_KEY
        prompt = build_motivation_prompt(plant, habits, user_name, today)
        try:
            text = await self._async_generate([{"text": prompt}])
        except (TimeoutError, aiohttp.ClientError, HomeAssistantError) as err:
            const.LOGGER.warning("WARNING: Motivation request failed: %s", err)
            return const.MOTIVATION_FALLBACK_ERROR
        return text or const.MOTIVATION_FALLBACK_ERROR
