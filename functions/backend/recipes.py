"""
Validation and sanitization of recipe payloads.

Payloads arrive as camelCase JSON objects. `publishDate` travels over the
wire as seconds since the epoch and is stored as a timezone-aware datetime,
which Firestore persists as a native timestamp.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from backend.errors import InvalidPayload
from shared.types import RECIPE_FIELDS

REQUIRED_FIELDS = tuple(field for field in RECIPE_FIELDS if field != "ingredients")

INVALID_RECIPE_MESSAGE = "Recipe is not valid. Missing/invalid fields."


def validate_recipe(payload: Any) -> bool:
    """
    Returns True if the payload can be stored as a full recipe.

    Every required field must be present and truthy, and `ingredients` must
    be a non-empty list. Types are not checked beyond that.
    """
    if not payload or not isinstance(payload, dict):
        return False

    if not all(payload.get(field) for field in REQUIRED_FIELDS):
        return False

    ingredients = payload.get("ingredients")
    return isinstance(ingredients, list) and len(ingredients) > 0


def publish_date_from_seconds(seconds: Any) -> datetime:
    try:
        return datetime.fromtimestamp(float(seconds), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError) as e:
        raise InvalidPayload(f"Invalid publishDate: {seconds!r}") from e


def publish_date_to_seconds(value: Any) -> Any:
    """Converts a stored timestamp back to integer epoch seconds."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())
    return value


def sanitize_recipe(payload: dict) -> dict:
    """Projects a validated payload onto the writable recipe fields."""
    recipe = {field: payload.get(field) for field in RECIPE_FIELDS}
    recipe["publishDate"] = publish_date_from_seconds(payload["publishDate"])
    return recipe


def sanitize_recipe_patch(payload: Any) -> dict:
    """
    Builds a partial update from the writable fields present in the payload.

    Falsy values (0, "", False) are skipped, so they cannot be written with
    PATCH. Use PUT to change a field to one of those values.
    """
    recipe: dict = {}
    if not isinstance(payload, dict):
        return recipe

    for field in RECIPE_FIELDS:
        value = payload.get(field)
        if not value:
            continue
        if field == "publishDate":
            value = publish_date_from_seconds(value)
        recipe[field] = value

    return recipe


def serialize_recipe(recipe_id: str, data: dict) -> dict:
    """Shapes a stored recipe for the API: epoch-second dates plus its id."""
    recipe = dict(data)
    if "publishDate" in recipe:
        recipe["publishDate"] = publish_date_to_seconds(recipe["publishDate"])
    recipe["id"] = recipe_id
    return recipe
