"""
Daily sweep publishing recipes whose publish date has passed.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from dacite import Config, from_dict

from backend.db import RecipeStore
from backend.recipes import publish_date_to_seconds
from shared.json_utils import convert_keys_to_snake
from shared.types import RecipeRecord

logger = logging.getLogger(__name__)


def sweep_publish_dates(store: RecipeStore, now: Optional[float] = None) -> list[str]:
    """
    Marks every unpublished recipe whose `publishDate` is due as published.

    Recipes that are not due yet get `isPublished = False` written again, so
    every unpublished document is touched once per run.

    Args:
        store: The recipe store.
        now: Current time in epoch seconds. Defaults to `time.time()`.

    Returns:
        The ids of the recipes published by this run.
    """
    if now is None:
        now = time.time()

    published_ids = []
    for recipe_id, data in store.list_unpublished():
        recipe = from_dict(
            data_class=RecipeRecord,
            data=convert_keys_to_snake(data),
            config=Config(check_types=False),
        )
        publish_seconds = publish_date_to_seconds(recipe.publish_date)
        is_published = publish_seconds is not None and publish_seconds <= now

        if is_published:
            logger.info("Recipe: %s is now published!", recipe.name)
            published_ids.append(recipe_id)

        store.set_recipe(recipe_id, {"isPublished": is_published}, merge=True)

    return published_ids
