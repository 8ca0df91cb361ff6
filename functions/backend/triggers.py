"""
Maintenance of the denormalized recipe count.

Called from the Firestore lifecycle triggers in `main.py`. Delivery is
at-least-once with no idempotency key, so a redelivered event counts twice;
`scripts/recount_recipes.py` repairs the drift.
"""

from __future__ import annotations

import logging

from backend.db import RecipeStore

logger = logging.getLogger(__name__)


def _apply_count_delta(store: RecipeStore, delta: int) -> None:
    current = store.get_document_count()
    if current is None:
        # First event for this collection: create the count document.
        store.set_document_count(max(delta, 0))
        logger.debug("Created recipe count document with count=%d", max(delta, 0))
        return

    store.increment_document_count(delta)
    logger.debug("Applied %+d to recipe count (was %d)", delta, current)


def record_recipe_created(store: RecipeStore) -> None:
    _apply_count_delta(store, 1)


def record_recipe_deleted(store: RecipeStore) -> None:
    _apply_count_delta(store, -1)
