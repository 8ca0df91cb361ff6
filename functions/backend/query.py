"""
Translates list-endpoint query parameters into document store query calls.
"""

from __future__ import annotations

import logging
from typing import Any

from google.cloud.firestore_v1.base_query import FieldFilter

from backend.db import ASCENDING, DESCENDING, RecipeStore
from backend.errors import StoreError
from backend.schemas import ListRecipesParams

logger = logging.getLogger(__name__)

_DIRECTIONS = {"asc": ASCENDING, "desc": DESCENDING}


def page_offset(page_number: int, per_page: int) -> int:
    return (page_number - 1) * per_page


def compose_recipe_query(
    store: RecipeStore, params: ListRecipesParams, *, authenticated: bool
) -> Any:
    """
    Builds the list query in a fixed order: visibility, category, serves,
    ordering, limit, then either offset or cursor pagination.

    Unauthenticated callers only see published recipes. Offset pagination
    wins over `cursorId` when both `pageNumber` and `perPage` are given.

    Raises:
        StoreError: If `cursorId` names a document that does not exist.
    """
    query = store.recipes_query()

    if not authenticated:
        query = query.where(filter=FieldFilter("isPublished", "==", True))

    if params.category:
        query = query.where(filter=FieldFilter("category", "==", params.category))

    if params.serves is not None:
        query = query.where(filter=FieldFilter("serves", "==", params.serves))

    if params.order_by_field:
        query = query.order_by(
            params.order_by_field, direction=_DIRECTIONS[params.order_by_direction]
        )

    if params.per_page is not None:
        query = query.limit(params.per_page)

    if (
        params.page_number is not None
        and params.page_number > 0
        and params.per_page is not None
    ):
        query = query.offset(page_offset(params.page_number, params.per_page))
    elif params.cursor_id:
        cursor = store.get_recipe_snapshot(params.cursor_id)
        if not cursor.exists:
            logger.info("Cursor document %s not found", params.cursor_id)
            raise StoreError(f"Cursor document does not exist: {params.cursor_id}")
        query = query.start_after(cursor)

    return query
