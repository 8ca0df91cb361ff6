"""
HTTP routes for the recipes REST API.
"""

from __future__ import annotations

import logging
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Body, Depends, Header, Query, Response
from fastapi.responses import PlainTextResponse

from backend.auth import TokenVerifier, authorize_user, try_authorize_user
from backend.db import RecipeStore
from backend.dependencies import get_recipe_store, get_token_verifier
from backend.errors import InvalidPayload, RecipeNotFound
from backend.query import compose_recipe_query
from backend.recipes import (
    INVALID_RECIPE_MESSAGE,
    sanitize_recipe,
    sanitize_recipe_patch,
    serialize_recipe,
    validate_recipe,
)
from backend.schemas import ListRecipesParams, ListRecipesResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def require_user(
    authorization: Optional[str] = Header(None),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> dict:
    """Rejects the request with 401 unless it carries a valid bearer token."""
    return authorize_user(authorization, verifier)


def optional_user(
    authorization: Optional[str] = Header(None),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> Optional[dict]:
    return try_authorize_user(authorization, verifier)


def _new_recipe_document(payload: Any) -> dict:
    if not validate_recipe(payload):
        raise InvalidPayload(INVALID_RECIPE_MESSAGE)
    recipe = sanitize_recipe(payload)
    # Publication is owned by the daily sweep.
    recipe["isPublished"] = False
    return recipe


@router.post("/recipes", status_code=201, response_class=PlainTextResponse)
def create_recipe(
    payload: Any = Body(None),
    user: dict = Depends(require_user),
    store: RecipeStore = Depends(get_recipe_store),
):
    recipe = _new_recipe_document(payload)
    recipe_id = store.add_recipe(recipe)
    logger.info("User %s created recipe %s", user.get("uid"), recipe_id)
    return PlainTextResponse(recipe_id, status_code=201)


@router.get("/recipes", response_model=ListRecipesResponse)
def list_recipes(
    params: Annotated[ListRecipesParams, Query()],
    user: Optional[dict] = Depends(optional_user),
    store: RecipeStore = Depends(get_recipe_store),
):
    query = compose_recipe_query(store, params, authenticated=user is not None)

    documents = [
        serialize_recipe(recipe_id, data) for recipe_id, data in store.stream(query)
    ]
    return ListRecipesResponse(
        collectionDocumentCount=store.get_document_count() or 0,
        documents=documents,
    )


@router.get("/recipes/{recipe_id}")
def get_recipe(recipe_id: str, store: RecipeStore = Depends(get_recipe_store)):
    data = store.get_recipe(recipe_id)
    if data is None:
        raise RecipeNotFound("Document does not exist")
    return serialize_recipe(recipe_id, data)


@router.patch("/recipes/{recipe_id}")
def patch_recipe(
    recipe_id: str,
    payload: Any = Body(None),
    user: dict = Depends(require_user),
    store: RecipeStore = Depends(get_recipe_store),
):
    recipe = sanitize_recipe_patch(payload)
    store.set_recipe(recipe_id, recipe, merge=True)
    logger.info("User %s patched recipe %s", user.get("uid"), recipe_id)
    return Response(status_code=200)


@router.put("/recipes/{recipe_id}")
def replace_recipe(
    recipe_id: str,
    payload: Any = Body(None),
    user: dict = Depends(require_user),
    store: RecipeStore = Depends(get_recipe_store),
):
    recipe = _new_recipe_document(payload)
    store.set_recipe(recipe_id, recipe)
    logger.info("User %s replaced recipe %s", user.get("uid"), recipe_id)
    return Response(status_code=200)


@router.delete("/recipes/{recipe_id}")
def delete_recipe(
    recipe_id: str,
    user: dict = Depends(require_user),
    store: RecipeStore = Depends(get_recipe_store),
):
    store.delete_recipe(recipe_id)
    logger.info("User %s deleted recipe %s", user.get("uid"), recipe_id)
    return Response(status_code=200)
