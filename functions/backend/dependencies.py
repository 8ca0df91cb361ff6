"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
from typing import Any

import firebase_admin
from firebase_admin import credentials, firestore, storage

from backend.auth import FirebaseTokenVerifier, InMemoryTokenVerifier, TokenVerifier
from backend.config import get_settings
from backend.db import FirestoreRecipeStore, InMemoryRecipeStore, RecipeStore
from backend.storage import (
    FirebaseStorageClient,
    InMemoryStorageClient,
    StorageClient,
)

logger = logging.getLogger(__name__)

_firebase_app: Any = None
_recipe_store: RecipeStore | None = None
_token_verifier: TokenVerifier | None = None
_storage_client: StorageClient | None = None


def get_firebase_app() -> Any:
    """
    Initialize the default Firebase app once per process.

    Uses the service account file from FIREBASE_CREDENTIALS when set,
    otherwise application default credentials.
    """
    global _firebase_app
    if _firebase_app:
        return _firebase_app

    settings = get_settings()
    options = {}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id
    if settings.firebase_storage_bucket:
        options["storageBucket"] = settings.firebase_storage_bucket

    credential = (
        credentials.Certificate(settings.firebase_credentials)
        if settings.firebase_credentials
        else None
    )
    try:
        _firebase_app = firebase_admin.get_app()
    except ValueError:
        _firebase_app = firebase_admin.initialize_app(credential, options or None)
        logger.info("Initialized Firebase app %s", _firebase_app.project_id)
    return _firebase_app


def get_recipe_store() -> RecipeStore:
    """
    Return a singleton recipe store so in-memory state persists across requests.
    """
    global _recipe_store
    if _recipe_store:
        return _recipe_store

    settings = get_settings()
    if settings.use_in_memory_backends:
        _recipe_store = InMemoryRecipeStore()
    else:
        client = firestore.client(app=get_firebase_app())
        _recipe_store = FirestoreRecipeStore(
            client=client, collection_name=settings.firestore_recipe_collection
        )
    return _recipe_store


def get_token_verifier() -> TokenVerifier:
    global _token_verifier
    if _token_verifier:
        return _token_verifier

    settings = get_settings()
    if settings.use_in_memory_backends:
        _token_verifier = InMemoryTokenVerifier(
            tokens={token: {"uid": f"local-{i}"} for i, token in enumerate(settings.api_tokens)}
        )
    else:
        _token_verifier = FirebaseTokenVerifier(app=get_firebase_app())
    return _token_verifier


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends:
        _storage_client = InMemoryStorageClient()
    else:
        _storage_client = FirebaseStorageClient(
            bucket=storage.bucket(app=get_firebase_app())
        )
    return _storage_client
