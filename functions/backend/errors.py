"""
Error taxonomy for the recipes API.

Handlers raise these; `backend.app` turns them into plain-text responses.
"""

from __future__ import annotations


class RecipeApiError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code: int = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class Unauthorized(RecipeApiError):
    status_code = 401


class InvalidPayload(RecipeApiError):
    status_code = 400


class StoreError(RecipeApiError):
    """Any failure reported by Firestore, Auth, or a cursor lookup."""

    status_code = 400


class RecipeNotFound(RecipeApiError):
    status_code = 404
