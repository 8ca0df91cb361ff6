"""
FastAPI application entry point for the recipes API.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from backend.config import get_settings
from backend.errors import RecipeApiError
from backend.routes import router

logger = logging.getLogger(__name__)


async def _recipe_api_error_handler(request: Request, exc: RecipeApiError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return PlainTextResponse(exc.message, status_code=exc.status_code)


async def _validation_error_handler(request: Request, exc: RequestValidationError):
    messages = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    return PlainTextResponse("; ".join(messages), status_code=400)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Recipes API", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RecipeApiError, _recipe_api_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
