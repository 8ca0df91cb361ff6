"""
Pydantic schemas for the recipes API.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ListRecipesParams(BaseModel):
    """Query parameters accepted by `GET /recipes`."""

    model_config = ConfigDict(populate_by_name=True)

    category: Optional[str] = None
    serves: Optional[int] = None
    order_by_field: Optional[str] = Field(default=None, alias="orderByField")
    order_by_direction: Literal["asc", "desc"] = Field(
        default="asc", alias="orderByDirection"
    )
    page_number: Optional[int] = Field(default=None, alias="pageNumber")
    per_page: Optional[int] = Field(default=None, alias="perPage", ge=0)
    cursor_id: Optional[str] = Field(default=None, alias="cursorId")


class ListRecipesResponse(BaseModel):
    collectionDocumentCount: int
    documents: list[dict]
