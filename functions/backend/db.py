"""
Document store abstraction for Firestore and an in-memory test implementation.

Both clients expose the same query surface (`where`, `order_by`, `limit`,
`offset`, `start_after`) so `backend.query` can compose list queries without
knowing which store it is talking to.
"""

from __future__ import annotations

import copy
import functools
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Protocol

from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1 import Increment
from google.cloud.firestore_v1.base_query import FieldFilter

from backend.errors import StoreError
from shared.firebase_constants import (
    COLLECTION_DOCUMENT_COUNT_COLLECTION,
    RECIPES_COLLECTION,
)

ASCENDING = "ASCENDING"
DESCENDING = "DESCENDING"


class RecipeStore(Protocol):
    """Operations the API, triggers and sweep need from the document store."""

    def recipes_query(self) -> Any:
        ...

    def stream(self, query: Any) -> list[tuple[str, dict]]:
        ...

    def get_recipe(self, recipe_id: str) -> Optional[dict]:
        ...

    def get_recipe_snapshot(self, recipe_id: str) -> Any:
        ...

    def add_recipe(self, recipe: dict) -> str:
        ...

    def set_recipe(self, recipe_id: str, recipe: dict, *, merge: bool = False) -> None:
        ...

    def delete_recipe(self, recipe_id: str) -> None:
        ...

    def list_unpublished(self) -> list[tuple[str, dict]]:
        ...

    def count_recipes(self) -> int:
        ...

    def get_document_count(self) -> Optional[int]:
        ...

    def set_document_count(self, count: int) -> None:
        ...

    def increment_document_count(self, delta: int) -> None:
        ...


def _wrap_store_errors(func):
    """Re-raises Firestore client failures as `StoreError`."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except google_exceptions.GoogleAPICallError as e:
            raise StoreError(e.message or str(e)) from e
        except ValueError as e:
            raise StoreError(str(e)) from e

    return wrapper


@dataclass
class FirestoreRecipeStore:
    """Recipe store backed by a `google.cloud.firestore.Client`."""

    client: Any
    collection_name: str = RECIPES_COLLECTION
    count_collection_name: str = COLLECTION_DOCUMENT_COUNT_COLLECTION

    def _collection(self):
        return self.client.collection(self.collection_name)

    def _count_ref(self):
        # One count document per counted collection, keyed by its name.
        return self.client.collection(self.count_collection_name).document(
            self.collection_name
        )

    def recipes_query(self) -> Any:
        return self._collection()

    @_wrap_store_errors
    def stream(self, query: Any) -> list[tuple[str, dict]]:
        return [(snapshot.id, snapshot.to_dict()) for snapshot in query.stream()]

    @_wrap_store_errors
    def get_recipe(self, recipe_id: str) -> Optional[dict]:
        snapshot = self._collection().document(recipe_id).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    @_wrap_store_errors
    def get_recipe_snapshot(self, recipe_id: str) -> Any:
        return self._collection().document(recipe_id).get()

    @_wrap_store_errors
    def add_recipe(self, recipe: dict) -> str:
        _, doc_ref = self._collection().add(recipe)
        return doc_ref.id

    @_wrap_store_errors
    def set_recipe(self, recipe_id: str, recipe: dict, *, merge: bool = False) -> None:
        self._collection().document(recipe_id).set(recipe, merge=merge)

    @_wrap_store_errors
    def delete_recipe(self, recipe_id: str) -> None:
        self._collection().document(recipe_id).delete()

    @_wrap_store_errors
    def list_unpublished(self) -> list[tuple[str, dict]]:
        query = self._collection().where(filter=FieldFilter("isPublished", "==", False))
        return self.stream(query)

    @_wrap_store_errors
    def count_recipes(self) -> int:
        results = self._collection().count().get()
        return int(results[0][0].value)

    @_wrap_store_errors
    def get_document_count(self) -> Optional[int]:
        snapshot = self._count_ref().get()
        if not snapshot.exists:
            return None
        return (snapshot.to_dict() or {}).get("count", 0)

    @_wrap_store_errors
    def set_document_count(self, count: int) -> None:
        self._count_ref().set({"count": count})

    @_wrap_store_errors
    def increment_document_count(self, delta: int) -> None:
        self._count_ref().update({"count": Increment(delta)})


@dataclass
class InMemorySnapshot:
    """Stand-in for a Firestore `DocumentSnapshot`."""

    id: str
    data: Optional[dict] = None

    @property
    def exists(self) -> bool:
        return self.data is not None

    def to_dict(self) -> Optional[dict]:
        return copy.deepcopy(self.data) if self.data is not None else None


def _order_key(value: Any) -> tuple:
    """
    Sort key following Firestore's cross-type value ordering: null, booleans,
    numbers, timestamps, strings, bytes, arrays, maps.
    """
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, value)
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return (3, value.timestamp())
    if isinstance(value, str):
        return (4, value)
    if isinstance(value, bytes):
        return (5, value)
    if isinstance(value, (list, tuple)):
        return (8, tuple(_order_key(item) for item in value))
    if isinstance(value, dict):
        return (9, tuple(sorted((k, _order_key(v)) for k, v in value.items())))
    return (10, str(value))


@dataclass(frozen=True)
class InMemoryQuery:
    """
    Immutable query over an `InMemoryRecipeStore`, mirroring Firestore's
    builder semantics: equality filters, ordering (documents missing an
    ordered field are excluded), `start_after` cursor, then offset and limit.
    """

    store: "InMemoryRecipeStore"
    filters: tuple = ()
    orders: tuple = ()
    limit_count: Optional[int] = None
    offset_count: int = 0
    cursor: Optional[InMemorySnapshot] = None

    def where(self, *, filter: FieldFilter) -> "InMemoryQuery":
        if filter.op_string != "==":
            raise ValueError(f"Unsupported filter operator: {filter.op_string}")
        return replace(self, filters=self.filters + (filter,))

    def order_by(self, field_path: str, direction: str = ASCENDING) -> "InMemoryQuery":
        return replace(self, orders=self.orders + ((field_path, direction),))

    def limit(self, count: int) -> "InMemoryQuery":
        return replace(self, limit_count=count)

    def offset(self, num_to_skip: int) -> "InMemoryQuery":
        return replace(self, offset_count=num_to_skip)

    def start_after(self, snapshot: InMemorySnapshot) -> "InMemoryQuery":
        return replace(self, cursor=snapshot)

    def _matches(self, data: dict) -> bool:
        for item in self.filters:
            if item.field_path not in data:
                return False
            if _order_key(data[item.field_path]) != _order_key(item.value):
                return False
        return all(field_path in data for field_path, _ in self.orders)

    def _sorted(self, rows: list[tuple[str, dict]]) -> list[tuple[str, dict]]:
        # Ties fall back to document id, in the direction of the last ordering.
        descending = bool(self.orders) and self.orders[-1][1] == DESCENDING
        rows = sorted(rows, key=lambda row: row[0], reverse=descending)
        for field_path, direction in reversed(self.orders):
            rows.sort(
                key=lambda row: _order_key(row[1][field_path]),
                reverse=direction == DESCENDING,
            )
        return rows

    def stream(self) -> Iterable[InMemorySnapshot]:
        rows = [
            (doc_id, data)
            for doc_id, data in self.store.recipes.items()
            if self._matches(data)
        ]

        if self.cursor is not None:
            cursor_data = self.cursor.data or {}
            missing = [f for f, _ in self.orders if f not in cursor_data]
            if missing:
                raise StoreError(
                    f"Cursor document {self.cursor.id} has no value for {missing[0]}"
                )
            if not any(doc_id == self.cursor.id for doc_id, _ in rows):
                rows.append((self.cursor.id, cursor_data))
            rows = self._sorted(rows)
            position = [doc_id for doc_id, _ in rows].index(self.cursor.id)
            rows = rows[position + 1 :]
        else:
            rows = self._sorted(rows)

        rows = rows[self.offset_count :]
        if self.limit_count is not None:
            rows = rows[: self.limit_count]

        for doc_id, data in rows:
            yield InMemorySnapshot(id=doc_id, data=copy.deepcopy(data))


@dataclass
class InMemoryRecipeStore:
    """
    Test double for Firestore.

    With `emulate_triggers` set, adds and deletes run the count triggers the
    way the Functions emulator would.
    """

    recipes: dict = field(default_factory=dict)
    document_count: Optional[int] = None
    emulate_triggers: bool = True

    def recipes_query(self) -> InMemoryQuery:
        return InMemoryQuery(store=self)

    def stream(self, query: InMemoryQuery) -> list[tuple[str, dict]]:
        return [(snapshot.id, snapshot.to_dict()) for snapshot in query.stream()]

    def get_recipe(self, recipe_id: str) -> Optional[dict]:
        data = self.recipes.get(recipe_id)
        return copy.deepcopy(data) if data is not None else None

    def get_recipe_snapshot(self, recipe_id: str) -> InMemorySnapshot:
        return InMemorySnapshot(id=recipe_id, data=self.get_recipe(recipe_id))

    def add_recipe(self, recipe: dict) -> str:
        recipe_id = uuid.uuid4().hex[:20]
        self.recipes[recipe_id] = copy.deepcopy(recipe)
        if self.emulate_triggers:
            from backend import triggers

            triggers.record_recipe_created(self)
        return recipe_id

    def set_recipe(self, recipe_id: str, recipe: dict, *, merge: bool = False) -> None:
        created = recipe_id not in self.recipes
        if merge and not created:
            self.recipes[recipe_id].update(copy.deepcopy(recipe))
        else:
            self.recipes[recipe_id] = copy.deepcopy(recipe)
        if created and self.emulate_triggers:
            from backend import triggers

            triggers.record_recipe_created(self)

    def delete_recipe(self, recipe_id: str) -> None:
        # Deleting a missing document is a no-op in Firestore as well.
        if self.recipes.pop(recipe_id, None) is not None and self.emulate_triggers:
            from backend import triggers

            triggers.record_recipe_deleted(self)

    def list_unpublished(self) -> list[tuple[str, dict]]:
        query = self.recipes_query().where(
            filter=FieldFilter("isPublished", "==", False)
        )
        return self.stream(query)

    def count_recipes(self) -> int:
        return len(self.recipes)

    def get_document_count(self) -> Optional[int]:
        return self.document_count

    def set_document_count(self, count: int) -> None:
        self.document_count = count

    def increment_document_count(self, delta: int) -> None:
        if self.document_count is None:
            raise StoreError("No document to update: collectionDocumentCount")
        self.document_count += delta
