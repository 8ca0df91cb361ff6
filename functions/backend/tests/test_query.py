import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from backend.db import InMemoryRecipeStore, InMemorySnapshot
from backend.errors import StoreError
from backend.query import compose_recipe_query
from backend.schemas import ListRecipesParams


class RecordingQuery:
    """Records builder calls in order, like a Firestore query would receive them."""

    def __init__(self):
        self.calls = []

    def where(self, *, filter):
        self.calls.append(("where", filter.field_path, filter.op_string, filter.value))
        return self

    def order_by(self, field_path, direction):
        self.calls.append(("order_by", field_path, direction))
        return self

    def limit(self, count):
        self.calls.append(("limit", count))
        return self

    def offset(self, num_to_skip):
        self.calls.append(("offset", num_to_skip))
        return self

    def start_after(self, snapshot):
        self.calls.append(("start_after", snapshot.id))
        return self


def make_store(cursor_exists=True):
    store = MagicMock()
    store.recipes_query.return_value = RecordingQuery()
    store.get_recipe_snapshot.side_effect = lambda recipe_id: InMemorySnapshot(
        id=recipe_id, data={"name": "x"} if cursor_exists else None
    )
    return store


class ComposeRecipeQueryTests(unittest.TestCase):
    def test_anonymous_filters_on_published(self):
        store = make_store()
        params = ListRecipesParams(category="dessert", serves=4)
        query = compose_recipe_query(store, params, authenticated=False)
        self.assertEqual(
            query.calls,
            [
                ("where", "isPublished", "==", True),
                ("where", "category", "==", "dessert"),
                ("where", "serves", "==", 4),
            ],
        )

    def test_authenticated_sees_everything(self):
        store = make_store()
        query = compose_recipe_query(store, ListRecipesParams(), authenticated=True)
        self.assertEqual(query.calls, [])

    def test_ordering_defaults_to_ascending(self):
        store = make_store()
        params = ListRecipesParams(orderByField="publishDate")
        query = compose_recipe_query(store, params, authenticated=True)
        self.assertEqual(query.calls, [("order_by", "publishDate", "ASCENDING")])

        params = ListRecipesParams(orderByField="name", orderByDirection="desc")
        query = compose_recipe_query(make_store(), params, authenticated=True)
        self.assertEqual(query.calls, [("order_by", "name", "DESCENDING")])

    def test_offset_pagination(self):
        store = make_store()
        params = ListRecipesParams(pageNumber=2, perPage=10)
        query = compose_recipe_query(store, params, authenticated=True)
        self.assertEqual(query.calls, [("limit", 10), ("offset", 10)])

    def test_offset_wins_over_cursor(self):
        store = make_store()
        params = ListRecipesParams(pageNumber=1, perPage=5, cursorId="abc")
        query = compose_recipe_query(store, params, authenticated=True)
        self.assertEqual(query.calls, [("limit", 5), ("offset", 0)])
        store.get_recipe_snapshot.assert_not_called()

    def test_cursor_pagination(self):
        store = make_store()
        params = ListRecipesParams(perPage=5, cursorId="abc")
        query = compose_recipe_query(store, params, authenticated=True)
        self.assertEqual(query.calls, [("limit", 5), ("start_after", "abc")])

    def test_missing_cursor_document_is_store_error(self):
        store = make_store(cursor_exists=False)
        params = ListRecipesParams(cursorId="gone")
        with self.assertRaises(StoreError):
            compose_recipe_query(store, params, authenticated=True)

    def test_zero_values_are_not_dropped(self):
        store = make_store()
        params = ListRecipesParams(serves=0, perPage=0)
        query = compose_recipe_query(store, params, authenticated=True)
        self.assertEqual(query.calls, [("where", "serves", "==", 0), ("limit", 0)])


class InMemoryQueryTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryRecipeStore(emulate_triggers=False)
        for i in range(1, 8):
            self.store.set_recipe(
                f"r{i}",
                {
                    "name": f"Recipe {i}",
                    "category": "dessert" if i % 2 else "main",
                    "serves": 4 if i < 5 else 2,
                    "publishDate": datetime.fromtimestamp(1700000000 + i, tz=timezone.utc),
                    "isPublished": i != 3,
                },
            )

    def _ids(self, params, authenticated=False):
        query = compose_recipe_query(self.store, params, authenticated=authenticated)
        return [recipe_id for recipe_id, _ in self.store.stream(query)]

    def test_category_and_serves_without_auth(self):
        ids = self._ids(ListRecipesParams(category="dessert", serves=4))
        # r3 matches both filters but is unpublished.
        self.assertEqual(ids, ["r1"])

    def test_category_and_serves_with_auth(self):
        ids = self._ids(ListRecipesParams(category="dessert", serves=4), authenticated=True)
        self.assertEqual(ids, ["r1", "r3"])

    def test_page_two(self):
        params = ListRecipesParams(orderByField="name", pageNumber=2, perPage=3)
        self.assertEqual(self._ids(params, authenticated=True), ["r4", "r5", "r6"])

    def test_cursor_starts_strictly_after(self):
        params = ListRecipesParams(orderByField="publishDate", perPage=2, cursorId="r4")
        self.assertEqual(self._ids(params, authenticated=True), ["r5", "r6"])

    def test_cursor_outside_filtered_set(self):
        # r3 is unpublished, but still positions the anonymous result set.
        params = ListRecipesParams(orderByField="name", cursorId="r3")
        self.assertEqual(self._ids(params), ["r4", "r5", "r6", "r7"])

    def test_descending_order(self):
        params = ListRecipesParams(orderByField="name", orderByDirection="desc", perPage=2)
        self.assertEqual(self._ids(params, authenticated=True), ["r7", "r6"])

    def test_serves_zero_is_a_filter(self):
        self.assertEqual(self._ids(ListRecipesParams(serves=0), authenticated=True), [])

        self.store.set_recipe("r8", {"name": "Recipe 8", "serves": 0, "isPublished": True})
        self.assertEqual(self._ids(ListRecipesParams(serves=0), authenticated=True), ["r8"])

    def test_mixed_types_order_numbers_before_strings(self):
        self.store.set_recipe("r8", {"name": "Recipe 8", "serves": "4", "isPublished": True})
        self.store.set_recipe("r9", {"name": "Recipe 9", "serves": None, "isPublished": True})

        params = ListRecipesParams(orderByField="serves")
        self.assertEqual(
            self._ids(params, authenticated=True),
            ["r9", "r5", "r6", "r7", "r1", "r2", "r3", "r4", "r8"],
        )

        params = ListRecipesParams(orderByField="serves", orderByDirection="desc", perPage=2)
        self.assertEqual(self._ids(params, authenticated=True), ["r8", "r4"])

    def test_string_filter_does_not_match_number(self):
        self.store.set_recipe("r8", {"name": "Recipe 8", "category": 4, "isPublished": True})
        self.assertEqual(self._ids(ListRecipesParams(category="4"), authenticated=True), [])

    def test_cursor_missing_ordered_field_is_store_error(self):
        self.store.set_recipe("bare", {"name": "No date"})
        params = ListRecipesParams(orderByField="publishDate", cursorId="bare")
        with self.assertRaises(StoreError):
            self._ids(params, authenticated=True)


if __name__ == "__main__":
    unittest.main()
