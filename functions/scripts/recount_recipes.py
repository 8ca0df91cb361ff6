"""
Recompute the denormalized recipe count from the recipes collection.

The count triggers are at-least-once, so the stored count can drift. This
replaces it with an aggregation count of the collection.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.db import RecipeStore
from backend.dependencies import get_recipe_store


logger = logging.getLogger(__name__)


def recount(store: RecipeStore, *, dry_run: bool = False) -> tuple[int | None, int]:
    """Returns the (stored, actual) counts, writing the actual one unless dry_run."""
    stored = store.get_document_count()
    actual = store.count_recipes()
    if stored != actual and not dry_run:
        store.set_document_count(actual)
    return stored, actual


def main() -> int:
    parser = argparse.ArgumentParser(description="Recount recipe documents")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report the drift without saving",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    stored, actual = recount(get_recipe_store(), dry_run=args.dry_run)

    if stored == actual:
        logger.info("Count is up to date (%d)", actual)
    elif args.dry_run:
        logger.info("Stored count %s, actual %d (not saved)", stored, actual)
    else:
        logger.info("Updated count from %s to %d", stored, actual)
    return 0


if __name__ == "__main__":
    sys.exit(main())
