# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

# Cloud functions for the recipes backend - recipe count triggers + daily
# publish sweep. The REST API is served by the FastAPI app in `backend.app`.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.

# Third-party library imports
from firebase_admin import initialize_app, firestore
from firebase_functions import logger, options, scheduler_fn
from firebase_functions.firestore_fn import (
    on_document_created,
    on_document_deleted,
    Event,
    DocumentSnapshot,
)

# Local application imports
from backend import publishing, triggers
from backend.db import FirestoreRecipeStore
from shared.firebase_constants import RECIPES_COLLECTION

PUBLISH_SWEEP_SCHEDULE = "0 0 * * *"  # At midnight server time
PUBLISH_SWEEP_TIMEOUT = 300

initialize_app()


def _recipe_store() -> FirestoreRecipeStore:
    return FirestoreRecipeStore(client=firestore.client())


def _record_count_change(recipe_id: str, created: bool) -> None:
    store = _recipe_store()
    if created:
        triggers.record_recipe_created(store)
    else:
        triggers.record_recipe_deleted(store)
    logger.debug(
        f"Recipe {recipe_id} {'created' if created else 'deleted'}, count updated"
    )


@on_document_created(document=RECIPES_COLLECTION + "/{recipeId}")
def on_create_recipe(event: Event[DocumentSnapshot | None]) -> None:
    """Increments the recipe count when a recipe document is created."""
    _record_count_change(event.params["recipeId"], created=True)


@on_document_deleted(document=RECIPES_COLLECTION + "/{recipeId}")
def on_delete_recipe(event: Event[DocumentSnapshot | None]) -> None:
    """Decrements the recipe count when a recipe document is deleted."""
    _record_count_change(event.params["recipeId"], created=False)


def _run_publish_sweep() -> list[str]:
    logger.info("dailyCheckRecipePublishDate() called - time to check")
    published_ids = publishing.sweep_publish_dates(_recipe_store())
    logger.info(f"Published {len(published_ids)} recipes")
    return published_ids


@scheduler_fn.on_schedule(
    schedule=PUBLISH_SWEEP_SCHEDULE,
    timeout_sec=PUBLISH_SWEEP_TIMEOUT,
    memory=options.MemoryOption.MB_256,
)
def daily_check_recipe_publish_date(event: scheduler_fn.ScheduledEvent) -> None:
    """Publishes every recipe whose publish date has passed."""
    _run_publish_sweep()
