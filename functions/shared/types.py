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

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional


# Fields a client may write on a recipe, in their Firestore (camelCase) form.
RECIPE_FIELDS = (
    "name",
    "category",
    "description",
    "serves",
    "prepTime",
    "cookTime",
    "totalTime",
    "directions",
    "publishDate",
    "ingredients",
    "imageUrl",
)


@dataclass
class RecipeRecord:
    """A recipe document as stored in Firestore, with snake_case keys."""

    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    serves: Optional[int] = None
    prep_time: Optional[str] = None
    cook_time: Optional[str] = None
    total_time: Optional[str] = None
    directions: Any = None
    publish_date: Optional[datetime] = None
    ingredients: List[str] = field(default_factory=list)
    image_url: Optional[str] = None
    is_published: bool = False

