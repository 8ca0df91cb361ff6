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

import re
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def camel_to_snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def convert_keys_to_snake(data: Any) -> Any:
    """
    Recursively converts dictionary keys from camelCase (Firestore/JSON) to
    snake_case (Python dataclasses).

    Lists are walked element by element; other values are returned as-is.
    """
    if isinstance(data, dict):
        return {
            camel_to_snake(key) if isinstance(key, str) else key: convert_keys_to_snake(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [convert_keys_to_snake(item) for item in data]
    return data
