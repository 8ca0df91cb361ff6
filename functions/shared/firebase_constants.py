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

RECIPES_COLLECTION = "recipes"
COLLECTION_DOCUMENT_COUNT_COLLECTION = "collectionDocumentCount"

# Name of the Firebase Storage path segment preceding the encoded object path
# in a download URL, e.g. ".../v0/b/<bucket>/o/<path>?alt=media&token=...".
DOWNLOAD_URL_OBJECT_MARKER = "/o/"
