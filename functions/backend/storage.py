"""
Recipe image upload/delete helper over Firebase Storage and an in-memory
store for testing.

Uploads report progress as whole percentages and resolve to a public
download URL. Deletes take that URL back and derive the object path from it.
"""

from __future__ import annotations

import io
import math
import uuid
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Optional, Protocol
from urllib.parse import quote, unquote

from shared.firebase_constants import DOWNLOAD_URL_OBJECT_MARKER

ProgressCallback = Callable[[int], None]
UrlCallback = Callable[[str], None]

FIREBASE_DOWNLOAD_HOST = "https://firebasestorage.googleapis.com/v0/b"
DOWNLOAD_TOKEN_METADATA_KEY = "firebaseStorageDownloadTokens"


class StorageClient(Protocol):
    """Defines the operations the app needs from object storage."""

    def upload_file(
        self,
        file: BinaryIO,
        path: str,
        on_progress: ProgressCallback,
        on_url_ready: Optional[UrlCallback] = None,
    ) -> str:
        ...

    def delete_file(self, download_url: str) -> None:
        ...


def progress_percent(bytes_transferred: int, total_bytes: int) -> int:
    if total_bytes <= 0:
        return 100
    return math.floor(bytes_transferred / total_bytes * 100)


def storage_path_from_download_url(download_url: str) -> str:
    """
    Extracts the object path from a Firebase Storage download URL.

    The path is the URL-decoded text between `/o/` and the first `?`.

    Raises:
        ValueError: If the URL does not have that shape.
    """
    decoded_url = unquote(download_url)
    start_index = decoded_url.find(DOWNLOAD_URL_OBJECT_MARKER)
    end_index = decoded_url.find("?")
    if start_index < 0 or end_index < 0:
        raise ValueError(f"Not a storage download URL: {download_url}")
    start_index += len(DOWNLOAD_URL_OBJECT_MARKER)
    if end_index <= start_index:
        raise ValueError(f"Not a storage download URL: {download_url}")
    return decoded_url[start_index:end_index]


def _file_size(file: BinaryIO) -> int:
    position = file.tell()
    file.seek(0, io.SEEK_END)
    size = file.tell() - position
    file.seek(position)
    return size


class _ProgressReader(io.RawIOBase):
    """Wraps a file object and reports progress as it is read."""

    def __init__(self, file: BinaryIO, total_bytes: int, on_progress: ProgressCallback):
        self._file = file
        self._total_bytes = total_bytes
        self._on_progress = on_progress
        self.bytes_transferred = 0

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return self._file.seekable()

    def tell(self) -> int:
        return self._file.tell()

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        # Resumable uploads seek back to the last committed byte on retry.
        position = self._file.seek(offset, whence)
        self.bytes_transferred = min(position, self._total_bytes)
        return position

    def read(self, size: int = -1) -> bytes:
        chunk = self._file.read(size)
        if chunk:
            self.bytes_transferred += len(chunk)
            self._on_progress(progress_percent(self.bytes_transferred, self._total_bytes))
        return chunk


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    base_url: str = "https://storage.example.test/v0/b/test-bucket"
    chunk_size: int = 256 * 1024
    stored_objects: dict = field(default_factory=dict)

    def upload_file(
        self,
        file: BinaryIO,
        path: str,
        on_progress: ProgressCallback,
        on_url_ready: Optional[UrlCallback] = None,
    ) -> str:
        total_bytes = _file_size(file)
        reader = _ProgressReader(file, total_bytes, on_progress)
        chunks = []
        while True:
            chunk = reader.read(self.chunk_size)
            if not chunk:
                break
            chunks.append(chunk)
        self.stored_objects[path] = b"".join(chunks)

        download_url = f"{self.base_url}/o/{quote(path, safe='')}?alt=media"
        if on_url_ready:
            on_url_ready(download_url)
        return download_url

    def delete_file(self, download_url: str) -> None:
        path = storage_path_from_download_url(download_url)
        if self.stored_objects.pop(path, None) is None:
            raise FileNotFoundError(path)


@dataclass
class FirebaseStorageClient:
    """
    Cloud Storage for Firebase client.

    Uploaded objects get a `firebaseStorageDownloadTokens` metadata entry so
    the returned URL is the same token URL the Firebase web SDK hands out.
    """

    bucket: object
    chunk_size: int = 256 * 1024

    def upload_file(
        self,
        file: BinaryIO,
        path: str,
        on_progress: ProgressCallback,
        on_url_ready: Optional[UrlCallback] = None,
    ) -> str:
        total_bytes = _file_size(file)
        token = str(uuid.uuid4())

        blob = self.bucket.blob(path, chunk_size=self.chunk_size)
        blob.metadata = {DOWNLOAD_TOKEN_METADATA_KEY: token}
        blob.upload_from_file(
            _ProgressReader(file, total_bytes, on_progress), size=total_bytes
        )

        download_url = (
            f"{FIREBASE_DOWNLOAD_HOST}/{self.bucket.name}/o/"
            f"{quote(path, safe='')}?alt=media&token={token}"
        )
        if on_url_ready:
            on_url_ready(download_url)
        return download_url

    def delete_file(self, download_url: str) -> None:
        path = storage_path_from_download_url(download_url)
        self.bucket.blob(path).delete()

