import io
import unittest
from unittest.mock import MagicMock

from backend.storage import (
    FirebaseStorageClient,
    InMemoryStorageClient,
    progress_percent,
    storage_path_from_download_url,
)


class DownloadUrlTests(unittest.TestCase):
    def test_extracts_decoded_path(self):
        url = (
            "https://firebasestorage.googleapis.com/v0/b/app.appspot.com/o/"
            "recipes%2Fcake%20photo.jpg?alt=media&token=abc"
        )
        self.assertEqual(storage_path_from_download_url(url), "recipes/cake photo.jpg")

    def test_rejects_unexpected_shapes(self):
        for url in (
            "https://example.test/recipes/cake.jpg",
            "https://example.test/v0/b/bucket/o/recipes/cake.jpg",
            "https://example.test/x?y=/o/",
        ):
            with self.subTest(url=url):
                with self.assertRaises(ValueError):
                    storage_path_from_download_url(url)


class ProgressPercentTests(unittest.TestCase):
    def test_floors_percentage(self):
        self.assertEqual(progress_percent(1, 3), 33)
        self.assertEqual(progress_percent(2, 3), 66)
        self.assertEqual(progress_percent(3, 3), 100)

    def test_empty_file_is_complete(self):
        self.assertEqual(progress_percent(0, 0), 100)


class InMemoryStorageClientTests(unittest.TestCase):
    def test_upload_reports_progress_and_url(self):
        storage = InMemoryStorageClient(chunk_size=4)
        progress = []
        urls = []

        url = storage.upload_file(
            io.BytesIO(b"0123456789"), "recipes/a b.jpg", progress.append, urls.append
        )

        self.assertEqual(progress, [40, 80, 100])
        self.assertEqual(urls, [url])
        self.assertEqual(storage.stored_objects["recipes/a b.jpg"], b"0123456789")

        storage.delete_file(url)
        self.assertEqual(storage.stored_objects, {})

    def test_delete_missing_object_raises(self):
        storage = InMemoryStorageClient()
        with self.assertRaises(FileNotFoundError):
            storage.delete_file(f"{storage.base_url}/o/missing.jpg?alt=media")


class FirebaseStorageClientTests(unittest.TestCase):
    def setUp(self):
        self.bucket = MagicMock()
        self.bucket.name = "app.appspot.com"
        self.blob = self.bucket.blob.return_value

        def fake_upload(file_obj, size):
            while file_obj.read(4):
                pass

        self.blob.upload_from_file.side_effect = fake_upload

    def test_upload_sets_download_token(self):
        client = FirebaseStorageClient(bucket=self.bucket)
        progress = []

        url = client.upload_file(io.BytesIO(b"12345678"), "recipes/cake.jpg", progress.append)

        token = self.blob.metadata["firebaseStorageDownloadTokens"]
        self.assertEqual(
            url,
            "https://firebasestorage.googleapis.com/v0/b/app.appspot.com/o/"
            f"recipes%2Fcake.jpg?alt=media&token={token}",
        )
        self.assertEqual(progress, [50, 100])

    def test_upload_errors_propagate(self):
        self.blob.upload_from_file.side_effect = RuntimeError("quota")
        client = FirebaseStorageClient(bucket=self.bucket)
        with self.assertRaises(RuntimeError):
            client.upload_file(io.BytesIO(b"x"), "recipes/cake.jpg", lambda p: None)

    def test_delete_uses_path_from_url(self):
        client = FirebaseStorageClient(bucket=self.bucket)
        client.delete_file(
            "https://firebasestorage.googleapis.com/v0/b/app.appspot.com/o/"
            "recipes%2Fcake.jpg?alt=media&token=t"
        )
        self.bucket.blob.assert_called_with("recipes/cake.jpg")
        self.blob.delete.assert_called_once_with()


if __name__ == "__main__":
    unittest.main()
