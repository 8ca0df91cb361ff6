"""
Upload or delete a recipe image in the configured object storage.

Examples:
    python scripts/recipe_image.py upload ./pancakes.jpg recipes/pancakes.jpg
    python scripts/recipe_image.py delete "https://firebasestorage.googleapis.com/v0/b/..."
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.dependencies import get_storage_client
from backend.storage import StorageClient


logger = logging.getLogger(__name__)


def upload(storage: StorageClient, src_path: Path, dest_path: str) -> str:
    last_percent = -1

    def on_progress(percent: int) -> None:
        nonlocal last_percent
        if percent != last_percent:
            logger.info("Uploading %s: %d%%", src_path.name, percent)
            last_percent = percent

    with src_path.open("rb") as f:
        return storage.upload_file(f, dest_path, on_progress)


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    subparsers = parser.add_subparsers(dest="command", required=True)

    upload_parser = subparsers.add_parser("upload", help="Upload a local image")
    upload_parser.add_argument("src", type=Path, help="Local file to upload")
    upload_parser.add_argument("dest", help="Storage path, e.g. recipes/cake.jpg")

    delete_parser = subparsers.add_parser("delete", help="Delete by download URL")
    delete_parser.add_argument("url", help="Download URL returned by upload")

    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    storage = get_storage_client()

    if args.command == "upload":
        if not args.src.is_file():
            logger.error("No such file: %s", args.src)
            return 1
        download_url = upload(storage, args.src, args.dest)
        print(download_url)
    else:
        try:
            storage.delete_file(args.url)
        except ValueError as e:
            logger.error("%s", e)
            return 1
        logger.info("Deleted %s", args.url)
    return 0


if __name__ == "__main__":
    sys.exit(main())
