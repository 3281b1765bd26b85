"""Collection persistence with atomic writes, one JSON file per collection."""

import contextlib
import json
import logging
import os
from pathlib import Path

from .constants import TEMP_SUFFIX
from .exceptions import (
    CollectionNotFoundError,
    CorruptCollectionError,
    PersistenceFailureError,
)
from .utils import collection_file_name, validate_collection

logger = logging.getLogger(__name__)


class CollectionPersistence:
    """Reads and writes collection files under a data directory.

    All methods are blocking; the store runs them in worker threads.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def path_for(self, collection: str) -> Path:
        """Return the backing file path for a collection."""
        return self.root / collection_file_name(validate_collection(collection))

    def temp_path_for(self, collection: str) -> Path:
        return self.root / f"{validate_collection(collection)}{TEMP_SUFFIX}"

    def ensure_root(self) -> None:
        """Create the data directory if needed. Safe to call concurrently."""
        self.root.mkdir(parents=True, exist_ok=True)

    def exists(self, collection: str) -> bool:
        return self.path_for(collection).exists()

    def read(self, collection: str) -> list[dict]:
        """
        Read a collection from disk.
        Raises CollectionNotFoundError if the file is absent and
        CorruptCollectionError if its contents cannot be decoded.
        """
        path = self.path_for(collection)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise CollectionNotFoundError(collection)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CorruptCollectionError(collection, str(e)) from e

        if not isinstance(data, list) or not all(isinstance(doc, dict) for doc in data):
            raise CorruptCollectionError(collection, "expected a JSON array of objects")

        return data

    def load(self, collection: str) -> list[dict]:
        """Load a collection, treating a missing file as empty."""
        try:
            docs = self.read(collection)
        except CollectionNotFoundError:
            logger.debug(f"Collection '{collection}' not on disk yet, treating as empty")
            return []

        logger.debug(f"Loaded collection '{collection}': {len(docs)} documents")
        return docs

    def save(self, collection: str, docs: list[dict]) -> None:
        """
        Save a collection with atomic write.
        The payload is fully encoded before any file is touched, so a failure
        leaves the previous contents in place. Raises PersistenceFailureError.
        """
        path = self.path_for(collection)
        temp_path = self.temp_path_for(collection)

        try:
            payload = json.dumps(docs, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise PersistenceFailureError(collection, f"payload is not JSON serializable: {e}") from e

        try:
            self.root.mkdir(parents=True, exist_ok=True)

            # Atomic write: write to temp file, then rename
            with open(temp_path, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())

            # Atomic rename (POSIX guarantees atomicity)
            temp_path.replace(path)

        except OSError as e:
            logger.error(f"Failed to save collection '{collection}' to {path}: {e}")
            with contextlib.suppress(OSError):
                temp_path.unlink(missing_ok=True)
            raise PersistenceFailureError(collection, str(e)) from e

        logger.debug(f"Saved collection '{collection}' to {path}: {len(docs)} documents")
