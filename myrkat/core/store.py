"""JSON collection store with serialized per-collection mutations."""

import asyncio
import copy
import logging
from pathlib import Path
from typing import Any, Callable

from .constants import CREATED_AT_FIELD, ID_FIELD, UPDATED_AT_FIELD
from .exceptions import (
    ConcurrentMutationConflictError,
    DuplicateDocumentIdError,
    InvalidRequestError,
)
from .persistence import CollectionPersistence
from .serializer import MutationSerializer
from .types import Document, WhereClause
from .utils import (
    matches_where,
    new_document_id,
    now_seconds,
    strip_reserved,
    validate_collection,
)

logger = logging.getLogger(__name__)

# A mutation receives the current documents and returns (new documents, result, changed)
Mutation = Callable[[list[Document]], tuple[list[Document], Any, bool]]


class CollectionStore:
    """
    File-backed store of named collections.

    Structure:
    - one JSON array per collection at <root>/<collection>.json
    - every mutation runs read -> compute -> write inside the collection's lane
    - reads are not queued; atomic renames mean they only see committed files
    """

    def __init__(
        self,
        root: Path,
        serializer: MutationSerializer | None = None,
        clock: Callable[[], int] = now_seconds,
    ):
        self.persistence = CollectionPersistence(root)
        self.serializer = serializer or MutationSerializer()
        self.clock = clock

        # Collections with a read-modify-write cycle in flight
        self._in_flight: set[str] = set()
        self._init_lock = asyncio.Lock()
        self._initialized = False

    @property
    def root(self) -> Path:
        return self.persistence.root

    # ========================================================================
    # Lifecycle
    # ========================================================================

    async def initialize(self) -> None:
        """Ensure the data directory exists. Idempotent."""
        async with self._init_lock:
            await asyncio.to_thread(self.persistence.ensure_root)
            if not self._initialized:
                self._initialized = True
                logger.info(f"Collection store initialized at: {self.root}")

    # ========================================================================
    # Public API
    # ========================================================================

    async def find(self, collection: str, where: WhereClause | None = None) -> list[Document]:
        """Return documents matching the where-clause, in stored order."""
        validate_collection(collection)
        _check_where(where)
        docs = await asyncio.to_thread(self.persistence.load, collection)
        if not where:
            return docs
        return [doc for doc in docs if matches_where(doc, where)]

    async def insert(
        self,
        collection: str,
        data: Document | list[Document],
    ) -> Document | list[Document]:
        """
        Insert one or more documents.
        Returns the created document, or a list when a list was given.
        """
        single = isinstance(data, dict)
        items = [data] if single else data
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            raise InvalidRequestError("insert data must be an object or a list of objects")

        def mutate(docs: list[Document]) -> tuple[list[Document], Any, bool]:
            if not items:
                return docs, [], False

            existing = {doc.get(ID_FIELD) for doc in docs}
            now = self.clock()
            created = []
            for item in items:
                doc = copy.deepcopy(item)
                doc_id = doc.get(ID_FIELD)
                if not isinstance(doc_id, str) or not doc_id:
                    doc_id = new_document_id()
                if doc_id in existing:
                    raise DuplicateDocumentIdError(collection, doc_id)
                existing.add(doc_id)

                doc[ID_FIELD] = doc_id
                doc[CREATED_AT_FIELD] = now
                doc[UPDATED_AT_FIELD] = now
                created.append(doc)

            return docs + created, created, True

        created = await self._apply(collection, mutate)
        logger.debug(f"Inserted {len(created)} documents into '{collection}'")
        return created[0] if single else created

    async def update(self, collection: str, where: WhereClause, patch: Document) -> list[Document]:
        """Merge patch into every matching document. Returns the updated documents."""
        _check_where(where)
        if not isinstance(patch, dict):
            raise InvalidRequestError("update data must be an object")
        fields = strip_reserved(patch)

        def mutate(docs: list[Document]) -> tuple[list[Document], Any, bool]:
            now = self.clock()
            updated = []
            new_docs = []
            for doc in docs:
                if matches_where(doc, where):
                    previous = doc.get(UPDATED_AT_FIELD)
                    stamp = max(now, previous + 1) if isinstance(previous, int) else now
                    doc = {**doc, **copy.deepcopy(fields), UPDATED_AT_FIELD: stamp}
                    updated.append(doc)
                new_docs.append(doc)
            return new_docs, updated, bool(updated)

        updated = await self._apply(collection, mutate)
        logger.debug(f"Updated {len(updated)} documents in '{collection}'")
        return updated

    async def delete(self, collection: str, where: WhereClause) -> int:
        """Delete every matching document. Returns the number removed."""
        _check_where(where)

        def mutate(docs: list[Document]) -> tuple[list[Document], Any, bool]:
            kept = [doc for doc in docs if not matches_where(doc, where)]
            count = len(docs) - len(kept)
            return kept, count, count > 0

        count = await self._apply(collection, mutate)
        if count:
            logger.info(f"Deleted {count} documents from '{collection}'")
        return count

    async def replace_all(self, collection: str, docs: list[Document]) -> None:
        """Overwrite a collection's contents unconditionally, without stamping."""
        if not isinstance(docs, list) or not all(isinstance(doc, dict) for doc in docs):
            raise InvalidRequestError("replaceAll data must be a list of objects")
        replacement = copy.deepcopy(docs)

        def mutate(_docs: list[Document]) -> tuple[list[Document], Any, bool]:
            return replacement, None, True

        await self._apply(collection, mutate)
        logger.info(f"Replaced collection '{collection}' with {len(replacement)} documents")

    # ========================================================================
    # Mutation cycle
    # ========================================================================

    async def _apply(self, collection: str, mutate: Mutation) -> Any:
        """Run a mutation inside the collection's lane."""
        validate_collection(collection)
        async with self.serializer.lane(collection):
            return await self._read_modify_write(collection, mutate)

    async def _read_modify_write(self, collection: str, mutate: Mutation) -> Any:
        """
        Read the collection, apply mutate, write back if it changed anything.
        Must only be called from inside the collection's lane.
        """
        if collection in self._in_flight:
            raise ConcurrentMutationConflictError(collection)

        self._in_flight.add(collection)
        try:
            docs = await asyncio.to_thread(self.persistence.load, collection)
            new_docs, result, changed = mutate(docs)
            if changed:
                await asyncio.to_thread(self.persistence.save, collection, new_docs)
            return result
        finally:
            self._in_flight.discard(collection)


def _check_where(where: Any) -> None:
    if where is not None and not isinstance(where, dict):
        raise InvalidRequestError("where must be an object")
