"""Handler for the storage:request topic."""

import logging
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from .constants import OPERATION_ALIASES, OPERATIONS, STORAGE_REQUEST_TOPIC
from .exceptions import InvalidRequestError, UnsupportedOperationError
from .store import CollectionStore

logger = logging.getLogger(__name__)


class StorageRequest(BaseModel):
    """Envelope carried on the storage:request topic."""
    model_config = ConfigDict(populate_by_name=True)

    operation: str = Field(..., description="One of find, insert, update, delete, replaceAll (writeFile, writeTable)")
    collection: str = Field(
        ...,
        validation_alias=AliasChoices("collection", "tableName", "fileName"),
        description="Collection name",
    )
    where: dict[str, Any] | None = Field(None, description="Equality filter (required for update/delete)")
    data: Any = Field(None, description="Document, list of documents, or update patch")


def parse_request(payload: Any) -> StorageRequest:
    """Coerce a bus payload into a StorageRequest. Raises InvalidRequestError."""
    if isinstance(payload, StorageRequest):
        return payload
    if not isinstance(payload, dict):
        raise InvalidRequestError("storage request must be an object")
    try:
        return StorageRequest.model_validate(payload)
    except ValidationError as e:
        raise InvalidRequestError(f"Invalid storage request: {e}") from e


class StorageRequestHandler:
    """Dispatches storage request envelopes to a CollectionStore."""

    def __init__(self, store: CollectionStore):
        self.store = store

    async def __call__(self, payload: Any) -> Any:
        request = parse_request(payload)
        op = OPERATION_ALIASES.get(request.operation, request.operation)
        logger.debug(f"Storage request: {op} on '{request.collection}'")

        if op == "find":
            return await self.store.find(request.collection, request.where or {})

        elif op == "insert":
            if not isinstance(request.data, (dict, list)):
                raise InvalidRequestError("insert requires data")
            return await self.store.insert(request.collection, request.data)

        elif op == "update":
            if request.where is None:
                raise InvalidRequestError("update requires where")
            if not isinstance(request.data, dict):
                raise InvalidRequestError("update requires data to be an object")
            return await self.store.update(request.collection, request.where, request.data)

        elif op == "delete":
            if request.where is None:
                raise InvalidRequestError("delete requires where")
            return await self.store.delete(request.collection, request.where)

        elif op == "replaceAll":
            if not isinstance(request.data, list):
                raise InvalidRequestError("replaceAll requires data to be a list")
            return await self.store.replace_all(request.collection, request.data)

        else:
            raise UnsupportedOperationError(op)


def install_storage_handler(bus, store: CollectionStore) -> StorageRequestHandler:
    """Install the storage handler on a bus and return it."""
    handler = StorageRequestHandler(store)
    bus.handle(STORAGE_REQUEST_TOPIC, handler)
    logger.info(f"Storage handler serving operations: {', '.join(OPERATIONS)}")
    return handler
