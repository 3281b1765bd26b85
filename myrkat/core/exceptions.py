"""Custom exceptions for Myrkat core operations."""


class MyrkatError(Exception):
    """Base exception for Myrkat core operations."""
    pass


class StoreError(MyrkatError):
    """Base exception for collection store operations."""
    pass


class CollectionNotFoundError(StoreError):
    """Raised internally when a collection has no backing file yet."""
    def __init__(self, collection: str):
        self.collection = collection
        super().__init__(f"Collection '{collection}' has no backing file")


class CorruptCollectionError(StoreError):
    """Raised when a collection file cannot be decoded."""
    def __init__(self, collection: str, reason: str):
        self.collection = collection
        self.reason = reason
        super().__init__(f"Collection '{collection}' is corrupt: {reason}")


class PersistenceFailureError(StoreError):
    """Raised when a collection could not be durably written."""
    def __init__(self, collection: str, reason: str):
        self.collection = collection
        self.reason = reason
        super().__init__(f"Failed to persist collection '{collection}': {reason}")


class ConcurrentMutationConflictError(StoreError):
    """Raised when two read-modify-write cycles overlap on one collection."""
    def __init__(self, collection: str):
        self.collection = collection
        super().__init__(f"Concurrent mutation detected on collection '{collection}'")


class DuplicateDocumentIdError(StoreError):
    """Raised when an insert supplies an id already present in the collection."""
    def __init__(self, collection: str, doc_id: str):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"Document '{doc_id}' already exists in collection '{collection}'")


class InvalidRequestError(StoreError, ValueError):
    """Raised when a storage request is malformed."""
    pass


class UnsupportedOperationError(StoreError):
    """Raised when a storage request names an unknown operation."""
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Unsupported storage operation: {operation}")


class BusError(MyrkatError):
    """Base exception for event bus operations."""
    pass


class NoHandlerRegisteredError(BusError):
    """Raised when a request is made on a topic without a handler."""
    def __init__(self, topic: str):
        self.topic = topic
        super().__init__(f"No handler registered for topic '{topic}'")


class InvalidPluginError(MyrkatError, ValueError):
    """Raised when a plugin descriptor cannot be registered."""
    pass
