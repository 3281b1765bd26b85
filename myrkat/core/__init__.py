"""Core store, bus and plugin components."""

from .types import Document, WhereClause, BaseDocument, Note, NoteTree, SearchSnapshot
from .constants import *
from .exceptions import *
from .persistence import CollectionPersistence
from .serializer import MutationSerializer
from .store import CollectionStore
from .bus import EventBus
from .storage_handler import StorageRequest, StorageRequestHandler, install_storage_handler, parse_request
from .plugins import PluginDescriptor, PluginRegistry, PluginContext, load_plugins
from .utils import matches_where, strict_equals, validate_collection, now_seconds

__all__ = [
    # Types
    "Document",
    "WhereClause",
    "BaseDocument",
    "Note",
    "NoteTree",
    "SearchSnapshot",
    # Constants
    "STORAGE_REQUEST_TOPIC",
    "NOTE_SELECTED_TOPIC",
    "NOTE_EXPORT_PDF_TOPIC",
    "SEARCH_TOPIC",
    "DEFAULT_RELAY_TOPICS",
    "OPERATIONS",
    "OPERATION_ALIASES",
    "ID_FIELD",
    "CREATED_AT_FIELD",
    "UPDATED_AT_FIELD",
    "RESERVED_FIELDS",
    "DEFAULT_DATA_DIR",
    "MAIN_VIEW_SLOT",
    "SIDEBAR_VIEW_SLOT",
    "NOTES_COLLECTION",
    # Exceptions
    "MyrkatError",
    "StoreError",
    "CollectionNotFoundError",
    "CorruptCollectionError",
    "PersistenceFailureError",
    "ConcurrentMutationConflictError",
    "DuplicateDocumentIdError",
    "InvalidRequestError",
    "UnsupportedOperationError",
    "BusError",
    "NoHandlerRegisteredError",
    "InvalidPluginError",
    # Classes
    "CollectionPersistence",
    "MutationSerializer",
    "CollectionStore",
    "EventBus",
    "StorageRequest",
    "StorageRequestHandler",
    "PluginDescriptor",
    "PluginRegistry",
    "PluginContext",
    # Functions
    "install_storage_handler",
    "parse_request",
    "load_plugins",
    "matches_where",
    "strict_equals",
    "validate_collection",
    "now_seconds",
]
