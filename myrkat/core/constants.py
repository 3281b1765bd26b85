"""Constants for the Myrkat core."""

# Bus topics
STORAGE_REQUEST_TOPIC = "storage:request"
NOTE_SELECTED_TOPIC = "note:selected"
NOTE_EXPORT_PDF_TOPIC = "note:export-pdf"
SEARCH_TOPIC = "search"

# Topics forwarded to WebSocket clients unless overridden
DEFAULT_RELAY_TOPICS = (NOTE_SELECTED_TOPIC, NOTE_EXPORT_PDF_TOPIC, SEARCH_TOPIC)

# Storage operations accepted on STORAGE_REQUEST_TOPIC
OPERATIONS = ("find", "insert", "update", "delete", "replaceAll")
# Operation names used by older front ends for a whole-collection write
OPERATION_ALIASES = {"writeFile": "replaceAll", "writeTable": "replaceAll"}

# Store-managed document fields
ID_FIELD = "id"
CREATED_AT_FIELD = "createdAt"
UPDATED_AT_FIELD = "updatedAt"
RESERVED_FIELDS = (ID_FIELD, CREATED_AT_FIELD, UPDATED_AT_FIELD)

# Persistence layout
DEFAULT_DATA_DIR = "myrkat-data"
COLLECTION_SUFFIX = ".json"
TEMP_SUFFIX = ".json.tmp"
COLLECTION_NAME_PATTERN = r"^[A-Za-z0-9_-]+$"

# Plugin view slots
MAIN_VIEW_SLOT = "main"
SIDEBAR_VIEW_SLOT = "sidebar"

# Notes plugin
NOTES_COLLECTION = "notes"
NOTES_PLUGIN_ID = "myrkat-notes"
NOTES_PLUGIN_NAME = "Myrkat Notes"
UNTITLED_NOTE_TITLE = "Untitled"
EMPTY_NOTE_CONTENT = '[{ "type": "paragraph", "content": "" }]'
SEARCH_KEYS = ("title", "content.content.text")
