"""Editor state for the notes plugin."""

import inspect
import json
import logging
from typing import Any, Callable

from ..core.bus import EventBus
from ..core.constants import (
    NOTE_EXPORT_PDF_TOPIC,
    NOTE_SELECTED_TOPIC,
    NOTES_COLLECTION,
    STORAGE_REQUEST_TOPIC,
)
from ..core.types import Document

logger = logging.getLogger(__name__)

Exporter = Callable[[Document], Any]


class NoteEditor:
    """Tracks the selected note and saves edits back to the store."""

    def __init__(self, bus: EventBus, exporter: Exporter | None = None, collection: str = NOTES_COLLECTION):
        self.bus = bus
        self.exporter = exporter
        self.collection = collection
        self.current_note: Document | None = None
        self._attached = False

    def attach(self) -> None:
        if not self._attached:
            self.bus.subscribe(NOTE_SELECTED_TOPIC, self._on_note_selected)
            self.bus.subscribe(NOTE_EXPORT_PDF_TOPIC, self._on_export_requested)
            self._attached = True

    def detach(self) -> None:
        if self._attached:
            self.bus.unsubscribe(NOTE_SELECTED_TOPIC, self._on_note_selected)
            self.bus.unsubscribe(NOTE_EXPORT_PDF_TOPIC, self._on_export_requested)
            self._attached = False

    async def _save(self, fields: dict) -> Document | None:
        """Update the current note. Returns the stored note, or None if nothing is selected."""
        if self.current_note is None:
            return None

        payload = {
            "operation": "update",
            "collection": self.collection,
            "where": {"id": self.current_note["id"]},
            "data": fields,
        }
        updated = await self.bus.request(STORAGE_REQUEST_TOPIC, payload)
        if not updated:
            logger.warning(f"Note {self.current_note['id']} no longer exists, dropping edit")
            return None

        self.current_note = updated[0]
        return self.current_note

    async def save_content(self, content: Any) -> Document | None:
        if not isinstance(content, str):
            content = json.dumps(content)
        return await self._save({"content": content})

    async def save_drawing(self, elements: Any) -> Document | None:
        return await self._save({"excalidraw": json.dumps(elements)})

    async def save_drawing_library(self, library_items: Any) -> Document | None:
        return await self._save({"excalidrawLibrary": json.dumps(library_items)})

    def _on_note_selected(self, note: Document | None) -> None:
        self.current_note = dict(note) if note else None

    async def _on_export_requested(self, _payload: Any = None) -> None:
        if self.current_note is None:
            logger.info("Export requested with no note selected")
            return
        if self.exporter is None:
            logger.warning("Export requested but no exporter is configured")
            return

        result = self.exporter(self.current_note)
        if inspect.isawaitable(result):
            await result
        logger.info(f"Exported note {self.current_note['id']}")
