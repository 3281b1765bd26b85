"""Sidebar state for the notes plugin: note list, hierarchy, selection."""

import json
import logging
from typing import Any

from ..core.bus import EventBus
from ..core.constants import (
    EMPTY_NOTE_CONTENT,
    NOTE_SELECTED_TOPIC,
    NOTES_COLLECTION,
    SEARCH_KEYS,
    SEARCH_TOPIC,
    STORAGE_REQUEST_TOPIC,
    UNTITLED_NOTE_TITLE,
)
from ..core.types import Document, NoteTree, SearchSnapshot
from .tree import build_note_tree, get_ancestors

logger = logging.getLogger(__name__)


class NotesSidebar:
    """
    Note tree as seen by the sidebar.

    Reads and writes go through storage:request; selection is driven by
    note:selected so any component can select a note.
    """

    def __init__(self, bus: EventBus, collection: str = NOTES_COLLECTION):
        self.bus = bus
        self.collection = collection
        self.notes: list[Document] = []
        self.active_note_id: str | None = None
        self.expanded_ids: set[str] = set()
        self._attached = False

    def attach(self) -> None:
        """Start following note selection."""
        if not self._attached:
            self.bus.subscribe(NOTE_SELECTED_TOPIC, self._on_note_selected)
            self._attached = True

    def detach(self) -> None:
        if self._attached:
            self.bus.unsubscribe(NOTE_SELECTED_TOPIC, self._on_note_selected)
            self._attached = False

    async def _storage(self, operation: str, **fields: Any) -> Any:
        payload = {"operation": operation, "collection": self.collection, **fields}
        return await self.bus.request(STORAGE_REQUEST_TOPIC, payload)

    # ========================================================================
    # Queries
    # ========================================================================

    async def refresh(self) -> list[Document]:
        """Reload notes from the store."""
        self.notes = await self._storage("find") or []
        return self.notes

    @property
    def tree(self) -> list[NoteTree]:
        return build_note_tree(self.notes)

    def is_expanded(self, note_id: str) -> bool:
        return note_id in self.expanded_ids

    # ========================================================================
    # Mutations
    # ========================================================================

    async def create_note(self, parent_id: str | None = None) -> Document:
        """Create an untitled note and select it."""
        data = {
            "title": UNTITLED_NOTE_TITLE,
            "parentId": parent_id,
            "content": EMPTY_NOTE_CONTENT,
            "excalidraw": "",
        }
        note = await self._storage("insert", data=data)
        await self.refresh()
        await self.bus.publish(NOTE_SELECTED_TOPIC, note)
        logger.info(f"Created note {note['id']} (parent: {parent_id or 'none'})")
        return note

    async def rename_note(self, note_id: str, title: str) -> Document | None:
        """Change a note's title and reselect it."""
        updated = await self._storage("update", where={"id": note_id}, data={"title": title})
        await self.refresh()
        if not updated:
            return None
        await self.bus.publish(NOTE_SELECTED_TOPIC, updated[0])
        return updated[0]

    async def delete_note(self, note_id: str) -> int:
        """Delete a note; its children keep their dangling parentId and become roots."""
        count = await self._storage("delete", where={"id": note_id})
        await self.bus.publish(NOTE_SELECTED_TOPIC, None)
        await self.refresh()
        return count

    def toggle_expand(self, note_id: str) -> bool:
        """Flip a note's expanded state. Returns the new state."""
        if note_id in self.expanded_ids:
            self.expanded_ids.discard(note_id)
            return False
        self.expanded_ids.add(note_id)
        return True

    # ========================================================================
    # Search
    # ========================================================================

    async def publish_search_snapshot(self) -> SearchSnapshot:
        """Publish the current notes for an external search surface to index."""
        snapshot: SearchSnapshot = {
            "data": [{**note, "onClick": self._select_callback(note)} for note in self.notes],
            "options": {"includeScore": True, "keys": list(SEARCH_KEYS)},
        }
        await self.bus.publish(SEARCH_TOPIC, snapshot)
        return snapshot

    def _select_callback(self, note: Document):
        async def on_click() -> None:
            content = note.get("content")
            if not isinstance(content, str):
                content = json.dumps(content)
            await self.bus.publish(NOTE_SELECTED_TOPIC, {**note, "content": content})
        return on_click

    # ========================================================================
    # Subscriptions
    # ========================================================================

    def _on_note_selected(self, note: Document | None) -> None:
        if not note:
            self.active_note_id = None
            return

        note_id = note.get("id")
        self.active_note_id = note_id
        # Expand the note itself and every ancestor so it is visible
        self.expanded_ids.add(note_id)
        self.expanded_ids.update(get_ancestors(self.notes, note_id))
