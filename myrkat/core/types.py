"""Type definitions for the Myrkat core."""

from typing import Any, TypedDict, NotRequired

# Documents carry arbitrary caller fields on top of BaseDocument
Document = dict[str, Any]
WhereClause = dict[str, Any]


class BaseDocument(TypedDict):
    """Store-managed fields present on every stored document."""
    id: str
    createdAt: int
    updatedAt: int


class Note(BaseDocument):
    """Document shape used by the notes plugin."""
    title: str
    content: Any
    parentId: str | None
    excalidraw: NotRequired[str]
    excalidrawLibrary: NotRequired[str]


class NoteTree(Note):
    """Note with its resolved children."""
    children: list["NoteTree"]


class SearchSnapshot(TypedDict):
    """Payload published on the search topic."""
    data: list[dict[str, Any]]
    options: dict[str, Any]
