"""Note hierarchy built from parentId references."""

from typing import Iterable, Mapping

from ..core.types import Document, NoteTree


def build_note_tree(notes: Iterable[Document]) -> list[NoteTree]:
    """
    Build the display forest for a collection of notes.

    A note is a root when it has no parentId, when its parent is not in the
    collection, or when it sits on a parentId cycle. For a cycle, the member
    that comes first in collection order becomes the root. Every note appears
    exactly once; children keep collection order.
    """
    nodes: dict = {}
    order: list = []

    for i, note in enumerate(notes):
        note_id = note.get("id")
        # Notes without a usable id, or repeating one, become childless roots
        key = note_id if isinstance(note_id, str) and note_id not in nodes else (i,)
        nodes[key] = {**note, "children": []}
        order.append(key)

    parent_of: dict = {}
    for key in order:
        parent_id = nodes[key].get("parentId")
        if isinstance(key, str) and isinstance(parent_id, str) and parent_id in nodes and parent_id != key:
            parent_of[key] = parent_id

    _break_cycles(order, parent_of)

    roots = []
    for key in order:
        parent_id = parent_of.get(key)
        if parent_id is None:
            roots.append(nodes[key])
        else:
            nodes[parent_id]["children"].append(nodes[key])
    return roots


def _break_cycles(order: list, parent_of: dict) -> None:
    """Remove one parent link per cycle so parent_of describes a forest."""
    position = {key: i for i, key in enumerate(order)}
    resolved: set = set()

    for start in order:
        path: list = []
        on_path: dict = {}
        key = start
        while key is not None and key not in resolved:
            if key in on_path:
                cycle = path[on_path[key]:]
                del parent_of[min(cycle, key=position.__getitem__)]
                break
            on_path[key] = len(path)
            path.append(key)
            key = parent_of.get(key)
        resolved.update(path)


def get_ancestors(notes: Iterable[Document] | Mapping[str, str | None], note_id: str | None) -> list[str]:
    """Ids of a note's ancestors, nearest first. Stops at a missing parent or a cycle."""
    if isinstance(notes, Mapping):
        parent_map = notes
    else:
        parent_map = {n["id"]: n.get("parentId") for n in notes if isinstance(n.get("id"), str)}

    ancestors: list[str] = []
    seen = {note_id}
    current = parent_map.get(note_id) if note_id else None
    while current and current in parent_map and current not in seen:
        ancestors.append(current)
        seen.add(current)
        current = parent_map.get(current)
    return ancestors
