"""Notes plugin: hierarchical notes with a sidebar and an editor."""

import logging
from functools import partial

from ..core.constants import MAIN_VIEW_SLOT, NOTES_PLUGIN_ID, NOTES_PLUGIN_NAME, SIDEBAR_VIEW_SLOT
from ..core.plugins import PluginContext, PluginDescriptor
from .editor import NoteEditor
from .sidebar import NotesSidebar
from .tree import build_note_tree, get_ancestors

logger = logging.getLogger(__name__)


def register(context: PluginContext) -> None:
    """Register the notes plugin and its view factories."""
    context.registry.register_plugin(
        PluginDescriptor(
            id=NOTES_PLUGIN_ID,
            name=NOTES_PLUGIN_NAME,
            slots={
                MAIN_VIEW_SLOT: partial(NoteEditor, context.bus),
                SIDEBAR_VIEW_SLOT: partial(NotesSidebar, context.bus),
            },
        )
    )
    logger.info("Notes plugin registered")


__all__ = [
    "NoteEditor",
    "NotesSidebar",
    "build_note_tree",
    "get_ancestors",
    "register",
]
