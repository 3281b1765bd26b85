"""Plugin registry and start-up registration."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from .bus import EventBus
from .constants import MAIN_VIEW_SLOT, SIDEBAR_VIEW_SLOT
from .exceptions import InvalidPluginError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PluginDescriptor:
    """What a plugin contributes: identity plus named view slots."""
    id: str
    name: str
    slots: dict[str, Any] = field(default_factory=dict)
    logo: Any = None

    @property
    def main_view(self) -> Any:
        return self.slots.get(MAIN_VIEW_SLOT)

    @property
    def sidebar_view(self) -> Any:
        return self.slots.get(SIDEBAR_VIEW_SLOT)


class PluginRegistry:
    """Plugin id -> descriptor, kept in registration order."""

    def __init__(self):
        self._plugins: dict[str, PluginDescriptor] = {}

    def register_plugin(self, descriptor: PluginDescriptor) -> None:
        """Register a plugin. Re-registering an id replaces it in place."""
        if not isinstance(descriptor, PluginDescriptor):
            raise InvalidPluginError(f"Expected PluginDescriptor, got {type(descriptor).__name__}")
        if not descriptor.id:
            raise InvalidPluginError("Plugin descriptor requires a non-empty id")

        replaced = descriptor.id in self._plugins
        self._plugins[descriptor.id] = descriptor
        if replaced:
            logger.info(f"Plugin re-registered: {descriptor.id}")
        else:
            logger.info(f"Plugin registered: {descriptor.id} ({descriptor.name})")

    def get_plugin(self, plugin_id: str) -> PluginDescriptor | None:
        return self._plugins.get(plugin_id)

    def get_plugins(self) -> list[PluginDescriptor]:
        return list(self._plugins.values())

    def get_slot_components(self, slot: str) -> list[Any]:
        """Populated values of one slot across plugins, in registration order."""
        return [p.slots[slot] for p in self._plugins.values() if p.slots.get(slot) is not None]

    def get_main_view_components(self) -> list[Any]:
        return self.get_slot_components(MAIN_VIEW_SLOT)

    def get_sidebar_components(self) -> list[Any]:
        return self.get_slot_components(SIDEBAR_VIEW_SLOT)

    def count(self) -> int:
        return len(self._plugins)


@dataclass
class PluginContext:
    """Handles passed to each plugin's register function."""
    registry: PluginRegistry
    bus: EventBus


Registrar = Callable[[PluginContext], None]


def load_plugins(context: PluginContext, registrars: Iterable[Registrar]) -> int:
    """
    Call each registration function in order.
    A registrar that raises is logged and skipped. Returns the number that succeeded.
    """
    logger.info("Starting plugin registration...")
    loaded = 0

    for registrar in registrars:
        name = f"{getattr(registrar, '__module__', '?')}.{getattr(registrar, '__qualname__', registrar)}"
        if not callable(registrar):
            logger.warning(f"No valid register function in {name}")
            continue
        try:
            logger.info(f"Registering plugin from: {name}")
            registrar(context)
            loaded += 1
        except Exception as e:
            logger.error(f"Failed to register plugin from {name}: {e}", exc_info=True)

    logger.info(f"Plugin registration complete: {loaded} loaded")
    return loaded
