"""Per-process wiring of bus, store and plugin registry."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from . import notes
from .core.bus import EventBus
from .core.constants import DEFAULT_DATA_DIR, DEFAULT_RELAY_TOPICS, STORAGE_REQUEST_TOPIC
from .core.plugins import PluginContext, PluginRegistry, Registrar, load_plugins
from .core.storage_handler import install_storage_handler
from .core.store import CollectionStore

logger = logging.getLogger(__name__)

# Registration functions known at build time
DEFAULT_PLUGINS: tuple[Registrar, ...] = (notes.register,)


@dataclass(frozen=True)
class MyrkatConfig:
    """Myrkat configuration."""
    data_dir: Path = Path(DEFAULT_DATA_DIR)
    relay_topics: tuple[str, ...] = DEFAULT_RELAY_TOPICS

    @classmethod
    def from_env(cls) -> "MyrkatConfig":
        """Create configuration from environment variables."""
        relay = os.getenv("MYRKAT_RELAY_TOPICS")
        return cls(
            data_dir=Path(os.getenv("MYRKAT_DATA_DIR", str(cls.data_dir))),
            relay_topics=tuple(t.strip() for t in relay.split(",") if t.strip()) if relay else DEFAULT_RELAY_TOPICS,
        )


class AppContext:
    """
    Owns the bus, store and registry for one process.

    Components receive this (or the piece they need) explicitly; nothing is
    reachable through module globals.
    """

    def __init__(self, config: MyrkatConfig, plugins: Sequence[Registrar] = DEFAULT_PLUGINS):
        self.config = config
        self.bus = EventBus()
        self.store = CollectionStore(config.data_dir)
        self.registry = PluginRegistry()
        self._plugins = plugins
        self._started = False

    async def start(self) -> None:
        """Initialize storage, install the storage handler and register plugins."""
        if self._started:
            return
        await self.store.initialize()
        install_storage_handler(self.bus, self.store)
        load_plugins(PluginContext(self.registry, self.bus), self._plugins)
        self._started = True
        logger.info(f"Myrkat context started ({self.registry.count()} plugins, data at {self.store.root})")

    async def stop(self) -> None:
        """Remove the storage handler."""
        if not self._started:
            return
        self.bus.unhandle(STORAGE_REQUEST_TOPIC)
        self._started = False
        logger.info("Myrkat context stopped")

    async def __aenter__(self) -> "AppContext":
        await self.start()
        return self

    async def __aexit__(self, *exc) -> None:
        await self.stop()
