"""Myrkat note shell core: collection store, event bus, plugin registry."""

__version__ = "0.3.0"
