"""Tests for the plugin registry and start-up registration."""

import logging

import pytest

from myrkat.core.bus import EventBus
from myrkat.core.constants import MAIN_VIEW_SLOT, SIDEBAR_VIEW_SLOT
from myrkat.core.exceptions import InvalidPluginError
from myrkat.core.plugins import PluginContext, PluginDescriptor, PluginRegistry, load_plugins


def main_view():
    return "main"


def sidebar_view():
    return "sidebar"


def test_registration_order_is_kept() -> None:
    registry = PluginRegistry()
    registry.register_plugin(PluginDescriptor(id="a", name="A", slots={MAIN_VIEW_SLOT: main_view}))
    registry.register_plugin(PluginDescriptor(id="b", name="B", slots={SIDEBAR_VIEW_SLOT: sidebar_view}))
    registry.register_plugin(PluginDescriptor(id="c", name="C", slots={MAIN_VIEW_SLOT: sidebar_view}))

    assert [p.id for p in registry.get_plugins()] == ["a", "b", "c"]
    assert registry.get_main_view_components() == [main_view, sidebar_view]
    assert registry.get_sidebar_components() == [sidebar_view]


def test_reregistering_replaces_in_place() -> None:
    registry = PluginRegistry()
    registry.register_plugin(PluginDescriptor(id="a", name="A"))
    registry.register_plugin(PluginDescriptor(id="b", name="B"))
    registry.register_plugin(PluginDescriptor(id="a", name="A2"))

    assert [(p.id, p.name) for p in registry.get_plugins()] == [("a", "A2"), ("b", "B")]
    assert registry.count() == 2
    assert registry.get_plugin("a").name == "A2"
    assert registry.get_plugin("zzz") is None


def test_empty_id_rejected() -> None:
    registry = PluginRegistry()

    with pytest.raises(InvalidPluginError):
        registry.register_plugin(PluginDescriptor(id="", name="nameless"))
    with pytest.raises(InvalidPluginError):
        registry.register_plugin({"id": "dict", "name": "not a descriptor"})


def test_descriptor_slot_properties() -> None:
    descriptor = PluginDescriptor(id="a", name="A", slots={MAIN_VIEW_SLOT: main_view})

    assert descriptor.main_view is main_view
    assert descriptor.sidebar_view is None


def test_load_plugins_skips_failing_registrars(bus: EventBus, caplog: pytest.LogCaptureFixture) -> None:
    registry = PluginRegistry()
    context = PluginContext(registry, bus)

    def good(ctx: PluginContext) -> None:
        ctx.registry.register_plugin(PluginDescriptor(id="good", name="Good"))

    def broken(ctx: PluginContext) -> None:
        raise RuntimeError("cannot register")

    def later(ctx: PluginContext) -> None:
        ctx.registry.register_plugin(PluginDescriptor(id="later", name="Later"))

    with caplog.at_level(logging.ERROR, logger="myrkat.core.plugins"):
        loaded = load_plugins(context, [good, broken, "not-callable", later])

    assert loaded == 2
    assert [p.id for p in registry.get_plugins()] == ["good", "later"]
    assert "cannot register" in caplog.text
