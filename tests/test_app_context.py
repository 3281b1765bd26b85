"""Tests for application context wiring and configuration."""

from pathlib import Path

import pytest

from myrkat.app_context import AppContext, MyrkatConfig
from myrkat.core.constants import DEFAULT_RELAY_TOPICS, STORAGE_REQUEST_TOPIC
from myrkat.core.exceptions import NoHandlerRegisteredError


def test_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("MYRKAT_DATA_DIR", raising=False)
    monkeypatch.delenv("MYRKAT_RELAY_TOPICS", raising=False)

    config = MyrkatConfig.from_env()

    assert config.data_dir == Path("myrkat-data")
    assert config.relay_topics == DEFAULT_RELAY_TOPICS


def test_config_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("MYRKAT_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("MYRKAT_RELAY_TOPICS", "note:selected, search ,")

    config = MyrkatConfig.from_env()

    assert config.data_dir == tmp_path / "data"
    assert config.relay_topics == ("note:selected", "search")


@pytest.mark.asyncio
async def test_start_and_stop(data_dir: Path) -> None:
    context = AppContext(MyrkatConfig(data_dir=data_dir))

    with pytest.raises(NoHandlerRegisteredError):
        await context.bus.request(STORAGE_REQUEST_TOPIC, {"operation": "find", "collection": "notes"})

    await context.start()
    await context.start()
    assert data_dir.is_dir()
    assert context.registry.count() == 1
    assert await context.bus.request(STORAGE_REQUEST_TOPIC, {"operation": "find", "collection": "notes"}) == []

    await context.stop()
    assert not context.bus.has_handler(STORAGE_REQUEST_TOPIC)


@pytest.mark.asyncio
async def test_contexts_do_not_share_state(tmp_path: Path) -> None:
    async with AppContext(MyrkatConfig(data_dir=tmp_path / "one")) as one, \
            AppContext(MyrkatConfig(data_dir=tmp_path / "two"), plugins=()) as two:
        await one.bus.request(STORAGE_REQUEST_TOPIC, {"operation": "insert", "collection": "notes", "data": {"t": 1}})

        assert await two.bus.request(STORAGE_REQUEST_TOPIC, {"operation": "find", "collection": "notes"}) == []
        assert one.registry.count() == 1
        assert two.registry.count() == 0
