"""Shared fixtures for Myrkat tests."""

from pathlib import Path

import pytest
import pytest_asyncio

from myrkat.app_context import AppContext, MyrkatConfig
from myrkat.core.bus import EventBus
from myrkat.core.store import CollectionStore


class FakeClock:
    """Settable clock returning whole seconds."""

    def __init__(self, now: int = 1_700_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int = 1) -> None:
        self.now += seconds


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    return tmp_path / "myrkat-data"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(data_dir: Path, clock: FakeClock) -> CollectionStore:
    return CollectionStore(data_dir, clock=clock)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest_asyncio.fixture
async def context(data_dir: Path):
    async with AppContext(MyrkatConfig(data_dir=data_dir)) as ctx:
        yield ctx
