"""Pytest configuration and shared fixtures."""

import pytest

from eqscope.editor import BandRegistry, InteractionController, ManualScheduler
from eqscope.engine import EngineLink, InMemoryEngine

WIDTH = 800
HEIGHT = 300


@pytest.fixture
def engine() -> InMemoryEngine:
    return InMemoryEngine()


@pytest.fixture
def link(engine: InMemoryEngine) -> EngineLink:
    link = EngineLink(track_id=3, slot_id=1)
    link.attach(engine)
    return link


@pytest.fixture
def changes() -> list:
    """Collects one entry per settings-changed notification."""
    return []


@pytest.fixture
def registry(link: EngineLink, changes: list) -> BandRegistry:
    return BandRegistry(link, on_settings_changed=lambda: changes.append(1))


@pytest.fixture
def five_bands(registry: BandRegistry, engine: InMemoryEngine) -> BandRegistry:
    for freq in (100.0, 300.0, 1000.0, 3000.0, 10000.0):
        registry.add_band(freq)
    engine.clear_log()
    return registry


@pytest.fixture
def controller(registry: BandRegistry) -> InteractionController:
    return InteractionController(registry, WIDTH, HEIGHT)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()
