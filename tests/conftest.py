"""Shared test fixtures for sizecompare."""

import sys

import pytest
from loguru import logger

from sizecompare.core.catalog import InMemoryItemSource, Item
from sizecompare.core.comparison import Comparison
from sizecompare.core.reorder import Axis, Rect


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class SlotLayout:
    """Lays visible entries out in equal slots along one axis.

    Stands in for the on-screen geometry of a list: an entry's box is
    derived from its position among the visible entries (all entries
    with ``include_hidden``, like the side panel), so it follows
    the live order exactly like a re-rendered list would.
    """

    def __init__(self, comparison: Comparison | None = None, axis: Axis = Axis.HORIZONTAL,
                 slot: float = 100.0, cross: float = 50.0, include_hidden: bool = False):
        self.comparison = comparison
        self.include_hidden = include_hidden
        self.axis = axis
        self.slot = slot
        self.cross = cross

    def __call__(self, entry_id: str) -> Rect | None:
        entries = self.comparison.entries if self.include_hidden else self.comparison.visible_entries()
        ids = [e.entry_id for e in entries]
        if entry_id not in ids:
            return None
        start = ids.index(entry_id) * self.slot
        if self.axis == Axis.HORIZONTAL:
            return Rect(start, 0.0, self.slot, self.cross)
        return Rect(0.0, start, self.cross, self.slot)


def sequential_ids(*ids: str):
    """An id factory handing out the given ids in order."""
    it = iter(ids)
    return lambda: next(it)


@pytest.fixture
def tmp_config_dir(tmp_path):
    """Provide a temporary configuration directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def config_manager(tmp_config_dir):
    """Provide a ConfigManager with a temp directory."""
    from sizecompare.config.manager import ConfigManager

    mgr = ConfigManager(config_dir=tmp_config_dir)
    mgr.load()
    return mgr


@pytest.fixture
def log_dir(tmp_path):
    """Send log files to a temp directory and restore the default sink afterwards."""
    from sizecompare.core.logging import set_log_dir

    set_log_dir(tmp_path / "logs")
    yield tmp_path / "logs"
    logger.remove()
    logger.add(sys.stderr)
    set_log_dir(None)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def items():
    """A small catalog spanning several orders of magnitude."""
    return {
        "human": Item(id="human", height_m=1.75, display_name="Human", color="#3B82F6"),
        "cat": Item(id="cat", height_m=0.25, display_name="Cat"),
        "tower": Item(id="tower", height_m=330.0, display_name="Tower", visual_aspect_ratio=0.4),
        "virus": Item(id="virus", height_m=1e-7, display_name="Virus", visual_aspect_ratio=1.0),
    }


@pytest.fixture
def item_source(items):
    return InMemoryItemSource(items.values())


@pytest.fixture
def abc_comparison():
    """Comparison holding entries A, B, C (ids equal to names) in that order."""
    comparison = Comparison(id_factory=sequential_ids("A", "B", "C", "D", "E"))
    for name in ("A", "B", "C"):
        comparison.add(Item(id=name.lower(), height_m=1.0, display_name=name))
    return comparison
