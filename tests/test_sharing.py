"""Tests for exporting and rebuilding shared comparisons."""

from sizecompare.config.settings import StyleSettings
from sizecompare.core.comparison import Comparison
from sizecompare.core.sharing import (
    SharedData,
    SharedEntry,
    SharedSettings,
    rebuild_entries,
    restore,
    snapshot,
)
from sizecompare.core.units import DisplayUnit

from conftest import sequential_ids


class TestSharedEntry:
    def test_from_dict_normalizes_blanks(self):
        entry = SharedEntry.from_dict({"id": "cat", "name": "  ", "height": "0.3", "color": ""})
        assert entry == SharedEntry(id="cat", name=None, height=0.3, color=None)

    def test_to_dict_drops_missing(self):
        assert SharedEntry(id="cat", name="Tom").to_dict() == {"id": "cat", "name": "Tom"}


class TestSharedData:
    def test_nested_settings(self):
        data = SharedData.from_dict({
            "characters": [{"id": "human"}],
            "settings": {"unit": "ft-in", "chartTitle": "Us", "theme": "dark", "gridLines": False},
        })
        assert data.entries == (SharedEntry(id="human"),)
        assert data.settings.unit == DisplayUnit.FT_IN
        assert data.settings.chart_title == "Us"
        assert data.settings.style.theme == "dark"
        assert data.settings.style.grid_lines is False

    def test_flat_settings(self):
        data = SharedData.from_dict({"characters": [], "chartTitle": "Flat", "unit": "cm"})
        assert data.settings.chart_title == "Flat"
        assert data.settings.unit == DisplayUnit.CM
        assert data.settings.style == StyleSettings()

    def test_malformed_entries_are_skipped(self):
        data = SharedData.from_dict({"characters": ["junk", {"id": "cat", "height": "x"}, {"id": "human"}]})
        assert [e.id for e in data.entries] == ["human"]

    def test_missing_or_null_entries(self):
        assert SharedData.from_dict({"characters": None}).entries == ()
        assert SharedData.from_dict({"characters": "human,cat"}).entries == ()
        assert SharedData.from_dict({}).entries == ()

    def test_restore_with_null_entries(self, items, item_source):
        comparison = Comparison()
        comparison.add(items["cat"])
        restore(comparison, SharedData.from_dict({"characters": None, "chartTitle": "Empty"}), item_source)
        assert len(comparison) == 0

    def test_unknown_unit_falls_back(self):
        assert SharedSettings.from_dict({"unit": "cubits"}).unit == DisplayUnit.CM

    def test_to_dict(self):
        data = SharedData(entries=(SharedEntry(id="cat"),), settings=SharedSettings(chart_title="T"))
        out = data.to_dict()
        assert out["characters"] == [{"id": "cat"}]
        assert out["settings"]["chartTitle"] == "T"
        assert out["settings"]["unit"] == "cm"
        assert "backgroundImage" not in out["settings"]


class TestSnapshot:
    def test_entries_in_order(self, items):
        comparison = Comparison()
        comparison.add(items["human"])
        tower = comparison.add(items["tower"])
        comparison.move(tower.entry_id, 0)
        data = snapshot(comparison, DisplayUnit.FT_IN, "Title")
        assert [e.id for e in data.entries] == ["tower", "human"]
        assert data.entries[1].height == 1.75
        assert data.settings.unit == DisplayUnit.FT_IN


class TestRebuild:
    def test_unknown_ids_are_skipped(self, item_source):
        shared = [SharedEntry(id="human"), SharedEntry(id="dragon"), SharedEntry(id=""), SharedEntry(id="cat")]
        entries = rebuild_entries(shared, item_source, id_factory=sequential_ids("x", "y"))
        assert [e.item.id for e in entries] == ["human", "cat"]
        assert [e.order for e in entries] == [0, 1]
        assert [e.entry_id for e in entries] == ["x", "y"]

    def test_overrides_applied(self, item_source):
        shared = [SharedEntry(id="human", name="Bob", height=1.9, color="#00ff00")]
        (entry,) = rebuild_entries(shared, item_source)
        assert entry.display_name == "Bob"
        assert entry.height_m == 1.9
        assert entry.color == "#00ff00"

    def test_values_equal_to_catalog_are_not_overrides(self, item_source):
        shared = [SharedEntry(id="human", name="Human", height=1.75, color="#3B82F6")]
        (entry,) = rebuild_entries(shared, item_source)
        assert entry.name_override is None
        assert entry.height_override is None
        assert entry.color_override is None

    def test_invalid_height_override_ignored(self, item_source):
        (entry,) = rebuild_entries([SharedEntry(id="cat", height=-1.0)], item_source)
        assert entry.height_m == 0.25

    def test_empty(self, item_source):
        assert rebuild_entries([], item_source) == []

    def test_restore_replaces_entries(self, items, item_source):
        comparison = Comparison()
        comparison.add(items["virus"])
        data = SharedData(
            entries=(SharedEntry(id="tower"), SharedEntry(id="cat")),
            settings=SharedSettings(chart_title="Restored"),
        )
        settings = restore(comparison, data, item_source)
        assert settings.chart_title == "Restored"
        assert [e.item.id for e in comparison] == ["tower", "cat"]
