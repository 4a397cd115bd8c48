"""Tests for the configuration system."""

from sizecompare.config.manager import ConfigManager
from sizecompare.config.defaults import DEFAULT_CONFIG
from sizecompare.config.settings import StageSettings, StyleSettings, ZoomSettings


class TestConfigManager:
    def test_load_defaults(self, config_manager):
        """Config loads with default values."""
        assert config_manager.get("general", "unit") == "cm"
        assert config_manager.get("stage", "chart_padding_px") == 85
        assert config_manager.get("zoom", "throttle_ms") == 66

    def test_set_and_get(self, config_manager):
        """Can set and retrieve values."""
        config_manager.set("general", "unit", "ft-in")
        assert config_manager.get("general", "unit") == "ft-in"

    def test_missing_key_returns_default(self, config_manager):
        assert config_manager.get("general", "nonexistent", 42) == 42
        assert config_manager.get("nogroup", "nokey") is None

    def test_save_and_reload(self, tmp_config_dir):
        """Config persists across save/load cycles."""
        mgr = ConfigManager(config_dir=tmp_config_dir)
        mgr.load()
        mgr.set("general", "chart_title", "Skyscrapers")
        mgr.save()

        mgr2 = ConfigManager(config_dir=tmp_config_dir)
        mgr2.load()
        assert mgr2.get("general", "chart_title") == "Skyscrapers"
        # Keys not in the saved file keep their defaults
        assert mgr2.get("zoom", "button_step") == 0.2

    def test_saved_file_omits_labels(self, config_manager):
        config_manager.save()
        text = config_manager.config_path.read_text(encoding="utf-8")
        assert "_label" not in text

    def test_corrupt_file_falls_back_to_defaults(self, tmp_config_dir):
        (tmp_config_dir / ConfigManager.CONFIG_FILENAME).write_text("{not json", encoding="utf-8")
        mgr = ConfigManager(config_dir=tmp_config_dir)
        mgr.load()
        assert mgr.get("general", "unit") == "cm"

    def test_non_dict_file_is_ignored(self, tmp_config_dir):
        (tmp_config_dir / ConfigManager.CONFIG_FILENAME).write_text("[1, 2, 3]", encoding="utf-8")
        mgr = ConfigManager(config_dir=tmp_config_dir)
        mgr.load()
        assert mgr.get("stage", "reference_height_m") == 2.0

    def test_groups(self, config_manager):
        """All expected groups are present."""
        groups = config_manager.groups()
        for group in ("general", "stage", "zoom", "style", "catalog", "logging"):
            assert group in groups

    def test_group_labels(self, config_manager):
        """Groups have display labels."""
        assert config_manager.get_group_label("zoom") == DEFAULT_CONFIG["zoom"]["_label"]
        assert config_manager.get_group_label("unknown_group") == "Unknown_Group"

    def test_get_group_hides_internal_keys(self, config_manager):
        group = config_manager.get_group("stage")
        assert "_label" not in group
        assert group["dense_grid_lines"] == 21

    def test_listener_called(self, config_manager):
        """Config change listeners are notified."""
        changes = []
        config_manager.add_listener(
            lambda group, key, new, old: changes.append((group, key, new, old))
        )
        config_manager.set("zoom", "button_step", 0.25)
        assert len(changes) == 1
        assert changes[0] == ("zoom", "button_step", 0.25, 0.2)

    def test_listener_not_called_for_same_value(self, config_manager):
        changes = []
        config_manager.add_listener(lambda *args: changes.append(args))
        config_manager.set("zoom", "button_step", 0.2)
        assert changes == []

    def test_failing_listener_does_not_break_set(self, config_manager):
        def broken(*args):
            raise RuntimeError("boom")

        config_manager.add_listener(broken)
        config_manager.set("general", "unit", "ft-in")
        assert config_manager.get("general", "unit") == "ft-in"

    def test_default_config_has_labels(self):
        """Every default config group has a _label."""
        for group, values in DEFAULT_CONFIG.items():
            assert "_label" in values, f"Group '{group}' missing _label"


class TestSettings:
    def test_stage_settings_from_defaults(self, config_manager):
        stage = StageSettings.from_config(config_manager)
        assert stage == StageSettings()

    def test_stage_settings_follow_config(self, config_manager):
        config_manager.set("stage", "chart_padding_px", 40)
        assert StageSettings.from_config(config_manager).chart_padding_px == 40

    def test_zoom_throttle_seconds(self, config_manager):
        config_manager.set("zoom", "throttle_ms", 100)
        assert ZoomSettings.from_config(config_manager).throttle_seconds == 0.1

    def test_style_settings(self, config_manager):
        config_manager.set("style", "theme", "dark")
        style = StyleSettings.from_config(config_manager)
        assert style.theme == "dark"
        assert style.background_image is None
