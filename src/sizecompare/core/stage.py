"""Render-surface glue for a comparison.

:class:`ComparisonWorkspace` wires the comparison list, the scale engine
and the two reorder engines (stage and side panel) together, and
produces plain view records the presentation layer can draw: per-entry
pixel sizes and labels, the grid axis, and the drag overlay.
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from loguru import logger

from sizecompare.config.manager import ConfigManager
from sizecompare.config.settings import StageSettings, StyleSettings, ZoomSettings
from sizecompare.core.catalog import Item, ItemSource
from sizecompare.core.comparison import Comparison, ComparisonEntry, new_entry_id
from sizecompare.core.formatting import (
    convert_height_for_grid_imperial,
    format_for_unit,
    get_imperial_grid_unit_label,
    label_for,
)
from sizecompare.core.frames import FrameScheduler
from sizecompare.core.logging import setup_logging
from sizecompare.core.precision import Precision
from sizecompare.core.reorder import Axis, Measure, Overlay, ReorderEngine
from sizecompare.core.scale import ScaleEngine
from sizecompare.core.sharing import SharedData, SharedSettings, restore, snapshot
from sizecompare.core.units import DisplayUnit, UnitSystem, find_display_unit, select_unit
from sizecompare.version import __version_display__


@dataclass(frozen=True)
class EntryView:
    """What the presentation layer needs to draw one entry."""

    entry_id: str
    name: str
    label: str
    pixel_width: float
    pixel_height: float
    color: str | None = None
    selected: bool = False
    placeholder: bool = False


@dataclass(frozen=True)
class GridTick:
    fraction: float
    pixel_height: float
    height_m: float
    metric_label: str
    imperial_label: str


@dataclass(frozen=True)
class GridAxis:
    metric_unit: UnitSystem
    imperial_unit_label: str
    ticks: tuple[GridTick, ...]

    @property
    def metric_title(self) -> str:
        return f"Metric ({self.metric_unit.symbol})"

    @property
    def imperial_title(self) -> str:
        return f"Imperial ({self.imperial_unit_label})"


def entry_view(
    entry: ComparisonEntry,
    ratio: float,
    unit: DisplayUnit,
    stage: StageSettings | None = None,
    placeholder: bool = False,
) -> EntryView:
    """Size and label one entry at ``ratio`` pixels per meter."""
    stage = stage or StageSettings()
    height_m = entry.effective_height_m(stage.reference_height_m)
    pixel_height = Precision.from_value(height_m).multiply(ratio).to_number()
    return EntryView(
        entry_id=entry.entry_id,
        name=entry.display_name,
        label=label_for(height_m, unit),
        pixel_width=pixel_height * entry.effective_aspect_ratio(stage.default_aspect_ratio),
        pixel_height=pixel_height,
        color=entry.color,
        selected=entry.selected,
        placeholder=placeholder,
    )


def grid_axis(
    chart_area_px: float,
    ratio: float,
    max_height_m: float,
    stage: StageSettings | None = None,
) -> GridAxis:
    """Evenly spaced height lines over the chart area.

    Dense charts (taller than the threshold) get more lines. All metric
    labels use the tallest entry's unit and all imperial labels use its
    imperial form.
    """
    stage = stage or StageSettings()
    lines = stage.dense_grid_lines if chart_area_px > stage.dense_grid_threshold_px else stage.sparse_grid_lines
    metric_unit = select_unit(max_height_m, prefer_metric=True)

    ticks = []
    for i in range(lines):
        fraction = i / (lines - 1)
        pixel_height = chart_area_px * fraction
        height_m = Precision.from_value(pixel_height).divide(ratio).to_number()
        ticks.append(
            GridTick(
                fraction=fraction,
                pixel_height=pixel_height,
                height_m=height_m,
                metric_label=format_for_unit(height_m, metric_unit).formatted,
                imperial_label=convert_height_for_grid_imperial(height_m, max_height_m),
            )
        )

    return GridAxis(
        metric_unit=metric_unit,
        imperial_unit_label=get_imperial_grid_unit_label(max_height_m),
        ticks=tuple(ticks),
    )


class ComparisonWorkspace:
    """One comparison session: entries, scale, and both reorderable lists."""

    def __init__(
        self,
        measure_stage: Measure,
        measure_panel: Measure,
        config: ConfigManager | None = None,
        clock: Callable[[], float] = time.monotonic,
        id_factory: Callable[[], str] = new_entry_id,
    ):
        if config is None:
            config = ConfigManager()
        self._stage_settings = StageSettings.from_config(config)
        self._style = StyleSettings.from_config(config)
        self.unit = find_display_unit(config.get("general", "unit", "cm"))
        self.chart_title: str = config.get("general", "chart_title", "")

        self.comparison = Comparison(id_factory=id_factory)
        self.scale = ScaleEngine(self._stage_settings, ZoomSettings.from_config(config), clock=clock)
        self.stage_reorder = ReorderEngine(self.comparison, Axis.HORIZONTAL, measure_stage, name="stage")
        # The panel lists hidden entries too, so they stay drop targets there
        self.panel_reorder = ReorderEngine(
            self.comparison,
            Axis.VERTICAL,
            measure_panel,
            name="panel",
            entries=lambda: self.comparison.entries,
        )
        self.comparison.add_listener(self._on_comparison_changed)

    @property
    def style(self) -> StyleSettings:
        return self._style

    @style.setter
    def style(self, value: StyleSettings):
        self._style = value

    def _on_comparison_changed(self, event: str, comparison: Comparison):
        if event in ("add", "remove", "clear", "replace", "update"):
            self.scale.sync(comparison)

    # --- Entries ---

    def add_item(self, item: Item) -> ComparisonEntry:
        """Add an item to the stage (a tap/click in the library, not a drag)."""
        return self.comparison.add(item)

    def remove_entry(self, entry_id: str):
        self.comparison.remove(entry_id)

    def clear(self):
        self.comparison.clear()

    def click_stage_entry(self, entry_id: str) -> bool:
        """Select an entry clicked on the stage, unless the click ends a drag."""
        if not self.stage_reorder.consume_click():
            return False
        self.comparison.select(entry_id)
        return True

    def click_panel_entry(self, entry_id: str) -> bool:
        if not self.panel_reorder.consume_click():
            return False
        self.comparison.select(entry_id)
        return True

    # --- Layout ---

    def set_chart_area_height(self, chart_area_px: float) -> float:
        return self.scale.update_layout(chart_area_px=chart_area_px)

    def request_chart_area_height(self, scheduler: FrameScheduler, measure: Callable[[], float]) -> int:
        """Read the chart area height after the next frame and apply it."""
        return scheduler.request(measure, self.set_chart_area_height)

    def entry_views(self) -> list[EntryView]:
        """Visible entries in stage order."""
        ratio = self.scale.ratio
        return [
            entry_view(
                entry,
                ratio,
                self.unit,
                self._stage_settings,
                placeholder=self.stage_reorder.is_placeholder(entry.entry_id),
            )
            for entry in self.comparison.visible_entries()
        ]

    def panel_views(self) -> list[EntryView]:
        """All entries in panel order, sized at the current ratio."""
        ratio = self.scale.ratio
        return [
            entry_view(
                entry,
                ratio,
                self.unit,
                self._stage_settings,
                placeholder=self.panel_reorder.is_placeholder(entry.entry_id),
            )
            for entry in self.comparison.entries
        ]

    def grid(self) -> GridAxis:
        return grid_axis(
            self.scale.chart_area_px,
            self.scale.ratio,
            self.comparison.max_height(self._stage_settings.reference_height_m),
            self._stage_settings,
        )

    def overlays(self) -> list[Overlay]:
        return [o for o in (self.stage_reorder.overlay(), self.panel_reorder.overlay()) if o is not None]

    # --- Sharing ---

    def snapshot(self) -> SharedData:
        return snapshot(self.comparison, self.unit, self.chart_title, self._style)

    def restore(self, data: SharedData | dict[str, Any], source: ItemSource) -> SharedSettings:
        """Rebuild entries from shared data and adopt its settings."""
        if isinstance(data, dict):
            data = SharedData.from_dict(data)
        settings = restore(self.comparison, data, source)
        self.unit = settings.unit
        self.chart_title = settings.chart_title
        self._style = settings.style
        logger.info(f"Restored comparison '{self.chart_title}' with {len(self.comparison)} entries")
        return settings


def start_workspace(
    measure_stage: Measure,
    measure_panel: Measure,
    config_dir: str | Path | None = None,
    **kwargs,
) -> ComparisonWorkspace:
    """Load configuration, initialize logging and open a workspace.

    The startup sequence for a presentation layer; extra keyword arguments
    go to :class:`ComparisonWorkspace`.
    """
    config = ConfigManager(config_dir=config_dir)
    config.load()
    setup_logging(config)
    logger.info(f"{__version_display__} starting")
    return ComparisonWorkspace(measure_stage, measure_panel, config=config, **kwargs)
