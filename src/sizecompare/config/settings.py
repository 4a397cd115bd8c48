"""Typed settings structs for sizecompare.

Each struct enumerates the options of one configuration group with its
default, so components receive a fixed set of fields instead of reaching
into the open configuration dictionary.
"""

from dataclasses import dataclass, fields
from typing import Any

from sizecompare.config.manager import ConfigManager


def _from_group(cls, config: ConfigManager, group: str):
    values: dict[str, Any] = {}
    for f in fields(cls):
        values[f.name] = config.get(group, f.name, f.default)
    return cls(**values)


@dataclass(frozen=True)
class StageSettings:
    """Geometry of the comparison stage."""

    chart_padding_px: float = 85
    reference_height_m: float = 2.0
    default_aspect_ratio: float = 1 / 3
    dense_grid_threshold_px: float = 500
    dense_grid_lines: int = 21
    sparse_grid_lines: int = 11
    min_available_px: float = 1.0

    @classmethod
    def from_config(cls, config: ConfigManager) -> "StageSettings":
        return _from_group(cls, config, "stage")


@dataclass(frozen=True)
class ZoomSettings:
    """Zoom step sizes and wheel throttling."""

    button_step: float = 0.2
    wheel_step: float = 0.1
    throttle_ms: float = 66

    @classmethod
    def from_config(cls, config: ConfigManager) -> "ZoomSettings":
        return _from_group(cls, config, "zoom")

    @property
    def throttle_seconds(self) -> float:
        return self.throttle_ms / 1000.0


@dataclass(frozen=True)
class StyleSettings:
    """Chart appearance options carried along with a shared comparison."""

    background_color: str = "#ffffff"
    background_image: str | None = None
    grid_lines: bool = True
    labels: bool = True
    shadows: bool = True
    theme: str = "light"  # light, dark
    chart_height: int = 600
    spacing: int = 50

    @classmethod
    def from_config(cls, config: ConfigManager) -> "StyleSettings":
        return _from_group(cls, config, "style")
