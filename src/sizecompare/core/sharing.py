"""Data exchanged with the persistence/sharing collaborator.

A shared comparison stores only item ids plus the user's overrides and a
few settings; item data itself is fetched again from the catalog when
the comparison is rebuilt. How this is encoded (URL parameters, project
JSON) is up to the collaborator.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Iterable

from loguru import logger

from sizecompare.config.settings import StyleSettings
from sizecompare.core.catalog import ItemSource
from sizecompare.core.comparison import Comparison, ComparisonEntry, is_valid_height, new_entry_id
from sizecompare.core.units import DisplayUnit, find_display_unit


@dataclass(frozen=True)
class SharedEntry:
    """An entry reference: catalog id plus optional overrides."""

    id: str
    name: str | None = None
    height: float | None = None
    color: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SharedEntry":
        height = data.get("height")
        return cls(
            id=str(data.get("id") or ""),
            name=(data.get("name") or "").strip() or None,
            height=float(height) if height is not None else None,
            color=(data.get("color") or "").strip() or None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(frozen=True)
class SharedSettings:
    unit: DisplayUnit = DisplayUnit.CM
    chart_title: str = ""
    style: StyleSettings = field(default_factory=StyleSettings)

    _STYLE_KEYS = {
        "backgroundColor": "background_color",
        "backgroundImage": "background_image",
        "gridLines": "grid_lines",
        "labels": "labels",
        "shadows": "shadows",
        "theme": "theme",
        "chartHeight": "chart_height",
        "spacing": "spacing",
    }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SharedSettings":
        defaults = StyleSettings()
        style = {
            attr: data[key] if data.get(key) is not None else getattr(defaults, attr)
            for key, attr in cls._STYLE_KEYS.items()
        }
        return cls(
            unit=find_display_unit(data.get("unit") or "cm"),
            chart_title=data.get("chartTitle") or "",
            style=StyleSettings(**style),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"unit": self.unit.value, "chartTitle": self.chart_title}
        for key, attr in self._STYLE_KEYS.items():
            value = getattr(self.style, attr)
            if value is not None:
                data[key] = value
        return data


@dataclass(frozen=True)
class SharedData:
    entries: tuple[SharedEntry, ...] = ()
    settings: SharedSettings = field(default_factory=SharedSettings)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SharedData":
        """Accept the nested (``settings``) or the flat (``chartTitle``/``unit``) layout."""
        settings_data = data.get("settings")
        if not isinstance(settings_data, dict):
            settings_data = {"chartTitle": data.get("chartTitle"), "unit": data.get("unit")}

        raw_entries = data.get("characters") or []
        if not isinstance(raw_entries, list):
            logger.warning(f"Ignoring shared entries with unexpected layout: {raw_entries!r}")
            raw_entries = []

        entries = []
        for raw in raw_entries:
            try:
                entries.append(SharedEntry.from_dict(raw))
            except (AttributeError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed shared entry {raw!r}: {e}")

        return cls(entries=tuple(entries), settings=SharedSettings.from_dict(settings_data))

    def to_dict(self) -> dict[str, Any]:
        return {
            "characters": [e.to_dict() for e in self.entries],
            "settings": self.settings.to_dict(),
        }


def snapshot(
    comparison: Comparison,
    unit: DisplayUnit = DisplayUnit.CM,
    chart_title: str = "",
    style: StyleSettings | None = None,
) -> SharedData:
    """Export a comparison's entries in order with their current values."""
    entries = tuple(
        SharedEntry(
            id=entry.item.id,
            name=entry.display_name,
            height=entry.height_m,
            color=entry.color,
        )
        for entry in sorted(comparison.entries, key=lambda e: e.order)
    )
    return SharedData(
        entries=entries,
        settings=SharedSettings(unit=unit, chart_title=chart_title, style=style or StyleSettings()),
    )


def rebuild_entries(
    shared_entries: Iterable[SharedEntry],
    source: ItemSource,
    id_factory: Callable[[], str] = new_entry_id,
) -> list[ComparisonEntry]:
    """Rebuild comparison entries from shared references.

    Ids are fetched in one batch. Entries whose id is empty or unknown to
    the catalog are skipped; the rest keep their relative order and are
    numbered 0..N-1. Height overrides that are not finite and positive are
    ignored in favour of the catalog height.
    """
    shared_entries = list(shared_entries)
    ids = [s.id for s in shared_entries if s.id]
    if not ids:
        return []

    base_items = {item.id: item for item in source.fetch_by_ids(ids)}

    entries: list[ComparisonEntry] = []
    for shared in shared_entries:
        item = base_items.get(shared.id)
        if item is None:
            logger.warning(f"Item not found, skipping shared entry: {shared.id!r}")
            continue

        height = shared.height
        if height is not None and not is_valid_height(height):
            logger.warning(f"Ignoring invalid height override {height!r} for {shared.id}")
            height = None

        entries.append(
            ComparisonEntry(
                entry_id=id_factory(),
                item=item,
                order=len(entries),
                name_override=shared.name if shared.name and shared.name != item.display_name else None,
                height_override=height if height is not None and height != item.height_m else None,
                color_override=shared.color if shared.color and shared.color != item.color else None,
            )
        )

    logger.info(f"Rebuilt {len(entries)} of {len(shared_entries)} shared entries")
    return entries


def restore(comparison: Comparison, data: SharedData, source: ItemSource) -> SharedSettings:
    """Replace a comparison's entries from shared data; returns its settings."""
    comparison.replace_all(rebuild_entries(data.entries, source))
    return data.settings
