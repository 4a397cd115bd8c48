"""The ordered list of entries being compared.

A :class:`Comparison` owns :class:`ComparisonEntry` objects, each wrapping
a catalog :class:`Item` with per-entry overrides. The list order is
authoritative: after every mutation the ``order`` fields are renumbered
to 0..N-1 in list order, so they always form a dense permutation.
"""

import math
import uuid
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator

from loguru import logger

from sizecompare.core.catalog import DEFAULT_ASPECT_RATIO, Item


REFERENCE_HEIGHT_M = 2.0

_UNSET = object()


def new_entry_id() -> str:
    return f"comparison-{uuid.uuid4().hex}"


def is_valid_height(height_m: float | None) -> bool:
    return height_m is not None and math.isfinite(height_m) and height_m > 0


@dataclass
class ComparisonEntry:
    """One occurrence of an item in a comparison."""

    entry_id: str
    item: Item
    order: int = 0
    visible: bool = True
    selected: bool = False
    name_override: str | None = None
    height_override: float | None = None
    color_override: str | None = None

    @property
    def display_name(self) -> str:
        return self.name_override or self.item.display_name

    @property
    def height_m(self) -> float:
        """Height as entered (may be invalid)."""
        if self.height_override is not None:
            return self.height_override
        return self.item.height_m

    @property
    def color(self) -> str | None:
        return self.color_override or self.item.color

    @property
    def aspect_ratio(self) -> float:
        return self.effective_aspect_ratio()

    def effective_aspect_ratio(self, default: float = DEFAULT_ASPECT_RATIO) -> float:
        """Width over height; unknown or invalid ratios fall back to ``default``."""
        ratio = self.item.visual_aspect_ratio
        if ratio is None or not math.isfinite(ratio) or ratio <= 0:
            return default
        return ratio

    def effective_height_m(self, reference_m: float = REFERENCE_HEIGHT_M) -> float:
        """Height used for rendering; invalid heights render at ``reference_m``."""
        height = self.height_m
        return height if is_valid_height(height) else reference_m


class Comparison:
    """Ordered, mutable list of comparison entries."""

    def __init__(
        self,
        entries: Iterable[ComparisonEntry] = (),
        id_factory: Callable[[], str] = new_entry_id,
    ):
        self._entries: list[ComparisonEntry] = sorted(entries, key=lambda e: e.order)
        self._id_factory = id_factory
        self._listeners: list = []
        self._renumber()

    # --- Access ---

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ComparisonEntry]:
        return iter(list(self._entries))

    def __contains__(self, entry_id: str) -> bool:
        return self.index_of(entry_id) is not None

    @property
    def entries(self) -> list[ComparisonEntry]:
        """Entries in render order (a copy of the list)."""
        return list(self._entries)

    def ids(self) -> list[str]:
        return [e.entry_id for e in self._entries]

    def orders(self) -> list[int]:
        return [e.order for e in self._entries]

    def index_of(self, entry_id: str) -> int | None:
        for index, entry in enumerate(self._entries):
            if entry.entry_id == entry_id:
                return index
        return None

    def get(self, entry_id: str) -> ComparisonEntry:
        index = self.index_of(entry_id)
        if index is None:
            raise KeyError(f"No entry with id {entry_id!r}")
        return self._entries[index]

    def visible_entries(self) -> list[ComparisonEntry]:
        return [e for e in self._entries if e.visible]

    @property
    def selected(self) -> ComparisonEntry | None:
        for entry in self._entries:
            if entry.selected:
                return entry
        return None

    def max_height(self, reference_m: float = REFERENCE_HEIGHT_M) -> float:
        """Tallest valid height, or ``reference_m`` when there is none."""
        heights = [e.height_m for e in self._entries if is_valid_height(e.height_m)]
        return max(heights) if heights else reference_m

    # --- Mutation ---

    def _unique_name(self, name: str) -> str:
        highest = -1
        for entry in self._entries:
            existing = entry.display_name
            if not existing.startswith(name):
                continue
            suffix = existing[len(name):]
            if suffix == "":
                highest = max(highest, 0)
            elif suffix.isdigit():
                highest = max(highest, int(suffix))
        return name if highest == -1 else f"{name}{highest + 1}"

    def add(self, item: Item) -> ComparisonEntry:
        """Append an entry for ``item``; repeated names get a numeric suffix."""
        name = self._unique_name(item.display_name)
        entry = ComparisonEntry(
            entry_id=self._id_factory(),
            item=item,
            order=len(self._entries),
            name_override=name if name != item.display_name else None,
        )
        if not item.has_valid_height:
            logger.warning(f"Item {item.id} has invalid height {item.height_m!r}")
        self._entries.append(entry)
        self._renumber()
        logger.debug(f"Added {entry.display_name} ({entry.entry_id}) at {entry.order}")
        self._notify("add")
        return entry

    def replace_all(self, entries: Iterable[ComparisonEntry]):
        """Swap in a rebuilt entry list, keeping its order."""
        self._entries = sorted(entries, key=lambda e: e.order)
        self._renumber()
        self._notify("replace")

    def remove(self, entry_id: str) -> ComparisonEntry:
        index = self.index_of(entry_id)
        if index is None:
            raise KeyError(f"No entry with id {entry_id!r}")
        entry = self._entries.pop(index)
        self._renumber()
        logger.debug(f"Removed {entry.display_name} ({entry_id})")
        self._notify("remove")
        return entry

    def clear(self):
        self._entries.clear()
        self._notify("clear")

    def move(self, entry_id: str, target_index: int) -> bool:
        """Splice an entry out and reinsert it at ``target_index``."""
        index = self.index_of(entry_id)
        if index is None:
            raise KeyError(f"No entry with id {entry_id!r}")
        target_index = max(0, min(target_index, len(self._entries) - 1))
        if target_index == index:
            return False
        entry = self._entries.pop(index)
        self._entries.insert(target_index, entry)
        self._renumber()
        self._notify("reorder")
        return True

    def select(self, entry_id: str) -> ComparisonEntry:
        target = self.get(entry_id)
        for entry in self._entries:
            entry.selected = entry is target
        self._notify("select")
        return target

    def deselect_all(self):
        for entry in self._entries:
            entry.selected = False
        self._notify("select")

    def set_visible(self, entry_id: str, visible: bool):
        self.get(entry_id).visible = visible
        self._notify("update")

    def update(self, entry_id: str, *, name=_UNSET, height_m=_UNSET, color=_UNSET) -> ComparisonEntry:
        """Override an entry's name, height or color (None clears an override)."""
        entry = self.get(entry_id)
        if name is not _UNSET:
            entry.name_override = name or None
        if height_m is not _UNSET:
            if height_m is not None and not is_valid_height(height_m):
                logger.warning(f"Entry {entry_id} given invalid height {height_m!r}")
            entry.height_override = height_m
        if color is not _UNSET:
            entry.color_override = color or None
        self._notify("update")
        return entry

    def _renumber(self):
        for index, entry in enumerate(self._entries):
            entry.order = index

    # --- Listeners ---

    def add_listener(self, callback):
        """Register a callback for changes: callback(event, comparison)."""
        self._listeners.append(callback)

    def _notify(self, event: str):
        for listener in self._listeners:
            try:
                listener(event, self)
            except Exception as e:
                logger.error(f"Comparison listener error: {e}")
