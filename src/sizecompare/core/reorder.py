"""Drag-to-reorder state machine.

One :class:`ReorderEngine` runs per rendered list (the horizontal stage,
the vertical side panel). Each is either idle or dragging one entry.
While dragging, the entry keeps its slot as an invisible placeholder and
an overlay follows the pointer; the comparison order is mutated live
whenever the overlay's edges cross a neighbour's center, so releasing the
pointer only clears transient state.

Geometry comes from an injected ``measure(entry_id) -> Rect | None``
callback, so the swap decision never touches a real UI toolkit.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

from loguru import logger

from sizecompare.core.comparison import Comparison, ComparisonEntry


class Axis(Enum):
    """Primary axis of a list."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class DragPhase(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y)

    def along(self, axis: Axis) -> float:
        return self.x if axis == Axis.HORIZONTAL else self.y


@dataclass(frozen=True)
class Rect:
    """An on-screen box: top-left corner plus size."""

    left: float
    top: float
    width: float
    height: float

    @property
    def origin(self) -> Point:
        return Point(self.left, self.top)

    def extent(self, axis: Axis) -> float:
        return self.width if axis == Axis.HORIZONTAL else self.height

    def center(self, axis: Axis) -> float:
        return self.origin.along(axis) + self.extent(axis) / 2


Measure = Callable[[str], Rect | None]


@dataclass
class DragSession:
    """Transient state of one active drag."""

    dragged_entry_id: str
    pointer_origin: Point
    pointer_current: Point
    element_origin: Point
    element_size: tuple[float, float]

    @property
    def offset(self) -> Point:
        return self.pointer_current - self.pointer_origin

    @property
    def overlay_origin(self) -> Point:
        """Where the dragged content is drawn right now."""
        return self.element_origin + self.offset

    def extent(self, axis: Axis) -> float:
        width, height = self.element_size
        return width if axis == Axis.HORIZONTAL else height


@dataclass(frozen=True)
class Overlay:
    entry_id: str
    origin: Point
    width: float
    height: float


class ReorderEngine:
    """Idle/Dragging state machine over one comparison list.

    ``entries`` returns the entries the list actually renders (swap
    candidates); it defaults to the visible entries of the comparison.
    """

    def __init__(
        self,
        comparison: Comparison,
        axis: Axis,
        measure: Measure,
        name: str = "list",
        entries: Callable[[], list[ComparisonEntry]] | None = None,
    ):
        self._comparison = comparison
        self._entries = entries or comparison.visible_entries
        self._axis = axis
        self._measure = measure
        self._name = name
        self._session: DragSession | None = None
        self._prevent_next_click = False
        comparison.add_listener(self._on_comparison_changed)

    @property
    def axis(self) -> Axis:
        return self._axis

    @property
    def phase(self) -> DragPhase:
        return DragPhase.DRAGGING if self._session is not None else DragPhase.IDLE

    @property
    def is_dragging(self) -> bool:
        return self._session is not None

    @property
    def session(self) -> DragSession | None:
        return replace(self._session) if self._session is not None else None

    @property
    def prevent_next_click(self) -> bool:
        return self._prevent_next_click

    # --- Transitions ---

    def on_drag_start(self, entry_id: str, pointer: Point) -> bool:
        """Idle -> Dragging. Returns False if the entry cannot be dragged."""
        if self._session is not None:
            logger.debug(f"[{self._name}] New drag replaces drag of {self._session.dragged_entry_id}")
            self._session = None

        if entry_id not in self._comparison:
            logger.warning(f"[{self._name}] Cannot drag unknown entry {entry_id}")
            return False

        rect = self._measure(entry_id)
        if rect is None:
            logger.warning(f"[{self._name}] Entry {entry_id} has no on-screen box, drag not started")
            return False

        self._session = DragSession(
            dragged_entry_id=entry_id,
            pointer_origin=pointer,
            pointer_current=pointer,
            element_origin=rect.origin,
            element_size=(rect.width, rect.height),
        )
        self._prevent_next_click = False
        logger.debug(f"[{self._name}] Drag started: {entry_id} at {rect.origin}")
        return True

    def on_drag_move(self, pointer: Point) -> bool:
        """Dragging -> Dragging. Returns True when the order changed."""
        session = self._session
        if session is None:
            return False
        session.pointer_current = pointer

        dragged_index = self._comparison.index_of(session.dragged_entry_id)
        if dragged_index is None:
            logger.warning(f"[{self._name}] Drag target {session.dragged_entry_id} lost, ending drag")
            self.cancel()
            return False

        target_index = self._find_target(session, dragged_index)
        if target_index == dragged_index:
            return False

        self._comparison.move(session.dragged_entry_id, target_index)
        logger.debug(f"[{self._name}] Moved {session.dragged_entry_id}: {dragged_index} -> {target_index}")
        return True

    def on_drag_end(self) -> bool:
        """Dragging -> Idle on pointer release. The order is already final."""
        if self._session is None:
            return False
        logger.debug(f"[{self._name}] Drag ended: {self._session.dragged_entry_id}")
        self._session = None
        self._prevent_next_click = True
        return True

    def cancel(self):
        """Drop an active drag without arming the click guard."""
        self._session = None

    def _find_target(self, session: DragSession, dragged_index: int) -> int:
        # Nearest center wins, but only if the matching edge has crossed it:
        # the trailing edge for entries after the dragged one, the leading
        # edge for entries before it.
        axis = self._axis
        leading = session.overlay_origin.along(axis)
        trailing = leading + session.extent(axis)
        midpoint = (leading + trailing) / 2

        target_index = dragged_index
        closest = math.inf
        for entry in self._entries():
            if entry.entry_id == session.dragged_entry_id:
                continue
            index = self._comparison.index_of(entry.entry_id)
            rect = self._measure(entry.entry_id)
            if index is None or rect is None:
                continue

            center = rect.center(axis)
            distance = abs(midpoint - center)
            if distance >= closest:
                continue
            if (index > dragged_index and trailing > center) or (index < dragged_index and leading < center):
                target_index = index
                closest = distance
        return target_index

    # --- Rendering / click helpers ---

    def is_placeholder(self, entry_id: str) -> bool:
        """True for the dragged entry, which renders as an empty slot."""
        return self._session is not None and self._session.dragged_entry_id == entry_id

    def overlay(self) -> Overlay | None:
        if self._session is None:
            return None
        width, height = self._session.element_size
        return Overlay(
            entry_id=self._session.dragged_entry_id,
            origin=self._session.overlay_origin,
            width=width,
            height=height,
        )

    def consume_click(self) -> bool:
        """Whether a click on an entry should act (select it).

        The first click after a drag release is swallowed, as are clicks
        during a drag.
        """
        if self._prevent_next_click:
            self._prevent_next_click = False
            return False
        return self._session is None

    def _on_comparison_changed(self, event: str, comparison: Comparison):
        session = self._session
        if session is None or event not in ("remove", "clear", "replace"):
            return
        if session.dragged_entry_id not in comparison:
            logger.warning(f"[{self._name}] Dragged entry {session.dragged_entry_id} removed, ending drag")
            self.cancel()
