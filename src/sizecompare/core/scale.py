"""Scale engine: pixels-per-meter for the comparison stage.

The effective ratio is either the auto-fit ratio (the tallest entry fills
the available chart height) or a manual override set by zooming. Zoom
steps compound multiplicatively, are throttled so high-frequency wheel
events cannot run away, and keep the horizontally centered point of the
content under the viewport center across the re-layout.
"""

import math
import time
from dataclasses import dataclass
from typing import Callable

from loguru import logger

from sizecompare.config.settings import StageSettings, ZoomSettings
from sizecompare.core.comparison import Comparison, is_valid_height
from sizecompare.core.precision import Precision


@dataclass
class ScaleState:
    """Auto-fit ratio plus an optional manual override (px per meter)."""

    auto_fit_ratio: float
    manual_override_ratio: float | None = None

    @property
    def effective_ratio(self) -> float:
        if self.manual_override_ratio is not None:
            return self.manual_override_ratio
        return self.auto_fit_ratio


@dataclass(frozen=True)
class ScrollGeometry:
    """Horizontal scroll metrics of the stage container, in pixels."""

    scroll_left: float
    viewport_width: float
    content_width: float


@dataclass(frozen=True)
class ZoomResult:
    previous_ratio: float
    ratio: float
    anchor: float | None = None


def compute_auto_fit_ratio(
    tallest_m: float,
    available_px: float,
    reference_m: float = 2.0,
    min_available_px: float = 1.0,
) -> float:
    """Pixels per meter that make ``tallest_m`` fill ``available_px``.

    A non-positive or non-finite tallest height is replaced by
    ``reference_m``; the available height is clamped to at least
    ``min_available_px``. The result is always finite and > 0.
    """
    if not is_valid_height(tallest_m):
        logger.warning(f"Invalid tallest height {tallest_m!r}, fitting {reference_m} m instead")
        tallest_m = reference_m
    if not math.isfinite(available_px) or available_px < min_available_px:
        available_px = min_available_px

    ratio = Precision.from_value(available_px).divide(tallest_m).to_number()
    if not math.isfinite(ratio) or ratio <= 0:
        logger.warning(f"Auto-fit ratio {ratio!r} out of range for {tallest_m} m, fitting {reference_m} m")
        ratio = Precision.from_value(available_px).divide(reference_m).to_number()
    return ratio


def zoom_ratio(current_ratio: float, delta_fraction: float) -> float:
    """Apply one zoom step: ``ratio * (1 + delta)``.

    A step that would make the ratio non-positive or non-finite leaves it
    unchanged.
    """
    current = Precision.from_value(current_ratio)
    new_ratio = current.add(current.multiply(delta_fraction)).to_number()
    if not math.isfinite(new_ratio) or new_ratio <= 0:
        logger.debug(f"Zoom by {delta_fraction} from {current_ratio} rejected ({new_ratio})")
        return current_ratio
    return new_ratio


def capture_scroll_anchor(scroll_left: float, viewport_width: float, content_width: float) -> float:
    """Fraction of the content width currently under the viewport center."""
    if content_width <= 0:
        return 0.0
    return (scroll_left + viewport_width / 2) / content_width


def restore_scroll_left(anchor: float, viewport_width: float, content_width: float) -> float:
    """Scroll offset that puts ``anchor`` back under the viewport center."""
    target = content_width * anchor - viewport_width / 2
    return max(0.0, min(target, content_width - viewport_width))


class ScaleEngine:
    """Owns the stage's scale state.

    The ratio is changed only through :meth:`zoom` (and its wrappers),
    :meth:`reset`, and layout updates that recompute the auto-fit value.
    """

    def __init__(
        self,
        stage: StageSettings | None = None,
        zoom: ZoomSettings | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._stage = stage or StageSettings()
        self._zoom = zoom or ZoomSettings()
        self._clock = clock

        self._tallest_m = self._stage.reference_height_m
        self._chart_area_px = 0.0
        self._item_count = 0
        self._last_zoom_at: float | None = None
        self._pending_anchor: float | None = None
        self._pending_viewport_width = 0.0

        self._state = ScaleState(auto_fit_ratio=self._compute_auto_fit())

    @property
    def state(self) -> ScaleState:
        return self._state

    @property
    def ratio(self) -> float:
        """Effective pixels per meter."""
        return self._state.effective_ratio

    @property
    def is_manual(self) -> bool:
        return self._state.manual_override_ratio is not None

    @property
    def chart_area_px(self) -> float:
        return self._chart_area_px

    @property
    def available_px(self) -> float:
        return self._chart_area_px - self._stage.chart_padding_px

    @property
    def pending_anchor(self) -> float | None:
        return self._pending_anchor

    def _compute_auto_fit(self) -> float:
        return compute_auto_fit_ratio(
            self._tallest_m,
            self.available_px,
            reference_m=self._stage.reference_height_m,
            min_available_px=self._stage.min_available_px,
        )

    def update_layout(
        self,
        tallest_m: float | None = None,
        chart_area_px: float | None = None,
        item_count: int | None = None,
    ) -> float:
        """Feed new layout inputs; returns the effective ratio afterwards."""
        if tallest_m is not None:
            self._tallest_m = tallest_m
        if chart_area_px is not None:
            self._chart_area_px = chart_area_px
        if item_count is not None:
            self._item_count = item_count
            if item_count == 0 and self.is_manual:
                logger.debug("Comparison emptied, dropping manual zoom")
                self._state.manual_override_ratio = None
        self._state.auto_fit_ratio = self._compute_auto_fit()
        return self.ratio

    def sync(self, comparison: Comparison) -> float:
        """Recompute the auto-fit ratio from the comparison's entries."""
        return self.update_layout(
            tallest_m=comparison.max_height(self._stage.reference_height_m),
            item_count=len(comparison),
        )

    def zoom(self, delta_fraction: float, scroll: ScrollGeometry | None = None) -> ZoomResult | None:
        """Scale the current ratio by ``1 + delta_fraction``.

        Ignored while the comparison is empty and for calls arriving within
        the throttle window of the previous zoom. When ``scroll`` is given
        the centered anchor is captured for :meth:`restore_scroll`.
        """
        if self._item_count == 0:
            logger.debug("Zoom ignored: comparison is empty")
            return None

        now = self._clock()
        if self._last_zoom_at is not None and now - self._last_zoom_at < self._zoom.throttle_seconds:
            logger.debug("Zoom throttled")
            return None
        self._last_zoom_at = now

        anchor = None
        if scroll is not None:
            anchor = capture_scroll_anchor(scroll.scroll_left, scroll.viewport_width, scroll.content_width)
            self._pending_anchor = anchor
            self._pending_viewport_width = scroll.viewport_width

        previous = self.ratio
        self._state.manual_override_ratio = zoom_ratio(previous, delta_fraction)
        logger.debug(f"Zoom {delta_fraction:+}: {previous} -> {self.ratio} px/m")
        return ZoomResult(previous_ratio=previous, ratio=self.ratio, anchor=anchor)

    def zoom_in(self, scroll: ScrollGeometry | None = None) -> ZoomResult | None:
        return self.zoom(self._zoom.button_step, scroll)

    def zoom_out(self, scroll: ScrollGeometry | None = None) -> ZoomResult | None:
        return self.zoom(-self._zoom.button_step, scroll)

    def zoom_from_wheel(
        self, delta_y: float, ctrl_pressed: bool, scroll: ScrollGeometry | None = None
    ) -> ZoomResult | None:
        """Ctrl + wheel zoom: scrolling down zooms out, up zooms in."""
        if not ctrl_pressed:
            return None
        step = -self._zoom.wheel_step if delta_y > 0 else self._zoom.wheel_step
        return self.zoom(step, scroll)

    def restore_scroll(self, content_width: float, viewport_width: float | None = None) -> float | None:
        """Scroll offset for the re-laid-out content, or None if no zoom is pending."""
        if self._pending_anchor is None:
            return None
        if viewport_width is None:
            viewport_width = self._pending_viewport_width
        scroll_left = restore_scroll_left(self._pending_anchor, viewport_width, content_width)
        self._pending_anchor = None
        return scroll_left

    def reset(self):
        """Drop the manual override and return to auto-fit."""
        self._state.manual_override_ratio = None
        self._pending_anchor = None
