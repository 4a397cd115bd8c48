"""Unit systems and magnitude-adaptive unit selection.

Lengths are stored in meters everywhere. This module holds the static
conversion table and picks the display unit that keeps a magnitude's
mantissa readable: not a degenerate near-zero value, and not a long
integer part.
"""

import math
from enum import Enum

from loguru import logger


class UnitSystem(Enum):
    """Display units, valued by their symbol."""

    NANOMETER = "nm"
    MICROMETER = "μm"
    MILLIMETER = "mm"
    CENTIMETER = "cm"
    METER = "m"
    KILOMETER = "km"
    INCH = "in"
    FOOT = "ft"
    MILE = "mi"

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def per_meter(self) -> float:
        """How many of this unit make one meter."""
        return UNIT_CONVERSIONS[self]

    @property
    def is_metric(self) -> bool:
        return self in METRIC_LADDER


class DisplayUnit(Enum):
    """The user-facing unit preference for entry labels."""

    CM = "cm"
    FT_IN = "ft-in"


# Units per meter
UNIT_CONVERSIONS: dict[UnitSystem, float] = {
    UnitSystem.NANOMETER: 1_000_000_000,
    UnitSystem.MICROMETER: 1_000_000,
    UnitSystem.MILLIMETER: 1000,
    UnitSystem.CENTIMETER: 100,
    UnitSystem.METER: 1,
    UnitSystem.KILOMETER: 0.001,
    UnitSystem.INCH: 39.3701,
    UnitSystem.FOOT: 3.28084,
    UnitSystem.MILE: 0.000621371,
}

METRIC_LADDER = (
    UnitSystem.NANOMETER,
    UnitSystem.MICROMETER,
    UnitSystem.MILLIMETER,
    UnitSystem.CENTIMETER,
    UnitSystem.METER,
    UnitSystem.KILOMETER,
)

IMPERIAL_LADDER = (UnitSystem.INCH, UnitSystem.FOOT, UnitSystem.MILE)

# (upper bound in meters, preferred unit, fallback candidates, default)
# Candidates are tried in order; the preferred unit must land in [1, 1000),
# a fallback only needs to land in [0.001, 1000).
_METRIC_BANDS = (
    (1e-5, UnitSystem.NANOMETER, (UnitSystem.MICROMETER, UnitSystem.MILLIMETER)),
    (1e-2, UnitSystem.MICROMETER, (UnitSystem.MILLIMETER, UnitSystem.CENTIMETER)),
    (1e-1, UnitSystem.MILLIMETER, (UnitSystem.CENTIMETER, UnitSystem.METER)),
    (10.0, UnitSystem.CENTIMETER, (UnitSystem.METER, UnitSystem.KILOMETER)),
    (1000.0, UnitSystem.METER, (UnitSystem.KILOMETER,)),
)

IMPERIAL_INCH_LIMIT_M = 0.0254
IMPERIAL_FOOT_LIMIT_M = 304.8


def find_display_unit(unit: str) -> DisplayUnit:
    """Parse a display unit name, falling back to centimeters."""
    try:
        return DisplayUnit(unit)
    except ValueError:
        return DisplayUnit.CM


def find_unit_system(symbol: str) -> UnitSystem:
    """Look up a unit by symbol ('um' is accepted for micrometers)."""
    if symbol == "um":
        return UnitSystem.MICROMETER
    try:
        return UnitSystem(symbol)
    except ValueError:
        raise ValueError(f"Unknown unit symbol: {symbol!r}") from None


def convert(value: float, from_unit: UnitSystem, to_unit: UnitSystem) -> float:
    """Convert a measurement between units."""
    meters = value / UNIT_CONVERSIONS[from_unit]
    return meters * UNIT_CONVERSIONS[to_unit]


def _in_range(value: float, low: float) -> bool:
    return low <= value < 1000


def select_unit(magnitude_m: float, prefer_metric: bool = True) -> UnitSystem:
    """Pick the best display unit for a length in meters.

    Metric lengths are first bucketed into a band by absolute size; within
    the band the band's own unit wins if its value is in [1, 1000), then
    the coarser candidates are tried, then the band's unit is used anyway.
    Imperial lengths use three fixed tiers (inch, foot, mile).

    Zero and non-finite magnitudes yield the smallest unit of the system.
    """
    if not math.isfinite(magnitude_m) or magnitude_m == 0:
        if magnitude_m != 0:
            logger.warning(f"Invalid magnitude {magnitude_m!r}, using smallest unit")
        return METRIC_LADDER[0] if prefer_metric else IMPERIAL_LADDER[0]

    abs_m = abs(magnitude_m)

    if not prefer_metric:
        if abs_m < IMPERIAL_INCH_LIMIT_M:
            return UnitSystem.INCH
        if abs_m < IMPERIAL_FOOT_LIMIT_M:
            return UnitSystem.FOOT
        return UnitSystem.MILE

    for upper, band_unit, fallbacks in _METRIC_BANDS:
        if abs_m >= upper:
            continue
        if _in_range(abs_m * UNIT_CONVERSIONS[band_unit], 1):
            return band_unit
        for candidate in fallbacks:
            if _in_range(abs_m * UNIT_CONVERSIONS[candidate], 0.001):
                return candidate
        return band_unit

    return UnitSystem.KILOMETER

