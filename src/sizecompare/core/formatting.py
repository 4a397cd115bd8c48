"""Number and height formatting.

Renders magnitudes as compact, locale-invariant strings: plain decimals
with four significant figures in the normal range, and scientific
notation with a Unicode superscript exponent (``1.235×10⁴``) outside it.

Height helpers on top of that:
- smart metric labels (best unit from :func:`select_unit` + symbol)
- smart imperial labels (inches, feet-inches composite, or miles)
- grid-axis imperial labels, where one reference height fixes the
  format for every tick on the axis
"""

import math
from dataclasses import dataclass

from loguru import logger

from sizecompare.core.precision import Precision, to_exponential, to_fixed
from sizecompare.core.units import DisplayUnit, UnitSystem, select_unit


SIGNIFICANT_DIGITS = 4
SCIENTIFIC_UPPER = 1000.0
SCIENTIFIC_LOWER = 0.001
DEFAULT_MAX_LENGTH = 8

CM_PER_INCH = 2.54
INCHES_PER_FOOT = 12
FEET_PER_MILE = 5280
COMPOSITE_MAX_FEET = 10000

IMPERIAL_TIER_INCHES = "in"
IMPERIAL_TIER_FEET_INCHES = "ft/in"
IMPERIAL_TIER_MILES = "mi"

_SUPERSCRIPTS = str.maketrans("0123456789-+", "⁰¹²³⁴⁵⁶⁷⁸⁹⁻⁺")


@dataclass(frozen=True)
class FormattedValue:
    """A converted magnitude and its display string."""

    value: float
    formatted: str


def to_superscript(text: str) -> str:
    """Map ASCII digits and signs to their superscript glyphs."""
    return text.translate(_SUPERSCRIPTS)


def needs_scientific(value: float) -> bool:
    """True when a value is too large or too small for plain decimals."""
    magnitude = abs(value)
    return magnitude >= SCIENTIFIC_UPPER or (magnitude < SCIENTIFIC_LOWER and value != 0)


def format_scientific(value: float, decimals: int = 3) -> str:
    """Format as ``<mantissa>×10<superscript exponent>``."""
    text = to_exponential(value, decimals)
    mantissa, _, exponent = text.partition("e")
    if not exponent:
        return text
    return f"{mantissa}×10{to_superscript(str(int(exponent)))}"


def _short_str(value: float) -> str:
    # Shortest round-trip form, integers without a trailing ".0"
    if value == int(value):
        return str(int(value))
    return repr(value)


def format_number(value: float, max_length: int = DEFAULT_MAX_LENGTH) -> str:
    """Format a magnitude with four significant figures.

    Values at or above 1000, or below 0.001 (but not zero), use scientific
    notation with three mantissa decimals. Other values keep their natural
    short form when it fits in ``max_length`` characters, and are otherwise
    rounded to four significant figures.
    """
    if not math.isfinite(value):
        logger.warning(f"Cannot format non-finite value {value!r}, showing 0")
        return "0"

    if needs_scientific(value):
        return format_scientific(value, SIGNIFICANT_DIGITS - 1)

    text = _short_str(value)
    if len(text) <= max_length:
        return text

    integer_digits = math.floor(math.log10(abs(value))) + 1
    decimals = max(0, SIGNIFICANT_DIGITS - integer_digits)
    return to_fixed(value, decimals)


def format_for_unit(magnitude_m: float, unit: UnitSystem) -> FormattedValue:
    """Convert meters to ``unit`` and format the result."""
    value = Precision.from_value(magnitude_m).multiply(unit.per_meter).to_number()
    return FormattedValue(value=value, formatted=format_number(value))


def convert_height_smart(magnitude_m: float, prefer_metric: bool = True) -> str:
    """Label a height in its best-fitting unit, e.g. ``183cm`` or ``100nm``."""
    unit = select_unit(magnitude_m, prefer_metric)
    result = format_for_unit(magnitude_m, unit)
    return f"{result.formatted}{unit.symbol}"


def _finite_or_zero(magnitude_m: float) -> float:
    if math.isfinite(magnitude_m):
        return magnitude_m
    logger.warning(f"Invalid height {magnitude_m!r}, treating as 0")
    return 0.0


def meters_to_inches(magnitude_m: float) -> float:
    return Precision.from_value(magnitude_m).multiply(100).divide(CM_PER_INCH).to_number()


def format_feet_inches(total_inches: float) -> str:
    """Composite feet-inches form: ``6' 0.0"``."""
    feet = math.floor(total_inches / INCHES_PER_FOOT)
    inches = math.fmod(total_inches, INCHES_PER_FOOT)
    return f"{feet}' {to_fixed(inches, 1)}\""


def imperial_tier(magnitude_m: float) -> str:
    """Which imperial form a height uses: inches, feet-inches or miles."""
    total_feet = meters_to_inches(_finite_or_zero(magnitude_m)) / INCHES_PER_FOOT
    if total_feet <= 1:
        return IMPERIAL_TIER_INCHES
    if total_feet < COMPOSITE_MAX_FEET:
        return IMPERIAL_TIER_FEET_INCHES
    return IMPERIAL_TIER_MILES


def _format_imperial(magnitude_m: float, tier: str, with_suffix: bool) -> str:
    total_inches = meters_to_inches(magnitude_m)
    if tier == IMPERIAL_TIER_INCHES:
        text = format_number(total_inches)
    elif tier == IMPERIAL_TIER_FEET_INCHES:
        return format_feet_inches(total_inches)
    else:
        miles = Precision.from_value(total_inches).divide(INCHES_PER_FOOT * FEET_PER_MILE).to_number()
        text = format_number(miles)
    return f"{text}{tier}" if with_suffix else text


def convert_height_smart_imperial(magnitude_m: float) -> str:
    """Label a height in imperial units.

    Up to one foot: inches. From one foot to 10000 ft: feet-inches.
    Beyond that: miles. Inches and miles switch to scientific notation
    when the value is extreme.
    """
    magnitude_m = _finite_or_zero(magnitude_m)
    return _format_imperial(magnitude_m, imperial_tier(magnitude_m), with_suffix=True)


def get_imperial_grid_unit_label(max_height_m: float) -> str:
    """Axis title unit for the imperial grid: ``in``, ``ft/in`` or ``mi``."""
    return imperial_tier(max_height_m)


def convert_height_for_grid_imperial(magnitude_m: float, max_height_m: float) -> str:
    """Label a grid tick using the form chosen for ``max_height_m``.

    Every tick of one axis shares the tallest entry's form, so labels do
    not silently change units between consecutive lines.
    """
    return _format_imperial(_finite_or_zero(magnitude_m), imperial_tier(max_height_m), with_suffix=False)


def convert_height(magnitude_m: float, unit: DisplayUnit) -> str:
    """Fixed-format height: ``183.0cm`` or ``6' 0.0"``."""
    magnitude_m = _finite_or_zero(magnitude_m)
    if unit == DisplayUnit.FT_IN:
        return format_feet_inches(meters_to_inches(magnitude_m))
    return f"{to_fixed(magnitude_m * 100, 1)}cm"


def label_for(magnitude_m: float, unit: DisplayUnit) -> str:
    """The height label shown next to a rendered entry."""
    if unit == DisplayUnit.FT_IN:
        return convert_height_smart_imperial(magnitude_m)
    return convert_height_smart(magnitude_m, prefer_metric=True)
