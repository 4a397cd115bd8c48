"""Precision-aware numeric values.

All arithmetic that turns meters into display or pixel quantities goes
through :class:`Precision`, so rounding is decided in one place. Values
are plain IEEE doubles; results are rounded to a fixed number of
significant digits when read back, which hides the last-bit noise of
chained multiplications (e.g. ``1e-7 * 1e9``) without pretending to be
arbitrary precision. Magnitude ratios beyond ~1e15 will still lose digits.

Fixed and exponential string forms round exact ties away from zero
(``0.25`` -> ``0.3``), not to even as Python's format specs do.
"""

import math
from decimal import ROUND_HALF_UP, Context, Decimal


DEFAULT_SIGNIFICANT_DIGITS = 15

# Wide enough for every digit of any finite double
_EXACT = Context(prec=1100, rounding=ROUND_HALF_UP)


def round_half_up(value: float | Decimal, decimals: int) -> Decimal:
    """Round the exact binary value of ``value``, ties away from zero."""
    return Decimal(value).quantize(Decimal(1).scaleb(-decimals), context=_EXACT)


def to_fixed(value: float, decimals: int) -> str:
    """Fixed-point string with ``decimals`` digits after the point."""
    if not math.isfinite(value):
        return f"{value:.{decimals}f}"
    return f"{round_half_up(value, decimals):f}"


def to_exponential(value: float, decimals: int) -> str:
    """Exponential string such as ``1.235e+04``."""
    if not math.isfinite(value):
        return f"{value:.{decimals}e}"
    if value == 0:
        return f"{0:.{decimals}e}"
    exact = Decimal(value)
    exponent = exact.adjusted()
    mantissa = round_half_up(exact.scaleb(-exponent, context=_EXACT), decimals)
    if abs(mantissa) >= 10:
        # 9.9995 -> 10.000: renormalize
        exponent += 1
        mantissa = round_half_up(exact.scaleb(-exponent, context=_EXACT), decimals)
    return f"{mantissa:f}e{exponent:+03d}"


class Precision:
    """An immutable float with a significant-digit limit."""

    __slots__ = ("_value", "_precision")

    def __init__(self, value: float | int | str, precision: int = DEFAULT_SIGNIFICANT_DIGITS):
        self._value = float(value)
        self._precision = precision

    @classmethod
    def from_value(cls, value: "float | int | str | Precision", precision: int | None = None) -> "Precision":
        if isinstance(value, Precision):
            return cls(value._value, precision if precision is not None else value._precision)
        return cls(value, precision if precision is not None else DEFAULT_SIGNIFICANT_DIGITS)

    @staticmethod
    def _raw(other: "float | int | Precision") -> float:
        return other._value if isinstance(other, Precision) else float(other)

    def multiply(self, other: "float | int | Precision") -> "Precision":
        return Precision(self._value * self._raw(other), self._precision)

    def divide(self, other: "float | int | Precision") -> "Precision":
        """Divide, yielding +/-inf or nan instead of raising on a zero divisor."""
        divisor = self._raw(other)
        if divisor == 0:
            if self._value == 0 or math.isnan(self._value):
                return Precision(math.nan, self._precision)
            sign = math.copysign(1.0, self._value) * math.copysign(1.0, divisor)
            return Precision(math.copysign(math.inf, sign), self._precision)
        return Precision(self._value / divisor, self._precision)

    def add(self, other: "float | int | Precision") -> "Precision":
        return Precision(self._value + self._raw(other), self._precision)

    def subtract(self, other: "float | int | Precision") -> "Precision":
        return Precision(self._value - self._raw(other), self._precision)

    @property
    def precision(self) -> int:
        return self._precision

    @property
    def raw(self) -> float:
        """The unrounded value."""
        return self._value

    def is_finite(self) -> bool:
        return math.isfinite(self._value)

    def to_number(self) -> float:
        """Return the value rounded to the significant-digit limit."""
        if not math.isfinite(self._value) or self._value == 0:
            return self._value
        return float(f"{self._value:.{self._precision}g}")

    def to_fixed(self, decimals: int) -> str:
        return to_fixed(self.to_number(), decimals)

    def to_exponential(self, decimals: int) -> str:
        return to_exponential(self.to_number(), decimals)

    def __float__(self) -> float:
        return self.to_number()

    def __repr__(self) -> str:
        return f"Precision({self._value!r}, precision={self._precision})"

    def __eq__(self, other) -> bool:
        if isinstance(other, Precision):
            return self.to_number() == other.to_number()
        if isinstance(other, (int, float)):
            return self.to_number() == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.to_number())
