"""Tests for unit conversion and unit selection."""

import math

import pytest

from sizecompare.core.units import (
    DisplayUnit,
    UnitSystem,
    convert,
    find_display_unit,
    find_unit_system,
    select_unit,
)


class TestConvert:
    def test_mm_to_meters(self):
        assert abs(convert(1000, UnitSystem.MILLIMETER, UnitSystem.METER) - 1.0) < 1e-9

    def test_feet_to_inches(self):
        assert abs(convert(1.0, UnitSystem.FOOT, UnitSystem.INCH) - 12.0) < 1e-3

    def test_round_trip_conversion(self):
        meters = convert(42.5, UnitSystem.CENTIMETER, UnitSystem.METER)
        back = convert(meters, UnitSystem.METER, UnitSystem.CENTIMETER)
        assert abs(back - 42.5) < 1e-9

    def test_unit_properties(self):
        assert UnitSystem.MICROMETER.symbol == "μm"
        assert UnitSystem.KILOMETER.per_meter == 0.001
        assert UnitSystem.CENTIMETER.is_metric
        assert not UnitSystem.MILE.is_metric


class TestLookup:
    def test_find_unit_system(self):
        assert find_unit_system("cm") == UnitSystem.CENTIMETER
        assert find_unit_system("um") == UnitSystem.MICROMETER
        assert find_unit_system("μm") == UnitSystem.MICROMETER

    def test_find_unit_system_unknown(self):
        with pytest.raises(ValueError):
            find_unit_system("parsec")

    def test_find_display_unit(self):
        assert find_display_unit("ft-in") == DisplayUnit.FT_IN
        assert find_display_unit("cm") == DisplayUnit.CM
        assert find_display_unit("furlongs") == DisplayUnit.CM


class TestSelectUnit:
    @pytest.mark.parametrize(
        "magnitude, expected",
        [
            (1e-7, UnitSystem.NANOMETER),
            (5e-6, UnitSystem.MICROMETER),
            (2e-5, UnitSystem.MICROMETER),
            (0.005, UnitSystem.MILLIMETER),
            (0.05, UnitSystem.MILLIMETER),
            (0.25, UnitSystem.CENTIMETER),
            (1.83, UnitSystem.CENTIMETER),
            (9.99, UnitSystem.CENTIMETER),
            (10.01, UnitSystem.METER),
            (330.0, UnitSystem.METER),
            (5000.0, UnitSystem.KILOMETER),
            (1e7, UnitSystem.KILOMETER),
        ],
    )
    def test_metric_bands(self, magnitude, expected):
        assert select_unit(magnitude) == expected

    def test_tiny_value_falls_back_to_band_unit(self):
        assert select_unit(1e-12) == UnitSystem.NANOMETER

    def test_negative_uses_magnitude(self):
        assert select_unit(-1.83) == UnitSystem.CENTIMETER

    def test_zero_and_invalid_use_smallest_unit(self):
        assert select_unit(0) == UnitSystem.NANOMETER
        assert select_unit(math.nan) == UnitSystem.NANOMETER
        assert select_unit(math.inf) == UnitSystem.NANOMETER
        assert select_unit(0, prefer_metric=False) == UnitSystem.INCH

    @pytest.mark.parametrize(
        "magnitude, expected",
        [
            (0.01, UnitSystem.INCH),
            (1.0, UnitSystem.FOOT),
            (300.0, UnitSystem.FOOT),
            (500.0, UnitSystem.MILE),
        ],
    )
    def test_imperial_tiers(self, magnitude, expected):
        assert select_unit(magnitude, prefer_metric=False) == expected

    def test_metric_selection_is_monotonic(self):
        """Larger magnitudes never pick a finer unit."""
        magnitudes = [10 ** (e / 10) for e in range(-120, 81)]
        factors = [select_unit(m).per_meter for m in magnitudes]
        assert all(later <= earlier for earlier, later in zip(factors, factors[1:]))
