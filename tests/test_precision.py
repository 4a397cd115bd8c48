"""Tests for precision-aware arithmetic."""

import math

from sizecompare.core.precision import Precision, to_exponential, to_fixed


class TestPrecision:
    def test_hides_float_noise(self):
        """Chained products read back without last-bit noise."""
        assert Precision(1e-7).multiply(1e9).to_number() == 100.0
        assert Precision(0.1).add(0.2).to_number() == 0.3

    def test_raw_keeps_unrounded_value(self):
        assert Precision(0.1).add(0.2).raw == 0.1 + 0.2

    def test_divide_by_zero(self):
        assert Precision(5).divide(0).to_number() == math.inf
        assert Precision(-5).divide(0).to_number() == -math.inf
        assert math.isnan(Precision(0).divide(0).to_number())

    def test_subtract(self):
        assert Precision(1.0).subtract(0.9).to_number() == 0.1

    def test_from_value_copies_precision(self):
        p = Precision(2.5, precision=6)
        assert Precision.from_value(p).precision == 6
        assert Precision.from_value(p, precision=3).precision == 3

    def test_operands_may_be_precision(self):
        assert Precision(3).multiply(Precision(4)).to_number() == 12.0

    def test_equality_and_hash(self):
        a = Precision(0.1).add(0.2)
        assert a == Precision(0.3)
        assert a == 0.3
        assert hash(a) == hash(Precision(0.3))

    def test_string_forms(self):
        assert Precision(2.5).to_fixed(2) == "2.50"
        assert Precision(12346).to_exponential(3) == "1.235e+04"
        assert float(Precision(7)) == 7.0

    def test_is_finite(self):
        assert Precision(1).is_finite()
        assert not Precision(1).divide(0).is_finite()


class TestStringRounding:
    def test_fixed_rounds_ties_up(self):
        assert to_fixed(0.25, 1) == "0.3"
        assert to_fixed(2.5, 0) == "3"
        assert to_fixed(-0.25, 1) == "-0.3"

    def test_fixed_uses_exact_binary_value(self):
        # 1.005 is stored just below the tie
        assert to_fixed(1.005, 2) == "1.00"

    def test_exponential_rounds_ties_up(self):
        assert to_exponential(1234.5, 3) == "1.235e+03"
        assert to_exponential(0.0625, 1) == "6.3e-02"

    def test_exponential_carry(self):
        assert to_exponential(9.99951, 3) == "1.000e+01"

    def test_zero_and_huge(self):
        assert to_exponential(0, 3) == "0.000e+00"
        assert to_fixed(1e300, 1).endswith(".0")
