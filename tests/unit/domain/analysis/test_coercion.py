"""Unit tests for reply scalar coercion."""

import pytest

from iscale.domain.analysis.coercion import (
    coerce_decimal_string,
    coerce_float,
    coerce_int,
    coerce_text,
    format_decimal,
)


class TestDecimalString:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (150, "150"),
            (150.0, "150"),
            (2.5, "2.5"),
            ("150", "150"),
            (" 0.75 ", "0.75"),
            ("about 3", "about 3"),
        ],
    )
    def test_accepts_numbers_and_strings(self, value, expected) -> None:
        assert coerce_decimal_string(value) == expected

    @pytest.mark.parametrize("value", [None, True, "", "   ", [], {}, float("nan")])
    def test_rejects_other_values(self, value) -> None:
        assert coerce_decimal_string(value) is None

    def test_format_decimal(self) -> None:
        assert format_decimal(3) == "3"
        assert format_decimal(3.0) == "3"
        assert format_decimal(0.1) == "0.1"


class TestInt:
    def test_native_and_truncated(self) -> None:
        assert coerce_int(200, default=0) == 200
        assert coerce_int(12.9, default=0) == 12

    def test_numeric_strings(self) -> None:
        assert coerce_int("150", default=0) == 150
        assert coerce_int(" 42.7 ", default=0) == 42

    def test_default_for_garbage(self) -> None:
        assert coerce_int("many", default=1) == 1
        assert coerce_int(None, default=1) == 1
        assert coerce_int(True, default=1) == 1


class TestFloatAndText:
    def test_float(self) -> None:
        assert coerce_float(12, default=0.0) == 12.0
        assert coerce_float("4.5", default=0.0) == 4.5
        assert coerce_float("n/a", default=0.0) == 0.0
        assert coerce_float(False, default=0.0) == 0.0

    def test_text(self) -> None:
        assert coerce_text("  apple ") == "apple"
        assert coerce_text(5) is None
