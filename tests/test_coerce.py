"""Tests for tether.reactive.coerce — inbound value conversion."""

from __future__ import annotations

from decimal import Decimal

import pytest

from tether._errors import CoercionError
from tether.reactive.coerce import (
    coerce,
    is_integer_shaped,
    parse_value,
    register_parser,
    unregister_parser,
)


class TestFloatRule:
    """Integer-shaped raw values for float fields convert numerically."""

    def test_int_to_float(self) -> None:
        result = coerce(5, float)
        assert result == 5.0
        assert isinstance(result, float)

    def test_float_passthrough(self) -> None:
        assert coerce(5.0, float) == 5.0

    def test_bool_is_not_integer_shaped(self) -> None:
        assert not is_integer_shaped(True)
        with pytest.raises(CoercionError):
            coerce(True, float)


class TestGenericParse:
    """parse_value — strings, pass-through, registered parsers."""

    @pytest.mark.parametrize(
        ("declared", "raw", "expected"),
        [
            (int, "12", 12),
            (int, " 7 ", 7),
            (float, "2.5", 2.5),
            (bool, "true", True),
            (bool, "No", False),
            (Decimal, "1.10", Decimal("1.10")),
            (str, "abc", "abc"),
        ],
    )
    def test_string_parsing(self, declared: type, raw: str, expected: object) -> None:
        assert parse_value(declared, raw) == expected

    def test_same_type_passes_through(self) -> None:
        items = [1, 2]
        assert parse_value(list, items) is items

    def test_none_declared_accepts_anything(self) -> None:
        assert parse_value(type(None), "x") == "x"

    def test_non_numeric_string_for_int_fails(self) -> None:
        with pytest.raises(CoercionError, match="cannot parse 'abc' as int"):
            coerce("abc", int)

    def test_float_for_int_fails(self) -> None:
        with pytest.raises(CoercionError):
            coerce(5.5, int)

    @pytest.mark.parametrize("raw", ["on", "off", "maybe"])
    def test_unsupported_bool_literals_fail(self, raw: str) -> None:
        with pytest.raises(CoercionError):
            parse_value(bool, raw)

    @pytest.mark.parametrize(("raw", "expected"), [(2, Decimal("2")), (2.25, Decimal("2.25"))])
    def test_json_number_for_decimal(self, raw: object, expected: Decimal) -> None:
        assert coerce(raw, Decimal) == expected

    def test_bool_for_decimal_fails(self) -> None:
        with pytest.raises(CoercionError):
            coerce(True, Decimal)

    def test_bool_for_int_fails(self) -> None:
        with pytest.raises(CoercionError):
            coerce(True, int)

    def test_number_for_str_fails(self) -> None:
        with pytest.raises(CoercionError):
            coerce(5, str)

    def test_registered_parser(self) -> None:
        class Celsius(float):
            pass

        register_parser(Celsius, lambda raw: Celsius(float(raw)))
        try:
            assert isinstance(coerce("21.5", Celsius), Celsius)
            with pytest.raises(CoercionError):
                coerce("warm", Celsius)
        finally:
            unregister_parser(Celsius)
