import math
from datetime import date, datetime
from decimal import Decimal
from fractions import Fraction

import pytest
from lxml import etree

from xpath_reader import convert
from xpath_reader.convert import (
    convert_value,
    format_number,
    is_from_xml,
    register,
    string_value,
)
from xpath_reader.exc import ConversionError


class TestStringValue:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (42.0, "42"),
            (-1.5, "-1.5"),
            (-0.0, "0"),
            (1e-07, "0.0000001"),
            (float("nan"), "NaN"),
            (float("inf"), "Infinity"),
            (float("-inf"), "-Infinity"),
        ],
    )
    def test_format_number(self, value, expected):
        assert format_number(value) == expected

    def test_scalars(self):
        assert string_value(True) == "true"
        assert string_value(False) == "false"
        assert string_value("text") == "text"

    def test_nodes(self):
        root = etree.fromstring("<p>Hello <b>World</b><!--note--></p>")
        assert string_value(root) == "Hello World"
        assert string_value(root[1]) == "note"
        assert string_value(("x", "urn:x")) == "urn:x"

    def test_unsupported(self):
        with pytest.raises(TypeError):
            string_value(object())


class TestConverters:
    def test_int(self):
        assert convert_value(" 42 ", int) == 42
        assert convert_value("-7", int) == -7
        assert convert_value(3.0, int) == 3
        for value in ("4.2", "", "1_000", 3.5, True):
            with pytest.raises(ConversionError):
                convert_value(value, int)

    def test_float(self):
        assert convert_value("-23.85", float) == -23.85
        assert convert_value(2.5, float) == 2.5
        with pytest.raises(ConversionError):
            convert_value("abc", float)
        for value in ("1_000", "0x10", "1e", "--1", "1.5f"):
            with pytest.raises(ConversionError):
                convert_value(value, float)
        assert convert_value(" 1.5e3 ", float) == 1500.0
        assert convert_value(".5", float) == 0.5
        assert math.isnan(convert_value("NaN", float))
        assert convert_value("-Infinity", float) == float("-inf")
        with pytest.raises(ConversionError):
            convert_value(True, float)

    def test_bool(self):
        assert convert_value("true", bool) is True
        assert convert_value("0", bool) is False
        assert convert_value(1.0, bool) is True
        with pytest.raises(ConversionError):
            convert_value("True", bool)

    def test_decimal(self):
        assert convert_value("9.99", Decimal) == Decimal("9.99")
        with pytest.raises(ConversionError):
            convert_value("nine", Decimal)
        with pytest.raises(ConversionError):
            convert_value("1_000", Decimal)
        assert convert_value("-1.5E2", Decimal) == Decimal("-150")

    def test_dates(self):
        assert convert_value("2024-01-15", date) == date(2024, 1, 15)
        assert convert_value("January 15, 2024", date) == date(2024, 1, 15)
        assert convert_value("2024-01-15T10:30:00", datetime) == datetime(
            2024, 1, 15, 10, 30
        )
        with pytest.raises(ConversionError):
            convert_value("", date)

    @pytest.mark.parametrize("value", ["42", "1", "March", "March 2024", "15 March"])
    def test_partial_dates(self, value):
        with pytest.raises(ConversionError):
            convert_value(value, date)
        with pytest.raises(ConversionError):
            convert_value(value, datetime)

    def test_element(self):
        root = etree.fromstring("<root/>")
        assert convert_value(root, etree._Element) is root
        with pytest.raises(ConversionError):
            convert_value("root", etree._Element)

    def test_error_attributes(self):
        with pytest.raises(ConversionError) as exc:
            convert_value("abc", int, "//@pages")
        assert exc.value.value == "abc"
        assert exc.value.target is int
        assert "//@pages" in str(exc.value)

    def test_unregistered(self):
        with pytest.raises(ConversionError):
            convert_value("1+2j", complex)


class TestRegistry:
    def test_register_custom(self):
        @register(Fraction)
        def to_fraction(value):
            return Fraction(string_value(value).strip())

        try:
            assert convert_value("3/4", Fraction) == Fraction(3, 4)
            with pytest.raises(ConversionError):
                convert_value("three quarters", Fraction)
            with pytest.raises(ValueError):
                register(Fraction)(to_fraction)
            register(Fraction, replace=True)(to_fraction)
        finally:
            convert._REGISTRY.pop(Fraction, None)

    def test_is_from_xml(self):
        class Thing:
            @classmethod
            def from_xml(cls, reader):
                return cls()

        assert is_from_xml(Thing)
        assert not is_from_xml(str)
        assert not is_from_xml(Thing())
