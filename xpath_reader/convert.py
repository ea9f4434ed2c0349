"""
Conversion of XPath results into Python values.

Every supported target type has exactly one converter in a registry,
keyed by the type itself. A converter receives one matched item, which
is either an XPath scalar (`str`, `float`, `bool`) or a node from a
node-set, and returns the converted value or raises `ValueError`.

Structured types do not need a converter: a class implementing the
`FromXml` protocol reads itself from a reader anchored at the matched
node, see `xpath_reader.reader.Reader`.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Protocol, TypeVar, runtime_checkable

from lxml import etree

from xpath_reader.exc import ConversionError
from xpath_reader.helpers.casting import ensure_date, ensure_datetime

if TYPE_CHECKING:
    from xpath_reader.reader import Reader

T = TypeVar("T")

Converter = Callable[[Any], Any]

_REGISTRY: dict[type, Converter] = {}

_INT_RE = re.compile(r"^[+-]?[0-9]+$")
_NUMBER_RE = re.compile(
    r"^[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$"
    r"|^[+-]?(?:inf|infinity|nan)$",
    re.IGNORECASE,
)
_TRUE = ("true", "1")
_FALSE = ("false", "0")


@runtime_checkable
class FromXml(Protocol):
    """A type that reads itself from an anchored reader.

    Example:
        ```python
        class Book:
            def __init__(self, title, tags):
                self.title = title
                self.tags = tags

            @classmethod
            def from_xml(cls, reader):
                return cls(
                    reader.read("@title"),
                    reader.read_vec("tags/tag/@name"),
                )

        books = reader.read_vec("//book", Book)
        ```
    """

    @classmethod
    def from_xml(cls, reader: Reader) -> Any: ...


def is_from_xml(target: Any) -> bool:
    return isinstance(target, type) and issubclass(target, FromXml)


def register(target: type, replace: bool = False):
    """Decorator to register the converter for a target type.

    Raises ValueError if the type already has a converter and `replace`
    is not set.

    Example:
        @register(Fraction)
        def to_fraction(value) -> Fraction:
            return Fraction(string_value(value).strip())
    """

    def decorator(func: Converter) -> Converter:
        if target in _REGISTRY and not replace:
            raise ValueError(f"A converter for {target!r} is already registered.")
        _REGISTRY[target] = func
        return func

    return decorator


def get_converter(target: type) -> Converter | None:
    return _REGISTRY.get(target)


def convert_value(value: Any, target: type[T], xpath: str | None = None) -> T:
    """Convert one matched item into `target`.

    Raises:
        ConversionError: If no converter exists for `target` or the
            converter rejects the value.
    """
    converter = get_converter(target)
    if converter is None:
        raise ConversionError(f"No converter registered for {target!r}", value, target)
    try:
        return converter(value)
    except ConversionError:
        raise
    except (ValueError, TypeError, ArithmeticError) as e:
        where = f" at {xpath}" if xpath else ""
        raise ConversionError(
            f"Cannot convert {value!r} to {target.__name__}{where}: {e}",
            value,
            target,
        ) from e


def format_number(value: float) -> str:
    """Render a number the way XPath's string() does."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer():
        return str(int(value))
    return format(Decimal(repr(value)), "f")


def string_value(value: Any) -> str:
    """Return the XPath string value of a matched item."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, str):
        # attribute values and text nodes come back as smart strings
        return str(value)
    if isinstance(value, tuple):
        # namespace nodes: (prefix, uri)
        return value[1]
    if isinstance(value, (etree._Comment, etree._ProcessingInstruction)):
        return value.text or ""
    if isinstance(value, (etree._Element, etree._ElementTree)):
        return str(value.xpath("string()"))
    raise TypeError(f"Not an XPath result: {value!r}")


@register(str)
def to_str(value: Any) -> str:
    return string_value(value)


@register(int)
def to_int(value: Any) -> int:
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError("not an integral number")
        return int(value)
    text = string_value(value).strip()
    if not _INT_RE.match(text):
        raise ValueError("not an integer")
    return int(text)


def _number_text(value: Any) -> str:
    text = string_value(value).strip()
    if not _NUMBER_RE.match(text):
        raise ValueError("not a number")
    return text


@register(float)
def to_float(value: Any) -> float:
    if isinstance(value, float):
        return value
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    return float(_number_text(value))


@register(bool)
def to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = string_value(value).strip()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError("expected one of true, false, 1, 0")


@register(Decimal)
def to_decimal(value: Any) -> Decimal:
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    return Decimal(_number_text(value))


@register(datetime)
def to_datetime(value: Any) -> datetime:
    parsed = ensure_datetime(string_value(value))
    if parsed is None:
        raise ValueError("not a date and time")
    return parsed


@register(date)
def to_date(value: Any) -> date:
    parsed = ensure_date(string_value(value))
    if parsed is None:
        raise ValueError("not a date")
    return parsed


@register(etree._Element)
def to_element(value: Any) -> etree._Element:
    if not isinstance(value, etree._Element):
        raise TypeError("not an element node")
    return value
