"""Typed XPath reads over lxml documents."""

from xpath_reader.context import Context, load_context
from xpath_reader.convert import FromXml, register
from xpath_reader.exc import (
    ConfigurationError,
    ConversionError,
    EvaluationError,
    MalformedXml,
    NotFound,
    QuerySyntaxError,
    TooManyResults,
    XPathReaderException,
)
from xpath_reader.expression import Expression, parse_expression
from xpath_reader.reader import Reader

__all__ = [
    "ConfigurationError",
    "Context",
    "ConversionError",
    "EvaluationError",
    "Expression",
    "FromXml",
    "MalformedXml",
    "NotFound",
    "QuerySyntaxError",
    "Reader",
    "TooManyResults",
    "XPathReaderException",
    "load_context",
    "parse_expression",
    "register",
]
