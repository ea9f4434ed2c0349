from typing import Any


class XPathReaderException(Exception):
    """Base exception class."""

    pass


class ConfigurationError(XPathReaderException):
    """A context or settings option is not valid."""


class MalformedXml(XPathReaderException):
    """The XML source could not be parsed."""

    pass


class QuerySyntaxError(XPathReaderException):
    """An XPath expression could not be compiled."""

    def __init__(self, message: str, xpath: str | None = None):
        self.xpath = xpath
        super().__init__(message)


class EvaluationError(XPathReaderException):
    """An XPath expression failed during evaluation."""

    def __init__(self, message: str, xpath: str | None = None):
        self.xpath = xpath
        super().__init__(message)


class NotFound(XPathReaderException):
    """No value matched where exactly one was required."""

    def __init__(self, xpath: str):
        self.xpath = xpath
        super().__init__("No value found for: %s" % xpath)


class TooManyResults(XPathReaderException):
    """More than one value matched where at most one was allowed."""

    def __init__(self, xpath: str, count: int):
        self.xpath = xpath
        self.count = count
        super().__init__("Expected one value, found %d for: %s" % (count, xpath))


class ConversionError(XPathReaderException):
    """A matched value could not be converted into the requested type."""

    def __init__(self, message: str, value: Any = None, target: Any = None):
        self.value = value
        self.target = target
        super().__init__(message)
