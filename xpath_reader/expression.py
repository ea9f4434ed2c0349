"""XPath expressions that can be passed to readers.

Readers accept plain strings as expressions. For an expression that is
evaluated many times, `parse_expression` validates it once up front and
returns an `Expression`; the compiled form is cached by the context.
"""

from __future__ import annotations

from typing import Union

from lxml import etree

from xpath_reader.context import Context


class Expression:
    """A validated XPath expression."""

    def __init__(self, path: str):
        self.path = path

    def compile(self, context: Context) -> etree.XPath:
        return context.compile(self.path)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Expression):
            return self.path == other.path
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.path)

    def __str__(self) -> str:
        return self.path

    def __repr__(self) -> str:
        return "<Expression(%r)>" % self.path


XPathLike = Union[str, Expression]


def parse_expression(path: str, context: Context | None = None) -> Expression:
    """Validate an XPath expression in advance.

    Args:
        path: The XPath expression.
        context: Context holding the namespaces and functions the
            expression refers to. Compiling against it warms its cache.

    Raises:
        QuerySyntaxError: If the expression is empty or invalid.

    Example:
        >>> title = parse_expression("//book/@title")
        >>> [reader.read(title) for reader in readers]
    """
    expression = Expression(path)
    expression.compile(context or Context())
    return expression


def expression_path(xpath: XPathLike) -> str:
    if isinstance(xpath, Expression):
        return xpath.path
    return xpath
