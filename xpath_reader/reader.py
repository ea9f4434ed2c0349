"""XML document reader using XPath expressions.

A `Reader` either holds a complete document or is anchored at a node-set
(a "relative" reader). This matters in two places:

1) Relative expressions: with an anchor node-set, relative XPath
   expressions are evaluated against the first node of the node-set.
2) `FromXml` implementors receive a reader anchored at the node they
   are built from and can read their fields with relative expressions.

Example:
    ```python
    reader = Reader.from_string('<book name="Neuromancer"/>')
    reader.read("//@name")
    # 'Neuromancer'
    reader.read_option("//@publisher")
    # None
    ```
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Sequence, TypeVar

from anystore.logging import get_logger
from lxml import etree

from xpath_reader.context import Context
from xpath_reader.convert import convert_value, is_from_xml, string_value
from xpath_reader.core import get_default_context, get_settings
from xpath_reader.exc import EvaluationError, MalformedXml, NotFound, TooManyResults
from xpath_reader.expression import XPathLike, expression_path

log = get_logger(__name__)

T = TypeVar("T")


def _position(node: Any) -> tuple[Any, list[float]] | None:
    """Locate a node as (document root, child index path).

    Attribute and text results sort right after their element, tail text
    after the element's last descendant. Returns None for results that
    carry no position, such as namespace nodes.
    """
    suffix: list[float] = []
    if isinstance(node, str):
        getparent = getattr(node, "getparent", None)
        element = getparent() if getparent is not None else None
        if element is None:
            return None
        if getattr(node, "is_attribute", False):
            suffix = [-2]
        elif getattr(node, "is_tail", False):
            suffix = [math.inf]
        else:
            suffix = [-1]
        node = element
    if not isinstance(node, etree._Element):
        return None
    path: list[float] = []
    parent = node.getparent()
    while parent is not None:
        path.append(parent.index(node))
        node, parent = parent, parent.getparent()
    top = 0
    sibling = node.getprevious()
    while sibling is not None:
        top += 1
        sibling = sibling.getprevious()
    path.append(top)
    path.reverse()
    return node.getroottree().getroot(), path + suffix


def document_order(nodes: Sequence[Any]) -> list[Any]:
    """Sort nodes into document order.

    Nodes from different documents keep the order in which their
    documents first appear; unpositioned results leave the input as is.
    """
    positions = [_position(node) for node in nodes]
    if any(position is None for position in positions):
        return list(nodes)
    roots: list[Any] = []
    keys = []
    for root, path in positions:  # type: ignore[misc]
        for index, seen in enumerate(roots):
            if seen is root:
                break
        else:
            index = len(roots)
            roots.append(root)
        keys.append((index, path))
    order = sorted(range(len(keys)), key=lambda i: keys[i])
    return [nodes[i] for i in order]


def _make_parser(encoding: str | None = None) -> etree.XMLParser:
    settings = get_settings()
    return etree.XMLParser(
        encoding=encoding,
        resolve_entities=settings.resolve_entities,
        huge_tree=settings.huge_tree,
        remove_blank_text=settings.remove_blank_text,
        no_network=True,
    )


class Reader:
    """Typed XPath reads over an lxml document or node-set."""

    def __init__(
        self,
        context: Context | None = None,
        tree: etree._ElementTree | None = None,
        nodes: Sequence[Any] | None = None,
        empty_as_absent: bool | None = None,
    ):
        if tree is None and nodes is None:
            raise ValueError("A reader needs either a document tree or anchor nodes")
        self._context = context if context is not None else get_default_context()
        self._tree = tree
        self._nodes = document_order(nodes) if nodes is not None else None
        if empty_as_absent is None:
            empty_as_absent = get_settings().empty_as_absent
        self.empty_as_absent = empty_as_absent

    @classmethod
    def from_string(
        cls, xml: str | bytes, context: Context | None = None, **kwargs: Any
    ) -> Reader:
        """Parse an XML document from text or bytes.

        Text may carry an XML declaration; it is parsed as UTF-8 whatever
        encoding the declaration names.

        Raises:
            MalformedXml: If the document is empty or not well-formed.
        """
        if isinstance(xml, str):
            data = xml.encode("utf-8")
            parser = _make_parser("utf-8")
        else:
            data = xml
            parser = _make_parser()
        if not data.strip():
            raise MalformedXml("Empty XML document")
        try:
            root = etree.fromstring(data, parser)
        except etree.XMLSyntaxError as e:
            raise MalformedXml(f"Could not parse XML: {e}") from e
        log.debug("Parsed XML document", root=root.tag)
        return cls(context, tree=root.getroottree(), **kwargs)

    @classmethod
    def from_file(
        cls, path: str | Path, context: Context | None = None, **kwargs: Any
    ) -> Reader:
        """Parse an XML document from a file.

        Raises:
            MalformedXml: If the document is not well-formed.
            OSError: If the file cannot be read.
        """
        try:
            tree = etree.parse(str(path), _make_parser())
        except etree.XMLSyntaxError as e:
            raise MalformedXml(f"Could not parse XML file {path}: {e}") from e
        log.debug("Parsed XML file", path=str(path))
        return cls(context, tree=tree, **kwargs)

    @classmethod
    def from_tree(
        cls,
        tree: etree._ElementTree | etree._Element,
        context: Context | None = None,
        **kwargs: Any,
    ) -> Reader:
        """Wrap an already parsed document.

        An element stands for the whole document it belongs to; use
        `from_node` to anchor a reader at an element instead.
        """
        if isinstance(tree, etree._Element):
            tree = tree.getroottree()
        if not isinstance(tree, etree._ElementTree):
            raise TypeError(f"Not an lxml tree or element: {tree!r}")
        return cls(context, tree=tree, **kwargs)

    @classmethod
    def from_nodes(
        cls, nodes: Sequence[Any], context: Context | None = None, **kwargs: Any
    ) -> Reader:
        """Create a relative reader anchored at a node-set.

        The nodes are put into document order and relative expressions
        resolve against the first of them. The node-set
        may be empty; such a reader can still be used by `FromXml`
        implementors to cover the absence of a value.
        """
        return cls(context, nodes=nodes, **kwargs)

    @classmethod
    def from_node(cls, node: Any, context: Context | None = None, **kwargs: Any) -> Reader:
        return cls.from_nodes([node], context, **kwargs)

    @property
    def context(self) -> Context:
        return self._context

    @property
    def anchor_nodes(self) -> list[Any]:
        """The anchor node-set; the document root for document readers."""
        if self._nodes is None:
            return [self._tree.getroot()]
        return list(self._nodes)

    @property
    def anchor_node(self) -> Any | None:
        """The node relative expressions are evaluated against.

        For document readers this is the document tree itself, for
        relative readers the first anchor node, or None if there is none.
        """
        if self._nodes is None:
            return self._tree
        return self._nodes[0] if self._nodes else None

    def evaluate(self, xpath: XPathLike) -> Any:
        """Evaluate an expression and return lxml's raw result.

        Raises:
            QuerySyntaxError: If the expression is invalid.
            EvaluationError: If evaluation fails.
        """
        path = expression_path(xpath)
        compiled = self._context.compile(path)
        anchor = self.anchor_node
        if anchor is None:
            raise EvaluationError(f"Anchor node not found when evaluating: {path}", path)
        if not isinstance(anchor, (etree._Element, etree._ElementTree)):
            raise EvaluationError(
                f"Cannot evaluate {path} relative to a non-element node: {anchor!r}",
                path,
            )
        try:
            result = compiled(anchor, **self._context.variables)
        except etree.XPathError as e:
            raise EvaluationError(f"Failed to evaluate {path}: {e}", path) from e
        log.debug("Evaluated XPath", xpath=path, result=type(result).__name__)
        return result

    def with_nodeset_eval(self, xpath: XPathLike) -> Reader:
        """Create a relative reader anchored at the node-set `xpath` selects.

        The reader shares the context of this one.

        Raises:
            EvaluationError: If the expression does not yield a node-set.
        """
        result = self.evaluate(xpath)
        if not isinstance(result, list):
            raise EvaluationError(
                f"XPath expression did not evaluate to a node-set: {expression_path(xpath)}",
                expression_path(xpath),
            )
        return self._anchored(result)

    def read(self, xpath: XPathLike, into: type[T] = str) -> T:  # type: ignore[assignment]
        """Read exactly one value and convert it into `into`.

        Raises:
            NotFound: If nothing matches.
            TooManyResults: If more than one value matches.
            ConversionError: If the value cannot be converted.
        """
        path = expression_path(xpath)
        matches = self._matches(xpath)
        if not matches:
            raise NotFound(path)
        if len(matches) > 1:
            raise TooManyResults(path, len(matches))
        return self._convert(matches[0], into, path)

    def read_option(
        self,
        xpath: XPathLike,
        into: type[T] = str,  # type: ignore[assignment]
        empty_as_absent: bool | None = None,
    ) -> T | None:
        """Read at most one value; None if nothing matches.

        With `empty_as_absent`, a match whose string value is empty is
        also returned as None.

        Raises:
            TooManyResults: If more than one value matches.
            ConversionError: If the value cannot be converted.
        """
        path = expression_path(xpath)
        matches = self._matches(xpath)
        if not matches:
            return None
        if len(matches) > 1:
            raise TooManyResults(path, len(matches))
        if empty_as_absent is None:
            empty_as_absent = self.empty_as_absent
        if empty_as_absent and string_value(matches[0]) == "":
            return None
        return self._convert(matches[0], into, path)

    def read_vec(self, xpath: XPathLike, into: type[T] = str) -> list[T]:  # type: ignore[assignment]
        """Read all matching values in document order.

        Raises:
            ConversionError: If any value cannot be converted; no partial
                result is returned.
        """
        path = expression_path(xpath)
        return [self._convert(match, into, path) for match in self._matches(xpath)]

    def _matches(self, xpath: XPathLike) -> list[Any]:
        result = self.evaluate(xpath)
        if isinstance(result, list):
            return result
        # string, number and boolean results are a single value
        return [result]

    def _anchored(self, nodes: Sequence[Any]) -> Reader:
        return Reader(self._context, nodes=nodes, empty_as_absent=self.empty_as_absent)

    def _convert(self, value: Any, into: type[T], path: str) -> T:
        if is_from_xml(into):
            return into.from_xml(self._anchored([value]))  # type: ignore[attr-defined]
        return convert_value(value, into, path)

    def __repr__(self) -> str:
        if self._nodes is None:
            return "<Reader(document=%r)>" % self._tree.getroot().tag
        return "<Reader(nodes=%d)>" % len(self._nodes)
