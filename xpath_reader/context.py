"""Evaluation context: namespaces, variables and extension functions.

A `Context` is handed to every `Reader` explicitly. It is mutable while it
is being set up and treated as read-only by readers, which compile their
expressions against it.

Example:
    ```python
    context = Context()
    context.set_namespace("atom", "http://www.w3.org/2005/Atom")
    context.set_variable("lang", "en")
    reader = Reader.from_string(xml, context)
    reader.read("//atom:entry[@xml:lang=$lang]/atom:title")
    ```

Context files are YAML documents of the same shape as `ContextConfig`:
    ```yaml
    namespaces:
      atom: http://www.w3.org/2005/Atom
    variables:
      lang: en
    ```
"""

from __future__ import annotations

import re
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Mapping

from anystore.logging import get_logger
from lxml import etree
from pydantic import BaseModel, Field, ValidationError

from xpath_reader.exc import ConfigurationError, QuerySyntaxError
from xpath_reader.helpers.yaml import load_yaml

log = get_logger(__name__)

# XML namespace prefixes are NCNames
_PREFIX_RE = re.compile(r"^[A-Za-z_][\w.\-]*$")

# Compiled expressions kept per context before the cache is reset
COMPILE_CACHE_SIZE = 256

ExtensionFunc = Callable[..., Any]
VariableValue = str | float | bool


class ContextConfig(BaseModel):
    """Serializable part of a context, as stored in context files."""

    model_config = {"extra": "forbid"}

    namespaces: dict[str, str] = Field(default_factory=dict)
    variables: dict[str, VariableValue] = Field(default_factory=dict)


class Context:
    """Namespace bindings, variables and functions for XPath evaluation.

    Binding a prefix that is already bound replaces the earlier URI.
    """

    def __init__(
        self,
        namespaces: Mapping[str, str] | None = None,
        variables: Mapping[str, Any] | None = None,
    ):
        self._namespaces: dict[str, str] = {}
        self._variables: dict[str, Any] = {}
        self._functions: dict[tuple[str | None, str], ExtensionFunc] = {}
        self._compiled: dict[str, etree.XPath] = {}
        for prefix, uri in (namespaces or {}).items():
            self.set_namespace(prefix, uri)
        for name, value in (variables or {}).items():
            self.set_variable(name, value)

    @property
    def namespaces(self) -> Mapping[str, str]:
        return MappingProxyType(self._namespaces)

    @property
    def variables(self) -> Mapping[str, Any]:
        return MappingProxyType(self._variables)

    @property
    def functions(self) -> Mapping[tuple[str | None, str], ExtensionFunc]:
        return MappingProxyType(self._functions)

    def set_namespace(self, prefix: str, uri: str) -> None:
        """Bind `prefix` to the namespace `uri`.

        Raises:
            ConfigurationError: If the prefix is empty or not a valid NCName.
        """
        if not prefix or not _PREFIX_RE.match(prefix):
            raise ConfigurationError(f"Invalid namespace prefix: {prefix!r}")
        if not uri:
            raise ConfigurationError(f"Empty namespace URI for prefix: {prefix}")
        previous = self._namespaces.get(prefix)
        if previous is not None and previous != uri:
            log.debug("Rebinding namespace prefix", prefix=prefix, old=previous, new=uri)
        self._namespaces[prefix] = uri
        self._compiled.clear()

    def set_variable(self, name: str, value: Any) -> None:
        """Set the value of `$name` for all evaluations in this context."""
        if not name:
            raise ConfigurationError("Empty variable name")
        self._variables[name] = value

    def set_function(
        self, name: str, func: ExtensionFunc, namespace: str | None = None
    ) -> None:
        """Register an XPath extension function.

        The function is called as `func(context, *args)` where `context` is
        lxml's evaluation context, as documented for lxml extensions.
        """
        if not name:
            raise ConfigurationError("Empty function name")
        self._functions[(namespace, name)] = func
        self._compiled.clear()

    def compile(self, path: str) -> etree.XPath:
        """Compile `path` against the bindings of this context.

        Raises:
            QuerySyntaxError: If the expression is empty or invalid.
        """
        compiled = self._compiled.get(path)
        if compiled is not None:
            return compiled
        if not path or not path.strip():
            raise QuerySyntaxError("Empty XPath expression", path)
        try:
            compiled = etree.XPath(
                path,
                namespaces=dict(self._namespaces) or None,
                extensions=dict(self._functions) or None,
            )
        except etree.XPathError as e:
            raise QuerySyntaxError(f"Invalid XPath expression: {path} ({e})", path) from e
        if len(self._compiled) >= COMPILE_CACHE_SIZE:
            self._compiled.clear()
        self._compiled[path] = compiled
        return compiled

    def copy(self) -> Context:
        context = Context(self._namespaces, self._variables)
        context._functions.update(self._functions)
        return context

    @classmethod
    def from_config(cls, data: Mapping[str, Any] | ContextConfig) -> Context:
        """Build a context from a mapping with `namespaces` and `variables`.

        Raises:
            ConfigurationError: If the mapping does not validate.
        """
        if not isinstance(data, ContextConfig):
            try:
                data = ContextConfig(**data)
            except (TypeError, ValidationError) as e:
                raise ConfigurationError(f"Invalid context configuration: {e}") from e
        return cls(data.namespaces, data.variables)

    def __repr__(self) -> str:
        return "<Context(namespaces=%r)>" % self._namespaces


def load_context(path: str | Path) -> Context:
    """Load a context from a YAML file.

    Example:
        >>> context = load_context("context.yml")
        >>> context.namespaces["atom"]
        'http://www.w3.org/2005/Atom'
    """
    log.debug("Loading context", path=str(path))
    return Context.from_config(load_yaml(path))
