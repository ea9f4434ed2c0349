"""YAML loading for context files, with !include support.

Namespace maps are often shared between several context files, so a
file may pull another one in with the `!include` directive.

Example:
    ```yaml
    # context.yml
    namespaces: !include namespaces.yml
    variables:
      lang: en

    # namespaces.yml
    dc: http://purl.org/dc/elements/1.1/
    atom: http://www.w3.org/2005/Atom
    ```
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Any

import yaml

from xpath_reader.exc import ConfigurationError


class IncludeLoader(yaml.SafeLoader):
    """YAML Loader resolving !include relative to the including file."""

    def __init__(self, stream: IO) -> None:
        try:
            self._root = Path(stream.name).parent
        except AttributeError:
            self._root = Path.cwd()
        super().__init__(stream)


def _construct_include(loader: IncludeLoader, node: yaml.Node) -> Any:
    filename = (loader._root / loader.construct_scalar(node)).resolve()
    with open(filename, encoding="utf-8") as f:
        if filename.suffix == ".json":
            return json.load(f)
        return yaml.load(f, IncludeLoader)


yaml.add_constructor("!include", _construct_include, IncludeLoader)


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML mapping with !include support.

    Args:
        path: Path to the YAML file.

    Returns:
        The parsed mapping. An empty file yields an empty dict.

    Raises:
        ConfigurationError: If the file does not hold a mapping.
    """
    with open(path, encoding="utf-8") as fh:
        data = yaml.load(fh, IncludeLoader)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Not a mapping: {path}")
    return data
