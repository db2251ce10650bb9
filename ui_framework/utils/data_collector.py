"""
================================================================================
Test Data Collector
================================================================================

Loads JSON or YAML test-data files and queries them with JSONPath.

Usage:
    users = DataCollector("data/users.yaml")
    admin = users.get_user_data(tag="admin")
    names = users.query_all("$.users[*].name")

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml
from jsonpath_ng import parse as jsonpath_parse
from loguru import logger

PathLike = Union[str, Path]

_YAML_SUFFIXES = (".yaml", ".yml")


def query_values(data: Any, expression: str) -> List[Any]:
    """All values matched by a JSONPath expression."""
    return [match.value for match in jsonpath_parse(expression).find(data)]


def query_first(data: Any, expression: str, default: Any = None) -> Any:
    """First value matched by a JSONPath expression, or ``default``."""
    matches = query_values(data, expression)
    return matches[0] if matches else default


def read_data(path: PathLike) -> Any:
    """
    Read a JSON or YAML file, chosen by extension.

    Raises:
        FileNotFoundError: The file does not exist
        ValueError: The content cannot be parsed
    """
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        try:
            if path.suffix.lower() in _YAML_SUFFIXES:
                return yaml.safe_load(f)
            return json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            logger.error(f"Error in read_data from {path}: {e}")
            raise ValueError(f"Cannot parse data file {path}: {e}") from e


def write_data(path: PathLike, data: Any) -> None:
    path = Path(path)
    with open(path, "w", encoding="utf-8") as f:
        if path.suffix.lower() in _YAML_SUFFIXES:
            yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
        else:
            json.dump(data, f, indent=4, ensure_ascii=False)


def get_data(path: PathLike, expression: str) -> List[Any]:
    """Read ``path`` and return every value matched by ``expression``."""
    return query_values(read_data(path), expression)


def set_data(path: PathLike, expression: str, value: Any) -> None:
    """Set every match of ``expression`` in the file at ``path`` to ``value``."""
    data = read_data(path)
    jsonpath_parse(expression).update(data, value)
    write_data(path, data)


class DataCollector:
    """A loaded test-data file with JSONPath queries."""

    def __init__(self, path: PathLike):
        self._path = Path(path)
        self._data = read_data(self._path)

    def data(self) -> Any:
        return self._data

    def query_all(self, expression: str) -> List[Any]:
        return query_values(self._data, expression)

    def query_first(self, expression: str) -> Any:
        return query_first(self._data, expression)

    def set_first(self, expression: str, value: Any) -> None:
        """Update the first match of ``expression`` and write the file back."""
        matches = jsonpath_parse(expression).find(self._data)
        if not matches:
            raise KeyError(f"No match for {expression} in {self._path}")
        matches[0].full_path.update(self._data, value)
        write_data(self._path, self._data)

    def get_user_data(self, username: Optional[str] = None, tag: Optional[str] = None) -> Any:
        """First record anywhere in the file whose ``username`` or ``tag`` matches."""
        if username is not None:
            field, wanted = "username", username
        elif tag is not None:
            field, wanted = "tag", tag
        else:
            raise ValueError("Either username or tag is required")

        pending = [self._data]
        while pending:
            node = pending.pop(0)
            if isinstance(node, dict):
                if node.get(field) == wanted:
                    return node
                pending.extend(node.values())
            elif isinstance(node, list):
                pending.extend(node)
        return None


__all__ = [
    "query_values",
    "query_first",
    "read_data",
    "write_data",
    "get_data",
    "set_data",
    "DataCollector",
]
