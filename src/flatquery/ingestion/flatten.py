"""Structured markup flattening.

Turns an XML document into the generic tree shape shared with JSON-like
data (attributes under ``@name``, text under ``#text``, repeated siblings as
lists), finds the repeated-record axis and flattens each record into a
single-level mapping.

The record-axis heuristic is best effort: documents with several plausible
repeating elements resolve to whichever list is found first.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Union

logger = logging.getLogger(__name__)

ATTRIBUTE_PREFIX = "@"
TEXT_KEY = "#text"

Tree = Union[Dict[str, Any], List[Any], str]


def _local_name(tag: str) -> str:
    # "{namespace}name" -> "name"
    return tag.rsplit("}", 1)[-1] if tag.startswith("{") else tag


def element_to_tree(elem: ET.Element) -> Tree:
    """Convert one element into a mapping, or a plain string for text-only leaves."""
    node: Dict[str, Any] = {}
    for name, value in elem.attrib.items():
        node[f"{ATTRIBUTE_PREFIX}{_local_name(name)}"] = value

    for child in elem:
        key = _local_name(child.tag)
        value = element_to_tree(child)
        if key in node:
            existing = node[key]
            if isinstance(existing, list):
                existing.append(value)
            else:
                node[key] = [existing, value]
        else:
            node[key] = value

    text = (elem.text or "").strip()
    if not node:
        return text
    if text:
        node[TEXT_KEY] = text
    return node


def parse_markup(data: Union[str, bytes]) -> Dict[str, Any]:
    """Parse an XML document into ``{root_tag: tree}``."""
    root = ET.fromstring(data)
    return {_local_name(root.tag): element_to_tree(root)}


def find_record_axis(tree: Any) -> List[Any]:
    """Locate the list of records in a parsed document.

    1. The root mapping's first list-valued child.
    2. Else the first list-valued child of the root's mapping children.
    3. Else the whole document as a single record.

    A non-mapping root has no records.
    """
    if not isinstance(tree, dict):
        return []
    for value in tree.values():
        if isinstance(value, list):
            return value
    for value in tree.values():
        if isinstance(value, dict):
            for inner in value.values():
                if isinstance(inner, list):
                    return inner
    return [tree]


def flatten_record(node: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flatten nested mappings by joining key paths with underscores.

    Lists are terminal values and are never descended into.

    Examples:
        >>> flatten_record({"a": {"b": 1, "c": [1, 2]}, "d": "x"})
        {'a_b': 1, 'a_c': [1, 2], 'd': 'x'}
    """
    out: Dict[str, Any] = {}
    for key, value in node.items():
        path = f"{prefix}_{key}" if prefix else str(key)
        if isinstance(value, dict):
            out.update(flatten_record(value, path))
        else:
            out[path] = value
    return out


def collect_columns(records: List[Dict[str, Any]]) -> List[str]:
    """Union of record keys in first-seen order."""
    seen: Dict[str, None] = {}
    for rec in records:
        for key in rec:
            seen.setdefault(key, None)
    return list(seen)


__all__ = [
    "ATTRIBUTE_PREFIX",
    "TEXT_KEY",
    "element_to_tree",
    "parse_markup",
    "find_record_axis",
    "flatten_record",
    "collect_columns",
]
