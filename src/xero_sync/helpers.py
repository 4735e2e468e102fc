"""Encoding helpers shared by the model, request and response layers.

These functions are deterministic and free of network calls so they can be
unit-tested in isolation.

XML conventions follow the remote API:
- a list is written as a container node whose children are named by the
  singular of the container (`<Contacts><Contact>...</Contact></Contacts>`)
- when reading, children named as the singular of their parent collapse into
  a list, everything else becomes a mapping keyed by node name
"""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from datetime import date, datetime, timedelta, timezone
from typing import Any

_ES_SUFFIXES = ("s", "x", "z", "ch", "sh")
_VOWELS = "aeiou"

# `status="ERROR"` on batch elements; named like the JSON payloads name it.
STATUS_ATTRIBUTE_KEY = "StatusAttributeString"

_MS_DATE_RE = re.compile(r"^/Date\((-?\d+)([+-]\d{4})?\)/$")
_FRACTION_RE = re.compile(r"(\.\d{6})\d+")


def pluralize(word: str) -> str:
    """Return the plural form of a node name (`Contact` -> `Contacts`)."""

    if not word:
        return word
    lower = word.lower()
    if lower.endswith("y") and len(word) > 1 and lower[-2] not in _VOWELS:
        return word[:-1] + "ies"
    if lower.endswith(_ES_SUFFIXES):
        return word + "es"
    return word + "s"


def singularize(word: str) -> str:
    """Inverse of `pluralize` for the node names used by the API."""

    if not word:
        return word
    lower = word.lower()
    if lower.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if lower.endswith(("sses", "xes", "zes", "ches", "shes")):
        return word[:-2]
    if lower.endswith("s") and not lower.endswith("ss"):
        return word[:-1]
    return word


def _append_node(parent: ET.Element | None, name: str, value: Any) -> ET.Element:
    node = ET.Element(name) if parent is None else ET.SubElement(parent, name)

    if isinstance(value, Mapping):
        for key, child in value.items():
            if child is None:
                continue
            _append_node(node, str(key), child)
    elif isinstance(value, (list, tuple)):
        child_name = singularize(name)
        for item in value:
            _append_node(node, child_name, item)
    elif isinstance(value, bool):
        node.text = "true" if value else "false"
    elif value is not None:
        node.text = str(value)

    return node


def array_to_xml(data: Mapping[str, Any]) -> str:
    """Encode a single-rooted mapping, e.g. `{"Contact": {...}}`, as XML."""

    if len(data) != 1:
        raise ValueError("array_to_xml expects exactly one root node")
    ((root_name, value),) = data.items()
    return ET.tostring(_append_node(None, root_name, value), encoding="unicode")


def xml_to_array(node: ET.Element) -> Any:
    """Decode an XML node into mappings/lists/strings."""

    children = list(node)
    if not children:
        return (node.text or "").strip()

    singular = singularize(node.tag)
    if all(child.tag == singular for child in children) and singular != node.tag:
        return [xml_to_array(child) for child in children]

    out: dict[str, Any] = {}
    status = node.attrib.get("status")
    if status:
        out[STATUS_ATTRIBUTE_KEY] = status

    for child in children:
        value = xml_to_array(child)
        if child.tag in out:
            existing = out[child.tag]
            if not isinstance(existing, list):
                out[child.tag] = [existing]
            out[child.tag].append(value)
        else:
            out[child.tag] = value
    return out


def parse_xml(text: str) -> tuple[str, Any]:
    """Parse an XML document; returns (root tag, decoded root)."""

    root = ET.fromstring(text)
    return root.tag, xml_to_array(root)


def parse_datetime(value: Any) -> datetime | None:
    """Parse ISO 8601 or the `/Date(1518685950940+0000)/` form into a naive UTC datetime."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    s = str(value).strip()
    m = _MS_DATE_RE.match(s)
    if m:
        epoch = datetime(1970, 1, 1)
        return epoch + timedelta(milliseconds=int(m.group(1)))

    s = _FRACTION_RE.sub(r"\1", s)
    if s.endswith("Z"):
        s = s[:-1]
    parsed = datetime.fromisoformat(s)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_date(value: Any) -> date | None:
    parsed = parse_datetime(value)
    return parsed.date() if parsed is not None else None
