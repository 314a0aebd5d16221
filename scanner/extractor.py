"""Structural extraction of artifact references from mediation configuration XML."""

import logging
import re
import xml.etree.ElementTree as ET
from enum import Enum
from typing import Callable, Dict, Iterator, List


logger = logging.getLogger(__name__)

GOV_PREFIX = "gov:"
RESOURCE_TAGS = ("schema", "resource", "xslt", "publishWSDL")
TASK_SEQUENCE_PROPERTY = "sequenceName"

GET_PROPERTY_PATTERN = re.compile(r"get-property\('(.+?)'\)")


class DocumentShape(Enum):
    """The document kinds the extractor understands, keyed by root tag."""

    MEDIATION = "mediation"
    TASK = "task"
    UNRECOGNIZED = "unrecognized"


_SHAPES_BY_ROOT_TAG = {
    "proxy": DocumentShape.MEDIATION,
    "sequence": DocumentShape.MEDIATION,
    "template": DocumentShape.MEDIATION,
    "api": DocumentShape.MEDIATION,
    "task": DocumentShape.TASK,
}


def local_name(tag: str) -> str:
    """Strip the ``{namespace}`` part ElementTree puts in front of a tag."""
    return tag.rsplit("}", 1)[-1]


def classify(root: ET.Element) -> DocumentShape:
    """Return the shape of a document from the tag of its root element."""
    return _SHAPES_BY_ROOT_TAG.get(local_name(root.tag), DocumentShape.UNRECOGNIZED)


def _iter_tag(root: ET.Element, tag: str) -> Iterator[ET.Element]:
    """Yield the root and every descendant whose local name is ``tag``."""
    for element in root.iter():
        if local_name(element.tag) == tag:
            yield element


def find_template_calls(root: ET.Element) -> List[str]:
    """``target`` of every ``call-template``."""
    return [
        element.get("target")
        for element in _iter_tag(root, "call-template")
        if element.get("target") is not None
    ]


def find_sequence_keys(root: ET.Element) -> List[str]:
    """``key`` of every ``sequence``."""
    return [
        element.get("key")
        for element in _iter_tag(root, "sequence")
        if element.get("key") is not None
    ]


def find_resource_keys(root: ET.Element) -> List[str]:
    """``key`` of every schema, resource, xslt and publishWSDL, without ``gov:``."""
    found: List[str] = []
    for tag in RESOURCE_TAGS:
        for element in _iter_tag(root, tag):
            key = element.get("key")
            if key is None:
                continue
            if key.startswith(GOV_PREFIX):
                key = key[len(GOV_PREFIX):]
            found.append(key)
    return found


def find_property_lookups(root: ET.Element, names_only: bool = False) -> List[str]:
    """
    ``get-property('...')`` calls inside ``property/@expression``.

    By default the whole call text is returned, e.g. ``get-property('Foo')``.
    Such strings never match an artifact name; with ``names_only`` the
    quoted argument (``Foo``) is returned instead.
    """
    found: List[str] = []
    for element in _iter_tag(root, "property"):
        expression = element.get("expression")
        if expression is None:
            continue
        for match in GET_PROPERTY_PATTERN.finditer(expression):
            found.append(match.group(1) if names_only else match.group(0))
    return found


def _extract_mediation(root: ET.Element, names_only: bool) -> List[str]:
    return (
        find_template_calls(root)
        + find_sequence_keys(root)
        + find_resource_keys(root)
        + find_property_lookups(root, names_only)
    )


def _extract_task(root: ET.Element, names_only: bool) -> List[str]:
    for element in _iter_tag(root, "property"):
        if element.get("name") == TASK_SEQUENCE_PROPERTY:
            value = element.get("value")
            return [value] if value is not None else []
    return []


def _extract_unrecognized(root: ET.Element, names_only: bool) -> List[str]:
    return []


_EXTRACTORS: Dict[DocumentShape, Callable[[ET.Element, bool], List[str]]] = {
    DocumentShape.MEDIATION: _extract_mediation,
    DocumentShape.TASK: _extract_task,
    DocumentShape.UNRECOGNIZED: _extract_unrecognized,
}


def extract_references(
    root: ET.Element,
    get_property_names: bool = False,
    source: str = "document",
) -> List[str]:
    """
    Extract candidate artifact names from a parsed document.

    Args:
        root: Root element of the document.
        get_property_names: Return the argument of ``get-property('...')``
                            calls rather than the whole call text.
        source: Label of the document, used in diagnostics.

    Returns:
        Candidate names, unresolved. Empty for unrecognized documents.
    """
    shape = classify(root)
    if shape is DocumentShape.UNRECOGNIZED:
        logger.info("No extraction rules for root element <%s> in %s", local_name(root.tag), source)
    return _EXTRACTORS[shape](root, get_property_names)
