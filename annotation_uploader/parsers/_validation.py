"""Structural checks for XML-based uploads.

Responsibilities:
- Reject empty content and malformed XML
- Require a ``<kml>`` root and a ``<Document>`` element
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from lxml import etree

from annotation_uploader.core.exceptions import MalformedFileError

if TYPE_CHECKING:
    from lxml.etree import _Element


def local_name(element: _Element) -> str:
    """Return an element's tag without its namespace (``""`` for comments/PIs)."""
    if not isinstance(element.tag, str):
        return ""
    return etree.QName(element).localname


def load_kml_document(content: bytes, source_file: str) -> _Element:
    """Parse KML bytes and return the ``<Document>`` element.

    Matching is namespace-agnostic: KML 2.2, Google's ``earth.google.com``
    namespaces and un-namespaced files are all accepted.

    Raises:
        MalformedFileError: If the content is empty, not XML, not KML,
            or has no ``<Document>``.
    """
    if not content or not content.strip():
        raise MalformedFileError("KML file is empty", source_file=source_file)

    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)
    try:
        root = etree.fromstring(content, parser=parser)
    except etree.XMLSyntaxError as exc:
        msg = f"Not valid XML: {exc}"
        raise MalformedFileError(msg, source_file=source_file) from exc

    if local_name(root).lower() != "kml":
        msg = f"Not a KML file: root element is <{root.tag}>"
        raise MalformedFileError(msg, source_file=source_file)

    document = root.find("{*}Document")
    if document is None:
        msg = "Invalid KML structure: missing Document element"
        raise MalformedFileError(msg, source_file=source_file)
    return document
