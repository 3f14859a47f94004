"""lxml-based KML parser.

Walks every ``<Placemark>`` below the ``<Document>`` (nested
``<Folder>`` hierarchies included) and emits one ``KmlRecord`` per
Placemark that carries a supported geometry.  Only the first direct
``Point``, ``Polygon`` or ``LineString`` child is read; styling is
ignored.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from annotation_uploader.models.raw_feature import KmlRecord
from annotation_uploader.models.results import ParsedFile, RejectedRecord
from annotation_uploader.parsers._coordinates import parse_coordinates_text
from annotation_uploader.parsers._validation import load_kml_document, local_name

if TYPE_CHECKING:
    from lxml.etree import _Element

logger = logging.getLogger("annotation_uploader.parsers")

_GEOMETRY_TYPES = {
    "Point": "LOCATION",
    "Polygon": "AREA",
    "LineString": "LINE",
}


def parse_kml(data: bytes, source_file: str) -> ParsedFile:
    """Parse KML bytes into ``KmlRecord`` placemarks.

    Raises:
        MalformedFileError: If the content is empty, not XML, not KML,
            or has no ``<Document>``.
    """
    logger.info("Parsing KML file: %s", source_file)
    document = load_kml_document(data, source_file)

    features: list[KmlRecord] = []
    rejected: list[RejectedRecord] = []

    for idx, placemark in enumerate(document.iter("{*}Placemark")):
        name = _text(placemark.find("{*}name"))
        description = _text(placemark.find("{*}description"))

        geometry = _first_geometry(placemark)
        if geometry is None:
            label = f"placemark '{name}'" if name else f"placemark {idx}"
            reason = "Placemark has no supported geometry (Point, Polygon or LineString)"
            logger.warning("Skipping %s in %s: %s", label, source_file, reason)
            rejected.append(
                RejectedRecord(
                    source=label,
                    reason=reason,
                    field="geometry",
                    record={"name": name, "description": description},
                )
            )
            continue

        geometry_type = local_name(geometry)
        features.append(
            KmlRecord(
                placemark_index=idx,
                name=name,
                annotation_type=_GEOMETRY_TYPES[geometry_type],
                coordinates=_geometry_coordinates(geometry, geometry_type),
                description=description,
            )
        )

    return ParsedFile(features=features, rejected=rejected)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _text(element: _Element | None) -> str | None:
    if element is None or not element.text:
        return None
    return element.text.strip() or None


def _first_geometry(placemark: _Element) -> _Element | None:
    for child in placemark:
        if local_name(child) in _GEOMETRY_TYPES:
            return child
    return None


def _geometry_coordinates(geometry: _Element, geometry_type: str) -> list[tuple[float, float]]:
    if geometry_type == "Polygon":
        element = geometry.find("{*}outerBoundaryIs/{*}LinearRing/{*}coordinates")
    else:
        element = geometry.find("{*}coordinates")
    if element is None:
        return []
    return parse_coordinates_text(element.text)
