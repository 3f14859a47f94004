"""GeoJSON ``FeatureCollection`` parser.

Geometry type decides the annotation type: ``Point`` → LOCATION,
``Polygon`` → AREA (outer ring only), ``LineString`` → LINE.  Title,
color, fill color and description come from ``properties``.
"""

from __future__ import annotations

import json
import logging

from annotation_uploader.core.exceptions import MalformedFileError
from annotation_uploader.models.raw_feature import GeoJsonRecord
from annotation_uploader.models.results import ParsedFile, RejectedRecord

logger = logging.getLogger("annotation_uploader.parsers")

_GEOMETRY_TYPES = {
    "Point": "LOCATION",
    "Polygon": "AREA",
    "LineString": "LINE",
}


def parse_geojson(data: bytes, source_file: str) -> ParsedFile:
    """Parse GeoJSON bytes into ``GeoJsonRecord`` features.

    Raises:
        MalformedFileError: If the content is not JSON or not a
            ``FeatureCollection`` with a ``features`` list.
    """
    logger.info("Parsing GeoJSON file: %s", source_file)

    try:
        document = json.loads(data.decode("utf-8-sig"))
    except ValueError as exc:
        msg = f"Invalid JSON format: {exc}"
        raise MalformedFileError(msg, source_file=source_file) from exc
    except RecursionError as exc:
        msg = "Invalid JSON format: nested too deeply"
        raise MalformedFileError(msg, source_file=source_file) from exc

    if (
        not isinstance(document, dict)
        or document.get("type") != "FeatureCollection"
        or not isinstance(document.get("features"), list)
    ):
        raise MalformedFileError(
            "Invalid GeoJSON format: must be a FeatureCollection", source_file=source_file
        )

    features: list[GeoJsonRecord] = []
    rejected: list[RejectedRecord] = []

    for idx, feature in enumerate(document["features"]):
        source = f"feature {idx}"
        snapshot = feature if isinstance(feature, dict) else {"feature": feature}

        geometry = feature.get("geometry") if isinstance(feature, dict) else None
        if (
            not isinstance(geometry, dict)
            or not geometry.get("type")
            or not geometry.get("coordinates")
        ):
            reason = "Invalid GeoJSON feature: missing geometry"
            logger.warning("Skipping %s in %s: %s", source, source_file, reason)
            rejected.append(RejectedRecord(source=source, reason=reason, record=dict(snapshot)))
            continue

        geometry_type = geometry["type"]
        annotation_type = _GEOMETRY_TYPES.get(geometry_type)
        if annotation_type is None:
            reason = f"Unsupported GeoJSON geometry type: {geometry_type}"
            logger.warning("Skipping %s in %s: %s", source, source_file, reason)
            rejected.append(
                RejectedRecord(source=source, reason=reason, field="geometry", record=dict(snapshot))
            )
            continue

        coordinates = geometry["coordinates"]
        if geometry_type == "Polygon":
            coordinates = _outer_ring(coordinates, source)

        properties = feature.get("properties")
        features.append(
            GeoJsonRecord(
                feature_index=idx,
                annotation_type=annotation_type,
                coordinates=coordinates,
                properties=dict(properties) if isinstance(properties, dict) else {},
            )
        )

    return ParsedFile(features=features, rejected=rejected)


def _outer_ring(rings: object, source: str) -> object:
    """Return the first ring of a Polygon; holes are dropped."""
    if not isinstance(rings, list) or not rings:
        return rings
    if len(rings) > 1:
        logger.debug("Dropping %d hole(s) from %s", len(rings) - 1, source)
    return rings[0]
