"""Raw record → canonical ``Annotation``.

There is exactly one converter per raw-record type.  Each converter
pulls the fields its format provides and hands them to ``_build``,
which applies the shared rules in a fixed order so the first failing
field is the one reported:

1. required fields present (annotationType, title, color)
2. annotation type recognised
3. geometry valid for the type (AREA rings auto-closed)
4. title / description sanitised
5. colors normalised (lenient)
6. optional palette standardisation
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from annotation_uploader.core.constants import DEFAULT_COLOR
from annotation_uploader.core.exceptions import (
    AnnotationValidationError,
    InvalidValueError,
    MissingFieldError,
)
from annotation_uploader.models.annotation import Annotation, AnnotationType, LatLng
from annotation_uploader.models.raw_feature import CsvRecord, GeoJsonRecord, KmlRecord
from annotation_uploader.models.results import RejectedRecord
from annotation_uploader.utils.colors import standardize_colors as snap_to_palette
from annotation_uploader.utils.validators import (
    validate_annotation_type,
    validate_color,
    validate_coordinate_pair,
    validate_coordinates,
    validate_description,
    validate_geometry,
    validate_title,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from annotation_uploader.models.annotation import Coordinate
    from annotation_uploader.models.raw_feature import RawFeature

logger = logging.getLogger("annotation_uploader.pipeline.normalizer")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def normalize(record: RawFeature, *, standardize_colors: bool = False) -> Annotation:
    """Convert one raw record into an ``Annotation``.

    Raises:
        AnnotationValidationError: (or a subclass) naming the first
            offending field.
        TypeError: If *record* is not a known raw-record type.
    """
    converter = _CONVERTERS.get(type(record))
    if converter is None:
        msg = f"Unsupported record type: {type(record).__name__}"
        raise TypeError(msg)
    return converter(record, standardize_colors)


def normalize_records(
    records: Iterable[RawFeature], *, standardize_colors: bool = False
) -> tuple[list[Annotation], list[RejectedRecord]]:
    """Normalize every record, collecting failures instead of raising.

    Returns:
        ``(annotations, rejected)``, each in input order.
    """
    annotations: list[Annotation] = []
    rejected: list[RejectedRecord] = []
    for record in records:
        try:
            annotations.append(normalize(record, standardize_colors=standardize_colors))
        except AnnotationValidationError as exc:
            logger.warning(
                "Skipping %s: %s | field=%s",
                record.source_label,
                exc.reason,
                exc.field,
            )
            rejected.append(RejectedRecord.from_error(record, exc))
    return (annotations, rejected)


# ---------------------------------------------------------------------------
# Per-format converters
# ---------------------------------------------------------------------------


def _from_csv(record: CsvRecord, standardize: bool) -> Annotation:
    _require(annotationType=record.annotation_type, title=record.title, color=record.color)
    annotation_type = validate_annotation_type(record.annotation_type)

    geometry: object
    if annotation_type is AnnotationType.LOCATION:
        if record.lat is None or record.lng is None:
            missing = "lat" if record.lat is None else "lng"
            raise MissingFieldError(missing, "LOCATION annotations require lat and lng fields")
        geometry = {"lat": record.lat, "lng": record.lng}
    else:
        if record.geometry is None:
            raise MissingFieldError(
                "geometry", f"{annotation_type.value} annotations require geometry field"
            )
        geometry = record.geometry

    return _build(
        annotation_type,
        geometry,
        title=record.title,
        description=record.description,
        color=record.color,
        fill_color=record.fill_color,
        standardize=standardize,
    )


def _from_geojson(record: GeoJsonRecord, standardize: bool) -> Annotation:
    props = record.properties
    _require(title=props.get("title"), color=props.get("color"))
    annotation_type = validate_annotation_type(record.annotation_type)

    geometry: object = record.coordinates
    if annotation_type is AnnotationType.LOCATION:
        lng, lat = validate_coordinate_pair(record.coordinates)
        geometry = LatLng(lat=lat, lng=lng)

    return _build(
        annotation_type,
        geometry,
        title=props.get("title"),
        description=props.get("description"),
        color=props.get("color"),
        fill_color=props.get("fillColor"),
        standardize=standardize,
    )


def _from_kml(record: KmlRecord, standardize: bool) -> Annotation:
    _require(title=record.name)
    annotation_type = validate_annotation_type(record.annotation_type)

    geometry: object = list(record.coordinates)
    if annotation_type is AnnotationType.LOCATION:
        if not record.coordinates:
            raise InvalidValueError("geometry", "Point has no valid coordinates")
        lng, lat = record.coordinates[0]
        geometry = {"lat": lat, "lng": lng}

    return _build(
        annotation_type,
        geometry,
        title=record.name,
        description=record.description,
        color=DEFAULT_COLOR,
        fill_color=None,
        standardize=standardize,
    )


_CONVERTERS = {
    CsvRecord: _from_csv,
    GeoJsonRecord: _from_geojson,
    KmlRecord: _from_kml,
}


# ---------------------------------------------------------------------------
# Shared rules
# ---------------------------------------------------------------------------


def _require(**fields: object) -> None:
    """Raise ``MissingFieldError`` for the first absent or blank field."""
    for name, value in fields.items():
        if value is None or (isinstance(value, str) and not value.strip()):
            raise MissingFieldError(name)


def _build(
    annotation_type: AnnotationType,
    geometry: object,
    *,
    title: object,
    description: object,
    color: object,
    fill_color: object,
    standardize: bool,
) -> Annotation:
    shape = _validated_geometry(geometry, annotation_type)
    if annotation_type is AnnotationType.AREA:
        shape = close_ring(shape)
        _warn_if_self_intersecting(shape, title)

    clean_title = validate_title(title)
    clean_description = validate_description(description)

    stroke = validate_color(color)
    fill_supplied = fill_color is not None and str(fill_color).strip() != ""
    fill = validate_color(fill_color) if fill_supplied else stroke

    if standardize:
        stroke, fill = snap_to_palette(stroke, fill if fill_supplied else None)

    return Annotation(
        annotation_type=annotation_type,
        title=clean_title,
        color=stroke,
        fill_color=fill,
        geometry=shape if isinstance(shape, LatLng) else tuple(shape),
        description=clean_description,
    )


def _validated_geometry(
    geometry: object, annotation_type: AnnotationType
) -> LatLng | list[Coordinate]:
    if isinstance(geometry, LatLng):
        return validate_coordinates(geometry.lat, geometry.lng)
    return validate_geometry(geometry, annotation_type)


def close_ring(coords: list[Coordinate]) -> list[Coordinate]:
    """Append the first pair when the ring is open; closed rings are unchanged."""
    if coords and coords[0] != coords[-1]:
        return [*coords, coords[0]]
    return coords


def _warn_if_self_intersecting(ring: list[Coordinate], title: object) -> None:
    from shapely.geometry import Polygon
    from shapely.validation import explain_validity

    if len(ring) < 4:
        logger.warning("AREA '%s' has fewer than 3 distinct points, uploading as-is", title)
        return

    polygon = Polygon(ring)
    if not polygon.is_valid:
        logger.warning(
            "AREA '%s' has an invalid ring, uploading as-is | reason=%s",
            title,
            explain_validity(polygon),
        )
