"""Canonical annotation entity.

An ``Annotation`` is the single representation every parser's output is
normalized into, and the only shape the upload layer ever sees.  It is
immutable: the preview/edit flow produces a *new* annotation through
``with_overrides`` rather than mutating an existing one.

Geometry conventions:
- LOCATION carries a ``LatLng`` (lat first, as the API expects).
- AREA / LINE carry a tuple of ``(lng, lat)`` pairs (GeoJSON order).
- AREA rings are always closed (first pair == last pair).
"""

from __future__ import annotations

import enum
import math
import re
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from annotation_uploader.core.constants import (
    DESCRIPTION_MAX_LENGTH,
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MIN_LATITUDE,
    MIN_LONGITUDE,
    SAFE_TEXT_PATTERN,
    TITLE_MAX_LENGTH,
)
from annotation_uploader.core.exceptions import ValidationError

if TYPE_CHECKING:
    from annotation_uploader.models.contracts import AnnotationPayload

Coordinate = tuple[float, float]
"""A ``(lng, lat)`` pair."""

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")
_UNSAFE_TEXT = re.compile(SAFE_TEXT_PATTERN, re.ASCII)


class ModelValidationError(ValueError, ValidationError):
    """Raised when an ``Annotation`` is constructed with invalid field values.

    Attributes:
        model: Name of the model class that failed validation.
        field_name: The field that violated the invariant.
        value: The invalid value.
    """

    default_stage = "model_validation"
    default_code = "MODEL_VALIDATION_FAILED"

    def __init__(self, model: str, field_name: str, value: object, message: str) -> None:
        self.model = model
        self.field_name = field_name
        self.value = value
        ValidationError.__init__(self, f"{model}.{field_name}={value!r}: {message}")


class AnnotationType(enum.Enum):
    """Kind of annotation supported by DroneDeploy.

    Values:
        LOCATION: A single point (pin).
        AREA:     A closed polygon (outer ring only).
        LINE:     An open polyline.
    """

    LOCATION = "LOCATION"
    AREA = "AREA"
    LINE = "LINE"

    @property
    def min_points(self) -> int:
        """Minimum number of coordinate pairs for this type."""
        return _MIN_POINTS[self]

    @property
    def geojson_type(self) -> str:
        """Matching GeoJSON geometry type name."""
        return _GEOJSON_TYPES[self]


_MIN_POINTS = {
    AnnotationType.LOCATION: 1,
    AnnotationType.AREA: 3,
    AnnotationType.LINE: 2,
}

_GEOJSON_TYPES = {
    AnnotationType.LOCATION: "Point",
    AnnotationType.AREA: "Polygon",
    AnnotationType.LINE: "LineString",
}


@dataclass(frozen=True, slots=True)
class LatLng:
    """A single WGS 84 position in decimal degrees."""

    lat: float
    lng: float

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True, slots=True)
class Annotation:
    """A validated, normalized annotation ready for upload.

    Attributes:
        annotation_type: LOCATION, AREA, or LINE.
        title: Sanitized, non-empty title (max 255 characters).
        color: Stroke color as ``#RRGGBB``.
        fill_color: Fill color as ``#RRGGBB``.
        geometry: ``LatLng`` for LOCATION, tuple of ``(lng, lat)`` pairs otherwise.
        description: Optional sanitized description (max 1000 characters).
    """

    annotation_type: AnnotationType
    title: str
    color: str
    fill_color: str
    geometry: LatLng | tuple[Coordinate, ...]
    description: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.annotation_type, AnnotationType):
            raise ModelValidationError(
                "Annotation", "annotation_type", self.annotation_type, "must be an AnnotationType"
            )
        if not isinstance(self.title, str) or not self.title.strip():
            raise ModelValidationError("Annotation", "title", self.title, "must not be empty")
        _check_text("title", self.title, TITLE_MAX_LENGTH)
        if self.description is not None:
            _check_text("description", self.description, DESCRIPTION_MAX_LENGTH)
        for name in ("color", "fill_color"):
            value = getattr(self, name)
            if not isinstance(value, str) or not _HEX_COLOR.match(value):
                raise ModelValidationError("Annotation", name, value, "must be #RRGGBB")

        if self.annotation_type is AnnotationType.LOCATION:
            if not isinstance(self.geometry, LatLng):
                raise ModelValidationError(
                    "Annotation", "geometry", self.geometry, "LOCATION requires a LatLng"
                )
            _check_position(self.geometry.lng, self.geometry.lat)
            return

        if isinstance(self.geometry, LatLng):
            raise ModelValidationError(
                "Annotation",
                "geometry",
                self.geometry,
                f"{self.annotation_type.value} requires a sequence of (lng, lat) pairs",
            )
        coords = tuple((float(lng), float(lat)) for lng, lat in self.geometry)
        object.__setattr__(self, "geometry", coords)
        if len(coords) < self.annotation_type.min_points:
            raise ModelValidationError(
                "Annotation",
                "geometry",
                coords,
                f"{self.annotation_type.value} requires at least "
                f"{self.annotation_type.min_points} points",
            )
        for lng, lat in coords:
            _check_position(lng, lat)
        if self.annotation_type is AnnotationType.AREA and coords[0] != coords[-1]:
            raise ModelValidationError("Annotation", "geometry", coords, "AREA ring must be closed")

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def coordinates(self) -> list[Coordinate]:
        """All positions as ``(lng, lat)`` pairs, whatever the type."""
        if isinstance(self.geometry, LatLng):
            return [(self.geometry.lng, self.geometry.lat)]
        return list(self.geometry)

    @property
    def vertex_count(self) -> int:
        """Number of positions (including the closing pair for AREA)."""
        return len(self.coordinates)

    def with_overrides(
        self,
        *,
        title: str | None = None,
        color: str | None = None,
        fill_color: str | None = None,
    ) -> Annotation:
        """Return a copy with the given fields replaced (used by preview edits).

    Raises:
        ModelValidationError: If a replacement breaks a field invariant
            (bad color, or a title that is overlong or not sanitized).
    """
        changes: dict[str, str] = {}
        if title is not None:
            changes["title"] = title
        if color is not None:
            changes["color"] = color
        if fill_color is not None:
            changes["fill_color"] = fill_color
        return replace(self, **changes)

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------

    def to_dict(self) -> AnnotationPayload:
        """Serialise to the camelCase upload payload."""
        geometry: object
        if isinstance(self.geometry, LatLng):
            geometry = self.geometry.to_dict()
        else:
            geometry = [[lng, lat] for lng, lat in self.geometry]
        payload: dict[str, object] = {
            "annotationType": self.annotation_type.value,
            "title": self.title,
            "color": self.color,
            "fillColor": self.fill_color,
            "geometry": geometry,
        }
        if self.description is not None:
            payload["description"] = self.description
        return payload  # type: ignore[return-value]

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> Annotation:
        """Deserialise from an upload payload.

        Raises:
            TypeError: If ``geometry`` has an unexpected type.
            ValueError: If ``annotationType`` is unknown.
            ModelValidationError: If the resulting annotation is invalid.
        """
        annotation_type = AnnotationType(str(data.get("annotationType", "")).upper())
        raw_geometry = data.get("geometry")
        geometry: LatLng | tuple[Coordinate, ...]
        if isinstance(raw_geometry, dict):
            geometry = LatLng(lat=float(raw_geometry["lat"]), lng=float(raw_geometry["lng"]))
        elif isinstance(raw_geometry, list):
            geometry = tuple((float(c[0]), float(c[1])) for c in raw_geometry)
        else:
            msg = f"geometry must be a dict or list, got {type(raw_geometry).__name__}"
            raise TypeError(msg)

        color = str(data.get("color", ""))
        description = data.get("description")
        return cls(
            annotation_type=annotation_type,
            title=str(data.get("title", "")),
            color=color,
            fill_color=str(data.get("fillColor") or color),
            geometry=geometry,
            description=str(description) if description is not None else None,
        )

    def to_geojson_feature(self) -> dict[str, object]:
        """Return a GeoJSON ``Feature`` for map previews."""
        from shapely.geometry import LineString, Point, Polygon, mapping

        if isinstance(self.geometry, LatLng):
            shape = Point(self.geometry.lng, self.geometry.lat)
        elif self.annotation_type is AnnotationType.AREA:
            shape = Polygon(self.geometry)
        else:
            shape = LineString(self.geometry)

        properties: dict[str, object] = {
            "annotationType": self.annotation_type.value,
            "title": self.title,
            "color": self.color,
            "fillColor": self.fill_color,
        }
        if self.description is not None:
            properties["description"] = self.description
        return {"type": "Feature", "geometry": dict(mapping(shape)), "properties": properties}


def _check_position(lng: float, lat: float) -> None:
    if not (math.isfinite(lat) and MIN_LATITUDE <= lat <= MAX_LATITUDE):
        raise ModelValidationError("Annotation", "geometry", lat, "latitude out of WGS 84 range")
    if not (math.isfinite(lng) and MIN_LONGITUDE <= lng <= MAX_LONGITUDE):
        raise ModelValidationError("Annotation", "geometry", lng, "longitude out of WGS 84 range")


def _check_text(name: str, value: object, max_length: int) -> None:
    if not isinstance(value, str):
        raise ModelValidationError("Annotation", name, value, "must be a string")
    if len(value) > max_length:
        raise ModelValidationError(
            "Annotation", name, value[:20] + "...", f"must be at most {max_length} characters"
        )
    if _UNSAFE_TEXT.search(value):
        raise ModelValidationError("Annotation", name, value, "contains disallowed characters")
