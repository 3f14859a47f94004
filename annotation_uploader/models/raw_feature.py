"""Format-specific raw records produced by the parsers.

Each parser emits one record type, and the normalizer has exactly one
converter per type.  Records are loosely typed on purpose: they hold
what the file said (possibly missing or malformed), and validation
happens only in the normalizer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True, slots=True)
class CsvRecord:
    """One data row of a CSV annotation file.

    Empty cells are ``None``.  ``geometry`` is the JSON-decoded value of
    the ``geometry`` column (expected: list of ``[lng, lat]`` pairs).

    Attributes:
        row_number: One-based index of the data row (header excluded).
    """

    row_number: int
    annotation_type: str | None = None
    title: str | None = None
    color: str | None = None
    fill_color: str | None = None
    lat: str | None = None
    lng: str | None = None
    geometry: object = None
    description: str | None = None

    @property
    def source_label(self) -> str:
        return f"row {self.row_number}"

    def to_dict(self) -> dict[str, object]:
        return {
            "annotationType": self.annotation_type,
            "title": self.title,
            "color": self.color,
            "fillColor": self.fill_color,
            "lat": self.lat,
            "lng": self.lng,
            "geometry": self.geometry,
            "description": self.description,
        }


@dataclass(frozen=True, slots=True)
class GeoJsonRecord:
    """One supported feature of a GeoJSON ``FeatureCollection``.

    Attributes:
        feature_index: Zero-based position in ``features``.
        annotation_type: Derived from the geometry type
            (``Point`` → LOCATION, ``Polygon`` → AREA, ``LineString`` → LINE).
        coordinates: ``[lng, lat]`` for a Point; list of pairs otherwise
            (Polygon: outer ring only).
        properties: The feature's ``properties`` object.
    """

    feature_index: int
    annotation_type: str
    coordinates: object
    properties: dict[str, object] = field(default_factory=dict)

    @property
    def source_label(self) -> str:
        return f"feature {self.feature_index}"

    def to_dict(self) -> dict[str, object]:
        return {
            "annotationType": self.annotation_type,
            "coordinates": self.coordinates,
            "properties": dict(self.properties),
        }


@dataclass(frozen=True, slots=True)
class KmlRecord:
    """One Placemark with a supported geometry.

    Attributes:
        placemark_index: Zero-based position among the Document's Placemarks.
        name: Placemark ``<name>`` text (``None`` when absent).
        coordinates: ``(lng, lat)`` tuples, altitude dropped.
    """

    placemark_index: int
    name: str | None
    annotation_type: str
    coordinates: list[tuple[float, float]] = field(default_factory=list)
    description: str | None = None

    @property
    def source_label(self) -> str:
        if self.name:
            return f"placemark '{self.name}'"
        return f"placemark {self.placemark_index}"

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "annotationType": self.annotation_type,
            "coordinates": [list(c) for c in self.coordinates],
            "description": self.description,
        }


RawFeature = Union[CsvRecord, GeoJsonRecord, KmlRecord]
