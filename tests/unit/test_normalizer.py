"""Tests for raw record → Annotation normalization.

Covers:
- One converter per record type (CSV, GeoJSON, KML)
- Field check order and error reporting
- Ring closing, sanitization, color defaults, palette snapping
- normalize_records partial success
"""

from __future__ import annotations

import pytest

from annotation_uploader.core.exceptions import (
    InsufficientPointsError,
    InvalidValueError,
    MissingFieldError,
    OutOfRangeError,
)
from annotation_uploader.models.annotation import AnnotationType, LatLng
from annotation_uploader.models.raw_feature import CsvRecord, GeoJsonRecord, KmlRecord
from annotation_uploader.pipeline.normalizer import close_ring, normalize, normalize_records

TRIANGLE = [[145.81, -38.18], [145.82, -38.18], [145.82, -38.19]]


def _csv(**overrides: object) -> CsvRecord:
    fields: dict[str, object] = {
        "row_number": 1,
        "annotation_type": "LOCATION",
        "title": "Gate A",
        "color": "#ff0000",
        "lat": "-38.186",
        "lng": "145.811",
    }
    fields.update(overrides)
    return CsvRecord(**fields)  # type: ignore[arg-type]


def _geojson(annotation_type: str, coordinates: object, **props: object) -> GeoJsonRecord:
    properties: dict[str, object] = {"title": "Feature", "color": "#00ff00"}
    properties.update(props)
    return GeoJsonRecord(
        feature_index=0,
        annotation_type=annotation_type,
        coordinates=coordinates,
        properties=properties,
    )


# ---------------------------------------------------------------------------
# CSV records
# ---------------------------------------------------------------------------


class TestNormalizeCsv:
    def test_location_scenario(self) -> None:
        ann = normalize(_csv())
        assert ann.annotation_type is AnnotationType.LOCATION
        assert ann.geometry == LatLng(lat=-38.186, lng=145.811)
        assert ann.color == "#ff0000"
        assert ann.fill_color == "#ff0000"

    def test_area_scenario_closes_ring(self) -> None:
        ann = normalize(
            _csv(
                annotation_type="AREA",
                title="Lot 1",
                color="#00ff00",
                fill_color="#00ff00",
                lat=None,
                lng=None,
                geometry=TRIANGLE,
            )
        )
        assert ann.vertex_count == 4
        assert ann.geometry[-1] == (145.81, -38.18)
        assert ann.geometry[0] == ann.geometry[-1]

    def test_area_already_closed_unchanged(self) -> None:
        closed = [*TRIANGLE, TRIANGLE[0]]
        ann = normalize(_csv(annotation_type="AREA", geometry=closed))
        assert ann.vertex_count == 4

    def test_line_stays_open(self) -> None:
        ann = normalize(_csv(annotation_type="line", geometry=TRIANGLE))
        assert ann.annotation_type is AnnotationType.LINE
        assert ann.vertex_count == 3

    def test_area_with_two_pairs(self) -> None:
        with pytest.raises(InsufficientPointsError) as exc_info:
            normalize(_csv(annotation_type="AREA", geometry=TRIANGLE[:2]))
        assert str(exc_info.value) == "AREA requires minimum 3 coordinate pairs, got 2"
        assert exc_info.value.field == "geometry"

    def test_missing_title_reported_before_bad_type(self) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            normalize(_csv(title=None, annotation_type="CIRCLE"))
        assert str(exc_info.value) == "Missing required field: title"

    def test_missing_color(self) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            normalize(_csv(color=None))
        assert exc_info.value.field == "color"

    def test_unknown_type(self) -> None:
        with pytest.raises(InvalidValueError) as exc_info:
            normalize(_csv(annotation_type="CIRCLE"))
        assert exc_info.value.field == "annotationType"

    def test_location_missing_lng(self) -> None:
        with pytest.raises(MissingFieldError) as exc_info:
            normalize(_csv(lng=None))
        assert exc_info.value.field == "lng"

    def test_location_out_of_range_never_clamped(self) -> None:
        with pytest.raises(OutOfRangeError):
            normalize(_csv(lat="95.0"))

    def test_area_missing_geometry(self) -> None:
        with pytest.raises(MissingFieldError, match="AREA annotations require geometry"):
            normalize(_csv(annotation_type="AREA"))

    def test_title_and_description_sanitized(self) -> None:
        ann = normalize(_csv(title="  <Gate> 'A'  ", description="   "))
        assert ann.title == "Gate A"
        assert ann.description is None

    def test_invalid_color_falls_back(self) -> None:
        ann = normalize(_csv(color="#abc"))
        assert ann.color == "#FF0000"
        assert ann.fill_color == "#FF0000"

    def test_standardize_without_fill(self) -> None:
        ann = normalize(_csv(color="#0000ff"), standardize_colors=True)
        assert (ann.color, ann.fill_color) == ("#6639b6", "#8c6bc8")

    def test_standardize_with_supplied_fill(self) -> None:
        ann = normalize(_csv(color="#ff0000", fill_color="#00ff00"), standardize_colors=True)
        assert ann.color == "#f34235"
        assert ann.fill_color == "#78c27b"


# ---------------------------------------------------------------------------
# GeoJSON records
# ---------------------------------------------------------------------------


class TestNormalizeGeoJson:
    def test_point_order_inverted(self) -> None:
        ann = normalize(_geojson("LOCATION", [145.811, -38.186]))
        assert ann.geometry == LatLng(lat=-38.186, lng=145.811)

    def test_fill_defaults_to_color(self) -> None:
        ann = normalize(_geojson("LINE", TRIANGLE[:2]))
        assert ann.fill_color == "#00ff00"

    def test_fill_from_properties(self) -> None:
        ann = normalize(_geojson("AREA", TRIANGLE, fillColor="#4bae4f"))
        assert ann.fill_color == "#4bae4f"

    def test_missing_title(self) -> None:
        record = GeoJsonRecord(
            feature_index=2,
            annotation_type="LOCATION",
            coordinates=[1.0, 2.0],
            properties={"color": "#ff0000"},
        )
        with pytest.raises(MissingFieldError) as exc_info:
            normalize(record)
        assert exc_info.value.field == "title"

    def test_string_coordinates_rejected(self) -> None:
        with pytest.raises(InvalidValueError):
            normalize(_geojson("LINE", [["145.8", "-38.1"], ["145.9", "-38.2"]]))


# ---------------------------------------------------------------------------
# KML records
# ---------------------------------------------------------------------------


class TestNormalizeKml:
    def test_fixed_default_color(self) -> None:
        record = KmlRecord(
            placemark_index=0,
            name="Gate A",
            annotation_type="LOCATION",
            coordinates=[(145.811, -38.186)],
        )
        ann = normalize(record)
        assert ann.color == "#FF0000"
        assert ann.fill_color == "#FF0000"
        assert ann.geometry == LatLng(lat=-38.186, lng=145.811)

    def test_nameless_placemark_rejected_on_title(self) -> None:
        record = KmlRecord(
            placemark_index=4,
            name=None,
            annotation_type="LOCATION",
            coordinates=[(145.9, -38.2)],
        )
        with pytest.raises(MissingFieldError) as exc_info:
            normalize(record)
        assert exc_info.value.field == "title"

    def test_point_without_coordinates(self) -> None:
        record = KmlRecord(placemark_index=0, name="Empty", annotation_type="LOCATION")
        with pytest.raises(InvalidValueError):
            normalize(record)


# ---------------------------------------------------------------------------
# Batch normalization
# ---------------------------------------------------------------------------


class TestNormalizeRecords:
    def test_partial_success(self, caplog: pytest.LogCaptureFixture) -> None:
        records = [
            _csv(),
            _csv(row_number=2, annotation_type="AREA", geometry=TRIANGLE[:2]),
            _csv(row_number=3, title="Gate B"),
        ]
        with caplog.at_level("WARNING", logger="annotation_uploader.pipeline.normalizer"):
            annotations, rejected = normalize_records(records)

        assert [a.title for a in annotations] == ["Gate A", "Gate B"]
        assert len(rejected) == 1
        assert rejected[0].source == "row 2"
        assert rejected[0].field == "geometry"
        assert rejected[0].reason == "AREA requires minimum 3 coordinate pairs, got 2"
        assert rejected[0].record["annotationType"] == "AREA"
        assert "Skipping row 2" in caplog.text

    def test_unknown_record_type(self) -> None:
        with pytest.raises(TypeError):
            normalize({"title": "dict"})  # type: ignore[arg-type]


class TestCloseRing:
    def test_open_ring_closed(self) -> None:
        assert close_ring([(0.0, 0.0), (1.0, 0.0), (1.0, 1.0)])[-1] == (0.0, 0.0)

    def test_closed_ring_unchanged(self) -> None:
        ring = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 0.0)]
        assert close_ring(ring) == ring
