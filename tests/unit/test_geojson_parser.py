"""Tests for the GeoJSON parser."""

from __future__ import annotations

import json

import pytest

from annotation_uploader.core.exceptions import MalformedFileError
from annotation_uploader.parsers import parse_geojson


class TestParseGeoJson:
    def test_supported_features(self, features_geojson: bytes) -> None:
        parsed = parse_geojson(features_geojson, "features.geojson")
        assert [r.annotation_type for r in parsed.features] == ["LOCATION", "AREA", "LINE"]
        assert [r.feature_index for r in parsed.features] == [0, 1, 2]

    def test_point_coordinates_kept_in_lng_lat_order(self, features_geojson: bytes) -> None:
        point = parse_geojson(features_geojson, "features.geojson").features[0]
        assert point.coordinates == [145.811, -38.186]
        assert point.properties["title"] == "Gate A"

    def test_polygon_outer_ring_only(self, features_geojson: bytes) -> None:
        polygon = parse_geojson(features_geojson, "features.geojson").features[1]
        assert polygon.coordinates == [
            [145.81, -38.18],
            [145.82, -38.18],
            [145.82, -38.19],
            [145.81, -38.18],
        ]

    def test_unsupported_and_missing_geometry_rejected(self, features_geojson: bytes) -> None:
        parsed = parse_geojson(features_geojson, "features.geojson")
        reasons = {r.source: r.reason for r in parsed.rejected}
        assert reasons == {
            "feature 3": "Unsupported GeoJSON geometry type: MultiPoint",
            "feature 4": "Invalid GeoJSON feature: missing geometry",
        }

    def test_missing_properties_become_empty(self) -> None:
        doc = {
            "type": "FeatureCollection",
            "features": [{"type": "Feature", "geometry": {"type": "Point", "coordinates": [1, 2]}}],
        }
        record = parse_geojson(json.dumps(doc).encode(), "bare.geojson").features[0]
        assert record.properties == {}

    def test_not_a_feature_collection(self, edge_cases_dir) -> None:
        data = (edge_cases_dir / "not_feature_collection.geojson").read_bytes()
        with pytest.raises(MalformedFileError, match="must be a FeatureCollection"):
            parse_geojson(data, "feature.geojson")

    def test_invalid_json(self) -> None:
        with pytest.raises(MalformedFileError, match="Invalid JSON"):
            parse_geojson(b"{not json", "broken.json")

    def test_features_must_be_a_list(self) -> None:
        with pytest.raises(MalformedFileError):
            parse_geojson(b'{"type": "FeatureCollection", "features": {}}', "odd.json")

    def test_deeply_nested_json_is_fatal(self) -> None:
        with pytest.raises(MalformedFileError, match="Invalid JSON format"):
            parse_geojson(b"[" * 100_000, "nested.geojson")
