"""Tests for palette color matching.

Covers:
- hex → RGB / HSL conversion
- Weighted distance properties
- Nearest palette lookup (exact entries, primaries, invalid input)
- Pair standardization and annotation copies
"""

from __future__ import annotations

import math

import pytest

from annotation_uploader.models.annotation import Annotation, AnnotationType, LatLng
from annotation_uploader.models.palette import DRONEDEPLOY_COLORS, palette_entry
from annotation_uploader.utils.colors import (
    color_distance,
    hex_to_rgb,
    is_valid_hex_color,
    nearest_palette_color,
    normalize_hex_color,
    rgb_to_hsl,
    standardize_annotation_colors,
    standardize_colors,
)


class TestHexToRgb:
    def test_with_hash(self) -> None:
        assert hex_to_rgb("#f34235") == (243, 66, 53)

    def test_without_hash_and_uppercase(self) -> None:
        assert hex_to_rgb("F34235") == (243, 66, 53)

    @pytest.mark.parametrize("value", ["#abc", "#gggggg", "", "#1234567", None, 123])
    def test_invalid_returns_none(self, value: object) -> None:
        assert hex_to_rgb(value) is None

    def test_is_valid_hex_color(self) -> None:
        assert is_valid_hex_color("#00ff00")
        assert not is_valid_hex_color("#00ff0")


class TestRgbToHsl:
    def test_pure_red(self) -> None:
        assert rgb_to_hsl(255, 0, 0) == (0.0, 100.0, 50.0)

    def test_pure_green(self) -> None:
        h, s, lightness = rgb_to_hsl(0, 255, 0)
        assert h == pytest.approx(120.0)
        assert s == pytest.approx(100.0)
        assert lightness == pytest.approx(50.0)

    def test_grey_is_achromatic(self) -> None:
        h, s, lightness = rgb_to_hsl(128, 128, 128)
        assert h == 0.0
        assert s == 0.0
        assert lightness == pytest.approx(50.196, abs=1e-3)


class TestColorDistance:
    def test_identical_is_zero(self) -> None:
        assert color_distance("#4bae4f", "#4BAE4F") == 0.0

    def test_symmetric(self) -> None:
        assert color_distance("#ff0000", "#00bbd3") == pytest.approx(
            color_distance("#00bbd3", "#ff0000")
        )

    def test_invalid_is_infinite(self) -> None:
        assert color_distance("not-a-color", "#ff0000") == math.inf


class TestNearestPaletteColor:
    @pytest.mark.parametrize("entry", DRONEDEPLOY_COLORS, ids=lambda e: e.name)
    def test_palette_colors_match_themselves(self, entry) -> None:
        assert nearest_palette_color(entry.color) is entry

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("#ff0000", "Red"),
            ("#00ff00", "Green"),
            ("#0000ff", "Amethyst"),
        ],
    )
    def test_primaries(self, value: str, expected: str) -> None:
        assert nearest_palette_color(value).name == expected

    @pytest.mark.parametrize("value", [None, "", "#abc", "purple"])
    def test_invalid_input_returns_first_entry(self, value: str | None) -> None:
        assert nearest_palette_color(value) is DRONEDEPLOY_COLORS[0]

    def test_dark_blue_snaps_to_teal(self) -> None:
        assert nearest_palette_color("#123456").name == "Teal"
        assert nearest_palette_color("#123456") is nearest_palette_color("#123456")


class TestStandardizeColors:
    def test_fill_follows_color_when_absent(self) -> None:
        assert standardize_colors("#0000ff") == ("#6639b6", "#8c6bc8")

    def test_supplied_fill_snapped_independently(self) -> None:
        color, fill = standardize_colors("#ff0000", "#00ff00")
        assert color == "#f34235"
        assert fill == palette_entry("green").fill_color == "#78c27b"

    def test_annotation_copy_untouched_when_disabled(self) -> None:
        ann = Annotation(
            annotation_type=AnnotationType.LOCATION,
            title="Gate A",
            color="#ff0000",
            fill_color="#ff0000",
            geometry=LatLng(lat=-38.186, lng=145.811),
        )
        assert standardize_annotation_colors(ann) is ann

    def test_annotation_copy_when_enabled(self) -> None:
        ann = Annotation(
            annotation_type=AnnotationType.LOCATION,
            title="Gate A",
            color="#0000ff",
            fill_color="#00ff00",
            geometry=LatLng(lat=-38.186, lng=145.811),
        )
        snapped = standardize_annotation_colors(ann, apply=True)
        assert snapped.color == "#6639b6"
        assert snapped.fill_color == "#78c27b"
        assert ann.color == "#0000ff"


class TestNormalizeHexColor:
    def test_adds_hash(self) -> None:
        assert normalize_hex_color("ff0000") == "#ff0000"

    def test_keeps_single_hash(self) -> None:
        assert normalize_hex_color("#ff0000") == "#ff0000"

    def test_empty_is_black(self) -> None:
        assert normalize_hex_color(None) == "#000000"
