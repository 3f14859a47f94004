"""Color utilities for DroneDeploy palette standardization.

Arbitrary input colors are snapped to the nearest palette entry using a
blend of two distances:

- a weighted RGB distance ``sqrt(2·Δr² + 4·Δg² + 3·Δb²)``, with green
  weighted heaviest (human luminance sensitivity), and
- a weighted HSL distance ``sqrt((2·Δhue)² + Δsat² + (0.5·Δlight)²)``
  with hue compared circularly,

combined as ``0.7·rgb + 0.3·hsl``.  The computation is deterministic:
ties resolve to the first palette entry in table order.
"""

from __future__ import annotations

import math
import re
from dataclasses import replace
from typing import TYPE_CHECKING

from annotation_uploader.models.palette import DEFAULT_PALETTE_ENTRY, DRONEDEPLOY_COLORS

if TYPE_CHECKING:
    from annotation_uploader.models.annotation import Annotation
    from annotation_uploader.models.palette import DroneDeployColor

_HEX_RGB = re.compile(r"^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.IGNORECASE)


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------


def hex_to_rgb(value: object) -> tuple[int, int, int] | None:
    """Convert ``#rrggbb`` / ``rrggbb`` to an ``(r, g, b)`` triplet.

    Returns ``None`` for anything that is not exactly six hex digits.
    """
    if not isinstance(value, str):
        return None
    match = _HEX_RGB.match(value.strip())
    if match is None:
        return None
    r, g, b = (int(part, 16) for part in match.groups())
    return (r, g, b)


def rgb_to_hsl(r: int, g: int, b: int) -> tuple[float, float, float]:
    """Convert 0-255 RGB to HSL (hue in degrees, saturation/lightness in percent)."""
    rf, gf, bf = r / 255, g / 255, b / 255
    high = max(rf, gf, bf)
    low = min(rf, gf, bf)
    lightness = (high + low) / 2

    if high == low:
        return (0.0, 0.0, lightness * 100)

    delta = high - low
    if lightness > 0.5:
        saturation = delta / (2 - high - low)
    else:
        saturation = delta / (high + low)

    if high == rf:
        hue = (gf - bf) / delta + (6 if gf < bf else 0)
    elif high == gf:
        hue = (bf - rf) / delta + 2
    else:
        hue = (rf - gf) / delta + 4
    hue /= 6

    return (hue * 360, saturation * 100, lightness * 100)


def is_valid_hex_color(value: object) -> bool:
    """Return True for six hex digits with an optional leading ``#``."""
    return hex_to_rgb(value) is not None


def normalize_hex_color(value: str | None) -> str:
    """Ensure a single leading ``#`` (``None``/empty → ``#000000``)."""
    if not value:
        return "#000000"
    return f"#{value.strip().lstrip('#')}"


# ---------------------------------------------------------------------------
# Distance + nearest match
# ---------------------------------------------------------------------------


def color_distance(first: str, second: str) -> float:
    """Perceptual distance between two hex colors (lower = more similar).

    Returns ``math.inf`` when either color is not valid hex.
    """
    rgb1 = hex_to_rgb(first)
    rgb2 = hex_to_rgb(second)
    if rgb1 is None or rgb2 is None:
        return math.inf

    dr = rgb1[0] - rgb2[0]
    dg = rgb1[1] - rgb2[1]
    db = rgb1[2] - rgb2[2]
    rgb_distance = math.sqrt(2 * dr * dr + 4 * dg * dg + 3 * db * db)

    h1, s1, l1 = rgb_to_hsl(*rgb1)
    h2, s2, l2 = rgb_to_hsl(*rgb2)
    hue_diff = abs(h1 - h2)
    hue_diff = min(hue_diff, 360 - hue_diff)
    hsl_distance = math.sqrt((hue_diff * 2) ** 2 + (s1 - s2) ** 2 + ((l1 - l2) * 0.5) ** 2)

    return rgb_distance * 0.7 + hsl_distance * 0.3


def nearest_palette_color(value: str | None) -> DroneDeployColor:
    """Return the palette entry closest to *value*.

    Total function: missing or invalid input yields the first palette
    entry.  Ties keep the earliest entry.
    """
    if not value:
        return DEFAULT_PALETTE_ENTRY

    nearest = DEFAULT_PALETTE_ENTRY
    min_distance = math.inf
    for entry in DRONEDEPLOY_COLORS:
        distance = color_distance(value, entry.color)
        if distance < min_distance:
            min_distance = distance
            nearest = entry
    return nearest


def standardize_colors(
    color: str,
    fill_color: str | None = None,
) -> tuple[str, str]:
    """Snap a ``(color, fill_color)`` pair to the palette.

    ``color`` becomes the nearest entry's color.  A supplied
    ``fill_color`` is snapped on its own (to the paired fill of *its*
    nearest entry); otherwise the fill follows the color's entry.
    """
    nearest = nearest_palette_color(color)
    if fill_color:
        return (nearest.color, nearest_palette_color(fill_color).fill_color)
    return (nearest.color, nearest.fill_color)


def standardize_annotation_colors(annotation: Annotation, apply: bool = False) -> Annotation:
    """Return a copy of *annotation* with palette colors when *apply* is set.

    The annotation's existing fill color is treated as supplied.
    """
    if not apply:
        return annotation
    color, fill_color = standardize_colors(annotation.color, annotation.fill_color)
    return replace(annotation, color=color, fill_color=fill_color)
