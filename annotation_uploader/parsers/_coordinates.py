"""Coordinate text helpers shared by the KML parser."""

from __future__ import annotations

import math


def parse_coordinates_text(text: str | None) -> list[tuple[float, float]]:
    """Parse KML coordinate text (``lon,lat,alt lon,lat,alt ...``) to (lon, lat) tuples.

    Altitude is dropped.  Tuples that do not parse to two finite numbers
    are skipped.
    """
    coords: list[tuple[float, float]] = []
    if not text:
        return coords
    for token in text.split():
        parts = token.strip().split(",")
        if len(parts) >= 2:
            try:
                lon = float(parts[0])
                lat = float(parts[1])
            except ValueError:
                continue
            if math.isfinite(lon) and math.isfinite(lat):
                coords.append((lon, lat))
    return coords
