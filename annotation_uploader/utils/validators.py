"""Field-level validators and sanitizers.

Stateless helpers shared by the normalizer and by external callers
(e.g. validating a plan ID or API key before building an upload
request).  Every failure raises an ``AnnotationValidationError``
subclass naming the field and the reason.

Two color entry points exist on purpose: the normalizer uses the
lenient mode (invalid → default color, logged), while direct API
callers can ask for ``strict=True`` to fail fast.
"""

from __future__ import annotations

import logging
import math
import re
from enum import Enum
from pathlib import PurePath
from typing import TYPE_CHECKING

from annotation_uploader.core.constants import (
    API_KEY_MIN_LENGTH,
    DEFAULT_COLOR,
    DESCRIPTION_MAX_LENGTH,
    MAX_ANNOTATIONS,
    MAX_FILE_SIZE_BYTES,
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MIN_LATITUDE,
    MIN_LONGITUDE,
    PLAN_ID_LENGTH,
    PLAN_ID_PREFIX,
    SAFE_TEXT_PATTERN,
    TITLE_MAX_LENGTH,
)
from annotation_uploader.core.exceptions import (
    FileTooLargeError,
    InsufficientPointsError,
    InvalidValueError,
    MissingFieldError,
    OutOfRangeError,
    UnsupportedFormatError,
)
from annotation_uploader.models.annotation import AnnotationType, Coordinate, LatLng
from annotation_uploader.utils.colors import is_valid_hex_color, normalize_hex_color

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger("annotation_uploader.utils.validators")

_UNSAFE_MARKUP = re.compile(r"[<>'\"&]")
_UNSAFE_TEXT = re.compile(SAFE_TEXT_PATTERN, re.ASCII)
_PLAN_ID = re.compile(rf"^[0-9a-fA-F]{{{PLAN_ID_LENGTH}}}$")
_API_KEY = re.compile(r"^[A-Za-z0-9\-_.:]+$")


class FileFormat(str, Enum):
    """Upload formats understood by the parsers."""

    CSV = "csv"
    GEOJSON = "geojson"
    KML = "kml"
    KMZ = "kmz"


SUPPORTED_EXTENSIONS: dict[str, FileFormat] = {
    ".csv": FileFormat.CSV,
    ".json": FileFormat.GEOJSON,
    ".geojson": FileFormat.GEOJSON,
    ".kml": FileFormat.KML,
    ".kmz": FileFormat.KMZ,
}


# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------


def sanitize_string(value: object, max_length: int = TITLE_MAX_LENGTH) -> str:
    """Trim, truncate, and strip characters outside the safe allow-list.

    The allow-list is word characters, whitespace, and ``-_.,()``.
    Non-string input yields ``""``.
    """
    if not isinstance(value, str) or not value:
        return ""
    text = value.strip()[:max_length]
    text = _UNSAFE_MARKUP.sub("", text)
    return _UNSAFE_TEXT.sub("", text)


def validate_title(title: object) -> str:
    """Return the sanitized title.

    Raises:
        MissingFieldError: If the title is absent or blank.
        InvalidValueError: If nothing survives sanitization.
    """
    if not isinstance(title, str) or not title.strip():
        raise MissingFieldError("title")
    sanitized = sanitize_string(title, TITLE_MAX_LENGTH)
    if not sanitized.strip():
        raise InvalidValueError("title", "Title contains only invalid characters")
    return sanitized


def validate_description(description: object) -> str | None:
    """Return the sanitized description, or ``None`` when empty/absent."""
    sanitized = sanitize_string(description, DESCRIPTION_MAX_LENGTH).strip()
    return sanitized or None


# ---------------------------------------------------------------------------
# Annotation type
# ---------------------------------------------------------------------------


def validate_annotation_type(value: object) -> AnnotationType:
    """Return the ``AnnotationType`` for *value* (case-insensitive).

    Raises:
        MissingFieldError: If the value is absent or blank.
        InvalidValueError: If the value is not LOCATION, AREA, or LINE.
    """
    if not isinstance(value, str) or not value.strip():
        raise MissingFieldError("annotationType")
    try:
        return AnnotationType(value.strip().upper())
    except ValueError:
        allowed = ", ".join(t.value for t in AnnotationType)
        msg = f"Invalid annotation type: {value}. Must be one of: {allowed}"
        raise InvalidValueError("annotationType", msg) from None


# ---------------------------------------------------------------------------
# Coordinates + geometry
# ---------------------------------------------------------------------------


def _to_degrees(value: object, field: str) -> float:
    """Coerce a number or numeric string to a finite float."""
    if isinstance(value, bool) or value is None:
        raise InvalidValueError(field, f"Invalid {field} value: {value!r}")
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise InvalidValueError(field, f"Invalid {field} value: {value!r}") from None
    elif isinstance(value, int | float):
        try:
            number = float(value)
        except OverflowError:
            raise InvalidValueError(field, f"Invalid {field} value: out of range") from None
    else:
        raise InvalidValueError(field, f"Invalid {field} value: {value!r}")
    if not math.isfinite(number):
        raise InvalidValueError(field, f"Invalid {field} value: {value!r}")
    return number


def validate_coordinates(lat: object, lng: object) -> LatLng:
    """Validate a position and return it as a ``LatLng``.

    Accepts numbers or numeric strings; booleans and non-finite values
    are rejected.

    Raises:
        InvalidValueError: If either value is not a finite number.
        OutOfRangeError: If the position is outside WGS 84 bounds.
    """
    latitude = _to_degrees(lat, "lat")
    longitude = _to_degrees(lng, "lng")
    if not MIN_LATITUDE <= latitude <= MAX_LATITUDE:
        msg = f"Latitude must be between {MIN_LATITUDE:g} and {MAX_LATITUDE:g}, got {latitude:g}"
        raise OutOfRangeError("lat", msg)
    if not MIN_LONGITUDE <= longitude <= MAX_LONGITUDE:
        msg = (
            f"Longitude must be between {MIN_LONGITUDE:g} and {MAX_LONGITUDE:g}, "
            f"got {longitude:g}"
        )
        raise OutOfRangeError("lng", msg)
    return LatLng(lat=latitude, lng=longitude)


def validate_coordinate_pair(pair: object, index: int = 0) -> Coordinate:
    """Validate one ``[lng, lat(, alt)]`` element; altitude is dropped."""
    if not isinstance(pair, list | tuple) or len(pair) < 2:
        msg = f"Invalid coordinate at index {index}: must be a [lng, lat] pair"
        raise InvalidValueError("geometry", msg)
    lng, lat = pair[0], pair[1]
    for component in (lng, lat):
        if isinstance(component, bool) or not isinstance(component, int | float):
            msg = f"Invalid coordinate at index {index}: expected numbers, got {list(pair)!r}"
            raise InvalidValueError("geometry", msg)
        try:
            finite = math.isfinite(component)
        except OverflowError:
            finite = False
        if not finite:
            msg = f"Invalid coordinate at index {index}: non-finite value"
            raise InvalidValueError("geometry", msg)
    try:
        position = validate_coordinates(lat, lng)
    except OutOfRangeError as exc:
        msg = f"Coordinate at index {index} out of range: {exc.reason}"
        raise OutOfRangeError("geometry", msg) from exc
    return (position.lng, position.lat)


def validate_geometry(
    geometry: object, annotation_type: AnnotationType
) -> LatLng | list[Coordinate]:
    """Validate geometry for *annotation_type*.

    LOCATION expects a ``LatLng`` or a ``{"lat", "lng"}`` mapping.
    AREA / LINE expect a sequence of ``[lng, lat]`` pairs with at least
    ``annotation_type.min_points`` elements.  Rings are *not* closed
    here; closing is the normalizer's job.

    Raises:
        MissingFieldError: If geometry is absent.
        InsufficientPointsError: If a line/area has too few pairs.
        InvalidValueError / OutOfRangeError: For malformed pairs.
    """
    if geometry is None:
        raise MissingFieldError("geometry")

    if annotation_type is AnnotationType.LOCATION:
        if isinstance(geometry, LatLng):
            return validate_coordinates(geometry.lat, geometry.lng)
        if not isinstance(geometry, dict) or "lat" not in geometry or "lng" not in geometry:
            raise InvalidValueError(
                "geometry", "LOCATION geometry must have lat and lng properties"
            )
        return validate_coordinates(geometry["lat"], geometry["lng"])

    if not isinstance(geometry, list | tuple):
        msg = f"{annotation_type.value} geometry must be an array of [lng, lat] coordinates"
        raise InvalidValueError("geometry", msg)

    minimum = annotation_type.min_points
    if len(geometry) < minimum:
        msg = (
            f"{annotation_type.value} requires minimum {minimum} coordinate pairs, "
            f"got {len(geometry)}"
        )
        raise InsufficientPointsError("geometry", msg)

    return [validate_coordinate_pair(pair, idx) for idx, pair in enumerate(geometry)]


# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------


def validate_color(value: object, *, strict: bool = False, required: bool = False) -> str:
    """Return *value* as ``#RRGGBB``.

    Lenient mode (default) substitutes ``DEFAULT_COLOR`` for missing or
    invalid input and logs a warning.  ``strict=True`` raises instead.

    Raises:
        MissingFieldError: If the color is absent and ``required`` is set.
        InvalidValueError: If the color is invalid and ``strict`` is set.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise MissingFieldError("color")
        return DEFAULT_COLOR

    text = str(value).strip()
    if not is_valid_hex_color(text):
        if strict:
            raise InvalidValueError("color", f"Invalid color format: {value!r}, expected #RRGGBB")
        logger.warning("Invalid color format: %s, using default %s", value, DEFAULT_COLOR)
        return DEFAULT_COLOR
    return normalize_hex_color(text)


# ---------------------------------------------------------------------------
# DroneDeploy identifiers
# ---------------------------------------------------------------------------


def validate_plan_id(plan_id: object) -> str:
    """Return the bare 24-hex-character plan ID.

    Accepts either the bare ID or one prefixed with ``MapPlan:``.

    Raises:
        MissingFieldError: If the plan ID is absent.
        InvalidValueError: If the remainder is not 24 hex characters.
    """
    if not isinstance(plan_id, str) or not plan_id.strip():
        raise MissingFieldError("planId")
    sanitized = plan_id.strip()
    if sanitized.startswith(PLAN_ID_PREFIX):
        sanitized = sanitized[len(PLAN_ID_PREFIX) :]
    if not _PLAN_ID.match(sanitized):
        raise InvalidValueError(
            "planId",
            f"Invalid plan ID format. Should be {PLAN_ID_LENGTH} hexadecimal characters.",
        )
    return sanitized


def validate_api_key(api_key: object) -> str:
    """Return the stripped API key.

    Raises:
        MissingFieldError: If the key is absent.
        InvalidValueError: If the key is too short or has invalid characters.
    """
    if not isinstance(api_key, str) or not api_key.strip():
        raise MissingFieldError("apiKey")
    sanitized = api_key.strip()
    if len(sanitized) < API_KEY_MIN_LENGTH:
        raise InvalidValueError("apiKey", "API key appears to be too short")
    if not _API_KEY.match(sanitized):
        raise InvalidValueError("apiKey", "API key contains invalid characters")
    return sanitized


# ---------------------------------------------------------------------------
# Files + batches
# ---------------------------------------------------------------------------


def detect_format(file_name: str) -> FileFormat:
    """Map a file name to its ``FileFormat`` by extension (case-insensitive).

    Raises:
        UnsupportedFormatError: If the extension is not supported.
    """
    extension = PurePath(file_name or "").suffix.lower()
    file_format = SUPPORTED_EXTENSIONS.get(extension)
    if file_format is None:
        supported = ", ".join(sorted(SUPPORTED_EXTENSIONS))
        msg = f"Unsupported file format '{extension or file_name}'. Supported: {supported}"
        raise UnsupportedFormatError(msg, source_file=file_name)
    return file_format


def validate_file_upload(
    file_name: str, size: int, *, max_size: int = MAX_FILE_SIZE_BYTES
) -> tuple[FileFormat, str]:
    """Check an uploaded file's extension and size.

    Returns:
        ``(file_format, sanitized_file_name)``.

    Raises:
        UnsupportedFormatError: If the extension is not supported.
        FileTooLargeError: If *size* exceeds *max_size*.
    """
    file_format = detect_format(file_name)
    if size > max_size:
        msg = f"File too large: {size} bytes (maximum {max_size} bytes)"
        raise FileTooLargeError(msg, source_file=file_name)
    return (file_format, sanitize_string(file_name, TITLE_MAX_LENGTH))


def validate_annotation_count(
    annotations: Sequence[object], *, max_annotations: int = MAX_ANNOTATIONS
) -> int:
    """Return the number of annotations after checking batch bounds.

    Raises:
        InvalidValueError: If the batch is empty or larger than allowed.
    """
    count = len(annotations)
    if count == 0:
        raise InvalidValueError("annotations", "No annotations found")
    if count > max_annotations:
        msg = f"Too many annotations: {count} (maximum {max_annotations})"
        raise InvalidValueError("annotations", msg)
    return count
