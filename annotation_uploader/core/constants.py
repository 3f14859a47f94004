"""Shared constants for parsing, validation, and upload.

Centralises limits, defaults, and string literals so that parsers,
validators, and the upload client agree on a single value.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# WGS 84 coordinate bounds
# ---------------------------------------------------------------------------

MIN_LATITUDE = -90.0
MAX_LATITUDE = 90.0
MIN_LONGITUDE = -180.0
MAX_LONGITUDE = 180.0

# ---------------------------------------------------------------------------
# Text fields
# ---------------------------------------------------------------------------

TITLE_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 1000

# Characters outside this class are stripped from titles and descriptions.
# Compile with re.ASCII: word characters are [A-Za-z0-9_] only.
SAFE_TEXT_PATTERN = r"[^\w\s\-_.,()]"

# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------

DEFAULT_COLOR = "#FF0000"
"""Fallback for missing/invalid colors and the fixed color of KML annotations."""

# ---------------------------------------------------------------------------
# DroneDeploy identifiers
# ---------------------------------------------------------------------------

PLAN_ID_PREFIX = "MapPlan:"
PLAN_ID_LENGTH = 24
API_KEY_MIN_LENGTH = 10

DEFAULT_API_URL = "https://www.dronedeploy.com/graphql"

# ---------------------------------------------------------------------------
# Limits
# ---------------------------------------------------------------------------

MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024
MAX_ANNOTATIONS = 10_000
UPLOAD_BATCH_SIZE = 25
UPLOAD_BATCH_DELAY_S = 0.1
REQUEST_TIMEOUT_S = 120.0
