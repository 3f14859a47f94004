"""Format parsers: CSV, GeoJSON, KML, KMZ → raw records.

Each parser turns uploaded bytes into a ``ParsedFile``: one raw record
per candidate annotation, plus the records it already had to skip.
No parser validates annotation fields; that is the normalizer's job.

The parsing layer is split into focused modules:
- **_validation**: XML / KML structural checks
- **_coordinates**: KML coordinate text parsing
- **_csv_parser**, **_geojson_parser**, **_kml_parser**, **_kmz_parser**

Failure policy:
- Structural problems (bad XML/JSON/CSV, missing KML in KMZ) raise
  ``MalformedFileError`` and stop the file.
- Record problems become ``RejectedRecord`` entries and are logged at
  WARNING; remaining records are still parsed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from annotation_uploader.core.constants import MAX_FILE_SIZE_BYTES
from annotation_uploader.models.results import ParsedFile
from annotation_uploader.parsers._coordinates import parse_coordinates_text
from annotation_uploader.parsers._csv_parser import parse_csv
from annotation_uploader.parsers._geojson_parser import parse_geojson
from annotation_uploader.parsers._kml_parser import parse_kml
from annotation_uploader.parsers._kmz_parser import parse_kmz
from annotation_uploader.parsers._validation import load_kml_document
from annotation_uploader.utils.validators import FileFormat, detect_format

logger = logging.getLogger("annotation_uploader.parsers")

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "PARSERS",
    "load_kml_document",
    "parse_coordinates_text",
    "parse_csv",
    "parse_file",
    "parse_geojson",
    "parse_kml",
    "parse_kmz",
]

PARSERS: dict[FileFormat, Callable[[bytes, str], ParsedFile]] = {
    FileFormat.CSV: parse_csv,
    FileFormat.GEOJSON: parse_geojson,
    FileFormat.KML: parse_kml,
    FileFormat.KMZ: parse_kmz,
}


def parse_file(
    data: bytes,
    source_file: str,
    file_format: FileFormat | None = None,
    *,
    max_size: int = MAX_FILE_SIZE_BYTES,
) -> ParsedFile:
    """Parse *data* with the parser for *file_format*.

    When *file_format* is omitted it is detected from *source_file*'s
    extension.  *max_size* also bounds the inflated KML inside a KMZ.

    Raises:
        UnsupportedFormatError: If the extension is not supported.
        MalformedFileError: If the content is structurally invalid.
    """
    if file_format is None:
        file_format = detect_format(source_file)
    if file_format is FileFormat.KMZ:
        parsed = parse_kmz(data, source_file, max_entry_size=max_size)
    else:
        parsed = PARSERS[file_format](data, source_file)
    logger.debug(
        "Parsed raw records from %s | format=%s | records=%d | skipped=%d",
        source_file,
        file_format.value,
        len(parsed.features),
        len(parsed.rejected),
    )
    return parsed
