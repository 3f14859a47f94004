"""CSV annotation parser.

Expected header (column order is free)::

    annotationType,title,lat,lng,color,fillColor,geometry,description

LOCATION rows use ``lat``/``lng``; AREA and LINE rows use ``geometry``,
a JSON array of ``[lng, lat]`` pairs.  ``type`` is accepted as a legacy
alias for ``annotationType``.  Legacy ``lat2,lng2,...`` columns are
ignored.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import re

from annotation_uploader.core.exceptions import MalformedFileError
from annotation_uploader.models.raw_feature import CsvRecord
from annotation_uploader.models.results import ParsedFile, RejectedRecord

logger = logging.getLogger("annotation_uploader.parsers")

_LEGACY_POINT_COLUMN = re.compile(r"^(lat|lng)\d+$", re.IGNORECASE)


def parse_csv(data: bytes, source_file: str) -> ParsedFile:
    """Parse CSV bytes into ``CsvRecord`` rows.

    Empty cells become ``None``.  A row whose ``geometry`` cell is not
    valid JSON is rejected; every other check is left to the normalizer.

    Raises:
        MalformedFileError: If the file is not UTF-8, has no header row,
            or the CSV reader fails.
    """
    logger.info("Parsing CSV file: %s", source_file)

    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        msg = f"CSV file is not valid UTF-8: {exc}"
        raise MalformedFileError(msg, source_file=source_file) from exc

    # A cell can never be longer than the file, which the caller has already
    # bounded by the upload size limit.
    if len(text) > csv.field_size_limit():
        csv.field_size_limit(len(text))

    reader = csv.DictReader(io.StringIO(text, newline=""))
    try:
        fieldnames = reader.fieldnames
    except csv.Error as exc:
        msg = f"Invalid CSV: {exc}"
        raise MalformedFileError(msg, source_file=source_file) from exc
    if not fieldnames:
        raise MalformedFileError("CSV file has no header row", source_file=source_file)
    reader.fieldnames = [name.strip() for name in fieldnames]

    legacy = [name for name in reader.fieldnames if _LEGACY_POINT_COLUMN.match(name)]
    if legacy:
        logger.warning(
            "Ignoring deprecated CSV point columns in %s | columns=%s",
            source_file,
            ",".join(legacy),
        )

    features: list[CsvRecord] = []
    rejected: list[RejectedRecord] = []
    try:
        for row_number, row in enumerate(reader, start=1):
            cells = _clean_row(row)
            annotation_type = cells.get("annotationType") or cells.get("type")
            try:
                geometry = _decode_geometry(annotation_type, cells.get("geometry"))
            except ValueError as exc:
                reason = f"Invalid geometry format: {exc}"
                logger.warning(
                    "Skipping CSV row %d in %s: %s", row_number, source_file, reason
                )
                rejected.append(
                    RejectedRecord(
                        source=f"row {row_number}",
                        reason=reason,
                        field="geometry",
                        record=dict(cells),
                    )
                )
                continue

            features.append(
                CsvRecord(
                    row_number=row_number,
                    annotation_type=annotation_type,
                    title=cells.get("title"),
                    color=cells.get("color"),
                    fill_color=cells.get("fillColor"),
                    lat=cells.get("lat"),
                    lng=cells.get("lng"),
                    geometry=geometry,
                    description=cells.get("description"),
                )
            )
    except csv.Error as exc:
        msg = f"Invalid CSV at line {reader.line_num}: {exc}"
        raise MalformedFileError(msg, source_file=source_file) from exc

    return ParsedFile(features=features, rejected=rejected)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _clean_row(row: dict[str | None, object]) -> dict[str, str | None]:
    """Strip cells, map blanks to ``None``, drop overflow cells."""
    cells: dict[str, str | None] = {}
    for key, value in row.items():
        if key is None or not isinstance(value, str):
            continue
        cells[key] = value.strip() or None
    return cells


def _decode_geometry(annotation_type: str | None, raw: str | None) -> object:
    """Decode the JSON ``geometry`` cell; LOCATION rows never read it."""
    if raw is None or (annotation_type or "").upper() == "LOCATION":
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(exc.msg) from exc
    except RecursionError as exc:
        raise ValueError("geometry is nested too deeply") from exc
