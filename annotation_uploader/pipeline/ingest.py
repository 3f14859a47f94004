"""Upload ingest: bytes + file name → ``ParseResult``.

This is the single entry point the upload endpoint calls.  It picks the
parser by extension, enforces the size limit, normalizes every raw
record and assembles the partial-success result.
"""

from __future__ import annotations

import logging

from annotation_uploader.core.config import UploaderConfig
from annotation_uploader.core.exceptions import EmptyResultError
from annotation_uploader.models.results import ParseResult
from annotation_uploader.parsers import parse_file
from annotation_uploader.pipeline.normalizer import normalize_records
from annotation_uploader.utils.validators import validate_file_upload

logger = logging.getLogger("annotation_uploader.pipeline.ingest")


def process_file(
    data: bytes,
    file_name: str,
    *,
    standardize_colors: bool | None = None,
    config: UploaderConfig | None = None,
) -> ParseResult:
    """Parse and normalize one uploaded annotation file.

    Args:
        data: Raw file content.
        file_name: Uploaded file name; its extension selects the parser.
        standardize_colors: Snap colors to the DroneDeploy palette.
            ``None`` uses ``config.standardize_colors``.
        config: Uploader configuration (defaults when omitted).

    Returns:
        ``ParseResult`` with the surviving annotations and every skipped
        record (parser rejections first, then normalizer rejections).

    Raises:
        UnsupportedFormatError: If the extension is not supported.
        FileTooLargeError: If *data* exceeds ``config.max_file_size_bytes``.
        MalformedFileError: If the content is structurally invalid.
        EmptyResultError: If no record survived; ``rejected`` lists why.
    """
    config = config or UploaderConfig()
    if standardize_colors is None:
        standardize_colors = config.standardize_colors

    file_format, _ = validate_file_upload(
        file_name, len(data), max_size=config.max_file_size_bytes
    )
    logger.info(
        "Processing upload: %s | format=%s | bytes=%d | standardize_colors=%s",
        file_name,
        file_format.value,
        len(data),
        standardize_colors,
    )

    parsed = parse_file(data, file_name, file_format, max_size=config.max_file_size_bytes)
    annotations, normalize_rejected = normalize_records(
        parsed.features, standardize_colors=standardize_colors
    )
    rejected = [*parsed.rejected, *normalize_rejected]

    if not annotations:
        logger.warning(
            "No valid annotations in %s | skipped=%d", file_name, len(rejected)
        )
        raise EmptyResultError(
            f"No valid annotations found in {file_name}",
            source_file=file_name,
            rejected=rejected,
        )

    result = ParseResult(
        source_file=file_name,
        file_format=file_format.value,
        annotations=annotations,
        rejected=rejected,
    )
    logger.info(
        "Parsed %d annotation(s), skipped %d from %s",
        result.parsed_count,
        result.rejected_count,
        file_name,
    )
    return result
