"""KMZ parser: unwrap the archive and hand the first KML entry to the KML parser."""

from __future__ import annotations

import io
import logging
import zipfile
import zlib

from annotation_uploader.core.constants import MAX_FILE_SIZE_BYTES
from annotation_uploader.core.exceptions import MalformedFileError
from annotation_uploader.models.results import ParsedFile
from annotation_uploader.parsers._kml_parser import parse_kml

logger = logging.getLogger("annotation_uploader.parsers")


def parse_kmz(
    data: bytes, source_file: str, *, max_entry_size: int = MAX_FILE_SIZE_BYTES
) -> ParsedFile:
    """Parse a KMZ archive held in memory.

    The KML entry is inflated only if its declared size is within
    *max_entry_size*, and never past that many bytes.

    Raises:
        MalformedFileError: If the archive is invalid, has no ``.kml``
            entry, the entry is too large or unreadable, or the entry
            itself is not valid KML.
    """
    logger.info("Parsing KMZ file: %s", source_file)

    try:
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            entry = next(
                (
                    info
                    for info in archive.infolist()
                    if not info.is_dir() and info.filename.lower().endswith(".kml")
                ),
                None,
            )
            if entry is None:
                raise MalformedFileError(
                    "No KML file found in KMZ archive", source_file=source_file
                )
            if entry.file_size > max_entry_size:
                msg = (
                    f"KML entry {entry.filename} is too large: {entry.file_size} bytes "
                    f"(maximum {max_entry_size})"
                )
                raise MalformedFileError(msg, source_file=source_file)
            with archive.open(entry) as handle:
                content = handle.read(max_entry_size + 1)
    except RuntimeError as exc:
        msg = f"KMZ entry is encrypted: {exc}"
        raise MalformedFileError(msg, source_file=source_file) from exc
    except NotImplementedError as exc:
        msg = f"KMZ entry uses an unsupported compression method: {exc}"
        raise MalformedFileError(msg, source_file=source_file) from exc
    except (zipfile.BadZipFile, zlib.error, EOFError, OSError) as exc:
        msg = f"Invalid KMZ archive: {exc}"
        raise MalformedFileError(msg, source_file=source_file) from exc

    if len(content) > max_entry_size:
        msg = f"KML entry {entry.filename} inflates past {max_entry_size} bytes"
        raise MalformedFileError(msg, source_file=source_file)

    logger.debug("Extracted %s from %s | bytes=%d", entry.filename, source_file, len(content))
    return parse_kml(content, source_file)
