"""Parse outcomes: surviving annotations plus the records that were skipped.

Record-level failures never abort a file.  They are collected here so the
upload UI can show a partial-success summary ("12 parsed, 2 skipped").
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from annotation_uploader.core.exceptions import AnnotationValidationError
    from annotation_uploader.models.annotation import Annotation
    from annotation_uploader.models.contracts import (
        ParseResultPayload,
        RejectedRecordPayload,
    )
    from annotation_uploader.models.raw_feature import RawFeature


@dataclass(frozen=True, slots=True)
class RejectedRecord:
    """A record excluded from the result, with the reason.

    Attributes:
        source: Where the record came from (``"row 3"``, ``"feature 0"`` ...).
        reason: Actionable explanation.
        field: Offending field, or ``None`` for structural problems.
        record: Snapshot of the raw record for display.
    """

    source: str
    reason: str
    field: str | None = None
    record: dict[str, object] = dataclasses.field(default_factory=dict)

    @classmethod
    def from_error(cls, record: RawFeature, error: AnnotationValidationError) -> RejectedRecord:
        """Build a rejection from a normalizer failure."""
        return cls(
            source=record.source_label,
            reason=error.reason,
            field=error.field,
            record=record.to_dict(),
        )

    def to_dict(self) -> RejectedRecordPayload:
        return {
            "source": self.source,
            "reason": self.reason,
            "field": self.field,
            "record": dict(self.record),
        }


@dataclass(frozen=True, slots=True)
class ParsedFile:
    """Output of a single format parser, before normalization."""

    features: list[RawFeature] = dataclasses.field(default_factory=list)
    rejected: list[RejectedRecord] = dataclasses.field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Final outcome of processing one uploaded file.

    Attributes:
        source_file: Name of the uploaded file.
        file_format: Detected format (``"csv"``, ``"geojson"``, ``"kml"``, ``"kmz"``).
        annotations: Normalized annotations, in file order.
        rejected: Skipped records (parser rejections, then normalizer rejections).
    """

    source_file: str
    file_format: str
    annotations: list[Annotation] = dataclasses.field(default_factory=list)
    rejected: list[RejectedRecord] = dataclasses.field(default_factory=list)

    @property
    def parsed_count(self) -> int:
        return len(self.annotations)

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)

    def summary(self) -> str:
        """Partial-success line for the upload UI."""
        return f"{self.parsed_count} parsed, {self.rejected_count} skipped"

    def to_dict(self) -> ParseResultPayload:
        return {
            "sourceFile": self.source_file,
            "fileFormat": self.file_format,
            "annotations": [a.to_dict() for a in self.annotations],
            "rejected": [r.to_dict() for r in self.rejected],
        }
