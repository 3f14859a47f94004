"""Pydantic models for DroneDeploy upload results.

These describe what the GraphQL API returned for each
``createAnnotation`` call and the aggregate outcome of a batch upload.
They are the "receipt" handed back to the upload UI.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CreatedAnnotation(BaseModel):
    """Annotation as echoed back by ``createAnnotation``."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = ""
    color: str = ""
    fill_color: str = Field(default="", alias="fillColor")
    annotation_type: str = Field(default="", alias="annotationType")


class UploadResult(BaseModel):
    """Outcome of a single ``createAnnotation`` call.

    Attributes:
        success: Whether the annotation was created.
        annotation: Server echo on success.
        error: Failure reason on error.
        original_title: Title of the annotation that was sent.
    """

    success: bool
    annotation: CreatedAnnotation | None = None
    error: str | None = None
    original_title: str = ""


class UploadFailure(BaseModel):
    """One failed annotation within a batch.

    Attributes:
        annotation: Title of the annotation that failed.
        error: Failure reason.
        index: One-based position in the submitted list.
    """

    annotation: str
    error: str
    index: int


class BatchUploadSummary(BaseModel):
    """Aggregate outcome of ``create_annotations_batch``."""

    results: list[UploadResult] = Field(default_factory=list)
    errors: list[UploadFailure] = Field(default_factory=list)
    total_processed: int = 0

    @property
    def success_count(self) -> int:
        return len(self.results)

    @property
    def error_count(self) -> int:
        return len(self.errors)
