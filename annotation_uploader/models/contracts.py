"""Payload contracts for the parse → upload boundary.

The dict shapes handed to external collaborators (upload UI, API layer)
are defined here as ``TypedDict``s so that field names live in one
place.  Keys are camelCase because they mirror the DroneDeploy wire
format the upload layer forwards.
"""

from __future__ import annotations

from typing import NotRequired, TypedDict


class LatLngPayload(TypedDict):
    """LOCATION geometry."""

    lat: float
    lng: float


class AnnotationPayload(TypedDict):
    """Serialised ``Annotation``.

    ``geometry`` is a ``LatLngPayload`` for LOCATION and a list of
    ``[lng, lat]`` pairs for AREA / LINE.
    """

    annotationType: str
    title: str
    color: str
    fillColor: str
    geometry: LatLngPayload | list[list[float]]
    description: NotRequired[str]


class RejectedRecordPayload(TypedDict):
    """One record that was skipped, with the reason."""

    source: str
    reason: str
    field: str | None
    record: dict[str, object]


class ParseResultPayload(TypedDict):
    """Output of ``process_file`` in dict form."""

    sourceFile: str
    fileFormat: str
    annotations: list[AnnotationPayload]
    rejected: list[RejectedRecordPayload]


class UploadProgress(TypedDict):
    """Argument passed to the batch-upload progress callback."""

    completed: int
    total: int
    current: str
    success: bool
