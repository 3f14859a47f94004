"""Unified exception taxonomy.

Every domain exception inherits from ``UploaderError`` and carries
structured context fields so that callers (upload UI, API layer) can
render actionable feedback and decide whether a retry makes sense.

Taxonomy categories
-------------------
- ``ValidationError``  : record/field/config violations, never retryable.
- ``TransientError``   : temporary failures (network, timeout), retryable.
- ``PermanentError``   : unrecoverable failures (bad file, auth), not retryable.
- ``ContractError``    : remote API response drift, never retryable.

Every exception exposes ``to_error_dict()`` for a stable structured
error payload suitable for logging and partial-failure summaries.
"""

from __future__ import annotations


class UploaderError(Exception):
    """Base exception for all annotation-uploader errors.

    Attributes:
        message: Human-readable error description.
        stage: Stage where the error occurred
            (e.g. ``"parse"``, ``"normalize"``, ``"upload"``).
        code: Machine-readable error code (e.g. ``"MALFORMED_FILE"``).
        retryable: Whether repeating the operation could succeed.
        correlation_id: Request correlation identifier, if any.
    """

    default_stage: str = ""
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
        correlation_id: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        self.correlation_id = correlation_id
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ContractError):
            return "contract"
        if isinstance(self, ValidationError):
            return "validation"
        if isinstance(self, TransientError):
            return "transient"
        if isinstance(self, PermanentError):
            return "permanent"
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "correlation_id": self.correlation_id,
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ValidationError(UploaderError):
    """Input or domain-model validation failure. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class TransientError(UploaderError):
    """Temporary failure that may succeed if the caller tries again."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", True)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class PermanentError(UploaderError):
    """Unrecoverable failure. Not retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class ContractError(UploaderError):
    """Unexpected response shape from a remote API. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Record-level validation (normalizer + validators)
# ---------------------------------------------------------------------------


class AnnotationValidationError(ValidationError):
    """A single annotation record failed validation.

    ``str(err)`` is the reason alone so it can be shown to users verbatim
    (e.g. ``"AREA requires minimum 3 coordinate pairs, got 2"``).

    Attributes:
        field: Name of the offending field (``"title"``, ``"geometry"`` ...).
        reason: Human-readable explanation.
    """

    default_stage = "normalize"
    default_code = "ANNOTATION_INVALID"

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(reason)

    def to_error_dict(self) -> dict[str, object]:
        payload = super().to_error_dict()
        payload["field"] = self.field
        return payload


class MissingFieldError(AnnotationValidationError):
    """A required field is absent or empty."""

    default_code = "ANNOTATION_MISSING_FIELD"

    def __init__(self, field: str, reason: str = "") -> None:
        super().__init__(field, reason or f"Missing required field: {field}")


class InvalidValueError(AnnotationValidationError):
    """A field is present but its value is malformed."""

    default_code = "ANNOTATION_INVALID_VALUE"


class OutOfRangeError(InvalidValueError):
    """A coordinate lies outside WGS 84 bounds."""

    default_code = "ANNOTATION_OUT_OF_RANGE"


class InsufficientPointsError(InvalidValueError):
    """A line or area geometry has fewer points than its type requires."""

    default_code = "ANNOTATION_INSUFFICIENT_POINTS"


# ---------------------------------------------------------------------------
# File-level failures (fatal for the whole upload)
# ---------------------------------------------------------------------------


class ParseError(PermanentError):
    """Raised when an uploaded file cannot be turned into annotations.

    Attributes:
        source_file: Name of the uploaded file.
    """

    default_stage = "parse"
    default_code = "PARSE_FAILED"

    def __init__(self, message: str, *, source_file: str = "") -> None:
        self.source_file = source_file
        super().__init__(message)


class UnsupportedFormatError(ParseError):
    """The file extension is not one of the supported formats."""

    default_code = "UNSUPPORTED_FORMAT"


class MalformedFileError(ParseError):
    """The file content is not valid for its declared format."""

    default_code = "MALFORMED_FILE"


class FileTooLargeError(ParseError):
    """The file exceeds the configured size limit."""

    default_code = "FILE_TOO_LARGE"


class EmptyResultError(ParseError):
    """The file parsed but produced zero valid annotations.

    Attributes:
        rejected: Every record that was skipped, with its reason.
    """

    default_code = "EMPTY_RESULT"

    def __init__(
        self,
        message: str,
        *,
        source_file: str = "",
        rejected: list | None = None,
    ) -> None:
        self.rejected = list(rejected or [])
        super().__init__(message, source_file=source_file)
