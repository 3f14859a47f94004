"""AnnotationProvider abstract base class.

Defines the contract every annotation platform adapter implements.
Upload code talks only to this interface, so a second platform can be
added without touching the ingest pipeline.

Lifecycle:
    1. ``validate_connection()``            : check the credentials work.
    2. ``get_map_plan_details(plan_id)``    : confirm the target plan exists.
    3. ``create_annotations_batch(...)``    : push annotations, collecting failures.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from annotation_uploader.core.exceptions import ContractError, UploaderError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from annotation_uploader.core.config import UploaderConfig
    from annotation_uploader.models.annotation import Annotation
    from annotation_uploader.models.contracts import UploadProgress
    from annotation_uploader.models.upload import BatchUploadSummary, UploadResult


class AnnotationProvider(abc.ABC):
    """Abstract base class for annotation platform adapters.

    The constructor receives the ``UploaderConfig`` carrying the API
    URL, timeout and batching parameters.

    Example usage::

        with DroneDeployProvider(api_key) as provider:
            provider.validate_connection()
            summary = provider.create_annotations_batch(result.annotations, plan_id)
    """

    provider_name: str = ""

    def __init__(self, config: UploaderConfig) -> None:
        self._config = config

    @property
    def name(self) -> str:
        """Return the provider name."""
        return self.provider_name

    @property
    def config(self) -> UploaderConfig:
        """Return the uploader configuration (read-only)."""
        return self._config

    # ------------------------------------------------------------------
    # Abstract methods
    # ------------------------------------------------------------------

    @abc.abstractmethod
    def validate_connection(self) -> bool:
        """Return True when the API accepts the configured credentials.

        Raises:
            ProviderError: On transport or API errors.
        """

    @abc.abstractmethod
    def get_map_plan_details(self, plan_id: str) -> dict[str, object]:
        """Return the map plan the annotations will be attached to.

        Raises:
            ProviderNotFoundError: If the plan does not exist.
            ProviderError: On transport or API errors.
        """

    @abc.abstractmethod
    def create_annotation(self, annotation: Annotation, plan_id: str) -> UploadResult:
        """Create one annotation.  Failures are reported in the result, never raised."""

    @abc.abstractmethod
    def create_annotations_batch(
        self,
        annotations: Sequence[Annotation],
        plan_id: str,
        on_progress: Callable[[UploadProgress], None] | None = None,
    ) -> BatchUploadSummary:
        """Create many annotations, reporting progress after each one.

        Raises:
            InvalidValueError: If the batch is empty or exceeds
                ``config.max_annotations``.
        """


# ---------------------------------------------------------------------------
# Provider exceptions
# ---------------------------------------------------------------------------


class ProviderError(UploaderError):
    """Base exception for provider adapter errors.

    Attributes:
        provider: Name of the provider that raised the error.
        message: Human-readable error description.
        retryable: Whether the caller could repeat the operation.
    """

    default_stage = "upload"
    default_code = "PROVIDER_ERROR"

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        retryable: bool = False,
    ) -> None:
        self.provider = provider
        super().__init__(
            message,
            retryable=retryable,
            code=self.default_code,
            stage=self.default_stage,
        )

    def __str__(self) -> str:
        return f"[{self.provider}] {self.message}"


class ProviderAuthError(ProviderError):
    """Authentication or authorisation failure with the provider API."""

    default_code = "PROVIDER_AUTH_FAILED"

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(provider, message, retryable=False)


class ProviderNotFoundError(ProviderError):
    """The requested map plan (or its project) does not exist."""

    default_code = "PROVIDER_NOT_FOUND"

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(provider, message, retryable=False)


class ProviderTimeoutError(ProviderError):
    """The request did not complete within the configured timeout."""

    default_code = "PROVIDER_TIMEOUT"

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(provider, message, retryable=True)


class ProviderNetworkError(ProviderError):
    """The API could not be reached (DNS, refused connection ...)."""

    default_code = "PROVIDER_NETWORK_ERROR"

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(provider, message, retryable=True)


class ProviderGraphQLError(ProviderError, ContractError):
    """The API answered with GraphQL ``errors`` or an unexpected shape."""

    default_code = "PROVIDER_GRAPHQL_ERROR"

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(provider, message, retryable=False)
