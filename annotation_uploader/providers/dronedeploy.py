"""DroneDeploy GraphQL adapter.

Concrete ``AnnotationProvider`` backed by the DroneDeploy GraphQL API
over ``httpx``.  Each request is a single attempt: failures are mapped
onto the ``ProviderError`` family and never retried here.

Plans are addressed as ``MapPlan:<24 hex chars>``; callers may pass
either the bare ID or the prefixed form.

Configuration:
    The endpoint defaults to ``https://www.dronedeploy.com/graphql``.
    Override via ``DRONEDEPLOY_API_URL`` (see ``UploaderConfig``).
"""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from annotation_uploader.core.config import UploaderConfig
from annotation_uploader.core.constants import PLAN_ID_PREFIX
from annotation_uploader.models.annotation import AnnotationType, LatLng
from annotation_uploader.models.upload import (
    BatchUploadSummary,
    CreatedAnnotation,
    UploadFailure,
    UploadResult,
)
from annotation_uploader.pipeline.normalizer import close_ring
from annotation_uploader.providers.base import (
    AnnotationProvider,
    ProviderAuthError,
    ProviderError,
    ProviderGraphQLError,
    ProviderNetworkError,
    ProviderNotFoundError,
    ProviderTimeoutError,
)
from annotation_uploader.utils.validators import (
    validate_annotation_count,
    validate_api_key,
    validate_plan_id,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import TracebackType

    from annotation_uploader.models.annotation import Annotation
    from annotation_uploader.models.contracts import UploadProgress

logger = logging.getLogger("annotation_uploader.providers.dronedeploy")

# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

_VIEWER_QUERY = """
query TestConnection {
  viewer {
    id
    username
  }
}
"""

_PROJECT_ID_QUERY = """
query GetProjectId($planId: ID!) {
  mapPlan(id: $planId) {
    project {
      id
    }
  }
}
"""

_MAP_PLAN_QUERY = """
query GetMapPlan($planId: ID!) {
  mapPlan(id: $planId) {
    id
    title
    project {
      id
      title
    }
    camera {
      lat
      lng
    }
  }
}
"""


class DroneDeployProvider(AnnotationProvider):
    """DroneDeploy GraphQL annotation adapter.

    Args:
        api_key: DroneDeploy API key (validated on construction).
        config: Uploader configuration; defaults when omitted.
        http_client: Optional pre-built ``httpx.Client`` (tests inject one
            with a ``MockTransport``).  A client created here is closed by
            ``close()`` / the context manager; an injected one is not.

    Raises:
        MissingFieldError / InvalidValueError: If *api_key* is invalid.
    """

    provider_name = "dronedeploy"

    def __init__(
        self,
        api_key: str,
        config: UploaderConfig | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        super().__init__(config or UploaderConfig())
        self._api_key = validate_api_key(api_key)
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=self.config.request_timeout_s)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the HTTP client if this adapter created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> DroneDeployProvider:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """POST a GraphQL document and return its ``data`` object.

        Raises:
            ProviderAuthError: On HTTP 401 / 403.
            ProviderError: On other HTTP errors (retryable for 5xx).
            ProviderTimeoutError: If the request times out.
            ProviderNetworkError: If the API cannot be reached.
            ProviderGraphQLError: If the response carries ``errors`` or
                is not a JSON object.
        """
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }
        logger.debug("GraphQL request | url=%s | bytes=%d", self.config.api_url, len(query))
        try:
            response = self._client.post(
                self.config.api_url,
                json={"query": query, "variables": variables or {}},
                headers=headers,
                timeout=self.config.request_timeout_s,
            )
        except httpx.TimeoutException as exc:
            msg = f"Request timed out after {self.config.request_timeout_s:g}s"
            raise ProviderTimeoutError(self.name, msg) from exc
        except httpx.TransportError as exc:
            msg = f"Unable to reach DroneDeploy API: {exc}"
            raise ProviderNetworkError(self.name, msg) from exc

        status = response.status_code
        if status in (401, 403):
            raise ProviderAuthError(self.name, "Authentication failed: check your API key")
        if status >= 500:
            raise ProviderError(self.name, f"Server error ({status})", retryable=True)
        if status >= 400:
            raise ProviderError(self.name, f"HTTP {status}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderGraphQLError(self.name, "Response is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise ProviderGraphQLError(self.name, "Response is not a JSON object")

        errors = payload.get("errors")
        if errors:
            messages = ", ".join(
                str(err.get("message", err)) if isinstance(err, dict) else str(err)
                for err in errors
            )
            raise ProviderGraphQLError(self.name, f"GraphQL Error: {messages}")

        data = payload.get("data")
        return data if isinstance(data, dict) else {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def validate_connection(self) -> bool:
        data = self.execute(_VIEWER_QUERY)
        viewer = data.get("viewer") or {}
        return bool(viewer.get("id"))

    def get_project_id(self, plan_id: str) -> str:
        """Return the project ID that owns *plan_id*.

        Raises:
            ProviderNotFoundError: If the plan or its project is missing.
        """
        data = self.execute(_PROJECT_ID_QUERY, {"planId": _plan_ref(plan_id)})
        project = (data.get("mapPlan") or {}).get("project") or {}
        if not project.get("id"):
            raise ProviderNotFoundError(self.name, "Map plan not found or no associated project")
        return str(project["id"])

    def get_map_plan_details(self, plan_id: str) -> dict[str, object]:
        data = self.execute(_MAP_PLAN_QUERY, {"planId": _plan_ref(plan_id)})
        plan = data.get("mapPlan")
        if not plan:
            raise ProviderNotFoundError(self.name, "Map plan not found")
        return dict(plan)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_annotation(self, annotation: Annotation, plan_id: str) -> UploadResult:
        try:
            mutation = build_create_annotation_mutation(annotation, plan_id)
            data = self.execute(mutation)
            created = data.get("createAnnotation")
            if not created:
                raise ProviderGraphQLError(
                    self.name, "Failed to create annotation: no data returned"
                )
            return UploadResult(
                success=True,
                annotation=CreatedAnnotation.model_validate(created),
                original_title=annotation.title,
            )
        except ProviderError as exc:
            logger.warning(
                "Annotation upload failed | title=%s | code=%s | error=%s",
                annotation.title,
                exc.code,
                exc.message,
            )
            return UploadResult(success=False, error=exc.message, original_title=annotation.title)
        except PydanticValidationError as exc:
            msg = f"Unexpected createAnnotation response: {exc.error_count()} invalid field(s)"
            logger.warning("Annotation upload failed | title=%s | error=%s", annotation.title, msg)
            return UploadResult(success=False, error=msg, original_title=annotation.title)

    def create_annotations_batch(
        self,
        annotations: Sequence[Annotation],
        plan_id: str,
        on_progress: Callable[[UploadProgress], None] | None = None,
    ) -> BatchUploadSummary:
        validate_annotation_count(annotations, max_annotations=self.config.max_annotations)
        validate_plan_id(plan_id)

        total = len(annotations)
        batch_size = self.config.upload_batch_size
        summary = BatchUploadSummary(total_processed=total)
        logger.info(
            "Uploading annotations | total=%d | batch_size=%d | plan=%s",
            total,
            batch_size,
            plan_id,
        )

        completed = 0
        for start in range(0, total, batch_size):
            for offset, annotation in enumerate(annotations[start : start + batch_size]):
                result = self.create_annotation(annotation, plan_id)
                if result.success:
                    summary.results.append(result)
                else:
                    summary.errors.append(
                        UploadFailure(
                            annotation=annotation.title,
                            error=result.error or "Unknown error",
                            index=start + offset + 1,
                        )
                    )
                completed += 1
                if on_progress is not None:
                    on_progress(
                        {
                            "completed": completed,
                            "total": total,
                            "current": annotation.title,
                            "success": result.success,
                        }
                    )

            if start + batch_size < total and self.config.upload_batch_delay_s > 0:
                time.sleep(self.config.upload_batch_delay_s)

        logger.info(
            "Upload finished | succeeded=%d | failed=%d | plan=%s",
            summary.success_count,
            summary.error_count,
            plan_id,
        )
        return summary


# ---------------------------------------------------------------------------
# Mutation builders
# ---------------------------------------------------------------------------


def _plan_ref(plan_id: str) -> str:
    return f"{PLAN_ID_PREFIX}{validate_plan_id(plan_id)}"


def _point_literal(lng: float, lat: float) -> str:
    return f"{{lat: {lat}, lng: {lng}}}"


def format_geometry_for_graphql(annotation: Annotation) -> str:
    """Render geometry as a GraphQL input literal.

    LOCATION → ``{lat: …, lng: …}``; AREA / LINE → a list of those.
    AREA rings are closed if they are not already.
    """
    geometry = annotation.geometry
    if isinstance(geometry, LatLng):
        return _point_literal(geometry.lng, geometry.lat)

    coords = list(geometry)
    if annotation.annotation_type is AnnotationType.AREA:
        coords = close_ring(coords)
    return "[" + ", ".join(_point_literal(lng, lat) for lng, lat in coords) + "]"


def build_create_annotation_mutation(annotation: Annotation, plan_id: str) -> str:
    """Build the ``createAnnotation`` mutation document for *annotation*.

    String arguments are JSON-escaped so titles containing quotes or
    backslashes cannot break out of the literal.

    Raises:
        MissingFieldError / InvalidValueError: If *plan_id* is invalid.
    """
    plan_ref = json.dumps(_plan_ref(plan_id))
    return f"""
mutation CreateAnnotation {{
  createAnnotation(
    planId: {plan_ref}
    annotationType: {annotation.annotation_type.value.lower()}
    color: {json.dumps(annotation.color)}
    fillColor: {json.dumps(annotation.fill_color)}
    title: {json.dumps(annotation.title)}
    geometry: {format_geometry_for_graphql(annotation)}
  ) {{
    id
    title
    color
    fillColor
    annotationType
  }}
}}
"""
