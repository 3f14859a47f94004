"""Annotation platform adapters.

Defines the ``AnnotationProvider`` interface and the DroneDeploy
GraphQL implementation used to push parsed annotations upstream.
"""

from annotation_uploader.providers.base import (
    AnnotationProvider,
    ProviderAuthError,
    ProviderError,
    ProviderGraphQLError,
    ProviderNetworkError,
    ProviderNotFoundError,
    ProviderTimeoutError,
)
from annotation_uploader.providers.dronedeploy import (
    DroneDeployProvider,
    build_create_annotation_mutation,
    format_geometry_for_graphql,
)

__all__ = [
    "AnnotationProvider",
    "DroneDeployProvider",
    "ProviderAuthError",
    "ProviderError",
    "ProviderGraphQLError",
    "ProviderNetworkError",
    "ProviderNotFoundError",
    "ProviderTimeoutError",
    "build_create_annotation_mutation",
    "format_geometry_for_graphql",
]
