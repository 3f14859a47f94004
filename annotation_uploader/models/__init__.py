"""Data models and schemas.

Defines the data structures used throughout the uploader:
- Annotation: The canonical, validated annotation entity
- CsvRecord / GeoJsonRecord / KmlRecord: Raw per-format parser output
- DroneDeployColor: Fixed palette entries for color standardization
- ParseResult / RejectedRecord: Outcome of processing one file
- UploadResult / BatchUploadSummary: Outcome of pushing annotations upstream
"""

from annotation_uploader.models.annotation import (
    Annotation,
    AnnotationType,
    Coordinate,
    LatLng,
    ModelValidationError,
)
from annotation_uploader.models.palette import DRONEDEPLOY_COLORS, DroneDeployColor
from annotation_uploader.models.raw_feature import (
    CsvRecord,
    GeoJsonRecord,
    KmlRecord,
    RawFeature,
)
from annotation_uploader.models.results import ParsedFile, ParseResult, RejectedRecord

__all__ = [
    "DRONEDEPLOY_COLORS",
    "Annotation",
    "AnnotationType",
    "Coordinate",
    "CsvRecord",
    "DroneDeployColor",
    "GeoJsonRecord",
    "KmlRecord",
    "LatLng",
    "ModelValidationError",
    "ParseResult",
    "ParsedFile",
    "RawFeature",
    "RejectedRecord",
]
