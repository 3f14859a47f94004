"""Uploader configuration loaded from environment variables.

Every value has a default matching the hosted uploader; the host
environment (``.env``, container settings) is the source of truth.

``from_env()`` raises ``ConfigValidationError`` if a value is out of
its valid range, so bad configuration is caught at startup rather than
halfway through an upload.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from annotation_uploader.core import constants
from annotation_uploader.core.exceptions import ValidationError

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off", ""})


class ConfigValidationError(ValidationError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class UploaderConfig:
    """Immutable uploader configuration.

    Attributes:
        api_url: DroneDeploy GraphQL endpoint.
        request_timeout_s: Per-request HTTP timeout in seconds.
        max_file_size_bytes: Largest accepted upload.
        max_annotations: Most annotations accepted in one batch upload.
        upload_batch_size: Annotations sent per batch before pausing.
        upload_batch_delay_s: Pause between batches in seconds.
        standardize_colors: Default for color snapping when the caller
            does not choose explicitly.
    """

    api_url: str = constants.DEFAULT_API_URL
    request_timeout_s: float = constants.REQUEST_TIMEOUT_S
    max_file_size_bytes: int = constants.MAX_FILE_SIZE_BYTES
    max_annotations: int = constants.MAX_ANNOTATIONS
    upload_batch_size: int = constants.UPLOAD_BATCH_SIZE
    upload_batch_delay_s: float = constants.UPLOAD_BATCH_DELAY_S
    standardize_colors: bool = False

    @classmethod
    def from_env(cls) -> UploaderConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range or a
                boolean flag is not a recognised word.
            ValueError: If a numeric environment variable cannot be
                parsed (e.g. ``UPLOAD_BATCH_SIZE=abc``).
        """
        config = cls(
            api_url=os.getenv("DRONEDEPLOY_API_URL", constants.DEFAULT_API_URL),
            request_timeout_s=float(
                os.getenv("DRONEDEPLOY_REQUEST_TIMEOUT_S", str(constants.REQUEST_TIMEOUT_S))
            ),
            max_file_size_bytes=int(
                os.getenv("MAX_FILE_SIZE_BYTES", str(constants.MAX_FILE_SIZE_BYTES))
            ),
            max_annotations=int(os.getenv("MAX_ANNOTATIONS", str(constants.MAX_ANNOTATIONS))),
            upload_batch_size=int(os.getenv("UPLOAD_BATCH_SIZE", str(constants.UPLOAD_BATCH_SIZE))),
            upload_batch_delay_s=float(
                os.getenv("UPLOAD_BATCH_DELAY_S", str(constants.UPLOAD_BATCH_DELAY_S))
            ),
            standardize_colors=_parse_bool("STANDARDIZE_COLORS", os.getenv("STANDARDIZE_COLORS", "")),
        )
        _validate(config)
        return config


def _parse_bool(key: str, raw: str) -> bool:
    word = raw.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ConfigValidationError(key, raw, "must be one of true/false, yes/no, on/off, 1/0")


def _validate(config: UploaderConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    if not config.api_url.startswith(("http://", "https://")):
        raise ConfigValidationError(
            "DRONEDEPLOY_API_URL",
            config.api_url,
            "must be an http(s) URL",
        )

    if config.request_timeout_s <= 0:
        raise ConfigValidationError(
            "DRONEDEPLOY_REQUEST_TIMEOUT_S",
            config.request_timeout_s,
            "must be > 0 (seconds)",
        )

    if config.max_file_size_bytes <= 0:
        raise ConfigValidationError(
            "MAX_FILE_SIZE_BYTES",
            config.max_file_size_bytes,
            "must be > 0 (bytes)",
        )

    if config.max_annotations <= 0:
        raise ConfigValidationError(
            "MAX_ANNOTATIONS",
            config.max_annotations,
            "must be > 0",
        )

    if config.upload_batch_size <= 0:
        raise ConfigValidationError(
            "UPLOAD_BATCH_SIZE",
            config.upload_batch_size,
            "must be > 0",
        )

    if config.upload_batch_delay_s < 0:
        raise ConfigValidationError(
            "UPLOAD_BATCH_DELAY_S",
            config.upload_batch_delay_s,
            "must be >= 0 (seconds)",
        )
