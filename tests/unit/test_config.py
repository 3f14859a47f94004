"""Tests for uploader configuration.

Covers:
- Default values
- Loading from environment variables
- Type coercion (string env vars → numeric / boolean fields)
- Fail-fast range validation
"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from annotation_uploader.core.config import ConfigValidationError, UploaderConfig


class TestUploaderConfigDefaults:
    """Verify default configuration values."""

    def test_default_api_url(self) -> None:
        cfg = UploaderConfig()
        assert cfg.api_url == "https://www.dronedeploy.com/graphql"

    def test_default_timeout(self) -> None:
        assert UploaderConfig().request_timeout_s == 120.0

    def test_default_limits(self) -> None:
        cfg = UploaderConfig()
        assert cfg.max_file_size_bytes == 10 * 1024 * 1024
        assert cfg.max_annotations == 10_000

    def test_default_batching(self) -> None:
        cfg = UploaderConfig()
        assert cfg.upload_batch_size == 25
        assert cfg.upload_batch_delay_s == 0.1

    def test_standardize_off_by_default(self) -> None:
        assert UploaderConfig().standardize_colors is False


class TestUploaderConfigFromEnv:
    """Verify loading from environment variables."""

    def test_loads_from_environment(self) -> None:
        """All env vars are read and coerced to correct types."""
        env = {
            "DRONEDEPLOY_API_URL": "https://staging.example.com/graphql",
            "DRONEDEPLOY_REQUEST_TIMEOUT_S": "30",
            "MAX_FILE_SIZE_BYTES": "2048",
            "MAX_ANNOTATIONS": "500",
            "UPLOAD_BATCH_SIZE": "10",
            "UPLOAD_BATCH_DELAY_S": "0",
            "STANDARDIZE_COLORS": "yes",
        }
        with patch.dict(os.environ, env, clear=True):
            cfg = UploaderConfig.from_env()

        assert cfg.api_url == "https://staging.example.com/graphql"
        assert cfg.request_timeout_s == 30.0
        assert cfg.max_file_size_bytes == 2048
        assert cfg.max_annotations == 500
        assert cfg.upload_batch_size == 10
        assert cfg.upload_batch_delay_s == 0.0
        assert cfg.standardize_colors is True

    def test_defaults_when_env_missing(self) -> None:
        """Missing environment variables fall back to defaults."""
        with patch.dict(os.environ, {}, clear=True):
            cfg = UploaderConfig.from_env()

        assert cfg == UploaderConfig()

    @pytest.mark.parametrize(("raw", "expected"), [("TRUE", True), ("off", False), ("0", False)])
    def test_boolean_words(self, raw: str, expected: bool) -> None:
        with patch.dict(os.environ, {"STANDARDIZE_COLORS": raw}, clear=True):
            assert UploaderConfig.from_env().standardize_colors is expected

    def test_frozen_immutability(self) -> None:
        """UploaderConfig is frozen (immutable)."""
        cfg = UploaderConfig()
        with pytest.raises(AttributeError):
            cfg.upload_batch_size = 50  # type: ignore[misc]


class TestUploaderConfigValidation:
    """Fail-fast range validation in from_env."""

    def test_non_http_url_rejected(self) -> None:
        with (
            patch.dict(os.environ, {"DRONEDEPLOY_API_URL": "ftp://example.com"}, clear=True),
            pytest.raises(ConfigValidationError, match="DRONEDEPLOY_API_URL"),
        ):
            UploaderConfig.from_env()

    def test_timeout_zero_rejected(self) -> None:
        with (
            patch.dict(os.environ, {"DRONEDEPLOY_REQUEST_TIMEOUT_S": "0"}, clear=True),
            pytest.raises(ConfigValidationError, match="must be > 0"),
        ):
            UploaderConfig.from_env()

    def test_file_size_negative_rejected(self) -> None:
        with (
            patch.dict(os.environ, {"MAX_FILE_SIZE_BYTES": "-1"}, clear=True),
            pytest.raises(ConfigValidationError, match="MAX_FILE_SIZE_BYTES"),
        ):
            UploaderConfig.from_env()

    def test_max_annotations_zero_rejected(self) -> None:
        with (
            patch.dict(os.environ, {"MAX_ANNOTATIONS": "0"}, clear=True),
            pytest.raises(ConfigValidationError, match="MAX_ANNOTATIONS"),
        ):
            UploaderConfig.from_env()

    def test_batch_size_zero_rejected(self) -> None:
        with (
            patch.dict(os.environ, {"UPLOAD_BATCH_SIZE": "0"}, clear=True),
            pytest.raises(ConfigValidationError, match="UPLOAD_BATCH_SIZE"),
        ):
            UploaderConfig.from_env()

    def test_batch_delay_negative_rejected(self) -> None:
        with (
            patch.dict(os.environ, {"UPLOAD_BATCH_DELAY_S": "-0.5"}, clear=True),
            pytest.raises(ConfigValidationError, match="must be >= 0"),
        ):
            UploaderConfig.from_env()

    def test_unknown_boolean_word_rejected(self) -> None:
        with (
            patch.dict(os.environ, {"STANDARDIZE_COLORS": "maybe"}, clear=True),
            pytest.raises(ConfigValidationError, match="STANDARDIZE_COLORS"),
        ):
            UploaderConfig.from_env()

    def test_non_numeric_env_raises_value_error(self) -> None:
        """Non-numeric string for an int field → ValueError."""
        with (
            patch.dict(os.environ, {"UPLOAD_BATCH_SIZE": "abc"}, clear=True),
            pytest.raises(ValueError),
        ):
            UploaderConfig.from_env()

    def test_error_contains_key_and_value(self) -> None:
        """ConfigValidationError includes key and value attributes."""
        with (
            patch.dict(os.environ, {"MAX_ANNOTATIONS": "-5"}, clear=True),
            pytest.raises(ConfigValidationError) as exc_info,
        ):
            UploaderConfig.from_env()
        assert exc_info.value.key == "MAX_ANNOTATIONS"
        assert exc_info.value.value == -5
        assert exc_info.value.retryable is False
