"""Normalization and ingest: raw records → validated annotations."""

from annotation_uploader.pipeline.ingest import process_file
from annotation_uploader.pipeline.normalizer import close_ring, normalize, normalize_records

__all__ = ["close_ring", "normalize", "normalize_records", "process_file"]
