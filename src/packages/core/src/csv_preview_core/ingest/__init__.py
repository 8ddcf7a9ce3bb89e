"""Ingest module for bounded-prefix preview parsing."""
from csv_preview_core.ingest.config import ParseConfig, snapshot_config
from csv_preview_core.ingest.infer import infer_has_headers, preview_columns
from csv_preview_core.ingest.models import (
    PreviewFatal,
    PreviewResult,
    PreviewSuccess,
    PreviewWarning,
    SessionState,
)
from csv_preview_core.ingest.normalize import accepted_sample
from csv_preview_core.ingest.preview import preview_parse
from csv_preview_core.ingest.source import BytesFileSource, FileSource, LocalFileSource

__all__ = [
    "BytesFileSource",
    "FileSource",
    "LocalFileSource",
    "ParseConfig",
    "PreviewFatal",
    "PreviewResult",
    "PreviewSuccess",
    "PreviewWarning",
    "SessionState",
    "accepted_sample",
    "infer_has_headers",
    "preview_columns",
    "preview_parse",
    "snapshot_config",
]
