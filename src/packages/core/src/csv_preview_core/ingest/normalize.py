"""Handoff of an accepted preview to the import step."""
from typing import Any

import pandas as pd

from csv_preview_core.ingest.infer import preview_columns
from csv_preview_core.ingest.models import PreviewSuccess


def normalize_value(v: Any) -> str | None:
    """Normalize a preview cell; missing cells become None."""
    if v is None or (isinstance(v, float) and pd.isna(v)):
        return None
    return str(v).strip()


def normalize_record(row: dict) -> dict[str, Any]:
    """Normalize a record dict cell by cell."""
    return {k: normalize_value(v) for k, v in row.items()}


def preview_frame(preview: PreviewSuccess) -> pd.DataFrame:
    """Sample rows as a string frame, header row removed when flagged."""
    columns = preview_columns(preview)
    rows = preview.first_rows[1:] if preview.has_headers else preview.first_rows
    # pad short rows so the frame is rectangular
    padded = [row + [None] * (len(columns) - len(row)) for row in rows]
    return pd.DataFrame(padded, columns=columns, dtype=object)


def accepted_sample(preview: PreviewSuccess) -> dict[str, Any]:
    """Everything the column-mapping step needs from an accepted preview."""
    df = preview_frame(preview)
    records = df.to_dict("records")
    return {
        "columns": list(df.columns),
        "records": [normalize_record(r) for r in records],
        "has_headers": preview.has_headers,
        "config": preview.config.model_dump(),
    }
