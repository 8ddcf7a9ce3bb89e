"""Header inference for previews."""
from csv_preview_core.ingest.models import PreviewSuccess


def infer_has_headers(preview: PreviewSuccess, assume_no_headers: bool = False) -> bool:
    """Initial header flag: only multi-row previews can have a header row."""
    return not assume_no_headers and not preview.is_single_line


def generated_column_name(index: int) -> str:
    return f"Column {index + 1}"


def preview_columns(preview: PreviewSuccess) -> list[str]:
    """Column names for the next import step.

    Header cells are used when the preview has headers; blank cells fall back
    to generated names and repeated names get a positional suffix, bumped
    until the name is unique.
    """
    width = max((len(row) for row in preview.first_rows), default=0)
    if not preview.has_headers or not preview.first_rows:
        return [generated_column_name(i) for i in range(width)]

    header = preview.first_rows[0]
    columns = []
    seen = set()
    for i in range(width):
        base = (header[i].strip() if i < len(header) else "") or generated_column_name(i)
        name = base
        suffix = i + 1
        while name in seen:
            name = f"{base}_{suffix}"
            suffix += 1
        seen.add(name)
        columns.append(name)
    return columns
