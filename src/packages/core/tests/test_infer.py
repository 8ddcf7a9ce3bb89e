"""Tests for header inference and the accept handoff."""
from csv_preview_core.ingest import PreviewSuccess, accepted_sample, infer_has_headers, preview_columns


def _preview(rows, has_headers=False):
    return PreviewSuccess(
        first_chunk="",
        first_rows=rows,
        is_single_line=len(rows) == 1,
        has_headers=has_headers,
    )


def test_infer_has_headers():
    multi = _preview([["a", "b"], ["1", "2"]])
    single = _preview([["1", "2"]])
    assert infer_has_headers(multi) is True
    assert infer_has_headers(multi, assume_no_headers=True) is False
    assert infer_has_headers(single) is False
    assert infer_has_headers(single, assume_no_headers=True) is False


def test_preview_columns_from_header():
    preview = _preview([["id", "", "id"], ["1", "2", "3"]], has_headers=True)
    assert preview_columns(preview) == ["id", "Column 2", "id_3"]


def test_preview_columns_suffix_avoids_existing_names():
    preview = _preview([["a_3", "a", "a"], ["1", "2", "3"]], has_headers=True)
    assert preview_columns(preview) == ["a_3", "a", "a_4"]
    sample = accepted_sample(preview)
    assert sample["records"] == [{"a_3": "1", "a": "2", "a_4": "3"}]


def test_preview_columns_generated_name_collides_with_header():
    preview = _preview([["Column 2", ""], ["1", "2"]], has_headers=True)
    assert preview_columns(preview) == ["Column 2", "Column 2_2"]


def test_preview_columns_generated():
    preview = _preview([["1", "2", "3"], ["4", "5", "6"]])
    assert preview_columns(preview) == ["Column 1", "Column 2", "Column 3"]


def test_accepted_sample_with_headers():
    preview = _preview([["id", "name"], ["1", " foo "], ["2", "bar"]], has_headers=True)
    sample = accepted_sample(preview)
    assert sample["columns"] == ["id", "name"]
    assert sample["records"] == [{"id": "1", "name": "foo"}, {"id": "2", "name": "bar"}]
    assert sample["has_headers"] is True
    assert sample["config"]["quote_char"] == '"'


def test_accepted_sample_without_headers():
    preview = _preview([["id", "name"], ["1", "foo"]])
    sample = accepted_sample(preview)
    assert sample["columns"] == ["Column 1", "Column 2"]
    assert sample["records"][0] == {"Column 1": "id", "Column 2": "name"}
    assert len(sample["records"]) == 2
