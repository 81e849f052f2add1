"""Tests for content element models, serialization, and validation."""

import json
import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError

from docs2slides.content import (
    ContentElement,
    ContentStream,
    ElementType,
    load_content_stream,
    save_content_stream,
    validate_content_json,
)


# ============================================================
# MODEL VALIDATION TESTS
# ============================================================

def test_element_type_enum_values():
    """Verify all expected element type values exist."""
    expected = {
        "SECTION_TITLE", "DOCUMENT_TITLE", "HEADING_1", "HEADING_2",
        "HEADING_3", "PARAGRAPH", "TABLE", "IMAGE",
    }
    actual = {et.value for et in ElementType}
    assert actual == expected


def test_element_defaults():
    el = ContentElement(type=ElementType.PARAGRAPH)
    assert el.text == ""
    assert el.table_data == []
    assert el.image_reference is None
    assert el.section_level == 0


def test_text_none_becomes_empty():
    el = ContentElement(type=ElementType.PARAGRAPH, text=None)
    assert el.text == ""


def test_negative_section_level_rejected():
    with pytest.raises(ValidationError):
        ContentElement(type=ElementType.PARAGRAPH, text="x", section_level=-1)


def test_image_reference_only_on_images():
    with pytest.raises(ValidationError):
        ContentElement(type=ElementType.PARAGRAPH, text="x", image_reference="http://a/b.png")

    el = ContentElement(type=ElementType.IMAGE, image_reference="http://a/b.png")
    assert el.image_reference == "http://a/b.png"


def test_element_is_frozen():
    el = ContentElement(type=ElementType.PARAGRAPH, text="x")
    with pytest.raises(ValidationError):
        el.text = "y"


def test_ragged_table_dimensions():
    el = ContentElement(
        type=ElementType.TABLE,
        table_data=[["a", "b", "c"], ["d", "e"], ["f", "g", "h", "i"]],
    )
    assert el.row_count == 3
    assert el.column_count == 4


def test_empty_table_dimensions():
    el = ContentElement(type=ElementType.TABLE)
    assert el.row_count == 0
    assert el.column_count == 0


def test_type_predicates():
    assert ContentElement(type=ElementType.HEADING_2, text="h").is_heading
    assert ContentElement(type=ElementType.SECTION_TITLE, text="s").is_section
    assert ContentElement(type=ElementType.DOCUMENT_TITLE, text="t").is_text
    assert not ContentElement(type=ElementType.TABLE).is_text


def test_with_section_level_copies():
    el = ContentElement(type=ElementType.PARAGRAPH, text="x", section_level=0)
    moved = el.with_section_level(2)
    assert moved.section_level == 2
    assert el.section_level == 0
    assert moved.text == "x"


def test_describe():
    assert ContentElement(type=ElementType.SECTION_TITLE, text="Intro").describe() == "[SECTION 1] Intro"
    table = ContentElement(type=ElementType.TABLE, table_data=[["a", "b"]])
    assert table.describe() == "[TABLE] 1x2"


def test_content_stream_requires_at_least_one_element():
    with pytest.raises(ValidationError):
        ContentStream(elements=[])


def test_content_stream_section_count():
    stream = ContentStream(elements=[
        ContentElement(type=ElementType.SECTION_TITLE, text="A"),
        ContentElement(type=ElementType.PARAGRAPH, text="x", section_level=1),
        ContentElement(type=ElementType.SECTION_TITLE, text="B"),
    ])
    assert stream.section_count == 2


# ============================================================
# SERIALIZATION TESTS
# ============================================================

def _make_stream():
    return ContentStream(
        source_id="doc-1",
        title="Test",
        elements=[
            ContentElement(type=ElementType.SECTION_TITLE, text="Intro"),
            ContentElement(type=ElementType.PARAGRAPH, text="Hello", section_level=1, y=100.0),
            ContentElement(type=ElementType.TABLE, table_data=[["a", "b"], ["c"]], section_level=1),
            ContentElement(
                type=ElementType.IMAGE, image_reference="https://example.com/a.png",
                section_level=1, width=200.0, height=100.0,
            ),
        ],
    )


def test_save_and_load_roundtrip():
    stream = _make_stream()

    with tempfile.NamedTemporaryFile(suffix=".json", delete=False, mode="w") as f:
        temp_path = f.name

    try:
        save_content_stream(stream, temp_path)

        loaded = load_content_stream(temp_path)
        assert loaded == stream
    finally:
        Path(temp_path).unlink()


def test_saved_stream_omits_unset_hints():
    stream = _make_stream()

    with tempfile.NamedTemporaryFile(suffix=".json", delete=False, mode="w") as f:
        temp_path = f.name

    try:
        save_content_stream(stream, temp_path)
        data = json.loads(Path(temp_path).read_text(encoding="utf-8"))
        assert "image_reference" not in data["elements"][0]
        assert "x" not in data["elements"][1]
        assert data["elements"][1]["y"] == 100.0
    finally:
        Path(temp_path).unlink()


def test_validate_content_json_valid():
    with tempfile.NamedTemporaryFile(suffix=".json", delete=False, mode="w") as f:
        temp_path = f.name

    try:
        save_content_stream(_make_stream(), temp_path)
        errors = validate_content_json(temp_path)
        assert errors == []
    finally:
        Path(temp_path).unlink()


def test_validate_content_json_invalid():
    with tempfile.NamedTemporaryFile(suffix=".json", delete=False, mode="w") as f:
        json.dump({"bad": "data"}, f)
        temp_path = f.name

    try:
        errors = validate_content_json(temp_path)
        assert len(errors) > 0
    finally:
        Path(temp_path).unlink()


def test_validate_content_json_unknown_type():
    with tempfile.NamedTemporaryFile(suffix=".json", delete=False, mode="w") as f:
        json.dump({"elements": [{"type": "VIDEO"}]}, f)
        temp_path = f.name

    try:
        errors = validate_content_json(temp_path)
        assert len(errors) == 1
        assert "elements -> 0 -> type" in errors[0]
    finally:
        Path(temp_path).unlink()


def test_validate_content_json_model_rule():
    """image_reference on a paragraph passes the schema but not the model."""
    with tempfile.NamedTemporaryFile(suffix=".json", delete=False, mode="w") as f:
        json.dump({"elements": [{"type": "PARAGRAPH", "image_reference": "x.png"}]}, f)
        temp_path = f.name

    try:
        errors = validate_content_json(temp_path)
        assert len(errors) == 1
        assert "image_reference" in errors[0]
    finally:
        Path(temp_path).unlink()


def test_validate_content_json_not_json():
    with tempfile.NamedTemporaryFile(suffix=".json", delete=False, mode="w") as f:
        f.write("not json at all {{{")
        temp_path = f.name

    try:
        errors = validate_content_json(temp_path)
        assert len(errors) == 1
        assert "Invalid JSON" in errors[0]
    finally:
        Path(temp_path).unlink()


def test_validate_content_json_missing_file():
    errors = validate_content_json("/nonexistent/path.json")
    assert len(errors) == 1
    assert "File not found" in errors[0]
