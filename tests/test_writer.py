"""Tests for destination writers."""

import pytest
from pptx import Presentation
from pptx.enum.shapes import MSO_SHAPE_TYPE
from pptx.util import Pt
from pydantic import TypeAdapter

from docs2slides.errors import ImageFetchError, WriteError
from docs2slides.layout import BoxPosition, LayoutArchetype
from docs2slides.writer import (
    CreateImage,
    CreateSlide,
    CreateTable,
    InsertText,
    MemoryDestinationWriter,
    Operation,
    PptxDestinationWriter,
    SetCellText,
    SetFontSize,
)

from docs_builders import PNG_BYTES


# ============================================================
# OPERATIONS
# ============================================================

def test_operation_discriminator():
    op = TypeAdapter(Operation).validate_python({"op": "insert_text", "object_id": "s_title", "text": "Hi"})
    assert isinstance(op, InsertText)


def test_table_needs_rows_and_columns():
    with pytest.raises(ValueError):
        CreateTable(object_id="t", slide_id="s", rows=0, columns=2)


# ============================================================
# MEMORY WRITER
# ============================================================

def test_memory_writer_placeholders():
    writer = MemoryDestinationWriter()
    writer.create_presentation("Deck")
    writer.apply([
        CreateSlide(object_id="s1", layout=LayoutArchetype.TITLE_AND_BODY),
        CreateSlide(object_id="s2", layout=LayoutArchetype.BLANK),
    ])

    text = writer.resolve_placeholders("s1")
    assert (text.title_id, text.body_id) == ("s1_title", "s1_body")
    blank = writer.resolve_placeholders("s2")
    assert (blank.title_id, blank.body_id) == (None, None)
    assert writer.slide_count == 2


def test_memory_writer_unknown_slide():
    with pytest.raises(WriteError):
        MemoryDestinationWriter().resolve_placeholders("nope")


def test_memory_writer_records_batches():
    writer = MemoryDestinationWriter()
    result = writer.apply([CreateSlide(object_id="s1", layout=LayoutArchetype.BLANK)])
    writer.apply([InsertText(object_id="x", text="y")])
    assert result.applied == 1
    assert result.created == ["s1"]
    assert len(writer.batches) == 2
    assert [op.op for op in writer.operations] == ["create_slide", "insert_text"]
    assert writer.finish() == "memory"
    assert writer.finished


# ============================================================
# PPTX WRITER
# ============================================================

def _writer(tmp_path):
    writer = PptxDestinationWriter(tmp_path / "out.pptx")
    writer.create_presentation("Deck - 2024-01-01 10:00")
    return writer


def test_pptx_text_slide(tmp_path):
    writer = _writer(tmp_path)
    writer.apply([CreateSlide(object_id="s1", layout=LayoutArchetype.TITLE_AND_BODY)])
    ph = writer.resolve_placeholders("s1")
    assert ph.title_id is not None
    assert ph.body_id is not None

    writer.apply([
        InsertText(object_id=ph.title_id, text="Intro"),
        SetFontSize(object_id=ph.title_id, size_pt=24),
        InsertText(object_id=ph.body_id, text="line one\nline two"),
        SetFontSize(object_id=ph.body_id, size_pt=14),
    ])
    location = writer.finish()

    prs = Presentation(location)
    assert prs.core_properties.title == "Deck - 2024-01-01 10:00"
    assert prs.slide_width == Pt(720)
    slide = prs.slides[0]
    assert slide.shapes.title.text_frame.text == "Intro"
    assert slide.shapes.title.text_frame.paragraphs[0].runs[0].font.size == Pt(24)

    bodies = [s for s in slide.placeholders if s.placeholder_format.idx == 1]
    assert bodies[0].text_frame.text == "line one\nline two"
    assert bodies[0].text_frame.paragraphs[1].runs[0].font.size == Pt(14)


def test_pptx_blank_slide_has_no_placeholders(tmp_path):
    writer = _writer(tmp_path)
    writer.apply([CreateSlide(object_id="s1", layout=LayoutArchetype.BLANK)])
    ph = writer.resolve_placeholders("s1")
    assert ph.title_id is None
    assert ph.body_id is None


def test_pptx_table(tmp_path):
    writer = _writer(tmp_path)
    writer.apply([
        CreateSlide(object_id="s1", layout=LayoutArchetype.BLANK),
        CreateTable(object_id="t1", slide_id="s1", rows=2, columns=3),
        SetCellText(table_id="t1", row=0, column=0, text="a"),
        SetCellText(table_id="t1", row=1, column=2, text="z"),
        SetFontSize(object_id="t1", size_pt=12, row=1, column=2),
    ])
    prs = Presentation(writer.finish())

    frames = [s for s in prs.slides[0].shapes if s.has_table]
    table = frames[0].table
    assert len(table.rows) == 2
    assert len(table.columns) == 3
    assert table.cell(0, 0).text == "a"
    assert table.cell(0, 1).text == ""
    assert table.cell(1, 2).text_frame.paragraphs[0].runs[0].font.size == Pt(12)


def test_pptx_image(tmp_path):
    writer = _writer(tmp_path)
    writer.apply([
        CreateSlide(object_id="s1", layout=LayoutArchetype.BLANK),
        CreateImage(
            object_id="i1", slide_id="s1", uri="a.png",
            box=BoxPosition(x=100, y=100, width=200, height=100), data=PNG_BYTES,
        ),
    ])
    prs = Presentation(writer.finish())

    pictures = [s for s in prs.slides[0].shapes if s.shape_type == MSO_SHAPE_TYPE.PICTURE]
    assert len(pictures) == 1
    assert pictures[0].left == Pt(100)
    assert pictures[0].width == Pt(200)


def test_pptx_image_bad_bytes(tmp_path):
    writer = _writer(tmp_path)
    writer.apply([CreateSlide(object_id="s1", layout=LayoutArchetype.BLANK)])
    with pytest.raises(ImageFetchError):
        writer.apply([CreateImage(
            object_id="i1", slide_id="s1", uri="a.png",
            box=BoxPosition(x=0, y=0, width=0, height=0), data=b"not an image",
        )])


def test_pptx_image_needs_bytes(tmp_path):
    writer = _writer(tmp_path)
    writer.apply([CreateSlide(object_id="s1", layout=LayoutArchetype.BLANK)])
    with pytest.raises(WriteError):
        writer.apply([CreateImage(
            object_id="i1", slide_id="s1", uri="a.png", box=BoxPosition(x=0, y=0, width=0, height=0),
        )])


def test_pptx_unknown_object(tmp_path):
    writer = _writer(tmp_path)
    with pytest.raises(WriteError) as exc_info:
        writer.apply([InsertText(object_id="missing", text="x")])
    assert exc_info.value.identifier == "missing"


def test_pptx_apply_before_create(tmp_path):
    writer = PptxDestinationWriter(tmp_path / "out.pptx")
    with pytest.raises(WriteError):
        writer.apply([CreateSlide(object_id="s1", layout=LayoutArchetype.BLANK)])


def test_pptx_missing_template(tmp_path):
    writer = PptxDestinationWriter(tmp_path / "out.pptx", template=tmp_path / "nope.pptx")
    with pytest.raises(WriteError):
        writer.create_presentation("Deck")


def test_pptx_template_is_used(tmp_path):
    template = tmp_path / "template.pptx"
    prs = Presentation()
    prs.slide_width = Pt(960)
    prs.save(str(template))

    writer = PptxDestinationWriter(tmp_path / "out.pptx", template=template)
    writer.create_presentation("Deck")
    writer.apply([CreateSlide(object_id="s1", layout=LayoutArchetype.TITLE_AND_BODY)])
    assert Presentation(writer.finish()).slide_width == Pt(960)
