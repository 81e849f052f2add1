"""Tests for splitting element streams into slide-sized chunks."""

import pytest

from docs2slides.config import PaginationConfig
from docs2slides.errors import PaginationError
from docs2slides.paginate import ChunkKind, Paginator, count_words, paginate

from docs_builders import heading, image_element, para, section, table_element, words


def _config(max_words=300, max_lines=8):
    return PaginationConfig(max_words_per_chunk=max_words, max_lines_per_chunk=max_lines)


# ============================================================
# BASIC GROUPING
# ============================================================

def test_paragraphs_share_a_chunk():
    chunks = paginate([section("T"), para("a"), para("b")])
    assert len(chunks) == 1
    assert chunks[0].title == "T"
    assert chunks[0].body == "a\nb"
    assert chunks[0].kind == ChunkKind.TEXT


def test_each_section_starts_a_chunk():
    chunks = paginate([section("A"), para("x"), section("B"), para("y")])
    assert [(c.title, c.body) for c in chunks] == [("A", "x"), ("B", "y")]


def test_empty_section_gets_title_chunk():
    chunks = paginate([section("A"), section("B"), para("y")])
    assert [(c.title, c.body) for c in chunks] == [("A", ""), ("B", "y")]


def test_single_default_section_gives_one_chunk():
    chunks = paginate([section("Main Content")])
    assert len(chunks) == 1
    assert chunks[0].title == "Main Content"
    assert chunks[0].body == ""


def test_untitled_preamble():
    chunks = paginate([para("intro", 0), section("Chapter 2"), para("body")])
    assert [(c.title, c.body) for c in chunks] == [("", "intro"), ("Chapter 2", "body")]


def test_section_level_carried():
    chunks = paginate([section("Child", level=2), para("x", level=3)])
    assert chunks[0].section_level == 2


def test_empty_stream_raises():
    with pytest.raises(PaginationError) as exc_info:
        paginate([])
    assert exc_info.value.stage == "pagination"


# ============================================================
# TABLES / IMAGES / HEADINGS
# ============================================================

def test_table_gets_own_chunk():
    table = table_element([["a", "b"]])
    chunks = paginate([section("T"), para("before"), table, para("after")])

    assert [c.kind for c in chunks] == [ChunkKind.TEXT, ChunkKind.TABLE, ChunkKind.TEXT]
    assert chunks[1].element == table
    assert chunks[1].title == "T"
    assert chunks[0].body == "before"
    assert chunks[2].body == "after"


def test_image_gets_own_chunk():
    image = image_element()
    chunks = paginate([section("T"), image])
    assert len(chunks) == 1
    assert chunks[0].kind == ChunkKind.IMAGE
    assert chunks[0].element.image_reference == image.image_reference


def test_section_with_only_table_has_no_title_chunk():
    chunks = paginate([section("T"), table_element([["x"]])])
    assert [c.kind for c in chunks] == [ChunkKind.TABLE]


def test_heading_starts_new_chunk():
    chunks = paginate([section("T"), para("a"), heading("H"), para("b")])
    assert [c.body for c in chunks] == ["a", "H\nb"]
    assert all(c.title == "T" for c in chunks)


# ============================================================
# CEILINGS
# ============================================================

def test_oversized_paragraph_splits_into_continuations():
    chunks = paginate([section("T"), para(words(900))], _config(max_words=300))

    assert len(chunks) == 3
    assert [c.title for c in chunks] == ["T", "(Continued) T", "(Continued) T"]
    assert [c.word_count for c in chunks] == [300, 300, 300]
    assert [c.continuation for c in chunks] == [False, True, True]
    assert all(c.oversized for c in chunks)
    assert chunks[0].body.split()[0] == "word0"
    assert chunks[2].body.split()[-1] == "word899"


def test_oversized_remainder():
    chunks = paginate([section("T"), para(words(301))], _config(max_words=300))
    assert [c.word_count for c in chunks] == [300, 1]


def test_paragraph_exactly_at_limit_is_not_split():
    chunks = paginate([section("T"), para(words(300))], _config(max_words=300))
    assert len(chunks) == 1
    assert not chunks[0].oversized


def test_custom_continuation_prefix():
    config = PaginationConfig(max_words_per_chunk=2, continuation_prefix="(suite)")
    chunks = paginate([section("T"), para("a b c")], config)
    assert [c.title for c in chunks] == ["T", "(suite) T"]


def test_oversized_flushes_buffer_first():
    chunks = paginate([section("T"), para("short"), para(words(5))], _config(max_words=3))
    assert chunks[0].body == "short"
    assert chunks[0].oversized is False
    assert chunks[1].oversized is True


def test_line_ceiling():
    elements = [section("T")] + [para(f"line {i}") for i in range(10)]
    chunks = paginate(elements, _config(max_lines=8))
    assert [c.line_count for c in chunks] == [8, 2]
    assert all(c.title == "T" for c in chunks)


def test_word_ceiling_packs_greedily():
    elements = [section("T")] + [para(words(100)) for _ in range(4)]
    chunks = paginate(elements, _config(max_words=300))
    assert [c.word_count for c in chunks] == [300, 100]


def test_embedded_newlines_count_as_lines():
    chunks = paginate([section("T"), para("a\nb\nc")], _config(max_lines=2))
    assert [c.body for c in chunks] == ["a\nb", "c"]


def test_every_chunk_within_ceilings():
    max_words, max_lines = 40, 5
    elements = [section("A")]
    for i in range(30):
        elements.append(para(words((i * 7) % 55 + 1)))
        if i % 9 == 0:
            elements.append(heading(f"H{i}"))
    elements.append(section("B"))
    elements.append(para(words(130)))

    chunks = paginate(elements, _config(max_words=max_words, max_lines=max_lines))
    for chunk in chunks:
        assert chunk.word_count <= max_words
        assert chunk.line_count <= max_lines


def test_no_text_lost():
    elements = [section("T")] + [para(words(n, word=f"p{n}w")) for n in (5, 120, 40, 333)]
    chunks = paginate(elements, _config(max_words=100, max_lines=3))
    assert sum(c.word_count for c in chunks) == 5 + 120 + 40 + 333


def test_count_words():
    assert count_words("  a  b\tc\n d ") == 4
    assert count_words("") == 0


def test_continued_title():
    assert Paginator().continued("Intro") == "(Continued) Intro"
    assert Paginator().continued("") == "(Continued)"


def test_soft_line_breaks_count_as_lines():
    text = "\u000b".join(f"line {i}" for i in range(12))
    chunks = paginate([section("T"), para(text)], _config(max_lines=8))
    assert [c.line_count for c in chunks] == [8, 4]
    assert chunks[0].body.split("\n")[0] == "line 0"


# ============================================================
# SECTION DIVIDERS
# ============================================================

def test_section_title_slides_add_dividers():
    config = PaginationConfig(section_title_slides=True)
    chunks = paginate([section("A"), para("x"), section("B")], config)
    assert [(c.title, c.body) for c in chunks] == [("A", ""), ("A", "x"), ("B", "")]


def test_section_title_slides_before_continuations():
    config = PaginationConfig(max_words_per_chunk=300, section_title_slides=True)
    chunks = paginate([section("T"), para(words(900))], config)
    assert [c.title for c in chunks] == ["T", "T", "(Continued) T", "(Continued) T"]
    assert chunks[0].body == ""


def test_section_title_slides_off_by_default():
    assert PaginationConfig().section_title_slides is False
    assert len(paginate([section("T"), para(words(900))])) == 3
