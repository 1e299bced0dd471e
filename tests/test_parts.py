"""Tests for lecture marker extraction and part selection."""

from datetime import date

import pytest

from lecture_errors import RangeError
from lecture_model import Part
from lecture_parts import attach_dates, extract_parts, read_group, scan_markers, select_parts


def test_extract_parts_in_document_order(sample_document):
    parts = extract_parts(sample_document)
    assert [(p.label, p.title, p.index) for p in parts] == [
        ("lecture01", "Welcome", 1),
        ("lecture02", "Content I", 2),
    ]


def test_marker_count_matches_document():
    body = "\n".join(rf"\lecture{{Title {n}}}{{lec{n:02d}}} text" for n in range(1, 8))
    parts = extract_parts(body)
    assert len(parts) == 7
    assert [p.label for p in parts] == [f"lec{n:02d}" for n in range(1, 8)]


def test_nested_braces_in_title_and_label():
    body = r"\lecture{The {\em very} {nested {deep}} title}{lec{0}1} rest"
    (part,) = extract_parts(body)
    assert part.title == r"The {\em very} {nested {deep}} title"
    assert part.label == "lec{0}1"


def test_escaped_braces_do_not_change_depth():
    body = r"\lecture{Sets \{a\} and \}}{lecture03}"
    (part,) = extract_parts(body)
    assert part.title == r"Sets \{a\} and \}"
    assert part.label == "lecture03"


def test_optional_short_title_and_whitespace():
    body = "\\lecture[Short]  {Long Title}\n  {lecture04}"
    (marker,) = list(scan_markers(body))
    assert marker.short == "Short"
    assert marker.title == "Long Title"
    assert marker.label == "lecture04"
    assert body[marker.start:marker.end].endswith("{lecture04}")


def test_ignores_similar_commands_comments_and_malformed_markers():
    body = "\n".join(
        [
            r"\includeonlylecture{lecture01}",
            r"\lecturenote{not a marker}{x}",
            r"% \lecture{Commented}{lecture00}",
            r"\lecture{Only title}",
            r"\lecture{Real}{lecture01}",
            r"100\% \lecture{After percent}{lecture02}",
        ]
    )
    parts = extract_parts(body)
    assert [p.label for p in parts] == ["lecture01", "lecture02"]


def test_no_markers_yields_empty_list():
    assert extract_parts(r"\begin{document}\end{document}") == []


def test_read_group_reports_unbalanced_group():
    assert read_group("{open {inner}", 0) is None
    assert read_group("x{a}", 0) is None
    assert read_group("{a}b", 0) == ("a", 3)


def test_dates_are_attached_positionally():
    body = r"\lecture{A}{l1}\lecture{B}{l2}\lecture{C}{l3}"
    parts = extract_parts(body, [date(2025, 1, 1), "next week"])
    assert [p.date for p in parts] == [date(2025, 1, 1), "next week", None]


def test_surplus_dates_are_ignored():
    parts = [Part("l1", "A", 1)]
    assert attach_dates(parts, ["x", "y"])[0].date == "x"


@pytest.fixture
def three_parts():
    return [Part(f"lecture{n:02d}", f"Title {n}", n) for n in range(1, 4)]


def test_select_zero_returns_all(three_parts):
    assert select_parts(three_parts, 0) == three_parts


@pytest.mark.parametrize("selector", [1, 2, 3])
def test_select_single_part(three_parts, selector):
    assert select_parts(three_parts, selector) == [three_parts[selector - 1]]


@pytest.mark.parametrize("selector", [-1, 4])
def test_select_out_of_range(three_parts, selector):
    with pytest.raises(RangeError):
        select_parts(three_parts, selector)


def test_select_requires_integer(three_parts):
    with pytest.raises(RangeError):
        select_parts(three_parts, "2")


def test_select_all_of_nothing():
    assert select_parts([], 0) == []
    with pytest.raises(RangeError):
        select_parts([], 1)
