from __future__ import annotations

import pytest

from callsheet_extractor.structure import (
    StructureDetector,
    clean_header,
    detect_structure,
    is_section_header,
    is_skip_line,
    split_cells,
    split_label,
)
from callsheet_extractor.models import split_lines

from conftest import KEY_VALUE_SHEET, PIPE_TABLE, PROSE, SECTIONED_SHEET, SLASH_LINE, large_table


@pytest.mark.parametrize(
    "text, expected",
    [
        ("CREW", True),
        ("=== TALENT ===", True),
        ("Crew:", True),
        ("CAMERA CREW", True),
        ("Photographer: John Smith / 555-123-4567", False),
        ("John Smith", False),
        ("CREW 2", False),
    ],
)
def test_is_section_header(text, expected):
    assert is_section_header(text) is expected


def test_clean_header_strips_decoration():
    assert clean_header("===  HAIR & MAKEUP  ===") == "HAIR & MAKEUP"


@pytest.mark.parametrize(
    "text",
    ["Call Time: 7:00 AM", "7:30 AM Breakfast", "Location: Stage 4", "Monday, June 3", "-----", ""],
)
def test_logistics_lines_are_skipped(text):
    assert is_skip_line(text)


def test_person_lines_are_not_skipped():
    assert not is_skip_line(SLASH_LINE)


def test_split_label_accepts_ranked_roles():
    assert split_label("1st Assistant: Mike Ross") == ("1st Assistant", "Mike Ross")
    assert split_label("john@studio.com: nothing") is None
    assert split_label("No label here") is None


def test_split_cells_drops_pipe_edges():
    assert split_cells("| John | Smith |", "|") == ["John", "Smith"]
    assert split_cells("John    Smith   Stylist", "  ") == ["John", "Smith", "Stylist"]


def test_empty_document_is_freeform_with_zero_confidence():
    profile = detect_structure("")
    assert profile.type == "freeform"
    assert profile.confidence == 0.0
    assert profile.sections == ()


def test_slash_line_detected():
    profile = detect_structure(SLASH_LINE)
    assert profile.type == "slash_delimited"
    assert 0.0 <= profile.confidence <= 1.0


def test_pipe_table_detected_with_delimiter():
    profile = detect_structure(PIPE_TABLE)
    assert profile.type == "tabular"
    assert profile.delimiter == "|"


def test_tab_table_detected():
    profile = detect_structure(large_table(5))
    assert profile.type == "tabular"
    assert profile.delimiter == "\t"


def test_key_value_detected():
    assert detect_structure(KEY_VALUE_SHEET).type == "key_value"


def test_prose_detected_as_freeform():
    assert detect_structure(PROSE).type == "freeform"


def test_sections_found_and_titled():
    profile = detect_structure(SECTIONED_SHEET)
    assert profile.type == "sectioned"
    assert [section.header for section in profile.sections] == ["Crew", "Talent", "Styling"]
    assert profile.sections[0].start_line == 0
    assert profile.sections[1].kind == "talent"


def test_headers_without_bodies_are_not_sections():
    profile = detect_structure("CREW\n\nTALENT\nModel: Kate Moss / 212-555-0102")
    assert len(profile.sections) == 1


def test_mixed_when_two_layouts_are_close():
    text = "\n".join(
        [
            "Photographer: John Smith / 555-123-4567",
            "Stylist: Jane Doe / 555-987-6543",
            "Name: Ana Lopez",
            "Email: ana@glam.com",
        ]
    )
    profile = StructureDetector(mixed_margin=0.1).detect(split_lines(text))
    assert profile.type == "mixed"
    assert profile.score_for("slash_delimited") == pytest.approx(0.5)
    assert profile.score_for("key_value") == pytest.approx(0.5)


def test_detect_block_ignores_headers():
    lines = split_lines(SECTIONED_SHEET)
    profile = StructureDetector().detect_block(lines[1:3])
    assert profile.type == "slash_delimited"
