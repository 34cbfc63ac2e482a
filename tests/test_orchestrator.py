from __future__ import annotations

import time

import pytest

from callsheet_extractor import ExtractionConfig, ExtractionOrchestrator, extract
from callsheet_extractor.orchestrator import DocumentInput

from conftest import (
    KEY_VALUE_SHEET,
    PIPE_TABLE,
    PROSE,
    SECTIONED_SHEET,
    SLASH_LINE,
    SPLIT_FACTS_SHEET,
    large_table,
)


def test_single_slash_line():
    result = extract(SLASH_LINE)
    assert len(result.contacts) == 1
    contact = result.contacts[0]
    assert contact.name == "John Smith"
    assert contact.role == "Photographer"
    assert contact.phone == "(555) 123-4567"
    assert contact.department == "Camera"
    assert 0.0 <= contact.confidence <= 1.0
    assert result.metadata.structure_type == "slash_delimited"
    assert result.metadata.status == "ok"


def test_repeated_lines_merge_into_one_contact():
    result = extract("\n".join([SLASH_LINE] * 3))
    assert len(result.contacts) == 1
    assert result.metadata.total_raw_candidates == 3
    assert result.metadata.duplicates_removed == 2
    assert result.contacts[0].raw_source_lines == [0, 1, 2]


def test_pipe_table():
    result = extract(PIPE_TABLE)
    assert result.metadata.structure_type == "tabular"
    assert [contact.name for contact in result.contacts] == ["John Smith", "Jane Doe"]
    assert result.contacts[0].email == "john@example.com"
    assert result.contacts[1].role == "Stylist"


def test_sectioned_call_sheet():
    result = extract(SECTIONED_SHEET, {"documentType": "call_sheet", "productionType": "commercial"})
    assert result.metadata.structure_type == "sectioned"
    assert result.metadata.sections_found >= 3
    assert len(result.contacts) >= 6
    bianca = next(contact for contact in result.contacts if contact.name == "Bianca Feliciano")
    assert bianca.department == "Talent"
    assert bianca.company == "Ford Models"
    assert bianca.metadata["agent"] == "Sarah Jones"
    assert result.metadata.document_type == "call_sheet"


def test_key_value_sheet():
    result = extract(KEY_VALUE_SHEET)
    assert result.metadata.structure_type == "key_value"
    assert [(contact.name, contact.email) for contact in result.contacts] == [
        ("John Smith", "john@studio.com"),
        ("Jane Doe", "jane@studio.com"),
    ]


def test_prose():
    result = extract(PROSE)
    assert result.metadata.structure_type == "freeform"
    (contact,) = result.contacts
    assert contact.name == "Rachel Kim"
    assert contact.email == "rachel.kim@brightlight.com"


def test_all_caps_names_are_title_cased():
    result = extract("Model: BIANCA FELICIANO / 212-555-0101")
    assert result.contacts[0].name == "Bianca Feliciano"


def test_large_table_is_fast():
    started = time.perf_counter()
    result = extract(large_table(50))
    elapsed = time.perf_counter() - started
    assert elapsed < 2.0
    assert len(result.contacts) >= 40


def test_higher_threshold_returns_subset():
    strict = extract(SECTIONED_SHEET, {"confidenceThreshold": 0.6})
    loose = extract(SECTIONED_SHEET, confidence_threshold=0.2)
    strict_names = {contact.name for contact in strict.contacts}
    loose_names = {contact.name for contact in loose.contacts}
    assert strict_names <= loose_names
    assert all(contact.confidence >= 0.6 for contact in strict.contacts)


def test_confidence_distribution_matches_contacts():
    result = extract(SECTIONED_SHEET)
    assert sum(result.metadata.confidence_distribution.values()) == len(result.contacts)
    assert set(result.metadata.confidence_distribution) == {"high", "medium", "low", "very_low"}


def test_non_string_input_raises_type_error():
    with pytest.raises(TypeError):
        extract(None)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        extract(b"Photographer: John Smith")  # type: ignore[arg-type]


def test_empty_input_returns_reason():
    result = extract("")
    assert result.contacts == []
    assert result.metadata.reason == "No contact candidates found"
    assert result.metadata.average_confidence == 0.0


def test_unreadable_pdf_bytes():
    text = "%PDF-1.4\n1 0 obj\n<< /Type /Catalog /Filter /FlateDecode >>\nendobj\nxref\ntrailer\n%%EOF"
    result = extract(text)
    assert result.contacts == []
    assert result.metadata.status == "unreadable"
    assert "PDF" in result.metadata.reason


def test_multi_pass_links_split_facts():
    single = extract(SPLIT_FACTS_SHEET)
    linked = extract(SPLIT_FACTS_SHEET, {"useMultiPass": True})

    john_single = next(contact for contact in single.contacts if contact.name == "John Smith")
    assert john_single.email == ""

    assert linked.metadata.extraction_mode == "multi-pass"
    by_name = {contact.name: contact for contact in linked.contacts}
    assert set(by_name) == {"John Smith", "Mike Ross", "Jane Doe"}
    assert by_name["John Smith"].email == "john.smith@studio.com"
    assert by_name["Jane Doe"].email == "jane.doe@studio.com"
    assert by_name["Mike Ross"].email == ""
    assert by_name["Mike Ross"].metadata["reportsTo"] == "Photographer"
    assert by_name["John Smith"].metadata["colleagues"] == ["Jane Doe"]


def test_role_preferences_raise_confidence():
    plain = extract(SLASH_LINE)
    preferred = extract(SLASH_LINE, role_preferences=["photographer"])
    assert preferred.contacts[0].confidence > plain.contacts[0].confidence
    assert preferred.contacts[0].metadata == {}


class _BrokenRouter:
    def extract(self, lines, profile):
        raise RuntimeError("boom")


def test_failed_stage_returns_degraded_result():
    orchestrator = ExtractionOrchestrator(router=_BrokenRouter())
    result = orchestrator.extract(SLASH_LINE)
    assert result.metadata.status == "degraded"
    assert result.metadata.failed_stage == "extracting"
    assert result.metadata.error == "boom"
    assert result.contacts == []


def test_max_contacts_keeps_most_confident():
    config = ExtractionConfig(max_contacts=1)
    result = ExtractionOrchestrator(config).extract(PIPE_TABLE + "\nKate Moss | | 212-555-0102 | Model")
    assert len(result.contacts) == 1


def test_extract_many_sequential_and_concurrent():
    documents = [DocumentInput(SLASH_LINE, source="a.txt"), PIPE_TABLE, DocumentInput("", source="empty.txt")]
    sequential = ExtractionOrchestrator().extract_many(documents)
    concurrent = ExtractionOrchestrator(concurrent=True, max_workers=2).extract_many(documents)
    assert [len(result.contacts) for result in sequential] == [1, 2, 0]
    assert [len(result.contacts) for result in concurrent] == [1, 2, 0]
    assert concurrent[0].source == "a.txt"


def test_extract_many_records_failures():
    results = ExtractionOrchestrator().extract_many([DocumentInput(None)])  # type: ignore[arg-type]
    assert results[0].metadata.status == "failed"
    assert "str" in results[0].metadata.error


def test_extract_many_can_raise():
    with pytest.raises(TypeError):
        ExtractionOrchestrator(raise_on_error=True).extract_many([DocumentInput(None)])  # type: ignore[arg-type]


def test_auto_classify_fills_unknown_context():
    text = "CALL SHEET\nCall Time: 7:00 AM\n" + SECTIONED_SHEET
    result = ExtractionOrchestrator(auto_classify=True).extract(text)
    assert result.metadata.document_type == "call_sheet"


def test_result_as_dict_uses_camel_case():
    data = extract(SLASH_LINE).as_dict()
    assert data["metadata"]["structureType"] == "slash_delimited"
    assert data["contacts"][0]["rawSourceLines"] == [0]
    assert data["contacts"][0]["confidenceLevel"] in {"high", "medium", "low", "very_low"}


def test_single_section_header_sets_department():
    text = "\n".join(
        [
            "CLIENT",
            "Sarah Connor / sarah@bigfilms.com / 917-555-0101",
            "Tom Hardy / tom@bigfilms.com / 917-555-0102",
        ]
    )
    result = extract(text)
    assert result.metadata.structure_type == "sectioned"
    assert result.metadata.sections_found == 1
    assert sorted((contact.name, contact.department) for contact in result.contacts) == [
        ("Sarah Connor", "Client"),
        ("Tom Hardy", "Client"),
    ]


@pytest.mark.parametrize(
    "line, name",
    [
        ("Stylist: Maria De La Cruz Lopez / 555-123-4567", "Maria De La Cruz Lopez"),
        ("Stylist: Vincent van Gogh / 555-123-4567", "Vincent van Gogh"),
    ],
)
def test_long_and_particle_names_survive(line, name):
    result = extract(line, confidence_threshold=0)
    assert [(contact.name, contact.role) for contact in result.contacts] == [(name, "Stylist")]
