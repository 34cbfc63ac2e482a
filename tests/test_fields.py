from __future__ import annotations

import pytest

from callsheet_extractor.fields import (
    FieldExtractor,
    company_from_email,
    extract_company,
    extract_email,
    extract_name,
    extract_phone,
    extract_role,
    find_phones,
    normalize_name,
    normalize_phone,
    parse_fields,
    phone_digits,
    split_talent_agency,
)
from callsheet_extractor.models import split_lines
from callsheet_extractor.vocabulary import department_for_role


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("555-123-4567", "(555) 123-4567"),
        ("(555) 123 4567", "(555) 123-4567"),
        ("555.123.4567", "(555) 123-4567"),
        ("+1 555 123 4567", "(555) 123-4567"),
    ],
)
def test_us_phones_are_displayed_uniformly(raw, expected):
    assert extract_phone(f"Call {raw} today") == expected


def test_international_phone_keeps_country_code():
    phone = extract_phone("Ana / +44 20 7946 0958")
    assert phone is not None
    assert phone.startswith("+44")
    assert phone_digits(phone) == "442079460958"


def test_phone_digits_drops_us_country_code():
    assert phone_digits("+1 (555) 123-4567") == "5551234567"
    assert normalize_phone("12345") is None


def test_find_phones_returns_non_overlapping_matches():
    found = find_phones("555-123-4567 or 555-987-6543")
    assert [value for _, _, value in found] == ["(555) 123-4567", "(555) 987-6543"]


def test_extract_email():
    assert extract_email("mail jane.doe+shoot@studio.co.uk now") == "jane.doe+shoot@studio.co.uk"
    assert extract_email("no address here") is None


def test_normalize_name_title_cases_all_caps_only():
    assert normalize_name("BIANCA FELICIANO") == "Bianca Feliciano"
    assert normalize_name("MARY-KATE O'NEIL") == "Mary-Kate O'Neil"
    assert normalize_name("Leonardo DiCaprio") == "Leonardo DiCaprio"


def test_extract_name_prefers_label_value():
    text = "Photographer: John Smith / 555-123-4567"
    assert extract_name(text, label="Photographer", value="John Smith / 555-123-4567") == "John Smith"


def test_extract_name_before_contact_token():
    assert extract_name("reach Rachel Kim at rachel@brightlight.com") == "Rachel Kim"


def test_extract_name_ignores_role_words():
    assert extract_name("Photographer") is None
    assert extract_name("Call Sheet") is None


def test_extract_role_canonicalises_vocabulary():
    assert extract_role("DP: Ana Lopez", label="DP") == "Director of Photography"
    assert extract_role("1st AC: Tom Lee", label="1st AC") == "1st Camera Assistant"
    assert extract_role("HMUA: Kim Lee", label="HMUA") == "Hair & Makeup Artist"


def test_extract_role_skips_lowercase_acronyms_in_prose():
    assert extract_role("we had a pa meeting") is None


def test_extract_role_falls_back_to_title_case_label():
    assert extract_role("Nail Tech: Amy Wu", label="Nail Tech") == "Nail Tech"


def test_company_from_email():
    assert company_from_email("jane@brightlight.com") == "Brightlight"
    assert company_from_email("jane@studio.co.uk") == "Studio"
    assert company_from_email("jane@gmail.com") is None


def test_split_talent_agency():
    assert split_talent_agency("Ford Models Sarah Jones") == ("Ford Models", "Sarah Jones")
    assert split_talent_agency("IMG Models") == ("IMG Models", None)


def test_extract_company_from_talent_middle_segment():
    text = "Model: BIANCA FELICIANO / Ford Models Sarah Jones / 212-555-0101"
    company, agent = extract_company(text, name="Bianca Feliciano", role="Model", email=None)
    assert company == "Ford Models"
    assert agent == "Sarah Jones"


def test_parse_fields_slash_line():
    found = parse_fields("Photographer: John Smith / 555-123-4567")
    assert found.name == "John Smith"
    assert found.role == "Photographer"
    assert found.phone == "(555) 123-4567"
    assert found.email is None
    assert found.has_identity()


def test_field_extractor_fills_missing_fields_from_neighbours():
    lines = split_lines("John Smith\nPhotographer\njohn@studio.com\n\nJane Doe")
    candidate = FieldExtractor(window=2).extract(lines[0], strategy="freeform")
    assert candidate is not None
    assert candidate.name == "John Smith"
    assert candidate.role == "Photographer"
    assert candidate.email == "john@studio.com"
    assert candidate.department == "Camera"
    assert candidate.raw_source_lines["email"] == [2]


def test_field_extractor_stops_at_another_name():
    lines = split_lines("John Smith\nJane Doe\njane@studio.com")
    candidate = FieldExtractor(window=2).extract(lines[0], strategy="freeform")
    assert candidate is not None
    assert candidate.email == ""


def test_field_extractor_skips_non_person_labels():
    lines = split_lines("Location: 123 Main Street")
    assert FieldExtractor().extract(lines[0], strategy="freeform") is None


def test_extract_name_keeps_long_label_value():
    text = "Stylist: Maria De La Cruz Lopez / 555-123-4567"
    assert extract_name(text, label="Stylist", value="Maria De La Cruz Lopez / 555-123-4567") == "Maria De La Cruz Lopez"


def test_extract_name_keeps_lowercase_particles():
    assert extract_name("Vincent van Gogh / 555-123-4567") == "Vincent van Gogh"
    assert parse_fields("Stylist: Ana de la Vega / ana@glam.com").name == "Ana de la Vega"


def test_long_capitalised_run_inside_text_is_trimmed():
    assert extract_name("ask Rachel Anne Marie Kim Lee Park Jones about the shoot") == "Rachel Anne Marie Kim"


def test_ranked_assistant_camera_keeps_qualifier():
    assert extract_role("2nd Assistant Camera: Tom Lee", label="2nd Assistant Camera") == "2nd Assistant Camera"
    assert department_for_role("2nd Assistant Camera") == "Camera"
