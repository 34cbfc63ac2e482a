from __future__ import annotations

import pytest

from callsheet_extractor.models import CandidateContact, ScoredContact
from callsheet_extractor.validation import ContactValidator


def _scored(**fields) -> ScoredContact:
    return ScoredContact(candidate=CandidateContact(**fields), confidence=0.5, confidence_level="low")


def test_complete_contact_is_valid():
    result = ContactValidator().validate(
        _scored(name="John Smith", email="john@studio.com", phone="(555) 123-4567", role="Photographer")
    ).validation
    assert result.is_valid
    assert result.reasons == []
    assert result.quality_score == pytest.approx(0.9)
    assert result.quality_level == "high"


def test_invalid_email_is_blocking():
    result = ContactValidator().validate(_scored(name="John Smith", email="john@@studio")).validation
    assert not result.is_valid
    assert any(reason.startswith("Invalid email format") for reason in result.reasons)


def test_name_with_digits_is_rejected():
    result = ContactValidator().validate(_scored(name="John2 Smith", email="john@studio.com")).validation
    assert not result.is_valid
    assert any(reason.startswith("Invalid name format") for reason in result.reasons)


def test_short_name_is_rejected():
    result = ContactValidator(min_name_length=3).validate(_scored(name="Jo", email="jo@studio.com")).validation
    assert "Name too short: Jo" in result.reasons


def test_unusual_phone_is_only_a_warning():
    result = ContactValidator().validate(_scored(name="John Smith", email="john@studio.com", phone="ext 42")).validation
    assert result.is_valid
    assert result.warnings == ["Unusual phone format: ext 42"]


def test_required_fields():
    validator = ContactValidator(required_fields=("name",))
    result = validator.validate(_scored(email="john@studio.com")).validation
    assert "Missing required field: name" in result.reasons


def test_phone_only_contact_falls_below_quality_gate():
    result = ContactValidator().validate(_scored(phone="(555) 123-4567")).validation
    assert not result.is_valid
    assert "Quality score too low" in result.reasons


def test_contact_without_identity_is_rejected():
    result = ContactValidator().validate(_scored(role="Photographer", company="Studio Rentals")).validation
    assert "Missing name, email and phone" in result.reasons


def test_validate_all_keeps_order():
    items = [_scored(name="John Smith", email="john@studio.com"), _scored(phone="(555) 123-4567")]
    results = ContactValidator().validate_all(items)
    assert [item.validation.is_valid for item in results] == [True, False]
    assert results[0].scored is items[0]
