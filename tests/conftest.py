from __future__ import annotations

from typing import Callable

import pytest

from callsheet_extractor.models import CandidateContact, Contact, contact_from_validated
from callsheet_extractor.scoring import ConfidenceScorer
from callsheet_extractor.validation import ContactValidator


SLASH_LINE = "Photographer: John Smith / 555-123-4567"

PIPE_TABLE = "\n".join(
    [
        "Name | Email | Phone | Role",
        "John Smith | john@example.com | 555-123-4567 | Photographer",
        "Jane Doe | jane@example.com | 555-987-6543 | Stylist",
    ]
)

SECTIONED_SHEET = "\n".join(
    [
        "CREW",
        "Photographer: John Smith / 555-123-4567",
        "Stylist: Jane Doe / jane@studio.com",
        "",
        "TALENT",
        "Model: BIANCA FELICIANO / Ford Models Sarah Jones / 212-555-0101",
        "Model: Kate Moss / 212-555-0102",
        "",
        "STYLING",
        "Hair Stylist: Ana Lopez / ana@glam.com",
        "Makeup Artist: Kim Lee / 310-555-0199",
    ]
)

KEY_VALUE_SHEET = "\n".join(
    [
        "Name: John Smith",
        "Role: Photographer",
        "Email: john@studio.com",
        "Phone: 555-123-4567",
        "",
        "Name: Jane Doe",
        "Title: Producer",
        "Email: jane@studio.com",
    ]
)

PROSE = (
    "For this shoot please contact our producer Rachel Kim at "
    "rachel.kim@brightlight.com or 212-555-0147 with any questions."
)

SPLIT_FACTS_SHEET = "\n".join(
    [
        "Photographer: John Smith / 555-123-4567",
        "john.smith@studio.com",
        "1st Assistant: Mike Ross / 555-222-3333",
        "Stylist: Jane Doe / 555-987-6543",
        "jane.doe@studio.com",
    ]
)

_FIRST_NAMES = ("Alice", "Bruno", "Carmen", "Dmitri", "Esther", "Felix", "Greta", "Hugo", "Imogen", "Jonas")
_LAST_NAMES = ("Abbott", "Mercer", "Okafor", "Quinlan", "Whitaker")


def large_table(rows: int = 50) -> str:
    lines = ["Name\tEmail\tPhone\tRole"]
    for index in range(rows):
        first = _FIRST_NAMES[index % len(_FIRST_NAMES)]
        last = _LAST_NAMES[(index // len(_FIRST_NAMES)) % len(_LAST_NAMES)]
        email = f"{first.lower()}.{last.lower()}{index}@studio.com"
        phone = f"555-{100 + index:03d}-{1000 + index:04d}"
        lines.append(f"{first} {last}\t{email}\t{phone}\tStylist")
    return "\n".join(lines)


@pytest.fixture()
def scorer() -> ConfidenceScorer:
    return ConfidenceScorer()


@pytest.fixture()
def make_contact(scorer: ConfidenceScorer) -> Callable[..., Contact]:
    """Build a validated single-member contact the way the pipeline does."""

    validator = ContactValidator()

    def factory(line: int = 0, strategy: str = "tabular", **fields: str) -> Contact:
        candidate = CandidateContact(strategy=strategy)
        for name, value in fields.items():
            candidate.set_field(name, value, line)
        return contact_from_validated(validator.validate(scorer.score_candidate(candidate)))

    return factory
