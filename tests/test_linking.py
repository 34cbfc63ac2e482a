from __future__ import annotations

from callsheet_extractor.linking import ContactLinker, build_fact_table
from callsheet_extractor.merge import ContactMerger
from callsheet_extractor.models import split_lines


def test_fact_table_indexes_lines():
    table = build_fact_table(split_lines("CREW\nJohn Smith\nPhotographer\njohn@studio.com\n\n555-123-4567"))
    assert table[0].boundary
    assert table[1].has_name
    assert table[2].role == "Photographer"
    assert table[3].emails == ["john@studio.com"]
    assert table[4].boundary


def test_linker_attaches_unclaimed_email_below_name(make_contact):
    lines = split_lines("Photographer: John Smith / 555-123-4567\njohn.smith@studio.com")
    john = make_contact(line=0, name="John Smith", phone="(555) 123-4567", role="Photographer")
    linker = ContactLinker(ContactMerger(), window=2)
    (linked,) = linker.link([john], lines)
    assert linked.email == "john.smith@studio.com"
    assert linked.field_sources["email"] == [1]
    assert "linking" in linked.strategies
    assert john.email == ""


def test_linker_does_not_steal_claimed_email(make_contact):
    lines = split_lines("John Smith\njane@studio.com")
    john = make_contact(line=0, name="John Smith", phone="(555) 123-4567")
    jane = make_contact(line=1, name="Jane Doe", email="jane@studio.com")
    linked = ContactLinker(ContactMerger()).link([john, jane], lines)
    assert next(contact for contact in linked if contact.name == "John Smith").email == ""


def test_linker_stops_at_other_names(make_contact):
    lines = split_lines("John Smith\nJane Doe\njane@studio.com")
    john = make_contact(line=0, name="John Smith", phone="(555) 123-4567")
    (linked,) = ContactLinker(ContactMerger()).link([john], lines)
    assert linked.email == ""


def test_relationship_metadata(make_contact):
    lines = split_lines("a\nb\nc")
    contacts = [
        make_contact(line=0, name="John Smith", email="john@studio.com", role="Photographer"),
        make_contact(line=1, name="Mike Ross", email="mike@gmail.com", role="1st Assistant"),
        make_contact(line=2, name="Jane Doe", email="jane@studio.com", role="Stylist"),
    ]
    linked = ContactLinker(ContactMerger(), role_preferences=["stylist"]).link(contacts, lines)
    john, mike, jane = linked
    assert mike.metadata["reportsTo"] == "Photographer"
    assert mike.metadata["reportsToName"] == "John Smith"
    assert john.metadata["colleagues"] == ["Jane Doe"]
    assert "colleagues" not in mike.metadata
    assert jane.metadata["isPreferred"] is True
    assert john.metadata["isPreferred"] is False
