from __future__ import annotations

from callsheet_extractor.config import ExtractionConfig
from callsheet_extractor.factory import build_router, build_strategies
from callsheet_extractor.models import StructureProfile, split_lines
from callsheet_extractor.strategies import (
    FreeformStrategy,
    KeyValueStrategy,
    SectionedStrategy,
    SlashDelimitedStrategy,
    StrategyRouter,
    TabularStrategy,
)
from callsheet_extractor.strategies.tabular import map_header
from callsheet_extractor.structure import detect_structure

from conftest import KEY_VALUE_SHEET, PIPE_TABLE, PROSE, SECTIONED_SHEET, SLASH_LINE


def _run(strategy, text):
    lines = split_lines(text)
    return strategy.extract(lines, detect_structure(text))


# --- tabular ---

def test_map_header_requires_two_known_columns():
    assert map_header(["Name", "Email", "Phone", "Role"]) == {0: "name", 1: "email", 2: "phone", 3: "role"}
    assert map_header(["Name", "Notes"]) is None
    assert map_header(["John Smith", "john@example.com"]) is None


def test_tabular_uses_header_mapping():
    candidates = _run(TabularStrategy(), PIPE_TABLE)
    assert [candidate.name for candidate in candidates] == ["John Smith", "Jane Doe"]
    first = candidates[0]
    assert first.email == "john@example.com"
    assert first.phone == "(555) 123-4567"
    assert first.role == "Photographer"
    assert first.department == "Camera"
    assert first.raw_source_lines["name"] == [1]


def test_tabular_without_header_guesses_columns():
    text = "John Smith\tPhotographer\t555-123-4567\nJane Doe\tStylist\tjane@studio.com"
    candidates = _run(TabularStrategy(), text)
    assert len(candidates) == 2
    assert candidates[0].role == "Photographer"
    assert candidates[0].phone == "(555) 123-4567"
    assert candidates[1].email == "jane@studio.com"
    assert candidates[1].company == "Studio"


# --- slash ---

def test_slash_line_fields():
    (candidate,) = _run(SlashDelimitedStrategy(), SLASH_LINE)
    assert candidate.name == "John Smith"
    assert candidate.role == "Photographer"
    assert candidate.phone == "(555) 123-4567"
    assert candidate.strategy == "slash_delimited"


def test_slash_line_with_two_people():
    candidates = _run(SlashDelimitedStrategy(), "Hair: Ana Lopez / 310-555-0100 / Makeup: Kim Lee / 310-555-0199")
    assert [(candidate.name, candidate.role) for candidate in candidates] == [
        ("Ana Lopez", "Hair Stylist"),
        ("Kim Lee", "Makeup Artist"),
    ]
    assert candidates[1].phone == "(310) 555-0199"


def test_slash_talent_line_records_agency_and_agent():
    (candidate,) = _run(SlashDelimitedStrategy(), "Model: BIANCA FELICIANO / Ford Models Sarah Jones / 212-555-0101")
    assert candidate.name == "Bianca Feliciano"
    assert candidate.company == "Ford Models"
    assert candidate.metadata["agent"] == "Sarah Jones"
    assert candidate.department == "Talent"


# --- key/value ---

def test_key_value_blocks():
    candidates = _run(KeyValueStrategy(), KEY_VALUE_SHEET)
    assert len(candidates) == 2
    john, jane = candidates
    assert (john.name, john.role, john.email, john.phone) == (
        "John Smith",
        "Photographer",
        "john@studio.com",
        "(555) 123-4567",
    )
    assert (jane.name, jane.role, jane.email) == ("Jane Doe", "Producer", "jane@studio.com")


def test_key_value_role_label_starts_new_person():
    text = "Photographer: John Smith\nEmail: john@studio.com\nStylist: Jane Doe\nEmail: jane@studio.com"
    candidates = _run(KeyValueStrategy(), text)
    assert [(candidate.name, candidate.email) for candidate in candidates] == [
        ("John Smith", "john@studio.com"),
        ("Jane Doe", "jane@studio.com"),
    ]


# --- freeform ---

def test_freeform_sentence():
    (candidate,) = _run(FreeformStrategy(), PROSE)
    assert candidate.name == "Rachel Kim"
    assert candidate.role == "Producer"
    assert candidate.email == "rachel.kim@brightlight.com"
    assert candidate.phone == "(212) 555-0147"
    assert candidate.company == "Brightlight"


def test_freeform_splits_people_in_one_sentence():
    text = "Contact Rachel Kim at rachel@brightlight.com, and Tom Lee at tom@brightlight.com."
    candidates = _run(FreeformStrategy(), text)
    assert [(candidate.name, candidate.email) for candidate in candidates] == [
        ("Rachel Kim", "rachel@brightlight.com"),
        ("Tom Lee", "tom@brightlight.com"),
    ]


# --- sectioned ---

def test_sectioned_runs_inner_strategy_per_section():
    strategies = {
        "slash_delimited": SlashDelimitedStrategy(),
        "key_value": KeyValueStrategy(),
        "freeform": FreeformStrategy(),
    }
    candidates = _run(SectionedStrategy(strategies), SECTIONED_SHEET)
    assert len(candidates) == 6
    assert {candidate.department for candidate in candidates} == {"Crew", "Talent", "Styling"}
    assert all(candidate.strategy == "sectioned:slash_delimited" for candidate in candidates)
    kate = next(candidate for candidate in candidates if candidate.name == "Kate Moss")
    assert kate.raw_source_lines["department"] == [4]
    assert kate.metadata["sectionKind"] == "talent"


# --- router ---

def test_router_picks_strategy_for_structure():
    router = build_router(ExtractionConfig())
    profile = detect_structure(PIPE_TABLE)
    assert [strategy.name for strategy in router.select(profile)] == ["tabular"]


def test_router_mixed_runs_every_applicable_strategy_and_freeform():
    router = build_router(ExtractionConfig())
    profile = StructureProfile(type="mixed", scores={"slash_delimited": 0.5, "key_value": 0.5, "tabular": 0.1})
    names = [strategy.name for strategy in router.select(profile)]
    assert "slash_delimited" in names
    assert "key_value" in names
    assert "tabular" not in names
    assert names[-1] == "freeform"


def test_router_falls_back_to_freeform_when_primary_finds_nothing():
    strategies = {"tabular": TabularStrategy(), "freeform": FreeformStrategy()}
    router = StrategyRouter(strategies)
    lines = split_lines(PROSE)
    result = router.extract(lines, StructureProfile(type="tabular", delimiter="\t"))
    assert result.strategies_used == ["tabular", "freeform"]
    assert [candidate.name for candidate in result.candidates] == ["Rachel Kim"]


def test_build_strategies_respects_enabled_list():
    config = ExtractionConfig(enabled_strategies=("tabular", "freeform"))
    strategies = build_strategies(config)
    assert set(strategies) == {"tabular", "freeform"}


def test_build_strategies_loads_custom_class():
    file_config = {
        "strategies": [
            {"name": "tabular_copy", "class": "callsheet_extractor.strategies.tabular.TabularStrategy", "enabled": True},
            {"name": "skipped", "class": "does.not.Exist", "enabled": False},
        ]
    }
    strategies = build_strategies(ExtractionConfig(), file_config)
    assert isinstance(strategies["tabular_copy"], TabularStrategy)
    assert "skipped" not in strategies
