"""Data models shared by the detector, strategies, scorer, validator and merger."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

FIELD_NAMES: Tuple[str, ...] = ("name", "email", "phone", "role", "company", "department")
SCORED_FIELDS: Tuple[str, ...] = ("email", "name", "phone", "role", "company")

UNKNOWN = "unknown"
ROLE_PLACEHOLDER = "Contact"

STRUCTURE_TYPES: Tuple[str, ...] = (
    "tabular",
    "slash_delimited",
    "key_value",
    "sectioned",
    "freeform",
    "mixed",
)

CONFIDENCE_LEVELS: Tuple[str, ...] = ("high", "medium", "low", "very_low")

_BLANK_VALUES = frozenset({"", "unknown", "contact", "n/a", "na", "none", "tbd", "tba"})


def is_blank(value: Optional[str]) -> bool:
    """Return ``True`` for empty values and the placeholders used for missing fields."""

    if value is None:
        return True
    return value.strip().lower() in _BLANK_VALUES


# --- Input Models ---

@dataclass(frozen=True, slots=True)
class RawLine:
    """One line of the input document with access to its neighbours."""

    text: str
    index: int
    lines: Tuple[str, ...] = field(default=(), repr=False, compare=False)

    @property
    def stripped(self) -> str:
        return self.text.strip()

    def is_blank(self) -> bool:
        return not self.text.strip()

    def neighbour(self, offset: int) -> Optional["RawLine"]:
        position = self.index + offset
        if position < 0 or position >= len(self.lines):
            return None
        return RawLine(self.lines[position], position, self.lines)


def split_lines(text: str) -> List[RawLine]:
    """Split ``text`` into :class:`RawLine` objects sharing one line tuple."""

    lines = tuple(text.split("\n"))
    return [RawLine(line, index, lines) for index, line in enumerate(lines)]


@dataclass(frozen=True, slots=True)
class DocumentContext:
    """Light metadata produced by the document classifier."""

    document_type: str = UNKNOWN
    production_type: str = UNKNOWN

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "DocumentContext":
        data = data or {}
        document_type = data.get("documentType") or data.get("document_type") or UNKNOWN
        production_type = data.get("productionType") or data.get("production_type") or UNKNOWN
        return cls(document_type=str(document_type).lower(), production_type=str(production_type).lower())


# --- Structure Models ---

@dataclass(frozen=True, slots=True)
class Section:
    """A block of lines introduced by a recognised section header."""

    header: str
    start_line: int
    lines: Tuple[RawLine, ...] = ()
    kind: str = "general"

    @property
    def department(self) -> str:
        return self.header


@dataclass(frozen=True)
class StructureProfile:
    """Layout classification of a whole document."""

    type: str
    sections: Tuple[Section, ...] = ()
    confidence: float = 0.0
    delimiter: Optional[str] = None
    scores: Mapping[str, float] = field(default_factory=dict)
    line_count: int = 0

    def score_for(self, structure_type: str) -> float:
        return float(self.scores.get(structure_type, 0.0))


# --- Pipeline Models ---

@dataclass
class CandidateContact:
    """A provisional, unscored extraction of one possible person."""

    name: str = ""
    email: str = ""
    phone: str = ""
    role: str = ""
    company: str = ""
    department: str = ""
    raw_source_lines: Dict[str, List[int]] = field(default_factory=dict)
    strategy: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def set_field(self, field_name: str, value: Optional[str], line_index: Optional[int]) -> bool:
        """Store ``value`` when the field is still empty, recording its source line."""

        if is_blank(value) or not is_blank(getattr(self, field_name)):
            return False
        setattr(self, field_name, value.strip())
        if line_index is not None:
            self.add_source(field_name, line_index)
        return True

    def add_source(self, field_name: str, line_index: int) -> None:
        indices = self.raw_source_lines.setdefault(field_name, [])
        if line_index not in indices:
            indices.append(line_index)

    def source_lines(self) -> List[int]:
        return sorted({index for indices in self.raw_source_lines.values() for index in indices})

    def populated_fields(self) -> List[str]:
        return [name for name in SCORED_FIELDS if not is_blank(getattr(self, name))]

    def has_identity(self) -> bool:
        return not (is_blank(self.name) and is_blank(self.email) and is_blank(self.phone))

    def field_values(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in FIELD_NAMES}


@dataclass
class ScoredContact:
    """A candidate together with its confidence score."""

    candidate: CandidateContact
    confidence: float
    confidence_level: str


@dataclass
class ValidationResult:
    """Outcome of validating one contact."""

    is_valid: bool = True
    reasons: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    quality_score: float = 0.0
    quality_level: str = "very_low"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "reasons": list(self.reasons),
            "warnings": list(self.warnings),
            "qualityScore": round(self.quality_score, 4),
            "qualityLevel": self.quality_level,
        }


@dataclass
class ValidatedContact:
    """A scored contact annotated with its validation outcome."""

    scored: ScoredContact
    validation: ValidationResult

    @property
    def candidate(self) -> CandidateContact:
        return self.scored.candidate

    @property
    def confidence(self) -> float:
        return self.scored.confidence


# --- Output Models ---

@dataclass
class Contact:
    """Final merged record for one real-world person."""

    name: str = ""
    email: str = ""
    phone: str = ""
    role: str = ""
    company: str = ""
    department: str = ""
    confidence: float = 0.0
    confidence_level: str = "very_low"
    field_sources: Dict[str, List[int]] = field(default_factory=dict)
    field_confidence: Dict[str, float] = field(default_factory=dict)
    strategies: List[str] = field(default_factory=list)
    known_emails: Tuple[str, ...] = ()
    known_phones: Tuple[str, ...] = ()
    known_names: Tuple[str, ...] = ()
    warnings: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def raw_source_lines(self) -> List[int]:
        return sorted({index for indices in self.field_sources.values() for index in indices})

    def populated_fields(self) -> List[str]:
        return [name for name in SCORED_FIELDS if not is_blank(getattr(self, name))]

    def has_identity(self) -> bool:
        return not (is_blank(self.name) and is_blank(self.email) and is_blank(self.phone))

    def field_values(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in FIELD_NAMES}

    def as_dict(self) -> Dict[str, Any]:
        """Return the camelCase representation used across the engine boundary."""

        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role or ROLE_PLACEHOLDER,
            "company": self.company,
            "department": self.department,
            "confidence": round(self.confidence, 4),
            "confidenceLevel": self.confidence_level,
            "rawSourceLines": self.raw_source_lines,
            "fieldSources": {key: sorted(value) for key, value in self.field_sources.items()},
            "strategies": list(self.strategies),
            "warnings": list(self.warnings),
            "metadata": dict(self.metadata),
        }


@dataclass
class ExtractionMetadata:
    """Diagnostics describing how a document was processed."""

    structure_type: str = "freeform"
    sections_found: int = 0
    total_raw_candidates: int = 0
    duplicates_removed: int = 0
    average_confidence: float = 0.0
    structure_confidence: float = 0.0
    strategies_used: List[str] = field(default_factory=list)
    extraction_mode: str = "multi-strategy"
    rejected: int = 0
    rejection_reasons: Dict[str, int] = field(default_factory=dict)
    confidence_distribution: Dict[str, int] = field(
        default_factory=lambda: {level: 0 for level in CONFIDENCE_LEVELS}
    )
    document_type: str = UNKNOWN
    production_type: str = UNKNOWN
    status: str = "ok"
    failed_stage: Optional[str] = None
    error: Optional[str] = None
    reason: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "structureType": self.structure_type,
            "sectionsFound": self.sections_found,
            "totalRawCandidates": self.total_raw_candidates,
            "duplicatesRemoved": self.duplicates_removed,
            "averageConfidence": self.average_confidence,
            "structureConfidence": round(self.structure_confidence, 4),
            "strategiesUsed": list(self.strategies_used),
            "extractionMode": self.extraction_mode,
            "rejected": self.rejected,
            "rejectionReasons": dict(self.rejection_reasons),
            "confidenceDistribution": dict(self.confidence_distribution),
            "documentType": self.document_type,
            "productionType": self.production_type,
            "status": self.status,
        }
        for key, value in (("failedStage", self.failed_stage), ("error", self.error), ("reason", self.reason)):
            if value is not None:
                data[key] = value
        return data


@dataclass
class ExtractionResult:
    """Contacts extracted from one document plus run metadata."""

    contacts: List[Contact] = field(default_factory=list)
    metadata: ExtractionMetadata = field(default_factory=ExtractionMetadata)
    source: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "contacts": [contact.as_dict() for contact in self.contacts],
            "metadata": self.metadata.as_dict(),
        }
        if self.source is not None:
            data["source"] = self.source
        return data


def contact_from_validated(validated: ValidatedContact) -> Contact:
    """Lift a validated candidate into a single-member :class:`Contact`."""

    candidate = validated.candidate
    confidence = validated.confidence
    values = candidate.field_values()
    field_confidence = {name: confidence for name, value in values.items() if not is_blank(value)}
    return Contact(
        name=candidate.name,
        email=candidate.email,
        phone=candidate.phone,
        role=candidate.role,
        company=candidate.company,
        department=candidate.department,
        confidence=confidence,
        confidence_level=validated.scored.confidence_level,
        field_sources={key: sorted(value) for key, value in candidate.raw_source_lines.items()},
        field_confidence=field_confidence,
        strategies=[candidate.strategy] if candidate.strategy else [],
        known_emails=_aliases([candidate.email], lower=True),
        known_phones=_aliases([candidate.phone]),
        known_names=_aliases([candidate.name]),
        warnings=list(validated.validation.warnings),
        metadata=dict(candidate.metadata),
    )


def _aliases(values: Iterable[str], *, lower: bool = False) -> Tuple[str, ...]:
    cleaned = set()
    for value in values:
        if is_blank(value):
            continue
        text = value.strip()
        cleaned.add(text.lower() if lower else text)
    return tuple(sorted(cleaned))


def average_confidence(contacts: Sequence[Contact]) -> float:
    if not contacts:
        return 0.0
    return round(sum(contact.confidence for contact in contacts) / len(contacts), 2)


__all__ = [
    "FIELD_NAMES",
    "SCORED_FIELDS",
    "STRUCTURE_TYPES",
    "CONFIDENCE_LEVELS",
    "ROLE_PLACEHOLDER",
    "UNKNOWN",
    "RawLine",
    "DocumentContext",
    "Section",
    "StructureProfile",
    "CandidateContact",
    "ScoredContact",
    "ValidationResult",
    "ValidatedContact",
    "Contact",
    "ExtractionMetadata",
    "ExtractionResult",
    "average_confidence",
    "contact_from_validated",
    "is_blank",
    "split_lines",
]
