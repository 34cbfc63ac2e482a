"""Interface shared by all extraction strategies."""
from __future__ import annotations

import logging
from typing import List, Optional, Protocol, Sequence

from ..fields import FieldExtractor
from ..models import CandidateContact, RawLine, StructureProfile

LOGGER = logging.getLogger(__name__)


class ExtractionStrategy(Protocol):
    """Protocol defining the interface that strategy implementations must follow."""

    name: str

    def applicability(self, profile: StructureProfile) -> float:  # pragma: no cover - runtime protocol
        """Return how well this strategy fits ``profile`` (0.0 - 1.0)."""

    def extract(self, lines: Sequence[RawLine], profile: StructureProfile) -> List[CandidateContact]:  # pragma: no cover - runtime protocol
        """Return candidate contacts found in ``lines``."""


class LineStrategy:
    """Base class for strategies that work one line at a time."""

    name = "line"
    structure_type = ""

    def __init__(self, proximity_window: int = 2, field_extractor: Optional[FieldExtractor] = None) -> None:
        self.proximity_window = proximity_window
        self.fields = field_extractor or FieldExtractor(window=proximity_window)

    def applicability(self, profile: StructureProfile) -> float:
        return profile.score_for(self.structure_type)

    def extract(self, lines: Sequence[RawLine], profile: StructureProfile) -> List[CandidateContact]:
        candidates: List[CandidateContact] = []
        for line in lines:
            candidates.extend(self.extract_line(line))
        LOGGER.debug("%s strategy produced %d candidates", self.name, len(candidates))
        return candidates

    def extract_line(self, line: RawLine) -> List[CandidateContact]:
        candidate = self.fields.extract(line, strategy=self.name)
        return [candidate] if candidate is not None else []


__all__ = ["ExtractionStrategy", "LineStrategy"]
