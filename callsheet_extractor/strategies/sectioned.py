"""Strategy that runs the best fitting inner strategy once per detected section."""
from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from ..models import CandidateContact, RawLine, Section, StructureProfile
from ..structure import StructureDetector
from .base import ExtractionStrategy

LOGGER = logging.getLogger(__name__)


class SectionedStrategy:
    name = "sectioned"

    def __init__(
        self,
        strategies: Mapping[str, ExtractionStrategy],
        *,
        detector: Optional[StructureDetector] = None,
        fallback: str = "freeform",
    ) -> None:
        self._strategies: Dict[str, ExtractionStrategy] = dict(strategies)
        self._detector = detector or StructureDetector()
        self._fallback = fallback

    def applicability(self, profile: StructureProfile) -> float:
        return profile.score_for("sectioned")

    def extract(self, lines: Sequence[RawLine], profile: StructureProfile) -> List[CandidateContact]:
        candidates: List[CandidateContact] = []
        if profile.sections:
            first = profile.sections[0].start_line
            preamble = [line for line in lines if line.index < first]
            candidates.extend(self._extract_block(preamble))
        else:
            candidates.extend(self._extract_block(list(lines)))
        for section in profile.sections:
            found = self._extract_block(list(section.lines), section=section)
            LOGGER.debug("Section %r produced %d candidates", section.header, len(found))
            candidates.extend(found)
        return candidates

    def _extract_block(
        self, lines: Sequence[RawLine], *, section: Optional[Section] = None
    ) -> List[CandidateContact]:
        if not any(not line.is_blank() for line in lines):
            return []
        inner = self._detector.detect_block(lines)
        strategy = self._strategies.get(inner.type) or self._strategies.get(self._fallback)
        if strategy is None:
            return []
        found = strategy.extract(lines, inner)
        if not found and strategy.name != self._fallback and self._fallback in self._strategies:
            found = self._strategies[self._fallback].extract(lines, inner)
        for candidate in found:
            candidate.strategy = f"{self.name}:{candidate.strategy}"
            if section is not None:
                candidate.department = section.department
                candidate.raw_source_lines["department"] = [section.start_line]
                candidate.metadata.setdefault("sectionKind", section.kind)
        return found


__all__ = ["SectionedStrategy"]
