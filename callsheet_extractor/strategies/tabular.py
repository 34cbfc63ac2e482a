"""Row strategy for tab, pipe, multi-space and comma separated tables."""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Sequence

from ..fields import (
    company_from_email,
    extract_email,
    extract_name,
    extract_phone,
    find_role,
    normalize_name,
)
from ..models import CandidateContact, RawLine, StructureProfile
from ..structure import is_section_header, is_separator, is_skip_line, split_cells
from ..vocabulary import HEADER_KEYWORDS, department_for_role
from .base import LineStrategy

LOGGER = logging.getLogger(__name__)


def _header_field(cell: str) -> Optional[str]:
    lowered = re.sub(r"[^a-z -]", "", cell.lower()).strip()
    if lowered in HEADER_KEYWORDS:
        return HEADER_KEYWORDS[lowered]
    for word in lowered.replace("-", " ").split():
        if word in HEADER_KEYWORDS:
            return HEADER_KEYWORDS[word]
    return None


def map_header(cells: Sequence[str]) -> Optional[Dict[int, str]]:
    """Map column positions to field names when ``cells`` looks like a header row."""

    mapping: Dict[int, str] = {}
    for position, cell in enumerate(cells):
        if "@" in cell or re.search(r"\d{3}", cell):
            return None
        field_name = _header_field(cell)
        if field_name and field_name not in mapping.values():
            mapping[position] = field_name
    return mapping if len(mapping) >= 2 else None


class TabularStrategy(LineStrategy):
    name = "tabular"
    structure_type = "tabular"

    def extract(self, lines: Sequence[RawLine], profile: StructureProfile) -> List[CandidateContact]:
        delimiter = profile.delimiter or "\t"
        header: Optional[Dict[int, str]] = None
        header_width = 0
        candidates: List[CandidateContact] = []
        for line in lines:
            text = line.stripped
            if not text or is_separator(text) or is_section_header(text):
                continue
            cells = split_cells(text, delimiter)
            if len(cells) < 2:
                continue
            mapping = map_header(cells)
            if mapping is not None:
                header, header_width = mapping, len(cells)
                LOGGER.debug("Table header on line %d: %s", line.index, mapping)
                continue
            if is_skip_line(text):
                continue
            if header is not None and len(cells) == header_width:
                candidate = self._from_mapped(cells, header, line.index)
            else:
                candidate = self._from_guess(cells, line.index)
            if candidate is not None and candidate.has_identity():
                candidates.append(candidate)
        LOGGER.debug("%s strategy produced %d candidates", self.name, len(candidates))
        return candidates

    def _from_mapped(self, cells: Sequence[str], header: Dict[int, str], index: int) -> Optional[CandidateContact]:
        candidate = CandidateContact(strategy=self.name)
        for position, field_name in header.items():
            value = cells[position].strip()
            if not value:
                continue
            if field_name == "name":
                candidate.set_field("name", normalize_name(value), index)
            elif field_name == "email":
                candidate.set_field("email", extract_email(value), index)
            elif field_name == "phone":
                candidate.set_field("phone", extract_phone(value), index)
            elif field_name == "role":
                found = find_role(value, label_context=True)
                candidate.set_field("role", found[0] if found else value, index)
            elif field_name == "agent":
                candidate.metadata["agent"] = normalize_name(value)
            else:
                candidate.set_field(field_name, value, index)
        self._complete(candidate, index)
        return candidate

    def _from_guess(self, cells: Sequence[str], index: int) -> Optional[CandidateContact]:
        candidate = CandidateContact(strategy=self.name)
        leftovers: List[str] = []
        for cell in cells:
            if not cell:
                continue
            if candidate.set_field("email", extract_email(cell), index):
                continue
            if candidate.set_field("phone", extract_phone(cell), index):
                continue
            found = find_role(cell, label_context=True)
            if found and len(found[0]) >= len(cell) - 4 and candidate.set_field("role", found[0], index):
                continue
            if not candidate.name and candidate.set_field("name", extract_name(cell), index):
                continue
            leftovers.append(cell)
        for cell in leftovers:
            if re.search(r"[^\W\d_]", cell) and candidate.set_field("company", cell, index):
                break
        self._complete(candidate, index)
        return candidate

    @staticmethod
    def _complete(candidate: CandidateContact, index: int) -> None:
        if not candidate.company:
            candidate.set_field("company", company_from_email(candidate.email), index)
        if not candidate.department:
            candidate.set_field("department", department_for_role(candidate.role), index)


__all__ = ["TabularStrategy", "map_header"]
