"""Strategy for ``Role: Name / Phone / Email`` lines."""
from __future__ import annotations

from typing import List

from ..fields import FieldExtractor, extract_name, parse_fields
from ..models import CandidateContact, RawLine
from ..structure import SLASH_SPLIT_RE, is_known_label, is_section_header, is_skip_line, split_label
from ..vocabulary import FIELD_LABELS
from .base import LineStrategy


def _segments(text: str) -> List[str]:
    return [segment.strip() for segment in SLASH_SPLIT_RE.split(text) if segment.strip()]


def _is_role_segment(segment: str) -> bool:
    parts = split_label(segment)
    return bool(parts and parts[1] and parts[0].lower() not in FIELD_LABELS and is_known_label(parts[0]))


class SlashDelimitedStrategy(LineStrategy):
    name = "slash_delimited"
    structure_type = "slash_delimited"

    def extract_line(self, line: RawLine) -> List[CandidateContact]:
        text = line.stripped
        segments = _segments(text)
        if len(segments) < 2:
            return super().extract_line(line)
        if is_skip_line(text) or is_section_header(text):
            return []

        groups = self._group_segments(segments)
        if len(groups) > 1:
            # "Hair: Ana Lopez / Makeup: Kim Lee" lists two people on one line
            candidates = []
            for group in groups:
                found = parse_fields(" / ".join(group))
                if found.has_identity():
                    candidates.append(FieldExtractor.to_candidate(found, line.index, strategy=self.name))
            return candidates

        candidate = self.fields.extract(line, strategy=self.name, proximity=False)
        if candidate is None:
            return []
        if not candidate.name:
            for segment in segments:
                if candidate.set_field("name", extract_name(segment), line.index):
                    break
        return [candidate]

    @staticmethod
    def _group_segments(segments: List[str]) -> List[List[str]]:
        groups: List[List[str]] = []
        for segment in segments:
            if not groups or _is_role_segment(segment):
                groups.append([segment])
            else:
                groups[-1].append(segment)
        return groups


__all__ = ["SlashDelimitedStrategy"]
