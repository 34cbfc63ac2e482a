"""Fallback strategy that reads prose sentence by sentence."""
from __future__ import annotations

import re
from typing import List, Tuple

from ..fields import FieldExtractor, extract_name, find_emails, find_phones, parse_fields
from ..models import CandidateContact, RawLine
from ..structure import is_section_header, is_skip_line
from .base import LineStrategy

SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+(?=[A-Z\"'(])")


def _person_spans(sentence: str) -> List[Tuple[int, int]]:
    """Split a sentence into spans, one per person, anchored on contact tokens."""

    tokens = sorted((start, end) for start, end, _ in find_emails(sentence) + find_phones(sentence))
    if len(tokens) <= 1:
        return [(0, len(sentence))]
    spans: List[Tuple[int, int]] = []
    group_start, last_end = 0, None
    for start, end in tokens:
        if last_end is not None and extract_name(sentence[last_end:start]):
            spans.append((group_start, last_end))
            group_start = last_end
        last_end = end
    spans.append((group_start, len(sentence)))
    return spans


class FreeformStrategy(LineStrategy):
    name = "freeform"
    structure_type = "freeform"

    def extract_line(self, line: RawLine) -> List[CandidateContact]:
        text = line.stripped
        if not text or is_skip_line(text) or is_section_header(text):
            return []
        sentences = [sentence for sentence in SENTENCE_SPLIT_RE.split(text) if sentence.strip()]
        if len(sentences) == 1 and len(_person_spans(text)) == 1:
            return super().extract_line(line)

        candidates: List[CandidateContact] = []
        for sentence in sentences:
            for start, end in _person_spans(sentence):
                found = parse_fields(sentence[start:end])
                if not found.has_identity():
                    continue
                candidate = FieldExtractor.to_candidate(found, line.index, strategy=self.name)
                candidates.append(candidate)
        if len(candidates) == 1 and candidates[0].name:
            self.fields.fill_from_neighbours(candidates[0], line)
        return candidates


__all__ = ["FreeformStrategy"]
