"""Layout detection for call sheet text."""
from __future__ import annotations

import logging
import re
from collections import Counter
from typing import Dict, List, Optional, Sequence, Tuple

from .models import RawLine, Section, StructureProfile, split_lines
from .vocabulary import (
    FIELD_LABELS,
    ROLE_RE,
    SECTION_HEADER_SET,
    SECTION_HEADERS,
    SEPARATOR_RE,
    SKIP_PATTERNS,
    section_kind,
)

LOGGER = logging.getLogger(__name__)

SLASH_SPLIT_RE = re.compile(r"\s+/\s*|\s*/\s+")
MULTISPACE_SPLIT_RE = re.compile(r"\t| {2,}")
LABEL_RE = re.compile(r"^\s*(?P<label>[A-Za-z0-9][\w &'./#-]{0,40}?)\s*:\s*(?P<value>.*)$")

_HEADER_DECORATION = " \t:=-*#_~[]()"
_EMAIL_TOKEN_RE = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+")
_PHONE_TOKEN_RE = re.compile(r"(?:\+?\d[\d\s().-]{6,}\d)")

TABULAR_DELIMITERS: Tuple[str, ...] = ("\t", "|", "  ", ",")


# --- Line classification helpers ---

def clean_header(text: str) -> str:
    """Strip decoration (``=== CREW ===``, ``CREW:``) from a header line."""

    cleaned = text.strip().strip(_HEADER_DECORATION)
    return re.sub(r"\s+", " ", cleaned)


def is_section_header(text: str) -> bool:
    stripped = text.strip()
    if not stripped or len(stripped) > 40 or re.search(r"[\d@]", stripped):
        return False
    if ":" in stripped and stripped.split(":", 1)[1].strip():
        return False
    normalized = clean_header(stripped).upper()
    if not normalized:
        return False
    if normalized in SECTION_HEADER_SET:
        return True
    # "CAMERA CREW", "PHOTO TEAM": only trusted when written in capitals
    letters = [char for char in clean_header(stripped) if char.isalpha()]
    if letters and all(char.isupper() for char in letters) and len(normalized.split()) <= 4:
        return any(normalized.endswith(" " + header) for header in SECTION_HEADERS)
    return False


def is_separator(text: str) -> bool:
    return bool(SEPARATOR_RE.match(text))


def is_skip_line(text: str) -> bool:
    """Return ``True`` for schedule and logistics lines that never describe a person."""

    stripped = text.strip()
    if not stripped or is_separator(stripped):
        return True
    return any(pattern.search(stripped) for pattern in SKIP_PATTERNS)


def split_label(text: str) -> Optional[Tuple[str, str]]:
    """Split ``Label: value`` lines; returns ``None`` when there is no usable label."""

    match = LABEL_RE.match(text)
    if not match:
        return None
    label = match.group("label").strip()
    if "@" in label or re.search(r"\d{3}", label):
        return None
    return label, match.group("value").strip()


def is_known_label(label: str) -> bool:
    lowered = label.lower().strip()
    if lowered in FIELD_LABELS:
        return True
    match = ROLE_RE.fullmatch(label.strip())
    return match is not None


def split_cells(text: str, delimiter: Optional[str]) -> List[str]:
    """Split one table row on ``delimiter`` and trim the cells."""

    if delimiter == "  ":
        cells = MULTISPACE_SPLIT_RE.split(text.strip())
    elif delimiter:
        cells = text.split(delimiter)
    else:
        cells = [text]
    cells = [cell.strip() for cell in cells]
    if delimiter == "|":
        # "| a | b |" rows carry empty edge cells
        if cells and not cells[0]:
            cells = cells[1:]
        if cells and not cells[-1]:
            cells = cells[:-1]
    return cells


def _is_single_field_line(text: str) -> bool:
    stripped = text.strip()
    email = _EMAIL_TOKEN_RE.fullmatch(stripped)
    phone = _PHONE_TOKEN_RE.fullmatch(stripped)
    return bool(email or phone)


# --- Detector ---

class StructureDetector:
    """Score a fixed battery of layout indicators and pick the best structure type."""

    def __init__(self, mixed_margin: float = 0.1) -> None:
        self.mixed_margin = mixed_margin

    def detect(self, lines: Sequence[RawLine]) -> StructureProfile:
        sections = self.find_sections(lines)
        content = [line for line in lines if self._is_content(line)]
        if not content:
            return StructureProfile(type="freeform", sections=(), confidence=0.0, line_count=len(lines))

        scores, delimiter = self.score_layout(content)
        scores["sectioned"] = min(1.0, 0.5 + 0.15 * len(sections)) if sections else 0.0

        ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
        best_type, best_score = ranked[0]
        if scores["sectioned"] > 0:
            # section bodies are classified again by the sectioned strategy
            best_type, best_score = "sectioned", scores["sectioned"]
        else:
            runner_type, runner_score = ranked[1]
            if runner_score > 0.3 and best_score - runner_score < self.mixed_margin:
                LOGGER.debug("Layout is mixed: %s=%.2f %s=%.2f", best_type, best_score, runner_type, runner_score)
                best_type = "mixed"

        profile = StructureProfile(
            type=best_type,
            sections=tuple(sections),
            confidence=round(min(1.0, best_score), 4),
            delimiter=delimiter,
            scores={key: round(value, 4) for key, value in scores.items()},
            line_count=len(lines),
        )
        LOGGER.debug("Detected %s structure (confidence %.2f, %d sections)", profile.type, profile.confidence, len(sections))
        return profile

    def detect_block(self, lines: Sequence[RawLine]) -> StructureProfile:
        """Classify a block (e.g. one section body) ignoring section headers."""

        content = [line for line in lines if self._is_content(line)]
        if not content:
            return StructureProfile(type="freeform", confidence=0.0, line_count=len(lines))
        scores, delimiter = self.score_layout(content)
        best_type, best_score = sorted(scores.items(), key=lambda item: (-item[1], item[0]))[0]
        return StructureProfile(
            type=best_type,
            confidence=round(best_score, 4),
            delimiter=delimiter,
            scores=scores,
            line_count=len(lines),
        )

    # --- indicators ---

    def score_layout(self, content: Sequence[RawLine]) -> Tuple[Dict[str, float], Optional[str]]:
        total = float(len(content))
        tabular, delimiter = self._tabular_score(content)
        slash = sum(1 for line in content if len(self._slash_segments(line.stripped)) >= 2) / total
        key_value = sum(self._key_value_weight(line.stripped) for line in content) / total
        prose = sum(1 for line in content if self._is_prose(line.stripped)) / total
        scores = {
            "tabular": tabular,
            "slash_delimited": slash,
            "key_value": key_value,
            "freeform": max(0.2, prose),
        }
        return scores, delimiter

    def _tabular_score(self, content: Sequence[RawLine]) -> Tuple[float, Optional[str]]:
        best_score, best_delimiter = 0.0, None
        for delimiter in TABULAR_DELIMITERS:
            counts = [self._row_width(line.stripped, delimiter) for line in content]
            rows = [width for width in counts if width]
            if len(rows) < 2:
                continue
            modal_width, modal_count = Counter(rows).most_common(1)[0]
            consistency = modal_count / len(rows)
            score = (len(rows) / len(content)) * (0.7 + 0.3 * consistency)
            if delimiter == ",":
                score *= 0.8
            if score > best_score:
                best_score, best_delimiter = score, delimiter
        return min(1.0, best_score), best_delimiter

    @staticmethod
    def _row_width(text: str, delimiter: str) -> int:
        if delimiter == "\t":
            return len(split_cells(text, "\t")) if "\t" in text else 0
        if delimiter == "|":
            return len(split_cells(text, "|")) if text.count("|") >= 2 else 0
        if delimiter == "  ":
            cells = split_cells(text, "  ")
            return len(cells) if len(cells) >= 3 else 0
        cells = [cell.strip() for cell in text.split(",")]
        if len(cells) < 3 or ". " in text:
            return 0
        if sum(len(cell) for cell in cells) / len(cells) > 30:
            return 0
        return len(cells)

    @staticmethod
    def _slash_segments(text: str) -> List[str]:
        return [segment for segment in SLASH_SPLIT_RE.split(text) if segment.strip()]

    def _key_value_weight(self, text: str) -> float:
        if len(self._slash_segments(text)) >= 2 or "\t" in text or text.count("|") >= 2:
            return 0.0
        parts = split_label(text)
        if parts and parts[1] and is_known_label(parts[0]):
            return 1.0
        if _is_single_field_line(text):
            return 0.5
        return 0.0

    @staticmethod
    def _is_prose(text: str) -> bool:
        if "\t" in text or text.count("|") >= 2:
            return False
        words = re.findall(r"[^\W\d_]{2,}", text)
        return len(words) >= 8 or (len(words) >= 4 and text.rstrip().endswith((".", "!", "?")))

    @staticmethod
    def _is_content(line: RawLine) -> bool:
        text = line.stripped
        return bool(text) and not is_separator(text) and not is_section_header(text)

    # --- sections ---

    def find_sections(self, lines: Sequence[RawLine]) -> List[Section]:
        sections: List[Section] = []
        header: Optional[RawLine] = None
        body: List[RawLine] = []

        def flush() -> None:
            if header is not None and any(not line.is_blank() for line in body):
                title = clean_header(header.text).title()
                sections.append(Section(header=title, start_line=header.index, lines=tuple(body), kind=section_kind(title)))

        for line in lines:
            if is_section_header(line.text):
                flush()
                header, body = line, []
            elif header is not None:
                body.append(line)
        flush()
        return sections


def detect_structure(text: str, *, mixed_margin: float = 0.1) -> StructureProfile:
    """Convenience wrapper returning the :class:`StructureProfile` of ``text``."""

    return StructureDetector(mixed_margin=mixed_margin).detect(split_lines(text))


__all__ = [
    "SLASH_SPLIT_RE",
    "StructureDetector",
    "clean_header",
    "detect_structure",
    "is_known_label",
    "is_section_header",
    "is_separator",
    "is_skip_line",
    "split_cells",
    "split_label",
]
