"""Text hygiene applied before structure detection."""
from __future__ import annotations

import logging
import re
from typing import Optional

from .vocabulary import PDF_STRUCTURE_MARKERS

LOGGER = logging.getLogger(__name__)

# Zero-width characters and bidirectional controls that PDF/email copy-paste leaves behind.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\u2060\ufeff\u200e\u200f\u202a-\u202e\u2066-\u2069]")
_SPACE_RE = re.compile("[\u00a0\u2007\u202f]")
_PDF_OPERATOR_RE = re.compile(
    r"^\s*(?:\d+\s+\d+\s+obj\b|endobj\b|stream\b|endstream\b|xref\b|trailer\b|startxref\b|%%EOF|%PDF-|"
    r"BT\s*$|ET\s*$|[\d.\s-]+\s(?:Tf|Td|TD|Tm|re|cm|l|m|w)\s*$)"
)


def normalize_text(text: str) -> str:
    """Return ``text`` with invisible characters removed and line endings unified."""

    cleaned = _INVISIBLE_RE.sub("", text)
    cleaned = _SPACE_RE.sub(" ", cleaned)
    cleaned = cleaned.replace("\r\n", "\n").replace("\r", "\n")
    lines = [line.rstrip() for line in cleaned.split("\n")]
    kept = [line for line in lines if not _PDF_OPERATOR_RE.match(line)]
    dropped = len(lines) - len(kept)
    if dropped:
        LOGGER.debug("Dropped %d PDF operator lines", dropped)
    return "\n".join(kept)


def count_pdf_markers(text: str) -> int:
    return sum(1 for marker in PDF_STRUCTURE_MARKERS if marker in text)


def non_printable_ratio(text: str) -> float:
    if not text:
        return 0.0
    bad = sum(1 for char in text if not char.isprintable() and char not in "\n\t")
    return bad / len(text)


def unreadable_reason(text: str, *, marker_threshold: int = 3, max_non_printable: float = 0.2) -> Optional[str]:
    """Return why ``text`` looks like undecoded binary content, or ``None`` when it is usable."""

    markers = count_pdf_markers(text)
    if markers >= marker_threshold:
        return f"Text contains {markers} PDF structure markers; the document was not decoded"
    ratio = non_printable_ratio(_INVISIBLE_RE.sub("", text))
    if ratio > max_non_printable:
        return f"Text is {ratio:.0%} non-printable characters"
    return None


__all__ = ["count_pdf_markers", "non_printable_ratio", "normalize_text", "unreadable_reason"]
