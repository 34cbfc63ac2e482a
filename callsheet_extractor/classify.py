"""Keyword based document classifier.

The extraction engine never calls this on its own; callers opt in with
``auto_classify=True`` (or ``--auto-classify`` on the command line) when
they have no ``documentType``/``productionType`` metadata of their own.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, Optional, Tuple

from .models import UNKNOWN, DocumentContext

LOGGER = logging.getLogger(__name__)

_DOCUMENT_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("call_sheet", ("call sheet", "callsheet", "call time", "crew call", "general call", "shoot date", "wrap")),
    ("contact_list", ("contact list", "contacts", "crew list", "directory", "phone list")),
    ("resume", ("resume", "curriculum vitae", "experience", "education", "skills", "references")),
    ("business_card", ("business card",)),
    ("production_document", ("production", "schedule", "budget", "shot list", "treatment", "script")),
)

_PRODUCTION_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("film", ("feature film", "film", "movie", "short film", "documentary")),
    ("television", ("television", "tv series", "episode", "pilot", "season", "network")),
    ("commercial", ("commercial", "campaign", "brand", "advert", "spot", "editorial", "lookbook", "e-comm")),
    ("corporate", ("corporate", "company event", "conference", "training video", "internal")),
    ("theatre", ("theatre", "theater", "stage", "rehearsal", "musical", "play")),
)

_FILE_NAME_HINTS: Dict[str, str] = {
    "callsheet": "call_sheet",
    "call_sheet": "call_sheet",
    "call-sheet": "call_sheet",
    "contacts": "contact_list",
    "crew_list": "contact_list",
    "resume": "resume",
    "cv": "resume",
}


def _count(text: str, keywords: Tuple[str, ...]) -> int:
    return sum(len(re.findall(rf"\b{re.escape(keyword)}\b", text)) for keyword in keywords)


def _best(text: str, table: Tuple[Tuple[str, Tuple[str, ...]], ...]) -> str:
    best, best_score = UNKNOWN, 0
    for label, keywords in table:
        score = _count(text, keywords)
        if score > best_score:
            best, best_score = label, score
    return best


def classify_document(text: str, file_name: Optional[str] = None) -> DocumentContext:
    """Guess ``documentType`` and ``productionType`` from keywords in ``text`` and ``file_name``."""

    lowered = text.lower()
    document_type = UNKNOWN
    if file_name:
        stem = file_name.lower()
        for hint, label in _FILE_NAME_HINTS.items():
            if hint in stem:
                document_type = label
                break
    if document_type == UNKNOWN:
        document_type = _best(lowered, _DOCUMENT_KEYWORDS)
    production_type = _best(lowered, _PRODUCTION_KEYWORDS)
    LOGGER.debug("Classified document as %s/%s", document_type, production_type)
    return DocumentContext(document_type=document_type, production_type=production_type)


__all__ = ["classify_document"]
