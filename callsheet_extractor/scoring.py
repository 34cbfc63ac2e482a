"""Confidence scoring for candidate and merged contacts.

Confidence is a pure function of the field values and the document
context, so it is recomputed whenever a contact changes (e.g. after a
merge) rather than carried over.
"""
from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from .models import UNKNOWN, DocumentContext, ScoredContact, is_blank
from .vocabulary import COMPANY_SUFFIXES, NAME_PARTICLES, PERSONAL_DOMAINS, ROLE_RE, SUSPICIOUS_EMAIL_MARKERS

LOGGER = logging.getLogger(__name__)

FIELD_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {"email": 0.30, "name": 0.25, "phone": 0.20, "role": 0.15, "company": 0.10}
)

DOCUMENT_TYPE_FACTORS: Mapping[str, float] = MappingProxyType(
    {
        "call_sheet": 1.2,
        "contact_list": 1.1,
        "production_document": 1.0,
        "resume": 0.9,
        "business_card": 1.1,
        "unknown": 0.8,
    }
)

PRODUCTION_TYPE_FACTORS: Mapping[str, float] = MappingProxyType(
    {
        "film": 1.1,
        "television": 1.0,
        "commercial": 1.0,
        "corporate": 0.9,
        "theatre": 1.0,
        "unknown": 0.8,
    }
)

MULTI_FIELD_BONUS = 0.10
LOW_SCORE_CUTOFF = 0.20

_US_DISPLAY_RE = re.compile(r"^\(\d{3}\) \d{3}-\d{4}$")
_INTL_DISPLAY_RE = re.compile(r"^\+\d{1,3}(?: \d{1,5})+$")


class ContactFields(Protocol):
    name: str
    email: str
    phone: str
    role: str
    company: str


def confidence_level(score: float) -> str:
    if score >= 0.8:
        return "high"
    if score >= 0.6:
        return "medium"
    if score >= 0.4:
        return "low"
    return "very_low"


# --- Field quality ---

def score_email(email: str) -> float:
    if is_blank(email):
        return 0.0
    score = 0.5
    domain = email.rsplit("@", 1)[-1].lower()
    score += 0.2 if domain in PERSONAL_DOMAINS else 0.3
    lowered = email.lower()
    if any(marker in lowered for marker in SUSPICIOUS_EMAIL_MARKERS):
        score -= 0.3
    return min(1.0, max(0.0, score))


def score_name(name: str) -> float:
    if is_blank(name):
        return 0.0
    score = 0.5
    words = name.split()
    if all(word[0].isupper() for word in words if word not in NAME_PARTICLES):
        score += 0.2
    if 3 <= len(name) <= 50:
        score += 0.2
    if len(words) >= 2:
        score += 0.1
    return min(1.0, score)


def score_phone(phone: str) -> float:
    if is_blank(phone):
        return 0.0
    score = 0.5
    if _US_DISPLAY_RE.match(phone):
        score += 0.3
    elif _INTL_DISPLAY_RE.match(phone):
        score += 0.2
    digits = re.sub(r"\D", "", phone)
    if len(digits) in (10, 11):
        score += 0.2
    return min(1.0, score)


def score_role(role: str) -> float:
    if is_blank(role):
        return 0.0
    score = 0.5
    if ROLE_RE.search(role):
        score += 0.3
    if role[0].isupper():
        score += 0.2
    return min(1.0, score)


def score_company(company: str) -> float:
    if is_blank(company):
        return 0.0
    score = 0.5
    words = company.lower().split()
    if words and words[-1] in COMPANY_SUFFIXES:
        score += 0.2
    if 2 <= len(company) <= 100:
        score += 0.2
    if company[0].isupper():
        score += 0.1
    return min(1.0, score)


_FIELD_SCORERS = {
    "email": score_email,
    "name": score_name,
    "phone": score_phone,
    "role": score_role,
    "company": score_company,
}


def field_scores(contact: ContactFields) -> Mapping[str, float]:
    return {name: scorer(getattr(contact, name) or "") for name, scorer in _FIELD_SCORERS.items()}


def weighted_field_score(contact: ContactFields) -> float:
    """Sum of field quality times field weight, before any context factor."""

    scores = field_scores(contact)
    return sum(FIELD_WEIGHTS[name] * value for name, value in scores.items())


def matches_preference(role: str, preferences: Iterable[str]) -> bool:
    if is_blank(role):
        return False
    lowered = role.lower()
    return any(preference.strip() and preference.strip().lower() in lowered for preference in preferences)


class ConfidenceScorer:
    """Computes the 0..1 confidence of a contact in a document context."""

    def __init__(
        self,
        context: Optional[DocumentContext] = None,
        *,
        role_preferences: Sequence[str] = (),
        role_preference_bonus: float = 0.1,
    ) -> None:
        self.context = context or DocumentContext()
        self.role_preferences = tuple(role_preferences)
        self.role_preference_bonus = role_preference_bonus

    @property
    def context_factor(self) -> float:
        document = DOCUMENT_TYPE_FACTORS.get(self.context.document_type, DOCUMENT_TYPE_FACTORS[UNKNOWN])
        production = PRODUCTION_TYPE_FACTORS.get(self.context.production_type, PRODUCTION_TYPE_FACTORS[UNKNOWN])
        return document * production

    def score(self, contact: ContactFields) -> float:
        scores = field_scores(contact)
        total = sum(FIELD_WEIGHTS[name] * value for name, value in scores.items())
        total *= self.context_factor
        populated = sum(1 for value in scores.values() if value > 0)
        if populated >= 3:
            total += MULTI_FIELD_BONUS
        if self.role_preferences and matches_preference(contact.role, self.role_preferences):
            total += self.role_preference_bonus
        if total < LOW_SCORE_CUTOFF:
            total /= 2
        return round(min(1.0, max(0.0, total)), 4)

    def score_candidate(self, candidate) -> ScoredContact:
        value = self.score(candidate)
        return ScoredContact(candidate=candidate, confidence=value, confidence_level=confidence_level(value))


__all__ = [
    "ConfidenceScorer",
    "DOCUMENT_TYPE_FACTORS",
    "FIELD_WEIGHTS",
    "PRODUCTION_TYPE_FACTORS",
    "confidence_level",
    "field_scores",
    "matches_preference",
    "score_company",
    "score_email",
    "score_name",
    "score_phone",
    "score_role",
    "weighted_field_score",
]
