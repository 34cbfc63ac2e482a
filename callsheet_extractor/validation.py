"""Per-field format rules and the minimum quality gate."""
from __future__ import annotations

import logging
import re
from typing import Iterable, List, Sequence

from .models import ScoredContact, ValidatedContact, ValidationResult, is_blank
from .scoring import confidence_level

LOGGER = logging.getLogger(__name__)

VALIDATION_WEIGHTS = {"email": 0.3, "phone": 0.2, "name": 0.3, "role": 0.1, "company": 0.1}

EMAIL_FORMAT_RE = re.compile(r"^[a-z0-9._%+-]+@[a-z0-9-]+(?:\.[a-z0-9-]+)*\.[a-z]{2,}$", re.IGNORECASE)
NAME_FORMAT_RE = re.compile(r"^[^\W\d_]+(?:[\s'’.\-]+[^\W\d_]+)*\.?$")
PHONE_FORMAT_RE = re.compile(r"^(?:\(\d{3}\) \d{3}-\d{4}|\+\d{1,3}(?: \d{1,5})+)$")
ROLE_FORMAT_RE = re.compile(r"^\w[\w &'’./()-]{0,59}$")
COMPANY_FORMAT_RE = re.compile(r"^[\w&'’.,() -]{2,100}$")


class ContactValidator:
    """Checks field formats and rejects contacts below ``min_quality_score``."""

    def __init__(
        self,
        *,
        required_fields: Sequence[str] = (),
        min_quality_score: float = 0.3,
        min_name_length: int = 2,
    ) -> None:
        self.required_fields = tuple(required_fields)
        self.min_quality_score = min_quality_score
        self.min_name_length = min_name_length

    def validate(self, scored: ScoredContact) -> ValidatedContact:
        candidate = scored.candidate
        reasons: List[str] = []
        warnings: List[str] = []
        passed = {}

        email = candidate.email
        if not is_blank(email):
            passed["email"] = bool(EMAIL_FORMAT_RE.match(email))
            if not passed["email"]:
                reasons.append(f"Invalid email format: {email}")

        name = candidate.name
        if not is_blank(name):
            passed["name"] = bool(NAME_FORMAT_RE.match(name)) and len(name.strip()) >= self.min_name_length
            if not NAME_FORMAT_RE.match(name):
                reasons.append(f"Invalid name format: {name}")
            elif len(name.strip()) < self.min_name_length:
                reasons.append(f"Name too short: {name}")

        for field_name, pattern in (("phone", PHONE_FORMAT_RE), ("role", ROLE_FORMAT_RE), ("company", COMPANY_FORMAT_RE)):
            value = getattr(candidate, field_name)
            if is_blank(value):
                continue
            passed[field_name] = bool(pattern.match(value))
            if not passed[field_name]:
                warnings.append(f"Unusual {field_name} format: {value}")

        for field_name in self.required_fields:
            if is_blank(getattr(candidate, field_name, "")):
                reasons.append(f"Missing required field: {field_name}")

        if not candidate.has_identity():
            reasons.append("Missing name, email and phone")

        quality = sum(VALIDATION_WEIGHTS[name] for name, ok in passed.items() if ok)
        if quality < self.min_quality_score:
            reasons.append("Quality score too low")

        result = ValidationResult(
            is_valid=not reasons,
            reasons=reasons,
            warnings=warnings,
            quality_score=round(quality, 4),
            quality_level=confidence_level(quality),
        )
        if not result.is_valid:
            LOGGER.debug("Rejected candidate %r: %s", candidate.name or candidate.email or candidate.phone, "; ".join(reasons))
        return ValidatedContact(scored=scored, validation=result)

    def validate_all(self, contacts: Iterable[ScoredContact]) -> List[ValidatedContact]:
        return [self.validate(contact) for contact in contacts]


__all__ = ["ContactValidator", "VALIDATION_WEIGHTS"]
