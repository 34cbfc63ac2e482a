"""Stateless field extractors plus the proximity search used by the line based strategies."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .models import CandidateContact, RawLine, is_blank
from .structure import SLASH_SPLIT_RE, is_known_label, is_section_header, is_skip_line, split_label
from .vocabulary import (
    COMPANY_SUFFIXES,
    FIELD_LABELS,
    NAME_PARTICLES,
    NON_NAME_WORDS,
    NON_PERSON_LABELS,
    PERSONAL_DOMAINS,
    ROLE_ACRONYMS,
    ROLE_RE,
    ROLE_TITLES,
    TALENT_ROLES,
    department_for_role,
)

LOGGER = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"(?<![\w.+-])[A-Za-z0-9._%+-]+@[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}\b")
US_PHONE_RE = re.compile(r"(?<![\w+])(?:\+?1[\s.\-]?)?\(?(\d{3})\)?[\s.\-]?(\d{3})[\s.\-]?(\d{4})(?!\d)")
INTL_PHONE_RE = re.compile(r"(?<![\w+])\+\d{1,3}(?:[\s.\-]?\(?\d{1,5}\)?){1,6}(?!\d)")

NAME_TOKEN_RE = re.compile(r"^[^\W\d_]+(?:['’.\-][^\W\d_]+)*\.?$")
_CHUNK_RE = re.compile(r"[^\x00\x01/|,;:()<>\[\]\"\u2022\u2013\u2014\t@]+")
_SOFT_DELIMITER_RE = re.compile(r" - | {2,}")
_WORD_RE = re.compile(r"\S+")

MAX_NAME_TOKENS = 4
# a run filling a whole value segment may be longer ("Maria De La Cruz Lopez")
MAX_SEGMENT_NAME_TOKENS = 6


# --- Email / phone ---

def find_emails(text: str) -> List[Tuple[int, int, str]]:
    return [(match.start(), match.end(), match.group(0).lower()) for match in EMAIL_RE.finditer(text)]


def extract_email(text: str) -> Optional[str]:
    """Return the first email address in ``text`` (lower-cased)."""

    match = EMAIL_RE.search(text)
    return match.group(0).lower() if match else None


def _format_us(area: str, exchange: str, line: str) -> str:
    return f"({area}) {exchange}-{line}"


def find_phones(text: str) -> List[Tuple[int, int, str]]:
    """Return non-overlapping phone numbers as ``(start, end, display)`` tuples."""

    found: List[Tuple[int, int, str]] = []
    for match in US_PHONE_RE.finditer(text):
        found.append((match.start(), match.end(), _format_us(*match.groups())))
    for match in INTL_PHONE_RE.finditer(text):
        digits = re.sub(r"\D", "", match.group(0))
        if not 8 <= len(digits) <= 15:
            continue
        if len(digits) == 11 and digits.startswith("1"):
            continue
        groups = re.findall(r"\d+", match.group(0))
        found.append((match.start(), match.end(), "+" + " ".join(groups)))

    found.sort(key=lambda item: (item[0], -(item[1] - item[0])))
    accepted: List[Tuple[int, int, str]] = []
    for start, end, value in found:
        if accepted and start < accepted[-1][1]:
            continue
        accepted.append((start, end, value))
    return accepted


def extract_phone(text: str) -> Optional[str]:
    phones = find_phones(text)
    return phones[0][2] if phones else None


def normalize_phone(value: str) -> Optional[str]:
    """Return the canonical display form of ``value`` or ``None`` when it is not a phone number."""

    return extract_phone(value)


def phone_digits(value: str) -> str:
    """Digits used as the phone merge key; US numbers drop the leading country code."""

    digits = re.sub(r"\D", "", value or "")
    if len(digits) == 11 and digits.startswith("1"):
        return digits[1:]
    return digits


# --- Names ---

def is_name_token(token: str) -> bool:
    if not NAME_TOKEN_RE.match(token) or not token[0].isupper():
        return False
    return token.rstrip(".").lower() not in NON_NAME_WORDS


def normalize_name(name: str) -> str:
    """Title-case ALL CAPS names, keeping hyphens and apostrophes in place."""

    letters = [char for char in name if char.isalpha()]
    if len(letters) > 1 and all(char.isupper() for char in letters):
        return re.sub(r"[^\W\d_]+", lambda match: match.group(0).capitalize(), name)
    return name


@dataclass
class _Run:
    tokens: List[str]
    start: int
    end: int
    whole_chunk: bool

    @property
    def text(self) -> str:
        return " ".join(self.tokens)


def _mask(text: str, spans: List[Tuple[int, int, str]]) -> str:
    chars = list(text)
    for start, end, _ in spans:
        for position in range(start, end):
            chars[position] = "\x00"
    masked = "".join(chars)
    return _SOFT_DELIMITER_RE.sub(lambda match: "\x01" * len(match.group(0)), masked)


def name_runs(text: str) -> List[_Run]:
    """Return runs of consecutive capitalised name tokens, split at delimiters and contact tokens."""

    masked = _mask(text, find_emails(text) + find_phones(text))
    runs: List[_Run] = []
    for chunk in _CHUNK_RE.finditer(masked):
        words = [(chunk.start() + word.start(), chunk.start() + word.end(), word.group(0)) for word in _WORD_RE.finditer(chunk.group(0))]
        current: List[Tuple[int, int, str]] = []

        def close() -> None:
            run = list(current)
            while run and run[-1][2] in NAME_PARTICLES:
                run.pop()
            if not run:
                return
            whole_chunk = len(run) == len(words)
            capitalised = [index for index, word in enumerate(run) if word[2] not in NAME_PARTICLES]
            limit = MAX_SEGMENT_NAME_TOKENS if whole_chunk else MAX_NAME_TOKENS
            if len(capitalised) > limit:
                run = run[: capitalised[MAX_NAME_TOKENS - 1] + 1]
                whole_chunk = False
            runs.append(
                _Run(
                    tokens=[word for _, _, word in run],
                    start=run[0][0],
                    end=run[-1][1],
                    whole_chunk=whole_chunk,
                )
            )

        for word in words:
            if is_name_token(word[2]) or (current and word[2] in NAME_PARTICLES):
                current.append(word)
            else:
                close()
                current = []
        close()
    return runs


def _contact_start(text: str) -> Optional[int]:
    positions = [start for start, _, _ in find_emails(text) + find_phones(text)]
    return min(positions) if positions else None


def extract_name(text: str, *, label: Optional[str] = None, value: Optional[str] = None) -> Optional[str]:
    """Extract a person name from one line of text.

    ``Role: Name`` prefixes win, then the capitalised run right before the
    first email or phone token, then the first multi-word capitalised run.
    """

    if label is not None and value is not None:
        field_name = FIELD_LABELS.get(label.lower())
        if field_name in (None, "name") and label.lower() not in NON_PERSON_LABELS:
            runs = name_runs(value)
            if runs and (field_name == "name" or runs[0].start < _first_segment_end(value)):
                return _finish_name(runs[0].text)
        if field_name is not None and field_name != "name":
            return None

    runs = name_runs(text)
    if not runs:
        return None
    contact_start = _contact_start(text)
    if contact_start is not None:
        before = [run for run in runs if run.end <= contact_start]
        if before:
            run = before[-1]
            if len(run.tokens) >= 2 or run.whole_chunk:
                return _finish_name(run.text)
    for run in runs:
        if len(run.tokens) >= 2:
            return _finish_name(run.text)
    return None


def _first_segment_end(value: str) -> int:
    match = SLASH_SPLIT_RE.search(value)
    return match.start() if match else len(value) + 1


def _finish_name(name: str) -> Optional[str]:
    name = normalize_name(name.strip())
    if ROLE_RE.fullmatch(name):
        return None
    return name or None


# --- Roles ---

def _canonical_role(match: "re.Match[str]") -> str:
    title = ROLE_TITLES[match.group("role").lower()]
    rank = match.group("rank")
    if not rank:
        return title
    rank = rank.lower() if rank[0].isdigit() else rank.capitalize()
    if title.lower().startswith(rank.lower() + " "):
        return title
    return f"{rank} {title}"


def find_role(text: str, *, label_context: bool = False) -> Optional[Tuple[str, int, int]]:
    """Return ``(canonical title, start, end)`` for the first vocabulary role in ``text``."""

    for match in ROLE_RE.finditer(text):
        phrase = match.group("role")
        if phrase.lower() in ROLE_ACRONYMS and not label_context and not phrase.isupper():
            continue
        return _canonical_role(match), match.start(), match.end()
    return None


def extract_role(text: str, *, label: Optional[str] = None) -> Optional[str]:
    """Vocabulary role from the label, else from the line, else the raw label text."""

    if label:
        found = find_role(label, label_context=True)
        if found:
            return found[0]
    scan = text
    if label:
        parts = split_label(text)
        scan = parts[1] if parts else text
    found = find_role(_strip_contacts(scan))
    if found:
        return found[0]
    if label and label.lower() not in FIELD_LABELS and label.lower() not in NON_PERSON_LABELS and _looks_like_title(label):
        return label.strip()
    return None


def _looks_like_title(label: str) -> bool:
    words = label.split()
    if not 1 <= len(words) <= 4:
        return False
    return all(word[0].isupper() or word[0].isdigit() or word.lower() in {"&", "and", "of"} for word in words)


def _strip_contacts(text: str) -> str:
    return _mask(text, find_emails(text) + find_phones(text)).replace("\x00", " ").replace("\x01", " ")


# --- Companies ---

def company_from_email(email: Optional[str]) -> Optional[str]:
    if not email or "@" not in email:
        return None
    domain = email.rsplit("@", 1)[1].lower()
    if domain in PERSONAL_DOMAINS:
        return None
    parts = domain.split(".")
    if len(parts) >= 3 and parts[-2] in {"co", "com", "org", "net", "ac"} and len(parts[-1]) == 2:
        label = parts[-3]
    else:
        label = parts[-2] if len(parts) >= 2 else parts[0]
    label = label.replace("-", " ").replace("_", " ").strip()
    return label.title() if label else None


def split_talent_agency(segment: str) -> Tuple[str, Optional[str]]:
    """Split ``"Ford Models Sarah Jones"`` into ``("Ford Models", "Sarah Jones")``."""

    tokens = segment.split()
    if len(tokens) >= 3:
        agent = tokens[-2:]
        if all(is_name_token(token) for token in agent):
            return " ".join(tokens[:-2]), normalize_name(" ".join(agent))
    return segment.strip(), None


_SUFFIX_SPAN_RE = re.compile(
    r"\b((?:[A-Z][\w&'’.-]*\s+){1,3}(?i:%s)\.?)(?![\w])"
    % "|".join(re.escape(suffix) for suffix in sorted({s.rstrip(".") for s in COMPANY_SUFFIXES}, key=len, reverse=True))
)
_CAPS_SPAN_RE = re.compile(r"\b[A-Z][A-Z&'’.-]+(?:\s+[A-Z][A-Z&'’.-]+)+\b")


def company_from_span(text: str, *, claimed: Tuple[str, ...] = ()) -> Optional[str]:
    """All-caps or company-suffixed span not already used as the name or role."""

    scan = _strip_contacts(text)
    parts = split_label(scan)
    if parts and is_known_label(parts[0]):
        scan = parts[1]
    lowered_claims = [claim.lower() for claim in claimed if claim]

    def unclaimed(span: str) -> bool:
        lowered = span.lower()
        return not any(lowered in claim or claim in lowered for claim in lowered_claims)

    for match in _SUFFIX_SPAN_RE.finditer(scan):
        span = match.group(1).strip()
        if len(span.split()) >= 2 and span[0].isupper() and unclaimed(span) and not ROLE_RE.fullmatch(span):
            return span
    for match in _CAPS_SPAN_RE.finditer(scan):
        span = match.group(0).strip()
        if unclaimed(span) and not ROLE_RE.fullmatch(span) and not is_section_header(span):
            return span
    return None


def extract_company(
    text: str,
    *,
    name: Optional[str] = None,
    role: Optional[str] = None,
    email: Optional[str] = None,
) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(company, agent)`` for one line."""

    segments = [segment.strip() for segment in SLASH_SPLIT_RE.split(text) if segment.strip()]
    if len(segments) >= 3:
        for segment in segments[1:-1]:
            if find_emails(segment) or find_phones(segment) or not re.search(r"[^\W\d_]", segment):
                continue
            if name and name.lower() in normalize_name(segment).lower():
                continue
            if ROLE_RE.fullmatch(segment):
                continue
            if role and role.lower() in TALENT_ROLES:
                return split_talent_agency(segment)
            return segment, None
    from_email = company_from_email(email)
    if from_email:
        return from_email, None
    span = company_from_span(text, claimed=tuple(value for value in (name, role) if value))
    return span, None


# --- Line extraction ---

@dataclass
class LineFields:
    """Field values found on a single line."""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    company: Optional[str] = None
    agent: Optional[str] = None
    label: Optional[str] = None

    def has_identity(self) -> bool:
        return bool(self.name or self.email or self.phone)


def parse_fields(text: str) -> LineFields:
    """Run every extractor over ``text``."""

    parts = split_label(text)
    label, value = (parts if parts else (None, None))
    if label is not None and FIELD_LABELS.get(label.lower()) in {"email", "phone"}:
        label = None
        value = None
    result = LineFields(label=label)
    result.email = extract_email(text)
    result.phone = extract_phone(text)
    result.name = extract_name(text, label=label, value=value)
    result.role = extract_role(text, label=label)
    if result.role and result.name and result.role.lower() == result.name.lower():
        result.role = None
    result.company, result.agent = extract_company(text, name=result.name, role=result.role, email=result.email)
    return result


class FieldExtractor:
    """Line-level extractor with outward proximity search for missing fields."""

    def __init__(self, window: int = 2) -> None:
        self.window = window

    def extract(self, line: RawLine, *, strategy: str, proximity: bool = True) -> Optional[CandidateContact]:
        text = line.stripped
        if not text or is_skip_line(text) or is_section_header(text):
            return None
        parts = split_label(text)
        if parts and parts[0].lower() in NON_PERSON_LABELS:
            return None
        found = parse_fields(text)
        if not found.has_identity():
            return None
        candidate = self.to_candidate(found, line.index, strategy=strategy)
        if proximity and not is_blank(candidate.name):
            self.fill_from_neighbours(candidate, line)
        return candidate

    @staticmethod
    def to_candidate(found: LineFields, index: int, *, strategy: str) -> CandidateContact:
        candidate = CandidateContact(strategy=strategy)
        candidate.set_field("name", found.name, index)
        candidate.set_field("email", found.email, index)
        candidate.set_field("phone", found.phone, index)
        candidate.set_field("role", found.role, index)
        candidate.set_field("company", found.company, index)
        candidate.set_field("department", department_for_role(found.role), index)
        if found.agent:
            candidate.metadata["agent"] = found.agent
        return candidate

    def fill_from_neighbours(self, candidate: CandidateContact, line: RawLine) -> None:
        """Look up to ``window`` lines away for a missing email, phone or bare role line."""

        for direction in (1, -1):
            for distance in range(1, self.window + 1):
                neighbour = line.neighbour(direction * distance)
                if neighbour is None or neighbour.is_blank() or is_section_header(neighbour.text):
                    break
                text = neighbour.stripped
                if is_skip_line(text):
                    continue
                if extract_name(text) is not None:
                    break
                if is_blank(candidate.email):
                    candidate.set_field("email", extract_email(text), neighbour.index)
                if is_blank(candidate.phone):
                    candidate.set_field("phone", extract_phone(text), neighbour.index)
                if is_blank(candidate.role) and ROLE_RE.fullmatch(text):
                    role = extract_role(text)
                    if candidate.set_field("role", role, neighbour.index) and is_blank(candidate.department):
                        candidate.set_field("department", department_for_role(role), neighbour.index)


__all__ = [
    "EMAIL_RE",
    "FieldExtractor",
    "LineFields",
    "company_from_email",
    "extract_company",
    "extract_email",
    "extract_name",
    "extract_phone",
    "extract_role",
    "find_emails",
    "find_phones",
    "find_role",
    "is_name_token",
    "name_runs",
    "normalize_name",
    "normalize_phone",
    "parse_fields",
    "phone_digits",
    "split_talent_agency",
]
