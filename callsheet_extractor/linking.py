"""Second pass that joins facts split across nearby lines and tags relationships.

Phase one indexes every email, phone and bare role line by line number.
Phase two walks the merged contacts and, for each missing field, looks up
unclaimed facts within the proximity window of the contact's own lines.
Input contacts are never modified; linked copies are returned.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .fields import extract_name, extract_role, find_emails, find_phones, phone_digits
from .merge import ContactMerger
from .models import Contact, RawLine, is_blank
from .scoring import matches_preference
from .structure import is_section_header, is_skip_line
from .vocabulary import NUMBERED_ROLE_RE, PERSONAL_DOMAINS, ROLE_RE

LOGGER = logging.getLogger(__name__)


@dataclass
class LineFacts:
    index: int
    emails: List[str] = field(default_factory=list)
    phones: List[str] = field(default_factory=list)
    role: Optional[str] = None
    has_name: bool = False
    boundary: bool = False


def build_fact_table(lines: Sequence[RawLine]) -> Dict[int, LineFacts]:
    """Index the contact facts found on each line."""

    table: Dict[int, LineFacts] = {}
    for line in lines:
        text = line.stripped
        facts = LineFacts(index=line.index)
        if not text or is_section_header(text):
            facts.boundary = True
        elif not is_skip_line(text):
            facts.emails = [value for _, _, value in find_emails(text)]
            facts.phones = [value for _, _, value in find_phones(text)]
            facts.has_name = extract_name(text) is not None
            if ROLE_RE.fullmatch(text):
                facts.role = extract_role(text, label=text)
        table[line.index] = facts
    return table


class ContactLinker:
    """Attach nearby unclaimed facts to contacts, re-merge, then add relationship hints."""

    def __init__(
        self,
        merger: ContactMerger,
        *,
        window: int = 2,
        role_preferences: Sequence[str] = (),
    ) -> None:
        self.merger = merger
        self.window = window
        self.role_preferences = tuple(role_preferences)

    def link(self, contacts: Sequence[Contact], lines: Sequence[RawLine]) -> List[Contact]:
        table = build_fact_table(lines)
        named = [contact for contact in contacts if not is_blank(contact.name)]
        claimed_emails: Set[str] = {email.lower() for contact in named for email in contact.known_emails}
        claimed_phones: Set[str] = {phone_digits(phone) for contact in named for phone in contact.known_phones}

        linked: List[Contact] = []
        attached = 0
        for contact in contacts:
            updated, count = self._attach(contact, table, claimed_emails, claimed_phones)
            attached += count
            linked.append(updated)
        if attached:
            LOGGER.debug("Linked %d facts from neighbouring lines", attached)
            linked = self.merger.merge(linked)
        return self._relationships(linked)

    # --- phase two ---

    def _attach(
        self,
        contact: Contact,
        table: Dict[int, LineFacts],
        claimed_emails: Set[str],
        claimed_phones: Set[str],
    ) -> Tuple[Contact, int]:
        if is_blank(contact.name):
            return contact, 0
        wants = [name for name in ("email", "phone", "role") if is_blank(getattr(contact, name))]
        if not wants:
            return contact, 0

        updates: Dict[str, str] = {}
        sources: Dict[str, List[int]] = {key: list(value) for key, value in contact.field_sources.items()}
        for origin in contact.field_sources.get("name", contact.raw_source_lines)[:1]:
            for index in self._nearby(origin, table):
                facts = table[index]
                if "email" in wants and "email" not in updates:
                    email = next((value for value in facts.emails if value.lower() not in claimed_emails), None)
                    if email:
                        updates["email"] = email
                        claimed_emails.add(email.lower())
                        sources.setdefault("email", []).append(index)
                if "phone" in wants and "phone" not in updates:
                    phone = next((value for value in facts.phones if phone_digits(value) not in claimed_phones), None)
                    if phone:
                        updates["phone"] = phone
                        claimed_phones.add(phone_digits(phone))
                        sources.setdefault("phone", []).append(index)
                if "role" in wants and "role" not in updates and facts.role:
                    updates["role"] = facts.role
                    sources.setdefault("role", []).append(index)
        if not updates:
            return contact, 0

        field_confidence = dict(contact.field_confidence)
        for key in updates:
            field_confidence[key] = contact.confidence
        known = {
            "known_emails": tuple(sorted(set(contact.known_emails) | {updates["email"]})) if "email" in updates else contact.known_emails,
            "known_phones": tuple(sorted(set(contact.known_phones) | {updates["phone"]})) if "phone" in updates else contact.known_phones,
        }
        strategies = sorted(set(contact.strategies) | {"linking"})
        return (
            replace(
                contact,
                **updates,
                **known,
                field_sources={key: sorted(set(value)) for key, value in sources.items()},
                field_confidence=field_confidence,
                strategies=strategies,
                metadata=dict(contact.metadata),
            ),
            len(updates),
        )

    def _nearby(self, origin: int, table: Dict[int, LineFacts]) -> List[int]:
        """Line indices within the window, nearest first, stopping at blocks owned by other names."""

        found: List[Tuple[int, int, int]] = []
        for direction in (1, -1):
            for distance in range(1, self.window + 1):
                index = origin + direction * distance
                facts = table.get(index)
                if facts is None or facts.boundary or facts.has_name:
                    break
                found.append((distance, 0 if direction > 0 else 1, index))
        return [index for _, _, index in sorted(found)]

    # --- relationship metadata ---

    def _relationships(self, contacts: Sequence[Contact]) -> List[Contact]:
        ordered = sorted(contacts, key=lambda contact: contact.raw_source_lines[:1] or [float("inf")])
        domains: Dict[str, List[Contact]] = {}
        for contact in ordered:
            for email in contact.known_emails or ((contact.email,) if contact.email else ()):
                domain = email.rsplit("@", 1)[-1].lower()
                if domain and domain not in PERSONAL_DOMAINS:
                    domains.setdefault(domain, []).append(contact)

        results: List[Contact] = []
        previous: Dict[str, Contact] = {}
        for contact in ordered:
            metadata = dict(contact.metadata)
            department = contact.department or ""
            if contact.role and NUMBERED_ROLE_RE.match(contact.role):
                leader = previous.get(department) or previous.get("*")
                if leader is not None:
                    metadata["reportsTo"] = leader.role
                    if leader.name:
                        metadata["reportsToName"] = leader.name
            elif contact.role:
                previous[department] = contact
                previous["*"] = contact

            colleagues = sorted(
                {
                    _display(other)
                    for email in contact.known_emails
                    for other in domains.get(email.rsplit("@", 1)[-1].lower(), [])
                    if other is not contact
                }
            )
            if colleagues:
                metadata["colleagues"] = colleagues
            if self.role_preferences:
                metadata["isPreferred"] = matches_preference(contact.role, self.role_preferences)
            results.append(replace(contact, metadata=metadata))
        return results


def _display(contact: Contact) -> str:
    return contact.name or contact.email or contact.phone


__all__ = ["ContactLinker", "LineFacts", "build_fact_table"]
