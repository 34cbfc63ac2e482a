"""Deduplication of contacts that describe the same person.

Two contacts collide when they share a lower-cased email, the same phone
digits, or names whose edit-distance similarity reaches the configured
threshold. Colliding contacts are combined field by field, keeping the
highest confidence non-empty value, so the outcome does not depend on the
order in which contacts arrive.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Sequence, Tuple

from rapidfuzz.distance import Levenshtein

from .fields import phone_digits
from .models import FIELD_NAMES, Contact, is_blank
from .scoring import ConfidenceScorer, confidence_level

LOGGER = logging.getLogger(__name__)


def _normalise_key(kind: str, value: str) -> str:
    value = value.strip()
    if kind == "email":
        return value.lower()
    if kind == "phone":
        return phone_digits(value)
    return " ".join(value.lower().split())


def name_similarity(first: str, second: str) -> float:
    """``1 - levenshtein(a, b) / max(len(a), len(b))`` on normalised names."""

    a = _normalise_key("name", first)
    b = _normalise_key("name", second)
    if not a or not b:
        return 0.0
    return Levenshtein.normalized_similarity(a, b)


class _DisjointSet:
    def __init__(self, size: int) -> None:
        self.parent = list(range(size))

    def find(self, item: int) -> int:
        while self.parent[item] != item:
            self.parent[item] = self.parent[self.parent[item]]
            item = self.parent[item]
        return item

    def union(self, first: int, second: int) -> None:
        root_a, root_b = self.find(first), self.find(second)
        if root_a != root_b:
            self.parent[max(root_a, root_b)] = min(root_a, root_b)


def _member_order(contact: Contact) -> Tuple:
    return (
        -contact.confidence,
        contact.name,
        contact.email,
        contact.phone,
        contact.role,
        contact.company,
        tuple(contact.raw_source_lines),
    )


class ContactMerger:
    """Groups colliding contacts and combines each group into one :class:`Contact`."""

    def __init__(
        self,
        scorer: Optional[ConfidenceScorer] = None,
        *,
        name_similarity_threshold: float = 0.95,
    ) -> None:
        self.scorer = scorer or ConfidenceScorer()
        self.name_similarity_threshold = name_similarity_threshold

    def merge(self, contacts: Iterable[Contact]) -> List[Contact]:
        items = list(contacts)
        if not items:
            return []
        groups = self._group(items)
        merged = [self._combine([items[index] for index in members]) for members in groups]
        merged.sort(key=lambda contact: (contact.raw_source_lines[:1] or [float("inf")], contact.name, contact.email, contact.phone))
        LOGGER.debug("Merged %d contacts into %d", len(items), len(merged))
        return merged

    # --- grouping ---

    def _group(self, items: Sequence[Contact]) -> List[List[int]]:
        sets = _DisjointSet(len(items))
        owners: Dict[Tuple[str, str], int] = {}
        for position, contact in enumerate(items):
            for kind, values in (("email", contact.known_emails or (contact.email,)), ("phone", contact.known_phones or (contact.phone,))):
                for value in values:
                    if is_blank(value):
                        continue
                    key = (kind, _normalise_key(kind, value))
                    if not key[1]:
                        continue
                    if key in owners:
                        sets.union(owners[key], position)
                    else:
                        owners[key] = position

        names = [self._names(contact) for contact in items]
        for first in range(len(items)):
            for second in range(first + 1, len(items)):
                if sets.find(first) == sets.find(second):
                    continue
                if self._names_match(names[first], names[second]):
                    sets.union(first, second)

        groups: Dict[int, List[int]] = {}
        for position in range(len(items)):
            groups.setdefault(sets.find(position), []).append(position)
        return list(groups.values())

    @staticmethod
    def _names(contact: Contact) -> List[str]:
        values = contact.known_names or (contact.name,)
        return [_normalise_key("name", value) for value in values if not is_blank(value)]

    def _names_match(self, first: Sequence[str], second: Sequence[str]) -> bool:
        threshold = self.name_similarity_threshold
        for a in first:
            for b in second:
                longest = max(len(a), len(b))
                if longest and abs(len(a) - len(b)) / longest > 1 - threshold:
                    continue
                if Levenshtein.normalized_similarity(a, b) >= threshold:
                    return True
        return False

    # --- combining ---

    def _combine(self, members: Sequence[Contact]) -> Contact:
        ordered = sorted(members, key=_member_order)
        if len(ordered) == 1:
            return self._rescored(ordered[0])

        values: Dict[str, str] = {}
        field_confidence: Dict[str, float] = {}
        for field_name in FIELD_NAMES:
            options = [
                (member.field_confidence.get(field_name, member.confidence), len(getattr(member, field_name)), getattr(member, field_name))
                for member in ordered
                if not is_blank(getattr(member, field_name))
            ]
            if options:
                best = max(options)
                values[field_name] = best[2]
                field_confidence[field_name] = best[0]
            else:
                values[field_name] = ""

        field_sources: Dict[str, List[int]] = {}
        for member in ordered:
            for field_name, indices in member.field_sources.items():
                field_sources.setdefault(field_name, [])
                field_sources[field_name] = sorted(set(field_sources[field_name]) | set(indices))

        metadata: Dict[str, object] = {}
        for member in reversed(ordered):
            metadata.update(member.metadata)

        combined = Contact(
            **values,
            field_sources=field_sources,
            field_confidence=field_confidence,
            strategies=sorted({name for member in ordered for name in member.strategies}),
            known_emails=_union(member.known_emails or (member.email,) for member in ordered),
            known_phones=_union(member.known_phones or (member.phone,) for member in ordered),
            known_names=_union(member.known_names or (member.name,) for member in ordered),
            warnings=sorted({warning for member in ordered for warning in member.warnings}),
            metadata=metadata,
        )
        return self._rescored(combined)

    def _rescored(self, contact: Contact) -> Contact:
        score = self.scorer.score(contact)
        return replace(
            contact,
            confidence=score,
            confidence_level=confidence_level(score),
            field_sources={key: list(value) for key, value in contact.field_sources.items()},
            field_confidence=dict(contact.field_confidence),
            strategies=list(contact.strategies),
            warnings=list(contact.warnings),
            metadata=dict(contact.metadata),
        )


def _union(groups: Iterable[Iterable[str]]) -> Tuple[str, ...]:
    return tuple(sorted({value.strip() for group in groups for value in group if not is_blank(value)}))


def merge_contacts(
    contacts: Iterable[Contact],
    *,
    scorer: Optional[ConfidenceScorer] = None,
    name_similarity_threshold: float = 0.95,
) -> List[Contact]:
    """Merge ``contacts`` into one record per real-world person."""

    return ContactMerger(scorer, name_similarity_threshold=name_similarity_threshold).merge(contacts)


def merge_sharded(
    contacts: Iterable[Contact],
    shard_key: Callable[[Contact], Hashable],
    *,
    merger: Optional[ContactMerger] = None,
    max_workers: Optional[int] = None,
) -> List[Contact]:
    """Merge each shard in parallel, then reduce the shard results in a final pass."""

    merger = merger or ContactMerger()
    shards: Dict[Hashable, List[Contact]] = {}
    for contact in contacts:
        shards.setdefault(shard_key(contact), []).append(contact)
    if len(shards) <= 1:
        return merger.merge(next(iter(shards.values()), []))

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        partials = list(executor.map(merger.merge, shards.values()))
    return merger.merge(contact for partial in partials for contact in partial)


__all__ = ["ContactMerger", "merge_contacts", "merge_sharded", "name_similarity"]
