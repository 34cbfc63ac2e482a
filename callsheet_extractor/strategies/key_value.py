"""Strategy for multi-line ``Label: value`` contact blocks."""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..fields import (
    FieldExtractor,
    extract_email,
    extract_name,
    extract_phone,
    extract_role,
    normalize_name,
    parse_fields,
)
from ..models import CandidateContact, RawLine, StructureProfile, is_blank
from ..structure import is_section_header, is_skip_line, split_label
from ..vocabulary import FIELD_LABELS, NON_PERSON_LABELS, ROLE_RE, department_for_role
from .base import LineStrategy

LOGGER = logging.getLogger(__name__)


class _Block:
    """Accumulates the fields of the record currently being read."""

    def __init__(self, strategy: str) -> None:
        self.strategy = strategy
        self.current: Optional[CandidateContact] = None
        self.finished: List[CandidateContact] = []

    def open(self) -> CandidateContact:
        if self.current is None:
            self.current = CandidateContact(strategy=self.strategy)
        return self.current

    def has_name(self) -> bool:
        return self.current is not None and not is_blank(self.current.name)

    def flush(self) -> None:
        candidate = self.current
        self.current = None
        if candidate is None or not candidate.has_identity():
            return
        if is_blank(candidate.department):
            candidate.set_field("department", department_for_role(candidate.role), None)
        self.finished.append(candidate)


class KeyValueStrategy(LineStrategy):
    name = "key_value"
    structure_type = "key_value"

    def extract(self, lines: Sequence[RawLine], profile: StructureProfile) -> List[CandidateContact]:
        block = _Block(self.name)
        for line in lines:
            text = line.stripped
            if not text or is_section_header(text):
                block.flush()
                continue
            if is_skip_line(text):
                continue
            parts = split_label(text)
            if parts and parts[1]:
                self._labelled(block, line, parts[0], parts[1])
            else:
                self._bare(block, line)
        block.flush()
        LOGGER.debug("%s strategy produced %d candidates", self.name, len(block.finished))
        return block.finished

    def _labelled(self, block: _Block, line: RawLine, label: str, value: str) -> None:
        index = line.index
        lowered = label.lower()
        field_name = FIELD_LABELS.get(lowered)
        if field_name == "name":
            name = extract_name(value, label=label, value=value) or normalize_name(value)
            if block.has_name():
                block.flush()
            block.open().set_field("name", name, index)
        elif field_name == "email":
            self._set_email(block, extract_email(value), index)
        elif field_name == "phone":
            block.open().set_field("phone", extract_phone(value), index)
        elif field_name == "role":
            found = extract_role(value, label=value)
            block.open().set_field("role", found or value, index)
        elif field_name == "agent":
            block.open().metadata["agent"] = normalize_name(value)
        elif field_name in ("company", "department"):
            block.open().set_field(field_name, value, index)
        elif lowered in NON_PERSON_LABELS:
            return
        else:
            found = parse_fields(line.stripped)
            if found.name:
                # "Photographer: John Smith" starts a new person
                if block.has_name():
                    block.flush()
                candidate = block.open()
                incoming = FieldExtractor.to_candidate(found, index, strategy=self.name)
                for key, val in incoming.field_values().items():
                    candidate.set_field(key, val, index)
                candidate.metadata.update(incoming.metadata)
            else:
                self._set_email(block, found.email, index)
                if found.phone:
                    block.open().set_field("phone", found.phone, index)

    def _bare(self, block: _Block, line: RawLine) -> None:
        text = line.stripped
        index = line.index
        email = extract_email(text)
        phone = extract_phone(text)
        if email or phone:
            self._set_email(block, email, index)
            if phone:
                block.open().set_field("phone", phone, index)
            if not block.has_name():
                block.open().set_field("name", extract_name(text), index)
            return
        if ROLE_RE.fullmatch(text):
            block.open().set_field("role", extract_role(text, label=text), index)
            return
        name = extract_name(text)
        if name:
            if block.has_name():
                block.flush()
            block.open().set_field("name", name, index)

    @staticmethod
    def _set_email(block: _Block, email: Optional[str], index: int) -> None:
        if not email:
            return
        if block.current is not None and not is_blank(block.current.email) and block.current.email != email:
            block.flush()
        block.open().set_field("email", email, index)


__all__ = ["KeyValueStrategy"]
