"""Adaptive contact extraction for call sheets and other production documents."""

from . import models  # noqa: F401
from .classify import classify_document  # noqa: F401
from .config import ConfigurationError, ExtractionConfig  # noqa: F401
from .merge import ContactMerger, merge_contacts, merge_sharded  # noqa: F401
from .models import (  # noqa: F401
    CandidateContact,
    Contact,
    DocumentContext,
    ExtractionMetadata,
    ExtractionResult,
    RawLine,
    ScoredContact,
    Section,
    StructureProfile,
    ValidatedContact,
    ValidationResult,
)
from .orchestrator import DocumentInput, ExtractionOrchestrator, extract  # noqa: F401
from .scoring import ConfidenceScorer  # noqa: F401
from .structure import StructureDetector, detect_structure  # noqa: F401
from .validation import ContactValidator  # noqa: F401

__all__ = [
    "CandidateContact",
    "ConfidenceScorer",
    "ConfigurationError",
    "Contact",
    "ContactMerger",
    "ContactValidator",
    "DocumentContext",
    "DocumentInput",
    "ExtractionConfig",
    "ExtractionMetadata",
    "ExtractionOrchestrator",
    "ExtractionResult",
    "RawLine",
    "ScoredContact",
    "Section",
    "StructureDetector",
    "StructureProfile",
    "ValidatedContact",
    "ValidationResult",
    "classify_document",
    "detect_structure",
    "extract",
    "merge_contacts",
    "merge_sharded",
    "ingestion",
    "orchestrator",
    "strategies",
]
