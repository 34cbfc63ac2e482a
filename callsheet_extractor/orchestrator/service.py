"""Extraction orchestrator that owns the pipeline order for each document."""
from __future__ import annotations

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..classify import classify_document
from ..config import ExtractionConfig
from ..factory import build_router
from ..linking import ContactLinker
from ..merge import ContactMerger
from ..models import (
    CONFIDENCE_LEVELS,
    UNKNOWN,
    Contact,
    DocumentContext,
    ExtractionMetadata,
    ExtractionResult,
    RawLine,
    ValidatedContact,
    average_confidence,
    contact_from_validated,
    split_lines,
)
from ..scoring import ConfidenceScorer
from ..strategies import StrategyRouter
from ..structure import StructureDetector
from ..text import normalize_text, unreadable_reason
from ..validation import ContactValidator

LOGGER = logging.getLogger(__name__)

_OPTION_KEYS = {
    "confidenceThreshold": "confidence_threshold",
    "confidence_threshold": "confidence_threshold",
    "useMultiPass": "use_multi_pass",
    "use_multi_pass": "use_multi_pass",
    "rolePreferences": "role_preferences",
    "role_preferences": "role_preferences",
}


class Stage(str, Enum):
    DETECTING = "detecting"
    EXTRACTING = "extracting"
    SCORING = "scoring"
    VALIDATING = "validating"
    MERGING = "merging"
    LINKING = "linking"
    DONE = "done"


@dataclass
class DocumentInput:
    """One document for :meth:`ExtractionOrchestrator.extract_many`."""

    text: str
    metadata: Optional[Mapping[str, Any]] = None
    source: Optional[str] = None


class _StageFailed(Exception):
    def __init__(self, stage: Stage, error: Exception) -> None:
        super().__init__(str(error))
        self.stage = stage
        self.error = error


class ExtractionOrchestrator:
    """Runs detection, extraction, scoring, validation, merging and optional linking."""

    def __init__(
        self,
        config: Optional[ExtractionConfig] = None,
        *,
        router: Optional[StrategyRouter] = None,
        file_config: Optional[Mapping[str, Any]] = None,
        auto_classify: bool = False,
        concurrent: bool = False,
        max_workers: Optional[int] = None,
        raise_on_error: bool = False,
    ) -> None:
        self._config = config or ExtractionConfig()
        self._file_config = file_config
        self._router = router or build_router(self._config, file_config)
        self._auto_classify = auto_classify
        self._concurrent = concurrent
        self._max_workers = max_workers
        self._raise_on_error = raise_on_error

    @property
    def config(self) -> ExtractionConfig:
        return self._config

    # --- public API ---

    def extract(
        self,
        text: str,
        metadata: Optional[Mapping[str, Any]] = None,
        *,
        source: Optional[str] = None,
        confidence_threshold: Optional[float] = None,
        use_multi_pass: Optional[bool] = None,
        role_preferences: Optional[Sequence[str]] = None,
    ) -> ExtractionResult:
        """Extract contacts from one document.

        ``metadata`` may carry ``documentType``/``productionType`` and the
        per-call options ``confidenceThreshold``, ``useMultiPass`` and
        ``rolePreferences``; keyword arguments take precedence over it.
        """

        if not isinstance(text, str):
            raise TypeError(f"text must be a str, not {type(text).__name__}")

        options = {_OPTION_KEYS[key]: value for key, value in (metadata or {}).items() if key in _OPTION_KEYS}
        options.update(
            {
                key: value
                for key, value in (
                    ("confidence_threshold", confidence_threshold),
                    ("use_multi_pass", use_multi_pass),
                    ("role_preferences", role_preferences),
                )
                if value is not None
            }
        )
        config = self._config.merged(**options)
        context = self._context(text, metadata, source)
        return _PipelineRun(config, context, self._router, source).run(text)

    def extract_many(self, documents: Iterable[Union[DocumentInput, str]]) -> List[ExtractionResult]:
        """Extract every document, sequentially or on a thread pool."""

        items = [document if isinstance(document, DocumentInput) else DocumentInput(text=document) for document in documents]
        if not self._concurrent or len(items) <= 1:
            return [self._execute(item) for item in items]

        results: Dict[int, ExtractionResult] = {}
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            futures = {executor.submit(self._execute, item): index for index, item in enumerate(items)}
            for future in as_completed(futures):
                results[futures[future]] = future.result()
        return [results[index] for index in range(len(items))]

    # --- helpers ---

    def _execute(self, document: DocumentInput) -> ExtractionResult:
        try:
            LOGGER.debug("Extracting contacts from %s", document.source or "<text>")
            return self.extract(document.text, document.metadata, source=document.source)
        except Exception as exc:
            LOGGER.exception("Extraction failed for %s", document.source or "<text>")
            if self._raise_on_error:
                raise
            metadata = ExtractionMetadata(status="failed", error=str(exc))
            return ExtractionResult(contacts=[], metadata=metadata, source=document.source)

    def _context(self, text: str, metadata: Optional[Mapping[str, Any]], source: Optional[str]) -> DocumentContext:
        context = DocumentContext.from_mapping(metadata)
        if not self._auto_classify:
            return context
        guessed = classify_document(text, source)
        return DocumentContext(
            document_type=guessed.document_type if context.document_type == UNKNOWN else context.document_type,
            production_type=guessed.production_type if context.production_type == UNKNOWN else context.production_type,
        )


class _PipelineRun:
    """State of one document moving through the pipeline stages."""

    def __init__(self, config: ExtractionConfig, context: DocumentContext, router: StrategyRouter, source: Optional[str]) -> None:
        self.config = config
        self.context = context
        self.router = router
        self.source = source
        self.stage = Stage.DETECTING
        self.scorer = ConfidenceScorer(
            context,
            role_preferences=config.role_preferences,
            role_preference_bonus=config.role_preference_bonus,
        )
        self.metadata = ExtractionMetadata(
            document_type=context.document_type,
            production_type=context.production_type,
            extraction_mode="multi-pass" if config.use_multi_pass else "multi-strategy",
        )
        self.best: List[Contact] = []

    def run(self, text: str) -> ExtractionResult:
        reason = unreadable_reason(
            text,
            marker_threshold=self.config.garbage_marker_threshold,
            max_non_printable=self.config.non_printable_ratio,
        )
        if reason:
            LOGGER.warning("Skipping unreadable document %s: %s", self.source or "<text>", reason)
            self.metadata.status = "unreadable"
            self.metadata.reason = reason
            return self._finish([])

        lines = split_lines(normalize_text(text))
        try:
            self._run_stages(lines)
        except _StageFailed as failure:
            LOGGER.warning(
                "Stage %s failed; returning %d contacts from completed stages", failure.stage.value, len(self.best)
            )
            self.metadata.status = "degraded"
            self.metadata.failed_stage = failure.stage.value
            self.metadata.error = str(failure.error)
        return self._finish(self.best)

    def _run_stages(self, lines: List[RawLine]) -> None:
        config = self.config
        profile = self._stage(Stage.DETECTING, lambda: StructureDetector(config.mixed_margin).detect(lines))
        self.metadata.structure_type = profile.type
        self.metadata.sections_found = len(profile.sections)
        self.metadata.structure_confidence = profile.confidence

        routing = self._stage(Stage.EXTRACTING, lambda: self.router.extract(lines, profile))
        self.metadata.total_raw_candidates = len(routing.candidates)
        self.metadata.strategies_used = list(dict.fromkeys(routing.strategies_used))
        LOGGER.info("Found %d raw candidates using %s", len(routing.candidates), ", ".join(self.metadata.strategies_used) or "no strategy")

        scored = self._stage(Stage.SCORING, lambda: [self.scorer.score_candidate(candidate) for candidate in routing.candidates])

        validator = ContactValidator(
            required_fields=config.required_fields,
            min_quality_score=config.min_quality_score,
            min_name_length=config.min_name_length,
        )
        validated = self._stage(Stage.VALIDATING, lambda: validator.validate_all(scored))
        accepted = self._record_rejections(validated)

        merger = ContactMerger(self.scorer, name_similarity_threshold=config.name_similarity_threshold)
        merged = self._stage(Stage.MERGING, lambda: merger.merge(contact_from_validated(item) for item in accepted))
        self.metadata.duplicates_removed = len(accepted) - len(merged)
        self.best = merged
        LOGGER.info("Merged %d accepted candidates into %d contacts", len(accepted), len(merged))

        if config.use_multi_pass:
            linker = ContactLinker(merger, window=config.proximity_window, role_preferences=config.role_preferences)
            linked = self._stage(Stage.LINKING, lambda: linker.link(merged, lines))
            self.metadata.duplicates_removed = len(accepted) - len(linked)
            self.best = linked
        self.stage = Stage.DONE

    def _stage(self, stage: Stage, action: Callable[[], Any]) -> Any:
        self.stage = stage
        LOGGER.debug("Pipeline stage: %s", stage.value)
        try:
            return action()
        except Exception as exc:
            LOGGER.exception("Pipeline stage %s failed", stage.value)
            raise _StageFailed(stage, exc) from exc

    def _record_rejections(self, validated: Sequence[ValidatedContact]) -> List[ValidatedContact]:
        accepted = [item for item in validated if item.validation.is_valid]
        rejected = [item for item in validated if not item.validation.is_valid]
        reasons: Counter = Counter()
        for item in rejected:
            for reason in item.validation.reasons:
                reasons[reason.split(":", 1)[0]] += 1
        self.metadata.rejected = len(rejected)
        self.metadata.rejection_reasons = dict(sorted(reasons.items()))
        return accepted

    def _finish(self, contacts: Sequence[Contact]) -> ExtractionResult:
        kept = [contact for contact in contacts if contact.confidence >= self.config.confidence_threshold]
        kept = _cap(kept, self.config.max_contacts)
        distribution = {level: 0 for level in CONFIDENCE_LEVELS}
        distribution.update(Counter(contact.confidence_level for contact in kept))
        self.metadata.confidence_distribution = distribution
        self.metadata.average_confidence = average_confidence(kept)
        if not kept and self.metadata.status == "ok" and self.metadata.reason is None:
            self.metadata.reason = _empty_reason(self.metadata, len(contacts))
        LOGGER.info(
            "Extracted %d contacts (%s structure, average confidence %.2f)",
            len(kept),
            self.metadata.structure_type,
            self.metadata.average_confidence,
        )
        return ExtractionResult(contacts=kept, metadata=self.metadata, source=self.source)


def _cap(contacts: List[Contact], limit: int) -> List[Contact]:
    if limit <= 0 or len(contacts) <= limit:
        return contacts
    ranked: List[Tuple[int, Contact]] = sorted(enumerate(contacts), key=lambda item: (-item[1].confidence, item[0]))[:limit]
    LOGGER.warning("Capping %d contacts at %d", len(contacts), limit)
    return [contact for _, contact in sorted(ranked, key=lambda item: item[0])]


def _empty_reason(metadata: ExtractionMetadata, merged_count: int) -> str:
    if metadata.total_raw_candidates == 0:
        return "No contact candidates found"
    if merged_count == 0:
        return "All candidates were rejected by validation"
    return "No contacts reached the confidence threshold"


def extract(
    text: str,
    metadata: Optional[Mapping[str, Any]] = None,
    *,
    config: Optional[ExtractionConfig] = None,
    confidence_threshold: Optional[float] = None,
    use_multi_pass: Optional[bool] = None,
    role_preferences: Optional[Sequence[str]] = None,
) -> ExtractionResult:
    """Module level shortcut for a one-off extraction."""

    return ExtractionOrchestrator(config).extract(
        text,
        metadata,
        confidence_threshold=confidence_threshold,
        use_multi_pass=use_multi_pass,
        role_preferences=role_preferences,
    )


__all__ = ["DocumentInput", "ExtractionOrchestrator", "Stage", "extract"]
