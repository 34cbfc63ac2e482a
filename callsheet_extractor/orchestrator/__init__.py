"""Pipeline orchestration for single documents and document batches."""

from .service import DocumentInput, ExtractionOrchestrator, Stage, extract

__all__ = ["DocumentInput", "ExtractionOrchestrator", "Stage", "extract"]
