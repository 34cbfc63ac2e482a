"""Data models used by document ingestion utilities."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional


@dataclass(slots=True)
class SourceDocument:
    """Plain text of one input document plus where it came from."""

    text: str
    path: Optional[Path] = None
    kind: str = "text"
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> Optional[str]:
        return self.path.name if self.path is not None else None


__all__ = ["SourceDocument"]
