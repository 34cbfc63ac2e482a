"""Selects and runs extraction strategies for a detected structure."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence

from ..models import CandidateContact, RawLine, StructureProfile
from .base import ExtractionStrategy

LOGGER = logging.getLogger(__name__)


@dataclass
class RoutingResult:
    candidates: List[CandidateContact] = field(default_factory=list)
    strategies_used: List[str] = field(default_factory=list)


class StrategyRouter:
    """Dispatch on ``profile.type``; ``mixed`` profiles run every applicable strategy."""

    def __init__(
        self,
        strategies: Mapping[str, ExtractionStrategy],
        *,
        fallback: str = "freeform",
        mixed_floor: float = 0.3,
    ) -> None:
        self._strategies: Dict[str, ExtractionStrategy] = dict(strategies)
        self._fallback = fallback
        self._mixed_floor = mixed_floor

    @property
    def strategies(self) -> List[ExtractionStrategy]:
        return list(self._strategies.values())

    def select(self, profile: StructureProfile) -> List[ExtractionStrategy]:
        if profile.type == "mixed":
            chosen = [
                strategy
                for name, strategy in self._strategies.items()
                if name != self._fallback and strategy.applicability(profile) >= self._mixed_floor
            ]
            if self._fallback in self._strategies:
                chosen.append(self._strategies[self._fallback])
            return chosen
        primary = self._strategies.get(profile.type)
        if primary is not None:
            return [primary]
        LOGGER.debug("No strategy enabled for %s; using %s", profile.type, self._fallback)
        fallback = self._strategies.get(self._fallback)
        return [fallback] if fallback is not None else []

    def extract(self, lines: Sequence[RawLine], profile: StructureProfile) -> RoutingResult:
        result = RoutingResult()
        for strategy in self.select(profile):
            found = strategy.extract(lines, profile)
            LOGGER.debug("Strategy %s produced %d candidates", strategy.name, len(found))
            result.candidates.extend(found)
            result.strategies_used.append(strategy.name)

        primary_only = profile.type != "mixed"
        fallback = self._strategies.get(self._fallback)
        if not result.candidates and primary_only and fallback is not None and self._fallback not in result.strategies_used:
            found = fallback.extract(lines, profile)
            LOGGER.debug("Fallback strategy %s produced %d candidates", fallback.name, len(found))
            result.candidates.extend(found)
            result.strategies_used.append(fallback.name)
        return result


__all__ = ["RoutingResult", "StrategyRouter"]
