"""Extraction strategies, one per document layout."""

from .base import ExtractionStrategy, LineStrategy  # noqa: F401
from .freeform import FreeformStrategy  # noqa: F401
from .key_value import KeyValueStrategy  # noqa: F401
from .router import RoutingResult, StrategyRouter  # noqa: F401
from .sectioned import SectionedStrategy  # noqa: F401
from .slash import SlashDelimitedStrategy  # noqa: F401
from .tabular import TabularStrategy  # noqa: F401

__all__ = [
    "ExtractionStrategy",
    "FreeformStrategy",
    "KeyValueStrategy",
    "LineStrategy",
    "RoutingResult",
    "SectionedStrategy",
    "SlashDelimitedStrategy",
    "StrategyRouter",
    "TabularStrategy",
]
