"""Factory helpers for constructing extraction strategies from configuration."""
from __future__ import annotations

import importlib
import logging
from typing import Any, Dict, Mapping, Optional

from .config import ConfigurationError, ExtractionConfig, iter_enabled_strategy_configs
from .fields import FieldExtractor
from .strategies import (
    ExtractionStrategy,
    FreeformStrategy,
    KeyValueStrategy,
    SectionedStrategy,
    SlashDelimitedStrategy,
    StrategyRouter,
    TabularStrategy,
)
from .structure import StructureDetector

LOGGER = logging.getLogger(__name__)

_LINE_STRATEGIES = {
    "tabular": TabularStrategy,
    "slash_delimited": SlashDelimitedStrategy,
    "key_value": KeyValueStrategy,
    "freeform": FreeformStrategy,
}


def _load_class(path: str):
    module_name, _, attr = path.rpartition(".")
    if not module_name:
        raise ConfigurationError(f"Invalid strategy class path '{path}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"Could not import strategy module '{module_name}'") from exc
    try:
        return getattr(module, attr)
    except AttributeError as exc:
        raise ConfigurationError(f"Module '{module_name}' does not define '{attr}'") from exc


def build_strategies(
    config: ExtractionConfig, file_config: Optional[Mapping[str, Any]] = None
) -> Dict[str, ExtractionStrategy]:
    """Instantiate the enabled strategies, keyed by the structure type they handle."""

    extractor = FieldExtractor(window=config.proximity_window)
    strategies: Dict[str, ExtractionStrategy] = {}
    for name in config.enabled_strategies:
        if name in _LINE_STRATEGIES:
            strategies[name] = _LINE_STRATEGIES[name](config.proximity_window, extractor)

    for strategy_cfg in iter_enabled_strategy_configs(file_config or {}):
        class_path = strategy_cfg.get("class")
        if not class_path:
            raise ConfigurationError("Strategy configuration missing required 'class' field")
        options = strategy_cfg.get("options", {})
        strategy_cls = _load_class(class_path)
        instance = strategy_cls(**options)
        display_name = strategy_cfg.get("name") or getattr(instance, "name", class_path)
        LOGGER.debug("Registered custom strategy %s from %s", display_name, class_path)
        strategies[display_name] = instance

    if "sectioned" in config.enabled_strategies:
        inner = {key: value for key, value in strategies.items() if key != "sectioned"}
        strategies["sectioned"] = SectionedStrategy(inner, detector=StructureDetector(config.mixed_margin))
    return strategies


def build_router(config: ExtractionConfig, file_config: Optional[Mapping[str, Any]] = None) -> StrategyRouter:
    return StrategyRouter(build_strategies(config, file_config))


__all__ = ["build_router", "build_strategies"]
