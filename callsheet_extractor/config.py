"""Configuration helpers for the extraction engine."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

LOGGER = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when configuration files are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}

DEFAULT_STRATEGIES: Tuple[str, ...] = ("tabular", "slash_delimited", "key_value", "sectioned", "freeform")
SCORED_FIELD_NAMES = frozenset({"name", "email", "phone", "role", "company"})

# camelCase spellings accepted from JSON payloads
_ALIASES = {
    "confidenceThreshold": "confidence_threshold",
    "useMultiPass": "use_multi_pass",
    "rolePreferences": "role_preferences",
    "nameSimilarityThreshold": "name_similarity_threshold",
    "garbageMarkerThreshold": "garbage_marker_threshold",
    "nonPrintableRatio": "non_printable_ratio",
    "proximityWindow": "proximity_window",
    "mixedMargin": "mixed_margin",
    "minQualityScore": "min_quality_score",
    "requiredFields": "required_fields",
    "minNameLength": "min_name_length",
    "rolePreferenceBonus": "role_preference_bonus",
    "maxContacts": "max_contacts",
    "enabledStrategies": "enabled_strategies",
}


@dataclass(frozen=True)
class ExtractionConfig:
    """Every tunable of the extraction pipeline."""

    confidence_threshold: float = 0.3
    use_multi_pass: bool = False
    role_preferences: Tuple[str, ...] = ()
    name_similarity_threshold: float = 0.95
    garbage_marker_threshold: int = 3
    non_printable_ratio: float = 0.2
    proximity_window: int = 2
    mixed_margin: float = 0.1
    min_quality_score: float = 0.3
    required_fields: Tuple[str, ...] = ()
    min_name_length: int = 2
    role_preference_bonus: float = 0.1
    max_contacts: int = 500
    enabled_strategies: Tuple[str, ...] = DEFAULT_STRATEGIES

    def __post_init__(self) -> None:
        for name in ("confidence_threshold", "name_similarity_threshold", "non_printable_ratio", "mixed_margin", "min_quality_score", "role_preference_bonus"):
            value = getattr(self, name)
            if not 0.0 <= float(value) <= 1.0:
                raise ConfigurationError(f"'{name}' must be between 0 and 1, got {value!r}")
        for name in ("garbage_marker_threshold", "proximity_window", "min_name_length", "max_contacts"):
            if int(getattr(self, name)) < 0:
                raise ConfigurationError(f"'{name}' must not be negative")
        unknown_fields = set(self.required_fields) - SCORED_FIELD_NAMES
        if unknown_fields:
            raise ConfigurationError(f"Unknown required fields: {sorted(unknown_fields)}")
        unknown_strategies = set(self.enabled_strategies) - set(DEFAULT_STRATEGIES)
        if unknown_strategies:
            raise ConfigurationError(f"Unknown strategies: {sorted(unknown_strategies)}")

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "ExtractionConfig":
        """Build a config from a mapping using snake_case or camelCase keys."""

        if not data:
            return cls()
        known = {item.name: item for item in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise ConfigurationError(f"Unknown extraction option '{key}'")
            values[name] = _coerce(name, value)
        return cls(**values)

    def merged(self, **overrides: Any) -> "ExtractionConfig":
        """Return a copy with ``overrides`` applied, ignoring ``None`` values."""

        values = {key: _coerce(key, value) for key, value in overrides.items() if value is not None}
        return replace(self, **values) if values else self


def _coerce(name: str, value: Any) -> Any:
    try:
        if name in ("role_preferences", "required_fields", "enabled_strategies"):
            if isinstance(value, str):
                value = [part for part in value.split(",")]
            return tuple(str(part).strip() for part in value if str(part).strip())
        if name == "use_multi_pass":
            return _parse_bool(value)
        if name in ("garbage_marker_threshold", "proximity_window", "min_name_length", "max_contacts"):
            return int(value)
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid value for '{name}': {value!r}") from exc


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"1", "true", "yes", "on"}:
        return True
    if text in {"0", "false", "no", "off", ""}:
        return False
    raise ValueError(value)


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Configuration file '{file_path}' is not valid JSON: {exc}") from exc
    else:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - dependency optional
            raise ConfigurationError(
                "YAML configuration requires the 'pyyaml' package to be installed"
            ) from exc
        data = yaml.safe_load(text)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping")
    return data


def config_from_file_data(data: Mapping[str, Any]) -> ExtractionConfig:
    extraction = data.get("extraction") or {}
    if not isinstance(extraction, Mapping):
        raise ConfigurationError("'extraction' must be a mapping")
    return ExtractionConfig.from_mapping(extraction)


def iter_enabled_strategy_configs(config: Mapping[str, Any]) -> Iterable[Dict[str, Any]]:
    strategies = config.get("strategies", [])
    for strategy in strategies:
        if strategy.get("enabled", True):
            yield strategy
        else:
            LOGGER.debug("Skipping disabled strategy %s", strategy.get("name"))


_ENVIRONMENT_KEYS = {
    "CALLSHEET_CONFIDENCE_THRESHOLD": "confidence_threshold",
    "CALLSHEET_USE_MULTI_PASS": "use_multi_pass",
    "CALLSHEET_ENABLED_STRATEGIES": "enabled_strategies",
    "CALLSHEET_MAX_CONTACTS": "max_contacts",
}


def config_from_environment(
    environ: Optional[Mapping[str, str]] = None, base: Optional[ExtractionConfig] = None
) -> ExtractionConfig:
    """Apply ``CALLSHEET_*`` feature flags from ``environ`` on top of ``base``."""

    environ = os.environ if environ is None else environ
    config = base or ExtractionConfig()
    overrides: Dict[str, Any] = {}
    for variable, name in _ENVIRONMENT_KEYS.items():
        if environ.get(variable):
            overrides[name] = environ[variable]
    if environ.get("CALLSHEET_REQUIRE_NAME"):
        try:
            require_name = _parse_bool(environ["CALLSHEET_REQUIRE_NAME"])
        except ValueError as exc:
            raise ConfigurationError("CALLSHEET_REQUIRE_NAME must be a boolean") from exc
        required = tuple(field_name for field_name in config.required_fields if field_name != "name")
        overrides["required_fields"] = (("name",) + required) if require_name else required
    if overrides:
        LOGGER.debug("Environment overrides: %s", sorted(overrides))
    return config.merged(**overrides)


__all__ = [
    "ConfigurationError",
    "DEFAULT_STRATEGIES",
    "ExtractionConfig",
    "config_from_environment",
    "config_from_file_data",
    "iter_enabled_strategy_configs",
    "load_configuration",
]
