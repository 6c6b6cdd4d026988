"""
Engine configuration - category thresholds, benchmark margin and cache policy
Loaded from YAML, falling back to built-in defaults when no file is present
"""

import os
import logging
from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import handle_config_error

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/engine.yaml"
CONFIG_ENV_VAR = "FERTILITY_ENGINE_CONFIG"

@dataclass
class EngineConfig:
    """Configuration for prognosis combination, reporting and caching"""
    # Category thresholds (per-cycle %)
    good_threshold: float = 15.0
    moderate_threshold: float = 5.0

    # Benchmark comparison
    benchmark_margin_pp: float = 2.0

    # Annual <-> per-cycle transform
    cycles_per_year: int = 12

    # Clinical age range for the baseline table
    min_clinical_age: float = 18.0
    max_clinical_age: float = 55.0

    # Result cache
    cache_enabled: bool = True
    cache_max_size: int = 200
    cache_ttl_seconds: float = 900.0

    def validate(self) -> None:
        """Check internal consistency, raising ConfigurationError on failure"""
        if not 0 <= self.moderate_threshold < self.good_threshold <= 100:
            raise handle_config_error(
                "<in-memory>",
                f"thresholds must satisfy 0 <= moderate ({self.moderate_threshold}) "
                f"< good ({self.good_threshold}) <= 100"
            )
        if self.benchmark_margin_pp < 0:
            raise handle_config_error("<in-memory>", "benchmark_margin_pp must be non-negative")
        if self.cycles_per_year < 1:
            raise handle_config_error("<in-memory>", "cycles_per_year must be at least 1")
        if self.min_clinical_age >= self.max_clinical_age:
            raise handle_config_error("<in-memory>", "min_clinical_age must be below max_clinical_age")
        if self.cache_max_size < 1 or self.cache_ttl_seconds <= 0:
            raise handle_config_error("<in-memory>", "cache_max_size and cache_ttl_seconds must be positive")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

def resolve_config_path(config_path: Optional[str] = None) -> Path:
    """Explicit path wins, then the environment variable, then the default location"""
    return Path(config_path or os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)

def load_config(config_path: Optional[str] = None) -> EngineConfig:
    """
    Load configuration from a YAML file

    The file holds an optional `engine` section and an optional `cache`
    section; keys inside both map onto EngineConfig fields.
    """
    config_file = resolve_config_path(config_path)

    if not config_file.exists():
        logger.warning(f"Config file {config_file} not found, using defaults")
        return EngineConfig()

    try:
        with open(config_file, 'r') as f:
            config_data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise handle_config_error(str(config_file), "file could not be read or parsed", e) from e

    if not isinstance(config_data, dict):
        raise handle_config_error(str(config_file), "top level must be a mapping")

    settings: Dict[str, Any] = {}
    settings.update(config_data.get('engine') or {})
    cache_section = config_data.get('cache') or {}
    for key, value in cache_section.items():
        settings[f"cache_{key}"] = value

    known = {f.name for f in fields(EngineConfig)}
    unknown = sorted(set(settings) - known)
    if unknown:
        raise handle_config_error(str(config_file), f"unknown keys: {', '.join(unknown)}")

    config = EngineConfig(**settings)
    config.validate()

    logger.info(f"Loaded engine config from {config_file}")
    return config
