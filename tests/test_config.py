#!/usr/bin/env python3
"""
Unit tests for engine configuration loading
"""

import pytest
import sys
import os

# Add project root to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fertility_engine.config import CONFIG_ENV_VAR, EngineConfig, load_config, resolve_config_path
from fertility_engine.engine import PrognosisEngine
from fertility_engine.errors import ConfigurationError, ErrorCode

PROJECT_CONFIG = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
                              "config", "engine.yaml")

class TestLoadConfig:
    """Test YAML configuration loading"""

    def test_project_config_matches_defaults(self):
        assert load_config(PROJECT_CONFIG) == EngineConfig()

    def test_sections_map_onto_fields(self, tmp_path):
        config_file = tmp_path / "engine.yaml"
        config_file.write_text(
            "engine:\n"
            "  good_threshold: 20\n"
            "  benchmark_margin_pp: 1.5\n"
            "cache:\n"
            "  enabled: false\n"
            "  max_size: 50\n"
        )

        config = load_config(str(config_file))
        assert config.good_threshold == 20
        assert config.benchmark_margin_pp == 1.5
        assert config.cache_enabled is False
        assert config.cache_max_size == 50
        assert config.moderate_threshold == 5.0

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_config(str(tmp_path / "absent.yaml")) == EngineConfig()

    def test_empty_file_uses_defaults(self, tmp_path):
        config_file = tmp_path / "engine.yaml"
        config_file.write_text("")
        assert load_config(str(config_file)) == EngineConfig()

    def test_unknown_key(self, tmp_path):
        config_file = tmp_path / "engine.yaml"
        config_file.write_text("engine:\n  excellent_threshold: 30\n")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(str(config_file))
        assert exc_info.value.error_code == ErrorCode.CFG_INVALID_CONFIG
        assert "excellent_threshold" in exc_info.value.message

    def test_inverted_thresholds(self, tmp_path):
        config_file = tmp_path / "engine.yaml"
        config_file.write_text("engine:\n  good_threshold: 4\n  moderate_threshold: 10\n")

        with pytest.raises(ConfigurationError):
            load_config(str(config_file))

    def test_malformed_yaml(self, tmp_path):
        config_file = tmp_path / "engine.yaml"
        config_file.write_text("engine: [unclosed\n")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(str(config_file))
        assert exc_info.value.error_code == ErrorCode.CFG_FILE_UNREADABLE

    def test_top_level_must_be_mapping(self, tmp_path):
        config_file = tmp_path / "engine.yaml"
        config_file.write_text("- good_threshold\n- moderate_threshold\n")

        with pytest.raises(ConfigurationError):
            load_config(str(config_file))

    def test_environment_variable(self, tmp_path, monkeypatch):
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("engine:\n  cycles_per_year: 13\n")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(config_file))

        assert resolve_config_path() == config_file
        assert load_config().cycles_per_year == 13

    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "env.yaml"))
        assert resolve_config_path("explicit.yaml").name == "explicit.yaml"

class TestEngineConfig:
    """Test in-memory validation"""

    def test_defaults_are_valid(self):
        EngineConfig().validate()

    @pytest.mark.parametrize("overrides", [
        {"good_threshold": 5.0, "moderate_threshold": 5.0},
        {"benchmark_margin_pp": -1.0},
        {"cycles_per_year": 0},
        {"min_clinical_age": 60.0},
        {"cache_max_size": 0},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ConfigurationError):
            EngineConfig(**overrides).validate()

    def test_engine_rejects_invalid_config(self):
        with pytest.raises(ConfigurationError):
            PrognosisEngine(EngineConfig(good_threshold=1.0))

    def test_to_dict(self):
        assert EngineConfig().to_dict()["cache_ttl_seconds"] == 900.0
