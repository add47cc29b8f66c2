"""Tests for config loading, env var resolution and typed getters."""

from __future__ import annotations

import logging
import logging.handlers

import pytest

from intelscore.config import (
    DEFAULT_PRIMARY_WEIGHTS,
    get_batch_settings,
    get_blend_weights,
    get_dedup_settings,
    get_fallback_settings,
    get_max_entities_per_class,
    get_primary_weights,
    get_secondary_weights,
    load_config,
    secondary_enabled,
    setup_logging,
)


def test_load_config(sample_config):
    """Config loads and has expected structure."""
    assert "scoring" in sample_config
    assert "dedup" in sample_config
    assert sample_config["batch"]["max_concurrency"] == 4


def test_env_var_resolution(tmp_path, monkeypatch):
    """Environment variables in ${VAR} format are resolved."""
    monkeypatch.setenv("INTEL_THRESHOLD", "0.9")
    monkeypatch.setenv("INTEL_DIR", "/var/log")
    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text("""
dedup:
  threshold: "${INTEL_THRESHOLD}"
logging:
  file: "${INTEL_DIR}/intelscore.log"
""")
    config = load_config(str(cfg_path))
    assert config["logging"]["file"] == "/var/log/intelscore.log"
    assert get_dedup_settings(config)["threshold"] == 0.9


def test_unset_env_var_resolves_empty(sample_config):
    """A reference to an unset variable becomes an empty string."""
    assert sample_config["logging"]["level"] == ""


def test_missing_config_file(tmp_path):
    """A missing config file is an error, not an empty config."""
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_dotenv_does_not_override(tmp_path, monkeypatch):
    """.env values fill gaps but never replace variables already set."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("INTEL_LEVEL", "DEBUG")
    monkeypatch.delenv("INTEL_FILE", raising=False)
    (tmp_path / ".env").write_text("INTEL_LEVEL=ERROR\nINTEL_FILE='out.log'\n# comment\n")
    (tmp_path / "config.yaml").write_text('logging:\n  level: "${INTEL_LEVEL}"\n  file: "${INTEL_FILE}"\n')
    config = load_config("config.yaml")
    assert config["logging"]["level"] == "DEBUG"
    assert config["logging"]["file"] == "out.log"
    monkeypatch.delenv("INTEL_FILE", raising=False)


def test_defaults_for_empty_config():
    """Every getter falls back to the reference constants."""
    assert get_primary_weights({}) == DEFAULT_PRIMARY_WEIGHTS
    assert sum(get_secondary_weights(None).values()) == pytest.approx(1.0)
    assert get_blend_weights({}) == {"primary": 0.7, "secondary": 0.3}
    assert secondary_enabled({}) is True
    assert get_max_entities_per_class({}) == 15
    assert get_fallback_settings({}) == {"score": 25.0, "confidence": 40.0}
    assert get_dedup_settings({}) == {"threshold": 0.8, "window_hours": 24.0, "title_weight": 0.7}
    assert get_batch_settings({}) == {"max_workers": 1, "max_concurrency": 8, "timeout_seconds": None}


def test_weights_must_sum_to_one():
    """Overriding one weight without rebalancing is rejected."""
    config = {"scoring": {"weights": {"primary": {"keyword": 0.5}}}}
    with pytest.raises(ValueError, match="sum to 1.0"):
        get_primary_weights(config)


def test_rebalanced_weights_accepted():
    """A full set of weights summing to one replaces the defaults."""
    weights = {"keyword": 0.2, "entity": 0.2, "source": 0.2, "temporal": 0.2, "geopolitical": 0.1, "threat": 0.1}
    assert get_primary_weights({"scoring": {"weights": {"primary": weights}}}) == weights


def test_unknown_weight_rejected():
    """Typos in weight names are caught."""
    config = {"scoring": {"weights": {"secondary": {"linguistics": 0.2}}}}
    with pytest.raises(ValueError, match="Unknown secondary"):
        get_secondary_weights(config)


def test_title_weight_range():
    """Title weight is a fraction."""
    with pytest.raises(ValueError):
        get_dedup_settings({"dedup": {"title_weight": 1.5}})


def test_batch_settings_floor():
    """Worker and concurrency counts never drop below one."""
    settings = get_batch_settings({"batch": {"max_workers": 0, "max_concurrency": -3, "timeout_seconds": 2}})
    assert settings == {"max_workers": 1, "max_concurrency": 1, "timeout_seconds": 2.0}


def test_secondary_can_be_disabled():
    assert secondary_enabled({"scoring": {"secondary": {"enabled": False}}}) is False


def test_setup_logging_with_file(tmp_path):
    """A log file path adds a rotating file handler."""
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    log_file = tmp_path / "logs" / "intelscore.log"
    try:
        setup_logging({"logging": {"level": "WARNING", "file": str(log_file)}})
        added = [h for h in root.handlers if h not in before]
        assert root.level == logging.WARNING
        assert any(isinstance(h, logging.handlers.RotatingFileHandler) for h in added)
        assert log_file.parent.is_dir()
    finally:
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(level)
