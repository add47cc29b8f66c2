"""Load and validate configuration from YAML with env var substitution."""

from __future__ import annotations

import logging
import logging.handlers
import math
import os
import re
from pathlib import Path
from typing import Any

import yaml

DEFAULT_PRIMARY_WEIGHTS = {
    "keyword": 0.30,
    "entity": 0.25,
    "source": 0.20,
    "temporal": 0.10,
    "geopolitical": 0.08,
    "threat": 0.07,
}

DEFAULT_SECONDARY_WEIGHTS = {
    "content_depth": 0.15,
    "linguistic": 0.20,
    "cross_reference": 0.25,
    "operational": 0.25,
    "strategic": 0.15,
}

DEFAULT_BLEND = {"primary": 0.7, "secondary": 0.3}

DEFAULT_DEDUP = {"threshold": 0.8, "window_hours": 24, "title_weight": 0.7}

DEFAULT_FALLBACK = {"score": 25, "confidence": 40}

DEFAULT_BATCH = {"max_workers": 1, "max_concurrency": 8, "timeout_seconds": None}

DEFAULT_MAX_ENTITIES_PER_CLASS = 15

WEIGHT_TOLERANCE = 1e-6


def _load_dotenv(path: str | Path = ".env") -> None:
    """Load a .env file into os.environ (without overwriting existing vars)."""
    env_path = Path(path)
    if not env_path.is_file():
        return
    with open(env_path) as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip("'\"")
            if key and key not in os.environ:
                os.environ[key] = value


def _resolve_env_vars(value: Any) -> Any:
    """Recursively resolve ${ENV_VAR} patterns in config values."""
    if isinstance(value, str):
        pattern = re.compile(r"\$\{([^}]+)\}")
        match = pattern.search(value)
        if match:
            env_val = os.environ.get(match.group(1), "")
            # A value that is exactly one reference becomes the raw env value
            if match.group(0) == value:
                return env_val
            return pattern.sub(lambda m: os.environ.get(m.group(1), ""), value)
        return value
    if isinstance(value, dict):
        return {k: _resolve_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_env_vars(item) for item in value]
    return value


def load_config(path: str | Path = "config.yaml") -> dict[str, Any]:
    """Load config from YAML file and resolve environment variables."""
    _load_dotenv()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw = yaml.safe_load(f)

    return _resolve_env_vars(raw or {})


def _section(config: dict | None, *keys: str) -> dict:
    node = config or {}
    for key in keys:
        node = node.get(key) or {}
    return node


def _weights(overrides: dict, defaults: dict[str, float], label: str) -> dict[str, float]:
    unknown = set(overrides) - set(defaults)
    if unknown:
        raise ValueError(f"Unknown {label} weight(s): {', '.join(sorted(unknown))}")
    weights = {name: float(overrides.get(name, default)) for name, default in defaults.items()}
    total = math.fsum(weights.values())
    if abs(total - 1.0) > WEIGHT_TOLERANCE:
        raise ValueError(f"{label.capitalize()} weights must sum to 1.0, got {total:.4f}")
    return weights


def get_primary_weights(config: dict | None) -> dict[str, float]:
    """Weights of the six primary scoring dimensions."""
    return _weights(_section(config, "scoring", "weights", "primary"), DEFAULT_PRIMARY_WEIGHTS, "primary")


def get_secondary_weights(config: dict | None) -> dict[str, float]:
    """Weights of the five secondary signals."""
    return _weights(
        _section(config, "scoring", "weights", "secondary"), DEFAULT_SECONDARY_WEIGHTS, "secondary"
    )


def get_blend_weights(config: dict | None) -> dict[str, float]:
    """Primary/secondary blend used when secondary signals are available."""
    return _weights(_section(config, "scoring", "blend"), DEFAULT_BLEND, "blend")


def secondary_enabled(config: dict | None) -> bool:
    return bool(_section(config, "scoring", "secondary").get("enabled", True))


def get_dedup_settings(config: dict | None) -> dict[str, float]:
    cfg = _section(config, "dedup")
    settings = {key: float(cfg.get(key, default)) for key, default in DEFAULT_DEDUP.items()}
    if not 0.0 <= settings["title_weight"] <= 1.0:
        raise ValueError("dedup.title_weight must be within [0, 1]")
    return settings


def get_max_entities_per_class(config: dict | None) -> int:
    return int(_section(config, "entities").get("max_per_class", DEFAULT_MAX_ENTITIES_PER_CLASS))


def get_fallback_settings(config: dict | None) -> dict[str, float]:
    cfg = _section(config, "fallback")
    return {key: float(cfg.get(key, default)) for key, default in DEFAULT_FALLBACK.items()}


def get_batch_settings(config: dict | None) -> dict[str, Any]:
    cfg = _section(config, "batch")
    timeout = cfg.get("timeout_seconds", DEFAULT_BATCH["timeout_seconds"])
    return {
        "max_workers": max(1, int(cfg.get("max_workers", DEFAULT_BATCH["max_workers"]))),
        "max_concurrency": max(1, int(cfg.get("max_concurrency", DEFAULT_BATCH["max_concurrency"]))),
        "timeout_seconds": float(timeout) if timeout not in (None, "") else None,
    }


def setup_logging(config: dict | None) -> None:
    """Configure logging with console + optional rotating file output."""
    cfg = _section(config, "logging")
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(cfg.get("level", "INFO")).upper(), logging.INFO))

    fmt = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    root.addHandler(console)

    log_file = cfg.get("file")
    if log_file:
        # Rotate at 5MB, keep 3 backups
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            str(log_path), maxBytes=5 * 1024 * 1024, backupCount=3,
        )
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)
