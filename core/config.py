from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

DEFAULT_CONFIG_PATH = "configs/app.yaml"
DEFAULT_CATEGORIES = ["computer_security", "prehistory", "sociology"]
DEFAULT_SAMPLE_SIZE = 50
MAX_SAMPLE_SIZE = 50


class ConfigError(RuntimeError):
    """Raised when configuration cannot be loaded."""


def _resolve_env(value: Any) -> Any:
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        env_key = value[2:-1]
        return os.getenv(env_key, "")
    if isinstance(value, dict):
        return {k: _resolve_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_env(item) for item in value]
    return value


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Missing configuration file: {path}")
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid configuration file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")
    return _resolve_env(data)


@lru_cache(maxsize=4)
def load_app_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load the primary application config.

    Falls back to ``$VALIDATOR_CONFIG`` and then ``configs/app.yaml``.
    """

    path = Path(config_path or os.getenv("VALIDATOR_CONFIG") or DEFAULT_CONFIG_PATH)
    return _load_yaml(path)


def evaluation_categories(config: Optional[Dict[str, Any]] = None) -> List[str]:
    config = config if config is not None else load_app_config()
    categories = config.get("evaluation", {}).get("categories") or DEFAULT_CATEGORIES
    return [str(category) for category in categories]


def evaluation_sample_size(config: Optional[Dict[str, Any]] = None) -> int:
    config = config if config is not None else load_app_config()
    size = int(config.get("evaluation", {}).get("sample_size", DEFAULT_SAMPLE_SIZE))
    if not 1 <= size <= MAX_SAMPLE_SIZE:
        raise ConfigError(f"evaluation.sample_size must be between 1 and {MAX_SAMPLE_SIZE}, got {size}")
    return size


def store_path(config: Optional[Dict[str, Any]] = None) -> Path:
    """Return the record store path, creating its parent directory."""

    config = config if config is not None else load_app_config()
    path = Path(config.get("store", {}).get("path", "./data/questions.db"))
    path.parent.mkdir(parents=True, exist_ok=True)
    return path
