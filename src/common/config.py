"""Shared configuration utilities: YAML layers and a lazily loaded process config."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any, Generic, TypeVar

import yaml

logger = logging.getLogger(__name__)

T = TypeVar("T")


def resolve_config_path(
    config_name: str | None,
    config_dir: Path,
    default_name: str = "prod",
    env_var: str | None = None,
) -> Path | None:
    """Locate `<config_dir>/<name>.yaml`.

    The name comes from config_name, else env_var, else default_name.
    Returns None when the file does not exist; configuration files are an
    optional layer.
    """
    name = config_name or (os.environ.get(env_var, "").strip() if env_var else "") or default_name
    path = config_dir / f"{name}.yaml"
    if not path.exists():
        logger.debug("No config file at %s", path)
        return None
    return path


def load_yaml(path: Path | None) -> dict[str, Any]:
    """Load a YAML mapping; a missing path or empty file gives an empty dict."""
    if path is None:
        return {}
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data


class ConfigSingleton(Generic[T]):
    """Process-wide config holder with get/set/reset.

    The loader runs at most once until reset(), even when several worker
    threads ask for the config at the same time.
    """

    def __init__(self, loader: Callable[[], T] | None = None):
        self._config: T | None = None
        self._loader = loader
        self._lock = threading.Lock()

    def get(self) -> T:
        with self._lock:
            if self._config is None:
                if self._loader is None:
                    raise RuntimeError("No config loaded and no loader set")
                self._config = self._loader()
            return self._config

    def set(self, config: T) -> None:
        with self._lock:
            self._config = config

    def reset(self) -> None:
        with self._lock:
            self._config = None
