"""Configuration loader for generate_curation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

from common.config import ConfigSingleton, load_yaml, resolve_config_path
from common.runtime_config import read_curator_runtime_config
from common.utils import clamp_int

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parents[2] / "configs"

DISABLED_MODES = {"off", "disabled", "0", "false"}
BACKEND_MODES = {"anthropic", "openai", "http"}

DEFAULT_SYSTEM_PROMPT = (
    "You are a veteran newspaper editor and futures analyst acting as a daily trend curator. "
    "Return JSON only. If unsure, pick the most plausible editorial framing."
)

# (config field, environment variable, runtime-config key)
_SOURCES = [
    ("mode", "CURATOR_MODE", "mode"),
    ("model", "CURATOR_MODEL", "model"),
    ("api_key", "CURATOR_API_KEY", "apiKey"),
    ("api_url", "CURATOR_API_URL", "apiUrl"),
    ("anthropic_api_key", "ANTHROPIC_API_KEY", None),
    ("anthropic_base_url", "ANTHROPIC_BASE_URL", None),
    ("openai_api_key", "OPENAI_API_KEY", None),
    ("openai_base_url", "OPENAI_BASE_URL", None),
    ("http_url", "CURATOR_HTTP_URL", "httpUrl"),
    ("max_tokens", "CURATOR_MAX_TOKENS", "maxTokens"),
    ("timeout_s", "CURATOR_TIMEOUT_S", "timeoutS"),
    ("daily_timeout_s", "CURATOR_DAILY_TIMEOUT_S", "dailyTimeoutS"),
    ("key_stories_per_edition", "CURATOR_KEY_STORIES_PER_EDITION", "keyStoriesPerEdition"),
    ("system_prompt", "CURATOR_SYSTEM_PROMPT", "systemPrompt"),
    ("max_workers", "CURATOR_MAX_WORKERS", "maxWorkers"),
]


@dataclass
class CurationConfig:
    mode: str = "auto"  # "auto" | "mock" | "anthropic" | "openai" | "http" | "off"
    model: str = ""
    api_key: str = ""
    api_url: str = ""
    anthropic_api_key: str = ""
    anthropic_base_url: str = ""
    openai_api_key: str = ""
    openai_base_url: str = ""
    http_url: str = ""
    max_tokens: int = 16000
    timeout_s: int = 300
    daily_timeout_s: int = 90
    key_stories_per_edition: int = 1
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    max_workers: int = 1
    fallback_on_invalid: bool = True
    section_order: list[str] = field(default_factory=list)

    def __post_init__(self):
        self.mode = str(self.mode or "auto").strip().lower()
        self.max_tokens = clamp_int(self.max_tokens, 16000, 2000, 32000)
        self.timeout_s = clamp_int(self.timeout_s, 300, 10, 600)
        self.daily_timeout_s = clamp_int(self.daily_timeout_s, 90, 20, 180)
        self.key_stories_per_edition = clamp_int(self.key_stories_per_edition, 1, 0, 7)
        self.max_workers = clamp_int(self.max_workers, 1, 1, 11)
        self.system_prompt = str(self.system_prompt or "").strip() or DEFAULT_SYSTEM_PROMPT

    @property
    def disabled(self) -> bool:
        return self.mode in DISABLED_MODES

    @property
    def pinned(self) -> bool:
        """True when the operator pinned a backend and opted out of fallback."""
        return self.mode in BACKEND_MODES

    def resolve_mode(self) -> str:
        """Explicit mode, else whichever credential is present, else mock."""
        if self.disabled:
            return "disabled"
        if self.mode in BACKEND_MODES or self.mode == "mock":
            return self.mode
        if self.mode != "auto":
            logger.warning("Unknown curator mode %r; using deterministic fallback", self.mode)
            return "mock"
        if self.anthropic_api_key or self.api_key:
            return "anthropic"
        if self.openai_api_key:
            return "openai"
        return "mock"


def _parse_config(data: dict[str, Any]) -> CurationConfig:
    known = {f.name for f in fields(CurationConfig)}
    return CurationConfig(**{key: value for key, value in data.items() if key in known})


def load_config(config_name: str | None = None, runtime_path: Path | None = None) -> CurationConfig:
    """Load configuration: env vars > runtime JSON > YAML file > defaults.

    Args:
        config_name: Name of YAML config (without extension). If None, uses the
            CURATION_CONFIG_ENV env var or "prod".
        runtime_path: Override for the persisted runtime config file.

    Returns:
        Loaded CurationConfig
    """
    data = dict(load_yaml(resolve_config_path(config_name, CONFIG_DIR, env_var="CURATION_CONFIG_ENV")))

    runtime = read_curator_runtime_config(runtime_path)
    for name, env_var, runtime_key in _SOURCES:
        if runtime_key and runtime.get(runtime_key) not in (None, ""):
            data[name] = runtime[runtime_key]
        value = os.environ.get(env_var, "").strip()
        if value:
            data[name] = value

    return _parse_config(data)


_manager: ConfigSingleton[CurationConfig] = ConfigSingleton(load_config)
get_config = _manager.get
set_config = _manager.set
reset_config = _manager.reset
