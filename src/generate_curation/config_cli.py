"""CLI for updating the persisted curator runtime configuration."""

from __future__ import annotations

import argparse
import logging

from common.cli_helpers import setup_logging
from common.runtime_config import get_runtime_config_path, update_curator_runtime_config

setup_logging()
logger = logging.getLogger(__name__)

# CLI option -> runtime-config key
_OPTIONS = {
    "mode": "mode",
    "model": "model",
    "api_key": "apiKey",
    "api_url": "apiUrl",
    "http_url": "httpUrl",
    "max_tokens": "maxTokens",
    "timeout_s": "timeoutS",
    "daily_timeout_s": "dailyTimeoutS",
    "key_stories_per_edition": "keyStoriesPerEdition",
    "system_prompt": "systemPrompt",
    "max_workers": "maxWorkers",
}


def main() -> None:
    parser = argparse.ArgumentParser(description="Persist curator settings (blank values remove a setting)")
    parser.add_argument("--mode")
    parser.add_argument("--model")
    parser.add_argument("--api-key")
    parser.add_argument("--api-url")
    parser.add_argument("--http-url")
    parser.add_argument("--max-tokens", type=int)
    parser.add_argument("--timeout-s", type=int)
    parser.add_argument("--daily-timeout-s", type=int)
    parser.add_argument("--key-stories-per-edition", type=int)
    parser.add_argument("--system-prompt")
    parser.add_argument("--max-workers", type=int)
    args = parser.parse_args()

    patch = {key: getattr(args, option) for option, key in _OPTIONS.items() if getattr(args, option) is not None}
    if not patch:
        parser.error("nothing to update")

    update_curator_runtime_config(patch)
    logger.info("Curator runtime config saved to %s", get_runtime_config_path())


if __name__ == "__main__":
    main()
