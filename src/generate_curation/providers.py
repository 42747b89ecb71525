"""Interchangeable generation backends behind a single generate() contract."""

from __future__ import annotations

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any

import openai
import requests
from openai import OpenAI

from common.utils import unique_strings
from generate_curation.config import CurationConfig
from generate_curation.errors import (
    BackendCallError,
    ConfigurationError,
    GenerationTimeoutError,
    ModelNotFoundError,
)
from generate_curation.models import GenerationResult

logger = logging.getLogger(__name__)

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"
ANTHROPIC_DEFAULT_MODEL = "claude-opus-4-1"
ANTHROPIC_FALLBACK_MODELS = [
    "claude-opus-4-1",
    "claude-sonnet-4-5-20250929",
    "claude-haiku-4-5-20251001",
]
OPENAI_DEFAULT_MODEL = "gpt-4o-mini"


class GenerationProvider(ABC):
    """A text-generation backend returning raw text plus a truncation flag."""

    name: str = ""

    @abstractmethod
    def generate(
        self,
        prompt: str,
        system: str,
        max_output_tokens: int,
        timeout: float,
        model: str,
    ) -> GenerationResult:
        """Run one single-attempt call. Raises BackendCallError subclasses on failure."""

    def model_candidates(self, requested: str) -> list[str]:
        """Ordered model identifiers to try when one is rejected as unknown."""
        return unique_strings([requested])


class MockProvider(GenerationProvider):
    """Local deterministic provider; never touches the network.

    The engine routes mock mode straight to the deterministic builders, so
    generate() only ever returns an empty object.
    """

    name = "mock"

    def generate(self, prompt, system, max_output_tokens, timeout, model) -> GenerationResult:
        return GenerationResult(data={}, provider=self.name, model="mock-curator", text="{}")


def resolve_anthropic_alias(model: str) -> str:
    """Map user-facing shortcuts (opus, sonnet, haiku) to concrete API model names."""
    raw = str(model or "").strip()
    lower = raw.lower()
    if not raw:
        return ANTHROPIC_DEFAULT_MODEL
    if lower.startswith(("claude-opus-", "claude-sonnet-", "claude-haiku-")):
        return raw
    if lower == "opus" or lower.startswith("opus"):
        return ANTHROPIC_FALLBACK_MODELS[0]
    if lower.startswith("sonnet"):
        return ANTHROPIC_FALLBACK_MODELS[1]
    if lower.startswith("haiku"):
        return ANTHROPIC_FALLBACK_MODELS[2]
    return raw


def _post_within_deadline(
    session: requests.Session,
    url: str,
    timeout: float,
    label: str,
    **kwargs: Any,
) -> tuple[requests.Response, str]:
    """
    POST and read the whole body within one wall-clock deadline.

    requests applies `timeout` to the connect and to each read separately, so
    the body is streamed and the deadline is checked between chunks.
    """
    deadline = time.monotonic() + timeout
    try:
        response = session.post(url, timeout=timeout, stream=True, **kwargs)
        chunks = []
        for chunk in response.iter_content(chunk_size=8192):
            if time.monotonic() > deadline:
                response.close()
                raise GenerationTimeoutError(f"{label} call exceeded {timeout}s")
            chunks.append(chunk)
    except requests.Timeout as exc:
        raise GenerationTimeoutError(f"{label} call timed out after {timeout}s") from exc
    except requests.RequestException as exc:
        raise BackendCallError(f"{label} request failed: {exc.__class__.__name__}") from exc
    return response, b"".join(chunks).decode(response.encoding or "utf-8", errors="replace")


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return None


def _is_model_not_found(status: int, body: Any) -> bool:
    error = body.get("error") if isinstance(body, dict) else None
    if status != 404 or not isinstance(error, dict):
        return False
    return error.get("type") in ("not_found_error", "not_found") and "model:" in str(error.get("message") or "")


class AnthropicProvider(GenerationProvider):
    """Anthropic Messages API over plain HTTP."""

    name = "anthropic"

    def __init__(self, api_key: str, api_url: str = "", temperature: float = 0.4):
        if not api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY is required for mode=anthropic")
        self.api_key = api_key
        self.api_url = api_url or ANTHROPIC_URL
        self.temperature = temperature

    def model_candidates(self, requested: str) -> list[str]:
        return unique_strings([resolve_anthropic_alias(requested), requested, *ANTHROPIC_FALLBACK_MODELS])

    def generate(self, prompt, system, max_output_tokens, timeout, model) -> GenerationResult:
        body = {
            "model": model,
            "max_tokens": max_output_tokens,
            "temperature": self.temperature,
            "system": system,
            "messages": [{"role": "user", "content": prompt}],
        }
        headers = {
            "content-type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }
        with requests.Session() as session:
            response, raw = _post_within_deadline(
                session, self.api_url, timeout, "Anthropic", json=body, headers=headers
            )

        payload = _parse_json(raw)
        if not response.ok:
            message = f"Anthropic HTTP {response.status_code}: {raw[:220]}"
            if _is_model_not_found(response.status_code, payload):
                raise ModelNotFoundError(message, status=response.status_code, body_preview=raw)
            raise BackendCallError(message, status=response.status_code, body_preview=raw)

        if not isinstance(payload, dict):
            return GenerationResult(data={}, provider=self.name, model=model, text=raw)

        text = "".join(
            str(block.get("text") or "")
            for block in payload.get("content") or []
            if isinstance(block, dict) and block.get("type") == "text"
        )
        return GenerationResult(
            data={},
            provider=self.name,
            model=model,
            truncated=payload.get("stop_reason") == "max_tokens",
            text=text,
        )


class OpenAIProvider(GenerationProvider):
    """OpenAI chat completions in JSON mode."""

    name = "openai"

    def __init__(self, api_key: str, base_url: str = "", temperature: float = 0.35):
        if not api_key:
            raise ConfigurationError("OPENAI_API_KEY is required for mode=openai")
        self.api_key = api_key
        self.base_url = base_url or None
        self.temperature = temperature

    def model_candidates(self, requested: str) -> list[str]:
        return unique_strings([requested or OPENAI_DEFAULT_MODEL, OPENAI_DEFAULT_MODEL])

    def generate(self, prompt, system, max_output_tokens, timeout, model) -> GenerationResult:
        with OpenAI(api_key=self.api_key, base_url=self.base_url, timeout=timeout, max_retries=0) as client:
            try:
                response = client.chat.completions.create(
                    model=model,
                    temperature=self.temperature,
                    max_tokens=max_output_tokens,
                    response_format={"type": "json_object"},
                    messages=[
                        {"role": "system", "content": system},
                        {"role": "user", "content": prompt},
                    ],
                )
            except openai.APITimeoutError as exc:
                raise GenerationTimeoutError(f"OpenAI call timed out after {timeout}s") from exc
            except openai.NotFoundError as exc:
                raise ModelNotFoundError(f"OpenAI model not found: {model}", status=404, body_preview=str(exc)) from exc
            except openai.APIStatusError as exc:
                raise BackendCallError(
                    f"OpenAI HTTP {exc.status_code}", status=exc.status_code, body_preview=str(exc)
                ) from exc
            except openai.APIConnectionError as exc:
                raise BackendCallError("OpenAI connection failed") from exc

        choice = response.choices[0]
        return GenerationResult(
            data={},
            provider=self.name,
            model=model,
            truncated=choice.finish_reason == "length",
            text=choice.message.content or "",
        )


class HttpProvider(GenerationProvider):
    """Raw HTTP curator: POST {"input": prompt}, the JSON body is the plan."""

    name = "http"

    def __init__(self, url: str):
        if not url:
            raise ConfigurationError("CURATOR_HTTP_URL is required for mode=http")
        self.url = url

    def generate(self, prompt, system, max_output_tokens, timeout, model) -> GenerationResult:
        with requests.Session() as session:
            response, text = _post_within_deadline(session, self.url, timeout, "HTTP curator", json={"input": prompt})
        if not response.ok:
            raise BackendCallError(
                f"HTTP curator {response.status_code}: {text[:220]}",
                status=response.status_code,
                body_preview=text,
            )
        return GenerationResult(data={}, provider=self.name, model=model or "http", text=text)


def build_provider(mode: str, config: CurationConfig) -> GenerationProvider:
    """Construct the provider for a resolved mode. Missing credentials raise ConfigurationError."""
    if mode == "anthropic":
        return AnthropicProvider(
            api_key=config.api_key or config.anthropic_api_key,
            api_url=config.api_url or config.anthropic_base_url,
        )
    if mode == "openai":
        return OpenAIProvider(api_key=config.openai_api_key or config.api_key, base_url=config.openai_base_url)
    if mode == "http":
        return HttpProvider(url=config.http_url or config.api_url)
    return MockProvider()
