"""Generation client: one provider, model-alias fallback, and JSON repair."""

from __future__ import annotations

import logging

from generate_curation.errors import CurationError, ModelNotFoundError
from generate_curation.models import GenerationResult
from generate_curation.providers import GenerationProvider
from generate_curation.repair import RepairLadder

logger = logging.getLogger(__name__)


class GenerationClient:
    """
    Send a prompt to a provider and return a parsed JSON object.

    A rejected model identifier moves on to the next alias the provider
    offers. Every other failure is raised on the first attempt.
    """

    def __init__(
        self,
        provider: GenerationProvider,
        model: str = "",
        max_output_tokens: int = 16000,
        ladder: RepairLadder | None = None,
    ):
        self.provider = provider
        self.model = model
        self.max_output_tokens = max_output_tokens
        self.ladder = ladder or RepairLadder()

    @property
    def provider_name(self) -> str:
        return self.provider.name

    def generate_json(
        self,
        prompt: str,
        system: str,
        timeout: float,
        max_output_tokens: int | None = None,
    ) -> GenerationResult:
        """
        Run the prompt and parse the response into a dict.

        Args:
            prompt: User prompt.
            system: System instructions.
            timeout: Seconds before the call is abandoned.
            max_output_tokens: Override for the configured output budget.

        Returns:
            GenerationResult with `data` holding the parsed object.

        Raises:
            CurationError: Configuration, backend, timeout or parse failure.
        """
        budget = max_output_tokens or self.max_output_tokens
        candidates = self.provider.model_candidates(self.model)
        last_error: CurationError | None = None

        for model in candidates:
            try:
                result = self.provider.generate(prompt, system, budget, timeout, model)
            except ModelNotFoundError as exc:
                logger.warning("%s rejected model %s; trying next alias", self.provider_name, model)
                last_error = exc
                continue

            result.data = self.ladder.parse(result.text, truncated=result.truncated)
            logger.info(
                "%s generation succeeded (model=%s, truncated=%s)",
                self.provider_name, result.model, result.truncated,
            )
            return result

        if last_error is not None:
            raise last_error
        raise ModelNotFoundError(f"No model candidates available for {self.provider_name}")
