"""Error taxonomy for curation generation."""

from __future__ import annotations


class CurationError(Exception):
    """Base class for generation failures the engine may degrade from."""


class ConfigurationError(CurationError):
    """A backend was selected but its credential or endpoint is missing."""


class BackendCallError(CurationError):
    """HTTP-level failure from a generation backend (auth, rate limit, 5xx)."""

    def __init__(self, message: str, status: int | None = None, body_preview: str = ""):
        super().__init__(message)
        self.status = status
        self.body_preview = body_preview[:220]


class ModelNotFoundError(BackendCallError):
    """The backend rejected the requested model identifier."""


class GenerationTimeoutError(BackendCallError):
    """The backend did not answer within the configured timeout."""


class ParseError(CurationError):
    """The backend response could not be repaired into a JSON object."""

    def __init__(self, message: str, truncated: bool = False, preview: str = ""):
        super().__init__(message)
        self.truncated = truncated
        self.preview = preview[:400]
