"""Error taxonomy shared by providers, services and the local store."""

from typing import Optional


class WordLensError(Exception):
    """Base class for all application errors."""


class ConfigurationError(WordLensError):
    """Missing or malformed credentials/configuration. Not retryable."""


class TemplateError(ConfigurationError):
    """A prompt template is missing or lacks one of its two sections."""


class ProviderError(WordLensError):
    """
    Upstream HTTP, transport or parse failure of a content provider.

    The orchestrator treats it as retryable by moving on to the next
    provider in the chain.
    """

    def __init__(self, provider: str, message: str, status: Optional[int] = None):
        self.provider = provider
        self.message = message
        self.status = status
        prefix = f"{provider} error {status}" if status is not None else f"{provider} error"
        super().__init__(f"{prefix}: {message}")


class IntegrationError(WordLensError):
    """The flashcard bridge is unreachable or rejected a request."""


class StoreError(WordLensError):
    """Local persistence failure."""
