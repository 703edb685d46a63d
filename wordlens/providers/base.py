"""Base provider classes, one abstract contract per capability."""

import asyncio
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional

import aiohttp

from ..config import Config
from ..errors import ConfigurationError, ProviderError
from ..models import AppSettings, ExamplePhrase, ImageResult
from ..utils import is_valid_credential


@dataclass(frozen=True)
class Credentials:
    """Credentials a provider needs, pulled out of the settings."""
    api_key: Optional[str] = None
    search_engine_id: Optional[str] = None


NO_CREDENTIALS = Credentials()


@dataclass
class HttpResponse:
    """Fully read HTTP response."""
    status: int
    reason: str
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.body.decode("utf-8"))


class BaseProvider(ABC):
    """
    Abstract base class for all providers.

    Provides lifecycle management, a lazily created aiohttp session and
    async context manager support. Subclasses that need credentials
    override credentials_from() and set REQUIRES_CREDENTIALS.
    """

    name: str = "base"
    REQUIRES_CREDENTIALS: bool = True
    # Whether the orchestrator may try this provider without the user selecting it
    IN_DEFAULT_ORDER: bool = True

    def __init__(self, timeout: int = Config.HTTP_TIMEOUT):
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()

    def credentials_from(self, settings: AppSettings) -> Credentials:
        """Extract this provider's credentials from the effective settings."""
        return NO_CREDENTIALS

    def is_ready(self, credentials: Credentials) -> bool:
        """True when the credentials are present and valid-shaped."""
        if not self.REQUIRES_CREDENTIALS:
            return True
        return is_valid_credential(credentials.api_key)

    def require_credentials(self, credentials: Credentials) -> None:
        if not self.is_ready(credentials):
            raise ConfigurationError(f"{self.name}: API credentials are missing or malformed")

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create a shared aiohttp session (connection pooling)."""
        async with self._session_lock:
            if self._session is None or self._session.closed:
                self._session = aiohttp.ClientSession(
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                    headers={"User-Agent": Config.USER_AGENT},
                )
            return self._session

    async def _request(self, method: str, url: str, **kwargs) -> HttpResponse:
        """
        Perform one HTTP request and read the whole body.

        Transport failures and timeouts are raised as ProviderError; HTTP
        error statuses are returned for the caller to interpret.
        """
        session = await self._get_session()
        try:
            async with session.request(method, url, **kwargs) as response:
                body = await response.read()
                return HttpResponse(response.status, response.reason or "", body)
        except asyncio.TimeoutError as e:
            raise ProviderError(self.name, f"request timed out after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise ProviderError(self.name, f"network error: {e}") from e

    def _parse_json(self, response: HttpResponse) -> Any:
        try:
            return response.json()
        except (ValueError, UnicodeDecodeError) as e:
            raise ProviderError(self.name, f"invalid JSON response: {e}", response.status) from e

    async def close(self) -> None:
        """Close the aiohttp session."""
        async with self._session_lock:
            if self._session and not self._session.closed:
                await self._session.close()
            self._session = None

    async def __aenter__(self) -> "BaseProvider":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - ensure resources are closed."""
        await self.close()


class ImageProvider(BaseProvider):
    """Image search capability."""

    @abstractmethod
    async def search(
        self,
        query: str,
        credentials: Credentials,
        page: int = Config.DEFAULT_PAGE,
        per_page: int = Config.DEFAULT_PER_PAGE,
    ) -> List[ImageResult]:
        """
        Search images for a query.

        Args:
            query: Search text
            credentials: Provider credentials
            page: 1-indexed page number
            per_page: Results per page; offset is (page - 1) * per_page

        Raises:
            ConfigurationError: Credentials missing or malformed
            ProviderError: Upstream failure
        """

    async def validate(self, credentials: Credentials) -> bool:
        """Issue a minimal request to check the credentials."""
        try:
            return bool(await self.search("test", credentials, 1, 1))
        except (ConfigurationError, ProviderError):
            return False


class TextGenProvider(BaseProvider):
    """Phrase and explanation generation capability."""

    @abstractmethod
    async def generate_phrases(
        self,
        word: str,
        target_language: str,
        output_language: str,
        credentials: Credentials,
    ) -> List[ExamplePhrase]:
        """Generate one example phrase per category (at least one)."""

    @abstractmethod
    async def generate_explanation(
        self,
        word: str,
        target_language: str,
        output_language: str,
        credentials: Credentials,
    ) -> str:
        """Generate a non-empty explanation."""

    async def validate(self, credentials: Credentials) -> bool:
        return False


class SpeechProvider(BaseProvider):
    """Speech synthesis capability."""

    @abstractmethod
    async def synthesize(
        self,
        text: str,
        language: str,
        voice: Optional[str],
        credentials: Credentials,
    ) -> str:
        """Return an audio reference for the spoken text."""

    async def get_available_voices(self, language: str, credentials: Credentials) -> List[str]:
        return ["default"]
