"""
Search Service - images, phrases and explanations for a word.

Every method degrades instead of failing: images fall back to placeholders,
phrases to templated sentences, and an explanation to None.
"""

import asyncio
import logging
import math
from typing import Dict, List, Optional

from ..config import Config, SettingsManager
from ..models import ExamplePhrase, ImageResult, PaginatedImages, StudyResult
from ..providers import ProviderRegistry
from .orchestration import OrchestrationService
from .repository import SQLiteRepository

logger = logging.getLogger(__name__)


def paginate(images: List[ImageResult], page: int, per_page: int) -> PaginatedImages:
    """
    Wrap a page of images in the pagination envelope.

    Upstream engines do not report a reliable total, so the page count is
    derived from a fixed result ceiling.
    """
    total_pages = min(Config.MAX_PAGES, max(1, math.ceil(Config.MAX_RESULTS / per_page)))
    return PaginatedImages(
        images=images,
        current_page=page,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_previous=page > 1,
    )


class SearchService(OrchestrationService):
    """
    Orchestrates content lookup for a word.

    Usage:
        service = SearchService(settings, registry, repository)
        result = await service.lookup("apple")
    """

    def __init__(
        self,
        settings: SettingsManager,
        registry: ProviderRegistry,
        repository: SQLiteRepository,
    ):
        super().__init__(settings, registry)
        self.repository = repository

    async def search_images(
        self,
        word: str,
        page: int = Config.DEFAULT_PAGE,
        per_page: int = Config.DEFAULT_PER_PAGE,
    ) -> PaginatedImages:
        """
        Search images for a word, one page at a time.

        Args:
            word: Search text
            page: 1-indexed page
            per_page: Number of images per page

        Returns:
            PaginatedImages; placeholder images when no engine succeeds
        """
        page = max(1, int(page))
        per_page = max(1, int(per_page))
        settings = self.settings.get()

        selected = None
        if settings.image_search_provider != "auto":
            selected = self.registry.image(settings.image_search_provider)

        chain = self.build_chain(
            settings,
            self.registry.image_providers(),
            selected=selected,
            fallback=self.registry.image_fallback,
        )
        images = await self.run_chain(
            "images",
            chain,
            settings,
            lambda provider, creds: provider.search(word, creds, page, per_page),
        )
        return paginate(images or [], page, per_page)

    async def generate_phrases(self, word: str) -> List[ExamplePhrase]:
        """Example phrases, one per category, in the preferred language."""
        settings = self.settings.get()
        chain = self.build_chain(
            settings,
            self.registry.text_providers(),
            fallback=self.registry.text_fallback,
        )
        phrases = await self.run_chain(
            "phrases",
            chain,
            settings,
            lambda provider, creds: provider.generate_phrases(
                word, settings.preferred_language, settings.explanation_language, creds
            ),
        )
        return phrases or []

    async def generate_explanation(self, word: str) -> Optional[str]:
        """An explanation of the word, or None when no provider can produce one."""
        settings = self.settings.get()
        chain = self.build_chain(settings, self.registry.text_providers())
        return await self.run_chain(
            "explanation",
            chain,
            settings,
            lambda provider, creds: provider.generate_explanation(
                word, settings.preferred_language, settings.explanation_language, creds
            ),
        )

    async def validate_api_keys(self) -> Dict[str, bool]:
        """Check the configured credentials with one minimal request per provider."""
        settings = self.settings.get()
        providers = {
            "openai": self.registry.text("openai"),
            "google": self.registry.image("google"),
            "pixabay": self.registry.image("pixabay"),
        }

        async def check(provider) -> bool:
            if provider is None:
                return False
            return await provider.validate(provider.credentials_from(settings))

        results = await asyncio.gather(*(check(p) for p in providers.values()), return_exceptions=True)

        validity = {}
        for name, result in zip(providers, results):
            if isinstance(result, Exception):
                logger.warning("Credential validation for %s failed: %s", name, result)
                result = False
            validity[name] = bool(result)
        return validity

    async def lookup(self, word: str, per_page: int = Config.DEFAULT_PER_PAGE) -> StudyResult:
        """
        Record the search and fetch images, phrases and explanation concurrently.

        A fetch that raises contributes its empty default; it never cancels
        the other two.
        """
        word = word.strip()
        self.repository.add_search(word)

        tasks = [
            self.search_images(word, Config.DEFAULT_PAGE, per_page),
            self.generate_phrases(word),
            self.generate_explanation(word),
        ]
        images, phrases, explanation = await asyncio.gather(*tasks, return_exceptions=True)

        for name, outcome in (("images", images), ("phrases", phrases), ("explanation", explanation)):
            if isinstance(outcome, Exception):
                logger.error("Lookup of %r: %s fetch failed: %s", word, name, outcome)

        return StudyResult(
            word=word,
            explanation=explanation if isinstance(explanation, str) else None,
            images=images.images if isinstance(images, PaginatedImages) else [],
            phrases=phrases if isinstance(phrases, list) else [],
        )
