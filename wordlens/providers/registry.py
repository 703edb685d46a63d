"""
Provider registry - one ordered set of providers per capability.

Registration order is the default fallback order. Each capability also has
a synthetic fallback that orchestration appends at the end of every chain.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from ..prompts import PromptTemplates
from .audio_cache import AudioCache
from .base import BaseProvider, ImageProvider, SpeechProvider, TextGenProvider
from .images import DuckDuckGoImageProvider, GoogleImageProvider, PixabayImageProvider
from .placeholders import PlaceholderImageProvider, TemplatePhraseProvider, WebSpeechFallback
from .speech import EdgeSpeechProvider, GoogleSpeechProvider, OpenAISpeechProvider
from .text import OpenAITextProvider

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """
    Registry for image, text and speech providers.

    Usage:
        registry = ProviderRegistry.create_default(prompts, AudioCache())
        google = registry.image("google")
    """

    def __init__(
        self,
        image_fallback: Optional[ImageProvider] = None,
        text_fallback: Optional[TextGenProvider] = None,
        speech_fallback: Optional[SpeechProvider] = None,
    ):
        self._images: Dict[str, ImageProvider] = {}
        self._text: Dict[str, TextGenProvider] = {}
        self._speech: Dict[str, SpeechProvider] = {}
        self.image_fallback = image_fallback or PlaceholderImageProvider()
        self.text_fallback = text_fallback or TemplatePhraseProvider()
        self.speech_fallback = speech_fallback or WebSpeechFallback()

    def register_image(self, provider: ImageProvider) -> None:
        self._images[provider.name] = provider

    def register_text(self, provider: TextGenProvider) -> None:
        self._text[provider.name] = provider

    def register_speech(self, provider: SpeechProvider) -> None:
        self._speech[provider.name] = provider

    def image(self, name: str) -> Optional[ImageProvider]:
        return self._images.get(name)

    def text(self, name: str) -> Optional[TextGenProvider]:
        return self._text.get(name)

    def speech(self, name: str) -> Optional[SpeechProvider]:
        return self._speech.get(name)

    def image_providers(self) -> List[ImageProvider]:
        return list(self._images.values())

    def text_providers(self) -> List[TextGenProvider]:
        return list(self._text.values())

    def speech_providers(self) -> List[SpeechProvider]:
        return list(self._speech.values())

    def _all(self) -> List[BaseProvider]:
        providers: List[BaseProvider] = []
        providers.extend(self._images.values())
        providers.extend(self._text.values())
        providers.extend(self._speech.values())
        providers.extend([self.image_fallback, self.text_fallback, self.speech_fallback])
        return providers

    async def close(self) -> None:
        """Close every provider's HTTP session."""
        results = await asyncio.gather(*(p.close() for p in self._all()), return_exceptions=True)
        for provider, result in zip(self._all(), results):
            if isinstance(result, Exception):
                logger.warning("Failed to close provider %s: %s", provider.name, result)

    @classmethod
    def create_default(cls, prompts: PromptTemplates, audio_cache: AudioCache) -> "ProviderRegistry":
        """Build the registry with every built-in provider in default order."""
        registry = cls()

        registry.register_image(GoogleImageProvider())
        registry.register_image(PixabayImageProvider())
        registry.register_image(DuckDuckGoImageProvider())

        registry.register_text(OpenAITextProvider(prompts))

        registry.register_speech(GoogleSpeechProvider(audio_cache))
        registry.register_speech(OpenAISpeechProvider(audio_cache))
        registry.register_speech(EdgeSpeechProvider(audio_cache))

        return registry
