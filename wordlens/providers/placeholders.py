"""
Synthetic providers used as the last element of every fallback chain.

None of them touch the network and none of them fail, so a lookup always
produces displayable content.
"""

from typing import List

from ..config import Config, PHRASE_TEMPLATES
from ..errors import ConfigurationError
from ..models import ExamplePhrase, ImageResult, PhraseCategory
from .base import ImageProvider, SpeechProvider, TextGenProvider


def _templates_for(language: str) -> List[str]:
    code = (language or "en").split("-")[0].lower()
    return PHRASE_TEMPLATES.get(code, PHRASE_TEMPLATES["en"])


class PlaceholderImageProvider(ImageProvider):
    """Exactly per_page picsum.photos images for the requested page."""

    name = "placeholder"
    REQUIRES_CREDENTIALS = False

    async def search(self, query, credentials, page=Config.DEFAULT_PAGE, per_page=Config.DEFAULT_PER_PAGE):
        start = (page - 1) * per_page
        base = Config.PLACEHOLDER_IMAGE_URL
        return [
            ImageResult(
                url=f"{base}/400/300?random={query}-{i}",
                thumbnail_url=f"{base}/200/150?random={query}-{i}",
                title=f"{query} image {i + 1}",
                source="picsum.photos (placeholder)",
            )
            for i in range(start, start + per_page)
        ]

    async def validate(self, credentials):
        return True


class TemplatePhraseProvider(TextGenProvider):
    """
    Five fixed sentences, one per category, with the word substituted.

    Text comes from the templates of the target language and the
    translation from those of the output language (English when a language
    has no templates).
    """

    name = "templates"
    REQUIRES_CREDENTIALS = False

    async def generate_phrases(self, word, target_language, output_language, credentials):
        texts = _templates_for(target_language)
        translations = _templates_for(output_language)
        return [
            ExamplePhrase(
                text=text.format(word=word),
                translation=translation.format(word=word),
                category=category.value,
            )
            for text, translation, category in zip(texts, translations, PhraseCategory)
        ]

    async def generate_explanation(self, word, target_language, output_language, credentials):
        raise ConfigurationError("No synthetic explanation is available")


class WebSpeechFallback(SpeechProvider):
    """Tells the caller to speak the text with an on-device voice."""

    name = "web"
    REQUIRES_CREDENTIALS = False

    async def synthesize(self, text, language, voice, credentials):
        return Config.WEB_SPEECH_SENTINEL
