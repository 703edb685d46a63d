"""Providers module - one adapter per external service and capability."""

from .audio_cache import AudioCache
from .base import (
    NO_CREDENTIALS,
    BaseProvider,
    Credentials,
    HttpResponse,
    ImageProvider,
    SpeechProvider,
    TextGenProvider,
)
from .images import DuckDuckGoImageProvider, GoogleImageProvider, PixabayImageProvider
from .placeholders import PlaceholderImageProvider, TemplatePhraseProvider, WebSpeechFallback
from .registry import ProviderRegistry
from .speech import CachedSpeechProvider, EdgeSpeechProvider, GoogleSpeechProvider, OpenAISpeechProvider
from .text import OpenAITextProvider, parse_phrases

__all__ = [
    'AudioCache',
    'NO_CREDENTIALS',
    'BaseProvider',
    'Credentials',
    'HttpResponse',
    'ImageProvider',
    'SpeechProvider',
    'TextGenProvider',
    'DuckDuckGoImageProvider',
    'GoogleImageProvider',
    'PixabayImageProvider',
    'PlaceholderImageProvider',
    'TemplatePhraseProvider',
    'WebSpeechFallback',
    'ProviderRegistry',
    'CachedSpeechProvider',
    'EdgeSpeechProvider',
    'GoogleSpeechProvider',
    'OpenAISpeechProvider',
    'OpenAITextProvider',
    'parse_phrases',
]
