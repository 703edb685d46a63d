"""
VocabularyApp - composition root and request surface.

Wires the store, settings, prompt templates, providers, orchestration
services and the flashcard bridge together, and exposes one coroutine or
method per request the user interface can make.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .config import Config, SettingsManager
from .deck import AnkiConnectBridge, FlashcardBridge, FlashcardExporter, build_export_cards
from .errors import IntegrationError
from .models import (
    AppSettings,
    ExamplePhrase,
    ExportCard,
    ExportSummary,
    FieldMapping,
    ImageResult,
    PaginatedImages,
    SearchRecord,
    StudyResult,
)
from .prompts import PromptTemplates
from .providers import AudioCache, ProviderRegistry
from .services import SearchService, SpeechService, SQLiteRepository

logger = logging.getLogger(__name__)


class VocabularyApp:
    """
    Application facade.

    Usage:
        async with VocabularyApp() as app:
            result = await app.lookup("apple")
            await app.create_cards_for_selection(result.word, result.explanation, result.phrases[:2])
    """

    def __init__(
        self,
        repository: Optional[SQLiteRepository] = None,
        registry: Optional[ProviderRegistry] = None,
        bridge: Optional[FlashcardBridge] = None,
        prompts: Optional[PromptTemplates] = None,
        audio_cache: Optional[AudioCache] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Build every component.

        Args:
            repository: Local store (defaults to the SQLite file under WORDLENS_HOME)
            registry: Providers (defaults to every built-in provider)
            bridge: Flashcard bridge (defaults to AnkiConnect)
            prompts: Prompt templates; all built-in templates are preloaded
            audio_cache: Speech cache (defaults to Config.AUDIO_CACHE_DIR)
            environ: Environment credentials are read from (defaults to os.environ)

        Raises:
            TemplateError: A bundled prompt template is missing or malformed
            StoreError: The database cannot be opened
        """
        self.repository = repository or SQLiteRepository()
        self.repository.load()
        self.settings = SettingsManager(self.repository, environ)

        self.prompts = prompts or PromptTemplates()
        self.prompts.preload()

        self.audio_cache = audio_cache or AudioCache()
        self.registry = registry or ProviderRegistry.create_default(self.prompts, self.audio_cache)

        self.search = SearchService(self.settings, self.registry, self.repository)
        self.speech = SpeechService(self.settings, self.registry, self.audio_cache)

        self.bridge = bridge or AnkiConnectBridge()
        self.exporter = FlashcardExporter(self.bridge)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def search_history(self, favorites_only: bool = False) -> List[SearchRecord]:
        return self.repository.get_search_history(favorites_only)

    def add_search(self, word: str) -> None:
        self.repository.add_search(word)

    def toggle_favorite(self, word: str, is_favorite: bool) -> None:
        self.repository.toggle_favorite(word, is_favorite)

    def is_favorite(self, word: str) -> bool:
        return self.repository.is_favorite(word)

    def export_history(self, csv_path: str, favorites_only: bool = False) -> int:
        return self.repository.export_history_csv(csv_path, favorites_only)

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    async def lookup(self, word: str) -> StudyResult:
        return await self.search.lookup(word)

    async def search_images(
        self,
        word: str,
        page: int = Config.DEFAULT_PAGE,
        per_page: int = Config.DEFAULT_PER_PAGE,
    ) -> PaginatedImages:
        return await self.search.search_images(word, page, per_page)

    async def generate_phrases(self, word: str) -> List[ExamplePhrase]:
        return await self.search.generate_phrases(word)

    async def generate_explanation(self, word: str) -> Optional[str]:
        return await self.search.generate_explanation(word)

    async def generate_audio(self, text: str, language: Optional[str] = None) -> str:
        return await self.speech.generate_audio(text, language)

    async def get_available_voices(self, language: Optional[str] = None) -> List[str]:
        return await self.speech.get_available_voices(language)

    def cleanup_audio_cache(self, max_age: int = Config.AUDIO_CACHE_MAX_AGE) -> int:
        return self.speech.cleanup_old_files(max_age)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get_settings(self) -> AppSettings:
        return self.settings.get()

    def save_settings(self, settings: Union[AppSettings, Mapping[str, Any]]) -> None:
        self.settings.save(settings)

    async def validate_api_keys(self) -> Dict[str, bool]:
        return await self.search.validate_api_keys()

    # ------------------------------------------------------------------
    # Flashcards
    # ------------------------------------------------------------------

    async def anki_test_connection(self) -> bool:
        return await self.bridge.test_connection()

    async def anki_get_decks(self) -> List[str]:
        try:
            return await self.bridge.get_deck_names()
        except IntegrationError as e:
            logger.warning("Failed to get deck names: %s", e)
            return []

    async def anki_get_models(self) -> List[Dict[str, Any]]:
        try:
            return await self.bridge.get_models_with_fields()
        except IntegrationError as e:
            logger.warning("Failed to get models: %s", e)
            return []

    async def anki_get_model_fields(self, model_name: str) -> List[str]:
        try:
            return await self.bridge.get_model_field_names(model_name)
        except IntegrationError as e:
            logger.warning("Failed to get fields of model %s: %s", model_name, e)
            return []

    def _export_target(
        self,
        deck_name: Optional[str],
        model_name: Optional[str],
        field_mappings: Optional[Sequence[FieldMapping]],
    ):
        anki = self.settings.get().anki
        mappings = field_mappings if field_mappings is not None else anki.field_mappings
        return deck_name or anki.deck_name, model_name or anki.model_name or "Basic", mappings

    async def anki_create_card(
        self,
        card: ExportCard,
        deck_name: Optional[str] = None,
        model_name: Optional[str] = None,
        field_mappings: Optional[Sequence[FieldMapping]] = None,
    ) -> bool:
        deck, model, mappings = self._export_target(deck_name, model_name, field_mappings)
        return await self.exporter.export_card(card, deck, model, mappings)

    async def anki_create_cards(
        self,
        cards: Sequence[ExportCard],
        deck_name: Optional[str] = None,
        model_name: Optional[str] = None,
        field_mappings: Optional[Sequence[FieldMapping]] = None,
    ) -> ExportSummary:
        deck, model, mappings = self._export_target(deck_name, model_name, field_mappings)
        return await self.exporter.export_many(cards, deck, model, mappings)

    async def create_cards_for_selection(
        self,
        word: str,
        explanation: Optional[str],
        phrases: Sequence[ExamplePhrase],
        images: Sequence[ImageResult] = (),
    ) -> ExportSummary:
        """
        Export the phrases the user selected, one card each.

        Images are assigned round-robin when the settings include images;
        each phrase is spoken when they include audio.
        """
        anki = self.settings.get().anki
        cards = build_export_cards(word, explanation, phrases, images, anki.include_images)

        if anki.include_audio:
            for card in cards:
                reference = await self.speech.generate_audio(card.phrase.text)
                if reference != Config.WEB_SPEECH_SENTINEL:
                    card.audio_reference = reference

        return await self.anki_create_cards(cards)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close provider sessions and the bridge."""
        await self.registry.close()
        await self.bridge.close()

    async def __aenter__(self) -> "VocabularyApp":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
