"""
Shared fixtures.

Every test gets a fresh SQLite file, an empty credential environment and a
temporary audio cache; nothing reaches the network.
"""

from typing import Dict, List, Optional

import pytest

from wordlens import VocabularyApp
from wordlens.config import SettingsManager
from wordlens.config.config_manager import ENV_CREDENTIALS
from wordlens.deck import FlashcardBridge
from wordlens.errors import IntegrationError
from wordlens.models import ExamplePhrase, ExportCard, ImageResult
from wordlens.prompts import PromptTemplates
from wordlens.providers import AudioCache, ProviderRegistry
from wordlens.services import SQLiteRepository


class FakeBridge(FlashcardBridge):
    """In-memory flashcard bridge recording every call."""

    def __init__(self, fail_words=(), fail_media: bool = False, decks=()):
        self.fail_words = set(fail_words)
        self.fail_media = fail_media
        self.decks: List[str] = list(decks)
        self.notes: List[Dict] = []
        self.media: Dict[str, str] = {}
        self.created_decks: List[str] = []

    async def test_connection(self) -> bool:
        return True

    async def get_deck_names(self) -> List[str]:
        return list(self.decks)

    async def create_deck(self, deck_name: str) -> None:
        self.decks.append(deck_name)
        self.created_decks.append(deck_name)

    async def add_note(self, deck_name, model_name, fields, tags) -> Optional[int]:
        word = tags[-1] if tags else ""
        if word in self.fail_words:
            raise IntegrationError(f"cannot create note for {word}")
        self.notes.append({"deck": deck_name, "model": model_name, "fields": dict(fields), "tags": list(tags)})
        return len(self.notes)

    async def store_media_file(self, filename, data) -> None:
        if self.fail_media:
            raise IntegrationError("media store rejected the file")
        self.media[filename] = data

    async def get_model_names(self) -> List[str]:
        return ["Basic", "Cloze"]

    async def get_model_field_names(self, model_name: str) -> List[str]:
        return {"Basic": ["Front", "Back"], "Cloze": ["Text", "Extra"]}.get(model_name, [])


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove credential variables so defaults never pick up real keys."""
    for name in ENV_CREDENTIALS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def repository(tmp_path) -> SQLiteRepository:
    repo = SQLiteRepository(str(tmp_path / "data" / "test.db"))
    repo.load()
    return repo


@pytest.fixture
def settings_manager(repository) -> SettingsManager:
    return SettingsManager(repository, environ={})


@pytest.fixture
def prompts() -> PromptTemplates:
    return PromptTemplates()


@pytest.fixture
def audio_cache(tmp_path) -> AudioCache:
    return AudioCache(str(tmp_path / "audio"))


@pytest.fixture
def registry(prompts, audio_cache) -> ProviderRegistry:
    return ProviderRegistry.create_default(prompts, audio_cache)


@pytest.fixture
def bridge() -> FakeBridge:
    return FakeBridge()


@pytest.fixture
def app(repository, bridge, audio_cache) -> VocabularyApp:
    return VocabularyApp(repository=repository, bridge=bridge, audio_cache=audio_cache, environ={})


@pytest.fixture
def phrase() -> ExamplePhrase:
    return ExamplePhrase("I ate an apple.", "Comí una manzana.", "Practical/Work")


@pytest.fixture
def image() -> ImageResult:
    return ImageResult("https://img.example/apple.jpg", "https://img.example/apple_t.jpg", "Apple", "img.example")


@pytest.fixture
def card(phrase, image) -> ExportCard:
    return ExportCard(word="apple", explanation="A round fruit.", phrase=phrase, image=image)
