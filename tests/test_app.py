"""Tests for the application facade."""

import base64
from unittest.mock import AsyncMock

import pytest

from wordlens.errors import IntegrationError
from wordlens.models import ExamplePhrase

AUDIO = b"ID3\x03spoken"


@pytest.fixture
def phrases(phrase):
    return [phrase, ExamplePhrase("Apples are red.", "Las manzanas son rojas.", "Descriptive/Aesthetic")]


class TestSelectionExport:
    """Test exporting selected phrases."""

    @pytest.mark.asyncio
    async def test_two_phrases_share_one_image(self, app, bridge, phrases, image):
        summary = await app.create_cards_for_selection("apple", "A fruit.", phrases, [image])

        assert summary.to_dict() == {"succeeded": 2, "failed": 0}
        assert bridge.created_decks == ["WordLens::Vocabulary"]
        for note in bridge.notes:
            assert "apple_t.jpg" in note["fields"]["Back"]
            assert note["model"] == "Basic"
        assert bridge.media == {}

    @pytest.mark.asyncio
    async def test_images_can_be_excluded(self, app, bridge, phrases, image):
        app.save_settings({"anki": {"includeImages": False}})

        await app.create_cards_for_selection("apple", "A fruit.", phrases, [image])

        assert all("<img" not in note["fields"]["Back"] for note in bridge.notes)

    @pytest.mark.asyncio
    async def test_audio_is_synthesized_per_phrase(self, app, bridge, phrases):
        app.save_settings({"openaiApiKey": "sk-test", "voiceSettings": {"provider": "openai"}})
        openai = app.registry.speech("openai")
        openai._request_audio = AsyncMock(side_effect=[AUDIO + b"-1", AUDIO + b"-2"])

        summary = await app.create_cards_for_selection("apple", None, phrases)

        assert summary.succeeded == 2
        assert [c.args[0] for c in openai._request_audio.call_args_list] == [p.text for p in phrases]
        stored = sorted(base64.b64decode(data) for data in bridge.media.values())
        assert stored == [AUDIO + b"-1", AUDIO + b"-2"]

    @pytest.mark.asyncio
    async def test_custom_deck_and_mappings(self, app, bridge, card):
        app.save_settings({
            "anki": {
                "deckName": "Spanish",
                "fieldMappings": [
                    {"sourceField": "word", "ankiField": "Front"},
                    {"sourceField": "phraseTranslation", "ankiField": "Back"},
                ],
            },
        })

        assert await app.anki_create_card(card) is True
        assert bridge.notes[0]["deck"] == "Spanish"
        assert bridge.notes[0]["fields"] == {"Front": "apple", "Back": "Comí una manzana."}

    @pytest.mark.asyncio
    async def test_export_ignores_front_end_flags(self, app, bridge, card):
        app.save_settings({"anki": {"enabled": False, "cardTemplate": "cloze"}})

        assert app.get_settings().anki.card_template == "cloze"
        assert await app.anki_create_card(card) is True
        assert bridge.notes[0]["model"] == "Basic"


class TestBridgeQueries:
    """Test the flashcard bridge queries."""

    @pytest.mark.asyncio
    async def test_models_with_fields(self, app):
        assert await app.anki_get_models() == [
            {"name": "Basic", "fields": ["Front", "Back"]},
            {"name": "Cloze", "fields": ["Text", "Extra"]},
        ]

    @pytest.mark.asyncio
    async def test_bridge_failure_gives_empty_lists(self, app, bridge):
        bridge.get_deck_names = AsyncMock(side_effect=IntegrationError("Anki is not running"))
        bridge.get_model_field_names = AsyncMock(side_effect=IntegrationError("Anki is not running"))

        assert await app.anki_get_decks() == []
        assert await app.anki_get_models() == []
        assert await app.anki_get_model_fields("Basic") == []


class TestSettingsAndHistory:
    """Test the settings and history passthroughs."""

    def test_defaults(self, app):
        settings = app.get_settings()
        assert settings.preferred_language == "en"
        assert settings.voice_settings.provider == "web"
        assert settings.anki.deck_name == "WordLens::Vocabulary"

    def test_partial_save(self, app):
        app.save_settings({"preferredLanguage": "es"})
        settings = app.get_settings()
        assert settings.preferred_language == "es"
        assert settings.explanation_language == "en"

    @pytest.mark.asyncio
    async def test_lookup_records_history(self, app):
        await app.lookup("apple")
        app.toggle_favorite("apple", True)

        assert app.is_favorite("apple") is True
        assert [r.word for r in app.search_history(favorites_only=True)] == ["apple"]

    @pytest.mark.asyncio
    async def test_close(self, app):
        async with app:
            pass
