"""
Typed application settings.

Settings live in the store as one JSON value per top-level camelCase key.
`AppSettings.from_dict` is the single boundary where a merged dictionary
is checked and turned into typed objects; consumers never see raw dicts.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .card import SourceField

logger = logging.getLogger(__name__)

IMAGE_PROVIDERS = ("auto", "google", "pixabay", "duckduckgo")
VOICE_PROVIDERS = ("web", "google", "openai", "edge")
CARD_TEMPLATES = ("basic", "cloze")

# camelCase storage key -> dataclass attribute
CREDENTIAL_KEYS: Dict[str, str] = {
    "googleApiKey": "google_api_key",
    "googleSearchEngineId": "google_search_engine_id",
    "openaiApiKey": "openai_api_key",
    "claudeApiKey": "claude_api_key",
    "pixabayApiKey": "pixabay_api_key",
}


def _checked_choice(value: Any, choices: tuple, default: str, name: str) -> str:
    if value in choices:
        return value
    logger.warning("Ignoring invalid %s %r, using %r", name, value, default)
    return default


def _checked_object(value: Any, name: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, dict):
        return value
    logger.warning("Ignoring invalid %s %r, using defaults", name, value)
    return {}


@dataclass
class FieldMapping:
    """Maps one study result attribute onto one output field."""
    source_field: SourceField
    output_field: str
    include_markup: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldMapping":
        source = data.get("sourceField", data.get("dicionarioField"))
        return cls(
            source_field=SourceField(source),
            output_field=str(data.get("outputField", data.get("ankiField", ""))),
            include_markup=bool(data.get("includeMarkup", data.get("includeHtml", False))),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sourceField": self.source_field.value,
            "outputField": self.output_field,
            "includeMarkup": self.include_markup,
        }


def default_field_mappings() -> List[FieldMapping]:
    """Word on the front; explanation, example and image on the back."""
    return [
        FieldMapping(SourceField.WORD, "Front", True),
        FieldMapping(SourceField.EXPLANATION, "Back", True),
        FieldMapping(SourceField.PHRASE_TEXT, "Back", True),
        FieldMapping(SourceField.PHRASE_TRANSLATION, "Back", True),
        FieldMapping(SourceField.IMAGE, "Back", True),
    ]


@dataclass
class VoiceSettings:
    provider: str = "web"
    language: str = "en-US"
    voice: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VoiceSettings":
        return cls(
            provider=_checked_choice(data.get("provider"), VOICE_PROVIDERS, "web", "voice provider"),
            language=str(data.get("language") or "en-US"),
            voice=data.get("voice") or None,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"provider": self.provider, "language": self.language}
        if self.voice:
            data["voice"] = self.voice
        return data


@dataclass
class AnkiSettings:
    """
    Flashcard export settings.

    `enabled` and `card_template` are front-end preferences (whether the card
    creator is shown and which layout it offers). They are stored and
    validated here, but export calls do not read them.
    """
    enabled: bool = False
    deck_name: str = "WordLens::Vocabulary"
    card_template: str = "basic"
    include_audio: bool = True
    include_images: bool = True
    model_name: Optional[str] = "Basic"
    field_mappings: Optional[List[FieldMapping]] = field(default_factory=default_field_mappings)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnkiSettings":
        mappings = data.get("fieldMappings")
        parsed: Optional[List[FieldMapping]] = None
        if mappings is not None and not isinstance(mappings, list):
            logger.warning("Ignoring invalid field mappings %r, using defaults", mappings)
            parsed = default_field_mappings()
        elif mappings is not None:
            parsed = []
            for raw in mappings:
                try:
                    parsed.append(FieldMapping.from_dict(raw))
                except (ValueError, AttributeError) as e:
                    logger.warning("Dropping invalid field mapping %r: %s", raw, e)
        return cls(
            enabled=bool(data.get("enabled", False)),
            deck_name=str(data.get("deckName") or "WordLens::Vocabulary"),
            card_template=_checked_choice(data.get("cardTemplate"), CARD_TEMPLATES, "basic", "card template"),
            include_audio=bool(data.get("includeAudio", True)),
            include_images=bool(data.get("includeImages", True)),
            model_name=data.get("modelName") or None,
            field_mappings=parsed,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "enabled": self.enabled,
            "deckName": self.deck_name,
            "cardTemplate": self.card_template,
            "includeAudio": self.include_audio,
            "includeImages": self.include_images,
        }
        if self.model_name:
            data["modelName"] = self.model_name
        if self.field_mappings is not None:
            data["fieldMappings"] = [m.to_dict() for m in self.field_mappings]
        return data


@dataclass
class AppSettings:
    """Effective settings: every field is always populated."""
    preferred_language: str = "en"
    explanation_language: str = "en"
    image_search_provider: str = "auto"
    voice_settings: VoiceSettings = field(default_factory=VoiceSettings)
    anki: AnkiSettings = field(default_factory=AnkiSettings)
    google_api_key: Optional[str] = None
    google_search_engine_id: Optional[str] = None
    openai_api_key: Optional[str] = None
    claude_api_key: Optional[str] = None
    pixabay_api_key: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppSettings":
        settings = cls(
            preferred_language=str(data.get("preferredLanguage") or "en"),
            explanation_language=str(data.get("explanationLanguage") or "en"),
            image_search_provider=_checked_choice(
                data.get("imageSearchProvider"), IMAGE_PROVIDERS, "auto", "image search provider"
            ),
            voice_settings=VoiceSettings.from_dict(_checked_object(data.get("voiceSettings"), "voice settings")),
            anki=AnkiSettings.from_dict(_checked_object(data.get("anki"), "flashcard settings")),
        )
        for key, attr in CREDENTIAL_KEYS.items():
            value = data.get(key)
            setattr(settings, attr, value if isinstance(value, str) and value else None)
        return settings

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "preferredLanguage": self.preferred_language,
            "explanationLanguage": self.explanation_language,
            "imageSearchProvider": self.image_search_provider,
            "voiceSettings": self.voice_settings.to_dict(),
            "anki": self.anki.to_dict(),
        }
        # A cleared credential is written as "" so saving it overrides a stored key
        for key, attr in CREDENTIAL_KEYS.items():
            data[key] = getattr(self, attr) or ""
        return data
