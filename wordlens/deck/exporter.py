"""
Flashcard export - field mapping, markup and batch submission.

build_fields() turns an ExportCard into named note fields using the user's
field mappings. FlashcardExporter submits cards to a bridge one at a time
and counts successes and failures.
"""

import html
import logging
from typing import Dict, List, Optional, Sequence

from ..config import Config
from ..errors import IntegrationError
from ..models import ExamplePhrase, ExportCard, ExportSummary, FieldMapping, ImageResult, SourceField
from ..utils import content_hash, present_or_none, strip_data_url
from .bridge import FlashcardBridge

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = " | "
TAGS = ("wordlens", "vocabulary")

# Inline styles of the decorated fields
WORD_STYLE = "color: #2563eb; margin: 16px 0; font-size: 2rem; font-weight: bold;"
EXPLANATION_BOX_STYLE = (
    "background: #f8fafc; border-left: 4px solid #3b82f6; padding: 16px; margin: 16px 0; border-radius: 4px;"
)
PHRASE_BOX_STYLE = (
    "background: #f0f9ff; border-left: 4px solid #0ea5e9; padding: 16px; margin: 16px 0; border-radius: 4px;"
)
PHRASE_TEXT_STYLE = "margin: 0 0 8px 0; font-weight: 500; color: #1e293b;"
TRANSLATION_STYLE = "margin: 0; font-style: italic; color: #64748b;"
CATEGORY_STYLE = (
    "display: inline-block; background: #dbeafe; color: #1e40af; padding: 4px 8px; "
    "border-radius: 12px; font-size: 0.75rem; margin-top: 8px;"
)
IMAGE_STYLE = "max-width: 300px; height: auto; border-radius: 8px; margin-bottom: 16px;"
AUDIO_STYLE = "width: 100%; margin-top: 16px;"


def resolve_source(card: ExportCard, source_field: SourceField) -> Optional[str]:
    """Value of one logical field of the card, or None when absent."""
    if source_field is SourceField.WORD:
        value = card.word
    elif source_field is SourceField.EXPLANATION:
        value = card.explanation
    elif source_field is SourceField.PHRASE_TEXT:
        value = card.phrase.text
    elif source_field is SourceField.PHRASE_TRANSLATION:
        value = card.phrase.translation
    elif source_field is SourceField.PHRASE_CATEGORY:
        value = card.phrase.category
    elif source_field is SourceField.IMAGE:
        value = card.image.thumbnail_url if card.image else None
    elif source_field is SourceField.AUDIO:
        value = card.audio_reference
    else:
        value = None
    return present_or_none(value)


def _image_tag(src: str, alt: str) -> str:
    return f'<img src="{html.escape(src, quote=True)}" alt="{html.escape(alt, quote=True)}" style="{IMAGE_STYLE}">'


def _audio_tag(src: str) -> str:
    return (
        f'<audio controls style="{AUDIO_STYLE}"><source src="{html.escape(src, quote=True)}" type="audio/mpeg">'
        "Your browser does not support the audio element.</audio>"
    )


def format_with_markup(content: str, source_field: SourceField) -> str:
    """Wrap a field value in the decoration for its kind."""
    if source_field is SourceField.WORD:
        return f'<h2 style="{WORD_STYLE}">{content}</h2>'
    if source_field is SourceField.EXPLANATION:
        return (
            f'<div style="{EXPLANATION_BOX_STYLE}">'
            '<h3 style="margin: 0 0 8px 0; color: #1e40af;">Explanation</h3>'
            f'<p style="margin: 0; color: #374151;">{content}</p>'
            "</div>"
        )
    if source_field is SourceField.PHRASE_TEXT:
        return f'<p style="{PHRASE_TEXT_STYLE}">{content}</p>'
    if source_field is SourceField.PHRASE_TRANSLATION:
        return f'<p style="{TRANSLATION_STYLE}">{content}</p>'
    if source_field is SourceField.PHRASE_CATEGORY:
        return f'<span style="{CATEGORY_STYLE}">{content}</span>'
    if source_field is SourceField.IMAGE:
        return _image_tag(content, "Word illustration")
    if source_field is SourceField.AUDIO:
        return _audio_tag(content)
    return content


def build_fields(card: ExportCard, mappings: Sequence[FieldMapping]) -> Dict[str, str]:
    """
    Map a card onto named output fields.

    Values of mappings sharing an output field are joined with " | " in
    mapping order. Absent values contribute nothing, and an output field
    without contributions is left out.
    """
    fields: Dict[str, str] = {}
    for mapping in mappings:
        content = resolve_source(card, mapping.source_field)
        if content is None:
            continue
        if mapping.include_markup:
            content = format_with_markup(content, mapping.source_field)

        if mapping.output_field in fields:
            fields[mapping.output_field] += FIELD_SEPARATOR + content
        else:
            fields[mapping.output_field] = content
    return fields


def format_default(card: ExportCard) -> Dict[str, str]:
    """Fixed Front/Back layout used when no field mappings are configured."""
    image_html = _image_tag(card.image.thumbnail_url, card.word) if card.image else ""
    audio_html = _audio_tag(card.audio_reference) if present_or_none(card.audio_reference) else ""
    word_html = f'<h2 style="{WORD_STYLE}">{card.word}</h2>'

    front = (
        '<div style="text-align: center; font-family: system-ui, -apple-system, sans-serif;">'
        f"{image_html}{word_html}"
        "</div>"
    )

    explanation_html = ""
    if present_or_none(card.explanation):
        explanation_html = format_with_markup(card.explanation, SourceField.EXPLANATION)

    phrase_html = (
        f'<div style="{PHRASE_BOX_STYLE}">'
        '<h3 style="margin: 0 0 8px 0; color: #0369a1;">Example Phrase</h3>'
        f"{format_with_markup(card.phrase.text, SourceField.PHRASE_TEXT)}"
        f"{format_with_markup(card.phrase.translation, SourceField.PHRASE_TRANSLATION)}"
        f"{format_with_markup(card.phrase.category, SourceField.PHRASE_CATEGORY)}"
        "</div>"
    )

    back = (
        '<div style="font-family: system-ui, -apple-system, sans-serif; line-height: 1.6;">'
        f"{image_html}{word_html}{explanation_html}{phrase_html}{audio_html}"
        "</div>"
    )
    return {"Front": front, "Back": back}


def build_export_cards(
    word: str,
    explanation: Optional[str],
    phrases: Sequence[ExamplePhrase],
    images: Sequence[ImageResult] = (),
    include_images: bool = True,
) -> List[ExportCard]:
    """
    One card per selected phrase.

    Selected images are cycled round-robin over the phrases; a missing
    explanation becomes a short study prompt.
    """
    explanation = present_or_none(explanation) or f"Study word: {word}"
    cards = []
    for i, phrase in enumerate(phrases):
        image = images[i % len(images)] if include_images and images else None
        cards.append(ExportCard(word=word, explanation=explanation, phrase=phrase, image=image))
    return cards


class FlashcardExporter:
    """
    Submits export cards to a flashcard bridge.

    Usage:
        exporter = FlashcardExporter(AnkiConnectBridge())
        summary = await exporter.export_many(cards, "Vocabulary", "Basic", mappings)
    """

    def __init__(self, bridge: FlashcardBridge):
        self.bridge = bridge

    async def ensure_deck(self, deck_name: str) -> None:
        if deck_name not in await self.bridge.get_deck_names():
            logger.info("Creating deck %s", deck_name)
            await self.bridge.create_deck(deck_name)

    async def export_card(
        self,
        card: ExportCard,
        deck_name: str,
        model_name: str = "Basic",
        mappings: Optional[Sequence[FieldMapping]] = None,
    ) -> bool:
        """
        Add one card to the bridge.

        Returns:
            True if the note was added; attaching audio may still have failed
        """
        try:
            await self.ensure_deck(deck_name)
            fields = build_fields(card, mappings) if mappings else format_default(card)
            tags = [*TAGS, card.word.lower()]
            note_id = await self.bridge.add_note(deck_name, model_name, fields, tags)
        except IntegrationError as e:
            logger.warning("Failed to add card for %r: %s", card.word, e)
            return False
        except Exception:
            logger.exception("Unexpected error adding card for %r", card.word)
            return False

        audio = present_or_none(card.audio_reference)
        if audio and audio != Config.WEB_SPEECH_SENTINEL and note_id:
            await self._attach_audio(card.word, audio)
        return True

    @staticmethod
    def audio_filename(word: str, payload: str) -> str:
        """Media file name, unique per distinct recording of the word."""
        return f"{word}_audio_{content_hash(payload)[:12]}.mp3"

    async def _attach_audio(self, word: str, audio_reference: str) -> None:
        payload = strip_data_url(audio_reference)
        try:
            await self.bridge.store_media_file(self.audio_filename(word, payload), payload)
        except IntegrationError as e:
            logger.warning("Failed to attach audio for %r: %s", word, e)

    async def export_many(
        self,
        cards: Sequence[ExportCard],
        deck_name: str,
        model_name: str = "Basic",
        mappings: Optional[Sequence[FieldMapping]] = None,
    ) -> ExportSummary:
        """Export cards one after another; one failure never stops the batch."""
        summary = ExportSummary()
        for card in cards:
            if await self.export_card(card, deck_name, model_name, mappings):
                summary.succeeded += 1
            else:
                summary.failed += 1

        logger.info("Exported %d card(s), %d failed", summary.succeeded, summary.failed)
        return summary
