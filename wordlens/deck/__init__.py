"""Deck module - flashcard export and bridges."""

from .apkg import ApkgBridge
from .bridge import AnkiConnectBridge, FlashcardBridge
from .exporter import (
    FIELD_SEPARATOR,
    FlashcardExporter,
    build_export_cards,
    build_fields,
    format_default,
    format_with_markup,
    resolve_source,
)

__all__ = [
    'ApkgBridge',
    'AnkiConnectBridge',
    'FlashcardBridge',
    'FIELD_SEPARATOR',
    'FlashcardExporter',
    'build_export_cards',
    'build_fields',
    'format_default',
    'format_with_markup',
    'resolve_source',
]
