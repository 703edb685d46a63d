"""Data models for WordLens."""

from .card import (
    ExamplePhrase,
    ExportCard,
    ExportSummary,
    ImageResult,
    PaginatedImages,
    PhraseCategory,
    SearchRecord,
    SourceField,
    StudyResult,
)
from .settings import (
    AnkiSettings,
    AppSettings,
    FieldMapping,
    VoiceSettings,
    default_field_mappings,
)

__all__ = [
    'ExamplePhrase',
    'ExportCard',
    'ExportSummary',
    'ImageResult',
    'PaginatedImages',
    'PhraseCategory',
    'SearchRecord',
    'SourceField',
    'StudyResult',
    'AnkiSettings',
    'AppSettings',
    'FieldMapping',
    'VoiceSettings',
    'default_field_mappings',
]
