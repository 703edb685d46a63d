"""WordLens - vocabulary study with images, example phrases and flashcards"""

__version__ = "1.0.0"
__author__ = "WordLens Team"

from .app import VocabularyApp
from .config import Config, SettingsManager
from .errors import (
    ConfigurationError,
    IntegrationError,
    ProviderError,
    StoreError,
    TemplateError,
    WordLensError,
)
from .models import AppSettings, ExportCard, StudyResult

__all__ = [
    'VocabularyApp',
    'Config',
    'SettingsManager',
    'ConfigurationError',
    'IntegrationError',
    'ProviderError',
    'StoreError',
    'TemplateError',
    'WordLensError',
    'AppSettings',
    'ExportCard',
    'StudyResult',
]
