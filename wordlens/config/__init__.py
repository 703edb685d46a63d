"""Configuration module for WordLens."""

from .settings import Config
from .languages import LANGUAGE_NAMES, PHRASE_TEMPLATES, language_name
from .config_manager import SettingsManager, merge_settings

__all__ = [
    'Config',
    'LANGUAGE_NAMES',
    'PHRASE_TEMPLATES',
    'language_name',
    'SettingsManager',
    'merge_settings',
]
