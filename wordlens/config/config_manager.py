"""Settings resolver: hardcoded defaults merged with stored overrides."""

import copy
import logging
import os
from typing import Any, Dict, Mapping, Optional, Union

from ..models import AppSettings
from ..models.settings import CREDENTIAL_KEYS

logger = logging.getLogger(__name__)

# Environment variable -> settings key
ENV_CREDENTIALS: Dict[str, str] = {
    "GOOGLE_API_KEY": "googleApiKey",
    "GOOGLE_SEARCH_ENGINE_ID": "googleSearchEngineId",
    "OPENAI_API_KEY": "openaiApiKey",
    "CLAUDE_API_KEY": "claudeApiKey",
    "PIXABAY_API_KEY": "pixabayApiKey",
}

KNOWN_KEYS = frozenset(AppSettings().to_dict()) | frozenset(CREDENTIAL_KEYS)
OBJECT_KEYS = ("voiceSettings", "anki")


def merge_settings(defaults: Dict[str, Any], stored: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Merge stored overrides over defaults.

    Top-level keys are replaced key by key. Object-valued keys are merged
    one level deep so a partial stored object never drops a default field.
    """
    merged = copy.deepcopy(defaults)
    for key, value in stored.items():
        base = merged.get(key)
        if isinstance(base, dict) and isinstance(value, dict):
            base.update(copy.deepcopy(value))
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class SettingsManager:
    """
    Manages application settings on top of the local store.

    Reading before any save yields fully populated defaults. Credentials
    found in the environment (or a .env file) are part of the default
    layer, so a stored value always wins over them.

    Usage:
        settings = SettingsManager(repository)
        current = settings.get()
        settings.save({"preferredLanguage": "es"})
    """

    def __init__(self, repository, environ: Optional[Mapping[str, str]] = None) -> None:
        """
        Initialize the settings manager.

        Args:
            repository: Store exposing get_settings()/save_settings()
            environ: Environment mapping (defaults to os.environ)
        """
        self._repository = repository
        self._environ = os.environ if environ is None else environ

    def defaults(self) -> Dict[str, Any]:
        """Hardcoded defaults plus credentials from the environment."""
        data = AppSettings().to_dict()
        for env_key, settings_key in ENV_CREDENTIALS.items():
            value = self._environ.get(env_key)
            if value:
                data[settings_key] = value
        return data

    def get_raw(self) -> Dict[str, Any]:
        """Merged settings as a camelCase dictionary."""
        return merge_settings(self.defaults(), self._repository.get_settings())

    def get(self) -> AppSettings:
        """Effective, typed settings. Never fails for missing keys."""
        return AppSettings.from_dict(self.get_raw())

    def save(self, settings: Union[AppSettings, Mapping[str, Any]]) -> None:
        """
        Persist settings.

        A mapping is treated as a partial update: only its keys are written.
        A full AppSettings object writes every key it holds.
        """
        values = settings.to_dict() if isinstance(settings, AppSettings) else dict(settings)
        unknown = [key for key in values if key not in KNOWN_KEYS]
        for key in unknown:
            logger.warning("Ignoring unknown settings key %r", key)
            values.pop(key)
        for key in OBJECT_KEYS:
            if key in values and not isinstance(values[key], Mapping):
                logger.warning("Ignoring settings key %r: expected an object, got %r", key, values[key])
                values.pop(key)
        if values:
            self._repository.save_settings(values)
