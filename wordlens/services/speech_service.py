"""Speech Service - spoken audio for phrases and words."""

import logging
from typing import List, Optional

from ..config import Config, SettingsManager
from ..providers import AudioCache, ProviderRegistry
from .orchestration import OrchestrationService

logger = logging.getLogger(__name__)


class SpeechService(OrchestrationService):
    """
    Orchestrates speech synthesis.

    With the "web" voice provider the caller is told to use on-device speech
    straight away. Otherwise the selected provider is tried first, then any
    other credentialed provider, then the on-device sentinel.
    """

    def __init__(self, settings: SettingsManager, registry: ProviderRegistry, audio_cache: AudioCache):
        super().__init__(settings, registry)
        self.audio_cache = audio_cache

    async def generate_audio(self, text: str, language: Optional[str] = None) -> str:
        """
        Audio reference for the text.

        Returns:
            A data URL, or Config.WEB_SPEECH_SENTINEL
        """
        settings = self.settings.get()
        voice_settings = settings.voice_settings
        language = language or voice_settings.language

        if voice_settings.provider == "web":
            return Config.WEB_SPEECH_SENTINEL

        selected = self.registry.speech(voice_settings.provider)
        chain = self.build_chain(
            settings,
            self.registry.speech_providers(),
            selected=selected,
            fallback=self.registry.speech_fallback,
        )

        # Voice names are provider specific
        def attempt(provider, creds):
            voice = voice_settings.voice if provider is selected else None
            return provider.synthesize(text, language, voice, creds)

        reference = await self.run_chain("audio", chain, settings, attempt)
        return reference or Config.WEB_SPEECH_SENTINEL

    async def get_available_voices(self, language: Optional[str] = None) -> List[str]:
        """Voices of the selected speech provider."""
        settings = self.settings.get()
        provider = self.registry.speech(settings.voice_settings.provider)
        if provider is None:
            return ["default"]
        language = language or settings.voice_settings.language
        return await provider.get_available_voices(language, provider.credentials_from(settings))

    def cleanup_old_files(self, max_age: int = Config.AUDIO_CACHE_MAX_AGE) -> int:
        """Housekeeping for the audio cache; run on demand only."""
        return self.audio_cache.cleanup_old_files(max_age)
