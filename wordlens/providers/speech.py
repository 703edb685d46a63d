"""
Speech synthesis providers.

Every provider returns a ``data:audio/mp3;base64,...`` reference and keeps
the raw audio in the shared AudioCache, so repeating a request with the
same inputs never reaches the upstream service twice.
"""

import base64
import logging
import os
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
import aiohttp
import edge_tts
from edge_tts.exceptions import EdgeTTSException

from ..config import Config
from ..config.languages import EDGE_VOICES, OPENAI_AVAILABLE_VOICES, OPENAI_VOICES
from ..errors import ProviderError
from ..models import AppSettings
from ..utils import audio_data_url, is_present, mask_secret
from .audio_cache import AudioCache
from .base import NO_CREDENTIALS, Credentials, SpeechProvider

logger = logging.getLogger(__name__)


class CachedSpeechProvider(SpeechProvider):
    """
    Cache-first synthesis.

    Subclasses define cache_key() and _request_audio(); synthesize() only
    calls _request_audio() when the cache has no entry for the key.
    """

    CACHE_PREFIX = ""

    def __init__(self, cache: AudioCache, timeout: int = Config.HTTP_TIMEOUT):
        super().__init__(timeout=timeout)
        self.cache = cache

    def cache_key(self, text: str, language: str, voice: Optional[str]) -> tuple:
        return (text, language, voice or "default")

    async def _request_audio(
        self,
        text: str,
        language: str,
        voice: Optional[str],
        credentials: Credentials,
    ) -> bytes:
        raise NotImplementedError

    async def synthesize(self, text, language, voice, credentials):
        if not is_present(text) or not text.strip():
            raise ProviderError(self.name, "text is required for speech synthesis")
        self.require_credentials(credentials)

        path = self.cache.path_for(self.CACHE_PREFIX, *self.cache_key(text, language, voice))
        audio = await self.cache.read(path)
        if audio is not None:
            logger.debug("%s: using cached audio %s", self.name, path.name)
            return audio_data_url(audio)

        audio = await self._request_audio(text, language, voice, credentials)
        if not audio:
            raise ProviderError(self.name, "received empty audio data")

        await self.cache.write(path, audio)
        logger.info("%s: cached %d bytes of audio as %s", self.name, len(audio), path.name)
        return audio_data_url(audio)

    def cleanup_old_files(self, max_age: int = Config.AUDIO_CACHE_MAX_AGE) -> int:
        """Remove this provider's cache entries older than max_age seconds."""
        return self.cache.cleanup_old_files(max_age, prefix=self.CACHE_PREFIX or None)


class GoogleSpeechProvider(CachedSpeechProvider):
    """Google Cloud Text-to-Speech."""

    name = "google"
    CACHE_PREFIX = "google_"

    def credentials_from(self, settings: AppSettings) -> Credentials:
        return Credentials(settings.google_api_key)

    async def _request_audio(self, text, language, voice, credentials):
        voice_params = {"languageCode": language, "ssmlGender": "NEUTRAL"}
        if voice and voice != "default":
            voice_params["name"] = voice

        payload = {
            "input": {"text": text},
            "voice": voice_params,
            "audioConfig": {
                "audioEncoding": "MP3",
                "speakingRate": 1.0,
                "pitch": 0.0,
                "volumeGainDb": 0.0,
            },
        }
        response = await self._request(
            "POST",
            Config.GOOGLE_TTS_URL,
            params={"key": credentials.api_key},
            json=payload,
            headers={"Accept": "application/json"},
        )
        if not response.ok:
            raise ProviderError(self.name, mask_secret(response.text()[:200], credentials.api_key),
                                response.status)

        data = self._parse_json(response)
        content = data.get("audioContent") if isinstance(data, dict) else None
        if not is_present(content):
            raise ProviderError(self.name, "no audio content received")
        try:
            return base64.b64decode(content)
        except ValueError as e:
            raise ProviderError(self.name, f"invalid audio content: {e}") from e

    async def get_available_voices(self, language, credentials):
        if not self.is_ready(credentials):
            return ["default"]
        try:
            response = await self._request(
                "GET",
                Config.GOOGLE_VOICES_URL,
                params={"key": credentials.api_key, "languageCode": language},
                headers={"Accept": "application/json"},
            )
            if not response.ok:
                logger.warning("Failed to fetch voices from Google TTS (%s)", response.status)
                return ["default"]
            data = self._parse_json(response)
        except ProviderError as e:
            logger.warning("Failed to fetch voices from Google TTS: %s", e)
            return ["default"]

        voices = [v.get("name") or "default" for v in (data.get("voices") or []) if isinstance(v, dict)]
        return voices or ["default"]


class OpenAISpeechProvider(CachedSpeechProvider):
    """OpenAI text-to-speech (``/audio/speech``)."""

    name = "openai"
    CACHE_PREFIX = "openai_"

    def __init__(
        self,
        cache: AudioCache,
        model: str = Config.OPENAI_TTS_MODEL,
        base_url: str = Config.OPENAI_BASE_URL,
        timeout: int = Config.HTTP_TIMEOUT,
    ):
        super().__init__(cache, timeout=timeout)
        self.model = model
        self.base_url = base_url.rstrip("/")

    def credentials_from(self, settings: AppSettings) -> Credentials:
        return Credentials(settings.openai_api_key)

    @staticmethod
    def voice_for(language: str, voice: Optional[str] = None) -> str:
        if voice in OPENAI_AVAILABLE_VOICES:
            return voice
        return OPENAI_VOICES.get(language, "alloy")

    def cache_key(self, text, language, voice):
        return (text, self.voice_for(language, voice), self.model)

    async def _request_audio(self, text, language, voice, credentials):
        payload = {
            "model": self.model,
            "input": text,
            "voice": self.voice_for(language, voice),
            "response_format": "mp3",
        }
        headers = {
            "Authorization": f"Bearer {credentials.api_key}",
            "Content-Type": "application/json",
        }
        response = await self._request("POST", f"{self.base_url}/audio/speech", json=payload, headers=headers)
        if not response.ok:
            message = response.reason or "request failed"
            try:
                error = response.json().get("error")
                if error:
                    message += f" - {error.get('message', error) if isinstance(error, dict) else error}"
            except (ValueError, AttributeError):
                logger.debug("OpenAI TTS error body is not JSON")
            raise ProviderError(self.name, message, response.status)
        return response.body

    async def get_available_voices(self, language, credentials):
        return list(OPENAI_AVAILABLE_VOICES)


class EdgeSpeechProvider(CachedSpeechProvider):
    """
    Microsoft Edge neural voices through edge-tts.

    Needs no key, but reaches an unofficial endpoint, so it is only used when
    selected explicitly.
    """

    name = "edge"
    CACHE_PREFIX = "edge_"
    REQUIRES_CREDENTIALS = False
    IN_DEFAULT_ORDER = False

    @staticmethod
    def voice_for(language: str, voice: Optional[str] = None) -> str:
        if voice and voice != "default":
            return voice
        return EDGE_VOICES.get(language, EDGE_VOICES["en-US"])

    def cache_key(self, text, language, voice):
        return (text, self.voice_for(language, voice))

    async def _request_audio(self, text, language, voice, credentials=NO_CREDENTIALS):
        temp_path = Path(self.cache.cache_dir) / f"edge-{uuid.uuid4().hex[:8]}.tmp"
        temp_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            communicate = edge_tts.Communicate(text, self.voice_for(language, voice))
            await communicate.save(str(temp_path))
            async with aiofiles.open(temp_path, "rb") as f:
                return await f.read()
        except (EdgeTTSException, aiohttp.ClientError) as e:
            raise ProviderError(self.name, str(e)) from e
        finally:
            if temp_path.exists():
                os.remove(temp_path)

    async def get_available_voices(self, language, credentials):
        try:
            voices = await edge_tts.list_voices()
        except (EdgeTTSException, aiohttp.ClientError) as e:
            logger.warning("Failed to list Edge voices: %s", e)
            return [self.voice_for(language)]
        names = [v["ShortName"] for v in voices if v.get("Locale") == language]
        return names or [self.voice_for(language)]
