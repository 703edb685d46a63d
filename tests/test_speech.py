"""Tests for speech providers, the audio cache and speech orchestration."""

import base64
import json
import os
import time
from unittest.mock import AsyncMock

import pytest

from wordlens.errors import ProviderError
from wordlens.providers import (
    NO_CREDENTIALS,
    AudioCache,
    Credentials,
    EdgeSpeechProvider,
    GoogleSpeechProvider,
    HttpResponse,
    OpenAISpeechProvider,
)
from wordlens.services import SpeechService
from wordlens.utils import strip_data_url

AUDIO = b"ID3\x03fake-mp3-bytes"


class TestCachedSynthesis:
    """Test content-addressed caching."""

    @pytest.mark.asyncio
    async def test_identical_requests_call_upstream_once(self, audio_cache):
        provider = OpenAISpeechProvider(audio_cache)
        provider._request_audio = AsyncMock(return_value=AUDIO)

        first = await provider.synthesize("Hello there", "en-US", "nova", Credentials("sk-test"))
        second = await provider.synthesize("Hello there", "en-US", "nova", Credentials("sk-test"))

        assert provider._request_audio.await_count == 1
        assert first == second
        assert first.startswith("data:audio/mp3;base64,")
        assert base64.b64decode(strip_data_url(first)) == AUDIO

    @pytest.mark.asyncio
    async def test_different_text_is_a_new_entry(self, audio_cache):
        provider = OpenAISpeechProvider(audio_cache)
        provider._request_audio = AsyncMock(return_value=AUDIO)

        await provider.synthesize("one", "en-US", None, Credentials("sk-test"))
        await provider.synthesize("two", "en-US", None, Credentials("sk-test"))

        assert provider._request_audio.await_count == 2
        assert len(list(audio_cache.cache_dir.glob("openai_*.mp3"))) == 2

    @pytest.mark.asyncio
    async def test_cache_entries_are_never_overwritten(self, audio_cache):
        path = audio_cache.path_for("google_", "a", "b")
        await audio_cache.write(path, b"first")
        await audio_cache.write(path, b"second")
        assert await audio_cache.read(path) == b"first"

    @pytest.mark.asyncio
    async def test_empty_text_fails(self, audio_cache):
        with pytest.raises(ProviderError):
            await GoogleSpeechProvider(audio_cache).synthesize("  ", "en-US", None, Credentials("key"))

    @pytest.mark.asyncio
    async def test_empty_audio_is_not_cached(self, audio_cache):
        provider = GoogleSpeechProvider(audio_cache)
        provider._request_audio = AsyncMock(return_value=b"")

        with pytest.raises(ProviderError):
            await provider.synthesize("hi", "en-US", None, Credentials("key"))
        assert not list(audio_cache.cache_dir.glob("*.mp3"))


class TestSpeechProviders:
    """Test the upstream request of each provider."""

    @pytest.mark.asyncio
    async def test_google_decodes_audio_content(self, audio_cache):
        provider = GoogleSpeechProvider(audio_cache)
        body = json.dumps({"audioContent": base64.b64encode(AUDIO).decode()}).encode()
        provider._request = AsyncMock(return_value=HttpResponse(200, "OK", body))

        reference = await provider.synthesize("hola", "es-ES", None, Credentials("gkey"))

        assert base64.b64decode(strip_data_url(reference)) == AUDIO
        kwargs = provider._request.call_args.kwargs
        assert kwargs["params"] == {"key": "gkey"}
        assert kwargs["json"]["voice"]["languageCode"] == "es-ES"
        assert "name" not in kwargs["json"]["voice"]

    @pytest.mark.asyncio
    async def test_google_error(self, audio_cache):
        provider = GoogleSpeechProvider(audio_cache)
        provider._request = AsyncMock(return_value=HttpResponse(403, "Forbidden", b"denied for gkey"))

        with pytest.raises(ProviderError) as exc_info:
            await provider.synthesize("hola", "es-ES", None, Credentials("gkey"))
        assert exc_info.value.status == 403
        assert "gkey" not in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_openai_voice_from_language(self, audio_cache):
        provider = OpenAISpeechProvider(audio_cache)
        provider._request = AsyncMock(return_value=HttpResponse(200, "OK", AUDIO))

        await provider.synthesize("bonjour", "fr-FR", None, Credentials("sk-test"))

        payload = provider._request.call_args.kwargs["json"]
        assert payload == {"model": "tts-1", "input": "bonjour", "voice": "nova", "response_format": "mp3"}

    def test_openai_voice_resolution(self):
        assert OpenAISpeechProvider.voice_for("de-DE") == "shimmer"
        assert OpenAISpeechProvider.voice_for("xx-XX") == "alloy"
        assert OpenAISpeechProvider.voice_for("de-DE", "echo") == "echo"

    @pytest.mark.asyncio
    async def test_openai_voices(self, audio_cache):
        voices = await OpenAISpeechProvider(audio_cache).get_available_voices("en-US", NO_CREDENTIALS)
        assert voices == ["alloy", "echo", "fable", "onyx", "nova", "shimmer"]

    @pytest.mark.asyncio
    async def test_google_voices_without_key(self, audio_cache):
        voices = await GoogleSpeechProvider(audio_cache).get_available_voices("en-US", NO_CREDENTIALS)
        assert voices == ["default"]

    def test_edge_needs_no_key_but_is_opt_in(self, audio_cache):
        provider = EdgeSpeechProvider(audio_cache)
        assert provider.is_ready(NO_CREDENTIALS)
        assert provider.IN_DEFAULT_ORDER is False
        assert provider.voice_for("es-ES") == "es-ES-ElviraNeural"


class TestCleanup:
    """Test on-demand cache housekeeping."""

    def test_removes_only_old_files(self, audio_cache):
        audio_cache.cache_dir.mkdir(parents=True)
        old = audio_cache.cache_dir / "openai_old.mp3"
        new = audio_cache.cache_dir / "openai_new.mp3"
        for path in (old, new):
            path.write_bytes(AUDIO)
        ten_days_ago = time.time() - 10 * 24 * 3600
        os.utime(old, (ten_days_ago, ten_days_ago))

        assert audio_cache.cleanup_old_files() == 1
        assert not old.exists()
        assert new.exists()

    def test_provider_cleanup_is_scoped_to_prefix(self, audio_cache):
        audio_cache.cache_dir.mkdir(parents=True)
        ten_days_ago = time.time() - 10 * 24 * 3600
        for name in ("openai_a.mp3", "google_b.mp3"):
            path = audio_cache.cache_dir / name
            path.write_bytes(AUDIO)
            os.utime(path, (ten_days_ago, ten_days_ago))

        assert OpenAISpeechProvider(audio_cache).cleanup_old_files() == 1
        assert (audio_cache.cache_dir / "google_b.mp3").exists()

    def test_missing_directory(self, tmp_path):
        assert AudioCache(str(tmp_path / "none")).cleanup_old_files() == 0


class TestSpeechService:
    """Test the speech fallback chain."""

    @pytest.mark.asyncio
    async def test_web_provider_returns_sentinel(self, settings_manager, registry, audio_cache):
        service = SpeechService(settings_manager, registry, audio_cache)
        assert await service.generate_audio("hello") == "web-speech-api"

    @pytest.mark.asyncio
    async def test_selected_provider_without_key_falls_back(self, settings_manager, registry, audio_cache):
        settings_manager.save({"voiceSettings": {"provider": "google"}})
        service = SpeechService(settings_manager, registry, audio_cache)

        assert await service.generate_audio("hello") == "web-speech-api"

    @pytest.mark.asyncio
    async def test_selected_provider_is_used_with_voice(self, settings_manager, registry, audio_cache):
        settings_manager.save({
            "googleApiKey": "gkey",
            "voiceSettings": {"provider": "google", "voice": "en-US-Wavenet-D"},
        })
        google = registry.speech("google")
        google._request_audio = AsyncMock(return_value=AUDIO)
        service = SpeechService(settings_manager, registry, audio_cache)

        reference = await service.generate_audio("hello")

        assert reference.startswith("data:audio/mp3;base64,")
        args = google._request_audio.call_args.args
        assert args[:3] == ("hello", "en-US", "en-US-Wavenet-D")

    @pytest.mark.asyncio
    async def test_failure_moves_to_other_credentialed_provider(self, settings_manager, registry, audio_cache):
        settings_manager.save({
            "googleApiKey": "gkey",
            "openaiApiKey": "sk-test",
            "voiceSettings": {"provider": "google", "voice": "en-US-Wavenet-D"},
        })
        google = registry.speech("google")
        google._request_audio = AsyncMock(side_effect=ProviderError("google", "quota", 429))
        openai = registry.speech("openai")
        openai._request_audio = AsyncMock(return_value=AUDIO)
        service = SpeechService(settings_manager, registry, audio_cache)

        reference = await service.generate_audio("hello", "en-GB")

        assert base64.b64decode(strip_data_url(reference)) == AUDIO
        # Voice names do not carry over between providers
        assert openai._request_audio.call_args.args[:3] == ("hello", "en-GB", None)

    @pytest.mark.asyncio
    async def test_everything_failing_gives_sentinel(self, settings_manager, registry, audio_cache):
        settings_manager.save({"openaiApiKey": "sk-test", "voiceSettings": {"provider": "openai"}})
        registry.speech("openai")._request_audio = AsyncMock(side_effect=RuntimeError("boom"))
        service = SpeechService(settings_manager, registry, audio_cache)

        assert await service.generate_audio("hello") == "web-speech-api"

    @pytest.mark.asyncio
    async def test_voices_for_web_provider(self, settings_manager, registry, audio_cache):
        service = SpeechService(settings_manager, registry, audio_cache)
        assert await service.get_available_voices() == ["default"]
