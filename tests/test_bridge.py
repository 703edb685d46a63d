"""Tests for the AnkiConnect and .apkg bridges."""

import asyncio
import base64
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from wordlens.deck import AnkiConnectBridge, ApkgBridge
from wordlens.errors import IntegrationError


def connected(bridge, data=None, status=200, error=None):
    """Point the bridge at a fake session answering every post."""
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=data)
    session = MagicMock()
    if error is not None:
        session.post.side_effect = error
    else:
        session.post.return_value.__aenter__.return_value = response
    bridge._get_session = AsyncMock(return_value=session)
    return session


class TestAnkiConnectBridge:
    """Test the AnkiConnect envelope."""

    @pytest.mark.asyncio
    async def test_request_envelope(self):
        bridge = AnkiConnectBridge()
        session = connected(bridge, {"result": 1496198395707, "error": None})

        note_id = await bridge.add_note("Vocab", "Basic", {"Front": "apple"}, ["wordlens"])

        assert note_id == 1496198395707
        payload = session.post.call_args.kwargs["json"]
        assert payload["action"] == "addNote"
        assert payload["version"] == 6
        assert payload["params"]["note"] == {
            "deckName": "Vocab",
            "modelName": "Basic",
            "fields": {"Front": "apple"},
            "tags": ["wordlens"],
        }

    @pytest.mark.asyncio
    async def test_error_field_raises(self):
        bridge = AnkiConnectBridge()
        connected(bridge, {"result": None, "error": "deck was not found"})

        with pytest.raises(IntegrationError, match="deck was not found"):
            await bridge.create_deck("Vocab")

    @pytest.mark.asyncio
    async def test_unexpected_format_raises(self):
        bridge = AnkiConnectBridge()
        connected(bridge, ["not", "an", "envelope"])

        with pytest.raises(IntegrationError):
            await bridge.get_deck_names()

    @pytest.mark.asyncio
    async def test_http_error_raises(self):
        bridge = AnkiConnectBridge()
        connected(bridge, status=403)

        with pytest.raises(IntegrationError, match="403"):
            await bridge.get_model_names()

    @pytest.mark.asyncio
    async def test_connection(self):
        bridge = AnkiConnectBridge()
        connected(bridge, {"result": 6, "error": None})
        assert await bridge.test_connection() is True

        connected(bridge, {"result": 5, "error": None})
        assert await bridge.test_connection() is False

    @pytest.mark.asyncio
    async def test_unreachable(self):
        bridge = AnkiConnectBridge()
        connected(bridge, error=aiohttp.ClientConnectionError("connection refused"))
        assert await bridge.test_connection() is False

        connected(bridge, error=asyncio.TimeoutError())
        with pytest.raises(IntegrationError, match="timed out"):
            await bridge.get_deck_names()


class TestApkgBridge:
    """Test the offline package writer."""

    @pytest.mark.asyncio
    async def test_write_package(self, tmp_path):
        bridge = ApkgBridge(str(tmp_path / "deck.apkg"), str(tmp_path / "media"))
        await bridge.create_deck("Vocab")
        assert await bridge.add_note("Vocab", "Basic", {"Front": "apple", "Back": "fruit"}, ["wordlens"]) == 1
        await bridge.store_media_file("apple_audio.mp3", base64.b64encode(b"ID3").decode())

        path = bridge.write()

        assert (tmp_path / "deck.apkg").exists()
        assert path == str(tmp_path / "deck.apkg")
        assert (tmp_path / "media" / "apple_audio.mp3").read_bytes() == b"ID3"

    @pytest.mark.asyncio
    async def test_existing_package_is_backed_up(self, tmp_path):
        bridge = ApkgBridge(str(tmp_path / "deck.apkg"), str(tmp_path / "media"))
        await bridge.create_deck("Vocab")
        await bridge.add_note("Vocab", "Basic", {"Front": "apple"}, [])

        bridge.write()
        bridge.write()

        assert len(list(tmp_path.glob("deck*.apkg"))) == 2

    @pytest.mark.asyncio
    async def test_custom_model_from_fields(self, tmp_path):
        bridge = ApkgBridge(str(tmp_path / "deck.apkg"))
        await bridge.create_deck("Vocab")
        await bridge.add_note("Vocab", "Word", {"Term": "apple", "Example": "An apple."}, [])

        assert await bridge.get_model_field_names("Word") == ["Term", "Example"]
        assert await bridge.get_model_names() == ["Basic", "Word"]
        with pytest.raises(IntegrationError):
            await bridge.add_note("Vocab", "Word", {"Other": "x"}, [])

    @pytest.mark.asyncio
    async def test_unknown_deck(self, tmp_path):
        bridge = ApkgBridge(str(tmp_path / "deck.apkg"))
        with pytest.raises(IntegrationError):
            await bridge.add_note("Missing", "Basic", {"Front": "apple"}, [])

    @pytest.mark.asyncio
    async def test_invalid_media(self, tmp_path):
        bridge = ApkgBridge(str(tmp_path / "deck.apkg"), str(tmp_path / "media"))
        with pytest.raises(IntegrationError):
            await bridge.store_media_file("x.mp3", "not base64!")

    def test_nothing_to_write(self, tmp_path):
        with pytest.raises(IntegrationError):
            ApkgBridge(str(tmp_path / "deck.apkg")).write()
