"""
Flashcard bridges.

A bridge is the external program that ingests notes into a spaced-repetition
deck. AnkiConnectBridge talks to a running Anki through the AnkiConnect
add-on; ApkgBridge (see apkg.py) writes an offline package instead.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import aiohttp

from ..config import Config
from ..errors import IntegrationError

logger = logging.getLogger(__name__)


class FlashcardBridge(ABC):
    """Contract shared by every flashcard bridge. Failures raise IntegrationError."""

    @abstractmethod
    async def test_connection(self) -> bool:
        """True when the bridge is reachable and compatible."""

    @abstractmethod
    async def get_deck_names(self) -> List[str]:
        pass

    @abstractmethod
    async def create_deck(self, deck_name: str) -> None:
        pass

    @abstractmethod
    async def add_note(
        self,
        deck_name: str,
        model_name: str,
        fields: Dict[str, str],
        tags: Sequence[str],
    ) -> Optional[int]:
        """Add one note and return its identifier, if the bridge reports one."""

    @abstractmethod
    async def store_media_file(self, filename: str, data: str) -> None:
        """Store a base64-encoded media file under filename."""

    @abstractmethod
    async def get_model_names(self) -> List[str]:
        pass

    @abstractmethod
    async def get_model_field_names(self, model_name: str) -> List[str]:
        pass

    async def get_models_with_fields(self) -> List[Dict[str, Any]]:
        """Every note model with its field names."""
        models = []
        for name in await self.get_model_names():
            models.append({"name": name, "fields": await self.get_model_field_names(name)})
        return models

    async def close(self) -> None:
        pass

    async def __aenter__(self) -> "FlashcardBridge":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


class AnkiConnectBridge(FlashcardBridge):
    """
    AnkiConnect HTTP API.

    Every call posts ``{action, version, params}`` and receives
    ``{result, error}``; a non-null error is raised as IntegrationError.
    """

    def __init__(
        self,
        url: str = Config.ANKI_CONNECT_URL,
        version: int = Config.ANKI_CONNECT_VERSION,
        timeout: int = Config.ANKI_TIMEOUT,
    ):
        self.url = url
        self.version = version
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        async with self._session_lock:
            if self._session is None or self._session.closed:
                self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
            return self._session

    async def _invoke(self, action: str, **params) -> Any:
        payload: Dict[str, Any] = {"action": action, "version": self.version}
        if params:
            payload["params"] = params

        session = await self._get_session()
        try:
            async with session.post(self.url, json=payload) as response:
                if response.status != 200:
                    raise IntegrationError(f"AnkiConnect {action}: HTTP {response.status}")
                data = await response.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise IntegrationError(f"AnkiConnect {action}: timed out after {self.timeout}s") from e
        except aiohttp.ClientError as e:
            raise IntegrationError(f"AnkiConnect {action}: {e}") from e
        except ValueError as e:
            raise IntegrationError(f"AnkiConnect {action}: invalid response ({e})") from e

        if not isinstance(data, dict) or "result" not in data:
            raise IntegrationError(f"AnkiConnect {action}: unexpected response format")
        if data.get("error") is not None:
            raise IntegrationError(f"AnkiConnect {action}: {data['error']}")
        return data["result"]

    async def test_connection(self) -> bool:
        try:
            version = await self._invoke("version")
        except IntegrationError as e:
            logger.warning("AnkiConnect connection test failed: %s", e)
            return False
        return isinstance(version, int) and version >= self.version

    async def get_deck_names(self) -> List[str]:
        return list(await self._invoke("deckNames") or [])

    async def create_deck(self, deck_name: str) -> None:
        await self._invoke("createDeck", deck=deck_name)

    async def add_note(self, deck_name, model_name, fields, tags):
        note = {
            "deckName": deck_name,
            "modelName": model_name,
            "fields": dict(fields),
            "tags": list(tags),
        }
        return await self._invoke("addNote", note=note)

    async def store_media_file(self, filename, data):
        await self._invoke("storeMediaFile", filename=filename, data=data)

    async def get_model_names(self) -> List[str]:
        return list(await self._invoke("modelNames") or [])

    async def get_model_field_names(self, model_name: str) -> List[str]:
        return list(await self._invoke("modelFieldNames", modelName=model_name) or [])

    async def close(self) -> None:
        async with self._session_lock:
            if self._session and not self._session.closed:
                await self._session.close()
            self._session = None
