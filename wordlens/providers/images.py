"""Image search providers: Google Custom Search, Pixabay and DuckDuckGo."""

import logging
from typing import Any, Dict, List

from ..config import Config
from ..errors import ProviderError
from ..models import AppSettings, ImageResult
from ..utils import extract_domain, is_valid_credential, mask_secret
from .base import Credentials, ImageProvider

logger = logging.getLogger(__name__)


class GoogleImageProvider(ImageProvider):
    """Google Custom Search JSON API, image search type."""

    name = "google"

    def credentials_from(self, settings: AppSettings) -> Credentials:
        return Credentials(settings.google_api_key, settings.google_search_engine_id)

    def is_ready(self, credentials: Credentials) -> bool:
        return (is_valid_credential(credentials.api_key)
                and is_valid_credential(credentials.search_engine_id))

    async def search(self, query, credentials, page=Config.DEFAULT_PAGE, per_page=Config.DEFAULT_PER_PAGE):
        self.require_credentials(credentials)
        return await self._search(query, credentials, page, per_page, safe_search=True)

    async def _search(
        self,
        query: str,
        credentials: Credentials,
        page: int,
        per_page: int,
        safe_search: bool,
    ) -> List[ImageResult]:
        # Google uses 1-based result indexing
        params = {
            "key": credentials.api_key,
            "cx": credentials.search_engine_id,
            "q": query,
            "searchType": "image",
            "num": str(per_page),
            "start": str((page - 1) * per_page + 1),
        }
        if safe_search:
            params["safe"] = "active"

        response = await self._request(
            "GET", Config.GOOGLE_SEARCH_URL, params=params, headers={"Accept": "application/json"}
        )

        if not response.ok:
            detail = mask_secret(response.text()[:200], credentials.api_key)
            # Some engines reject the safe search parameter
            if response.status == 400 and safe_search:
                logger.info("Google search rejected request (400), retrying without safe search")
                return await self._search(query, credentials, page, per_page, safe_search=False)
            raise ProviderError(self.name, f"{response.reason} - {detail}", response.status)

        data = self._parse_json(response)
        items = data.get("items") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise ProviderError(self.name, "no images found or invalid response format")

        images = [self._to_result(item, query) for item in items if isinstance(item, dict) and item.get("link")]
        return images[:per_page]

    @staticmethod
    def _to_result(item: Dict[str, Any], query: str) -> ImageResult:
        display_link = item.get("displayLink")
        return ImageResult(
            url=item["link"],
            thumbnail_url=(item.get("image") or {}).get("thumbnailLink") or item["link"],
            title=item.get("title") or f"{query} image",
            source=extract_domain(f"https://{display_link}" if display_link else item["link"]),
        )

    async def validate(self, credentials: Credentials) -> bool:
        if not self.is_ready(credentials):
            return False
        params = {"key": credentials.api_key, "cx": credentials.search_engine_id, "q": "test", "num": "1"}
        try:
            response = await self._request("GET", Config.GOOGLE_SEARCH_URL, params=params)
        except ProviderError as e:
            logger.warning("Google credential validation failed: %s", e)
            return False
        return response.ok


class PixabayImageProvider(ImageProvider):
    """Pixabay photo search."""

    name = "pixabay"
    MIN_PER_PAGE = 3
    MAX_PER_PAGE = 200

    def credentials_from(self, settings: AppSettings) -> Credentials:
        return Credentials(settings.pixabay_api_key)

    async def search(self, query, credentials, page=Config.DEFAULT_PAGE, per_page=Config.DEFAULT_PER_PAGE):
        self.require_credentials(credentials)

        # Pixabay accepts per_page between 3 and 200; smaller pages are cut
        # out of one larger first page so the offset stays (page-1)*per_page
        if per_page < self.MIN_PER_PAGE:
            request_page = 1
            request_size = min(self.MAX_PER_PAGE, max(self.MIN_PER_PAGE, page * per_page))
            start = (page - 1) * per_page
        else:
            request_page = page
            request_size = min(self.MAX_PER_PAGE, per_page)
            start = 0

        params = {
            "key": credentials.api_key,
            "q": query,
            "image_type": "photo",
            "safesearch": "true",
            "page": str(request_page),
            "per_page": str(request_size),
        }
        response = await self._request(
            "GET", Config.PIXABAY_URL, params=params, headers={"Accept": "application/json"}
        )
        if not response.ok:
            raise ProviderError(self.name, mask_secret(response.text()[:200], credentials.api_key),
                                response.status)

        data = self._parse_json(response)
        hits = data.get("hits") if isinstance(data, dict) else None
        if not isinstance(hits, list):
            raise ProviderError(self.name, "no images found or invalid response format")

        return [
            ImageResult(
                url=hit.get("webformatURL") or hit.get("largeImageURL"),
                thumbnail_url=hit.get("previewURL") or hit.get("webformatURL"),
                title=hit.get("tags") or f"{query} image",
                source="pixabay.com",
            )
            for hit in hits
            if isinstance(hit, dict) and (hit.get("webformatURL") or hit.get("largeImageURL"))
        ][start:start + per_page]


class DuckDuckGoImageProvider(ImageProvider):
    """
    DuckDuckGo image endpoint.

    Needs no credentials but is unofficial, so it is only tried when the
    user selects it explicitly.
    """

    name = "duckduckgo"
    REQUIRES_CREDENTIALS = False
    IN_DEFAULT_ORDER = False

    async def search(self, query, credentials, page=Config.DEFAULT_PAGE, per_page=Config.DEFAULT_PER_PAGE):
        params = {
            "q": query,
            "o": "json",
            "p": "1",
            "s": str((page - 1) * per_page),
            "u": "bing",
            "f": ",,,",
            "l": "us-en",
        }
        headers = {"Accept": "application/json", "Referer": "https://duckduckgo.com/"}
        response = await self._request("GET", Config.DUCKDUCKGO_IMAGES_URL, params=params, headers=headers)
        if not response.ok:
            raise ProviderError(self.name, response.reason or "request failed", response.status)

        data: Dict[str, Any] = self._parse_json(response)
        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list) or not results:
            raise ProviderError(self.name, "unexpected response format")

        return [
            ImageResult(
                url=item["image"],
                thumbnail_url=item.get("thumbnail") or item["image"],
                title=item.get("title") or f"{query} image {index + 1}",
                source=extract_domain(item.get("url") or "https://duckduckgo.com"),
            )
            for index, item in enumerate(results[:per_page])
            if isinstance(item, dict) and item.get("image")
        ]
