"""Catalog extraction client for edmliveset.com."""

import logging
from typing import Optional

from .cache import DetailCache
from .dataclasses import EdmLiveConfig, PageResult, RangeResult, TrackDetail
from .loader import DocumentLoader
from .pagination import collect_range
from .parsers import EdmLiveParser
from .urls import build_listing_url, build_search_url, resolve_track_url, track_id_from_url


class EdmLiveClient:
    """Exposes the site's page-numbered listings as offset/limit ranges plus track lookup.

    Usage:
        async with EdmLiveClient() as client:
            latest = await client.listing_range("/livesets-dj-mixes/", 0, 20)
            detail = await client.get_track(latest.items[0].id)
    """

    def __init__(self, config: Optional[EdmLiveConfig] = None,
                 loader: Optional[DocumentLoader] = None,
                 cache: Optional[DetailCache] = None) -> None:
        self.config = config or EdmLiveConfig()
        self.loader = loader or DocumentLoader(self.config)
        self.cache = cache if cache is not None else DetailCache()
        self.parser = EdmLiveParser(self.config)
        self.logger = logging.getLogger(__name__)

    async def __aenter__(self):
        await self.loader.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.loader.__aexit__(exc_type, exc_val, exc_tb)

    async def close(self) -> None:
        await self.loader.close()

    async def listing_range(self, path: str, offset: int, limit: int) -> RangeResult:
        """Range of track summaries from a category listing such as ``/classic-livesets/``."""
        self.logger.info(f"Listing {path} offset={offset} limit={limit}")

        async def fetch_page(page: int) -> PageResult:
            return await self.fetch_listing_page(path, page)

        return await collect_range(fetch_page, offset, limit, self.config.default_page_size)

    async def search_range(self, query: str, offset: int, limit: int) -> RangeResult:
        """Range of track summaries matching a search query."""
        self.logger.info(f"Searching '{query}' offset={offset} limit={limit}")

        async def fetch_page(page: int) -> PageResult:
            return await self.fetch_search_page(query, page)

        return await collect_range(fetch_page, offset, limit, self.config.default_page_size)

    async def get_track(self, id_or_url: str) -> TrackDetail:
        """Full detail for one track, given its identifier or any URL of its page."""
        url = self.resolve_track_url(id_or_url)
        track_id = self.track_id(url)

        cached = self.cache.get(track_id)
        if cached is not None:
            return cached

        soup = await self.loader.fetch_document(url)
        detail = self.parser.parse_track_detail(soup, url)
        return self.cache.store(detail)

    async def fetch_listing_page(self, path: str, page: int) -> PageResult:
        url = build_listing_url(self.config.base_url, path, page)
        soup = await self.loader.fetch_document(url)
        return self.parser.parse_listing_page(soup, page)

    async def fetch_search_page(self, query: str, page: int) -> PageResult:
        url = build_search_url(self.config.base_url, query, page)
        soup = await self.loader.fetch_document(url)
        return self.parser.parse_search_page(soup, page)

    def resolve_track_url(self, id_or_url: str) -> str:
        return resolve_track_url(id_or_url, self.config.base_url, self.config.track_id_prefix)

    def track_id(self, url: str) -> str:
        return track_id_from_url(url, self.config.track_id_prefix)
