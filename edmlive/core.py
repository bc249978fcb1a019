"""Catalog operations for EDM Liveset built on top of EdmLiveClient.

This module provides the interface consumed by player integrations:
browse sections, track search, track lookup, radio and audio matching.
Transient fetch failures are retried here; the client underneath never
retries.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, TypeVar
from urllib.parse import urljoin

from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from .client import EdmLiveClient
from .dataclasses import (
    AudioMatch,
    BrowseSection,
    EdmLiveConfig,
    RangeResult,
    SectionPreview,
    SectionsPage,
    TrackDetail,
    TrackSummary,
)
from .loader import FetchError

T = TypeVar('T')

BROWSE_SECTIONS: List[BrowseSection] = [
    BrowseSection(
        id="livesets-dj-mixes",
        title="Latest Livesets & DJ Mixes",
        path="/livesets-dj-mixes/",
    ),
    BrowseSection(
        id="classic-livesets",
        title="Classic Livesets",
        path="/classic-livesets/",
    ),
]

SEARCH_CHIPS = ["all", "tracks"]


class UnknownSectionError(Exception):
    """Raised when a browse section id is not one of BROWSE_SECTIONS."""

    def __init__(self, section_id: str):
        self.section_id = section_id
        super().__init__(f"Unknown browse section: {section_id}")


def _is_transient_fetch_error(error: BaseException) -> bool:
    return isinstance(error, FetchError) and error.is_transient


class EdmLiveCatalog:
    """Catalog facade for use in any application."""

    def __init__(self, config: Optional[EdmLiveConfig] = None,
                 client: Optional[EdmLiveClient] = None,
                 sections: Optional[List[BrowseSection]] = None) -> None:
        self.config = config or EdmLiveConfig()
        self.client = client or EdmLiveClient(self.config)
        self.sections_list = list(sections) if sections is not None else list(BROWSE_SECTIONS)
        self.logger = logging.getLogger(__name__)

    async def __aenter__(self):
        await self.client.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.client.__aexit__(exc_type, exc_val, exc_tb)

    async def close(self) -> None:
        """Release the underlying HTTP session."""
        await self.client.close()

    async def _with_retry(self, operation: Callable[[], Awaitable[T]], description: str) -> T:
        """Run ``operation``, retrying transient fetch failures with exponential backoff."""
        retrying = AsyncRetrying(
            stop=stop_after_attempt(max(self.config.max_retries, 0) + 1),
            wait=wait_exponential(multiplier=self.config.retry_delay, max=30),
            retry=retry_if_exception(_is_transient_fetch_error),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    self.logger.info(f"Retrying {description} (attempt {attempt.retry_state.attempt_number})")
                return await operation()

    # Browse

    def get_section(self, section_id: str) -> BrowseSection:
        for section in self.sections_list:
            if section.id == section_id:
                return section
        raise UnknownSectionError(section_id)

    def section_uri(self, section: BrowseSection) -> str:
        return urljoin(self.config.base_url, section.path)

    async def _preview(self, section: BrowseSection) -> SectionPreview:
        preview = await self._with_retry(
            lambda: self.client.listing_range(section.path, 0, self.config.browse_preview_limit),
            f"preview of {section.id}",
        )
        return SectionPreview(
            section=section,
            external_uri=self.section_uri(section),
            browse_more=preview.has_more,
            items=preview.items,
        )

    async def sections(self, offset: int = 0, limit: Optional[int] = None) -> SectionsPage:
        """Browse sections with a preview of their latest tracks, fetched concurrently."""
        start = max(0, offset)
        count = len(self.sections_list) if limit is None else max(0, limit)
        selected = self.sections_list[start:start + count]

        items = list(await asyncio.gather(*(self._preview(section) for section in selected)))

        total = len(self.sections_list)
        has_more = start + len(selected) < total
        return SectionsPage(
            items=items,
            total=total,
            next_offset=start + len(selected) if has_more else None,
            has_more=has_more,
        )

    async def section_items(self, section_id: str, offset: int = 0, limit: int = 20) -> RangeResult:
        """Tracks of one browse section.

        Raises:
            UnknownSectionError: if ``section_id`` is not a known section
        """
        section = self.get_section(section_id)
        return await self._with_retry(
            lambda: self.client.listing_range(section.path, offset, limit),
            f"section {section_id}",
        )

    # Search

    def search_chips(self) -> List[str]:
        return list(SEARCH_CHIPS)

    async def search_tracks(self, query: str, offset: int = 0, limit: int = 20) -> RangeResult:
        return await self._with_retry(
            lambda: self.client.search_range(query, offset, limit),
            f"search '{query}'",
        )

    async def search_all(self, query: str) -> List[TrackSummary]:
        result = await self.search_tracks(query, 0, self.config.search_all_limit)
        return result.items

    async def search_albums(self, query: str, offset: int = 0, limit: int = 20) -> RangeResult:
        """Albums are not modelled by the site."""
        return RangeResult.empty()

    async def search_artists(self, query: str, offset: int = 0, limit: int = 20) -> RangeResult:
        """Artists have no pages of their own on the site."""
        return RangeResult.empty()

    async def search_playlists(self, query: str, offset: int = 0, limit: int = 20) -> RangeResult:
        return RangeResult.empty()

    # Tracks

    async def track(self, id_or_url: str) -> TrackDetail:
        return await self._with_retry(lambda: self.client.get_track(id_or_url), f"track {id_or_url}")

    async def save(self, ids: List[str]) -> None:
        """No-op: the catalog is public and has no user library."""

    async def unsave(self, ids: List[str]) -> None:
        """No-op, see save()."""

    async def radio(self, id_or_url: str) -> List[TrackSummary]:
        """Latest tracks from the radio source listing, excluding the seed track."""
        current, listing = await asyncio.gather(
            self.track(id_or_url),
            self._with_retry(
                lambda: self.client.listing_range(self.config.radio_source_path, 0, self.config.radio_limit + 1),
                "radio listing",
            ),
        )
        return [item for item in listing.items if item.id != current.id][:self.config.radio_limit]

    # Audio

    async def audio_match(self, id_or_url: str) -> Optional[AudioMatch]:
        """Playable audio for a track, None when its page links no audio."""
        detail = await self.track(id_or_url)
        if not detail.audio_url:
            self.logger.info(f"No audio source found for {detail.id}")
            return None
        return AudioMatch(
            id=detail.id,
            title=detail.title,
            artists=detail.artists,
            duration_ms=detail.duration_ms,
            thumbnail=detail.image,
            external_uri=detail.url,
            stream_url=detail.audio_url,
        )

    async def stream_url(self, id_or_url: str) -> Optional[str]:
        detail = await self.track(id_or_url)
        return detail.audio_url
