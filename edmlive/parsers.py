"""Page parsers turning fetched EDM Liveset documents into typed records.

Two listing layouts exist on the site:

    Listing grid (category pages): a ``.uc_post_grid_style_one`` container
    whose ``querydata`` attribute holds JSON with ``total_posts`` and
    ``count_posts``. Each ``.ue_post_grid_item`` is one liveset.

    Search results: an ``.elementor-posts-container`` of ``<article>``
    elements. No total is exposed; the load-more anchor carries
    ``data-max-page`` which is multiplied by the observed page size.

Track pages list their metadata in an Elementor post-info list whose items
are labelled "Artist:", "Genre:", "Event:" and "Added:".
"""

import html
import json
import logging
from typing import Any, Dict, Iterator, List, Optional

from bs4 import BeautifulSoup, Tag

from .dataclasses import EdmLiveConfig, PageResult, TrackDetail, TrackSummary
from .text_utils import (
    ensure_artists,
    first_present,
    guess_artists_from_title,
    normalize_text,
    normalize_url,
    parse_date,
    parse_duration_ms,
)
from .urls import track_id_from_url

UNKNOWN_TITLE = "Unknown Liveset"

# External streaming host links used when the page embeds no audio player
STREAMING_LINK_SELECTOR = "a[href*='hearthis.at'][href*='listen']"


def _text(node: Optional[Tag]) -> Optional[str]:
    """Whitespace-collapsed text of ``node``, None when missing or blank."""
    if node is None:
        return None
    return normalize_text(node.get_text(' ')) or None


def _attr(node: Optional[Tag], name: str) -> Optional[str]:
    if node is None:
        return None
    value = node.get(name)
    if isinstance(value, list):
        value = ' '.join(value)
    return value.strip() if value and value.strip() else None


def _positive_int(value: Any) -> int:
    """Coerce an untyped JSON value to a positive int, 0 otherwise."""
    if isinstance(value, bool):
        return 0
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 0
    return number if number > 0 else 0


class EdmLiveParser:
    """Extracts summaries, page metadata and track details from parsed pages."""

    def __init__(self, config: EdmLiveConfig) -> None:
        self.config = config
        self.logger = logging.getLogger(__name__)

    def _canonical(self, href: str) -> str:
        return normalize_url(href, self.config.base_url)

    def _summary(self, href: Optional[str], title: Optional[str], image: Optional[str],
                 added_date: Optional[str] = None) -> Optional[TrackSummary]:
        if not href or not title:
            return None
        url = self._canonical(href)
        return TrackSummary(
            id=track_id_from_url(url, self.config.track_id_prefix),
            title=title,
            url=url,
            image=image,
            artists=guess_artists_from_title(title),
            added_date=added_date,
        )

    # Listing grid layout

    def parse_query_data(self, raw: Optional[str]) -> Dict[str, Any]:
        """Decode the grid's embedded ``querydata`` JSON, {} when absent or malformed."""
        if not raw:
            return {}
        try:
            data = json.loads(html.unescape(raw))
        except json.JSONDecodeError as e:
            self.logger.warning(f"Malformed listing querydata: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def parse_listing_item(self, item: Tag) -> Optional[TrackSummary]:
        title = _text(item.select_one('.uc_post_title'))
        href = first_present(
            lambda: _attr(item.select_one('.uc_post_grid_style_one_image'), 'href'),
            lambda: _attr(item.select_one('.uc_post_title a'), 'href'),
        )
        image_node = item.select_one('.uc_post_image img')
        image = first_present(
            lambda: _attr(image_node, 'src'),
            lambda: _attr(image_node, 'data-src'),
        )
        return self._summary(href, title, image)

    def parse_listing_page(self, soup: BeautifulSoup, page: int) -> PageResult:
        """Parse one page of the listing grid layout."""
        grid = soup.select_one('.uc_post_grid_style_one')
        if grid is None:
            self.logger.debug(f"No listing grid found on page {page}")
            return PageResult(items=[], page_size=self.config.default_page_size, total=0)

        query_data = self.parse_query_data(_attr(grid, 'querydata'))
        reported_total = _positive_int(query_data.get('total_posts'))
        reported_page_size = _positive_int(query_data.get('count_posts'))

        items: List[TrackSummary] = []
        for element in grid.select('.ue_post_grid_item'):
            summary = self.parse_listing_item(element)
            if summary is None:
                self.logger.debug("Skipping listing item without link or title")
                continue
            items.append(summary)

        page_size = reported_page_size or len(items)
        total = reported_total or (max(page, 1) - 1) * page_size + len(items)
        self.logger.debug(f"Listing page {page}: {len(items)} items, page size {page_size}, total {total}")
        return PageResult(
            items=items,
            page_size=page_size,
            total=total,
            page_size_exact=bool(reported_page_size),
        )

    # Search results layout

    def parse_search_article(self, article: Tag) -> Optional[TrackSummary]:
        href = first_present(
            lambda: _attr(article.select_one('.elementor-post__thumbnail__link'), 'href'),
            lambda: _attr(article.select_one('.elementor-post__title a'), 'href'),
        )
        title = _text(article.select_one('.elementor-post__title'))
        image = _attr(article.select_one('.elementor-post__thumbnail img'), 'src')
        added_date = parse_date(_text(article.select_one('.elementor-post-date')))
        return self._summary(href, title, image, added_date)

    def parse_search_page(self, soup: BeautifulSoup, page: int) -> PageResult:
        """Parse one page of search results.

        The total is an estimate: ``data-max-page`` times this page's item
        count, or just enough pages to cover ``page`` when the load-more
        anchor is missing.
        """
        container = soup.select_one('.elementor-posts-container')
        if container is None:
            self.logger.debug(f"No search results container on page {page}")
            return PageResult(items=[], page_size=self.config.default_page_size, total=0)

        items = [
            summary for summary in (self.parse_search_article(article) for article in container.select('article'))
            if summary is not None
        ]
        page_size = len(items) or self.config.default_page_size

        total_pages = _positive_int(_attr(soup.select_one('.e-load-more-anchor'), 'data-max-page'))
        # Every page before the last one is full, so its item count is the page size.
        exact = bool(items) and 0 < page < total_pages
        if not total_pages:
            total_pages = max(page, 1)

        return PageResult(items=items, page_size=page_size, total=total_pages * page_size, page_size_exact=exact)

    # Track page

    def _info_items(self, soup: BeautifulSoup) -> List[Tag]:
        return soup.select('.elementor-post-info li.elementor-icon-list-item')

    def _labelled_items(self, items: List[Tag], label: str) -> Iterator[Tag]:
        """Info items whose prefix starts with ``label`` (case-insensitive)."""
        lowered = label.lower()
        for item in items:
            prefix = first_present(
                lambda: _text(item.select_one('.elementor-post-info__item-prefix')),
                lambda: _text(item),
            )
            if prefix and prefix.lower().startswith(lowered):
                yield item

    def extract_info_values(self, items: List[Tag], label: str) -> List[str]:
        """Values for a labelled info item: its link texts, or its text after the label."""
        for item in self._labelled_items(items, label):
            links = item.select('a')
            if links:
                values = [_text(link) for link in links]
                return [value for value in values if value]

            text = first_present(
                lambda: _text(item.select_one('.elementor-post-info__item')),
                lambda: _text(item),
            )
            if not text:
                continue
            value = text.split(':', 1)[1].strip() if ':' in text else text
            if value:
                return [value]
        return []

    def extract_added_date(self, items: List[Tag], label: str = "added:") -> Optional[str]:
        values = self.extract_info_values(items, label)
        item = next(self._labelled_items(items, label), None)
        return first_present(
            lambda: parse_date(values[0]) if values else None,
            lambda: parse_date(_text(item.select_one('time'))) if item is not None else None,
        )

    def extract_audio_url(self, soup: BeautifulSoup) -> Optional[str]:
        source = first_present(
            lambda: _attr(soup.select_one('audio source'), 'src'),
            lambda: _attr(soup.select_one('audio a'), 'href'),
            lambda: _attr(soup.select_one(STREAMING_LINK_SELECTOR), 'href'),
        )
        return self._canonical(source) if source else None

    def extract_duration_ms(self, soup: BeautifulSoup) -> int:
        content = soup.select_one('.elementor-widget-theme-post-content')
        if content is None:
            return 0
        return parse_duration_ms(content.get_text('\n'))

    def parse_track_detail(self, soup: BeautifulSoup, url: str) -> TrackDetail:
        """Parse a track page into a TrackDetail; missing fields fall back to defaults."""
        title = first_present(
            lambda: _text(soup.select_one('h1')),
            lambda: _text(soup.select_one('.entry-title')),
            lambda: UNKNOWN_TITLE,
        )
        image = _attr(soup.select_one('.elementor-widget-theme-post-featured-image img'), 'src')

        info_items = self._info_items(soup)
        if not info_items:
            self.logger.debug(f"No info list on {url}")
        artists = self.extract_info_values(info_items, "artist:")
        genres = self.extract_info_values(info_items, "genre:")
        events = self.extract_info_values(info_items, "event:")

        return TrackDetail(
            id=track_id_from_url(url, self.config.track_id_prefix),
            title=title,
            url=url,
            image=image,
            artists=ensure_artists(artists) if artists else guess_artists_from_title(title),
            added_date=self.extract_added_date(info_items),
            genres=genres,
            event=events[0] if events else None,
            audio_url=self.extract_audio_url(soup),
            duration_ms=self.extract_duration_ms(soup),
        )
