from dataclasses import asdict, dataclass, field
import logging
from typing import Any, Dict, List, Mapping, Optional

from .text_utils import artist_id

logger = logging.getLogger(__name__)


@dataclass(repr=True)
class EdmLiveConfig:
    """Configuration for the EDM Liveset catalog client."""
    # Source site
    base_url: str = "https://www.edmliveset.com"
    user_agent: str = "Spotube-EDMLive-Plugin/1.0 (+https://spotube.org)"
    accept: str = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
    track_id_prefix: str = "edmlive:"

    # Pagination
    default_page_size: int = 12  # Initial page size guess, corrected by the first fetched page

    # Fetch boundary
    request_timeout: float = 30.0
    min_request_interval: float = 0.0  # Minimum seconds between requests (0 = disabled)
    humanize_request_interval: bool = True  # Add ±25% random jitter to intervals

    # Retry settings (caller layer only, the client itself never retries)
    max_retries: int = 3
    retry_delay: float = 2.0

    # Catalog defaults
    browse_preview_limit: int = 12
    search_all_limit: int = 20
    radio_limit: int = 50
    radio_source_path: str = "/livesets-dj-mixes/"

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> 'EdmLiveConfig':
        """Create EdmLiveConfig from EDMLIVE_* environment variables."""
        defaults = cls()

        def number(name: str, default, cast):
            raw = environ.get(name)
            if raw is None or raw == '':
                return default
            try:
                return cast(raw)
            except ValueError:
                logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
                return default

        return cls(
            base_url=environ.get('EDMLIVE_BASE_URL') or defaults.base_url,
            user_agent=environ.get('EDMLIVE_USER_AGENT') or defaults.user_agent,
            request_timeout=number('EDMLIVE_TIMEOUT', defaults.request_timeout, float),
            max_retries=number('EDMLIVE_MAX_RETRIES', defaults.max_retries, int),
            min_request_interval=number('EDMLIVE_MIN_REQUEST_INTERVAL', defaults.min_request_interval, float),
        )

    @property
    def request_headers(self) -> Dict[str, str]:
        """Headers sent with every document request."""
        return {
            'User-Agent': self.user_agent,
            'Accept': self.accept,
        }


@dataclass(frozen=True)
class TrackSummary:
    """One liveset as it appears on a listing or search page."""
    id: str
    title: str
    url: str
    image: Optional[str]
    artists: List[str]
    added_date: Optional[str] = None  # ISO YYYY-MM-DD

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['artist_ids'] = [artist_id(name) for name in self.artists]
        return data


@dataclass(frozen=True)
class TrackDetail(TrackSummary):
    """Full liveset record parsed from the track page."""
    genres: List[str] = field(default_factory=list)
    event: Optional[str] = None
    audio_url: Optional[str] = None
    duration_ms: int = 0


@dataclass(repr=True)
class PageResult:
    """Tracks parsed from a single fetched page.

    ``page_size`` and ``total`` are best-effort. ``page_size_exact`` is True
    only when the page size was reported by the source rather than inferred
    from the number of parsed items.
    """
    items: List[TrackSummary]
    page_size: int
    total: int
    page_size_exact: bool = False


@dataclass(repr=True)
class RangeResult:
    """An offset/limit window over a listing or search result."""
    items: List[TrackSummary]
    total: int
    next_offset: Optional[int] = None
    has_more: bool = False

    @classmethod
    def empty(cls) -> 'RangeResult':
        return cls(items=[], total=0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'items': [item.to_dict() for item in self.items],
            'total': self.total,
            'next_offset': self.next_offset,
            'has_more': self.has_more,
        }


@dataclass(frozen=True)
class BrowseSection:
    """A browsable category on the source site."""
    id: str
    title: str
    path: str


@dataclass(repr=True)
class SectionPreview:
    """A browse section together with its first few tracks."""
    section: BrowseSection
    external_uri: str
    browse_more: bool
    items: List[TrackSummary] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.section.id,
            'title': self.section.title,
            'external_uri': self.external_uri,
            'browse_more': self.browse_more,
            'items': [item.to_dict() for item in self.items],
        }


@dataclass(repr=True)
class SectionsPage:
    """Paginated list of section previews."""
    items: List[SectionPreview]
    total: int
    next_offset: Optional[int] = None
    has_more: bool = False


@dataclass(repr=True)
class AudioMatch:
    """Playable audio found for a track."""
    id: str
    title: str
    artists: List[str]
    duration_ms: int
    thumbnail: Optional[str]
    external_uri: str
    stream_url: str
