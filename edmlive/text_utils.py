"""Text and field extraction utilities for EDM Liveset pages."""

import re
import unicodedata
import uuid
from datetime import date, datetime
from typing import Callable, Iterable, List, Optional, TypeVar
from urllib.parse import urljoin

from dateutil import parser as date_parser

T = TypeVar('T')

UNKNOWN_ARTIST = "Unknown Artist"

# Separators between the artist block and the set name, e.g. "Artist - Live @ Festival"
TITLE_SEPARATORS = (" - ", " – ", " — ", " ― ")

ARTIST_SPLIT_PATTERN = re.compile(
    r'\s+(?:b2b|vs\.?|x|and|feat\.?|ft\.?|with)\s+|[,;]+',
    re.IGNORECASE
)
BRACKETED_PATTERN = re.compile(r'\[[^\]]+\]')
DAY_FIRST_DATE_PATTERN = re.compile(r'^(\d{2})/(\d{2})/(\d{4})$')
TIMESTAMP_MARKER_PATTERN = re.compile(r'\[(\d{1,2}:\d{2}(?::\d{2})?)\]')

_FILL_A = datetime(2000, 1, 1)
_FILL_B = datetime(2001, 2, 2)


def normalize_text(text: Optional[str], *, remove_accents: bool = False, lowercase: bool = False) -> str:
    """Collapse whitespace and optionally strip accents / lowercase."""
    if not text:
        return ""

    result = text
    if remove_accents:
        result = unicodedata.normalize('NFD', result)
        result = ''.join(char for char in result if unicodedata.category(char) != 'Mn')

    if lowercase:
        result = result.lower()

    return re.sub(r'\s+', ' ', result).strip()


def normalize_artist(name: Optional[str]) -> str:
    return normalize_text(name)


def ensure_artists(artists: Iterable[str]) -> List[str]:
    """Normalize artist names, falling back to a placeholder when none survive."""
    cleaned = [normalize_artist(name) for name in artists]
    cleaned = [name for name in cleaned if name]
    return cleaned if cleaned else [UNKNOWN_ARTIST]


def slugify(value: str) -> str:
    normalized = normalize_text(value, remove_accents=True, lowercase=True)
    return re.sub(r'[^a-z0-9]+', '-', normalized).strip('-')


def artist_id(name: str, prefix: str = "edmlive:") -> str:
    """Stable artist identifier, random only when the name has no sluggable characters."""
    return slugify(name) or f"{prefix}{uuid.uuid4().hex}"


def _artist_block(title: str) -> str:
    positions = [
        index for index in (title.find(separator) for separator in TITLE_SEPARATORS)
        if index > 0
    ]
    return title[:min(positions)] if positions else title


def guess_artists_from_title(title: Optional[str]) -> List[str]:
    """Guess performing artists from a liveset title.

    The text before the first separator (" - ", en dash, em dash) is treated
    as the artist block and split on connector words such as "b2b", "vs",
    "feat" or on commas and semicolons. Bracketed annotations are dropped.

    Examples:
        "Artbat b2b Anyma - Live @ Tomorrowland 2024" -> ["Artbat", "Anyma"]
        "Charlotte de Witte [BE], Enrico Sangiuliano - Awakenings"
            -> ["Charlotte de Witte", "Enrico Sangiuliano"]
    """
    block = _artist_block(title or "")
    tokens = ARTIST_SPLIT_PATTERN.split(block)
    cleaned = [BRACKETED_PATTERN.sub('', token).strip() for token in tokens]
    cleaned = [token for token in cleaned if token]
    return ensure_artists(cleaned if cleaned else [block])


def parse_date(value: Optional[str]) -> Optional[str]:
    """Parse a rendered date into YYYY-MM-DD.

    ``DD/MM/YYYY`` is read day first; anything else goes through dateutil.
    Returns None for empty or unparseable input, and for input missing its
    year, month or day.
    """
    if not value:
        return None
    trimmed = value.strip()
    if not trimmed:
        return None

    match = DAY_FIRST_DATE_PATTERN.match(trimmed)
    if match:
        day, month, year = (int(part) for part in match.groups())
        try:
            return date(year, month, day).isoformat()
        except ValueError:
            return None

    # dateutil fills missing fields from its default, so a field that comes
    # out differently under two defaults was never in the input.
    try:
        first = date_parser.parse(trimmed, default=_FILL_A).date()
        second = date_parser.parse(trimmed, default=_FILL_B).date()
    except (ValueError, OverflowError):
        return None
    if first != second:
        return None
    return first.isoformat()


def normalize_url(url: str, base_url: str) -> str:
    """Resolve a possibly relative URL against the site origin."""
    try:
        return urljoin(base_url, url)
    except ValueError:
        return url


def timestamp_to_ms(value: str) -> int:
    """Convert "H:MM:SS", "MM:SS" or "H:MM" to milliseconds (segments read right to left)."""
    try:
        parts = [int(part) for part in value.split(':')]
    except ValueError:
        return 0
    seconds = sum(part * 60 ** index for index, part in enumerate(reversed(parts)))
    return seconds * 1000


def parse_duration_ms(text: Optional[str]) -> int:
    """Duration from the last bracketed timestamp marker in ``text``, 0 if none."""
    if not text:
        return 0
    matches = TIMESTAMP_MARKER_PATTERN.findall(text)
    if not matches:
        return 0
    return timestamp_to_ms(matches[-1])


def first_present(*candidates: Callable[[], Optional[T]]) -> Optional[T]:
    """Evaluate candidates in order and return the first non-empty value."""
    for candidate in candidates:
        value = candidate()
        if value:
            return value
    return None
