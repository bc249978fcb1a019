"""In-memory cache of parsed track details."""

import logging
from typing import Any, Dict, Optional

from .dataclasses import TrackDetail


class DetailCache:
    """Maps canonical track identifiers to parsed TrackDetail records.

    Entries are write-once and live as long as the cache object; the
    catalog is static so nothing is ever invalidated. Concurrent lookups of
    the same track may both miss and both store, which only costs a
    redundant fetch since the parsed records are identical.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, TrackDetail] = {}
        self.hits = 0
        self.misses = 0
        self.logger = logging.getLogger(__name__)

    def get(self, track_id: str) -> Optional[TrackDetail]:
        detail = self._entries.get(track_id)
        if detail is None:
            self.misses += 1
            self.logger.debug(f"Detail cache miss: {track_id}")
        else:
            self.hits += 1
            self.logger.debug(f"Detail cache hit: {track_id}")
        return detail

    def store(self, detail: TrackDetail) -> TrackDetail:
        """Store ``detail`` unless its identifier is already cached; returns the cached record."""
        existing = self._entries.setdefault(detail.id, detail)
        if existing is detail:
            self.logger.debug(f"Cached track detail: {detail.id}")
        return existing

    def __contains__(self, track_id: str) -> bool:
        return track_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get_cache_info(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            'entries': len(self._entries),
            'hits': self.hits,
            'misses': self.misses,
        }
