"""EDM Liveset catalog extraction modules."""

__version__ = "1.0.0"

# Catalog API
from .dataclasses import (
    AudioMatch,
    BrowseSection,
    EdmLiveConfig,
    PageResult,
    RangeResult,
    SectionPreview,
    SectionsPage,
    TrackDetail,
    TrackSummary,
)
from .core import BROWSE_SECTIONS, EdmLiveCatalog, UnknownSectionError

# Extraction engine (for advanced usage)
from .client import EdmLiveClient
from .cache import DetailCache
from .loader import DocumentLoader, FetchError
from .pagination import collect_range
from .parsers import EdmLiveParser

__all__ = [
    # Version
    '__version__',

    # Catalog API
    'EdmLiveCatalog',
    'EdmLiveConfig',
    'BROWSE_SECTIONS',
    'UnknownSectionError',

    # Records
    'TrackSummary',
    'TrackDetail',
    'PageResult',
    'RangeResult',
    'BrowseSection',
    'SectionPreview',
    'SectionsPage',
    'AudioMatch',

    # Extraction engine (for advanced usage)
    'EdmLiveClient',
    'DetailCache',
    'DocumentLoader',
    'FetchError',
    'EdmLiveParser',
    'collect_range',
]
