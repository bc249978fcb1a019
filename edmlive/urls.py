"""URL building and track identifier derivation."""

from urllib.parse import urlencode, urljoin, urlsplit, urlunsplit

from .text_utils import normalize_url


def build_listing_url(base_url: str, path: str, page: int) -> str:
    """Listing URL for ``path``; page 1 is the bare path, later pages append ``page/{n}/``."""
    normalized = path if path.endswith('/') else f"{path}/"
    if page <= 1:
        return urljoin(base_url, normalized)
    return urljoin(base_url, f"{normalized}page/{page}/")


def build_search_url(base_url: str, query: str, page: int) -> str:
    """Search URL for ``query`` restricted to posts."""
    origin = urlsplit(base_url)
    path = f"/page/{page}/" if page > 1 else "/"
    params = urlencode({'s': query, 'post_type': 'post'})
    return urlunsplit((origin.scheme, origin.netloc, path, params, ''))


def track_id_from_url(url: str, prefix: str) -> str:
    """Derive the track identifier from the URL path, ignoring a trailing slash."""
    try:
        path = urlsplit(url).path
    except ValueError:
        return f"{prefix}{url}"
    if path.endswith('/'):
        path = path[:-1]
    return f"{prefix}{path or '/'}"


def resolve_track_url(id_or_url: str, base_url: str, prefix: str) -> str:
    """Turn a track identifier or any absolute/relative URL into a canonical URL."""
    if id_or_url.startswith(prefix):
        return urljoin(base_url, id_or_url[len(prefix):])
    return normalize_url(id_or_url, base_url)
