"""
URL helpers for link resolution, host comparison and storage keys.
"""
from typing import Optional
from urllib.parse import quote, urljoin, urlparse, urlunparse

DEFAULT_PORTS = {"http": 80, "https": 443}

# Characters left unescaped by JavaScript's encodeURIComponent beyond
# the ones urllib.parse.quote always keeps.
_COMPONENT_SAFE = "!*'()"


def is_absolute_http_url(url: Optional[str]) -> bool:
    """Check whether ``url`` is an absolute http(s) URL with a host."""
    if not url:
        return False
    try:
        parsed = urlparse(url.strip())
        return parsed.scheme in DEFAULT_PORTS and bool(parsed.hostname)
    except ValueError:
        return False


def resolve_url(base: str, href: str) -> Optional[str]:
    """
    Resolve ``href`` against ``base``.

    Returns None when the result is not an absolute http(s) URL, for
    example ``mailto:`` or ``javascript:`` links and malformed hosts.
    """
    if not href:
        return None
    try:
        absolute = urljoin(base, href.strip())
    except ValueError:
        return None
    if not is_absolute_http_url(absolute):
        return None
    return absolute


def url_host(url: Optional[str]) -> Optional[str]:
    """
    Host of ``url`` including a non-default port (``example.com:8080``).

    Returns None for unparseable URLs.
    """
    if not url:
        return None
    try:
        parsed = urlparse(url.strip())
        hostname = parsed.hostname
        port = parsed.port
    except ValueError:
        return None
    if not hostname:
        return None
    if port is not None and DEFAULT_PORTS.get(parsed.scheme) != port:
        return f"{hostname}:{port}"
    return hostname


def url_hostname(url: Optional[str]) -> str:
    """Hostname of ``url`` without port, or an empty string."""
    if not url:
        return ""
    try:
        return urlparse(url.strip()).hostname or ""
    except ValueError:
        return ""


def normalize_url(url: str) -> str:
    """
    Queue-level identity of a URL: trimmed, fragment removed,
    scheme and host lowercased.
    """
    parsed = urlparse(url.strip())
    return urlunparse((
        parsed.scheme.lower(),
        parsed.netloc.lower(),
        parsed.path or "/",
        parsed.params,
        parsed.query,
        "",
    ))


def article_store_key(url: str) -> str:
    """Object store key for a full article: ``articles/<encoded url>``."""
    return f"articles/{quote(url, safe=_COMPONENT_SAFE)}"
