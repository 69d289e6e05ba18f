"""URL parsing and search-link utilities."""
from typing import Iterable, Optional
from urllib.parse import quote, urlparse
import re

from ..core.exceptions import ResolutionError


REDIRECT_MARKER = "alink/link?url="

# Percent-encoded "://" and the encoded "/" that precedes "&source" in the
# search engine's outbound redirect wrapper.
_SCHEME_MARKER = re.compile(r"%3a%2f%2f", re.IGNORECASE)
_SOURCE_MARKERS = (
    re.compile(r"%2f&source", re.IGNORECASE),
    re.compile(r"&source", re.IGNORECASE),
)


def encode_query(text: str) -> str:
    """
    Percent-encode a query component.

    Leaves the same characters unescaped as JavaScript's encodeURIComponent.
    """
    return quote(text, safe="-_.!~*'()")


def get_domain(url: str) -> Optional[str]:
    """
    Extract the lower-cased host name from a URL.

    Scheme-less values such as ``example.com/about`` are accepted.

    Args:
        url: URL to extract domain from

    Returns:
        Host name or None if the URL has none
    """
    if not url:
        return None
    candidate = url.strip()
    if "://" not in candidate and not candidate.startswith("//"):
        candidate = f"//{candidate}"
    try:
        host = urlparse(candidate).hostname
    except ValueError:
        return None
    return host.lower() if host else None


def domain_matches(host: Optional[str], domains: Iterable[str]) -> bool:
    """Check if a host equals one of the domains or is a subdomain of one."""
    if not host:
        return False
    host = host.lower().rstrip(".")
    for domain in domains:
        domain = domain.lower().strip(".")
        if host == domain or host.endswith(f".{domain}"):
            return True
    return False


def is_redirect_link(href: str) -> bool:
    """Check if an href is a search-engine outbound redirect wrapper."""
    return REDIRECT_MARKER in href


def decode_redirect_link(href: str) -> str:
    """
    Unwrap a search-engine outbound redirect link.

    Best effort: takes what follows the encoded ``://`` and cuts it at the
    encoded path separator before ``&source``. The scheme is not kept.

    Args:
        href: Redirect wrapper href

    Returns:
        The wrapped destination, e.g. ``example.com``

    Raises:
        ResolutionError: If the wrapper carries no encoded destination
    """
    parts = _SCHEME_MARKER.split(href, maxsplit=1)
    if len(parts) < 2:
        raise ResolutionError(
            "Redirect link has no encoded destination",
            details={"href": href}
        )
    destination = parts[1]
    for marker in _SOURCE_MARKERS:
        head = marker.split(destination, maxsplit=1)
        if len(head) > 1:
            return head[0]
    return destination


def is_blocked_link(href: str, blocked_domains: Iterable[str]) -> bool:
    """
    Check whether an href points at a blocklisted domain.

    Redirect wrappers are checked against their wrapped destination as well
    as their own host.
    """
    blocked = list(blocked_domains)
    if domain_matches(get_domain(href), blocked):
        return True
    if is_redirect_link(href):
        try:
            destination = decode_redirect_link(href)
        except ResolutionError:
            return False
        return domain_matches(get_domain(destination), blocked)
    return False
