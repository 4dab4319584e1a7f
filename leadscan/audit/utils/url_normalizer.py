"""URL validation helpers for audit targets.

Site URLs given to an audit must be absolute http(s) URLs with a host.
These helpers validate them and derive the pieces the pipeline needs:
the scheme+host root used for sitemap probing and the bare host name
used to label results.
"""

from urllib.parse import urlparse, ParseResult


class URLNormalizationError(Exception):
    """Raised when a URL is not a usable absolute http(s) URL."""
    pass


def parse_http_url(url: str) -> ParseResult:
    """Parse and validate an absolute HTTP/HTTPS URL.

    Args:
        url: The URL to validate

    Returns:
        The parsed URL

    Raises:
        URLNormalizationError: If the URL is empty, relative or not http(s)
    """
    if not url or not isinstance(url, str):
        raise URLNormalizationError("URL must be a non-empty string")

    url = url.strip()
    if not url:
        raise URLNormalizationError("URL cannot be empty or whitespace only")

    try:
        parsed = urlparse(url)
    except ValueError as e:
        raise URLNormalizationError(f"Failed to parse URL '{url}': {e}")

    if not parsed.scheme:
        raise URLNormalizationError(f"URL missing scheme: {url}")
    if parsed.scheme.lower() not in ('http', 'https'):
        raise URLNormalizationError(f"Unsupported URL scheme: {parsed.scheme.lower()}")
    if not parsed.netloc or not parsed.hostname:
        raise URLNormalizationError(f"URL missing netloc: {url}")

    try:
        # Accessing port validates it
        parsed.port
    except ValueError as e:
        raise URLNormalizationError(f"Invalid port in URL '{url}': {e}")

    return parsed


def get_base_url(url: str) -> str:
    """Extract the base URL (scheme + netloc) from a full URL.

    Example:
        >>> get_base_url("https://Example.com/path/to/page?param=value")
        "https://example.com"
    """
    parsed = parse_http_url(url)
    return f"{parsed.scheme.lower()}://{parsed.netloc.lower()}"


def get_site_name(url: str) -> str:
    """Return the lowercase host name of a URL."""
    return parse_http_url(url).hostname.lower()


def is_valid_http_url(url: str) -> bool:
    """Check if a URL is a valid HTTP/HTTPS URL.

    Args:
        url: The URL to validate

    Returns:
        True if the URL is valid HTTP/HTTPS, False otherwise
    """
    try:
        parse_http_url(url)
        return True
    except URLNormalizationError:
        return False
