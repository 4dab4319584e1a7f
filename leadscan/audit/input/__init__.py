"""Input providers package for URL discovery."""

from .sitemap_provider import SitemapProvider, SitemapProviderError
from .sitemap_resolver import SitemapResolver, SITEMAP_PATHS

__all__ = [
    'SitemapProvider',
    'SitemapProviderError',
    'SitemapResolver',
    'SITEMAP_PATHS',
]
