"""Audit utilities package."""

from .url_normalizer import (
    URLNormalizationError,
    parse_http_url,
    get_base_url,
    get_site_name,
    is_valid_http_url,
)
from .url_filter import DEFAULT_MAX_PAGES, DENIED_EXTENSIONS, filter_urls, is_html_candidate

__all__ = [
    'URLNormalizationError',
    'parse_http_url',
    'get_base_url',
    'get_site_name',
    'is_valid_http_url',
    'DEFAULT_MAX_PAGES',
    'DENIED_EXTENSIONS',
    'filter_urls',
    'is_html_candidate',
]
