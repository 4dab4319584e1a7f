"""Sitemap XML provider for URL discovery from a single sitemap location.

This module fetches one sitemap location and returns the page URLs it
lists, supporting standard sitemaps, sitemap index files and
gzip-compressed sitemaps.
"""

import asyncio
import gzip
import logging
import xml.etree.ElementTree as ET
import zlib
from typing import List, Optional, Set
from urllib.parse import urljoin

import aiohttp

from ..utils.url_normalizer import is_valid_http_url


logger = logging.getLogger(__name__)


DEFAULT_USER_AGENT = "LeadScan-Accessibility-Auditor/1.0"


class SitemapProviderError(Exception):
    """Raised when a sitemap cannot be fetched or parsed."""
    pass


class SitemapProvider:
    """Provider for page URLs listed in one sitemap.xml location.

    Features:
    - Standard sitemap.xml format parsing
    - Sitemap index file support (nested sitemaps)
    - Gzip-compressed sitemap support
    - URL validation and exact-duplicate removal
    """

    SITEMAP_NS = {
        'sitemap': 'http://www.sitemaps.org/schemas/sitemap/0.9',
    }

    def __init__(
        self,
        sitemap_url: str,
        timeout: float = 30,
        user_agent: str = DEFAULT_USER_AGENT,
        max_urls: int = 50000,
        max_depth: int = 5,
        session: Optional[aiohttp.ClientSession] = None
    ):
        """Initialize sitemap provider.

        Args:
            sitemap_url: URL of the sitemap.xml file
            timeout: HTTP request timeout in seconds
            user_agent: User-Agent string for HTTP requests
            max_urls: Maximum URLs to collect
            max_depth: Maximum depth for nested sitemap discovery
            session: Existing HTTP session to reuse (not closed by the provider)
        """
        self.sitemap_url = sitemap_url
        self.timeout = timeout
        self.user_agent = user_agent
        self.max_urls = max_urls
        self.max_depth = max_depth

        self._session = session
        self._owns_session = session is None
        self._stats = {
            "sitemaps_processed": 0,
            "sitemaps_failed": 0,
            "urls_discovered": 0,
            "invalid_urls": 0,
            "duplicate_urls": 0,
            "compressed_sitemaps": 0,
            "index_sitemaps": 0
        }

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self):
        """Ensure HTTP session is available."""
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            headers = {'User-Agent': self.user_agent}
            self._session = aiohttp.ClientSession(timeout=timeout, headers=headers)
            self._owns_session = True

    async def close(self):
        """Close HTTP session if this provider created it."""
        if self._session and self._owns_session:
            await self._session.close()
        self._session = None

    async def fetch_urls(self) -> List[str]:
        """Fetch the sitemap and return the page URLs it lists.

        Returns:
            Page URLs in document order

        Raises:
            SitemapProviderError: If the top-level sitemap cannot be fetched or parsed
        """
        await self._ensure_session()

        urls: List[str] = []
        seen_urls: Set[str] = set()
        processed_sitemaps: Set[str] = set()

        await self._process_sitemap(self.sitemap_url, urls, seen_urls, processed_sitemaps, 0)

        logger.debug(f"Sitemap discovery completed for {self.sitemap_url}: {self._stats}")
        return urls

    async def _process_sitemap(
        self,
        sitemap_url: str,
        urls: List[str],
        seen_urls: Set[str],
        processed_sitemaps: Set[str],
        sitemap_depth: int
    ) -> None:
        """Process a single sitemap file, recursing into index files."""
        if sitemap_depth >= self.max_depth:
            logger.warning(f"Maximum sitemap depth reached: {sitemap_url}")
            return

        if sitemap_url in processed_sitemaps:
            logger.debug(f"Sitemap already processed: {sitemap_url}")
            return
        processed_sitemaps.add(sitemap_url)

        try:
            content = await self._fetch_sitemap(sitemap_url)
            root = self._parse_xml(content, sitemap_url)
        except SitemapProviderError:
            self._stats["sitemaps_failed"] += 1
            raise

        if self._is_sitemap_index(root):
            self._stats["index_sitemaps"] += 1
            logger.debug(f"Processing sitemap index: {sitemap_url}")

            for nested_url in self._extract_locs(root, 'sitemap', sitemap_url):
                if len(urls) >= self.max_urls:
                    break
                try:
                    await self._process_sitemap(
                        nested_url, urls, seen_urls, processed_sitemaps, sitemap_depth + 1
                    )
                except (SitemapProviderError, aiohttp.ClientError, asyncio.TimeoutError) as e:
                    logger.warning(f"Skipping nested sitemap {nested_url}: {e}")
        else:
            logger.debug(f"Processing sitemap: {sitemap_url}")
            for url in self._extract_locs(root, 'url', sitemap_url):
                if len(urls) >= self.max_urls:
                    logger.warning(f"Reached maximum URL limit ({self.max_urls})")
                    break
                self._add_url(url, urls, seen_urls)

        self._stats["sitemaps_processed"] += 1

    async def _fetch_sitemap(self, sitemap_url: str) -> bytes:
        """Fetch sitemap content from URL.

        Raises:
            SitemapProviderError: On non-200 responses or undecodable gzip content
        """
        logger.debug(f"Fetching sitemap: {sitemap_url}")

        async with self._session.get(sitemap_url) as response:
            if response.status != 200:
                raise SitemapProviderError(
                    f"HTTP {response.status} fetching sitemap: {sitemap_url}"
                )

            content = await response.read()

            if self._is_gzipped_content(content):
                try:
                    content = gzip.decompress(content)
                    self._stats["compressed_sitemaps"] += 1
                except (OSError, EOFError, zlib.error) as e:
                    raise SitemapProviderError(f"Failed to decompress gzipped sitemap: {e}")

            return content

    def _is_gzipped_content(self, content: bytes) -> bool:
        """Check if content is still gzipped after transfer decoding.

        aiohttp already undoes ``Content-Encoding: gzip``, so only the magic
        number of a ``.xml.gz`` payload is trusted here.
        """
        return content.startswith(b'\x1f\x8b')

    def _parse_xml(self, content: bytes, sitemap_url: str) -> ET.Element:
        if not content or not content.strip():
            raise SitemapProviderError(f"Empty sitemap: {sitemap_url}")
        try:
            return ET.fromstring(content)
        except ET.ParseError as e:
            raise SitemapProviderError(f"Invalid XML in sitemap {sitemap_url}: {e}")

    def _is_sitemap_index(self, root: ET.Element) -> bool:
        """Check if XML represents a sitemap index file."""
        if root.tag.endswith('}sitemapindex') or root.tag == 'sitemapindex':
            return True

        for child in root:
            if child.tag.endswith('}sitemap') or child.tag == 'sitemap':
                return True

        return False

    def _extract_locs(self, root: ET.Element, element: str, base_url: str) -> List[str]:
        """Extract <loc> values of <url> or <sitemap> children."""
        elements = root.findall(f'.//sitemap:{element}', self.SITEMAP_NS)
        if not elements:
            # Fallback without namespace
            elements = root.findall(f'.//{element}')

        locs = []
        for elem in elements:
            loc_elem = elem.find('sitemap:loc', self.SITEMAP_NS)
            if loc_elem is None:
                loc_elem = elem.find('loc')

            if loc_elem is None or not loc_elem.text or not loc_elem.text.strip():
                logger.debug(f"{element} element missing loc")
                continue

            locs.append(urljoin(base_url, loc_elem.text.strip()))

        return locs

    def _add_url(self, url: str, urls: List[str], seen_urls: Set[str]) -> None:
        self._stats["urls_discovered"] += 1

        if not is_valid_http_url(url):
            self._stats["invalid_urls"] += 1
            logger.debug(f"Invalid URL from sitemap: {url}")
            return

        if url in seen_urls:
            self._stats["duplicate_urls"] += 1
            return

        seen_urls.add(url)
        urls.append(url)

    def get_stats(self) -> dict:
        """Get provider statistics."""
        return {
            "provider": "sitemap",
            **self._stats,
            "sitemap_url": self.sitemap_url,
            "max_urls": self.max_urls,
            "max_depth": self.max_depth
        }
