"""Sitemap discovery across the conventional sitemap locations of a site.

The resolver probes a fixed, ordered list of sitemap paths under the
site's scheme and host. Probes are evaluated lazily and the first one
that yields page URLs wins; the remaining locations are never
requested. When no location yields anything, the run falls back to
auditing the root URL alone.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Iterator, List, Optional, Tuple

import aiohttp

from ..models.crawl import CandidateUrlSet, DiscoverySource
from ..utils.url_normalizer import get_base_url
from .sitemap_provider import DEFAULT_USER_AGENT, SitemapProvider, SitemapProviderError


logger = logging.getLogger(__name__)


# Plain sitemap, index sitemap, nested sitemap, WordPress core sitemap
SITEMAP_PATHS = (
    "/sitemap.xml",
    "/sitemap_index.xml",
    "/sitemap/sitemap.xml",
    "/wp-sitemap.xml",
)

SitemapFetcher = Callable[[str], Awaitable[List[str]]]

Probe = Tuple[str, Callable[[], Awaitable[List[str]]]]


class SitemapResolver:
    """Resolve the candidate URL set for a site from its sitemap."""

    def __init__(
        self,
        timeout: float = 30,
        user_agent: str = DEFAULT_USER_AGENT,
        sitemap_paths: Tuple[str, ...] = SITEMAP_PATHS,
        fetcher: Optional[SitemapFetcher] = None
    ):
        """Initialize sitemap resolver.

        Args:
            timeout: Timeout in seconds for each probed location
            user_agent: User-Agent string for sitemap requests
            sitemap_paths: Ordered sitemap paths to probe
            fetcher: Coroutine returning the page URLs of one sitemap URL;
                defaults to fetching with SitemapProvider
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self.sitemap_paths = tuple(sitemap_paths)
        self._fetcher = fetcher or self._fetch_with_provider

    async def _fetch_with_provider(self, sitemap_url: str) -> List[str]:
        async with SitemapProvider(
            sitemap_url,
            timeout=self.timeout,
            user_agent=self.user_agent
        ) as provider:
            return await provider.fetch_urls()

    def sitemap_locations(self, root_url: str) -> List[str]:
        """Sitemap URLs probed for a site, in probing order."""
        base_url = get_base_url(root_url)
        return [f"{base_url}{path}" for path in self.sitemap_paths]

    def probes(self, root_url: str) -> Iterator[Probe]:
        """Lazily yield (location, attempt) pairs in probing order."""
        for location in self.sitemap_locations(root_url):
            yield location, (lambda location=location: self._fetcher(location))

    async def _attempt(self, location: str, attempt: Callable[[], Awaitable[List[str]]]) -> List[str]:
        """Run one probe, treating any failure as "not found here"."""
        logger.info(f"Checking {location}...")
        try:
            return list(await asyncio.wait_for(attempt(), timeout=self.timeout) or [])
        except asyncio.TimeoutError:
            logger.debug(f"Timed out fetching sitemap at {location}")
        except (SitemapProviderError, aiohttp.ClientError) as e:
            logger.debug(f"No sitemap at {location}: {e}")
        except Exception as e:
            # Malformed responses surface as assorted errors; all mean "not here"
            logger.debug(f"Unexpected error probing {location}: {e}")
        return []

    async def resolve(self, root_url: str) -> CandidateUrlSet:
        """Discover candidate page URLs for a site.

        Args:
            root_url: Absolute root URL of the site

        Returns:
            CandidateUrlSet tagged ``sitemap`` with the first non-empty
            sitemap's URLs, or tagged ``fallback`` containing only root_url
        """
        for location, attempt in self.probes(root_url):
            urls = await self._attempt(location, attempt)
            if urls:
                logger.info(f"Found sitemap with {len(urls)} URLs at {location}")
                return CandidateUrlSet(
                    urls=urls,
                    source=DiscoverySource.SITEMAP,
                    sitemap_url=location
                )

        logger.warning("No sitemap found, will scan homepage only")
        return CandidateUrlSet(urls=[root_url], source=DiscoverySource.FALLBACK)
