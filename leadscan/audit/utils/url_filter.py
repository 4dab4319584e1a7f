"""Selection of scannable HTML pages from a discovered URL list.

Sitemaps routinely list documents and media next to pages. Those
resources cannot be audited as HTML, so they are dropped by file
extension before the list is truncated to the operator's page cap.
Order is preserved because it decides which pages a capped or
interrupted run covers.
"""

import logging
from typing import Iterable, List, Sequence, Union
from urllib.parse import urlparse

from ..models.crawl import CandidateUrlSet, FilteredUrls


logger = logging.getLogger(__name__)


DEFAULT_MAX_PAGES = 10

# Documents, images, spreadsheets and archives
DENIED_EXTENSIONS = (
    '.pdf',
    '.jpg', '.jpeg',
    '.png', '.gif',
    '.doc', '.docx',
    '.xls', '.xlsx',
    '.zip', '.rar',
)


def is_html_candidate(url: str) -> bool:
    """Check whether a URL does not point at a denied resource type.

    The suffix is checked on the URL path so query strings and fragments
    do not hide a document extension.
    """
    lower = url.strip().lower()
    try:
        path = urlparse(lower).path
    except ValueError:
        path = lower
    return not (path.endswith(DENIED_EXTENSIONS) or lower.endswith(DENIED_EXTENSIONS))


def filter_urls(
    candidates: Union[CandidateUrlSet, Sequence[str]],
    max_pages: int = DEFAULT_MAX_PAGES
) -> FilteredUrls:
    """Reduce discovered URLs to the ordered list of pages to scan.

    Args:
        candidates: Candidate URL set or plain URL sequence
        max_pages: Maximum number of pages to keep

    Returns:
        FilteredUrls with the first ``max_pages`` surviving URLs

    Raises:
        ValueError: If max_pages is not a positive integer
    """
    if isinstance(max_pages, bool) or not isinstance(max_pages, int) or max_pages < 1:
        raise ValueError(f"max_pages must be a positive integer, got {max_pages!r}")

    urls: Iterable[str] = candidates.urls if isinstance(candidates, CandidateUrlSet) else candidates
    all_urls: List[str] = list(urls)

    html_urls = [url for url in all_urls if is_html_candidate(url)]
    selected = html_urls[:max_pages]

    logger.info(
        f"Filtered to {len(html_urls)} HTML pages of {len(all_urls)} found, "
        f"using first {len(selected)}"
    )

    return FilteredUrls(
        urls=selected,
        total_found=len(all_urls),
        html_count=len(html_urls),
        max_pages=max_pages
    )
