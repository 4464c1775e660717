"""Site crawler that discovers article links on a single news site.

Traversal is depth-first in document order: a page's anchors are handled in
the order they appear, and every newly found page is explored completely
before the next anchor of the page that linked to it. The order matters
because an article whose listing carries no date inherits the date of the
article discovered just before it.
"""

import logging
import sys
from collections.abc import Iterator
from urllib.parse import urljoin, urlparse, urlunparse

import requests
from bs4 import BeautifulSoup, Tag
from tqdm import tqdm

from .config import RAGConfig
from .models import DiscoveredArticle

logger = logging.getLogger(__name__)

USER_AGENT_TEMPLATE = "PumaGPT-Indexer/1.0 (+mailto:{contact})"

# hrefs that never lead to a crawlable page
SKIPPED_HREF_PREFIXES = ("#", "mailto:", "tel:", "javascript:", "data:")


def normalize_url(url: str) -> str:
    """Drop the fragment and trailing slash and lowercase the host.

    The query string is kept; listing pages paginate with ``?offset=``.
    """
    parsed = urlparse(url)
    path = parsed.path.rstrip("/")
    return urlunparse((parsed.scheme.lower(), parsed.netloc.lower(), path, parsed.params, parsed.query, ""))


def is_article_url(url: str, section_marker: str = "blog") -> bool:
    """True when the URL path looks like ``/<section_marker>/<slug-with-hyphen>``.

    Only the path is checked. Links to other hosts are screened out by
    SiteCrawler before classification, so they never count as articles.
    """
    segments = [segment for segment in urlparse(url).path.split("/") if segment]
    if len(segments) < 2:
        return False
    return segments[-2] == section_marker and "-" in segments[-1]


def find_article_date(anchor: Tag, container_tag: str = "article", date_tag: str = "time") -> str:
    """Find the publication date shown next to an article link.

    Looks for the first ``date_tag`` inside the anchor's nearest ``container_tag``
    ancestor. Without such an ancestor the whole document is searched. Returns
    an empty string when no date is found.
    """
    scope = anchor.find_parent(container_tag)
    if scope is None:
        scope = next((parent for parent in anchor.parents if parent.parent is None), None)
    if scope is None:
        return ""

    date_element = scope.find(date_tag)
    if date_element is None:
        return ""
    return date_element.get_text().strip()


class SiteCrawler:
    """Depth-first crawler scoped to one site.

    Every unique URL is fetched exactly once per ``traverse()``. Fetch errors are
    not retried: they propagate and abort the crawl.
    """

    def __init__(self, config: RAGConfig, contact_email: str = "", show_progress: bool | None = None):
        """Initialize the crawler.

        Args:
            config: RAG configuration (base URL, section marker, date heuristics, timeout)
            contact_email: Contact address advertised in the User-Agent header
            show_progress: Override config.show_progress
        """
        self.config = config
        self.base_url = config.base_url
        self.request_timeout = config.request_timeout
        self.user_agent = USER_AGENT_TEMPLATE.format(contact=contact_email or "unknown")
        self.show_progress = config.show_progress if show_progress is None else show_progress

        parsed = urlparse(self.base_url)
        self.origin = f"{parsed.scheme}://{parsed.netloc}"
        host = (parsed.hostname or "").lower()
        self.site_host = host[4:] if host.startswith("www.") else host

        # Crawl state, reset by traverse()
        self.visited: set[str] = set()
        self.articles: list[DiscoveredArticle] = []
        self.fetch_count = 0

    def traverse(self, starting_url: str | None = None) -> list[DiscoveredArticle]:
        """Crawl the site and return article links in discovery order.

        Args:
            starting_url: Page to start from (defaults to config.base_url)

        Returns:
            Discovered articles with their best-effort date strings
        """
        start = normalize_url(starting_url or self.base_url)
        self.visited = {start}
        self.articles = []
        self.fetch_count = 0

        logger.info(f"[CRAWLER] Starting crawl from {start} (section marker: {self.config.section_marker!r})")

        pbar = tqdm(desc="Crawling site", unit="page", disable=not self.show_progress, file=sys.stderr)

        # Each frame is a page whose remaining anchors have not been processed yet
        stack: list[Iterator[Tag]] = [self._page_anchors(start)]
        pbar.update(1)

        while stack:
            anchor = next(stack[-1], None)
            if anchor is None:
                stack.pop()
                continue

            url = self._resolve_href(anchor.get("href"))
            if url is None or url in self.visited or not self._is_same_site(url):
                continue

            if is_article_url(url, self.config.section_marker):
                self.articles.append(DiscoveredArticle(url=url, date_string=self._date_for(anchor)))

            self.visited.add(url)
            stack.append(self._page_anchors(url))

            pbar.update(1)
            pbar.set_postfix_str(f"depth={len(stack)}, articles={len(self.articles)}", refresh=False)

        pbar.close()

        logger.info(f"[CRAWLER] Visited {len(self.visited)} pages, found {len(self.articles)} articles")
        return self.articles

    def fetch_page(self, url: str) -> tuple[str, str]:
        """Fetch a page and return (html, content_type).

        Raises:
            requests.RequestException: On connection errors or non-2xx responses
        """
        self.fetch_count += 1
        response = requests.get(url, headers={"User-Agent": self.user_agent}, timeout=self.request_timeout)
        response.raise_for_status()

        logger.info(f"[CRAWLER] Visited {url}")
        return response.content.decode("utf-8", errors="replace"), response.headers.get("content-type", "")

    def _page_anchors(self, url: str) -> Iterator[Tag]:
        """Fetch a page and return an iterator over its anchors in document order."""
        html, content_type = self.fetch_page(url)

        # Only parse HTML content, skip images/PDF/RSS but still count them as visited
        if content_type and "html" not in content_type:
            logger.debug(f"[CRAWLER] Not following links in non-HTML content: {url} ({content_type})")
            return iter(())

        soup = BeautifulSoup(html, "html.parser")
        return iter(soup.find_all("a", href=True))

    def _resolve_href(self, href: str | None) -> str | None:
        """Make an href absolute against the site origin and normalize it."""
        if not href:
            return None

        href = href.strip()
        if not href or href.lower().startswith(SKIPPED_HREF_PREFIXES):
            return None

        url = urljoin(self.origin + "/", href)
        if urlparse(url).scheme not in ("http", "https"):
            return None
        return normalize_url(url)

    def _is_same_site(self, url: str) -> bool:
        host = (urlparse(url).hostname or "").lower()
        return host == self.site_host or host.endswith("." + self.site_host)

    def _date_for(self, anchor: Tag) -> str:
        """Date near the anchor, else the previous article's date, else ""."""
        date_string = find_article_date(anchor, self.config.date_container_tag, self.config.date_tag)
        if date_string:
            return date_string
        if self.articles:
            return self.articles[-1].date_string
        return ""
