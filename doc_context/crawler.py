"""Bounded, single-hop documentation crawler driven by a headless browser."""
from __future__ import annotations

import logging
import re
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, ContextManager, Iterable, Iterator, Optional
from urllib.parse import SplitResult, urldefrag, urljoin, urlsplit

from playwright.sync_api import Browser, Page, sync_playwright
from playwright.sync_api import Error as PlaywrightError

from .errors import CrawlError
from .schemas import CrawlResult
from .scrape import extract_page_text

logger = logging.getLogger(__name__)

MAX_LINKS_TO_CRAWL = 10
NAVIGATION_TIMEOUT_MS = 30_000
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)
DOCS_PATH_PREFIX = "/docs"

_DEFAULT_PORTS = {"http": 80, "https": 443}
_SKIPPED_EXTENSIONS_RE = re.compile(r"\.(pdf|zip|png|jpg|jpeg|gif|svg|css|js)$", re.I)
_ANCHOR_HREFS_JS = "anchors => anchors.map(a => a.href)"

Origin = tuple[str, str, Optional[int]]
BrowserLauncher = Callable[[], ContextManager[Any]]


def _origin(parts: SplitResult) -> Origin:
    scheme = parts.scheme.lower()
    # .port raises ValueError for out-of-range values
    port = parts.port or _DEFAULT_PORTS.get(scheme)
    return scheme, (parts.hostname or "").lower(), port


def _strip_fragment(url: str) -> str:
    return urldefrag(url).url


@dataclass(frozen=True, slots=True)
class CrawlTarget:
    url: str
    origin: Origin
    allowed_path_prefix: str

    @classmethod
    def from_url(cls, url: str) -> CrawlTarget:
        parts = urlsplit(url)
        path = parts.path or "/"
        prefix = DOCS_PATH_PREFIX if path.startswith(DOCS_PATH_PREFIX) else "/"
        return cls(url=url, origin=_origin(parts), allowed_path_prefix=prefix)


def discover_links(
    hrefs: Iterable[str], target: CrawlTarget, visited: set[str]
) -> list[str]:
    """Return crawlable links in discovery order.

    Accepted links are added to ``visited`` straight away, so an address that
    appears several times on a page is only queued once.
    """
    candidates: list[str] = []
    for href in hrefs:
        try:
            absolute = _strip_fragment(urljoin(target.url, href))
            parts = urlsplit(absolute)
            origin = _origin(parts)
        except ValueError:
            logger.debug("Ignoring unparsable link %r", href)
            continue

        path = parts.path or "/"
        if origin != target.origin:
            continue
        if not path.startswith(target.allowed_path_prefix):
            continue
        if absolute in visited:
            continue
        if _SKIPPED_EXTENSIONS_RE.search(path):
            continue

        candidates.append(absolute)
        visited.add(absolute)
    return candidates


@contextmanager
def launch_browser(headless: bool = True) -> Iterator[Browser]:
    """Provide a browser session that is closed on every exit path."""
    with sync_playwright() as playwright:
        logger.info("Launching Chromium (headless=%s)", headless)
        browser = playwright.chromium.launch(headless=headless)
        try:
            yield browser
        finally:
            logger.info("Closing browser")
            browser.close()


class DocCrawler:
    """Crawl a start page plus a bounded number of same-section pages."""

    def __init__(
        self,
        launcher: BrowserLauncher = launch_browser,
        max_links: int = MAX_LINKS_TO_CRAWL,
        navigation_timeout_ms: int = NAVIGATION_TIMEOUT_MS,
        user_agent: str = USER_AGENT,
    ) -> None:
        self._launcher = launcher
        self.max_links = max_links
        self.navigation_timeout_ms = navigation_timeout_ms
        self.user_agent = user_agent

    def crawl(self, start_url: str) -> CrawlResult:
        """Return the combined text of the start page and its linked pages.

        Raises :class:`CrawlError` when nothing could be gathered. If the
        crawl breaks after some text was collected, the partial result is
        returned with ``interrupted`` set.
        """
        target = CrawlTarget.from_url(start_url)
        result = CrawlResult(start_url=start_url)
        start = time.perf_counter()
        try:
            with self._launcher() as browser:
                page = browser.new_page(user_agent=self.user_agent)
                self._crawl_pages(page, target, result)
        except Exception as exc:
            if not result.page_texts:
                logger.error("Crawling failed for %s: %s", start_url, exc)
                raise CrawlError(start_url, exc) from exc
            logger.warning(
                "Crawling of %s interrupted after %d pages: %s",
                start_url,
                len(result.page_texts),
                exc,
            )
            result.interrupted = True

        logger.info(
            "Crawled %d pages from %s in %.2fs",
            len(result.page_texts),
            start_url,
            time.perf_counter() - start,
        )
        return result

    def _navigate(self, page: Page, url: str) -> None:
        page.goto(url, wait_until="networkidle", timeout=self.navigation_timeout_ms)

    def _record_page(self, page: Page, visited: set[str], result: CrawlResult) -> None:
        final_url = _strip_fragment(page.url)
        visited.add(final_url)
        result.visited_pages.append(final_url)
        result.page_texts.append(extract_page_text(page))

    def _crawl_pages(self, page: Page, target: CrawlTarget, result: CrawlResult) -> None:
        visited = {_strip_fragment(target.url)}

        logger.info("Navigating to initial URL: %s", target.url)
        self._navigate(page, target.url)
        self._record_page(page, visited, result)

        hrefs = page.eval_on_selector_all("a[href]", _ANCHOR_HREFS_JS)
        candidates = discover_links(hrefs, target, visited)
        logger.info(
            "Found %d valid links to potentially crawl (max %d).",
            len(candidates),
            self.max_links,
        )

        for index, link in enumerate(candidates[: self.max_links], start=1):
            logger.info("Crawling linked page (%d/%d): %s", index, self.max_links, link)
            try:
                self._navigate(page, link)
            except PlaywrightError as exc:
                logger.warning("Failed to navigate to %s: %s", link, exc)
                continue
            self._record_page(page, visited, result)

        if len(candidates) > self.max_links:
            logger.info("Reached max links to crawl limit.")
