"""Readable text extraction for rendered documentation pages."""
from __future__ import annotations

import logging
import re
from typing import Protocol

from bs4 import BeautifulSoup
from playwright.sync_api import Error as PlaywrightError

logger = logging.getLogger(__name__)

NOISE_SELECTORS = "script, style, nav, header, footer, .sidebar, #sidebar, noscript"
CONTENT_SELECTORS = (
    'main, article, .main-content, .content, #main, #content, [role="main"]'
)

# Only block boundaries separate words; inline markup such as highlighted
# code tokens joins up as it renders.
BLOCK_TAGS = (
    "address", "article", "aside", "blockquote", "br", "dd", "details", "div",
    "dl", "dt", "figcaption", "figure", "form", "h1", "h2", "h3", "h4", "h5",
    "h6", "hr", "li", "main", "ol", "p", "pre", "section", "summary", "table",
    "td", "th", "tr", "ul",
)

_WHITESPACE_RE = re.compile(r"\s+")


class LoadedPage(Protocol):
    @property
    def url(self) -> str: ...

    def content(self) -> str: ...


def extract_text(html: str) -> str:
    """Return the cleaned visible text of an HTML document.

    Noise elements are removed first, then the first content container in
    document order is used, falling back to ``<body>``.
    """
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")

    for tag in soup.select(NOISE_SELECTORS):
        # nested matches are already gone with their parent
        if not tag.decomposed:
            tag.decompose()

    container = soup.select_one(CONTENT_SELECTORS)
    if container is None:
        container = soup.body if soup.body is not None else soup
    for tag in container.find_all(BLOCK_TAGS):
        tag.insert_before(" ")
        tag.insert_after(" ")
    text = container.get_text()
    return _WHITESPACE_RE.sub(" ", text).strip()


def extract_page_text(page: LoadedPage) -> str:
    """Extract text from a snapshot of the currently loaded page.

    The live DOM is left untouched; failures yield an empty string.
    """
    try:
        html = page.content()
    except PlaywrightError as exc:
        logger.warning("Error extracting text from page %s: %s", page.url, exc)
        return ""
    return extract_text(html)
