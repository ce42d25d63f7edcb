"""
Page context extraction.

The captioning prompt is grounded with the title and meta description of the
page the images come from. Parsers are isolated behind ``PageContextParser`` so
the extraction strategy can change without touching the aggregator. Every
parser follows the same contract: a field that cannot be found is returned as
an empty string, parsing itself never raises.
"""

import logging
import re
from abc import ABC, abstractmethod

import httpx
from bs4 import BeautifulSoup

from .direct import fetch_text, run_blocking
from .exceptions import PageFetchError
from .models import PageContext

logger = logging.getLogger(__name__)


class PageContextParser(ABC):
    """Extracts a PageContext from raw page markup."""

    @abstractmethod
    def parse(self, markup: str, url: str = "") -> PageContext:
        """Return the page title and description found in markup."""


class RegexPageContextParser(PageContextParser):
    """Pattern-matching parser; takes the first case-insensitive match."""

    TITLE_PATTERN = re.compile(r"<title>(.*?)</title>", re.IGNORECASE)
    DESCRIPTION_PATTERN = re.compile(
        r'<meta\s+name="description"\s+content="(.*?)"', re.IGNORECASE
    )

    def parse(self, markup: str, url: str = "") -> PageContext:
        title_match = self.TITLE_PATTERN.search(markup)
        description_match = self.DESCRIPTION_PATTERN.search(markup)
        return PageContext(
            url=url,
            title=title_match.group(1) if title_match else "",
            description=description_match.group(1) if description_match else "",
        )


class SoupPageContextParser(PageContextParser):
    """BeautifulSoup parser; tolerant of attribute order and quoting."""

    def parse(self, markup: str, url: str = "") -> PageContext:
        soup = BeautifulSoup(markup, "html.parser")

        title = ""
        title_tag = soup.find("title")
        if title_tag:
            title = title_tag.get_text(strip=True)

        description = ""
        meta_tag = soup.find(
            "meta", attrs={"name": re.compile(r"^description$", re.IGNORECASE)}
        )
        if meta_tag:
            description = (meta_tag.get("content") or "").strip()

        return PageContext(url=url, title=title, description=description)


PARSERS: dict[str, type[PageContextParser]] = {
    "regex": RegexPageContextParser,
    "html": SoupPageContextParser,
}


def get_parser(name: str) -> PageContextParser:
    """Return a parser instance by its configuration name."""
    try:
        return PARSERS[name]()
    except KeyError:
        raise ValueError(
            f"Unknown page parser '{name}'. Available parsers: {', '.join(PARSERS)}"
        ) from None


async def fetch_page_context(
    client: httpx.AsyncClient,
    url: str,
    parser: PageContextParser,
) -> PageContext:
    """
    Download the page at url and extract its context.

    Raises:
        PageFetchError: If the page cannot be reached. An error status still
            yields whatever context its body carries.
    """
    markup = await fetch_text(client, url, PageFetchError, require_success=False)
    context = await run_blocking(parser.parse, markup, url)
    logger.info(
        "Page context for %s: title=%r, description=%d chars",
        url,
        context.title,
        len(context.description),
    )
    return context
