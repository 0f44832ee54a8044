"""Selector-driven record extraction from HTML documents."""

from typing import List, Optional
from urllib.parse import urljoin

import structlog
from bs4 import BeautifulSoup
from soupsieve import SelectorSyntaxError

from shopscraper.core.exceptions import FetchError
from shopscraper.scrapers.base import Record

logger = structlog.get_logger(__name__)


class RecordExtractor:
    """Turns a page's HTML into Record objects.

    Every element matched by the selector yields exactly one record, in
    document order. Images are looked up inside the nearest enclosing
    element that matches ``image_container``.
    """

    def __init__(self, image_container: Optional[str] = None, parser: str = "lxml"):
        """Initialize the extractor.

        Args:
            image_container: CSS selector of the listing card that holds the
                image (e.g. ".product_pod"); None disables image lookup
            parser: BeautifulSoup tree builder
        """
        self.image_container = image_container
        self.parser = parser

    def extract(self, html: str, selector: str, page_url: str) -> List[Record]:
        """Extract records from a document.

        Args:
            html: Page markup
            selector: CSS selector for listing elements
            page_url: URL the markup was loaded from, for resolving images

        Raises:
            FetchError: If the markup or selector cannot be processed
        """
        try:
            soup = BeautifulSoup(html, self.parser)
            elements = soup.select(selector)
        except SelectorSyntaxError as e:
            raise FetchError(page_url, f"invalid selector {selector!r}: {e}") from e
        except (ValueError, TypeError) as e:
            raise FetchError(page_url, f"could not parse document: {e}") from e

        records = [self._to_record(el, page_url) for el in elements]
        logger.debug("records_extracted", url=page_url, count=len(records))
        return records

    def _to_record(self, element, page_url: str) -> Record:
        # Whole text trimmed at the ends; inner spacing between child tags is kept
        title = (element.get("title") or "").strip() or element.get_text().strip()
        return Record(
            title=title,
            url=element.get("href"),
            image=self._resolve_image(element, page_url),
        )

    def _resolve_image(self, element, page_url: str) -> Optional[str]:
        """Find the card image for an element and make its src absolute."""
        if not self.image_container:
            return None
        container = element.css.closest(self.image_container)
        if container is None:
            return None
        img = container.select_one("img")
        if img is None:
            return None
        src = img.get("src")
        if not src:
            return None
        return urljoin(page_url, src)
