"""Tests for selector-driven record extraction."""

import pytest

from shopscraper.core.exceptions import FetchError
from shopscraper.scrapers.utils import RecordExtractor

from conftest import listing_page


PAGE_URL = "https://books.toscrape.com/catalogue/page-2.html"


class TestRecordExtractor:
    """One record per matched element, in document order."""

    def test_count_matches_selector(self):
        html = listing_page(["One", "Two", "Three"])
        result = RecordExtractor().extract(html, "article.product_pod h3 a", PAGE_URL)
        assert len(result) == 3

    def test_title_attribute_preferred(self):
        html = listing_page(["It's Only the Himalayas"])
        result = RecordExtractor().extract(html, "h3 a", PAGE_URL)
        assert result[0].title == "It's Only the Himalayas"
        assert result[0].url == "item-1/index.html"

    def test_falls_back_to_text(self):
        html = '<ul><li><a href="/p/1"> Desk Lamp </a></li><li><span>No link</span></li></ul>'
        result = RecordExtractor().extract(html, "li > *", PAGE_URL)
        assert [r.title for r in result] == ["Desk Lamp", "No link"]
        assert result[0].url == "/p/1"
        assert result[1].url is None

    def test_text_across_child_tags_keeps_inner_spaces(self):
        html = '<ul><li><a href="/p/1">\n  Desk <b>Lamp</b> <span class="tag">Pro</span>\n</a></li></ul>'
        result = RecordExtractor().extract(html, "li a", PAGE_URL)
        assert result[0].title == "Desk Lamp Pro"

    def test_blank_title_attribute_falls_back_to_text(self):
        html = '<ul><li><a href="/p/2" title="   ">Walnut <em>Side</em> Table</a></li></ul>'
        result = RecordExtractor().extract(html, "li a", PAGE_URL)
        assert result[0].title == "Walnut Side Table"

    def test_title_attribute_trimmed(self):
        html = '<ul><li><a href="/p/3" title="  Oak Shelf ">Oak...</a></li></ul>'
        assert RecordExtractor().extract(html, "li a", PAGE_URL)[0].title == "Oak Shelf"

    def test_image_resolved_against_page_url(self):
        html = listing_page(["Olio"])
        result = RecordExtractor(image_container=".product_pod").extract(html, "h3 a", PAGE_URL)
        assert result[0].image == "https://books.toscrape.com/media/cache/1.jpg"

    def test_absolute_image_kept(self):
        html = (
            '<div class="s-item"><img src="https://i.ebayimg.com/1.jpg">'
            '<a class="s-item__link" href="https://www.ebay.com/itm/1">Lego Set</a></div>'
        )
        result = RecordExtractor(image_container=".s-item").extract(html, "a.s-item__link", PAGE_URL)
        assert result[0].image == "https://i.ebayimg.com/1.jpg"

    def test_no_image_without_container(self):
        html = listing_page(["Olio"])
        assert RecordExtractor().extract(html, "h3 a", PAGE_URL)[0].image is None
        assert RecordExtractor(image_container=".missing").extract(html, "h3 a", PAGE_URL)[0].image is None

    def test_card_without_image(self):
        html = listing_page(["Olio"], with_images=False)
        result = RecordExtractor(image_container=".product_pod").extract(html, "h3 a", PAGE_URL)
        assert result[0].image is None

    def test_no_matches(self):
        assert RecordExtractor().extract("<html><body></body></html>", "h3 a", PAGE_URL) == []

    def test_invalid_selector_raises_fetch_error(self):
        with pytest.raises(FetchError):
            RecordExtractor().extract(listing_page(["A"]), "h3 a[", PAGE_URL)

    def test_html_parser_backend(self):
        result = RecordExtractor(parser="html.parser").extract(listing_page(["A", "B"]), "h3 a", PAGE_URL)
        assert [r.title for r in result] == ["A", "B"]
