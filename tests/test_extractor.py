"""Tests for HTML text and link extraction."""

import pytest
from conftest import make_html

from site_context_server.rag.extractor import HtmlExtractor, extract


@pytest.mark.unit
class TestHtmlExtractor:
    """Test HtmlExtractor."""

    def test_text_drops_boilerplate_regions(self):
        extractor = HtmlExtractor(make_html("Actual   content\n\n here."), "http://a.example/")

        text = extractor.text()

        assert text == "Actual content here."
        assert "tracking" not in text
        assert "Menu" not in text
        assert "Copyright" not in text
        assert "color: red" not in text
        assert "Test page" not in text

    def test_text_collapses_whitespace(self):
        html = "<html><body><p>  one\n\n\ttwo   </p><div>three</div></body></html>"

        assert HtmlExtractor(html, "http://a.example/").text() == "one two three"

    def test_text_without_body(self):
        assert HtmlExtractor("plain <b>fragment</b>", "http://a.example/").text() == "plain fragment"

    def test_links_are_normalized_same_host_set(self):
        html = make_html(
            "text",
            [
                "/about",
                "/about#team",
                "contact",
                "https://other.example/x",
                "/brochure.pdf",
                "mailto:hi@a.example",
            ],
        )

        links = HtmlExtractor(html, "http://a.example/docs/").links()

        assert links == {
            "http://a.example/about",
            "http://a.example/docs/contact",
            "http://a.example/nav-only",
        }

    def test_allowed_host_restricts_links(self):
        html = make_html("text", ["http://a.example/x", "http://b.example/y"])

        links = HtmlExtractor(html, "http://b.example/", allowed_host="a.example").links()

        assert links == {"http://a.example/x"}

    def test_broken_markup_does_not_raise(self):
        extractor = HtmlExtractor("<html><body><p>unclosed <a href='/ok'>ok<div></body", "http://a.example/")

        assert "unclosed" in extractor.text()
        assert extractor.links() == {"http://a.example/ok"}


@pytest.mark.unit
class TestExtract:
    """Test extract()."""

    def test_builds_page(self):
        page = extract(make_html("Hello world", ["/next"]), "http://a.example/start")

        assert page.url == "http://a.example/start"
        assert page.text.startswith("Hello world")
        assert "http://a.example/next" in page.outbound_links

    def test_truncates_text(self):
        page = extract(make_html("x" * 500), "http://a.example/", max_chars=100)

        assert len(page.text) == 100
