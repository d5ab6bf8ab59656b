import gzip
from unittest.mock import Mock

import pytest

from sitemapcrawl.domain.http_response import HttpResponse
from sitemapcrawl.exceptions import HttpFetchError, SitemapFetchError
from sitemapcrawl.services.sitemap_service import SitemapService

URLSET = """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"
        xmlns:image="http://www.google.com/schemas/sitemap-image/1.1">
  <url><loc>https://example.com/a</loc><lastmod>2024-01-01</lastmod></url>
  <url>
    <loc> https://example.com/b </loc>
    <image:image><image:loc>https://example.com/b.png</image:loc></image:image>
  </url>
  <url><loc>https://example.com/a</loc></url>
</urlset>
"""

INDEX = """<?xml version="1.0" encoding="UTF-8"?>
<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <sitemap><loc>https://example.com/posts.xml</loc></sitemap>
  <sitemap><loc>https://example.com/pages.xml.gz</loc></sitemap>
  <sitemap><loc>https://example.com/broken.xml</loc></sitemap>
</sitemapindex>
"""


def _response(text="", content=None):
    return HttpResponse(200, text, "application/xml", content if content is not None else text.encode())


def test_parse_urlset_keeps_order_and_duplicates():
    service = SitemapService(http_service=Mock())
    urls, children = service.parse(URLSET)
    assert urls == ["https://example.com/a", "https://example.com/b", "https://example.com/a"]
    assert children == []


def test_parse_rejects_non_sitemap():
    with pytest.raises(ValueError):
        SitemapService(http_service=Mock()).parse("<html><body>nope</body></html>")


def test_fetch_passes_sitemap_timeout():
    http = Mock()
    http.fetch.return_value = _response(URLSET)
    SitemapService(http_service=http, timeout=15).fetch_sitemap_urls("https://example.com/sitemap.xml")
    http.fetch.assert_called_once_with("https://example.com/sitemap.xml", timeout=15)


def test_follows_sitemap_index_and_gzip_children():
    posts = '<urlset><url><loc>https://example.com/p1</loc></url></urlset>'
    pages = '<urlset><url><loc>https://example.com/about</loc></url></urlset>'
    responses = {
        "https://example.com/sitemap.xml": _response(INDEX),
        "https://example.com/posts.xml": _response(posts),
        "https://example.com/pages.xml.gz": _response(text="\x1f\x8b garbage", content=gzip.compress(pages.encode())),
    }

    def fetch(url, timeout=None):
        if url not in responses:
            raise HttpFetchError(url, status_code=404)
        return responses[url]

    http = Mock()
    http.fetch.side_effect = fetch
    urls = SitemapService(http_service=http).fetch_sitemap_urls("https://example.com/sitemap.xml")
    assert urls == ["https://example.com/p1", "https://example.com/about"]


def test_child_sitemap_visited_once():
    index = """<sitemapindex>
      <sitemap><loc>https://example.com/s.xml</loc></sitemap>
      <sitemap><loc>https://example.com/s.xml</loc></sitemap>
    </sitemapindex>"""
    child = '<urlset><url><loc>https://example.com/x</loc></url></urlset>'
    http = Mock()
    http.fetch.side_effect = lambda url, timeout=None: _response(index if url.endswith("root.xml") else child)

    urls = SitemapService(http_service=http).fetch_sitemap_urls("https://example.com/root.xml")
    assert urls == ["https://example.com/x"]
    assert http.fetch.call_count == 2


def test_root_fetch_failure_raises_sitemap_fetch_error():
    http = Mock()
    http.fetch.side_effect = HttpFetchError("https://example.com/sitemap.xml", status_code=500)
    with pytest.raises(SitemapFetchError) as exc_info:
        SitemapService(http_service=http).fetch_sitemap_urls("https://example.com/sitemap.xml")
    assert exc_info.value.sitemap_url == "https://example.com/sitemap.xml"


def test_root_that_is_not_a_sitemap_raises():
    http = Mock()
    http.fetch.return_value = _response("<html>not xml</html>")
    with pytest.raises(SitemapFetchError, match="not a sitemap"):
        SitemapService(http_service=http).fetch_sitemap_urls("https://example.com/sitemap.xml")


def test_empty_urlset_is_valid():
    http = Mock()
    http.fetch.return_value = _response("<urlset></urlset>")
    assert SitemapService(http_service=http).fetch_sitemap_urls("https://example.com/sitemap.xml") == []
