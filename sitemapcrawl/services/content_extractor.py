import logging
import re
from typing import Callable, Optional, Protocol
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from sitemapcrawl.domain.document import ExtractedContent
from sitemapcrawl.services.markdown_renderer import MarkdownRenderer
from sitemapcrawl.utils.datetime_utils import parse_iso_utc, to_iso_z

logger = logging.getLogger(__name__)

EXCERPT_LENGTH = 200

# Elements that never hold the main content
UNWANTED_TAGS = [
    'script', 'style', 'noscript', 'template',
    'nav', 'header', 'footer',
    'aside', 'sidebar',
    'form', 'button',
    'iframe', 'embed', 'object',
    'select', 'input', 'textarea',
    'svg', 'canvas',
]

# Class/id tokens associated with navigation and boilerplate
UNWANTED_PATTERNS = {
    'nav', 'menu', 'sidebar', 'header', 'footer',
    'advertisement', 'ad', 'ads', 'banner', 'popup',
    'breadcrumb', 'breadcrumbs', 'social', 'share', 'cookie',
    'related', 'recommend', 'promo', 'widget', 'comments',
}

# Never pruned by class/id, so a themed <body> or <article> survives
PROTECTED_TAGS = {'html', 'body', 'main', 'article'}

_TOKEN_SPLIT = re.compile(r"[-_\s]+")


class ContentExtractor(Protocol):
    def extract(self, url: str, html: str) -> ExtractedContent: ...


class HtmlContentExtractor:
    """Readability-style extraction on top of BeautifulSoup.

    Metadata comes from the original document (OpenGraph/meta tags); the body
    is taken from a cleaned copy, preferring <article>, then <main>, then <body>.
    """

    def __init__(
        self,
        soup_factory: Optional[Callable[[str], BeautifulSoup]] = None,
        excerpt_length: int = EXCERPT_LENGTH,
    ):
        self._soup_factory = soup_factory or (lambda html: BeautifulSoup(html, "html.parser"))
        self.excerpt_length = excerpt_length

    def extract(self, url: str, html: str) -> ExtractedContent:
        soup = self._soup_factory(html or "")

        content_soup = self._soup_factory(str(soup))
        self._strip_boilerplate(content_soup)
        root = self._content_root(content_soup)

        body_markdown = MarkdownRenderer(base_url=url).render(root)
        text = root.get_text(separator=" ", strip=True)
        logger.debug("Extracted %s characters of text from %s", len(text), url)

        return ExtractedContent(
            title=self._title(soup),
            excerpt=self._excerpt(soup, root),
            site_name=self._meta(soup, "og:site_name", "application-name") or urlparse(url).hostname,
            word_count=len(text.split()),
            length=len(text),
            body_markdown=body_markdown,
            author=self._author(soup),
            published_at=self._published_at(soup),
            lead_image_url=self._lead_image(url, soup, root),
        )

    def _meta(self, soup: BeautifulSoup, *keys: str) -> Optional[str]:
        for key in keys:
            for attr in ("property", "name", "itemprop"):
                tag = soup.find("meta", attrs={attr: key})
                if tag is not None and (tag.get("content") or "").strip():
                    return tag["content"].strip()
        return None

    def _title(self, soup: BeautifulSoup) -> Optional[str]:
        title = self._meta(soup, "og:title", "twitter:title")
        if title:
            return title
        if soup.title is not None and soup.title.get_text(strip=True):
            return soup.title.get_text(strip=True)
        h1 = soup.find("h1")
        if h1 is not None and h1.get_text(strip=True):
            return h1.get_text(" ", strip=True)
        return None

    def _excerpt(self, soup: BeautifulSoup, root) -> Optional[str]:
        description = self._meta(soup, "description", "og:description", "twitter:description")
        if description:
            return description
        for p in root.find_all("p"):
            text = p.get_text(" ", strip=True)
            if text:
                return self._truncate(text)
        return None

    def _truncate(self, text: str) -> str:
        if len(text) <= self.excerpt_length:
            return text
        cut = text[: self.excerpt_length].rsplit(" ", 1)[0]
        return cut.rstrip(",.;:") + "..."

    def _author(self, soup: BeautifulSoup) -> Optional[str]:
        author = self._meta(soup, "author", "article:author", "twitter:creator")
        if author:
            return author
        link = soup.find(attrs={"rel": "author"})
        if link is not None and link.get_text(strip=True):
            return link.get_text(" ", strip=True)
        return None

    def _published_at(self, soup: BeautifulSoup) -> Optional[str]:
        raw = self._meta(soup, "article:published_time", "datePublished", "pubdate", "date", "dc.date")
        if raw is None:
            time_tag = soup.find("time", attrs={"datetime": True})
            raw = time_tag["datetime"].strip() if time_tag is not None else None
        if not raw:
            return None
        parsed = parse_iso_utc(raw)
        return to_iso_z(parsed) if parsed is not None else raw

    def _lead_image(self, url: str, soup: BeautifulSoup, root) -> Optional[str]:
        image = self._meta(soup, "og:image", "twitter:image")
        if image:
            return urljoin(url, image)
        img = root.find("img", src=True)
        if img is not None:
            return urljoin(url, img["src"])
        return None

    def _strip_boilerplate(self, soup: BeautifulSoup) -> None:
        for tag in UNWANTED_TAGS:
            for element in soup.find_all(tag):
                if not element.decomposed:
                    element.decompose()

        candidates = [el for el in soup.find_all(True) if el.name not in PROTECTED_TAGS]
        for element in candidates:
            if element.decomposed:
                continue
            if self._is_boilerplate(element):
                element.decompose()

    def _is_boilerplate(self, element: Tag) -> bool:
        tokens = list(element.get("class") or [])
        if element.get("id"):
            tokens.append(element["id"])
        for token in tokens:
            parts = _TOKEN_SPLIT.split(str(token).lower())
            if UNWANTED_PATTERNS.intersection(parts):
                return True
        return False

    def _content_root(self, soup: BeautifulSoup):
        for candidate in (
            soup.find("article"),
            soup.find("main"),
            soup.find(attrs={"role": "main"}),
            soup.body,
        ):
            if candidate is not None and candidate.get_text(strip=True):
                return candidate
        return soup
