from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Optional


@dataclass(frozen=True)
class ExtractedContent:
    """What the content extractor pulls out of one fetched page."""

    title: Optional[str]
    excerpt: Optional[str]
    site_name: Optional[str]
    word_count: int
    length: int
    body_markdown: str
    author: Optional[str] = None
    published_at: Optional[str] = None
    lead_image_url: Optional[str] = None


@dataclass(frozen=True)
class ExtractedDocument:
    """Extracted content bound to its URL and stamped with the assembly time."""

    title: Optional[str]
    excerpt: Optional[str]
    site_name: Optional[str]
    url: str
    word_count: int
    length: int
    processed_at: str
    body_markdown: str
    author: Optional[str] = None
    published_at: Optional[str] = None
    lead_image_url: Optional[str] = None

    @classmethod
    def from_content(cls, url: str, content: ExtractedContent, processed_at: str) -> "ExtractedDocument":
        return cls(
            title=content.title,
            excerpt=content.excerpt,
            site_name=content.site_name,
            url=url,
            word_count=content.word_count,
            length=content.length,
            processed_at=processed_at,
            body_markdown=content.body_markdown,
            author=content.author,
            published_at=content.published_at,
            lead_image_url=content.lead_image_url,
        )


class SerializedDocument(NamedTuple):
    """Assembled output: the target file name and its full text."""
    filename: str
    text: str
    document: ExtractedDocument
