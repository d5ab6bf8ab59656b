import logging
from datetime import datetime
from typing import Callable, Optional

import yaml

from sitemapcrawl.domain.document import ExtractedContent, ExtractedDocument, SerializedDocument
from sitemapcrawl.exceptions import EmptyContentError
from sitemapcrawl.services.filename_deriver import derive_filename
from sitemapcrawl.utils.datetime_utils import to_iso_z, utc_now

logger = logging.getLogger(__name__)

FRONTMATTER_DELIMITER = "---"
UNTITLED = "Untitled"

# document field -> frontmatter key, in the names the output format has always used
REQUIRED_KEYS = {
    "title": "title",
    "excerpt": "excerpt",
    "site_name": "siteName",
    "url": "url",
    "word_count": "wordCount",
    "length": "length",
    "processed_at": "processedAt",
}
OPTIONAL_KEYS = {
    "author": "author",
    "published_at": "date_published",
    "lead_image_url": "lead_image_url",
}


class DocumentAssembler:
    """Turns extracted content into a markdown file with YAML frontmatter."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or utc_now

    def assemble(self, url: str, content: ExtractedContent) -> SerializedDocument:
        if not content.body_markdown or not content.body_markdown.strip():
            logger.warning("No content found for %s", url)
            raise EmptyContentError(url)

        document = ExtractedDocument.from_content(url, content, processed_at=to_iso_z(self._clock()))
        text = self.serialize(document)
        return SerializedDocument(filename=derive_filename(url), text=text, document=document)

    def serialize(self, document: ExtractedDocument) -> str:
        frontmatter = dump_metadata(to_metadata(document))
        heading = document.title or UNTITLED
        return (
            f"{FRONTMATTER_DELIMITER}\n{frontmatter}{FRONTMATTER_DELIMITER}\n\n"
            f"# {heading}\n\n{document.body_markdown.strip()}\n"
        )


def to_metadata(document: ExtractedDocument) -> dict:
    metadata = {key: getattr(document, field) for field, key in REQUIRED_KEYS.items()}
    for field, key in OPTIONAL_KEYS.items():
        value = getattr(document, field)
        if value is not None:
            metadata[key] = value
    return metadata


def dump_metadata(metadata: dict) -> str:
    return yaml.safe_dump(
        metadata,
        sort_keys=True,
        default_flow_style=False,
        allow_unicode=True,
        width=float("inf"),
    )


def parse_document(text: str) -> tuple[dict, str]:
    """Split an assembled document into (metadata, markdown body).

    The body includes the `# title` heading. Raises ValueError when the text
    does not start with a frontmatter block.
    """
    lines = text.split("\n")
    if not lines or lines[0] != FRONTMATTER_DELIMITER:
        raise ValueError("document does not start with a frontmatter block")
    try:
        end = lines.index(FRONTMATTER_DELIMITER, 1)
    except ValueError:
        raise ValueError("unterminated frontmatter block") from None
    metadata = yaml.safe_load("\n".join(lines[1:end])) or {}
    if not isinstance(metadata, dict):
        raise ValueError("frontmatter is not a mapping")
    body = "\n".join(lines[end + 1:]).strip("\n")
    return metadata, body
