import re
from typing import Optional
from urllib.parse import urljoin

from bs4 import NavigableString, Tag

HEADINGS = {"h1": 1, "h2": 2, "h3": 3, "h4": 4, "h5": 5, "h6": 6}

BLOCK_TAGS = {
    "address", "article", "aside", "blockquote", "body", "details", "dd", "div", "dl", "dt",
    "figcaption", "figure", "footer", "header", "hr", "html", "li", "main", "ol", "p", "pre",
    "section", "summary", "table", "ul",
} | set(HEADINGS)

_WHITESPACE = re.compile(r"\s+")


def _squash(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _is_text(node) -> bool:
    # Comments, doctypes and CDATA are NavigableString subclasses
    return type(node) is NavigableString


class MarkdownRenderer:
    """Render a BeautifulSoup subtree as markdown.

    Covers what article bodies usually contain: headings, paragraphs, nested
    lists, block quotes, code, tables, links, emphasis and images. Anything
    else is flattened to its text.
    """

    def __init__(self, base_url: Optional[str] = None):
        self.base_url = base_url

    def render(self, root) -> str:
        return "\n\n".join(b for b in self._blocks(root) if b.strip()).strip()

    def _absolute(self, href: str) -> str:
        return urljoin(self.base_url, href) if self.base_url else href

    def _blocks(self, node) -> list[str]:
        blocks: list[str] = []
        inline: list[str] = []

        def flush():
            text = _squash("".join(inline))
            if text:
                blocks.append(text)
            inline.clear()

        for child in node.children:
            if isinstance(child, NavigableString):
                if _is_text(child):
                    inline.append(str(child))
                continue
            if not isinstance(child, Tag):
                continue
            if child.name in BLOCK_TAGS:
                flush()
                blocks.extend(self._block(child))
            else:
                inline.append(self._inline(child))
        flush()
        return blocks

    def _block(self, tag: Tag) -> list[str]:
        name = tag.name
        if name in HEADINGS:
            text = self._inline_children(tag)
            return [f"{'#' * HEADINGS[name]} {text}"] if text else []
        if name == "p":
            text = self._inline_children(tag)
            return [text] if text else []
        if name == "pre":
            code = tag.get_text().strip("\n")
            return [f"```\n{code}\n```"] if code.strip() else []
        if name == "hr":
            return ["---"]
        if name == "blockquote":
            inner = "\n\n".join(self._blocks(tag))
            if not inner:
                return []
            return ["\n".join(f"> {line}" if line else ">" for line in inner.splitlines())]
        if name in ("ul", "ol"):
            rendered = self._list(tag, ordered=name == "ol", depth=0)
            return [rendered] if rendered else []
        if name == "table":
            rendered = self._table(tag)
            return [rendered] if rendered else []
        return self._blocks(tag)

    def _list(self, tag: Tag, ordered: bool, depth: int) -> str:
        lines = []
        index = 1
        for li in tag.find_all("li", recursive=False):
            parts = []
            nested = []
            for child in li.children:
                if isinstance(child, Tag) and child.name in ("ul", "ol"):
                    sub = self._list(child, ordered=child.name == "ol", depth=depth + 1)
                    if sub:
                        nested.append(sub)
                elif isinstance(child, Tag) and child.name in BLOCK_TAGS:
                    parts.append(f" {self._inline_children(child)} ")
                else:
                    parts.append(self._inline(child))
            text = _squash("".join(parts))
            if not text and not nested:
                continue
            marker = f"{index}." if ordered else "-"
            lines.append(f"{'  ' * depth}{marker} {text}".rstrip())
            lines.extend(nested)
            index += 1
        return "\n".join(lines)

    def _table(self, tag: Tag) -> str:
        rows = []
        for tr in tag.find_all("tr"):
            cells = [self._inline_children(c) for c in tr.find_all(["th", "td"], recursive=False)]
            if any(cells):
                rows.append("| " + " | ".join(cells) + " |")
        if not rows:
            return ""
        width = rows[0].count(" | ") + 1
        rows.insert(1, "| " + " | ".join(["---"] * width) + " |")
        return "\n".join(rows)

    def _inline_children(self, tag: Tag) -> str:
        return _squash("".join(self._inline(c) for c in tag.children))

    def _inline(self, node) -> str:
        if isinstance(node, NavigableString):
            return str(node) if _is_text(node) else ""
        if not isinstance(node, Tag):
            return ""
        name = node.name
        if name == "br":
            return " "
        if name == "img":
            src = node.get("src")
            if not src:
                return ""
            return f"![{_squash(node.get('alt') or '')}]({self._absolute(src)})"
        raw = "".join(self._inline(c) for c in node.children)
        if name == "a":
            href = node.get("href")
            text = raw.strip()
            if not href or href.startswith(("#", "javascript:")) or not text:
                return raw
            return self._wrap(raw, f"[{_squash(text)}]({self._absolute(href)})")
        if name in ("strong", "b"):
            return self._emphasis(raw, "**")
        if name in ("em", "i"):
            return self._emphasis(raw, "*")
        if name == "code":
            return self._emphasis(raw, "`")
        return raw

    def _emphasis(self, raw: str, mark: str) -> str:
        text = _squash(raw)
        if not text:
            return raw
        return self._wrap(raw, f"{mark}{text}{mark}")

    @staticmethod
    def _wrap(raw: str, rendered: str) -> str:
        # keep the surrounding whitespace so "foo <b>bar</b>" does not collapse
        lead = " " if raw[:1].isspace() else ""
        trail = " " if raw[-1:].isspace() else ""
        return f"{lead}{rendered}{trail}"
