"""
HTML helpers shared by the content transformers.

Fragments are parsed with BeautifulSoup (``html.parser``) for extraction.
Rewrites never re-serialise the whole tree: each parsed tag is mapped back to
its exact span in the source string (``sourceline`` / ``sourcepos``) and only
that span is replaced, so untouched markup stays byte-identical.
"""

from __future__ import annotations

import html
import re
from typing import Dict, Iterable, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

VOID_ELEMENTS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "source", "track", "wbr",
}

Replacement = Tuple[int, int, str]


def parse_fragment(fragment: str) -> BeautifulSoup:
    return BeautifulSoup(fragment, "html.parser")


def escape_attr(value: str) -> str:
    return html.escape(value, quote=True)


def escape_text(value: str) -> str:
    return html.escape(value, quote=False)


# ─────────────────────────────────────────────────────────────────────────────
# Source spans
# ─────────────────────────────────────────────────────────────────────────────

def _line_offsets(markup: str) -> List[int]:
    offsets = [0]
    for index, char in enumerate(markup):
        if char == "\n":
            offsets.append(index + 1)
    return offsets


def _scan_tag_end(markup: str, start: int) -> int:
    """Index just past the ``>`` closing the tag opened at ``start``."""
    quote: Optional[str] = None
    index = start + 1
    while index < len(markup):
        char = markup[index]
        if quote:
            if char == quote:
                quote = None
        elif char in "\"'" and markup[index - 1] in "= \t\n":
            quote = char
        elif char == ">":
            return index + 1
        index += 1
    return len(markup)


def _opens(markup: str, start: int, name: str) -> bool:
    return (
        markup.startswith("<", start)
        and markup[start + 1:start + 1 + len(name)].lower() == name
    )


class TagCursor:
    """Locates parsed tags inside the original markup string."""

    def __init__(self, markup: str) -> None:
        self.markup = markup
        self._offsets = _line_offsets(markup)

    def start_tag_span(self, tag: Tag) -> Tuple[int, int]:
        start = -1
        if tag.sourceline is not None and tag.sourcepos is not None:
            line = tag.sourceline - 1
            if 0 <= line < len(self._offsets):
                start = self._offsets[line] + tag.sourcepos
        if start < 0 or not _opens(self.markup, start, tag.name):
            match = re.compile(r"<" + re.escape(tag.name) + r"\b", re.IGNORECASE).search(self.markup)
            if match is None:
                raise ValueError(f"<{tag.name}> not found in markup")
            start = match.start()
        return start, _scan_tag_end(self.markup, start)

    def element_span(self, tag: Tag) -> Tuple[int, int]:
        """Span of the whole element, start tag through matching end tag."""
        start, start_end = self.start_tag_span(tag)
        if tag.name in VOID_ELEMENTS or self.markup[start_end - 2:start_end] == "/>":
            return start, start_end

        pattern = re.compile(r"<(/?)" + re.escape(tag.name) + r"\b[^>]*>", re.IGNORECASE)
        depth = 1
        for match in pattern.finditer(self.markup, start_end):
            depth += -1 if match.group(1) else 1
            if depth == 0:
                return start, match.end()
        return start, start_end

    def is_self_closing(self, tag: Tag) -> bool:
        _, end = self.start_tag_span(tag)
        return self.markup[end - 2:end] == "/>"


# ─────────────────────────────────────────────────────────────────────────────
# Rendering / splicing
# ─────────────────────────────────────────────────────────────────────────────

def _attr_text(value) -> str:
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return "" if value is None else str(value)


def render_start_tag(name: str, attrs: Dict[str, object], self_closing: bool = False) -> str:
    parts = [name]
    for key, value in attrs.items():
        parts.append(f'{key}="{escape_attr(_attr_text(value))}"')
    return "<" + " ".join(parts) + (" />" if self_closing else ">")


def rewrite_start_tag(cursor: TagCursor, tag: Tag, **changes: str) -> Replacement:
    """Replacement for ``tag``'s start tag with ``changes`` applied.

    Existing attributes are kept in order; new ones are appended.
    """
    start, end = cursor.start_tag_span(tag)
    attrs = dict(tag.attrs)
    attrs.update(changes)
    return start, end, render_start_tag(tag.name, attrs, cursor.is_self_closing(tag))


def splice(markup: str, replacements: Iterable[Replacement]) -> str:
    """Apply non-overlapping (start, end, text) replacements."""
    result = markup
    for start, end, text in sorted(replacements, key=lambda r: r[0], reverse=True):
        result = result[:start] + text + result[end:]
    return result


def lazy_load(markup: str, tag_name: str) -> str:
    """Add ``loading="lazy"`` to every ``tag_name`` lacking a loading attribute."""
    soup = parse_fragment(markup)
    cursor = TagCursor(markup)
    replacements = [
        rewrite_start_tag(cursor, tag, loading="lazy")
        for tag in soup.find_all(tag_name)
        if not tag.has_attr("loading")
    ]
    return splice(markup, replacements) if replacements else markup
