"""Derived attributes: reading time, excerpt, heading outline and table of contents

Nothing here is stored; the normalizer recomputes every value on each resolution.
"""

import html
import math
import re
from typing import Iterable

from blogpub.core.models import HeadingNode, TocNode
from blogpub.core.parse import parse_metadata_block
from blogpub.core.utils.slug import slugify


WORDS_PER_MINUTE = 200
EXCERPT_LENGTH = 200
EXCERPT_SEPARATOR = '<!-- excerpt -->'
ELLIPSIS = '...'

_TAG_RE = re.compile(r'<[^>]*>')
# A tag opener cut off before its closing '>'.
_PARTIAL_TAG_RE = re.compile(r'</?[A-Za-z][^\s<>]*')
_HEADING_RE = re.compile(r'^(#{1,6})\s+(.+?)(?:\s+#+)?\s*$')
_PARAGRAPH_SPLIT_RE = re.compile(r'\n[ \t]*\n')
_HTML_HEADING_RE = re.compile(r'<h[1-6][^>]*>.*?</h[1-6]\s*>', re.IGNORECASE | re.DOTALL)
_HTML_HEADING_CAPTURE_RE = re.compile(
    r'<h(?P<level>[1-6])(?:\s[^>]*?\bid="(?P<id>[^"]*)")?[^>]*>(?P<body>.*?)</h(?P=level)\s*>',
    re.IGNORECASE | re.DOTALL,
)
_HTML_BLOCK_END_RE = re.compile(r'</(p|div|li|ul|ol|blockquote|pre)\s*>|<br\s*/?>', re.IGNORECASE)

# Inline syntax removed for plain text; order matches the renderer (strong before emphasis).
_INLINE_PATTERNS = [
    (re.compile(r'\*\*(.+?)\*\*'), r'\1'),
    (re.compile(r'\*(.+?)\*'), r'\1'),
    (re.compile(r'`(.+?)`'), r'\1'),
    (re.compile(r'\[([^\]]*)\]\([^)]*\)'), r'\1'),
]


def strip_tags(markup: str) -> str:
    """Remove HTML tags, leaving their text content."""
    return _TAG_RE.sub(' ', markup or '')


def strip_inline(text: str) -> str:
    """Reduce inline emphasis, code and link syntax (and any HTML tags, whole or cut off) to plain text."""
    for pattern, repl in _INLINE_PATTERNS:
        text = pattern.sub(repl, text)
    text = _PARTIAL_TAG_RE.sub('', _TAG_RE.sub('', text))
    return ' '.join(text.split())


def word_count(text: str) -> int:
    return len(text.split())


def reading_time(text: str, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Minutes to read text (markup tags ignored), never less than 1."""
    words = word_count(strip_tags(text))
    return max(1, math.ceil(words / words_per_minute))


def truncate(text: str, max_length: int = EXCERPT_LENGTH) -> str:
    """Cut text to max_length on a word boundary, appending ELLIPSIS when shortened."""
    if len(text) <= max_length:
        return text
    cut = text[:max_length]
    if not text[max_length].isspace() and ' ' in cut:
        cut = cut[:cut.rindex(' ')]
    return cut.rstrip() + ELLIPSIS


def _first_paragraph(blocks: Iterable[str]) -> str:
    """First block with text left once heading lines are dropped."""
    for block in blocks:
        text = '\n'.join(l for l in block.splitlines() if not l.lstrip().startswith('#')).strip()
        if text:
            return text
    return ''


def derive_excerpt(
    body: str,
    max_length: int = EXCERPT_LENGTH,
    separator: str = EXCERPT_SEPARATOR,
    ) -> str:
    """Plain-text excerpt from a markup body.

    Text before a manual separator wins; otherwise the first non-heading
    paragraph is stripped of inline syntax and truncated to max_length.
    """
    body = parse_metadata_block(body).body
    if separator and separator in body:
        head = body.split(separator, 1)[0]
        lines = (l.lstrip('#').strip() if l.lstrip().startswith('#') else l for l in head.splitlines())
        return strip_inline(' '.join(lines))
    return truncate(strip_inline(_first_paragraph(_PARAGRAPH_SPLIT_RE.split(body))), max_length)


def excerpt_from_html(markup: str, max_length: int = EXCERPT_LENGTH) -> str:
    """Plain-text excerpt from pre-rendered HTML: first non-heading block, truncated."""
    text = _HTML_HEADING_RE.sub('\n\n', markup or '')
    text = _HTML_BLOCK_END_RE.sub('\n\n', text)
    text = html.unescape(_TAG_RE.sub('', text))
    text = _PARTIAL_TAG_RE.sub('', _TAG_RE.sub('', text))
    paragraph = _first_paragraph(_PARAGRAPH_SPLIT_RE.split(text))
    return truncate(' '.join(paragraph.split()), max_length)


def extract_headings(text: str) -> list[HeadingNode]:
    """Scan text line by line for '#' headings; ids use the shared slug rule."""
    headings = []
    for line in (text or '').splitlines():
        m = _HEADING_RE.match(line.strip())
        if not m:
            continue
        content = m.group(2).strip()
        title = strip_inline(content)
        anchor = slugify(content)
        if title and anchor:
            headings.append(HeadingNode(id=anchor, title=title, level=len(m.group(1))))
    return headings


def extract_html_headings(markup: str) -> list[HeadingNode]:
    """Headings of pre-rendered HTML; an existing id attribute is kept."""
    headings = []
    for m in _HTML_HEADING_CAPTURE_RE.finditer(markup or ''):
        title = ' '.join(html.unescape(_TAG_RE.sub('', m.group('body'))).split())
        anchor = m.group('id') or slugify(title)
        if title and anchor:
            headings.append(HeadingNode(id=anchor, title=title, level=int(m.group('level'))))
    return headings


def build_toc(headings: list[HeadingNode], max_depth: int = 3) -> list[TocNode]:
    """Nest headings into a tree with a stack of (node, level) pairs.

    Headings deeper than max_depth are dropped. A skipped level (h1 then h3)
    nests directly under the nearest shallower heading.
    """
    roots: list[TocNode] = []
    stack: list[tuple[TocNode, int]] = []

    for heading in headings:
        if heading.level > max_depth:
            continue
        node = TocNode(id=heading.id, title=heading.title, level=heading.level)
        while stack and stack[-1][1] >= heading.level:
            stack.pop()
        if stack:
            stack[-1][0].children.append(node)
        else:
            roots.append(node)
        stack.append((node, heading.level))

    return roots
