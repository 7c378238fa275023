"""File discovery and metadata block extraction for raw text documents"""

import logging
import re
from pathlib import Path
from typing import Any

from blogpub.core.models import ParsedSource


logger = logging.getLogger(__name__)

DELIMITER = '---'
MD_EXTENSIONS = {'.md', '.mdx'}

_INT_RE = re.compile(r'^[-+]?\d+$')
_FLOAT_RE = re.compile(r'^[-+]?(\d+\.\d*|\.\d+)$')
_DATE_RE = re.compile(r'^\d{4}-\d{2}-\d{2}')


def _unquote(value: str) -> str:
    """Strip one pair of matching surrounding quotes."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def coerce_scalar(value: str) -> Any:
    """Coerce a raw scalar: booleans, then numbers, then dates (kept as str), then quoted strings."""
    value = value.strip()
    if value in ('true', 'false'):
        return value == 'true'
    if _INT_RE.match(value):
        return int(value)
    if _FLOAT_RE.match(value):
        return float(value)
    if _DATE_RE.match(value):
        return value
    return _unquote(value)


def _inline_list(value: str) -> list[str]:
    """Parse '[a, "b", c]' into ['a', 'b', 'c']; empty items are dropped."""
    inner = value.strip()[1:-1]
    items = (_unquote(item.strip()) for item in inner.split(','))
    return [item for item in items if item]


def _parse_lines(lines: list[str]) -> tuple[dict[str, Any], list[str]]:
    """Parse metadata lines into a flat dict; returns (metadata, warnings)."""
    metadata: dict[str, Any] = {}
    warnings: list[str] = []
    list_key = None

    for n, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith('#'):
            continue

        if stripped.startswith('- ') or stripped == '-':
            if list_key is None:
                warnings.append(f"line {n}: list item outside a list")
                continue
            item = _unquote(stripped[2:].strip())
            if item:
                metadata[list_key].append(item)
            continue

        list_key = None
        if line[:1].isspace():
            warnings.append(f"line {n}: nested mapping not supported")
            continue

        key, sep, value = stripped.partition(':')
        key = key.strip()
        if not sep or not key:
            warnings.append(f"line {n}: expected 'key: value'")
            continue

        value = value.strip()
        if not value:
            metadata[key] = []
            list_key = key
        elif value.startswith('[') and value.endswith(']'):
            metadata[key] = _inline_list(value)
        else:
            metadata[key] = coerce_scalar(value)

    return metadata, warnings


def parse_metadata_block(text: str) -> ParsedSource:
    """Split a raw document into its metadata block and body.

    Documents that do not open with a '---' line closed by a matching '---'
    line come back unchanged with metadata None. Malformed metadata lines are
    skipped and reported in ParsedSource.warnings.
    """
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != DELIMITER:
        return ParsedSource.build(None, text)

    end_idx = None
    for i in range(1, len(lines)):
        if lines[i].strip() == DELIMITER:
            end_idx = i
            break
    if end_idx is None:
        return ParsedSource.build(None, text)

    metadata, warnings = _parse_lines([l.rstrip('\r\n') for l in lines[1:end_idx]])
    for w in warnings:
        logger.debug("metadata block: %s", w)
    body = ''.join(lines[end_idx + 1:]).lstrip('\r\n')
    return ParsedSource.build(metadata, body, warnings)


def discover_files(path: Path) -> list[Path]:
    """Return sorted .md/.mdx files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.is_file() and p.suffix in MD_EXTENSIONS)
