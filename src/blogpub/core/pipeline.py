"""Wiring: build the resolver from settings and run the export step"""

import logging
from pathlib import Path

from blogpub.config import Settings
from blogpub.core.derive import build_toc, extract_headings, extract_html_headings
from blogpub.core.export import write_doc
from blogpub.core.normalize import Normalizer
from blogpub.core.resolver import SourceResolver
from blogpub.providers.local import LocalProvider
from blogpub.providers.remote import HttpRemoteProvider


logger = logging.getLogger(__name__)


def build_normalizer(settings: Settings) -> Normalizer:
    return Normalizer(
        authors=settings.authors,
        default_author=settings.default_author,
        words_per_minute=settings.words_per_minute,
        excerpt_length=settings.excerpt_length,
        excerpt_separator=settings.excerpt_separator,
    )


def build_resolver(settings: Settings, transport=None) -> SourceResolver:
    """Resolver over the configured content directory and, when set, the remote API."""
    remote = None
    if settings.remote_api_url:
        remote = HttpRemoteProvider(settings.remote_api_url, settings.remote_timeout, transport=transport)
    else:
        logger.info("No remote_api_url configured; using local content only")
    return SourceResolver(build_normalizer(settings), LocalProvider(settings.content_dir), remote)


def run_export(resolver: SourceResolver, output_dir: Path, toc_max_depth: int = 3) -> list[tuple[str, Path]]:
    """Write every resolved document to output_dir. Returns (slug, html_path) pairs."""
    results = []
    for doc in resolver.get_all():
        headings = extract_headings(doc.raw_body) or extract_html_headings(doc.rendered_body)
        html_path, _ = write_doc(doc, output_dir, build_toc(headings, toc_max_depth))
        results.append((doc.slug, html_path))
    return results
