"""CLI command implementations"""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from blogpub.config import Settings, load_config
from blogpub.core.derive import build_toc, extract_headings
from blogpub.core.models import Document, Found, TocNode
from blogpub.core.parse import parse_metadata_block
from blogpub.core.pipeline import build_resolver, run_export
from blogpub.core.render import render_markup
from blogpub.core.resolver import SourceResolver


ContentDir = Annotated[Optional[str], typer.Option("--content-dir", help="Local content directory")]
RemoteUrl = Annotated[Optional[str], typer.Option("--remote-url", help="Admin API base URL")]


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    return settings


def _resolver(content_dir: Optional[str], remote_url: Optional[str]) -> tuple[Settings, SourceResolver]:
    settings = _settings(overrides={"content_dir": content_dir, "remote_api_url": remote_url})
    return settings, build_resolver(settings)


def _echo_docs(docs: list[Document]) -> None:
    for doc in docs:
        typer.echo(f"{doc.publish_date.date().isoformat()}  {doc.slug}  {doc.title}")


def _echo_toc(nodes: list[TocNode], depth: int = 0) -> None:
    for node in nodes:
        typer.echo(f"{'  ' * depth}- {node.title} (#{node.id})")
        _echo_toc(node.children, depth + 1)


def list_cmd(
    category: Annotated[Optional[str], typer.Option("--category", help="Only documents in this category slug")] = None,
    tag: Annotated[Optional[str], typer.Option("--tag", help="Only documents with this tag slug")] = None,
    featured: Annotated[bool, typer.Option("--featured", help="Only featured documents")] = False,
    content_dir: ContentDir = None,
    remote_url: RemoteUrl = None,
    ):
    """List published documents, newest first."""
    _, resolver = _resolver(content_dir, remote_url)
    if category:
        docs, scope = resolver.get_by_category(category), f"category '{category}'"
    elif tag:
        docs, scope = resolver.get_by_tag(tag), f"tag '{tag}'"
    elif featured:
        docs, scope = resolver.get_featured(), "featured"
    else:
        docs, scope = resolver.get_all(), "all"
    if not docs:
        typer.echo(f"No documents found for scope: {scope}.")
        raise typer.Exit(1)
    _echo_docs(docs)


def show_cmd(
    slug: Annotated[str, typer.Argument(help="Document slug")],
    toc: Annotated[bool, typer.Option("--toc", help="Print the table of contents")] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print the canonical document as JSON")] = False,
    content_dir: ContentDir = None,
    remote_url: RemoteUrl = None,
    ):
    """Show one document's metadata and excerpt."""
    settings, resolver = _resolver(content_dir, remote_url)
    result = resolver.find_by_slug(slug)
    if not isinstance(result, Found):
        _fail(f"No document with slug '{slug}'")
    doc = result.document

    if as_json:
        typer.echo(doc.model_dump_json(indent=2))
        return
    typer.echo(doc.title)
    typer.echo(f"  {doc.author.name} | {doc.publish_date.date().isoformat()} | {doc.reading_time_minutes} min read")
    typer.echo(f"  category: {doc.category}  tags: {', '.join(doc.tags) or '-'}")
    typer.echo(f"  {doc.excerpt}")
    if toc:
        _echo_toc(resolver.get_toc(doc.slug, settings.toc_max_depth))


def related_cmd(
    slug: Annotated[str, typer.Argument(help="Reference document slug")],
    limit: Annotated[Optional[int], typer.Option("--limit", help="Max related documents")] = None,
    content_dir: ContentDir = None,
    remote_url: RemoteUrl = None,
    ):
    """List documents sharing tags with the given one, most similar first."""
    settings, resolver = _resolver(content_dir, remote_url)
    docs = resolver.get_related(slug, settings.related_count if limit is None else limit)
    if not docs:
        typer.echo(f"No related documents for '{slug}'.")
        raise typer.Exit(1)
    _echo_docs(docs)


def categories_cmd(content_dir: ContentDir = None, remote_url: RemoteUrl = None):
    """List categories with their published document counts."""
    _, resolver = _resolver(content_dir, remote_url)
    for c in resolver.get_categories():
        typer.echo(f"{c.slug}  {c.name}  ({c.post_count})")


def tags_cmd(content_dir: ContentDir = None, remote_url: RemoteUrl = None):
    """List tags with their published document counts."""
    _, resolver = _resolver(content_dir, remote_url)
    for t in resolver.get_tags():
        typer.echo(f"{t.slug}  {t.name}  ({t.post_count})")


def render_cmd(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True, help="Document to render")],
    toc: Annotated[bool, typer.Option("--toc", help="Print the table of contents instead of HTML")] = False,
    ):
    """Parse and render a single local document, printing its HTML body."""
    settings = _settings()
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        _fail(f"Cannot read {path}", e)
    parsed = parse_metadata_block(raw)
    for warning in parsed.warnings:
        typer.echo(f"Warning: {warning}", err=True)

    if toc:
        _echo_toc(build_toc(extract_headings(parsed.body), settings.toc_max_depth))
        return
    body = parsed.body.replace(settings.excerpt_separator, "", 1)
    typer.echo(render_markup(body), nl=False)


def export_cmd(
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    content_dir: ContentDir = None,
    remote_url: RemoteUrl = None,
    ):
    """Write <slug>.html and a <slug>.json sidecar for every published document."""
    settings = _settings(overrides={"output_dir": out, "content_dir": content_dir, "remote_api_url": remote_url})
    output_dir = Path(settings.output_dir)
    try:
        results = run_export(build_resolver(settings), output_dir, settings.toc_max_depth)
    except OSError as e:
        _fail("Export failed", e)
    if not results:
        typer.echo("No documents to export.")
        raise typer.Exit(1)
    for slug, html_path in results:
        typer.echo(f"  {slug} -> {html_path}")
    typer.echo(f"Exported {len(results)} document(s) to {output_dir}/")
