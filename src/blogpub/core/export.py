"""Export: standalone HTML page and sidecar JSON per resolved document"""

import html
import json
from pathlib import Path

from blogpub.core.models import Document, TocNode


def build_toc_html(nodes: list[TocNode]) -> str:
    """Nested <ul> of anchor links; '' for an empty outline."""
    if not nodes:
        return ""
    items = "".join(
        f'<li><a href="#{html.escape(n.id)}">{html.escape(n.title)}</a>{build_toc_html(n.children)}</li>'
        for n in nodes
    )
    return f"<ul>{items}</ul>"


def build_html(doc: Document, toc: list[TocNode] = None) -> str:
    """Return a minimal HTML article wrapping the rendered body."""
    title = html.escape(doc.seo.title if doc.seo and doc.seo.title else doc.title)
    description = html.escape(doc.seo.description if doc.seo and doc.seo.description else doc.description)
    nav = f'<nav class="toc">{build_toc_html(toc)}</nav>\n' if toc else ""
    return (
        "<!doctype html>\n"
        f"<html><head><meta charset=\"utf-8\"><title>{title}</title>"
        f"<meta name=\"description\" content=\"{description}\"></head>\n"
        f"<body><article>\n<h1>{html.escape(doc.title)}</h1>\n"
        f"<p class=\"meta\">{html.escape(doc.author.name)} &middot; "
        f"{doc.publish_date.date().isoformat()} &middot; {doc.reading_time_minutes} min read</p>\n"
        f"{nav}{doc.rendered_body}</article></body></html>\n"
    )


def build_sidecar(doc: Document, toc: list[TocNode] = None) -> dict:
    """Canonical document as JSON-ready data, minus the bodies, plus its outline."""
    data = doc.model_dump(mode="json", exclude={"rendered_body", "raw_body"})
    data["toc"] = [n.model_dump(mode="json") for n in toc or []]
    return data


def write_doc(doc: Document, output_dir: Path, toc: list[TocNode] = None) -> tuple[Path, Path]:
    """Write <slug>.html and <slug>.json under output_dir. Returns (html_path, json_path)."""
    output_dir.mkdir(parents=True, exist_ok=True)
    html_path = output_dir / f"{doc.slug}.html"
    json_path = output_dir / f"{doc.slug}.json"
    html_path.write_text(build_html(doc, toc), encoding="utf-8")
    json_path.write_text(json.dumps(build_sidecar(doc, toc), indent=2, ensure_ascii=False), encoding="utf-8")
    return html_path, json_path
