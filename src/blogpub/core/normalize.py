"""Map remote records and parsed local documents onto the canonical Document"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from blogpub.core.derive import (
    EXCERPT_LENGTH,
    EXCERPT_SEPARATOR,
    WORDS_PER_MINUTE,
    derive_excerpt,
    excerpt_from_html,
    reading_time,
)
from blogpub.core.models import Author, Document, Found, Malformed, ParsedSource, Resolution, Seo
from blogpub.core.render import render_markup
from blogpub.core.utils.slug import slugify


logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = 'general'
FALLBACK_AUTHOR = Author(name='Admin', bio='Blog author')


@dataclass(frozen=True)
class RemoteRecord:
    """A post as returned by the remote content service; body is pre-rendered HTML."""
    data: Mapping[str, Any]


@dataclass(frozen=True)
class LocalSource:
    """A parsed local document keyed by its filename-derived slug."""
    slug: str
    parsed: ParsedSource
    modified: Optional[datetime] = None     # used when the metadata names no date


Source = Union[RemoteRecord, LocalSource]


def _text(value: Any) -> str:
    """Return value as a stripped str, or '' for None and non-scalars."""
    if value is None or isinstance(value, (dict, list, tuple)):
        return ''
    return str(value).strip()


def _flag(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _label(value: Any) -> tuple[str, str]:
    """Return (label, slug) for a category/tag given as a string or {name, slug} object."""
    if isinstance(value, Mapping):
        name = _text(value.get('name')) or _text(value.get('slug'))
        return name, slugify(_text(value.get('slug')) or name)
    name = _text(value)
    return name, slugify(name)


def _labels(value: Any) -> list[str]:
    """Tag labels from a list (of strings or objects) or a comma-separated string, deduplicated."""
    if isinstance(value, str):
        value = value.split(',')
    if not isinstance(value, (list, tuple)):
        return []
    names = (_label(v)[0] for v in value)
    return list(dict.fromkeys(n for n in names if n))


def _source_key(source: Source) -> str:
    if isinstance(source, LocalSource):
        return source.slug
    return _text(source.data.get('slug')) if isinstance(source.data, Mapping) else ''


def _seo(title: Any, description: Any, keywords: Any) -> Optional[Seo]:
    title, description = _text(title), _text(description)
    keywords = _labels(keywords)
    if not (title or description or keywords):
        return None
    return Seo(title=title or None, description=description or None, keywords=keywords)


class Normalizer:
    """Builds canonical Documents from either source shape with identical derivation rules.

    The author directory is injected so callers (and tests) control the lookup table.
    """

    def __init__(
        self,
        authors: Optional[Mapping[str, Author]] = None,
        default_author: str = 'admin',
        words_per_minute: int = WORDS_PER_MINUTE,
        excerpt_length: int = EXCERPT_LENGTH,
        excerpt_separator: str = EXCERPT_SEPARATOR,
        ):
        self.authors = dict(authors or {})
        self.default_author = default_author
        self.words_per_minute = words_per_minute
        self.excerpt_length = excerpt_length
        self.excerpt_separator = excerpt_separator

    def normalize(self, source: Source) -> Resolution:
        """Return Found(document) or Malformed(reason); never raises for bad content."""
        if isinstance(source, RemoteRecord):
            build = self._from_remote
        elif isinstance(source, LocalSource):
            build = self._from_local
        else:
            raise TypeError(f"Unsupported source type: {type(source).__name__}")

        try:
            return build(source)
        except ValidationError as e:
            reason = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
            return Malformed(reason=reason, key=_source_key(source))

    # --- authors ---

    def author_for(self, value: Any) -> Author:
        """Resolve an author key, display name or inline object against the directory."""
        if isinstance(value, Mapping):
            name = _text(value.get('name'))
            if name:
                return self.authors.get(slugify(name)) or Author(
                    name=name,
                    bio=_text(value.get('bio')),
                    avatar=_text(value.get('avatar')) or None,
                )
            value = None
        name = _text(value)
        if name:
            key = slugify(name)
            if key in self.authors:
                return self.authors[key]
            for author in self.authors.values():
                if author.name == name:
                    return author
            return Author(name=name, bio=FALLBACK_AUTHOR.bio)
        return self.authors.get(self.default_author, FALLBACK_AUTHOR)

    # --- source shapes ---

    def _from_remote(self, source: RemoteRecord) -> Resolution:
        data = source.data
        if not isinstance(data, Mapping):
            return Malformed(reason="remote record is not an object")

        title = _text(data.get('title')) or 'Untitled'
        slug = slugify(_text(data.get('slug')) or title)
        if not slug:
            return Malformed(reason="remote record has no usable slug")

        content = data.get('content') if isinstance(data.get('content'), str) else ''
        excerpt = _text(data.get('excerpt')) or excerpt_from_html(content, self.excerpt_length)

        categories = data.get('categories')
        raw_category = categories[0] if isinstance(categories, list) and categories else data.get('category')
        category, category_slug = _label(raw_category)
        if not category:
            category, category_slug = DEFAULT_CATEGORY, DEFAULT_CATEGORY

        image = data.get('featuredImage')
        cover = _text(image.get('url')) if isinstance(image, Mapping) else _text(data.get('coverImage'))

        seo = data.get('seo')
        seo = _seo(seo.get('title'), seo.get('description'), seo.get('keywords')) if isinstance(seo, Mapping) else None

        status = data.get('status')
        published = status == 'published' if status is not None else _flag(data.get('published'), True)

        document = Document(
            slug=slug,
            title=title,
            description=_text(data.get('description')) or excerpt,
            excerpt=excerpt,
            rendered_body=content,
            raw_body=content,
            publish_date=data.get('publishedAt') or data.get('createdAt') or datetime.now(timezone.utc),
            update_date=data.get('updatedAt') or None,
            published=published,
            featured=_flag(data.get('featured'), False),
            author=self.author_for(data.get('author')),
            category=category,
            category_slug=category_slug,
            tags=_labels(data.get('tags')),
            cover_image=cover or None,
            reading_time_minutes=reading_time(content, self.words_per_minute),
            seo=seo,
        )
        return Found(document)

    def _from_local(self, source: LocalSource) -> Resolution:
        meta, body = source.parsed.metadata, source.parsed.body
        for warning in source.parsed.warnings:
            logger.warning("%s: metadata %s", source.slug, warning)
        if meta is None:
            return Malformed(reason="missing metadata block", key=source.slug)

        title = _text(meta.get('title'))
        if not title:
            return Malformed(reason="missing title", key=source.slug)
        date = meta.get('date') or meta.get('publishedAt') or source.modified
        if not date:
            return Malformed(reason="missing date", key=source.slug)

        excerpt = _text(meta.get('excerpt')) or derive_excerpt(body, self.excerpt_length, self.excerpt_separator)
        if self.excerpt_separator:
            body = body.replace(self.excerpt_separator, '', 1)
        rendered = render_markup(body)

        category, category_slug = _label(meta.get('category'))
        if not category:
            category, category_slug = DEFAULT_CATEGORY, DEFAULT_CATEGORY

        document = Document(
            slug=slugify(source.slug),
            title=title,
            description=_text(meta.get('description')) or excerpt,
            excerpt=excerpt,
            rendered_body=rendered,
            raw_body=body,
            publish_date=date,
            update_date=meta.get('updated') or meta.get('updatedAt') or None,
            published=_flag(meta.get('published'), True) and not _flag(meta.get('draft'), False),
            featured=_flag(meta.get('featured'), False),
            author=self.author_for(meta.get('author')),
            category=category,
            category_slug=category_slug,
            tags=_labels(meta.get('tags')),
            cover_image=_text(meta.get('coverImage') or meta.get('cover_image')) or None,
            reading_time_minutes=reading_time(rendered, self.words_per_minute),
            seo=_seo(meta.get('seo_title'), meta.get('seo_description'), meta.get('keywords')),
        )
        return Found(document)
