"""Remote-first, local-fallback document queries

Every query tries the remote service once; a failure, a non-list or an empty
result sends it to the local content directory instead. Both paths go
through the same Normalizer and the same published-filter and date sort.
"""

import logging
from typing import Any, Iterable, Mapping, Optional

from blogpub.core.derive import build_toc, extract_headings, extract_html_headings
from blogpub.core.models import Category, Document, Found, Malformed, NotFound, Resolution, Tag, TocNode
from blogpub.core.normalize import LocalSource, Normalizer, RemoteRecord
from blogpub.core.parse import parse_metadata_block
from blogpub.core.related import rank_related
from blogpub.core.utils.slug import slugify
from blogpub.providers.local import LocalProvider
from blogpub.providers.remote import RemoteProvider, RemoteUnavailable


logger = logging.getLogger(__name__)


def matches_category(doc: Document, slug: str, display_name: Optional[str] = None) -> bool:
    """Category slug equality, then normalized label equality, then literal display-name equality."""
    if doc.category_slug == slug:
        return True
    if slugify(doc.category) == slug:
        return True
    return bool(display_name) and doc.category == display_name


def matches_tag(doc: Document, slug: str) -> bool:
    return any(slugify(tag) == slug or tag == slug for tag in doc.tags)


class SourceResolver:
    """The document-query interface used by the site."""

    def __init__(
        self,
        normalizer: Normalizer,
        local: LocalProvider,
        remote: Optional[RemoteProvider] = None,
        ):
        self.normalizer = normalizer
        self.local = local
        self.remote = remote

    # --- sources ---

    def _remote_items(self, endpoint: str, key: str, params: Optional[Mapping[str, Any]] = None) -> Optional[list]:
        """Return the non-empty list under key, or None when the remote is unusable."""
        if self.remote is None:
            return None
        try:
            data = self.remote.fetch(endpoint, params)
        except Exception as e:  # any provider failure means local fallback
            logger.warning(
                "Remote %s failed, falling back to local content: %s: %s", endpoint, type(e).__name__, e,
            )
            return None
        items = data.get(key) if isinstance(data, Mapping) else None
        if not isinstance(items, list) or not items:
            logger.info("Remote %s returned no %s", endpoint, key)
            return None
        return items

    def _remote_documents(self, **filters: str) -> Optional[list[Document]]:
        items = self._remote_items('/posts', 'posts', {'status': 'published', **filters})
        if items is None:
            return None
        docs = self._collect((self.normalizer.normalize(RemoteRecord(item)) for item in items), 'remote')
        return docs or None

    def _local_documents(self) -> list[Document]:
        results = (
            self.normalizer.normalize(LocalSource(f.slug, parse_metadata_block(f.text), f.modified))
            for f in self.local.iter_documents()
        )
        return self._collect(results, 'local')

    def _collect(self, results: Iterable[Resolution], origin: str) -> list[Document]:
        """Drop malformed, unpublished and duplicate-slug documents; newest first."""
        docs: list[Document] = []
        seen: set[str] = set()
        for result in results:
            if isinstance(result, Malformed):
                logger.warning("Skipping malformed %s document %r: %s", origin, result.key, result.reason)
                continue
            doc = result.document
            if not doc.published:
                continue
            if doc.slug in seen:
                logger.warning("Duplicate slug %r from %s source; keeping the first", doc.slug, origin)
                continue
            seen.add(doc.slug)
            docs.append(doc)
        return sorted(docs, key=lambda d: d.publish_date, reverse=True)

    # --- queries ---

    def _documents(self, **filters: str) -> tuple[list[Document], bool]:
        """One remote attempt, else the local set. The flag is True for remote documents.

        Remote filters only narrow the request; callers still apply their own
        matching to whatever comes back.
        """
        docs = self._remote_documents(**filters)
        if docs is not None:
            logger.debug("Resolved %d documents from remote", len(docs))
            return docs, True
        docs = self._local_documents()
        logger.debug("Resolved %d documents from local content", len(docs))
        return docs, False

    def get_all(self) -> list[Document]:
        return self._documents()[0]

    def find_by_slug(self, slug: str) -> Resolution:
        """Found(document) for a published document with this slug, else NotFound(slug)."""
        wanted = slugify(slug)
        for doc in self.get_all():
            if doc.slug == wanted:
                return Found(doc)
        return NotFound(slug)

    def get_by_slug(self, slug: str) -> Optional[Document]:
        result = self.find_by_slug(slug)
        return result.document if isinstance(result, Found) else None

    def get_by_category(self, slug: str) -> list[Document]:
        """Documents whose category matches slug by slug, by label, or by display name.

        The display name comes from the remote category directory, which is
        only consulted when the remote answered the document query.
        """
        slug = slugify(slug)
        docs, from_remote = self._documents(category=slug)
        display_name = self._category_name(slug) if from_remote else None
        matched = [doc for doc in docs if matches_category(doc, slug, display_name)]

        labels = list(dict.fromkeys(doc.category for doc in matched))
        if len(labels) > 1:
            logger.warning(
                "Category slug %r matches several labels (%s); returning all of them",
                slug, ", ".join(repr(label) for label in labels),
            )
        return matched

    def get_by_tag(self, slug: str) -> list[Document]:
        slug = slugify(slug)
        docs, _ = self._documents(tag=slug)
        return [doc for doc in docs if matches_tag(doc, slug)]

    def get_featured(self) -> list[Document]:
        docs, _ = self._documents(featured='true')
        return [doc for doc in docs if doc.featured]

    def get_related(self, slug: str, limit: int = 3) -> list[Document]:
        wanted = slugify(slug)
        docs = self.get_all()
        reference = next((doc for doc in docs if doc.slug == wanted), None)
        if reference is None:
            return []
        return rank_related(reference.slug, reference.tags, docs, limit)

    def get_toc(self, slug: str, max_depth: int = 3) -> list[TocNode]:
        doc = self.get_by_slug(slug)
        if doc is None:
            return []
        headings = extract_headings(doc.raw_body) or extract_html_headings(doc.rendered_body)
        return build_toc(headings, max_depth)

    # --- listings ---

    def _remote_categories(self) -> list[Category]:
        """Category directory from the remote service, deduplicated by slug."""
        categories: dict[str, Category] = {}
        for item in self._remote_items('/categories', 'categories') or []:
            if not isinstance(item, Mapping):
                continue
            name = str(item.get('name') or '').strip()
            slug = slugify(str(item.get('slug') or name))
            if not slug:
                continue
            if slug in categories:
                logger.warning(
                    "Categories %r and %r both resolve to slug %r; using the first",
                    categories[slug].name, name, slug,
                )
                continue
            categories[slug] = Category(
                slug=slug,
                name=name or slug,
                description=str(item.get('description') or ''),
            )
        return list(categories.values())

    def _category_name(self, slug: str) -> Optional[str]:
        for category in self._remote_categories():
            if category.slug == slug:
                return category.name
        return None

    def get_categories(self) -> list[Category]:
        """Categories with post counts computed from the resolved document set."""
        docs = self.get_all()
        categories = self._remote_categories()
        if categories:
            return [
                c.model_copy(update={'post_count': sum(matches_category(d, c.slug, c.name) for d in docs)})
                for c in categories
            ]

        derived: dict[str, Category] = {}
        for doc in docs:
            slug = doc.category_slug or slugify(doc.category)
            if not slug:
                continue
            current = derived.get(slug)
            if current is None:
                derived[slug] = Category(
                    slug=slug, name=doc.category, description=f"Posts about {doc.category}", post_count=1,
                )
                continue
            if current.name != doc.category:
                logger.warning(
                    "Category labels %r and %r both resolve to slug %r; using the first",
                    current.name, doc.category, slug,
                )
            current.post_count += 1
        return list(derived.values())

    def get_tags(self) -> list[Tag]:
        tags: dict[str, Tag] = {}
        for doc in self.get_all():
            labels: dict[str, str] = {}
            for label in doc.tags:
                labels.setdefault(slugify(label), label)
            for slug, label in labels.items():
                if not slug:
                    continue
                if slug in tags:
                    tags[slug].post_count += 1
                else:
                    tags[slug] = Tag(slug=slug, name=label, post_count=1)
        return list(tags.values())
