"""Unit tests for core/normalize.py"""

from datetime import datetime, timezone

import pytest

from blogpub.core.models import Author, Found, Malformed
from blogpub.core.normalize import LocalSource, Normalizer, RemoteRecord
from blogpub.core.parse import parse_metadata_block


MODIFIED = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _local(normalizer, text, slug="post"):
    return normalizer.normalize(LocalSource(slug, parse_metadata_block(text), MODIFIED))


def _remote(normalizer, **data):
    return normalizer.normalize(RemoteRecord(data))


# --- local documents ---

def test_local_end_to_end(normalizer, sample_doc):
    """The minimal example renders one heading and one paragraph and reads in a minute."""
    result = _local(normalizer, sample_doc, slug="hello")
    assert isinstance(result, Found)
    doc = result.document
    assert doc.slug == "hello"
    assert doc.title == "Hello"
    assert doc.tags == ["a", "b"]
    assert doc.raw_body == "# Hi\nSome text."
    assert doc.rendered_body.count("<h1") == 1
    assert doc.rendered_body.count("<p>") == 1
    assert doc.reading_time_minutes == 1
    assert doc.excerpt == "Some text."
    assert doc.publish_date == MODIFIED


def test_local_full_mapping(normalizer, full_doc):
    doc = _local(normalizer, full_doc, slug="leading-well").document
    assert doc.title == "Leading Well: Notes"
    assert doc.description == "Lessons from the road"
    assert doc.publish_date == datetime(2024, 3, 10, tzinfo=timezone.utc)
    assert doc.category == "Kişisel Gelişim"
    assert doc.category_slug == "kisisel-gelisim"
    assert doc.tags == ["leadership", "growth", "habits"]
    assert doc.author.name == "Jane Doe"
    assert doc.featured is True
    assert doc.published is True
    assert doc.cover_image == "/images/blog/lead.jpg"
    assert doc.seo.title == "Leading Well"
    assert doc.excerpt == "First paragraph with bold, emphasis, code and a link."
    assert '<h2 id="habits">Habits</h2>' in doc.rendered_body


def test_local_missing_metadata_is_malformed(normalizer):
    result = _local(normalizer, "# Just a body\n")
    assert isinstance(result, Malformed)
    assert "metadata" in result.reason
    assert result.key == "post"


def test_local_missing_title_is_malformed(normalizer):
    result = _local(normalizer, "---\ndate: 2024-01-01\n---\nBody")
    assert isinstance(result, Malformed)
    assert result.reason == "missing title"


def test_local_missing_date_without_mtime_is_malformed(normalizer):
    result = normalizer.normalize(LocalSource("p", parse_metadata_block("---\ntitle: T\n---\nBody")))
    assert isinstance(result, Malformed)
    assert result.reason == "missing date"


def test_local_invalid_date_is_malformed(normalizer):
    result = _local(normalizer, "---\ntitle: T\ndate: someday\n---\nBody")
    assert isinstance(result, Malformed)
    assert "publish_date" in result.reason


def test_local_unsluggable_name_is_malformed(normalizer):
    result = _local(normalizer, "---\ntitle: T\n---\nBody", slug="!!!")
    assert isinstance(result, Malformed)


def test_local_draft_is_unpublished(normalizer):
    doc = _local(normalizer, "---\ntitle: T\ndraft: true\n---\nBody").document
    assert doc.published is False
    doc = _local(normalizer, "---\ntitle: T\npublished: false\n---\nBody").document
    assert doc.published is False


def test_local_reading_time_never_trusted(normalizer):
    """A stored reading time is ignored; the value is recomputed from the body."""
    body = " ".join(["word"] * 450)
    doc = _local(normalizer, f"---\ntitle: T\nreadingTime: 99\n---\n{body}").document
    assert doc.reading_time_minutes == 3


def test_local_explicit_excerpt_wins(normalizer):
    doc = _local(normalizer, "---\ntitle: T\nexcerpt: Hand written.\n---\nFirst para.").document
    assert doc.excerpt == "Hand written."
    assert doc.description == "Hand written."


def test_local_excerpt_separator_removed_from_body(normalizer):
    doc = _local(normalizer, "---\ntitle: T\n---\nTeaser.\n\n<!-- excerpt -->\n\nThe rest.").document
    assert doc.excerpt == "Teaser."
    assert "excerpt" not in doc.rendered_body
    assert "The rest." in doc.rendered_body


def test_local_excerpt_length_configurable(authors):
    normalizer = Normalizer(authors=authors, excerpt_length=20)
    doc = _local(normalizer, "---\ntitle: T\n---\n" + "lorem ipsum " * 20).document
    assert doc.excerpt.endswith("...")
    assert len(doc.excerpt) <= 23


def test_local_defaults(normalizer):
    doc = _local(normalizer, "---\ntitle: T\n---\nBody").document
    assert doc.category == "general"
    assert doc.tags == []
    assert doc.featured is False
    assert doc.seo is None
    assert doc.author.name == "Admin"


def test_document_is_frozen(normalizer, sample_doc):
    doc = _local(normalizer, sample_doc).document
    with pytest.raises(Exception):
        doc.title = "changed"


# --- authors ---

def test_author_directory_lookup(normalizer):
    assert normalizer.author_for("jane-doe").bio == "Writes about leadership"
    assert normalizer.author_for("Jane Doe").name == "Jane Doe"
    assert normalizer.author_for("Bob").name == "Bob"
    assert normalizer.author_for(None).name == "Admin"
    assert normalizer.author_for({"name": "Jane Doe"}).bio == "Writes about leadership"


def test_author_directory_is_injected():
    normalizer = Normalizer(authors={"ghost": Author(name="Ghost Writer")}, default_author="ghost")
    assert normalizer.author_for(None).name == "Ghost Writer"


def test_author_fallback_without_directory():
    assert Normalizer().author_for("").name == "Admin"


# --- remote records ---

def test_remote_mapping(normalizer):
    result = _remote(
        normalizer,
        slug="Hello-World",
        title="Hello",
        content="<h2>Intro</h2><p>Body text here</p>",
        status="published",
        createdAt="2024-03-01T10:00:00.000Z",
        updatedAt="2024-03-02T10:00:00.000Z",
        categories=["Tech News"],
        tags=["a", {"name": "B", "slug": "b"}],
        featuredImage={"url": "/img.png"},
        author="Jane Doe",
        featured=True,
        readingTime=42,
    )
    assert isinstance(result, Found)
    doc = result.document
    assert doc.slug == "hello-world"
    assert doc.category == "Tech News"
    assert doc.category_slug == "tech-news"
    assert doc.tags == ["a", "B"]
    assert doc.cover_image == "/img.png"
    assert doc.excerpt == "Body text here"
    assert doc.rendered_body == "<h2>Intro</h2><p>Body text here</p>"
    assert doc.reading_time_minutes == 1
    assert doc.published is True
    assert doc.featured is True
    assert doc.author.bio == "Writes about leadership"
    assert doc.publish_date == datetime(2024, 3, 1, 10, tzinfo=timezone.utc)
    assert doc.update_date == datetime(2024, 3, 2, 10, tzinfo=timezone.utc)


def test_remote_category_object(normalizer):
    doc = _remote(normalizer, title="T", createdAt="2024-01-01", category={"name": "Life Style", "slug": "lifestyle"}).document
    assert doc.category == "Life Style"
    assert doc.category_slug == "lifestyle"


def test_remote_tolerates_missing_fields(normalizer):
    """Every field may be absent; defaults fill the gaps."""
    doc = _remote(normalizer, title="Only a title", createdAt="2024-01-01").document
    assert doc.slug == "only-a-title"
    assert doc.category == "general"
    assert doc.tags == []
    assert doc.excerpt == ""
    assert doc.cover_image is None
    assert doc.reading_time_minutes == 1


def test_remote_tolerates_wrong_types(normalizer):
    doc = _remote(
        normalizer, title="T", createdAt="2024-01-01",
        content=None, tags="x, y", categories=[], featuredImage="nope", seo="nope", featured="yes",
    ).document
    assert doc.tags == ["x", "y"]
    assert doc.cover_image is None
    assert doc.seo is None
    assert doc.featured is False


def test_remote_status_controls_published(normalizer):
    doc = _remote(normalizer, title="T", createdAt="2024-01-01", status="draft").document
    assert doc.published is False


def test_remote_seo(normalizer):
    doc = _remote(normalizer, title="T", createdAt="2024-01-01", seo={"title": "S", "keywords": ["k"]}).document
    assert doc.seo.title == "S"
    assert doc.seo.keywords == ["k"]


def test_remote_non_object_is_malformed(normalizer):
    assert isinstance(normalizer.normalize(RemoteRecord(["not", "a", "dict"])), Malformed)


def test_remote_bad_date_is_malformed(normalizer):
    result = _remote(normalizer, slug="s", title="T", createdAt="not a date")
    assert isinstance(result, Malformed)
    assert result.key == "s"


def test_unknown_source_type_rejected(normalizer):
    with pytest.raises(TypeError):
        normalizer.normalize({"title": "raw dict"})
