"""Shared fixtures for core unit tests"""

import pytest

from blogpub.core.models import Author
from blogpub.core.normalize import Normalizer


SAMPLE_DOC = """\
---
title: Hello
tags:
- a
- b
---
# Hi
Some text."""

FULL_DOC = """\
---
title: "Leading Well: Notes"
description: Lessons from the road
date: 2024-03-10
category: Kişisel Gelişim
tags: [leadership, "growth", habits]
author: jane-doe
featured: true
coverImage: /images/blog/lead.jpg
seo_title: Leading Well
---
# Leading Well

First paragraph with **bold**, *emphasis*, `code` and a [link](https://example.com).

## Habits

Second paragraph.
"""


@pytest.fixture(name="authors")
def authors_fixture():
    return {
        "jane-doe": Author(name="Jane Doe", bio="Writes about leadership"),
        "admin": Author(name="Admin", bio="Blog author"),
    }


@pytest.fixture(name="normalizer")
def normalizer_fixture(authors):
    return Normalizer(authors=authors)


@pytest.fixture(name="sample_doc")
def sample_doc_fixture():
    return SAMPLE_DOC


@pytest.fixture(name="full_doc")
def full_doc_fixture():
    return FULL_DOC
