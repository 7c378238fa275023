"""Slug generation shared by documents, headings, categories and tags"""

import re
import unicodedata


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug.

    Accented characters are folded to ASCII; anything else outside
    [a-z0-9-] is dropped. slugify(slugify(x)) == slugify(x).
    """
    text = unicodedata.normalize('NFKD', str(text)).encode('ascii', 'ignore').decode('ascii')
    text = text.lower()
    text = re.sub(r'[^a-z0-9\s_-]', '', text)
    text = re.sub(r'[\s_]+', '-', text)
    return re.sub(r'-+', '-', text).strip('-')
