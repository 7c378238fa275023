"""Local content directory enumeration"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from blogpub.core.parse import discover_files
from blogpub.core.utils.slug import slugify


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocalFile:
    slug: str
    text: str
    modified: datetime      # file mtime, the publish date of last resort


class LocalProvider:
    """Yields a LocalFile for every .md/.mdx file under content_dir.

    Slugs come from file names. A missing directory yields nothing; unreadable
    files are logged and skipped.
    """

    def __init__(self, content_dir):
        self.content_dir = Path(content_dir)

    def iter_documents(self) -> Iterator[LocalFile]:
        if not self.content_dir.is_dir():
            logger.info("Content directory %s not found; no local documents", self.content_dir)
            return
        for path in discover_files(self.content_dir):
            try:
                text = path.read_text(encoding='utf-8')
                modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping unreadable document %s: %s", path, e)
                continue
            yield LocalFile(slug=slugify(path.stem), text=text, modified=modified)
