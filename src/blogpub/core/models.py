"""Canonical document model and the intermediate types of the resolution pipeline"""

from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


MetadataBlock = Mapping[str, Any]


class Author(BaseModel):
    """An entry of the fixed author directory."""
    model_config = ConfigDict(frozen=True)

    name: str
    bio: str = ""
    avatar: Optional[str] = None
    social: dict[str, str] = Field(default_factory=dict)


class Seo(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    description: Optional[str] = None
    keywords: list[str] = Field(default_factory=list)


class Document(BaseModel):
    """The single in-memory shape returned by every query, whatever the source."""
    model_config = ConfigDict(frozen=True)

    slug:          str = Field(..., pattern=r'^[a-z0-9]+(?:-[a-z0-9]+)*$')
    title:         str
    description:   str = ""
    excerpt:       str = ""
    rendered_body: str = ""
    raw_body:      str = ""                 # pre-render text, kept for re-derivation
    publish_date:  datetime
    update_date:   Optional[datetime] = None
    published:     bool = True
    featured:      bool = False
    author:        Author
    category:      str = ""                 # display label
    category_slug: str = ""                 # slug supplied by the source, else slug of the label
    tags:          list[str] = Field(default_factory=list)
    cover_image:   Optional[str] = None
    reading_time_minutes: int = Field(default=1, ge=1)
    seo:           Optional[Seo] = None

    @field_validator('publish_date', 'update_date')
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Naive timestamps are UTC so remote and local documents sort together."""
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Category(BaseModel):
    slug: str
    name: str
    description: str = ""
    post_count: int = 0


class Tag(BaseModel):
    slug: str
    name: str
    post_count: int = 0


class HeadingNode(BaseModel):
    id: str
    title: str
    level: int = Field(..., ge=1, le=6)


class TocNode(BaseModel):
    """A heading with its nested sub-headings."""
    id: str
    title: str
    level: int
    children: list["TocNode"] = Field(default_factory=list)


@dataclass(frozen=True)
class ParsedSource:
    """Parser output: the metadata block (None when absent) and the remaining body."""
    metadata: Optional[MetadataBlock]
    body: str
    warnings: tuple[str, ...] = ()

    @classmethod
    def build(cls, metadata: Optional[dict[str, Any]], body: str, warnings=()) -> "ParsedSource":
        frozen = MappingProxyType(dict(metadata)) if metadata is not None else None
        return cls(metadata=frozen, body=body, warnings=tuple(warnings))


@dataclass(frozen=True)
class Found:
    document: Document


@dataclass(frozen=True)
class NotFound:
    key: str


@dataclass(frozen=True)
class Malformed:
    reason: str
    key: str = ""


Resolution = Union[Found, NotFound, Malformed]
