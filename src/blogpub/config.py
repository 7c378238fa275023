"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field

from blogpub.core.models import Author


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "BLOGPUB_"


def _default_authors() -> dict[str, Author]:
    return {"admin": Author(name="Admin", bio="Blog author", avatar="/images/authors/admin.svg")}


class Settings(BaseModel):
    app_name:          str = "blogpub"
    content_dir:       str = Field(default="content/blog", description="Directory of local .md/.mdx documents")
    remote_api_url:    Optional[str] = Field(default=None, description="Admin API base URL; unset disables the remote source")
    remote_timeout:    float = Field(default=10.0, gt=0, description="Remote request timeout in seconds")
    words_per_minute:  int = Field(default=200, ge=1, description="Reading speed used for reading time")
    excerpt_length:    int = Field(default=200, ge=1, description="Max characters of a derived excerpt")
    excerpt_separator: str = Field(default="<!-- excerpt -->", description="Manual excerpt delimiter in bodies")
    toc_max_depth:     int = Field(default=3, ge=1, le=6, description="Deepest heading level in a table of contents")
    related_count:     int = Field(default=3, ge=0, description="Related documents returned by default")
    default_author:    str = Field(default="admin", description="Author directory key used when a document names none")
    authors:           dict[str, Author] = Field(default_factory=_default_authors, description="Author directory")
    output_dir:        str = Field(default="dist", description="Directory for exported HTML + JSON files")
    log_level:         str = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then BLOGPUB_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if name == "authors":
            continue
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)
