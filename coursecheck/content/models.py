"""Pydantic models for the page inventory."""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Any

from pydantic import BaseModel, Field


class Page(BaseModel):
    """A single Markdown document in the content tree."""

    path: str
    rel_path: str
    raw: str = ""
    frontmatter: dict[str, Any] = Field(default_factory=dict)
    body: str = ""
    body_line: int = 1
    has_frontmatter: bool = False
    frontmatter_error: str | None = None
    frontmatter_error_line: int | None = None

    @property
    def title(self) -> str | None:
        title = self.frontmatter.get("title")
        return title if isinstance(title, str) else None

    @property
    def parent(self) -> str | None:
        parent = self.frontmatter.get("parent")
        return parent if isinstance(parent, str) else None

    def key_line(self, key: str) -> int:
        """Line of ``key:`` inside the front matter block (falls back to line 1)."""
        pattern = re.compile(rf"^{re.escape(key)}\s*:")
        for n, line in enumerate(self.raw.splitlines()[1:self.body_line - 2], start=2):
            if pattern.match(line):
                return n
        return 1

    @property
    def url(self) -> str:
        """Jekyll-style output URL for the page."""
        permalink = self.frontmatter.get("permalink")
        if isinstance(permalink, str) and permalink:
            return permalink if permalink.startswith("/") else f"/{permalink}"

        rel = PurePosixPath(self.rel_path)
        parent = "" if str(rel.parent) == "." else f"{rel.parent}/"
        if rel.stem.lower() in ("index", "readme"):
            return f"/{parent}"
        return f"/{parent}{rel.stem}.html"


class ModelFile(BaseModel):
    """A standalone Modelica source file (``.mo``)."""

    path: str
    rel_path: str
    source: str = ""
