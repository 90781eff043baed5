"""Walks a content tree and builds the page inventory."""

from __future__ import annotations

import logging
from collections import defaultdict
from pathlib import Path

from coursecheck.config.models import ContentConfig
from coursecheck.content.frontmatter import opens_frontmatter, parse_frontmatter
from coursecheck.content.models import ModelFile, Page
from coursecheck.errors import ContentError, FrontmatterError

logger = logging.getLogger(__name__)


def _matches_any(path: Path, patterns: set[str]) -> bool:
    """Check whether any component of *path* matches one of *patterns*."""
    return any(part in patterns for part in path.parts)


def load_page(path: Path, rel_path: str) -> Page:
    """Read a Markdown file and parse its front matter.

    Read and parse failures are recorded on the page instead of raised.
    """
    page = Page(path=str(path), rel_path=rel_path)
    try:
        raw = path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        page.frontmatter_error = "File is not valid UTF-8"
        page.frontmatter_error_line = 1
        return page

    page.raw = raw
    page.has_frontmatter = opens_frontmatter(raw)
    try:
        metadata, body, body_line = parse_frontmatter(raw)
    except FrontmatterError as exc:
        page.frontmatter_error = str(exc)
        page.frontmatter_error_line = exc.line
        page.body = raw
        return page

    page.frontmatter = metadata
    page.body = body
    page.body_line = body_line
    return page


class ContentSite:
    """In-memory inventory of a content tree: pages, assets, and model files."""

    def __init__(self, root: Path, config: ContentConfig | None = None) -> None:
        self.root = root
        self.config = config or ContentConfig()
        self.pages: dict[str, Page] = {}
        self.files: set[str] = set()
        self.dirs: set[str] = set()
        self.model_files: list[ModelFile] = []

    @classmethod
    def load(cls, root: str | Path, config: ContentConfig | None = None) -> ContentSite:
        root = Path(root).resolve()
        if not root.is_dir():
            raise ContentError(f"Content root is not a directory: {root}")

        site = cls(root, config)
        ignore = set(site.config.ignore_patterns)
        extensions = {ext.lower() for ext in site.config.extensions}

        for p in sorted(root.rglob("*")):
            rel = p.relative_to(root)
            if _matches_any(rel, ignore):
                continue
            rel_str = rel.as_posix()
            if p.is_dir():
                site.dirs.add(rel_str)
                continue
            if not p.is_file():
                continue
            site.files.add(rel_str)
            suffix = p.suffix.lower()
            if suffix in extensions:
                site.pages[rel_str] = load_page(p, rel_str)
            elif suffix == ".mo":
                try:
                    source = p.read_text(encoding="utf-8")
                except UnicodeDecodeError:
                    logger.warning("Skipping undecodable Modelica file %s", rel_str)
                    continue
                site.model_files.append(ModelFile(path=str(p), rel_path=rel_str, source=source))

        logger.debug(
            "Loaded %d pages, %d files, %d model files from %s",
            len(site.pages), len(site.files), len(site.model_files), root,
        )
        return site

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find(self, rel_path: str) -> Page | None:
        return self.pages.get(rel_path)

    def exists(self, rel_path: str) -> bool:
        return rel_path in self.files

    def is_dir(self, rel_path: str) -> bool:
        return rel_path == "" or rel_path in self.dirs

    def index_page(self, rel_dir: str) -> str | None:
        """Return the rel path of the index file of a directory, if any."""
        prefix = f"{rel_dir}/" if rel_dir else ""
        for name in self.config.index_names:
            candidate = prefix + name
            if candidate in self.files:
                return candidate
        return None

    def page_by_url(self, url: str) -> Page | None:
        """Find the page published at *url*, ignoring a trailing slash."""
        wanted = url.rstrip("/")
        for page in self.pages.values():
            if page.url.rstrip("/") == wanted:
                return page
        return None

    def pages_by_title(self) -> dict[str, list[Page]]:
        by_title: dict[str, list[Page]] = defaultdict(list)
        for page in self.pages.values():
            if page.title is not None:
                by_title[page.title].append(page)
        return dict(by_title)
