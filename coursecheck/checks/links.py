"""Internal link and anchor resolution."""

from __future__ import annotations

import logging
import posixpath
import re
from pathlib import PurePosixPath
from urllib.parse import unquote

from coursecheck.checks.base import Check
from coursecheck.checks.models import Issue
from coursecheck.content.markdown import (
    LinkRef,
    extract_links,
    heading_anchors,
    reference_definitions,
    reference_uses,
)
from coursecheck.content.models import Page
from coursecheck.content.site import ContentSite

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")
# Fragments browsers resolve without a matching id
_IMPLICIT_ANCHORS = {"", "top"}


class EscapesRoot(Exception):
    """Link target resolves outside the site root."""


def is_external(target: str) -> bool:
    return bool(_SCHEME_RE.match(target)) or target.startswith("//")


class LinkCheck(Check):
    """Checks that relative links, images and anchors resolve inside the site."""

    name = "links"
    rules = {
        "LNK001": ("error", "Link target does not exist"),
        "LNK002": ("error", "Link target escapes the site root"),
        "LNK003": ("error", "Link fragment names no anchor in the target page"),
        "LNK004": ("warning", "Link target is empty"),
        "LNK005": ("error", "Reference link has no definition"),
    }

    def __init__(self, config) -> None:
        super().__init__(config)
        self._anchors: dict[str, set[str]] = {}
        self._ignore = [re.compile(p) for p in config.links.ignore_patterns]

    def check(self, site: ContentSite) -> list[Issue]:
        issues: list[Issue] = []
        checked = 0
        for page in site.pages.values():
            for ref in extract_links(page.body, page.body_line):
                issue = self.check_link(site, page, ref)
                checked += 1
                if issue is not None:
                    issues.append(issue)
            issues.extend(self._check_references(page))
        logger.debug("Links: %d targets checked, %d issues", checked, len(issues))
        return issues

    # ------------------------------------------------------------------
    # Single link
    # ------------------------------------------------------------------

    def check_link(self, site: ContentSite, page: Page, ref: LinkRef) -> Issue | None:
        target = ref.target
        if ref.dynamic:
            return None
        if ref.kind == "image" and not self.config.links.check_images:
            return None
        if not target:
            return self.issue("LNK004", page.rel_path, ref.line, "Empty link target")
        if is_external(target) or any(p.search(target) for p in self._ignore):
            return None

        path_part, _, fragment = target.partition("#")
        path_part = unquote(path_part.split("?", 1)[0])

        if not path_part:
            resolved: str | None = page.rel_path
        else:
            try:
                resolved = self.resolve(site, page, path_part, liquid=ref.kind == "liquid")
            except EscapesRoot:
                return self.issue("LNK002", page.rel_path, ref.line, f"Link escapes site root: {target}")
            if resolved is None:
                return self.issue("LNK001", page.rel_path, ref.line, f"Broken link: {target}")

        if fragment and self.config.links.check_anchors and resolved in site.pages:
            fragment = unquote(fragment)
            if fragment not in _IMPLICIT_ANCHORS and fragment not in self._anchors_for(site.pages[resolved]):
                return self.issue(
                    "LNK003", page.rel_path, ref.line,
                    f"Anchor #{fragment} not found in {resolved}",
                )
        return None

    def resolve(self, site: ContentSite, page: Page, path_part: str, liquid: bool = False) -> str | None:
        """Map a link path to the rel path of an existing file, or None."""
        if liquid or path_part.startswith("/"):
            base = ""
            path_part = path_part.lstrip("/")
        else:
            base = str(PurePosixPath(page.rel_path).parent)
            base = "" if base == "." else base

        joined = posixpath.normpath(posixpath.join(base, path_part)) if path_part else base or "."
        if joined == ".":
            joined = ""
        if joined == ".." or joined.startswith("../"):
            raise EscapesRoot(joined)

        for candidate in self._candidates(site, joined):
            if site.exists(candidate):
                return candidate

        # Pages can be published under a permalink unrelated to their path
        by_url = site.page_by_url("/" + joined)
        if by_url is None:
            return None
        if not self.config.links.html_to_markdown and "permalink" not in by_url.frontmatter:
            return None
        return by_url.rel_path

    def _candidates(self, site: ContentSite, rel: str) -> list[str]:
        candidates = [rel] if rel else []
        if site.is_dir(rel):
            index = site.index_page(rel)
            if index:
                candidates.append(index)
            return candidates

        path = PurePosixPath(rel)
        extensions = self.config.content.extensions
        if self.config.links.html_to_markdown and path.suffix == ".html":
            if path.name == "index.html":
                parent = str(path.parent)
                index = site.index_page("" if parent == "." else parent)
                if index:
                    candidates.append(index)
            candidates.extend(str(path.with_suffix(ext)) for ext in extensions)
        elif not path.suffix:
            candidates.extend(rel + ext for ext in extensions)
        return candidates

    def _anchors_for(self, page: Page) -> set[str]:
        anchors = self._anchors.get(page.rel_path)
        if anchors is None:
            anchors = heading_anchors(page.body)
            self._anchors[page.rel_path] = anchors
        return anchors

    # ------------------------------------------------------------------
    # Reference-style links
    # ------------------------------------------------------------------

    def _check_references(self, page: Page) -> list[Issue]:
        defined = reference_definitions(page.body)
        return [
            self.issue("LNK005", page.rel_path, use.line, f"Undefined link reference: [{use.label}]")
            for use in reference_uses(page.body, page.body_line)
            if use.label not in defined
        ]
