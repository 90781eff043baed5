"""Front matter schema checks for lesson pages."""

from __future__ import annotations

import logging
from datetime import date, datetime
from fnmatch import fnmatch
from pathlib import PurePosixPath

from coursecheck.checks.base import Check
from coursecheck.checks.models import Issue
from coursecheck.content.models import Page
from coursecheck.content.site import ContentSite

logger = logging.getLogger(__name__)

# Keys understood by the site theme and their accepted value types.
_KNOWN_FIELDS: dict[str, tuple[type, ...]] = {
    "layout": (str,),
    "title": (str,),
    "nav_order": (int, float),
    "has_children": (bool,),
    "parent": (str,),
    "grand_parent": (str,),
    "author": (str,),
    "date": (date, str),
    "category": (str,),
    "tags": (list, str),
    "permalink": (str,),
    "nav_exclude": (bool,),
    "description": (str,),
}

_DATE_FORMATS = ("%Y-%m-%d %H:%M:%S %z", "%Y-%m-%d %H:%M %z", "%Y-%m-%d %H:%M:%S")


def _type_names(types: tuple[type, ...]) -> str:
    return " or ".join(t.__name__ for t in types)


def _parse_date(value: str) -> datetime | None:
    value = value.strip()
    # fromisoformat only accepts a trailing Z from Python 3.11
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


class FrontmatterCheck(Check):
    """Validates every page's YAML front matter against the page schema."""

    name = "frontmatter"
    rules = {
        "FM001": ("error", "Page has no front matter block"),
        "FM002": ("error", "Front matter is unterminated, not YAML, or not a mapping"),
        "FM003": ("error", "Required front matter key is missing or empty"),
        "FM004": ("error", "Front matter value has the wrong type"),
        "FM005": ("warning", "Unknown front matter key"),
        "FM006": ("error", "Layout is not in the allowed list"),
        "FM007": ("error", "Date is not an ISO-8601 date"),
    }

    def check(self, site: ContentSite) -> list[Issue]:
        issues: list[Issue] = []
        for page in site.pages.values():
            issues.extend(self.check_page(page))
        logger.debug("Front matter: %d pages, %d issues", len(site.pages), len(issues))
        return issues

    def _exempt(self, page: Page) -> bool:
        name = PurePosixPath(page.rel_path).name
        return any(
            fnmatch(page.rel_path, pattern) or fnmatch(name, pattern)
            for pattern in self.config.frontmatter.exempt
        )

    def check_page(self, page: Page) -> list[Issue]:
        cfg = self.config.frontmatter
        issues: list[Issue] = []

        if page.frontmatter_error is not None:
            issues.append(self.issue("FM002", page.rel_path, page.frontmatter_error_line, page.frontmatter_error))
            return issues

        if not page.has_frontmatter:
            if cfg.require_frontmatter and not self._exempt(page):
                issues.append(self.issue("FM001", page.rel_path, 1, "No YAML front matter found (missing --- markers)"))
            return issues

        data = page.frontmatter

        for key in cfg.required_keys:
            value = data.get(key)
            if key not in data or value is None:
                issues.append(self.issue("FM003", page.rel_path, 1, f"Missing required key: {key}"))
            elif isinstance(value, str) and not value.strip():
                issues.append(self.issue("FM003", page.rel_path, page.key_line(key), f"Required key {key!r} is empty"))

        known = set(_KNOWN_FIELDS) | set(cfg.extra_keys) | set(cfg.required_keys)
        for key, value in data.items():
            key_str = str(key)
            line = page.key_line(key_str)
            expected = _KNOWN_FIELDS.get(key_str)
            if expected is None:
                if cfg.warn_unknown_keys and key_str not in known:
                    issues.append(self.issue("FM005", page.rel_path, line, f"Unknown key: {key_str}"))
                continue
            if value is None:
                continue
            # bool is an int subclass; nav_order: true is a typo, not a number
            if not isinstance(value, expected) or (isinstance(value, bool) and bool not in expected):
                issues.append(self.issue(
                    "FM004", page.rel_path, line,
                    f"Key {key_str!r} should be {_type_names(expected)}, got {type(value).__name__}",
                ))
                continue
            issues.extend(self._check_value(page, key_str, value, line))

        return issues

    def _check_value(self, page: Page, key: str, value: object, line: int) -> list[Issue]:
        issues: list[Issue] = []
        if key == "tags" and isinstance(value, list):
            bad = [t for t in value if not isinstance(t, str)]
            if bad:
                issues.append(self.issue(
                    "FM004", page.rel_path, line,
                    f"Key 'tags' should list strings, got {type(bad[0]).__name__}",
                ))
        elif key == "date" and isinstance(value, str):
            if _parse_date(value) is None:
                issues.append(self.issue("FM007", page.rel_path, line, f"Unparseable date: {value!r}"))
        elif key == "layout":
            allowed = self.config.frontmatter.allowed_layouts
            if allowed and value not in allowed:
                issues.append(self.issue(
                    "FM006", page.rel_path, line,
                    f"Layout {value!r} not in allowed layouts: {', '.join(allowed)}",
                ))
        return issues
