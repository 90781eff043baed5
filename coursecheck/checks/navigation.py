"""Cross-page navigation consistency (``parent`` / ``grand_parent`` / ``nav_order``)."""

from __future__ import annotations

from collections import defaultdict

from coursecheck.checks.base import Check
from coursecheck.checks.models import Issue
from coursecheck.content.models import Page
from coursecheck.content.site import ContentSite


def _nav_order(page: Page) -> int | float | None:
    value = page.frontmatter.get("nav_order")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


class NavigationCheck(Check):
    """Checks that the page hierarchy declared in front matter is consistent."""

    name = "navigation"
    rules = {
        "NAV001": ("error", "Parent names no page title"),
        "NAV002": ("error", "grand_parent does not match the parent page's parent"),
        "NAV003": ("warning", "has_children is set but no page names this page as parent"),
        "NAV004": ("warning", "Sibling pages share the same nav_order"),
        "NAV005": ("warning", "Duplicate title among parent pages"),
    }

    def check(self, site: ContentSite) -> list[Issue]:
        by_title = site.pages_by_title()
        issues: list[Issue] = []
        issues.extend(self._check_parents(site, by_title))
        issues.extend(self._check_children(site))
        issues.extend(self._check_sibling_order(site))
        issues.extend(self._check_duplicate_parents(site))
        return issues

    def _check_parents(self, site: ContentSite, by_title: dict[str, list[Page]]) -> list[Issue]:
        issues: list[Issue] = []
        for page in site.pages.values():
            parent = page.parent
            grand_parent = page.frontmatter.get("grand_parent")

            if parent is None:
                if isinstance(grand_parent, str):
                    issues.append(self.issue(
                        "NAV002", page.rel_path, page.key_line("grand_parent"),
                        "grand_parent is set without parent",
                    ))
                continue

            candidates = by_title.get(parent, [])
            if not candidates:
                issues.append(self.issue(
                    "NAV001", page.rel_path, page.key_line("parent"),
                    f"Parent {parent!r} does not match any page title",
                ))
                continue

            if isinstance(grand_parent, str) and not any(c.parent == grand_parent for c in candidates):
                issues.append(self.issue(
                    "NAV002", page.rel_path, page.key_line("grand_parent"),
                    f"grand_parent {grand_parent!r} is not the parent of {parent!r}",
                ))
        return issues

    def _check_children(self, site: ContentSite) -> list[Issue]:
        parents_named = {p.parent for p in site.pages.values() if p.parent is not None}
        issues: list[Issue] = []
        for page in site.pages.values():
            if page.frontmatter.get("has_children") is True and page.title not in parents_named:
                issues.append(self.issue(
                    "NAV003", page.rel_path, page.key_line("has_children"),
                    f"Page {page.title!r} has has_children: true but no children",
                ))
        return issues

    def _check_sibling_order(self, site: ContentSite) -> list[Issue]:
        siblings: dict[tuple, dict[int | float, Page]] = defaultdict(dict)
        issues: list[Issue] = []
        for page in site.pages.values():
            order = _nav_order(page)
            if order is None or page.frontmatter.get("nav_exclude") is True:
                continue
            group = (page.parent, page.frontmatter.get("grand_parent"))
            first = siblings[group].get(order)
            if first is None:
                siblings[group][order] = page
                continue
            issues.append(self.issue(
                "NAV004", page.rel_path, page.key_line("nav_order"),
                f"nav_order {order} already used by sibling {first.rel_path}",
            ))
        return issues

    def _check_duplicate_parents(self, site: ContentSite) -> list[Issue]:
        seen: dict[str, Page] = {}
        issues: list[Issue] = []
        for page in site.pages.values():
            if page.frontmatter.get("has_children") is not True or page.title is None:
                continue
            first = seen.setdefault(page.title, page)
            if first is not page:
                issues.append(self.issue(
                    "NAV005", page.rel_path, page.key_line("title"),
                    f"Title {page.title!r} is also used by {first.rel_path}; parent references are ambiguous",
                ))
        return issues
