"""Liquid tag balance for page templates (TOC loops and friends)."""

from __future__ import annotations

import re

from coursecheck.checks.base import Check
from coursecheck.checks.models import Issue
from coursecheck.content.models import Page
from coursecheck.content.site import ContentSite

BLOCK_TAGS = frozenset({"for", "if", "unless", "case", "capture", "tablerow", "highlight"})
# Tags whose content Liquid does not parse
VERBATIM_TAGS = frozenset({"raw", "comment"})
# Branch tag -> block tags it may appear in
_BRANCHES: dict[str, frozenset[str]] = {
    "else": frozenset({"if", "unless", "case", "for"}),
    "elsif": frozenset({"if", "unless"}),
    "when": frozenset({"case"}),
}

_DELIM_RE = re.compile(r"\{\{|\{%")
_END_VERBATIM_RE = {tag: re.compile(r"\{%-?\s*end" + tag + r"\s*-?%\}") for tag in VERBATIM_TAGS}
_TAG_NAME_RE = re.compile(r"\{%-?\s*([A-Za-z_#]\w*|#)")


class LiquidCheck(Check):
    """Block tags must be closed and branch tags must sit in a matching block."""

    name = "liquid"
    rules = {
        "LQ001": ("error", "Liquid block tag is never closed"),
        "LQ002": ("error", "Liquid closing tag has no matching opener"),
        "LQ003": ("error", "Liquid delimiter is never closed"),
        "LQ004": ("error", "Liquid branch tag outside a matching block"),
    }

    def check(self, site: ContentSite) -> list[Issue]:
        if not self.config.liquid.enabled:
            return []
        issues: list[Issue] = []
        for page in site.pages.values():
            issues.extend(self.check_page(page))
        return issues

    def check_page(self, page: Page) -> list[Issue]:
        text = page.body
        issues: list[Issue] = []
        stack: list[tuple[str, int]] = []
        verbatim: tuple[str, int] | None = None
        pos = 0

        def line_at(offset: int) -> int:
            return page.body_line + text.count("\n", 0, offset)

        while True:
            if verbatim is not None:
                # Only the matching end tag is meaningful inside raw/comment
                end_tag = _END_VERBATIM_RE[verbatim[0]].search(text, pos)
                if end_tag is None:
                    break
                verbatim = None
                pos = end_tag.end()
                continue

            m = _DELIM_RE.search(text, pos)
            if m is None:
                break
            start = m.start()
            closer = "}}" if m.group(0) == "{{" else "%}"
            end = text.find(closer, m.end())
            if end == -1:
                issues.append(self.issue(
                    "LQ003", page.rel_path, line_at(start), f"'{m.group(0)}' is never closed with '{closer}'",
                ))
                pos = m.end()
                continue
            pos = end + 2

            if closer == "}}":
                continue
            name_match = _TAG_NAME_RE.match(text, start)
            name = name_match.group(1) if name_match else ""
            line = line_at(start)

            if name in VERBATIM_TAGS:
                verbatim = (name, line)
            elif name in BLOCK_TAGS:
                stack.append((name, line))
            elif name in _BRANCHES:
                if not stack or stack[-1][0] not in _BRANCHES[name]:
                    where = f"inside '{stack[-1][0]}'" if stack else "outside any block"
                    issues.append(self.issue("LQ004", page.rel_path, line, f"'{name}' {where}"))
            elif name.startswith("end") and (name[3:] in BLOCK_TAGS or name[3:] in VERBATIM_TAGS):
                issues.extend(self._close(page, stack, name[3:], line))

        if verbatim is not None:
            issues.append(self.issue(
                "LQ001", page.rel_path, verbatim[1], f"'{verbatim[0]}' opened on line {verbatim[1]} is never closed",
            ))
        for tag, line in reversed(stack):
            issues.append(self.issue(
                "LQ001", page.rel_path, line, f"'{tag}' opened on line {line} is never closed",
            ))
        return issues

    def _close(self, page: Page, stack: list[tuple[str, int]], tag: str, line: int) -> list[Issue]:
        if not stack:
            return [self.issue("LQ002", page.rel_path, line, f"'end{tag}' without an opening '{tag}'")]
        if stack[-1][0] == tag:
            stack.pop()
            return []
        top, top_line = stack[-1]
        issue = self.issue(
            "LQ002", page.rel_path, line,
            f"'end{tag}' does not match '{top}' opened on line {top_line}",
        )
        for i in range(len(stack) - 1, -1, -1):
            if stack[i][0] == tag:
                del stack[i:]
                break
        return [issue]
