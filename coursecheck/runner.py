"""Runs the enabled checks over a content tree and assembles the report."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from coursecheck.checks import ALL_CHECKS, CheckReport, Issue
from coursecheck.config.models import CourseCheckConfig
from coursecheck.content.site import ContentSite

logger = logging.getLogger(__name__)


def _normalize(selectors: list[str] | None) -> set[str]:
    """Check names compare lowercase, rule ids uppercase."""
    out: set[str] = set()
    for s in selectors or []:
        out.add(s.lower())
        out.add(s.upper())
    return out


class CheckRunner:
    """Loads a site and runs every enabled check family.

    Validation modes (``checks.validation``):
      - "strict": issues keep their rule severity
      - "warn": every issue is downgraded to a warning
      - "off": nothing runs, the report is empty
    """

    def __init__(self, config: CourseCheckConfig) -> None:
        self.config = config

    def run(self, root: str | Path | None = None, rules: list[str] | None = None) -> CheckReport:
        root_path = Path(root if root is not None else self.config.content.root)
        site = ContentSite.load(root_path, self.config.content)
        return self.run_site(site, rules)

    def run_site(self, site: ContentSite, rules: list[str] | None = None) -> CheckReport:
        report = CheckReport(
            root=str(site.root),
            files_checked=len(site.pages) + len(site.model_files),
        )
        mode = self.config.checks.validation
        if mode == "off":
            return report

        disabled = _normalize(self.config.checks.disabled_rules)
        wanted = _normalize(rules)

        issues: list[Issue] = []
        for check_cls in ALL_CHECKS:
            if check_cls.name in disabled:
                continue
            if wanted and check_cls.name not in wanted and not (set(check_cls.rules) & wanted):
                continue

            start = time.monotonic()
            found = check_cls(self.config).check(site)
            if wanted and check_cls.name not in wanted:
                found = [i for i in found if i.rule in wanted]
            found = [i for i in found if i.rule not in disabled]
            logger.debug(
                "%s: %d issue(s) in %.2fs", check_cls.name, len(found), time.monotonic() - start,
            )
            report.checks_run.append(check_cls.name)
            issues.extend(found)

        if mode == "warn":
            issues = [i.model_copy(update={"severity": "warning"}) for i in issues]

        report.issues = sorted(issues, key=lambda i: (i.path, i.line or 0, i.rule))
        return report
