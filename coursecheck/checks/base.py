"""Check base class. Every rule family implements ``check(site)``."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from coursecheck.checks.models import Issue, Severity
from coursecheck.config.models import CourseCheckConfig
from coursecheck.content.site import ContentSite


class Check(ABC):
    name: ClassVar[str]
    # rule id -> (default severity, description)
    rules: ClassVar[dict[str, tuple[Severity, str]]]

    def __init__(self, config: CourseCheckConfig) -> None:
        self.config = config

    @abstractmethod
    def check(self, site: ContentSite) -> list[Issue]:
        """Inspect the site and return the issues found."""
        ...

    def issue(
        self,
        rule: str,
        path: str,
        line: int | None,
        message: str,
        severity: Severity | None = None,
    ) -> Issue:
        default_severity, _description = self.rules[rule]
        return Issue(
            rule=rule,
            severity=severity or default_severity,
            path=path,
            line=line,
            message=message,
        )
