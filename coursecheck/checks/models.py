"""Pydantic models for check results."""

from __future__ import annotations

from collections import defaultdict
from typing import Literal

from pydantic import BaseModel, Field

Severity = Literal["error", "warning"]


class Issue(BaseModel):
    """One finding of a rule on a file and line."""

    rule: str
    severity: Severity = "error"
    path: str
    line: int | None = None
    message: str

    @property
    def location(self) -> str:
        return f"{self.path}:{self.line}" if self.line else self.path


class CheckReport(BaseModel):
    """Outcome of a full run over a content tree."""

    root: str = ""
    files_checked: int = 0
    checks_run: list[str] = Field(default_factory=list)
    issues: list[Issue] = Field(default_factory=list)

    @property
    def errors(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> list[Issue]:
        return [i for i in self.issues if i.severity == "warning"]

    @property
    def ok(self) -> bool:
        return not self.errors

    def by_path(self) -> dict[str, list[Issue]]:
        grouped: dict[str, list[Issue]] = defaultdict(list)
        for issue in self.issues:
            grouped[issue.path].append(issue)
        return dict(grouped)

    def exit_code(self, fail_on_warning: bool = False) -> int:
        if self.errors or (fail_on_warning and self.warnings):
            return 1
        return 0
