"""Balance checks for Modelica snippets and ``.mo`` files."""

from __future__ import annotations

import logging

from coursecheck.checks.base import Check
from coursecheck.checks.modelica_syntax import check_balance
from coursecheck.checks.models import Issue
from coursecheck.content.markdown import CodeFence, iter_fences
from coursecheck.content.site import ContentSite

logger = logging.getLogger(__name__)


class ModelicaCheck(Check):
    """Every Modelica definition and control block must be closed by a matching ``end``."""

    name = "modelica"
    rules = {
        "MO001": ("error", "Modelica definition or control block is never closed"),
        "MO002": ("error", "'end' does not match the innermost open block"),
        "MO003": ("error", "'end' with nothing open"),
        "MO004": ("error", "Unterminated string, quoted identifier, or block comment"),
        "MO005": ("warning", "Code fence is never closed"),
    }

    def check(self, site: ContentSite) -> list[Issue]:
        cfg = self.config.modelica
        languages = {lang.lower() for lang in cfg.fence_languages}
        issues: list[Issue] = []
        snippets = 0

        for page in site.pages.values():
            for fence in iter_fences(page.body, page.body_line):
                if not fence.closed:
                    issues.append(self.issue(
                        "MO005", page.rel_path, fence.start_line,
                        f"Code fence opened here ({fence.language or 'no language'}) is never closed",
                    ))
                if fence.language not in languages or self._skipped(fence):
                    continue
                snippets += 1
                issues.extend(self.check_source(fence.code, page.rel_path, fence.code_line))

        if cfg.check_mo_files:
            for model_file in site.model_files:
                issues.extend(self.check_source(model_file.source, model_file.rel_path, 1))

        logger.debug("Modelica: %d snippets, %d files", snippets, len(site.model_files))
        return issues

    def _skipped(self, fence: CodeFence) -> bool:
        marker = self.config.modelica.skip_marker
        return fence.preceding_line.strip().startswith("<!--") and marker in fence.preceding_line

    def check_source(self, source: str, path: str, first_line: int) -> list[Issue]:
        """Check one snippet; *first_line* is the file line of the snippet's first line."""
        return [
            self.issue(problem.code, path, first_line + problem.line - 1, problem.message)
            for problem in check_balance(source)
        ]
