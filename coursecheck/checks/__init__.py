"""Check subsystem: rule families run over a loaded content tree."""

from coursecheck.checks.base import Check
from coursecheck.checks.frontmatter import FrontmatterCheck
from coursecheck.checks.links import LinkCheck
from coursecheck.checks.liquid import LiquidCheck
from coursecheck.checks.modelica import ModelicaCheck
from coursecheck.checks.models import CheckReport, Issue
from coursecheck.checks.navigation import NavigationCheck

# Run order; reports are sorted afterwards so this only affects logging.
ALL_CHECKS: tuple[type[Check], ...] = (
    FrontmatterCheck,
    NavigationCheck,
    LinkCheck,
    ModelicaCheck,
    LiquidCheck,
)


def all_rules() -> dict[str, tuple[str, str, str]]:
    """Map rule id -> (check name, default severity, description)."""
    return {
        rule: (check.name, severity, description)
        for check in ALL_CHECKS
        for rule, (severity, description) in check.rules.items()
    }


__all__ = [
    "ALL_CHECKS",
    "Check",
    "CheckReport",
    "FrontmatterCheck",
    "Issue",
    "LinkCheck",
    "LiquidCheck",
    "ModelicaCheck",
    "NavigationCheck",
    "all_rules",
]
