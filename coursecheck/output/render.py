"""Renderers for CheckReport: rich table, JSON, and GitHub annotations."""

from __future__ import annotations

import json

import typer
from rich import print as rprint
from rich.markup import escape
from rich.table import Table

from coursecheck.checks.models import CheckReport


def render_table(report: CheckReport) -> None:
    """Print one table of issues per file plus a summary line."""
    for path, issues in report.by_path().items():
        table = Table(title=escape(path), title_justify="left", show_edge=False)
        table.add_column("Line", justify="right", style="dim")
        table.add_column("Rule", style="cyan")
        table.add_column("Severity", justify="center")
        table.add_column("Message")
        for issue in issues:
            severity = "[red]error[/red]" if issue.severity == "error" else "[yellow]warn[/yellow]"
            table.add_row(
                str(issue.line) if issue.line else "-",
                issue.rule,
                severity,
                escape(issue.message),
            )
        rprint(table)
        rprint()

    n_errors = len(report.errors)
    n_warnings = len(report.warnings)
    status = "[green]PASS[/green]" if report.ok else "[red]FAIL[/red]"
    rprint(
        f"{status} {report.files_checked} file(s) checked, "
        f"[red]{n_errors} error(s)[/red], [yellow]{n_warnings} warning(s)[/yellow]"
    )


def report_dict(report: CheckReport) -> dict:
    data = report.model_dump()
    data["errors"] = len(report.errors)
    data["warnings"] = len(report.warnings)
    data["ok"] = report.ok
    return data


def render_json(report: CheckReport) -> None:
    typer.echo(json.dumps(report_dict(report), indent=2))


def _escape_property(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A").replace(":", "%3A").replace(",", "%2C")


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def render_github(report: CheckReport) -> None:
    """Emit GitHub Actions workflow commands, one per issue."""
    for issue in report.issues:
        command = "error" if issue.severity == "error" else "warning"
        props = f"file={_escape_property(issue.path)}"
        if issue.line:
            props += f",line={issue.line}"
        props += f",title={_escape_property(issue.rule)}"
        typer.echo(f"::{command} {props}::{_escape_data(issue.message)}")
    typer.echo(f"{len(report.errors)} error(s), {len(report.warnings)} warning(s)")
