"""CLI entry point for coursecheck."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from coursecheck.checks import all_rules
from coursecheck.config import DEFAULT_CONFIG_TEMPLATE, CourseCheckConfig, load_config
from coursecheck.content.markdown import heading_anchors
from coursecheck.content.site import ContentSite, load_page
from coursecheck.errors import CourseCheckError
from coursecheck.log import configure_logging
from coursecheck.output import render_github, render_json, render_table
from coursecheck.runner import CheckRunner

app = typer.Typer(
    name="coursecheck",
    help="Integrity checks for Markdown + Modelica course sites.",
)

config_app = typer.Typer(help="Manage coursecheck configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: CourseCheckConfig | None = None

_FORMATS = ("table", "json", "github")


def _get_config() -> CourseCheckConfig:
    if _config is None:
        return load_config()
    return _config


def _fail(message: str) -> typer.Exit:
    rprint(f"[red]Error:[/red] {escape(message)}")
    return typer.Exit(1)


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to coursecheck.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except CourseCheckError as e:
        raise _fail(str(e))
    configure_logging(_config.log_level, _config.log_format)


def _root(path: str | None, cfg: CourseCheckConfig) -> Path:
    return Path(path if path is not None else cfg.content.root)


@app.command()
def check(
    path: Annotated[str | None, typer.Argument(help="Content root (default: content.root)")] = None,
    rule: Annotated[
        list[str] | None,
        typer.Option("--rule", "-r", help="Only run this check or rule id (repeatable)"),
    ] = None,
    format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: table, json, or github")
    ] = "table",
    fail_on_warning: Annotated[
        bool, typer.Option("--fail-on-warning", help="Exit 1 when warnings are found")
    ] = False,
) -> None:
    """Check links, front matter, Modelica snippets and Liquid tags."""
    cfg = _get_config()
    if format not in _FORMATS:
        raise _fail(f"Invalid format '{format}'. Choose table, json, or github.")

    known = set(all_rules()) | {name for name, _sev, _desc in all_rules().values()}
    unknown = [r for r in rule or [] if r.upper() not in known and r.lower() not in known]
    if unknown:
        raise _fail(f"Unknown rule(s): {', '.join(unknown)}. See 'coursecheck rules'.")

    try:
        report = CheckRunner(cfg).run(_root(path, cfg), rules=rule)
    except CourseCheckError as e:
        raise _fail(str(e))

    if format == "json":
        render_json(report)
    elif format == "github":
        render_github(report)
    else:
        render_table(report)

    raise typer.Exit(report.exit_code(fail_on_warning=fail_on_warning))


def _json_default(value: object) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


@app.command()
def pages(
    path: Annotated[str | None, typer.Argument(help="Content root (default: content.root)")] = None,
    format: Annotated[str, typer.Option("--format", "-f", help="Output format: table or json")] = "table",
) -> None:
    """List the page inventory with navigation metadata."""
    cfg = _get_config()
    try:
        site = ContentSite.load(_root(path, cfg), cfg.content)
    except CourseCheckError as e:
        raise _fail(str(e))

    if not site.pages:
        rprint("[yellow]No Markdown pages found.[/yellow]")
        raise typer.Exit(0)

    if format == "json":
        rows = [
            {
                "path": p.rel_path,
                "url": p.url,
                "title": p.title,
                "frontmatter": p.frontmatter,
                "frontmatter_error": p.frontmatter_error,
            }
            for p in site.pages.values()
        ]
        typer.echo(json.dumps(rows, indent=2, default=_json_default))
        return

    table = Table(title=f"Pages ({len(site.pages)})")
    table.add_column("Path", style="cyan")
    table.add_column("Title")
    table.add_column("Layout", style="green")
    table.add_column("Nav", justify="right")
    table.add_column("Parent", style="yellow")
    table.add_column("URL", style="dim")
    for p in site.pages.values():
        fm = p.frontmatter
        table.add_row(
            escape(p.rel_path),
            escape(p.title or "-"),
            escape(str(fm.get("layout", "-"))),
            escape(str(fm.get("nav_order", "-"))),
            escape(p.parent or "-"),
            escape(p.url),
        )
    rprint(table)


@app.command()
def anchors(
    file: Annotated[str, typer.Argument(help="Markdown file")],
) -> None:
    """List the link anchors a page defines."""
    target = Path(file)
    if not target.is_file():
        raise _fail(f"File not found: {file}")
    page = load_page(target, target.name)
    found = sorted(heading_anchors(page.body))
    if not found:
        rprint("[yellow]No anchors found.[/yellow]")
        raise typer.Exit(0)
    for anchor in found:
        typer.echo(f"#{anchor}")


@app.command()
def rules() -> None:
    """List rule ids and what they check."""
    table = Table(title="Rules")
    table.add_column("Rule", style="cyan")
    table.add_column("Check", style="green")
    table.add_column("Severity", justify="center")
    table.add_column("Description")
    for rule_id, (check_name, severity, description) in sorted(all_rules().items()):
        table.add_row(rule_id, check_name, severity, escape(description))
    rprint(table)


@app.command()
def watch(
    path: Annotated[str | None, typer.Argument(help="Content root (default: content.root)")] = None,
    debounce: Annotated[float, typer.Option("--debounce", help="Quiet period in seconds")] = 0.5,
) -> None:
    """Re-run checks whenever the content tree changes."""
    from coursecheck.watch import CheckWatcher

    cfg = _get_config()
    root = _root(path, cfg)
    if not root.is_dir():
        raise _fail(f"Content root is not a directory: {root}")
    runner = CheckRunner(cfg)

    def _rerun(changed: set[str]) -> None:
        rprint(f"\n[bold]{len(changed)} file(s) changed[/bold], re-checking...")
        render_table(runner.run(root))

    render_table(runner.run(root))
    rprint(f"[bold]Watching[/bold] {escape(str(root))} (Ctrl+C to stop)")
    CheckWatcher(
        root,
        _rerun,
        debounce_seconds=debounce,
        ignore_patterns=cfg.content.ignore_patterns,
        extensions=cfg.content.extensions,
    ).run_forever()


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default coursecheck.yaml in current directory."""
    target = Path("coursecheck.yaml")
    if target.exists() and not force:
        rprint("[yellow]coursecheck.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")
