"""Output subsystem: renders check reports for terminals and CI."""

from coursecheck.output.render import render_github, render_json, render_table, report_dict

__all__ = [
    "render_github",
    "render_json",
    "render_table",
    "report_dict",
]
