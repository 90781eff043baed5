"""Split and parse YAML front matter blocks."""

from __future__ import annotations

import yaml

from coursecheck.errors import FrontmatterError

_OPEN = "---"
_CLOSE = ("---", "...")


def opens_frontmatter(text: str) -> bool:
    """True when the first line of *text* is exactly ``---``."""
    if text.startswith("\ufeff"):
        text = text[1:]
    lines = text.splitlines()
    return bool(lines) and lines[0].rstrip() == _OPEN


def split_frontmatter(text: str) -> tuple[str | None, str, int]:
    """Split a Markdown document into front matter source and body.

    Returns ``(yaml_src, body, body_line)``. ``yaml_src`` is None when the
    document does not open with a ``---`` line; ``body_line`` is the 1-based
    line number of the first body line.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    if not opens_frontmatter(text):
        return None, text, 1
    lines = text.splitlines(keepends=True)

    for idx in range(1, len(lines)):
        if lines[idx].rstrip() in _CLOSE:
            yaml_src = "".join(lines[1:idx])
            body = "".join(lines[idx + 1:])
            return yaml_src, body, idx + 2

    raise FrontmatterError("Front matter opened with '---' but never closed", line=1)


def parse_frontmatter(text: str) -> tuple[dict, str, int]:
    """Parse front matter into a mapping.

    Documents without front matter yield ``{}``. An empty block is also
    ``{}``. Raises FrontmatterError for YAML errors or non-mapping content.
    """
    yaml_src, body, body_line = split_frontmatter(text)
    if yaml_src is None:
        return {}, body, body_line

    try:
        data = yaml.safe_load(yaml_src)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        # +2: the opening '---' is line 1 and marks are 0-based
        line = mark.line + 2 if mark is not None else 1
        problem = getattr(exc, "problem", None) or str(exc)
        raise FrontmatterError(f"YAML parse error: {problem}", line=line) from exc

    if data is None:
        return {}, body, body_line
    if not isinstance(data, dict):
        raise FrontmatterError(
            f"Front matter is not a mapping, got {type(data).__name__}", line=2
        )
    return data, body, body_line
