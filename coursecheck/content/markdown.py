"""Line-oriented Markdown scanning: code fences, links, and heading anchors.

This is not a Markdown renderer. The scanners recognise just enough of the
CommonMark/kramdown surface to find the constructs the checks care about,
and they report 1-based source line numbers for everything they yield.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Literal

_FENCE_OPEN_RE = re.compile(r"^( {0,3})(`{3,}|~{3,})(.*)$")
_HIGHLIGHT_OPEN_RE = re.compile(r"^\s*\{%-?\s*highlight\s+(\S+)[^%]*-?%\}\s*$")
_HIGHLIGHT_CLOSE_RE = re.compile(r"^\s*\{%-?\s*endhighlight\s*-?%\}\s*$")
_HTML_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_INLINE_CODE_RE = re.compile(r"(`+)(.+?)(?<!`)\1(?!`)")

# Link target: <...>, or a run of non-space chars allowing balanced parens
# and Liquid expressions (which may contain spaces).
_TARGET = r"<[^>\n]*>|(?:\{\{.*?\}\}|\{%.*?%\}|\([^()\s]*\)|[^()\s])*"
_INLINE_LINK_RE = re.compile(
    r"(!?)\[((?:[^\[\]]|\[[^\[\]]*\])*)\]"
    r"\(\s*(" + _TARGET + r")"
    r"(?:\s+(?:\"[^\"]*\"|'[^']*'|\([^)]*\)))?\s*\)"
)
_REF_DEF_RE = re.compile(r"^ {0,3}\[(?!\^)([^\]]+)\]:\s*(<[^>]*>|\S+)")
_REF_USE_RE = re.compile(r"(!?)\[((?:[^\[\]]|\[[^\[\]]*\])*)\]\[([^\]]*)\]")
_HTML_ATTR_RE = re.compile(r"\b(href|src)\s*=\s*(?:\"([^\"]*)\"|'([^']*)')", re.IGNORECASE)
_LIQUID_LINK_RE = re.compile(r"\{%-?\s*link\s+(\S+?)\s*-?%\}")
_LIQUID_RE = re.compile(r"\{\{.*?\}\}|\{%.*?%\}")

_ATX_RE = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?(?:[ \t]+#+)?[ \t]*$")
_SETEXT_RE = re.compile(r"^ {0,3}(=+|-+)[ \t]*$")
_EXPLICIT_ID_RE = re.compile(r"\s*\{:?\s*#([\w:.-]+)[^}]*\}\s*$")
_IAL_LINE_RE = re.compile(r"^\s*\{:\s*#([\w:.-]+)[^}]*\}\s*$")
_HTML_ID_RE = re.compile(r"\b(?:id|name)\s*=\s*[\"']([^\"']+)[\"']", re.IGNORECASE)
_MD_LINK_TEXT_RE = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")


@dataclass(frozen=True)
class CodeFence:
    """A fenced code block (or Liquid ``highlight`` block)."""

    info: str
    language: str
    code: str
    start_line: int
    end_line: int
    closed: bool = True
    preceding_line: str = ""

    @property
    def code_line(self) -> int:
        """Line number of the first line of code inside the fence."""
        return self.start_line + 1


LinkKind = Literal["link", "image", "definition", "html", "liquid"]


@dataclass(frozen=True)
class LinkRef:
    target: str
    line: int
    kind: LinkKind
    dynamic: bool = False


@dataclass(frozen=True)
class RefUse:
    label: str
    line: int


def _language_of(info: str) -> str:
    words = info.strip().split()
    if not words:
        return ""
    return words[0].strip("{}.").lower()


def iter_fences(text: str, start_line: int = 1) -> Iterator[CodeFence]:
    """Yield fenced code blocks in document order."""
    lines = text.splitlines()
    i = 0
    last_text = ""
    while i < len(lines):
        line = lines[i]
        opener = _FENCE_OPEN_RE.match(line)
        highlight = None if opener else _HIGHLIGHT_OPEN_RE.match(line)

        if opener and not (opener.group(2)[0] == "`" and "`" in opener.group(3)):
            _indent, marker, info = opener.groups()
            close_re = re.compile(r"^ {0,3}" + re.escape(marker[0]) + "{" + str(len(marker)) + r",}[ \t]*$")
            close_test = close_re.match
        elif highlight:
            info = highlight.group(1)
            close_test = _HIGHLIGHT_CLOSE_RE.match
        else:
            if line.strip():
                last_text = line
            i += 1
            continue

        body: list[str] = []
        j = i + 1
        closed = False
        while j < len(lines):
            if close_test(lines[j]):
                closed = True
                break
            body.append(lines[j])
            j += 1

        end = j if closed else len(lines) - 1
        yield CodeFence(
            info=info.strip(),
            language=_language_of(info),
            code="\n".join(body),
            start_line=start_line + i,
            end_line=start_line + end,
            closed=closed,
            preceding_line=last_text,
        )
        last_text = ""
        i = end + 1


def _blank(match: re.Match) -> str:
    """Replace a match with spaces, keeping newlines."""
    return re.sub(r"[^\n]", " ", match.group(0))


def mask_code(text: str, inline: bool = True) -> str:
    """Blank out fenced code, HTML comments and (optionally) inline code.

    Line structure is preserved so line numbers computed on the masked text
    match the original.
    """
    lines = text.splitlines()
    for fence in iter_fences(text):
        for n in range(fence.start_line - 1, fence.end_line):
            lines[n] = ""
    masked = "\n".join(lines)
    masked = _HTML_COMMENT_RE.sub(_blank, masked)
    if inline:
        masked = _INLINE_CODE_RE.sub(_blank, masked)
    return masked


def _unwrap(target: str) -> str:
    target = target.strip()
    if target.startswith("<") and target.endswith(">"):
        return target[1:-1].strip()
    return target


def _is_dynamic(target: str) -> bool:
    return "{{" in target or "{%" in target


def extract_links(text: str, start_line: int = 1) -> Iterator[LinkRef]:
    """Yield every link target in *text*, skipping code and comments."""
    masked = mask_code(text)
    for offset, line in enumerate(masked.splitlines()):
        lineno = start_line + offset

        ref_def = _REF_DEF_RE.match(line)
        if ref_def:
            target = _unwrap(ref_def.group(2))
            yield LinkRef(target, lineno, "definition", _is_dynamic(target))
            continue

        for m in _INLINE_LINK_RE.finditer(line):
            target = _unwrap(m.group(3))
            kind: LinkKind = "image" if m.group(1) else "link"
            # Liquid link tags inside the target are reported on their own below
            yield LinkRef(target, lineno, kind, _is_dynamic(target))
            # Linked images: [![alt](img.png)](page.md)
            for inner in _INLINE_LINK_RE.finditer(m.group(2)):
                if inner.group(1):
                    target = _unwrap(inner.group(3))
                    yield LinkRef(target, lineno, "image", _is_dynamic(target))

        for m in _HTML_ATTR_RE.finditer(line):
            target = m.group(2) if m.group(2) is not None else m.group(3)
            kind = "image" if m.group(1).lower() == "src" else "html"
            yield LinkRef(target.strip(), lineno, kind, _is_dynamic(target))

        for m in _LIQUID_LINK_RE.finditer(line):
            yield LinkRef(m.group(1), lineno, "liquid")


def normalize_label(label: str) -> str:
    """Reference labels match case-insensitively with collapsed whitespace."""
    return " ".join(label.split()).casefold()


def reference_definitions(text: str) -> set[str]:
    masked = mask_code(text)
    labels: set[str] = set()
    for line in masked.splitlines():
        m = _REF_DEF_RE.match(line)
        if m:
            labels.add(normalize_label(m.group(1)))
    return labels


def reference_uses(text: str, start_line: int = 1) -> Iterator[RefUse]:
    """Yield full (``[t][id]``) and collapsed (``[t][]``) reference links."""
    masked = _LIQUID_RE.sub(_blank, mask_code(text))
    for offset, line in enumerate(masked.splitlines()):
        if _REF_DEF_RE.match(line):
            continue
        for m in _REF_USE_RE.finditer(line):
            label = m.group(3) or m.group(2)
            # Footnote markers ([^1]) are not reference links
            if label.strip() and not label.startswith("^"):
                yield RefUse(normalize_label(label), start_line + offset)


# ----------------------------------------------------------------------
# Heading anchors
# ----------------------------------------------------------------------


def _plain_heading(text: str) -> str:
    text = _MD_LINK_TEXT_RE.sub(r"\1", text)
    text = re.sub(r"\{\{.*?\}\}|\{%.*?%\}", "", text)
    text = re.sub(r"<[^>]+>", "", text)
    return text.replace("`", "").strip()


def github_slug(text: str) -> str:
    slug = _plain_heading(text).lower()
    slug = re.sub(r"[^\w\- ]", "", slug)
    return slug.replace(" ", "-")


def kramdown_slug(text: str) -> str:
    slug = _plain_heading(text)
    slug = re.sub(r"[^A-Za-z0-9 \-]", "", slug)
    slug = re.sub(r"^[^A-Za-z]+", "", slug)
    slug = slug.replace(" ", "-").lower()
    return slug or "section"


def _headings(text: str) -> Iterator[str]:
    lines = mask_code(text, inline=False).splitlines()
    for i, line in enumerate(lines):
        atx = _ATX_RE.match(line)
        if atx:
            yield atx.group(2) or ""
            continue
        if i + 1 < len(lines) and line.strip() and not line.startswith("    "):
            nxt = lines[i + 1]
            if _SETEXT_RE.match(nxt) and not _ATX_RE.match(line) and not line.lstrip().startswith(("-", "*", ">", "|")):
                yield line.strip()


def heading_anchors(text: str) -> set[str]:
    """Return every fragment id a document defines."""
    anchors: set[str] = set()
    seen: dict[str, Counter] = {"github": Counter(), "kramdown": Counter()}

    for heading in _headings(text):
        explicit = _EXPLICIT_ID_RE.search(heading)
        if explicit:
            anchors.add(explicit.group(1))
            heading = heading[: explicit.start()]
        for style, slugger in (("github", github_slug), ("kramdown", kramdown_slug)):
            base = slugger(heading)
            count = seen[style][base]
            seen[style][base] += 1
            anchors.add(base if count == 0 else f"{base}-{count}")

    masked = mask_code(text, inline=False)
    for line in masked.splitlines():
        ial = _IAL_LINE_RE.match(line)
        if ial:
            anchors.add(ial.group(1))
    anchors.update(_HTML_ID_RE.findall(masked))
    anchors.discard("")
    return anchors
