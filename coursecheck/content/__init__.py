"""Content subsystem: page inventory, front matter, and Markdown scanning."""

from coursecheck.content.frontmatter import opens_frontmatter, parse_frontmatter, split_frontmatter
from coursecheck.content.markdown import (
    CodeFence,
    LinkRef,
    extract_links,
    heading_anchors,
    iter_fences,
    mask_code,
)
from coursecheck.content.models import ModelFile, Page
from coursecheck.content.site import ContentSite, load_page

__all__ = [
    "CodeFence",
    "ContentSite",
    "LinkRef",
    "ModelFile",
    "Page",
    "extract_links",
    "heading_anchors",
    "iter_fences",
    "load_page",
    "mask_code",
    "opens_frontmatter",
    "parse_frontmatter",
    "split_frontmatter",
]
