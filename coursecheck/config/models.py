import re
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ContentConfig(BaseModel):
    root: str = "."
    extensions: list[str] = Field(default_factory=lambda: [".md", ".markdown"])
    ignore_patterns: list[str] = Field(default_factory=lambda: [
        "_site", ".git", "node_modules", "vendor", ".jekyll-cache", ".sass-cache", "__pycache__"
    ])
    index_names: list[str] = Field(default_factory=lambda: ["index.md", "README.md"])


class FrontmatterConfig(BaseModel):
    required_keys: list[str] = Field(default_factory=lambda: ["title"])
    require_frontmatter: bool = True
    allowed_layouts: list[str] = Field(default_factory=list)
    warn_unknown_keys: bool = True
    extra_keys: list[str] = Field(default_factory=list)
    exempt: list[str] = Field(default_factory=lambda: ["README.md"])


class LinkConfig(BaseModel):
    check_anchors: bool = True
    check_images: bool = True
    ignore_patterns: list[str] = Field(default_factory=list)
    html_to_markdown: bool = True

    @field_validator("ignore_patterns")
    @classmethod
    def validate_patterns(cls, v: list[str]) -> list[str]:
        """Each ignore pattern must compile as a regular expression."""
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"Invalid ignore pattern {pattern!r}: {exc}") from exc
        return v


class ModelicaConfig(BaseModel):
    fence_languages: list[str] = Field(default_factory=lambda: ["modelica", "mo"])
    check_mo_files: bool = True
    skip_marker: str = Field(default="coursecheck: skip", min_length=1)


class LiquidConfig(BaseModel):
    enabled: bool = True


class CheckConfig(BaseModel):
    validation: Literal["strict", "warn", "off"] = "strict"
    disabled_rules: list[str] = Field(default_factory=list)


class CourseCheckConfig(BaseModel):
    content: ContentConfig = Field(default_factory=ContentConfig)
    frontmatter: FrontmatterConfig = Field(default_factory=FrontmatterConfig)
    links: LinkConfig = Field(default_factory=LinkConfig)
    modelica: ModelicaConfig = Field(default_factory=ModelicaConfig)
    liquid: LiquidConfig = Field(default_factory=LiquidConfig)
    checks: CheckConfig = Field(default_factory=CheckConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
