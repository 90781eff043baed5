"""YAML config loading with env var expansion."""

import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from coursecheck.errors import ConfigError

from .models import CourseCheckConfig


def load_config(cli_path: str | None = None) -> CourseCheckConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    if cli_path and not Path(cli_path).exists():
        raise ConfigError(f"Config file not found: {cli_path}")

    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./coursecheck.yaml"),
        Path.home() / ".coursecheck" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path, encoding="utf-8") as f:
                    raw = yaml.safe_load(f)
                if raw is None:
                    continue
                if not isinstance(raw, dict):
                    raise ConfigError(f"Invalid config in {path}: top level must be a mapping")
                raw = _expand_env_vars(raw)
                return CourseCheckConfig(**raw)
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ConfigError(f"Invalid config in {path}: {e}") from e

    return CourseCheckConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `coursecheck config init`
DEFAULT_CONFIG_TEMPLATE = """\
# coursecheck.yaml

# Content tree
content:
  root: "."
  extensions: [".md", ".markdown"]
  # ignore_patterns: [_site, .git, node_modules, vendor, .jekyll-cache]
  index_names: ["index.md", "README.md"]

# Front matter
frontmatter:
  required_keys: ["title"]
  require_frontmatter: true
  # allowed_layouts: [default, home, post]
  warn_unknown_keys: true
  # extra_keys: []
  exempt: ["README.md"]

# Links
links:
  check_anchors: true
  check_images: true
  # ignore_patterns: ["^/assets/generated/"]
  html_to_markdown: true

# Modelica snippets
modelica:
  fence_languages: ["modelica", "mo"]
  check_mo_files: true
  skip_marker: "coursecheck: skip"   # <!-- coursecheck: skip --> above a fence

# Liquid templates
liquid:
  enabled: true

# Checks
checks:
  validation: "strict"         # strict | warn | off
  # disabled_rules: [FM005, NAV004]

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
