"""Tests for coursecheck.config: models and YAML loader."""

import os
import pytest
from unittest.mock import patch

import yaml
from pydantic import ValidationError

from coursecheck.config.models import (
    CheckConfig,
    ContentConfig,
    CourseCheckConfig,
    FrontmatterConfig,
    LinkConfig,
    ModelicaConfig,
)
from coursecheck.config.loader import DEFAULT_CONFIG_TEMPLATE, load_config, _expand_env_vars
from coursecheck.errors import ConfigError


# ── CourseCheckConfig defaults ─────────────────────────────────────


class TestCourseCheckConfigDefaults:
    def test_default_log_level(self, sample_config):
        assert sample_config.log_level == "info"

    def test_default_log_format(self, sample_config):
        assert sample_config.log_format == "text"

    def test_default_validation_mode(self, sample_config):
        assert sample_config.checks.validation == "strict"

    def test_default_content_root(self, sample_config):
        assert sample_config.content.root == "."

    def test_liquid_enabled(self, sample_config):
        assert sample_config.liquid.enabled is True

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValidationError):
            CourseCheckConfig(log_level="verbose")


# ── Individual config model validations ─────────────────────────────


class TestContentConfig:
    def test_defaults(self):
        cfg = ContentConfig()
        assert cfg.extensions == [".md", ".markdown"]
        assert "_site" in cfg.ignore_patterns
        assert cfg.index_names == ["index.md", "README.md"]


class TestFrontmatterConfig:
    def test_defaults(self):
        cfg = FrontmatterConfig()
        assert cfg.required_keys == ["title"]
        assert cfg.require_frontmatter is True
        assert cfg.allowed_layouts == []
        assert cfg.exempt == ["README.md"]


class TestLinkConfig:
    def test_defaults(self):
        cfg = LinkConfig()
        assert cfg.check_anchors is True
        assert cfg.check_images is True
        assert cfg.html_to_markdown is True

    def test_invalid_ignore_pattern_rejected(self):
        with pytest.raises(ValidationError, match="Invalid ignore pattern"):
            LinkConfig(ignore_patterns=["^https:", "[unclosed"])

    def test_valid_ignore_patterns_kept(self):
        cfg = LinkConfig(ignore_patterns=[r"^https?://localhost", r"\.pdf$"])
        assert len(cfg.ignore_patterns) == 2


class TestModelicaConfig:
    def test_defaults(self):
        cfg = ModelicaConfig()
        assert cfg.fence_languages == ["modelica", "mo"]
        assert cfg.check_mo_files is True

    def test_empty_skip_marker_rejected(self):
        with pytest.raises(ValidationError):
            ModelicaConfig(skip_marker="")


class TestCheckConfig:
    def test_invalid_validation_mode(self):
        with pytest.raises(ValidationError):
            CheckConfig(validation="none")

    def test_disabled_rules(self):
        cfg = CheckConfig(disabled_rules=["FM005", "links"])
        assert len(cfg.disabled_rules) == 2


# ── _expand_env_vars ────────────────────────────────────────────────


class TestExpandEnvVars:
    def test_expands_string_variable(self):
        with patch.dict(os.environ, {"COURSE_ROOT": "docs"}):
            assert _expand_env_vars("${COURSE_ROOT}") == "docs"

    def test_missing_var_becomes_empty(self):
        os.environ.pop("COURSECHECK_UNSET_VAR", None)
        assert _expand_env_vars("x${COURSECHECK_UNSET_VAR}y") == "xy"

    def test_expands_nested_structures(self):
        with patch.dict(os.environ, {"A": "alpha", "B": "beta"}):
            result = _expand_env_vars({"outer": {"inner": "${A}"}, "list": ["${B}", "literal"]})
            assert result == {"outer": {"inner": "alpha"}, "list": ["beta", "literal"]}

    def test_non_string_passthrough(self):
        assert _expand_env_vars(42) == 42
        assert _expand_env_vars(True) is True
        assert _expand_env_vars(None) is None


# ── load_config ─────────────────────────────────────────────────────


class TestLoadConfig:
    def test_returns_defaults_when_no_file_exists(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        config = load_config()
        assert config == CourseCheckConfig()

    def test_loads_valid_yaml(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "coursecheck.yaml").write_text(
            "content:\n  root: docs\nchecks:\n  validation: warn\nlog_level: debug\n"
        )
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        config = load_config()
        assert config.content.root == "docs"
        assert config.checks.validation == "warn"
        assert config.log_level == "debug"

    def test_raises_on_invalid_yaml(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "coursecheck.yaml").write_text("  bad:\nyaml: [unterminated")
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config()

    def test_raises_on_invalid_config_values(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "coursecheck.yaml").write_text("checks:\n  validation: sometimes\n")
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config()

    def test_raises_on_non_mapping(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "coursecheck.yaml").write_text("- just\n- a list\n")
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        with pytest.raises(ConfigError, match="mapping"):
            load_config()

    def test_raises_on_bad_link_ignore_pattern(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "coursecheck.yaml").write_text("links:\n  ignore_patterns: ['[unclosed']\n")
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config()

    def test_missing_cli_path_raises(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(cli_path=str(tmp_path / "nope.yaml"))

    def test_cli_path_takes_priority(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "coursecheck.yaml").write_text("content:\n  root: site\n")
        cli_file = tmp_path / "custom.yaml"
        cli_file.write_text("content:\n  root: docs\n")

        config = load_config(cli_path=str(cli_file))
        assert config.content.root == "docs"

    def test_user_global_config_used_as_fallback(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        fake_home = tmp_path / "fakehome"
        (fake_home / ".coursecheck").mkdir(parents=True)
        (fake_home / ".coursecheck" / "config.yaml").write_text("log_level: debug\n")
        monkeypatch.setattr("pathlib.Path.home", lambda: fake_home)

        config = load_config()
        assert config.log_level == "debug"

    def test_env_vars_expanded_in_loaded_config(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("COURSE_ROOT", "lectures")
        (tmp_path / "coursecheck.yaml").write_text("content:\n  root: ${COURSE_ROOT}\n")
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")

        config = load_config()
        assert config.content.root == "lectures"

    def test_empty_yaml_file_returns_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "coursecheck.yaml").write_text("")
        monkeypatch.setattr("pathlib.Path.home", lambda: tmp_path / "fakehome")

        config = load_config()
        assert config.checks.validation == "strict"


class TestDefaultTemplate:
    def test_template_is_valid_config(self):
        config = CourseCheckConfig(**yaml.safe_load(DEFAULT_CONFIG_TEMPLATE))
        assert config == CourseCheckConfig()
