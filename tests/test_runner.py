"""Tests for CheckRunner: check selection, validation modes, and report assembly."""

import pytest

from coursecheck.config.models import CheckConfig, CourseCheckConfig
from coursecheck.errors import ContentError
from coursecheck.runner import CheckRunner


def _config(**checks) -> CourseCheckConfig:
    return CourseCheckConfig(checks=CheckConfig(**checks))


class TestCheckRunner:
    def test_valid_site_passes(self, course_root, sample_config):
        report = CheckRunner(sample_config).run(course_root)
        assert report.ok
        assert report.issues == []
        assert report.files_checked == 4
        assert report.checks_run == ["frontmatter", "navigation", "links", "modelica", "liquid"]

    def test_issues_sorted_by_location(self, broken_root, sample_config):
        report = CheckRunner(sample_config).run(broken_root)
        assert [(i.path, i.line, i.rule) for i in report.issues] == [
            ("b.md", 1, "FM001"),
            ("index.md", 3, "FM005"),
            ("index.md", 5, "LNK001"),
        ]
        assert not report.ok
        assert len(report.errors) == 2
        assert len(report.warnings) == 1

    def test_root_defaults_to_config(self, broken_root):
        config = CourseCheckConfig(content={"root": str(broken_root)})
        report = CheckRunner(config).run()
        assert report.root == str(broken_root.resolve())

    def test_missing_root_raises(self, tmp_path, sample_config):
        with pytest.raises(ContentError):
            CheckRunner(sample_config).run(tmp_path / "nope")

    def test_select_check_by_name(self, broken_root, sample_config):
        report = CheckRunner(sample_config).run(broken_root, rules=["links"])
        assert report.checks_run == ["links"]
        assert [i.rule for i in report.issues] == ["LNK001"]

    def test_select_rule_id_case_insensitive(self, broken_root, sample_config):
        report = CheckRunner(sample_config).run(broken_root, rules=["fm005"])
        assert report.checks_run == ["frontmatter"]
        assert [i.rule for i in report.issues] == ["FM005"]

    def test_disabled_rule(self, broken_root):
        report = CheckRunner(_config(disabled_rules=["FM005"])).run(broken_root)
        assert "FM005" not in {i.rule for i in report.issues}
        assert "frontmatter" in report.checks_run

    def test_disabled_check(self, broken_root):
        report = CheckRunner(_config(disabled_rules=["links"])).run(broken_root)
        assert "links" not in report.checks_run
        assert "LNK001" not in {i.rule for i in report.issues}

    def test_warn_mode_downgrades(self, broken_root):
        report = CheckRunner(_config(validation="warn")).run(broken_root)
        assert len(report.issues) == 3
        assert all(i.severity == "warning" for i in report.issues)
        assert report.ok
        assert report.exit_code() == 0
        assert report.exit_code(fail_on_warning=True) == 1

    def test_off_mode_runs_nothing(self, broken_root):
        report = CheckRunner(_config(validation="off")).run(broken_root)
        assert report.issues == []
        assert report.checks_run == []
        assert report.files_checked == 2

    def test_exit_codes(self, broken_root, course_root, sample_config):
        runner = CheckRunner(sample_config)
        assert runner.run(broken_root).exit_code() == 1
        assert runner.run(course_root).exit_code(fail_on_warning=True) == 0

    def test_by_path_groups_issues(self, broken_root, sample_config):
        grouped = CheckRunner(sample_config).run(broken_root).by_path()
        assert list(grouped) == ["b.md", "index.md"]
        assert len(grouped["index.md"]) == 2
