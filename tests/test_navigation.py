"""Tests for navigation hierarchy consistency."""

from coursecheck.checks.navigation import NavigationCheck


def fm(**fields) -> str:
    lines = [f"{k}: {v}" for k, v in fields.items()]
    return "---\n" + "\n".join(lines) + "\n---\n"


def _rules(issues):
    return [i.rule for i in issues]


class TestNavigationCheck:
    def test_valid_site_has_no_issues(self, course_site, sample_config):
        assert NavigationCheck(sample_config).check(course_site) == []

    def test_unknown_parent(self, make_site, sample_config):
        site = make_site({
            "a.md": fm(title="A", nav_order=1, parent="Basicss"),
        })
        issues = NavigationCheck(sample_config).check(site)
        assert _rules(issues) == ["NAV001"]
        assert issues[0].line == 4
        assert "Basicss" in issues[0].message

    def test_grand_parent_matches(self, make_site, sample_config):
        site = make_site({
            "course.md": fm(title="Course", has_children="true"),
            "basics.md": fm(title="Basics", parent="Course", has_children="true"),
            "lesson.md": fm(title="Lesson", parent="Basics", grand_parent="Course"),
        })
        assert NavigationCheck(sample_config).check(site) == []

    def test_grand_parent_mismatch(self, make_site, sample_config):
        site = make_site({
            "course.md": fm(title="Course", has_children="true"),
            "basics.md": fm(title="Basics", parent="Course", has_children="true"),
            "lesson.md": fm(title="Lesson", parent="Basics", grand_parent="Other"),
        })
        issues = NavigationCheck(sample_config).check(site)
        assert _rules(issues) == ["NAV002"]
        assert issues[0].path == "lesson.md"

    def test_grand_parent_without_parent(self, make_site, sample_config):
        site = make_site({"lesson.md": fm(title="Lesson", grand_parent="Course")})
        issues = NavigationCheck(sample_config).check(site)
        assert _rules(issues) == ["NAV002"]
        assert "without parent" in issues[0].message

    def test_has_children_without_children(self, make_site, sample_config):
        site = make_site({"basics.md": fm(title="Basics", has_children="true")})
        issues = NavigationCheck(sample_config).check(site)
        assert _rules(issues) == ["NAV003"]
        assert issues[0].severity == "warning"

    def test_duplicate_sibling_nav_order(self, make_site, sample_config):
        site = make_site({
            "basics.md": fm(title="Basics", has_children="true"),
            "a.md": fm(title="A", parent="Basics", nav_order=1),
            "b.md": fm(title="B", parent="Basics", nav_order=1),
        })
        issues = NavigationCheck(sample_config).check(site)
        assert _rules(issues) == ["NAV004"]
        assert issues[0].path == "b.md"
        assert "a.md" in issues[0].message

    def test_same_nav_order_under_different_parents(self, make_site, sample_config):
        site = make_site({
            "x.md": fm(title="X", has_children="true", nav_order=1),
            "y.md": fm(title="Y", has_children="true", nav_order=2),
            "a.md": fm(title="A", parent="X", nav_order=1),
            "b.md": fm(title="B", parent="Y", nav_order=1),
        })
        assert NavigationCheck(sample_config).check(site) == []

    def test_nav_exclude_pages_ignored_for_order(self, make_site, sample_config):
        site = make_site({
            "a.md": fm(title="A", nav_order=1),
            "b.md": fm(title="B", nav_order=1, nav_exclude="true"),
        })
        assert NavigationCheck(sample_config).check(site) == []

    def test_duplicate_parent_titles(self, make_site, sample_config):
        site = make_site({
            "one/index.md": fm(title="Basics", has_children="true", nav_order=1),
            "two/index.md": fm(title="Basics", has_children="true", nav_order=2),
            "one/a.md": fm(title="A", parent="Basics"),
        })
        issues = NavigationCheck(sample_config).check(site)
        assert _rules(issues) == ["NAV005"]
        assert issues[0].path == "two/index.md"

    def test_pages_without_frontmatter_ignored(self, make_site, sample_config):
        site = make_site({"notes.md": "# Notes\n", "broken.md": "---\ntitle: [x\n---\n"})
        assert NavigationCheck(sample_config).check(site) == []
