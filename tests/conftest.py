"""Shared test fixtures for coursecheck."""

from pathlib import Path

import pytest

from coursecheck.config.models import CourseCheckConfig
from coursecheck.content.site import ContentSite

INDEX_MD = """\
---
layout: home
title: Home
nav_order: 1
---

# Modelica for Automotive Engineers

Start with [the basics](basics/index.md) or jump to the
[quarter-car model](basics/quarter-car.md#equations).

## Contents

{% for p in site.pages %}{% if p.parent == "Basics" %}
- [{{ p.title }}]({{ p.url | relative_url }})
{% endif %}{% endfor %}
"""

BASICS_INDEX_MD = """\
---
layout: default
title: Basics
nav_order: 2
has_children: true
---

# Basics

See [connectors](connectors.md) and the [home page](../index.md).
"""

QUARTER_CAR_MD = """\
---
layout: default
title: Quarter-car suspension
parent: Basics
nav_order: 1
author: Course Team
date: 2024-03-01
tags: [suspension, mechanics]
---

# Quarter-car suspension

![Diagram](../assets/quarter-car.png)

## Equations

```modelica
model QuarterCar
  parameter Real m = 250 "sprung mass";
  parameter Real k = 16000;
  parameter Real d = 1000;
  Real x(start = 0.1);
  Real v;
equation
  v = der(x);
  m*der(v) = -k*x - d*v;
end QuarterCar;
```
"""

CONNECTORS_MD = """\
---
layout: default
title: Connectors
parent: Basics
nav_order: 2
---

# Connectors

Back to [equations](quarter-car.md#equations).

```modelica
connector Flange
  Real s "position";
  flow Real f "force";
end Flange;
```

```mo
block DiscretePI
  parameter Real Ts = 0.01;
  input Real e;
  output Real u;
  discrete Real i(start = 0);
equation
  when sample(0, Ts) then
    i = pre(i) + Ts*e;
    u = 2*e + i;
  end when;
end DiscretePI;
```
"""


def write_site(root: Path, files: dict[str, str | bytes]) -> Path:
    """Create files under *root*; bytes are written raw."""
    for rel, content in files.items():
        target = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")
    return root


def valid_site_files() -> dict[str, str | bytes]:
    return {
        "index.md": INDEX_MD,
        "basics/index.md": BASICS_INDEX_MD,
        "basics/quarter-car.md": QUARTER_CAR_MD,
        "basics/connectors.md": CONNECTORS_MD,
        "assets/quarter-car.png": b"\x89PNG\r\n\x1a\n",
        "_site/index.html": "<html>generated</html>",
    }


@pytest.fixture
def sample_config():
    return CourseCheckConfig()


@pytest.fixture
def course_root(tmp_path):
    """A small, fully valid course site."""
    root = tmp_path / "course"
    root.mkdir()
    return write_site(root, valid_site_files())


@pytest.fixture
def course_site(course_root, sample_config):
    return ContentSite.load(course_root, sample_config.content)


@pytest.fixture
def make_site(tmp_path, sample_config):
    """Build a ContentSite from a mapping of rel path -> content."""

    def _make(files: dict[str, str | bytes], config: CourseCheckConfig | None = None) -> ContentSite:
        root = tmp_path / "site"
        root.mkdir(exist_ok=True)
        write_site(root, files)
        cfg = config or sample_config
        return ContentSite.load(root, cfg.content)

    return _make


BROKEN_FILES = {
    "index.md": "---\ntitle: Home\nnavorder: 1\n---\n[x](missing.md)\n",
    "b.md": "# No front matter\n",
}


@pytest.fixture
def broken_root(tmp_path):
    """A site with one FM001 error, one FM005 warning and one LNK001 error."""
    root = tmp_path / "broken"
    root.mkdir()
    return write_site(root, BROKEN_FILES)
