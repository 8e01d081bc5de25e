"""Project scaffolding for `tally new`."""

from __future__ import annotations

from pathlib import Path

_TALLY_TOML_TEMPLATE = """\
[package]
name = "{name}"
version = "0.1.0"
authors = []

[run]
entry = "main.tly"

[output]
color = true
"""

_MAIN_TLY_TEMPLATE = """\
// Hello from Tally!
var width = 6
var height = 7
var area = width * height
println(area)
"""

_GITIGNORE = """\
__pycache__/
"""

_README_TEMPLATE = """\
# {name}

A Tally project.

## Run

```bash
tally run
```
"""


def scaffold(name: str, parent: Path | None = None) -> Path:
    """Create a new Tally project directory. Returns the project path."""
    base = parent or Path.cwd()
    project_dir = base / name

    if project_dir.exists():
        raise FileExistsError(f"Directory '{name}' already exists")

    project_dir.mkdir(parents=True)
    (project_dir / "tally.toml").write_text(_TALLY_TOML_TEMPLATE.format(name=name))
    (project_dir / "main.tly").write_text(_MAIN_TLY_TEMPLATE)
    (project_dir / ".gitignore").write_text(_GITIGNORE)
    (project_dir / "README.md").write_text(_README_TEMPLATE.format(name=name))

    return project_dir
