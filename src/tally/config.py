"""TOML config loading for tally.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_NAME = "tally.toml"


@dataclass
class PackageConfig:
    name: str = "untitled"
    version: str = "0.0.0"
    authors: list[str] = field(default_factory=list)


@dataclass
class RunConfig:
    entry: str = "main.tly"


@dataclass
class OutputConfig:
    color: bool = True


@dataclass
class TallyConfig:
    package: PackageConfig = field(default_factory=PackageConfig)
    run: RunConfig = field(default_factory=RunConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find tally.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> TallyConfig:
    """Parse a tally.toml file into a TallyConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = TallyConfig()

    if "package" in data:
        pkg = data["package"]
        config.package = PackageConfig(
            name=pkg.get("name", "untitled"),
            version=pkg.get("version", "0.0.0"),
            authors=pkg.get("authors", []),
        )

    if "run" in data:
        config.run = RunConfig(entry=data["run"].get("entry", "main.tly"))

    if "output" in data:
        config.output = OutputConfig(color=data["output"].get("color", True))

    return config
