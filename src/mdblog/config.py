"""Project configuration loading for mdblog.

Only reads `mdblog.toml` and performs light validation. Paths are kept as
strings relative to the project root; `MdblogConfig` resolves them on demand.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from mdblog.errors import MdblogConfigError

CONFIG_FILENAME = "mdblog.toml"
THEMES = ("dark", "light")


@dataclass(frozen=True)
class PathsConfig:
    blog_dir: str
    manifest: str
    output_dir: str


@dataclass(frozen=True)
class SiteConfig:
    title: str
    theme: str


@dataclass(frozen=True)
class MdblogConfig:
    version: int
    root: Path
    paths: PathsConfig
    site: SiteConfig

    @property
    def blog_dir(self) -> Path:
        return self.root / self.paths.blog_dir

    @property
    def manifest_path(self) -> Path:
        return self.root / self.paths.manifest

    @property
    def output_dir(self) -> Path:
        return self.root / self.paths.output_dir


def find_project_root(start: Path) -> Path:
    """Walk upward from `start` (file or directory) looking for `mdblog.toml`."""

    cur = start
    try:
        if cur.is_file():
            cur = cur.parent
    except OSError:
        cur = cur.parent

    cur = cur.resolve()
    while True:
        if (cur / CONFIG_FILENAME).is_file():
            return cur
        if cur.parent == cur:
            break
        cur = cur.parent

    raise MdblogConfigError(f"Could not find {CONFIG_FILENAME} by walking upward from start path.")


def _as_table(value: Any, *, name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MdblogConfigError(f"Expected [{name}] to be a table.")
    return value


def _as_int(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise MdblogConfigError(f"Expected {name} to be an integer.")
    return value


def _as_str(value: Any, *, name: str) -> str:
    if not isinstance(value, str):
        raise MdblogConfigError(f"Expected {name} to be a string.")
    return value


def _str_or_default(table: dict[str, Any], key: str, default: str, *, section: str) -> str:
    if key in table:
        return _as_str(table[key], name=f"{section}.{key}")
    return default


def load_config(*, root: Path | None = None, config_path: Path | None = None) -> MdblogConfig:
    """Load and validate `mdblog.toml`.

    If neither `root` nor `config_path` are provided, the project root is
    discovered by walking upward from the current working directory.
    """

    if config_path is None:
        if root is None:
            root = find_project_root(Path.cwd())
        config_path = root / CONFIG_FILENAME
    elif root is None:
        root = config_path.parent

    try:
        raw = config_path.read_bytes()
    except FileNotFoundError as e:
        raise MdblogConfigError(f"Missing {CONFIG_FILENAME} at: {config_path}") from e
    except OSError as e:
        raise MdblogConfigError(f"Failed reading config file: {config_path}") from e

    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as e:
        raise MdblogConfigError(f"Config is not valid UTF-8: {config_path}") from e
    except tomllib.TOMLDecodeError as e:
        raise MdblogConfigError(f"Invalid TOML in {config_path}: {e}") from e

    version = data.get("version", None)
    if version is None:
        raise MdblogConfigError(f"Missing required `version = 1` in {CONFIG_FILENAME}.")
    version_i = _as_int(version, name="version")
    if version_i != 1:
        raise MdblogConfigError(f"Unsupported config version: {version_i} (expected 1).")

    paths_tbl = _as_table(data.get("paths"), name="paths")
    site_tbl = _as_table(data.get("site"), name="site")

    blog_dir = _str_or_default(paths_tbl, "blog_dir", "blog", section="paths")
    manifest = _str_or_default(paths_tbl, "manifest", "blog-manifest.json", section="paths")
    output_dir = _str_or_default(paths_tbl, "output_dir", "site", section="paths")

    title = _str_or_default(site_tbl, "title", "My Blog", section="site")
    theme = _str_or_default(site_tbl, "theme", "dark", section="site")

    # Validation
    if not blog_dir.strip():
        raise MdblogConfigError("Invalid config: paths.blog_dir must not be empty.")

    if theme not in THEMES:
        raise MdblogConfigError(
            f"Invalid config: site.theme must be one of {', '.join(THEMES)} (got {theme!r})."
        )

    if (root / output_dir).resolve() == (root / blog_dir).resolve():
        raise MdblogConfigError("Invalid config: paths.output_dir must differ from paths.blog_dir.")

    return MdblogConfig(
        version=version_i,
        root=root.resolve(),
        paths=PathsConfig(blog_dir=blog_dir, manifest=manifest, output_dir=output_dir),
        site=SiteConfig(title=title, theme=theme),
    )
