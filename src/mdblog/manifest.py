"""Blog manifest: a section -> sorted markdown filenames mapping.

The manifest replaces a live directory scan at render time. Sections are the
directory paths relative to the blog root; files directly under the root land
in the `root` section.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from mdblog.errors import MdblogManifestError

logger = logging.getLogger("mdblog.manifest")

ROOT_SECTION = "root"
MARKDOWN_SUFFIX = ".md"

Manifest = dict[str, list[str]]


def generate_manifest(blog_dir: Path) -> Manifest:
    """Walk `blog_dir` and group every `*.md` file by its relative directory.

    Sections appear in the order the walk first meets them (sorted paths);
    filenames within a section are sorted by name.
    """

    if not blog_dir.is_dir():
        raise MdblogManifestError(f"Blog directory does not exist: {blog_dir}")

    manifest: Manifest = {}
    for md_file in sorted(blog_dir.rglob(f"*{MARKDOWN_SUFFIX}")):
        if not md_file.is_file():
            continue
        rel_dir = md_file.parent.relative_to(blog_dir).as_posix()
        section = ROOT_SECTION if rel_dir == "." else rel_dir
        manifest.setdefault(section, []).append(md_file.name)

    for files in manifest.values():
        files.sort()

    logger.debug(
        "Scanned %s: %d section(s), %d file(s)",
        blog_dir,
        len(manifest),
        sum(len(files) for files in manifest.values()),
    )
    return manifest


def write_manifest(manifest: Manifest, path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        raise MdblogManifestError(f"Failed writing manifest: {path}") from e


def load_manifest(path: Path) -> Manifest:
    """Read and validate a manifest JSON file."""

    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise MdblogManifestError(f"Missing manifest at: {path}") from e
    except OSError as e:
        raise MdblogManifestError(f"Failed reading manifest: {path}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MdblogManifestError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise MdblogManifestError(f"Expected manifest {path} to be a JSON object.")

    manifest: Manifest = {}
    for section, files in data.items():
        if not isinstance(files, list) or any(not isinstance(f, str) for f in files):
            raise MdblogManifestError(
                f"Expected manifest section {section!r} to be a list of filenames."
            )
        manifest[section] = list(files)
    return manifest


def resolve_post_path(blog_dir: Path, section: str, filename: str) -> Path:
    """Map a manifest entry to its file under `blog_dir`.

    Rejects names that would escape the blog directory.
    """

    base = blog_dir if section == ROOT_SECTION else blog_dir / section
    path = (base / filename).resolve()
    if not path.is_relative_to(blog_dir.resolve()):
        raise MdblogManifestError(f"Post path escapes the blog directory: {section}/{filename}")
    return path
