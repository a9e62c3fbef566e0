"""Post metadata: titles, dates, and the section listing used by the index."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from mdblog.errors import MdblogManifestError, MdblogPostError
from mdblog.manifest import Manifest, resolve_post_path

logger = logging.getLogger("mdblog.posts")

UNTITLED = "Untitled"

_TITLE_RE = re.compile(r"^#\s+(.+)$", re.MULTILINE)
_FILENAME_DATE_RE = re.compile(r"(\d{4}-\d{2}-\d{2})")
_CONTENT_DATE_RE = re.compile(r"date:\s*(\d{4}-\d{2}-\d{2})", re.IGNORECASE)

# Reads the raw markdown for (section, filename).
PostReader = Callable[[str, str], str]
# Told about a post whose read failed.
ReadFailureHandler = Callable[[str, str, MdblogPostError], None]


@dataclass(frozen=True, slots=True)
class PostSummary:
    section: str
    filename: str
    title: str
    date: str | None
    url: str


def extract_title(markdown: str) -> str:
    m = _TITLE_RE.search(markdown)
    if m is None:
        return UNTITLED
    return m.group(1).strip()


def extract_date(filename: str, markdown: str) -> str | None:
    """Return the post date as `YYYY-MM-DD`.

    The filename wins over a `date:` line in the content; neither gives None.
    """

    m = _FILENAME_DATE_RE.search(filename)
    if m:
        return m.group(1)
    m = _CONTENT_DATE_RE.search(markdown)
    if m:
        return m.group(1)
    return None


def section_label(section: str) -> str:
    """Human label for a section name: `daily-reads` -> `Daily reads`."""

    if not section:
        return section
    return (section[0].upper() + section[1:]).replace("-", " ", 1)


def post_url(section: str, filename: str) -> str:
    """Relative URL of the rendered page for a post."""

    return str(PurePosixPath(section) / PurePosixPath(filename).with_suffix(".html"))


def file_reader(blog_dir: Path) -> PostReader:
    """Build a `PostReader` that loads posts from `blog_dir`."""

    def read(section: str, filename: str) -> str:
        try:
            path = resolve_post_path(blog_dir, section, filename)
        except MdblogManifestError as e:
            raise MdblogPostError(str(e)) from e
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise MdblogPostError(f"Post not found: {section}/{filename}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise MdblogPostError(f"Failed reading post {section}/{filename}: {e}") from e

    return read


def summarize(section: str, filename: str, markdown: str) -> PostSummary:
    return PostSummary(
        section=section,
        filename=filename,
        title=extract_title(markdown),
        date=extract_date(filename, markdown),
        url=post_url(section, filename),
    )


def iter_post_sources(
    manifest: Manifest,
    read: PostReader,
    *,
    on_error: ReadFailureHandler | None = None,
) -> Iterator[tuple[str, str, str]]:
    """Yield `(section, filename, markdown)` for every readable manifest entry.

    Posts are read one at a time in manifest order. Unreadable posts are
    logged, passed to `on_error` when given, and skipped so one broken file
    never hides the rest.
    """

    for section, files in manifest.items():
        for filename in files:
            try:
                markdown = read(section, filename)
            except MdblogPostError as e:
                logger.warning("Skipping %s/%s: %s", section, filename, e)
                if on_error is not None:
                    on_error(section, filename, e)
                continue
            yield section, filename, markdown


def collect_posts(manifest: Manifest, read: PostReader) -> list[PostSummary]:
    """Read every manifest entry in order and summarize it."""

    return [summarize(*source) for source in iter_post_sources(manifest, read)]


def group_by_section(posts: list[PostSummary]) -> dict[str, list[PostSummary]]:
    """Group posts by section, newest first within each section.

    Sections keep the order of their first post. Undated posts sort after
    every dated post.
    """

    grouped: dict[str, list[PostSummary]] = {}
    for post in posts:
        grouped.setdefault(post.section, []).append(post)

    for section, items in grouped.items():
        dated = sorted((p for p in items if p.date), key=lambda p: p.date or "", reverse=True)
        undated = [p for p in items if not p.date]
        grouped[section] = [*dated, *undated]
    return grouped
