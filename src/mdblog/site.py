"""Static site rendering: the index page and one page per post.

Missing or unreadable posts never abort a build. A post page whose source
cannot be read gets an inline error block instead of content, and the index
simply omits it. Every build also writes the shared stylesheet.
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from mdblog.config import MdblogConfig, SiteConfig
from mdblog.converter import convert
from mdblog.errors import MdblogBuildError, MdblogPostError
from mdblog.manifest import Manifest, generate_manifest, load_manifest, write_manifest
from mdblog.posts import (
    PostSummary,
    extract_title,
    file_reader,
    group_by_section,
    iter_post_sources,
    post_url,
    section_label,
    summarize,
)

logger = logging.getLogger("mdblog.site")

INDEX_PAGE = "index.html"
STYLESHEET = "styles.css"

# Dark by default; `data-theme="light"` on <html> switches the palette.
STYLESHEET_CSS = """\
:root {
  --bg: #1a1a1a;
  --fg: #e0e0e0;
  --muted: #9a9a9a;
  --accent: #6cb6ff;
  --code-bg: #2a2a2a;
  --border: #333333;
  --error: #ff7b72;
}

[data-theme="light"] {
  --bg: #ffffff;
  --fg: #1f2328;
  --muted: #656d76;
  --accent: #0969da;
  --code-bg: #f6f8fa;
  --border: #d0d7de;
  --error: #cf222e;
}

body {
  margin: 0 auto;
  max-width: 48rem;
  padding: 1rem;
  background: var(--bg);
  color: var(--fg);
  font-family: system-ui, sans-serif;
  line-height: 1.6;
}

a {
  color: var(--accent);
}

header {
  border-bottom: 1px solid var(--border);
  padding-bottom: 0.5rem;
}

pre,
code {
  background: var(--code-bg);
  font-family: ui-monospace, monospace;
}

pre {
  overflow-x: auto;
  padding: 0.75rem;
}

blockquote {
  border-left: 3px solid var(--border);
  color: var(--muted);
  margin-left: 0;
  padding-left: 1rem;
}

.post-date,
.breadcrumb {
  color: var(--muted);
}

.error h2 {
  color: var(--error);
}
"""


@dataclass(slots=True)
class BuildReport:
    pages: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def _error_block(heading: str, *messages: str) -> str:
    paras = "".join(f"<p>{html.escape(m)}</p>" for m in messages)
    return f'<div class="error"><h2>{html.escape(heading)}</h2>{paras}</div>'


def _page(*, title: str, body: str, site: SiteConfig, root_prefix: str = "") -> str:
    theme_attr = ' data-theme="light"' if site.theme == "light" else ""
    home = f'<a href="{root_prefix}{INDEX_PAGE}">{html.escape(site.title)}</a>'
    return "\n".join(
        [
            "<!DOCTYPE html>",
            f'<html lang="en"{theme_attr}>',
            "<head>",
            '<meta charset="utf-8">',
            f"<title>{html.escape(title)}</title>",
            f'<link rel="stylesheet" href="{root_prefix}{STYLESHEET}">',
            "</head>",
            "<body>",
            f"<header>{home}</header>",
            f"<main>{body}</main>",
            "</body>",
            "</html>",
            "",
        ]
    )


def _root_prefix(section: str) -> str:
    return "../" * len(PurePosixPath(section).parts)


def _breadcrumb(section: str) -> str:
    return (
        f'<nav class="breadcrumb"><a href="{_root_prefix(section)}{INDEX_PAGE}'
        f'#{html.escape(section)}">{html.escape(section_label(section))}</a></nav>'
    )


def render_post_error_page(section: str, error: MdblogPostError, site: SiteConfig) -> str:
    """Page served in place of a post whose source could not be read."""

    body = _error_block(
        "Error Loading Post",
        "Could not load the blog post. The file might not exist.",
        f"Error: {error}",
    )
    return _page(
        title=site.title,
        body=_breadcrumb(section) + body,
        site=site,
        root_prefix=_root_prefix(section),
    )


def render_post_page(section: str, markdown: str, site: SiteConfig) -> str:
    """Render the full page for one post from its markdown source."""

    title = f"{extract_title(markdown)} - {site.title}"
    body = f'{_breadcrumb(section)}<article id="post-content">{convert(markdown)}</article>'
    return _page(title=title, body=body, site=site, root_prefix=_root_prefix(section))


def _render_post_item(post: PostSummary) -> str:
    link = f'<a href="{html.escape(post.url)}">{html.escape(post.title)}</a>'
    date = f'<p class="post-date">{post.date}</p>' if post.date else ""
    return f'<li class="post-item"><h3 class="post-title">{link}</h3>{date}</li>'


def render_index_page(posts: list[PostSummary], site: SiteConfig) -> str:
    if not posts:
        body = (
            '<div class="empty-state"><h2>No posts yet</h2>'
            "<p>Add markdown files to the blog folders to get started.</p></div>"
        )
        return _page(title=site.title, body=body, site=site)

    sections: list[str] = []
    for section, items in group_by_section(posts).items():
        rendered = "".join(_render_post_item(p) for p in items)
        sections.append(
            f'<section class="section" id="{html.escape(section)}">'
            f'<h2 class="section-title">{html.escape(section_label(section))}</h2>'
            f'<ul class="post-list">{rendered}</ul></section>'
        )
    return _page(title=site.title, body="\n".join(sections), site=site)


def _write(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise MdblogBuildError(f"Failed writing page: {path}") from e


def refresh_manifest(cfg: MdblogConfig) -> Manifest:
    """Regenerate the manifest from the blog directory and persist it."""

    manifest = generate_manifest(cfg.blog_dir)
    write_manifest(manifest, cfg.manifest_path)
    logger.info("Wrote manifest %s (%d section(s))", cfg.manifest_path, len(manifest))
    return manifest


def build_site(cfg: MdblogConfig, *, manifest: Manifest | None = None) -> BuildReport:
    """Render the index, the stylesheet and every post page into `cfg.output_dir`.

    When `manifest` is None the persisted manifest file is used. Posts are read
    one at a time in manifest order. A post that cannot be read still gets a
    page carrying the inline error, and is listed in `BuildReport.failed`.
    """

    if manifest is None:
        manifest = load_manifest(cfg.manifest_path)

    report = BuildReport()
    posts: list[PostSummary] = []
    out_dir = cfg.output_dir

    def write_error_page(section: str, filename: str, error: MdblogPostError) -> None:
        rel = post_url(section, filename)
        report.failed[rel] = str(error)
        _write(out_dir / rel, render_post_error_page(section, error, cfg.site))

    sources = iter_post_sources(manifest, file_reader(cfg.blog_dir), on_error=write_error_page)
    for section, filename, markdown in sources:
        rel = post_url(section, filename)
        posts.append(summarize(section, filename, markdown))
        _write(out_dir / rel, render_post_page(section, markdown, cfg.site))
        logger.debug("Rendered %s", rel)
        report.pages.append(rel)

    _write(out_dir / INDEX_PAGE, render_index_page(posts, cfg.site))
    report.pages.append(INDEX_PAGE)
    _write(out_dir / STYLESHEET, STYLESHEET_CSS)

    logger.info("Built %d page(s) into %s", len(report.pages), out_dir)
    return report
