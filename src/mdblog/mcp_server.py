"""MCP server for mdblog: exposes render/manifest/build/list_posts as MCP tools.

The server uses FastMCP (optional dependency) for the transport layer.
Core tool functions are plain Python and can be tested without FastMCP installed.
"""

from __future__ import annotations

import dataclasses
import io
import json
from contextlib import redirect_stdout
from pathlib import Path

import mdblog.cli
from mdblog.errors import MdblogError

# ---------------------------------------------------------------------------
# Core tool functions (no FastMCP dependency)
# ---------------------------------------------------------------------------


def _run_cli_json(argv: list[str]) -> str:
    """Run a CLI command with --json and return the JSON document it printed.

    If the command produces no stdout, or something that is not JSON, an error
    envelope is synthesised so callers always get valid JSON.
    """
    cmd_name = argv[0] if argv else "unknown"
    buf = io.StringIO()
    with redirect_stdout(buf):
        mdblog.cli.main(argv)
    output = buf.getvalue().strip()
    if not output:
        return json.dumps({"command": cmd_name, "ok": False, "error": "command produced no output"})

    try:
        json.loads(output)
    except (json.JSONDecodeError, ValueError):
        return json.dumps({"command": cmd_name, "ok": False, "error": output[:500]})
    return output


def tool_render(*, markdown: str) -> str:
    """Convert markdown text to HTML."""
    from mdblog.converter import convert

    return json.dumps({"command": "render", "ok": True, "html": convert(markdown)})


def tool_manifest(*, root: str | None = None) -> str:
    """Regenerate the blog manifest."""
    argv = ["manifest", "--json"]
    if root:
        argv += ["--root", root]
    return _run_cli_json(argv)


def tool_build(*, root: str | None = None, no_manifest: bool = False) -> str:
    """Regenerate the manifest and build the site."""
    argv = ["build", "--json"]
    if root:
        argv += ["--root", root]
    if no_manifest:
        argv.append("--no-manifest")
    return _run_cli_json(argv)


def tool_list_posts(*, root: str | None = None) -> str:
    """List posts grouped by section, newest first, from a fresh directory scan."""
    try:
        from mdblog.config import load_config
        from mdblog.manifest import generate_manifest
        from mdblog.posts import collect_posts, file_reader, group_by_section

        cfg = load_config(root=Path(root).resolve() if root else None)
        manifest = generate_manifest(cfg.blog_dir)
        posts = collect_posts(manifest, file_reader(cfg.blog_dir))
        sections = {
            section: [dataclasses.asdict(p) for p in items]
            for section, items in group_by_section(posts).items()
        }
        return json.dumps({"command": "list_posts", "ok": True, "sections": sections}, indent=2)
    except MdblogError as e:
        return json.dumps({"command": "list_posts", "ok": False, "error": str(e)})


# ---------------------------------------------------------------------------
# FastMCP server factory
# ---------------------------------------------------------------------------


def create_mcp_server():
    """Create and return a FastMCP server with mdblog tools registered.

    Raises ImportError if fastmcp is not installed.
    """
    from fastmcp import FastMCP

    mcp = FastMCP("mdblog", instructions="Markdown blog rendering and static site builds")

    @mcp.tool()
    def mdblog_render(markdown: str) -> str:
        """Convert markdown text to HTML.

        Supports headers (#, ##, ###), paragraphs, - and 1. lists, fenced code
        blocks, blockquotes, horizontal rules, bold, italic, code spans and links.
        Returns JSON with an `html` field.
        """
        return tool_render(markdown=markdown)

    @mcp.tool()
    def mdblog_manifest(root: str | None = None) -> str:
        """Rescan the blog directory and rewrite the manifest file.

        Returns JSON with the section -> filenames mapping.
        """
        return tool_manifest(root=root)

    @mcp.tool()
    def mdblog_build(root: str | None = None, no_manifest: bool = False) -> str:
        """Build the static site (index + one page per post).

        Returns JSON with written pages and any posts that failed to load.
        """
        return tool_build(root=root, no_manifest=no_manifest)

    @mcp.tool()
    def mdblog_list_posts(root: str | None = None) -> str:
        """List posts with title, date and page URL, grouped by section."""
        return tool_list_posts(root=root)

    return mcp


def run_server(*, root: str | None = None) -> None:
    """Entry point: create and run the MCP server (stdio transport).

    If *root* is provided, changes the working directory to that path so
    that all tools resolve relative to the given project root.
    """
    import os

    if root:
        os.chdir(Path(root).resolve())
    mcp = create_mcp_server()
    mcp.run()
