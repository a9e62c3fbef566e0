from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from mdblog import __version__
from mdblog.diagnostics import format_build_failures, format_error_with_hint
from mdblog.errors import (
    MdblogBuildError,
    MdblogConfigError,
    MdblogManifestError,
    MdblogPostError,
)

if TYPE_CHECKING:  # pragma: no cover
    from mdblog.config import MdblogConfig


EXIT_OK = 0
EXIT_CONFIG_OR_MANIFEST = 2
EXIT_RENDER_ERROR = 3


def _add_output_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print a single JSON result object on stdout.",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr.")


def _add_project_flags(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--root",
        type=str,
        default=None,
        help="Project root (defaults to searching upward from cwd for mdblog.toml).",
    )
    p.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to mdblog.toml (defaults to <root>/mdblog.toml).",
    )
    _add_output_flags(p)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mdblog")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    render_p = subparsers.add_parser("render", help="Convert one markdown file to HTML.")
    render_p.add_argument("file", type=str, help="Markdown file to convert ('-' for stdin).")
    render_p.add_argument(
        "-o", "--output", type=str, default=None, help="Write HTML here instead of stdout."
    )
    _add_output_flags(render_p)

    manifest_p = subparsers.add_parser("manifest", help="Regenerate the blog manifest.")
    _add_project_flags(manifest_p)

    build_p = subparsers.add_parser("build", help="Regenerate the manifest and the site.")
    _add_project_flags(build_p)
    build_p.add_argument(
        "--no-manifest",
        action="store_true",
        help="Build from the existing manifest file instead of rescanning the blog dir.",
    )

    watch_p = subparsers.add_parser("watch", help="Rebuild whenever posts change.")
    _add_project_flags(watch_p)
    watch_p.set_defaults(no_manifest=False)

    mcp_p = subparsers.add_parser("mcp", help="Model Context Protocol server.")
    mcp_sub = mcp_p.add_subparsers(dest="mcp_command", required=True)
    serve_p = mcp_sub.add_parser("serve", help="Serve mdblog tools over stdio.")
    serve_p.add_argument("--root", type=str, default=None, help="Project root to serve.")

    return parser


def parse_args(argv: list[str]) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


def _is_json_mode(args: argparse.Namespace) -> bool:
    return bool(getattr(args, "json_output", False))


def _configure_logging(args: argparse.Namespace) -> None:
    if not bool(getattr(args, "verbose", False)):
        return
    logging.basicConfig(
        level=logging.DEBUG,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _resolve_root_and_config(args: argparse.Namespace) -> tuple[Path | None, Path | None]:
    root = Path(args.root).resolve() if args.root else None
    config_path = Path(args.config).resolve() if args.config else None
    return root, config_path


def _load_config(args: argparse.Namespace) -> MdblogConfig:
    from mdblog.config import load_config

    root, config_path = _resolve_root_and_config(args)
    return load_config(root=root, config_path=config_path)


def _eprint(msg: str) -> None:
    print(msg, file=sys.stderr)


def _emit_json(payload: dict[str, object]) -> None:
    print(json.dumps(payload, indent=2))


def _report_error(command: str, e: BaseException, *, json_mode: bool) -> None:
    if json_mode:
        _emit_json({"command": command, "ok": False, "error": (str(e) or repr(e)).strip()})
        return
    _eprint(format_error_with_hint(e))


def cmd_render(args: argparse.Namespace) -> int:
    json_mode = _is_json_mode(args)
    try:
        from mdblog.converter import convert

        source = "<stdin>" if args.file == "-" else args.file
        try:
            if args.file == "-":
                markdown = sys.stdin.read()
            else:
                markdown = Path(args.file).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise MdblogPostError(f"Failed reading {source}: {e}") from e

        html = convert(markdown)

        if args.output:
            try:
                Path(args.output).write_text(html + "\n", encoding="utf-8")
            except OSError as e:
                raise MdblogBuildError(f"Failed writing {args.output}: {e}") from e

        if json_mode:
            _emit_json({"command": "render", "ok": True, "output": args.output, "html": html})
        elif not args.output:
            print(html)
        return EXIT_OK
    except (MdblogPostError, MdblogBuildError) as e:
        _report_error("render", e, json_mode=json_mode)
        return EXIT_RENDER_ERROR


def cmd_manifest(args: argparse.Namespace) -> int:
    json_mode = _is_json_mode(args)
    try:
        from mdblog.site import refresh_manifest

        cfg = _load_config(args)
        manifest = refresh_manifest(cfg)
        total = sum(len(files) for files in manifest.values())
        if json_mode:
            _emit_json(
                {
                    "command": "manifest",
                    "ok": True,
                    "path": str(cfg.manifest_path),
                    "sections": manifest,
                }
            )
        else:
            print(f"Wrote {cfg.manifest_path}: {len(manifest)} section(s), {total} file(s)")
        return EXIT_OK
    except (MdblogConfigError, MdblogManifestError) as e:
        _report_error("manifest", e, json_mode=json_mode)
        return EXIT_CONFIG_OR_MANIFEST


def cmd_build(args: argparse.Namespace) -> int:
    json_mode = _is_json_mode(args)
    try:
        from mdblog.site import build_site, refresh_manifest

        cfg = _load_config(args)
        manifest = None if bool(args.no_manifest) else refresh_manifest(cfg)
        report = build_site(cfg, manifest=manifest)

        if json_mode:
            _emit_json(
                {
                    "command": "build",
                    "ok": report.ok,
                    "output_dir": str(cfg.output_dir),
                    "pages": report.pages,
                    "failed": report.failed,
                }
            )
        else:
            if report.failed:
                _eprint(format_build_failures(report.failed).rstrip())
            print(f"Built {len(report.pages)} page(s) into {cfg.output_dir}")
        return EXIT_OK if report.ok else EXIT_RENDER_ERROR
    except (MdblogConfigError, MdblogManifestError) as e:
        _report_error("build", e, json_mode=json_mode)
        return EXIT_CONFIG_OR_MANIFEST
    except MdblogBuildError as e:
        _report_error("build", e, json_mode=json_mode)
        return EXIT_RENDER_ERROR


def cmd_watch(args: argparse.Namespace) -> int:
    json_mode = _is_json_mode(args)
    from mdblog import watcher

    try:
        watcher.check_watchfiles_available()
        cfg = _load_config(args)
    except (ImportError, MdblogConfigError) as e:
        _report_error("watch", e, json_mode=json_mode)
        return EXIT_CONFIG_OR_MANIFEST

    rc = cmd_build(args)
    if rc == EXIT_CONFIG_OR_MANIFEST:
        return rc

    def on_cycle_result(result: watcher.WatchCycleResult) -> None:
        if json_mode:
            _emit_json(watcher.format_watch_cycle_json(result))

    def on_error(exc: BaseException) -> None:
        _eprint(f"[watch] error: {type(exc).__name__}: {exc}")

    _eprint(f"[watch] watching {cfg.blog_dir} (Ctrl+C to stop)")
    try:
        asyncio.run(
            watcher.run_watch_loop(
                changes_iter=watcher.make_watchfiles_iter([cfg.blog_dir]),
                run_cycle=watcher.build_cycle_runner(args),
                on_event=_eprint,
                on_cycle_result=on_cycle_result,
                on_error=on_error,
                blog_dir=cfg.blog_dir,
            )
        )
    except KeyboardInterrupt:
        _eprint("[watch] stopped")
    return EXIT_OK


def cmd_mcp(args: argparse.Namespace) -> int:
    if args.mcp_command != "serve":
        return EXIT_CONFIG_OR_MANIFEST
    try:
        from mdblog.mcp_server import run_server

        run_server(root=args.root)
    except ImportError as e:
        _eprint(f"error: fastmcp is required for `mdblog mcp serve` ({e})")
        _eprint("hint: install it with: pip install mdblog[mcp]")
        return EXIT_CONFIG_OR_MANIFEST
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    try:
        args = parse_args(list(sys.argv[1:] if argv is None else argv))
    except SystemExit as e:
        # argparse uses SystemExit for --help/--version and parse errors.
        code = e.code
        return int(code) if isinstance(code, int) else EXIT_CONFIG_OR_MANIFEST

    _configure_logging(args)

    if args.command == "render":
        return cmd_render(args)
    if args.command == "manifest":
        return cmd_manifest(args)
    if args.command == "build":
        return cmd_build(args)
    if args.command == "watch":
        return cmd_watch(args)
    if args.command == "mcp":
        return cmd_mcp(args)

    return EXIT_CONFIG_OR_MANIFEST


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
