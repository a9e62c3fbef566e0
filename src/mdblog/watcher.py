"""Watch mode: regenerate the manifest and site when posts change."""

from __future__ import annotations

import time
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from mdblog.manifest import MARKDOWN_SUFFIX


@dataclass(frozen=True, slots=True)
class WatchEvent:
    """A batch of relevant file changes."""

    changed_paths: frozenset[Path]
    timestamp: float


@dataclass(frozen=True, slots=True)
class WatchCycleResult:
    """Result of a single watch rebuild cycle."""

    build_exit_code: int
    duration_s: float
    changed_paths: frozenset[Path]


def check_watchfiles_available() -> None:
    """Raise ImportError with a helpful message if watchfiles is not installed."""
    import importlib

    try:
        importlib.import_module("watchfiles")
    except ImportError:
        raise ImportError(
            "watchfiles is required for watch mode. Install it with: pip install mdblog[watch]"
        ) from None


def filter_post_files(changed_paths: frozenset[Path], *, blog_dir: Path) -> frozenset[Path]:
    """Keep markdown files under the blog directory."""
    return frozenset(
        p for p in changed_paths if p.suffix == MARKDOWN_SUFFIX and p.is_relative_to(blog_dir)
    )


async def run_watch_loop(
    *,
    changes_iter: AsyncIterator[set[tuple[Any, str]]],
    run_cycle: Callable[[WatchEvent], WatchCycleResult],
    on_event: Callable[[str], None],
    on_cycle_result: Callable[[WatchCycleResult], None],
    on_error: Callable[[BaseException], None],
    blog_dir: Path,
) -> None:
    """Consume change batches one at a time and rebuild for relevant ones."""
    async for raw_changes in changes_iter:
        paths = frozenset(Path(p) for _, p in raw_changes)
        relevant = filter_post_files(paths, blog_dir=blog_dir)
        if not relevant:
            continue

        event = WatchEvent(changed_paths=relevant, timestamp=time.monotonic())

        names = ", ".join(str(p) for p in sorted(relevant))
        on_event(f"[watch] change detected: {names}")
        on_event("[watch] rebuilding...")

        try:
            result = run_cycle(event)
        except Exception as exc:
            on_error(exc)
            continue

        on_event(f"[watch] done ({result.duration_s:.1f}s)")
        on_cycle_result(result)


def format_watch_cycle_json(result: WatchCycleResult) -> dict[str, object]:
    """Format a cycle result as a JSON-serializable dict."""
    return {
        "command": "watch",
        "ok": result.build_exit_code == 0,
        "build_exit_code": result.build_exit_code,
        "duration_s": round(result.duration_s, 2),
        "changed_paths": sorted(str(p) for p in result.changed_paths),
    }


def build_cycle_runner(args: Any) -> Callable[[WatchEvent], WatchCycleResult]:
    """Create a cycle runner that calls cmd_build() (manifest + site)."""
    from mdblog.cli import cmd_build

    def runner(event: WatchEvent) -> WatchCycleResult:
        t0 = time.monotonic()
        build_rc = cmd_build(args)
        return WatchCycleResult(
            build_exit_code=build_rc,
            duration_s=time.monotonic() - t0,
            changed_paths=event.changed_paths,
        )

    return runner


def make_watchfiles_iter(watch_paths: list[Path]) -> AsyncIterator[set[tuple[Any, str]]]:
    """Create an async iterator using watchfiles.awatch()."""
    import watchfiles  # type: ignore[import-untyped]

    return watchfiles.awatch(*watch_paths, debounce=200)
