"""Error formatting and actionable hints for mdblog CLI output.

Only depends on the error hierarchy so the CLI can import it eagerly.
"""

from __future__ import annotations

from mdblog.errors import (
    MdblogBuildError,
    MdblogConfigError,
    MdblogManifestError,
    MdblogPostError,
)


def format_build_failures(failed: dict[str, str]) -> str:
    """Format pages built from unreadable posts into a stderr summary."""
    if not failed:
        return ""
    lines = [f"Failed to load {len(failed)} post(s):"]
    for page in sorted(failed):
        lines.append(f"  {page}: {failed[page]}")
    return "\n".join(lines) + "\n"


def format_hint(exc: BaseException) -> str | None:
    """Return an actionable hint for a known error, or None."""
    msg = str(exc)

    if isinstance(exc, MdblogConfigError):
        if "mdblog.toml" in msg and "find" in msg.lower():
            return "create an mdblog.toml containing `version = 1` in your project root"
        if "site.theme" in msg:
            return 'set site.theme to "dark" or "light"'
        return None

    if isinstance(exc, MdblogManifestError):
        if "Missing manifest" in msg:
            return "run `mdblog manifest` to generate it"
        if "Blog directory" in msg:
            return "check paths.blog_dir in mdblog.toml"
        return None

    if isinstance(exc, MdblogPostError):
        return "regenerate the manifest with `mdblog manifest` after moving or deleting posts"

    if isinstance(exc, MdblogBuildError):
        return "check that paths.output_dir is writable"

    return None


def format_error_with_hint(exc: BaseException) -> str:
    """Format error message + optional hint for stderr output."""
    msg = (str(exc) or repr(exc)).strip()
    result = f"error: {msg}"
    hint = format_hint(exc)
    if hint:
        result += f"\nhint: {hint}"
    return result
