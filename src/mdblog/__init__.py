from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from mdblog.converter import convert, render_inline


def _package_version() -> str:
    try:
        return version("mdblog")
    except PackageNotFoundError:
        # Running from a source checkout, or otherwise not installed.
        return "0.0.0"


__version__ = _package_version()

__all__ = ["__version__", "convert", "render_inline"]
