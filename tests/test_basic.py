from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import mdblog

SRC = Path(__file__).resolve().parents[1] / "src"


def _run(*args: str, stdin: str | None = None) -> subprocess.CompletedProcess[str]:
    pythonpath = os.pathsep.join([str(SRC), os.environ.get("PYTHONPATH", "")])
    env = {**os.environ, "PYTHONPATH": pythonpath}
    return subprocess.run(
        [sys.executable, "-m", "mdblog", *args],
        check=False,
        text=True,
        input=stdin,
        capture_output=True,
        env=env,
    )


def test_public_api() -> None:
    assert mdblog.convert("# T") == "<h1>T</h1>"
    assert mdblog.render_inline("*x*") == "<em>x</em>"
    assert isinstance(mdblog.__version__, str)


def test_cli_version_flag() -> None:
    proc = _run("--version")
    assert proc.returncode == 0
    assert proc.stdout.startswith("mdblog ")


def test_module_invocation_renders_stdin() -> None:
    proc = _run("render", "-", stdin="- a\n- b\n")
    assert proc.returncode == 0
    assert proc.stdout == "<ul><li>a</li><li>b</li></ul>\n"
