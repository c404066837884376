"""Shared fixtures: a book tree and fake compiler/cleanup executables."""

import stat
from pathlib import Path

import pytest
from loguru import logger

from coverbuild.contexts.rendering.pipeline import BuildSettings

FAKE_LATEX = """#!/bin/sh
# Fake LaTeX compiler: records each call and writes <job>.pdf
for arg in "$@"; do doc="$arg"; done
job="${doc%.tex}"
echo "$job" >> invocations.txt
calls=$(wc -l < invocations.txt)
if [ "$calls" -eq "${FAKE_LATEX_FAIL_CALL:-0}" ]; then
    echo "! Emergency stop."
    exit 3
fi
echo "This is fake TeX, compiling $doc"
echo "fake TeX warning" >&2
if [ -z "$FAKE_LATEX_NO_PDF" ]; then
    echo "%PDF-1.4 fake $job" > "$job.pdf"
fi
exit 0
"""

FAKE_CLEAN = """#!/bin/sh
# Fake cleanup utility
echo "cleaning intermediates"
echo "clean" >> invocations.txt
exit "${FAKE_CLEAN_STATUS:-0}"
"""

PARAMETERS = r"""% Book parameters
\def\TotalPageCount{250}
\newcommand{\PaperWidth}{6in}
\PaperHeight{9in}
"""


def _write_executable(path: Path, content: str) -> Path:
    path.write_text(content)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture(autouse=True)
def silence_logger():
    """Drop loguru sinks so console sinks from earlier tests never outlive their streams."""
    logger.remove()
    yield
    logger.remove()


@pytest.fixture
def fake_tools(tmp_path):
    """Fake compiler and cleanup executables in a bin directory."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    latex = _write_executable(bin_dir / "fake-latex", FAKE_LATEX)
    clean = _write_executable(bin_dir / "fake-clean", FAKE_CLEAN)
    return {"latex": str(latex), "clean": str(clean)}


@pytest.fixture
def book(tmp_path):
    """Book root with a parameters file and the cover sources."""
    root = tmp_path / "book"
    cover = root / "cover"
    cover.mkdir(parents=True)
    (root / "BookParameters.tex").write_text(PARAMETERS)
    for name in ["FrontCover", "BackCover", "SpineCover", "Cover"]:
        (cover / f"{name}.tex").write_text(f"% {name}\n")
    return root


@pytest.fixture
def settings(book, fake_tools):
    """BuildSettings pointing at the fake tools."""
    return BuildSettings(
        root=book,
        compiler=fake_tools["latex"],
        cleanup_command=[fake_tools["clean"]],
    )


@pytest.fixture
def invocations(book):
    """Read back the calls the fake tools recorded."""

    def _read():
        path = book / "cover" / "invocations.txt"
        if not path.exists():
            return []
        return path.read_text().split()

    return _read
