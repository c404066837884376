"""
Book Parameter Reader

Reads build parameters such as page count and paper size out of the book's LaTeX
parameters file. A parameter is written as a control word followed by a braced value:

    \\TotalPageCount{250}
    \\def\\PaperWidth{6in}
    \\newcommand{\\PaperHeight}{9in}

Values may contain nested braces. Text after an unescaped % is ignored. A missing
parameter is never an error: readers return an empty string and callers display it blank.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from coverbuild.contexts.rendering.logger import _log_debug, _log_warning
from coverbuild.utils.text_processing import extract_balanced_delimiters, strip_latex_comments

# Parameter names reported before a build
TOTAL_PAGE_COUNT = "TotalPageCount"
PAPER_WIDTH = "PaperWidth"
PAPER_HEIGHT = "PaperHeight"

# Control words are letters (and @ inside packages)
PARAMETER_NAME = re.compile(r"^[A-Za-z@]+$")


def _parameter_pattern(name: str) -> re.Pattern:
    r"""
    Build the pattern locating the opening brace of a parameter's value.

    Matches \Name{ and the \newcommand{\Name}{ family. The negative lookahead keeps
    \Name from matching inside a longer control word like \NameExtra.
    """
    escaped = re.escape(name)
    return re.compile(
        rf"(?:\\(?:newcommand|renewcommand|providecommand)\*?\s*\{{\s*\\{escaped}\s*\}}"
        rf"|\\{escaped}(?![A-Za-z@]))\s*\{{"
    )


def find_parameter(text: str, name: str) -> Optional[str]:
    """
    Find the value of a named parameter in LaTeX source.

    Args:
        text: LaTeX source to search
        name: Control word name without the leading backslash (e.g., "TotalPageCount")

    Returns:
        The first value found, stripped of surrounding whitespace, or None if absent

    Raises:
        ValueError: If name is not a valid control word

    Example:
        >>> find_parameter("\\TotalPageCount{250}", "TotalPageCount")
        '250'
    """
    if not PARAMETER_NAME.match(name):
        raise ValueError(f"Invalid parameter name: {name!r}")

    source = strip_latex_comments(text)
    match = _parameter_pattern(name).search(source)
    if match is None:
        return None

    try:
        value, _ = extract_balanced_delimiters(source, match.end())
    except ValueError:
        _log_warning(f"Unbalanced braces in value of \\{name}; treating it as missing")
        return None

    return value.strip()


def read_parameter(path: Path, name: str, trial: bool = False) -> str:
    """
    Read a named parameter from a LaTeX parameters file.

    Args:
        path: Parameters file (e.g., BookParameters.tex)
        name: Parameter name without the leading backslash
        trial: Trial mode skips reading entirely and returns an empty value

    Returns:
        The parameter value, or "" when absent or in trial mode
    """
    if trial:
        return ""

    text = Path(path).read_text(encoding="utf-8", errors="replace")
    value = find_parameter(text, name)
    if value is None:
        _log_debug(f"Parameter \\{name} not found in {path}")
        return ""
    return value


@dataclass
class BookParameters:
    """
    Parameters reported before the cover is built.

    Attributes:
        total_page_count: Interior page count (drives spine width)
        paper_width: Trim width of the book
        paper_height: Trim height of the book
    """

    total_page_count: str = ""
    paper_width: str = ""
    paper_height: str = ""

    def summary(self) -> str:
        """One-line human readable report; missing values show blank."""
        return (
            f"Book has {self.total_page_count} pages, "
            f"paper size {self.paper_width} x {self.paper_height}"
        )


def read_book_parameters(path: Path, trial: bool = False) -> BookParameters:
    """Read the page count and paper size from the parameters file."""
    return BookParameters(
        total_page_count=read_parameter(path, TOTAL_PAGE_COUNT, trial=trial),
        paper_width=read_parameter(path, PAPER_WIDTH, trial=trial),
        paper_height=read_parameter(path, PAPER_HEIGHT, trial=trial),
    )
