"""Text processing helpers for LaTeX sources."""

import re
from typing import Tuple

# % preceded by an even run of backslashes (\\ is a line break, \% a literal) up to end of line
LATEX_COMMENT = re.compile(r"(?<!\\)((?:\\\\)*)%.*$", re.MULTILINE)


def extract_balanced_delimiters(
    text: str,
    start_pos: int,
    open_char: str = '{',
    close_char: str = '}',
    escape_char: str = '\\'
) -> Tuple[str, int]:
    """
    Extract content between balanced delimiters, handling escaped characters.

    Assumes start_pos is just AFTER an opening delimiter. Counts nested delimiters
    to find the matching closing delimiter, skipping escaped characters.

    Args:
        text: Text containing delimited content
        start_pos: Position just after the opening delimiter
        open_char: Opening delimiter character (default: '{')
        close_char: Closing delimiter character (default: '}')
        escape_char: Character used for escaping (default: '\\')

    Returns:
        (content, end_pos) where:
        - content: Text between the delimiters (excluding delimiters themselves)
        - end_pos: Position after the closing delimiter

    Raises:
        ValueError: If delimiters are unmatched

    Example:
        >>> text = "\\PaperWidth{6in {approx}} rest"
        >>> extract_balanced_delimiters(text, 12)
        ('6in {approx}', 25)
    """
    depth = 1  # Already inside the opening delimiter
    pos = start_pos

    while pos < len(text) and depth > 0:
        if text[pos] == escape_char:
            pos += 2
            continue
        elif text[pos] == open_char:
            depth += 1
        elif text[pos] == close_char:
            depth -= 1
        pos += 1

    if depth != 0:
        raise ValueError(
            f"Unmatched '{open_char}' starting at position {start_pos - 1}"
        )

    return text[start_pos:pos - 1], pos


def strip_latex_comments(text: str) -> str:
    """Remove LaTeX comments (unescaped % to end of line), keeping line structure."""
    return LATEX_COMMENT.sub(r"\1", text)
