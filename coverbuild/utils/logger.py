"""
Generic logger setup utilities.

Provides reusable loguru configuration with provenance tracking.
Context-specific wrappers should be defined in contexts/{context}/logger.py.
"""

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

# Default level colors for console output
LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}


def console_level(quiet: bool = False, verbose: bool = False) -> str:
    """Pick the console sink level. Quiet wins over verbose."""
    if quiet:
        return "WARNING"
    if verbose:
        return "DEBUG"
    return "INFO"


def setup_logger(
    quiet: bool = False,
    verbose: bool = False,
    extra_provenance: dict = None,
    level_colors: Optional[dict] = None,
) -> str:
    """
    Configure loguru for a build session.

    Replaces the default sink with a single colorized console sink. No session log
    file is written: the per-step tool logs are the only files a build leaves behind.

    Args:
        quiet: Suppress informational messages (warnings and errors still shown)
        verbose: Show debug messages, including the provenance header
        extra_provenance: Additional key-value pairs for provenance header
        level_colors: Override default level colors (e.g., {"INFO": "<cyan>"})

    Returns:
        The console level that was configured

    Example:
        from coverbuild.utils.logger import setup_logger

        setup_logger(verbose=True, extra_provenance={"LaTeX compiler": "pdflatex"})
    """
    logger.remove()

    colors = {**LEVEL_COLORS, **(level_colors or {})}
    for level_name, color in colors.items():
        logger.level(level_name, color=color)

    level = console_level(quiet=quiet, verbose=verbose)
    logger.add(
        sys.stderr,
        format="<level>{level: <7}</level> | <level>{message}</level>",
        level=level,
        colorize=True,
    )

    log_provenance(extra_provenance)

    return level


def log_provenance(extra_context: dict = None) -> None:
    """
    Log execution provenance at debug level.

    Logs standard context (script, command, working directory, Python version)
    plus any additional context provided.
    """
    logger.debug("=" * 60)
    logger.debug(f"Script: {sys.argv[0]}")
    logger.debug(f"Command: {' '.join(sys.argv)}")
    logger.debug(f"Working directory: {Path.cwd()}")
    logger.debug(f"Python: {sys.version.split()[0]}")

    if extra_context:
        for key, value in extra_context.items():
            logger.debug(f"{key}: {value}")

    logger.debug("=" * 60)
