"""
Rendering context logger.

Provides logging interface for the cover build with automatic [cover] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

from loguru import logger

from coverbuild.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[cover]"


def setup_rendering_logger(
    quiet: bool = False, verbose: bool = False, compiler: str = None
) -> str:
    """
    Setup logger for a cover build session.

    Args:
        quiet: Suppress informational messages
        verbose: Show debug messages
        compiler: LaTeX compiler recorded in the provenance header

    Returns:
        The console level that was configured
    """
    return _setup_logger(
        quiet=quiet,
        verbose=verbose,
        extra_provenance={"LaTeX compiler": compiler} if compiler else None,
    )


# Wrapper functions with automatic [cover] prefix


def _log_info(message: str) -> None:
    """Log info message with [cover] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [cover] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [cover] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [cover] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [cover] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level step logging helpers


def log_step_start(step, log_path=None) -> None:
    """Log start of a pipeline step."""
    _log_info(step.description or f"Running {step.tool_name}")
    if log_path is not None:
        _log_debug(f"  Log: {log_path}")


def log_step_result(step, returncode: int, elapsed_time: float) -> None:
    """
    Log the outcome of a step that actually ran.

    Strict failures are not logged here; they are raised and reported by the caller.
    """
    if returncode == 0:
        _log_debug(f"  {step.tool_name} finished ({elapsed_time:.2f}s)")
    elif not step.is_strict:
        _log_warning(
            f"{step.tool_name} exited with status {returncode}; continuing ({elapsed_time:.2f}s)"
        )
